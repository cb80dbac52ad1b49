"""Tests for PerformanceMonitor."""
import pytest

from bd_scoring.config import Settings
from bd_scoring.services.instrumentation import PerformanceMonitor

from tests.factories import FakeClock


class SteppingClock(FakeClock):
    """Advances by ``step`` seconds on every read."""

    def __init__(self, step: float):
        super().__init__(0.0)
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


class TestMeasure:
    def test_result_passes_through(self, settings):
        monitor = PerformanceMonitor(settings)
        assert monitor.measure("scoring", lambda: 42) == 42
        assert monitor.metrics[0].success

    def test_exception_reraised_and_recorded(self, settings):
        monitor = PerformanceMonitor(settings)

        def boom():
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            monitor.measure("scoring", boom)

        metric = monitor.metrics[0]
        assert not metric.success
        assert metric.error == "bad input"

    @pytest.mark.asyncio
    async def test_measure_async(self, settings):
        monitor = PerformanceMonitor(settings)

        async def work():
            return "done"

        assert await monitor.measure_async("pillar_asset_quality", work) == "done"
        assert monitor.metrics[0].name == "pillar_asset_quality"

    @pytest.mark.asyncio
    async def test_measure_async_reraises(self, settings):
        monitor = PerformanceMonitor(settings)

        async def fail():
            raise RuntimeError("pillar crashed")

        with pytest.raises(RuntimeError):
            await monitor.measure_async("scoring", fail)
        assert not monitor.metrics[0].success


class TestAlerts:
    def test_slow_operation_alerts(self, settings):
        monitor = PerformanceMonitor(settings, clock=SteppingClock(6.0))
        monitor.measure("scoring", lambda: None)

        assert len(monitor.alerts) == 1
        alert = monitor.alerts[0]
        assert alert.operation_type == "scoring"
        assert alert.duration == pytest.approx(6.0)
        assert "scoring" in alert.message

    def test_fast_operation_no_alert(self, settings):
        monitor = PerformanceMonitor(settings, clock=SteppingClock(0.5))
        monitor.measure("scoring", lambda: None)
        assert monitor.alerts == []

    def test_prefix_matches_operation_type(self, settings):
        monitor = PerformanceMonitor(settings)
        assert monitor.operation_type("pillar_market_outlook") == "pillar"
        assert monitor.operation_type("scoring") == "scoring"
        assert monitor.operation_type("scoringx") is None

    def test_untyped_operation_never_alerts(self, settings):
        monitor = PerformanceMonitor(settings, clock=SteppingClock(100.0))
        monitor.measure("misc", lambda: None)
        assert monitor.alerts == []


class TestHistory:
    def test_bounded_history(self):
        settings = Settings(_env_file=None, metrics_history_size=3, alert_history_size=2)
        monitor = PerformanceMonitor(settings, clock=SteppingClock(10.0))
        for i in range(5):
            monitor.measure(f"scoring_{i}", lambda: None)

        assert [m.name for m in monitor.metrics] == ["scoring_2", "scoring_3", "scoring_4"]
        assert len(monitor.alerts) == 2

    def test_summary(self, settings):
        monitor = PerformanceMonitor(settings, clock=SteppingClock(1.0))
        monitor.measure("scoring", lambda: None)
        with pytest.raises(KeyError):
            monitor.measure("scoring", lambda: {}["missing"])

        summary = monitor.summary()["scoring"]
        assert summary["count"] == 2
        assert summary["success_rate"] == 0.5
        assert summary["average_duration"] == pytest.approx(1.0)

    def test_reset(self, settings):
        monitor = PerformanceMonitor(settings)
        monitor.measure("scoring", lambda: None)
        monitor.reset()
        assert monitor.metrics == []
        assert monitor.summary() == {}
