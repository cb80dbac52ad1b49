"""Performance instrumentation for scoring operations.

Wraps callables, records duration and outcome, and raises alerts when an
operation exceeds the threshold for its type. Measurement never alters the
wrapped call: results pass through and exceptions are re-raised unchanged.
"""
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, TypeVar

from bd_scoring.config import Settings, get_settings

logger = logging.getLogger(__name__)
R = TypeVar("R")


@dataclass
class PerformanceMetric:
    name: str
    duration: float
    success: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None


@dataclass
class PerformanceAlert:
    operation_type: str
    name: str
    duration: float
    threshold: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def message(self) -> str:
        return (
            f"Performance threshold exceeded for {self.operation_type}: "
            f"{self.duration:.3f}s (threshold: {self.threshold:.3f}s)"
        )


class PerformanceMonitor:
    """Record timings for named operations.

    Parameters
    ----------
    settings:
        Supplies per-type thresholds and history sizes.
    clock:
        Duration clock in seconds (default ``time.perf_counter``).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        settings = settings or get_settings()
        self.thresholds = settings.performance_thresholds()
        self._clock = clock
        self._metrics: Deque[PerformanceMetric] = deque(maxlen=settings.metrics_history_size)
        self._alerts: Deque[PerformanceAlert] = deque(maxlen=settings.alert_history_size)

    @property
    def metrics(self) -> List[PerformanceMetric]:
        return list(self._metrics)

    @property
    def alerts(self) -> List[PerformanceAlert]:
        return list(self._alerts)

    def operation_type(self, name: str) -> Optional[str]:
        """Threshold key for ``name``: exact match or ``<type>_`` prefix."""
        for op_type in self.thresholds:
            if name == op_type or name.startswith(f"{op_type}_"):
                return op_type
        return None

    def measure(self, name: str, fn: Callable[[], R]) -> R:
        start = self._clock()
        try:
            result = fn()
        except Exception as e:
            self._record(name, self._clock() - start, error=e)
            raise
        self._record(name, self._clock() - start)
        return result

    async def measure_async(self, name: str, fn: Callable[[], Awaitable[R]]) -> R:
        start = self._clock()
        try:
            result = await fn()
        except Exception as e:
            self._record(name, self._clock() - start, error=e)
            raise
        self._record(name, self._clock() - start)
        return result

    def _record(self, name: str, duration: float, error: Optional[BaseException] = None) -> None:
        metric = PerformanceMetric(
            name=name,
            duration=duration,
            success=error is None,
            error=str(error) if error is not None else None,
        )
        self._metrics.append(metric)
        logger.debug(f"Completed operation: {name} in {duration:.3f}s (success={metric.success})")

        op_type = self.operation_type(name)
        if op_type is None:
            return
        threshold = self.thresholds[op_type]
        if duration > threshold:
            alert = PerformanceAlert(
                operation_type=op_type, name=name, duration=duration, threshold=threshold,
            )
            self._alerts.append(alert)
            logger.warning(alert.message)

    def summary(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation count, success rate and average / max duration."""
        grouped: Dict[str, List[PerformanceMetric]] = {}
        for metric in self._metrics:
            grouped.setdefault(metric.name, []).append(metric)
        return {
            name: {
                "count": len(items),
                "success_rate": sum(1 for m in items if m.success) / len(items),
                "average_duration": sum(m.duration for m in items) / len(items),
                "max_duration": max(m.duration for m in items),
            }
            for name, items in sorted(grouped.items())
        }

    def reset(self) -> None:
        self._metrics.clear()
        self._alerts.clear()
