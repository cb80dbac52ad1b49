"""Tests for WeightingEngine."""
import pytest

from bd_scoring.errors import ConfigurationError
from bd_scoring.models import Pillar, WeightConfig
from bd_scoring.scoring.weighting import DEFAULT_PROFILES, WeightingEngine

from tests.factories import make_pillar_scores

ALL_ZERO = WeightConfig(**{p.value: 0.0 for p in Pillar})
OVERWEIGHT = WeightConfig(**{p.value: 0.3 for p in Pillar})


class TestValidateWeights:
    engine = WeightingEngine()

    def test_default_weights_valid_without_warnings(self):
        result = self.engine.validate_weights(WeightConfig())
        assert result.is_valid
        assert result.warnings == []

    def test_negative_weight_critical(self):
        result = self.engine.validate_weights(WeightConfig(asset_quality=-0.1))
        assert result.has_critical_errors
        assert result.critical_errors[0].field == "asset_quality"
        assert result.critical_errors[0].message == "Weight cannot be negative"

    def test_weight_above_one_critical(self):
        result = self.engine.validate_weights(WeightConfig(market_outlook=1.2))
        assert [e.message for e in result.critical_errors] == ["Weight cannot exceed 1.0"]

    def test_all_zero_critical(self):
        result = self.engine.validate_weights(ALL_ZERO)
        assert any(e.field == "total" and e.message == "All weights cannot be zero" for e in result.errors)
        assert len(result.warnings) == len(Pillar)

    def test_sum_deviation_only_warns(self):
        result = self.engine.validate_weights(OVERWEIGHT)
        assert result.is_valid
        assert [w.message for w in result.warnings] == ["Weights sum to 1.800 instead of 1.0"]

    def test_deviation_within_tolerance(self):
        weights = WeightConfig(asset_quality=0.2505)
        assert self.engine.validate_weights(weights).warnings == []

    def test_custom_tolerance(self):
        engine = WeightingEngine(weight_sum_tolerance=0.5)
        assert engine.validate_weights(WeightConfig(asset_quality=0.5)).warnings == []


class TestApplyWeights:
    engine = WeightingEngine()

    def test_contributions(self):
        scores = make_pillar_scores(asset_quality=5.0)
        weighted = self.engine.apply_weights(scores, WeightConfig())
        assert weighted.asset_quality == pytest.approx(1.25)
        assert weighted.market_outlook == pytest.approx(0.6)
        assert weighted.total == pytest.approx(1.25 + 3.0 * 0.75)

    def test_unnormalized_weights_applied_as_given(self):
        weighted = self.engine.apply_weights(make_pillar_scores(raw_score=4.0), OVERWEIGHT)
        assert weighted.total == pytest.approx(4.0 * 1.8)

    def test_critical_weights_normalized(self):
        weights = WeightConfig(asset_quality=2.0, market_outlook=0.0, capital_intensity=0.0,
                               strategic_fit=0.0, financial_readiness=0.0, regulatory_risk=0.0)
        weighted = self.engine.apply_weights(make_pillar_scores(raw_score=3.0, asset_quality=5.0), weights)
        assert weighted.total == pytest.approx(5.0)

    def test_all_zero_becomes_uniform(self):
        weighted = self.engine.apply_weights(make_pillar_scores(raw_score=3.0), ALL_ZERO)
        assert weighted.total == pytest.approx(3.0)

    def test_with_recalculation_returns_validation(self):
        weighted, validation = self.engine.apply_weights_with_recalculation(
            make_pillar_scores(), OVERWEIGHT,
        )
        assert validation.warnings
        assert weighted.total == pytest.approx(3.0 * 1.8)


class TestNormalize:
    def test_normalize_sums_to_one(self):
        normalized = WeightingEngine.normalize_weights(OVERWEIGHT)
        assert normalized.total == pytest.approx(1.0)
        assert normalized.asset_quality == pytest.approx(1 / 6)

    def test_normalize_returns_new_instance(self):
        normalized = WeightingEngine.normalize_weights(OVERWEIGHT)
        assert normalized is not OVERWEIGHT
        assert OVERWEIGHT.asset_quality == 0.3


class TestProfiles:
    def test_default_profiles_listed(self):
        assert WeightingEngine().list_profiles() == sorted(DEFAULT_PROFILES)

    def test_save_normalizes(self):
        engine = WeightingEngine()
        saved = engine.save_profile("Heavy", OVERWEIGHT)
        assert saved.total == pytest.approx(1.0)
        assert engine.load_profile("Heavy") == saved
        assert "Heavy" in engine.list_profiles()

    def test_save_invalid_raises(self):
        with pytest.raises(ConfigurationError, match="Cannot save invalid weight profile"):
            WeightingEngine().save_profile("Broken", ALL_ZERO)

    def test_load_missing(self):
        assert WeightingEngine().load_profile("Nope") is None

    def test_delete(self):
        engine = WeightingEngine()
        assert engine.delete_profile("Aggressive")
        assert not engine.delete_profile("Aggressive")
        assert "Aggressive" not in engine.list_profiles()

    def test_profiles_are_per_engine(self):
        first, second = WeightingEngine(), WeightingEngine()
        first.delete_profile("Balanced")
        assert "Balanced" in second.list_profiles()


class TestWeightImpact:
    def test_impact_of_shifting_weight(self):
        engine = WeightingEngine()
        scores = make_pillar_scores(raw_score=2.0, asset_quality=5.0)
        shifted = WeightConfig(asset_quality=0.45, market_outlook=0.0)
        analysis = engine.calculate_weight_impact(scores, WeightConfig(), shifted)

        assert analysis.total_score_difference == pytest.approx(0.2 * 5.0 - 0.2 * 2.0)
        assert analysis.pillar_impacts["asset_quality"] == pytest.approx(1.0)
        assert analysis.pillar_impacts["market_outlook"] == pytest.approx(-0.4)
        assert set(analysis.significant_changes) == {"asset_quality", "market_outlook"}

    def test_identical_weights_no_change(self):
        engine = WeightingEngine()
        analysis = engine.calculate_weight_impact(make_pillar_scores(), WeightConfig(), WeightConfig())
        assert analysis.total_score_difference == 0.0
        assert analysis.percentage_change == 0.0
        assert analysis.significant_changes == {}
