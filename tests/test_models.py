"""Tests for the company, market and scoring models."""
import pytest
from pydantic import ValidationError

from bd_scoring.models import (
    RUNWAY_UNBOUNDED,
    BasicInfo,
    ClinicalTrial,
    DevelopmentStage,
    Financials,
    InvestmentRecommendation,
    Pillar,
    PillarScore,
    PillarScores,
    RiskLevel,
    ScoringConfig,
    ScoringFactor,
    TrialStatus,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    WeightConfig,
)

from tests.factories import make_company


class TestBasicInfo:
    """Tests for BasicInfo."""

    def test_ticker_uppercased(self):
        info = BasicInfo(name="Acme Bio", ticker="acme", stage=DevelopmentStage.PHASE1)
        assert info.ticker == "ACME"

    def test_empty_ticker_becomes_none(self):
        info = BasicInfo(name="Acme Bio", ticker="", stage=DevelopmentStage.PHASE1)
        assert info.ticker is None

    def test_ticker_too_long(self):
        with pytest.raises(ValidationError):
            BasicInfo(name="Acme Bio", ticker="A" * 11, stage=DevelopmentStage.PHASE1)

    def test_frozen(self):
        info = BasicInfo(name="Acme Bio", stage=DevelopmentStage.PHASE1)
        with pytest.raises(ValidationError):
            info.name = "Other"


class TestFinancials:
    """Runway derivation."""

    def test_runway_truncates(self):
        assert Financials(cash_position=100.0, burn_rate=7.0).runway == 14

    def test_runway_unbounded_without_burn(self):
        assert Financials(cash_position=100.0, burn_rate=0.0).runway == RUNWAY_UNBOUNDED

    def test_runway_unbounded_with_negative_burn(self):
        assert Financials(cash_position=100.0, burn_rate=-2.0).runway == RUNWAY_UNBOUNDED

    def test_runway_saturates_on_tiny_burn(self):
        assert Financials(cash_position=471.0, burn_rate=2.6e-306).runway == RUNWAY_UNBOUNDED
        assert Financials(cash_position=1.0, burn_rate=1e-9).runway == RUNWAY_UNBOUNDED


class TestCompanyData:
    def test_generated_id_is_unique(self):
        assert make_company().id != make_company().id

    def test_lead_program_is_first(self):
        company = make_company()
        assert company.pipeline.lead_program is company.pipeline.programs[0]

    def test_no_lead_program_without_programs(self):
        assert make_company(programs=[]).pipeline.lead_program is None

    def test_areas_lower(self):
        company = make_company(therapeutic_areas=["Oncology", "Rare Disease"])
        assert company.areas_lower == ["oncology", "rare disease"]


class TestWeightConfig:
    """Tests for WeightConfig."""

    def test_defaults_sum_to_one(self):
        assert WeightConfig().total == pytest.approx(1.0)

    def test_uniform(self):
        weights = WeightConfig.uniform()
        assert all(weights.get(p) == pytest.approx(1 / 6) for p in Pillar)

    def test_from_dict_accepts_enum_and_string_keys(self):
        weights = WeightConfig.from_dict({
            Pillar.ASSET_QUALITY: 0.5,
            "market_outlook": 0.1,
            "capital_intensity": 0.1,
            "strategic_fit": 0.1,
            "financial_readiness": 0.1,
            "regulatory_risk": 0.1,
        })
        assert weights.asset_quality == 0.5
        assert weights.market_outlook == 0.1

    def test_from_dict_missing_pillar(self):
        with pytest.raises(ValueError, match="regulatory_risk"):
            WeightConfig.from_dict({p.value: 0.2 for p in list(Pillar)[:5]})

    def test_from_dict_round_trip(self):
        weights = WeightConfig(asset_quality=0.4, regulatory_risk=0.0)
        assert WeightConfig.from_dict(weights.to_dict()) == weights

    def test_bounds_not_enforced(self):
        weights = WeightConfig(asset_quality=-0.2, market_outlook=1.5)
        assert weights.asset_quality == -0.2


class TestPillarScores:
    def test_items_in_canonical_order(self):
        score = PillarScore(raw_score=3.0, confidence=0.8)
        scores = PillarScores.from_mapping({p: score for p in reversed(list(Pillar))})
        assert [p for p, _ in scores.items()] == list(Pillar)

    def test_from_mapping_requires_every_pillar(self):
        score = PillarScore(raw_score=3.0, confidence=0.8)
        with pytest.raises(KeyError):
            PillarScores.from_mapping({Pillar.ASSET_QUALITY: score})

    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            PillarScore(raw_score=5.5, confidence=0.8)
        with pytest.raises(ValidationError):
            PillarScore(raw_score=3.0, confidence=1.2)

    def test_factor_contribution(self):
        factor = ScoringFactor(name="Market Size", weight=0.3, score=4.0)
        assert factor.contribution == pytest.approx(1.2)


class TestValidationResult:
    def test_critical_errors_filtered(self):
        result = ValidationResult(
            is_valid=False,
            errors=[
                ValidationIssue(field="a", message="bad", severity=ValidationSeverity.CRITICAL),
                ValidationIssue(field="b", message="meh"),
            ],
        )
        assert [e.field for e in result.critical_errors] == ["a"]
        assert result.has_critical_errors

    def test_no_critical_errors(self):
        result = ValidationResult(is_valid=False, errors=[ValidationIssue(field="b", message="meh")])
        assert not result.has_critical_errors


class TestEnums:
    def test_display_names(self):
        assert Pillar.FINANCIAL_READINESS.display_name == "Financial Readiness"

    def test_recommendation_labels(self):
        assert InvestmentRecommendation.STRONG_BUY.label == "Strong Buy"
        assert RiskLevel.VERY_HIGH.label == "Very High"

    def test_default_config(self):
        config = ScoringConfig.default()
        assert config.is_default
        assert config.weights == WeightConfig()


class TestClinicalTrial:
    def test_negative_patient_count_rejected(self):
        with pytest.raises(ValidationError):
            ClinicalTrial(phase=DevelopmentStage.PHASE2, status=TrialStatus.ACTIVE, patient_count=-5)

    def test_malformed_date_rejected(self):
        with pytest.raises(ValidationError):
            ClinicalTrial(phase=DevelopmentStage.PHASE2, status=TrialStatus.ACTIVE, start_date="soon")
