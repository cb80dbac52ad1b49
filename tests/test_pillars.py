"""Tests for the six scoring pillars.

Covers:
  - Scenario scores for a late-stage company in a large, uncontested market
  - Critical validation failures raising InvalidDataError
  - Score and confidence bounds for every pillar
  - Pillar-specific warnings and explanation summaries
"""
from datetime import timedelta

import pytest

from bd_scoring.errors import CalculationError, InvalidDataError, MissingRequiredFieldError
from bd_scoring.models import (
    ClinicalTrial,
    DevelopmentStage,
    MarketContext,
    Pillar,
    ScoringFactor,
    TrialStatus,
    ValidationSeverity,
)
from bd_scoring.scoring.pillars import PILLAR_REGISTRY, ScoringPillar, build_pillars
from bd_scoring.scoring.pillars import base
from bd_scoring.scoring.pillars.asset_quality import AssetQualityPillar
from bd_scoring.scoring.pillars.financial_readiness import FinancialReadinessPillar
from bd_scoring.scoring.pillars.market_outlook import MarketOutlookPillar
from bd_scoring.scoring.pillars.regulatory_risk import RegulatoryRiskPillar

from tests.factories import TODAY, make_company, make_program, make_scenario_company, today

CONTEXT = MarketContext.default()


def factor(score, name):
    return next(f for f in score.factors if f.name == name)


# ── Registry ──────────────────────────────────────────────────────────────────

class TestRegistry:
    def test_registry_in_canonical_order(self):
        assert list(PILLAR_REGISTRY) == list(Pillar)

    def test_build_pillars_satisfy_protocol(self, pillars):
        assert all(isinstance(p, ScoringPillar) for p in pillars.values())

    def test_default_weights_sum_to_one(self, pillars):
        assert sum(p.info.default_weight for p in pillars.values()) == pytest.approx(1.0)

    def test_info_names_are_display_names(self, pillars):
        assert all(impl.info.name == p.display_name for p, impl in pillars.items())


# ── Bounds ────────────────────────────────────────────────────────────────────

class TestBounds:
    """Every pillar keeps raw score in [1, 5] and confidence in [0, 1]."""

    @pytest.mark.parametrize("pillar", list(Pillar))
    @pytest.mark.parametrize("data", [
        make_company(),
        make_scenario_company(),
        make_company(stage=DevelopmentStage.PRECLINICAL, programs=[make_program(stage=DevelopmentStage.PRECLINICAL)],
                     cash_position=5.0, burn_rate=4.0, addressable_market=0.05, growth_rate=-0.2,
                     funding_days_ago=None, approvals=[], clinical_trials=[]),
        make_company(stage=DevelopmentStage.MARKETED, cash_position=20000.0, burn_rate=150.0,
                     addressable_market=80.0, growth_rate=0.5),
        make_company(cash_position=471.0, burn_rate=2.6e-306),
    ])
    def test_score_bounds(self, pillar, data):
        score = build_pillars(today=today)[pillar].score(data, CONTEXT)
        assert 1.0 <= score.raw_score <= 5.0
        assert 0.0 <= score.confidence <= 1.0
        assert all(1.0 <= f.score <= 5.0 for f in score.factors)
        assert sum(f.weight for f in score.factors) == pytest.approx(1.0)


# ── Scenario ──────────────────────────────────────────────────────────────────

class TestLateStageScenario:
    """Phase 3, $12B market, no competitors, 24-month runway."""

    def test_market_size_and_competition_max_out(self, scenario_company):
        score = MarketOutlookPillar().score(scenario_company, CONTEXT)
        assert factor(score, "Market Size").score == 5.0
        assert factor(score, "Competitive Landscape").score == 5.0

    def test_financial_readiness_strong(self, scenario_company):
        score = FinancialReadinessPillar(today=today).score(scenario_company, CONTEXT)
        assert factor(score, "Funding Runway").score == 5.0
        assert score.raw_score >= 4.0

    def test_asset_quality_development_stage(self, scenario_company):
        score = AssetQualityPillar().score(scenario_company, CONTEXT)
        assert factor(score, "Development Stage").score == 4.0
        assert factor(score, "Indication Size").score == 5.0


# ── Asset Quality ─────────────────────────────────────────────────────────────

class TestAssetQuality:
    pillar = AssetQualityPillar()

    def test_empty_pipeline_is_critical(self):
        result = self.pillar.validate(make_company(programs=[]))
        assert not result.is_valid
        assert any(
            e.field == "pipeline.programs" and e.severity == ValidationSeverity.CRITICAL
            for e in result.errors
        )

    def test_empty_pipeline_raises(self):
        with pytest.raises(InvalidDataError):
            self.pillar.score(make_company(programs=[]), CONTEXT)

    def test_single_asset_warning(self, company):
        score = self.pillar.score(company, CONTEXT)
        assert "Single-asset pipeline concentrates development risk" in score.warnings

    def test_more_programs_raise_pipeline_strength(self):
        one = self.pillar.score(make_company(), CONTEXT)
        several = self.pillar.score(make_company(programs=[
            make_program(name=f"BDX-{i}", indication=f"Indication {i}") for i in range(4)
        ]), CONTEXT)
        assert factor(several, "Pipeline Strength").score > factor(one, "Pipeline Strength").score

    def test_missing_differentiators_warns(self):
        company = make_company(programs=[make_program(differentiators=[])])
        result = self.pillar.validate(company)
        assert any(w.field == "pipeline.lead_program.differentiators" for w in result.warnings)


# ── Market Outlook ────────────────────────────────────────────────────────────

class TestMarketOutlook:
    pillar = MarketOutlookPillar()

    def test_zero_market_raises(self):
        with pytest.raises(InvalidDataError, match="Addressable market size must be greater than zero"):
            self.pillar.score(make_company(addressable_market=0.0), CONTEXT)

    @pytest.mark.parametrize("size,expected", [
        (10.0, 5.0), (7.0, 4.0), (1.0, 3.0), (0.5, 2.0), (0.05, 1.0),
    ])
    def test_market_size_brackets(self, size, expected):
        score = self.pillar.score(make_company(addressable_market=size), CONTEXT)
        assert factor(score, "Market Size").score == expected

    def test_negative_growth_warning(self):
        score = self.pillar.score(make_company(growth_rate=-0.1), CONTEXT)
        assert "Declining market growth presents commercial headwinds" in score.warnings


# ── Financial Readiness ───────────────────────────────────────────────────────

class TestFinancialReadiness:
    pillar = FinancialReadinessPillar(today=today)

    def test_zero_cash_raises(self):
        with pytest.raises(InvalidDataError, match="Cash position must be greater than zero"):
            self.pillar.score(make_company(cash_position=0.0), CONTEXT)

    def test_missing_cash_names_field(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.pillar.score(make_company(cash_position=0.0), CONTEXT)
        assert exc_info.value.field == "financials.cash_position"

    def test_zero_burn_is_critical(self):
        result = self.pillar.validate(make_company(burn_rate=0.0))
        assert result.has_critical_errors

    def test_short_runway_critical_warning(self):
        score = self.pillar.score(make_company(cash_position=20.0, burn_rate=5.0), CONTEXT)
        assert "Critical: Less than 6 months runway remaining" in score.warnings
        assert factor(score, "Funding Runway").score == 1.0

    def test_medium_runway_warning(self):
        score = self.pillar.score(make_company(cash_position=90.0, burn_rate=10.0), CONTEXT)
        assert "Warning: Less than 12 months runway remaining" in score.warnings

    def test_stale_funding_warning(self):
        score = self.pillar.score(make_company(funding_days_ago=600), CONTEXT)
        assert "No recent funding activity (>18 months)" in score.warnings
        assert factor(score, "Data Freshness").score == 1.0

    def test_old_funding_validation_warning(self):
        result = self.pillar.validate(make_company(funding_days_ago=120))
        assert any(w.field == "financials.last_funding" for w in result.warnings)

    def test_fresh_funding(self):
        score = self.pillar.score(make_company(funding_days_ago=10), CONTEXT)
        assert factor(score, "Data Freshness").score == 5.0


# ── Regulatory Risk ───────────────────────────────────────────────────────────

class TestRegulatoryRisk:
    pillar = RegulatoryRiskPillar(today=today)

    def test_no_areas_raises(self):
        with pytest.raises(InvalidDataError):
            self.pillar.score(make_company(therapeutic_areas=[]), CONTEXT)

    def test_suspended_trial_warning(self):
        company = make_company(clinical_trials=[
            ClinicalTrial(
                name="HELIX-3",
                phase=DevelopmentStage.PHASE2,
                indication="NSCLC",
                status=TrialStatus.SUSPENDED,
                start_date=TODAY - timedelta(days=100),
                expected_completion=TODAY + timedelta(days=300),
                patient_count=80,
            ),
        ])
        score = self.pillar.score(company, CONTEXT)
        assert "Suspended clinical trials may indicate safety or efficacy concerns" in score.warnings

    def test_marketed_stage_warns(self):
        result = self.pillar.validate(make_company(stage=DevelopmentStage.MARKETED))
        assert any(w.field == "basic_info.stage" for w in result.warnings)

    def test_missing_trials_warns_for_clinical_stage(self):
        result = self.pillar.validate(make_company(clinical_trials=[]))
        assert any(w.field == "regulatory.clinical_trials" for w in result.warnings)

    def test_explain_summary_names_risk_level(self, company):
        explanation = self.pillar.explain(self.pillar.score(company, CONTEXT))
        assert explanation.summary.startswith("Regulatory Risk scored")
        assert explanation.summary.endswith("regulatory risk")

    @pytest.mark.parametrize("score,label", [
        (4.6, "Very Low Risk"), (3.6, "Low Risk"), (2.6, "Moderate Risk"),
        (1.6, "High Risk"), (1.0, "Very High Risk"),
    ])
    def test_risk_labels(self, score, label):
        assert RegulatoryRiskPillar.risk_label(score) == label


# ── Shared helpers ────────────────────────────────────────────────────────────

class TestBaseHelpers:
    def test_create_factor_clamps(self):
        f = base.create_factor("X", 1.4, 7.0, "")
        assert f.weight == 1.0
        assert f.score == 5.0

    def test_confidence_formula(self):
        assert base.calculate_confidence(1.0, 0.5, 0.8) == pytest.approx(0.4 + 0.15 + 0.24)

    def test_low_score_warnings(self):
        warnings = base.generate_warnings(score=1.5, confidence=0.2, completeness=0.4)
        assert warnings == [
            "Low confidence score due to insufficient data",
            "Significant data gaps may affect scoring accuracy",
            "Low score indicates significant concerns",
        ]

    @pytest.mark.parametrize("score,label", [
        (4.5, "Excellent"), (3.5, "Good"), (2.5, "Average"), (1.5, "Below Average"), (1.2, "Poor"),
    ])
    def test_score_label(self, score, label):
        assert base.score_label(score) == label

    def test_explanation_contributions(self, company):
        pillar = MarketOutlookPillar()
        score = pillar.score(company, CONTEXT)
        explanation = pillar.explain(score)
        assert explanation.summary.startswith("Market Outlook scored")
        assert [f.name for f in explanation.factors] == [f.name for f in score.factors]
        assert sum(f.contribution for f in explanation.factors) == pytest.approx(score.raw_score)

    def test_non_numeric_total_raises(self, company):
        bad = ScoringFactor.model_construct(name="Broken", weight=1.0, score=float("nan"), rationale="")
        with pytest.raises(CalculationError):
            base.build_pillar_score(MarketOutlookPillar.info, company, [bad], 1.0, 1.0, [], "")

    def test_unknown_field_counts_as_present(self, company):
        assert base.is_field_present("pipeline.unknown", company)
