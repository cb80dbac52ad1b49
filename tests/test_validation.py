"""Tests for CompanyDataValidator."""
from datetime import timedelta

import pytest

from bd_scoring.models import (
    BasicInfo,
    ClinicalTrial,
    CompanyData,
    Competitor,
    DevelopmentStage,
    Milestone,
    Program,
    TrialStatus,
    ValidationSeverity,
)
from bd_scoring.services.validation import CompanyDataValidator, program_completeness

from tests.factories import TODAY, make_company, make_program, today

validator = CompanyDataValidator(today=today)


def trial(phase=DevelopmentStage.PHASE2, patients=120, start_offset=-100, end_offset=200):
    return ClinicalTrial(
        name="HELIX-2",
        phase=phase,
        indication="NSCLC",
        status=TrialStatus.ACTIVE,
        start_date=TODAY + timedelta(days=start_offset),
        expected_completion=TODAY + timedelta(days=end_offset),
        patient_count=patients,
    )


def messages(items):
    return [i.message for i in items]


class TestCleanCompany:
    def test_no_findings(self, company):
        result = validator.validate_company_data(company)
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []
        assert result.completeness == 1.0


class TestBasicInfo:
    def test_missing_name_critical(self):
        result = validator.validate_company_data(make_company(name="  "))
        assert [e.field for e in result.critical_errors] == ["basic_info.name"]

    def test_missing_areas_error(self):
        result = validator.validate_company_data(make_company(therapeutic_areas=[]))
        assert not result.is_valid
        assert not result.has_critical_errors


class TestPipeline:
    def test_empty_pipeline_critical(self):
        result = validator.validate_company_data(make_company(programs=[]))
        assert result.critical_errors[0].field == "pipeline.programs"

    def test_unnamed_program_critical(self):
        result = validator.validate_company_data(make_company(programs=[make_program(name="")]))
        assert [e.field for e in result.critical_errors] == ["pipeline.programs[0].name"]

    def test_program_warnings(self):
        bare = make_program(differentiators=[], risks=[], timeline=[])
        result = validator.validate_company_data(make_company(programs=[bare]))
        assert messages(result.warnings) == [
            "No differentiators specified",
            "No risks identified",
            "No milestones defined",
        ]

    def test_milestones_out_of_order(self):
        program = make_program(timeline=[
            Milestone(name="Readout", expected_date=TODAY + timedelta(days=200)),
            Milestone(name="Enrollment complete", expected_date=TODAY + timedelta(days=100)),
        ])
        result = validator.validate_company_data(make_company(programs=[program]))
        assert "Milestone dates may not be in chronological order" in messages(result.warnings)


class TestFinancials:
    def test_negative_cash_error(self):
        result = validator.validate_company_data(make_company(cash_position=-5.0))
        assert "Cash position cannot be negative" in messages(result.errors)

    def test_zero_burn_warning(self):
        result = validator.validate_company_data(make_company(burn_rate=0.0))
        assert "Zero burn rate is unusual for biotech companies" in messages(result.warnings)

    def test_short_runway_warning(self):
        result = validator.validate_company_data(make_company(cash_position=50.0, burn_rate=10.0))
        assert "Runway less than 12 months indicates urgent funding need" in messages(result.warnings)

    def test_stale_funding_warning(self):
        result = validator.validate_company_data(make_company(funding_days_ago=800))
        assert any(w.field == "financials.last_funding.date" for w in result.warnings)

    def test_missing_funding_warning(self):
        result = validator.validate_company_data(make_company(funding_days_ago=None))
        assert "No funding history provided" in messages(result.warnings)


class TestMarket:
    @pytest.mark.parametrize("growth,flagged", [(-0.6, True), (-0.5, False), (2.0, False), (2.5, True)])
    def test_growth_bounds(self, growth, flagged):
        result = validator.validate_company_data(make_company(growth_rate=growth))
        assert ("Unusual market growth rate detected" in messages(result.warnings)) is flagged

    def test_market_share_out_of_range(self):
        company = make_company(competitors=[
            Competitor(name="Genentech", stage=DevelopmentStage.MARKETED, market_share=150.0),
        ])
        result = validator.validate_company_data(company)
        assert [e.field for e in result.errors] == ["market.competitors[0].market_share"]

    def test_non_positive_market(self):
        result = validator.validate_company_data(make_company(addressable_market=0.0))
        assert "Addressable market size must be positive" in messages(result.errors)


class TestRegulatory:
    def test_timeline_bounds(self):
        assert "Regulatory timeline must be positive" in messages(
            validator.validate_company_data(make_company(regulatory_timeline=0)).errors
        )
        assert "Very long regulatory timeline detected" in messages(
            validator.validate_company_data(make_company(regulatory_timeline=200)).warnings
        )

    def test_completion_before_start(self):
        company = make_company(clinical_trials=[trial(start_offset=100, end_offset=50)])
        result = validator.validate_company_data(company)
        assert result.errors[0].field == "regulatory.clinical_trials[0].expected_completion"

    @pytest.mark.parametrize("phase,patients,message", [
        (DevelopmentStage.PHASE1, 150, "Large patient count for Phase I trial"),
        (DevelopmentStage.PHASE2, 10, "Unusual patient count for Phase II trial"),
        (DevelopmentStage.PHASE3, 50, "Small patient count for Phase III trial"),
    ])
    def test_patient_counts(self, phase, patients, message):
        result = validator.validate_company_data(make_company(clinical_trials=[trial(phase, patients)]))
        assert message in messages(result.warnings)

    def test_zero_patients_error(self):
        result = validator.validate_company_data(make_company(clinical_trials=[trial(patients=0)]))
        assert result.errors[0].severity == ValidationSeverity.ERROR


class TestCompleteness:
    def test_bare_company(self):
        bare = CompanyData(basic_info=BasicInfo(name="Bare Bio", stage=DevelopmentStage.PHASE1))
        assert CompanyDataValidator.completeness(bare) == pytest.approx((1 / 5) / 5)

    def test_program_completeness(self):
        assert program_completeness(Program(stage=DevelopmentStage.PHASE1)) == 0.0
        assert program_completeness(make_program()) == 1.0
