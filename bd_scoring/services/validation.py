"""Company data validation service.

Section-by-section checks over a ``CompanyData`` snapshot. Critical errors
block scoring; errors and warnings are reported for data stewards.

Completeness is the mean of five section scores:
  basic info   name, ticker, sector, areas, description          (÷5)
  pipeline     mean per-program completeness (÷6 each), 0 if none
  financials   cash > 0, burn > 0, last funding                 (÷3)
  market       market > 0, competitors, drivers or barriers     (÷3)
  regulatory   timeline > 0, trials, strategy risks             (÷3)
"""
import logging
from datetime import date
from typing import Callable, List, Optional, Tuple

from bd_scoring.models.company import CompanyData, Program
from bd_scoring.models.enums import DevelopmentStage, ValidationSeverity
from bd_scoring.models.scoring import ValidationIssue, ValidationResult, ValidationWarning
from bd_scoring.scoring.utils import mean

logger = logging.getLogger(__name__)

Findings = Tuple[List[ValidationIssue], List[ValidationWarning]]

STALE_FUNDING_DAYS = 730
SHORT_RUNWAY_MONTHS = 12
SMALL_MARKET_BILLIONS = 0.1
# Growth rate is a fraction: −50% to +200%
GROWTH_RATE_BOUNDS = (-0.5, 2.0)
LONG_TIMELINE_MONTHS = 180


def _blank(text: Optional[str]) -> bool:
    return not (text and text.strip())


def _issue(field: str, message: str, severity: ValidationSeverity = ValidationSeverity.ERROR) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, severity=severity)


def _warn(field: str, message: str, suggestion: str) -> ValidationWarning:
    return ValidationWarning(field=field, message=message, suggestion=suggestion)


def program_completeness(program: Program) -> float:
    checks = [
        bool(program.name),
        bool(program.indication),
        bool(program.mechanism),
        bool(program.differentiators),
        bool(program.risks),
        bool(program.timeline),
    ]
    return sum(checks) / len(checks)


class CompanyDataValidator:
    """Validate company snapshots before scoring.

    Parameters
    ----------
    today:
        Clock used to age funding rounds (default ``date.today``).
    """

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self.today = today or date.today

    def validate_company_data(self, data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        for section in (
            self._basic_info,
            self._pipeline,
            self._financials,
            self._market,
            self._regulatory,
        ):
            section_errors, section_warnings = section(data)
            errors.extend(section_errors)
            warnings.extend(section_warnings)

        result = ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            completeness=self.completeness(data),
        )
        logger.debug(
            f"Validated company {data.id}: {len(errors)} errors, "
            f"{len(warnings)} warnings, completeness {result.completeness:.2f}"
        )
        return result

    # ── sections ──────────────────────────────────────────────────────────────

    def _basic_info(self, data: CompanyData) -> Findings:
        info = data.basic_info
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        if _blank(info.name):
            errors.append(_issue("basic_info.name", "Company name is required", ValidationSeverity.CRITICAL))
        if _blank(info.sector):
            errors.append(_issue("basic_info.sector", "Company sector is required"))
        if not info.therapeutic_areas:
            errors.append(_issue(
                "basic_info.therapeutic_areas", "At least one therapeutic area must be specified",
            ))
        if info.ticker is None:
            warnings.append(_warn(
                "basic_info.ticker",
                "Ticker symbol not provided",
                "Adding ticker symbol improves comparable matching accuracy",
            ))
        if _blank(info.description):
            warnings.append(_warn(
                "basic_info.description",
                "Company description not provided",
                "Adding description helps with strategic fit assessment",
            ))
        return errors, warnings

    def _pipeline(self, data: CompanyData) -> Findings:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        if not data.pipeline.programs:
            errors.append(_issue(
                "pipeline.programs",
                "At least one pipeline program is required",
                ValidationSeverity.CRITICAL,
            ))
        for index, program in enumerate(data.pipeline.programs):
            prefix = f"pipeline.programs[{index}]"
            if _blank(program.name):
                errors.append(_issue(f"{prefix}.name", "Program name is required", ValidationSeverity.CRITICAL))
            if _blank(program.indication):
                errors.append(_issue(f"{prefix}.indication", "Program indication is required"))
            if _blank(program.mechanism):
                errors.append(_issue(f"{prefix}.mechanism", "Mechanism of action is required"))
            if not program.differentiators:
                warnings.append(_warn(
                    f"{prefix}.differentiators",
                    "No differentiators specified",
                    "Identifying key differentiators helps with competitive positioning",
                ))
            if not program.risks:
                warnings.append(_warn(
                    f"{prefix}.risks",
                    "No risks identified",
                    "Risk assessment is important for comprehensive evaluation",
                ))
            if not program.timeline:
                warnings.append(_warn(
                    f"{prefix}.timeline",
                    "No milestones defined",
                    "Development timeline helps assess program maturity and timing",
                ))
            dates = [m.expected_date for m in program.timeline]
            if any(later <= earlier for earlier, later in zip(dates, dates[1:])):
                warnings.append(_warn(
                    f"{prefix}.timeline",
                    "Milestone dates may not be in chronological order",
                    "Review milestone sequencing for logical development progression",
                ))
        return errors, warnings

    def _financials(self, data: CompanyData) -> Findings:
        financials = data.financials
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        if financials.cash_position < 0:
            errors.append(_issue("financials.cash_position", "Cash position cannot be negative"))
        elif financials.cash_position == 0:
            warnings.append(_warn(
                "financials.cash_position",
                "Zero cash position indicates potential financial distress",
                "Verify cash position accuracy or consider immediate funding needs",
            ))
        if financials.burn_rate < 0:
            errors.append(_issue("financials.burn_rate", "Burn rate cannot be negative"))
        elif financials.burn_rate == 0:
            warnings.append(_warn(
                "financials.burn_rate",
                "Zero burn rate is unusual for biotech companies",
                "Verify burn rate calculation includes R&D and operational expenses",
            ))
        if financials.runway < SHORT_RUNWAY_MONTHS:
            warnings.append(_warn(
                "financials.runway",
                "Runway less than 12 months indicates urgent funding need",
                "Company may be under pressure for quick partnership or financing",
            ))

        funding = financials.last_funding
        if funding is None:
            warnings.append(_warn(
                "financials.last_funding",
                "No funding history provided",
                "Funding history helps assess financial management and investor confidence",
            ))
        else:
            if (self.today() - funding.date).days > STALE_FUNDING_DAYS:
                warnings.append(_warn(
                    "financials.last_funding.date",
                    "Last funding was over 2 years ago",
                    "Financial data may be stale, consider updating cash position and burn rate",
                ))
            if funding.amount <= 0:
                errors.append(_issue("financials.last_funding.amount", "Funding amount must be positive"))
        return errors, warnings

    def _market(self, data: CompanyData) -> Findings:
        market = data.market
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        if market.addressable_market <= 0:
            errors.append(_issue("market.addressable_market", "Addressable market size must be positive"))
        if market.addressable_market < SMALL_MARKET_BILLIONS:
            warnings.append(_warn(
                "market.addressable_market",
                "Small addressable market may limit commercial potential",
                "Consider niche market dynamics and pricing strategies",
            ))
        low, high = GROWTH_RATE_BOUNDS
        if not low <= market.market_dynamics.growth_rate <= high:
            warnings.append(_warn(
                "market.market_dynamics.growth_rate",
                "Unusual market growth rate detected",
                "Verify growth rate calculation and market assumptions",
            ))
        if not market.competitors:
            warnings.append(_warn(
                "market.competitors",
                "No competitors identified",
                "Competitive analysis is important for market positioning assessment",
            ))
        for index, competitor in enumerate(market.competitors):
            prefix = f"market.competitors[{index}]"
            if _blank(competitor.name):
                errors.append(_issue(f"{prefix}.name", "Competitor name is required"))
            share = competitor.market_share
            if share is not None and not 0 <= share <= 100:
                errors.append(_issue(
                    f"{prefix}.market_share", "Market share must be between 0 and 100 percent",
                ))
        return errors, warnings

    def _regulatory(self, data: CompanyData) -> Findings:
        regulatory = data.regulatory
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        timeline = regulatory.regulatory_strategy.timeline
        if timeline <= 0:
            errors.append(_issue(
                "regulatory.regulatory_strategy.timeline", "Regulatory timeline must be positive",
            ))
        if timeline > LONG_TIMELINE_MONTHS:
            warnings.append(_warn(
                "regulatory.regulatory_strategy.timeline",
                "Very long regulatory timeline detected",
                "Consider if timeline is realistic for the development stage",
            ))

        for index, trial in enumerate(regulatory.clinical_trials):
            prefix = f"regulatory.clinical_trials[{index}]"
            if _blank(trial.name):
                errors.append(_issue(f"{prefix}.name", "Clinical trial name is required"))
            if _blank(trial.indication):
                errors.append(_issue(f"{prefix}.indication", "Clinical trial indication is required"))
            if (
                trial.start_date is not None
                and trial.expected_completion is not None
                and trial.start_date >= trial.expected_completion
            ):
                errors.append(_issue(
                    f"{prefix}.expected_completion",
                    "Expected completion date must be after start date",
                ))
            count = trial.patient_count
            if count is None:
                continue
            if count <= 0:
                errors.append(_issue(f"{prefix}.patient_count", "Patient count must be positive"))
            warning = self._phase_patient_warning(trial.phase, count)
            if warning is not None:
                message, suggestion = warning
                warnings.append(_warn(f"{prefix}.patient_count", message, suggestion))
        return errors, warnings

    @staticmethod
    def _phase_patient_warning(phase: DevelopmentStage, count: int) -> Optional[Tuple[str, str]]:
        if phase == DevelopmentStage.PHASE1 and count > 100:
            return (
                "Large patient count for Phase I trial",
                "Verify patient count is appropriate for safety study",
            )
        if phase == DevelopmentStage.PHASE2 and (count < 20 or count > 500):
            return (
                "Unusual patient count for Phase II trial",
                "Typical Phase II trials have 20-500 patients",
            )
        if phase == DevelopmentStage.PHASE3 and count < 100:
            return (
                "Small patient count for Phase III trial",
                "Phase III trials typically require larger patient populations",
            )
        return None

    # ── completeness ──────────────────────────────────────────────────────────

    @staticmethod
    def completeness(data: CompanyData) -> float:
        info = data.basic_info
        basic = sum([
            bool(info.name),
            info.ticker is not None,
            bool(info.sector),
            bool(info.therapeutic_areas),
            not _blank(info.description),
        ]) / 5
        pipeline = mean([program_completeness(p) for p in data.pipeline.programs])
        financials = sum([
            data.financials.cash_position > 0,
            data.financials.burn_rate > 0,
            data.financials.last_funding is not None,
        ]) / 3
        dynamics = data.market.market_dynamics
        market = sum([
            data.market.addressable_market > 0,
            bool(data.market.competitors),
            bool(dynamics.barriers or dynamics.drivers),
        ]) / 3
        strategy = data.regulatory.regulatory_strategy
        regulatory = sum([
            strategy.timeline > 0,
            bool(data.regulatory.clinical_trials),
            bool(strategy.risks),
        ]) / 3
        return (basic + pipeline + financials + market + regulatory) / 5
