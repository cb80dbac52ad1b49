"""Financial Readiness pillar.

Factors (weight)
----------------
  Cash Position           0.25   cash vs. stage-scaled thresholds (500/200/100/50 × m)
  Burn Rate Efficiency    0.20   burn vs. expected stage range (low, high)
  Funding Runway          0.30   ≥24→5, ≥18→4, ≥12→3, ≥6→2, else 1
  Capital Intensity       0.15   mean(stage intensity, pipeline complexity)
  Financing Need Timing   0.08   months before a raise is needed × stage advantage
  Data Freshness          0.02   days since last funding round
"""
from datetime import date
from typing import Callable, List, Optional

from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import DevelopmentStage, Pillar
from bd_scoring.models.market import MarketContext
from bd_scoring.models.scoring import (
    PillarScore,
    ScoreExplanation,
    ScoringFactor,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)
from bd_scoring.scoring.pillars import base
from bd_scoring.scoring.utils import bracket

METHODOLOGY_RELIABILITY = 0.90

INFO = base.pillar_info(
    Pillar.FINANCIAL_READINESS,
    description="Evaluates cash position, burn, runway, and financing needs",
    default_weight=0.10,
    required=("financials.cash_position", "financials.burn_rate", "financials.runway"),
    optional=("financials.last_funding",),
)

S = DevelopmentStage

CASH_STAGE_MULTIPLIER = {
    S.PRECLINICAL: 0.5, S.PHASE1: 0.7, S.PHASE2: 1.0,
    S.PHASE3: 1.5, S.APPROVED: 1.2, S.MARKETED: 2.0,
}
CASH_THRESHOLDS = [(500.0, 5.0), (200.0, 4.0), (100.0, 3.0), (50.0, 2.0)]

# Expected monthly burn range ($M) by stage
EXPECTED_BURN = {
    S.PRECLINICAL: (1.0, 5.0), S.PHASE1: (3.0, 10.0), S.PHASE2: (5.0, 20.0),
    S.PHASE3: (10.0, 50.0), S.APPROVED: (5.0, 30.0), S.MARKETED: (10.0, 100.0),
}

RUNWAY_TABLE = [(24, 5.0), (18, 4.0), (12, 3.0), (6, 2.0)]

STAGE_INTENSITY = {
    S.PRECLINICAL: 0.2, S.PHASE1: 0.4, S.PHASE2: 0.6,
    S.PHASE3: 0.9, S.APPROVED: 0.5, S.MARKETED: 0.3,
}

# Months of runway kept in reserve before a raise is considered urgent
FINANCING_BUFFER_MONTHS = 9
FINANCING_TABLE = [(18, 5.0), (12, 4.0), (6, 3.0), (3, 2.0)]
STAGE_FINANCING_ADVANTAGE = {
    S.PRECLINICAL: 0.8, S.PHASE1: 0.9, S.PHASE2: 1.0,
    S.PHASE3: 1.2, S.APPROVED: 1.3, S.MARKETED: 1.1,
}

FRESHNESS_DAYS = [(30, 5.0), (60, 4.0), (90, 3.0), (180, 2.0)]
STALE_FUNDING_DAYS = 548  # ~18 months


class FinancialReadinessPillar:
    """Score a company's financial position and runway.

    Parameters
    ----------
    today:
        Clock used for funding freshness (default ``date.today``).
    """

    info = INFO

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self.today = today or date.today

    def validate(self, data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        financials = data.financials

        if financials.cash_position <= 0:
            errors.append(base.critical(
                "financials.cash_position",
                "Cash position must be greater than zero",
            ))
        if financials.burn_rate <= 0:
            errors.append(base.critical(
                "financials.burn_rate",
                "Burn rate must be greater than zero",
            ))
        if financials.cash_position > 10000:
            warnings.append(base.warning(
                "financials.cash_position",
                "Unusually large cash position (>$10B)",
                "Verify cash position is reported in millions",
            ))
        if financials.burn_rate > 100:
            warnings.append(base.warning(
                "financials.burn_rate",
                "Unusually high monthly burn rate (>$100M)",
                "Verify burn rate is a monthly figure in millions",
            ))
        funding = financials.last_funding
        if funding is not None and self._days_since(funding.date) > 90:
            warnings.append(base.warning(
                "financials.last_funding",
                "Last funding data is more than 90 days old",
                "Update financial data for a more accurate runway estimate",
            ))

        return base.validate_pillar(self.info, data, errors, warnings)

    def score(self, data: CompanyData, context: MarketContext) -> PillarScore:
        base.ensure_scorable(self.info, data, self.validate(data))

        factors = [
            self._cash_position(data),
            self._burn_rate_efficiency(data),
            self._funding_runway(data),
            self._capital_intensity(data),
            self._financing_need_timing(data),
            self._data_freshness(data),
        ]
        return base.build_pillar_score(
            self.info,
            data,
            factors,
            data_quality=self._data_quality(data),
            methodology_reliability=METHODOLOGY_RELIABILITY,
            pillar_warnings=self._pillar_warnings(data),
            explanation=(
                "Financial readiness evaluation based on cash position, burn rate efficiency, "
                "funding runway, capital intensity, financing need timing, and data freshness"
            ),
        )

    def explain(self, score: PillarScore) -> ScoreExplanation:
        return base.explain_score(
            self.info,
            score,
            methodology=(
                "Financial readiness evaluation based on cash position analysis, burn rate "
                "efficiency, funding runway calculation, capital intensity assessment, "
                "financing need prediction, and data freshness validation"
            ),
            limitations=[
                "Analysis based on reported financial data which may not reflect real-time position",
                "Market conditions and funding environment changes can affect financing availability",
                "Burn rate projections assume current spending patterns continue",
                "Capital intensity estimates are based on typical development costs",
                "Data freshness affects accuracy of runway calculations",
            ],
        )

    def _days_since(self, when: date) -> int:
        return (self.today() - when).days

    # ── factors ───────────────────────────────────────────────────────────────

    def _cash_position(self, data: CompanyData) -> ScoringFactor:
        cash = data.financials.cash_position
        multiplier = CASH_STAGE_MULTIPLIER[data.stage]
        scaled = [(threshold * multiplier, score) for threshold, score in CASH_THRESHOLDS]
        return base.create_factor(
            "Cash Position", 0.25, bracket(cash, scaled, 1.0),
            f"${cash:.1f}M cash against {data.stage.value}-stage requirements",
        )

    def _burn_rate_efficiency(self, data: CompanyData) -> ScoringFactor:
        burn = data.financials.burn_rate
        low, high = EXPECTED_BURN[data.stage]
        if burn <= low:
            score = 5.0
        elif burn <= 1.5 * low:
            score = 4.0
        elif burn <= high:
            score = 3.0
        elif burn <= 1.5 * high:
            score = 2.0
        else:
            score = 1.0
        return base.create_factor(
            "Burn Rate Efficiency", 0.20, score,
            f"${burn:.1f}M monthly burn vs. expected ${low:.0f}-{high:.0f}M",
        )

    def _funding_runway(self, data: CompanyData) -> ScoringFactor:
        runway = data.financials.runway
        return base.create_factor(
            "Funding Runway", 0.30, bracket(runway, RUNWAY_TABLE, 1.0),
            f"{runway} months of runway at current burn",
        )

    def _capital_intensity(self, data: CompanyData) -> ScoringFactor:
        stage_intensity = STAGE_INTENSITY[data.stage]
        pipeline_complexity = (
            min(1.0, len(data.pipeline.programs) / 10)
            + min(1.0, len(data.unique_indications) / 5)
        ) / 2
        combined = (stage_intensity + pipeline_complexity) / 2
        if combined < 0.3:
            score = 5.0
        elif combined < 0.5:
            score = 4.0
        elif combined < 0.7:
            score = 3.0
        elif combined < 0.9:
            score = 2.0
        else:
            score = 1.0
        return base.create_factor(
            "Capital Intensity", 0.15, score,
            f"Combined capital intensity index {combined:.2f}",
        )

    def _financing_need_timing(self, data: CompanyData) -> ScoringFactor:
        months_until_raise = max(0, data.financials.runway - FINANCING_BUFFER_MONTHS)
        score = bracket(months_until_raise, FINANCING_TABLE, 1.0)
        score = min(5.0, score * STAGE_FINANCING_ADVANTAGE[data.stage])
        return base.create_factor(
            "Financing Need Timing", 0.08, score,
            f"{months_until_raise} months before financing becomes urgent",
        )

    def _data_freshness(self, data: CompanyData) -> ScoringFactor:
        funding = data.financials.last_funding
        if funding is None:
            return base.create_factor(
                "Data Freshness", 0.02, 5.0, "No funding history to age",
            )
        days = self._days_since(funding.date)
        score = 1.0
        for limit, value in FRESHNESS_DAYS:
            if days < limit:
                score = value
                break
        return base.create_factor(
            "Data Freshness", 0.02, score, f"Last funding {days} days ago",
        )

    # ── quality & warnings ────────────────────────────────────────────────────

    def _data_quality(self, data: CompanyData) -> float:
        financials = data.financials
        quality = 1.0
        if financials.cash_position <= 0 or financials.burn_rate <= 0:
            quality *= 0.5
        if financials.last_funding is None:
            quality *= 0.8
        if not 0 < financials.runway < 120:
            quality *= 0.7
        return quality

    def _pillar_warnings(self, data: CompanyData) -> List[str]:
        warnings = []
        financials = data.financials
        runway = financials.runway
        if runway < 6:
            warnings.append("Critical: Less than 6 months runway remaining")
        elif runway < 12:
            warnings.append("Warning: Less than 12 months runway remaining")
        if financials.burn_rate > 0.1 * financials.cash_position:
            warnings.append("High burn rate relative to cash position")
        funding = financials.last_funding
        if funding is not None and self._days_since(funding.date) > STALE_FUNDING_DAYS:
            warnings.append("No recent funding activity (>18 months)")
        return warnings
