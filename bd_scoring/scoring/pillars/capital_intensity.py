"""Capital Intensity pillar.

A higher score means a *less* capital-hungry path to value.

Factors (weight)
----------------
  Development Cost          0.25   stage base, complex-area and pipeline-size adjustments
  Capital Efficiency        0.20   burn per program, cash per program
  Manufacturing Complexity  0.20   modality level 0–3 from areas and mechanisms
  Regulatory Cost           0.15   pathway base, pivotal / active trial load, enrolment
  Time to Market            0.10   stage base, timeline, near-term lead milestone
  Scalability               0.10   market size, platform areas, breadth, oral delivery
"""
from datetime import date
from typing import Callable, List, Optional

from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import (
    DevelopmentStage,
    MilestoneStatus,
    Pillar,
    RegulatoryPathway,
    TrialStatus,
)
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
from bd_scoring.scoring.utils import any_contains, contains_any, fraction

METHODOLOGY_RELIABILITY = 0.80

INFO = base.pillar_info(
    Pillar.CAPITAL_INTENSITY,
    description="Measures capital required to reach value-inflection milestones",
    default_weight=0.15,
    required=("financials.burn_rate", "basic_info.stage"),
    optional=("pipeline.programs", "regulatory.clinical_trials"),
)

DEVELOPMENT_COST_SCORES = {
    DevelopmentStage.PRECLINICAL: 4.5,
    DevelopmentStage.PHASE1: 4.0,
    DevelopmentStage.PHASE2: 3.0,
    DevelopmentStage.PHASE3: 2.0,
    DevelopmentStage.APPROVED: 4.0,
    DevelopmentStage.MARKETED: 4.0,
}

TIME_TO_MARKET_SCORES = {
    DevelopmentStage.PRECLINICAL: 2.0,
    DevelopmentStage.PHASE1: 2.5,
    DevelopmentStage.PHASE2: 3.5,
    DevelopmentStage.PHASE3: 4.0,
    DevelopmentStage.APPROVED: 5.0,
    DevelopmentStage.MARKETED: 5.0,
}

REGULATORY_COST_SCORES = {
    RegulatoryPathway.ORPHAN: 4.5,
    RegulatoryPathway.BREAKTHROUGH: 4.0,
    RegulatoryPathway.FAST_TRACK: 4.0,
    RegulatoryPathway.ACCELERATED: 3.5,
    RegulatoryPathway.STANDARD: 3.0,
}

# Manufacturing complexity level → score
MANUFACTURING_SCORES = {0: 4.5, 1: 4.5, 2: 3.5, 3: 2.0}

COMPLEX_AREAS = ["oncology", "neurology", "rare disease", "gene therapy"]
HIGH_COMPLEXITY_AREAS = ["gene therapy", "cell therapy", "biologics", "personalized medicine"]
MODERATE_COMPLEXITY_AREAS = ["monoclonal antibod", "vaccine", "protein therapeutic"]
LOW_COMPLEXITY_AREAS = ["small molecule", "generic"]
HIGH_COMPLEXITY_MECHANISMS = ["gene", "cell", "viral"]
MODERATE_COMPLEXITY_MECHANISMS = ["antibody", "protein"]
PLATFORM_AREAS = ["gene therapy", "cell therapy", "platform technology"]
SCALABLE_MECHANISMS = ["small molecule", "oral"]


class CapitalIntensityPillar:
    """Score how much capital a company needs to reach value inflection.

    Parameters
    ----------
    today:
        Clock used for funding age and milestone timing (default ``date.today``).
    """

    info = INFO

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self.today = today or date.today

    def validate(self, data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []

        if data.financials.burn_rate <= 0:
            errors.append(base.critical(
                "financials.burn_rate",
                "Burn rate must be greater than zero for capital intensity analysis",
            ))
        if data.stage in (DevelopmentStage.APPROVED, DevelopmentStage.MARKETED):
            warnings.append(base.warning(
                "basic_info.stage",
                "Commercial-stage company; capital intensity reflects commercialization spend",
                "Consider commercial infrastructure costs separately",
            ))
        if not data.pipeline.programs:
            warnings.append(base.warning(
                "pipeline.programs",
                "No pipeline programs provided",
                "Program data improves capital efficiency estimates",
            ))
        if data.stage != DevelopmentStage.PRECLINICAL and not data.regulatory.clinical_trials:
            warnings.append(base.warning(
                "regulatory.clinical_trials",
                "No clinical trials listed for a clinical-stage company",
                "Trial data is needed to estimate regulatory costs",
            ))

        return base.validate_pillar(self.info, data, errors, warnings)

    def score(self, data: CompanyData, context: MarketContext) -> PillarScore:
        base.ensure_scorable(self.info, data, self.validate(data))

        factors = [
            self._development_cost(data),
            self._capital_efficiency(data),
            self._manufacturing_complexity(data),
            self._regulatory_cost(data),
            self._time_to_market(data),
            self._scalability(data),
        ]
        return base.build_pillar_score(
            self.info,
            data,
            factors,
            data_quality=self._data_quality(data),
            methodology_reliability=METHODOLOGY_RELIABILITY,
            pillar_warnings=self._pillar_warnings(data),
            explanation=(
                "Capital intensity evaluation based on development cost, capital efficiency, "
                "manufacturing complexity, regulatory cost, time to market, and scalability"
            ),
        )

    def explain(self, score: PillarScore) -> ScoreExplanation:
        label = self.intensity_label(score.raw_score)
        return base.explain_score(
            self.info,
            score,
            summary=base.score_summary(self.info, score, label),
            methodology=(
                "Capital intensity evaluation using development cost analysis, capital "
                "efficiency metrics, manufacturing complexity assessment, regulatory cost "
                "estimation, time-to-market analysis, and scalability potential"
            ),
            limitations=[
                "Cost estimates are based on industry averages and may vary significantly",
                "Manufacturing complexity assessment is simplified and may not capture all factors",
                "Regulatory costs can change based on agency feedback and requirements",
                "Market conditions and competitive landscape can affect capital requirements",
                "Platform technology potential may be difficult to assess in early stages",
            ],
        )

    @staticmethod
    def intensity_label(score: float) -> str:
        if score >= 4.5:
            return "Very Low Capital Intensity"
        if score >= 3.5:
            return "Low Capital Intensity"
        if score >= 2.5:
            return "Moderate Capital Intensity"
        if score >= 1.5:
            return "High Capital Intensity"
        return "Very High Capital Intensity"

    # ── factors ───────────────────────────────────────────────────────────────

    def _development_cost(self, data: CompanyData) -> ScoringFactor:
        score = DEVELOPMENT_COST_SCORES[data.stage]
        if any_contains(data.areas_lower, COMPLEX_AREAS):
            score -= 0.5
        count = len(data.pipeline.programs)
        if count > 3:
            score -= 0.3
        elif count == 1:
            score += 0.2
        return base.create_factor(
            "Development Cost", 0.25, score,
            f"{data.stage.value} stage with {count} program(s) in development",
        )

    def _capital_efficiency(self, data: CompanyData) -> ScoringFactor:
        programs = max(1, len(data.pipeline.programs))
        burn_per_program = data.financials.burn_rate / programs
        cash_per_program = data.financials.cash_position / programs

        if burn_per_program <= 2:
            score = 4.5
        elif burn_per_program <= 5:
            score = 4.0
        elif burn_per_program <= 10:
            score = 3.0
        elif burn_per_program <= 20:
            score = 2.0
        else:
            score = 1.5

        if cash_per_program > 50:
            score += 0.3
        elif cash_per_program < 10:
            score -= 0.3

        return base.create_factor(
            "Capital Efficiency", 0.20, score,
            f"${burn_per_program:.1f}M monthly burn and ${cash_per_program:.1f}M cash per program",
        )

    def _manufacturing_level(self, data: CompanyData) -> int:
        level = 0
        for area in data.areas_lower:
            if contains_any(area, HIGH_COMPLEXITY_AREAS):
                level = max(level, 3)
            elif contains_any(area, MODERATE_COMPLEXITY_AREAS):
                level = max(level, 2)
            elif contains_any(area, LOW_COMPLEXITY_AREAS):
                level = max(level, 1)
        for program in data.pipeline.programs:
            if contains_any(program.mechanism, HIGH_COMPLEXITY_MECHANISMS):
                level = max(level, 3)
            elif contains_any(program.mechanism, MODERATE_COMPLEXITY_MECHANISMS):
                level = max(level, 2)
        return level

    def _manufacturing_complexity(self, data: CompanyData) -> ScoringFactor:
        level = self._manufacturing_level(data)
        return base.create_factor(
            "Manufacturing Complexity", 0.20, MANUFACTURING_SCORES[level],
            f"Manufacturing complexity level {level} of 3",
        )

    def _regulatory_cost(self, data: CompanyData) -> ScoringFactor:
        regulatory = data.regulatory
        trials = regulatory.clinical_trials
        score = REGULATORY_COST_SCORES[regulatory.regulatory_strategy.pathway]

        phase3 = sum(1 for t in trials if t.phase == DevelopmentStage.PHASE3)
        if phase3 > 1:
            score -= 0.5
        running = sum(1 for t in trials if t.status in (TrialStatus.ACTIVE, TrialStatus.RECRUITING))
        if running > 3:
            score -= 0.3

        patients = sum(t.patient_count or 0 for t in trials)
        if patients > 1000:
            score -= 0.4
        elif patients < 100:
            score += 0.2

        return base.create_factor(
            "Regulatory Cost", 0.15, score,
            f"{regulatory.regulatory_strategy.pathway.value} pathway, {phase3} Phase III "
            f"trial(s), {patients} total patients",
        )

    def _time_to_market(self, data: CompanyData) -> ScoringFactor:
        score = TIME_TO_MARKET_SCORES[data.stage]
        timeline = data.regulatory.regulatory_strategy.timeline
        if timeline <= 24:
            score += 0.5
        elif timeline > 60:
            score -= 0.5

        lead = data.pipeline.lead_program
        current_year = self.today().year
        if lead is not None and any(
            m.status == MilestoneStatus.UPCOMING and m.expected_date.year == current_year
            for m in lead.timeline
        ):
            score += 0.3

        return base.create_factor(
            "Time to Market", 0.10, score,
            f"{timeline}-month regulatory timeline from {data.stage.value} stage",
        )

    def _scalability(self, data: CompanyData) -> ScoringFactor:
        size = data.market.addressable_market
        if size <= 1:
            score = 2.0
        elif size <= 5:
            score = 3.0
        elif size <= 20:
            score = 4.0
        else:
            score = 4.5

        if any_contains(data.areas_lower, PLATFORM_AREAS):
            score += 0.5
        if len(data.unique_indications) > 2:
            score += 0.2
        if any_contains((p.mechanism for p in data.pipeline.programs), SCALABLE_MECHANISMS):
            score += 0.3

        return base.create_factor(
            "Scalability", 0.10, score,
            f"${size:.1f}B market across {len(data.unique_indications)} indication(s)",
        )

    # ── quality & warnings ────────────────────────────────────────────────────

    def _data_quality(self, data: CompanyData) -> float:
        quality = 1.0
        funding = data.financials.last_funding
        if funding is not None and (self.today() - funding.date).days > 365:
            quality -= 0.2
        if data.financials.burn_rate > data.financials.cash_position:
            quality -= 0.1
        trials = data.regulatory.clinical_trials
        if trials:
            quality *= fraction(sum(1 for t in trials if t.patient_count is not None), len(trials))
        return max(0.0, quality)

    def _pillar_warnings(self, data: CompanyData) -> List[str]:
        warnings = []
        if data.financials.burn_rate > 10:
            warnings.append("High monthly burn rate increases capital requirements")
        if data.financials.runway < 12:
            warnings.append("Limited runway may force near-term financing")
        if any_contains(data.areas_lower, ["gene therapy", "cell therapy"]):
            warnings.append("Gene and cell therapies carry high manufacturing capital needs")
        phase3 = sum(
            1 for t in data.regulatory.clinical_trials if t.phase == DevelopmentStage.PHASE3
        )
        if phase3 > 1:
            warnings.append("Multiple Phase III trials require substantial capital")
        return warnings
