"""Regulatory Risk pillar.

A higher score means lower regulatory risk.

Factors (weight)
----------------
  Pathway Complexity     0.25   pathway base, area adjustments, stage clarity
  Clinical Risk          0.20   stage base, trial load, enrolment, trial history, endpoints
  Regulatory Precedent   0.20   area maturity, mechanism precedent, approval experience
  Safety Profile         0.15   area and mechanism safety, trial experience, population
  Manufacturing Risk     0.10   production complexity, scale-up, supply chain
  Timeline Risk          0.10   strategy timeline, stage consistency, delays, pathway
"""
from datetime import date
from typing import Callable, List, Optional

from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import (
    ApprovalType,
    DevelopmentStage,
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
from bd_scoring.scoring.utils import any_contains, contains_any

METHODOLOGY_RELIABILITY = 0.85

INFO = base.pillar_info(
    Pillar.REGULATORY_RISK,
    description="Evaluates regulatory pathway, clinical, safety, and timeline risks",
    default_weight=0.10,
    required=("basic_info.stage", "basic_info.therapeutic_areas"),
    optional=(
        "regulatory.approvals",
        "regulatory.clinical_trials",
        "regulatory.regulatory_strategy",
    ),
)

S = DevelopmentStage
P = RegulatoryPathway

PATHWAY_BASE = {
    P.ORPHAN: 4.5,
    P.BREAKTHROUGH: 4.2,
    P.FAST_TRACK: 4.0,
    P.ACCELERATED: 3.8,
    P.STANDARD: 3.0,
}

# First matching keyword per area applies
AREA_PATHWAY_ADJUSTMENTS = [
    ("gene therapy", -0.8),
    ("cell therapy", -0.7),
    ("neurology", -0.5),
    ("psychiatry", -0.5),
    ("cardiovascular", -0.3),
    ("oncology", -0.2),
    ("rare diseases", 0.3),
    ("infectious diseases", 0.2),
    ("dermatology", 0.3),
]

STAGE_PATHWAY_ADJUSTMENT = {
    S.PRECLINICAL: -0.2, S.PHASE1: 0.1, S.PHASE2: 0.2, S.PHASE3: 0.3,
}
APPROVED_PATHWAY_SCORE = 4.5

CLINICAL_STAGE_BASE = {
    S.PRECLINICAL: 3.5, S.PHASE1: 3.0, S.PHASE2: 2.5,
    S.PHASE3: 2.0, S.APPROVED: 4.5, S.MARKETED: 4.5,
}
HARD_ENDPOINT_AREAS = ["neurology", "psychiatry", "alzheimer", "depression"]

WELL_ESTABLISHED_AREAS = ["oncology", "cardiovascular", "diabetes", "infectious diseases", "dermatology"]
EMERGING_AREAS = ["gene therapy", "cell therapy", "digital therapeutics", "microbiome"]
CHALLENGING_AREAS = ["neurology", "psychiatry", "alzheimer", "pain"]
MATURE_AREAS = ["oncology", "cardiovascular", "diabetes"]
ESTABLISHED_MECHANISMS = ["small molecule", "monoclonal antibody", "vaccine"]
NOVEL_PRECEDENT_MECHANISMS = ["gene therapy", "cell therapy", "rna therapy", "crispr"]
SPECIAL_APPROVALS = {ApprovalType.BREAKTHROUGH, ApprovalType.FAST_TRACK, ApprovalType.CONDITIONAL}

HIGH_SAFETY_RISK_AREAS = ["gene therapy", "cell therapy", "immunotherapy", "neurology"]
MODERATE_SAFETY_RISK_AREAS = ["oncology", "cardiovascular", "respiratory"]
LOW_SAFETY_RISK_AREAS = ["dermatology", "ophthalmology", "infectious diseases"]
HIGH_RISK_MECHANISMS = ["immunosuppressive", "cytotoxic", "gene editing", "viral vector"]
MODERATE_RISK_MECHANISMS = ["monoclonal antibody", "protein therapy", "hormone therapy"]
LOW_RISK_MECHANISMS = ["topical", "oral small molecule", "vaccine"]
VULNERABLE_POPULATIONS = ["pediatric", "elderly", "immunocompromised", "pregnant"]
COMBINATION_TERMS = ["combination", "plus"]

HIGH_COMPLEXITY_MANUFACTURING = ["gene therapy", "cell therapy", "viral vector", "personalized medicine"]
MODERATE_COMPLEXITY_MANUFACTURING = ["monoclonal antibody", "protein therapy", "biologics"]
LOW_COMPLEXITY_MANUFACTURING = ["small molecule", "oral", "topical"]
COMPLEX_MANUFACTURING_AREAS = ["gene therapy", "cell therapy", "regenerative medicine"]
SCALE_UP_CHALLENGES = ["autologous", "personalized", "fresh", "living"]
COMPLEX_SUPPLY_CHAIN = ["cold chain", "cryopreservation", "short shelf life"]

TIMELINE_TABLE = [(24, 4.5), (48, 4.0), (72, 3.0), (96, 2.5)]
EXPECTED_TIMELINE = {
    S.PRECLINICAL: (60, 120), S.PHASE1: (48, 84), S.PHASE2: (36, 60),
    S.PHASE3: (24, 48), S.APPROVED: (0, 12), S.MARKETED: (0, 6),
}
PATHWAY_TIMELINE_ADJUSTMENT = {
    P.BREAKTHROUGH: 0.3, P.FAST_TRACK: 0.3, P.ACCELERATED: 0.2, P.ORPHAN: 0.1, P.STANDARD: 0.0,
}

HIGH_RISK_AREAS = ["gene therapy", "cell therapy", "neurology", "psychiatry"]
NOVEL_MECHANISMS = ["crispr", "gene editing", "rna therapy", "viral vector"]
COMPLEX_MANUFACTURING_MECHANISMS = ["gene therapy", "cell therapy", "personalized"]
# Minimum credible months to approval per early stage
OPTIMISTIC_TIMELINE = {S.PRECLINICAL: 48, S.PHASE1: 36, S.PHASE2: 24}


def _first_match(text: str, *groups: List[str]) -> Optional[int]:
    """Index of the first keyword group matching ``text``."""
    for index, keywords in enumerate(groups):
        if contains_any(text, keywords):
            return index
    return None


class RegulatoryRiskPillar:
    """Score regulatory exposure; higher is safer.

    Parameters
    ----------
    today:
        Clock used to detect overdue trials (default ``date.today``).
    """

    info = INFO

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self.today = today or date.today

    def validate(self, data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []

        if data.stage == S.MARKETED:
            warnings.append(base.warning(
                "basic_info.stage",
                "Regulatory risk assessment is less relevant for marketed products",
                "Consider post-market regulatory risks and lifecycle management",
            ))
        if not data.basic_info.therapeutic_areas:
            errors.append(base.critical(
                "basic_info.therapeutic_areas",
                "Therapeutic areas are required for regulatory risk assessment",
            ))
        if data.stage in (S.PHASE1, S.PHASE2, S.PHASE3) and not data.regulatory.clinical_trials:
            warnings.append(base.warning(
                "regulatory.clinical_trials",
                "No clinical trial data for development-stage company",
                "Add clinical trial information for more accurate regulatory risk assessment",
            ))
        if not data.regulatory.regulatory_strategy.risks:
            warnings.append(base.warning(
                "regulatory.regulatory_strategy.risks",
                "No regulatory risks identified in strategy",
                "Consider adding known regulatory risks and challenges",
            ))

        return base.validate_pillar(self.info, data, errors, warnings)

    def score(self, data: CompanyData, context: MarketContext) -> PillarScore:
        base.ensure_scorable(self.info, data, self.validate(data))

        factors = [
            self._pathway_complexity(data),
            self._clinical_risk(data),
            self._regulatory_precedent(data),
            self._safety_profile(data),
            self._manufacturing_risk(data),
            self._timeline_risk(data),
        ]
        return base.build_pillar_score(
            self.info,
            data,
            factors,
            data_quality=self._data_quality(data),
            methodology_reliability=METHODOLOGY_RELIABILITY,
            pillar_warnings=self._pillar_warnings(data),
            explanation=(
                "Regulatory risk evaluation based on pathway complexity, clinical risk, "
                "regulatory precedent, safety profile, manufacturing risk, and timeline risk "
                "(higher score indicates lower risk)"
            ),
        )

    def explain(self, score: PillarScore) -> ScoreExplanation:
        raw = score.raw_score
        level = "Low" if raw >= 4.0 else "Moderate" if raw >= 3.0 else "High"
        return base.explain_score(
            self.info,
            score,
            methodology=(
                "Regulatory risk evaluation using pathway complexity analysis, clinical risk "
                "assessment, regulatory precedent evaluation, safety profile analysis, "
                "manufacturing risk assessment, and timeline risk evaluation"
            ),
            limitations=[
                "Regulatory landscape can change rapidly with new guidance and policies",
                "Safety profile assessment is based on limited early-stage data",
                "Manufacturing risk evaluation may not capture all technical complexities",
                "Timeline estimates are subject to regulatory agency workload and priorities",
                "Precedent analysis may not account for evolving regulatory standards",
                "Clinical risk assessment is simplified and may not capture all trial complexities",
            ],
            summary=(
                base.score_summary(self.info, score, self.risk_label(raw))
                + f" - {level} regulatory risk"
            ),
        )

    @staticmethod
    def risk_label(score: float) -> str:
        if score >= 4.5:
            return "Very Low Risk"
        if score >= 3.5:
            return "Low Risk"
        if score >= 2.5:
            return "Moderate Risk"
        if score >= 1.5:
            return "High Risk"
        return "Very High Risk"

    # ── factors ───────────────────────────────────────────────────────────────

    def _pathway_complexity(self, data: CompanyData) -> ScoringFactor:
        pathway = data.regulatory.regulatory_strategy.pathway
        score = PATHWAY_BASE[pathway]
        for area in data.areas_lower:
            for keyword, adjustment in AREA_PATHWAY_ADJUSTMENTS:
                if keyword in area:
                    score += adjustment
                    break
        if data.stage in (S.APPROVED, S.MARKETED):
            score = APPROVED_PATHWAY_SCORE
        else:
            score += STAGE_PATHWAY_ADJUSTMENT[data.stage]
        return base.create_factor(
            "Pathway Complexity", 0.25, score,
            f"Pathway complexity assessment based on regulatory pathway ({pathway.value}), "
            "therapeutic area complexity, and development stage",
        )

    def _clinical_risk(self, data: CompanyData) -> ScoringFactor:
        trials = data.regulatory.clinical_trials
        score = CLINICAL_STAGE_BASE[data.stage]

        if sum(1 for t in trials if t.phase == S.PHASE3) > 1:
            score -= 0.5
        if sum(1 for t in trials if t.phase == S.PHASE2) > 2:
            score -= 0.3

        total_patients = sum(t.patient_count or 0 for t in trials)
        if total_patients <= 100:
            score += 0.2
        elif total_patients <= 500:
            score += 0.1
        elif total_patients <= 1500:
            score -= 0.1
        else:
            score -= 0.3

        if any(t.status in (TrialStatus.SUSPENDED, TrialStatus.TERMINATED) for t in trials):
            score -= 0.4
        if any_contains(data.areas_lower, HARD_ENDPOINT_AREAS):
            score -= 0.3

        return base.create_factor(
            "Clinical Risk", 0.20, score,
            f"Clinical risk based on development stage, trial complexity ({len(trials)} trials), "
            "patient population size, and endpoint difficulty",
        )

    def _regulatory_precedent(self, data: CompanyData) -> ScoringFactor:
        score = 3.0
        for area in data.areas_lower:
            match = _first_match(area, WELL_ESTABLISHED_AREAS, EMERGING_AREAS, CHALLENGING_AREAS)
            score += {0: 0.3, 1: -0.4, 2: -0.2}.get(match, 0.0)

        for program in data.pipeline.programs:
            match = _first_match(program.mechanism, ESTABLISHED_MECHANISMS, NOVEL_PRECEDENT_MECHANISMS)
            score += {0: 0.2, 1: -0.3}.get(match, 0.0)

        approvals = data.regulatory.approvals
        if approvals:
            score += 0.4
            if any(a.type in SPECIAL_APPROVALS for a in approvals):
                score += 0.2

        if any_contains(data.areas_lower, MATURE_AREAS):
            score += 0.2

        return base.create_factor(
            "Regulatory Precedent", 0.20, score,
            "Regulatory precedent assessment based on therapeutic area maturity, mechanism "
            "precedent, company approval history, and competitive landscape",
        )

    def _safety_profile(self, data: CompanyData) -> ScoringFactor:
        programs = data.pipeline.programs
        trials = data.regulatory.clinical_trials
        score = 3.5

        for area in data.areas_lower:
            match = _first_match(
                area, HIGH_SAFETY_RISK_AREAS, MODERATE_SAFETY_RISK_AREAS, LOW_SAFETY_RISK_AREAS,
            )
            score += {0: -0.4, 1: -0.1, 2: 0.2}.get(match, 0.0)

        for program in programs:
            match = _first_match(
                program.mechanism, HIGH_RISK_MECHANISMS, MODERATE_RISK_MECHANISMS, LOW_RISK_MECHANISMS,
            )
            score += {0: -0.3, 1: -0.1, 2: 0.2}.get(match, 0.0)

        if data.stage != S.PRECLINICAL:
            if any(t.status == TrialStatus.COMPLETED for t in trials):
                score += 0.3
            if any(t.status == TrialStatus.SUSPENDED for t in trials):
                score -= 0.5

        if any_contains((p.indication for p in programs), VULNERABLE_POPULATIONS):
            score -= 0.2
        if any_contains((p.mechanism for p in programs), COMBINATION_TERMS):
            score -= 0.2

        return base.create_factor(
            "Safety Profile", 0.15, score,
            "Safety profile assessment based on therapeutic area risks, mechanism safety, "
            "clinical experience, and patient population considerations",
        )

    def _manufacturing_risk(self, data: CompanyData) -> ScoringFactor:
        programs = data.pipeline.programs
        score = 3.5

        for program in programs:
            match = _first_match(
                program.mechanism,
                HIGH_COMPLEXITY_MANUFACTURING,
                MODERATE_COMPLEXITY_MANUFACTURING,
                LOW_COMPLEXITY_MANUFACTURING,
            )
            score += {0: -0.4, 1: -0.1, 2: 0.2}.get(match, 0.0)

        if any_contains(data.areas_lower, COMPLEX_MANUFACTURING_AREAS):
            score -= 0.3
        if any(
            contains_any(p.mechanism, SCALE_UP_CHALLENGES) or contains_any(p.indication, SCALE_UP_CHALLENGES)
            for p in programs
        ):
            score -= 0.3
        if any_contains((p.mechanism for p in programs), COMPLEX_SUPPLY_CHAIN):
            score -= 0.2

        return base.create_factor(
            "Manufacturing Risk", 0.10, score,
            "Manufacturing risk assessment based on production complexity, scale-up "
            "challenges, and supply chain requirements",
        )

    def _timeline_risk(self, data: CompanyData) -> ScoringFactor:
        strategy = data.regulatory.regulatory_strategy
        timeline = strategy.timeline
        trials = data.regulatory.clinical_trials

        score = 2.0
        for limit, value in TIMELINE_TABLE:
            if 0 <= timeline <= limit:
                score = value
                break

        low, high = EXPECTED_TIMELINE[data.stage]
        if low <= timeline <= high:
            score += 0.2
        elif timeline > high:
            score -= 0.3
        else:
            score -= 0.1

        today = self.today()
        if any(
            t.expected_completion is not None
            and t.expected_completion < today
            and t.status != TrialStatus.COMPLETED
            for t in trials
        ):
            score -= 0.4
        if any((t.patient_count or 0) > 500 for t in trials):
            score -= 0.2
        if any_contains(data.areas_lower, ["rare", "orphan"]):
            score -= 0.1
        score += PATHWAY_TIMELINE_ADJUSTMENT[strategy.pathway]

        return base.create_factor(
            "Timeline Risk", 0.10, score,
            f"Timeline risk assessment based on regulatory timeline ({timeline} months), "
            "development stage consistency, trial execution history, and pathway advantages",
        )

    # ── quality & warnings ────────────────────────────────────────────────────

    def _data_quality(self, data: CompanyData) -> float:
        strategy = data.regulatory.regulatory_strategy
        trials = data.regulatory.clinical_trials
        quality = 1.0
        if not strategy.risks:
            quality -= 0.2
        if not strategy.mitigations:
            quality -= 0.1
        if trials:
            dated = sum(
                1 for t in trials if t.start_date is not None and t.expected_completion is not None
            )
            quality *= 0.7 + 0.3 * (dated / len(trials))
        if strategy.timeline <= 0 or strategy.timeline > 200:
            quality -= 0.3
        return max(0.0, min(1.0, quality))

    def _pillar_warnings(self, data: CompanyData) -> List[str]:
        warnings = []
        programs = data.pipeline.programs
        if any_contains(data.areas_lower, HIGH_RISK_AREAS):
            warnings.append("High-risk therapeutic area may face additional regulatory scrutiny")
        if any_contains((p.mechanism for p in programs), NOVEL_MECHANISMS):
            warnings.append(
                "Novel mechanism may require additional regulatory guidance and longer review times"
            )
        if any(t.status == TrialStatus.SUSPENDED for t in data.regulatory.clinical_trials):
            warnings.append("Suspended clinical trials may indicate safety or efficacy concerns")
        minimum = OPTIMISTIC_TIMELINE.get(data.stage)
        if minimum is not None and data.regulatory.regulatory_strategy.timeline < minimum:
            warnings.append("Regulatory timeline may be optimistic for current development stage")
        if any_contains((p.mechanism for p in programs), COMPLEX_MANUFACTURING_MECHANISMS):
            warnings.append(
                "Complex manufacturing may require extensive regulatory oversight and validation"
            )
        if len(data.unique_indications) > 3:
            warnings.append(
                "Multiple indications may require separate regulatory submissions and increase complexity"
            )
        return warnings
