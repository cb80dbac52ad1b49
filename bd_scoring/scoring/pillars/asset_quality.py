"""Asset Quality pillar.

Evaluates the pipeline itself: breadth, maturity, differentiation,
defensibility, indication size and unmet need.

Factors (weight)
----------------
  Pipeline Strength        0.25   program count table + indication diversity
  Development Stage        0.20   most advanced stage → base score
  Competitive Positioning  0.20   lead differentiators, competitor maturity
  IP Strength              0.10   proprietary / novel keywords, platform reuse
  Indication Size          0.15   addressable-market bracket
  Unmet Medical Need       0.10   area, demand drivers, marketed competition
"""
from typing import List

from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import (
    ADVANCED_STAGES,
    STAGE_ORDER,
    DevelopmentStage,
    Pillar,
    RiskImpact,
    RiskProbability,
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
from bd_scoring.scoring.utils import any_contains, bracket, contains_any, fraction

METHODOLOGY_RELIABILITY = 0.85

INFO = base.pillar_info(
    Pillar.ASSET_QUALITY,
    description="Evaluates pipeline strength, development stage, and competitive positioning",
    default_weight=0.25,
    required=("pipeline.programs", "basic_info.therapeutic_areas", "basic_info.stage"),
    optional=(
        "pipeline.lead_program.differentiators",
        "pipeline.lead_program.risks",
        "market.competitors",
    ),
)

STAGE_SCORES = {
    DevelopmentStage.PRECLINICAL: 2.0,
    DevelopmentStage.PHASE1: 2.5,
    DevelopmentStage.PHASE2: 3.0,
    DevelopmentStage.PHASE3: 4.0,
    DevelopmentStage.APPROVED: 4.5,
    DevelopmentStage.MARKETED: 5.0,
}

MARKET_SIZE_TABLE = [(10.0, 5.0), (5.0, 4.0), (1.0, 3.0), (0.1, 2.0)]

IP_KEYWORDS = ["novel", "first-in-class", "best-in-class", "proprietary", "patent", "platform"]
NOVEL_MECHANISMS = ["gene therapy", "cell therapy", "crispr", "rna", "bispecific", "conjugate", "platform"]
UNMET_NEED_AREAS = ["rare", "orphan", "oncology", "neurology", "alzheimer"]


class AssetQualityPillar:
    """Score the quality of a company's pipeline assets."""

    info = INFO

    def validate(self, data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []

        if not data.pipeline.programs:
            errors.append(base.critical(
                "pipeline.programs",
                "At least one pipeline program is required for asset quality assessment",
            ))
        if not data.basic_info.therapeutic_areas:
            errors.append(base.critical(
                "basic_info.therapeutic_areas",
                "Therapeutic areas are required for competitive positioning analysis",
            ))

        lead = data.pipeline.lead_program
        if lead is not None and not lead.differentiators:
            warnings.append(base.warning(
                "pipeline.lead_program.differentiators",
                "No differentiators specified for lead program",
                "Consider adding key differentiators to improve competitive positioning assessment",
            ))
        for program in data.pipeline.programs:
            if program.stage == DevelopmentStage.PRECLINICAL and not program.indication.strip():
                warnings.append(base.warning(
                    "pipeline.programs.indication",
                    f"Indication not specified for preclinical program: {program.name}",
                    "Specify target indication for more accurate assessment",
                ))

        return base.validate_pillar(self.info, data, errors, warnings)

    def score(self, data: CompanyData, context: MarketContext) -> PillarScore:
        base.ensure_scorable(self.info, data, self.validate(data))

        factors = [
            self._pipeline_strength(data),
            self._development_stage(data),
            self._competitive_positioning(data),
            self._ip_strength(data),
            self._indication_size(data),
            self._unmet_need(data),
        ]
        return base.build_pillar_score(
            self.info,
            data,
            factors,
            data_quality=self._data_quality(data),
            methodology_reliability=METHODOLOGY_RELIABILITY,
            pillar_warnings=self._pillar_warnings(data),
            explanation=(
                "Asset quality evaluation based on pipeline strength, development stage, "
                "competitive positioning, IP strength, indication size, and unmet medical need"
            ),
        )

    def explain(self, score: PillarScore) -> ScoreExplanation:
        return base.explain_score(
            self.info,
            score,
            methodology=(
                "Asset quality evaluation combining pipeline breadth and diversity, "
                "development maturity, lead-program differentiation, intellectual "
                "property signals, indication size and unmet medical need"
            ),
            limitations=[
                "Differentiation is inferred from self-reported program descriptions",
                "Patent estate and freedom-to-operate are not analyzed directly",
                "Clinical data quality is not assessed beyond development stage",
                "Pipeline breadth does not capture individual program probability of success",
            ],
        )

    # ── factors ───────────────────────────────────────────────────────────────

    def _pipeline_strength(self, data: CompanyData) -> ScoringFactor:
        programs = data.pipeline.programs
        count = len(programs)
        if count == 0:
            score = 1.0
        elif count == 1:
            score = 2.5
        elif count <= 3:
            score = 3.5
        elif count <= 6:
            score = 4.0
        else:
            score = 4.5

        indications = {p.indication.strip().lower() for p in programs if p.indication.strip()}
        if len(indications) > 1:
            score += 0.3
        if len(indications) > 3:
            score += 0.2

        return base.create_factor(
            "Pipeline Strength", 0.25, score,
            f"{count} program(s) across {len(indications)} distinct indication(s)",
        )

    def _development_stage(self, data: CompanyData) -> ScoringFactor:
        stages = [data.stage] + [p.stage for p in data.pipeline.programs]
        most_advanced = max(stages, key=STAGE_ORDER.__getitem__)
        return base.create_factor(
            "Development Stage", 0.20, STAGE_SCORES[most_advanced],
            f"Most advanced asset is at {most_advanced.value} stage",
        )

    def _competitive_positioning(self, data: CompanyData) -> ScoringFactor:
        score = 3.0
        lead = data.pipeline.lead_program
        differentiators = len(lead.differentiators) if lead else 0
        score += min(1.0, 0.3 * differentiators)

        competitors = data.market.competitors
        n = len(competitors)
        if n == 0:
            score += 0.5
            detail = "no identified competitors"
        else:
            advanced = sum(1 for c in competitors if c.stage in ADVANCED_STAGES)
            if advanced > n // 2:
                score -= 0.5
            if STAGE_ORDER[data.stage] > max(STAGE_ORDER[c.stage] for c in competitors):
                score += 0.3
            detail = f"{advanced} of {n} competitors at phase 3 or later"

        return base.create_factor(
            "Competitive Positioning", 0.20, score,
            f"Lead program has {differentiators} differentiator(s); {detail}",
        )

    def _ip_strength(self, data: CompanyData) -> ScoringFactor:
        programs = data.pipeline.programs
        score = 2.5
        signals = []
        differentiators = [d for p in programs for d in p.differentiators]
        if any_contains(differentiators, IP_KEYWORDS):
            score += 0.5
            signals.append("proprietary differentiation")
        if any_contains((p.mechanism for p in programs), NOVEL_MECHANISMS):
            score += 0.5
            signals.append("novel modality")
        mechanisms = {p.mechanism.strip().lower() for p in programs if p.mechanism.strip()}
        if mechanisms and len(programs) > len(mechanisms):
            score += 0.3
            signals.append("mechanism reused across programs")

        return base.create_factor(
            "IP Strength", 0.10, score,
            "IP signals: " + (", ".join(signals) if signals else "none identified"),
        )

    def _indication_size(self, data: CompanyData) -> ScoringFactor:
        size = data.market.addressable_market
        return base.create_factor(
            "Indication Size", 0.15, bracket(size, MARKET_SIZE_TABLE, 1.0),
            f"Addressable market of ${size:.1f}B",
        )

    def _unmet_need(self, data: CompanyData) -> ScoringFactor:
        score = 3.0
        if any_contains(data.areas_lower, UNMET_NEED_AREAS):
            score += 0.5
        if any_contains(data.market.market_dynamics.drivers, ["unmet need"]):
            score += 0.5
        marketed = [
            c for c in data.market.competitors
            if c.stage in (DevelopmentStage.APPROVED, DevelopmentStage.MARKETED)
        ]
        if not marketed:
            score += 0.3
        return base.create_factor(
            "Unmet Medical Need", 0.10, score,
            f"{len(marketed)} approved or marketed competitor(s) in the indication",
        )

    # ── quality & warnings ────────────────────────────────────────────────────

    def _data_quality(self, data: CompanyData) -> float:
        programs = data.pipeline.programs
        if not programs:
            return 0.0
        with_differentiators = fraction(sum(1 for p in programs if p.differentiators), len(programs))
        with_risks = fraction(sum(1 for p in programs if p.risks), len(programs))
        return 0.6 * with_differentiators + 0.4 * with_risks

    def _pillar_warnings(self, data: CompanyData) -> List[str]:
        warnings = []
        programs = data.pipeline.programs
        if len(programs) == 1:
            warnings.append("Single-asset pipeline concentrates development risk")
        lead = data.pipeline.lead_program
        if lead is not None:
            if lead.stage == DevelopmentStage.PRECLINICAL:
                warnings.append("Lead program is preclinical; asset value is highly uncertain")
            if any(
                r.probability == RiskProbability.HIGH or r.impact == RiskImpact.CRITICAL
                for r in lead.risks
            ):
                warnings.append("Lead program carries high-probability or critical-impact risks")
            if contains_any(lead.indication, ["undisclosed", "tbd"]):
                warnings.append("Lead program indication is not disclosed")
        return warnings
