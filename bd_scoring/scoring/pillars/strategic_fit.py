"""Strategic Fit pillar.

Factors (weight)
----------------
  Therapeutic Alignment    0.25   share of areas in strategic focus list
  Capability Complement    0.20   stage base, platform and specialized capabilities
  Synergy Potential        0.20   3 + 0.4·R&D + 0.3·commercial + 0.2·mfg + 0.1·regulatory
  Integration Complexity   0.15   later stage and larger trial load integrate harder
  Geographic Fit           0.10   coverage of US / EU / Japan / China approvals
  Cultural Fit             0.10   innovation profile, stage agility, differentiation
"""
from typing import List, Set

from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import DevelopmentStage, Pillar, RegulatoryPathway, TrialStatus
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
from bd_scoring.scoring.utils import any_contains, bracket, contains_any, count_containing, fraction

METHODOLOGY_RELIABILITY = 0.75

INFO = base.pillar_info(
    Pillar.STRATEGIC_FIT,
    description="Evaluates alignment with acquirer capabilities and integration feasibility",
    default_weight=0.20,
    required=("basic_info.therapeutic_areas", "pipeline.programs"),
    optional=("market.competitors", "regulatory.approvals"),
)

STRATEGIC_AREAS = [
    "oncology", "immunology", "neurology", "rare disease", "ophthalmology",
    "dermatology", "respiratory", "cardiovascular", "metabolic", "infectious disease",
]
HIGH_VALUE_AREAS = ["oncology", "rare disease", "gene therapy", "immunology"]
PLATFORM_MECHANISMS = ["gene therapy", "cell therapy", "antibody platform", "delivery platform"]
SPECIALIZED_AREAS = ["rare disease", "pediatric", "precision medicine", "biomarker"]
CUTTING_EDGE_AREAS = [
    "gene therapy", "cell therapy", "precision medicine",
    "ai/ml", "artificial intelligence", "machine learning",
]
NICHE_AREAS = ["ultra-rare", "orphan", "pediatric only"]
VAGUE_AREAS = ["other", "general"]

ALIGNMENT_TABLE = [(0.8, 4.5), (0.6, 4.0), (0.4, 3.5), (0.2, 2.5)]

CAPABILITY_STAGE_SCORES = {
    DevelopmentStage.PRECLINICAL: 3.5,
    DevelopmentStage.PHASE1: 4.0,
    DevelopmentStage.PHASE2: 4.5,
    DevelopmentStage.PHASE3: 4.0,
    DevelopmentStage.APPROVED: 3.5,
    DevelopmentStage.MARKETED: 3.0,
}

INTEGRATION_STAGE_SCORES = {
    DevelopmentStage.PRECLINICAL: 4.0,
    DevelopmentStage.PHASE1: 3.5,
    DevelopmentStage.PHASE2: 3.0,
    DevelopmentStage.PHASE3: 2.5,
    DevelopmentStage.APPROVED: 2.0,
    DevelopmentStage.MARKETED: 1.5,
}

REGULATORY_SYNERGY = {
    RegulatoryPathway.BREAKTHROUGH: 0.5,
    RegulatoryPathway.FAST_TRACK: 0.5,
    RegulatoryPathway.ORPHAN: 0.5,
    RegulatoryPathway.ACCELERATED: 0.3,
    RegulatoryPathway.STANDARD: 0.1,
}

# region alias → major market
MAJOR_REGIONS = {
    "us": "US", "usa": "US", "united states": "US",
    "eu": "EU", "europe": "EU", "european union": "EU",
    "japan": "Japan", "jp": "Japan",
    "china": "China", "cn": "China",
}
GEOGRAPHY_SCORES = {0: 3.0, 1: 3.5, 2: 4.0, 3: 4.5, 4: 4.5}


def _major_regions(regions: List[str]) -> Set[str]:
    return {MAJOR_REGIONS[r.strip().lower()] for r in regions if r.strip().lower() in MAJOR_REGIONS}


class StrategicFitPillar:
    """Score how well a company fits a strategic acquirer."""

    info = INFO

    def validate(self, data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []

        if not data.basic_info.therapeutic_areas:
            errors.append(base.critical(
                "basic_info.therapeutic_areas",
                "Therapeutic areas are required for strategic alignment assessment",
            ))
        if not data.pipeline.programs:
            errors.append(base.critical(
                "pipeline.programs",
                "Pipeline programs are required for capability assessment",
            ))
        if not data.market.competitors:
            warnings.append(base.warning(
                "market.competitors",
                "No competitor data provided",
                "Competitive context improves commercial synergy assessment",
            ))
        if data.stage != DevelopmentStage.PRECLINICAL and not data.regulatory.approvals:
            warnings.append(base.warning(
                "regulatory.approvals",
                "No regulatory approvals or designations listed",
                "Approvals and designations inform geographic and regulatory fit",
            ))

        return base.validate_pillar(self.info, data, errors, warnings)

    def score(self, data: CompanyData, context: MarketContext) -> PillarScore:
        base.ensure_scorable(self.info, data, self.validate(data))

        factors = [
            self._therapeutic_alignment(data),
            self._capability_complement(data),
            self._synergy_potential(data),
            self._integration_complexity(data),
            self._geographic_fit(data),
            self._cultural_fit(data),
        ]
        return base.build_pillar_score(
            self.info,
            data,
            factors,
            data_quality=self._data_quality(data),
            methodology_reliability=METHODOLOGY_RELIABILITY,
            pillar_warnings=self._pillar_warnings(data),
            explanation=(
                "Strategic fit evaluation based on therapeutic alignment, capability complement, "
                "synergy potential, integration complexity, geographic fit, and cultural fit"
            ),
        )

    def explain(self, score: PillarScore) -> ScoreExplanation:
        return base.explain_score(
            self.info,
            score,
            methodology=(
                "Strategic fit evaluation comparing therapeutic focus against common "
                "acquirer priorities and estimating R&D, commercial, manufacturing and "
                "regulatory synergies alongside integration effort"
            ),
            limitations=[
                "Acquirer-specific strategy is approximated by a generic focus list",
                "Cultural fit is inferred indirectly from innovation and stage signals",
                "Synergy estimates do not model deal structure or cost savings",
                "Geographic fit relies on reported approvals only",
            ],
        )

    # ── factors ───────────────────────────────────────────────────────────────

    def _therapeutic_alignment(self, data: CompanyData) -> ScoringFactor:
        areas = data.areas_lower
        aligned = count_containing(areas, STRATEGIC_AREAS)
        ratio = fraction(aligned, len(areas))
        score = bracket(ratio, ALIGNMENT_TABLE, 2.0)
        if any_contains(areas, HIGH_VALUE_AREAS):
            score += 0.3
        indications = len(data.unique_indications)
        if indications == 1:
            score += 0.2
        elif indications > 5:
            score -= 0.2
        return base.create_factor(
            "Therapeutic Alignment", 0.25, score,
            f"{aligned} of {len(areas)} therapeutic area(s) in strategic focus",
        )

    def _capability_complement(self, data: CompanyData) -> ScoringFactor:
        score = CAPABILITY_STAGE_SCORES[data.stage]
        mechanisms = [p.mechanism for p in data.pipeline.programs]
        if any_contains(mechanisms, PLATFORM_MECHANISMS):
            score += 0.4
        if len(data.unique_mechanisms) > 2:
            score += 0.2
        if any_contains(data.areas_lower, SPECIALIZED_AREAS):
            score += 0.3
        return base.create_factor(
            "Capability Complement", 0.20, score,
            f"{len(data.unique_mechanisms)} distinct mechanism(s) at {data.stage.value} stage",
        )

    def _synergy_potential(self, data: CompanyData) -> ScoringFactor:
        areas = data.areas_lower
        mechanisms = [p.mechanism for p in data.pipeline.programs]

        rd = 0.0
        if len(data.unique_mechanisms) > 1:
            rd += 0.3
        if any_contains(mechanisms, ["platform", "technology", "delivery system"]):
            rd += 0.4
        if any_contains(areas, ["oncology", "immunology", "neurology"]):
            rd += 0.3

        commercial = 0.0
        if any_contains(areas, ["oncology", "immunology", "dermatology", "ophthalmology"]):
            commercial += 0.4
        if len(data.market.competitors) > 2:
            commercial += 0.3
        if any_contains(areas, ["rare disease", "oncology", "neurology"]):
            commercial += 0.3

        manufacturing = 0.0
        if count_containing(mechanisms, ["antibody", "protein"]) > 1:
            manufacturing += 0.4
        oral = count_containing(mechanisms, ["small molecule", "oral"])
        if oral > 1:
            manufacturing += 0.3
        if oral > 0:
            manufacturing += 0.3

        regulatory = REGULATORY_SYNERGY[data.regulatory.regulatory_strategy.pathway]
        if data.regulatory.approvals:
            regulatory += 0.3

        rd, commercial = min(1.0, rd), min(1.0, commercial)
        manufacturing, regulatory = min(1.0, manufacturing), min(1.0, regulatory)
        score = 3.0 + 0.4 * rd + 0.3 * commercial + 0.2 * manufacturing + 0.1 * regulatory

        return base.create_factor(
            "Synergy Potential", 0.20, score,
            f"Synergy indices R&D {rd:.1f}, commercial {commercial:.1f}, "
            f"manufacturing {manufacturing:.1f}, regulatory {regulatory:.1f}",
        )

    def _integration_complexity(self, data: CompanyData) -> ScoringFactor:
        score = INTEGRATION_STAGE_SCORES[data.stage]
        trials = data.regulatory.clinical_trials
        running = sum(1 for t in trials if t.status in (TrialStatus.ACTIVE, TrialStatus.RECRUITING))
        if running > 3:
            score -= 0.5
        elif running == 0:
            score += 0.3

        programs = len(data.pipeline.programs)
        if programs > 5:
            score -= 0.3
        elif programs == 1:
            score += 0.2

        if any((t.patient_count or 0) > 500 for t in trials):
            score -= 0.2

        return base.create_factor(
            "Integration Complexity", 0.15, score,
            f"{running} running trial(s) and {programs} program(s) to integrate",
        )

    def _geographic_fit(self, data: CompanyData) -> ScoringFactor:
        regions = [a.region for a in data.regulatory.approvals]
        covered = _major_regions(regions)
        score = GEOGRAPHY_SCORES[len(covered)]
        if any((t.patient_count or 0) > 300 for t in data.regulatory.clinical_trials):
            score += 0.2
        if "US" in covered:
            score += 0.2
        return base.create_factor(
            "Geographic Fit", 0.10, score,
            "Approved in major markets: " + (", ".join(sorted(covered)) if covered else "none"),
        )

    def _cultural_fit(self, data: CompanyData) -> ScoringFactor:
        innovation = min(4.5, 3.0 + 0.2 * len(data.unique_mechanisms))
        score = (3.5 + innovation) / 2
        if data.stage in (DevelopmentStage.PRECLINICAL, DevelopmentStage.PHASE1):
            score += 0.2
        elif data.stage == DevelopmentStage.PHASE2:
            score += 0.1
        else:
            score -= 0.1
        if any(p.differentiators for p in data.pipeline.programs):
            score += 0.2
        if any_contains(data.areas_lower, CUTTING_EDGE_AREAS):
            score += 0.3
        return base.create_factor(
            "Cultural Fit", 0.10, score,
            f"Innovation index {innovation:.1f} at {data.stage.value} stage",
        )

    # ── quality & warnings ────────────────────────────────────────────────────

    def _data_quality(self, data: CompanyData) -> float:
        quality = 1.0
        if any(contains_any(a, VAGUE_AREAS) for a in data.areas_lower):
            quality -= 0.2
        programs = data.pipeline.programs
        if programs:
            quality *= fraction(sum(1 for p in programs if p.differentiators), len(programs))
        competitors = data.market.competitors
        if competitors:
            with_strengths = fraction(sum(1 for c in competitors if c.strengths), len(competitors))
            quality *= 0.8 + 0.2 * with_strengths
        return max(0.0, quality)

    def _pillar_warnings(self, data: CompanyData) -> List[str]:
        warnings = []
        if any_contains(data.areas_lower, NICHE_AREAS):
            warnings.append("Niche therapeutic focus may limit the pool of strategic acquirers")
        programs = len(data.pipeline.programs)
        if programs == 1:
            warnings.append("Single program dependency increases strategic risk")
        if data.stage == DevelopmentStage.PRECLINICAL and programs < 2:
            warnings.append("Early-stage pipeline offers limited strategic optionality")
        running = sum(
            1 for t in data.regulatory.clinical_trials
            if t.status in (TrialStatus.ACTIVE, TrialStatus.RECRUITING)
        )
        if running > 5:
            warnings.append("Large active trial portfolio increases integration complexity")
        if not data.regulatory.approvals:
            warnings.append("No approved regions; geographic footprint is unproven")
        return warnings
