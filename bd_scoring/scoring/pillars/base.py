"""Shared pillar contract and helpers.

Every pillar is a plain class satisfying ``ScoringPillar``; the helpers here
supply the common pieces (field presence, completeness, confidence, factor
construction, warnings, explanations) by composition.

Formulas
--------
  completeness = present(required ∪ optional) / |required ∪ optional|
  raw_score    = clamp(Σ factor.weight × factor.score, 1, 5)
  confidence   = clamp(0.4 × completeness + 0.3 × data_quality
                       + 0.3 × methodology_reliability, 0, 1)
"""
import math
from typing import Callable, Dict, List, Optional, Protocol, Sequence, runtime_checkable

import structlog

from bd_scoring.errors import CalculationError, InvalidDataError, MissingRequiredFieldError
from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import Pillar, ValidationSeverity
from bd_scoring.models.market import MarketContext
from bd_scoring.models.scoring import (
    ExplanationFactor,
    PillarInfo,
    PillarScore,
    ScoreExplanation,
    ScoringFactor,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)
from bd_scoring.scoring.utils import clamp, weighted_sum

logger = structlog.get_logger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────────
MINIMUM_CONFIDENCE_THRESHOLD: float = 0.3
LOW_COMPLETENESS_VALIDATION: float = 0.7   # validation warning below this
LOW_COMPLETENESS_SCORE: float = 0.5        # score warning below this
LOW_SCORE_THRESHOLD: float = 2.0

COMPLETENESS_WEIGHT: float = 0.4
DATA_QUALITY_WEIGHT: float = 0.3
RELIABILITY_WEIGHT: float = 0.3

DEFAULT_LIMITATIONS: List[str] = [
    "Scoring is based on available data at time of evaluation",
    "Market conditions may change affecting relevance",
    "Subjective factors may influence interpretation",
]


@runtime_checkable
class ScoringPillar(Protocol):
    """Capability every pillar provides."""

    info: PillarInfo

    def validate(self, data: CompanyData) -> ValidationResult: ...

    def score(self, data: CompanyData, context: MarketContext) -> PillarScore: ...

    def explain(self, score: PillarScore) -> ScoreExplanation: ...


# ── Field presence & completeness ─────────────────────────────────────────────

_FIELD_CHECKS: Dict[str, Callable[[CompanyData], bool]] = {
    "basic_info.name": lambda d: bool(d.basic_info.name.strip()),
    "basic_info.sector": lambda d: bool(d.basic_info.sector.strip()),
    "basic_info.therapeutic_areas": lambda d: bool(d.basic_info.therapeutic_areas),
    "basic_info.stage": lambda d: d.basic_info.stage is not None,
    "pipeline.programs": lambda d: bool(d.pipeline.programs),
    "pipeline.lead_program.differentiators": lambda d: bool(
        d.pipeline.lead_program and d.pipeline.lead_program.differentiators
    ),
    "pipeline.lead_program.risks": lambda d: bool(
        d.pipeline.lead_program and d.pipeline.lead_program.risks
    ),
    "financials.cash_position": lambda d: d.financials.cash_position > 0,
    "financials.burn_rate": lambda d: d.financials.burn_rate > 0,
    "financials.runway": lambda d: d.financials.burn_rate > 0,
    "financials.last_funding": lambda d: d.financials.last_funding is not None,
    "market.addressable_market": lambda d: d.market.addressable_market > 0,
    "market.competitors": lambda d: bool(d.market.competitors),
    "market.market_dynamics": lambda d: bool(
        d.market.market_dynamics.drivers or d.market.market_dynamics.barriers
    ),
    "regulatory.approvals": lambda d: bool(d.regulatory.approvals),
    "regulatory.clinical_trials": lambda d: bool(d.regulatory.clinical_trials),
    "regulatory.regulatory_strategy": lambda d: d.regulatory.regulatory_strategy.timeline > 0,
}


def is_field_present(field: str, data: CompanyData) -> bool:
    """Whether ``field`` carries usable data; unknown fields count as present."""
    check = _FIELD_CHECKS.get(field)
    return True if check is None else check(data)


def missing_required_fields(info: PillarInfo, data: CompanyData) -> List[str]:
    return [f for f in info.required_fields if not is_field_present(f, data)]


def data_completeness(info: PillarInfo, data: CompanyData) -> float:
    fields = list(info.required_fields) + list(info.optional_fields)
    if not fields:
        return 1.0
    present = sum(1 for f in fields if is_field_present(f, data))
    return present / len(fields)


# ── Validation ────────────────────────────────────────────────────────────────

def validate_pillar(
    info: PillarInfo,
    data: CompanyData,
    errors: Sequence[ValidationIssue] = (),
    warnings: Sequence[ValidationWarning] = (),
) -> ValidationResult:
    """Combine required-field checks with pillar-specific findings."""
    all_errors = [
        ValidationIssue(
            field=field,
            message=f"Required field '{field}' is missing",
            severity=ValidationSeverity.CRITICAL,
        )
        for field in missing_required_fields(info, data)
    ]
    all_errors.extend(errors)
    all_warnings = list(warnings)

    completeness = data_completeness(info, data)
    if completeness < LOW_COMPLETENESS_VALIDATION:
        all_warnings.append(ValidationWarning(
            field="overall",
            message=f"Data completeness is low ({int(completeness * 100)}%)",
            suggestion="Consider gathering additional data for more accurate scoring",
        ))

    return ValidationResult(
        is_valid=not all_errors,
        errors=all_errors,
        warnings=all_warnings,
        completeness=completeness,
    )


def critical(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, severity=ValidationSeverity.CRITICAL)


def warning(field: str, message: str, suggestion: Optional[str] = None) -> ValidationWarning:
    return ValidationWarning(field=field, message=message, suggestion=suggestion)


def ensure_scorable(info: PillarInfo, data: CompanyData, validation: ValidationResult) -> None:
    """Raise when validation found any critical error.

    Raises:
        MissingRequiredFieldError: If a required field is absent.
        InvalidDataError: For any other critical error.
    """
    if not validation.has_critical_errors:
        return
    messages = "; ".join(e.message for e in validation.critical_errors)
    logger.warning("pillar_validation_failed", pillar=info.pillar.value, errors=messages)
    reason = f"{info.name} scoring requires valid data: {messages}"
    missing = missing_required_fields(info, data)
    if missing:
        raise MissingRequiredFieldError(missing[0], reason)
    raise InvalidDataError(reason)


# ── Scoring helpers ───────────────────────────────────────────────────────────

def create_factor(name: str, weight: float, score: float, rationale: str) -> ScoringFactor:
    """Build a factor with weight clamped to [0, 1] and score to [1, 5]."""
    return ScoringFactor(
        name=name,
        weight=clamp(weight, 0.0, 1.0),
        score=clamp(score),
        rationale=rationale,
    )


def calculate_confidence(
    completeness: float,
    data_quality: float = 1.0,
    methodology_reliability: float = 1.0,
) -> float:
    confidence = (
        completeness * COMPLETENESS_WEIGHT
        + data_quality * DATA_QUALITY_WEIGHT
        + methodology_reliability * RELIABILITY_WEIGHT
    )
    return clamp(confidence, 0.0, 1.0)


def generate_warnings(score: float, confidence: float, completeness: float) -> List[str]:
    warnings: List[str] = []
    if confidence < MINIMUM_CONFIDENCE_THRESHOLD:
        warnings.append("Low confidence score due to insufficient data")
    if completeness < LOW_COMPLETENESS_SCORE:
        warnings.append("Significant data gaps may affect scoring accuracy")
    if score <= LOW_SCORE_THRESHOLD:
        warnings.append("Low score indicates significant concerns")
    return warnings


def build_pillar_score(
    info: PillarInfo,
    data: CompanyData,
    factors: List[ScoringFactor],
    data_quality: float,
    methodology_reliability: float,
    pillar_warnings: List[str],
    explanation: str,
) -> PillarScore:
    """Aggregate factors into a clamped raw score with confidence and warnings."""
    total = weighted_sum([f.score for f in factors], [f.weight for f in factors])
    if math.isnan(total):
        raise CalculationError(f"{info.name} produced a non-numeric score")
    raw_score = clamp(total)
    completeness = data_completeness(info, data)
    confidence = calculate_confidence(
        completeness,
        clamp(data_quality, 0.0, 1.0),
        methodology_reliability,
    )
    warnings = generate_warnings(raw_score, confidence, completeness) + pillar_warnings

    result = PillarScore(
        raw_score=raw_score,
        confidence=confidence,
        factors=factors,
        warnings=warnings,
        explanation=explanation,
    )
    logger.info(
        "pillar_scored",
        pillar=info.pillar.value,
        company_id=data.id,
        raw_score=round(raw_score, 4),
        confidence=round(confidence, 4),
        completeness=round(completeness, 4),
        factors={f.name: round(f.score, 2) for f in factors},
        warning_count=len(warnings),
    )
    return result


# ── Explanation ───────────────────────────────────────────────────────────────

def score_label(score: float) -> str:
    if score >= 4.5:
        return "Excellent"
    if score >= 3.5:
        return "Good"
    if score >= 2.5:
        return "Average"
    if score >= 1.5:
        return "Below Average"
    return "Poor"


def score_summary(info: PillarInfo, score: PillarScore, label: Optional[str] = None) -> str:
    return f"{info.name} scored {score.raw_score:.1f}/5.0 ({label or score_label(score.raw_score)})"


def explain_score(
    info: PillarInfo,
    score: PillarScore,
    methodology: str,
    limitations: Optional[List[str]] = None,
    summary: Optional[str] = None,
) -> ScoreExplanation:
    """Summary, per-factor contribution breakdown, methodology and limitations."""
    return ScoreExplanation(
        summary=summary or score_summary(info, score),
        factors=[
            ExplanationFactor(
                name=f.name,
                contribution=f.weight * f.score,
                explanation=f.rationale,
            )
            for f in score.factors
        ],
        methodology=methodology,
        limitations=list(limitations or DEFAULT_LIMITATIONS),
    )


def pillar_info(
    pillar: Pillar,
    description: str,
    default_weight: float,
    required: Sequence[str],
    optional: Sequence[str],
) -> PillarInfo:
    return PillarInfo(
        pillar=pillar,
        name=pillar.display_name,
        description=description,
        default_weight=default_weight,
        required_fields=tuple(required),
        optional_fields=tuple(optional),
    )
