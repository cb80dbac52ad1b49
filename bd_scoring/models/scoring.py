"""Scoring value types: factors, pillar scores, weights, results."""
from datetime import datetime
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import (
    DEFAULT_PILLAR_WEIGHTS,
    InvestmentRecommendation,
    Pillar,
    RiskLevel,
    ValidationSeverity,
)


# ── Validation ────────────────────────────────────────────────────────────────

class ValidationIssue(BaseModel):
    """A validation error; ``CRITICAL`` issues block scoring."""
    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR


class ValidationWarning(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    suggestion: Optional[str] = None


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationWarning] = Field(default_factory=list)
    completeness: float = Field(1.0, ge=0, le=1)

    @property
    def critical_errors(self) -> List[ValidationIssue]:
        return [e for e in self.errors if e.severity == ValidationSeverity.CRITICAL]

    @property
    def has_critical_errors(self) -> bool:
        return bool(self.critical_errors)


# ── Pillar output ─────────────────────────────────────────────────────────────

class ScoringFactor(BaseModel):
    """One named, weighted sub-computation inside a pillar."""
    model_config = ConfigDict(frozen=True)

    name: str
    weight: float = Field(..., ge=0, le=1)
    score: float = Field(..., ge=1, le=5)
    rationale: str = ""

    @property
    def contribution(self) -> float:
        return self.weight * self.score


class PillarScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_score: float = Field(..., ge=1, le=5)
    confidence: float = Field(..., ge=0, le=1)
    factors: List[ScoringFactor] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    explanation: Optional[str] = None


class ExplanationFactor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    contribution: float
    explanation: str


class ScoreExplanation(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    factors: List[ExplanationFactor] = Field(default_factory=list)
    methodology: str
    limitations: List[str] = Field(default_factory=list)


class PillarInfo(BaseModel):
    """Static description of a pillar and the fields it reads."""
    model_config = ConfigDict(frozen=True)

    pillar: Pillar
    name: str
    description: str
    default_weight: float = Field(..., ge=0, le=1)
    required_fields: Tuple[str, ...] = ()
    optional_fields: Tuple[str, ...] = ()


class PillarScores(BaseModel):
    """Exactly one ``PillarScore`` per pillar."""
    model_config = ConfigDict(frozen=True)

    asset_quality: PillarScore
    market_outlook: PillarScore
    capital_intensity: PillarScore
    strategic_fit: PillarScore
    financial_readiness: PillarScore
    regulatory_risk: PillarScore

    @classmethod
    def from_mapping(cls, scores: Mapping[Pillar, PillarScore]) -> "PillarScores":
        return cls(**{p.value: scores[p] for p in Pillar})

    def get(self, pillar: Pillar) -> PillarScore:
        return getattr(self, pillar.value)

    def items(self) -> Iterator[Tuple[Pillar, PillarScore]]:
        """Yield (pillar, score) in canonical order."""
        for pillar in Pillar:
            yield pillar, self.get(pillar)


# ── Weights & configuration ───────────────────────────────────────────────────

class WeightConfig(BaseModel):
    """Six pillar weights.

    Bounds are deliberately not enforced here: the weighting engine reports
    out-of-range and degenerate vectors as validation results.
    """
    model_config = ConfigDict(frozen=True)

    asset_quality: float = DEFAULT_PILLAR_WEIGHTS[Pillar.ASSET_QUALITY]
    market_outlook: float = DEFAULT_PILLAR_WEIGHTS[Pillar.MARKET_OUTLOOK]
    capital_intensity: float = DEFAULT_PILLAR_WEIGHTS[Pillar.CAPITAL_INTENSITY]
    strategic_fit: float = DEFAULT_PILLAR_WEIGHTS[Pillar.STRATEGIC_FIT]
    financial_readiness: float = DEFAULT_PILLAR_WEIGHTS[Pillar.FINANCIAL_READINESS]
    regulatory_risk: float = DEFAULT_PILLAR_WEIGHTS[Pillar.REGULATORY_RISK]

    @classmethod
    def from_dict(cls, weights: Mapping[Union[Pillar, str], float]) -> "WeightConfig":
        """Build from a mapping keyed by ``Pillar`` or its value; all six are required."""
        normalized = {Pillar(k).value: float(v) for k, v in weights.items()}
        missing = [p.value for p in Pillar if p.value not in normalized]
        if missing:
            raise ValueError(f"Missing pillar weights: {', '.join(missing)}")
        return cls(**normalized)

    @classmethod
    def uniform(cls) -> "WeightConfig":
        return cls(**{p.value: 1.0 / len(Pillar) for p in Pillar})

    def get(self, pillar: Pillar) -> float:
        return getattr(self, pillar.value)

    def to_dict(self) -> Dict[str, float]:
        return {p.value: self.get(p) for p in Pillar}

    @property
    def total(self) -> float:
        return sum(self.get(p) for p in Pillar)


class ScoringParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    risk_adjustment: float = 1.0
    time_horizon: int = Field(5, ge=1, description="Years")
    discount_rate: float = Field(0.12, ge=0, le=1)
    confidence_threshold: float = Field(0.7, ge=0, le=1)


class ScoringConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Default"
    weights: WeightConfig = Field(default_factory=WeightConfig)
    parameters: ScoringParameters = Field(default_factory=ScoringParameters)
    custom_parameters: Dict[str, str] = Field(default_factory=dict)
    is_default: bool = False

    @classmethod
    def default(cls) -> "ScoringConfig":
        return cls(name="Default", is_default=True)


# ── Aggregation output ────────────────────────────────────────────────────────

class WeightedScores(BaseModel):
    """Per-pillar contribution (raw score × weight)."""
    model_config = ConfigDict(frozen=True)

    asset_quality: float
    market_outlook: float
    capital_intensity: float
    strategic_fit: float
    financial_readiness: float
    regulatory_risk: float

    def get(self, pillar: Pillar) -> float:
        return getattr(self, pillar.value)

    def to_dict(self) -> Dict[str, float]:
        return {p.value: self.get(p) for p in Pillar}

    @property
    def total(self) -> float:
        """Overall score before confidence adjustment."""
        return sum(self.get(p) for p in Pillar)


class WeightedScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float
    breakdown: Dict[str, float]
    confidence: float = Field(..., ge=0, le=1)


class ConfidenceMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: float = Field(..., ge=0, le=1)
    data_completeness: float = Field(..., ge=0, le=1)
    model_accuracy: float = Field(..., ge=0, le=1)
    comparable_quality: float = Field(..., ge=0, le=1)


class ScoringResult(BaseModel):
    """Immutable outcome of one company evaluation."""
    model_config = ConfigDict(frozen=True)

    company_id: str
    overall_score: float
    pillar_scores: PillarScores
    weighted_scores: WeightedScores
    confidence: ConfidenceMetrics
    recommendations: List[str] = Field(default_factory=list)
    timestamp: datetime
    investment_recommendation: InvestmentRecommendation
    risk_level: RiskLevel

    def to_dict(self) -> dict:
        """Flat summary for logging."""
        return {
            "company_id": self.company_id,
            "overall_score": round(self.overall_score, 4),
            "confidence": round(self.confidence.overall, 4),
            "data_completeness": round(self.confidence.data_completeness, 4),
            "investment_recommendation": self.investment_recommendation.value,
            "risk_level": self.risk_level.value,
            "pillar_scores": {
                p.value: round(s.raw_score, 4) for p, s in self.pillar_scores.items()
            },
        }
