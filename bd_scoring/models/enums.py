"""Enumeration types for the BD scoring engine."""
from enum import Enum


class DevelopmentStage(str, Enum):
    """Clinical development stage of a company or program."""
    PRECLINICAL = "preclinical"
    PHASE1 = "phase1"
    PHASE2 = "phase2"
    PHASE3 = "phase3"
    APPROVED = "approved"
    MARKETED = "marketed"


# Stages at or beyond pivotal trials
ADVANCED_STAGES: frozenset[DevelopmentStage] = frozenset({
    DevelopmentStage.PHASE3,
    DevelopmentStage.APPROVED,
    DevelopmentStage.MARKETED,
})

STAGE_ORDER: dict[DevelopmentStage, int] = {
    stage: index for index, stage in enumerate(DevelopmentStage)
}


class FundingType(str, Enum):
    SEED = "seed"
    SERIES_A = "series_a"
    SERIES_B = "series_b"
    SERIES_C = "series_c"
    IPO = "ipo"
    DEBT = "debt"


class ReimbursementEnvironment(str, Enum):
    FAVORABLE = "favorable"
    MODERATE = "moderate"
    CHALLENGING = "challenging"
    UNKNOWN = "unknown"


class ApprovalType(str, Enum):
    FULL = "full"
    CONDITIONAL = "conditional"
    BREAKTHROUGH = "breakthrough"
    FAST_TRACK = "fast_track"
    ORPHAN = "orphan"


class TrialStatus(str, Enum):
    PLANNED = "planned"
    RECRUITING = "recruiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    SUSPENDED = "suspended"
    TERMINATED = "terminated"


class RegulatoryPathway(str, Enum):
    STANDARD = "standard"
    ACCELERATED = "accelerated"
    BREAKTHROUGH = "breakthrough"
    FAST_TRACK = "fast_track"
    ORPHAN = "orphan"


class RiskProbability(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskImpact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MilestoneStatus(str, Enum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"
    CANCELLED = "cancelled"


class IPOActivity(str, Enum):
    HOT = "hot"
    MODERATE = "moderate"
    COLD = "cold"


class FundingEnvironment(str, Enum):
    ABUNDANT = "abundant"
    MODERATE = "moderate"
    CONSTRAINED = "constrained"


class RegulatoryClimate(str, Enum):
    SUPPORTIVE = "supportive"
    NEUTRAL = "neutral"
    RESTRICTIVE = "restrictive"


class ValidationSeverity(str, Enum):
    """Severity of a validation error; only CRITICAL blocks scoring."""
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Pillar(str, Enum):
    """The six scoring pillars, in canonical aggregation order."""
    ASSET_QUALITY = "asset_quality"
    MARKET_OUTLOOK = "market_outlook"
    CAPITAL_INTENSITY = "capital_intensity"
    STRATEGIC_FIT = "strategic_fit"
    FINANCIAL_READINESS = "financial_readiness"
    REGULATORY_RISK = "regulatory_risk"

    @property
    def display_name(self) -> str:
        return PILLAR_DISPLAY_NAMES[self]


PILLAR_DISPLAY_NAMES: dict[Pillar, str] = {
    Pillar.ASSET_QUALITY: "Asset Quality",
    Pillar.MARKET_OUTLOOK: "Market Outlook",
    Pillar.CAPITAL_INTENSITY: "Capital Intensity",
    Pillar.STRATEGIC_FIT: "Strategic Fit",
    Pillar.FINANCIAL_READINESS: "Financial Readiness",
    Pillar.REGULATORY_RISK: "Regulatory Risk",
}


# Default weights per pillar (must sum to 1.0)
DEFAULT_PILLAR_WEIGHTS: dict[Pillar, float] = {
    Pillar.ASSET_QUALITY: 0.25,
    Pillar.MARKET_OUTLOOK: 0.20,
    Pillar.CAPITAL_INTENSITY: 0.15,
    Pillar.STRATEGIC_FIT: 0.20,
    Pillar.FINANCIAL_READINESS: 0.10,
    Pillar.REGULATORY_RISK: 0.10,
}


class InvestmentRecommendation(str, Enum):
    """Five-level ordinal recommendation, weakest first."""
    STRONG_SELL = "strong_sell"
    SELL = "sell"
    HOLD = "hold"
    BUY = "buy"
    STRONG_BUY = "strong_buy"

    @property
    def label(self) -> str:
        return _RECOMMENDATION_LABELS[self]


_RECOMMENDATION_LABELS = {
    InvestmentRecommendation.STRONG_SELL: "Strong Sell",
    InvestmentRecommendation.SELL: "Sell",
    InvestmentRecommendation.HOLD: "Hold",
    InvestmentRecommendation.BUY: "Buy",
    InvestmentRecommendation.STRONG_BUY: "Strong Buy",
}


class RiskLevel(str, Enum):
    """Four-level ordinal risk, lowest first."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"

    @property
    def label(self) -> str:
        return _RISK_LABELS[self]


_RISK_LABELS = {
    RiskLevel.LOW: "Low",
    RiskLevel.MEDIUM: "Medium",
    RiskLevel.HIGH: "High",
    RiskLevel.VERY_HIGH: "Very High",
}
