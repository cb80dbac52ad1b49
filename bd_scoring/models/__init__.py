"""Pydantic models for the BD scoring engine."""

# Enums
from bd_scoring.models.enums import (
    ADVANCED_STAGES,
    DEFAULT_PILLAR_WEIGHTS,
    ApprovalType,
    DevelopmentStage,
    FundingEnvironment,
    FundingType,
    InvestmentRecommendation,
    IPOActivity,
    MilestoneStatus,
    Pillar,
    RegulatoryClimate,
    RegulatoryPathway,
    ReimbursementEnvironment,
    RiskImpact,
    RiskLevel,
    RiskProbability,
    TrialStatus,
    ValidationSeverity,
)

# Company snapshot
from bd_scoring.models.company import (
    RUNWAY_UNBOUNDED,
    Approval,
    BasicInfo,
    ClinicalTrial,
    CompanyData,
    Competitor,
    Financials,
    FundingRound,
    Market,
    MarketDynamics,
    Milestone,
    Pipeline,
    Program,
    ProgramRisk,
    Regulatory,
    RegulatoryStrategy,
)

# Market context
from bd_scoring.models.market import (
    BenchmarkData,
    ComparableCompany,
    IndustryMetrics,
    MarketConditions,
    MarketContext,
)

# Scoring
from bd_scoring.models.scoring import (
    ConfidenceMetrics,
    ExplanationFactor,
    PillarInfo,
    PillarScore,
    PillarScores,
    ScoreExplanation,
    ScoringConfig,
    ScoringFactor,
    ScoringParameters,
    ScoringResult,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
    WeightConfig,
    WeightedScore,
    WeightedScores,
)

__all__ = [
    # Enums
    "ADVANCED_STAGES",
    "DEFAULT_PILLAR_WEIGHTS",
    "ApprovalType",
    "DevelopmentStage",
    "FundingEnvironment",
    "FundingType",
    "InvestmentRecommendation",
    "IPOActivity",
    "MilestoneStatus",
    "Pillar",
    "RegulatoryClimate",
    "RegulatoryPathway",
    "ReimbursementEnvironment",
    "RiskImpact",
    "RiskLevel",
    "RiskProbability",
    "TrialStatus",
    "ValidationSeverity",
    # Company
    "RUNWAY_UNBOUNDED",
    "Approval",
    "BasicInfo",
    "ClinicalTrial",
    "CompanyData",
    "Competitor",
    "Financials",
    "FundingRound",
    "Market",
    "MarketDynamics",
    "Milestone",
    "Pipeline",
    "Program",
    "ProgramRisk",
    "Regulatory",
    "RegulatoryStrategy",
    # Market context
    "BenchmarkData",
    "ComparableCompany",
    "IndustryMetrics",
    "MarketConditions",
    "MarketContext",
    # Scoring
    "ConfidenceMetrics",
    "ExplanationFactor",
    "PillarInfo",
    "PillarScore",
    "PillarScores",
    "ScoreExplanation",
    "ScoringConfig",
    "ScoringFactor",
    "ScoringParameters",
    "ScoringResult",
    "ValidationIssue",
    "ValidationResult",
    "ValidationWarning",
    "WeightConfig",
    "WeightedScore",
    "WeightedScores",
]
