"""Company snapshot models consumed by the scoring pillars.

Monetary amounts are in millions of USD except ``Market.addressable_market``
which is in billions. A ``CompanyData`` instance is treated as read-only for
the duration of an evaluation.
"""
import datetime as dt
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    ApprovalType,
    DevelopmentStage,
    FundingType,
    MilestoneStatus,
    ReimbursementEnvironment,
    RegulatoryPathway,
    RiskImpact,
    RiskProbability,
    TrialStatus,
)

# Runway reported when the company is not burning cash
RUNWAY_UNBOUNDED = 10**6


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ProgramRisk(_Frozen):
    """A risk identified for a pipeline program."""
    description: str
    probability: RiskProbability = RiskProbability.MEDIUM
    impact: RiskImpact = RiskImpact.MEDIUM
    mitigation: Optional[str] = None


class Milestone(_Frozen):
    name: str
    expected_date: dt.date
    status: MilestoneStatus = MilestoneStatus.UPCOMING
    description: Optional[str] = None


class Program(_Frozen):
    """A single pipeline asset."""
    name: str = ""
    indication: str = ""
    stage: DevelopmentStage
    mechanism: str = ""
    differentiators: List[str] = Field(default_factory=list)
    risks: List[ProgramRisk] = Field(default_factory=list)
    timeline: List[Milestone] = Field(default_factory=list)


class BasicInfo(_Frozen):
    name: str = ""
    ticker: Optional[str] = Field(None, max_length=10)
    sector: str = ""
    therapeutic_areas: List[str] = Field(default_factory=list)
    stage: DevelopmentStage
    description: Optional[str] = None

    @field_validator("ticker")
    @classmethod
    def uppercase_ticker(cls, v: Optional[str]) -> Optional[str]:
        """Convert ticker to uppercase."""
        return v.upper() if v else None


class Pipeline(_Frozen):
    programs: List[Program] = Field(default_factory=list)

    @property
    def total_programs(self) -> int:
        return len(self.programs)

    @property
    def lead_program(self) -> Optional[Program]:
        """First program in the pipeline, by convention the most advanced."""
        return self.programs[0] if self.programs else None


class FundingRound(_Frozen):
    type: FundingType
    amount: float = Field(..., description="Round size in $M")
    date: dt.date
    investors: List[str] = Field(default_factory=list)


class Financials(_Frozen):
    cash_position: float = Field(0.0, description="Cash on hand in $M")
    burn_rate: float = Field(0.0, description="Monthly burn in $M")
    last_funding: Optional[FundingRound] = None

    @property
    def runway(self) -> int:
        """Months of cash at the current burn; unbounded when not burning."""
        if self.burn_rate <= 0:
            return RUNWAY_UNBOUNDED
        months = self.cash_position / self.burn_rate
        # inf and NaN fall through to the sentinel
        if not months < RUNWAY_UNBOUNDED:
            return RUNWAY_UNBOUNDED
        return int(months)


class Competitor(_Frozen):
    name: str
    stage: DevelopmentStage
    market_share: Optional[float] = None
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)


class MarketDynamics(_Frozen):
    growth_rate: float = Field(0.0, description="Annual growth as a fraction (0.08 = 8%)")
    barriers: List[str] = Field(default_factory=list)
    drivers: List[str] = Field(default_factory=list)
    reimbursement: ReimbursementEnvironment = ReimbursementEnvironment.UNKNOWN


class Market(_Frozen):
    addressable_market: float = Field(0.0, description="Addressable market in $B")
    competitors: List[Competitor] = Field(default_factory=list)
    market_dynamics: MarketDynamics = Field(default_factory=MarketDynamics)


class Approval(_Frozen):
    indication: str
    region: str
    date: dt.date
    type: ApprovalType


class ClinicalTrial(_Frozen):
    name: str = ""
    phase: DevelopmentStage
    indication: str = ""
    status: TrialStatus
    start_date: Optional[dt.date] = None
    expected_completion: Optional[dt.date] = None
    patient_count: Optional[int] = Field(None, ge=0)


class RegulatoryStrategy(_Frozen):
    pathway: RegulatoryPathway = RegulatoryPathway.STANDARD
    timeline: int = Field(0, description="Months to approval")
    risks: List[str] = Field(default_factory=list)
    mitigations: List[str] = Field(default_factory=list)


class Regulatory(_Frozen):
    approvals: List[Approval] = Field(default_factory=list)
    clinical_trials: List[ClinicalTrial] = Field(default_factory=list)
    regulatory_strategy: RegulatoryStrategy = Field(default_factory=RegulatoryStrategy)


class CompanyData(_Frozen):
    """Complete company snapshot evaluated by the engine."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    basic_info: BasicInfo
    pipeline: Pipeline = Field(default_factory=Pipeline)
    financials: Financials = Field(default_factory=Financials)
    market: Market = Field(default_factory=Market)
    regulatory: Regulatory = Field(default_factory=Regulatory)

    @property
    def stage(self) -> DevelopmentStage:
        return self.basic_info.stage

    @property
    def areas_lower(self) -> List[str]:
        """Therapeutic areas, lower-cased for keyword matching."""
        return [a.lower() for a in self.basic_info.therapeutic_areas]

    @property
    def unique_indications(self) -> set[str]:
        return {p.indication for p in self.pipeline.programs}

    @property
    def unique_mechanisms(self) -> set[str]:
        return {p.mechanism for p in self.pipeline.programs}
