"""Market context supplied alongside a company snapshot."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import DevelopmentStage, FundingEnvironment, IPOActivity, RegulatoryClimate


class BenchmarkData(BaseModel):
    model_config = ConfigDict(frozen=True)

    therapeutic_area: str
    stage: DevelopmentStage
    average_score: float = Field(..., ge=1, le=5)
    standard_deviation: float = Field(..., ge=0)
    sample_size: int = Field(..., ge=0)


class MarketConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    biotech_index: float = 1000.0
    ipo_activity: IPOActivity = IPOActivity.MODERATE
    funding_environment: FundingEnvironment = FundingEnvironment.MODERATE
    regulatory_climate: RegulatoryClimate = RegulatoryClimate.NEUTRAL


class ComparableCompany(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    ticker: Optional[str] = None
    stage: DevelopmentStage
    therapeutic_areas: List[str] = Field(default_factory=list)
    valuation: Optional[float] = Field(None, ge=0, description="Valuation in $M")


class IndustryMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_valuation: float = 500.0
    median_timeline: int = 36
    success_rate: float = Field(0.15, ge=0, le=1)
    average_runway: int = 18


class MarketContext(BaseModel):
    """Read-only market snapshot used as auxiliary scoring input."""
    model_config = ConfigDict(frozen=True)

    benchmark_data: List[BenchmarkData] = Field(default_factory=list)
    market_conditions: MarketConditions = Field(default_factory=MarketConditions)
    comparable_companies: List[ComparableCompany] = Field(default_factory=list)
    industry_metrics: IndustryMetrics = Field(default_factory=IndustryMetrics)

    @classmethod
    def default(cls) -> "MarketContext":
        """Neutral context used when the caller supplies none."""
        return cls()
