"""The six scoring pillars, in canonical order."""
from datetime import date
from typing import Callable, Dict, Optional

from bd_scoring.models.enums import Pillar

from .asset_quality import AssetQualityPillar
from .base import ScoringPillar
from .capital_intensity import CapitalIntensityPillar
from .financial_readiness import FinancialReadinessPillar
from .market_outlook import MarketOutlookPillar
from .regulatory_risk import RegulatoryRiskPillar
from .strategic_fit import StrategicFitPillar

PILLAR_REGISTRY: Dict[Pillar, type] = {
    Pillar.ASSET_QUALITY: AssetQualityPillar,
    Pillar.MARKET_OUTLOOK: MarketOutlookPillar,
    Pillar.CAPITAL_INTENSITY: CapitalIntensityPillar,
    Pillar.STRATEGIC_FIT: StrategicFitPillar,
    Pillar.FINANCIAL_READINESS: FinancialReadinessPillar,
    Pillar.REGULATORY_RISK: RegulatoryRiskPillar,
}

# Pillars whose heuristics depend on the current date
_DATED_PILLARS = {Pillar.CAPITAL_INTENSITY, Pillar.FINANCIAL_READINESS, Pillar.REGULATORY_RISK}


def build_pillars(today: Optional[Callable[[], date]] = None) -> Dict[Pillar, ScoringPillar]:
    """Instantiate one pillar per dimension, sharing an optional clock."""
    pillars: Dict[Pillar, ScoringPillar] = {}
    for pillar, cls in PILLAR_REGISTRY.items():
        pillars[pillar] = cls(today=today) if pillar in _DATED_PILLARS else cls()
    return pillars


__all__ = [
    "PILLAR_REGISTRY",
    "build_pillars",
    "ScoringPillar",
    "AssetQualityPillar",
    "MarketOutlookPillar",
    "CapitalIntensityPillar",
    "StrategicFitPillar",
    "FinancialReadinessPillar",
    "RegulatoryRiskPillar",
]
