"""Company-level confidence model.

Formulas
--------
  overall            = mean(pillar confidences)
  data_completeness  = checks passed / 16 (five sections, see below)
  model_accuracy     = configured historical accuracy (default 0.85)
  comparable_quality = bucket(|comparable companies|):
                         ≥10 → 0.9, ≥5 → 0.7, ≥2 → 0.5, else 0.3
"""
from typing import Callable, List, Optional, Tuple

import structlog

from bd_scoring.models.company import CompanyData
from bd_scoring.models.market import MarketContext
from bd_scoring.models.scoring import ConfidenceMetrics, PillarScores
from bd_scoring.scoring.utils import bracket, mean

logger = structlog.get_logger(__name__)

DEFAULT_MODEL_ACCURACY: float = 0.85

COMPARABLE_QUALITY_TABLE = [(10, 0.9), (5, 0.7), (2, 0.5)]
COMPARABLE_QUALITY_FLOOR: float = 0.3

# (section, check) pairs; dynamics and strategy always carry defaults
_COMPLETENESS_CHECKS: List[Tuple[str, Callable[[CompanyData], bool]]] = [
    ("basic_info", lambda d: bool(d.basic_info.name)),
    ("basic_info", lambda d: d.basic_info.ticker is not None),
    ("basic_info", lambda d: bool(d.basic_info.sector)),
    ("basic_info", lambda d: bool(d.basic_info.therapeutic_areas)),
    ("basic_info", lambda d: d.basic_info.description is not None),
    ("pipeline", lambda d: bool(d.pipeline.programs)),
    ("pipeline", lambda d: d.pipeline.lead_program is not None),
    ("financials", lambda d: d.financials.cash_position > 0),
    ("financials", lambda d: d.financials.burn_rate > 0),
    ("financials", lambda d: d.financials.last_funding is not None),
    ("market", lambda d: d.market.addressable_market > 0),
    ("market", lambda d: bool(d.market.competitors)),
    ("market", lambda d: True),
    ("regulatory", lambda d: bool(d.regulatory.approvals)),
    ("regulatory", lambda d: bool(d.regulatory.clinical_trials)),
    ("regulatory", lambda d: True),
]


def data_completeness(data: CompanyData) -> float:
    """Fraction of the company-wide field checklist that is populated."""
    passed = sum(1 for _, check in _COMPLETENESS_CHECKS if check(data))
    return passed / len(_COMPLETENESS_CHECKS)


def comparable_quality(context: MarketContext) -> float:
    return bracket(len(context.comparable_companies), COMPARABLE_QUALITY_TABLE, COMPARABLE_QUALITY_FLOOR)


def overall_confidence(scores: PillarScores) -> float:
    """Arithmetic mean of the six pillar confidences."""
    return mean([score.confidence for _, score in scores.items()])


class ConfidenceCalculator:
    """Combine pillar confidences with company and context quality signals.

    Parameters
    ----------
    model_accuracy:
        Historical accuracy reported on every result (default 0.85).
    """

    def __init__(self, model_accuracy: Optional[float] = None) -> None:
        self.model_accuracy = DEFAULT_MODEL_ACCURACY if model_accuracy is None else model_accuracy
        logger.info("confidence_calculator_initialized", model_accuracy=self.model_accuracy)

    def calculate(
        self,
        scores: PillarScores,
        data: CompanyData,
        context: MarketContext,
    ) -> ConfidenceMetrics:
        metrics = ConfidenceMetrics(
            overall=overall_confidence(scores),
            data_completeness=data_completeness(data),
            model_accuracy=self.model_accuracy,
            comparable_quality=comparable_quality(context),
        )
        logger.debug(
            "confidence_calculated",
            company_id=data.id,
            overall=round(metrics.overall, 4),
            data_completeness=round(metrics.data_completeness, 4),
            comparable_quality=metrics.comparable_quality,
        )
        return metrics
