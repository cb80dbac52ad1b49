"""Rule-based recommendation text, investment call and risk level.

  confidence_adjusted = overall_score × confidence.overall
      ≥4.0 strong_buy, ≥3.5 buy, ≥2.5 hold, ≥2.0 sell, else strong_sell

  avg_risk = ((5 − RR) + (5 − FR) + (5 − MO) + 4 × (1 − confidence.overall)) / 4
      ≥3.5 very_high, ≥2.5 high, ≥1.5 medium, else low
"""
from typing import List

from bd_scoring.models.enums import InvestmentRecommendation, RiskLevel
from bd_scoring.models.scoring import ConfidenceMetrics, PillarScores, WeightedScores

INVESTMENT_THRESHOLDS = [
    (4.0, InvestmentRecommendation.STRONG_BUY),
    (3.5, InvestmentRecommendation.BUY),
    (2.5, InvestmentRecommendation.HOLD),
    (2.0, InvestmentRecommendation.SELL),
]

RISK_THRESHOLDS = [
    (3.5, RiskLevel.VERY_HIGH),
    (2.5, RiskLevel.HIGH),
    (1.5, RiskLevel.MEDIUM),
]

LOW_PILLAR_SCORE = 2.5
STRONG_PILLAR_SCORE = 4.0
LOW_CONFIDENCE = 0.6
LOW_COMPLETENESS = 0.7


def generate_recommendations(
    scores: PillarScores,
    weighted: WeightedScores,
    confidence: ConfidenceMetrics,
) -> List[str]:
    """Ordered advisory strings: overall call, pillar flags, then data caveats."""
    recommendations: List[str] = []

    if weighted.total >= 4.0:
        recommendations.append("Strong candidate for partnership or acquisition")
    elif weighted.total >= 3.0:
        recommendations.append("Moderate investment opportunity with specific strengths")
    else:
        recommendations.append("High-risk investment requiring careful evaluation")

    asset_quality = scores.asset_quality.raw_score
    if asset_quality >= STRONG_PILLAR_SCORE:
        recommendations.append("Strong pipeline assets with competitive advantages")
    elif asset_quality < LOW_PILLAR_SCORE:
        recommendations.append("Pipeline quality concerns require further due diligence")

    if scores.financial_readiness.raw_score < LOW_PILLAR_SCORE:
        recommendations.append("Financial runway concerns - consider timing of investment")
    if scores.regulatory_risk.raw_score < LOW_PILLAR_SCORE:
        recommendations.append("High regulatory risk - monitor clinical trial progress closely")

    if confidence.overall < LOW_CONFIDENCE:
        recommendations.append("Low confidence in scoring - gather additional data before decision")
    if confidence.data_completeness < LOW_COMPLETENESS:
        recommendations.append("Incomplete data - request additional company information")

    return recommendations


def determine_investment_recommendation(
    overall_score: float, confidence: ConfidenceMetrics
) -> InvestmentRecommendation:
    adjusted = overall_score * confidence.overall
    for threshold, recommendation in INVESTMENT_THRESHOLDS:
        if adjusted >= threshold:
            return recommendation
    return InvestmentRecommendation.STRONG_SELL


def determine_risk_level(scores: PillarScores, confidence: ConfidenceMetrics) -> RiskLevel:
    average_risk = (
        (5.0 - scores.regulatory_risk.raw_score)
        + (5.0 - scores.financial_readiness.raw_score)
        + (5.0 - scores.market_outlook.raw_score)
        + 4.0 * (1.0 - confidence.overall)
    ) / 4.0
    for threshold, level in RISK_THRESHOLDS:
        if average_risk >= threshold:
            return level
    return RiskLevel.LOW
