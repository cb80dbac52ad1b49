"""Market Outlook pillar.

Factors (weight)
----------------
  Market Size              0.30   ≥$10B→5, ≥$5B→4, ≥$1B→3, ≥$0.1B→2, else 1
  Growth Potential         0.25   growth bracket ± 0.5 for driver/barrier balance
  Competitive Landscape    0.20   competitor count, maturity and weaknesses
  Regulatory Pathway       0.15   pathway base ± timeline and risk-count adjustments
  Reimbursement            0.05   favorable 5, moderate 3, challenging 2, unknown 2.5
  Market Dynamics          0.05   net drivers − barriers, high-impact driver bonus
"""
from typing import List

from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import (
    ADVANCED_STAGES,
    DevelopmentStage,
    Pillar,
    RegulatoryPathway,
    ReimbursementEnvironment,
)
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
from bd_scoring.scoring.utils import any_contains, bracket

METHODOLOGY_RELIABILITY = 0.80

INFO = base.pillar_info(
    Pillar.MARKET_OUTLOOK,
    description="Assesses addressable market size, growth, competition, and commercial access",
    default_weight=0.20,
    required=("market.addressable_market", "basic_info.therapeutic_areas"),
    optional=("market.competitors", "market.market_dynamics"),
)

MARKET_SIZE_TABLE = [(10.0, 5.0), (5.0, 4.0), (1.0, 3.0), (0.1, 2.0)]
GROWTH_TABLE = [(0.15, 5.0), (0.08, 4.0), (0.03, 3.0), (0.0, 2.0)]
NET_DYNAMICS_TABLE = [(3, 5.0), (1, 4.0), (0, 3.0), (-2, 2.0)]

PATHWAY_SCORES = {
    RegulatoryPathway.BREAKTHROUGH: 5.0,
    RegulatoryPathway.FAST_TRACK: 4.5,
    RegulatoryPathway.ACCELERATED: 4.0,
    RegulatoryPathway.ORPHAN: 4.0,
    RegulatoryPathway.STANDARD: 3.0,
}

REIMBURSEMENT_SCORES = {
    ReimbursementEnvironment.FAVORABLE: 5.0,
    ReimbursementEnvironment.MODERATE: 3.0,
    ReimbursementEnvironment.CHALLENGING: 2.0,
    ReimbursementEnvironment.UNKNOWN: 2.5,
}

HIGH_IMPACT_DRIVERS = ["unmet need", "aging population", "breakthrough", "innovation"]


class MarketOutlookPillar:
    """Score the commercial opportunity of a company's markets."""

    info = INFO

    def validate(self, data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        market = data.market

        if market.addressable_market <= 0:
            errors.append(base.critical(
                "market.addressable_market",
                "Addressable market size must be greater than zero",
            ))
        if not data.basic_info.therapeutic_areas:
            errors.append(base.critical(
                "basic_info.therapeutic_areas",
                "Therapeutic areas are required for market analysis",
            ))

        if market.market_dynamics.growth_rate < 0:
            warnings.append(base.warning(
                "market.market_dynamics.growth_rate",
                "Negative market growth rate",
                "Verify growth assumptions; declining markets reduce outlook",
            ))
        if not market.competitors:
            warnings.append(base.warning(
                "market.competitors",
                "No competitors identified",
                "Competitive analysis improves market outlook accuracy",
            ))
        if market.market_dynamics.reimbursement == ReimbursementEnvironment.UNKNOWN:
            warnings.append(base.warning(
                "market.market_dynamics.reimbursement",
                "Reimbursement environment unknown",
                "Assess payer landscape for the lead indication",
            ))
        if 0 < market.addressable_market < 0.1:
            warnings.append(base.warning(
                "market.addressable_market",
                "Very small addressable market (<$100M)",
                "Consider niche market dynamics and pricing strategies",
            ))

        return base.validate_pillar(self.info, data, errors, warnings)

    def score(self, data: CompanyData, context: MarketContext) -> PillarScore:
        base.ensure_scorable(self.info, data, self.validate(data))

        factors = [
            self._market_size(data),
            self._growth_potential(data),
            self._competitive_landscape(data),
            self._regulatory_pathway(data),
            self._reimbursement(data),
            self._market_dynamics(data),
        ]
        return base.build_pillar_score(
            self.info,
            data,
            factors,
            data_quality=self._data_quality(data),
            methodology_reliability=METHODOLOGY_RELIABILITY,
            pillar_warnings=self._pillar_warnings(data),
            explanation=(
                "Market outlook evaluation based on market size, growth potential, competitive "
                "landscape, regulatory pathway, reimbursement, and market dynamics"
            ),
        )

    def explain(self, score: PillarScore) -> ScoreExplanation:
        return base.explain_score(
            self.info,
            score,
            methodology=(
                "Market outlook evaluation using addressable market sizing, growth rate "
                "analysis, competitive intensity, regulatory pathway advantages, "
                "reimbursement environment and market driver/barrier balance"
            ),
            limitations=[
                "Market size estimates depend on externally reported figures",
                "Growth projections may not reflect future market shifts",
                "Competitor lists may be incomplete for emerging indications",
                "Reimbursement environments vary by geography and payer",
            ],
        )

    # ── factors ───────────────────────────────────────────────────────────────

    def _market_size(self, data: CompanyData) -> ScoringFactor:
        size = data.market.addressable_market
        return base.create_factor(
            "Market Size", 0.30, bracket(size, MARKET_SIZE_TABLE, 1.0),
            f"Addressable market of ${size:.1f}B",
        )

    def _growth_potential(self, data: CompanyData) -> ScoringFactor:
        dynamics = data.market.market_dynamics
        score = bracket(dynamics.growth_rate, GROWTH_TABLE, 1.0)
        drivers, barriers = len(dynamics.drivers), len(dynamics.barriers)
        if drivers > barriers:
            score += 0.5
        elif drivers < barriers:
            score -= 0.5
        return base.create_factor(
            "Growth Potential", 0.25, score,
            f"Annual growth of {dynamics.growth_rate:.1%} with {drivers} driver(s) "
            f"and {barriers} barrier(s)",
        )

    def _competitive_landscape(self, data: CompanyData) -> ScoringFactor:
        competitors = data.market.competitors
        n = len(competitors)
        if n == 0:
            score = 5.0
        elif n <= 2:
            score = 4.0
        elif n <= 5:
            score = 3.0
        elif n <= 10:
            score = 2.0
        else:
            score = 1.0

        advanced = sum(1 for c in competitors if c.stage in ADVANCED_STAGES)
        if advanced > n // 2:
            score -= 1.0
        with_weaknesses = sum(1 for c in competitors if c.weaknesses)
        if with_weaknesses > n // 2:
            score += 0.5

        return base.create_factor(
            "Competitive Landscape", 0.20, score,
            f"{n} competitor(s), {advanced} at phase 3 or later, "
            f"{with_weaknesses} with identified weaknesses",
        )

    def _regulatory_pathway(self, data: CompanyData) -> ScoringFactor:
        strategy = data.regulatory.regulatory_strategy
        score = PATHWAY_SCORES[strategy.pathway]
        if strategy.timeline <= 24:
            score += 0.5
        elif strategy.timeline >= 60:
            score -= 0.5
        if len(strategy.risks) > 3:
            score -= 0.5
        return base.create_factor(
            "Regulatory Pathway", 0.15, score,
            f"{strategy.pathway.value} pathway with {strategy.timeline}-month timeline",
        )

    def _reimbursement(self, data: CompanyData) -> ScoringFactor:
        reimbursement = data.market.market_dynamics.reimbursement
        return base.create_factor(
            "Reimbursement", 0.05, REIMBURSEMENT_SCORES[reimbursement],
            f"Reimbursement environment is {reimbursement.value}",
        )

    def _market_dynamics(self, data: CompanyData) -> ScoringFactor:
        dynamics = data.market.market_dynamics
        net = len(dynamics.drivers) - len(dynamics.barriers)
        score = bracket(net, NET_DYNAMICS_TABLE, 1.0)
        if any_contains(dynamics.drivers, HIGH_IMPACT_DRIVERS):
            score += 0.5
        return base.create_factor(
            "Market Dynamics", 0.05, score,
            f"Net market drivers over barriers: {net:+d}",
        )

    # ── quality & warnings ────────────────────────────────────────────────────

    def _data_quality(self, data: CompanyData) -> float:
        market = data.market
        dynamics = market.market_dynamics
        checks = [
            market.addressable_market > 0,
            bool(market.competitors),
            dynamics.growth_rate != 0,
            bool(dynamics.drivers or dynamics.barriers),
            dynamics.reimbursement != ReimbursementEnvironment.UNKNOWN,
        ]
        return sum(checks) / len(checks)

    def _pillar_warnings(self, data: CompanyData) -> List[str]:
        warnings = []
        market = data.market
        if market.addressable_market < 0.1:
            warnings.append("Small addressable market may limit commercial potential")
        if market.market_dynamics.growth_rate < 0:
            warnings.append("Declining market growth presents commercial headwinds")
        approved = sum(
            1 for c in market.competitors
            if c.stage in (DevelopmentStage.APPROVED, DevelopmentStage.MARKETED)
        )
        if approved > 2:
            warnings.append("Multiple approved competitors create a crowded market")
        if data.regulatory.regulatory_strategy.timeline > 60:
            warnings.append("Extended regulatory timeline delays market entry")
        if market.market_dynamics.reimbursement == ReimbursementEnvironment.CHALLENGING:
            warnings.append("Challenging reimbursement environment may limit market access")
        return warnings
