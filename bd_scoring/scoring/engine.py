"""Scoring orchestrator.

Pipeline (fail-fast, no partial results)
----------------------------------------
  1. cache lookup      scoring_{company_id}_{sha256(weights, custom params)}
  2. data validation   critical → InvalidDataError
  3. weight validation critical → ConfigurationError
  4. six pillars       run concurrently on one immutable snapshot
  5. aggregation       canonical pillar order, weights applied
  6. confidence        mean pillar confidence + company/context signals
  7. recommendation    text rules, investment call, risk level
  8. cache store       TTL from settings (default 30 minutes)
"""
import asyncio
import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Sequence

import structlog

from bd_scoring.config import Settings, get_settings
from bd_scoring.errors import ConfigurationError, InvalidDataError
from bd_scoring.models.company import CompanyData
from bd_scoring.models.enums import InvestmentRecommendation, Pillar, ValidationSeverity
from bd_scoring.models.market import MarketContext
from bd_scoring.models.scoring import (
    ConfidenceMetrics,
    PillarScore,
    PillarScores,
    ScoringConfig,
    ScoringResult,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
    WeightConfig,
    WeightedScore,
)
from bd_scoring.scoring import confidence as confidence_model
from bd_scoring.scoring.confidence import ConfidenceCalculator
from bd_scoring.scoring.pillars import ScoringPillar, build_pillars
from bd_scoring.scoring.recommendations import (
    determine_investment_recommendation,
    determine_risk_level,
    generate_recommendations,
)
from bd_scoring.scoring.utils import mean
from bd_scoring.scoring.weighting import WeightingEngine
from bd_scoring.services.cache import CacheKeys, ResultCache
from bd_scoring.services.instrumentation import PerformanceMonitor

logger = structlog.get_logger(__name__)

SCORE_BUCKETS = ["1.0-2.0", "2.0-3.0", "3.0-4.0", "4.0-5.0"]


class ValidationService(Protocol):
    def validate_company_data(self, data: CompanyData) -> ValidationResult: ...


class ResultStore(Protocol):
    def get(self, key: str, namespace: str = ...) -> Optional[ScoringResult]: ...

    def set(self, key: str, value: ScoringResult, ttl: Optional[float] = ..., namespace: str = ...) -> object: ...


@dataclass
class ScoringStatistics:
    """Summary of a batch of scoring results."""

    total_companies: int
    average_score: float
    average_confidence: float
    score_distribution: Dict[str, int] = field(default_factory=dict)
    recommendation_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_companies": self.total_companies,
            "average_score": round(self.average_score, 4),
            "average_confidence": round(self.average_confidence, 4),
            "score_distribution": dict(self.score_distribution),
            "recommendation_distribution": dict(self.recommendation_distribution),
        }


def _score_bucket(score: float) -> Optional[str]:
    if 1.0 <= score < 2.0:
        return "1.0-2.0"
    if 2.0 <= score < 3.0:
        return "2.0-3.0"
    if 3.0 <= score < 4.0:
        return "3.0-4.0"
    if 4.0 <= score <= 5.0:
        return "4.0-5.0"
    return None


class ScoringEngine:
    """Evaluate companies across the six pillars.

    Parameters
    ----------
    market_context:
        Snapshot handed to every pillar (default: neutral context).
    validation_service:
        Company-level validator; basic checks are used when omitted.
    cache:
        Result store with ``get``/``set`` (default: in-memory ``ResultCache``).
    monitor:
        Performance monitor wrapping the evaluation and each pillar.
    weighting_engine / confidence_calculator:
        Aggregation collaborators.
    pillars:
        Pillar instances keyed by ``Pillar`` (default: ``build_pillars()``).
    """

    def __init__(
        self,
        market_context: Optional[MarketContext] = None,
        validation_service: Optional[ValidationService] = None,
        cache: Optional[ResultStore] = None,
        monitor: Optional[PerformanceMonitor] = None,
        weighting_engine: Optional[WeightingEngine] = None,
        confidence_calculator: Optional[ConfidenceCalculator] = None,
        settings: Optional[Settings] = None,
        pillars: Optional[Dict[Pillar, ScoringPillar]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.market_context = market_context or MarketContext.default()
        self.validation_service = validation_service
        self.cache = cache if cache is not None else ResultCache(self.settings)
        self.monitor = monitor or PerformanceMonitor(self.settings)
        self.weighting_engine = weighting_engine or WeightingEngine(
            weight_sum_tolerance=self.settings.weight_sum_tolerance,
        )
        self.confidence_calculator = confidence_calculator or ConfidenceCalculator(
            model_accuracy=self.settings.model_accuracy,
        )
        self.pillars = pillars or build_pillars()
        missing = [p.value for p in Pillar if p not in self.pillars]
        if missing:
            raise ConfigurationError(f"Missing pillar implementations: {', '.join(missing)}")
        logger.info("scoring_engine_initialized",
                    cache=type(self.cache).__name__,
                    basic_validation=self.validation_service is None)

    # ── market context ────────────────────────────────────────────────────────

    def update_market_context(self, context: MarketContext) -> None:
        self.market_context = context
        logger.info(
            "market_context_updated",
            comparables=len(context.comparable_companies),
            benchmarks=len(context.benchmark_data),
        )

    def get_current_market_context(self) -> MarketContext:
        return self.market_context

    # ── evaluation ────────────────────────────────────────────────────────────

    async def evaluate_company(
        self, data: CompanyData, config: Optional[ScoringConfig] = None
    ) -> ScoringResult:
        """Score one company; raises on critical data or weight defects."""
        config = config or ScoringConfig.default()
        return await self.monitor.measure_async("scoring", lambda: self._evaluate(data, config))

    async def _evaluate(self, data: CompanyData, config: ScoringConfig) -> ScoringResult:
        cache_key = CacheKeys.scoring(data.id, self.config_hash(config))
        cached = self.cache.get(cache_key, namespace=CacheKeys.SCORING)
        if cached is not None:
            logger.info("scoring_cache_hit", company_id=data.id, cache_key=cache_key)
            return cached

        validation = self.validate_input_data(data)
        if validation.has_critical_errors:
            messages = ", ".join(e.message for e in validation.critical_errors)
            logger.warning("company_validation_failed", company_id=data.id, errors=messages)
            raise InvalidDataError(f"Critical data validation errors: {messages}")

        weight_validation = self.weighting_engine.validate_weights(config.weights)
        if weight_validation.has_critical_errors:
            messages = ", ".join(e.message for e in weight_validation.critical_errors)
            logger.warning("scoring_config_invalid", config=config.name, errors=messages)
            raise ConfigurationError(f"Invalid scoring configuration: {messages}")

        context = self.market_context
        pillar_scores = await self._score_pillars(data, context)

        weighted = self.weighting_engine.apply_weights(pillar_scores, config.weights)
        overall_score = weighted.total
        confidence = self.calculate_confidence(pillar_scores, data)

        result = ScoringResult(
            company_id=data.id,
            overall_score=overall_score,
            pillar_scores=pillar_scores,
            weighted_scores=weighted,
            confidence=confidence,
            recommendations=generate_recommendations(pillar_scores, weighted, confidence),
            timestamp=datetime.now(timezone.utc),
            investment_recommendation=determine_investment_recommendation(overall_score, confidence),
            risk_level=determine_risk_level(pillar_scores, confidence),
        )

        self.cache.set(
            cache_key,
            result,
            ttl=self.settings.cache_ttl_scoring,
            namespace=CacheKeys.SCORING,
        )
        logger.info("company_scored", config=config.name, **result.to_dict())
        return result

    async def _score_pillars(self, data: CompanyData, context: MarketContext) -> PillarScores:
        """Run every pillar concurrently; the first failure fails the call."""

        async def run(pillar: Pillar) -> PillarScore:
            impl = self.pillars[pillar]
            return await self.monitor.measure_async(
                f"pillar_{pillar.value}",
                lambda: asyncio.to_thread(impl.score, data, context),
            )

        order = list(Pillar)
        scores = await asyncio.gather(*(run(p) for p in order))
        return PillarScores.from_mapping(dict(zip(order, scores)))

    async def evaluate_companies(
        self,
        companies: Sequence[CompanyData],
        config: Optional[ScoringConfig] = None,
    ) -> List[ScoringResult]:
        """Best-effort batch: failed companies are logged and skipped."""
        results: List[ScoringResult] = []
        for company in companies:
            try:
                results.append(await self.evaluate_company(company, config))
            except Exception as e:
                logger.warning(
                    "batch_company_failed",
                    company_id=company.id,
                    company=company.basic_info.name,
                    error=str(e),
                )
        logger.info("batch_scored", requested=len(companies), scored=len(results))
        return results

    # ── validation ────────────────────────────────────────────────────────────

    def validate_input_data(self, data: CompanyData) -> ValidationResult:
        if self.validation_service is not None:
            return self.validation_service.validate_company_data(data)
        return self._basic_validation(data)

    @staticmethod
    def _basic_validation(data: CompanyData) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []
        if not data.basic_info.name:
            errors.append(ValidationIssue(
                field="basic_info.name", message="Company name is required", severity=ValidationSeverity.CRITICAL,
            ))
        if not data.basic_info.therapeutic_areas:
            warnings.append(ValidationWarning(
                field="basic_info.therapeutic_areas",
                message="No therapeutic areas specified",
                suggestion="Add therapeutic areas for better scoring accuracy",
            ))
        if not data.pipeline.programs:
            errors.append(ValidationIssue(
                field="pipeline.programs",
                message="At least one pipeline program is required",
                severity=ValidationSeverity.CRITICAL,
            ))
        if data.financials.cash_position <= 0:
            warnings.append(ValidationWarning(
                field="financials.cash_position",
                message="Cash position not specified or zero",
                suggestion="Provide current cash position for financial analysis",
            ))
        if data.financials.burn_rate <= 0:
            warnings.append(ValidationWarning(
                field="financials.burn_rate",
                message="Burn rate not specified",
                suggestion="Provide monthly burn rate for runway calculation",
            ))
        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            completeness=confidence_model.data_completeness(data),
        )

    # ── aggregation ───────────────────────────────────────────────────────────

    def calculate_weighted_score(self, scores: PillarScores, weights: WeightConfig) -> WeightedScore:
        weighted = self.weighting_engine.apply_weights(scores, weights)
        return WeightedScore(
            score=weighted.total,
            breakdown=weighted.to_dict(),
            confidence=confidence_model.overall_confidence(scores),
        )

    def calculate_confidence(self, scores: PillarScores, data: CompanyData) -> ConfidenceMetrics:
        return self.confidence_calculator.calculate(scores, data, self.market_context)

    @staticmethod
    def config_hash(config: ScoringConfig) -> str:
        """Deterministic digest of the weights and custom parameters."""
        payload = json.dumps(
            {
                "weights": [config.weights.get(p) for p in Pillar],
                "custom_parameters": sorted(config.custom_parameters.items()),
            },
            separators=(",", ":"),
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    # ── insights & statistics ─────────────────────────────────────────────────

    async def get_pillar_insights(self, data: CompanyData) -> Dict[str, str]:
        """Display name → explanation summary for each pillar."""
        context = self.market_context

        def insight(pillar: Pillar) -> str:
            impl = self.pillars[pillar]
            return impl.explain(impl.score(data, context)).summary

        order = list(Pillar)
        summaries = await asyncio.gather(*(asyncio.to_thread(insight, p) for p in order))
        return {p.display_name: summary for p, summary in zip(order, summaries)}

    @staticmethod
    def get_scoring_statistics(results: Sequence[ScoringResult]) -> ScoringStatistics:
        if not results:
            return ScoringStatistics(total_companies=0, average_score=0.0, average_confidence=0.0)

        score_distribution = {bucket: 0 for bucket in SCORE_BUCKETS}
        recommendation_distribution = {r.label: 0 for r in InvestmentRecommendation}
        for result in results:
            bucket = _score_bucket(result.overall_score)
            if bucket is not None:
                score_distribution[bucket] += 1
            recommendation_distribution[result.investment_recommendation.label] += 1

        return ScoringStatistics(
            total_companies=len(results),
            average_score=mean([r.overall_score for r in results]),
            average_confidence=mean([r.confidence.overall for r in results]),
            score_distribution=score_distribution,
            recommendation_distribution=recommendation_distribution,
        )
