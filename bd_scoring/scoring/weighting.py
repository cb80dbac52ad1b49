"""Pillar weighting: validation, normalization, application and profiles.

Formulas
--------
  contribution_p = raw_score_p × weight_p
  total          = Σ contribution_p
  normalized_p   = weight_p / Σ weight          (1/6 each when Σ weight = 0)

A vector whose sum merely deviates from 1.0 is a warning, not an error, and
``apply_weights`` uses it as given. Only vectors with a critical defect
(a weight outside [0, 1], or all zeros) are normalized before use.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import structlog

from bd_scoring.errors import ConfigurationError
from bd_scoring.models.enums import Pillar, ValidationSeverity
from bd_scoring.models.scoring import (
    PillarScores,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
    WeightConfig,
    WeightedScores,
)

logger = structlog.get_logger(__name__)

MIN_WEIGHT: float = 0.0
MAX_WEIGHT: float = 1.0
WEIGHT_SUM_TOLERANCE: float = 0.001
# |Δ contribution| above which a pillar change is flagged
SIGNIFICANT_CHANGE: float = 0.1

DEFAULT_PROFILES: Dict[str, WeightConfig] = {
    "Conservative": WeightConfig(
        asset_quality=0.20, market_outlook=0.15, capital_intensity=0.15,
        strategic_fit=0.15, financial_readiness=0.20, regulatory_risk=0.15,
    ),
    "Aggressive": WeightConfig(
        asset_quality=0.35, market_outlook=0.30, capital_intensity=0.10,
        strategic_fit=0.15, financial_readiness=0.05, regulatory_risk=0.05,
    ),
    "Balanced": WeightConfig.uniform(),
    "Strategic": WeightConfig(
        asset_quality=0.30, market_outlook=0.20, capital_intensity=0.10,
        strategic_fit=0.30, financial_readiness=0.05, regulatory_risk=0.05,
    ),
}


@dataclass
class WeightImpactAnalysis:
    """Effect of swapping one weight vector for another on the same scores."""

    total_score_difference: float
    percentage_change: float
    pillar_impacts: Dict[str, float] = field(default_factory=dict)
    significant_changes: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_score_difference": round(self.total_score_difference, 4),
            "percentage_change": round(self.percentage_change, 2),
            "pillar_impacts": {k: round(v, 4) for k, v in self.pillar_impacts.items()},
            "significant_changes": sorted(self.significant_changes),
        }


class WeightingEngine:
    """Apply configurable weights to pillar scores and manage named profiles.

    Parameters
    ----------
    default_weights:
        Vector returned by ``current_weights`` until changed.
    weight_sum_tolerance:
        Allowed |Σ weight − 1| before a warning is raised (default 0.001).
    """

    def __init__(
        self,
        default_weights: Optional[WeightConfig] = None,
        weight_sum_tolerance: float = WEIGHT_SUM_TOLERANCE,
    ) -> None:
        self.current_weights = default_weights or WeightConfig()
        self.weight_sum_tolerance = weight_sum_tolerance
        self._profiles: Dict[str, WeightConfig] = dict(DEFAULT_PROFILES)
        logger.info("weighting_engine_initialized",
                    weights=self.current_weights.to_dict(),
                    tolerance=self.weight_sum_tolerance)

    # ── validation & normalization ────────────────────────────────────────────

    def validate_weights(self, weights: WeightConfig) -> ValidationResult:
        """Report bound violations and a zero sum as critical; the rest as warnings."""
        errors: List[ValidationIssue] = []
        warnings: List[ValidationWarning] = []

        for pillar in Pillar:
            value = weights.get(pillar)
            if value < MIN_WEIGHT:
                errors.append(ValidationIssue(
                    field=pillar.value,
                    message="Weight cannot be negative",
                    severity=ValidationSeverity.CRITICAL,
                ))
            if value > MAX_WEIGHT:
                errors.append(ValidationIssue(
                    field=pillar.value,
                    message="Weight cannot exceed 1.0",
                    severity=ValidationSeverity.CRITICAL,
                ))
            if value == 0.0:
                warnings.append(ValidationWarning(
                    field=pillar.value,
                    message="Zero weight will exclude this pillar from scoring",
                    suggestion="Consider using a small positive weight instead",
                ))

        total = weights.total
        if abs(total - 1.0) > self.weight_sum_tolerance:
            if total == 0.0:
                errors.append(ValidationIssue(
                    field="total",
                    message="All weights cannot be zero",
                    severity=ValidationSeverity.CRITICAL,
                ))
            else:
                warnings.append(ValidationWarning(
                    field="total",
                    message=f"Weights sum to {total:.3f} instead of 1.0",
                    suggestion="Weights will be automatically normalized",
                ))

        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            completeness=1.0,
        )

    @staticmethod
    def normalize_weights(weights: WeightConfig) -> WeightConfig:
        """Scale to sum 1.0; an all-zero vector becomes six equal weights."""
        total = weights.total
        if total <= 0:
            return WeightConfig.uniform()
        return WeightConfig(**{p.value: weights.get(p) / total for p in Pillar})

    # ── application ───────────────────────────────────────────────────────────

    def apply_weights(self, scores: PillarScores, weights: WeightConfig) -> WeightedScores:
        """Weighted contributions; normalizes first only when validation fails."""
        validation = self.validate_weights(weights)
        if not validation.is_valid:
            logger.warning(
                "weights_normalized",
                errors=[e.message for e in validation.errors],
                total=round(weights.total, 4),
            )
            weights = self.normalize_weights(weights)
        return self._weighted(scores, weights)

    def apply_weights_with_recalculation(
        self, scores: PillarScores, weights: WeightConfig
    ) -> Tuple[WeightedScores, ValidationResult]:
        """Apply weights and return the validation alongside the result."""
        validation = self.validate_weights(weights)
        return self.apply_weights(scores, weights), validation

    @staticmethod
    def _weighted(scores: PillarScores, weights: WeightConfig) -> WeightedScores:
        return WeightedScores(**{
            p.value: score.raw_score * weights.get(p) for p, score in scores.items()
        })

    # ── profiles ──────────────────────────────────────────────────────────────

    def save_profile(self, name: str, weights: WeightConfig) -> WeightConfig:
        """Validate, normalize and store a named profile.

        Raises:
            ConfigurationError: If the weights carry a critical error.
        """
        validation = self.validate_weights(weights)
        if validation.has_critical_errors:
            message = validation.critical_errors[0].message
            raise ConfigurationError(f"Cannot save invalid weight profile: {message}")
        normalized = self.normalize_weights(weights)
        self._profiles[name] = normalized
        logger.info("weight_profile_saved", profile=name, weights=normalized.to_dict())
        return normalized

    def load_profile(self, name: str) -> Optional[WeightConfig]:
        return self._profiles.get(name)

    def delete_profile(self, name: str) -> bool:
        """Remove a profile; False when it did not exist."""
        removed = self._profiles.pop(name, None) is not None
        if removed:
            logger.info("weight_profile_deleted", profile=name)
        return removed

    def list_profiles(self) -> List[str]:
        return sorted(self._profiles)

    # ── impact ────────────────────────────────────────────────────────────────

    def calculate_weight_impact(
        self,
        scores: PillarScores,
        original_weights: WeightConfig,
        new_weights: WeightConfig,
    ) -> WeightImpactAnalysis:
        """Compare the weighted outcome of two weight vectors on the same scores."""
        before = self.apply_weights(scores, original_weights)
        after = self.apply_weights(scores, new_weights)

        difference = after.total - before.total
        percentage = (difference / before.total) * 100 if before.total > 0 else 0.0
        impacts = {p.value: after.get(p) - before.get(p) for p in Pillar}

        analysis = WeightImpactAnalysis(
            total_score_difference=difference,
            percentage_change=percentage,
            pillar_impacts=impacts,
            significant_changes={
                k: v for k, v in impacts.items() if abs(v) > SIGNIFICANT_CHANGE
            },
        )
        logger.info("weight_impact_calculated", **analysis.to_dict())
        return analysis
