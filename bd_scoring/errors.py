"""Error taxonomy for the scoring engine.

Only critical defects are raised. Non-critical validation issues, low
confidence and data gaps travel as data on ``ValidationResult`` and
``PillarScore``.
"""
from typing import Optional


class ScoringError(Exception):
    """Base class for all scoring failures."""

    kind = "scoring_error"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.kind}: {self.reason}"


class InvalidDataError(ScoringError):
    """Company data failed a critical validation check."""

    kind = "invalid_data"


class MissingRequiredFieldError(InvalidDataError):
    """A field a pillar cannot score without is absent."""

    kind = "missing_required_field"

    def __init__(self, field: str, reason: Optional[str] = None):
        super().__init__(reason or f"Required field '{field}' is missing")
        self.field = field


class CalculationError(ScoringError):
    """A numeric computation failed on otherwise valid input."""

    kind = "calculation_error"


class ConfigurationError(ScoringError):
    """Scoring configuration has a critical defect."""

    kind = "configuration_error"
