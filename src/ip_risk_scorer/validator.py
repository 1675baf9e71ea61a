"""Score Validator.

Repairs raw (score, confidence) pairs coming from a provider's JSON response
so they are always within range before aggregation. Invalid values never
raise; they degrade to conservative defaults (score 0, confidence 0.5).
"""

import logging
import math
from typing import Any, Optional, Union

from .config import ValidatorDefaultsConfig
from .schema import RiskCategory, RiskResult, RiskScores

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 0
DEFAULT_CONFIDENCE = 0.5


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ``ndigits`` decimals with halves rounded up.

    Python's round() rounds halves to even; a provider score of 12.5 must
    become 13. Only meant for non-negative values.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _as_number(value: Any) -> Optional[float]:
    """Coerce a provider value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def validate_score(score: Any, name: str = "", default: int = DEFAULT_SCORE) -> int:
    """Return ``score`` rounded to an int, or ``default`` if it is invalid.

    Missing, non-numeric, NaN and values outside [0, 100] are invalid.
    """
    number = _as_number(score)
    if number is None or number < 0 or number > 100:
        logger.warning("Invalid %s score: %r, defaulting to %s", name or "unnamed", score, default)
        return default
    return int(round_half_up(number))


def validate_confidence(confidence: Any, name: str = "", default: float = DEFAULT_CONFIDENCE) -> float:
    """Return ``confidence`` rounded to 2 decimals, or ``default`` if invalid.

    Missing, non-numeric, NaN and values outside [0, 1] are invalid.
    """
    number = _as_number(confidence)
    if number is None or number < 0 or number > 1:
        logger.warning("Invalid %s confidence: %r, defaulting to %s", name or "unnamed", confidence, default)
        return default
    return round_half_up(number, 2)


class ScoreValidator:
    """Turns raw provider pairs into validated RiskResults.

    This is the direct-score ingestion path. It is kept apart from the
    rule-based analyzers: a repaired value here is a conservative default,
    never a heuristic estimate.
    """

    def __init__(self, defaults: Optional[ValidatorDefaultsConfig] = None):
        """Initialize validator with optional custom defaults."""
        defaults = defaults or ValidatorDefaultsConfig()
        self.default_score = defaults.default_score
        self.default_confidence = defaults.default_confidence

    def to_risk_result(
        self,
        category: Union[RiskCategory, str],
        score: Any,
        confidence: Any,
        explanation: str = "",
    ) -> RiskResult:
        """Validate one pair and wrap it as a RiskResult."""
        name = category.value if isinstance(category, RiskCategory) else str(category)
        return RiskResult(
            category=category,
            score=validate_score(score, name, default=self.default_score),
            confidence=validate_confidence(confidence, name, default=self.default_confidence),
            explanation=explanation,
        )

    def from_scores(self, scores: RiskScores) -> list[RiskResult]:
        """Validate every category of a provider score payload.

        Returns:
            One RiskResult per category, in RiskCategory order, with empty
            explanations.
        """
        results = []
        for category, pair in scores.items():
            results.append(self.to_risk_result(category, pair.score, pair.confidence))
        return results
