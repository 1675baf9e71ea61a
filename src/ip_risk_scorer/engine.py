"""Scoring Engine - wires the risk pipeline together.

Provider payload -> normalizer -> Score Validator (numeric scores) or
rule-based analyzers (qualitative insight) -> Risk Aggregator.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from .aggregator import RiskAggregator
from .analyzers import run_analyzers
from .config import ScorerConfig, get_config
from .normalizer import PayloadNormalizer
from .schema import AnalysisResult, CategoryContribution, LLMInsight, RiskCategory, RiskScores
from .validator import ScoreValidator
from .weights import CategoryWeightTable

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}


class PayloadError(ValueError):
    """Raised when a provider payload file cannot be read or understood."""


class RiskEngine:
    """Scores provider output for one image.

    The engine holds only immutable collaborators built from configuration,
    so one instance can score any number of payloads.
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        """Initialize engine from the given or global configuration."""
        self.config = config or get_config()
        self.weights = CategoryWeightTable.from_config(self.config.category_weights)
        self.aggregator = RiskAggregator(self.weights, self.config.tier_thresholds)
        self.validator = ScoreValidator(self.config.validator_defaults)
        self.normalizer = PayloadNormalizer(max_items=self.config.insight_parsing.max_items)

    def score_provider_scores(self, scores: Union[RiskScores, dict[str, Any]]) -> AnalysisResult:
        """Score numeric provider output (direct-score path)."""
        if not isinstance(scores, RiskScores):
            scores = self.normalizer.normalize_scores(scores)
        results = self.validator.from_scores(scores)
        return self.aggregator.aggregate(results)

    def score_insight(
        self,
        insight: Union[LLMInsight, dict[str, Any], str],
        max_workers: Optional[int] = None,
    ) -> AnalysisResult:
        """Score qualitative provider output (rule-based analyzer path).

        Args:
            insight: An LLMInsight, a structured insight payload, or the
                provider's free-text answer
            max_workers: Run the analyzers on a thread pool of this size
        """
        if isinstance(insight, str):
            insight = self.normalizer.parse_insight_text(insight)
        elif not isinstance(insight, LLMInsight):
            insight = self.normalizer.normalize_insight(insight)
        results = run_analyzers(insight, max_workers=max_workers)
        return self.aggregator.aggregate(results)

    def score_payload(self, payload: Any, max_workers: Optional[int] = None) -> AnalysisResult:
        """Score a decoded payload, choosing the path by its shape."""
        kind, body = detect_payload(payload)
        logger.info("Scoring %s payload", kind)
        if kind == "insight":
            if not isinstance(body, (dict, str)):
                raise PayloadError("'insight' must be an object or text")
            return self.score_insight(body, max_workers=max_workers)
        if not isinstance(body, dict):
            raise PayloadError("'scores' must be an object")
        return self.score_provider_scores(body)

    def score_file(self, path: Union[str, Path], max_workers: Optional[int] = None) -> AnalysisResult:
        """Load a payload file and score it.

        JSON files are routed by shape; .txt/.md files are treated as a
        free-text provider answer.
        """
        return self.score_payload(load_payload(path), max_workers=max_workers)

    def explain(self, result: AnalysisResult) -> list[CategoryContribution]:
        """Per-category contribution breakdown for a result."""
        return self.aggregator.explain(result.results)


def load_payload(path: Union[str, Path]) -> Any:
    """Read a payload file.

    Raises:
        PayloadError: If the file is missing or is not valid JSON.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PayloadError(f"Cannot read payload {path}: {e}") from e

    if path.suffix.lower() in TEXT_SUFFIXES:
        return content

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise PayloadError(f"Invalid JSON in {path}: {e}") from e


def detect_payload(payload: Any) -> tuple[str, Any]:
    """Work out whether a payload carries scores or an insight.

    Returns:
        ("scores" | "insight", body)

    Raises:
        PayloadError: If the shape matches neither.
    """
    if isinstance(payload, str):
        if not payload.strip():
            raise PayloadError("Empty insight text")
        return "insight", payload

    # Some providers wrap a single object in a list
    if isinstance(payload, list) and len(payload) == 1:
        payload = payload[0]

    if not isinstance(payload, dict):
        raise PayloadError(f"Expected a JSON object, got {type(payload).__name__}")

    if "insight" in payload:
        return "insight", payload["insight"]
    if "scores" in payload:
        return "scores", payload["scores"]

    insight_keys = {k for keys in PayloadNormalizer.INSIGHT_KEYS.values() for k in keys}
    score_keys = sum(1 for k in payload if RiskCategory.from_string(str(k)) is not None)
    insight_hits = sum(1 for k in payload if k in insight_keys)

    if score_keys and score_keys >= insight_hits:
        return "scores", payload
    if insight_hits:
        return "insight", payload

    raise PayloadError(
        "Payload has neither category scores nor insight signals "
        f"(keys: {', '.join(sorted(map(str, payload))) or 'none'})"
    )


def validate_payload(path: Union[str, Path]) -> tuple[bool, list[str]]:
    """Check a payload file without scoring it.

    Returns:
        (is_valid, issues). Values the validator would repair are reported
        as issues too, though the file still counts as valid.
    """
    issues: list[str] = []
    try:
        kind, body = detect_payload(load_payload(path))
    except PayloadError as e:
        return False, [str(e)]

    if kind == "scores":
        if not isinstance(body, dict):
            return False, ["'scores' must be an object"]
        scores = PayloadNormalizer().normalize_scores(body)
        for category, pair in scores.items():
            if pair.score is None:
                issues.append(f"{category.value}: missing or non-numeric score (will default)")
            elif not 0 <= pair.score <= 100:
                issues.append(f"{category.value}: score {pair.score} out of range (will default)")
            if pair.confidence is None:
                issues.append(f"{category.value}: missing confidence (will default)")
            elif not 0 <= pair.confidence <= 1:
                issues.append(f"{category.value}: confidence {pair.confidence} out of range (will default)")
    elif isinstance(body, dict):
        insight = PayloadNormalizer().normalize_insight(body)
        signal_count = sum(
            len(getattr(insight, name))
            for name in PayloadNormalizer.TEXT_KEYWORDS
        )
        if signal_count == 0:
            issues.append("Insight contains no signals; every category will score its base value")
    elif not isinstance(body, str):
        return False, ["'insight' must be an object or text"]

    return True, issues
