"""Provider Payload Normalizer.

Normalizes raw provider output into the typed RiskScores and LLMInsight
models. Handles the messy reality of provider JSON: mixed key styles, numbers
sent as strings, bare values where objects were expected, and free-text
answers instead of structured lists.
"""

import logging
import math
import re
from typing import Any, Optional

from .schema import CategoryScore, LLMInsight, RiskCategory, RiskScores

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 5


class PayloadNormalizer:
    """Normalizes provider payloads into RiskScores and LLMInsight."""

    # Insight field -> accepted payload keys
    INSIGHT_KEYS = {
        "visual_description": ["visual_description", "visualDescription", "description"],
        "detected_elements": ["detected_elements", "detectedElements", "elements"],
        "similarity_signals": ["similarity_signals", "similaritySignals", "similarity"],
        "brand_references": ["brand_references", "brandReferences", "brands"],
        "style_indicators": ["style_indicators", "styleIndicators", "style"],
        "character_likeness": ["character_likeness", "characterLikeness", "characters"],
        "commercial_context": ["commercial_context", "commercialContext", "commercial"],
    }

    # Keyword groups used to locate each list in a free-text answer
    TEXT_KEYWORDS = {
        "detected_elements": ["elements", "detected"],
        "similarity_signals": ["similarity", "resemble"],
        "brand_references": ["brand", "trademark", "logo"],
        "style_indicators": ["style", "aesthetic"],
        "character_likeness": ["character", "human", "likeness"],
        "commercial_context": ["commercial", "marketing", "use"],
    }

    BULLET_PATTERN = re.compile(r"^[ \t]*[-*•][ \t]*(.+)$", re.MULTILINE)
    TEXT_WINDOW = 300
    DESCRIPTION_WINDOW = 200
    DEFAULT_DESCRIPTION = "Generated image with various visual elements"

    def __init__(self, max_items: int = DEFAULT_MAX_ITEMS):
        self.max_items = max_items

    # -------------------------------------------------------------------------
    # Numeric scores
    # -------------------------------------------------------------------------

    def normalize_scores(self, payload: dict[str, Any]) -> RiskScores:
        """Normalize a provider score payload.

        Keys may be camelCase ("trainingData"), snake_case or enum names.
        A bare number is read as the score with no confidence. Unparsable
        values become None so the Score Validator substitutes its defaults.
        """
        pairs: dict[str, CategoryScore] = {}

        for key, value in payload.items():
            category = RiskCategory.from_string(str(key))
            if category is None:
                logger.warning("Ignoring unknown score category %r", key)
                continue

            if isinstance(value, dict):
                pair = CategoryScore(
                    score=self._parse_number(value.get("score")),
                    confidence=self._parse_number(value.get("confidence")),
                )
            elif isinstance(value, (int, float, str)) and not isinstance(value, bool):
                pair = CategoryScore(score=self._parse_number(value))
            else:
                logger.warning("Ignoring malformed %s entry: %r", category.value, value)
                continue

            pairs[category.value.lower()] = pair

        return RiskScores(**pairs)

    @staticmethod
    def _parse_number(value: Any) -> Optional[float]:
        """Parse a number, keeping NaN/out-of-range values for the validator."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            try:
                return float(value)
            except OverflowError:
                # JSON integers have no size limit
                return math.inf if value > 0 else -math.inf
        if isinstance(value, str):
            try:
                return float(value.strip().rstrip("%"))
            except ValueError:
                return None
        return None

    # -------------------------------------------------------------------------
    # Qualitative insight
    # -------------------------------------------------------------------------

    def normalize_insight(self, payload: dict[str, Any]) -> LLMInsight:
        """Normalize a structured insight payload.

        Accepts either key style. A bare string becomes a one-item list,
        blank items are dropped and each list is capped at max_items.
        """
        fields: dict[str, Any] = {}

        for field_name, keys in self.INSIGHT_KEYS.items():
            value = next((payload[k] for k in keys if k in payload), None)
            if value is None:
                continue
            if field_name == "visual_description":
                fields[field_name] = str(value).strip()
            else:
                fields[field_name] = self._clean_list(value)

        return LLMInsight(**fields)

    def _clean_list(self, value: Any) -> list[str]:
        if isinstance(value, str):
            value = [value]
        elif not isinstance(value, (list, tuple)):
            logger.warning("Expected a list of signals, got %s", type(value).__name__)
            return []

        items = []
        for item in value:
            if item is None or (isinstance(item, float) and math.isnan(item)):
                continue
            text = str(item).strip()
            if text:
                items.append(text)
        return items[:self.max_items]

    def parse_insight_text(self, text: str) -> LLMInsight:
        """Extract an insight from a free-text provider answer.

        For each field, bulleted lines within a window after each keyword
        are collected. The description is the text following the first
        "description"/"visual" mention.
        """
        fields: dict[str, Any] = {
            "visual_description": self._extract_section(text, ["description", "visual"])
            or self.DEFAULT_DESCRIPTION,
        }
        for field_name, keywords in self.TEXT_KEYWORDS.items():
            fields[field_name] = self._extract_list(text, keywords)
        return LLMInsight(**fields)

    def _extract_section(self, text: str, keywords: list[str]) -> Optional[str]:
        lower = text.lower()
        for keyword in keywords:
            index = lower.find(keyword)
            if index != -1:
                return text[index:index + self.DESCRIPTION_WINDOW].strip()
        return None

    def _extract_list(self, text: str, keywords: list[str]) -> list[str]:
        lower = text.lower()
        items: list[str] = []
        for keyword in keywords:
            index = lower.find(keyword)
            if index == -1:
                continue
            section = text[index:index + self.TEXT_WINDOW]
            for match in self.BULLET_PATTERN.finditer(section):
                item = match.group(1).strip()
                if item and item not in items:
                    items.append(item)
        return items[:self.max_items]
