"""Category Signal Derivation.

Rule-based analyzers that turn a qualitative LLMInsight into one RiskResult
per category. Used when the provider returns signal lists instead of numeric
scores. Each heuristic is a base score plus additive terms, capped at 100,
with a floor once a relevant signal fires.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from .schema import LLMInsight, RiskCategory, RiskResult
from .validator import round_half_up

logger = logging.getLogger(__name__)

MAX_SCORE = 100


def _count_containing(items: Sequence[str], keywords: Sequence[str]) -> int:
    """Count items whose lowercase text contains any keyword."""
    return sum(1 for item in items if any(kw in item.lower() for kw in keywords))


class RiskAnalyzer(ABC):
    """Derives one category's RiskResult from an insight.

    Subclasses hold no mutable state, so one instance can serve concurrent
    calls.
    """

    category: RiskCategory

    @abstractmethod
    def analyze(self, insight: LLMInsight) -> RiskResult:
        """Score the insight for this analyzer's category."""

    def _result(self, score: float, confidence: float, explanation: str) -> RiskResult:
        return RiskResult(
            category=self.category,
            score=int(round_half_up(min(score, MAX_SCORE))),
            confidence=round_half_up(confidence, 2),
            explanation=explanation,
        )


class VisualSimilarityAnalyzer(RiskAnalyzer):
    """Similarity to existing visual works."""

    category = RiskCategory.VISUAL_SIMILARITY

    def analyze(self, insight: LLMInsight) -> RiskResult:
        similarity_count = len(insight.similarity_signals)
        detected_count = len(insight.detected_elements)

        score = 30 + similarity_count * 15 + detected_count * 5
        confidence = min(0.5 + similarity_count * 0.1, 1.0)

        explanation = "The image appears to have a relatively unique visual composition."
        if similarity_count > 0:
            explanation = (
                f"Similarity signals: {', '.join(insight.similarity_signals)}. "
                "The composition may resemble existing visual works, which matters "
                "most in commercial contexts."
            )
            score = max(min(score, MAX_SCORE), 40)

        return self._result(score, confidence, explanation)


class TrademarkAnalyzer(RiskAnalyzer):
    """Logos, symbols and brand references."""

    category = RiskCategory.TRADEMARK

    LOGO_KEYWORDS = ("logo", "symbol", "mark")

    def analyze(self, insight: LLMInsight) -> RiskResult:
        brand_count = len(insight.brand_references)
        logo_like = _count_containing(insight.detected_elements, self.LOGO_KEYWORDS)

        score = 20 + brand_count * 25 + logo_like * 20
        confidence = min(0.4 + brand_count * 0.2, 1.0)

        explanation = "No significant trademark-like elements detected in the image."
        if brand_count > 0 or logo_like > 0:
            found = (
                ", ".join(insight.brand_references)
                if insight.brand_references
                else "elements that may resemble trademarked designs"
            )
            explanation = (
                f"Brand-like content found: {found}. It could be confused with an "
                "existing brand, especially in broad advertising campaigns."
            )
            score = max(min(score, MAX_SCORE), 50)

        return self._result(score, confidence, explanation)


class CopyrightAnalyzer(RiskAnalyzer):
    """Mimicry of a distinctive, protected visual style."""

    category = RiskCategory.COPYRIGHT

    def analyze(self, insight: LLMInsight) -> RiskResult:
        style_count = len(insight.style_indicators)
        similarity_count = len(insight.similarity_signals)

        score = 25 + style_count * 10 + similarity_count * 8
        confidence = min(0.3 + style_count * 0.15, 0.9)

        explanation = "The image does not appear to closely mimic a copyrighted visual style."
        if style_count > 2:
            explanation = (
                f"Style indicators: {', '.join(insight.style_indicators)}. Style alone is "
                "not protected, but close mimicry of a style tied to one creator or "
                "brand can still draw claims."
            )
            score = max(min(score, MAX_SCORE), 45)

        return self._result(score, confidence, explanation)


class CharacterAnalyzer(RiskAnalyzer):
    """Likeness to real people or known characters."""

    category = RiskCategory.CHARACTER

    HUMANOID_KEYWORDS = ("human", "face", "person", "character")

    def analyze(self, insight: LLMInsight) -> RiskResult:
        likeness_count = len(insight.character_likeness)
        humanoid = _count_containing(insight.detected_elements, self.HUMANOID_KEYWORDS)

        score = 15 + likeness_count * 30 + humanoid * 15
        confidence = min(0.35 + likeness_count * 0.25, 1.0)

        explanation = "No significant character or celebrity likeness detected."
        if likeness_count > 0 or humanoid > 0:
            found = (
                ", ".join(insight.character_likeness)
                if insight.character_likeness
                else "humanoid or character-like features"
            )
            explanation = (
                f"The image contains {found}. These could be confused with a real "
                "person or a protected character, particularly in advertising."
            )
            score = max(min(score, MAX_SCORE), 55)

        return self._result(score, confidence, explanation)


class TrainingDataAnalyzer(RiskAnalyzer):
    """Signs the image was generated from copyrighted training data."""

    category = RiskCategory.TRAINING_DATA

    # Provenance can't be read off pixels
    CONFIDENCE = 0.3

    def analyze(self, insight: LLMInsight) -> RiskResult:
        similarity_count = len(insight.similarity_signals)
        style_count = len(insight.style_indicators)

        score = 20 + similarity_count * 8 + style_count * 6

        explanation = (
            "No clear indicators tie the image to specific training data sources."
        )
        if similarity_count > 1 or style_count > 2:
            explanation = (
                "Some characteristics suggest the generator was trained on copyrighted "
                "works. This is hard to establish with certainty and the legal status "
                "of training data is still unsettled."
            )
            score = max(min(score, MAX_SCORE), 35)

        return self._result(score, self.CONFIDENCE, explanation)


class CommercialUsageAnalyzer(RiskAnalyzer):
    """Combined exposure when the image is used commercially."""

    category = RiskCategory.COMMERCIAL_USAGE

    def analyze(self, insight: LLMInsight) -> RiskResult:
        brand_risk = len(insight.brand_references) > 0
        character_risk = len(insight.character_likeness) > 0
        similarity_risk = len(insight.similarity_signals) > 1

        score = 20
        if brand_risk:
            score += 25
        if character_risk:
            score += 20
        if similarity_risk:
            score += 15

        confidence = min(
            0.5
            + (0.15 if brand_risk else 0)
            + (0.15 if character_risk else 0)
            + (0.1 if similarity_risk else 0),
            1.0,
        )

        risk_factors = []
        if brand_risk:
            risk_factors.append("potential brand confusion")
        if character_risk:
            risk_factors.append("character likeness concerns")
        if similarity_risk:
            risk_factors.append("visual similarity to existing works")

        explanation = "The image appears suitable for commercial use with standard precautions."
        if risk_factors:
            explanation = (
                f"Commercial use may carry risk due to {', '.join(risk_factors)}. "
                "Consider legal review before high-visibility campaigns."
            )
            score = max(min(score, MAX_SCORE), 40)

        return self._result(score, confidence, explanation)


# Fixed registry, in display order
ANALYZERS: tuple[RiskAnalyzer, ...] = (
    VisualSimilarityAnalyzer(),
    TrademarkAnalyzer(),
    CopyrightAnalyzer(),
    CharacterAnalyzer(),
    TrainingDataAnalyzer(),
    CommercialUsageAnalyzer(),
)


def get_analyzer(category: RiskCategory) -> RiskAnalyzer:
    """Look up the registered analyzer for a category."""
    for analyzer in ANALYZERS:
        if analyzer.category == category:
            return analyzer
    raise KeyError(f"No analyzer registered for {category}")


def run_analyzers(
    insight: LLMInsight,
    analyzers: Optional[Sequence[RiskAnalyzer]] = None,
    max_workers: Optional[int] = None,
) -> list[RiskResult]:
    """Run analyzers over one insight.

    Args:
        insight: Qualitative provider signals
        analyzers: Analyzers to run (default: the full registry)
        max_workers: Run on a thread pool of this size when set

    Returns:
        One result per analyzer, in the order the analyzers were given
    """
    analyzers = ANALYZERS if analyzers is None else tuple(analyzers)

    if max_workers and max_workers > 1 and len(analyzers) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda a: a.analyze(insight), analyzers))
    else:
        results = [a.analyze(insight) for a in analyzers]

    logger.debug(
        "Derived %d category results: %s",
        len(results),
        ", ".join(f"{r.category_name}={r.score}" for r in results),
    )
    return results
