"""Risk Aggregator.

Reduces per-category RiskResults to one AnalysisResult: a weighted mean of
the scores, rounded to an integer, and the risk tier it falls into.
"""

from typing import Optional, Sequence

from .config import TierThresholdsConfig
from .schema import AnalysisResult, CategoryContribution, RiskResult, RiskTier
from .validator import round_half_up
from .weights import CategoryWeightTable


class RiskAggregator:
    """Aggregates category results into an overall score and tier.

    Aggregation rules:
    - Each result contributes score * weight; unknown categories use the
      fallback weight
    - Results are not sorted, deduplicated or filtered; two results for the
      same category both count
    - An empty list (or one whose weights are all zero) scores 0
    - Never raises for well-typed input and keeps no state between calls
    """

    def __init__(
        self,
        weights: Optional[CategoryWeightTable] = None,
        thresholds: Optional[TierThresholdsConfig] = None,
    ):
        """Initialize aggregator with optional custom weights and tier thresholds."""
        self.weights = weights or CategoryWeightTable()
        self.thresholds = thresholds or TierThresholdsConfig()

    def aggregate(self, results: Sequence[RiskResult]) -> AnalysisResult:
        """Compute the overall score and tier for a list of results.

        Args:
            results: Per-category results, already validated

        Returns:
            AnalysisResult holding the input results in their original order
        """
        results = list(results)
        weighted_sum = 0.0
        total_weight = 0.0

        for result in results:
            weight = self.weights.weight_for(result.category)
            weighted_sum += result.score * weight
            total_weight += weight

        overall_score = self._overall_score(weighted_sum, total_weight)

        return AnalysisResult(
            overall_score=overall_score,
            risk_tier=self.classify(overall_score),
            results=results,
        )

    def classify(self, score: float) -> RiskTier:
        """Map a 0-100 score to its risk tier."""
        return RiskTier.from_score(score, self.thresholds.medium, self.thresholds.high)

    def explain(self, results: Sequence[RiskResult]) -> list[CategoryContribution]:
        """Break a result list down into per-result weighted contributions."""
        total_weight = sum(self.weights.weight_for(r.category) for r in results)
        contributions = []
        for result in results:
            weight = self.weights.weight_for(result.category)
            contributions.append(CategoryContribution(
                category=result.category_name,
                score=result.score,
                weight=weight,
                weighted_score=round(result.score * weight, 4),
                weight_share=round(weight / total_weight, 4) if total_weight > 0 else 0.0,
            ))
        return contributions

    @staticmethod
    def _overall_score(weighted_sum: float, total_weight: float) -> int:
        if total_weight <= 0:
            return 0
        score = int(round_half_up(weighted_sum / total_weight))
        # Weighted mean of 0-100 scores; clamp float drift at the edges
        return max(0, min(100, score))
