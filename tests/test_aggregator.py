"""Tests for the Risk Aggregator.

Covers the weighted-mean algorithm, tier boundaries, the empty-input and
unknown-category edge cases, and the non-deduplicating treatment of
repeated categories.
"""

import pytest

from ip_risk_scorer.aggregator import RiskAggregator
from ip_risk_scorer.config import TierThresholdsConfig
from ip_risk_scorer.schema import RiskCategory, RiskResult, RiskTier
from ip_risk_scorer.weights import CategoryWeightTable


def make_result(category, score: int, confidence: float = 0.5) -> RiskResult:
    return RiskResult(category=category, score=score, confidence=confidence)


def full_set(scores: list[int]) -> list[RiskResult]:
    """One result per category, in RiskCategory order."""
    return [make_result(c, s) for c, s in zip(RiskCategory, scores)]


@pytest.fixture
def aggregator() -> RiskAggregator:
    return RiskAggregator()


class TestAggregateScenarios:
    """Concrete aggregation scenarios."""

    def test_empty_input(self, aggregator: RiskAggregator):
        result = aggregator.aggregate([])

        assert result.overall_score == 0
        assert result.risk_tier == RiskTier.LOW
        assert result.results == []

    def test_single_visual_similarity_signal(self, aggregator: RiskAggregator):
        result = aggregator.aggregate(full_set([80, 0, 0, 0, 0, 0]))

        assert result.overall_score == 12
        assert result.risk_tier == RiskTier.LOW

    def test_all_maximum(self, aggregator: RiskAggregator):
        result = aggregator.aggregate(full_set([100] * 6))

        assert result.overall_score == 100
        assert result.risk_tier == RiskTier.HIGH

    def test_all_maximum_with_uneven_weights(self):
        weights = CategoryWeightTable({RiskCategory.TRADEMARK: 3.7, RiskCategory.CHARACTER: 0.01})
        result = RiskAggregator(weights).aggregate(full_set([100] * 6))

        assert result.overall_score == 100

    def test_mixed_scores(self, aggregator: RiskAggregator):
        # 40*.15 + 60*.25 + 20*.15 + 80*.20 + 10*.10 + 52*.15 = 48.8
        result = aggregator.aggregate(full_set([40, 60, 20, 80, 10, 52]))

        assert result.overall_score == 49
        assert result.risk_tier == RiskTier.MEDIUM


class TestDuplicateCategories:
    """Repeated categories are not merged; each contributes its own weight."""

    def test_duplicates_contribute_independently(self, aggregator: RiskAggregator):
        results = [
            make_result(RiskCategory.TRADEMARK, 100),
            make_result(RiskCategory.TRADEMARK, 0),
        ]

        result = aggregator.aggregate(results)

        assert result.overall_score == 50
        assert result.risk_tier == RiskTier.MEDIUM
        assert len(result.results) == 2

    def test_duplicate_shifts_weighting(self, aggregator: RiskAggregator):
        # A second TRADEMARK entry doubles trademark's share of the mean
        results = [
            make_result(RiskCategory.CHARACTER, 0),
            make_result(RiskCategory.TRADEMARK, 90),
            make_result(RiskCategory.TRADEMARK, 90),
        ]

        result = aggregator.aggregate(results)

        # (0*.20 + 90*.25 + 90*.25) / .70 = 64.29
        assert result.overall_score == 64


class TestUnknownCategory:
    """Unrecognized categories fall back to weight 0.1."""

    def test_unknown_alone(self, aggregator: RiskAggregator):
        result = aggregator.aggregate([make_result("LICENSING", 90)])

        assert result.overall_score == 90
        assert result.results[0].category == "LICENSING"

    def test_unknown_with_known(self, aggregator: RiskAggregator):
        results = [
            make_result(RiskCategory.TRADEMARK, 0),
            make_result("LICENSING", 90),
        ]

        # 90*.1 / (.25 + .1) = 25.71
        assert aggregator.aggregate(results).overall_score == 26


class TestTierBoundaries:
    """Thresholds are inclusive on the lower bound."""

    @pytest.mark.parametrize("score,tier", [
        (0, RiskTier.LOW),
        (29, RiskTier.LOW),
        (30, RiskTier.MEDIUM),
        (59, RiskTier.MEDIUM),
        (60, RiskTier.HIGH),
        (100, RiskTier.HIGH),
    ])
    def test_boundary(self, aggregator: RiskAggregator, score: int, tier: RiskTier):
        result = aggregator.aggregate([make_result(RiskCategory.TRADEMARK, score)])

        assert result.overall_score == score
        assert result.risk_tier == tier

    def test_custom_thresholds(self):
        aggregator = RiskAggregator(thresholds=TierThresholdsConfig(medium=20, high=40))

        assert aggregator.classify(19) == RiskTier.LOW
        assert aggregator.classify(20) == RiskTier.MEDIUM
        assert aggregator.classify(40) == RiskTier.HIGH


class TestAggregateProperties:
    """General properties of aggregate()."""

    def test_rounds_half_up(self):
        weights = CategoryWeightTable({RiskCategory.TRADEMARK: 1.0, RiskCategory.COPYRIGHT: 1.0})
        results = [
            make_result(RiskCategory.TRADEMARK, 24),
            make_result(RiskCategory.COPYRIGHT, 25),
        ]

        assert RiskAggregator(weights).aggregate(results).overall_score == 25

    def test_zero_total_weight(self):
        weights = CategoryWeightTable({c: 0 for c in RiskCategory}, fallback=0)
        result = RiskAggregator(weights).aggregate(full_set([100] * 6))

        assert result.overall_score == 0
        assert result.risk_tier == RiskTier.LOW

    def test_results_keep_input_order(self, aggregator: RiskAggregator):
        results = list(reversed(full_set([10, 20, 30, 40, 50, 60])))

        result = aggregator.aggregate(results)

        assert result.results == results

    def test_idempotent(self, aggregator: RiskAggregator):
        results = full_set([12, 87, 33, 5, 61, 49])

        first = aggregator.aggregate(results)
        second = aggregator.aggregate(results)

        assert first == second
        assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)

    @pytest.mark.parametrize("index", range(6))
    def test_weight_monotonic(self, aggregator: RiskAggregator, index: int):
        base = [35, 70, 10, 55, 90, 0]
        previous = -1
        for score in range(0, 101, 5):
            scores = list(base)
            scores[index] = score
            overall = aggregator.aggregate(full_set(scores)).overall_score
            assert overall >= previous
            previous = overall

    def test_serializes_with_aliases(self, aggregator: RiskAggregator):
        data = aggregator.aggregate(full_set([100] * 6)).model_dump(by_alias=True, mode="json")

        assert data["overallScore"] == 100
        assert data["riskTier"] == "HIGH"
        assert data["results"][0]["category"] == "VISUAL_SIMILARITY"


class TestExplain:
    """Per-result contribution breakdown."""

    def test_shares_sum_to_one(self, aggregator: RiskAggregator):
        contributions = aggregator.explain(full_set([50] * 6))

        assert len(contributions) == 6
        assert sum(c.weight_share for c in contributions) == pytest.approx(1.0, abs=1e-3)

    def test_weighted_score(self, aggregator: RiskAggregator):
        contributions = aggregator.explain([make_result(RiskCategory.TRADEMARK, 80)])

        assert contributions[0].category == "TRADEMARK"
        assert contributions[0].weighted_score == pytest.approx(20.0)
        assert contributions[0].weight_share == 1.0

    def test_empty(self, aggregator: RiskAggregator):
        assert aggregator.explain([]) == []
