"""Tests for the Score Validator."""

import logging
import math

import pytest

from ip_risk_scorer.config import ValidatorDefaultsConfig
from ip_risk_scorer.schema import CategoryScore, RiskCategory, RiskScores
from ip_risk_scorer.validator import (
    ScoreValidator,
    round_half_up,
    validate_confidence,
    validate_score,
)


class TestRoundHalfUp:
    """Tests for the shared rounding helper."""

    def test_half_rounds_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(24.5) == 25

    def test_below_half_rounds_down(self):
        assert round_half_up(12.49) == 12

    def test_two_decimals(self):
        assert round_half_up(0.456, 2) == 0.46
        assert round_half_up(0.123, 2) == 0.12


class TestValidateScore:
    """validate_score keeps in-range values and defaults the rest to 0."""

    @pytest.mark.parametrize("raw,expected", [
        (0, 0),
        (100, 100),
        (42, 42),
        (42.4, 42),
        (42.5, 43),
        (99.6, 100),
        ("55", 55),
    ])
    def test_in_range_is_rounded(self, raw, expected):
        assert validate_score(raw) == expected

    @pytest.mark.parametrize("raw", [
        -1, -0.01, 100.01, 250, 10**400, math.nan, math.inf, None, "abc", True, [], {},
    ])
    def test_invalid_defaults_to_zero(self, raw):
        assert validate_score(raw) == 0

    def test_result_is_int(self):
        assert isinstance(validate_score(73.2), int)

    def test_custom_default(self):
        assert validate_score(-5, default=10) == 10

    def test_correction_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ip_risk_scorer.validator"):
            validate_score(150, "trademark")
        assert "Invalid trademark score" in caplog.text

    def test_valid_value_is_not_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ip_risk_scorer.validator"):
            validate_score(50, "trademark")
        assert caplog.text == ""


class TestValidateConfidence:
    """validate_confidence keeps in-range values and defaults the rest to 0.5."""

    @pytest.mark.parametrize("raw,expected", [
        (0, 0.0),
        (1, 1.0),
        (0.5, 0.5),
        (0.456, 0.46),
        (0.123, 0.12),
        ("0.8", 0.8),
    ])
    def test_in_range_is_rounded(self, raw, expected):
        assert validate_confidence(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [-0.1, 1.01, 5, 10**400, math.nan, None, "x", False])
    def test_invalid_defaults_to_half(self, raw):
        assert validate_confidence(raw) == 0.5

    def test_correction_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ip_risk_scorer.validator"):
            validate_confidence(math.nan, "copyright")
        assert "Invalid copyright confidence" in caplog.text


class TestScoreValidator:
    """Tests for building RiskResults from provider scores."""

    def test_from_scores_covers_every_category_in_order(self):
        results = ScoreValidator().from_scores(RiskScores())

        assert [r.category for r in results] == list(RiskCategory)
        assert all(r.score == 0 for r in results)
        assert all(r.confidence == 0.5 for r in results)
        assert all(r.explanation == "" for r in results)

    def test_from_scores_repairs_invalid_values(self):
        scores = RiskScores(
            visual_similarity=CategoryScore(score=150, confidence=0.9),
            trademark=CategoryScore(score=64.6, confidence=1.7),
        )

        results = ScoreValidator().from_scores(scores)

        assert results[0].score == 0
        assert results[0].confidence == 0.9
        assert results[1].score == 65
        assert results[1].confidence == 0.5

    def test_custom_defaults(self):
        validator = ScoreValidator(ValidatorDefaultsConfig(default_score=10, default_confidence=0.25))

        result = validator.to_risk_result(RiskCategory.CHARACTER, None, None)

        assert result.score == 10
        assert result.confidence == 0.25

    def test_to_risk_result_keeps_explanation(self):
        result = ScoreValidator().to_risk_result(
            RiskCategory.COPYRIGHT, 40, 0.7, explanation="Painterly style"
        )
        assert result.explanation == "Painterly style"
        assert result.category is RiskCategory.COPYRIGHT
