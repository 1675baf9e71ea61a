"""Pydantic models for the IP Risk Scorer.

Input schemas for provider output (numeric scores and qualitative insight)
and output schemas for per-category results and the aggregated analysis.
Field aliases match the camelCase JSON exchanged with the orchestrator.
"""

import re
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


# =============================================================================
# Category and Tier Enums
# =============================================================================


class RiskCategory(str, Enum):
    """IP risk dimensions scored independently for each image."""
    VISUAL_SIMILARITY = "VISUAL_SIMILARITY"
    TRADEMARK = "TRADEMARK"
    COPYRIGHT = "COPYRIGHT"
    CHARACTER = "CHARACTER"
    TRAINING_DATA = "TRAINING_DATA"
    COMMERCIAL_USAGE = "COMMERCIAL_USAGE"

    @classmethod
    def from_string(cls, value: str) -> Optional["RiskCategory"]:
        """Parse a category from loosely formatted text.

        Accepts enum names, camelCase provider keys ("trainingData") and
        hyphen/space separated variants. Returns None when unknown.
        """
        if not value:
            return None
        snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", value.strip())
        key = re.sub(r"[\s\-]+", "_", snake).upper()
        try:
            return cls(key)
        except ValueError:
            return None

    @property
    def provider_key(self) -> str:
        """camelCase key used for this category in provider score payloads."""
        head, *rest = self.value.lower().split("_")
        return head + "".join(part.capitalize() for part in rest)


class RiskTier(str, Enum):
    """Overall risk classification."""
    LOW = "LOW"  # < 30
    MEDIUM = "MEDIUM"  # 30-59
    HIGH = "HIGH"  # >= 60

    @classmethod
    def from_score(cls, score: float, medium: float = 30, high: float = 60) -> "RiskTier":
        """Classify a 0-100 score. Lower bounds are inclusive."""
        if score < medium:
            return cls.LOW
        if score < high:
            return cls.MEDIUM
        return cls.HIGH


# =============================================================================
# Provider Input Models
# =============================================================================


class LLMInsight(BaseModel):
    """Qualitative, categorized signals describing an image.

    Produced by a vision/LLM provider when no numeric scores are available.
    Feeds the rule-based analyzers.
    """
    visual_description: str = Field(default="", alias="visualDescription")
    detected_elements: list[str] = Field(default_factory=list, alias="detectedElements")
    similarity_signals: list[str] = Field(default_factory=list, alias="similaritySignals")
    brand_references: list[str] = Field(default_factory=list, alias="brandReferences")
    style_indicators: list[str] = Field(default_factory=list, alias="styleIndicators")
    character_likeness: list[str] = Field(default_factory=list, alias="characterLikeness")
    commercial_context: list[str] = Field(default_factory=list, alias="commercialContext")

    class Config:
        populate_by_name = True


class CategoryScore(BaseModel):
    """A raw (score, confidence) pair exactly as the provider returned it.

    No range checks here; the Score Validator repairs the values.
    """
    score: Optional[float] = None
    confidence: Optional[float] = None


class RiskScores(BaseModel):
    """Numeric provider output, one raw pair per category."""
    visual_similarity: CategoryScore = Field(default_factory=CategoryScore, alias="visualSimilarity")
    trademark: CategoryScore = Field(default_factory=CategoryScore)
    copyright: CategoryScore = Field(default_factory=CategoryScore)
    character: CategoryScore = Field(default_factory=CategoryScore)
    training_data: CategoryScore = Field(default_factory=CategoryScore, alias="trainingData")
    commercial_usage: CategoryScore = Field(default_factory=CategoryScore, alias="commercialUsage")

    class Config:
        populate_by_name = True

    def for_category(self, category: RiskCategory) -> CategoryScore:
        """Get the raw pair for a category."""
        return getattr(self, category.value.lower())

    def items(self) -> list[tuple[RiskCategory, CategoryScore]]:
        """Pairs in display order."""
        return [(category, self.for_category(category)) for category in RiskCategory]


# =============================================================================
# Result Models
# =============================================================================


class RiskResult(BaseModel):
    """One measurement for one category.

    The category is normally a RiskCategory; an unrecognized string is kept
    as-is so the aggregator can apply the fallback weight to it.
    """
    category: Union[RiskCategory, str] = Field(..., union_mode="left_to_right")
    score: int = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0, le=1)  # 2 decimals
    explanation: str = ""

    class Config:
        frozen = True

    @property
    def category_name(self) -> str:
        """Category as plain text, for display and logging."""
        return self.category.value if isinstance(self.category, RiskCategory) else str(self.category)


class AnalysisResult(BaseModel):
    """Aggregate outcome of one analysis run."""
    overall_score: int = Field(..., ge=0, le=100, alias="overallScore")
    risk_tier: RiskTier = Field(..., alias="riskTier")
    results: list[RiskResult] = Field(default_factory=list)

    class Config:
        frozen = True
        populate_by_name = True


class CategoryContribution(BaseModel):
    """How much one result moved the overall score."""
    category: str
    score: int
    weight: float
    weighted_score: float
    weight_share: float  # weight / total weight, 0-1
