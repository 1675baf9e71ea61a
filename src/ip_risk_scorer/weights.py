"""Category Weight Table.

Immutable mapping of risk category to relative weight. Built once and never
mutated; categories absent from the table get the fallback weight.
"""

import math
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .config import CategoryWeightsConfig
from .schema import RiskCategory

DEFAULT_FALLBACK_WEIGHT = 0.1

DEFAULT_WEIGHTS: Mapping[RiskCategory, float] = MappingProxyType({
    RiskCategory.VISUAL_SIMILARITY: 0.15,
    RiskCategory.TRADEMARK: 0.25,
    RiskCategory.COPYRIGHT: 0.15,
    RiskCategory.CHARACTER: 0.20,
    RiskCategory.TRAINING_DATA: 0.10,
    RiskCategory.COMMERCIAL_USAGE: 0.15,
})


class CategoryWeightTable:
    """Read-only category weights with a fallback for unknown categories.

    Weights must be finite and non-negative. They do not have to sum to 1.
    """

    def __init__(
        self,
        weights: Optional[Mapping[Union[RiskCategory, str], float]] = None,
        fallback: float = DEFAULT_FALLBACK_WEIGHT,
    ):
        table = dict(DEFAULT_WEIGHTS if weights is None else weights)
        for category, weight in table.items():
            _check_weight(str(getattr(category, "value", category)), weight)
        _check_weight("fallback", fallback)

        self._weights = MappingProxyType(table)
        self._fallback = float(fallback)

    @classmethod
    def from_config(cls, config: CategoryWeightsConfig) -> "CategoryWeightTable":
        """Build the table from the category_weights config section."""
        weights = {category: getattr(config, category.value.lower()) for category in RiskCategory}
        return cls(weights, fallback=config.fallback)

    @property
    def weights(self) -> Mapping[Union[RiskCategory, str], float]:
        """Read-only view of the configured weights."""
        return self._weights

    @property
    def fallback(self) -> float:
        return self._fallback

    def weight_for(self, category: Union[RiskCategory, str]) -> float:
        """Weight for ``category``, or the fallback when it is not configured."""
        return self._weights.get(category, self._fallback)

    def total(self) -> float:
        """Sum of the configured weights (excluding the fallback)."""
        return sum(self._weights.values())

    def __contains__(self, category: object) -> bool:
        return category in self._weights

    def __repr__(self) -> str:
        items = ", ".join(
            f"{getattr(c, 'value', c)}={w}" for c, w in self._weights.items()
        )
        return f"CategoryWeightTable({items}, fallback={self._fallback})"


def _check_weight(name: str, weight: float) -> None:
    if not isinstance(weight, (int, float)) or isinstance(weight, bool):
        raise ValueError(f"Weight for {name} must be a number, got {weight!r}")
    if not math.isfinite(weight) or weight < 0:
        raise ValueError(f"Weight for {name} must be finite and non-negative, got {weight!r}")
