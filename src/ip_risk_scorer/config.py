"""Centralized configuration management for the IP risk scorer."""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or validated."""


class CategoryWeightsConfig(BaseModel):
    """Relative weight of each risk category in the overall score.

    Weights need not sum to 1.0; the aggregator divides by the total weight
    of the results it receives. Categories missing from the table use the
    fallback weight.
    """
    visual_similarity: float = Field(
        0.15, ge=0, allow_inf_nan=False,
        description="Weight for visual similarity to existing works"
    )
    trademark: float = Field(
        0.25, ge=0, allow_inf_nan=False,
        description="Weight for logo, brand and trademark resemblance"
    )
    copyright: float = Field(
        0.15, ge=0, allow_inf_nan=False,
        description="Weight for mimicry of a distinctive copyrighted style"
    )
    character: float = Field(
        0.20, ge=0, allow_inf_nan=False,
        description="Weight for character or real-person likeness"
    )
    training_data: float = Field(
        0.10, ge=0, allow_inf_nan=False,
        description="Weight for signs of copyrighted training data"
    )
    commercial_usage: float = Field(
        0.15, ge=0, allow_inf_nan=False,
        description="Weight for risk specific to commercial campaigns"
    )
    fallback: float = Field(
        0.1, ge=0, allow_inf_nan=False,
        description="Weight applied to categories not listed above"
    )


class TierThresholdsConfig(BaseModel):
    """Score thresholds for the LOW / MEDIUM / HIGH risk tiers.

    A score below ``medium`` is LOW, below ``high`` is MEDIUM, anything else
    is HIGH.
    """
    medium: int = Field(30, ge=0, le=100, description="Minimum overall score for MEDIUM risk")
    high: int = Field(60, ge=0, le=100, description="Minimum overall score for HIGH risk")

    @model_validator(mode="after")
    def _ordered(self) -> "TierThresholdsConfig":
        if self.medium > self.high:
            raise ValueError("medium threshold must not exceed high threshold")
        return self


class ValidatorDefaultsConfig(BaseModel):
    """Values substituted for invalid provider scores and confidences."""
    default_score: int = Field(0, ge=0, le=100, description="Score used when the provider score is invalid")
    default_confidence: float = Field(
        0.5, ge=0, le=1, allow_inf_nan=False,
        description="Confidence used when the provider confidence is invalid"
    )


class InsightParsingConfig(BaseModel):
    """Configuration for turning provider insight payloads into signal lists."""
    max_items: int = Field(5, ge=1, description="Maximum items kept per signal list")


class ScorerConfig(BaseModel):
    """Complete configuration for the IP risk scorer."""
    category_weights: CategoryWeightsConfig = Field(default_factory=CategoryWeightsConfig)
    tier_thresholds: TierThresholdsConfig = Field(default_factory=TierThresholdsConfig)
    validator_defaults: ValidatorDefaultsConfig = Field(default_factory=ValidatorDefaultsConfig)
    insight_parsing: InsightParsingConfig = Field(default_factory=InsightParsingConfig)


CONFIG_ENV_VAR = "IP_RISK_SCORER_CONFIG"
LOCAL_CONFIG_NAMES = ("risk-config.yaml", "risk-config.yml")
USER_CONFIG_PATH = Path(".config") / "ip-risk-scorer" / "config.yaml"

_config: Optional[ScorerConfig] = None


def get_config() -> ScorerConfig:
    """Return the active configuration, defaults until one is loaded."""
    global _config
    if _config is None:
        _config = ScorerConfig()
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = ScorerConfig()


def load_config(path: Union[str, Path]) -> ScorerConfig:
    """Load a YAML config file and make it the active configuration.

    Sections left out of the file keep their defaults. On failure the
    previously active configuration stays in place.

    Raises:
        ConfigError: If the file cannot be read, is not YAML, is not a
            mapping, or holds out-of-range values.
    """
    global _config
    path = Path(path)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read scorer config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Scorer config {path} must be a mapping, got {type(data).__name__}")

    try:
        _config = ScorerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid scorer config {path}: {e}") from e
    return _config


def config_search_paths() -> list[tuple[str, Optional[Path]]]:
    """Candidate config locations in priority order, as (label, path).

    The environment variable entry is always listed; its path is None when
    the variable is unset.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    candidates = [(f"{CONFIG_ENV_VAR} environment variable", Path(env_path) if env_path else None)]
    for name in LOCAL_CONFIG_NAMES:
        candidates.append((f"./{name} (current directory)", Path(name)))
    candidates.append((f"~/{USER_CONFIG_PATH.as_posix()} (user config)", Path.home() / USER_CONFIG_PATH))
    return candidates


def find_config_file() -> Optional[Path]:
    """Return the first existing config file from config_search_paths()."""
    for _, path in config_search_paths():
        if path is not None and path.is_file():
            return path
    return None


def save_default_config(path: Union[str, Path]) -> None:
    """Write the default configuration as commented YAML."""
    path = Path(path)
    header = [
        "# IP Risk Scorer Configuration",
        "# ============================",
        "#",
        "# category_weights    relative weight of each risk category",
        "# tier_thresholds     overall scores where MEDIUM and HIGH begin",
        "# validator_defaults  values substituted for invalid provider scores",
        "# insight_parsing     limits for qualitative signal lists",
        "#",
        "# Pass this file with --config, point " + CONFIG_ENV_VAR + " at it,",
        "# or save it as " + " / ".join(f"./{n}" for n in LOCAL_CONFIG_NAMES)
        + " or ~/" + USER_CONFIG_PATH.as_posix() + ".",
        "",
    ]
    body = yaml.dump(ScorerConfig().model_dump(), default_flow_style=False, sort_keys=False)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(header) + "\n" + body, encoding="utf-8")
