"""
Configuration for context-aware ranking.

Settings are read from the environment (prefix ``FAVORITES_``) or a ``.env``
file and validated once at load time. Components downstream assume a
validated configuration and do not re-check ranges.
"""

import logging
from typing import Dict, Literal, Tuple

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

WeightFactor = Literal["low", "medium", "high"]

# EMA responsiveness presets
WEIGHT_FACTORS: Dict[str, float] = {
    "low": 0.01,
    "medium": 0.03,
    "high": 0.1,
}

DEFAULT_KNN_K = 10
DEFAULT_KNN_ALPHA = 0.7
DEFAULT_DECAY_RATE = 0.5
MAX_CONTEXT_HISTORY = 50
MIN_CANDIDATE_POOL = 50


class DimensionWeights(BaseModel):
    """
    Importance weights for each context vector dimension.

    Values are relative and are not normalized to sum to 1. Peripheral
    weight applies to each of the seven category flags and to the
    normalized device count.
    """

    hour: float = Field(default=2.0, ge=0.0)
    day_of_week: float = Field(default=2.0, ge=0.0)
    time_slot: float = Field(default=1.5, ge=0.0)
    connection_type: float = Field(default=1.8, ge=0.0)
    network: float = Field(default=2.2, ge=0.0)
    peripheral: float = Field(default=1.3, ge=0.0)
    charging: float = Field(default=1.2, ge=0.0)
    orientation: float = Field(default=0.6, ge=0.0)

    def as_tuple(self) -> Tuple[float, ...]:
        """Per-dimension weights in ContextVector field order (15 values)."""
        return (
            self.hour,
            self.day_of_week,
            self.time_slot,
            self.connection_type,
            self.network,
            *([self.peripheral] * 8),
            self.charging,
            self.orientation,
        )


class RankingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FAVORITES_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    smart_enabled: bool = Field(default=True, description="Use context-aware ranking")
    knn_k: int = Field(default=DEFAULT_KNN_K, ge=1, description="Neighbours considered per app")
    knn_alpha: float = Field(
        default=DEFAULT_KNN_ALPHA, ge=0.0, le=1.0, description="Context vs base weight blend"
    )
    weight_factor: WeightFactor = Field(default="medium", description="EMA responsiveness")
    max_history: int = Field(
        default=MAX_CONTEXT_HISTORY, ge=1, description="Context entries kept per app"
    )
    min_pool_size: int = Field(
        default=MIN_CANDIDATE_POOL, ge=1, description="Lower bound of the candidate pool"
    )
    ranking_limit: int = Field(default=10, ge=1, description="Apps in a published ranking")
    facet_timeout: float = Field(
        default=0.5, gt=0.0, description="Seconds a facet provider may take before it is skipped"
    )
    similarity_decay_rate: float = Field(default=DEFAULT_DECAY_RATE, gt=0.0)
    dimension_weights: DimensionWeights = Field(default_factory=DimensionWeights)

    @property
    def weight_factor_value(self) -> float:
        return WEIGHT_FACTORS[self.weight_factor]

    def pool_size(self, limit: int) -> int:
        """Candidate pool for a given output limit; oversampled so KNN can reorder."""
        return max(self.min_pool_size, 2 * limit)


def load_settings(**overrides) -> RankingSettings:
    """
    Build and validate ranking settings.

    Args:
        **overrides: Explicit values that take precedence over the environment

    Returns:
        Validated RankingSettings

    Raises:
        pydantic.ValidationError: If any value is out of range (e.g. knn_k <= 0)
    """
    settings = RankingSettings(**overrides)

    logger.info(
        f"Ranking settings loaded: smart_enabled={settings.smart_enabled}, "
        f"k={settings.knn_k}, alpha={settings.knn_alpha}, "
        f"weight_factor={settings.weight_factor}, max_history={settings.max_history}"
    )

    return settings
