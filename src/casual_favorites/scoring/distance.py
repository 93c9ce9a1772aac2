"""
Weighted distance and similarity between context vectors.

Distance is a weighted Euclidean distance over the 15 vector dimensions;
similarity decays exponentially with distance, so identical contexts score
exactly 1.0.
"""

import math
from typing import Optional, Tuple

from casual_favorites.config import DEFAULT_DECAY_RATE, DimensionWeights
from casual_favorites.context.encoder import ContextVector

DEFAULT_WEIGHTS = DimensionWeights()


def distance(
    a: ContextVector, b: ContextVector, weights: Optional[DimensionWeights] = None
) -> float:
    """Weighted Euclidean distance between two context vectors."""
    return _distance(a, b, (weights or DEFAULT_WEIGHTS).as_tuple())


def _distance(a: ContextVector, b: ContextVector, weights: Tuple[float, ...]) -> float:
    total = 0.0
    for x, y, w in zip(a.as_tuple(), b.as_tuple(), weights):
        delta = (x - y) * w
        total += delta * delta
    return math.sqrt(total)


def similarity(
    a: ContextVector,
    b: ContextVector,
    weights: Optional[DimensionWeights] = None,
    decay_rate: float = DEFAULT_DECAY_RATE,
) -> float:
    """Similarity in (0, 1]: exp(-distance * decay_rate)."""
    return math.exp(-distance(a, b, weights) * decay_rate)


class ContextMetric:
    """
    Distance and similarity with a fixed weight table and decay rate.

    Precomputes the per-dimension weights so repeated comparisons over a
    candidate pool avoid rebuilding them.
    """

    def __init__(
        self,
        weights: Optional[DimensionWeights] = None,
        decay_rate: float = DEFAULT_DECAY_RATE,
    ):
        self.weights = weights or DEFAULT_WEIGHTS
        self.decay_rate = decay_rate
        self._weight_tuple = self.weights.as_tuple()

    def distance(self, a: ContextVector, b: ContextVector) -> float:
        return _distance(a, b, self._weight_tuple)

    def similarity(self, a: ContextVector, b: ContextVector) -> float:
        return math.exp(-self.distance(a, b) * self.decay_rate)

    def similarity_for_distance(self, value: float) -> float:
        return math.exp(-value * self.decay_rate)
