"""
Scoring components: vector distance, KNN matching, score blending and
long-run usage weights.
"""

from casual_favorites.scoring.combiner import ScoreCombiner
from casual_favorites.scoring.distance import ContextMetric, distance, similarity
from casual_favorites.scoring.knn import (
    AppUsageVector,
    KNNContextMatcher,
    KNNDebugInfo,
    KNNResult,
)
from casual_favorites.scoring.weights import update_weight

__all__ = [
    "distance",
    "similarity",
    "ContextMetric",
    "AppUsageVector",
    "KNNContextMatcher",
    "KNNResult",
    "KNNDebugInfo",
    "ScoreCombiner",
    "update_weight",
]
