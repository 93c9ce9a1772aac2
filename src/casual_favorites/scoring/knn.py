"""
K-nearest-neighbour context matching.

Two questions are answered here:

- ``score_app``: how well does one application's own usage history match
  the current context? This feeds the production ranking.
- ``rank_apps``: which applications were used in moments like this one,
  across the whole device? This is a diagnostic view only.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from casual_favorites.config import DEFAULT_KNN_K
from casual_favorites.context.encoder import ContextVector
from casual_favorites.scoring.distance import ContextMetric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppUsageVector:
    """A single historical launch of an application, encoded."""

    app_id: str
    vector: ContextVector
    timestamp: datetime


@dataclass
class KNNResult:
    """
    Cross-application KNN result for one application.

    Attributes:
        app_id: Application identifier
        knn_score: frequency share * (1 + 0.5 * average_similarity)
        average_similarity: Mean similarity of the app's entries in the neighbourhood
        nearest_count: Occurrences of the app among the nearest contexts
        total_nearest: Size of the neighbourhood
    """

    app_id: str
    knn_score: float
    average_similarity: float
    nearest_count: int
    total_nearest: int


@dataclass
class KNNDebugInfo:
    app_id: str
    total_usages: int
    nearest_considered: int
    occurrences_in_nearest: int
    average_distance: Optional[float]
    nearest_timestamps: List[datetime] = field(default_factory=list)
    dimension_agreement: Dict[str, float] = field(default_factory=dict)


class KNNContextMatcher:
    """
    K-nearest-neighbour matcher over encoded context vectors.

    Args:
        k: Number of neighbours considered
        metric: Distance/similarity metric (defaults to the standard weights)
    """

    def __init__(self, k: int = DEFAULT_KNN_K, metric: Optional[ContextMetric] = None):
        self.k = k
        self.metric = metric or ContextMetric()

    def score_app(self, current: ContextVector, history: Sequence[ContextVector]) -> float:
        """
        Context score of one application, in [0, 1].

        Takes the K most similar entries of the app's history and returns
        their similarity averaged with harmonic weights 1/(i+1), so the
        closest match counts most.

        Args:
            current: Current context vector
            history: The application's historical context vectors

        Returns:
            Weighted average similarity; 0.0 for an empty history
        """
        if not history:
            return 0.0

        similarities = sorted(
            (self.metric.similarity(current, vector) for vector in history),
            reverse=True,
        )[: self.k]

        weighted_sum = 0.0
        weight_sum = 0.0
        for index, value in enumerate(similarities):
            weight = 1.0 / (index + 1)
            weighted_sum += value * weight
            weight_sum += weight

        return weighted_sum / weight_sum

    def nearest(
        self, current: ContextVector, usages: Sequence[AppUsageVector]
    ) -> List[AppUsageVector]:
        """The K usages closest to the current context, nearest first."""
        ranked = sorted(usages, key=lambda usage: self.metric.distance(current, usage.vector))
        return ranked[: self.k]

    def rank_apps(
        self, current: ContextVector, usages: Sequence[AppUsageVector]
    ) -> List[KNNResult]:
        """
        Rank applications by their presence among the globally nearest contexts.

        Args:
            current: Current context vector
            usages: Historical usages pooled across all applications

        Returns:
            KNN results sorted by knn_score, highest first
        """
        if not usages:
            return []

        nearest = self.nearest(current, usages)
        total = len(nearest)

        grouped: Dict[str, List[AppUsageVector]] = defaultdict(list)
        for usage in nearest:
            grouped[usage.app_id].append(usage)

        results = []
        for app_id, app_usages in grouped.items():
            average_similarity = sum(
                self.metric.similarity(current, usage.vector) for usage in app_usages
            ) / len(app_usages)
            frequency = len(app_usages)
            knn_score = (frequency / total) * (1.0 + 0.5 * average_similarity)

            results.append(
                KNNResult(
                    app_id=app_id,
                    knn_score=knn_score,
                    average_similarity=average_similarity,
                    nearest_count=frequency,
                    total_nearest=total,
                )
            )

        results.sort(key=lambda r: r.knn_score, reverse=True)

        logger.debug(
            f"Cross-app KNN over {len(usages)} usages: "
            f"{[(r.app_id, round(r.knn_score, 3)) for r in results]}"
        )

        return results

    def debug_info(
        self, app_id: str, current: ContextVector, usages: Sequence[AppUsageVector]
    ) -> Optional[KNNDebugInfo]:
        """
        Explain how one application fares in the global neighbourhood.

        Returns:
            KNNDebugInfo, or None if the application has no usages
        """
        app_usages = [u for u in usages if u.app_id == app_id]
        if not app_usages:
            return None

        nearest = self.nearest(current, usages)
        in_nearest = [u for u in nearest if u.app_id == app_id]

        average_distance = None
        if in_nearest:
            average_distance = sum(
                self.metric.distance(current, u.vector) for u in in_nearest
            ) / len(in_nearest)

        return KNNDebugInfo(
            app_id=app_id,
            total_usages=len(app_usages),
            nearest_considered=len(nearest),
            occurrences_in_nearest=len(in_nearest),
            average_distance=average_distance,
            nearest_timestamps=sorted(u.timestamp for u in in_nearest),
            dimension_agreement=_dimension_agreement(current, in_nearest),
        )


_EXPLAINED_DIMENSIONS = (
    "hour",
    "day_of_week",
    "connection_type",
    "network",
    "charging",
    "portrait",
)


def _dimension_agreement(
    current: ContextVector, usages: List[AppUsageVector]
) -> Dict[str, float]:
    """1 - mean absolute difference per dimension (1.0 = always identical)."""
    if not usages:
        return {}

    agreement = {}
    for name in _EXPLAINED_DIMENSIONS:
        mean_difference = sum(
            abs(getattr(current, name) - getattr(u.vector, name)) for u in usages
        ) / len(usages)
        agreement[name] = max(0.0, 1.0 - mean_difference)
    return agreement
