"""
Blending of context similarity with the long-run usage weight.
"""

from casual_favorites.config import DEFAULT_KNN_ALPHA


class ScoreCombiner:
    """
    Combines a context score with a base weight.

    ``alpha`` is the share given to context (0.0 = base weight only,
    1.0 = context only).
    """

    def __init__(self, alpha: float = DEFAULT_KNN_ALPHA):
        self.alpha = alpha

    def combine(self, context_score: float, base_weight: float, has_history: bool = True) -> float:
        """
        Compute the final ranking score.

        The base weight is clamped to [0, 1] for blending only. Without any
        context history the unclamped base weight is returned as-is.
        """
        if not has_history:
            return base_weight

        clamped = min(1.0, max(0.0, base_weight))
        return self.alpha * context_score + (1.0 - self.alpha) * clamped
