"""
Long-run usage weights.

Every launch pulls an application's weight towards 1.0 by a fixed factor
(a saturating exponential moving average). Context plays no part here.
"""


def update_weight(old_weight: float, factor: float) -> float:
    """Apply one launch: old + factor * (1 - old)."""
    return old_weight + factor * (1.0 - old_weight)
