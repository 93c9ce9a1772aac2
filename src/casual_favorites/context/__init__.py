"""
Context sampling and encoding.

Provides facet providers, the snapshot producer, the fixed-size vector
encoding, change detection and usage pattern analysis.
"""

from casual_favorites.context.changes import context_diff, has_context_changed
from casual_favorites.context.encoder import ContextVector, encode, network_hash
from casual_favorites.context.patterns import (
    DayPattern,
    NetworkPattern,
    PeripheralPattern,
    TimePattern,
    UsagePattern,
    analyze_usage_patterns,
    pattern_matches,
)
from casual_favorites.context.providers import (
    DeviceContextProvider,
    FacetProvider,
    NetworkContextProvider,
    PeripheralContextProvider,
    TimeContextProvider,
    categorize_peripheral,
)
from casual_favorites.context.snapshot import ContextSnapshotProducer

__all__ = [
    # Sampling
    "FacetProvider",
    "TimeContextProvider",
    "NetworkContextProvider",
    "PeripheralContextProvider",
    "DeviceContextProvider",
    "categorize_peripheral",
    "ContextSnapshotProducer",
    # Encoding
    "ContextVector",
    "encode",
    "network_hash",
    # Change detection
    "has_context_changed",
    "context_diff",
    # Patterns
    "UsagePattern",
    "TimePattern",
    "DayPattern",
    "NetworkPattern",
    "PeripheralPattern",
    "analyze_usage_patterns",
    "pattern_matches",
]
