"""
Usage pattern analysis.

Finds recurring facets in an application's context history (a favourite
hour, day, network or peripheral category) and checks which of them hold
in the current context. Patterns are a closed set of tagged variants.
"""

from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Union

from casual_favorites.models import ContextSnapshot, PeripheralCategory

MIN_HISTORY_FOR_PATTERNS = 3

HOUR_SHARE_THRESHOLD = 0.4
DAY_SHARE_THRESHOLD = 0.5
NETWORK_SHARE_THRESHOLD = 0.6
PERIPHERAL_SHARE_THRESHOLD = 0.4


@dataclass(frozen=True)
class TimePattern:
    hour: int
    strength: float = 1.0


@dataclass(frozen=True)
class DayPattern:
    day_of_week: int
    strength: float = 1.0


@dataclass(frozen=True)
class NetworkPattern:
    network_id: str
    strength: float = 1.0


@dataclass(frozen=True)
class PeripheralPattern:
    category: PeripheralCategory
    strength: float = 1.0


UsagePattern = Union[TimePattern, DayPattern, NetworkPattern, PeripheralPattern]


def _dominant(values: list, threshold: float):
    """Most common value and its share, if the share reaches the threshold."""
    if not values:
        return None
    value, count = Counter(values).most_common(1)[0]
    share = count / len(values)
    if share >= threshold:
        return value, share
    return None


def analyze_usage_patterns(history: List[ContextSnapshot]) -> List[UsagePattern]:
    """
    Identify contexts in which an application is repeatedly used.

    Args:
        history: The application's past launch contexts

    Returns:
        Detected patterns; empty when fewer than three entries exist
    """
    patterns: List[UsagePattern] = []

    if len(history) < MIN_HISTORY_FOR_PATTERNS:
        return patterns

    hours = [s.time.hour for s in history if s.time is not None]
    dominant_hour = _dominant(hours, HOUR_SHARE_THRESHOLD)
    if dominant_hour:
        patterns.append(TimePattern(hour=dominant_hour[0], strength=dominant_hour[1]))

    days = [s.time.day_of_week for s in history if s.time is not None]
    dominant_day = _dominant(days, DAY_SHARE_THRESHOLD)
    if dominant_day:
        patterns.append(DayPattern(day_of_week=dominant_day[0], strength=dominant_day[1]))

    networks = [
        s.network.network_id
        for s in history
        if s.network is not None and s.network.network_id is not None
    ]
    dominant_network = _dominant(networks, NETWORK_SHARE_THRESHOLD)
    if dominant_network:
        patterns.append(
            NetworkPattern(network_id=dominant_network[0], strength=dominant_network[1])
        )

    category_counts: Counter = Counter()
    for snapshot in history:
        if snapshot.peripherals is not None:
            category_counts.update(snapshot.peripherals.categories)
    for category in sorted(category_counts, key=lambda c: c.value):
        share = category_counts[category] / len(history)
        if share >= PERIPHERAL_SHARE_THRESHOLD:
            patterns.append(PeripheralPattern(category=category, strength=share))

    return patterns


def pattern_matches(pattern: UsagePattern, snapshot: ContextSnapshot) -> bool:
    """Check whether a pattern holds in the given context."""
    if isinstance(pattern, TimePattern):
        return snapshot.time is not None and snapshot.time.hour == pattern.hour
    if isinstance(pattern, DayPattern):
        return snapshot.time is not None and snapshot.time.day_of_week == pattern.day_of_week
    if isinstance(pattern, NetworkPattern):
        return snapshot.network is not None and snapshot.network.network_id == pattern.network_id
    if isinstance(pattern, PeripheralPattern):
        return (
            snapshot.peripherals is not None
            and pattern.category in snapshot.peripherals.categories
        )
    raise TypeError(f"Unknown usage pattern: {pattern!r}")


def describe(pattern: UsagePattern) -> str:
    """Short human-readable tag for a pattern."""
    if isinstance(pattern, TimePattern):
        return f"used around {pattern.hour}:00"
    if isinstance(pattern, DayPattern):
        return f"used on day {pattern.day_of_week}"
    if isinstance(pattern, NetworkPattern):
        return f"used on {pattern.network_id}"
    if isinstance(pattern, PeripheralPattern):
        return f"used with {pattern.category.value}"
    raise TypeError(f"Unknown usage pattern: {pattern!r}")


def matching_patterns(
    history: List[ContextSnapshot], snapshot: Optional[ContextSnapshot]
) -> List[UsagePattern]:
    """Patterns of a history that hold in the given context."""
    if snapshot is None:
        return []
    return [p for p in analyze_usage_patterns(history) if pattern_matches(p, snapshot)]
