"""
Unit tests for usage pattern analysis.
"""

from datetime import datetime

import pytest

from casual_favorites.context.patterns import (
    DayPattern,
    NetworkPattern,
    PeripheralPattern,
    TimePattern,
    analyze_usage_patterns,
    describe,
    matching_patterns,
    pattern_matches,
)
from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    NetworkContext,
    PeripheralCategory,
    PeripheralContext,
    TimeContext,
)


def make_snapshot(hour, day=1, network_id=None, categories=()):
    moment = datetime(2024, 1, day, hour, 0)  # 2024-01-01 is a Monday
    network = None
    if network_id is not None:
        network = NetworkContext(connection_type=ConnectionType.WIFI, network_id=network_id)
    return ContextSnapshot(
        timestamp=moment,
        time=TimeContext.at(moment),
        network=network,
        peripherals=PeripheralContext(
            connected_devices=frozenset(c.value for c in categories),
            categories=frozenset(categories),
        ),
    )


@pytest.fixture
def commute_history():
    """Weekday mornings with headphones, mostly on the office network."""
    return [
        make_snapshot(8, day=1, network_id="Office", categories=[PeripheralCategory.HEADPHONES]),
        make_snapshot(8, day=2, network_id="Office", categories=[PeripheralCategory.HEADPHONES]),
        make_snapshot(8, day=1, network_id="Office"),
        make_snapshot(9, day=1, network_id="Home", categories=[PeripheralCategory.HEADPHONES]),
    ]


def test_too_little_history():
    """Test that fewer than three entries yield no patterns."""
    history = [make_snapshot(8), make_snapshot(8)]

    assert analyze_usage_patterns(history) == []


def test_detects_patterns(commute_history):
    """Test detection of hour, day, network and peripheral patterns."""
    patterns = analyze_usage_patterns(commute_history)

    assert TimePattern(hour=8, strength=0.75) in patterns
    assert DayPattern(day_of_week=1, strength=0.75) in patterns
    assert NetworkPattern(network_id="Office", strength=0.75) in patterns
    assert PeripheralPattern(category=PeripheralCategory.HEADPHONES, strength=0.75) in patterns


def test_scattered_history_has_no_time_pattern():
    """Test that evenly spread hours produce no time pattern."""
    history = [make_snapshot(h, day=d) for h, d in [(1, 1), (5, 2), (9, 3), (13, 4), (17, 5)]]

    patterns = analyze_usage_patterns(history)

    assert not any(isinstance(p, TimePattern) for p in patterns)
    assert not any(isinstance(p, DayPattern) for p in patterns)


def test_pattern_matches():
    """Test matching each pattern variant against a snapshot."""
    snapshot = make_snapshot(8, network_id="Office", categories=[PeripheralCategory.CAR])

    assert pattern_matches(TimePattern(hour=8), snapshot)
    assert not pattern_matches(TimePattern(hour=9), snapshot)
    assert pattern_matches(DayPattern(day_of_week=1), snapshot)
    assert pattern_matches(NetworkPattern(network_id="Office"), snapshot)
    assert pattern_matches(PeripheralPattern(category=PeripheralCategory.CAR), snapshot)
    assert not pattern_matches(PeripheralPattern(category=PeripheralCategory.WATCH), snapshot)


def test_pattern_does_not_match_absent_facet():
    """Test that a pattern never matches a missing facet."""
    assert not pattern_matches(NetworkPattern(network_id="Office"), ContextSnapshot())
    assert not pattern_matches(TimePattern(hour=8), ContextSnapshot())


def test_unknown_pattern_rejected():
    """Test that an unknown pattern type raises TypeError."""
    with pytest.raises(TypeError):
        pattern_matches("time_9h", ContextSnapshot())


def test_describe():
    """Test the readable tags of each pattern variant."""
    assert describe(TimePattern(hour=9)) == "used around 9:00"
    assert describe(DayPattern(day_of_week=6)) == "used on day 6"
    assert describe(NetworkPattern(network_id="Office")) == "used on Office"
    assert describe(PeripheralPattern(category=PeripheralCategory.CAR)) == "used with car"


def test_matching_patterns(commute_history):
    """Test that only patterns holding in the current context are returned."""
    now = make_snapshot(8, day=3, network_id="Office")

    matched = matching_patterns(commute_history, now)

    assert TimePattern(hour=8, strength=0.75) in matched
    assert NetworkPattern(network_id="Office", strength=0.75) in matched
    assert not any(isinstance(p, DayPattern) for p in matched)
    assert not any(isinstance(p, PeripheralPattern) for p in matched)


def test_matching_patterns_without_snapshot(commute_history):
    """Test that no patterns match without a context."""
    assert matching_patterns(commute_history, None) == []
