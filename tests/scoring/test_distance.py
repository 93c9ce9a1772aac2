"""
Unit tests for weighted distance and similarity.
"""

import math
from dataclasses import replace

import pytest

from casual_favorites.config import DimensionWeights
from casual_favorites.context.encoder import encode
from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    NetworkContext,
    TimeContext,
    TimeSlot,
)
from casual_favorites.scoring.distance import ContextMetric, distance, similarity


@pytest.fixture
def office():
    return encode(
        ContextSnapshot(
            time=TimeContext(hour=9, day_of_week=1, time_slot=TimeSlot.MORNING),
            network=NetworkContext(connection_type=ConnectionType.WIFI, network_id="Office"),
        )
    )


@pytest.fixture
def evening():
    return encode(
        ContextSnapshot(
            time=TimeContext(hour=22, day_of_week=5, time_slot=TimeSlot.NIGHT),
            network=NetworkContext(connection_type=ConnectionType.MOBILE),
        )
    )


def test_identity(office):
    """Test that a vector has distance 0 and similarity 1 to itself."""
    assert distance(office, office) == 0.0
    assert similarity(office, office) == 1.0


def test_symmetry(office, evening):
    """Test that distance is symmetric."""
    assert distance(office, evening) == distance(evening, office)


def test_single_dimension_weight(office):
    """Test that a difference in one dimension is scaled by its weight."""
    charging = replace(office, charging=1.0)

    assert distance(office, charging) == pytest.approx(1.2)
    assert similarity(office, charging) == pytest.approx(math.exp(-0.6))


def test_peripheral_weight_applies_per_flag(office):
    """Test that each peripheral flag carries the peripheral weight."""
    both = replace(office, headphones=1.0, car=1.0)

    assert distance(office, both) == pytest.approx(math.sqrt(2 * 1.3**2))


def test_similarity_decreases_with_distance(office, evening):
    """Test that more distant contexts are less similar."""
    near = replace(office, portrait=0.0)

    assert similarity(office, near) > similarity(office, evening)
    assert 0.0 < similarity(office, evening) < 1.0


def test_custom_weights(office):
    """Test that a zero weight ignores a dimension."""
    charging = replace(office, charging=1.0)
    weights = DimensionWeights(charging=0.0)

    assert distance(office, charging, weights) == 0.0


def test_metric_matches_functions(office, evening):
    """Test that ContextMetric agrees with the module-level functions."""
    metric = ContextMetric(decay_rate=0.5)

    assert metric.distance(office, evening) == pytest.approx(distance(office, evening))
    assert metric.similarity(office, evening) == pytest.approx(similarity(office, evening))
    assert metric.similarity_for_distance(2.0) == pytest.approx(math.exp(-1.0))


def test_weight_table_order():
    """Test that the weight tuple follows the vector layout."""
    weights = DimensionWeights().as_tuple()

    assert len(weights) == 15
    assert weights[:5] == (2.0, 2.0, 1.5, 1.8, 2.2)
    assert weights[5:13] == (1.3,) * 8
    assert weights[13:] == (1.2, 0.6)
