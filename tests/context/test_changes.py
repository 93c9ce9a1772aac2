"""
Unit tests for snapshot change detection.
"""

from datetime import datetime

from casual_favorites.context.changes import context_diff, has_context_changed
from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    DeviceContext,
    NetworkContext,
    Orientation,
    PeripheralCategory,
    PeripheralContext,
    TimeContext,
)


def make_snapshot(hour=9, network_id="Office", charging=False, devices=(), timestamp=None):
    return ContextSnapshot(
        timestamp=timestamp or datetime(2024, 1, 1, hour, 0),
        time=TimeContext.at(datetime(2024, 1, 1, hour, 0)),
        network=NetworkContext(connection_type=ConnectionType.WIFI, network_id=network_id),
        peripherals=PeripheralContext(
            connected_devices=frozenset(devices),
            categories=frozenset({PeripheralCategory.HEADPHONES}) if devices else frozenset(),
        ),
        device=DeviceContext(is_charging=charging, orientation=Orientation.PORTRAIT),
    )


def test_no_previous_snapshot_is_change():
    """Test that the first snapshot always counts as changed."""
    assert has_context_changed(None, make_snapshot()) is True


def test_timestamp_only_is_not_change():
    """Test that timestamp drift alone is judged unchanged."""
    old = make_snapshot(timestamp=datetime(2024, 1, 1, 9, 0, 0))
    new = make_snapshot(timestamp=datetime(2024, 1, 1, 9, 42, 17))

    assert has_context_changed(old, new) is False


def test_hour_change_detected():
    """Test that a different hour is a change."""
    assert has_context_changed(make_snapshot(hour=9), make_snapshot(hour=10)) is True


def test_network_change_detected():
    """Test that joining a different network is a change."""
    assert has_context_changed(make_snapshot(), make_snapshot(network_id="Home")) is True


def test_peripheral_change_detected():
    """Test that connecting a device is a change."""
    assert has_context_changed(make_snapshot(), make_snapshot(devices=["Buds"])) is True


def test_charging_change_detected():
    """Test that plugging in is a change."""
    assert has_context_changed(make_snapshot(), make_snapshot(charging=True)) is True


def test_facet_becoming_unavailable_is_change():
    """Test that losing a facet counts as a change."""
    old = make_snapshot()
    new = old.model_copy(update={"network": None})

    assert has_context_changed(old, new) is True


def test_context_diff_initial():
    """Test the diff description for the first snapshot."""
    assert context_diff(None, make_snapshot()) == {"status": "initial context"}


def test_context_diff_lists_changed_fields():
    """Test that the diff names each changed field."""
    diff = context_diff(make_snapshot(), make_snapshot(network_id="Home", devices=["Buds"]))

    assert diff["network.network_id"] == "Office -> Home"
    assert diff["peripherals.added"] == ["Buds"]
    assert "device.is_charging" not in diff


def test_context_diff_unchanged():
    """Test the diff description when nothing changed."""
    diff = context_diff(make_snapshot(), make_snapshot())

    assert diff == {"status": "no meaningful changes"}
