"""
Unit tests for in-memory usage storage.

Tests weight updates, bounded history and candidate ordering.
"""

from datetime import datetime, timedelta

import pytest

from casual_favorites.models import ContextSnapshot, TimeContext
from casual_favorites.storage import CandidateSource, UsageStore
from casual_favorites.storage.usage.memory import InMemoryUsageStore


@pytest.fixture
def usage_store():
    """Create a fresh in-memory usage store."""
    return InMemoryUsageStore()


def snapshot_at(minutes):
    moment = datetime(2024, 1, 1, 9, 0) + timedelta(minutes=minutes)
    return ContextSnapshot(timestamp=moment, time=TimeContext.at(moment))


def test_satisfies_protocols(usage_store):
    """Test that the store implements both storage protocols."""
    assert isinstance(usage_store, UsageStore)
    assert isinstance(usage_store, CandidateSource)


def test_unknown_app_defaults(usage_store):
    """Test reads of an application that was never launched."""
    assert usage_store.read_history("mail") == []
    assert usage_store.read_base_weight("mail") == 0.0
    assert usage_store.get_record("mail") is None


def test_append_history(usage_store):
    """Test that history is kept oldest first with launch timestamps."""
    usage_store.append_history("mail", snapshot_at(0))
    size = usage_store.append_history("mail", snapshot_at(5))

    history = usage_store.read_history("mail")

    assert size == 2
    assert [entry.launched_at for entry in history] == [
        datetime(2024, 1, 1, 9, 0),
        datetime(2024, 1, 1, 9, 5),
    ]


def test_history_capped(usage_store):
    """Test that the oldest entries are evicted beyond the cap."""
    for i in range(60):
        usage_store.append_history("mail", snapshot_at(i), max_entries=50)

    history = usage_store.read_history("mail")

    assert len(history) == 50
    assert history[0].launched_at == datetime(2024, 1, 1, 9, 10)
    assert history[-1].launched_at == datetime(2024, 1, 1, 9, 59)


def test_update_base_weight(usage_store):
    """Test the EMA update and launch counter."""
    first = usage_store.update_base_weight("mail", 0.1)
    second = usage_store.update_base_weight("mail", 0.1)

    record = usage_store.get_record("mail")

    assert first == pytest.approx(0.1)
    assert second == pytest.approx(0.19)
    assert record.weight == pytest.approx(0.19)
    assert record.launch_count == 2


def test_list_candidates_by_weight(usage_store):
    """Test that candidates come back highest weight first, up to the pool size."""
    usage_store.set_base_weight("mail", 0.2)
    usage_store.set_base_weight("maps", 0.9)
    usage_store.set_base_weight("music", 0.5)

    assert usage_store.list_candidates(10) == ["maps", "music", "mail"]
    assert usage_store.list_candidates(2) == ["maps", "music"]


def test_remove(usage_store):
    """Test removing an application."""
    usage_store.update_base_weight("mail", 0.1)

    assert usage_store.remove("mail") is True
    assert usage_store.remove("mail") is False
    assert usage_store.list_candidates(10) == []


def test_list_records_and_clear(usage_store):
    """Test listing and clearing all records."""
    usage_store.update_base_weight("mail", 0.1)
    usage_store.append_history("maps", snapshot_at(0))

    records = usage_store.list_records()

    assert {r.app_id for r in records} == {"mail", "maps"}

    usage_store.clear()

    assert usage_store.list_records() == []
