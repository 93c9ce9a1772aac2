"""
Unit tests for SQLAlchemy usage storage.

Tests persistence of weights and JSON-encoded context history using
in-memory SQLite.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from casual_favorites.exceptions import HistoryDecodeError
from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    NetworkContext,
    PeripheralCategory,
    PeripheralContext,
    TimeContext,
)
from casual_favorites.storage.usage.sqlalchemy import SQLAlchemyUsageStore, UsageRecordDB


@pytest.fixture
def usage_store():
    """Create a fresh SQLAlchemy usage store with in-memory SQLite."""
    engine = create_engine("sqlite:///:memory:")
    store = SQLAlchemyUsageStore(engine)
    store.create_tables()
    return store


def snapshot_at(minutes):
    moment = datetime(2024, 1, 1, 9, 0) + timedelta(minutes=minutes)
    return ContextSnapshot(
        timestamp=moment,
        time=TimeContext.at(moment),
        network=NetworkContext(connection_type=ConnectionType.WIFI, network_id="Office"),
        peripherals=PeripheralContext(
            connected_devices=frozenset({"Buds"}),
            categories=frozenset({PeripheralCategory.HEADPHONES}),
        ),
    )


def corrupt_history(store, app_id, payload):
    with Session(store.engine) as session:
        session.get(UsageRecordDB, app_id).context_history = payload
        session.commit()


def test_create_tables(usage_store):
    """Test that the schema is created and empty."""
    assert usage_store.list_candidates(10) == []
    assert usage_store.read_base_weight("mail") == 0.0


def test_history_round_trip(usage_store):
    """Test that snapshots survive JSON persistence unchanged."""
    original = snapshot_at(0)
    usage_store.append_history("mail", original)

    history = usage_store.read_history("mail")

    assert len(history) == 1
    assert history[0].snapshot == original
    assert history[0].launched_at == original.timestamp


def test_history_capped(usage_store):
    """Test that the oldest entries are evicted beyond the cap."""
    for i in range(8):
        usage_store.append_history("mail", snapshot_at(i), max_entries=5)

    history = usage_store.read_history("mail")

    assert len(history) == 5
    assert history[0].launched_at == datetime(2024, 1, 1, 9, 3)


def test_update_base_weight(usage_store):
    """Test the EMA update and launch counter persistence."""
    usage_store.update_base_weight("mail", 0.1)
    weight = usage_store.update_base_weight("mail", 0.1)

    record = usage_store.get_record("mail")

    assert weight == pytest.approx(0.19)
    assert usage_store.read_base_weight("mail") == pytest.approx(0.19)
    assert record.launch_count == 2
    assert record.history == []


def test_list_candidates_by_weight(usage_store):
    """Test that candidates are ordered by weight and bounded by pool size."""
    usage_store.update_base_weight("mail", 0.1)
    for _ in range(3):
        usage_store.update_base_weight("maps", 0.1)
    usage_store.update_base_weight("music", 0.03)

    assert usage_store.list_candidates(10) == ["maps", "mail", "music"]
    assert usage_store.list_candidates(1) == ["maps"]


def test_malformed_history_raises_decode_error(usage_store):
    """Test that an undecodable history is reported as HistoryDecodeError."""
    usage_store.append_history("mail", snapshot_at(0))
    corrupt_history(usage_store, "mail", '[{"time": {"hour": 99}}]')

    with pytest.raises(HistoryDecodeError) as exc_info:
        usage_store.read_history("mail")

    assert exc_info.value.app_id == "mail"


def test_invalid_json_history(usage_store):
    """Test that a history that is not JSON at all is also a decode error."""
    usage_store.append_history("mail", snapshot_at(0))
    corrupt_history(usage_store, "mail", "not json")

    with pytest.raises(HistoryDecodeError):
        usage_store.read_history("mail")


def test_append_replaces_malformed_history(usage_store):
    """Test that appending to an unreadable history starts it afresh."""
    usage_store.append_history("mail", snapshot_at(0))
    corrupt_history(usage_store, "mail", "not json")

    size = usage_store.append_history("mail", snapshot_at(1))

    assert size == 1
    assert len(usage_store.read_history("mail")) == 1


def test_list_records_skips_malformed(usage_store):
    """Test that listing records skips rows with unreadable history."""
    usage_store.append_history("mail", snapshot_at(0))
    usage_store.append_history("maps", snapshot_at(0))
    corrupt_history(usage_store, "mail", "not json")

    records = usage_store.list_records()

    assert [r.app_id for r in records] == ["maps"]


def test_remove(usage_store):
    """Test removing an application."""
    usage_store.update_base_weight("mail", 0.1)

    assert usage_store.remove("mail") is True
    assert usage_store.remove("mail") is False
    assert usage_store.get_record("mail") is None
