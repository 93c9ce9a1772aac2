"""
Unit tests for candidate scoring.
"""

from datetime import datetime

import pytest

from casual_favorites.config import RankingSettings
from casual_favorites.context.patterns import NetworkPattern
from casual_favorites.exceptions import HistoryDecodeError
from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    DeviceContext,
    NetworkContext,
    TimeContext,
)
from casual_favorites.ranking.scorer import CandidateScorer
from casual_favorites.storage.usage.memory import InMemoryUsageStore


def snapshot(hour, network_id="Office", connection=ConnectionType.WIFI):
    moment = datetime(2024, 1, 1, hour, 0)
    return ContextSnapshot(
        timestamp=moment,
        time=TimeContext.at(moment),
        network=NetworkContext(connection_type=connection, network_id=network_id),
        device=DeviceContext(),
    )


class BrokenHistoryStore(InMemoryUsageStore):
    """Store whose history for one app cannot be decoded."""

    def read_history(self, app_id):
        if app_id == "broken":
            raise HistoryDecodeError(app_id, "bad payload")
        return super().read_history(app_id)


@pytest.fixture
def store():
    store = BrokenHistoryStore()
    for hour in (8, 9, 10, 9, 8):
        store.append_history("mail", snapshot(hour))
    for _ in range(5):
        store.append_history("games", snapshot(22, None, ConnectionType.MOBILE))
    store.set_base_weight("mail", 0.1)
    store.set_base_weight("games", 1.0)
    store.set_base_weight("broken", 0.6)
    store.set_base_weight("new", 0.3)
    return store


@pytest.fixture
def scorer(store):
    return CandidateScorer(store, RankingSettings())


def test_context_match_outranks_higher_weight(scorer):
    """Test that an app used in this context beats a heavier app used elsewhere."""
    ranked = scorer.score(["games", "mail"], snapshot(9))

    assert [c.app_id for c in ranked] == ["mail", "games"]
    assert ranked[0].combined_score > ranked[1].combined_score
    assert ranked[0].context_similarity > 0.9
    assert ranked[0].history_size == 5


def test_no_history_scores_base_weight(scorer):
    """Test that an app without history scores exactly its base weight."""
    candidate = scorer.score_one("new", snapshot(9))

    assert candidate.combined_score == 0.3
    assert candidate.context_similarity == 0.0
    assert candidate.tags == ["no_history"]


def test_undecodable_history_falls_back_to_base_weight(scorer):
    """Test that a broken history counts as empty instead of failing the pass."""
    ranked = scorer.score(["broken", "mail", "new"], snapshot(9))
    broken = next(c for c in ranked if c.app_id == "broken")

    assert len(ranked) == 3
    assert broken.combined_score == 0.6
    assert broken.tags == ["history_unavailable"]


def test_weight_read_failure_defaults_to_zero(store, scorer, monkeypatch):
    """Test that an unreadable weight is treated as 0.0."""

    def fail(app_id):
        raise RuntimeError("storage offline")

    monkeypatch.setattr(store, "read_base_weight", fail)

    candidate = scorer.score_one("new", snapshot(9))

    assert candidate.base_weight == 0.0
    assert candidate.combined_score == 0.0


def test_tags_describe_matches(scorer):
    """Test tags for strong matches and matched patterns."""
    candidate = scorer.score_one("mail", snapshot(9))

    assert "strong_context_match" in candidate.tags
    assert "used on Office" in candidate.tags
    assert NetworkPattern(network_id="Office", strength=1.0) in candidate.matched_patterns


def test_ties_keep_source_order(store):
    """Test that equal scores keep the candidate source's order."""
    store.set_base_weight("a", 0.5)
    store.set_base_weight("b", 0.5)
    scorer = CandidateScorer(store, RankingSettings())

    ranked = scorer.score(["b", "a"], snapshot(9))

    assert [c.app_id for c in ranked] == ["b", "a"]


def test_score_by_weight(scorer):
    """Test base-weight-only ordering."""
    ranked = scorer.score_by_weight(["mail", "new", "games", "broken"])

    assert [c.app_id for c in ranked] == ["games", "broken", "new", "mail"]
    assert all(c.tags == ["base_weight_only"] for c in ranked)


def test_alpha_from_settings(store):
    """Test that the blend factor comes from the settings."""
    scorer = CandidateScorer(store, RankingSettings(knn_alpha=1.0))

    candidate = scorer.score_one("mail", snapshot(9))

    assert candidate.combined_score == pytest.approx(candidate.context_similarity)
