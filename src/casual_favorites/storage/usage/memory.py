"""
In-memory usage storage implementation.

Provides a simple in-memory store for usage weights and context histories,
suitable for testing and single-process deployments. Data is lost on restart.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional

from casual_favorites.models import ContextSnapshot, HistoryEntry, UsageRecord
from casual_favorites.scoring.weights import update_weight

logger = logging.getLogger(__name__)


@dataclass
class _Usage:
    weight: float = 0.0
    launch_count: int = 0
    history: Deque[ContextSnapshot] = field(default_factory=deque)


class InMemoryUsageStore:
    """
    In-memory implementation of the UsageStore and CandidateSource protocols.

    Histories are kept in deques; eviction is oldest-first.
    """

    def __init__(self):
        self._usages: Dict[str, _Usage] = {}

        logger.info("InMemoryUsageStore initialized")

    def read_history(self, app_id: str) -> List[HistoryEntry]:
        """Read an application's context history."""
        usage = self._usages.get(app_id)
        if usage is None:
            return []

        return [
            HistoryEntry(snapshot=snapshot, launched_at=snapshot.timestamp)
            for snapshot in usage.history
        ]

    def append_history(
        self, app_id: str, snapshot: ContextSnapshot, max_entries: int = 50
    ) -> int:
        """Append a launch context, evicting the oldest entries beyond the cap."""
        usage = self._usages.setdefault(app_id, _Usage())
        usage.history.append(snapshot)

        while len(usage.history) > max_entries:
            usage.history.popleft()

        logger.debug(f"Appended context for {app_id} (history size: {len(usage.history)})")

        return len(usage.history)

    def read_base_weight(self, app_id: str) -> float:
        """Read an application's long-run weight."""
        usage = self._usages.get(app_id)
        return usage.weight if usage else 0.0

    def update_base_weight(self, app_id: str, factor: float) -> float:
        """Apply the EMA update for one launch."""
        usage = self._usages.setdefault(app_id, _Usage())
        usage.weight = update_weight(usage.weight, factor)
        usage.launch_count += 1

        logger.debug(
            f"Updated weight for {app_id}: {usage.weight:.4f} "
            f"(launches: {usage.launch_count})"
        )

        return usage.weight

    def set_base_weight(self, app_id: str, weight: float) -> None:
        """Overwrite a weight directly (imports, resets)."""
        self._usages.setdefault(app_id, _Usage()).weight = weight

    def get_record(self, app_id: str) -> Optional[UsageRecord]:
        """Retrieve the full usage record of an application."""
        usage = self._usages.get(app_id)
        if usage is None:
            return None

        return UsageRecord(
            app_id=app_id,
            weight=usage.weight,
            launch_count=usage.launch_count,
            history=list(usage.history),
        )

    def list_records(self) -> List[UsageRecord]:
        """Return every tracked record."""
        return [self.get_record(app_id) for app_id in self._usages]

    def remove(self, app_id: str) -> bool:
        """Stop tracking an application."""
        if app_id not in self._usages:
            return False

        del self._usages[app_id]
        logger.info(f"Removed usage record for {app_id}")
        return True

    def list_candidates(self, pool_size: int) -> List[str]:
        """Tracked applications, highest weight first, up to pool_size."""
        ranked = sorted(self._usages.items(), key=lambda item: item[1].weight, reverse=True)
        return [app_id for app_id, _ in ranked[:pool_size]]

    def clear(self):
        """Clear ALL usage records from the store."""
        count = len(self._usages)
        self._usages.clear()
        logger.info(f"Cleared all usage records ({count} total)")
