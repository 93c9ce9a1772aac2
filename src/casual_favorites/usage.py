"""
Launch tracking.

Each launch of an application updates its long-run weight and, when
context-aware ranking is enabled, records the context it was launched in.
"""

import logging
from typing import Optional

from casual_favorites.config import RankingSettings
from casual_favorites.context.snapshot import ContextSnapshotProducer
from casual_favorites.models import ContextSnapshot
from casual_favorites.storage.protocols import UsageStore

logger = logging.getLogger(__name__)


class UsageTracker:
    """Writes launch events to a UsageStore (the single writer per application)."""

    def __init__(
        self,
        store: UsageStore,
        producer: ContextSnapshotProducer,
        settings: Optional[RankingSettings] = None,
    ):
        self.store = store
        self.producer = producer
        self.settings = settings or RankingSettings()

    async def touch(self, app_id: str) -> float:
        """
        Record a launch of an application in the current context.

        Args:
            app_id: The launched application

        Returns:
            The application's new weight
        """
        snapshot = None
        if self.settings.smart_enabled:
            snapshot = await self.producer.sample()

        return self.record_launch(app_id, snapshot)

    def record_launch(self, app_id: str, snapshot: Optional[ContextSnapshot] = None) -> float:
        """
        Record a launch with an already sampled context.

        The EMA update does not depend on the context; the snapshot is only
        appended to the history.
        """
        weight = self.store.update_base_weight(app_id, self.settings.weight_factor_value)

        if snapshot is not None:
            self.store.append_history(app_id, snapshot, max_entries=self.settings.max_history)

        logger.info(f"Launch recorded for {app_id} (weight={weight:.4f})")

        return weight
