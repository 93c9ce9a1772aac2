"""
Redis usage storage implementation.

Keeps each application's context history in a Redis list (trimmed to the
cap on every append), weights in a sorted set so candidates come back
ordered, and launch counters in a hash. Survives restarts and can be shared
between processes.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from casual_favorites.exceptions import HistoryDecodeError
from casual_favorites.models import ContextSnapshot, HistoryEntry, UsageRecord
from casual_favorites.scoring.weights import update_weight

try:
    import redis
except ImportError:
    redis = None  # type: ignore

logger = logging.getLogger(__name__)


class RedisUsageStore:
    """
    Redis implementation of the UsageStore and CandidateSource protocols.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        key_prefix: str = "favorites:",
    ):
        """
        Initialize the Redis store.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            key_prefix: Prefix for Redis keys (default: "favorites:")
        """
        if redis is None:
            raise ImportError(
                "redis package is required for RedisUsageStore. "
                "Install with: pip install redis"
            )

        self.client = redis.Redis(host=host, port=port, db=db, decode_responses=True)
        self._key_prefix = key_prefix

        # Test connection
        try:
            self.client.ping()
            logger.info(f"RedisUsageStore initialized (host={host}:{port}, db={db})")
        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    def _history_key(self, app_id: str) -> str:
        return f"{self._key_prefix}history:{app_id}"

    @property
    def _weights_key(self) -> str:
        return f"{self._key_prefix}weights"

    @property
    def _launches_key(self) -> str:
        return f"{self._key_prefix}launches"

    def _decode(self, app_id: str, payloads: List[str]) -> List[ContextSnapshot]:
        try:
            return [ContextSnapshot.model_validate_json(payload) for payload in payloads]
        except ValidationError as e:
            raise HistoryDecodeError(app_id, f"{e.error_count()} validation error(s)") from e

    def read_history(self, app_id: str) -> List[HistoryEntry]:
        """Read an application's context history."""
        payloads = self.client.lrange(self._history_key(app_id), 0, -1)

        return [
            HistoryEntry(snapshot=snapshot, launched_at=snapshot.timestamp)
            for snapshot in self._decode(app_id, payloads)
        ]

    def append_history(
        self, app_id: str, snapshot: ContextSnapshot, max_entries: int = 50
    ) -> int:
        """Append a launch context, evicting the oldest entries beyond the cap."""
        key = self._history_key(app_id)

        pipeline = self.client.pipeline()
        pipeline.rpush(key, snapshot.model_dump_json())
        pipeline.ltrim(key, -max_entries, -1)
        pipeline.llen(key)
        _, _, size = pipeline.execute()

        logger.debug(f"Appended context for {app_id} (history size: {size})")

        return size

    def read_base_weight(self, app_id: str) -> float:
        """Read an application's long-run weight."""
        weight = self.client.zscore(self._weights_key, app_id)
        return float(weight) if weight is not None else 0.0

    def update_base_weight(self, app_id: str, factor: float) -> float:
        """Apply the EMA update for one launch."""
        new_weight = update_weight(self.read_base_weight(app_id), factor)

        pipeline = self.client.pipeline()
        pipeline.zadd(self._weights_key, {app_id: new_weight})
        pipeline.hincrby(self._launches_key, app_id, 1)
        pipeline.execute()

        logger.debug(f"Updated weight for {app_id}: {new_weight:.4f}")

        return new_weight

    def get_record(self, app_id: str) -> Optional[UsageRecord]:
        """Retrieve the full usage record of an application."""
        weight = self.client.zscore(self._weights_key, app_id)
        if weight is None:
            return None

        launches = self.client.hget(self._launches_key, app_id)
        history = self._decode(app_id, self.client.lrange(self._history_key(app_id), 0, -1))

        return UsageRecord(
            app_id=app_id,
            weight=float(weight),
            launch_count=int(launches or 0),
            history=history,
        )

    def list_records(self) -> List[UsageRecord]:
        """Return every tracked record, skipping unreadable histories."""
        records = []
        for app_id in self.client.zrevrange(self._weights_key, 0, -1):
            try:
                record = self.get_record(app_id)
            except HistoryDecodeError as e:
                logger.warning(f"Skipping record: {e}")
                continue
            if record is not None:
                records.append(record)
        return records

    def remove(self, app_id: str) -> bool:
        """Stop tracking an application."""
        pipeline = self.client.pipeline()
        pipeline.zrem(self._weights_key, app_id)
        pipeline.hdel(self._launches_key, app_id)
        pipeline.delete(self._history_key(app_id))
        removed, _, _ = pipeline.execute()

        if removed:
            logger.info(f"Removed usage record for {app_id}")

        return bool(removed)

    def list_candidates(self, pool_size: int) -> List[str]:
        """Tracked applications, highest weight first, up to pool_size."""
        return list(self.client.zrevrange(self._weights_key, 0, pool_size - 1))
