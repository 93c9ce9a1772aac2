"""
Change-aware ranking pipeline.

Listens for context change signals, re-samples the context and recomputes
the ranking only when a facet actually changed. Rankings are pushed to
subscribers of ``get_ranking()``.
"""

import asyncio
import logging
from contextlib import suppress
from typing import AsyncIterator, List, Optional

from casual_favorites.config import RankingSettings
from casual_favorites.context.changes import context_diff, has_context_changed
from casual_favorites.context.encoder import encode
from casual_favorites.context.snapshot import ContextSnapshotProducer
from casual_favorites.events import ContextSignal, SignalBus, SignalSubscription
from casual_favorites.models import ContextSnapshot
from casual_favorites.ranking.models import (
    PipelineState,
    PublishedRanking,
    RankingExplanation,
    ScoredCandidate,
)
from casual_favorites.ranking.scorer import CandidateScorer
from casual_favorites.scoring.knn import AppUsageVector, KNNResult
from casual_favorites.storage.protocols import CandidateSource, UsageStore

logger = logging.getLogger(__name__)


def _offer_latest(queue: asyncio.Queue, item) -> None:
    """Put an item on a single-slot queue, replacing one not yet consumed."""
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(item)


class RankingPipeline:
    """
    Reactive ranking service.

    Construction is inert; ``start()`` subscribes to the signal bus and owns
    the background task, ``stop()`` tears it down. Usable as an async
    context manager.

    Only one ranking pass runs at a time. Signals or refresh requests that
    arrive during a pass are coalesced into a single follow-up pass.
    """

    def __init__(
        self,
        producer: ContextSnapshotProducer,
        store: UsageStore,
        candidates: CandidateSource,
        bus: Optional[SignalBus] = None,
        settings: Optional[RankingSettings] = None,
        limit: Optional[int] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            producer: Samples the current context
            store: Usage storage (read only here)
            candidates: Source of the candidate pool
            bus: Signal bus to listen on (a private one is created if omitted)
            settings: Ranking settings (defaults loaded from the environment)
            limit: Number of applications in a published ranking
        """
        self.producer = producer
        self.store = store
        self.candidates = candidates
        self.bus = bus or SignalBus()
        self.settings = settings or RankingSettings()
        self.limit = limit if limit is not None else self.settings.ranking_limit
        if self.limit < 1:
            raise ValueError(f"Ranking limit must be at least 1, got {self.limit}")
        self.scorer = CandidateScorer(store, self.settings)

        self.state = PipelineState.IDLE
        self.recompute_count = 0
        self.published_count = 0

        self._published: Optional[PublishedRanking] = None
        self._dirty = False
        self._in_flight = False
        self._subscription: Optional[SignalSubscription] = None
        self._runner: Optional[asyncio.Task] = None
        self._listeners: List["asyncio.Queue[Optional[PublishedRanking]]"] = []

        logger.info(
            f"RankingPipeline initialized (limit={self.limit}, "
            f"smart_enabled={self.settings.smart_enabled})"
        )

    # Lifecycle

    async def start(self) -> None:
        """Subscribe to context signals and run an initial pass."""
        if self._runner is not None:
            return

        self._subscription = self.bus.subscribe()
        self._subscription.push(ContextSignal.REFRESH)
        self._runner = asyncio.create_task(self._run())

        logger.info("RankingPipeline started")

    async def stop(self) -> None:
        """Cancel the background task and end all ranking streams."""
        if self._runner is not None:
            self._runner.cancel()
            with suppress(asyncio.CancelledError):
                await self._runner
            self._runner = None

        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

        for listener in self._listeners:
            _offer_latest(listener, None)

        logger.info("RankingPipeline stopped")

    async def __aenter__(self) -> "RankingPipeline":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _run(self) -> None:
        async for signal in self._subscription:
            dropped = self._subscription.drain()
            logger.debug(
                f"Handling {signal.value} signal"
                + (f" ({dropped} coalesced)" if dropped else "")
            )
            await self._request_pass()

    # Published state

    @property
    def current_ranking(self) -> List[str]:
        if self._published is None:
            return []
        return self._published.app_ids

    @property
    def last_snapshot(self) -> Optional[ContextSnapshot]:
        if self._published is None:
            return None
        return self._published.snapshot

    async def get_ranking(self, limit: Optional[int] = None) -> AsyncIterator[List[str]]:
        """
        Stream rankings as they are published.

        Yields the current ranking first (if one exists), then every newly
        published ranking. The stream ends only when the pipeline stops.
        A consumer that falls behind only sees the latest ranking.

        Args:
            limit: Truncate each ranking to this many applications
        """
        queue: "asyncio.Queue[Optional[PublishedRanking]]" = asyncio.Queue(maxsize=1)
        self._listeners.append(queue)

        try:
            if self._published is not None:
                yield self._published.app_ids[:limit]

            while True:
                published = await queue.get()
                if published is None:
                    return
                yield published.app_ids[:limit]
        finally:
            self._listeners.remove(queue)

    def _publish(self, snapshot: Optional[ContextSnapshot], ranked: List[ScoredCandidate]) -> None:
        published = PublishedRanking(snapshot=snapshot, candidates=ranked)
        self._published = published
        self.published_count += 1

        for listener in self._listeners:
            _offer_latest(listener, published)

        logger.info(f"Ranking published: {published.app_ids}")

    # Passes

    async def refresh_now(self) -> None:
        """Force a re-sample; recomputes only if the context changed."""
        await self._request_pass()

    async def _request_pass(self) -> None:
        self._dirty = True
        if self._in_flight:
            logger.debug("Ranking pass in flight, coalescing request")
            return

        self._in_flight = True
        try:
            while self._dirty:
                self._dirty = False
                await self._run_pass()
        finally:
            self._in_flight = False

    async def _run_pass(self) -> None:
        try:
            if not self.settings.smart_enabled:
                self._publish_by_weight()
                return

            snapshot = await self.producer.sample()
            if not has_context_changed(self.last_snapshot, snapshot):
                logger.debug("Context unchanged, skipping recomputation")
                return

            logger.debug(f"Context changed: {context_diff(self.last_snapshot, snapshot)}")

            self.state = PipelineState.RECOMPUTING
            self.recompute_count += 1
            pool = self.candidates.list_candidates(self.settings.pool_size(self.limit))
            ranked = self.scorer.score(pool, snapshot)[: self.limit]
            self._publish(snapshot, ranked)

        except Exception as e:
            logger.error(f"Ranking pass failed, falling back to base weights: {e}")
            try:
                self._publish_by_weight(force=True)
            except Exception as fallback_error:
                logger.error(f"Base weight fallback failed: {fallback_error}")
        finally:
            self.state = PipelineState.IDLE

    def _publish_by_weight(self, force: bool = False) -> None:
        pool = self.candidates.list_candidates(self.settings.pool_size(self.limit))
        ranked = self.scorer.score_by_weight(pool)[: self.limit]

        if not force and self._published is not None:
            if [c.app_id for c in ranked] == self._published.app_ids:
                logger.debug("Base weight ranking unchanged")
                return

        self._publish(self.last_snapshot, ranked)

    # Diagnostics

    async def explain_ranking(self, app_id: str) -> RankingExplanation:
        """
        Break down one application's score in the last published context.

        Samples a fresh context if nothing has been published yet.
        """
        snapshot = self.last_snapshot or await self.producer.sample()
        scored = self.scorer.score_one(app_id, snapshot)

        return RankingExplanation(
            app_id=app_id,
            base_weight=scored.base_weight,
            context_similarity=scored.context_similarity,
            combined_score=scored.combined_score,
            matched_facets=scored.matched_patterns,
            history_size=scored.history_size,
            tags=scored.tags,
        )

    async def nearest_apps(self) -> List[KNNResult]:
        """
        Cross-application KNN over the candidate pool's pooled history.

        Diagnostic only: the published ranking never uses this.
        """
        snapshot = self.last_snapshot or await self.producer.sample()
        usages = []
        for app_id in self.candidates.list_candidates(self.settings.pool_size(self.limit)):
            try:
                history = self.store.read_history(app_id)
            except Exception as e:
                logger.warning(f"Skipping {app_id} in nearest apps: {e}")
                continue
            usages.extend(
                AppUsageVector(app_id=app_id, vector=encode(entry.snapshot), timestamp=entry.launched_at)
                for entry in history
            )

        return self.scorer.matcher.rank_apps(encode(snapshot), usages)
