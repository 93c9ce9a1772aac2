"""
Context change signals.

Platform bindings publish zero-payload edges (connectivity changed, a
peripheral connected, power source changed, device rotated) on a SignalBus.
Subscribers never inspect the signal for context values: they re-sample.
"""

import asyncio
import logging
from enum import Enum
from typing import List

logger = logging.getLogger(__name__)


class ContextSignal(str, Enum):
    CONNECTIVITY = "connectivity"
    PERIPHERAL = "peripheral"
    POWER = "power"
    CONFIGURATION = "configuration"
    REFRESH = "refresh"


MAX_PENDING_SIGNALS = 32


class SignalSubscription:
    """
    A subscriber's queue of pending signals.

    Bounded: once full, further signals are dropped, since a queued signal
    already guarantees the subscriber will re-sample.
    """

    def __init__(self, bus: "SignalBus", max_pending: int = MAX_PENDING_SIGNALS):
        self._bus = bus
        self._queue: "asyncio.Queue[ContextSignal]" = asyncio.Queue(maxsize=max_pending)

    def push(self, signal: ContextSignal) -> None:
        if self._queue.full():
            logger.debug(f"Subscriber backlog full, dropping {signal.value} signal")
            return
        self._queue.put_nowait(signal)

    async def get(self) -> ContextSignal:
        return await self._queue.get()

    def drain(self) -> int:
        """Discard signals that are already queued; returns how many were dropped."""
        count = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            count += 1
        return count

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._bus.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ContextSignal:
        return await self.get()


class SignalBus:
    """
    Fan-out bus for context change signals.

    ``emit`` never blocks: each subscriber has its own bounded queue.
    """

    def __init__(self):
        self._subscriptions: List[SignalSubscription] = []

    def subscribe(self) -> SignalSubscription:
        subscription = SignalSubscription(self)
        self._subscriptions.append(subscription)
        logger.debug(f"Signal subscriber added ({len(self._subscriptions)} total)")
        return subscription

    def unsubscribe(self, subscription: SignalSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, signal: ContextSignal) -> None:
        logger.debug(f"Context signal: {signal.value}")
        for subscription in list(self._subscriptions):
            subscription.push(signal)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
