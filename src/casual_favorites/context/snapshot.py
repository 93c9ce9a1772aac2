"""
Context snapshot producer.

Samples every facet provider concurrently and merges the results into one
immutable snapshot. A slow or failing provider only costs its own facet.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from casual_favorites.config import RankingSettings
from casual_favorites.context.providers import (
    DEVICE_FACET,
    NETWORK_FACET,
    PERIPHERALS_FACET,
    TIME_FACET,
    FacetProvider,
)
from casual_favorites.models import (
    ContextSnapshot,
    DeviceContext,
    NetworkContext,
    PeripheralContext,
    TimeContext,
)

logger = logging.getLogger(__name__)

DEFAULT_FACET_TIMEOUT = 0.5

_FACETS = (TIME_FACET, NETWORK_FACET, PERIPHERALS_FACET, DEVICE_FACET)

_FACET_TYPES: Dict[str, Type[BaseModel]] = {
    TIME_FACET: TimeContext,
    NETWORK_FACET: NetworkContext,
    PERIPHERALS_FACET: PeripheralContext,
    DEVICE_FACET: DeviceContext,
}


class ContextSnapshotProducer:
    """
    Produces ContextSnapshots from a set of facet providers.

    Sampling is edge-triggered: callers invoke ``sample()`` when an external
    signal suggests the context may have changed. There is no polling.
    """

    def __init__(
        self,
        providers: List[FacetProvider],
        timeout: float = DEFAULT_FACET_TIMEOUT,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the producer.

        Args:
            providers: One provider per facet; later providers for the same facet win
            timeout: Seconds each provider may take before its facet is dropped
            clock: Source of the capture timestamp
        """
        self._providers: Dict[str, FacetProvider] = {}
        for provider in providers:
            if provider.facet not in _FACETS:
                raise ValueError(f"Unknown facet: {provider.facet}")
            self._providers[provider.facet] = provider

        self._timeout = timeout
        self._clock = clock

        logger.info(
            f"ContextSnapshotProducer initialized with facets {sorted(self._providers)} "
            f"(timeout={timeout}s)"
        )

    @classmethod
    def from_settings(
        cls,
        providers: List[FacetProvider],
        settings: RankingSettings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "ContextSnapshotProducer":
        """Build a producer bounded by the configured facet timeout."""
        return cls(providers, timeout=settings.facet_timeout, clock=clock)

    @property
    def facets(self) -> List[str]:
        return sorted(self._providers)

    @property
    def timeout(self) -> float:
        return self._timeout

    async def _sample_facet(self, provider: FacetProvider):
        try:
            value = await asyncio.wait_for(provider.sample(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Facet '{provider.facet}' did not resolve within {self._timeout}s, "
                f"treating as unavailable"
            )
            return None
        except Exception as e:
            logger.warning(f"Facet '{provider.facet}' unavailable: {e}")
            return None

        if value is None:
            return None

        facet_type = _FACET_TYPES[provider.facet]
        try:
            return facet_type.model_validate(value)
        except ValidationError as e:
            logger.warning(
                f"Facet '{provider.facet}' produced an invalid {type(value).__name__}, "
                f"treating as unavailable: {e.error_count()} validation error(s)"
            )
            return None

    async def sample(self) -> ContextSnapshot:
        """
        Sample all facets concurrently into a new snapshot.

        Never raises: unavailable facets are left as None.
        """
        facets = list(self._providers)
        values = await asyncio.gather(
            *(self._sample_facet(self._providers[facet]) for facet in facets)
        )
        sampled: Dict[str, Optional[object]] = dict(zip(facets, values))

        snapshot = ContextSnapshot(timestamp=self._clock(), **sampled)

        missing = [facet for facet in _FACETS if sampled.get(facet) is None]
        logger.debug(f"Sampled context snapshot (missing facets: {missing or 'none'})")

        return snapshot
