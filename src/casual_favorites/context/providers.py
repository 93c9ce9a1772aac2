"""
Facet providers for context snapshots.

Each provider samples one facet of the current context. Platform access is
hidden behind small source protocols so the providers can run (and be
tested) without a device runtime. A provider that cannot produce its facet
raises FacetUnavailableError or returns None; the snapshot producer turns
either into an absent facet.

Platform sources are synchronous and may block (a permission check, a
radio query), so providers read them in a worker thread. The event loop
stays free and the producer's timeout can fire.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from typing_extensions import runtime_checkable

from casual_favorites.exceptions import FacetUnavailableError
from casual_favorites.models import (
    ConnectionType,
    DeviceContext,
    NetworkContext,
    Orientation,
    PeripheralCategory,
    PeripheralContext,
    TimeContext,
)

logger = logging.getLogger(__name__)

TIME_FACET = "time"
NETWORK_FACET = "network"
PERIPHERALS_FACET = "peripherals"
DEVICE_FACET = "device"

# Identifiers reported by platforms that hide the real network name
UNKNOWN_NETWORK_IDS = {"<unknown ssid>", "0x"}


@runtime_checkable
class FacetProvider(Protocol):
    """
    Protocol for facet providers.

    ``facet`` names the snapshot field this provider fills
    ("time", "network", "peripherals" or "device").
    """

    @property
    def facet(self) -> str:
        ...

    async def sample(self):
        """
        Produce the current facet value.

        Returns:
            The facet model, or None when unavailable

        Raises:
            FacetUnavailableError: If the facet cannot be sampled
        """
        ...


class TimeContextProvider:
    """Derives hour, day of week and time slot from a clock."""

    facet = TIME_FACET

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    async def sample(self) -> TimeContext:
        return TimeContext.at(self._clock())


class NetworkStateSource(Protocol):
    """Platform binding reporting the active connection."""

    def connection_type(self) -> ConnectionType:
        ...

    def network_id(self) -> Optional[str]:
        """Identifier of the current network; None when hidden or not permitted."""
        ...


class NetworkContextProvider:
    facet = NETWORK_FACET

    def __init__(self, source: NetworkStateSource):
        self._source = source

    async def sample(self) -> NetworkContext:
        return await asyncio.to_thread(self._read)

    def _read(self) -> NetworkContext:
        connection_type = self._source.connection_type()

        network_id = None
        if connection_type == ConnectionType.WIFI:
            network_id = _clean_network_id(self._source.network_id())

        logger.debug(f"Network facet: type={connection_type.value}, id={network_id}")
        return NetworkContext(connection_type=connection_type, network_id=network_id)


def _clean_network_id(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    network_id = raw.strip()
    if len(network_id) >= 2 and network_id.startswith('"') and network_id.endswith('"'):
        network_id = network_id[1:-1]
    if not network_id or network_id in UNKNOWN_NETWORK_IDS:
        return None
    return network_id


class DeviceStateSource(Protocol):
    def is_charging(self) -> bool:
        ...

    def orientation(self) -> Orientation:
        ...


class DeviceContextProvider:
    facet = DEVICE_FACET

    def __init__(self, source: DeviceStateSource):
        self._source = source

    async def sample(self) -> DeviceContext:
        return await asyncio.to_thread(self._read)

    def _read(self) -> DeviceContext:
        return DeviceContext(
            is_charging=self._source.is_charging(),
            orientation=self._source.orientation(),
        )


# Major device classes reported by peripheral bindings
MAJOR_CLASS_AUDIO_VIDEO = "audio_video"
MAJOR_CLASS_PERIPHERAL = "peripheral"
MAJOR_CLASS_WEARABLE = "wearable"


class PeripheralDevice(Protocol):
    """A paired peripheral as exposed by the platform binding."""

    @property
    def name(self) -> Optional[str]:
        ...

    @property
    def address(self) -> str:
        ...

    @property
    def major_class(self) -> Optional[str]:
        ...

    @property
    def connected(self) -> bool:
        """Current connection state of the peripheral."""
        ...


class PeripheralSource(Protocol):
    def permission_granted(self) -> bool:
        ...

    def paired_devices(self) -> List[PeripheralDevice]:
        ...


def categorize_peripheral(major_class: Optional[str], name: Optional[str]) -> PeripheralCategory:
    """
    Map a peripheral's major class and name to a category.

    Audio/video devices are split by name into speakers and car kits,
    defaulting to headphones.
    """
    lowered = (name or "").lower()

    if major_class == MAJOR_CLASS_AUDIO_VIDEO:
        if "headphone" in lowered:
            return PeripheralCategory.HEADPHONES
        if "speaker" in lowered:
            return PeripheralCategory.SPEAKERS
        if "car" in lowered:
            return PeripheralCategory.CAR
        return PeripheralCategory.HEADPHONES
    if major_class == MAJOR_CLASS_PERIPHERAL:
        if "mouse" in lowered:
            return PeripheralCategory.MOUSE
        return PeripheralCategory.KEYBOARD
    if major_class == MAJOR_CLASS_WEARABLE:
        if "fit" in lowered or "band" in lowered:
            return PeripheralCategory.FITNESS_TRACKER
        return PeripheralCategory.WATCH
    return PeripheralCategory.OTHER


class PeripheralContextProvider:
    facet = PERIPHERALS_FACET

    def __init__(self, source: PeripheralSource):
        self._source = source

    async def sample(self) -> PeripheralContext:
        return await asyncio.to_thread(self._read)

    def _read(self) -> PeripheralContext:
        if not self._source.permission_granted():
            raise FacetUnavailableError(self.facet, "permission not granted")

        devices = set()
        categories = set()
        seen_addresses = set()

        for device in self._source.paired_devices():
            if not device.connected or device.address in seen_addresses:
                continue
            seen_addresses.add(device.address)

            devices.add(device.name or device.address)
            categories.add(categorize_peripheral(device.major_class, device.name))

        logger.debug(f"Peripheral facet: {len(devices)} connected, categories={categories}")

        return PeripheralContext(
            connected_devices=frozenset(devices),
            categories=frozenset(categories),
        )
