"""
Context vector encoding.

Projects a ContextSnapshot into a fixed 15-dimensional vector with every
dimension normalized to [0, 1]. Absent facets map to fixed neutral defaults
so the vector is always fully populated.
"""

from dataclasses import astuple, dataclass
from typing import Optional, Tuple

from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    Orientation,
    PeripheralCategory,
    TimeSlot,
)

VECTOR_DIMENSIONS = 15

# Defaults used when the time facet is absent (midday, Monday, afternoon slot)
DEFAULT_HOUR = 12
DEFAULT_DAY_OF_WEEK = 1
DEFAULT_TIME_SLOT = TimeSlot.AFTERNOON

MAX_PERIPHERAL_DEVICES = 10.0

NETWORK_HASH_BUCKETS = 10000

_FNV_OFFSET_BASIS = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_UINT64_MASK = 0xFFFFFFFFFFFFFFFF

_TIME_SLOT_INDEX = {
    TimeSlot.EARLY_MORNING: 0,
    TimeSlot.MORNING: 1,
    TimeSlot.MIDDAY: 2,
    TimeSlot.AFTERNOON: 3,
    TimeSlot.EVENING: 4,
    TimeSlot.NIGHT: 5,
    TimeSlot.LATE_NIGHT: 6,
}

_CONNECTION_VALUE = {
    ConnectionType.NONE: 0.0,
    ConnectionType.MOBILE: 0.5,
    ConnectionType.WIFI: 1.0,
}


@dataclass(frozen=True)
class ContextVector:
    """
    Fixed-size numeric representation of a context snapshot.

    Attributes:
        hour: Hour of day / 23
        day_of_week: (day - 1) / 6
        time_slot: Slot index / 6
        connection_type: 0.0 none, 0.5 mobile, 1.0 wifi
        network: Bucketed hash of the network identifier
        headphones..fitness_tracker: 1.0 when a peripheral of that category is connected
        device_count: Connected peripherals / 10, capped at 1.0
        charging: 1.0 when charging
        portrait: 1.0 in portrait orientation
    """

    hour: float
    day_of_week: float
    time_slot: float
    connection_type: float
    network: float
    headphones: float
    speakers: float
    car: float
    keyboard: float
    mouse: float
    watch: float
    fitness_tracker: float
    device_count: float
    charging: float
    portrait: float

    def as_tuple(self) -> Tuple[float, ...]:
        return astuple(self)


def network_hash(network_id: Optional[str]) -> float:
    """
    Reduce a network identifier to a reproducible value in [0, 1).

    Uses 64-bit FNV-1a over the UTF-8 bytes, bucketed modulo a fixed count.
    Collisions are tolerated; this is not a cryptographic hash.
    """
    if network_id is None:
        return 0.0

    value = _FNV_OFFSET_BASIS
    for byte in network_id.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _UINT64_MASK

    return (value % NETWORK_HASH_BUCKETS) / NETWORK_HASH_BUCKETS


def _flag(condition: bool) -> float:
    return 1.0 if condition else 0.0


def encode(snapshot: ContextSnapshot) -> ContextVector:
    """Encode a snapshot into a ContextVector. Pure and deterministic."""
    time = snapshot.time
    hour = time.hour if time else DEFAULT_HOUR
    day_of_week = time.day_of_week if time else DEFAULT_DAY_OF_WEEK
    time_slot = time.time_slot if time else DEFAULT_TIME_SLOT

    network = snapshot.network
    connection_type = network.connection_type if network else ConnectionType.NONE
    network_id = network.network_id if network else None

    peripherals = snapshot.peripherals
    categories = peripherals.categories if peripherals else frozenset()
    device_count = len(peripherals.connected_devices) if peripherals else 0

    device = snapshot.device
    is_charging = device.is_charging if device else False
    orientation = device.orientation if device else Orientation.PORTRAIT

    return ContextVector(
        hour=hour / 23.0,
        day_of_week=(day_of_week - 1) / 6.0,
        time_slot=_TIME_SLOT_INDEX[time_slot] / 6.0,
        connection_type=_CONNECTION_VALUE[connection_type],
        network=network_hash(network_id),
        headphones=_flag(PeripheralCategory.HEADPHONES in categories),
        speakers=_flag(PeripheralCategory.SPEAKERS in categories),
        car=_flag(PeripheralCategory.CAR in categories),
        keyboard=_flag(PeripheralCategory.KEYBOARD in categories),
        mouse=_flag(PeripheralCategory.MOUSE in categories),
        watch=_flag(PeripheralCategory.WATCH in categories),
        fitness_tracker=_flag(PeripheralCategory.FITNESS_TRACKER in categories),
        device_count=min(1.0, device_count / MAX_PERIPHERAL_DEVICES),
        charging=_flag(is_charging),
        portrait=_flag(orientation == Orientation.PORTRAIT),
    )
