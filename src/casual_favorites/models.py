from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TimeSlot(str, Enum):
    EARLY_MORNING = "early_morning"  # 5-8
    MORNING = "morning"  # 9-11
    MIDDAY = "midday"  # 12-14
    AFTERNOON = "afternoon"  # 15-17
    EVENING = "evening"  # 18-20
    NIGHT = "night"  # 21-23
    LATE_NIGHT = "late_night"  # 0-4


class ConnectionType(str, Enum):
    NONE = "none"
    MOBILE = "mobile"
    WIFI = "wifi"


class PeripheralCategory(str, Enum):
    HEADPHONES = "headphones"
    SPEAKERS = "speakers"
    CAR = "car"
    KEYBOARD = "keyboard"
    MOUSE = "mouse"
    WATCH = "watch"
    FITNESS_TRACKER = "fitness_tracker"
    OTHER = "other"


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


def time_slot_for_hour(hour: int) -> TimeSlot:
    """Bucket an hour of the day (0-23) into its time slot."""
    if 5 <= hour <= 8:
        return TimeSlot.EARLY_MORNING
    if 9 <= hour <= 11:
        return TimeSlot.MORNING
    if 12 <= hour <= 14:
        return TimeSlot.MIDDAY
    if 15 <= hour <= 17:
        return TimeSlot.AFTERNOON
    if 18 <= hour <= 20:
        return TimeSlot.EVENING
    if 21 <= hour <= 23:
        return TimeSlot.NIGHT
    return TimeSlot.LATE_NIGHT


class TimeContext(BaseModel):
    """Temporal facet of a snapshot."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(..., ge=0, le=23)
    day_of_week: int = Field(..., ge=1, le=7, description="1=Monday, 7=Sunday")
    time_slot: TimeSlot

    @classmethod
    def at(cls, moment: datetime) -> "TimeContext":
        return cls(
            hour=moment.hour,
            day_of_week=moment.isoweekday(),
            time_slot=time_slot_for_hour(moment.hour),
        )


class NetworkContext(BaseModel):
    """Connectivity facet. ``network_id`` is None when the identifier is hidden."""

    model_config = ConfigDict(frozen=True)

    connection_type: ConnectionType
    network_id: Optional[str] = None


class PeripheralContext(BaseModel):
    """Paired-device facet: connected peripherals and their categories."""

    model_config = ConfigDict(frozen=True)

    connected_devices: FrozenSet[str] = frozenset()
    categories: FrozenSet[PeripheralCategory] = frozenset()


class DeviceContext(BaseModel):
    """Device-state facet."""

    model_config = ConfigDict(frozen=True)

    is_charging: bool = False
    orientation: Orientation = Orientation.PORTRAIT


class ContextSnapshot(BaseModel):
    """
    Point-in-time bundle of context facets.

    Each facet is independently optional: it is None when the underlying
    sensor was unavailable while sampling. Snapshots are immutable.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    time: Optional[TimeContext] = None
    network: Optional[NetworkContext] = None
    peripherals: Optional[PeripheralContext] = None
    device: Optional[DeviceContext] = None

    def same_facets(self, other: "ContextSnapshot") -> bool:
        """Compare every facet, ignoring the capture timestamp."""
        return (
            self.time == other.time
            and self.network == other.network
            and self.peripherals == other.peripherals
            and self.device == other.device
        )


class HistoryEntry(BaseModel):
    """One past launch of an application, with the context it happened in."""

    model_config = ConfigDict(frozen=True)

    snapshot: ContextSnapshot
    launched_at: datetime


class UsageRecord(BaseModel):
    """Per-application usage state: long-run weight, launch counter and context history."""

    app_id: str
    weight: float = Field(default=0.0, description="Saturating EMA weight, typically 0-1")
    launch_count: int = Field(default=0, ge=0)
    history: List[ContextSnapshot] = Field(
        default_factory=list, description="Past launch contexts, oldest first"
    )
