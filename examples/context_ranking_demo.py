"""
Context Ranking Demo

Simulates a phone whose context moves from a morning at the office to a
late evening on mobile data, and shows how the favourites ranking follows.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from casual_favorites import ContextSignal, RankingPipeline, RankingSettings, SignalBus, UsageTracker
from casual_favorites.context import (
    ContextSnapshotProducer,
    DeviceContextProvider,
    NetworkContextProvider,
    PeripheralContextProvider,
    TimeContextProvider,
)
from casual_favorites.context.providers import MAJOR_CLASS_AUDIO_VIDEO
from casual_favorites.models import ConnectionType, Orientation
from casual_favorites.storage import InMemoryUsageStore


@dataclass
class SimulatedDevice:
    name: Optional[str]
    address: str
    major_class: Optional[str]
    connected: bool = False


class SimulatedPhone:
    """Stands in for the platform bindings of a real device."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 9, 0)
        self.connection = ConnectionType.WIFI
        self.ssid: Optional[str] = '"Office"'
        self.charging = False
        self.headphones = SimulatedDevice("Buds", "AA:BB:CC:00:11:22", MAJOR_CLASS_AUDIO_VIDEO)

    # NetworkStateSource
    def connection_type(self) -> ConnectionType:
        return self.connection

    def network_id(self) -> Optional[str]:
        return self.ssid

    # DeviceStateSource
    def is_charging(self) -> bool:
        return self.charging

    def orientation(self) -> Orientation:
        return Orientation.PORTRAIT

    # PeripheralSource
    def permission_granted(self) -> bool:
        return True

    def paired_devices(self) -> List[SimulatedDevice]:
        return [self.headphones]


async def main():
    print("=== Context Ranking Demo ===\n")

    phone = SimulatedPhone()
    settings = RankingSettings(weight_factor="high")
    store = InMemoryUsageStore()
    bus = SignalBus()

    producer = ContextSnapshotProducer.from_settings(
        [
            TimeContextProvider(clock=lambda: phone.now),
            NetworkContextProvider(phone),
            DeviceContextProvider(phone),
            PeripheralContextProvider(phone),
        ],
        settings,
        clock=lambda: phone.now,
    )
    tracker = UsageTracker(store, producer, settings)

    # Build some history: mail in the morning at work, podcasts in the evening
    for hour in (8, 9, 10, 9, 8):
        phone.now = datetime(2024, 1, 1, hour, 0)
        await tracker.touch("mail")
    phone.connection, phone.ssid, phone.headphones.connected = ConnectionType.MOBILE, None, True
    for hour in (21, 22, 22, 23, 22, 21, 22, 22):
        phone.now = datetime(2024, 1, 1, hour, 0)
        await tracker.touch("podcasts")
    await tracker.touch("camera")

    for app_id in ("mail", "podcasts", "camera"):
        print(f"  {app_id:<10} weight={store.read_base_weight(app_id):.3f}")
    print()

    # Morning at the office again
    phone.now = datetime(2024, 1, 8, 9, 0)
    phone.connection, phone.ssid, phone.headphones.connected = ConnectionType.WIFI, '"Office"', False

    async with RankingPipeline(producer, store, store, bus=bus, settings=settings, limit=3) as pipeline:
        stream = pipeline.get_ranking()

        print(f"Monday 9:00, office Wi-Fi:    {await stream.__anext__()}")

        explanation = await pipeline.explain_ranking("mail")
        print(
            f"  mail: similarity={explanation.context_similarity:.3f}, "
            f"score={explanation.combined_score:.3f}, tags={explanation.tags}"
        )

        # Evening commute: headphones connect, Wi-Fi drops
        phone.now = datetime(2024, 1, 8, 22, 0)
        phone.connection, phone.ssid, phone.headphones.connected = ConnectionType.MOBILE, None, True
        bus.emit(ContextSignal.CONNECTIVITY)
        bus.emit(ContextSignal.PERIPHERAL)

        print(f"Monday 22:00, mobile + Buds:  {await stream.__anext__()}")

        explanation = await pipeline.explain_ranking("podcasts")
        print(
            f"  podcasts: similarity={explanation.context_similarity:.3f}, "
            f"score={explanation.combined_score:.3f}, tags={explanation.tags}"
        )

        await stream.aclose()

        print(f"\nRecomputations: {pipeline.recompute_count}, published: {pipeline.published_count}")


if __name__ == "__main__":
    asyncio.run(main())
