"""
Usage analytics.

Aggregates stored usage records into a summary of where and when
applications get launched. Diagnostic only; nothing here feeds the ranking.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from casual_favorites.models import TimeSlot, UsageRecord

logger = logging.getLogger(__name__)

TOP_N = 5


@dataclass
class UsageAnalytics:
    """
    Summary of context data across all tracked applications.

    Attributes:
        total_apps: Number of tracked applications
        apps_with_context: Applications with at least one history entry
        average_history_size: Mean history length over apps with context
        most_active_time_slot: Time slot with the most recorded launches
        top_networks: Most frequent network identifiers with launch counts
        top_peripheral_categories: Most frequent connected peripheral categories
        charging_ratio: Share of launches (with device data) while charging
        portrait_ratio: Share of launches (with device data) in portrait
    """

    total_apps: int = 0
    apps_with_context: int = 0
    average_history_size: float = 0.0
    most_active_time_slot: Optional[TimeSlot] = None
    top_networks: List[Tuple[str, int]] = field(default_factory=list)
    top_peripheral_categories: List[Tuple[str, int]] = field(default_factory=list)
    charging_ratio: float = 0.0
    portrait_ratio: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_apps": self.total_apps,
            "apps_with_context": self.apps_with_context,
            "average_history_size": round(self.average_history_size, 2),
            "most_active_time_slot": (
                self.most_active_time_slot.value if self.most_active_time_slot else None
            ),
            "top_networks": dict(self.top_networks),
            "top_peripheral_categories": dict(self.top_peripheral_categories),
            "charging_ratio": round(self.charging_ratio, 3),
            "portrait_ratio": round(self.portrait_ratio, 3),
        }


def summarize_usage(records: Sequence[UsageRecord]) -> UsageAnalytics:
    """
    Summarize the context history of a set of usage records.

    Args:
        records: Records as returned by ``UsageStore.list_records()``

    Returns:
        UsageAnalytics (all zero/empty for no records)
    """
    with_context = [r for r in records if r.history]

    slots: Counter = Counter()
    networks: Counter = Counter()
    categories: Counter = Counter()
    device_samples = 0
    charging = 0
    portrait = 0

    for record in with_context:
        for snapshot in record.history:
            if snapshot.time is not None:
                slots[snapshot.time.time_slot] += 1
            if snapshot.network is not None and snapshot.network.network_id:
                networks[snapshot.network.network_id] += 1
            if snapshot.peripherals is not None:
                categories.update(c.value for c in snapshot.peripherals.categories)
            if snapshot.device is not None:
                device_samples += 1
                charging += snapshot.device.is_charging
                portrait += snapshot.device.orientation.value == "portrait"

    analytics = UsageAnalytics(
        total_apps=len(records),
        apps_with_context=len(with_context),
        average_history_size=(
            sum(len(r.history) for r in with_context) / len(with_context) if with_context else 0.0
        ),
        most_active_time_slot=slots.most_common(1)[0][0] if slots else None,
        top_networks=networks.most_common(TOP_N),
        top_peripheral_categories=categories.most_common(TOP_N),
        charging_ratio=charging / device_samples if device_samples else 0.0,
        portrait_ratio=portrait / device_samples if device_samples else 0.0,
    )

    logger.debug(f"Usage analytics: {analytics.to_dict()}")

    return analytics
