"""
Change detection between context snapshots.

A snapshot only counts as changed when one of its facets differs; drift in
the capture timestamp alone never triggers a recomputation.
"""

import logging
from typing import Any, Dict, Optional

from casual_favorites.models import ContextSnapshot

logger = logging.getLogger(__name__)


def has_context_changed(old: Optional[ContextSnapshot], new: ContextSnapshot) -> bool:
    """
    Check whether any facet differs between two snapshots.

    Args:
        old: Last published snapshot, or None before the first publish
        new: Freshly sampled snapshot

    Returns:
        True if there is no previous snapshot or any facet differs
    """
    if old is None:
        return True

    return not old.same_facets(new)


def _attr(facet: Any, name: str) -> Any:
    return getattr(facet, name) if facet is not None else None


def context_diff(old: Optional[ContextSnapshot], new: ContextSnapshot) -> Dict[str, Any]:
    """
    Describe what changed between two snapshots, for debug logging.

    Returns:
        Mapping of changed facet fields to "old -> new" descriptions
    """
    if old is None:
        return {"status": "initial context"}

    diff: Dict[str, Any] = {}

    for field in ("hour", "time_slot", "day_of_week"):
        before, after = _attr(old.time, field), _attr(new.time, field)
        if before != after:
            diff[f"time.{field}"] = f"{before} -> {after}"

    for field in ("network_id", "connection_type"):
        before, after = _attr(old.network, field), _attr(new.network, field)
        if before != after:
            diff[f"network.{field}"] = f"{before} -> {after}"

    old_devices = _attr(old.peripherals, "connected_devices") or frozenset()
    new_devices = _attr(new.peripherals, "connected_devices") or frozenset()
    if new_devices - old_devices:
        diff["peripherals.added"] = sorted(new_devices - old_devices)
    if old_devices - new_devices:
        diff["peripherals.removed"] = sorted(old_devices - new_devices)

    old_categories = _attr(old.peripherals, "categories")
    new_categories = _attr(new.peripherals, "categories")
    if old_categories != new_categories:
        diff["peripherals.categories"] = f"{old_categories} -> {new_categories}"

    for field in ("is_charging", "orientation"):
        before, after = _attr(old.device, field), _attr(new.device, field)
        if before != after:
            diff[f"device.{field}"] = f"{before} -> {after}"

    if not diff and not old.same_facets(new):
        # A facet went from absent to present (or back) with identical field values
        diff["status"] = "facet availability changed"
    elif not diff:
        diff["status"] = "no meaningful changes"

    return diff
