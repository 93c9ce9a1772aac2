"""
casual-favorites: Context-aware usage ranking of applications.

Core components:
- context: Facet providers, snapshot sampling, vector encoding, change detection
- scoring: Weighted distance, KNN context matching, score blending, EMA weights
- ranking: Change-aware ranking pipeline and score explanations
- storage: Protocol abstractions and backends for usage history
- models: Core data models (ContextSnapshot, UsageRecord, etc.)
"""

__version__ = "0.1.0"

from casual_favorites.config import RankingSettings, load_settings
from casual_favorites.events import ContextSignal, SignalBus
from casual_favorites.exceptions import FacetUnavailableError, FavoritesError, HistoryDecodeError
from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    DeviceContext,
    HistoryEntry,
    NetworkContext,
    Orientation,
    PeripheralCategory,
    PeripheralContext,
    TimeContext,
    TimeSlot,
    UsageRecord,
)
from casual_favorites.ranking import RankingExplanation, RankingPipeline
from casual_favorites.usage import UsageTracker

__all__ = [
    "__version__",
    # Models
    "TimeSlot",
    "ConnectionType",
    "PeripheralCategory",
    "Orientation",
    "TimeContext",
    "NetworkContext",
    "PeripheralContext",
    "DeviceContext",
    "ContextSnapshot",
    "HistoryEntry",
    "UsageRecord",
    # Configuration
    "RankingSettings",
    "load_settings",
    # Errors
    "FavoritesError",
    "HistoryDecodeError",
    "FacetUnavailableError",
    # Services
    "ContextSignal",
    "SignalBus",
    "UsageTracker",
    "RankingPipeline",
    "RankingExplanation",
]
