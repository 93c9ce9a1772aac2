"""
Storage protocols for usage tracking.

Provides protocol definitions for storage backends. Implementations can use
various databases (SQLite, PostgreSQL, Redis, in-memory, etc.) as long as
they satisfy the protocol interface.
"""

from casual_favorites.storage.protocols import CandidateSource, UsageStore
from casual_favorites.storage.usage.memory import InMemoryUsageStore

__all__ = [
    "UsageStore",
    "CandidateSource",
    "InMemoryUsageStore",
]

try:
    from casual_favorites.storage.usage.sqlalchemy import SQLAlchemyUsageStore  # noqa: F401

    __all__.append("SQLAlchemyUsageStore")
except ImportError:
    pass

try:
    from casual_favorites.storage.usage.redis import RedisUsageStore  # noqa: F401

    __all__.append("RedisUsageStore")
except ImportError:
    pass
