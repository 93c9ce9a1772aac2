"""
Storage protocol definitions for usage tracking.

These protocols define what the ranking engine needs from persistence. They
are implementation-agnostic and can be backed by SQL databases, Redis or
plain in-memory structures.
"""

from typing import List, Optional, Protocol

from typing_extensions import runtime_checkable

from casual_favorites.models import ContextSnapshot, HistoryEntry, UsageRecord


@runtime_checkable
class UsageStore(Protocol):
    """
    Protocol for per-application usage storage.

    Only the launch path writes a given application's record; the ranking
    pipeline only reads.
    """

    def read_history(self, app_id: str) -> List[HistoryEntry]:
        """
        Read an application's context history.

        Args:
            app_id: The application identifier

        Returns:
            History entries ordered oldest first; empty for unknown apps

        Raises:
            HistoryDecodeError: If the stored history cannot be decoded
        """
        ...

    def append_history(
        self, app_id: str, snapshot: ContextSnapshot, max_entries: int = 50
    ) -> int:
        """
        Append a launch context, evicting the oldest entries beyond the cap.

        Args:
            app_id: The application identifier
            snapshot: Context of the launch
            max_entries: Maximum number of entries to keep (FIFO eviction)

        Returns:
            Number of entries stored after the append
        """
        ...

    def read_base_weight(self, app_id: str) -> float:
        """
        Read an application's long-run weight.

        Returns:
            The stored weight, 0.0 for unknown apps
        """
        ...

    def update_base_weight(self, app_id: str, factor: float) -> float:
        """
        Register a launch: apply the EMA update and bump the launch counter.

        Creates the record on first launch.

        Args:
            app_id: The application identifier
            factor: EMA factor (0.01 / 0.03 / 0.1)

        Returns:
            The new weight
        """
        ...

    def get_record(self, app_id: str) -> Optional[UsageRecord]:
        """
        Retrieve the full usage record of an application.

        Returns:
            The record if tracked, None otherwise
        """
        ...

    def list_records(self) -> List[UsageRecord]:
        """Return every tracked record (used for diagnostics)."""
        ...

    def remove(self, app_id: str) -> bool:
        """
        Stop tracking an application, dropping its weight and history.

        Returns:
            True if a record was removed
        """
        ...


@runtime_checkable
class CandidateSource(Protocol):
    """Protocol for the pool of applications eligible for ranking."""

    def list_candidates(self, pool_size: int) -> List[str]:
        """
        List frequently used applications.

        Args:
            pool_size: Maximum number of candidates (a ceiling, not a requirement)

        Returns:
            Application identifiers, highest base weight first
        """
        ...
