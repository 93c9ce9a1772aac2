"""
Exceptions raised by casual-favorites components.

Most of these never reach the consumer of a ranking: the ranking pipeline
recovers from them locally and degrades towards a base-weight ordering.
"""


class FavoritesError(Exception):
    """Base class for casual-favorites errors."""


class HistoryDecodeError(FavoritesError):
    """A stored context history could not be decoded."""

    def __init__(self, app_id: str, reason: str):
        self.app_id = app_id
        self.reason = reason
        super().__init__(f"Undecodable context history for {app_id}: {reason}")


class FacetUnavailableError(FavoritesError):
    """A facet provider cannot produce a value (permission denied, sensor absent)."""

    def __init__(self, facet: str, reason: str = "unavailable"):
        self.facet = facet
        self.reason = reason
        super().__init__(f"Facet '{facet}' unavailable: {reason}")
