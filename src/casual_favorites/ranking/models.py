"""
Data structures produced by ranking passes.

These are ephemeral: regenerated on every pass and never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from casual_favorites.context.patterns import UsagePattern
from casual_favorites.models import ContextSnapshot


class PipelineState(str, Enum):
    IDLE = "idle"
    RECOMPUTING = "recomputing"


@dataclass
class ScoredCandidate:
    """
    One application scored in a ranking pass.

    Attributes:
        app_id: Application identifier
        base_weight: Stored long-run weight (unclamped)
        context_similarity: KNN context score of the app's own history (0.0-1.0)
        combined_score: Final ranking score
        tags: Short explanations (e.g. "no_history", "used on Office")
        matched_patterns: Usage patterns of the app that hold right now
        history_size: Number of history entries that were scored
    """

    app_id: str
    base_weight: float
    context_similarity: float
    combined_score: float
    tags: List[str] = field(default_factory=list)
    matched_patterns: List[UsagePattern] = field(default_factory=list)
    history_size: int = 0


@dataclass
class RankingExplanation:
    """Diagnostic breakdown of one application's score."""

    app_id: str
    base_weight: float
    context_similarity: float
    combined_score: float
    matched_facets: List[UsagePattern]
    history_size: int
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PublishedRanking:
    """
    The last published ranking together with the snapshot it was computed for.

    Replaced as a whole, so the pair is never observed half-updated.
    """

    snapshot: Optional[ContextSnapshot]
    candidates: List[ScoredCandidate]

    @property
    def app_ids(self) -> List[str]:
        return [candidate.app_id for candidate in self.candidates]
