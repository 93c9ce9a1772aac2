"""
Change-aware ranking: candidate scoring and the reactive pipeline.
"""

from casual_favorites.ranking.models import (
    PipelineState,
    PublishedRanking,
    RankingExplanation,
    ScoredCandidate,
)
from casual_favorites.ranking.pipeline import RankingPipeline
from casual_favorites.ranking.scorer import CandidateScorer

__all__ = [
    "PipelineState",
    "PublishedRanking",
    "RankingExplanation",
    "ScoredCandidate",
    "RankingPipeline",
    "CandidateScorer",
]
