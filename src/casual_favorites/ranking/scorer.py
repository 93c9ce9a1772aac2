"""
Candidate scoring.

The single scoring path shared by the production ranking and by
``explain_ranking``: encode the current context, match it against each
application's own history, blend with the long-run weight.
"""

import logging
from typing import List, Optional, Sequence

from casual_favorites.config import RankingSettings
from casual_favorites.context.encoder import ContextVector, encode
from casual_favorites.context.patterns import describe, matching_patterns
from casual_favorites.models import ContextSnapshot
from casual_favorites.ranking.models import ScoredCandidate
from casual_favorites.scoring.combiner import ScoreCombiner
from casual_favorites.scoring.distance import ContextMetric
from casual_favorites.scoring.knn import KNNContextMatcher
from casual_favorites.storage.protocols import UsageStore

logger = logging.getLogger(__name__)

STRONG_MATCH_THRESHOLD = 0.8
GOOD_MATCH_THRESHOLD = 0.6


class CandidateScorer:
    """
    Scores candidate applications against a context snapshot.

    Failures are contained per candidate: an unreadable history counts as
    empty and an unreadable weight as 0.0, so one bad record never aborts
    a ranking pass.
    """

    def __init__(self, store: UsageStore, settings: RankingSettings):
        self.store = store
        self.matcher = KNNContextMatcher(
            k=settings.knn_k,
            metric=ContextMetric(settings.dimension_weights, settings.similarity_decay_rate),
        )
        self.combiner = ScoreCombiner(alpha=settings.knn_alpha)

    def _read_weight(self, app_id: str) -> float:
        try:
            return self.store.read_base_weight(app_id)
        except Exception as e:
            logger.warning(f"Could not read weight of {app_id}, using 0.0: {e}")
            return 0.0

    def _read_history(self, app_id: str) -> Optional[List[ContextSnapshot]]:
        """History snapshots, or None when the stored history is unreadable."""
        try:
            return [entry.snapshot for entry in self.store.read_history(app_id)]
        except Exception as e:
            logger.warning(f"Treating history of {app_id} as empty: {e}")
            return None

    def score_one(
        self, app_id: str, snapshot: ContextSnapshot, current: Optional[ContextVector] = None
    ) -> ScoredCandidate:
        """Score a single application in the given context."""
        current = current or encode(snapshot)
        base_weight = self._read_weight(app_id)
        history = self._read_history(app_id)

        if not history:
            tag = "history_unavailable" if history is None else "no_history"
            return ScoredCandidate(
                app_id=app_id,
                base_weight=base_weight,
                context_similarity=0.0,
                combined_score=self.combiner.combine(0.0, base_weight, has_history=False),
                tags=[tag],
            )

        context_similarity = self.matcher.score_app(current, [encode(s) for s in history])
        combined = self.combiner.combine(context_similarity, base_weight, has_history=True)

        patterns = matching_patterns(history, snapshot)
        tags = []
        if context_similarity > STRONG_MATCH_THRESHOLD:
            tags.append("strong_context_match")
        elif context_similarity > GOOD_MATCH_THRESHOLD:
            tags.append("context_match")
        tags.extend(describe(p) for p in patterns)

        return ScoredCandidate(
            app_id=app_id,
            base_weight=base_weight,
            context_similarity=context_similarity,
            combined_score=combined,
            tags=tags,
            matched_patterns=patterns,
            history_size=len(history),
        )

    def score(self, app_ids: Sequence[str], snapshot: ContextSnapshot) -> List[ScoredCandidate]:
        """
        Score and order candidates, highest combined score first.

        Ties keep the candidate source's order.
        """
        current = encode(snapshot)
        scored = [self.score_one(app_id, snapshot, current) for app_id in app_ids]
        scored.sort(key=lambda c: c.combined_score, reverse=True)

        logger.debug(
            f"Scored {len(scored)} candidates: "
            f"{[(c.app_id, round(c.combined_score, 3)) for c in scored[:10]]}"
        )

        return scored

    def score_by_weight(self, app_ids: Sequence[str]) -> List[ScoredCandidate]:
        """Order candidates by base weight alone (context-aware ranking disabled)."""
        scored = []
        for app_id in app_ids:
            base_weight = self._read_weight(app_id)
            scored.append(
                ScoredCandidate(
                    app_id=app_id,
                    base_weight=base_weight,
                    context_similarity=0.0,
                    combined_score=base_weight,
                    tags=["base_weight_only"],
                )
            )
        scored.sort(key=lambda c: c.combined_score, reverse=True)
        return scored
