"""Maintaining the related-memo relation from memo embeddings."""

import logging

import numpy as np

from echolog.domain.memo import Memo
from echolog.errors import DimensionMismatch
from echolog.memo_stores.base import MemoStore

from .vector_math import cosine_similarity

logger = logging.getLogger(__name__)


class SimilarityLinker:
    """Links each memo to its most similar memos of the same owner.

    The memo being linked gets its related list replaced by the top matches. Each of
    those neighbors gets a back-reference added if absent. Neighbor lists are neither
    re-ranked nor capped, because similarity scores are not stored: a memo that is
    never relinked itself can collect more than ``max_related`` back-references.
    """

    def __init__(
        self,
        memo_store: MemoStore,
        *,
        similarity_threshold: float = 0.75,
        max_related: int = 10,
    ):
        """Initialize the linker.

        Args:
            memo_store: Store to read candidates from and write relations to
            similarity_threshold: Minimum cosine similarity for two memos to be related
            max_related: Maximum length of the related list of a relinked memo
        """
        self.memo_store = memo_store
        self.similarity_threshold = similarity_threshold
        self.max_related = max_related

    def link_memo(self, memo: Memo) -> list[str]:
        """Recompute the related memos of a memo and add back-references to them.

        Args:
            memo: The new or re-embedded memo

        Returns:
            The memo's new related list, most similar first. Empty if the memo has
            been deleted since the link was requested.
        """
        current = self.memo_store.get_memo(memo.id)
        if current is None:
            logger.info(f"Memo {memo.id} no longer exists, skipping linking")
            return []
        memo = current

        if not memo.has_embedding:
            logger.debug(f"Memo {memo.id} has no embedding, skipping linking")
            return []

        candidates = self.memo_store.fetch_candidates(memo.owner_id, memo.id)
        ranked = self.rank_candidates(memo.embedding, candidates)
        related_ids = [memo_id for memo_id, _ in ranked]

        self.memo_store.replace_related(memo.id, related_ids)
        for related_id in related_ids:
            self.memo_store.add_related_if_absent(related_id, memo.id)

        logger.info(
            f"Linked memo {memo.id} to {len(related_ids)} of {len(candidates)} candidates"
        )
        return related_ids

    def rank_candidates(
        self, embedding: np.ndarray, candidates: list[Memo]
    ) -> list[tuple[str, float]]:
        """Score candidates against an embedding and keep the best ones.

        Candidates below the threshold are dropped, the rest are sorted by similarity
        with ties kept in candidate order, and at most ``max_related`` are returned.
        Candidates whose embedding has another dimension are skipped.

        Args:
            embedding: Embedding of the memo being linked
            candidates: Memos to compare against

        Returns:
            List of (memo_id, similarity) pairs
        """
        scored = []
        for candidate in candidates:
            try:
                similarity = cosine_similarity(embedding, candidate.embedding)
            except DimensionMismatch as e:
                logger.warning(f"Skipping candidate {candidate.id}: {e}")
                continue
            if similarity >= self.similarity_threshold:
                scored.append((candidate.id, similarity))

        scored.sort(key=lambda x: x[1], reverse=True)
        return scored[: self.max_related]

    def cleanup_links(self, memo_id: str) -> int:
        """Remove a deleted memo from every related list.

        Returns:
            Number of memos that referenced it
        """
        changed = self.memo_store.remove_related_everywhere(memo_id)
        logger.info(f"Removed memo {memo_id} from {changed} related lists")
        return changed

    def relink_owner(self, owner_id: str) -> int:
        """Relink every embedded memo of an owner, oldest first.

        Returns:
            Number of memos relinked
        """
        memos = sorted(
            (memo for memo in self.memo_store.list_memos(owner_id) if memo.has_embedding),
            key=lambda memo: memo.created_at,
        )
        for memo in memos:
            self.link_memo(memo)
        return len(memos)
