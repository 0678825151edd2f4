import json
import logging
import threading
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Dict, List

import numpy as np

from echolog.domain.memo import Memo, utc_now
from echolog.errors import DimensionMismatch, StoreWriteFailure
from echolog.linking.vector_math import cosine_similarity
from echolog.memo_stores.base import MemoStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"transcription", "summary", "tags", "embedding"}


class LocalMemoStore(MemoStore):
    """Local memo store that keeps memos in a JSON file.

    Every mutation runs under a single lock, so adding or pulling one related id is
    atomic with respect to other writers. A reverse index (memo id -> ids of memos
    whose related list contains it) keeps link cleanup proportional to the number of
    referencing memos.
    """

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalMemoStore.

        Args:
            filepath: Path to memo store file. If provided and exists, will auto-load.
                     If provided, every mutation is written back to this path.
                     If not provided, the store lives in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._lock = threading.RLock()
        self._memos: Dict[str, Memo] = {}
        self._referenced_by: Dict[str, set[str]] = defaultdict(set)

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._memos = {
                memo_id: Memo(**memo_data) for memo_id, memo_data in data["memos"].items()
            }
            self._rebuild_reverse_index()

    @classmethod
    def from_memos(cls, memos: List[Memo]) -> "LocalMemoStore":
        """Create an in-memory LocalMemoStore holding the given memos (useful for testing)."""
        instance = cls(filepath=None)
        instance._memos = {memo.id: memo.model_copy(deep=True) for memo in memos}
        instance._rebuild_reverse_index()
        return instance

    def add_memo(self, memo: Memo) -> Memo:
        """Store a new memo."""
        with self._lock:
            if memo.id in self._memos:
                raise ValueError(f"Memo {memo.id} already exists")
            self._memos[memo.id] = memo.model_copy(deep=True)
            self._index_references(memo.id, memo.related_memo_ids)

            def undo() -> None:
                self._unindex_references(memo.id, memo.related_memo_ids)
                del self._memos[memo.id]

            self._persist(undo)
            return memo.model_copy(deep=True)

    def get_memo(self, memo_id: str, owner_id: str | None = None) -> Memo | None:
        """Get a memo by its ID, None if missing, deleted or owned by someone else."""
        with self._lock:
            memo = self._get_live(memo_id, owner_id)
            return memo.model_copy(deep=True) if memo else None

    def get_memos_by_ids(self, memo_ids: list[str]) -> dict[str, Memo]:
        """Get multiple memos by their IDs, returning a dictionary mapping ID to Memo.

        Args:
            memo_ids: List of memo IDs to retrieve

        Returns:
            Dictionary mapping memo_id to Memo for all found, non-deleted memos
        """
        with self._lock:
            return {
                memo_id: self._memos[memo_id].model_copy(deep=True)
                for memo_id in memo_ids
                if memo_id in self._memos and not self._memos[memo_id].is_deleted
            }

    def list_recent(self, owner_id: str, skip: int, limit: int) -> tuple[List[Memo], int]:
        """Get a page of an owner's memos, newest first, and the owner's total count."""
        with self._lock:
            memos = self._owned(owner_id)
            page = memos[skip : skip + limit]
            return [memo.model_copy(deep=True) for memo in page], len(memos)

    def list_memos(
        self, owner_id: str, tag: str | None = None, limit: int | None = None
    ) -> List[Memo]:
        """Get an owner's memos, newest first, optionally filtered by tag."""
        with self._lock:
            memos = self._owned(owner_id)
            if tag is not None:
                memos = [memo for memo in memos if tag in memo.tags]
            if limit is not None:
                memos = memos[:limit]
            return [memo.model_copy(deep=True) for memo in memos]

    def update_memo(self, memo_id: str, owner_id: str, **fields: Any) -> Memo | None:
        """Update transcription, summary, tags or embedding of a memo."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        with self._lock:
            memo = self._get_live(memo_id, owner_id)
            if memo is None:
                return None
            data = memo.model_dump()
            data.update(fields)
            data["updated_at"] = utc_now()
            updated = Memo.model_validate(data)
            self._memos[memo_id] = updated

            def undo() -> None:
                self._memos[memo_id] = memo

            self._persist(undo)
            return updated.model_copy(deep=True)

    def soft_delete(self, memo_id: str, owner_id: str) -> bool:
        """Mark a memo as deleted. Returns False if there was nothing to delete."""
        with self._lock:
            memo = self._get_live(memo_id, owner_id)
            if memo is None:
                return False
            memo.deleted_at = utc_now()

            def undo() -> None:
                memo.deleted_at = None

            self._persist(undo)
            return True

    def search_by_embedding(
        self, owner_id: str, embedding: np.ndarray, threshold: float, limit: int
    ) -> List[tuple[Memo, float]]:
        """Get an owner's memos whose similarity to the embedding is above the threshold.

        Results are sorted by similarity, highest first. Memos with an embedding of a
        different dimension are skipped.
        """
        with self._lock:
            scored = []
            for memo in self._memos.values():
                if memo.owner_id != owner_id or memo.is_deleted or not memo.has_embedding:
                    continue
                try:
                    similarity = cosine_similarity(embedding, memo.embedding)
                except DimensionMismatch as e:
                    logger.warning(f"Skipping memo {memo.id} in search: {e}")
                    continue
                if similarity > threshold:
                    scored.append((memo.model_copy(deep=True), similarity))

        scored.sort(key=lambda x: x[1], reverse=True)
        return scored[:limit]

    def fetch_candidates(self, owner_id: str, exclude_id: str) -> List[Memo]:
        """Get the owner's embedded, non-deleted memos, except exclude_id, in creation order."""
        with self._lock:
            return [
                memo.model_copy(deep=True)
                for memo in self._memos.values()
                if memo.owner_id == owner_id
                and memo.id != exclude_id
                and not memo.is_deleted
                and memo.has_embedding
            ]

    def replace_related(self, memo_id: str, related_ids: list[str]) -> None:
        """Replace the related list of a memo. Unknown memo IDs are ignored."""
        with self._lock:
            memo = self._memos.get(memo_id)
            if memo is None:
                logger.warning(f"Cannot replace related memos of unknown memo {memo_id}")
                return
            previous = memo.related_memo_ids
            self._unindex_references(memo_id, previous)
            memo.related_memo_ids = list(related_ids)
            self._index_references(memo_id, memo.related_memo_ids)

            def undo() -> None:
                self._unindex_references(memo_id, memo.related_memo_ids)
                memo.related_memo_ids = previous
                self._index_references(memo_id, previous)

            self._persist(undo)

    def add_related_if_absent(self, memo_id: str, related_id: str) -> bool:
        """Append related_id to the memo's related list unless it is already there."""
        with self._lock:
            memo = self._memos.get(memo_id)
            if memo is None or related_id in memo.related_memo_ids:
                return False
            memo.related_memo_ids.append(related_id)
            self._referenced_by[related_id].add(memo_id)

            def undo() -> None:
                memo.related_memo_ids.remove(related_id)
                self._unindex_references(memo_id, [related_id])

            self._persist(undo)
            return True

    def remove_related_everywhere(self, memo_id: str) -> int:
        """Remove memo_id from every related list. Returns the number of memos changed."""
        with self._lock:
            referencing_ids = self._referenced_by.pop(memo_id, set())
            previous: Dict[str, list[str]] = {}
            for referencing_id in referencing_ids:
                memo = self._memos.get(referencing_id)
                if memo is not None and memo_id in memo.related_memo_ids:
                    previous[referencing_id] = memo.related_memo_ids
                    memo.related_memo_ids = [
                        rid for rid in memo.related_memo_ids if rid != memo_id
                    ]

            def undo() -> None:
                for referencing_id, related_ids in previous.items():
                    self._memos[referencing_id].related_memo_ids = related_ids
                self._referenced_by[memo_id] = referencing_ids

            if previous:
                self._persist(undo)
            return len(previous)

    def get_referencing_ids(self, memo_id: str) -> set[str]:
        """Get the IDs of all memos whose related list contains memo_id."""
        with self._lock:
            return set(self._referenced_by.get(memo_id, set()))

    def save(self, filepath: str | None = None) -> None:
        """Save the memo store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        with self._lock:
            data = {
                "memos": {
                    memo_id: memo.model_dump(mode="json") for memo_id, memo in self._memos.items()
                }
            }
            Path(save_path).parent.mkdir(parents=True, exist_ok=True)
            with open(str(save_path), "w") as f:
                json.dump(data, f)

    def clear(self) -> None:
        """Clear all data from the store."""
        with self._lock:
            memos, referenced_by = self._memos, self._referenced_by
            self._memos, self._referenced_by = {}, defaultdict(set)

            def undo() -> None:
                self._memos, self._referenced_by = memos, referenced_by

            self._persist(undo)

    def _get_live(self, memo_id: str, owner_id: str | None) -> Memo | None:
        memo = self._memos.get(memo_id)
        if memo is None or memo.is_deleted:
            return None
        if owner_id is not None and memo.owner_id != owner_id:
            return None
        return memo

    def _owned(self, owner_id: str) -> List[Memo]:
        memos = [
            memo
            for memo in self._memos.values()
            if memo.owner_id == owner_id and not memo.is_deleted
        ]
        return sorted(memos, key=lambda memo: memo.created_at, reverse=True)

    def _index_references(self, memo_id: str, related_ids: list[str]) -> None:
        for related_id in related_ids:
            self._referenced_by[related_id].add(memo_id)

    def _unindex_references(self, memo_id: str, related_ids: list[str]) -> None:
        for related_id in related_ids:
            referencing = self._referenced_by.get(related_id)
            if referencing is None:
                continue
            referencing.discard(memo_id)
            if not referencing:
                del self._referenced_by[related_id]

    def _rebuild_reverse_index(self) -> None:
        self._referenced_by = defaultdict(set)
        for memo in self._memos.values():
            self._index_references(memo.id, memo.related_memo_ids)

    def _persist(self, undo: Callable[[], None]) -> None:
        """Write the store to its file, reverting the in-memory mutation if that fails."""
        if not self._filepath:
            return
        try:
            self.save()
        except OSError as e:
            undo()
            raise StoreWriteFailure(f"Failed to write memo store to {self._filepath}") from e
