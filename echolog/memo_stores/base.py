from typing import Any, List, Protocol

import numpy as np

from echolog.domain.memo import Memo


class MemoStore(Protocol):
    def add_memo(self, memo: Memo) -> Memo:
        """Store a new memo."""
        ...

    def get_memo(self, memo_id: str, owner_id: str | None = None) -> Memo | None:
        """Get a memo by its ID, None if missing, deleted or owned by someone else."""
        ...

    def get_memos_by_ids(self, memo_ids: list[str]) -> dict[str, Memo]:
        """Get multiple memos by their IDs, returning a dictionary mapping ID to Memo.

        Missing and soft-deleted IDs are left out of the result.
        """
        ...

    def list_recent(self, owner_id: str, skip: int, limit: int) -> tuple[List[Memo], int]:
        """Get a page of an owner's memos, newest first, and the owner's total count."""
        ...

    def list_memos(
        self, owner_id: str, tag: str | None = None, limit: int | None = None
    ) -> List[Memo]:
        """Get an owner's memos, newest first, optionally filtered by tag."""
        ...

    def update_memo(self, memo_id: str, owner_id: str, **fields: Any) -> Memo | None:
        """Update fields of a memo, None if the memo is not found."""
        ...

    def soft_delete(self, memo_id: str, owner_id: str) -> bool:
        """Mark a memo as deleted. Returns False if there was nothing to delete."""
        ...

    def search_by_embedding(
        self, owner_id: str, embedding: np.ndarray, threshold: float, limit: int
    ) -> List[tuple[Memo, float]]:
        """Get an owner's memos whose similarity to the embedding exceeds the threshold."""
        ...

    def fetch_candidates(self, owner_id: str, exclude_id: str) -> List[Memo]:
        """Get the owner's embedded, non-deleted memos, except exclude_id, in creation order."""
        ...

    def replace_related(self, memo_id: str, related_ids: list[str]) -> None:
        """Replace the related list of a memo."""
        ...

    def add_related_if_absent(self, memo_id: str, related_id: str) -> bool:
        """Append related_id to the memo's related list unless already present."""
        ...

    def remove_related_everywhere(self, memo_id: str) -> int:
        """Remove memo_id from every related list. Returns the number of memos changed."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the memo store to disk."""
        ...

    def clear(self) -> None:
        """Clear all data from the store."""
        ...
