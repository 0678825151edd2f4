"""Errors raised by the association engine and the memo store."""


class DimensionMismatch(ValueError):
    """Two embeddings being compared do not have the same length."""

    def __init__(self, left: int, right: int) -> None:
        super().__init__(f"Cannot compare vectors of length {left} and {right}")
        self.left = left
        self.right = right


class MemoNotFound(KeyError):
    """A memo does not exist, was soft-deleted or belongs to another owner."""

    def __init__(self, memo_id: str) -> None:
        super().__init__(memo_id)
        self.memo_id = memo_id

    def __str__(self) -> str:
        return f"Memo {self.memo_id} not found"


class StoreWriteFailure(RuntimeError):
    """The memo store could not persist a mutation."""
