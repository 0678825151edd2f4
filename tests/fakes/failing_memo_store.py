from echolog.errors import StoreWriteFailure
from echolog.memo_stores.local import LocalMemoStore


class FailingMemoStore(LocalMemoStore):
    """In-memory memo store whose relation writes always fail."""

    def replace_related(self, memo_id: str, related_ids: list[str]) -> None:
        raise StoreWriteFailure(f"Cannot write related memos of {memo_id}")

    def remove_related_everywhere(self, memo_id: str) -> int:
        raise StoreWriteFailure(f"Cannot remove references to {memo_id}")
