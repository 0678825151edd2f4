"""Fire-and-forget entry points that keep the related-memo relation up to date."""

from echolog.domain.memo import Memo

from .linker import SimilarityLinker
from .worker import BackgroundTaskWorker


class LinkTriggers:
    """Hands linker work to a background worker.

    Callers get no result and no error: the relation is updated best-effort after
    the triggering request has already been answered.
    """

    def __init__(self, linker: SimilarityLinker, worker: BackgroundTaskWorker):
        self.linker = linker
        self.worker = worker

    def on_memo_created_or_reembedded(self, memo: Memo) -> None:
        if not memo.has_embedding:
            return
        self.worker.submit(f"link:{memo.id}", self.linker.link_memo, memo)

    def on_memo_deleted(self, memo_id: str) -> None:
        self.worker.submit(f"cleanup:{memo_id}", self.linker.cleanup_links, memo_id)
