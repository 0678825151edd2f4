"""CLI for recomputing the related memos of every embedded memo in a local memo store"""

import argparse
import logging

from echolog.config import settings
from echolog.linking import SimilarityLinker
from echolog.memo_stores.local import LocalMemoStore

logger = logging.getLogger(__name__)


def main(memo_store_path: str, owner_ids: list[str]) -> None:
    memo_store = LocalMemoStore(filepath=memo_store_path)
    linker = SimilarityLinker(
        memo_store,
        similarity_threshold=settings.similarity_threshold,
        max_related=settings.max_related_memos,
    )

    for owner_id in owner_ids:
        relinked = linker.relink_owner(owner_id)
        logger.info(f"Relinked {relinked} memos for {owner_id}")

    memo_store.save()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--memo-store",
        type=str,
        required=False,
        help="Local memo store file",
        default=settings.local_memo_store_path,
    )
    parser.add_argument(
        "--owner",
        type=str,
        action="append",
        required=False,
        help="Owner to relink, can be repeated. Defaults to every configured user.",
    )

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level)

    main(
        memo_store_path=args.memo_store,
        owner_ids=args.owner or list(settings.users),
    )
