from typing import List
from uuid import uuid4

import numpy as np
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from loguru import logger

from echolog.api.auth import verify_credentials
from echolog.api.schemas import (
    ContentRequest,
    CreateMemoRequest,
    MemoResponse,
    Pagination,
    RecentMemosResponse,
    SearchMemoRequest,
    SearchResult,
    TagsResponse,
    TitleResponse,
    UpdateMemoRequest,
)
from echolog.config import settings
from echolog.domain.memo import Memo
from echolog.embedders.base import Embedder
from echolog.errors import MemoNotFound, StoreWriteFailure
from echolog.linking.triggers import LinkTriggers
from echolog.llms.base import MemoAnnotator
from echolog.memo_stores.base import MemoStore

QUERY_SEARCH_LIMIT = 20


def _validate_embedding(embedding: List[float] | None) -> np.ndarray | None:
    if embedding is None:
        return None
    if len(embedding) != settings.embedding_dimensions:
        raise HTTPException(
            status_code=400,
            detail=f"Embedding must have {settings.embedding_dimensions} dimensions",
        )
    return np.array(embedding, dtype=np.float32)


def _get_owned_memo(memo_store: MemoStore, memo_id: str, owner_id: str) -> Memo:
    memo = memo_store.get_memo(memo_id, owner_id=owner_id)
    if memo is None:
        raise MemoNotFound(memo_id)
    return memo


def _create_memo_endpoint(memo_store: MemoStore, link_triggers: LinkTriggers):
    """Create the memo creation endpoint handler."""

    async def create_memo(
        body: CreateMemoRequest,
        background_tasks: BackgroundTasks,
        owner_id: str = Depends(verify_credentials),
    ) -> MemoResponse:
        memo = Memo(
            id=uuid4().hex,
            owner_id=owner_id,
            audio_url=body.audio_url,
            transcription=body.transcription,
            summary=body.summary,
            tags=body.tags,
            embedding=_validate_embedding(body.embedding),
        )
        try:
            stored = memo_store.add_memo(memo)
        except StoreWriteFailure as e:
            logger.error(f"Error storing memo: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to store memo") from e

        # Linking starts after the response has been sent and is never awaited
        background_tasks.add_task(link_triggers.on_memo_created_or_reembedded, stored)
        return MemoResponse.from_memo(stored)

    return create_memo


def _create_recent_memos_endpoint(memo_store: MemoStore):
    """Create the recent memos endpoint handler."""

    async def get_recent_memos(
        limit: int = Query(default=10, ge=1, le=100),
        skip: int = Query(default=0, ge=0),
        owner_id: str = Depends(verify_credentials),
    ) -> RecentMemosResponse:
        memos, total = memo_store.list_recent(owner_id, skip=skip, limit=limit)
        return RecentMemosResponse(
            data=[MemoResponse.from_memo(memo) for memo in memos],
            pagination=Pagination(
                total=total, skip=skip, limit=limit, has_more=skip + len(memos) < total
            ),
        )

    return get_recent_memos


def _create_query_search_endpoint(memo_store: MemoStore, embedder: Embedder):
    """Create the free-text search endpoint handler."""

    async def search_memos_by_query(
        q: str = Query(..., min_length=1),
        owner_id: str = Depends(verify_credentials),
    ) -> List[SearchResult]:
        try:
            query_embedding = embedder.embed(q)
        except Exception as e:
            logger.error(f"Error embedding search query '{q}': {str(e)}")
            raise HTTPException(status_code=500, detail="Search failed") from e

        return _search(memo_store, owner_id, query_embedding, QUERY_SEARCH_LIMIT)

    return search_memos_by_query


def _create_embedding_search_endpoint(memo_store: MemoStore):
    """Create the embedding search endpoint handler."""

    async def search_memos_by_embedding(
        body: SearchMemoRequest,
        owner_id: str = Depends(verify_credentials),
    ) -> List[SearchResult]:
        query_embedding = _validate_embedding(body.embedding)
        return _search(memo_store, owner_id, query_embedding, body.limit)

    return search_memos_by_embedding


def _search(
    memo_store: MemoStore, owner_id: str, embedding: np.ndarray, limit: int
) -> List[SearchResult]:
    results = memo_store.search_by_embedding(
        owner_id, embedding, threshold=settings.search_similarity_threshold, limit=limit
    )
    return [
        SearchResult(**MemoResponse.from_memo(memo).model_dump(), similarity=similarity)
        for memo, similarity in results
    ]


def _create_get_memo_endpoint(memo_store: MemoStore):
    """Create the single memo endpoint handler."""

    async def get_memo(memo_id: str, owner_id: str = Depends(verify_credentials)) -> MemoResponse:
        try:
            return MemoResponse.from_memo(_get_owned_memo(memo_store, memo_id, owner_id))
        except MemoNotFound as err:
            raise HTTPException(status_code=404, detail="Memo not found") from err

    return get_memo


def _create_related_memos_endpoint(memo_store: MemoStore):
    """Create the related memos endpoint handler."""

    async def get_related_memos(
        memo_id: str, owner_id: str = Depends(verify_credentials)
    ) -> List[MemoResponse]:
        try:
            memo = _get_owned_memo(memo_store, memo_id, owner_id)
        except MemoNotFound as err:
            raise HTTPException(status_code=404, detail="Memo not found") from err

        # Dangling references are skipped, the related list keeps its order
        related = memo_store.get_memos_by_ids(memo.related_memo_ids)
        return [
            MemoResponse.from_memo(related[related_id])
            for related_id in memo.related_memo_ids
            if related_id in related and related[related_id].owner_id == owner_id
        ]

    return get_related_memos


def _create_update_memo_endpoint(memo_store: MemoStore, link_triggers: LinkTriggers):
    """Create the memo update endpoint handler."""

    async def update_memo(
        memo_id: str,
        body: UpdateMemoRequest,
        background_tasks: BackgroundTasks,
        owner_id: str = Depends(verify_credentials),
    ) -> MemoResponse:
        fields = body.model_dump(exclude_unset=True, exclude_none=True)
        reembedded = "embedding" in fields
        if reembedded:
            fields["embedding"] = _validate_embedding(fields["embedding"])

        try:
            updated = memo_store.update_memo(memo_id, owner_id, **fields)
        except StoreWriteFailure as e:
            logger.error(f"Error updating memo {memo_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to update memo") from e
        if updated is None:
            raise HTTPException(status_code=404, detail="Memo not found")

        if reembedded:
            background_tasks.add_task(link_triggers.on_memo_created_or_reembedded, updated)
        return MemoResponse.from_memo(updated)

    return update_memo


def _create_delete_memo_endpoint(memo_store: MemoStore, link_triggers: LinkTriggers):
    """Create the memo deletion endpoint handler."""

    async def delete_memo(
        memo_id: str,
        background_tasks: BackgroundTasks,
        owner_id: str = Depends(verify_credentials),
    ):
        try:
            deleted = memo_store.soft_delete(memo_id, owner_id)
        except StoreWriteFailure as e:
            logger.error(f"Error deleting memo {memo_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to delete memo") from e
        if not deleted:
            raise HTTPException(status_code=404, detail="Memo not found")

        background_tasks.add_task(link_triggers.on_memo_deleted, memo_id)
        return {"message": "Memo deleted successfully"}

    return delete_memo


def _create_title_endpoint(annotator: MemoAnnotator):
    """Create the title generation endpoint handler."""

    async def generate_title(
        body: ContentRequest, _: str = Depends(verify_credentials)
    ) -> TitleResponse:
        try:
            return TitleResponse(title=annotator.generate_title(body.content))
        except Exception as e:
            logger.error(f"Error generating title: {str(e)}")
            raise HTTPException(status_code=500, detail="Title generation failed") from e

    return generate_title


def _create_tags_endpoint(annotator: MemoAnnotator):
    """Create the tag extraction endpoint handler."""

    async def extract_tags(
        body: ContentRequest, _: str = Depends(verify_credentials)
    ) -> TagsResponse:
        try:
            return TagsResponse(tags=annotator.extract_tags(body.content))
        except Exception as e:
            logger.error(f"Error extracting tags: {str(e)}")
            raise HTTPException(status_code=500, detail="Tag extraction failed") from e

    return extract_tags


def get_endpoints_router(
    *,
    memo_store: MemoStore,
    embedder: Embedder,
    annotator: MemoAnnotator,
    link_triggers: LinkTriggers,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    router.post("/api/memos", status_code=201)(_create_memo_endpoint(memo_store, link_triggers))
    router.get("/api/memos")(_create_recent_memos_endpoint(memo_store))
    router.get("/api/memos/search")(_create_query_search_endpoint(memo_store, embedder))
    router.post("/api/memos/search")(_create_embedding_search_endpoint(memo_store))
    router.get("/api/memos/{memo_id}")(_create_get_memo_endpoint(memo_store))
    router.get("/api/memos/{memo_id}/related")(_create_related_memos_endpoint(memo_store))
    router.patch("/api/memos/{memo_id}")(_create_update_memo_endpoint(memo_store, link_triggers))
    router.delete("/api/memos/{memo_id}")(_create_delete_memo_endpoint(memo_store, link_triggers))
    router.post("/api/gpt/generate-title")(_create_title_endpoint(annotator))
    router.post("/api/gpt/extract-tags")(_create_tags_endpoint(annotator))

    return router
