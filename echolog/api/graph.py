"""Knowledge graph endpoint."""

from fastapi import APIRouter, Depends, Query

from echolog.api.auth import verify_credentials
from echolog.config import settings
from echolog.domain.graph import GraphData
from echolog.graph import ForceDirectedLayout, GraphBuilder
from echolog.memo_stores.base import MemoStore


def get_graph_router(
    *, memo_store: MemoStore, builder: GraphBuilder, layout: ForceDirectedLayout
) -> APIRouter:
    router = APIRouter()

    @router.get("/api/graph")
    async def get_graph(
        tag: str | None = None,
        limit: int = Query(default=settings.graph_memo_limit, ge=1, le=settings.graph_memo_limit),
        owner_id: str = Depends(verify_credentials),
    ) -> GraphData:
        # The tag filter applies within the most recent window, not to the whole collection
        memos = memo_store.list_memos(owner_id, limit=limit)
        graph = builder.build_graph(memos, tag=tag)
        return layout.layout(graph)

    return router
