from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from echolog.api.endpoints import get_endpoints_router
from echolog.api.graph import get_graph_router
from echolog.config import settings
from echolog.embedders.base import Embedder
from echolog.graph import ForceDirectedLayout, GraphBuilder
from echolog.linking import BackgroundTaskWorker, LinkTriggers, SimilarityLinker
from echolog.llms.base import MemoAnnotator
from echolog.memo_stores.base import MemoStore


def create_app(
    *,
    memo_store: MemoStore,
    embedder: Embedder,
    annotator: MemoAnnotator,
    link_worker: BackgroundTaskWorker,
) -> FastAPI:
    """Create FastAPI app."""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        link_worker.start()
        yield
        link_worker.stop()

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    linker = SimilarityLinker(
        memo_store,
        similarity_threshold=settings.similarity_threshold,
        max_related=settings.max_related_memos,
    )
    link_triggers = LinkTriggers(linker, link_worker)
    layout = ForceDirectedLayout(
        repulsion=settings.layout_repulsion,
        attraction=settings.layout_attraction,
        damping=settings.layout_damping,
        iterations=settings.layout_iterations,
        center=(settings.layout_center_x, settings.layout_center_y),
        radius=settings.layout_radius,
    )

    app.include_router(
        router=get_endpoints_router(
            memo_store=memo_store,
            embedder=embedder,
            annotator=annotator,
            link_triggers=link_triggers,
        )
    )
    app.include_router(
        router=get_graph_router(
            memo_store=memo_store,
            builder=GraphBuilder(default_edge_weight=settings.default_edge_weight),
            layout=layout,
        )
    )

    return app
