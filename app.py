import sys

import instructor
from loguru import logger
from openai import OpenAI

from echolog.api import create_app
from echolog.cache import TTLCache
from echolog.config import settings
from echolog.embedders.openai_embedder import OpenAIEmbedder
from echolog.linking import BackgroundTaskWorker
from echolog.llms.base import MemoAnnotator
from echolog.llms.fallback_annotator import FallbackMemoAnnotator
from echolog.llms.instructor_annotator import InstructorMemoAnnotator
from echolog.memo_stores.local import LocalMemoStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

if not settings.openai_api_key:
    raise RuntimeError("ECHOLOG_OPENAI_API_KEY is required for embeddings")

logger.info("Initializing EchoLog with OpenAI embeddings")
openai_client = OpenAI(api_key=settings.openai_api_key)

annotator: MemoAnnotator
if settings.annotations_enabled:
    annotation_cache = TTLCache(default_ttl_seconds=settings.annotation_cache_ttl_seconds)
    annotation_cache.start_sweeper(settings.cache_sweep_interval_seconds)
    annotator = InstructorMemoAnnotator(
        instructor.from_openai(openai_client),
        annotation_cache,
        model=settings.llm_model,
        ttl_seconds=settings.annotation_cache_ttl_seconds,
    )
else:
    logger.warning("LLM annotations disabled, using the fallback annotator")
    annotator = FallbackMemoAnnotator()

memo_store = LocalMemoStore(settings.local_memo_store_path)
embedder = OpenAIEmbedder(
    api_key=settings.openai_api_key,
    model=settings.embedding_model,
    dimensions=settings.embedding_dimensions,
)
app = create_app(
    memo_store=memo_store,
    embedder=embedder,
    annotator=annotator,
    link_worker=BackgroundTaskWorker(),
)
