"""Semantic linking of memos: similarity, neighbor selection and background triggers."""

from echolog.linking.linker import SimilarityLinker
from echolog.linking.triggers import LinkTriggers
from echolog.linking.vector_math import cosine_similarity
from echolog.linking.worker import BackgroundTaskWorker

__all__ = [
    "BackgroundTaskWorker",
    "LinkTriggers",
    "SimilarityLinker",
    "cosine_similarity",
]
