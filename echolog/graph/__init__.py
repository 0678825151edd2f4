"""Knowledge graph construction and layout."""

from echolog.graph.builder import GraphBuilder
from echolog.graph.layout import ForceDirectedLayout

__all__ = [
    "ForceDirectedLayout",
    "GraphBuilder",
]
