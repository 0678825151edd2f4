"""Knowledge graph models. These only exist for visualization and are never persisted."""

from datetime import datetime

from pydantic import BaseModel


class GraphNode(BaseModel):
    """A memo placed in the knowledge graph."""

    id: str  # memo id
    label: str
    tags: list[str] = []
    connection_count: int = 0
    x: float = 0.0
    y: float = 0.0
    created_at: datetime


class GraphEdge(BaseModel):
    """An undirected relation between two memos, stored with source_id < target_id."""

    id: str
    source_id: str
    target_id: str
    similarity: float


class GraphData(BaseModel):
    """Nodes and edges of the knowledge graph."""

    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []


def edge_key(first_id: str, second_id: str) -> tuple[str, str, str]:
    """Return the canonical (key, source, target) for a pair of memo ids."""
    source_id, target_id = min(first_id, second_id), max(first_id, second_id)
    return f"{source_id}-{target_id}", source_id, target_id
