"""Building the knowledge graph from memos and their related lists."""

import logging

from echolog.domain.graph import GraphData, GraphEdge, GraphNode, edge_key
from echolog.domain.memo import Memo

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Builds a deduplicated, undirected graph from memos."""

    def __init__(self, default_edge_weight: float = 0.8):
        """Initialize the builder.

        Args:
            default_edge_weight: Weight given to edges without a known similarity
        """
        self.default_edge_weight = default_edge_weight

    def build_graph(
        self,
        memos: list[Memo],
        tag: str | None = None,
        similarities: dict[str, float] | None = None,
    ) -> GraphData:
        """Build the graph for a set of memos.

        Args:
            memos: Memos to include, with their related lists already computed
            tag: If given, only memos carrying this tag become nodes
            similarities: Known similarity per canonical edge key ("min-max"). Related
                lists store ids only, so edges rebuilt from them fall back to the
                default weight unless the caller has the raw score at hand.

        Returns:
            GraphData with unpositioned nodes and one edge per related pair
        """
        if tag is not None:
            memos = [memo for memo in memos if tag in memo.tags]

        nodes = self._build_nodes(memos)
        edges = self._build_edges(memos, {node.id for node in nodes}, similarities or {})

        logger.debug(f"Built graph with {len(nodes)} nodes and {len(edges)} edges")
        return GraphData(nodes=nodes, edges=edges)

    def _build_nodes(self, memos: list[Memo]) -> list[GraphNode]:
        return [
            GraphNode(
                id=memo.id,
                label=memo.title,
                tags=list(memo.tags),
                connection_count=len(memo.related_memo_ids),
                created_at=memo.created_at,
            )
            for memo in memos
        ]

    def _build_edges(
        self, memos: list[Memo], node_ids: set[str], similarities: dict[str, float]
    ) -> list[GraphEdge]:
        edges = []
        seen = set()

        for memo in memos:
            for related_id in memo.related_memo_ids:
                if related_id == memo.id:
                    continue
                key, source_id, target_id = edge_key(memo.id, related_id)
                if key in seen:
                    continue
                # Related memo deleted or outside the loaded window
                if source_id not in node_ids or target_id not in node_ids:
                    continue

                edges.append(
                    GraphEdge(
                        id=key,
                        source_id=source_id,
                        target_id=target_id,
                        similarity=similarities.get(key, self.default_edge_weight),
                    )
                )
                seen.add(key)

        return edges
