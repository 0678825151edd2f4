"""Force-directed placement of knowledge graph nodes."""

import numpy as np

from echolog.domain.graph import GraphData


class ForceDirectedLayout:
    """Fixed-iteration spring layout.

    Nodes start evenly spaced on a circle in input order. Every iteration, each pair
    of nodes repels with magnitude ``repulsion / d**2`` (``d`` clamped to at least
    ``min_distance``) and each edge pulls its endpoints together with magnitude
    ``attraction * d``. The summed force moves every node by ``force * damping``.
    There is no randomness and no early exit, so equal input gives equal output.
    """

    def __init__(
        self,
        *,
        repulsion: float = 1000.0,
        attraction: float = 0.01,
        damping: float = 0.5,
        iterations: int = 50,
        center: tuple[float, float] = (200.0, 200.0),
        radius: float = 150.0,
        min_distance: float = 1.0,
    ):
        self.repulsion = repulsion
        self.attraction = attraction
        self.damping = damping
        self.iterations = iterations
        self.center = center
        self.radius = radius
        self.min_distance = min_distance

    def layout(self, graph: GraphData) -> GraphData:
        """Return a copy of the graph with node positions filled in."""
        if not graph.nodes:
            return graph.model_copy(deep=True)

        positions = self.initial_positions(len(graph.nodes))
        sources, targets = self._edge_indices(graph)

        for _ in range(self.iterations):
            forces = self._repulsive_forces(positions)
            if sources.size:
                forces += self._attractive_forces(positions, sources, targets)
            positions = positions + forces * self.damping

        nodes = [
            node.model_copy(update={"x": float(x), "y": float(y)})
            for node, (x, y) in zip(graph.nodes, positions)
        ]
        return GraphData(nodes=nodes, edges=[edge.model_copy() for edge in graph.edges])

    def initial_positions(self, count: int) -> np.ndarray:
        """Place ``count`` nodes evenly on the starting circle."""
        angles = np.arange(count, dtype=np.float64) * (2 * np.pi / count)
        return np.column_stack(
            (
                self.center[0] + self.radius * np.cos(angles),
                self.center[1] + self.radius * np.sin(angles),
            )
        )

    def _repulsive_forces(self, positions: np.ndarray) -> np.ndarray:
        # delta[i, j] points from node i to node j
        delta = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
        distance = np.maximum(np.linalg.norm(delta, axis=-1), self.min_distance)
        magnitude = self.repulsion / (distance * distance)
        np.fill_diagonal(magnitude, 0.0)
        return -((delta / distance[..., np.newaxis]) * magnitude[..., np.newaxis]).sum(axis=1)

    def _attractive_forces(
        self, positions: np.ndarray, sources: np.ndarray, targets: np.ndarray
    ) -> np.ndarray:
        # Unit direction times attraction * d reduces to attraction * delta
        pull = self.attraction * (positions[targets] - positions[sources])
        forces = np.zeros_like(positions)
        np.add.at(forces, sources, pull)
        np.add.at(forces, targets, -pull)
        return forces

    @staticmethod
    def _edge_indices(graph: GraphData) -> tuple[np.ndarray, np.ndarray]:
        index = {node.id: i for i, node in enumerate(graph.nodes)}
        pairs = [
            (index[edge.source_id], index[edge.target_id])
            for edge in graph.edges
            if edge.source_id in index and edge.target_id in index
        ]
        if not pairs:
            return np.empty(0, dtype=np.intp), np.empty(0, dtype=np.intp)
        sources, targets = zip(*pairs)
        return np.array(sources, dtype=np.intp), np.array(targets, dtype=np.intp)
