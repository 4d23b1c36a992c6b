"""
Weighted undirected multigraph used by every analysis in graph-ids.

Nodes are dense integer indices ``0..node_count-1`` fixed at construction.
Edges are appended to per-node adjacency lists and never removed: an edge
between two distinct nodes is stored once in each endpoint's list, a
self-loop is stored once. ``total_weight`` counts every inserted edge once.
"""

import math
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Tuple

import networkx as nx

from graph_ids.exceptions import InvalidInputError


class Link(NamedTuple):
    """One adjacency entry: the neighbor and the weight of the edge to it."""

    node: int
    weight: float


class Graph:
    """
    Append-only weighted undirected graph.

    Typical graphs are small (one node per table or column touched by a
    query), so adjacency is kept as plain Python lists.

    Example:
        graph = Graph(3)
        graph.add_edge(0, 1, 1.0)
        graph.add_edge(1, 2, 0.5)
        graph.weighted_degree(1)  # 1.5
    """

    def __init__(self, node_count: int):
        if node_count < 0:
            raise InvalidInputError(f"node_count must be >= 0, got {node_count}")
        self._node_count = node_count
        self._links: List[List[Link]] = [[] for _ in range(node_count)]
        self._degrees: List[float] = [0.0] * node_count
        self._total_weight = 0.0
        self._edge_count = 0

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_edges(
        cls, node_count: int, edges: Iterable[Tuple[int, int, float]]
    ) -> "Graph":
        """Build a graph from ``(a, b, weight)`` triples."""
        graph = cls(node_count)
        for a, b, weight in edges:
            graph.add_edge(a, b, weight)
        return graph

    @classmethod
    def from_networkx(cls, nx_graph: nx.Graph, weight: str = "weight") -> "Graph":
        """
        Build a graph from a NetworkX graph.

        Nodes are indexed in NetworkX iteration order. Edges without the
        weight attribute get weight 1.0. Directed graphs are treated as
        undirected, so a pair of opposite arcs becomes two parallel edges.

        Args:
            nx_graph: Any NetworkX graph or multigraph
            weight: Edge attribute holding the weight

        Returns:
            New Graph with the same structure
        """
        index = {node: i for i, node in enumerate(nx_graph.nodes())}
        graph = cls(len(index))
        for src, tgt, data in nx_graph.edges(data=True):
            graph.add_edge(index[src], index[tgt], float(data.get(weight, 1.0)))
        return graph

    def add_edge(self, a: int, b: int, weight: float = 1.0) -> None:
        """
        Insert an undirected edge.

        Raises:
            InvalidInputError: endpoint out of range, negative or NaN weight
        """
        self._check_node(a)
        self._check_node(b)
        weight = float(weight)
        if math.isnan(weight) or weight < 0:
            raise InvalidInputError(
                f"Edge ({a}, {b}) has invalid weight {weight}; weights must be >= 0"
            )

        self._links[a].append(Link(b, weight))
        self._degrees[a] += weight
        if a != b:
            self._links[b].append(Link(a, weight))
            self._degrees[b] += weight
        self._total_weight += weight
        self._edge_count += 1

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def node_count(self) -> int:
        return self._node_count

    @property
    def total_weight(self) -> float:
        """Sum of weights over inserted edges, each edge counted once."""
        return self._total_weight

    @property
    def edge_count(self) -> int:
        """Number of ``add_edge`` calls so far."""
        return self._edge_count

    def weighted_degree(self, node: int) -> float:
        """Sum of adjacency weights of ``node``; a self-loop counts once."""
        self._check_node(node)
        return self._degrees[node]

    def self_loop_weight(self, node: int) -> float:
        """Weight of the first self-loop on ``node``, or 0.0."""
        self._check_node(node)
        for link in self._links[node]:
            if link.node == node:
                return link.weight
        return 0.0

    def neighbors(self, node: int) -> List[Link]:
        """Adjacency entries of ``node`` in insertion order."""
        self._check_node(node)
        return self._links[node]

    def edges(self) -> Iterator[Tuple[int, int, float]]:
        """Yield every inserted edge once as ``(a, b, weight)`` with ``a <= b``."""
        for a, links in enumerate(self._links):
            for link in links:
                if link.node >= a:
                    yield a, link.node, link.weight

    def to_networkx(self) -> nx.MultiGraph:
        """Convert to an undirected NetworkX multigraph keeping parallel edges."""
        nx_graph = nx.MultiGraph()
        nx_graph.add_nodes_from(range(self._node_count))
        for a, b, weight in self.edges():
            nx_graph.add_edge(a, b, weight=weight)
        return nx_graph

    def _check_node(self, node: int) -> None:
        if not 0 <= node < self._node_count:
            raise InvalidInputError(
                f"Node {node} is out of range for a graph with {self._node_count} nodes"
            )

    def __repr__(self) -> str:
        return (
            f"Graph(node_count={self._node_count}, edge_count={self._edge_count}, "
            f"total_weight={self._total_weight})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a dictionary for storage/transfer."""
        return {
            "node_count": self._node_count,
            "edges": [
                {"source": a, "target": b, "weight": weight}
                for a, b, weight in self.edges()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Graph":
        """Load from a dictionary produced by ``to_dict``."""
        graph = cls(int(data.get("node_count", 0)))
        for edge_data in data.get("edges", []):
            graph.add_edge(
                int(edge_data["source"]),
                int(edge_data["target"]),
                float(edge_data.get("weight", 1.0)),
            )
        return graph
