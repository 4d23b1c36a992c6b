"""
Multilevel modularity optimization (Louvain method).

Implements the two-phase algorithm of Blondel, Guillaume, Lambiotte and
Lefebvre, "Fast unfolding of communities in large networks" (2008):

1. Local moving: repeatedly move single nodes to the neighboring community
   with the largest strictly positive modularity gain.
2. Coarsening: collapse every community into one node of a new graph and
   start again on that graph.

The optimizer only reports the best modularity reached (and, on request, the
partition behind it). All partition state lives in a ``PartitionState`` that
belongs to a single call, so one ``ModularityOptimizer`` can be shared
between threads.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
from loguru import logger

from graph_ids.graph_analysis.graph import Graph


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass
class ModularityConfig:
    """Safety limits for the optimizer. A limit of 0 disables it."""

    # Full local-moving passes allowed per level
    max_passes: int = field(
        default_factory=lambda: int(os.getenv("GRAPH_IDS_MAX_PASSES", "1000"))
    )

    # Local-moving + coarsening rounds allowed per run
    max_levels: int = field(
        default_factory=lambda: int(os.getenv("GRAPH_IDS_MAX_LEVELS", "100"))
    )

    def __post_init__(self):
        if self.max_passes < 0:
            raise ValueError("max_passes must be >= 0")
        if self.max_levels < 0:
            raise ValueError("max_levels must be >= 0")


# =============================================================================
# RESULTS
# =============================================================================


@dataclass
class CommunityResult:
    """Best modularity found and the partition of the original nodes behind it."""

    modularity: float
    node_to_community: Dict[int, int]
    communities: Dict[int, List[int]]
    # One node -> community mapping per improving level, finest first
    levels: List[List[int]] = field(default_factory=list)

    @property
    def community_count(self) -> int:
        return len(self.communities)

    def get_community(self, node: int) -> Optional[int]:
        """Final community of node index ``node``, or None when out of range."""
        return self.node_to_community.get(node)

    def get_community_members(self, community_id: int) -> List[int]:
        """Node indices assigned to ``community_id``, in ascending order."""
        return self.communities.get(community_id, [])


# =============================================================================
# PARTITION STATE
# =============================================================================


class PartitionState:
    """
    Partition of one graph level: parallel arrays indexed by node/community.

    ``internal_weight[c]`` counts every internal edge from both endpoints plus
    self-loops once; ``total_degree[c]`` is the summed weighted degree of the
    members of ``c``.

    ``total_weight`` is the edge mass ``m`` used by the modularity formula.
    It defaults to the graph's own total weight. Coarse levels keep the
    original graph's ``m``: a coarse self-loop carries every internal edge
    twice, so the coarse graph's own total weight overstates ``m``.
    """

    def __init__(self, graph: Graph, total_weight: Optional[float] = None):
        self.graph = graph
        self.total_weight = (
            graph.total_weight if total_weight is None else float(total_weight)
        )
        self._reset()

    def _reset(self) -> None:
        """Put every node of ``self.graph`` into its own community."""
        size = self.graph.node_count
        self._degrees = np.array(
            [self.graph.weighted_degree(i) for i in range(size)], dtype=np.float64
        )
        self._self_loops = np.array(
            [self.graph.self_loop_weight(i) for i in range(size)], dtype=np.float64
        )
        self.node_to_community = np.arange(size, dtype=np.int64)
        self.internal_weight = self._self_loops.copy()
        self.total_degree = self._degrees.copy()

    @property
    def size(self) -> int:
        return self.graph.node_count

    def modularity(self) -> float:
        """Modularity of the current partition; 0.0 for a graph without weight."""
        m2 = 2.0 * self.total_weight
        if m2 <= 0:
            return 0.0
        present = self.total_degree > 0
        tot = self.total_degree[present] / m2
        return float(np.sum(self.internal_weight[present] / m2 - tot * tot))

    def gain(self, node: int, community: int, link_weight: float) -> float:
        """Modularity gain (up to a constant factor) of inserting ``node`` into ``community``."""
        return float(
            link_weight
            - self.total_degree[community] * self._degrees[node] / (2.0 * self.total_weight)
        )

    def neighbor_communities(self, node: int) -> Dict[int, float]:
        """
        Link weight from ``node`` into each neighboring community.

        Communities come in ascending id order, which decides ties between
        equal gains. The node's own community is always present, with weight
        0.0 when no link leads into it, so the node can always stay where it
        is. Self-loops are ignored.
        """
        weights = {int(self.node_to_community[node]): 0.0}
        for link in self.graph.neighbors(node):
            if link.node == node:
                continue
            community = int(self.node_to_community[link.node])
            weights[community] = weights.get(community, 0.0) + link.weight
        return dict(sorted(weights.items()))

    def remove(self, node: int, community: int, link_weight: float) -> None:
        self.total_degree[community] -= self._degrees[node]
        self.internal_weight[community] -= 2 * link_weight + self._self_loops[node]
        self.node_to_community[node] = -1

    def insert(self, node: int, community: int, link_weight: float) -> None:
        self.total_degree[community] += self._degrees[node]
        self.internal_weight[community] += 2 * link_weight + self._self_loops[node]
        self.node_to_community[node] = community

    def local_optimize(self, max_passes: int = 0) -> float:
        """
        Phase one: move nodes while a full pass still raises modularity.

        Nodes are visited in index order. A node moves only for a strictly
        positive gain; ties keep the first candidate found.

        Args:
            max_passes: Stop after this many passes (0 for no limit)

        Returns:
            Modularity recorded before the last, non-improving pass
        """
        new_modularity = self.modularity()
        if self.total_weight <= 0:
            return new_modularity

        passes = 0
        while True:
            current_modularity = new_modularity
            for node in range(self.size):
                own = int(self.node_to_community[node])
                candidates = self.neighbor_communities(node)
                self.remove(node, own, candidates[own])

                best_community = own
                best_link_weight = candidates[own]
                best_gain = 0.0
                for community, link_weight in candidates.items():
                    increase = self.gain(node, community, link_weight)
                    if increase > best_gain:
                        best_community = community
                        best_link_weight = link_weight
                        best_gain = increase

                self.insert(node, best_community, best_link_weight)
                new_modularity = self.modularity()

            passes += 1
            if not new_modularity > current_modularity:
                return current_modularity
            if max_passes and passes >= max_passes:
                logger.warning(
                    f"Local moving stopped after {passes} passes without converging "
                    f"(modularity={new_modularity:.6f})"
                )
                return new_modularity

    def coarsen(self) -> List[int]:
        """
        Phase two: replace the graph by its community graph.

        Non-empty communities become nodes ``0..k-1`` in ascending community-id
        order. Intra-community adjacency entries sum into the new self-loop,
        crossing edges sum into one edge per community pair. The state is then
        reset to singletons on the new graph.

        Returns:
            New node index for every node of the collapsed level
        """
        size = self.size
        if size:
            _, renumber = np.unique(self.node_to_community, return_inverse=True)
            renumber = renumber.reshape(-1)
            new_size = int(renumber.max()) + 1
        else:
            renumber = np.zeros(0, dtype=np.int64)
            new_size = 0

        members: List[List[int]] = [[] for _ in range(new_size)]
        for node in range(size):
            members[renumber[node]].append(node)

        coarse = Graph(new_size)
        for i in range(new_size):
            weights = np.zeros(new_size, dtype=np.float64)
            for node in members[i]:
                for link in self.graph.neighbors(node):
                    j = renumber[link.node]
                    if j >= i:
                        weights[j] += link.weight
            for j in range(i, new_size):
                if weights[j] > 0:
                    coarse.add_edge(i, j, float(weights[j]))

        self.graph = coarse
        self._reset()
        return [int(community) for community in renumber]


# =============================================================================
# OPTIMIZER
# =============================================================================


class ModularityOptimizer:
    """
    Computes the maximum modularity reachable by multilevel local moving.

    Example:
        optimizer = ModularityOptimizer()
        modularity = optimizer.score(graph)
        result = optimizer.optimize(graph)
        result.communities  # {0: [0, 1, 2], 1: [3, 4, 5]}
    """

    def __init__(self, config: Optional[ModularityConfig] = None):
        self.config = config or ModularityConfig()

    def score(self, graph: Graph) -> float:
        """Best modularity of ``graph``; 0.0 for empty or weightless graphs."""
        return self.optimize(graph).modularity

    def optimize(self, graph: Graph) -> CommunityResult:
        """
        Run local moving and coarsening until a round stops improving.

        The input graph is never modified; coarse graphs are fresh objects
        owned by this call.

        Returns:
            CommunityResult with the last improved modularity and its partition
        """
        state = PartitionState(graph)
        modularity = state.modularity()
        levels: List[List[int]] = []

        if graph.node_count == 0 or graph.total_weight <= 0:
            logger.debug(
                f"Graph with {graph.node_count} nodes has no edge weight, modularity is 0.0"
            )
            return self._build_result(graph.node_count, 0.0, levels)

        rounds = 0
        while True:
            new_modularity = state.local_optimize(self.config.max_passes)
            mapping = state.coarsen()
            rounds += 1
            if not new_modularity > modularity:
                break
            modularity = new_modularity
            levels.append(mapping)
            if self.config.max_levels and rounds >= self.config.max_levels:
                logger.warning(
                    f"Modularity optimization stopped after {rounds} levels "
                    f"(modularity={modularity:.6f})"
                )
                break

        logger.debug(
            f"Modularity {modularity:.6f} after {len(levels)} improving levels "
            f"({graph.node_count} nodes, total weight {graph.total_weight})"
        )
        return self._build_result(graph.node_count, modularity, levels)

    @staticmethod
    def _build_result(
        node_count: int, modularity: float, levels: List[List[int]]
    ) -> CommunityResult:
        assignment = list(range(node_count))
        for mapping in levels:
            assignment = [mapping[community] for community in assignment]

        node_to_community = {node: community for node, community in enumerate(assignment)}
        communities: Dict[int, List[int]] = {}
        for node, community in node_to_community.items():
            communities.setdefault(community, []).append(node)

        return CommunityResult(
            modularity=modularity,
            node_to_community=node_to_community,
            communities=communities,
            levels=levels,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def compute_modularity(graph: Graph, config: Optional[ModularityConfig] = None) -> float:
    """Convenience function for the best modularity of a graph."""
    return ModularityOptimizer(config).score(graph)


def detect_communities(
    graph: Graph, config: Optional[ModularityConfig] = None
) -> CommunityResult:
    """Convenience function for the best partition of a graph."""
    return ModularityOptimizer(config).optimize(graph)
