"""
Graph model and community analysis.

Provides the weighted undirected graph every decision policy scores, and a
multilevel (Louvain) modularity optimizer working on it.
"""

from graph_ids.graph_analysis.graph import Graph, Link
from graph_ids.graph_analysis.modularity import (
    CommunityResult,
    ModularityConfig,
    ModularityOptimizer,
    PartitionState,
    compute_modularity,
    detect_communities,
)

__all__ = [
    # Graph model
    "Graph",
    "Link",
    # Community detection
    "CommunityResult",
    "ModularityConfig",
    "ModularityOptimizer",
    "PartitionState",
    "compute_modularity",
    "detect_communities",
]
