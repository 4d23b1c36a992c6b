"""
Decision policy based on the community structure of relation graphs.

The weighted graph is first reduced to an unweighted one: nodes ``i`` and
``j`` are joined iff an edge between them weighs at least the edge weight
threshold. The best modularity of that graph is then compared with the
accepted modularity. Strongly clustered access patterns (high modularity)
are the anomalous case.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from graph_ids.audit.base import AuditModule
from graph_ids.decision.base import DecisionPolicy
from graph_ids.decision.verdict import Verdict
from graph_ids.domain import IDSMode, VerdictType
from graph_ids.graph_analysis.graph import Graph
from graph_ids.graph_analysis.modularity import ModularityConfig, ModularityOptimizer
from graph_ids.knowledge import KnowledgeModule


@dataclass
class ModularityPolicyConfig:
    """Configuration for the modularity policy."""

    # Graphs with modularity up to this value are normal
    accepted_modularity: float = field(
        default_factory=lambda: float(os.getenv("GRAPH_IDS_ACCEPTED_MODULARITY", "0.3"))
    )

    # Minimum weight for an edge to survive simplification
    edge_weight_threshold: float = field(
        default_factory=lambda: float(os.getenv("GRAPH_IDS_EDGE_WEIGHT_THRESHOLD", "0.5"))
    )

    optimizer: ModularityConfig = field(default_factory=ModularityConfig)

    def __post_init__(self):
        if self.edge_weight_threshold < 0:
            raise ValueError("edge_weight_threshold must be >= 0")


class ModularityPolicy(DecisionPolicy):
    """Classifies graphs above the accepted modularity as anomalous."""

    def __init__(
        self,
        knowledge_module: KnowledgeModule,
        audit_module: AuditModule,
        mode: IDSMode,
        config: Optional[ModularityPolicyConfig] = None,
    ):
        super().__init__(knowledge_module, audit_module, mode)
        self.config = config or ModularityPolicyConfig()
        self._optimizer = ModularityOptimizer(self.config.optimizer)

    @property
    def accepted_modularity(self) -> float:
        return self.config.accepted_modularity

    @property
    def edge_weight_threshold(self) -> float:
        return self.config.edge_weight_threshold

    def simplify_graph(self, graph: Graph) -> Graph:
        """
        Build the unweighted version of ``graph``.

        Every edge weighing ``edge_weight_threshold`` or more is copied with
        weight 1. Parallel edges stay parallel.
        """
        simplified = Graph(graph.node_count)
        for a, b, weight in graph.edges():
            if weight >= self.config.edge_weight_threshold:
                simplified.add_edge(a, b, 1.0)
        return simplified

    def analyze_graph(self, graph: Graph) -> Verdict:
        simplified = self.simplify_graph(graph)
        modularity = self._optimizer.score(simplified)
        if modularity <= self.config.accepted_modularity:
            classification = VerdictType.NORMAL
        else:
            classification = VerdictType.ANOMALY

        logger.debug(
            f"Modularity {modularity:.6f} (accepted <= {self.config.accepted_modularity}) "
            f"over {simplified.edge_count} of {graph.edge_count} edges -> {classification.name}"
        )
        return Verdict(
            classification,
            {
                "modularity": modularity,
                "nodeNumber": simplified.node_count,
                "edgeNumber": simplified.edge_count,
            },
        )
