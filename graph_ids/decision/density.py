"""
Decision policy scoring relation graphs by edge density.

Density is the observed total edge weight divided by the number of node
pairs including self-pairs, ``n * (n - 1) / 2 + n``. Sparse graphs mean the
query touched records that are rarely related, which is the anomalous case.
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
from graph_ids.knowledge import KnowledgeModule


@dataclass
class DensityConfig:
    """Configuration for the density policy."""

    # Graphs at least this dense are normal
    accepted_density: float = field(
        default_factory=lambda: float(os.getenv("GRAPH_IDS_ACCEPTED_DENSITY", "0.5"))
    )

    def __post_init__(self):
        if self.accepted_density < 0:
            raise ValueError("accepted_density must be >= 0")


def graph_density(graph: Graph) -> float:
    """Edge density of ``graph``; 1.0 for a graph without nodes."""
    n = graph.node_count
    if n == 0:
        return 1.0
    return graph.total_weight / (n * (n - 1) / 2.0 + n)


class DensityPolicy(DecisionPolicy):
    """Classifies graphs below the accepted density as anomalous."""

    def __init__(
        self,
        knowledge_module: KnowledgeModule,
        audit_module: AuditModule,
        mode: IDSMode,
        config: Optional[DensityConfig] = None,
    ):
        super().__init__(knowledge_module, audit_module, mode)
        self.config = config or DensityConfig()

    @property
    def accepted_density(self) -> float:
        return self.config.accepted_density

    def analyze_graph(self, graph: Graph) -> Verdict:
        density = graph_density(graph)
        if density >= self.config.accepted_density:
            classification = VerdictType.NORMAL
        else:
            classification = VerdictType.ANOMALY

        logger.debug(
            f"Density {density:.6f} (accepted >= {self.config.accepted_density}) "
            f"-> {classification.name}"
        )
        return Verdict(
            classification,
            {
                "density": density,
                "nodeNumber": graph.node_count,
                "totalWeight": graph.total_weight,
            },
        )
