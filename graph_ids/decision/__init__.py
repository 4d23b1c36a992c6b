"""
Decision policies for relation graphs.

Each policy implements a single operation, ``analyze_graph(graph) -> Verdict``;
``create_policy`` picks one from configuration.
"""

from graph_ids.decision.alerts import AnomalyAlert, AnomalyListener
from graph_ids.decision.base import AnalysisResult, DecisionPolicy
from graph_ids.decision.density import DensityConfig, DensityPolicy, graph_density
from graph_ids.decision.factory import DecisionConfig, PolicyKind, create_policy
from graph_ids.decision.modularity import ModularityPolicy, ModularityPolicyConfig
from graph_ids.decision.verdict import Verdict

__all__ = [
    # Base classes and types
    "DecisionPolicy",
    "AnalysisResult",
    "Verdict",
    "AnomalyAlert",
    "AnomalyListener",
    # Policy implementations
    "DensityPolicy",
    "DensityConfig",
    "graph_density",
    "ModularityPolicy",
    "ModularityPolicyConfig",
    # Configuration
    "DecisionConfig",
    "PolicyKind",
    "create_policy",
]
