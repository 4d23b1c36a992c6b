"""
graph-ids: graph-based decision core of a database intrusion detection system.

Relation graphs built from SQL query results are scored by edge density or
by community structure (Louvain modularity) and classified as normal or
anomalous.
"""

from graph_ids.domain import IDSMode, QueryEvent, VerdictType
from graph_ids.graph_analysis import Graph, ModularityOptimizer

__version__ = "0.1.0"

__all__ = [
    "Graph",
    "IDSMode",
    "ModularityOptimizer",
    "QueryEvent",
    "VerdictType",
]
