"""
Contract of the knowledge base that turns query results into relation graphs.

Concrete knowledge modules (schema introspection, record identity tracking)
live outside this package; decision policies only talk to this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

from graph_ids.graph_analysis.graph import Graph


@dataclass
class UpdateResult:
    """Outcome of training the knowledge base on one query result."""

    # Whether the result contributed to the knowledge base
    useful: bool
    properties: Dict[str, str] = field(default_factory=dict)


class KnowledgeModule(ABC):
    """Knowledge base consulted by decision policies."""

    @abstractmethod
    def update_knowledge(
        self, result_set: Any, user_id: str, sql_query: str
    ) -> UpdateResult:
        """
        Train the knowledge base on a query result.

        Args:
            result_set: Rows returned by the query
            user_id: User that executed the query
            sql_query: Text of the executed query

        Returns:
            UpdateResult describing what was learned
        """
        pass

    @abstractmethod
    def get_relation_graphs(
        self, result_set: Any, user_id: str, sql_query: str
    ) -> List[Graph]:
        """
        Build the graphs describing how the returned records relate.

        Args:
            result_set: Rows returned by the query
            user_id: User that executed the query
            sql_query: Text of the executed query

        Returns:
            One graph per relation; empty if none can be built
        """
        pass
