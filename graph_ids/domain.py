"""
Domain types shared by the decision and audit layers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class IDSMode(str, Enum):
    """Operating mode of the intrusion detection system."""

    # Queries only feed the knowledge base
    LEARNING = "learning"
    # Queries are analyzed; normal ones also feed the knowledge base
    INTRUSION_DETECTING_WITH_LEARNING = "intrusion_detecting_with_learning"
    # Queries are analyzed only
    INTRUSION_DETECTING_WITHOUT_LEARNING = "intrusion_detecting_without_learning"
    # Queries are recorded without analysis
    NO_OBSERVATION = "no_observation"

    @property
    def is_detecting(self) -> bool:
        return self in (
            IDSMode.INTRUSION_DETECTING_WITH_LEARNING,
            IDSMode.INTRUSION_DETECTING_WITHOUT_LEARNING,
        )


class VerdictType(str, Enum):
    """Outcome of analyzing a query; also the event type of the audit trail."""

    NORMAL = "normal"
    ANOMALY = "anomaly"
    # Analysis finished without a decision
    NO_DECISION = "no_decision"
    # Analysis could not be completed
    ERROR = "error"
    # Query was used to train the knowledge base
    TRAINING_QUERY = "training_query"
    # Query was not analyzed
    NO_OBSERVATION = "no_observation"


@dataclass(frozen=True)
class QueryEvent:
    """An executed SQL query as reported by the sensor layer."""

    sql_query: str
    user_id: str
    # Opaque to this package; only the knowledge module reads it
    result_set: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
