"""
Alerts raised for anomalous queries.
"""

import socket
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Protocol

from graph_ids.decision.verdict import Verdict
from graph_ids.domain import QueryEvent

ANALYZER_NAME = "graph-ids"


@dataclass(frozen=True)
class AnomalyAlert:
    """An anomaly detected in one query, addressed to alert listeners."""

    user_id: str
    sql_query: str
    created: datetime
    properties: Dict[str, str] = field(default_factory=dict)
    analyzer: str = ANALYZER_NAME
    host: str = ""

    @classmethod
    def from_event(cls, event: QueryEvent, verdict: Verdict) -> "AnomalyAlert":
        return cls(
            user_id=event.user_id,
            sql_query=event.sql_query,
            created=event.timestamp,
            properties=verdict.string_properties(),
            host=socket.gethostname(),
        )

    @property
    def message(self) -> str:
        """Human-readable classification text."""
        lines = [
            "ANOMALY DETECTED",
            f"userId: {self.user_id}",
            f"sqlQuery: {self.sql_query}",
        ]
        lines.extend(f"{key}: {value}" for key, value in self.properties.items())
        return "\n".join(lines)


class AnomalyListener(Protocol):
    """Receives an alert for every query classified as anomalous."""

    def on_alert(self, alert: AnomalyAlert) -> None: ...
