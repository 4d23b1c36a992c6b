"""
Abstract base class for decision policies.

A policy turns one relation graph into a ``Verdict`` (``analyze_graph``).
The shared ``analyze`` method wraps that with the operating-mode handling:
fetching relation graphs from the knowledge base, training it, writing the
audit trail and alerting anomaly listeners.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from graph_ids.audit.base import AuditModule, ListenerRegistry
from graph_ids.decision.alerts import AnomalyAlert, AnomalyListener
from graph_ids.decision.verdict import Verdict
from graph_ids.domain import IDSMode, QueryEvent, VerdictType
from graph_ids.graph_analysis.graph import Graph
from graph_ids.knowledge import KnowledgeModule


@dataclass(frozen=True)
class AnalysisResult:
    """What ``DecisionPolicy.analyze`` decided for one query."""

    event_type: VerdictType
    verdict: Optional[Verdict] = None

    @property
    def is_anomaly(self) -> bool:
        return self.event_type == VerdictType.ANOMALY


class DecisionPolicy(ABC):
    """
    Base class for decision policies.

    Implementations: DensityPolicy, ModularityPolicy

    Subclasses implement ``analyze_graph`` only. It must not modify the graph
    or the policy's own configuration, so one policy instance can analyze
    several graphs concurrently.
    """

    def __init__(
        self,
        knowledge_module: KnowledgeModule,
        audit_module: AuditModule,
        mode: IDSMode,
    ):
        self.knowledge_module = knowledge_module
        self._audit_module = audit_module
        self._mode = mode
        self._anomaly_listeners: ListenerRegistry[AnomalyListener] = ListenerRegistry()

    @abstractmethod
    def analyze_graph(self, graph: Graph) -> Verdict:
        """
        Classify one relation graph.

        Args:
            graph: Relation graph built for the query result

        Returns:
            Verdict with classification NORMAL or ANOMALY
        """
        pass

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    @property
    def mode(self) -> IDSMode:
        return self._mode

    @mode.setter
    def mode(self, mode: IDSMode) -> None:
        self._mode = mode

    @property
    def audit_module(self) -> AuditModule:
        return self._audit_module

    @audit_module.setter
    def audit_module(self, audit_module: AuditModule) -> None:
        self._audit_module = audit_module

    def add_anomaly_listener(self, listener: AnomalyListener) -> None:
        self._anomaly_listeners.add(listener)

    def remove_anomaly_listener(self, listener: AnomalyListener) -> None:
        self._anomaly_listeners.remove(listener)

    # =========================================================================
    # ORCHESTRATION
    # =========================================================================

    def analyze(self, event: QueryEvent) -> AnalysisResult:
        """
        Handle one executed query according to the current mode.

        Args:
            event: The executed query and its result

        Returns:
            AnalysisResult with the audited event type
        """
        mode = self._mode

        if mode.is_detecting:
            verdict = self._analyze_event(event)
            event_type = verdict.classification
            if event_type not in (VerdictType.NORMAL, VerdictType.ANOMALY, VerdictType.ERROR):
                event_type = VerdictType.NO_DECISION

            if (
                event_type == VerdictType.NORMAL
                and mode == IDSMode.INTRUSION_DETECTING_WITH_LEARNING
            ):
                try:
                    self.knowledge_module.update_knowledge(
                        event.result_set, event.user_id, event.sql_query
                    )
                except Exception as e:
                    logger.error(f"Failed to update knowledge base: {e}")

            self._log(event, mode, event_type, verdict.string_properties())
            if event_type == VerdictType.ANOMALY:
                logger.info(f"Anomalous query from user {event.user_id}: {event.sql_query}")
                self._notify_listeners(event, verdict)
            return AnalysisResult(event_type=event_type, verdict=verdict)

        if mode == IDSMode.LEARNING:
            try:
                update = self.knowledge_module.update_knowledge(
                    event.result_set, event.user_id, event.sql_query
                )
            except Exception as e:
                logger.error(f"Failed to update knowledge base: {e}")
                self._log(
                    event,
                    mode,
                    VerdictType.ERROR,
                    {"description": "Failed to update knowledge base"},
                )
                return AnalysisResult(event_type=VerdictType.ERROR)

            self._log(event, mode, VerdictType.TRAINING_QUERY, update.properties)
            return AnalysisResult(event_type=VerdictType.TRAINING_QUERY)

        self._log(event, mode, VerdictType.NO_OBSERVATION, {})
        return AnalysisResult(event_type=VerdictType.NO_OBSERVATION)

    def _analyze_event(self, event: QueryEvent) -> Verdict:
        """Analyze every relation graph of the query; the first anomaly wins."""
        try:
            graphs = self.knowledge_module.get_relation_graphs(
                event.result_set, event.user_id, event.sql_query
            )
            if not graphs:
                logger.warning(
                    f"No relation graph could be built for query: {event.sql_query}"
                )
                return Verdict.error(
                    "No relation graph could be built for the records returned by the query."
                )

            verdicts: List[Verdict] = [self.analyze_graph(graph) for graph in graphs]
            for verdict in verdicts:
                if verdict.is_anomaly:
                    return verdict
            return verdicts[0]

        except Exception as e:
            logger.exception(f"Analysis failed for query: {event.sql_query}")
            return Verdict.error(f"Analysis of the query result failed. {e}")

    def _log(
        self, event: QueryEvent, mode: IDSMode, event_type: VerdictType, properties
    ) -> None:
        self._audit_module.log_event(
            event.user_id,
            event.sql_query,
            event.timestamp,
            event_type,
            mode,
            properties,
        )

    def _notify_listeners(self, event: QueryEvent, verdict: Verdict) -> None:
        listeners = self._anomaly_listeners.snapshot()
        if not listeners:
            return
        alert = AnomalyAlert.from_event(event, verdict)
        for listener in listeners:
            try:
                listener.on_alert(alert)
            except Exception as e:
                logger.error(f"Anomaly listener {listener!r} failed: {e}")
