"""
Audit trail for analyzed queries.

Every analyzed query produces one ``AuditRecord`` which the ``AuditModule``
fans out to all registered listeners. Listeners can be added or removed at
any time, including from inside a notification.
"""

import threading
from datetime import datetime
from typing import Dict, Generic, Iterator, Mapping, Optional, Protocol, Tuple, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from graph_ids.domain import IDSMode, VerdictType

T = TypeVar("T")


class AuditRecord(BaseModel):
    """One entry of the audit trail."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="User that executed the query")
    sql_query: str = Field(..., description="Text of the executed query")
    timestamp: datetime = Field(..., description="When the query was executed")
    event_type: VerdictType = Field(..., description="Outcome of the analysis")
    mode: IDSMode = Field(..., description="Operating mode at analysis time")
    properties: Dict[str, str] = Field(
        default_factory=dict, description="Diagnostics attached to the outcome"
    )


class AuditListener(Protocol):
    """Receives every audit record."""

    def on_event(self, record: AuditRecord) -> None: ...


class ListenerRegistry(Generic[T]):
    """
    Copy-on-write listener set.

    Mutations replace the stored tuple under a lock; iteration walks the
    tuple that was current when it started. A notification pass therefore
    never sees a half-applied change, never blocks a mutation, and visits
    each listener at most once.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: Tuple[T, ...] = ()

    def add(self, listener: T) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners = self._listeners + (listener,)

    def remove(self, listener: T) -> None:
        with self._lock:
            self._listeners = tuple(item for item in self._listeners if item != listener)

    def snapshot(self) -> Tuple[T, ...]:
        return self._listeners

    def __iter__(self) -> Iterator[T]:
        return iter(self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners


class AuditModule:
    """Fans audit records out to registered listeners."""

    def __init__(self):
        self._listeners: ListenerRegistry[AuditListener] = ListenerRegistry()

    def add_listener(self, listener: AuditListener) -> None:
        self._listeners.add(listener)

    def remove_listener(self, listener: AuditListener) -> None:
        self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def log_event(
        self,
        user_id: str,
        sql_query: str,
        timestamp: datetime,
        event_type: VerdictType,
        mode: IDSMode,
        properties: Optional[Mapping[str, str]] = None,
    ) -> AuditRecord:
        """
        Record the outcome of one query.

        Args:
            user_id: User that executed the query
            sql_query: Text of the executed query
            timestamp: When the query was executed
            event_type: Outcome of the analysis
            mode: Operating mode at analysis time
            properties: Diagnostics, already serialized to strings

        Returns:
            The record delivered to listeners
        """
        record = AuditRecord(
            user_id=user_id,
            sql_query=sql_query,
            timestamp=timestamp,
            event_type=event_type,
            mode=mode,
            properties=dict(properties or {}),
        )
        self.write(record)
        self.notify(record)
        return record

    def write(self, record: AuditRecord) -> None:
        """Persist or display a record. The base module keeps nothing."""

    def notify(self, record: AuditRecord) -> None:
        for listener in self._listeners.snapshot():
            try:
                listener.on_event(record)
            except Exception as e:
                logger.error(f"Audit listener {listener!r} failed: {e}")
