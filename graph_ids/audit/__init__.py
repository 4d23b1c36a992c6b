"""
Audit trail of analyzed queries with listener fan-out.
"""

from graph_ids.audit.base import (
    AuditListener,
    AuditModule,
    AuditRecord,
    ListenerRegistry,
)
from graph_ids.audit.console import ConsoleAuditModule

__all__ = [
    "AuditListener",
    "AuditModule",
    "AuditRecord",
    "ConsoleAuditModule",
    "ListenerRegistry",
]
