"""
Audit module that writes the audit trail to the application log.
"""

import threading

from loguru import logger

from graph_ids.audit.base import AuditModule, AuditRecord


class ConsoleAuditModule(AuditModule):
    """Writes each audit record through loguru, one record at a time."""

    def __init__(self):
        super().__init__()
        self._write_lock = threading.Lock()

    def write(self, record: AuditRecord) -> None:
        lines = [
            record.sql_query,
            f"userId = {record.user_id}",
            f"eventType = {record.event_type.name}",
            f"mode = {record.mode.name}",
        ]
        lines.extend(f"{key} = {value}" for key, value in record.properties.items())

        with self._write_lock:
            logger.info("\n".join(lines))
