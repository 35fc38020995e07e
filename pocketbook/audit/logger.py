"""
Audit Logger

DESIGN DECISION: Every change to user data goes through here.
An event is written twice:
1. To the structured application log (JSON lines on stderr)
2. To the audit trail, when an audit storage is configured

Writing the trail must never break the action being audited, so storage
failures are logged and reported through the return value only.
"""

import logging
from typing import Optional

import structlog

from pocketbook.config import get_settings
from pocketbook.models.audit import AuditEvent, AuditSeverity
from pocketbook.services.storage.interface import AuditStorageInterface


def configure_logging(debug: bool = False) -> None:
    """
    Route structlog through the stdlib logging module.

    Debug mode lowers the level to DEBUG.
    """
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging(debug=get_settings().app.debug_mode)


_LEVELS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
    AuditSeverity.CRITICAL: "critical",
}


class AuditLogger:
    """
    Writes audit events to the application log and the audit trail.
    """

    def __init__(self, storage: Optional[AuditStorageInterface] = None):
        """
        Args:
            storage: Where the trail is kept. Without one, events only
                reach the application log.
        """
        self._storage = storage
        self._logger = structlog.get_logger("pocketbook.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Record one event.

        Returns:
            False if the trail could not be written, True otherwise
        """
        emit = getattr(self._logger, _LEVELS[event.severity])
        emit("audit_event", **event.to_log_dict())

        if self._storage is None:
            return True
        try:
            return self._storage.append_event(event)
        except Exception as e:
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=str(event.event_id),
                event_type=event.event_type.value,
            )
            return False

    def recent_events(self, limit: int = 50) -> list[dict]:
        """Most recent events in the trail, newest first."""
        if self._storage is None:
            return []
        return self._storage.get_recent_events(limit=limit)
