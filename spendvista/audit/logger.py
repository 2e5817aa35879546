"""
Audit Logger

Every applied change to the user's records, every rejected input and
every stored value that had to be replaced by a default ends up here.

Events go to two places:
- the structlog stream (JSON lines, or a console renderer in debug mode)
- an AuditStorageInterface, when one is given, so the app can show
  recent activity

Writing an event never raises. A broken audit store must not stop a
transaction from being recorded.
"""

import logging
from typing import Optional

import structlog

from spendvista.config import get_settings
from spendvista.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from spendvista.services.storage import AuditStorageInterface


def configure_logging(debug: Optional[bool] = None) -> None:
    """
    Configure structlog for the whole process.

    Args:
        debug: Human-readable console output at DEBUG level instead of
               JSON at INFO. Defaults to the debug_mode setting.
    """
    if debug is None:
        debug = get_settings().app.debug_mode

    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer()
    )
    logging.basicConfig(format="%(message)s", level=logging.DEBUG if debug else logging.INFO)

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging(debug=False)


_LEVELS = {
    AuditSeverity.CRITICAL: "critical",
    AuditSeverity.ERROR: "error",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.DEBUG: "debug",
}


class AuditLogger:
    """Writes AuditEvents to the log stream and, optionally, to storage."""

    def __init__(self, storage: Optional[AuditStorageInterface] = None):
        self._storage = storage
        self._logger = structlog.get_logger("spendvista.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Record one event.

        Returns:
            False if the audit store rejected the event, True otherwise
            (including when there is no store)
        """
        level = _LEVELS.get(event.severity, "info")
        getattr(self._logger, level)("audit_event", **event.to_log_dict())

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

    def log_storage_fallbacks(self, issues: list[tuple[str, str]]) -> None:
        """One STORAGE_FALLBACK event per stored value replaced by its default."""
        for key, reason in issues:
            self.log(AuditEventBuilder.storage_fallback(key=key, reason=reason))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Newest events first; empty when there is no audit store."""
        if self._storage is None:
            return []
        return self._storage.get_recent_events(limit)

    def history(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        """Every stored event for one record, oldest first."""
        if self._storage is None:
            return []
        return self._storage.get_events_by_entity(entity_type, entity_id)
