"""
Audit Logger

DESIGN DECISION: Every state transition in the tracker is logged.
This provides:
1. Complete traceability of balance changes
2. Debugging capability
3. A record of which alerts were raised and delivered

The audit logger:
- Is synchronous, like every other state transition
- Gracefully handles failures (doesn't crash the tracker if logging fails)
"""

import logging
import sys
from typing import Optional

import structlog

from contaluz.config import AppSettings
from contaluz.models.audit import AuditEvent, AuditSeverity


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    JSON lines by default; a console renderer when debug_mode is on.
    Safe to call again, e.g. once the real settings are loaded.
    """
    level = settings.log_level if settings else "INFO"
    debug = settings.debug_mode if settings else False

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
        force=True,
    )

    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer(ensure_ascii=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


configure_logging()


def get_logger(name: str):
    """Structured logger for a module."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log.
    """

    def __init__(self):
        self._logger = structlog.get_logger("contaluz.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging must never break a state transition
            return False

        return True
