"""Alerting package: inbox, threshold rules and the engine."""

from contaluz.alerts.book import AlertBook
from contaluz.alerts.engine import AlertEngine, event_alert_id
from contaluz.alerts.rules import (
    DEFAULT_RULES,
    HIGH_CONSUMPTION_ALERT_ID,
    LOW_AUTONOMY_ALERT_ID,
    AlertRule,
    HighConsumptionRule,
    LowAutonomyRule,
)

__all__ = [
    "AlertBook",
    "AlertEngine",
    "AlertRule",
    "DEFAULT_RULES",
    "HIGH_CONSUMPTION_ALERT_ID",
    "HighConsumptionRule",
    "LOW_AUTONOMY_ALERT_ID",
    "LowAutonomyRule",
    "event_alert_id",
]
