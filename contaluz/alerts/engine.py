"""
Alert Engine

Watches the derived state against the user's thresholds and maintains the
alert inbox.

DEDUPLICATION CONTRACT:
- A rule alert is inserted only if its id is absent from the inbox.
- Marking it read keeps it in the inbox, so it is NOT regenerated.
- Removing it re-arms the rule: the next evaluation may insert it again.
This is debounce-by-existence, not a time window.

Event alerts (recharge and sync confirmations) always get a fresh id and are
always inserted.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from contaluz.alerts.book import AlertBook
from contaluz.alerts.rules import DEFAULT_RULES, AlertRule
from contaluz.audit import AuditLogger
from contaluz.models.audit import AuditEventBuilder, AuditEventType
from contaluz.models.energy import (
    Alert,
    AlertType,
    ConsumptionSnapshot,
    Profile,
    ensure_utc,
)
from contaluz.services.notifications import NotificationChannel, PermissionState


def event_alert_id(prefix: str, now: datetime) -> str:
    """Time-derived id, unique even for two events in the same millisecond."""
    millis = int(ensure_utc(now).timestamp() * 1000)
    return f"{prefix}-{millis}-{uuid4().hex[:6]}"


class AlertEngine:
    """
    Rule evaluator and owner of the alert inbox.

    The notification channel is optional; without one, or when it refuses,
    alerts are still generated.
    """

    def __init__(
        self,
        book: Optional[AlertBook] = None,
        notifier: Optional[NotificationChannel] = None,
        audit_logger: Optional[AuditLogger] = None,
        rules: tuple[AlertRule, ...] = DEFAULT_RULES,
    ):
        self._book = book if book is not None else AlertBook()
        self._notifier = notifier
        self._audit_logger = audit_logger
        self._rules = rules

    @property
    def book(self) -> AlertBook:
        return self._book

    def evaluate(
        self,
        snapshot: ConsumptionSnapshot,
        profile: Profile,
        now: datetime,
    ) -> list[Alert]:
        """
        Run every rule against the snapshot.

        Returns only the alerts that were newly inserted.
        """
        fired = [
            rule.build(snapshot, profile, now)
            for rule in self._rules
            if rule.fires(snapshot, profile)
        ]
        inserted = [alert for alert in fired if alert.id not in self._book]

        # Prepend in reverse so the first rule ends up on top
        for alert in reversed(inserted):
            self._book.prepend(alert)

        for alert in inserted:
            self._audit(AuditEventBuilder.alert_raised(
                alert_id=alert.id,
                alert_type=alert.type.value,
                title=alert.title,
            ))
            if profile.notifications_enabled:
                self._notify(alert)

        return inserted

    def record_event(
        self,
        prefix: str,
        title: str,
        description: str,
        now: datetime,
    ) -> Alert:
        """Insert an informational event alert at the top of the inbox."""
        alert = Alert(
            id=event_alert_id(prefix, now),
            title=title,
            description=description,
            type=AlertType.INFO,
            date=ensure_utc(now),
            is_read=False,
        )
        self._book.prepend(alert)
        self._audit(AuditEventBuilder.alert_raised(
            alert_id=alert.id,
            alert_type=alert.type.value,
            title=alert.title,
        ))
        return alert

    def mark_read(self, alert_id: str) -> bool:
        changed = self._book.mark_read(alert_id)
        if changed:
            self._audit(AuditEventBuilder.alert_changed(AuditEventType.ALERT_READ, alert_id))
        return changed

    def remove(self, alert_id: str) -> bool:
        removed = self._book.remove(alert_id)
        if removed:
            self._audit(AuditEventBuilder.alert_changed(AuditEventType.ALERT_REMOVED, alert_id))
        return removed

    def clear_all(self) -> int:
        count = self._book.clear()
        self._audit(AuditEventBuilder.alert_changed(AuditEventType.ALERTS_CLEARED, count=count))
        return count

    def _notify(self, alert: Alert) -> None:
        """Best-effort system notification; never affects the inbox."""
        if self._notifier is None:
            return

        try:
            if self._notifier.permission_state() != PermissionState.GRANTED:
                return
            self._notifier.dispatch(alert.title, alert.description)
        except Exception as e:
            self._audit(AuditEventBuilder.notification_failed(alert.id, str(e)))
            return

        self._audit(AuditEventBuilder.notification_dispatched(alert.id, alert.title))

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)
