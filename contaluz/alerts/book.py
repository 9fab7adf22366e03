"""
Alert inbox storage.

Alerts are kept in an ordered mapping keyed by id: membership checks for
rule deduplication are O(1) and iteration yields the most recent alert
first.
"""

from collections import OrderedDict
from typing import Iterator, Optional

from contaluz.models.energy import Alert


class AlertBook:
    """Ordered, id-keyed collection of alerts (newest first)."""

    def __init__(self):
        self._alerts: OrderedDict[str, Alert] = OrderedDict()

    def __contains__(self, alert_id: object) -> bool:
        return alert_id in self._alerts

    def __iter__(self) -> Iterator[Alert]:
        return iter(self._alerts.values())

    def __len__(self) -> int:
        return len(self._alerts)

    def get(self, alert_id: str) -> Optional[Alert]:
        return self._alerts.get(alert_id)

    def prepend(self, alert: Alert) -> None:
        """Insert at the front. An existing id is replaced and moved."""
        self._alerts[alert.id] = alert
        self._alerts.move_to_end(alert.id, last=False)

    def mark_read(self, alert_id: str) -> bool:
        alert = self._alerts.get(alert_id)
        if alert is None:
            return False
        alert.is_read = True
        return True

    def remove(self, alert_id: str) -> bool:
        return self._alerts.pop(alert_id, None) is not None

    def clear(self) -> int:
        count = len(self._alerts)
        self._alerts.clear()
        return count

    def unread(self) -> list[Alert]:
        return [alert for alert in self._alerts.values() if not alert.is_read]

    def ids(self) -> list[str]:
        return list(self._alerts)
