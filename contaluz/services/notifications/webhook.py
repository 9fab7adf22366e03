"""
Webhook Notification Channel

Posts alert notifications as JSON to a configured URL (a phone push relay,
a chat bot, a home automation hub...). Without a URL the capability is
reported as unsupported.
"""

from typing import Optional

import requests

from contaluz.config import NotificationSettings, get_settings
from contaluz.services.notifications.interface import (
    NotificationChannel,
    NotificationError,
    PermissionState,
)


class WebhookNotificationChannel(NotificationChannel):
    """
    Notification channel backed by an HTTP webhook.

    Configuring the URL is the user's consent, so a configured webhook is
    always GRANTED.
    """

    def __init__(
        self,
        settings: Optional[NotificationSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().notifications
        self._session = session or requests.Session()

    def permission_state(self) -> PermissionState:
        if not self._settings.webhook_url:
            return PermissionState.UNSUPPORTED
        return PermissionState.GRANTED

    def request_permission(self) -> PermissionState:
        return self.permission_state()

    def dispatch(self, title: str, body: str) -> None:
        if not self._settings.webhook_url:
            raise NotificationError("No webhook URL configured")

        try:
            response = self._session.post(
                self._settings.webhook_url,
                json={"title": title, "message": body},
                timeout=self._settings.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"Webhook delivery failed: {e}") from e
