"""Notification services package."""

from contaluz.services.notifications.interface import (
    NotificationChannel,
    NotificationError,
    PermissionState,
    UnsupportedNotificationChannel,
)
from contaluz.services.notifications.webhook import WebhookNotificationChannel

__all__ = [
    "NotificationChannel",
    "NotificationError",
    "PermissionState",
    "UnsupportedNotificationChannel",
    "WebhookNotificationChannel",
]
