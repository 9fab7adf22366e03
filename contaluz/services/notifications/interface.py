"""
Abstract Notification Interface

DESIGN DECISION: System notifications are an optional extra on top of the
in-app alert inbox. The capability may be missing, refused or not yet asked
for, and none of those states may stop alerts from being generated.
"""

from abc import ABC, abstractmethod
from enum import Enum


class PermissionState(str, Enum):
    """Where the user stands on system notifications."""
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"  # not yet decided
    UNSUPPORTED = "unsupported"


class NotificationChannel(ABC):
    """
    A way to reach the user outside the app.

    Implementations must not raise from ``permission_state``;
    ``dispatch`` may raise ``NotificationError`` and callers swallow it.
    """

    @abstractmethod
    def permission_state(self) -> PermissionState:
        """Current permission, without prompting the user."""
        pass

    @abstractmethod
    def request_permission(self) -> PermissionState:
        """
        Ask the user for permission.

        Only meaningful from the DEFAULT state; other states are returned
        unchanged.
        """
        pass

    @abstractmethod
    def dispatch(self, title: str, body: str) -> None:
        """Deliver a notification."""
        pass


class UnsupportedNotificationChannel(NotificationChannel):
    """Used when no notification capability is configured."""

    def permission_state(self) -> PermissionState:
        return PermissionState.UNSUPPORTED

    def request_permission(self) -> PermissionState:
        return PermissionState.UNSUPPORTED

    def dispatch(self, title: str, body: str) -> None:
        raise NotificationError("Notifications are not supported on this host")


class NotificationError(Exception):
    """Base exception for notification delivery."""
    pass
