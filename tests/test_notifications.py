"""Tests for the webhook notification channel."""

import pytest
import requests

from contaluz.config import NotificationSettings
from contaluz.services.notifications import (
    NotificationError,
    PermissionState,
    UnsupportedNotificationChannel,
    WebhookNotificationChannel,
)


class FakeHTTPResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeHTTPResponse()
        self.error = error
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        if self.error:
            raise self.error
        return self.response


class TestWebhookNotificationChannel:
    """Tests for webhook delivery."""

    def test_unsupported_without_url(self):
        """Test that no URL means no notification capability."""
        channel = WebhookNotificationChannel(
            settings=NotificationSettings(webhook_url=None),
            session=FakeSession(),
        )
        assert channel.permission_state() == PermissionState.UNSUPPORTED
        assert channel.request_permission() == PermissionState.UNSUPPORTED
        with pytest.raises(NotificationError):
            channel.dispatch("t", "b")

    def test_dispatch_posts_json(self):
        """Test the payload sent to the webhook."""
        session = FakeSession()
        channel = WebhookNotificationChannel(
            settings=NotificationSettings(webhook_url="https://push.example/hook", timeout_seconds=2),
            session=session,
        )
        assert channel.permission_state() == PermissionState.GRANTED

        channel.dispatch("Energia Crítica!", "Saldo baixo")
        assert session.posts == [
            ("https://push.example/hook", {"title": "Energia Crítica!", "message": "Saldo baixo"}, 2)
        ]

    @pytest.mark.parametrize("session", [
        FakeSession(error=requests.ConnectionError("offline")),
        FakeSession(response=FakeHTTPResponse(502)),
    ])
    def test_delivery_failure(self, session):
        """Test that HTTP failures become NotificationError."""
        channel = WebhookNotificationChannel(
            settings=NotificationSettings(webhook_url="https://push.example/hook"),
            session=session,
        )
        with pytest.raises(NotificationError):
            channel.dispatch("t", "b")


class TestUnsupportedNotificationChannel:
    """Tests for the no-op channel."""

    def test_always_unsupported(self):
        """Test the unsupported channel."""
        channel = UnsupportedNotificationChannel()
        assert channel.permission_state() == PermissionState.UNSUPPORTED
        with pytest.raises(NotificationError):
            channel.dispatch("t", "b")
