"""
Shared fixtures and fakes.

No test talks to Gemini, Google Sheets or a webhook: every external
collaborator is replaced here.
"""

from datetime import datetime, timezone

import pytest

from contaluz.audit import AuditLogger
from contaluz.config import AppSettings, GeminiSettings
from contaluz.models.energy import ApplianceDraft, ApplianceCategory
from contaluz.orchestrator import EnergyTracker
from contaluz.services.notifications import (
    NotificationChannel,
    NotificationError,
    PermissionState,
)
from contaluz.services.storage import InMemoryStateStorage


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class RecordingAuditLogger(AuditLogger):
    """Keeps events in memory instead of writing them."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event) -> bool:
        self.events.append(event)
        return True

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


class FakeNotifier(NotificationChannel):
    """Notification channel with a scripted permission state."""

    def __init__(
        self,
        state: PermissionState = PermissionState.GRANTED,
        grant_on_request: bool = True,
        fail: bool = False,
    ):
        self.state = state
        self.grant_on_request = grant_on_request
        self.fail = fail
        self.sent = []
        self.requests = 0

    def permission_state(self) -> PermissionState:
        return self.state

    def request_permission(self) -> PermissionState:
        self.requests += 1
        if self.state == PermissionState.DEFAULT:
            self.state = (
                PermissionState.GRANTED if self.grant_on_request else PermissionState.DENIED
            )
        return self.state

    def dispatch(self, title: str, body: str) -> None:
        if self.fail:
            raise NotificationError("push relay unreachable")
        self.sent.append((title, body))


class FakeResponse:
    def __init__(self, text: str):
        self.text = text


class FakeGeminiModel:
    """
    Stand-in for genai.GenerativeModel.

    Each call pops the next scripted reply; an Exception reply is raised.
    """

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def generate_content_async(self, contents):
        self.calls.append(contents)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return FakeResponse(reply)


@pytest.fixture
def app_settings():
    return AppSettings()


@pytest.fixture
def gemini_settings():
    return GeminiSettings(api_key="test-key", max_attempts=1)


@pytest.fixture
def audit():
    return RecordingAuditLogger()


@pytest.fixture
def storage():
    return InMemoryStateStorage()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def tracker(storage, notifier, audit, app_settings):
    return EnergyTracker(
        storage=storage,
        notifier=notifier,
        audit_logger=audit,
        settings=app_settings,
        clock=lambda: NOW,
    )


def make_draft(
    name: str = "Chaleira",
    power_watts: float = 1250,
    hours_per_day: float = 2,
    quantity: int = 1,
    category: ApplianceCategory = ApplianceCategory.KITCHEN,
) -> ApplianceDraft:
    """Defaults draw 2.5 kWh/day, i.e. 20 MT/day at 8 MT/kWh."""
    return ApplianceDraft(
        name=name,
        power_watts=power_watts,
        hours_per_day=hours_per_day,
        quantity=quantity,
        category=category,
    )
