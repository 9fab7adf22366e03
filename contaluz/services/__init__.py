"""Services package."""

from contaluz.services.notifications import (
    NotificationChannel,
    NotificationError,
    PermissionState,
    UnsupportedNotificationChannel,
    WebhookNotificationChannel,
)
from contaluz.services.ocr import (
    OCRError,
    PlateReadError,
    PlateReaderService,
)
from contaluz.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsStateStorage,
    InMemoryStateStorage,
    JsonFileStateStorage,
    StateCorruptedError,
    StateStorageInterface,
    StorageError,
)

__all__ = [
    # Notification services
    "NotificationChannel",
    "NotificationError",
    "PermissionState",
    "UnsupportedNotificationChannel",
    "WebhookNotificationChannel",
    # OCR services
    "OCRError",
    "PlateReadError",
    "PlateReaderService",
    # Storage services
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsStateStorage",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "StateCorruptedError",
    "StateStorageInterface",
    "StorageError",
]
