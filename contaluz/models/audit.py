"""
Audit Models for ContaLuz

Every state transition in the tracker is logged as an audit event.
This provides:
1. Traceability of every balance change
2. Debugging information when a projection looks wrong
3. A record of alerts raised and notifications sent

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from contaluz.models.energy import utc_now


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutation of the tracker state has its own event type.
    """
    # Appliances
    APPLIANCE_ADDED = "appliance_added"
    APPLIANCE_UPDATED = "appliance_updated"
    APPLIANCE_REMOVED = "appliance_removed"
    APPLIANCE_TOGGLED = "appliance_toggled"
    APPLIANCE_REJECTED = "appliance_rejected"

    # Balance
    RECHARGE_RECORDED = "recharge_recorded"
    RECHARGE_REJECTED = "recharge_rejected"
    SYNC_COMPLETED = "sync_completed"

    # Alerts
    ALERT_RAISED = "alert_raised"
    ALERT_READ = "alert_read"
    ALERT_REMOVED = "alert_removed"
    ALERTS_CLEARED = "alerts_cleared"

    # Profile
    PROFILE_UPDATED = "profile_updated"
    PROFILE_REJECTED = "profile_rejected"

    # Notifications
    NOTIFICATION_DISPATCHED = "notification_dispatched"
    NOTIFICATION_FAILED = "notification_failed"
    NOTIFICATION_PERMISSION = "notification_permission"

    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_CORRUPTED = "state_corrupted"
    SAVE_FAILED = "save_failed"
    STATE_RESET = "state_reset"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every state transition creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'appliance', 'recharge', 'alert')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.recharge_recorded(recharge_id, amount, balance)
        event = AuditEventBuilder.alert_raised(alert_id, alert_type, title)
    """

    @staticmethod
    def appliance_changed(
        event_type: AuditEventType,
        appliance_id: str,
        name: str,
        daily_kwh: float,
    ) -> AuditEvent:
        verb = event_type.value.split("_", 1)[1]
        return AuditEvent(
            event_type=event_type,
            entity_type="appliance",
            entity_id=appliance_id,
            description=f"Appliance {verb}: {name}",
            details={
                "name": name,
                "daily_kwh": round(daily_kwh, 4),
            },
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        event_type: AuditEventType,
        entity_type: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"{entity_type.capitalize()} input rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def recharge_recorded(
        recharge_id: str,
        amount: float,
        balance: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECHARGE_RECORDED,
            entity_type="recharge",
            entity_id=recharge_id,
            description=f"Recharge recorded: {amount:.2f} MT",
            details={
                "amount": amount,
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def sync_completed(
        elapsed_hours: float,
        deducted: float,
        balance: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_COMPLETED,
            entity_type="balance",
            description=f"Sync deducted {deducted:.2f} MT over {elapsed_hours:.2f} h",
            details={
                "elapsed_hours": elapsed_hours,
                "deducted": deducted,
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def alert_raised(
        alert_id: str,
        alert_type: str,
        title: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALERT_RAISED,
            severity=(
                AuditSeverity.WARNING
                if alert_type in ("warning", "danger")
                else AuditSeverity.INFO
            ),
            entity_type="alert",
            entity_id=alert_id,
            description=f"Alert raised: {title}",
            details={"alert_type": alert_type},
        )

    @staticmethod
    def alert_changed(
        event_type: AuditEventType,
        alert_id: Optional[str] = None,
        count: int = 1,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="alert",
            entity_id=alert_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()} ({count})",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def profile_updated(changes: dict[str, Any]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="profile",
            description=f"Profile updated: {', '.join(sorted(changes))}",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def notification_dispatched(alert_id: str, title: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_DISPATCHED,
            entity_type="alert",
            entity_id=alert_id,
            description=f"Notification sent: {title}",
        )

    @staticmethod
    def notification_failed(alert_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="alert",
            entity_id=alert_id,
            description="Notification could not be delivered",
            error_message=error_message,
        )

    @staticmethod
    def notification_permission(state: str, enabled: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_PERMISSION,
            entity_type="profile",
            description=f"Notification permission {state}; enabled={enabled}",
            details={"permission": state, "enabled": enabled},
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(appliance_count: int, recharge_count: int, balance: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="state",
            description=f"State loaded with {appliance_count} appliances",
            details={
                "appliances": appliance_count,
                "recharges": recharge_count,
                "balance": balance,
            },
        )

    @staticmethod
    def state_corrupted(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_CORRUPTED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            description="Saved state could not be read; defaults restored",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            description="State could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def state_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="state",
            description="All local data erased",
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
        )
