"""
Main Orchestrator for ContaLuz

This module ties together all the components and owns the one piece of
shared state: the TrackerState.

Every user action goes through EnergyTracker and follows the same cycle:
1. Validate at the boundary (invalid input is simply not applied)
2. Apply the change through the ledger or projector that owns it
3. Persist the state blob synchronously
4. Re-evaluate the alert rules against a fresh snapshot

DESIGN DECISION: There is exactly ONE TrackerState per tracker, and every
component holds a reference to it. It is never replaced, only mutated, so
no component can end up looking at a stale copy.

Alert inbox actions (mark read, remove, clear) are the exception: alerts
are not persisted and those actions never re-run the rules.
"""

import math
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from contaluz.alerts import AlertEngine
from contaluz.audit import AuditLogger, configure_logging, get_logger
from contaluz.config import AppSettings, get_settings
from contaluz.ledger import EDITABLE_FIELDS, ApplianceLedger, RechargeLedger
from contaluz.models.audit import AuditEventBuilder, AuditEventType
from contaluz.models.constants import find_preset, residence_configs_for
from contaluz.models.energy import (
    Alert,
    Appliance,
    ApplianceDraft,
    ConsumptionSnapshot,
    Profile,
    Recharge,
    RechargeTarget,
    SyncResult,
    TrackerState,
    ensure_utc,
    utc_now,
)
from contaluz.projection import AutonomyProjector, build_snapshot, recharge_target
from contaluz.queries import (
    ConsumptionBreakdown,
    RechargeSummary,
    consumption_breakdown,
    recharge_summary,
)
from contaluz.services.notifications import (
    NotificationChannel,
    PermissionState,
    UnsupportedNotificationChannel,
    WebhookNotificationChannel,
)
from contaluz.services.storage import (
    GoogleSheetsStateStorage,
    InMemoryStateStorage,
    JsonFileStateStorage,
    StateCorruptedError,
    StateStorageInterface,
    StorageError,
)
from contaluz.validation import (
    ValidationIssue,
    ValidationResult,
    validate_appliance_draft,
    validate_profile_changes,
    validate_recharge_amount,
)


logger = get_logger(__name__)


NOTIFICATIONS_UNSUPPORTED_MESSAGE = "Este dispositivo não suporta notificações de sistema."
NOTIFICATIONS_REFUSED_MESSAGE = (
    "Acesso negado. Por favor, habilite as notificações manualmente "
    "nas configurações do dispositivo."
)
NOTIFICATIONS_BLOCKED_MESSAGE = (
    "Notificações estão bloqueadas no seu dispositivo. "
    "Desbloqueie-as para usar esta função."
)
WELCOME_NOTIFICATION = ("ContaLuz Ativado", "Você agora receberá alertas de energia.")


class NotificationToggle(BaseModel):
    """Outcome of switching system notifications on or off."""

    enabled: bool
    message: Optional[str] = None


class EnergyTracker:
    """
    The state container owner and the only mutation entry point.

    Flow for a mutation:
    validate → apply → persist → evaluate alerts

    Storage and notifications are optional collaborators. Without storage
    nothing survives a restart; without a notifier alerts only reach the
    in-app inbox.
    """

    def __init__(
        self,
        storage: Optional[StateStorageInterface] = None,
        notifier: Optional[NotificationChannel] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._storage = storage
        self._notifier = notifier or UnsupportedNotificationChannel()
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        self._clock = clock

        self._state = self._load_state()

        self._alerts = AlertEngine(
            notifier=self._notifier,
            audit_logger=self._audit_logger,
        )
        self._appliances = ApplianceLedger(self._state)
        self._recharges = RechargeLedger(self._state, self._alerts)
        self._projector = AutonomyProjector(
            self._state,
            self._alerts,
            noise_threshold_hours=self._settings.sync_noise_threshold_hours,
        )

        self._evaluate(self._now())

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def profile(self) -> Profile:
        return self._state.profile

    @property
    def alerts(self) -> list[Alert]:
        """Alert inbox, most recent first."""
        return list(self._alerts.book)

    @property
    def unread_alerts(self) -> list[Alert]:
        return self._alerts.book.unread()

    @property
    def alert_engine(self) -> AlertEngine:
        return self._alerts

    @property
    def appliances(self) -> list[Appliance]:
        return self._appliances.appliances

    @property
    def recharges(self) -> list[Recharge]:
        return self._recharges.history

    def snapshot(self) -> ConsumptionSnapshot:
        return build_snapshot(self._state)

    def consumption_breakdown(self) -> ConsumptionBreakdown:
        return consumption_breakdown(self._state.appliances, self._state.profile.tariff_per_kwh)

    def recharge_summary(self) -> RechargeSummary:
        return recharge_summary(self._state.recharges)

    def recharge_target(self, amount: float, days: float) -> Optional[RechargeTarget]:
        """Daily limits for the autonomy simulator at the current tariff."""
        return recharge_target(amount, days, self._state.profile.tariff_per_kwh)

    # =========================================================================
    # APPLIANCES
    # =========================================================================

    def add_appliance(self, draft: ApplianceDraft) -> tuple[Optional[Appliance], ValidationResult]:
        """
        Register an appliance.

        Returns (appliance, result); appliance is None when the draft was
        rejected, and nothing changed.
        """
        result = validate_appliance_draft(draft)
        if result.has_errors:
            self._reject(AuditEventType.APPLIANCE_REJECTED, "appliance", result)
            return None, result

        appliance = self._appliances.add(draft)
        self._audit(AuditEventBuilder.appliance_changed(
            AuditEventType.APPLIANCE_ADDED,
            appliance.id,
            appliance.name,
            appliance.daily_kwh,
        ))
        self._after_mutation()
        return appliance, result

    def add_preset(self, name: str) -> Optional[Appliance]:
        """Add one of the common appliances by name."""
        preset = find_preset(name)
        if preset is None:
            logger.info("preset_not_found", name=name)
            return None

        appliance, _ = self.add_appliance(preset.to_draft())
        return appliance

    def update_appliance(
        self,
        appliance_id: str,
        **changes: Any,
    ) -> tuple[Optional[Appliance], ValidationResult]:
        """
        Edit an appliance. The edited appliance is validated as a whole,
        exactly like a new one.
        """
        current = self._appliances.get(appliance_id)
        if current is None:
            return None, ValidationResult(issues=[ValidationIssue(
                field="id",
                issue_type="not_found",
                message=f"Appliance not found: {appliance_id}",
                severity="error",
            )])

        merged = current.model_dump(include=set(EDITABLE_FIELDS))
        merged.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
        try:
            draft = ApplianceDraft.model_validate(merged)
        except ValidationError as e:
            result = ValidationResult(issues=[
                ValidationIssue(
                    field=".".join(str(part) for part in err["loc"]),
                    issue_type="invalid_value",
                    message=err["msg"],
                    severity="error",
                )
                for err in e.errors()
            ])
            self._reject(AuditEventType.APPLIANCE_REJECTED, "appliance", result)
            return None, result

        result = validate_appliance_draft(draft)
        if result.has_errors:
            self._reject(AuditEventType.APPLIANCE_REJECTED, "appliance", result)
            return None, result

        updated = self._appliances.update(appliance_id, draft.model_dump())
        self._audit(AuditEventBuilder.appliance_changed(
            AuditEventType.APPLIANCE_UPDATED,
            updated.id,
            updated.name,
            updated.daily_kwh,
        ))
        self._after_mutation()
        return updated, result

    def remove_appliance(self, appliance_id: str) -> bool:
        appliance = self._appliances.get(appliance_id)
        if appliance is None or not self._appliances.remove(appliance_id):
            return False

        self._audit(AuditEventBuilder.appliance_changed(
            AuditEventType.APPLIANCE_REMOVED,
            appliance.id,
            appliance.name,
            appliance.daily_kwh,
        ))
        self._after_mutation()
        return True

    def toggle_appliance(self, appliance_id: str) -> Optional[Appliance]:
        """Switch an appliance in or out of the daily draw."""
        appliance = self._appliances.toggle_active(appliance_id)
        if appliance is None:
            return None

        self._audit(AuditEventBuilder.appliance_changed(
            AuditEventType.APPLIANCE_TOGGLED,
            appliance.id,
            appliance.name,
            appliance.daily_kwh if appliance.is_active else 0.0,
        ))
        self._after_mutation()
        return appliance

    # =========================================================================
    # BALANCE
    # =========================================================================

    def recharge(self, amount: float, now: Optional[datetime] = None) -> Optional[Recharge]:
        """Top up the balance. Invalid amounts are ignored and return None."""
        result = validate_recharge_amount(amount, self._state.balance)
        if result.has_errors:
            self._reject(AuditEventType.RECHARGE_REJECTED, "recharge", result)
            return None

        now = self._now(now)
        record = self._recharges.recharge(amount, now)
        if record is None:
            self._reject(AuditEventType.RECHARGE_REJECTED, "recharge", result)
            return None

        self._audit(AuditEventBuilder.recharge_recorded(
            record.id,
            record.amount,
            self._state.balance,
        ))
        self._after_mutation(now)
        return record

    def sync(self, now: Optional[datetime] = None) -> SyncResult:
        """Charge the balance for the time elapsed since the last sync."""
        now = self._now(now)
        result = self._projector.sync(now, self._appliances.total_daily_kwh())
        self._audit(AuditEventBuilder.sync_completed(
            result.elapsed_hours,
            result.deducted,
            result.balance,
        ))
        self._after_mutation(now)
        return result

    # =========================================================================
    # PROFILE
    # =========================================================================

    def update_profile(self, **changes: Any) -> tuple[Optional[Profile], ValidationResult]:
        """
        Edit profile fields (snake_case names).

        Changing the residence type without choosing a configuration resets
        the configuration to the first one offered for the new type.
        """
        profile = self._state.profile

        if (
            "residence_type" in changes
            and "residence_config" not in changes
            and changes["residence_type"] != profile.residence_type
        ):
            changes["residence_config"] = residence_configs_for(changes["residence_type"])[0]

        result = validate_profile_changes(profile, changes)
        if result.has_errors:
            self._reject(AuditEventType.PROFILE_REJECTED, "profile", result)
            return None, result

        self._state.profile = Profile.model_validate({**profile.model_dump(), **changes})
        self._audit(AuditEventBuilder.profile_updated(changes))
        self._after_mutation()
        return self._state.profile, result

    def set_notifications_enabled(self, enabled: bool) -> NotificationToggle:
        """
        Switch system notifications on or off.

        Turning them on follows the permission state:
        - unsupported: enabled anyway (the inbox still works), with a notice
        - granted: enabled
        - not yet decided: ask; enabled with a welcome notification when
          granted, otherwise left off with a notice
        - denied: left off with a notice
        Turning them off never asks.
        """
        message = None

        if not enabled:
            new_state = False
            permission = self._safe_permission_state()
        else:
            permission = self._safe_permission_state()
            if permission == PermissionState.UNSUPPORTED:
                new_state = True
                message = NOTIFICATIONS_UNSUPPORTED_MESSAGE
            elif permission == PermissionState.GRANTED:
                new_state = True
            elif permission == PermissionState.DEFAULT:
                permission = self._request_permission()
                new_state = permission == PermissionState.GRANTED
                if new_state:
                    self._send_welcome()
                else:
                    message = NOTIFICATIONS_REFUSED_MESSAGE
            else:
                new_state = False
                message = NOTIFICATIONS_BLOCKED_MESSAGE

        self._audit(AuditEventBuilder.notification_permission(permission.value, new_state))

        if new_state != self._state.profile.notifications_enabled:
            self._state.profile = self._state.profile.model_copy(
                update={"notifications_enabled": new_state}
            )
            self._after_mutation()

        return NotificationToggle(enabled=new_state, message=message)

    # =========================================================================
    # ALERT INBOX
    # =========================================================================

    def mark_alert_read(self, alert_id: str) -> bool:
        return self._alerts.mark_read(alert_id)

    def remove_alert(self, alert_id: str) -> bool:
        """Delete an alert. A deleted rule alert may be raised again."""
        return self._alerts.remove(alert_id)

    def clear_alerts(self) -> int:
        return self._alerts.clear_all()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def reset(self) -> None:
        """
        Log out: erase the stored blob and go back to a fresh household.

        The state object itself is kept; only its fields are replaced.
        """
        if self._storage is not None:
            try:
                self._storage.clear()
            except StorageError as e:
                self._audit(AuditEventBuilder.external_service_error("storage", str(e)))

        fresh = self._default_state()
        for field in TrackerState.model_fields:
            setattr(self._state, field, getattr(fresh, field))

        self._alerts.clear_all()
        self._audit(AuditEventBuilder.state_reset())
        self._evaluate(self._now())

    def _now(self, now: Optional[datetime] = None) -> datetime:
        return ensure_utc(now) if now is not None else ensure_utc(self._clock())

    def _after_mutation(self, now: Optional[datetime] = None) -> None:
        self._persist()
        self._evaluate(self._now(now))

    def _evaluate(self, now: datetime) -> list[Alert]:
        return self._alerts.evaluate(self.snapshot(), self._state.profile, now)

    def _persist(self) -> None:
        """Save the blob. A failed save leaves the in-memory state authoritative."""
        if self._storage is None:
            return
        try:
            self._storage.save(self._state.to_blob())
        except StorageError as e:
            self._audit(AuditEventBuilder.save_failed(str(e)))

    # =========================================================================
    # LOADING
    # =========================================================================

    def _default_profile(self) -> Profile:
        return Profile(
            tariff_per_kwh=self._settings.default_tariff_per_kwh,
            historical_avg_kwh=self._settings.default_historical_avg_kwh,
            low_balance_threshold_days=self._settings.default_low_balance_threshold_days,
            high_consumption_threshold_percent=self._settings.default_high_consumption_threshold_percent,
        )

    def _default_state(self) -> TrackerState:
        return TrackerState(profile=self._default_profile(), last_update=self._now())

    def _load_state(self) -> TrackerState:
        if self._storage is None:
            return self._default_state()

        try:
            blob = self._storage.load()
        except StateCorruptedError as e:
            self._audit(AuditEventBuilder.state_corrupted(str(e)))
            return self._default_state()
        except StorageError as e:
            self._audit(AuditEventBuilder.external_service_error("storage", str(e)))
            return self._default_state()

        if blob is None:
            return self._default_state()

        state = self._state_from_blob(blob)
        self._audit(AuditEventBuilder.state_loaded(
            len(state.appliances),
            len(state.recharges),
            state.balance,
        ))
        return state

    def _state_from_blob(self, blob: dict) -> TrackerState:
        """
        Rebuild the state section by section.

        A bad section (or a bad record inside a list) falls back to its
        default instead of discarding the whole blob.
        """
        state = self._default_state()

        balance = blob.get("balance")
        if (
            isinstance(balance, (int, float))
            and not isinstance(balance, bool)
            and math.isfinite(balance)
            and balance >= 0
        ):
            state.balance = float(balance)
        elif balance is not None:
            logger.warning("saved_balance_dropped", balance=repr(balance))

        state.appliances = self._valid_records(Appliance, blob.get("appliances"))
        state.recharges = self._valid_records(Recharge, blob.get("recharges"))
        state.profile = self._merge_profile(blob.get("profile"))

        last_update = blob.get("lastUpdate")
        if last_update:
            try:
                state.last_update = last_update
            except ValidationError:
                logger.warning("saved_last_update_dropped", last_update=repr(last_update))

        return state

    @staticmethod
    def _valid_records(model: type[BaseModel], items: Any) -> list:
        if not isinstance(items, list):
            return []

        records = []
        for item in items:
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "saved_record_dropped",
                    record_type=model.__name__,
                    error_count=e.error_count(),
                )
        return records

    def _merge_profile(self, saved: Any) -> Profile:
        """Saved fields over the defaults; unreadable fields keep their default."""
        data = self._default_profile().model_dump(by_alias=True)
        if isinstance(saved, dict):
            data.update(saved)

        try:
            return Profile.model_validate(data)
        except ValidationError as e:
            bad_fields = {err["loc"][0] for err in e.errors() if err["loc"]}
            logger.warning("saved_profile_fields_dropped", fields=sorted(str(f) for f in bad_fields))

        defaults = self._default_profile().model_dump(by_alias=True)
        for key in bad_fields:
            if key in defaults:
                data[key] = defaults[key]
            else:
                data.pop(key, None)
        try:
            return Profile.model_validate(data)
        except ValidationError:
            return self._default_profile()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _safe_permission_state(self) -> PermissionState:
        try:
            return self._notifier.permission_state()
        except Exception as e:
            logger.warning("notification_permission_unavailable", error=str(e))
            return PermissionState.UNSUPPORTED

    def _request_permission(self) -> PermissionState:
        try:
            return self._notifier.request_permission()
        except Exception as e:
            logger.warning("notification_permission_request_failed", error=str(e))
            return PermissionState.DENIED

    def _send_welcome(self) -> None:
        title, body = WELCOME_NOTIFICATION
        try:
            self._notifier.dispatch(title, body)
        except Exception as e:
            self._audit(AuditEventBuilder.notification_failed("welcome", str(e)))

    def _reject(self, event_type: AuditEventType, entity_type: str, result: ValidationResult) -> None:
        self._audit(AuditEventBuilder.input_rejected(event_type, entity_type, result.issue_dicts()))

    def _audit(self, event) -> None:
        self._audit_logger.log(event)


def create_storage(backend: Optional[str] = None) -> StateStorageInterface:
    """Build the configured state storage backend."""
    backend = backend or get_settings().storage.backend

    if backend == "google_sheets":
        return GoogleSheetsStateStorage()
    if backend == "memory":
        return InMemoryStateStorage()
    return JsonFileStateStorage()


def create_tracker(use_storage: bool = True) -> EnergyTracker:
    """
    Factory function to create a tracker with all its collaborators.

    Args:
        use_storage: Whether to persist the state with the configured backend.
                    Set to False for testing without storage.
    """
    settings = get_settings()
    configure_logging(settings.app)
    audit_logger = AuditLogger()

    if use_storage:
        try:
            storage = create_storage(settings.storage.backend)
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            storage = InMemoryStateStorage()
    else:
        storage = InMemoryStateStorage()

    return EnergyTracker(
        storage=storage,
        notifier=WebhookNotificationChannel(),
        audit_logger=audit_logger,
        settings=settings.app,
    )
