"""
Data Models Package

This package contains all Pydantic models used by ContaLuz.
All data flowing through the tracker must conform to these schemas.
"""

from contaluz.models.energy import (
    Alert,
    AlertType,
    Appliance,
    ApplianceCategory,
    ApplianceDraft,
    ConsumptionSnapshot,
    PlateImage,
    PlateReading,
    PresetAppliance,
    Profile,
    Recharge,
    RechargeTarget,
    SyncResult,
    TrackerState,
    ensure_utc,
    utc_now,
)
from contaluz.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from contaluz.models.constants import (
    CURRENCY,
    DEFAULT_HISTORICAL_AVG,
    DEFAULT_TARIFF,
    PRESET_APPLIANCES,
    PROVINCES,
    RESIDENCE_CONFIGS,
    RESIDENCE_TYPES,
    find_preset,
    residence_configs_for,
)

__all__ = [
    # Energy models
    "Alert",
    "AlertType",
    "Appliance",
    "ApplianceCategory",
    "ApplianceDraft",
    "ConsumptionSnapshot",
    "PlateImage",
    "PlateReading",
    "PresetAppliance",
    "Profile",
    "Recharge",
    "RechargeTarget",
    "SyncResult",
    "TrackerState",
    "ensure_utc",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Reference data
    "CURRENCY",
    "DEFAULT_HISTORICAL_AVG",
    "DEFAULT_TARIFF",
    "PRESET_APPLIANCES",
    "PROVINCES",
    "RESIDENCE_CONFIGS",
    "RESIDENCE_TYPES",
    "find_preset",
    "residence_configs_for",
]
