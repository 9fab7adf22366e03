"""
Core Data Models for ContaLuz

These models define the schemas for everything the tracker keeps or derives:
appliances, the household profile, recharges, alerts and the persisted
state blob.

DESIGN DECISION: Field names are snake_case in Python, but the persisted blob
keeps the camelCase keys households already have on disk (``hoursPerDay``,
``tariffPerKWh``, ``lastUpdate``...). Aliases map between the two and both
spellings are accepted on input.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


DEFAULT_TARIFF = 8.0  # Average MT per kWh in Mozambique
DEFAULT_HISTORICAL_AVG = 5.0  # kWh per day
CURRENCY = "MT"
MONEY_DECIMALS = 2  # centavos


def round_money(value: float) -> float:
    """
    Round an amount of MT to centavos.

    Money stays a float because the persisted blob stores plain JSON numbers;
    every balance change goes through here so binary-float noise never
    accumulates in the stored balance.
    """
    return round(value, MONEY_DECIMALS)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def new_id() -> str:
    return uuid4().hex


def coerce_category(value) -> "ApplianceCategory":
    """Unknown categories are filed under Outros."""
    if isinstance(value, ApplianceCategory):
        return value
    try:
        return ApplianceCategory(value)
    except ValueError:
        return ApplianceCategory.OTHER


class BlobModel(BaseModel):
    """Base for models that round-trip through the persisted blob."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class ApplianceCategory(str, Enum):
    """
    Appliance categories offered to the user.

    Values are the labels shown in the app and stored in the blob.
    """
    LIGHTING = "Iluminação"
    KITCHEN = "Cozinha"
    CLIMATE = "Climatização"
    LAUNDRY = "Lavanderia"
    ELECTRONICS = "Eletrônicos"
    OTHER = "Outros"


class AlertType(str, Enum):
    """Alert severity."""
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


# =============================================================================
# APPLIANCES
# =============================================================================

class Appliance(BlobModel):
    """
    A registered appliance.

    ``quantity`` counts identical units sharing the same power and usage.
    Legacy records without a quantity (or with 0) are read as a single unit.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=120)
    power_watts: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        alias="power",
        description="Rated power of one unit in Watts"
    )
    hours_per_day: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Daily usage of one unit in hours"
    )
    quantity: int = Field(default=1, ge=1)
    category: ApplianceCategory = ApplianceCategory.OTHER
    is_active: bool = True
    model: Optional[str] = Field(default=None, max_length=120)
    voltage: Optional[str] = Field(default=None, max_length=40)

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, v):
        """Missing or zero quantity means one unit."""
        if v is None or v == 0 or v == "":
            return 1
        return v

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v):
        return coerce_category(v)

    @property
    def daily_kwh(self) -> float:
        """Energy drawn per day by all units, in kWh."""
        return self.power_watts * self.hours_per_day * self.quantity / 1000


class ApplianceDraft(BaseModel):
    """
    Appliance data as typed by the user, before validation.

    Nothing is required here: the validator decides whether the draft can
    become an Appliance, and reports why not.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    power_watts: float = 0.0
    hours_per_day: float = 0.0
    quantity: Optional[int] = 1
    category: ApplianceCategory = ApplianceCategory.OTHER
    model: Optional[str] = None
    voltage: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v):
        return coerce_category(v)


class PresetAppliance(BaseModel):
    """A common appliance the user can add in one tap."""
    model_config = ConfigDict(frozen=True)

    name: str
    power_watts: float
    hours_per_day: float
    category: ApplianceCategory

    def to_draft(self) -> ApplianceDraft:
        return ApplianceDraft(
            name=self.name,
            power_watts=self.power_watts,
            hours_per_day=self.hours_per_day,
            quantity=1,
            category=self.category,
        )


# =============================================================================
# PROFILE
# =============================================================================

class Profile(BlobModel):
    """
    Household profile and alert thresholds.

    Exactly one instance exists per tracker. Fields missing from a saved blob
    fall back to these defaults.
    """

    name: str = ""
    address: str = ""
    province: str = "Maputo Cidade"
    city: str = ""
    district: str = ""
    neighborhood: str = ""
    residence_type: str = "Casa"
    residence_config: str = "T2"
    tariff_per_kwh: float = Field(
        default=DEFAULT_TARIFF,
        gt=0,
        allow_inf_nan=False,
        alias="tariffPerKWh",
        description="Tariff in MT per kWh"
    )
    historical_avg_kwh: float = Field(
        default=DEFAULT_HISTORICAL_AVG,
        ge=0,
        allow_inf_nan=False,
        alias="historicalAvgKWh",
        description="Baseline daily consumption in kWh"
    )
    photo_url: Optional[str] = None
    notifications_enabled: bool = True
    onboarding_completed: bool = False

    # Alert thresholds
    low_balance_threshold_days: int = Field(default=3, ge=0)
    high_consumption_threshold_percent: float = Field(
        default=30.0,
        ge=0,
        allow_inf_nan=False,
    )


# =============================================================================
# RECHARGES AND ALERTS
# =============================================================================

class Recharge(BlobModel):
    """A prepaid top-up. Immutable once recorded."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    date: datetime = Field(default_factory=utc_now)
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount in MT")

    @field_validator("date")
    @classmethod
    def aware_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Alert(BaseModel):
    """
    An entry in the user's alert inbox.

    Rule alerts carry a fixed id per rule; event alerts (recharge, sync)
    carry a unique time-derived id.
    """

    id: str
    title: str
    description: str
    type: AlertType = AlertType.INFO
    date: datetime = Field(default_factory=utc_now)
    is_read: bool = False


# =============================================================================
# PERSISTED STATE
# =============================================================================

class TrackerState(BlobModel):
    """
    Everything that survives a restart.

    Alerts are deliberately not part of it: the inbox starts empty on every
    load and rule alerts are re-derived from the current state.
    """
    model_config = ConfigDict(validate_assignment=True)

    balance: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    appliances: list[Appliance] = Field(default_factory=list)
    profile: Profile = Field(default_factory=Profile)
    last_update: datetime = Field(default_factory=utc_now)
    recharges: list[Recharge] = Field(
        default_factory=list,
        description="Most recent first"
    )

    @field_validator("last_update")
    @classmethod
    def aware_last_update(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    def to_blob(self) -> dict:
        """Serialize to the JSON-compatible blob layout."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# DERIVED VALUES (never stored)
# =============================================================================

class ConsumptionSnapshot(BaseModel):
    """
    Derived view of the current state.

    ``autonomy_days`` is ``inf`` when nothing is drawing power and there is
    balance left.
    """

    balance: float
    daily_kwh: float
    daily_cost: float
    autonomy_days: float
    deviation_percent: float

    @property
    def is_indefinite(self) -> bool:
        return self.autonomy_days == float("inf")


class SyncResult(BaseModel):
    """Outcome of reconciling the balance against elapsed time."""

    synced_at: datetime
    elapsed_hours: float
    deducted: float = Field(ge=0)
    balance: float = Field(ge=0)


class RechargeTarget(BaseModel):
    """Energy budget for making an amount last a number of days."""

    amount: float
    days: float
    kwh_available: float
    kwh_per_day_limit: float
    cost_per_day_limit: float


# =============================================================================
# RATING PLATE IMAGES
# =============================================================================

class PlateImage(BaseModel):
    """A photo of an appliance rating plate, before recognition."""

    upload_id: str = Field(default_factory=new_id)
    uploaded_at: datetime = Field(default_factory=utc_now)
    file_size_bytes: int = Field(ge=0)
    mime_type: str

    @field_validator('mime_type')
    @classmethod
    def validate_mime_type(cls, v: str) -> str:
        """Only allow image types."""
        allowed = {'image/jpeg', 'image/png', 'image/webp'}
        if v.lower() not in allowed:
            raise ValueError(f"Unsupported image type: {v}. Allowed: {allowed}")
        return v.lower()


class PlateReading(BaseModel):
    """What the recognition service read from a rating plate."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    power: float = Field(..., ge=0, description="Power in Watts")
    voltage: Optional[str] = None
    model: Optional[str] = None
    suggested_name: Optional[str] = Field(default=None, alias="suggestedName")

    @field_validator("voltage", "model", "suggested_name", mode="before")
    @classmethod
    def text_or_none(cls, v):
        """Plates often give bare numbers (220) where we keep text."""
        if v is None or v == "":
            return None
        if isinstance(v, (int, float)):
            return f"{v:g}"
        return v
