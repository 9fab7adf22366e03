"""
Tests for ContaLuz

Test strategy:
1. Unit tests for individual components (models, projection, alerts, validators)
2. Integration tests for the tracker (with in-memory storage and fakes)
3. No real API calls in tests (use fakes)
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from contaluz.audit import AuditLogger, configure_logging
from contaluz.config import AppSettings
from contaluz.models.energy import (
    Alert,
    AlertType,
    Appliance,
    ApplianceCategory,
    ApplianceDraft,
    ConsumptionSnapshot,
    PlateImage,
    PlateReading,
    Profile,
    Recharge,
    TrackerState,
    ensure_utc,
)
from contaluz.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from contaluz.models.constants import (
    PRESET_APPLIANCES,
    PROVINCES,
    find_preset,
    residence_configs_for,
)


class TestApplianceModels:
    """Tests for appliance-related Pydantic models."""

    def test_daily_kwh_counts_every_unit(self):
        """Test daily kWh = power x hours x quantity / 1000."""
        appliance = Appliance(name="Lâmpada", power_watts=10, hours_per_day=5, quantity=10)
        assert appliance.daily_kwh == pytest.approx(0.5)

    def test_daily_kwh_non_decreasing_in_each_input(self):
        """Test that raising power, hours or quantity never lowers daily kWh."""
        base = Appliance(name="TV", power_watts=100, hours_per_day=4, quantity=1)
        for field, value in (("power_watts", 150), ("hours_per_day", 6), ("quantity", 2)):
            bigger = base.model_copy(update={field: value})
            assert bigger.daily_kwh >= base.daily_kwh

    @pytest.mark.parametrize("raw", [None, 0, ""])
    def test_missing_quantity_is_one(self, raw):
        """Test that legacy records without a quantity count as one unit."""
        appliance = Appliance.model_validate({"name": "TV", "power": 100, "hoursPerDay": 4, "quantity": raw})
        assert appliance.quantity == 1

    def test_negative_quantity_rejected(self):
        """Test that a negative quantity is not backfilled."""
        with pytest.raises(ValidationError):
            Appliance(name="TV", power_watts=100, quantity=-2)

    def test_unknown_category_becomes_outros(self):
        """Test that categories outside the list are filed under Outros."""
        appliance = Appliance(name="Bomba", power_watts=750, category="Jardim")
        assert appliance.category == ApplianceCategory.OTHER

    def test_blob_aliases(self):
        """Test that the blob uses camelCase keys and 'power' for the wattage."""
        appliance = Appliance(name="TV", power_watts=100, hours_per_day=4)
        blob = appliance.model_dump(by_alias=True)
        assert blob["power"] == 100
        assert blob["hoursPerDay"] == 4
        assert blob["isActive"] is True

    def test_name_is_stripped_and_required(self):
        """Test whitespace stripping and the non-empty name."""
        assert Appliance(name="  Ferro  ", power_watts=1200).name == "Ferro"
        with pytest.raises(ValidationError):
            Appliance(name="   ", power_watts=1200)

    def test_draft_accepts_incomplete_data(self):
        """Test that a draft can be empty; validation happens later."""
        draft = ApplianceDraft()
        assert draft.name == ""
        assert draft.power_watts == 0

    def test_preset_to_draft(self):
        """Test that presets turn into single-unit drafts."""
        preset = find_preset("geladeira")
        draft = preset.to_draft()
        assert draft.name == "Geladeira"
        assert draft.power_watts == 150
        assert draft.hours_per_day == 24
        assert draft.quantity == 1


class TestProfileAndState:
    """Tests for the profile and the persisted state."""

    def test_profile_defaults(self):
        """Test default profile values for a fresh household."""
        profile = Profile()
        assert profile.province == "Maputo Cidade"
        assert profile.tariff_per_kwh == 8.0
        assert profile.historical_avg_kwh == 5.0
        assert profile.low_balance_threshold_days == 3
        assert profile.high_consumption_threshold_percent == 30
        assert profile.notifications_enabled is True

    def test_profile_rejects_non_positive_tariff(self):
        """Test that a zero tariff is rejected."""
        with pytest.raises(ValidationError):
            Profile(tariff_per_kwh=0)

    def test_profile_reads_blob_keys(self):
        """Test that the saved camelCase keys are understood."""
        profile = Profile.model_validate({"tariffPerKWh": 9.5, "historicalAvgKWh": 7, "residenceType": "Flat"})
        assert profile.tariff_per_kwh == 9.5
        assert profile.historical_avg_kwh == 7
        assert profile.residence_type == "Flat"

    def test_recharge_is_immutable(self):
        """Test that recorded recharges cannot be edited."""
        recharge = Recharge(amount=100)
        with pytest.raises(ValidationError):
            recharge.amount = 200

    def test_recharge_amount_must_be_positive(self):
        """Test that zero recharges are rejected."""
        with pytest.raises(ValidationError):
            Recharge(amount=0)

    def test_state_rejects_negative_balance(self):
        """Test that the balance never goes below zero."""
        state = TrackerState()
        with pytest.raises(ValidationError):
            state.balance = -1

    def test_state_blob_layout(self):
        """Test the top-level keys of the persisted blob."""
        state = TrackerState(
            balance=50,
            appliances=[Appliance(name="TV", power_watts=100, hours_per_day=4)],
        )
        blob = state.to_blob()
        assert set(blob) == {"balance", "appliances", "profile", "lastUpdate", "recharges"}
        assert "tariffPerKWh" in blob["profile"]
        assert blob["appliances"][0]["power"] == 100

    def test_naive_datetimes_are_utc(self):
        """Test that naive timestamps are treated as UTC."""
        naive = datetime(2026, 1, 1, 8, 0)
        assert ensure_utc(naive).tzinfo == timezone.utc
        assert TrackerState(last_update=naive).last_update.tzinfo == timezone.utc


class TestDerivedAndImageModels:
    """Tests for derived values and rating plate models."""

    def test_snapshot_indefinite(self):
        """Test the indefinite autonomy flag."""
        snapshot = ConsumptionSnapshot(
            balance=100, daily_kwh=0, daily_cost=0,
            autonomy_days=float("inf"), deviation_percent=-100,
        )
        assert snapshot.is_indefinite

    def test_alert_defaults_unread(self):
        """Test that new alerts start unread."""
        alert = Alert(id="x", title="t", description="d")
        assert alert.is_read is False
        assert alert.type == AlertType.INFO

    def test_plate_image_mime_type(self):
        """Test that only image uploads are accepted."""
        assert PlateImage(file_size_bytes=10, mime_type="IMAGE/PNG").mime_type == "image/png"
        with pytest.raises(ValidationError):
            PlateImage(file_size_bytes=10, mime_type="application/pdf")

    def test_plate_reading_numeric_voltage(self):
        """Test that a bare number for voltage is kept as text."""
        reading = PlateReading.model_validate({"power": 1200, "voltage": 220, "suggestedName": "Micro-ondas"})
        assert reading.voltage == "220"
        assert reading.suggested_name == "Micro-ondas"


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test basic AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECHARGE_RECORDED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.RECHARGE_RECORDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description="Test error",
            error_message="Something went wrong",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "system_error"
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "Something went wrong"

    def test_audit_event_builder_appliance_changed(self):
        """Test building an appliance event."""
        event = AuditEventBuilder.appliance_changed(
            AuditEventType.APPLIANCE_ADDED, "abc", "TV", 0.4,
        )
        assert event.entity_type == "appliance"
        assert event.entity_id == "abc"
        assert event.description == "Appliance added: TV"
        assert event.is_user_action is True

    def test_audit_event_builder_alert_raised_severity(self):
        """Test that danger alerts are audited as warnings."""
        event = AuditEventBuilder.alert_raised("autonomy-low", "danger", "Energia Crítica!")
        assert event.severity == AuditSeverity.WARNING
        info = AuditEventBuilder.alert_raised("sync-1", "info", "Sincronização Concluída")
        assert info.severity == AuditSeverity.INFO

    @pytest.mark.parametrize("debug_mode", [False, True])
    def test_audit_logger_writes_events(self, debug_mode):
        """Test logging an event with either renderer configured."""
        configure_logging(AppSettings(debug_mode=debug_mode, log_level="DEBUG"))
        event = AuditEventBuilder.save_failed("disk full")
        assert AuditLogger().log(event) is True
        configure_logging()


class TestReferenceData:
    """Tests for the reference data offered to users."""

    def test_presets(self):
        """Test that the preset list is complete and positive."""
        assert len(PRESET_APPLIANCES) == 6
        assert all(p.power_watts > 0 for p in PRESET_APPLIANCES)

    def test_provinces(self):
        """Test all eleven provinces are listed."""
        assert len(PROVINCES) == 11
        assert "Cabo Delgado" in PROVINCES

    def test_residence_configs(self):
        """Test residence configurations per type."""
        assert residence_configs_for("Apartamento")[0] == "Studio"
        assert residence_configs_for("Desconhecido") == ("Padrão",)

    def test_unknown_preset(self):
        """Test that unknown presets are not invented."""
        assert find_preset("Teletransportador") is None
