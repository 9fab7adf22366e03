"""Tests for the appliance and recharge ledgers."""

import math

import pytest

from contaluz.alerts import AlertEngine
from contaluz.ledger import ApplianceLedger, RechargeLedger
from contaluz.models.constants import find_preset
from contaluz.models.energy import (
    AlertType,
    ApplianceCategory,
    PlateReading,
    TrackerState,
)

from conftest import NOW, make_draft


class TestApplianceLedger:
    """Tests for appliance bookkeeping."""

    def test_add_assigns_fresh_ids(self):
        """Test that each appliance gets its own id and starts active."""
        ledger = ApplianceLedger(TrackerState())
        first = ledger.add(make_draft())
        second = ledger.add(make_draft())

        assert first.id != second.id
        assert first.is_active
        assert len(ledger.appliances) == 2

    def test_add_backfills_quantity(self):
        """Test that a draft without quantity becomes one unit."""
        ledger = ApplianceLedger(TrackerState())
        appliance = ledger.add(make_draft(quantity=None))
        assert appliance.quantity == 1

    def test_add_preset(self):
        """Test adding a preset appliance."""
        ledger = ApplianceLedger(TrackerState())
        appliance = ledger.add_preset(find_preset("Televisão"))
        assert appliance.name == "Televisão"
        assert appliance.category == ApplianceCategory.ELECTRONICS

    def test_total_daily_kwh(self):
        """Test the aggregate over active appliances."""
        ledger = ApplianceLedger(TrackerState())
        ledger.add(make_draft())
        ledger.add(make_draft(power_watts=10, hours_per_day=5, quantity=10))
        assert ledger.total_daily_kwh() == pytest.approx(3.0)

    def test_toggle_removes_contribution(self):
        """Test that toggling off removes exactly that appliance's draw."""
        ledger = ApplianceLedger(TrackerState())
        kettle = ledger.add(make_draft())
        ledger.add(make_draft(name="TV", power_watts=100, hours_per_day=4))

        ledger.toggle_active(kettle.id)
        assert ledger.total_daily_kwh() == pytest.approx(0.4)
        assert [a.name for a in ledger.active()] == ["TV"]
        assert not ledger.get(kettle.id).is_active

    def test_update_keeps_id_and_active_flag(self):
        """Test that edits replace only the editable fields."""
        ledger = ApplianceLedger(TrackerState())
        appliance = ledger.add(make_draft())
        ledger.toggle_active(appliance.id)

        updated = ledger.update(appliance.id, {"hours_per_day": 3, "is_active": True, "id": "other"})
        assert updated.id == appliance.id
        assert updated.hours_per_day == 3
        assert updated.is_active is False

    def test_update_unknown_id(self):
        """Test that editing a missing appliance changes nothing."""
        ledger = ApplianceLedger(TrackerState())
        assert ledger.update("missing", {"name": "x"}) is None

    def test_remove(self):
        """Test removing appliances by id."""
        ledger = ApplianceLedger(TrackerState())
        appliance = ledger.add(make_draft())
        assert ledger.remove(appliance.id) is True
        assert ledger.remove(appliance.id) is False
        assert ledger.appliances == []

    def test_draft_from_plate(self):
        """Test pre-filling a draft from a rating plate reading."""
        reading = PlateReading(power=1200, voltage="220V", model="MW-20", suggested_name="Micro-ondas")
        draft = ApplianceLedger.draft_from_plate(reading)
        assert draft.name == "Micro-ondas"
        assert draft.power_watts == 1200
        assert draft.hours_per_day == 0
        assert draft.voltage == "220V"


class TestRechargeLedger:
    """Tests for prepaid top-ups."""

    def _ledger(self, balance=0.0):
        state = TrackerState(balance=balance)
        engine = AlertEngine()
        return state, engine, RechargeLedger(state, engine)

    def test_recharge_adds_exact_amount(self):
        """Test a 250.5 MT recharge."""
        state, engine, ledger = self._ledger(balance=10)
        record = ledger.recharge(250.5, NOW)

        assert state.balance == 260.5
        assert state.recharges == [record]
        alert = list(engine.book)[0]
        assert alert.title == "Recarga Confirmada"
        assert alert.type == AlertType.INFO
        assert "250.50 MT" in alert.description

    def test_history_is_most_recent_first(self):
        """Test that new recharges are prepended."""
        _, _, ledger = self._ledger()
        first = ledger.recharge(100, NOW)
        second = ledger.recharge(50, NOW)
        assert ledger.history == [second, first]
        assert ledger.latest() == second
        assert ledger.total_recharged() == 150

    def test_balance_kept_in_centavos(self):
        """Test that small top-ups do not leave float noise in the balance."""
        state, _, ledger = self._ledger()
        for amount in (0.1, 250.5, 0.2):
            ledger.recharge(amount, NOW)
        assert state.balance == 250.8

    def test_overflowing_amount_changes_nothing(self):
        """Test that a top-up the balance cannot hold is ignored as a whole."""
        state, engine, ledger = self._ledger(balance=1e308)
        assert ledger.recharge(1e308, NOW) is None
        assert state.balance == 1e308
        assert state.recharges == []
        assert len(engine.book) == 0

    @pytest.mark.parametrize("amount", [0, -20, math.nan, math.inf])
    def test_invalid_amounts_ignored(self, amount):
        """Test that invalid amounts leave everything unchanged."""
        state, engine, ledger = self._ledger(balance=10)
        assert ledger.recharge(amount, NOW) is None
        assert state.balance == 10
        assert state.recharges == []
        assert len(engine.book) == 0
