"""Tests for the tariff, deviation and autonomy projection."""

import math
from datetime import timedelta

import pytest

from contaluz.alerts import AlertEngine
from contaluz.models.energy import Appliance, Profile, TrackerState
from contaluz.projection import (
    AutonomyProjector,
    build_snapshot,
    daily_cost,
    deviation_percent,
    projected_autonomy_days,
    recharge_target,
    total_daily_kwh,
)

from conftest import NOW


class TestAutonomy:
    """Tests for projected autonomy days."""

    def test_no_balance_means_zero_days(self):
        """Test autonomy with an empty balance, whatever the cost."""
        assert projected_autonomy_days(0, 25) == 0
        assert projected_autonomy_days(0, 0) == 0

    def test_no_cost_means_indefinite(self):
        """Test autonomy when nothing is drawing power."""
        assert projected_autonomy_days(100, 0) == math.inf

    def test_autonomy_is_floored(self):
        """Test that partial days are not counted."""
        assert projected_autonomy_days(100, 25) == 4
        assert projected_autonomy_days(99, 25) == 3

    def test_tiny_cost_is_indefinite(self):
        """Test that a quotient too large for a float means indefinite."""
        assert projected_autonomy_days(100, 1e-320) == math.inf

    def test_recharge_target(self):
        """Test daily limits for making an amount last."""
        target = recharge_target(800, 10, 8)
        assert target.kwh_available == pytest.approx(100)
        assert target.kwh_per_day_limit == pytest.approx(10)
        assert target.cost_per_day_limit == pytest.approx(80)

    @pytest.mark.parametrize("amount,days,tariff", [(0, 10, 8), (100, 0, 8), (100, 10, 0)])
    def test_recharge_target_rejects_non_positive(self, amount, days, tariff):
        """Test that nonsensical inputs yield no target."""
        assert recharge_target(amount, days, tariff) is None


class TestTariffAndDeviation:
    """Tests for daily cost and deviation."""

    def test_daily_cost(self):
        """Test cost = kWh x tariff."""
        assert daily_cost(2.5, 8) == pytest.approx(20)

    def test_deviation_percent(self):
        """Test the signed deviation from the baseline."""
        assert deviation_percent(7.5, 5) == pytest.approx(50)
        assert deviation_percent(2.5, 5) == pytest.approx(-50)

    def test_deviation_without_baseline(self):
        """Test that a zero baseline gives no deviation."""
        assert deviation_percent(7.5, 0) == 0


class TestSnapshot:
    """Tests for the derived snapshot."""

    def test_inactive_appliance_removes_exact_contribution(self):
        """Test that deactivating removes exactly that appliance's kWh."""
        tv = Appliance(name="TV", power_watts=100, hours_per_day=4)
        fridge = Appliance(name="Geladeira", power_watts=150, hours_per_day=24)
        state = TrackerState(appliances=[tv, fridge])
        before = total_daily_kwh(state)

        tv.is_active = False
        assert total_daily_kwh(state) == pytest.approx(before - 0.4)

    def test_snapshot_values(self):
        """Test every derived value at once."""
        state = TrackerState(
            balance=100,
            appliances=[Appliance(name="Ferro", power_watts=750, hours_per_day=10)],
            profile=Profile(tariff_per_kwh=8, historical_avg_kwh=5),
        )
        snapshot = build_snapshot(state)
        assert snapshot.daily_kwh == pytest.approx(7.5)
        assert snapshot.daily_cost == pytest.approx(60)
        assert snapshot.autonomy_days == 1
        assert snapshot.deviation_percent == pytest.approx(50)

    def test_empty_household(self):
        """Test the snapshot with no appliances."""
        snapshot = build_snapshot(TrackerState(balance=10))
        assert snapshot.daily_kwh == 0
        assert snapshot.is_indefinite


class TestSync:
    """Tests for balance decay on sync."""

    def _projector(self, balance=40.0):
        state = TrackerState(balance=balance, last_update=NOW)
        engine = AlertEngine()
        return state, engine, AutonomyProjector(state, engine)

    def test_deducts_elapsed_cost(self):
        """Test that half a day at 20 MT/day costs 10 MT."""
        state, _, projector = self._projector()
        result = projector.sync(NOW + timedelta(hours=12), daily_kwh=2.5)
        assert result.deducted == pytest.approx(10)
        assert state.balance == pytest.approx(30)
        assert state.last_update == NOW + timedelta(hours=12)

    def test_two_syncs_within_a_minute(self):
        """Test that a second sync seconds later does not deduct again."""
        state, _, projector = self._projector()
        first = projector.sync(NOW + timedelta(hours=12), daily_kwh=2.5)
        second_time = NOW + timedelta(hours=12, seconds=30)
        second = projector.sync(second_time, daily_kwh=2.5)

        assert first.deducted > 0
        assert second.deducted == 0
        assert state.balance == pytest.approx(30)
        assert state.last_update == second_time

    def test_balance_floors_at_zero(self):
        """Test that a long gap cannot push the balance negative."""
        state, _, projector = self._projector(balance=5)
        result = projector.sync(NOW + timedelta(days=3), daily_kwh=2.5)
        assert state.balance == 0
        assert result.deducted == pytest.approx(5)

    def test_deduction_rounded_to_centavos(self):
        """Test that one hour at 1 kWh/day deducts 0.33 MT, not 0.3333..."""
        state, _, projector = self._projector()
        result = projector.sync(NOW + timedelta(hours=1), daily_kwh=1)
        assert result.deducted == 0.33
        assert state.balance == 39.67

    def test_no_deduction_without_draw(self):
        """Test that a household with nothing on keeps its balance."""
        state, _, projector = self._projector()
        projector.sync(NOW + timedelta(days=2), daily_kwh=0)
        assert state.balance == 40

    def test_sync_records_confirmation(self):
        """Test that every sync posts an info alert."""
        _, engine, projector = self._projector()
        projector.sync(NOW + timedelta(seconds=5), daily_kwh=2.5)
        projector.sync(NOW + timedelta(seconds=10), daily_kwh=2.5)
        titles = [alert.title for alert in engine.book]
        assert titles == ["Sincronização Concluída", "Sincronização Concluída"]
        assert len(set(engine.book.ids())) == 2
