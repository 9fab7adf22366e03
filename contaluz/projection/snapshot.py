"""Derived state: the numbers every screen and alert rule reads."""

from contaluz.models.energy import ConsumptionSnapshot, TrackerState
from contaluz.projection.autonomy import projected_autonomy_days
from contaluz.projection.deviation import deviation_percent
from contaluz.projection.tariff import daily_cost


def total_daily_kwh(state: TrackerState) -> float:
    return sum(a.daily_kwh for a in state.appliances if a.is_active)


def build_snapshot(state: TrackerState) -> ConsumptionSnapshot:
    """
    Recompute every derived value from the current state.

    Pure: nothing is cached, so the snapshot is always consistent with the
    state it was built from.
    """
    daily_kwh = total_daily_kwh(state)
    cost = daily_cost(daily_kwh, state.profile.tariff_per_kwh)

    return ConsumptionSnapshot(
        balance=state.balance,
        daily_kwh=daily_kwh,
        daily_cost=cost,
        autonomy_days=projected_autonomy_days(state.balance, cost),
        deviation_percent=deviation_percent(daily_kwh, state.profile.historical_avg_kwh),
    )
