"""
Autonomy Projection

Turns balance and daily cost into "how many days of energy are left", and
reconciles the balance against the wall-clock time elapsed between syncs.

DESIGN DECISION: The tracker has no background execution. Metered draw is
continuous but is only charged against the balance when the user syncs: the
whole gap since the previous sync is deducted at once, at the draw rate in
effect at sync time.
"""

import math
from datetime import datetime
from typing import Optional

from contaluz.alerts.engine import AlertEngine
from contaluz.models.energy import (
    RechargeTarget,
    SyncResult,
    TrackerState,
    ensure_utc,
    round_money,
)
from contaluz.projection.tariff import daily_cost


SYNC_ALERT_PREFIX = "sync"


def projected_autonomy_days(balance: float, cost_per_day: float) -> float:
    """
    Full days the balance lasts at the given daily cost.

    - positive cost: floor(balance / cost), inf when the quotient overflows
    - no cost and balance left: inf (indefinite)
    - no cost and no balance: 0
    """
    if cost_per_day > 0:
        days = balance / cost_per_day
        if not math.isfinite(days):
            return math.inf
        return float(math.floor(days))
    if balance > 0:
        return math.inf
    return 0.0


def recharge_target(
    amount: float,
    days: float,
    tariff_per_kwh: float,
) -> Optional[RechargeTarget]:
    """
    Daily energy budget that makes ``amount`` last ``days``.

    Returns None when any input is not positive.
    """
    if amount <= 0 or days <= 0 or tariff_per_kwh <= 0:
        return None

    kwh_available = amount / tariff_per_kwh
    return RechargeTarget(
        amount=amount,
        days=days,
        kwh_available=kwh_available,
        kwh_per_day_limit=kwh_available / days,
        cost_per_day_limit=amount / days,
    )


class AutonomyProjector:
    """
    Owns the balance decay.

    Reads and writes ``balance`` and ``last_update`` on the shared state.
    """

    def __init__(
        self,
        state: TrackerState,
        alert_engine: AlertEngine,
        noise_threshold_hours: float = 0.01,
    ):
        self._state = state
        self._alerts = alert_engine
        self._noise_threshold_hours = noise_threshold_hours

    def sync(self, now: datetime, daily_kwh: float) -> SyncResult:
        """
        Charge the balance for the time elapsed since the last sync.

        Gaps under the noise threshold, an empty balance or a non-positive
        cost leave the balance untouched. ``last_update`` always moves to
        ``now`` and a confirmation alert is always recorded.
        """
        now = ensure_utc(now)
        state = self._state
        elapsed_hours = (now - state.last_update).total_seconds() / 3600

        deducted = 0.0
        if elapsed_hours > self._noise_threshold_hours and state.balance > 0:
            cost = round_money(
                daily_cost(daily_kwh / 24 * elapsed_hours, state.profile.tariff_per_kwh)
            )
            if cost > 0:
                new_balance = round_money(max(0.0, state.balance - cost))
                deducted = round_money(state.balance - new_balance)
                state.balance = new_balance

        state.last_update = now

        local_time = now.astimezone().strftime("%H:%M:%S")
        self._alerts.record_event(
            prefix=SYNC_ALERT_PREFIX,
            title="Sincronização Concluída",
            description=f"Leitura do contador atualizada com sucesso às {local_time}.",
            now=now,
        )

        return SyncResult(
            synced_at=now,
            elapsed_hours=elapsed_hours,
            deducted=deducted,
            balance=state.balance,
        )
