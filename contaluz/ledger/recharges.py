"""
Recharge Ledger

Prepaid top-ups. Purely additive: a recharge is recorded, the balance goes
up by exactly its amount and a confirmation alert is posted.
"""

import math
from datetime import datetime
from typing import Optional

from contaluz.alerts.engine import AlertEngine
from contaluz.models.energy import (
    CURRENCY,
    Recharge,
    TrackerState,
    ensure_utc,
    round_money,
)


RECHARGE_ALERT_PREFIX = "recharge"


class RechargeLedger:
    """Recharge history (most recent first) and its effect on the balance."""

    def __init__(self, state: TrackerState, alert_engine: AlertEngine):
        self._state = state
        self._alerts = alert_engine

    @property
    def history(self) -> list[Recharge]:
        return self._state.recharges

    def recharge(self, amount: float, now: datetime) -> Optional[Recharge]:
        """
        Record a top-up.

        Non-positive or non-finite amounts, and amounts that would push the
        balance past what a float can hold, are ignored and return None.
        Nothing is touched unless the whole top-up can be applied.
        """
        if not math.isfinite(amount) or amount <= 0:
            return None

        new_balance = round_money(self._state.balance + amount)
        if not math.isfinite(new_balance):
            return None

        now = ensure_utc(now)
        record = Recharge(date=now, amount=amount)

        self._state.balance = new_balance
        self._state.recharges = [record, *self._state.recharges]

        self._alerts.record_event(
            prefix=RECHARGE_ALERT_PREFIX,
            title="Recarga Confirmada",
            description=f"Foram adicionados {amount:.2f} {CURRENCY} ao seu saldo com sucesso.",
            now=now,
        )
        return record

    def latest(self) -> Optional[Recharge]:
        return self._state.recharges[0] if self._state.recharges else None

    def total_recharged(self) -> float:
        return sum(r.amount for r in self._state.recharges)
