"""
Threshold rules.

Each rule owns a stable alert id, so however often it is evaluated it maps
to at most one alert in the inbox.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from contaluz.models.energy import (
    CURRENCY,
    Alert,
    AlertType,
    ConsumptionSnapshot,
    Profile,
)


LOW_AUTONOMY_ALERT_ID = "autonomy-low"
HIGH_CONSUMPTION_ALERT_ID = "high-consumption"


class AlertRule(ABC):
    """A threshold condition over the derived state."""

    rule_id: str
    alert_type: AlertType

    @abstractmethod
    def fires(self, snapshot: ConsumptionSnapshot, profile: Profile) -> bool:
        pass

    @abstractmethod
    def build(
        self,
        snapshot: ConsumptionSnapshot,
        profile: Profile,
        now: datetime,
    ) -> Alert:
        pass


class LowAutonomyRule(AlertRule):
    """Balance will run out within the user's threshold."""

    rule_id = LOW_AUTONOMY_ALERT_ID
    alert_type = AlertType.DANGER

    def fires(self, snapshot: ConsumptionSnapshot, profile: Profile) -> bool:
        return (
            snapshot.autonomy_days < profile.low_balance_threshold_days
            and snapshot.balance > 0
        )

    def build(self, snapshot, profile, now) -> Alert:
        return Alert(
            id=self.rule_id,
            title="Energia Crítica!",
            description=(
                f"Sua energia dura menos de {profile.low_balance_threshold_days} dias "
                f"({int(snapshot.autonomy_days)} restantes). "
                f"Saldo atual: {snapshot.balance:.2f} {CURRENCY}."
            ),
            type=self.alert_type,
            date=now,
        )


class HighConsumptionRule(AlertRule):
    """Daily use is above the historical baseline by more than the threshold."""

    rule_id = HIGH_CONSUMPTION_ALERT_ID
    alert_type = AlertType.WARNING

    def fires(self, snapshot: ConsumptionSnapshot, profile: Profile) -> bool:
        return snapshot.deviation_percent > profile.high_consumption_threshold_percent

    def build(self, snapshot, profile, now) -> Alert:
        return Alert(
            id=self.rule_id,
            title="Pico de Consumo!",
            description=(
                f"Seu uso subiu {snapshot.deviation_percent:.0f}%, excedendo seu "
                f"limite de {profile.high_consumption_threshold_percent:g}%."
            ),
            type=self.alert_type,
            date=now,
        )


DEFAULT_RULES: tuple[AlertRule, ...] = (LowAutonomyRule(), HighConsumptionRule())
