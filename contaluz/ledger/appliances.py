"""
Appliance Ledger

The household's list of appliances and its aggregate daily draw.
Inputs are expected to be validated already (see contaluz.validation);
the ledger only does the bookkeeping.
"""

from typing import Any, Optional

from contaluz.models.energy import (
    Appliance,
    ApplianceCategory,
    ApplianceDraft,
    PlateReading,
    PresetAppliance,
    TrackerState,
    new_id,
)
from contaluz.projection.snapshot import total_daily_kwh


# Fields an edit may replace; id and is_active are not among them
EDITABLE_FIELDS = frozenset({
    "name",
    "power_watts",
    "hours_per_day",
    "quantity",
    "category",
    "model",
    "voltage",
})


class ApplianceLedger:
    """Appliance records held in the shared tracker state."""

    def __init__(self, state: TrackerState):
        self._state = state

    @property
    def appliances(self) -> list[Appliance]:
        return self._state.appliances

    def get(self, appliance_id: str) -> Optional[Appliance]:
        for appliance in self._state.appliances:
            if appliance.id == appliance_id:
                return appliance
        return None

    def active(self) -> list[Appliance]:
        return [a for a in self._state.appliances if a.is_active]

    def add(self, draft: ApplianceDraft) -> Appliance:
        """Append a new appliance with a fresh id. Quantity defaults to 1."""
        appliance = Appliance(
            id=new_id(),
            name=draft.name,
            power_watts=draft.power_watts,
            hours_per_day=draft.hours_per_day,
            quantity=draft.quantity or 1,
            category=draft.category,
            is_active=True,
            model=draft.model or None,
            voltage=draft.voltage or None,
        )
        self._state.appliances.append(appliance)
        return appliance

    def add_preset(self, preset: PresetAppliance) -> Appliance:
        return self.add(preset.to_draft())

    def update(self, appliance_id: str, changes: dict[str, Any]) -> Optional[Appliance]:
        """
        Replace the editable fields of an appliance.

        Unknown or non-editable keys are ignored. Returns None (and changes
        nothing) if the id is absent.
        """
        for index, current in enumerate(self._state.appliances):
            if current.id != appliance_id:
                continue

            data = current.model_dump()
            data.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
            updated = Appliance.model_validate(data)
            self._state.appliances[index] = updated
            return updated

        return None

    def remove(self, appliance_id: str) -> bool:
        before = len(self._state.appliances)
        self._state.appliances[:] = [
            a for a in self._state.appliances if a.id != appliance_id
        ]
        return len(self._state.appliances) < before

    def toggle_active(self, appliance_id: str) -> Optional[Appliance]:
        appliance = self.get(appliance_id)
        if appliance is None:
            return None
        appliance.is_active = not appliance.is_active
        return appliance

    def total_daily_kwh(self) -> float:
        """Sum over active appliances; 0 when there are none."""
        return total_daily_kwh(self._state)

    @staticmethod
    def draft_from_plate(reading: PlateReading) -> ApplianceDraft:
        """
        Pre-fill a draft from a rating plate reading.

        Usage hours are unknown from a plate, so the user still has to
        complete the draft before saving.
        """
        return ApplianceDraft(
            name=reading.suggested_name or "",
            power_watts=reading.power,
            hours_per_day=0,
            quantity=1,
            category=ApplianceCategory.OTHER,
            model=reading.model,
            voltage=reading.voltage,
        )
