"""
Reference data for Mozambican households.

Values here mirror what users pick from in the app: appliance presets,
provinces and residence classifications.
"""

from typing import Optional

from contaluz.models.energy import (
    CURRENCY,
    DEFAULT_HISTORICAL_AVG,
    DEFAULT_TARIFF,
    ApplianceCategory,
    PresetAppliance,
)


PRESET_APPLIANCES: tuple[PresetAppliance, ...] = (
    PresetAppliance(name="Lâmpada LED", power_watts=9, hours_per_day=6, category=ApplianceCategory.LIGHTING),
    PresetAppliance(name="Geladeira", power_watts=150, hours_per_day=24, category=ApplianceCategory.KITCHEN),
    PresetAppliance(name="Televisão", power_watts=100, hours_per_day=4, category=ApplianceCategory.ELECTRONICS),
    PresetAppliance(name="Ar Condicionado", power_watts=1500, hours_per_day=5, category=ApplianceCategory.CLIMATE),
    PresetAppliance(name="Ferro de Engomar", power_watts=1200, hours_per_day=0.5, category=ApplianceCategory.LAUNDRY),
    PresetAppliance(name="Micro-ondas", power_watts=800, hours_per_day=0.3, category=ApplianceCategory.KITCHEN),
)

PROVINCES: tuple[str, ...] = (
    "Maputo Cidade",
    "Maputo Província",
    "Gaza",
    "Inhambane",
    "Sofala",
    "Manica",
    "Tete",
    "Zambézia",
    "Nampula",
    "Niassa",
    "Cabo Delgado",
)

RESIDENCE_TYPES: tuple[str, ...] = (
    "Casa",
    "Apartamento",
    "Vivenda",
    "Dependência",
    "Flat",
    "Outro",
)

RESIDENCE_CONFIGS: dict[str, tuple[str, ...]] = {
    "Casa": ("T1", "T2", "T3", "T4", "Tipo 1", "Tipo 2", "Tipo 3", "Outro"),
    "Apartamento": ("Studio", "T1", "T2", "T3", "Cobertura"),
    "Vivenda": ("T3", "T4", "T5", "T6", "Tipo 3", "Tipo 4", "Tipo 5+"),
    "Dependência": ("T0", "T1", "Suíte", "Tipo 1"),
    "Flat": ("T1", "T2", "T3", "Duplex"),
    "Outro": ("Padrão", "Comercial", "Misto"),
}


def residence_configs_for(residence_type: str) -> tuple[str, ...]:
    """Configurations offered for a residence type ("Padrão" when unknown)."""
    return RESIDENCE_CONFIGS.get(residence_type, ("Padrão",))


def find_preset(name: str) -> Optional[PresetAppliance]:
    """Look up a preset by name, ignoring case and surrounding spaces."""
    wanted = name.strip().casefold()
    for preset in PRESET_APPLIANCES:
        if preset.name.casefold() == wanted:
            return preset
    return None
