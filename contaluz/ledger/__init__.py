"""Ledger package: appliances and recharges."""

from contaluz.ledger.appliances import EDITABLE_FIELDS, ApplianceLedger
from contaluz.ledger.recharges import RechargeLedger

__all__ = [
    "ApplianceLedger",
    "EDITABLE_FIELDS",
    "RechargeLedger",
]
