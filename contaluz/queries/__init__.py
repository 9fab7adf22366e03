"""Deterministic queries over the tracker state."""

from contaluz.queries.breakdown import (
    ApplianceUsage,
    ConsumptionBreakdown,
    RechargeSummary,
    consumption_breakdown,
    recharge_summary,
)

__all__ = [
    "ApplianceUsage",
    "ConsumptionBreakdown",
    "RechargeSummary",
    "consumption_breakdown",
    "recharge_summary",
]
