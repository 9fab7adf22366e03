"""Projection package: tariff, deviation and autonomy."""

from contaluz.projection.autonomy import (
    AutonomyProjector,
    projected_autonomy_days,
    recharge_target,
)
from contaluz.projection.deviation import deviation_percent
from contaluz.projection.snapshot import build_snapshot, total_daily_kwh
from contaluz.projection.tariff import daily_cost

__all__ = [
    "AutonomyProjector",
    "build_snapshot",
    "daily_cost",
    "deviation_percent",
    "projected_autonomy_days",
    "recharge_target",
    "total_daily_kwh",
]
