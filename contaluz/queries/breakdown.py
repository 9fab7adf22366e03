"""
Consumption Breakdown Queries

DESIGN DECISION: These queries are DETERMINISTIC.
They answer "where does my money go?" straight from the stored appliances
and recharges. The advisor agent may phrase advice around these numbers,
but never computes them itself.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from contaluz.models.energy import Appliance, ApplianceCategory, Recharge
from contaluz.projection.tariff import daily_cost


class ApplianceUsage(BaseModel):
    """One appliance's share of the daily draw."""

    appliance_id: str
    name: str
    category: ApplianceCategory
    daily_kwh: float
    daily_cost: float
    share_percent: float = Field(
        ...,
        ge=0,
        le=100,
        description="Share of the total active daily kWh"
    )


class ConsumptionBreakdown(BaseModel):
    """Active appliances ranked by consumption, with category totals."""

    total_kwh: float
    total_cost: float
    appliances: list[ApplianceUsage] = Field(default_factory=list)
    by_category: dict[str, float] = Field(
        default_factory=dict,
        description="Daily kWh per category label"
    )

    @property
    def top_consumer(self) -> Optional[ApplianceUsage]:
        return self.appliances[0] if self.appliances else None


class RechargeSummary(BaseModel):
    count: int
    total_amount: float
    latest_amount: Optional[float] = None
    latest_date: Optional[datetime] = None


def consumption_breakdown(
    appliances: list[Appliance],
    tariff_per_kwh: float,
) -> ConsumptionBreakdown:
    """
    Rank the active appliances by daily kWh.

    Inactive appliances are left out entirely. Ties keep list order.
    """
    active = [a for a in appliances if a.is_active]
    total_kwh = sum(a.daily_kwh for a in active)

    usages = []
    by_category: dict[str, float] = {}
    for appliance in active:
        kwh = appliance.daily_kwh
        share = (kwh / total_kwh * 100) if total_kwh > 0 else 0.0
        usages.append(ApplianceUsage(
            appliance_id=appliance.id,
            name=appliance.name,
            category=appliance.category,
            daily_kwh=kwh,
            daily_cost=daily_cost(kwh, tariff_per_kwh),
            share_percent=min(share, 100.0),
        ))
        label = appliance.category.value
        by_category[label] = by_category.get(label, 0.0) + kwh

    usages.sort(key=lambda u: u.daily_kwh, reverse=True)

    return ConsumptionBreakdown(
        total_kwh=total_kwh,
        total_cost=daily_cost(total_kwh, tariff_per_kwh),
        appliances=usages,
        by_category=by_category,
    )


def recharge_summary(recharges: list[Recharge]) -> RechargeSummary:
    """Totals over the recharge history (most recent first)."""
    if not recharges:
        return RechargeSummary(count=0, total_amount=0.0)

    latest = recharges[0]
    return RechargeSummary(
        count=len(recharges),
        total_amount=sum(r.amount for r in recharges),
        latest_amount=latest.amount,
        latest_date=latest.date,
    )
