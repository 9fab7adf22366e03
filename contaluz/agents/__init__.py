"""AI agents package."""

from contaluz.agents.ai_agents import (
    FALLBACK_TIPS,
    EnergyAdvisorAgent,
    EnergyTip,
    RechargeStrategy,
    UsageReduction,
    fallback_insight,
)

__all__ = [
    "FALLBACK_TIPS",
    "EnergyAdvisorAgent",
    "EnergyTip",
    "RechargeStrategy",
    "UsageReduction",
    "fallback_insight",
]
