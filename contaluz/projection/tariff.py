"""
Tariff model: energy to money.

Stateless. A non-positive tariff is a configuration error caught where the
profile is edited; here it simply yields a non-positive cost, which the
projector treats as "no decay".
"""


def daily_cost(daily_kwh: float, tariff_per_kwh: float) -> float:
    """Daily spend in MT for a given daily consumption."""
    return daily_kwh * tariff_per_kwh
