"""Consumption deviation against the household's historical baseline."""


def deviation_percent(daily_kwh: float, historical_avg_kwh: float) -> float:
    """
    Signed percentage difference between current and historical daily use.

    Returns 0 when there is no usable baseline.
    """
    if historical_avg_kwh <= 0:
        return 0.0
    return (daily_kwh - historical_avg_kwh) / historical_avg_kwh * 100
