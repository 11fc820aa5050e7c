"""Lockup period and tenor helpers.

Lockup periods are quoted as 3M / 6M / 1Y / 2Y. The same codes double as
treasury tenor buckets for the risk-free rate.
"""

import calendar
import logging
from datetime import date

from ..utils.error_handling import InvalidInputError
from .engine_config import EngineConfig

logger = logging.getLogger("lockup_discount.tenor")

LOCKUP_PERIOD_DAYS = {
    '3M': 90,
    '6M': 180,
    '1Y': 365,
    '2Y': 730,
}

_LOCKUP_PERIOD_MONTHS = {
    '3M': 3,
    '6M': 6,
    '1Y': 12,
    '2Y': 24,
}


def lockup_period_to_days(period: str) -> int:
    """Convert a lockup period code to its nominal day count.

    Raises:
        InvalidInputError: For an unknown period code
    """
    try:
        return LOCKUP_PERIOD_DAYS[period.upper()]
    except KeyError:
        raise InvalidInputError(
            f"Unknown lockup period {period!r}, expected one of {', '.join(LOCKUP_PERIOD_DAYS)}"
        ) from None


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def lockup_target_date(period: str, as_of: date | None = None) -> date:
    """Calendar date on which a lockup starting at as_of ends.

    Args:
        period: Lockup period code (3M, 6M, 1Y, 2Y)
        as_of: Start date (defaults to today)

    Returns:
        Target date

    Example:
        >>> lockup_target_date('6M', date(2025, 8, 31))
        datetime.date(2026, 2, 28)
    """
    as_of = as_of or date.today()
    lockup_period_to_days(period)  # validates the code
    return add_months(as_of, _LOCKUP_PERIOD_MONTHS[period.upper()])


def year_fraction(start: date, end: date, days_per_year: int = 365) -> float:
    """Signed distance from start to end in years (negative if end precedes start)."""
    return (end - start).days / days_per_year


def tenor_bucket(lockup_days: int) -> str:
    """Map a lockup length in days to the nearest treasury tenor bucket."""
    if lockup_days <= 0:
        raise InvalidInputError(f"lockup_days must be positive, got {lockup_days}")
    return min(LOCKUP_PERIOD_DAYS, key=lambda p: abs(LOCKUP_PERIOD_DAYS[p] - lockup_days))


def risk_free_rate_for(
    period: str,
    live_rate: float | None = None,
    config: EngineConfig | None = None,
) -> float:
    """Resolve the risk-free rate for a tenor bucket.

    A live rate from the caller wins; otherwise the configured fallback rate
    for the bucket is used, then the 1Y fallback for unknown buckets.

    Args:
        period: Tenor bucket code
        live_rate: Rate from an external treasury lookup, if any (decimal)
        config: Engine configuration holding fallback rates

    Returns:
        Risk-free rate as decimal (e.g. 0.0425 for 4.25%)
    """
    if live_rate is not None:
        return live_rate

    config = config or EngineConfig()
    rates = config.treasury_fallback_rates
    code = period.upper()
    if code not in rates:
        logger.warning("Unknown tenor bucket %s, defaulting to 1Y fallback rate", period)
        code = '1Y'

    rate = rates[code]
    logger.info("Using fallback risk-free rate for %s: %.2f%%", code, rate * 100)
    return rate
