"""Expiry pair selection around a lockup target date.

Three cases, checked in order:
1. Target falls between two adjacent expiries -> interpolate between them
2. Target lies beyond the last expiry -> extrapolate from the last two
3. Target precedes the first expiry -> bounded extrapolation from the first two
"""

import logging
from datetime import date
from typing import Iterable

from ..models.option_contract import ExpiryPair, ExtrapolationStrategy
from ..utils.error_handling import InsufficientExpiriesError

logger = logging.getLogger("lockup_discount.expiry_selector")


def select_expiry_pair(expiries: Iterable[date], target: date) -> ExpiryPair:
    """Pick the two expiries used to reach the target tenor.

    Args:
        expiries: Available expiry dates, any order (not mutated)
        target: Lockup end date

    Returns:
        ExpiryPair with short/long expiry and strategy tag

    Raises:
        InsufficientExpiriesError: If fewer than two distinct expiries are available

    Example:
        >>> pair = select_expiry_pair([date(2026, 3, 27), date(2026, 6, 26)], date(2026, 5, 1))
        >>> pair.strategy
        <ExtrapolationStrategy.INTERPOLATION: 'interpolation'>
    """
    sorted_expiries = sorted(set(expiries))

    if len(sorted_expiries) < 2:
        raise InsufficientExpiriesError(
            f"Need at least 2 expiries for dual-expiry pricing, got {len(sorted_expiries)}"
        )

    logger.debug("Target %s, available expiries: %s",
                 target, ", ".join(e.isoformat() for e in sorted_expiries))

    for short_exp, long_exp in zip(sorted_expiries, sorted_expiries[1:]):
        if short_exp <= target <= long_exp:
            logger.info("Strategy: interpolation between %s and %s", short_exp, long_exp)
            return ExpiryPair(short_exp, long_exp, ExtrapolationStrategy.INTERPOLATION)

    if target > sorted_expiries[-1]:
        short_exp, long_exp = sorted_expiries[-2], sorted_expiries[-1]
        logger.info("Strategy: extrapolation from %s and %s (target beyond all expiries)",
                    short_exp, long_exp)
        return ExpiryPair(short_exp, long_exp, ExtrapolationStrategy.EXTRAPOLATION)

    short_exp, long_exp = sorted_expiries[0], sorted_expiries[1]
    logger.info("Strategy: bounded extrapolation from %s and %s (target before first expiry)",
                short_exp, long_exp)
    return ExpiryPair(short_exp, long_exp, ExtrapolationStrategy.BOUNDED_EXTRAPOLATION)
