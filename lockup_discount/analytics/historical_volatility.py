"""Realized volatility from a daily price history.

Used to price lockups for tokens that have no listed options.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Sequence, Tuple

from ..utils.error_handling import InsufficientDataError

logger = logging.getLogger("lockup_discount.historical_volatility")


@dataclass(frozen=True)
class HistoricalVolatility:
    """Close-to-close volatility estimate.

    Attributes:
        annualized_volatility: Daily volatility scaled by sqrt(days_per_year), decimal
        daily_volatility: Sample standard deviation of daily log returns, decimal
        data_points: Number of prices in the history
    """
    annualized_volatility: float
    daily_volatility: float
    data_points: int


def historical_volatility(
    prices: Sequence[Tuple[date, float]],
    days_per_year: int = 365,
) -> HistoricalVolatility:
    """Estimate volatility from (date, price) observations.

    Args:
        prices: Daily observations in any order
        days_per_year: Annualization factor (crypto trades every day)

    Returns:
        HistoricalVolatility

    Raises:
        InsufficientDataError: If fewer than two prices or two usable returns

    Formula:
        r_i = ln(P_i / P_{i-1})
        daily = sqrt(sum((r_i - mean)^2) / (n - 1))
        annualized = daily * sqrt(days_per_year)

    Note:
        Returns touching a non-positive price are skipped.
    """
    if len(prices) < 2:
        raise InsufficientDataError(
            f"Need at least 2 price points to estimate volatility, got {len(prices)}"
        )

    closes = [price for _, price in sorted(prices, key=lambda p: p[0])]

    log_returns = []
    for previous, current in zip(closes, closes[1:]):
        if previous <= 0 or current <= 0:
            continue
        log_returns.append(math.log(current / previous))

    if len(log_returns) < 2:
        raise InsufficientDataError(
            f"Need at least 2 valid daily returns, got {len(log_returns)}"
        )

    mean = sum(log_returns) / len(log_returns)
    variance = sum((r - mean) ** 2 for r in log_returns) / (len(log_returns) - 1)
    daily_vol = math.sqrt(variance)
    annualized = daily_vol * math.sqrt(days_per_year)

    logger.info("Historical volatility over %d prices: daily %.4f, annualized %.1f%%",
                len(prices), daily_vol, annualized * 100)

    return HistoricalVolatility(
        annualized_volatility=annualized,
        daily_volatility=daily_vol,
        data_points=len(prices),
    )
