"""Liquidity-weighted aggregation of per-strike results."""

import logging
from typing import Sequence

import numpy as np

from ..models.discount import ATMCalculation, DiscountCalculation
from ..utils.error_handling import EmptyWeightSetError, require_positive

logger = logging.getLogger("lockup_discount.aggregator")

DAYS_PER_YEAR = 365


def aggregate_discount(
    results: Sequence[ATMCalculation],
    spot_price: float,
    lockup_days: int,
    method: str = "dual-expiry",
    low_confidence: bool = False,
    days_per_year: int = DAYS_PER_YEAR,
) -> DiscountCalculation:
    """Combine per-strike results into one discount.

    Each metric is averaged as sum(m_i * w_i) / sum(w_i).

    Args:
        results: Per-strike pricing results
        spot_price: Current underlying price
        lockup_days: Lockup length in days
        method: Label describing how the results were produced
        low_confidence: Mark the result as coming from a degraded path
        days_per_year: Day count for annualization

    Returns:
        DiscountCalculation

    Raises:
        EmptyWeightSetError: If there are no results or the weights sum to zero
        InvalidInputError: If spot_price or lockup_days is non-positive

    Formula:
        annualized = call_discount * days_per_year / lockup_days
        fair_value = spot - weighted theoretical call
    """
    require_positive(spot_price=spot_price, lockup_days=lockup_days)

    if not results:
        raise EmptyWeightSetError("No per-strike results to aggregate")

    weights = np.array([r.weight for r in results], dtype=float)
    total_weight = weights.sum()
    if not total_weight > 0:
        raise EmptyWeightSetError(f"Per-strike weights sum to {total_weight}")

    metrics = np.array([
        [r.call_discount_pct, r.put_discount_pct, r.theoretical_call_price,
         r.theoretical_put_price, r.extrapolated_vol_pct]
        for r in results
    ], dtype=float)
    call_pct, put_pct, call_price, put_price, vol_pct = np.average(metrics, axis=0, weights=weights)

    annualized = call_pct * days_per_year / lockup_days
    fair_value = spot_price - call_price

    logger.info("Weighted result over %d strikes: call %.2f%%, put %.2f%%, vol %.1f%%, "
                "annualized %.2f%%", len(results), call_pct, put_pct, vol_pct, annualized)

    return DiscountCalculation(
        call_discount_pct=float(call_pct),
        put_discount_pct=float(put_pct),
        annualized_rate_pct=float(annualized),
        fair_value=float(fair_value),
        extrapolated_vol_pct=float(vol_pct),
        theoretical_call_price=float(call_price),
        theoretical_put_price=float(put_price),
        per_strike_results=tuple(results),
        total_contracts_used=len(results),
        method=method,
        low_confidence=low_confidence,
    )
