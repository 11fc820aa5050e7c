"""Liquidity weighting of priced strikes.

weight = 1 / (1 + spread / avg_price), so a contract with no spread gets
full weight 1.0 and wide markets are down-weighted.

Known bias: missing bid/ask quotes count as a zero spread, which gives
sparse order books maximal weight.
"""

import logging

from ..models.option_contract import OptionContract

logger = logging.getLogger("lockup_discount.liquidity")

DEFAULT_MIN_WEIGHT = 1e-6


def liquidity_weight(contract: OptionContract, min_weight: float = DEFAULT_MIN_WEIGHT) -> float:
    """Compute the relative confidence weight of a contract.

    Args:
        contract: Contract whose call/put quotes are scored
        min_weight: Weight returned when the average price is zero

    Returns:
        Weight in (0, 1]
    """
    avg_price = contract.avg_price
    if avg_price <= 0:
        logger.warning("Strike %.0f has non-positive average price %.6f, using floor weight %g",
                       contract.strike, avg_price, min_weight)
        return min_weight

    # Crossed quotes would push the weight above 1
    spread = max(0.0, contract.quoted_spread)
    spread_ratio = spread / avg_price
    weight = 1.0 / (1.0 + spread_ratio)

    return max(weight, min_weight)
