"""Sanity checks for option chains before pricing.

These never reject data; they produce warnings that the caller can log or
surface next to the result.
"""

import logging
from datetime import date
from typing import List, Sequence

from ..models.option_contract import OptionContract

logger = logging.getLogger("lockup_discount.validators")

# A chain with no strike within this fraction of spot has no real ATM quote
ATM_MONEYNESS_TOLERANCE = 0.10


def validate_options_data(
    contracts: Sequence[OptionContract],
    spot_price: float,
    as_of: date | None = None,
) -> List[str]:
    """Collect data quality warnings for an option chain.

    Args:
        contracts: Contracts to check
        spot_price: Current underlying price
        as_of: Valuation date for the expiry check (defaults to today)

    Returns:
        List of human-readable warnings (empty if the chain looks sane)

    Checks:
        - Non-positive call/put prices or strikes
        - Call priced below half its intrinsic value
        - No strike within 10% of spot
        - Expired contracts
    """
    as_of = as_of or date.today()
    warnings: List[str] = []

    if not contracts:
        warnings.append("No option contracts available")
        return warnings

    if spot_price <= 0:
        warnings.append(f"Invalid spot price: {spot_price}")
        logger.warning("Options data: %s", warnings[-1])
        return warnings

    for i, contract in enumerate(contracts, start=1):
        if contract.call_price <= 0 or contract.put_price <= 0:
            warnings.append(
                f"Contract {i} has invalid option prices "
                f"(call: {contract.call_price}, put: {contract.put_price})"
            )

        if contract.strike <= 0:
            warnings.append(f"Contract {i} has invalid strike: {contract.strike}")

        intrinsic = max(0.0, spot_price - contract.strike)
        if contract.call_price < intrinsic * 0.5:
            warnings.append(f"Contract {i} call price may be too low (strike {contract.strike:.0f})")

        if contract.expiry < as_of:
            warnings.append(f"Contract {i} expired on {contract.expiry.isoformat()}")

    has_atm = any(abs(c.strike - spot_price) / spot_price < ATM_MONEYNESS_TOLERANCE
                  for c in contracts)
    if not has_atm:
        warnings.append("No near-the-money contracts; results may be inaccurate")

    for warning in warnings:
        logger.warning("Options data: %s", warning)

    return warnings
