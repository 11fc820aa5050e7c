"""Near-the-money strike selection.

Dual-expiry pricing needs strikes quoted in both chains; the single-expiry
fallback ranks one chain directly.
"""

import logging
from typing import List, Sequence, Tuple

from ..models.option_contract import OptionContract
from ..utils.error_handling import NoCommonStrikesError, InvalidInputError

logger = logging.getLogger("lockup_discount.strike_matcher")

DEFAULT_STRIKE_COUNT = 5


def match_common_strikes(
    short_term: Sequence[OptionContract],
    long_term: Sequence[OptionContract],
    spot_price: float,
    max_results: int = DEFAULT_STRIKE_COUNT,
) -> List[Tuple[OptionContract, OptionContract]]:
    """Find strikes quoted at both expiries, nearest to spot first.

    Args:
        short_term: Short-expiry contracts
        long_term: Long-expiry contracts
        spot_price: Current underlying price
        max_results: Maximum number of strikes to keep

    Returns:
        List of (short_contract, long_contract) pairs sharing a strike,
        sorted by |strike - spot|. Equal distances keep long-term list order.

    Raises:
        NoCommonStrikesError: If the chains share no strike
    """
    short_by_strike = {}
    for contract in short_term:
        short_by_strike.setdefault(contract.strike, contract)

    common = [c for c in long_term if c.strike in short_by_strike]
    if not common:
        raise NoCommonStrikesError(
            f"No common strikes between short-term ({len(short_term)} contracts) "
            f"and long-term ({len(long_term)} contracts) chains"
        )

    ranked = sorted(common, key=lambda c: c.atm_distance(spot_price))[:max_results]
    logger.info("Found %d common strikes, using %d nearest to spot %.2f",
                len(common), len(ranked), spot_price)

    return [(short_by_strike[c.strike], c) for c in ranked]


def rank_by_atm_distance(
    contracts: Sequence[OptionContract],
    spot_price: float,
    max_results: int = DEFAULT_STRIKE_COUNT,
) -> List[OptionContract]:
    """Rank a single chain by distance to spot (no intersection step).

    Raises:
        InvalidInputError: If the chain is empty
    """
    if not contracts:
        raise InvalidInputError("No option contracts to rank")

    ranked = sorted(contracts, key=lambda c: c.atm_distance(spot_price))[:max_results]
    for i, contract in enumerate(ranked, start=1):
        logger.debug("  %d. strike=%.0f distance=%.0f IV=%.1f%%",
                     i, contract.strike, contract.atm_distance(spot_price), contract.implied_vol)
    return ranked
