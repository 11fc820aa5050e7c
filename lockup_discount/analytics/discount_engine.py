"""Main discount engine orchestrator.

Prices theoretical lockup options for the nearest-to-spot strikes and
aggregates them into one liquidity-weighted discount. Pure and stateless:
every call depends only on its arguments. Tokens without listed options are
priced from realized volatility at a target-price strike instead.
"""

import logging
from datetime import date
from typing import Sequence, Tuple

from ..models.discount import ATMCalculation, DiscountCalculation
from ..models.option_contract import DualExpiryData, ExtrapolationStrategy, OptionContract
from ..pricing.black_scholes import BlackScholesPricer
from ..utils.error_handling import require_positive
from .aggregator import aggregate_discount
from .engine_config import EngineConfig
from .historical_volatility import historical_volatility
from .liquidity import liquidity_weight
from .strike_matcher import match_common_strikes, rank_by_atm_distance
from .variance import extrapolate_volatility

logger = logging.getLogger("lockup_discount.engine")

SINGLE_EXPIRY_METHOD = "single-expiry-fallback"
HISTORICAL_VOL_METHOD = "historical-volatility-target-price"


def _price_strike(
    contract: OptionContract,
    spot_price: float,
    time_to_expiry: float,
    risk_free_rate: float,
    vol: float,
    weight: float,
    expiry_label: str,
    **extra,
) -> ATMCalculation:
    call, put = BlackScholesPricer.price(spot_price, contract.strike, time_to_expiry,
                                         risk_free_rate, vol)
    return ATMCalculation(
        strike=contract.strike,
        call_discount_pct=call / spot_price * 100,
        put_discount_pct=put / spot_price * 100,
        theoretical_call_price=call,
        theoretical_put_price=put,
        extrapolated_vol_pct=vol * 100,
        weight=weight,
        atm_distance=contract.atm_distance(spot_price),
        expiry=expiry_label,
        **extra,
    )


def compute_dual_expiry_discount(
    dual_expiry_data: DualExpiryData,
    spot_price: float,
    lockup_days: int,
    risk_free_rate: float,
    config: EngineConfig | None = None,
) -> DiscountCalculation:
    """Compute the lockup discount from two market expiries.

    Args:
        dual_expiry_data: Short/long expiry legs, strategy and target tenor
        spot_price: Current underlying price
        lockup_days: Lockup length in days (used for annualization)
        risk_free_rate: Risk-free rate (annualized, decimal)
        config: Engine policy knobs (defaults if None)

    Returns:
        DiscountCalculation

    Raises:
        NoCommonStrikesError: If the two chains share no strike
        InvalidInputError: For non-positive spot, lockup days, vols or tenors
        EmptyWeightSetError: If all weights are zero

    Example:
        >>> result = compute_dual_expiry_discount(data, spot_price=114770,
        ...                                       lockup_days=365, risk_free_rate=0.0425)
        >>> print(f"{result.call_discount_pct:.2f}% / {result.annualized_rate_pct:.2f}% p.a.")
    """
    config = config or EngineConfig()
    require_positive(spot_price=spot_price, lockup_days=lockup_days)

    short_leg = dual_expiry_data.short_term
    long_leg = dual_expiry_data.long_term
    target_time = dual_expiry_data.target_time_to_expiry
    strategy = dual_expiry_data.strategy

    logger.info("Dual-expiry: short %s (%.3fy, IV %.1f%%), long %s (%.3fy, IV %.1f%%), "
                "target %.3fy, strategy %s",
                short_leg.expiry, short_leg.time_to_expiry, short_leg.avg_implied_vol,
                long_leg.expiry, long_leg.time_to_expiry, long_leg.avg_implied_vol,
                target_time, strategy.value)

    matched = match_common_strikes(short_leg.contracts, long_leg.contracts, spot_price,
                                   max_results=config.atm_strike_count)

    # The anchors are chain-level averages, so the vol is shared by every strike
    vol = extrapolate_volatility(
        short_leg.avg_implied_vol / 100,
        short_leg.time_to_expiry,
        long_leg.avg_implied_vol / 100,
        long_leg.time_to_expiry,
        target_time,
        strategy,
        config,
    )

    calculations = []
    for _short_contract, long_contract in matched:
        calc = _price_strike(
            long_contract, spot_price, target_time, risk_free_rate, vol,
            weight=liquidity_weight(long_contract, config.min_liquidity_weight),
            expiry_label=dual_expiry_data.expiry_label,
            short_term_iv=short_leg.avg_implied_vol,
            long_term_iv=long_leg.avg_implied_vol,
            strategy=strategy,
        )
        logger.debug("%r", calc)
        calculations.append(calc)

    return aggregate_discount(
        calculations,
        spot_price,
        lockup_days,
        method=f"dual-expiry-variance-{strategy.value}",
        low_confidence=False,
        days_per_year=config.days_per_year,
    )


def compute_single_expiry_discount(
    contracts: Sequence[OptionContract],
    spot_price: float,
    lockup_days: int,
    risk_free_rate: float,
    config: EngineConfig | None = None,
) -> DiscountCalculation:
    """Compute a lower-confidence discount from a single expiry's chain.

    Each contract's own IV is paired with a synthetic long anchor
    (IV * 1.10 at 1 year) in place of a second market expiry.

    Args:
        contracts: One expiry's option contracts
        spot_price: Current underlying price
        lockup_days: Lockup length in days; target tenor is lockup_days / 365
        risk_free_rate: Risk-free rate (annualized, decimal)
        config: Engine policy knobs (defaults if None)

    Returns:
        DiscountCalculation with ``low_confidence=True``

    Raises:
        InvalidInputError: For an empty chain or non-positive spot/lockup days
        EmptyWeightSetError: If all weights are zero
    """
    config = config or EngineConfig()
    require_positive(spot_price=spot_price, lockup_days=lockup_days)

    target_time = lockup_days / config.days_per_year
    if target_time <= config.fallback_long_tenor:
        strategy = ExtrapolationStrategy.INTERPOLATION
    else:
        strategy = ExtrapolationStrategy.EXTRAPOLATION

    ranked = rank_by_atm_distance(contracts, spot_price, max_results=config.atm_strike_count)
    logger.info("Single-expiry fallback: %d strikes, target %.3fy, strategy %s",
                len(ranked), target_time, strategy.value)

    calculations = []
    for contract in ranked:
        contract_vol = contract.implied_vol / 100
        if contract_vol <= 0:
            contract_vol = config.default_volatility
            logger.warning("Strike %.0f has no implied vol, using default %.0f%%",
                           contract.strike, contract_vol * 100)

        vol = extrapolate_volatility(
            contract_vol,
            config.fallback_short_tenor,
            contract_vol * config.fallback_long_vol_multiplier,
            config.fallback_long_tenor,
            target_time,
            strategy,
            config,
        )

        calc = _price_strike(
            contract, spot_price, target_time, risk_free_rate, vol,
            weight=liquidity_weight(contract, config.min_liquidity_weight),
            expiry_label=contract.expiry.isoformat(),
            strategy=strategy,
        )
        logger.debug("%r", calc)
        calculations.append(calc)

    return aggregate_discount(
        calculations,
        spot_price,
        lockup_days,
        method=SINGLE_EXPIRY_METHOD,
        low_confidence=True,
        days_per_year=config.days_per_year,
    )


def compute_historical_vol_discount(
    prices: Sequence[Tuple[date, float]],
    spot_price: float,
    target_price: float,
    lockup_days: int,
    risk_free_rate: float,
    config: EngineConfig | None = None,
) -> DiscountCalculation:
    """Compute a lockup discount for a token without listed options.

    Realized volatility from the price history replaces implied volatility,
    and the call is struck at the holder's target price instead of near spot.

    Args:
        prices: Daily (date, price) history of the token
        spot_price: Current token price
        target_price: Price the holder expects at unlock (call strike)
        lockup_days: Lockup length in days; tenor is lockup_days / days_per_year
        risk_free_rate: Risk-free rate (annualized, decimal)
        config: Engine policy knobs (defaults if None)

    Returns:
        DiscountCalculation with a single per-strike result

    Raises:
        InsufficientDataError: If the history yields fewer than two returns
        InvalidInputError: For non-positive spot, target price or lockup days
    """
    config = config or EngineConfig()
    require_positive(spot_price=spot_price, target_price=target_price, lockup_days=lockup_days)

    estimate = historical_volatility(prices, config.days_per_year)
    target_time = lockup_days / config.days_per_year
    logger.info("Historical-vol discount: %d prices, vol %.1f%%, target %.3fy, strike %.2f",
                estimate.data_points, estimate.annualized_volatility * 100, target_time,
                target_price)

    vol = estimate.annualized_volatility
    call, put = BlackScholesPricer.price(spot_price, target_price, target_time,
                                         risk_free_rate, vol)
    calc = ATMCalculation(
        strike=target_price,
        call_discount_pct=call / spot_price * 100,
        put_discount_pct=put / spot_price * 100,
        theoretical_call_price=call,
        theoretical_put_price=put,
        extrapolated_vol_pct=vol * 100,
        weight=1.0,
        atm_distance=abs(target_price - spot_price),
        expiry=f"{lockup_days}d",
    )
    logger.debug("%r", calc)

    return aggregate_discount(
        [calc],
        spot_price,
        lockup_days,
        method=HISTORICAL_VOL_METHOD,
        low_confidence=False,
        days_per_year=config.days_per_year,
    )
