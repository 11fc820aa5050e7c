"""Implied variance interpolation and extrapolation across tenors.

Works in total variance, v = vol^2 * T, which is (roughly) linear in time
for a flat-ish term structure, then converts back to an annualized vol at
the target tenor.

Strategies:
    INTERPOLATION          v = v_s + (v_l - v_s) * (T - T_s) / (T_l - T_s)
    EXTRAPOLATION          v = v_l + slope * (T - T_l), with a log growth
                           adjustment once T reaches the long-horizon threshold
    BOUNDED_EXTRAPOLATION  v = (v_s + slope * (T - T_s)) * min(1, 2 / max(1, T - T_s))
"""

import logging
import math

from ..models.option_contract import ExtrapolationStrategy
from ..utils.error_handling import InvalidInputError, clamp, require_positive
from .engine_config import EngineConfig

logger = logging.getLogger("lockup_discount.variance")


def total_variance(vol: float, time_to_expiry: float) -> float:
    """Total implied variance vol^2 * T."""
    return vol * vol * time_to_expiry


def extrapolate_volatility(
    short_vol: float,
    short_time: float,
    long_vol: float,
    long_time: float,
    target_time: float,
    strategy: ExtrapolationStrategy,
    config: EngineConfig | None = None,
) -> float:
    """Estimate implied volatility at the target tenor from two anchors.

    Args:
        short_vol: Short-anchor implied vol (decimal)
        short_time: Short-anchor tenor in years
        long_vol: Long-anchor implied vol (decimal)
        long_time: Long-anchor tenor in years
        target_time: Target tenor in years
        strategy: How the target relates to the anchors
        config: Engine policy knobs (defaults if None)

    Returns:
        Target implied vol (decimal), clamped to [min_volatility, max_volatility]

    Raises:
        InvalidInputError: If any vol/tenor is non-positive or the anchors share a tenor

    Example:
        >>> extrapolate_volatility(0.50, 0.25, 0.45, 1.0, 0.5, ExtrapolationStrategy.INTERPOLATION)
        0.4672...
    """
    config = config or EngineConfig()

    require_positive(short_vol=short_vol, long_vol=long_vol, short_time=short_time,
                     long_time=long_time, target_time=target_time)
    if long_time == short_time:
        raise InvalidInputError(f"Anchor tenors must differ, both are {short_time}")

    short_var = total_variance(short_vol, short_time)
    long_var = total_variance(long_vol, long_time)
    slope = (long_var - short_var) / (long_time - short_time)

    logger.debug("Anchors: short %.4fy vol=%.4f var=%.6f | long %.4fy vol=%.4f var=%.6f | "
                 "target %.4fy (%s)", short_time, short_vol, short_var,
                 long_time, long_vol, long_var, target_time, strategy.value)

    if strategy == ExtrapolationStrategy.INTERPOLATION:
        target_var = short_var + slope * (target_time - short_time)

    elif strategy == ExtrapolationStrategy.EXTRAPOLATION:
        target_var = long_var + slope * (target_time - long_time)
        logger.debug("Linear extrapolation: slope=%.6f distance=%.4fy var=%.6f",
                     slope, target_time - long_time, target_var)

        if target_time >= config.long_horizon_threshold_years:
            base_vol = math.sqrt(long_var / long_time)
            growth = 1 + config.long_horizon_log_growth * math.log(target_time)
            enhanced_vol = base_vol * growth
            logger.debug("Long-horizon adjustment: base vol %.4f x %.4f = %.4f",
                         base_vol, growth, enhanced_vol)
            target_var = total_variance(enhanced_vol, target_time)

    elif strategy == ExtrapolationStrategy.BOUNDED_EXTRAPOLATION:
        distance = target_time - short_time
        conservatism = min(1.0, config.bounded_conservatism_horizon / max(1.0, distance))
        target_var = (short_var + slope * distance) * conservatism
        logger.debug("Bounded extrapolation: distance=%.4fy factor=%.4f var=%.6f",
                     distance, conservatism, target_var)

    else:
        raise InvalidInputError(f"Unknown extrapolation strategy: {strategy!r}")

    target_var = clamp(
        target_var,
        config.min_annual_variance * target_time,
        config.max_annual_variance * target_time,
        label="target variance",
    )
    target_vol = math.sqrt(target_var / target_time)

    final_vol = clamp(target_vol, config.min_volatility, config.max_volatility,
                      label="target volatility")
    logger.debug("Target vol %.4f (%s)", final_vol, strategy.value)
    return final_vol
