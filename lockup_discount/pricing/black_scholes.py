"""European Black-Scholes pricing for the theoretical lockup options.

The normal CDF uses the Abramowitz-Stegun 7.1.26 rational approximation
(max absolute error ~1.5e-7) so results match the reference fixtures exactly,
rather than scipy's full-precision ``norm.cdf``.
"""

import logging
import math
from typing import Tuple

from ..utils.error_handling import InvalidInputError, require_positive

logger = logging.getLogger("lockup_discount.black_scholes")

# Abramowitz & Stegun 7.1.26
_P = 0.3275911
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429


def cumulative_normal(x: float) -> float:
    """Standard normal CDF N(x) via the Abramowitz-Stegun approximation.

    Args:
        x: Point at which to evaluate the CDF

    Returns:
        N(x) in [0, 1]
    """
    sign = -1.0 if x < 0 else 1.0
    z = abs(x) / math.sqrt(2.0)

    t = 1.0 / (1.0 + _P * z)
    y = 1.0 - (((((_A5 * t + _A4) * t) + _A3) * t + _A2) * t + _A1) * t * math.exp(-z * z)

    return 0.5 * (1.0 + sign * y)


class BlackScholesPricer:
    """Black-Scholes call and put values with no dividends."""

    @staticmethod
    def d1_d2(
        spot: float,
        strike: float,
        time_to_expiry: float,
        rate: float,
        vol: float,
    ) -> Tuple[float, float]:
        """Calculate the d1 and d2 terms.

        Args:
            spot: Current underlying price
            strike: Strike price
            time_to_expiry: Time to expiration in years
            rate: Risk-free rate (annualized, decimal)
            vol: Volatility (annualized, decimal)

        Returns:
            Tuple of (d1, d2)

        Raises:
            InvalidInputError: If spot or strike is non-positive, or vol * sqrt(T) is not positive
        """
        require_positive(spot=spot, strike=strike)
        if vol is None or time_to_expiry is None or vol <= 0 or time_to_expiry <= 0:
            raise InvalidInputError(
                f"vol * sqrt(T) must be positive (vol={vol}, T={time_to_expiry})"
            )

        vol_sqrt_t = vol * math.sqrt(time_to_expiry)
        d1 = (math.log(spot / strike) + (rate + 0.5 * vol * vol) * time_to_expiry) / vol_sqrt_t
        d2 = d1 - vol_sqrt_t
        return d1, d2

    @staticmethod
    def call_price(spot: float, strike: float, time_to_expiry: float, rate: float, vol: float) -> float:
        """European call value: S*N(d1) - K*e^(-rT)*N(d2)."""
        d1, d2 = BlackScholesPricer.d1_d2(spot, strike, time_to_expiry, rate, vol)
        return (spot * cumulative_normal(d1)
                - strike * math.exp(-rate * time_to_expiry) * cumulative_normal(d2))

    @staticmethod
    def put_price(spot: float, strike: float, time_to_expiry: float, rate: float, vol: float) -> float:
        """European put value: K*e^(-rT)*N(-d2) - S*N(-d1)."""
        d1, d2 = BlackScholesPricer.d1_d2(spot, strike, time_to_expiry, rate, vol)
        return (strike * math.exp(-rate * time_to_expiry) * cumulative_normal(-d2)
                - spot * cumulative_normal(-d1))

    @staticmethod
    def price(
        spot: float,
        strike: float,
        time_to_expiry: float,
        rate: float,
        vol: float,
    ) -> Tuple[float, float]:
        """Price call and put together, sharing d1/d2.

        Returns:
            Tuple of (call, put)

        Example:
            >>> call, put = BlackScholesPricer.price(114770, 115000, 1.0, 0.02, 0.47)
            >>> # call - put == 114770 - 115000 * exp(-0.02) (put-call parity)
        """
        d1, d2 = BlackScholesPricer.d1_d2(spot, strike, time_to_expiry, rate, vol)
        discounted_strike = strike * math.exp(-rate * time_to_expiry)

        call = spot * cumulative_normal(d1) - discounted_strike * cumulative_normal(d2)
        put = discounted_strike * cumulative_normal(-d2) - spot * cumulative_normal(-d1)

        logger.debug("BS K=%.2f T=%.4f vol=%.4f d1=%.4f d2=%.4f call=%.4f put=%.4f",
                     strike, time_to_expiry, vol, d1, d2, call, put)
        return call, put


def implied_forward(
    call_price: float,
    put_price: float,
    strike: float,
    rate: float,
    time_to_expiry: float,
) -> float:
    """Forward price implied by put-call parity.

    Formula:
        F = K + e^(rT) * (C - P)

    Args:
        call_price: Market call price
        put_price: Market put price
        strike: Common strike
        rate: Risk-free rate (annualized, decimal)
        time_to_expiry: Time to expiration in years

    Returns:
        Implied forward price of the underlying
    """
    require_positive(strike=strike)
    return strike + math.exp(rate * time_to_expiry) * (call_price - put_price)
