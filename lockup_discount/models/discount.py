"""Discount result data models."""

from dataclasses import dataclass
from typing import Tuple

from .option_contract import ExtrapolationStrategy


@dataclass(frozen=True)
class ATMCalculation:
    """Pricing result for one near-the-money strike.

    Discounts are theoretical option premiums as a percentage of spot.
    Recomputed on every engine call.
    """

    strike: float
    call_discount_pct: float
    put_discount_pct: float
    theoretical_call_price: float
    theoretical_put_price: float
    extrapolated_vol_pct: float
    weight: float
    atm_distance: float
    expiry: str

    # Populated on the dual-expiry path only
    short_term_iv: float | None = None
    long_term_iv: float | None = None
    strategy: ExtrapolationStrategy | None = None

    def __repr__(self) -> str:
        return (f"ATMCalculation(K={self.strike:.0f} call={self.call_discount_pct:.2f}% "
                f"put={self.put_discount_pct:.2f}% vol={self.extrapolated_vol_pct:.1f}% "
                f"w={self.weight:.3f})")


@dataclass(frozen=True)
class DiscountCalculation:
    """Liquidity-weighted lockup discount for one request."""

    call_discount_pct: float
    put_discount_pct: float
    annualized_rate_pct: float
    fair_value: float
    extrapolated_vol_pct: float
    theoretical_call_price: float
    theoretical_put_price: float
    per_strike_results: Tuple[ATMCalculation, ...]
    total_contracts_used: int
    method: str = "dual-expiry"
    low_confidence: bool = False

    @property
    def discount_pct(self) -> float:
        """Headline discount: the weighted call discount."""
        return self.call_discount_pct

    def __repr__(self) -> str:
        flag = " LOW-CONFIDENCE" if self.low_confidence else ""
        return (f"DiscountCalculation({self.method}{flag} call={self.call_discount_pct:.2f}% "
                f"put={self.put_discount_pct:.2f}% annualized={self.annualized_rate_pct:.2f}% "
                f"fair={self.fair_value:,.2f} n={self.total_contracts_used})")
