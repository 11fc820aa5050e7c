"""Market option data models."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Tuple

from ..utils.error_handling import InvalidInputError


class ExtrapolationStrategy(str, Enum):
    """How the target tenor relates to the selected expiry pair."""

    INTERPOLATION = "interpolation"
    EXTRAPOLATION = "extrapolation"
    BOUNDED_EXTRAPOLATION = "bounded_extrapolation"


@dataclass(frozen=True)
class OptionContract:
    """Call/put pair quoted at one strike and expiry.

    Immutable once fetched. Prices are in the quote currency of the spot,
    implied vol is a percentage (47.0 = 47%).
    """

    strike: float
    call_price: float
    put_price: float
    implied_vol: float
    expiry: date

    # Optional top-of-book quotes
    call_bid: float | None = None
    call_ask: float | None = None
    put_bid: float | None = None
    put_ask: float | None = None

    @property
    def quoted_spread(self) -> float:
        """Combined call and put bid/ask spread. Missing quotes count as 0."""
        call_spread = (self.call_ask or 0.0) - (self.call_bid or 0.0)
        put_spread = (self.put_ask or 0.0) - (self.put_bid or 0.0)
        return call_spread + put_spread

    @property
    def avg_price(self) -> float:
        """Average of call and put price."""
        return (self.call_price + self.put_price) / 2.0

    def atm_distance(self, spot_price: float) -> float:
        """Absolute distance between strike and spot."""
        return abs(self.strike - spot_price)

    def __repr__(self) -> str:
        return (f"OptionContract({self.strike:.0f} {self.expiry.isoformat()} "
                f"C={self.call_price:.2f} P={self.put_price:.2f} IV={self.implied_vol:.1f}%)")


@dataclass(frozen=True)
class ExpiryPair:
    """Two expiries chosen around a target date."""

    short_expiry: date
    long_expiry: date
    strategy: ExtrapolationStrategy

    def __post_init__(self):
        if not self.short_expiry < self.long_expiry:
            raise InvalidInputError(
                f"short_expiry {self.short_expiry} must precede long_expiry {self.long_expiry}"
            )


@dataclass(frozen=True)
class ExpiryLeg:
    """One expiry's option chain together with its tenor.

    Attributes:
        expiry: Expiry label (e.g. ``"26JUN26"`` or an ISO date)
        time_to_expiry: Tenor in years
        avg_implied_vol: Average implied vol of the chain, in percent
        contracts: Contracts quoted at this expiry
    """

    expiry: str
    time_to_expiry: float
    avg_implied_vol: float
    contracts: Tuple[OptionContract, ...]


@dataclass(frozen=True)
class DualExpiryData:
    """Short and long expiry legs bracketing or bounding the target tenor."""

    short_term: ExpiryLeg
    long_term: ExpiryLeg
    strategy: ExtrapolationStrategy
    target_time_to_expiry: float

    def __post_init__(self):
        if self.target_time_to_expiry <= 0:
            raise InvalidInputError(f"target_time_to_expiry must be positive, got {self.target_time_to_expiry}")
        if self.short_term.time_to_expiry <= 0:
            raise InvalidInputError(f"short-term tenor must be positive, got {self.short_term.time_to_expiry}")
        if not self.short_term.time_to_expiry < self.long_term.time_to_expiry:
            raise InvalidInputError(
                f"short-term tenor {self.short_term.time_to_expiry:.4f}y must be below "
                f"long-term tenor {self.long_term.time_to_expiry:.4f}y"
            )

    @property
    def expiry_label(self) -> str:
        """Combined label used on per-strike results."""
        return f"{self.short_term.expiry}+{self.long_term.expiry}"
