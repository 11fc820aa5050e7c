"""Core data models for lockup discount pricing."""

from .discount import ATMCalculation, DiscountCalculation
from .option_contract import (
    DualExpiryData,
    ExpiryLeg,
    ExpiryPair,
    ExtrapolationStrategy,
    OptionContract,
)

__all__ = [
    "OptionContract",
    "ExtrapolationStrategy",
    "ExpiryPair",
    "ExpiryLeg",
    "DualExpiryData",
    "ATMCalculation",
    "DiscountCalculation",
]
