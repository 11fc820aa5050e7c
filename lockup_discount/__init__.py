"""Lockup discount engine.

Prices synthetic options against market option chains to estimate the fair
discount for a time-locked crypto asset.
"""

from .analytics.discount_engine import (
    compute_dual_expiry_discount,
    compute_historical_vol_discount,
    compute_single_expiry_discount,
)
from .analytics.engine_config import EngineConfig
from .models import DiscountCalculation, DualExpiryData, OptionContract

__all__ = [
    "compute_dual_expiry_discount",
    "compute_historical_vol_discount",
    "compute_single_expiry_discount",
    "EngineConfig",
    "DiscountCalculation",
    "DualExpiryData",
    "OptionContract",
]
