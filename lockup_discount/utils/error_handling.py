"""Error taxonomy and numeric helpers for the discount engine.

All engine failures derive from :class:`EngineError` so callers can fall back
from the dual-expiry path to the single-expiry path with a single ``except``.
"""

import logging
import math

logger = logging.getLogger("lockup_discount.error_handling")


class EngineError(Exception):
    """Base exception for discount engine errors."""
    pass


class InsufficientExpiriesError(EngineError):
    """Raised when fewer than two distinct expiries are available."""
    pass


class NoCommonStrikesError(EngineError):
    """Raised when the short- and long-term chains share no strike."""
    pass


class InvalidInputError(ValueError, EngineError):
    """Raised for non-positive prices, tenors or volatilities.

    Inherits from ValueError so plain argument checks keep working.
    """
    pass


class EmptyWeightSetError(EngineError):
    """Raised when per-strike liquidity weights sum to zero."""
    pass


class DataValidationError(ValueError, EngineError):
    """Raised when an option chain file is malformed."""
    pass


class InsufficientDataError(EngineError):
    """Raised when a price history is too short to estimate volatility."""
    pass


def require_positive(**values: float) -> None:
    """Raise InvalidInputError if any named value is not a finite positive number.

    Example:
        >>> require_positive(spot=114770.0, strike=115000.0)
        >>> require_positive(vol=0.0)  # raises InvalidInputError
    """
    for name, value in values.items():
        if value is None or not math.isfinite(value) or value <= 0:
            raise InvalidInputError(f"{name} must be positive, got {value}")


def clamp(value: float, lower: float, upper: float, label: str = "value") -> float:
    """Clamp value into [lower, upper], logging when the bound is hit.

    Args:
        value: Value to clamp
        lower: Lower bound
        upper: Upper bound
        label: Name used in the log message

    Returns:
        The clamped value
    """
    clamped = min(max(value, lower), upper)
    if abs(clamped - value) > 1e-12:
        logger.warning("%s %.6f clamped to %.6f (bounds [%.6f, %.6f])",
                       label, value, clamped, lower, upper)
    return clamped
