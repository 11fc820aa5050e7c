"""Policy knobs for the discount engine.

The long-horizon growth term and the bounded-extrapolation conservatism
horizon are empirical heuristics. They live here so they can be tuned from
YAML without touching the algorithms.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

DEFAULT_TREASURY_FALLBACK_RATES = {
    '3M': 0.0420,
    '6M': 0.0423,
    '1Y': 0.0425,
    '2Y': 0.0430,
}


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the discount engine.

    Attributes:
        atm_strike_count: Number of nearest-to-spot strikes priced per request
        long_horizon_threshold_years: Tenor at which the extrapolation growth term kicks in
        long_horizon_log_growth: Coefficient of ln(T) in the long-horizon vol adjustment
        bounded_conservatism_horizon: Numerator of the bounded-extrapolation damping factor
        min_annual_variance: Lower variance clamp per year of tenor (0.01 ~ 10% vol)
        max_annual_variance: Upper variance clamp per year of tenor (4.0 ~ 200% vol)
        min_volatility: Final volatility floor (decimal)
        max_volatility: Final volatility cap (decimal)
        fallback_short_tenor: Synthetic short anchor tenor for the single-expiry path
        fallback_long_tenor: Synthetic long anchor tenor for the single-expiry path
        fallback_long_vol_multiplier: Long anchor vol relative to the contract IV
        default_volatility: Used when a single-expiry contract reports zero IV
        min_liquidity_weight: Weight floor when a contract's average price is zero
        days_per_year: Day count used for tenors and annualization
        treasury_fallback_rates: Risk-free rate per tenor bucket when no live rate is supplied
    """
    atm_strike_count: int = 5
    long_horizon_threshold_years: float = 1.0
    long_horizon_log_growth: float = 0.05
    bounded_conservatism_horizon: float = 2.0
    min_annual_variance: float = 0.01
    max_annual_variance: float = 4.0
    min_volatility: float = 0.10
    max_volatility: float = 3.0
    fallback_short_tenor: float = 0.25
    fallback_long_tenor: float = 1.0
    fallback_long_vol_multiplier: float = 1.10
    default_volatility: float = 0.80
    min_liquidity_weight: float = 1e-6
    days_per_year: int = 365
    treasury_fallback_rates: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TREASURY_FALLBACK_RATES)
    )

    def __post_init__(self):
        if self.atm_strike_count < 1:
            raise ValueError(f"atm_strike_count must be >= 1, got {self.atm_strike_count}")
        if not 0 < self.min_volatility <= self.max_volatility:
            raise ValueError(
                f"Invalid volatility bounds [{self.min_volatility}, {self.max_volatility}]"
            )
        if not 0 < self.min_annual_variance <= self.max_annual_variance:
            raise ValueError(
                f"Invalid variance bounds [{self.min_annual_variance}, {self.max_annual_variance}]"
            )
        if not 0 < self.fallback_short_tenor < self.fallback_long_tenor:
            raise ValueError("fallback_short_tenor must be positive and below fallback_long_tenor")
        if self.min_liquidity_weight <= 0:
            raise ValueError("min_liquidity_weight must be positive")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "EngineConfig":
        """Create EngineConfig from dictionary (e.g., from YAML).

        Unknown keys are ignored; missing keys keep their defaults.

        Args:
            config: Dictionary with engine parameters

        Returns:
            EngineConfig instance
        """
        defaults = cls()
        rates = dict(defaults.treasury_fallback_rates)
        rates.update(config.get('treasury_fallback_rates') or {})

        return cls(
            atm_strike_count=int(config.get('atm_strike_count', defaults.atm_strike_count)),
            long_horizon_threshold_years=config.get(
                'long_horizon_threshold_years', defaults.long_horizon_threshold_years),
            long_horizon_log_growth=config.get(
                'long_horizon_log_growth', defaults.long_horizon_log_growth),
            bounded_conservatism_horizon=config.get(
                'bounded_conservatism_horizon', defaults.bounded_conservatism_horizon),
            min_annual_variance=config.get('min_annual_variance', defaults.min_annual_variance),
            max_annual_variance=config.get('max_annual_variance', defaults.max_annual_variance),
            min_volatility=config.get('min_volatility', defaults.min_volatility),
            max_volatility=config.get('max_volatility', defaults.max_volatility),
            fallback_short_tenor=config.get('fallback_short_tenor', defaults.fallback_short_tenor),
            fallback_long_tenor=config.get('fallback_long_tenor', defaults.fallback_long_tenor),
            fallback_long_vol_multiplier=config.get(
                'fallback_long_vol_multiplier', defaults.fallback_long_vol_multiplier),
            default_volatility=config.get('default_volatility', defaults.default_volatility),
            min_liquidity_weight=config.get('min_liquidity_weight', defaults.min_liquidity_weight),
            days_per_year=int(config.get('days_per_year', defaults.days_per_year)),
            treasury_fallback_rates=rates,
        )
