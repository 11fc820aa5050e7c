"""Tests for realized volatility and the target-price discount for unlisted tokens."""

import math

import pytest
from datetime import date, timedelta

from lockup_discount import compute_historical_vol_discount
from lockup_discount.analytics.historical_volatility import historical_volatility
from lockup_discount.pricing.black_scholes import BlackScholesPricer
from lockup_discount.utils.error_handling import (
    EngineError,
    InsufficientDataError,
    InvalidInputError,
)

SPOT = 2.50
RATE = 0.0425


def daily_series(closes, start=date(2025, 5, 1)):
    return [(start + timedelta(days=i), price) for i, price in enumerate(closes)]


@pytest.fixture
def history():
    closes = [2.00, 2.10, 1.95, 2.05, 2.30, 2.20, 2.45, 2.40, 2.55, 2.50]
    return daily_series(closes)


class TestHistoricalVolatility:
    """Test suite for the close-to-close estimator."""

    def test_known_series(self):
        """Sample standard deviation of log returns, annualized over 365 days."""
        prices = daily_series([100.0, 110.0, 99.0, 105.0])

        result = historical_volatility(prices)

        returns = [math.log(110 / 100), math.log(99 / 110), math.log(105 / 99)]
        mean = sum(returns) / 3
        daily = math.sqrt(sum((r - mean) ** 2 for r in returns) / 2)
        assert result.daily_volatility == pytest.approx(daily)
        assert result.annualized_volatility == pytest.approx(daily * math.sqrt(365))
        assert result.data_points == 4

    def test_unsorted_input_sorted_by_date(self, history):
        """Observation order does not matter, only dates do."""
        shuffled = history[5:] + history[:5][::-1]

        assert historical_volatility(shuffled) == historical_volatility(history)

    def test_constant_prices(self):
        """A flat history has zero volatility."""
        result = historical_volatility(daily_series([3.0] * 5))

        assert result.annualized_volatility == 0.0

    def test_non_positive_prices_skipped(self):
        """Returns touching a zero price are dropped rather than failing."""
        with_gap = daily_series([100.0, 110.0, 0.0, 99.0, 105.0, 101.0])

        result = historical_volatility(with_gap)

        returns = [math.log(110 / 100), math.log(105 / 99), math.log(101 / 105)]
        mean = sum(returns) / 3
        daily = math.sqrt(sum((r - mean) ** 2 for r in returns) / 2)
        assert result.daily_volatility == pytest.approx(daily)
        assert result.data_points == 6

    def test_days_per_year(self):
        """The annualization factor is configurable."""
        prices = daily_series([100.0, 110.0, 99.0, 105.0])

        result = historical_volatility(prices, days_per_year=252)

        assert result.annualized_volatility == pytest.approx(result.daily_volatility * math.sqrt(252))

    @pytest.mark.parametrize("closes", [[], [100.0]])
    def test_too_few_prices(self, closes):
        with pytest.raises(InsufficientDataError, match="2 price points"):
            historical_volatility(daily_series(closes))

    @pytest.mark.parametrize("closes", [
        [100.0, 110.0],
        [100.0, 0.0, 110.0, 120.0],
        [-1.0, 100.0, 105.0],
    ])
    def test_fewer_than_two_returns(self, closes):
        """Two usable returns are needed for a sample variance."""
        with pytest.raises(InsufficientDataError, match="valid daily returns"):
            historical_volatility(daily_series(closes))

    def test_insufficient_data_is_engine_error(self):
        with pytest.raises(EngineError):
            historical_volatility(daily_series([100.0]))


class TestHistoricalVolDiscount:
    """Test suite for the target-price discount path."""

    def test_priced_at_target_strike(self, history):
        """The call is struck at the target price with the realized vol."""
        result = compute_historical_vol_discount(history, SPOT, 3.75, 365, RATE)

        vol = historical_volatility(history).annualized_volatility
        call, put = BlackScholesPricer.price(SPOT, 3.75, 1.0, RATE, vol)
        assert result.theoretical_call_price == pytest.approx(call)
        assert result.theoretical_put_price == pytest.approx(put)
        assert result.call_discount_pct == pytest.approx(call / SPOT * 100)
        assert result.extrapolated_vol_pct == pytest.approx(vol * 100)

    def test_annualized_and_fair_value(self, history):
        """Half-year lockups annualize by 365 / 180; fair value is spot minus call."""
        result = compute_historical_vol_discount(history, SPOT, 3.0, 180, RATE)

        assert result.annualized_rate_pct == pytest.approx(result.call_discount_pct * 365 / 180)
        assert result.fair_value == pytest.approx(SPOT - result.theoretical_call_price)

    def test_single_result_fields(self, history):
        result = compute_historical_vol_discount(history, SPOT, 3.0, 365, RATE)

        assert result.method == "historical-volatility-target-price"
        assert result.low_confidence is False
        assert result.total_contracts_used == 1
        calc = result.per_strike_results[0]
        assert calc.strike == 3.0
        assert calc.weight == 1.0
        assert calc.atm_distance == pytest.approx(0.5)
        assert calc.expiry == "365d"

    def test_higher_target_lowers_discount(self, history):
        """Further out-of-the-money targets give cheaper calls."""
        near = compute_historical_vol_discount(history, SPOT, 2.75, 365, RATE)
        far = compute_historical_vol_discount(history, SPOT, 5.0, 365, RATE)

        assert far.call_discount_pct < near.call_discount_pct

    @pytest.mark.parametrize("spot,target,days", [
        (0.0, 3.0, 365),
        (SPOT, 0.0, 365),
        (SPOT, 3.0, 0),
    ])
    def test_invalid_inputs(self, history, spot, target, days):
        with pytest.raises(InvalidInputError):
            compute_historical_vol_discount(history, spot, target, days, RATE)

    def test_short_history(self):
        """A history without two returns cannot be priced."""
        with pytest.raises(InsufficientDataError):
            compute_historical_vol_discount(daily_series([2.0, 2.1]), SPOT, 3.0, 365, RATE)
