"""Tests for expiry pair selection and common strike matching."""

import pytest
from datetime import date

from lockup_discount.analytics.expiry_selector import select_expiry_pair
from lockup_discount.analytics.strike_matcher import match_common_strikes, rank_by_atm_distance
from lockup_discount.models.option_contract import (
    ExpiryPair,
    ExtrapolationStrategy,
    OptionContract,
)
from lockup_discount.utils.error_handling import (
    EngineError,
    InsufficientExpiriesError,
    InvalidInputError,
    NoCommonStrikesError,
)

SPOT = 114770.0


def make_contract(strike, expiry=date(2026, 6, 26), implied_vol=47.0):
    return OptionContract(
        strike=float(strike), call_price=15000.0, put_price=14000.0,
        implied_vol=implied_vol, expiry=expiry,
    )


class TestSelectExpiryPair:
    """Test suite for choosing the expiry pair around a target date."""

    @pytest.fixture
    def expiries(self):
        return [date(2026, 3, 27), date(2025, 12, 26), date(2026, 9, 25), date(2026, 6, 26)]

    def test_interpolation_bracket(self, expiries):
        """Target between two expiries picks the adjacent bracket."""
        pair = select_expiry_pair(expiries, date(2026, 5, 1))

        assert pair.short_expiry == date(2026, 3, 27)
        assert pair.long_expiry == date(2026, 6, 26)
        assert pair.strategy == ExtrapolationStrategy.INTERPOLATION

    def test_target_on_expiry_interpolates(self, expiries):
        """A target equal to an expiry counts as inside the bracket."""
        pair = select_expiry_pair(expiries, date(2026, 3, 27))

        assert pair.strategy == ExtrapolationStrategy.INTERPOLATION
        assert pair.short_expiry <= date(2026, 3, 27) <= pair.long_expiry

    def test_target_beyond_last_expiry(self, expiries):
        """A target after every expiry extrapolates from the last two."""
        pair = select_expiry_pair(expiries, date(2027, 8, 31))

        assert pair.short_expiry == date(2026, 6, 26)
        assert pair.long_expiry == date(2026, 9, 25)
        assert pair.strategy == ExtrapolationStrategy.EXTRAPOLATION

    def test_target_before_first_expiry(self, expiries):
        """A target before every expiry uses bounded extrapolation on the first two."""
        pair = select_expiry_pair(expiries, date(2025, 11, 1))

        assert pair.short_expiry == date(2025, 12, 26)
        assert pair.long_expiry == date(2026, 3, 27)
        assert pair.strategy == ExtrapolationStrategy.BOUNDED_EXTRAPOLATION

    def test_short_always_before_long(self, expiries):
        """Every strategy returns short < long."""
        for target in [date(2025, 1, 1), date(2026, 1, 15), date(2026, 8, 1), date(2030, 1, 1)]:
            pair = select_expiry_pair(expiries, target)
            assert pair.short_expiry < pair.long_expiry

    def test_input_not_mutated(self, expiries):
        """The caller's list keeps its order."""
        original = list(expiries)
        select_expiry_pair(expiries, date(2026, 5, 1))
        assert expiries == original

    def test_duplicates_collapse(self):
        """Repeated dates count once."""
        with pytest.raises(InsufficientExpiriesError):
            select_expiry_pair([date(2026, 3, 27), date(2026, 3, 27)], date(2026, 5, 1))

    @pytest.mark.parametrize("expiries", [[], [date(2026, 3, 27)]])
    def test_insufficient_expiries(self, expiries):
        """Fewer than two expiries is an engine error."""
        with pytest.raises(InsufficientExpiriesError):
            select_expiry_pair(expiries, date(2026, 5, 1))

    def test_insufficient_is_engine_error(self):
        """Callers can fall back on the EngineError base class."""
        with pytest.raises(EngineError):
            select_expiry_pair([], date(2026, 5, 1))

    def test_pair_rejects_reversed_dates(self):
        """ExpiryPair enforces short < long."""
        with pytest.raises(InvalidInputError):
            ExpiryPair(date(2026, 6, 26), date(2026, 3, 27), ExtrapolationStrategy.INTERPOLATION)


class TestMatchCommonStrikes:
    """Test suite for intersecting two chains by strike."""

    @pytest.fixture
    def chains(self):
        short = [make_contract(k, date(2026, 3, 27), 48.0)
                 for k in (110000, 114000, 115000, 116000, 120000)]
        long = [make_contract(k, date(2026, 6, 26), 46.0)
                for k in (112000, 114000, 115000, 118000, 120000)]
        return short, long

    def test_nearest_common_strikes_first(self, chains):
        """Only shared strikes survive, ordered by distance to spot."""
        short, long = chains

        matched = match_common_strikes(short, long, SPOT)

        assert [lc.strike for _, lc in matched] == [115000.0, 114000.0, 120000.0]

    def test_pairs_carry_both_legs(self, chains):
        """Each pair holds the short and long contract at the same strike."""
        short, long = chains

        for short_contract, long_contract in match_common_strikes(short, long, SPOT):
            assert short_contract.strike == long_contract.strike
            assert short_contract.expiry == date(2026, 3, 27)
            assert long_contract.expiry == date(2026, 6, 26)

    def test_max_results(self, chains):
        """Result length is capped."""
        short, long = chains

        matched = match_common_strikes(short, long, SPOT, max_results=2)

        assert [lc.strike for _, lc in matched] == [115000.0, 114000.0]

    def test_ties_keep_long_term_order(self):
        """Equal distances are resolved by the long-term list order."""
        short = [make_contract(k) for k in (114000, 116000)]
        long = [make_contract(k) for k in (116000, 114000)]

        matched = match_common_strikes(short, long, 115000.0)

        assert [lc.strike for _, lc in matched] == [116000.0, 114000.0]

    def test_disjoint_chains(self):
        """No shared strike raises NoCommonStrikesError."""
        short = [make_contract(k) for k in (110000, 111000)]
        long = [make_contract(k) for k in (112000, 113000)]

        with pytest.raises(NoCommonStrikesError):
            match_common_strikes(short, long, SPOT)

    def test_inputs_not_mutated(self, chains):
        """Both chains keep their order."""
        short, long = chains
        short_before, long_before = list(short), list(long)

        match_common_strikes(short, long, SPOT)

        assert short == short_before
        assert long == long_before


class TestRankByAtmDistance:
    """Test suite for ranking a single chain."""

    def test_ranked_by_distance(self):
        """Strikes come back nearest first, capped at max_results."""
        chain = [make_contract(k) for k in (100000, 110000, 114000, 115000, 118000, 130000)]

        ranked = rank_by_atm_distance(chain, SPOT, max_results=3)

        assert [c.strike for c in ranked] == [115000.0, 114000.0, 118000.0]

    def test_default_count_is_five(self):
        """Five strikes by default."""
        chain = [make_contract(100000 + 1000 * i) for i in range(30)]

        assert len(rank_by_atm_distance(chain, SPOT)) == 5

    def test_empty_chain(self):
        """An empty chain is invalid input."""
        with pytest.raises(InvalidInputError):
            rank_by_atm_distance([], SPOT)
