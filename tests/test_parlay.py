"""
Tests for parlay.py

Run with: pytest tests/test_parlay.py -v
"""

from datetime import datetime, timezone

import pytest

from rangebook.core.config import MarketConfig
from rangebook.core.domain import Leg, Ticket
from rangebook.core.pricing import payout_odds
from rangebook.services.parlay import (
    Parlay,
    combined_odds,
    combined_probability,
    format_leg,
    format_ticket,
    quote_parlay,
)


def _leg(probability, asset_id="BTC", lower=49500.0, upper=50500.0):
    return Leg(
        asset_id=asset_id,
        timeframe="24-hour",
        lower_bound=lower,
        upper_bound=upper,
        reference_price=50000.0,
        probability=probability,
        payout_odds=payout_odds(probability),
    )


class TestCombinedProbability:
    """Geometric mean × correlation discount × leg-count bonus."""

    def test_empty_parlay_is_zero(self):
        assert combined_probability([]) == 0.0

    def test_single_leg(self):
        assert combined_probability([_leg(0.2)]) == pytest.approx(0.2 * 0.85 * 1.0)

    def test_two_identical_legs(self):
        p = 0.15
        assert combined_probability([_leg(p), _leg(p)]) == pytest.approx(p * 0.85 * 1.3)

    def test_three_identical_legs(self):
        p = 0.15
        assert combined_probability([_leg(p)] * 3) == pytest.approx(p * 0.85 * 1.5)

    def test_four_legs_get_no_bonus(self):
        p = 0.15
        assert combined_probability([_leg(p)] * 4) == pytest.approx(p * 0.85)

    def test_geometric_mean_of_mixed_legs(self):
        legs = [_leg(0.1), _leg(0.2)]
        expected = (0.1 * 0.2) ** 0.5 * 0.85 * 1.3
        assert combined_probability(legs) == pytest.approx(expected)

    def test_many_legs_do_not_underflow(self):
        legs = [_leg(0.0862)] * 304
        assert combined_probability(legs) == pytest.approx(0.0862 * 0.85)

    def test_tiny_mixed_legs_do_not_underflow(self):
        legs = [_leg(1e-10), _leg(1e-12)] * 20
        assert combined_probability(legs) == pytest.approx(1e-11 * 0.85)

    def test_not_capped_for_display(self):
        # 0.25 × 0.85 × 1.5 = 0.31875 > 0.25
        assert combined_probability([_leg(0.25)] * 3) == pytest.approx(0.31875)

    def test_config_factors_are_used(self):
        cfg = MarketConfig(correlation_factor=1.0, leg_bonus={2: 2.0})
        assert combined_probability([_leg(0.1), _leg(0.1)], cfg) == pytest.approx(0.2)


class TestCombinedOdds:
    """Odds are always derived from the capped probability."""

    def test_empty_parlay_has_zero_odds(self):
        assert combined_odds([]) == 0.0

    def test_single_leg(self):
        assert combined_odds([_leg(0.2)]) == pytest.approx(0.93 / 0.17)

    def test_over_cap_uses_cap(self):
        assert combined_odds([_leg(0.25)] * 3) == pytest.approx(3.72)


class TestParlay:
    """In-progress, mutable leg list."""

    def test_add_preserves_order(self):
        parlay = Parlay()
        a, b = _leg(0.1, "BTC"), _leg(0.2, "ETH")
        parlay.add(a)
        parlay.add(b)
        assert parlay.legs == (a, b)
        assert len(parlay) == 2

    def test_remove_by_index(self):
        a, b, c = _leg(0.1, "BTC"), _leg(0.2, "ETH"), _leg(0.15, "SOL")
        parlay = Parlay([a, b, c])
        removed = parlay.remove(1)
        assert removed is b
        assert parlay.legs == (a, c)

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_remove_out_of_range(self, index):
        parlay = Parlay([_leg(0.1)])
        with pytest.raises(IndexError):
            parlay.remove(index)
        assert len(parlay) == 1

    def test_legs_is_a_snapshot(self):
        parlay = Parlay([_leg(0.1)])
        snapshot = parlay.legs
        parlay.clear()
        assert len(snapshot) == 1
        assert parlay.legs == ()


class TestQuote:
    """Live display values."""

    def test_quote_values(self):
        legs = [_leg(0.2)]
        quote = quote_parlay(legs, stake=100)
        assert quote.num_legs == 1
        assert quote.combined_probability == pytest.approx(0.17)
        assert quote.combined_odds == pytest.approx(0.93 / 0.17)
        assert quote.potential_payout == pytest.approx(100 * 0.93 / 0.17)
        assert quote.max_payout == pytest.approx(2000.0)
        assert not quote.over_probability_cap
        assert not quote.over_exposure_cap

    def test_quote_flags(self):
        quote = quote_parlay([_leg(0.25)] * 3, stake=1000)
        assert quote.over_probability_cap
        assert quote.over_exposure_cap  # 1000 × 3.72 > 2000

    def test_empty_quote(self):
        quote = quote_parlay([], stake=100)
        assert quote.combined_probability == 0.0
        assert quote.combined_odds == 0.0
        assert quote.potential_payout == 0.0


class TestFormatting:
    """Human-readable leg and ticket summaries."""

    def test_format_leg(self):
        assert format_leg(_leg(0.25)) == (
            "BTC | 24-hour | $49500 - $50500 | P: 25.00% | Odds: 3.72x"
        )

    def test_format_leg_small_prices(self):
        leg = _leg(0.1, asset_id="DOGE", lower=0.0792, upper=0.0808)
        assert "$0.0792 - $0.0808" in format_leg(leg)

    def test_format_ticket(self):
        ticket = Ticket(
            ticket_id="abc123",
            legs=(_leg(0.25), _leg(0.2, "ETH")),
            stake=100.0,
            created_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            combined_probability=0.2,
            combined_odds=4.65,
        )
        text = format_ticket(ticket)
        assert "2-Leg Parlay @ 4.65x [pending]" in text
        assert "Amount: $100.00" in text
        assert "Potential Payout: $465.00" in text
        assert text.count(" - BTC |") == 1
        assert "ETH | 24-hour" in text
