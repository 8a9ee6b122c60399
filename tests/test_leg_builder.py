"""
Tests for leg_builder.py

Run with: pytest tests/test_leg_builder.py -v
"""

import math

import pytest

from rangebook.core.config import MarketConfig
from rangebook.core.domain import Leg, RejectReason, Rejection
from rangebook.services.leg_builder import RANGE_WIDTH_MESSAGE, build_leg

CFG = MarketConfig()


class TestBuildLegSuccess:
    """Priced legs."""

    def test_btc_golden_leg(self):
        leg = build_leg(CFG, "BTC", "24-hour", 49500, 50500, 50000)

        assert isinstance(leg, Leg)
        assert leg.asset_id == "BTC"
        assert leg.timeframe == "24-hour"
        assert leg.lower_bound == 49500
        assert leg.upper_bound == 50500
        assert leg.reference_price == 50000
        assert leg.probability == 0.25
        assert leg.payout_odds == pytest.approx(3.72)

    def test_uncapped_leg(self):
        leg = build_leg(CFG, "BTC", "24-hour", 49750, 50250, 50000)
        assert isinstance(leg, Leg)
        assert 0 < leg.probability < 0.25
        assert leg.payout_odds == pytest.approx(0.93 / leg.probability)

    def test_house_edge_from_config(self):
        cfg = MarketConfig(house_edge=0.0)
        leg = build_leg(cfg, "BTC", "24-hour", 49500, 50500, 50000)
        assert leg.payout_odds == pytest.approx(4.0)

    def test_leg_is_immutable(self):
        leg = build_leg(CFG, "ETH", "7-day", 2900, 3100, 3000)
        with pytest.raises(AttributeError):
            leg.probability = 0.5


class TestBuildLegRejections:
    """Every refusal is a structured Rejection, never an exception."""

    def _assert_rejected(self, result, reason):
        assert isinstance(result, Rejection)
        assert result.reason is reason
        assert result.message

    def test_unknown_asset(self):
        result = build_leg(CFG, "XRP", "24-hour", 0.49, 0.51, 0.5)
        self._assert_rejected(result, RejectReason.INVALID_INPUT)

    def test_unknown_timeframe(self):
        result = build_leg(CFG, "BTC", "2-hour", 49500, 50500, 50000)
        self._assert_rejected(result, RejectReason.INVALID_INPUT)

    @pytest.mark.parametrize("price", [None, 0, -1.0, math.nan, "50000"])
    def test_price_unavailable(self, price):
        result = build_leg(CFG, "BTC", "24-hour", 49500, 50500, price)
        self._assert_rejected(result, RejectReason.PRICE_UNAVAILABLE)

    @pytest.mark.parametrize("lower, upper", [
        (-100, 50500),
        (0, 50500),
        (49500, math.inf),
        ("49500", 50500),
        (49500, None),
    ])
    def test_non_positive_or_non_finite_bounds(self, lower, upper):
        result = build_leg(CFG, "BTC", "24-hour", lower, upper, 50000)
        self._assert_rejected(result, RejectReason.INVALID_INPUT)

    @pytest.mark.parametrize("lower, upper", [(50500, 49500), (50000, 50000)])
    def test_inverted_or_empty_range(self, lower, upper):
        result = build_leg(CFG, "BTC", "24-hour", lower, upper, 50000)
        self._assert_rejected(result, RejectReason.INVALID_RANGE)

    @pytest.mark.parametrize("lower, upper", [
        (49900, 50100),   # 0.4% — too narrow
        (40000, 60000),   # 40% — too wide
    ])
    def test_width_out_of_bounds(self, lower, upper):
        result = build_leg(CFG, "BTC", "24-hour", lower, upper, 50000)
        self._assert_rejected(result, RejectReason.RANGE_OUT_OF_BOUNDS)
        assert result.message == RANGE_WIDTH_MESSAGE

    def test_far_out_of_the_money_range(self):
        # 20% wide but two full price-levels away on a 1-hour horizon:
        # the tanh CDF saturates and the probability is exactly 0.
        result = build_leg(CFG, "BTC", "1-hour", 100000, 110000, 50000)
        self._assert_rejected(result, RejectReason.UNPRICEABLE_RANGE)

    def test_rejection_serialises(self):
        result = build_leg(CFG, "BTC", "24-hour", 49900, 50100, 50000)
        assert result.to_dict() == {
            "reason": "range_out_of_bounds",
            "message": RANGE_WIDTH_MESSAGE,
        }
