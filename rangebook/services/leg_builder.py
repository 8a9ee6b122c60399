"""
Leg builder: validates user-chosen range parameters and prices a parlay leg.

The builder never mutates state.  Appending the returned leg to a parlay is
the caller's job.  Every refusal comes back as a :class:`Rejection` so the
UI can show it next to the form instead of surfacing a stack trace.
"""

import logging
import math
from typing import Optional, Union

from rangebook.core.config import MarketConfig
from rangebook.core.domain import Leg, RejectReason, Rejection
from rangebook.core.pricing import is_range_valid, payout_odds, win_probability

logger = logging.getLogger(__name__)

RANGE_WIDTH_MESSAGE = "range width must fall within configured narrow/wide bounds"


def _reject(reason: RejectReason, message: str) -> Rejection:
    logger.info("Leg rejected (%s): %s", reason.value, message)
    return Rejection(reason, message)


def build_leg(
    config: MarketConfig,
    asset_id: str,
    timeframe: str,
    lower: float,
    upper: float,
    price: Optional[float],
) -> Union[Leg, Rejection]:
    """
    Price a single range leg.

    Args:
        config: Market constants (registries, limits, edge, cap).
        asset_id: Key into the asset registry.
        timeframe: Key into the timeframe registry.
        lower: Lower price bound, USD.
        upper: Upper price bound, USD.
        price: Live price from the feed, or ``None`` if the feed failed.

    Returns:
        A priced :class:`Leg`, or a :class:`Rejection` explaining which
        precondition failed.
    """
    asset = config.asset(asset_id)
    if asset is None:
        return _reject(RejectReason.INVALID_INPUT, f"unknown asset {asset_id!r}")

    hours = config.timeframe_hours(timeframe)
    if hours is None:
        return _reject(RejectReason.INVALID_INPUT, f"unknown timeframe {timeframe!r}")

    if not isinstance(price, (int, float)) or not math.isfinite(price) or price <= 0:
        return _reject(
            RejectReason.PRICE_UNAVAILABLE,
            f"no live price available for {asset.name}",
        )

    if (
        not all(isinstance(bound, (int, float)) for bound in (lower, upper))
        or not (math.isfinite(lower) and math.isfinite(upper))
        or lower <= 0
        or upper <= 0
    ):
        return _reject(RejectReason.INVALID_INPUT, "range bounds must be positive numbers")

    if upper <= lower:
        return _reject(RejectReason.INVALID_RANGE, "upper bound must be greater than lower bound")

    if not is_range_valid(
        lower, upper, price,
        narrow_limit=config.narrow_limit,
        wide_limit=config.wide_limit,
    ):
        return _reject(RejectReason.RANGE_OUT_OF_BOUNDS, RANGE_WIDTH_MESSAGE)

    probability = win_probability(
        asset, lower, upper, hours, price, cap=config.probability_cap
    )
    # Far out-of-the-money ranges saturate the tanh CDF to exactly 0.
    if probability <= 0.0:
        return _reject(
            RejectReason.UNPRICEABLE_RANGE,
            "range is too far from the current price to be priced",
        )

    leg = Leg(
        asset_id=asset_id,
        timeframe=timeframe,
        lower_bound=lower,
        upper_bound=upper,
        reference_price=price,
        probability=probability,
        payout_odds=payout_odds(probability, config.house_edge),
    )
    logger.debug(
        "Priced leg %s %s [%.2f, %.2f] @ %.2f: p=%.4f odds=%.2fx",
        asset_id, timeframe, lower, upper, price, probability, leg.payout_odds,
    )
    return leg
