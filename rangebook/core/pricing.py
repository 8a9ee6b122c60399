"""Range-bet pricing mathematics — the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement locally in services.

The four pillars exposed are:

1. **Volatility model** — base asset volatility scaled to a timeframe.
2. **Probability engine** — chance that the price ends inside a range.
3. **Odds engine** — win probability → payout multiplier under a house edge.
4. **Range validator** — width of a requested range relative to price.

Design decisions
----------------
* Volatility scales with ``sqrt(hours / 24)``.  The square-root model
  understates noise over short horizons, so a step multiplier (1.3 / 1.2 /
  1.1) is applied at 1h, 4h and 24h and below.
* The normal CDF is the logistic-tanh approximation
  ``0.5 · (1 + tanh(sqrt(π/8) · z))``, **not** the erf-based CDF.  It is
  monotonic and symmetric, and the published odds tables were produced with
  it, so it must not be swapped for the exact CDF.
* Single-leg probability is hard-capped at 0.25: the book never offers a
  priced outcome better than 1-in-4.

Run tests with::

    pytest tests/test_pricing.py -v
"""

from __future__ import annotations

import math
from typing import Final, Optional

from rangebook.core.catalog import Asset
from rangebook.core.config import (
    DEFAULT_HOUSE_EDGE,
    NARROW_LIMIT,
    WIDE_LIMIT,
    WIN_PROBABILITY_CAP,
)

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: Hours in the reference horizon the base volatility is quoted for.
REFERENCE_HOURS: Final[float] = 24.0

#: Short-horizon multipliers as ``(max_hours, multiplier)``, checked in order.
#: Horizons beyond the last entry use 1.0.
SHORT_HORIZON_MULTIPLIERS: Final[tuple[tuple[float, float], ...]] = (
    (1, 1.3),
    (4, 1.2),
    (24, 1.1),
)

#: ``sqrt(π/8)`` — slope that makes tanh track the standard normal CDF.
_TANH_CDF_SLOPE: Final[float] = math.sqrt(math.pi / 8)


# ---------------------------------------------------------------------------
# Volatility model
# ---------------------------------------------------------------------------


def short_horizon_multiplier(timeframe_hours: float) -> float:
    """Multiplier compensating for the square-root model on short horizons."""
    for max_hours, multiplier in SHORT_HORIZON_MULTIPLIERS:
        if timeframe_hours <= max_hours:
            return multiplier
    return 1.0


def time_scaled_volatility(asset: Asset, timeframe_hours: float) -> float:
    """Standard deviation of price, as a fraction of price, over a timeframe.

    Examples::

        BTC (0.02),  24h → 0.02 × 1.0 × 1.1       = 0.022
        BTC (0.02),   1h → 0.02 × sqrt(1/24) × 1.3 ≈ 0.00531
        DOGE (0.06), 7d  → 0.06 × sqrt(7) × 1.0    ≈ 0.1587
    """
    scale = math.sqrt(timeframe_hours / REFERENCE_HOURS)
    return asset.volatility * scale * short_horizon_multiplier(timeframe_hours)


# ---------------------------------------------------------------------------
# Probability engine
# ---------------------------------------------------------------------------


def normal_cdf(z: float) -> float:
    """Logistic-tanh approximation to the standard normal CDF."""
    return 0.5 * (1.0 + math.tanh(_TANH_CDF_SLOPE * z))


def raw_win_probability(
    asset: Asset,
    lower: float,
    upper: float,
    timeframe_hours: float,
    price: float,
) -> float:
    """Uncapped probability that price finishes inside ``[lower, upper]``.

    Raises:
        ValueError: If ``price <= 0``.  A zero price means the feed had no
            quote; pricing against it would divide by zero.
    """
    if price <= 0:
        raise ValueError(
            f"Cannot price a range against price {price!r}: price must be > 0. "
            "Check that the live price feed returned a quote."
        )
    std_dev = price * time_scaled_volatility(asset, timeframe_hours)
    z_lower = (lower - price) / std_dev
    z_upper = (upper - price) / std_dev
    return normal_cdf(z_upper) - normal_cdf(z_lower)


def win_probability(
    asset: Asset,
    lower: float,
    upper: float,
    timeframe_hours: float,
    price: float,
    *,
    cap: float = WIN_PROBABILITY_CAP,
) -> float:
    """Capped win probability for a single range leg.

    Args:
        asset: Asset being bet on.
        lower: Lower bound of the range, in USD.
        upper: Upper bound of the range, in USD.
        timeframe_hours: Horizon of the bet.
        price: Current asset price, in USD.  Must be > 0.
        cap: Maximum probability returned.  Default 0.25.

    Returns:
        ``min(cdf(z_upper) − cdf(z_lower), cap)``.  Ranges far from the
        current price can return 0.0 once the tanh saturates; callers must
        not feed that into :func:`payout_odds`.
    """
    return min(raw_win_probability(asset, lower, upper, timeframe_hours, price), cap)


# ---------------------------------------------------------------------------
# Odds engine
# ---------------------------------------------------------------------------


def payout_odds(probability: float, house_edge: float = DEFAULT_HOUSE_EDGE) -> float:
    """Payout multiplier for a win probability, net of house edge.

    ``(1 / p) × (1 − house_edge)``.  At the 0.25 cap with the default 7%
    edge this is ``4 × 0.93 = 3.72``.

    Raises:
        ValueError: If ``probability`` is not in ``(0, 1]``.  Zero would give
            infinite odds and must be rejected upstream.
    """
    if not 0.0 < probability <= 1.0:
        raise ValueError(
            f"Probability {probability!r} must be in (0, 1] to derive payout odds."
        )
    return (1.0 / probability) * (1.0 - house_edge)


# ---------------------------------------------------------------------------
# Range validator
# ---------------------------------------------------------------------------


def range_width(lower: float, upper: float, price: float) -> float:
    """Range width as a fraction of price.  Negative when ``upper < lower``."""
    return (upper - lower) / price


def is_range_valid(
    lower: float,
    upper: float,
    price: float,
    *,
    narrow_limit: float = NARROW_LIMIT,
    wide_limit: float = WIDE_LIMIT,
) -> bool:
    """True iff ``narrow_limit ≤ (upper − lower)/price ≤ wide_limit``.

    Zero and negative widths fail the narrow bound.  A non-positive price is
    never valid.
    """
    if price <= 0:
        return False
    return narrow_limit <= range_width(lower, upper, price) <= wide_limit


def range_width_pct(
    lower: Optional[float],
    upper: Optional[float],
    price: Optional[float],
) -> Optional[float]:
    """Selected range width in percent, for display.

    Returns ``None`` when no meaningful width exists yet: a bound is missing
    or zero, ``upper <= lower``, or no price is available.
    """
    if not lower or not upper or not price or upper <= lower or price <= 0:
        return None
    return range_width(lower, upper, price) * 100.0
