"""Market configuration — every pricing and risk policy constant in one place.

Nowhere else in the codebase should the range limits, house edge, treasury
size or parlay policy factors be hard-coded.  Services receive a
:class:`MarketConfig` and read constants from it.

Design decisions
----------------
* The correlation discount (0.85) and the leg-count bonus (1.3× for two legs,
  1.5× for three) are promotional business constants with no statistical
  derivation.  They are kept at their reference values so existing odds
  tables reproduce exactly.  Change them only alongside a pricing review.
* The 0.25 win-probability cap applies to single legs during pricing and to
  the combined probability at submission time.

Typical usage::

    from rangebook.core.config import MarketConfig

    cfg = MarketConfig()                      # reference defaults
    cfg = MarketConfig.from_env()             # TREASURY_SIZE etc. overrides

    # Override a single constant for a promotion:
    from dataclasses import replace
    promo_cfg = replace(cfg, house_edge=0.05)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final, Mapping, Optional

from rangebook.core.catalog import DEFAULT_ASSETS, DEFAULT_TIMEFRAMES, Asset

#: Reference house edge subtracted from fair odds.
DEFAULT_HOUSE_EDGE: Final[float] = 0.07

#: Maximum probability any single leg or submitted parlay is priced at.
WIN_PROBABILITY_CAP: Final[float] = 0.25

#: Default range-width limits as fractions of current price.
NARROW_LIMIT: Final[float] = 0.01
WIDE_LIMIT: Final[float] = 0.30


def _default_leg_bonus() -> dict[int, float]:
    return {2: 1.3, 3: 1.5}


@dataclass(frozen=True)
class MarketConfig:
    """Immutable bundle of pricing and risk constants.

    Attributes:
        assets: Asset registry keyed by asset id.
        timeframes: Timeframe registry, name → hours.
        narrow_limit: Minimum range width as a fraction of current price.
        wide_limit: Maximum range width as a fraction of current price.
        house_edge: Fraction removed from fair odds, in ``[0, 1)``.
        treasury_size: Total payout treasury in USD.
        max_payout_fraction: Share of the treasury a single ticket may pay out.
        probability_cap: Hard cap on leg and submitted parlay probability.
        correlation_factor: Cross-leg discount applied to the geometric mean.
        leg_bonus: Leg count → promotional multiplier.  Counts not listed
            use 1.0.
    """

    assets: Mapping[str, Asset] = field(default_factory=lambda: DEFAULT_ASSETS)
    timeframes: Mapping[str, int] = field(default_factory=lambda: DEFAULT_TIMEFRAMES)

    narrow_limit: float = NARROW_LIMIT
    wide_limit: float = WIDE_LIMIT

    house_edge: float = DEFAULT_HOUSE_EDGE

    treasury_size: float = 20_000.0
    max_payout_fraction: float = 0.10

    probability_cap: float = WIN_PROBABILITY_CAP
    correlation_factor: float = 0.85
    leg_bonus: Mapping[int, float] = field(default_factory=_default_leg_bonus)

    def __post_init__(self) -> None:
        # Frozen all the way down: callers may pass plain dicts
        for name in ("assets", "timeframes", "leg_bonus"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        if not 0 < self.narrow_limit <= self.wide_limit:
            raise ValueError(
                f"Range limits must satisfy 0 < narrow <= wide, "
                f"got narrow={self.narrow_limit!r} wide={self.wide_limit!r}"
            )
        if not 0 <= self.house_edge < 1:
            raise ValueError(f"house_edge must be in [0, 1), got {self.house_edge!r}")
        if self.treasury_size <= 0 or self.max_payout_fraction <= 0:
            raise ValueError("treasury_size and max_payout_fraction must be positive")
        if not 0 < self.probability_cap <= 1:
            raise ValueError(f"probability_cap must be in (0, 1], got {self.probability_cap!r}")

    @property
    def max_payout(self) -> float:
        """Largest payout a single ticket may carry."""
        return self.treasury_size * self.max_payout_fraction

    def bonus_for(self, leg_count: int) -> float:
        return self.leg_bonus.get(leg_count, 1.0)

    def asset(self, asset_id: str) -> Optional[Asset]:
        return self.assets.get(asset_id)

    def timeframe_hours(self, timeframe: str) -> Optional[int]:
        return self.timeframes.get(timeframe)

    @classmethod
    def from_env(cls) -> "MarketConfig":
        """Build a config with treasury and edge overrides from the environment.

        Reads ``TREASURY_SIZE``, ``MAX_PAYOUT_FRACTION`` and ``HOUSE_EDGE``;
        anything unset keeps its reference default.
        """
        return cls(
            treasury_size=float(os.getenv("TREASURY_SIZE", "20000")),
            max_payout_fraction=float(os.getenv("MAX_PAYOUT_FRACTION", "0.10")),
            house_edge=float(os.getenv("HOUSE_EDGE", str(DEFAULT_HOUSE_EDGE))),
        )
