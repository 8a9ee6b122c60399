"""Static registries of tradeable assets and bet timeframes.

Both registries are loaded once at import time and never mutated.  A
:class:`~rangebook.core.config.MarketConfig` carries a reference to them so
tests and alternative deployments can inject a different catalog without
touching module globals.

The volatility coefficients are the coarse per-asset figures the odds tables
were built with.  They are not re-estimated from market data.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Mapping


@dataclass(frozen=True, slots=True)
class Asset:
    """A tradeable asset and its base volatility coefficient.

    Attributes:
        asset_id: Short ticker used in API routes and leg records (``"BTC"``).
        name: Human-readable name for display.
        symbol: Identifier understood by the live price feed (CoinGecko id).
        volatility: Base volatility coefficient, a dimensionless fraction
            of price at the 24-hour reference horizon.  Always > 0.
    """

    asset_id: str
    name: str
    symbol: str
    volatility: float

    def __post_init__(self) -> None:
        if self.volatility <= 0:
            raise ValueError(
                f"Asset {self.asset_id!r} volatility must be > 0, got {self.volatility!r}"
            )


#: Default asset registry keyed by ``asset_id``.
DEFAULT_ASSETS: Final[Mapping[str, Asset]] = MappingProxyType({
    a.asset_id: a
    for a in (
        Asset("BTC", "Bitcoin", "bitcoin", 0.02),
        Asset("ETH", "Ethereum", "ethereum", 0.025),
        Asset("SOL", "Solana", "solana", 0.035),
        Asset("LINK", "Chainlink", "chainlink", 0.04),
        Asset("DOGE", "Dogecoin", "dogecoin", 0.06),
    )
})

#: Default timeframe registry: display name → duration in hours.
#: Insertion order is the order shown to users.
DEFAULT_TIMEFRAMES: Final[Mapping[str, int]] = MappingProxyType({
    "1-hour": 1,
    "4-hour": 4,
    "24-hour": 24,
    "48-hour": 48,
    "3-day": 72,
    "7-day": 168,
    "14-day": 336,
    "30-day": 720,
})
