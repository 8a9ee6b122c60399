"""
Live spot prices for range-bet pricing.
https://www.coingecko.com/en/api

The pricing core never performs I/O.  It receives a price from a
:class:`PriceSource`, which returns ``None`` whenever no trustworthy quote is
available.  The leg builder then refuses to price rather than fall back to a
stale or zero price.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

BASE_URL = os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
VS_CURRENCY = "usd"


class PriceSource(ABC):
    """Contract for anything that can quote a current USD price."""

    @abstractmethod
    def current_price(self, symbol: str) -> Optional[float]:
        """Return the current price for a feed symbol, or ``None`` if unavailable."""


class CoinGeckoPriceSource(PriceSource):
    """Client for the CoinGecko simple-price endpoint"""

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10.0):
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.timeout = timeout

    def current_price(self, symbol: str) -> Optional[float]:
        """
        Fetch the current USD price for a CoinGecko coin id (e.g. ``"bitcoin"``).

        Network errors, malformed payloads and non-positive prices all
        return ``None``.
        """
        url = f"{self.base_url}/simple/price"
        params = {"ids": symbol, "vs_currencies": VS_CURRENCY}

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("CoinGecko price error for %s: %s", symbol, e)
            return None
        except ValueError as e:
            logger.error("CoinGecko returned invalid JSON for %s: %s", symbol, e)
            return None

        try:
            price = float(data[symbol][VS_CURRENCY])
        except (KeyError, TypeError, ValueError):
            logger.warning("CoinGecko payload missing %s/%s: %r", symbol, VS_CURRENCY, data)
            return None

        if price <= 0:
            logger.warning("CoinGecko quoted non-positive price %r for %s", price, symbol)
            return None

        logger.debug("CoinGecko %s = %.6f %s", symbol, price, VS_CURRENCY)
        return price


class StaticPriceSource(PriceSource):
    """Fixed prices keyed by feed symbol.  Missing symbols are unavailable."""

    def __init__(self, prices: Optional[Mapping[str, float]] = None):
        self._prices: Dict[str, float] = dict(prices or {})

    def set_price(self, symbol: str, price: float) -> None:
        self._prices[symbol] = price

    def current_price(self, symbol: str) -> Optional[float]:
        price = self._prices.get(symbol)
        if price is None or price <= 0:
            return None
        return price
