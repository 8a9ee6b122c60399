"""
Betting session: the single owner of an in-progress parlay and its ledger.

Replaces ambient globals with explicit state.  Every mutating operation runs
under one re-entrant lock, so when the session is shared by a threaded HTTP
server the submission's check-then-commit is atomic: the risk gate, the
ledger write and the parlay reset happen together or not at all.
"""

import logging
import threading
from typing import Optional, Tuple, Union

from rangebook.core.config import MarketConfig
from rangebook.core.domain import Leg, RejectReason, Rejection, Ticket
from rangebook.services.leg_builder import build_leg
from rangebook.services.ledger import TicketLedger
from rangebook.services.parlay import Parlay, ParlayQuote, quote_parlay
from rangebook.services.price_feed import PriceSource
from rangebook.services.risk import RiskManager

logger = logging.getLogger(__name__)


class BettingSession:
    """
    Builds one parlay at a time and records accepted tickets.

    Args:
        price_source: Live price collaborator.
        config: Market constants.  Defaults to the reference values.
        ledger: Ticket store with ``record`` / ``history``.  Defaults to an
            in-memory :class:`TicketLedger`.
    """

    def __init__(
        self,
        price_source: PriceSource,
        config: Optional[MarketConfig] = None,
        ledger=None,
    ):
        self.config = config or MarketConfig()
        self.price_source = price_source
        self.ledger = ledger if ledger is not None else TicketLedger()
        self.risk_manager = RiskManager(self.config)
        self.parlay = Parlay()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    def current_price(self, asset_id: str) -> Optional[float]:
        """Live price for a registered asset; ``None`` if unknown or unavailable."""
        asset = self.config.asset(asset_id)
        if asset is None:
            return None
        return self.price_source.current_price(asset.symbol)

    # ------------------------------------------------------------------
    # Parlay construction
    # ------------------------------------------------------------------

    def add_leg(
        self,
        asset_id: str,
        timeframe: str,
        lower: float,
        upper: float,
    ) -> Union[Leg, Rejection]:
        """Price a leg against the live price and append it on success."""
        price = self.current_price(asset_id)
        result = build_leg(self.config, asset_id, timeframe, lower, upper, price)
        if isinstance(result, Leg):
            with self._lock:
                self.parlay.add(result)
        return result

    def remove_leg(self, index: int) -> Union[Leg, Rejection]:
        with self._lock:
            try:
                return self.parlay.remove(index)
            except IndexError as exc:
                return Rejection(RejectReason.INVALID_INPUT, str(exc))

    def legs(self) -> Tuple[Leg, ...]:
        with self._lock:
            return self.parlay.legs

    def quote(self, stake: float) -> ParlayQuote:
        with self._lock:
            return quote_parlay(self.parlay.legs, stake, self.config)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def place_bet(self, stake: float) -> Union[Ticket, Rejection]:
        """
        Submit the current parlay.

        On acceptance the ticket is recorded and the parlay cleared.  On
        rejection nothing changes.
        """
        with self._lock:
            result = self.risk_manager.evaluate_submission(self.parlay.legs, stake)
            if isinstance(result, Ticket):
                self.ledger.record(result)
                self.parlay.clear()
            return result

    def history(self) -> Tuple[Ticket, ...]:
        return self.ledger.history()
