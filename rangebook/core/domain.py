"""Immutable records flowing between the pricing core and the services.

* :class:`Leg` — one priced range bet, produced only by the leg builder.
* :class:`Ticket` — an accepted parlay snapshot, produced only by the risk
  manager.
* :class:`Rejection` — a structured, user-facing reason an operation was
  refused.  Rejections are returned, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TicketResult(str, Enum):
    """Outcome state of a placed ticket.

    Tickets are created ``PENDING``; only an external settlement process
    moves them to ``WON`` or ``LOST``.
    """

    PENDING = "pending"
    WON = "won"
    LOST = "lost"


class RejectReason(str, Enum):
    """Why a leg or a submission was refused."""

    INVALID_INPUT = "invalid_input"
    PRICE_UNAVAILABLE = "price_unavailable"
    INVALID_RANGE = "invalid_range"
    RANGE_OUT_OF_BOUNDS = "range_out_of_bounds"
    UNPRICEABLE_RANGE = "unpriceable_range"
    EMPTY_PARLAY = "empty_parlay"
    PROBABILITY_CAP_EXCEEDED = "probability_cap_exceeded"
    EXPOSURE_CAP_EXCEEDED = "exposure_cap_exceeded"


@dataclass(frozen=True, slots=True)
class Rejection:
    reason: RejectReason
    message: str

    def to_dict(self) -> dict:
        return {"reason": self.reason.value, "message": self.message}


@dataclass(frozen=True, slots=True)
class Leg:
    """One priced range bet.

    Attributes:
        asset_id: Asset the range is on (``"BTC"``).
        timeframe: Timeframe name (``"24-hour"``).
        lower_bound: Lower price bound, USD.
        upper_bound: Upper price bound, USD.  Always > ``lower_bound``.
        reference_price: Live price the leg was priced against.
        probability: Capped win probability in ``(0, 0.25]``.
        payout_odds: Payout multiplier net of house edge.
    """

    asset_id: str
    timeframe: str
    lower_bound: float
    upper_bound: float
    reference_price: float
    probability: float
    payout_odds: float

    def to_dict(self) -> dict:
        return {
            "asset_id": self.asset_id,
            "timeframe": self.timeframe,
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "reference_price": self.reference_price,
            "probability": self.probability,
            "payout_odds": self.payout_odds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Leg":
        return cls(
            asset_id=data["asset_id"],
            timeframe=data["timeframe"],
            lower_bound=float(data["lower_bound"]),
            upper_bound=float(data["upper_bound"]),
            reference_price=float(data["reference_price"]),
            probability=float(data["probability"]),
            payout_odds=float(data["payout_odds"]),
        )


@dataclass(frozen=True, slots=True)
class Ticket:
    """An accepted, immutable parlay bet.

    Attributes:
        ticket_id: Unique identifier (uuid4 hex).
        legs: Snapshot of the parlay legs at placement, in order.
        stake: Amount risked, USD.  Always > 0.
        created_at: UTC placement timestamp.
        combined_probability: Aggregated parlay probability at placement.
        combined_odds: Payout multiplier locked in at placement.
        result: Outcome state; ``PENDING`` at creation.
    """

    ticket_id: str
    legs: tuple[Leg, ...]
    stake: float
    created_at: datetime
    combined_probability: float
    combined_odds: float
    result: TicketResult = TicketResult.PENDING

    @property
    def potential_payout(self) -> float:
        return self.stake * self.combined_odds
