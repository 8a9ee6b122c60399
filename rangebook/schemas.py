"""
Pydantic request/response schemas for the Rangebook API.

Request bodies only check types.  Business validation (positive bounds,
range width, stake limits) stays in the pricing core so every rejection
carries the same structured reason whether it came over HTTP or not.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from pydantic import BaseModel, Field

from rangebook.core.domain import Leg, Ticket
from rangebook.services.parlay import ParlayQuote, format_leg


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

class AssetResponse(BaseModel):
    asset_id: str
    name: str
    symbol: str
    volatility: float


class TimeframeResponse(BaseModel):
    name: str
    hours: int


class PriceResponse(BaseModel):
    asset_id: str
    symbol: str
    price: float


# ---------------------------------------------------------------------------
# Parlay construction
# ---------------------------------------------------------------------------

class LegCreate(BaseModel):
    """Payload for POST /api/parlay/legs."""

    asset_id: str = Field(..., description='Asset key, e.g. "BTC"')
    timeframe: str = Field(..., description='Timeframe name, e.g. "24-hour"')
    lower_bound: float = Field(..., description="Lower price bound, USD")
    upper_bound: float = Field(..., description="Upper price bound, USD")

    model_config = {
        "json_schema_extra": {
            "example": {
                "asset_id": "BTC",
                "timeframe": "24-hour",
                "lower_bound": 49500,
                "upper_bound": 50500,
            }
        }
    }


class LegResponse(BaseModel):
    asset_id: str
    timeframe: str
    lower_bound: float
    upper_bound: float
    reference_price: float
    probability: float
    payout_odds: float
    summary: str

    @classmethod
    def from_leg(cls, leg: Leg) -> "LegResponse":
        return cls(**leg.to_dict(), summary=format_leg(leg))


class QuoteResponse(BaseModel):
    """Live pricing of the in-progress parlay."""
    num_legs: int
    combined_probability: float
    combined_odds: float
    stake: float
    potential_payout: float
    max_payout: float
    over_probability_cap: bool
    over_exposure_cap: bool

    @classmethod
    def from_quote(cls, quote: ParlayQuote) -> "QuoteResponse":
        return cls(**asdict(quote))


class ParlayResponse(BaseModel):
    legs: list[LegResponse]
    quote: QuoteResponse


# ---------------------------------------------------------------------------
# Bet placement
# ---------------------------------------------------------------------------

class BetCreate(BaseModel):
    """Payload for POST /api/bets."""
    stake: float = Field(..., description="Amount risked, USD")


class TicketResponse(BaseModel):
    ticket_id: str
    legs: list[LegResponse]
    stake: float
    created_at: datetime
    combined_probability: float
    combined_odds: float
    potential_payout: float
    result: str

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "TicketResponse":
        return cls(
            ticket_id=ticket.ticket_id,
            legs=[LegResponse.from_leg(leg) for leg in ticket.legs],
            stake=ticket.stake,
            created_at=ticket.created_at,
            combined_probability=ticket.combined_probability,
            combined_odds=ticket.combined_odds,
            potential_payout=ticket.potential_payout,
            result=ticket.result.value,
        )


class HistoryResponse(BaseModel):
    total: int
    tickets: list[TicketResponse]

