"""
Parlay aggregation for range-bet tickets.

Combines an ordered list of priced legs into one win probability and one
payout multiplier:

    combined_p = geomean(p_i) × correlation_factor × leg_bonus(n)

The geometric mean (rather than the product) keeps multi-leg tickets in the
same probability band as single legs.  The 0.85 correlation discount and the
1.3× / 1.5× leg-count bonus are promotional policy, reproduced exactly.

The raw combined probability is NOT capped here: the live display shows it
uncapped so an over-threshold ticket is visibly flagged.  Odds are always
derived from the value capped at the win-probability cap.
"""

import math
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rangebook.core.config import MarketConfig
from rangebook.core.domain import Leg, Ticket
from rangebook.core.pricing import payout_odds

_DEFAULT_CONFIG = MarketConfig()


def combined_probability(
    legs: Sequence[Leg],
    config: Optional[MarketConfig] = None,
) -> float:
    """
    Aggregate leg probabilities into one parlay probability.

    Returns 0.0 for an empty parlay (sentinel for "no parlay") and for any
    parlay holding a zero-probability leg.
    """
    if not legs:
        return 0.0
    cfg = config or _DEFAULT_CONFIG
    n = len(legs)
    if any(leg.probability <= 0.0 for leg in legs):
        return 0.0
    product = math.prod(leg.probability for leg in legs)
    if product >= sys.float_info.min:
        geometric_mean = product ** (1.0 / n)
    else:
        # Long or low-probability parlays underflow the plain product
        geometric_mean = math.exp(math.fsum(math.log(leg.probability) for leg in legs) / n)
    return geometric_mean * cfg.correlation_factor * cfg.bonus_for(n)


def combined_odds(
    legs: Sequence[Leg],
    config: Optional[MarketConfig] = None,
) -> float:
    """Payout multiplier for the parlay; 0.0 when there are no legs."""
    cfg = config or _DEFAULT_CONFIG
    probability = combined_probability(legs, cfg)
    if probability <= 0.0:
        return 0.0
    return payout_odds(min(probability, cfg.probability_cap), cfg.house_edge)


# ---------------------------------------------------------------------------
# In-progress ticket
# ---------------------------------------------------------------------------

class Parlay:
    """Ordered, mutable collection of legs under construction."""

    def __init__(self, legs: Optional[Sequence[Leg]] = None):
        self._legs: List[Leg] = list(legs or [])

    def __len__(self) -> int:
        return len(self._legs)

    @property
    def legs(self) -> tuple[Leg, ...]:
        """Read-only snapshot of the current legs."""
        return tuple(self._legs)

    def add(self, leg: Leg) -> None:
        self._legs.append(leg)

    def remove(self, index: int) -> Leg:
        """Remove and return the leg at ``index``.

        Raises:
            IndexError: If ``index`` is outside ``[0, len)``.  Negative
                indices are not accepted.
        """
        if not 0 <= index < len(self._legs):
            raise IndexError(f"leg index {index} out of range (parlay has {len(self._legs)} legs)")
        return self._legs.pop(index)

    def clear(self) -> None:
        self._legs.clear()


# ---------------------------------------------------------------------------
# Live quote
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParlayQuote:
    """Live pricing view of an in-progress parlay."""

    num_legs: int
    combined_probability: float
    combined_odds: float
    stake: float
    potential_payout: float
    max_payout: float
    over_probability_cap: bool
    over_exposure_cap: bool


def quote_parlay(
    legs: Sequence[Leg],
    stake: float,
    config: Optional[MarketConfig] = None,
) -> ParlayQuote:
    """
    Price the current legs for display, without any risk gating.

    ``over_probability_cap`` and ``over_exposure_cap`` preview what the risk
    manager will decide on submission.
    """
    cfg = config or _DEFAULT_CONFIG
    probability = combined_probability(legs, cfg)
    odds = combined_odds(legs, cfg)
    potential = stake * odds
    return ParlayQuote(
        num_legs=len(legs),
        combined_probability=probability,
        combined_odds=odds,
        stake=stake,
        potential_payout=potential,
        max_payout=cfg.max_payout,
        over_probability_cap=probability > cfg.probability_cap,
        over_exposure_cap=potential > cfg.max_payout,
    )


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def _fmt_price(value: float) -> str:
    return f"{value:f}".rstrip("0").rstrip(".")


def format_leg(leg: Leg) -> str:
    """One-line leg summary, e.g. ``BTC | 24-hour | $49500 - $50500 | P: 25.00% | Odds: 3.72x``."""
    return (
        f"{leg.asset_id} | {leg.timeframe} | "
        f"${_fmt_price(leg.lower_bound)} - ${_fmt_price(leg.upper_bound)} | "
        f"P: {leg.probability:.2%} | Odds: {leg.payout_odds:.2f}x"
    )


def format_ticket(ticket: Ticket) -> str:
    """
    Format a placed ticket for human-readable display.

    Args:
        ticket: Accepted ticket from the risk manager.

    Returns:
        Multi-line string: header, stake/odds/payout, then one line per leg.
    """
    lines = []
    lines.append(
        f"🎫 {len(ticket.legs)}-Leg Parlay @ {ticket.combined_odds:.2f}x "
        f"[{ticket.result.value}]"
    )
    lines.append(f"   Placed on: {ticket.created_at.isoformat()}")
    lines.append(f"   Amount: ${ticket.stake:,.2f}")
    lines.append(f"   Potential Payout: ${ticket.potential_payout:,.2f}")
    lines.append("   Legs:")
    for leg in ticket.legs:
        lines.append(f"     - {format_leg(leg)}")

    return "\n".join(lines)
