"""
Submission gate protecting the payout treasury.

A parlay becomes a ticket only after passing, in order:

    1. Empty check — at least one leg.
    2. Stake sanity — stake must be a positive, finite amount.
    3. Probability cap — combined probability in (0, 0.25].
    4. Exposure cap — stake × odds ≤ treasury_size × max_payout_fraction.

Every check runs before anything is built, so a rejection leaves no partial
state behind.  The gate itself holds no state; recording the ticket and
clearing the parlay belong to the caller (see ``session.BettingSession``).
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from rangebook.core.config import MarketConfig
from rangebook.core.domain import Leg, RejectReason, Rejection, Ticket, TicketResult
from rangebook.core.pricing import payout_odds
from rangebook.services.parlay import combined_odds, combined_probability

logger = logging.getLogger(__name__)


class RiskManager:
    """
    Accepts or rejects parlay submissions against the treasury limits.

    Treasury size and payout fraction default to the injected config but may
    be overridden per call, e.g. when the treasury has been topped up.
    """

    def __init__(self, config: Optional[MarketConfig] = None):
        self.config = config or MarketConfig()

    def evaluate_submission(
        self,
        legs: Sequence[Leg],
        stake: float,
        treasury_size: Optional[float] = None,
        max_payout_fraction: Optional[float] = None,
    ) -> Union[Ticket, Rejection]:
        """
        Gate a submission and, on success, build the ticket.

        Args:
            legs: Parlay legs in order.  Snapshotted into the ticket.
            stake: Amount risked, USD.
            treasury_size: Override for ``config.treasury_size``.
            max_payout_fraction: Override for ``config.max_payout_fraction``.

        Returns:
            A ``PENDING`` :class:`Ticket`, or a :class:`Rejection`.
        """
        cfg = self.config
        treasury = cfg.treasury_size if treasury_size is None else treasury_size
        fraction = cfg.max_payout_fraction if max_payout_fraction is None else max_payout_fraction

        # 1. Empty parlay
        if not legs:
            return self._reject(
                RejectReason.EMPTY_PARLAY,
                "You must add at least one leg to your parlay.",
            )

        # 2. Stake sanity
        if not isinstance(stake, (int, float)) or not math.isfinite(stake) or stake <= 0:
            return self._reject(RejectReason.INVALID_INPUT, "stake must be a positive amount")

        # 3. Win-probability cap
        probability = combined_probability(legs, cfg)
        if probability <= 0.0:
            return self._reject(
                RejectReason.UNPRICEABLE_RANGE,
                "parlay contains a leg with zero win probability",
            )
        if probability > cfg.probability_cap:
            return self._reject(
                RejectReason.PROBABILITY_CAP_EXCEEDED,
                f"Combined probability {probability:.2%} exceeds "
                f"{cfg.probability_cap:.0%} maximum win cap.",
            )

        # 4. Treasury exposure cap
        odds = payout_odds(probability, cfg.house_edge)
        potential_payout = stake * odds
        max_payout = treasury * fraction
        if potential_payout > max_payout:
            return self._reject(
                RejectReason.EXPOSURE_CAP_EXCEEDED,
                f"Potential payout ${potential_payout:,.2f} exceeds maximum "
                f"treasury exposure ${max_payout:,.2f}.",
            )

        ticket = Ticket(
            ticket_id=uuid.uuid4().hex,
            legs=tuple(legs),
            stake=float(stake),
            created_at=datetime.now(timezone.utc),
            combined_probability=probability,
            combined_odds=combined_odds(legs, cfg),
            result=TicketResult.PENDING,
        )
        logger.info(
            "Ticket %s accepted: %d legs, stake $%.2f @ %.2fx (payout $%.2f / cap $%.2f)",
            ticket.ticket_id, len(ticket.legs), ticket.stake, ticket.combined_odds,
            potential_payout, max_payout,
        )
        return ticket

    @staticmethod
    def _reject(reason: RejectReason, message: str) -> Rejection:
        logger.info("Submission rejected (%s): %s", reason.value, message)
        return Rejection(reason, message)
