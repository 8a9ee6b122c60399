"""
Append-only ticket history.

Two interchangeable implementations share the ``record`` / ``history``
contract:

  TicketLedger     - in-memory, most-recent-first.  Default.
  SqlTicketLedger  - write-through to the ``tickets`` table, for deployments
                     that want history to survive a restart.

Neither exposes deletion or mutation.  ``history()`` always returns an
immutable tuple so callers cannot edit the log through the view.
"""

import logging
from datetime import timezone
from typing import List, Tuple

from sqlalchemy.orm import sessionmaker

from rangebook.core.domain import Leg, Ticket, TicketResult
from rangebook.models import TicketLog

logger = logging.getLogger(__name__)


class TicketLedger:
    """In-memory ticket log, newest first."""

    def __init__(self):
        self._tickets: List[Ticket] = []

    def record(self, ticket: Ticket) -> None:
        self._tickets.insert(0, ticket)
        logger.info("Recorded ticket %s (%d in ledger)", ticket.ticket_id, len(self._tickets))

    def history(self) -> Tuple[Ticket, ...]:
        return tuple(self._tickets)

    def __len__(self) -> int:
        return len(self._tickets)


class SqlTicketLedger:
    """Ticket log persisted through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def record(self, ticket: Ticket) -> None:
        db = self._session_factory()
        try:
            db.add(
                TicketLog(
                    ticket_id=ticket.ticket_id,
                    stake=ticket.stake,
                    combined_probability=ticket.combined_probability,
                    combined_odds=ticket.combined_odds,
                    result=ticket.result.value,
                    legs=[leg.to_dict() for leg in ticket.legs],
                    created_at=ticket.created_at,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.error("Failed to persist ticket %s", ticket.ticket_id, exc_info=True)
            raise
        finally:
            db.close()
        logger.info("Persisted ticket %s", ticket.ticket_id)

    def history(self) -> Tuple[Ticket, ...]:
        db = self._session_factory()
        try:
            rows = db.query(TicketLog).order_by(TicketLog.seq.desc()).all()
            return tuple(_row_to_ticket(row) for row in rows)
        finally:
            db.close()

    def __len__(self) -> int:
        db = self._session_factory()
        try:
            return db.query(TicketLog).count()
        finally:
            db.close()


def _row_to_ticket(row: TicketLog) -> Ticket:
    created_at = row.created_at
    # SQLite drops tzinfo on the way back out
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Ticket(
        ticket_id=row.ticket_id,
        legs=tuple(Leg.from_dict(d) for d in row.legs),
        stake=row.stake,
        created_at=created_at,
        combined_probability=row.combined_probability,
        combined_odds=row.combined_odds,
        result=TicketResult(row.result),
    )
