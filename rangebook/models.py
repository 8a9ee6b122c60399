"""
Database models for the Rangebook ticket store
SQLAlchemy ORM, SQLite by default (any SQLAlchemy URL works)
"""

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Float,
    DateTime,
    JSON,
)
from sqlalchemy.orm import declarative_base, sessionmaker
import os
from dotenv import load_dotenv

# Load .env before reading DATABASE_URL
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rangebook.db")

engine = create_engine(DATABASE_URL, pool_pre_ping=True, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=bind or engine)


class TicketLog(Base):
    """A placed parlay ticket, legs stored as a JSON snapshot"""

    __tablename__ = "tickets"

    # Monotonic insertion order; history is read newest-first by this column
    seq = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(32), unique=True, nullable=False, index=True)

    stake = Column(Float, nullable=False)
    combined_probability = Column(Float, nullable=False)
    combined_odds = Column(Float, nullable=False)
    result = Column(String(16), nullable=False, default="pending")

    legs = Column(JSON, nullable=False)  # list of Leg.to_dict()

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
