"""
FastAPI application for Rangebook
REST API over the range-bet pricing engine and parlay builder
"""

from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional
import logging
import os

from dotenv import load_dotenv

load_dotenv()

from rangebook.core.config import MarketConfig
from rangebook.core.domain import RejectReason, Rejection
from rangebook.services.ledger import SqlTicketLedger, TicketLedger
from rangebook.services.price_feed import CoinGeckoPriceSource
from rangebook.services.session import BettingSession
from rangebook.schemas import (
    AssetResponse,
    BetCreate,
    HistoryResponse,
    LegCreate,
    LegResponse,
    ParlayResponse,
    PriceResponse,
    QuoteResponse,
    TicketResponse,
    TimeframeResponse,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

_session: Optional[BettingSession] = None


def _build_ledger():
    store = os.getenv("TICKET_STORE", "memory").lower()
    if store == "sql":
        from rangebook.models import SessionLocal, init_db

        init_db()
        logger.info("Ticket store: SQL (%s)", os.getenv("DATABASE_URL", "sqlite:///./rangebook.db"))
        return SqlTicketLedger(SessionLocal)
    logger.info("Ticket store: in-memory")
    return TicketLedger()


def get_session() -> BettingSession:
    """Process-wide betting session (one parlay, one ledger)."""
    global _session
    if _session is None:
        _session = BettingSession(
            price_source=CoinGeckoPriceSource(),
            config=MarketConfig.from_env(),
            ledger=_build_ledger(),
        )
    return _session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    session = get_session()
    cfg = session.config
    logger.info(
        "🚀 Starting Rangebook: treasury $%.0f, max payout %.0f%%, house edge %.1f%%",
        cfg.treasury_size, cfg.max_payout_fraction * 100, cfg.house_edge * 100,
    )

    yield

    logger.info("👋 Shutting down Rangebook")


app = FastAPI(
    title="Rangebook",
    description="Range-bet pricing and parlay builder",
    version="1.0",
    lifespan=lifespan,
)

# CORS (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:8501"],  # Streamlit
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _raise_rejection(rejection: Rejection) -> None:
    status_code = 503 if rejection.reason is RejectReason.PRICE_UNAVAILABLE else 422
    raise HTTPException(status_code=status_code, detail=rejection.to_dict())


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Service banner"""
    return {
        "app": "Rangebook",
        "version": "1.0",
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
def health_check(session: BettingSession = Depends(get_session)):
    """Health check endpoint"""
    health = {"status": "healthy", "ledger": "ok", "tickets": 0}

    try:
        health["tickets"] = len(session.ledger)
    except Exception as e:
        logger.error("Health check ledger error: %s", e)
        health["status"] = "degraded"
        health["ledger"] = f"error: {str(e)}"

    return health


@app.get("/api/assets", response_model=List[AssetResponse])
def list_assets(session: BettingSession = Depends(get_session)):
    return [
        AssetResponse(
            asset_id=a.asset_id, name=a.name, symbol=a.symbol, volatility=a.volatility
        )
        for a in session.config.assets.values()
    ]


@app.get("/api/timeframes", response_model=List[TimeframeResponse])
def list_timeframes(session: BettingSession = Depends(get_session)):
    return [
        TimeframeResponse(name=name, hours=hours)
        for name, hours in session.config.timeframes.items()
    ]


@app.get("/api/prices/{asset_id}", response_model=PriceResponse)
def get_price(asset_id: str, session: BettingSession = Depends(get_session)):
    """Live price for one asset."""
    asset = session.config.asset(asset_id)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Unknown asset {asset_id!r}")

    price = session.current_price(asset_id)
    if price is None:
        raise HTTPException(status_code=503, detail=f"No live price available for {asset.name}")

    return PriceResponse(asset_id=asset_id, symbol=asset.symbol, price=price)


# ============================================================================
# PARLAY CONSTRUCTION
# ============================================================================

@app.get("/api/parlay", response_model=ParlayResponse)
def get_parlay(
    stake: float = Query(default=100.0, ge=0),
    session: BettingSession = Depends(get_session),
):
    """Current legs plus live combined probability, odds and payout."""
    legs = session.legs()
    return ParlayResponse(
        legs=[LegResponse.from_leg(leg) for leg in legs],
        quote=QuoteResponse.from_quote(session.quote(stake)),
    )


@app.post("/api/parlay/legs", response_model=LegResponse)
def add_leg(payload: LegCreate, session: BettingSession = Depends(get_session)):
    """Price a range leg at the live price and append it to the parlay."""
    result = session.add_leg(
        payload.asset_id, payload.timeframe, payload.lower_bound, payload.upper_bound
    )
    if isinstance(result, Rejection):
        _raise_rejection(result)
    return LegResponse.from_leg(result)


@app.delete("/api/parlay/legs/{index}", response_model=LegResponse)
def remove_leg(index: int, session: BettingSession = Depends(get_session)):
    result = session.remove_leg(index)
    if isinstance(result, Rejection):
        _raise_rejection(result)
    return LegResponse.from_leg(result)


# ============================================================================
# BETS
# ============================================================================

@app.post("/api/bets", response_model=TicketResponse)
def place_bet(payload: BetCreate, session: BettingSession = Depends(get_session)):
    """Submit the current parlay through the risk gate."""
    result = session.place_bet(payload.stake)
    if isinstance(result, Rejection):
        _raise_rejection(result)
    return TicketResponse.from_ticket(result)


@app.get("/api/bets", response_model=HistoryResponse)
def get_bet_history(
    limit: int = Query(default=50, ge=1, le=500),
    session: BettingSession = Depends(get_session),
):
    """Placed tickets, most recent first."""
    tickets = session.history()
    return HistoryResponse(
        total=len(tickets),
        tickets=[TicketResponse.from_ticket(t) for t in tickets[:limit]],
    )


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
