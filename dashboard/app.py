"""
Streamlit Dashboard for Rangebook
Parlay builder and bet history over the Rangebook API
"""

import streamlit as st
import pandas as pd
import requests
from datetime import datetime
import os
from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("API_URL", "http://localhost:8000")

st.set_page_config(
    page_title="Rangebook",
    page_icon="🎯",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ==============================================================================
# API HELPERS
# ==============================================================================

def _show_http_error(e: requests.HTTPError):
    detail = str(e)
    if e.response is not None:
        try:
            detail = e.response.json().get("detail", detail)
        except ValueError:
            pass
    if isinstance(detail, dict):
        detail = detail.get("message", detail)
    st.error(detail)


def make_request(endpoint: str, params: dict = None, quiet: bool = False):
    try:
        r = requests.get(f"{API_URL}{endpoint}", params=params, timeout=10)
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as e:
        if not quiet:
            _show_http_error(e)
        return None
    except Exception as e:
        st.error(f"API Error: {e}")
        return None


def make_post_request(endpoint: str, payload: dict):
    try:
        r = requests.post(
            f"{API_URL}{endpoint}",
            headers={"Content-Type": "application/json"},
            json=payload,
            timeout=10,
        )
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as e:
        _show_http_error(e)
        return None
    except Exception as e:
        st.error(f"Request failed: {e}")
        return None


def make_delete_request(endpoint: str):
    try:
        r = requests.delete(f"{API_URL}{endpoint}", timeout=10)
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as e:
        _show_http_error(e)
        return None
    except Exception as e:
        st.error(f"Request failed: {e}")
        return None


# ==============================================================================
# SIDEBAR
# ==============================================================================

assets = make_request("/api/assets") or []
timeframes = make_request("/api/timeframes") or []
asset_names = {a["asset_id"]: a["name"] for a in assets}

with st.sidebar:
    st.title("🎯 Rangebook")
    st.caption("Range-bet parlay builder")
    st.markdown("---")
    page = st.radio("Navigate", ["🧮 Parlay Builder", "📋 Bet History"])


# ==============================================================================
# PARLAY BUILDER PAGE
# ==============================================================================

if page == "🧮 Parlay Builder":
    st.title("Parlay Builder")

    if not assets or not timeframes:
        st.warning("API unavailable — start the backend with `uvicorn rangebook.main:app`.")
        st.stop()

    c1, c2 = st.columns(2)
    asset_id = c1.selectbox(
        "Asset", list(asset_names), format_func=lambda k: asset_names[k]
    )
    tf_names = [t["name"] for t in timeframes]
    timeframe = c2.selectbox(
        "Timeframe", tf_names, index=tf_names.index("24-hour") if "24-hour" in tf_names else 0
    )
    lower = c1.number_input("Lower Bound", min_value=0.0, value=0.0, format="%.6f")
    upper = c2.number_input("Upper Bound", min_value=0.0, value=0.0, format="%.6f")

    price_data = make_request(f"/api/prices/{asset_id}", quiet=True)
    live_price = price_data["price"] if price_data else None
    st.caption(
        f"Live {asset_names[asset_id]} price: "
        + (f"${live_price:,.6g}" if live_price else "...")
    )
    if live_price and lower and upper and upper > lower:
        st.caption(f"Selected range width: {(upper - lower) / live_price * 100:.2f}%")

    if st.button("Add to Parlay"):
        leg = make_post_request(
            "/api/parlay/legs",
            {"asset_id": asset_id, "timeframe": timeframe,
             "lower_bound": lower, "upper_bound": upper},
        )
        if leg:
            st.success(f"Added: {leg['summary']}")

    st.markdown("---")
    st.subheader("Current Ticket")

    stake = st.number_input("Bet Amount", min_value=0.0, value=100.0, step=10.0)
    parlay = make_request("/api/parlay", {"stake": stake})

    if parlay:
        for idx, leg in enumerate(parlay["legs"]):
            lc, rc = st.columns([5, 1])
            lc.write(leg["summary"])
            if rc.button("Remove", key=f"remove_{idx}"):
                make_delete_request(f"/api/parlay/legs/{idx}")
                st.rerun()

        quote = parlay["quote"]
        m1, m2, m3 = st.columns(3)
        m1.metric("Combined Payout Odds", f"{quote['combined_odds']:.2f}x")
        m2.metric("Combined Win Probability", f"{quote['combined_probability']:.2%}")
        m3.metric("Potential Payout", f"${quote['potential_payout']:,.2f}")

        if quote["over_probability_cap"]:
            st.error("Combined probability exceeds the 25% maximum win cap.")
        if quote["over_exposure_cap"]:
            st.error(f"Potential payout exceeds maximum treasury exposure (${quote['max_payout']:,.2f}).")

        if st.button("Place Bet", type="primary"):
            ticket = make_post_request("/api/bets", {"stake": stake})
            if ticket:
                st.success(
                    f"Ticket {ticket['ticket_id'][:8]} placed @ {ticket['combined_odds']:.2f}x"
                )
                st.rerun()


# ==============================================================================
# BET HISTORY PAGE
# ==============================================================================

elif page == "📋 Bet History":
    st.title("Bet History")
    history = make_request("/api/bets", {"limit": 500})

    if history and history["tickets"]:
        st.metric("Tickets Placed", history["total"])
        rows = [
            {
                "Placed on": datetime.fromisoformat(t["created_at"]).strftime("%b %d, %H:%M:%S"),
                "Amount": t["stake"],
                "Combined Odds": round(t["combined_odds"], 2),
                "Potential Payout": round(t["potential_payout"], 2),
                "Legs": len(t["legs"]),
                "Result": t["result"],
            }
            for t in history["tickets"]
        ]
        st.dataframe(pd.DataFrame(rows), use_container_width=True)

        for t in history["tickets"]:
            with st.expander(f"{t['ticket_id'][:8]} — ${t['stake']:,.2f} @ {t['combined_odds']:.2f}x"):
                for leg in t["legs"]:
                    st.write(f"- {leg['summary']}")
    else:
        st.info("No bets placed yet.")
