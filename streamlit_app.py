import html
import logging
from datetime import datetime, time

import streamlit as st

from trendpredictor import Settings, analyze_stocks, parse_symbols
from trendpredictor.core.records import ANALYSIS_FIELDS
from trendpredictor.core.timeutil import IST

logging.basicConfig(level=logging.INFO)

_CONFIDENCE_COLORS = {"high": "#16a34a", "medium": "#facc15", "low": "#ef4444"}


def _market_session_status() -> tuple[str, str]:
    """Determines the current NSE session (Indian Standard Time)."""
    now = datetime.now(IST)
    current_time = now.time()

    if now.weekday() >= 5:
        return "Market closed (weekend)", "#6b7280"
    if time(9, 0) <= current_time < time(9, 15):
        return "Pre-open session", "#fbbf24"
    if time(9, 15) <= current_time < time(15, 30):
        return "Market open", "#22c55e"
    return "Market closed", "#6b7280"


def _confidence_color(value: object) -> str:
    text = str(value or "").strip().lower()
    for level, color in _CONFIDENCE_COLORS.items():
        if text.startswith(level):
            return color
    return "#6b7280"


def _build_card(symbol: str, record: dict) -> str:
    if not record:
        return (
            "<div class='analysis-card'>"
            f"<div class='analysis-card__symbol'>{html.escape(symbol)}</div>"
            "<p>No structured analysis was returned for this symbol.</p>"
            "</div>"
        )
    rows = "".join(
        f"<tr><th>{html.escape(label)}</th><td>{html.escape(str(record.get(key) or 'N/A'))}</td></tr>"
        for key, label in ANALYSIS_FIELDS
    )
    color = _confidence_color(record.get("CONFIDENCE LEVEL"))
    return (
        "<div class='analysis-card'>"
        f"<div class='analysis-card__symbol' style='border-color:{color};'>{html.escape(symbol)}</div>"
        f"<table class='analysis-card__table'>{rows}</table>"
        "</div>"
    )


st.set_page_config(page_title="Trend Predictor", layout="wide")
st.markdown(
    """
<style>
    .analysis-card {
        border: 1px solid rgba(148, 163, 184, 0.3);
        border-radius: 18px;
        padding: 18px 22px;
        margin-bottom: 18px;
    }
    .analysis-card__symbol {
        font-size: 1.6rem;
        font-weight: 800;
        letter-spacing: 0.06em;
        border-left: 6px solid;
        padding-left: 10px;
        margin-bottom: 12px;
    }
    .analysis-card__table th {
        text-align: left;
        padding-right: 18px;
        white-space: nowrap;
        vertical-align: top;
    }
</style>
""",
    unsafe_allow_html=True,
)

if "run_result" not in st.session_state:
    st.session_state["run_result"] = None
if "analysis_error" not in st.session_state:
    st.session_state["analysis_error"] = None
if "analyzed_symbols" not in st.session_state:
    st.session_state["analyzed_symbols"] = []

st.title("Trend Predictor - Stock Analysis")
status_text, status_color = _market_session_status()
st.markdown(
    f"<span style='background:{status_color};padding:4px 10px;border-radius:8px;'>"
    f"{html.escape(status_text)}</span>",
    unsafe_allow_html=True,
)

symbols_input = st.text_input("Stocks to analyze (comma-separated):", value="ITBEES,RELIANCE,TCS")
trigger = st.button("Analyze Stocks")

if trigger:
    st.session_state["run_result"] = None
    st.session_state["analysis_error"] = None
    symbols = parse_symbols(symbols_input)
    if not symbols:
        st.session_state["analysis_error"] = "Enter at least one stock symbol."
    else:
        try:
            with st.spinner("Analyzing stocks... this can take a few minutes."):
                st.session_state["run_result"] = analyze_stocks(symbols, Settings.from_env())
                st.session_state["analyzed_symbols"] = symbols
        except Exception as exc:  # surfaced to the user below
            logging.getLogger(__name__).exception("Analysis failed")
            st.session_state["analysis_error"] = str(exc)

error_message = st.session_state.get("analysis_error")
run = st.session_state.get("run_result")

if error_message:
    st.error(error_message)
elif run is not None:
    st.success(f"{run.message} ({run.timestamp})")
    if run.notification is not None and not run.notification.ok:
        st.warning(f"Email not sent: {run.notification.reason}")
    for symbol, record in zip(st.session_state["analyzed_symbols"], run.results):
        st.markdown(_build_card(symbol, record), unsafe_allow_html=True)
    with st.expander("Raw result"):
        st.json(run.as_dict())
else:
    st.info("Enter stock symbols and press \"Analyze Stocks\" to start.")
