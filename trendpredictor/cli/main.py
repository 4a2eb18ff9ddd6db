"""Command-line interface for running Trend Predictor analyses."""

from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional

from trendpredictor.core import ConfigurationError, Settings, analyze_stocks, parse_symbols
from trendpredictor.core.analysis import RunResult
from trendpredictor.core.records import ANALYSIS_FIELDS

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description="Run the Trend Predictor analyst for one or more NSE stocks and email the results.",
    )
    parser.add_argument(
        "--stocks",
        help="Comma-separated list of NSE symbols (e.g., 'RELIANCE,TCS,INFY'). "
        "Defaults to TREND_DEFAULT_STOCKS or the built-in list.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run result as JSON instead of a readable summary.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP API instead of running a single batch.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address for --serve (default: 0.0.0.0).")
    parser.add_argument("--port", type=int, default=8000, help="Port for --serve (default: 8000).")
    return parser


def display_results(symbols: List[str], run: RunResult) -> int:
    """Render analysis records to stdout and return an exit code."""
    print(f"\n=== Stock Analysis Results ({run.timestamp}) ===")
    for symbol, record in zip(symbols, run.results):
        print(f"\n--- {symbol} ---")
        if not record:
            print("No structured analysis was returned.")
            continue
        for key, label in ANALYSIS_FIELDS:
            print(f"{label}: {record.get(key) or 'N/A'}")

    if run.notification is not None and not run.notification.ok:
        print(f"\nEmail not sent: {run.notification.reason}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point invoked by the ``trendpredictor`` script or ``python main.py``."""
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    if args.serve:
        import uvicorn

        uvicorn.run("trendpredictor.api.app:app", host=args.host, port=args.port)
        return 0

    settings = Settings.from_env()
    symbols = parse_symbols(args.stocks) if args.stocks else list(settings.default_symbols)
    if not symbols:
        print("No valid stock symbols were provided. Pass a comma-separated list via --stocks.")
        return 1

    try:
        run = analyze_stocks(symbols, settings)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}")
        return 1

    if args.json:
        print(json.dumps(run.as_dict(), indent=2, ensure_ascii=False))
        return 0
    return display_results(symbols, run)


__all__ = ["build_parser", "display_results", "main"]
