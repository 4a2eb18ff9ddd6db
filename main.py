"""Command-line entry point for running Trend Predictor analyses."""

import sys

from trendpredictor.cli import main

if __name__ == "__main__":
    sys.exit(main())
