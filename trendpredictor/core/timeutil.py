"""Helpers for rendering timestamps in Indian Standard Time."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

IST = ZoneInfo("Asia/Kolkata")


def current_ist_time(now: Optional[datetime] = None) -> str:
    """Return ``now`` (default: the current instant) formatted for IST display."""
    moment = now.astimezone(IST) if now is not None else datetime.now(IST)
    return moment.strftime("%d %B %Y, %I:%M:%S %p IST")


__all__ = ["IST", "current_ist_time"]
