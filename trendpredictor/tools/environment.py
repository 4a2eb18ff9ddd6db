"""Environment helpers shared by the settings loader and the tools."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional

LOGGER = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _load_streamlit_secrets() -> None:
    """Expose Streamlit ``secrets`` as environment variables when running inside Streamlit."""
    try:
        import streamlit as st  # type: ignore
    except ImportError:
        return

    try:
        items = st.secrets.items()
    except Exception:  # pragma: no cover - no secrets.toml outside a Streamlit deployment
        return

    for key, value in items:
        if isinstance(value, (str, int, float, bool)):
            os.environ.setdefault(str(key), str(value))


def parse_env_lines(text: str) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines, ignoring blanks, comments and ``export`` prefixes."""
    values: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        values[key.strip()] = value
    return values


def load_local_env(filename: str = ".env", root: Optional[Path] = None, streamlit_secrets: bool = True) -> None:
    """Load ``filename`` from the project root without overriding variables already set.

    ``streamlit_secrets=False`` skips the Streamlit secrets lookup, for processes
    that are not Streamlit apps.
    """
    if streamlit_secrets:
        _load_streamlit_secrets()

    env_path = (root or PROJECT_ROOT) / filename
    if not env_path.is_file():
        return
    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        LOGGER.warning("Failed to read %s", env_path)
        return
    for key, value in parse_env_lines(text).items():
        os.environ.setdefault(key, value)


__all__ = ["load_local_env", "parse_env_lines"]
