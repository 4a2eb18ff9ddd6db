"""Agent setup and invocation for Trend Predictor."""

from .agent import run_agent
from .setup import build_system_prompt, build_tool_dispatch, build_tool_schemas

__all__ = ["build_system_prompt", "build_tool_dispatch", "build_tool_schemas", "run_agent"]
