"""Single-symbol agent call: a bounded tool-calling loop over chat completions."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from openai import OpenAI

from trendpredictor.assistant.setup import build_system_prompt, build_tool_schemas
from trendpredictor.core.config import Settings

LOGGER = logging.getLogger(__name__)


def create_client(settings: Settings) -> OpenAI:
    """Return an OpenAI-compatible client pointed at the AI gateway."""
    return OpenAI(
        api_key=settings.require_gateway_key(),
        base_url=settings.ai_gateway_base_url,
    )


def _execute_tool_call(call: Any, tool_dispatch: Dict[str, Callable[..., object]]) -> str:
    """Run one requested tool and return its output as text for the model."""
    function_meta = getattr(call, "function", None)
    name = getattr(function_meta, "name", "") if function_meta else ""
    arguments = getattr(function_meta, "arguments", "") if function_meta else ""
    LOGGER.info("Model requested tool %s", name)

    handler = tool_dispatch.get(name)
    if handler is None:
        LOGGER.error("No handler registered for tool %s", name)
        return json.dumps({"error": f"Unknown tool {name}"})
    try:
        parsed_args = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError:
        LOGGER.error("Failed to decode arguments for tool %s", name)
        parsed_args = {}
    if not isinstance(parsed_args, dict):
        LOGGER.error("Unexpected arguments type for tool %s", name)
        parsed_args = {}

    try:
        output = handler(**parsed_args)
    except Exception as exc:  # tool bugs are reported to the model, not raised
        LOGGER.exception("Tool %s execution failed", name)
        return json.dumps({"error": str(exc)})
    LOGGER.info("Tool %s completed", name)
    if isinstance(output, str):
        return output
    return json.dumps(output if output is not None else {})


def _assistant_message(message: Any) -> Dict[str, object]:
    return {
        "role": "assistant",
        "content": message.content or "",
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {
                    "name": call.function.name,
                    "arguments": call.function.arguments or "{}",
                },
            }
            for call in message.tool_calls
        ],
    }


def run_agent(
    prompt: str,
    *,
    client: OpenAI,
    tool_dispatch: Dict[str, Callable[..., object]],
    settings: Settings,
    tool_schemas: Optional[List[Dict[str, Any]]] = None,
    system_prompt: Optional[str] = None,
) -> str:
    """Run the analyst on ``prompt`` and return all text the model produced.

    The model gets at most ``settings.max_steps`` completions. Provider errors
    propagate to the caller.
    """
    if system_prompt is None:
        system_prompt = build_system_prompt(structured=settings.structured_output)
    messages: List[Dict[str, object]] = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": prompt},
    ]
    request: Dict[str, object] = {
        "model": settings.model,
        "tools": tool_schemas if tool_schemas is not None else build_tool_schemas(tool_dispatch),
        "temperature": settings.temperature,
    }
    if settings.structured_output:
        request["response_format"] = {"type": "json_object"}

    text_parts: List[str] = []
    for step in range(1, max(settings.max_steps, 1) + 1):
        completion = client.chat.completions.create(messages=messages, **request)
        message = completion.choices[0].message
        if message.content:
            text_parts.append(message.content)

        tool_calls = getattr(message, "tool_calls", None) or []
        if not tool_calls:
            LOGGER.info("Agent finished after %d step(s)", step)
            break

        messages.append(_assistant_message(message))
        for call in tool_calls:
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": call.id,
                    "content": _execute_tool_call(call, tool_dispatch),
                }
            )
    else:
        LOGGER.info("Agent stopped at the %d step limit", settings.max_steps)

    return "".join(text_parts)


__all__ = ["create_client", "run_agent"]
