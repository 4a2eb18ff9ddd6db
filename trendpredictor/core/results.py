"""Result type returned at every outbound call boundary."""

from __future__ import annotations

import dataclasses
from typing import Any, Optional


@dataclasses.dataclass(frozen=True)
class CallResult:
    """Either a successful value or a failure with a human-readable reason."""

    ok: bool
    value: Any = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "CallResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "CallResult":
        return cls(ok=False, reason=reason)


__all__ = ["CallResult"]
