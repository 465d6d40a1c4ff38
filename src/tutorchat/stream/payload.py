"""Extraction of text deltas from chat-completion chunk payloads."""

from __future__ import annotations

import json
from typing import Any


class PayloadParseError(ValueError):
    """Raised when a data payload is not (yet) valid JSON."""

    def __init__(self, payload: str, reason: str) -> None:
        self.payload = payload
        self.reason = reason
        super().__init__(f"Unparsable payload ({reason}): {payload[:80]!r}")


def extract_fragment(payload: str) -> str | None:
    """Return ``choices[0].delta.content`` from a chunk payload.

    Frames without text (role announcements, finish_reason frames, usage
    frames) return None. Malformed or truncated JSON raises
    PayloadParseError so the caller can wait for more data.
    """
    try:
        # strict=False tolerates raw newlines inside strings, which appear
        # when a payload is rejoined from two physical lines.
        data: Any = json.loads(payload, strict=False)
    except (json.JSONDecodeError, ValueError) as exc:
        raise PayloadParseError(payload, str(exc)) from exc

    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None

    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None
