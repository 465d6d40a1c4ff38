"""Classification of decoded SSE lines."""

from __future__ import annotations

import enum
from dataclasses import dataclass

DATA_PREFIX = "data: "
COMMENT_MARKER = ":"
DONE_TOKEN = "[DONE]"


class EventKind(enum.Enum):
    IGNORABLE = "ignorable"
    UNRECOGNIZED = "unrecognized"
    DATA = "data"
    TERMINATOR = "terminator"


@dataclass(frozen=True)
class StreamEvent:
    kind: EventKind
    payload: str = ""

    @property
    def is_data(self) -> bool:
        return self.kind is EventKind.DATA


IGNORABLE = StreamEvent(EventKind.IGNORABLE)
UNRECOGNIZED = StreamEvent(EventKind.UNRECOGNIZED)
TERMINATOR = StreamEvent(EventKind.TERMINATOR)


def classify_line(line: str) -> StreamEvent:
    """Classify one decoded line.

    Blank lines and ``:`` comments are keep-alives. Anything without the
    ``data: `` prefix is dropped. ``data: [DONE]`` ends the stream.
    """
    if not line.strip() or line.startswith(COMMENT_MARKER):
        return IGNORABLE
    if not line.startswith(DATA_PREFIX):
        return UNRECOGNIZED

    payload = line[len(DATA_PREFIX):].strip()
    if payload == DONE_TOKEN:
        return TERMINATOR
    return StreamEvent(EventKind.DATA, payload)
