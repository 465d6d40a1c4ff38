"""Per-turn streaming assembler: bytes in, text fragments out.

Chains the frame decoder, the line classifier and the payload extractor for
one response body. A data line whose JSON does not parse is held back; if the
next line is a bare continuation (no SSE prefix) the two are rejoined and
parsed again, otherwise the held line is dropped as malformed.
"""

from __future__ import annotations

import structlog

from .decoder import FrameDecoder
from .events import EventKind, classify_line
from .payload import PayloadParseError, extract_fragment

log = structlog.get_logger()


class StreamAssembler:
    """Incrementally assembles text deltas from an SSE chat-completion stream."""

    def __init__(self, turn_id: str = "", max_held_chars: int = 1_000_000) -> None:
        self.turn_id = turn_id
        self.max_held_chars = max_held_chars
        self.decoder = FrameDecoder()
        self.done = False
        self.fragment_count = 0
        self._held: str | None = None

    @property
    def has_held_payload(self) -> bool:
        return self._held is not None

    def feed(self, chunk: bytes) -> list[str]:
        """Feed one network chunk, return the text fragments it completed."""
        if self.done:
            return []

        fragments: list[str] = []
        for line in self.decoder.feed(chunk):
            event = classify_line(line)

            if self._held is not None:
                if event.kind is EventKind.UNRECOGNIZED:
                    line = self._held + "\n" + line
                    event = classify_line(line)
                else:
                    log.debug(
                        "held_payload_dropped",
                        turn_id=self.turn_id,
                        chars=len(self._held),
                    )
                self._held = None

            if event.kind is EventKind.TERMINATOR:
                self.done = True
                break
            if not event.is_data:
                continue

            try:
                fragment = extract_fragment(event.payload)
            except PayloadParseError:
                self._hold(line)
                continue

            if fragment:
                self.fragment_count += 1
                fragments.append(fragment)

        return fragments

    def _hold(self, line: str) -> None:
        if len(line) > self.max_held_chars:
            log.warning(
                "held_payload_too_large",
                turn_id=self.turn_id,
                chars=len(line),
            )
            return
        self._held = line

    def finish(self) -> None:
        """End of stream: discard any partial line and held payload."""
        remainder = self.decoder.finish()
        if remainder or self._held:
            log.debug(
                "stream_tail_discarded",
                turn_id=self.turn_id,
                pending_chars=len(remainder),
                held_chars=len(self._held or ""),
            )
        self._held = None
