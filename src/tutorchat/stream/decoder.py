"""Incremental byte-to-line decoder for SSE response bodies.

Network chunks can end anywhere: inside a line, between a ``\\r`` and its
``\\n``, or in the middle of a multi-byte UTF-8 character. The decoder keeps
whatever does not yet form a complete line and only hands out whole lines.
"""

from __future__ import annotations

import codecs


class FrameDecoder:
    """Turns a sequence of byte chunks into complete logical lines."""

    def __init__(self, encoding: str = "utf-8") -> None:
        # The incremental decoder holds back an incomplete trailing character
        # until the bytes that finish it arrive.
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Decoded text not yet terminated by a newline."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """Feed a chunk of bytes, return any complete lines (without terminators)."""
        self._buffer += self._decoder.decode(chunk)
        lines: list[str] = []

        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            if line.endswith("\r"):
                line = line[:-1]
            lines.append(line)

        return lines

    def finish(self) -> str:
        """End of stream. Discards and returns whatever was still pending.

        A trailing line without a newline is never surfaced; undecodable
        partial bytes held by the incremental decoder are dropped too.
        """
        remainder = self._buffer
        self._buffer = ""
        self._decoder.reset()
        return remainder
