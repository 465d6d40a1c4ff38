"""Terminal display surface for a chat session's message queue."""

from __future__ import annotations

import asyncio
from typing import TextIO

from .accumulator import MessageUpdate, UpdateKind
from .models import Role

_PROMPTS = {Role.USER: "you> ", Role.ASSISTANT: "tutor> "}


class TerminalRenderer:
    """Prints message updates as they arrive, streaming assistant text in place."""

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self._printed = 0  # chars of the last message already written

    def render(self, update: MessageUpdate) -> None:
        if update.kind is UpdateKind.RESET:
            self._finish_line()
            self.out.write("--- new context ---\n")
        elif update.kind is UpdateKind.APPEND and update.message is not None:
            self._finish_line()
            self.out.write(_PROMPTS[update.message.role] + update.message.content)
            self._printed = len(update.message.content)
        elif update.kind is UpdateKind.REPLACE_LAST and update.message is not None:
            self.out.write(update.message.content[self._printed:])
            self._printed = len(update.message.content)
        self.out.flush()

    def _finish_line(self) -> None:
        if self._printed:
            self.out.write("\n")
        self._printed = 0

    def close(self) -> None:
        self._finish_line()
        self.out.flush()

    async def run(self, queue: asyncio.Queue[MessageUpdate]) -> None:
        """Consume updates until cancelled."""
        while True:
            update = await queue.get()
            try:
                self.render(update)
            finally:
                queue.task_done()
