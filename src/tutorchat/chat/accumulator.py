"""Owned, append-or-replace-last message list with queue-based observers."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass

import structlog

from .models import ChatMessage, Role, Turn

log = structlog.get_logger()


class UpdateKind(enum.Enum):
    APPEND = "append"
    REPLACE_LAST = "replace_last"
    RESET = "reset"


@dataclass(frozen=True)
class MessageUpdate:
    kind: UpdateKind
    index: int = -1
    message: ChatMessage | None = None


class MessageAccumulator:
    """Single-writer message list for one chat context.

    Only the last element may change value, and only while it is the
    assistant message of the turn currently streaming into it. Every change
    is published to subscriber queues in order.
    """

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []
        self._generation = 0
        self._open_turn: Turn | None = None
        self._subscribers: set[asyncio.Queue[MessageUpdate]] = set()

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        return len(self._messages)

    def subscribe(self) -> asyncio.Queue[MessageUpdate]:
        """Register a display consumer. Updates are delivered in write order."""
        queue: asyncio.Queue[MessageUpdate] = asyncio.Queue()
        self._subscribers.add(queue)
        log.debug("accumulator_subscribed", total=len(self._subscribers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[MessageUpdate]) -> None:
        self._subscribers.discard(queue)

    def is_current(self, turn: Turn) -> bool:
        return turn.generation == self._generation

    def add_user(self, text: str) -> ChatMessage:
        """Append a user message. Closes any open assistant message."""
        self._open_turn = None
        return self._push(ChatMessage(Role.USER, text))

    def append(self, fragment: str, turn: Turn) -> bool:
        """Grow the turn's assistant message by ``fragment``.

        Returns False when the turn belongs to a context that has since been
        reset; the fragment is dropped.
        """
        if not self.is_current(turn):
            log.debug("stale_fragment_dropped", turn=turn.label, chars=len(fragment))
            return False

        last = self._messages[-1] if self._messages else None
        if (
            last is not None
            and last.role is Role.ASSISTANT
            and self._open_turn == turn
        ):
            updated = ChatMessage(Role.ASSISTANT, last.content + fragment)
            self._messages[-1] = updated
            self._publish(
                MessageUpdate(UpdateKind.REPLACE_LAST, len(self._messages) - 1, updated)
            )
            return True

        self._push(ChatMessage(Role.ASSISTANT, fragment))
        self._open_turn = turn
        return True

    def add_error(self, text: str, turn: Turn) -> bool:
        """Append a synthetic assistant message describing a failed turn."""
        if not self.is_current(turn):
            log.debug("stale_error_dropped", turn=turn.label)
            return False
        self._push(ChatMessage(Role.ASSISTANT, text))
        # Later fragments of the same turn must not extend the error text
        self._open_turn = None
        return True

    def close_turn(self, turn: Turn) -> None:
        """Freeze the turn's assistant message."""
        if self._open_turn == turn:
            self._open_turn = None

    def reset(self) -> None:
        """Clear the list for a new context and invalidate in-flight turns."""
        self._messages.clear()
        self._open_turn = None
        self._generation += 1
        self._publish(MessageUpdate(UpdateKind.RESET))
        log.debug("accumulator_reset", generation=self._generation)

    def _push(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        self._publish(MessageUpdate(UpdateKind.APPEND, len(self._messages) - 1, message))
        return message

    def _publish(self, update: MessageUpdate) -> None:
        for queue in self._subscribers:
            queue.put_nowait(update)
