"""Doubt-chat session controller.

Owns the message list for one slide context and runs at most one turn at a
time: post the question, then feed the response body through a
StreamAssembler into the accumulator as chunks arrive.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx
import structlog

from tutorchat.stream.assembler import StreamAssembler

from .accumulator import MessageAccumulator
from .models import ChatMessage, Turn
from .state_machine import TurnPhase, transition

log = structlog.get_logger()

ERROR_PREFIX = "Sorry, I couldn't respond right now."
DEFAULT_FAILURE = "Failed to get response"


class TurnFailed(Exception):
    """A turn ended without a usable response."""

    def __init__(self, reason: str, status: int | None = None) -> None:
        self.reason = reason
        self.status = status
        super().__init__(reason)


def _error_reason(response: httpx.Response) -> str:
    """Best-effort ``{"error": ...}`` extraction from a failed response."""
    try:
        data = response.json()
    except ValueError:
        return DEFAULT_FAILURE
    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        if isinstance(error, dict):
            return str(error.get("message") or DEFAULT_FAILURE)
        return str(error)
    return DEFAULT_FAILURE


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


class ChatSession:
    """Chat state for one doubt-chat panel."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        grade_level: int = 8,
        slide: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 120.0,
        session_id: str | None = None,
    ) -> None:
        self.http_client = http_client
        self.url = url
        self.grade_level = grade_level
        self.slide = slide
        self.headers = headers or {}
        self.timeout = timeout
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self.draft = ""
        self.phase = TurnPhase.IDLE
        self.accumulator = MessageAccumulator()
        self._turn_seq = 0

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self.accumulator.messages

    @property
    def is_loading(self) -> bool:
        return self.phase is not TurnPhase.IDLE

    def set_slide(self, slide: dict[str, Any] | None) -> None:
        """Switch the chat to another slide. A new heading starts a fresh chat."""
        previous = (self.slide or {}).get("heading")
        self.slide = slide
        if (slide or {}).get("heading") != previous:
            self.reset_context("slide_changed")

    def reset_context(self, reason: str = "context_changed") -> None:
        """Clear the chat. Output of a turn still in flight is discarded."""
        log.info(
            "chat_context_reset",
            session_id=self.session_id,
            reason=reason,
            in_flight=self.is_loading,
        )
        self.accumulator.reset()

    async def submit(self, text: str | None = None) -> bool:
        """Ask a question. Uses the draft input when ``text`` is None.

        Returns False without any visible effect when the input is blank or
        a turn is already running.
        """
        question = (self.draft if text is None else text).strip()
        if not question or self.phase is not TurnPhase.IDLE:
            log.debug(
                "submit_rejected",
                session_id=self.session_id,
                blank=not question,
                phase=self.phase.value,
            )
            return False

        history = [m.to_dict() for m in self.accumulator.messages]
        self._turn_seq += 1
        turn = Turn(id=self._turn_seq, generation=self.accumulator.generation)

        self.accumulator.add_user(question)
        self.draft = ""
        self.phase = transition(self.phase, TurnPhase.SENDING, self.session_id, "submit")

        try:
            await self._run_turn(turn, question, history)
        except TurnFailed as exc:
            self.accumulator.add_error(f"{ERROR_PREFIX} {exc.reason}", turn)
        finally:
            self.accumulator.close_turn(turn)
            self.phase = transition(self.phase, TurnPhase.IDLE, self.session_id, "turn_end")
        return True

    async def _run_turn(
        self, turn: Turn, question: str, history: list[dict[str, Any]],
    ) -> None:
        body = {
            "question": question,
            "slideContent": self.slide,
            "gradeLevel": self.grade_level,
            "chatHistory": history,
        }
        log.info(
            "turn_started",
            session_id=self.session_id,
            turn=turn.label,
            history_len=len(history),
        )

        try:
            async with self.http_client.stream(
                "POST",
                self.url,
                json=body,
                headers=self.headers,
                timeout=self.timeout,
            ) as response:
                if not response.is_success:
                    await response.aread()
                    reason = _error_reason(response)
                    log.warning(
                        "turn_rejected",
                        session_id=self.session_id,
                        turn=turn.label,
                        status=response.status_code,
                        reason=reason,
                    )
                    raise TurnFailed(reason, status=response.status_code)

                self.phase = transition(
                    self.phase, TurnPhase.STREAMING, self.session_id, "response_headers",
                )
                await self._consume(turn, response)
        except httpx.HTTPError as exc:
            log.warning(
                "turn_request_failed",
                phase=self.phase.value,
                session_id=self.session_id,
                turn=turn.label,
                error=_describe(exc),
            )
            raise TurnFailed(_describe(exc)) from exc

    async def _consume(self, turn: Turn, response: httpx.Response) -> None:
        assembler = StreamAssembler(turn_id=turn.label)
        try:
            async for chunk in response.aiter_bytes():
                for fragment in assembler.feed(chunk):
                    self.accumulator.append(fragment, turn)
                if assembler.done:
                    break
        except httpx.HTTPError as exc:
            log.warning(
                "turn_stream_failed",
                session_id=self.session_id,
                turn=turn.label,
                fragments=assembler.fragment_count,
                error=_describe(exc),
            )
            raise TurnFailed(_describe(exc)) from exc
        finally:
            assembler.finish()

        log.info(
            "turn_completed",
            session_id=self.session_id,
            turn=turn.label,
            fragments=assembler.fragment_count,
            terminated=assembler.done,
            stale=not self.accumulator.is_current(turn),
        )
