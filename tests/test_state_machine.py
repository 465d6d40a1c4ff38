"""Tests for the chat turn state machine."""

import pytest

from tutorchat.chat.state_machine import (
    InvalidTransition,
    TurnPhase,
    transition,
    validate_transition,
)


class TestValidTransitions:
    def test_idle_to_sending(self):
        validate_transition(TurnPhase.IDLE, TurnPhase.SENDING)

    def test_sending_to_streaming(self):
        validate_transition(TurnPhase.SENDING, TurnPhase.STREAMING)

    def test_streaming_to_idle(self):
        validate_transition(TurnPhase.STREAMING, TurnPhase.IDLE)

    def test_sending_failure_to_idle(self):
        validate_transition(TurnPhase.SENDING, TurnPhase.IDLE)


class TestInvalidTransitions:
    def test_idle_to_streaming(self):
        with pytest.raises(InvalidTransition):
            validate_transition(TurnPhase.IDLE, TurnPhase.STREAMING)

    def test_streaming_to_sending(self):
        with pytest.raises(InvalidTransition):
            validate_transition(TurnPhase.STREAMING, TurnPhase.SENDING)

    def test_no_self_transitions(self):
        for phase in TurnPhase:
            with pytest.raises(InvalidTransition):
                validate_transition(phase, phase)


class TestTransition:
    def test_returns_new_phase(self):
        result = transition(TurnPhase.IDLE, TurnPhase.SENDING, session_id="s1", trigger="submit")
        assert result == TurnPhase.SENDING

    def test_raises_on_invalid(self):
        with pytest.raises(InvalidTransition) as exc_info:
            transition(TurnPhase.IDLE, TurnPhase.STREAMING, session_id="s1")
        assert exc_info.value.from_phase is TurnPhase.IDLE
        assert exc_info.value.to_phase is TurnPhase.STREAMING
