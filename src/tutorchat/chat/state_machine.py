"""Chat turn phase state machine.

IDLE ──[submit]──→ SENDING ──[2xx headers]──→ STREAMING
  ↑                   │                           │
  └──[error]──────────┘                           │
  └──[terminator / end of body / read error]──────┘
"""

from __future__ import annotations

import enum

import structlog

log = structlog.get_logger()


class TurnPhase(enum.Enum):
    IDLE = "IDLE"
    SENDING = "SENDING"
    STREAMING = "STREAMING"


VALID_TRANSITIONS: set[tuple[TurnPhase, TurnPhase]] = {
    (TurnPhase.IDLE, TurnPhase.SENDING),
    (TurnPhase.SENDING, TurnPhase.STREAMING),
    (TurnPhase.STREAMING, TurnPhase.IDLE),
    (TurnPhase.SENDING, TurnPhase.IDLE),  # request failed before streaming
}


class InvalidTransition(Exception):
    """Raised when an invalid phase transition is attempted."""

    def __init__(self, from_phase: TurnPhase, to_phase: TurnPhase) -> None:
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(f"Invalid transition: {from_phase.value} → {to_phase.value}")


def validate_transition(from_phase: TurnPhase, to_phase: TurnPhase) -> None:
    """Validate a phase transition, raising InvalidTransition if not allowed."""
    if (from_phase, to_phase) not in VALID_TRANSITIONS:
        raise InvalidTransition(from_phase, to_phase)


def transition(
    current: TurnPhase,
    target: TurnPhase,
    session_id: str,
    trigger: str = "",
) -> TurnPhase:
    """Execute a validated phase transition, logging the change."""
    validate_transition(current, target)
    log.debug(
        "turn_phase_transition",
        session_id=session_id,
        from_phase=current.value,
        to_phase=target.value,
        trigger=trigger,
    )
    return target
