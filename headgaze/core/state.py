"""
Calibration state management.

Defines the eye calibration state machine with clear transitions.
"""

from enum import Enum, auto
from typing import Set


class CalibrationPhase(Enum):
    """
    Eye calibration phases.

    State transitions:
        IDLE -> COLLECTING -> IDLE
        COLLECTING -> COLLECTING (restart)
    """

    IDLE = auto()        # No calibration in progress
    COLLECTING = auto()  # Waiting for target samples


# Define valid phase transitions
_VALID_TRANSITIONS: dict[CalibrationPhase, Set[CalibrationPhase]] = {
    CalibrationPhase.IDLE: {
        CalibrationPhase.COLLECTING,
    },
    CalibrationPhase.COLLECTING: {
        CalibrationPhase.IDLE,
    },
}


def is_valid_transition(from_phase: CalibrationPhase, to_phase: CalibrationPhase) -> bool:
    """
    Check if a phase transition is valid.

    Args:
        from_phase: Current phase
        to_phase: Target phase

    Returns:
        True if transition is allowed, False otherwise
    """
    # Same phase is always valid (restart or no-op)
    if from_phase == to_phase:
        return True

    return to_phase in _VALID_TRANSITIONS.get(from_phase, set())


class StateMachine:
    """Tracks the current calibration phase and validates transitions."""

    def __init__(self, initial_phase: CalibrationPhase = CalibrationPhase.IDLE):
        self._current_phase = initial_phase

    @property
    def current_phase(self) -> CalibrationPhase:
        """Get current phase."""
        return self._current_phase

    def transition_to(self, new_phase: CalibrationPhase) -> bool:
        """
        Transition to a new phase.

        Args:
            new_phase: Target phase

        Returns:
            True if transition succeeded, False if invalid
        """
        if not is_valid_transition(self._current_phase, new_phase):
            return False

        self._current_phase = new_phase
        return True

    def reset(self):
        """Reset to IDLE."""
        self._current_phase = CalibrationPhase.IDLE
