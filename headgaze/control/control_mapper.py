"""
Cursor velocity to discrete control events.

Vertical velocity drives jump / crouch / resume-running transitions,
horizontal velocity adjusts a speed scalar. The thresholds are
asymmetric so the motion state does not toggle around a single value.
"""

from typing import Optional
from dataclasses import dataclass
from enum import Enum

from headgaze.core.config import ControlConfig
from headgaze.vision.frame import Point2D


class MotionState(Enum):
    """Discrete motion state of the consumer."""

    RUNNING = "running"
    JUMPING = "jumping"
    CROUCHING = "crouching"


class ControlEvent(Enum):
    """Events emitted to the consumer."""

    JUMP = "jump"
    CROUCH = "crouch"
    RESUME_RUNNING = "resume_running"
    SPEED_UP = "speed_up"
    SLOW_DOWN = "slow_down"


# Motion state each transition event leads to
EVENT_STATES = {
    ControlEvent.JUMP: MotionState.JUMPING,
    ControlEvent.CROUCH: MotionState.CROUCHING,
    ControlEvent.RESUME_RUNNING: MotionState.RUNNING,
}


@dataclass(frozen=True)
class ControlDecision:
    """Result of evaluating one frame's velocity."""

    transition: Optional[ControlEvent]  # JUMP, CROUCH, RESUME_RUNNING or None
    speed_event: ControlEvent  # SPEED_UP or SLOW_DOWN
    speed: float  # Adjusted speed scalar

    @property
    def events(self) -> list[ControlEvent]:
        if self.transition is None:
            return [self.speed_event]
        return [self.transition, self.speed_event]


class ControlMapper:
    """Hysteresis-gated mapping from velocity to control events."""

    def __init__(self, config: ControlConfig):
        self._config = config

    def transition_for(
        self,
        velocity: Point2D,
        state: MotionState,
        is_jumping: bool,
    ) -> Optional[ControlEvent]:
        """
        Pick the motion transition for a velocity, if any.

        Args:
            velocity: Cursor velocity (pixels/frame, y grows downwards)
            state: Current motion state
            is_jumping: Consumer is mid-jump

        Returns:
            JUMP, CROUCH, RESUME_RUNNING or None
        """
        config = self._config

        if velocity.y < config.jump_velocity and not is_jumping and state != MotionState.CROUCHING:
            return ControlEvent.JUMP
        if velocity.y > config.crouch_velocity and not is_jumping:
            return ControlEvent.CROUCH
        if abs(velocity.y) < config.stable_velocity and not is_jumping and state != MotionState.RUNNING:
            return ControlEvent.RESUME_RUNNING
        return None

    def adjust_speed(self, velocity: Point2D, speed: float) -> tuple[ControlEvent, float]:
        """
        Slow down on leftward motion, otherwise speed up.

        Returns:
            (SLOW_DOWN or SPEED_UP, new speed within [min_speed, max_speed])
        """
        config = self._config

        if velocity.x < config.slow_velocity:
            return ControlEvent.SLOW_DOWN, max(config.min_speed, speed - config.slow_step)
        return ControlEvent.SPEED_UP, min(config.max_speed, speed + config.speed_up_step)

    def evaluate(
        self,
        velocity: Point2D,
        state: MotionState,
        is_jumping: bool,
        speed: float,
    ) -> ControlDecision:
        """Evaluate both the motion transition and the speed adjustment."""
        transition = self.transition_for(velocity, state, is_jumping)
        speed_event, new_speed = self.adjust_speed(velocity, speed)
        return ControlDecision(transition=transition, speed_event=speed_event, speed=new_speed)
