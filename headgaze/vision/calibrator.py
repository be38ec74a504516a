"""
Calibration store for mapping gaze to screen coordinates.

Holds the (screen target, observed gaze) pairs and the head-center
reference, and drives the 5-step eye calibration procedure.
"""

from typing import List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum, auto

from headgaze.core.config import CalibrationConfig
from headgaze.core.state import CalibrationPhase, StateMachine
from headgaze.vision.frame import Point2D
from headgaze.vision.frame_analyzer import GazeObservation
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


# Normalized viewport positions, in the order the user is asked to fixate
CALIBRATION_TARGETS: Tuple[Tuple[float, float], ...] = CalibrationConfig().target_positions


class SubmitResult(Enum):
    """Outcome of submitting a calibration sample."""

    ACCEPTED = auto()  # Point recorded, more targets remain
    COMPLETED = auto()  # Last point recorded, eye tracking armed
    REJECTED_POOR_SIGNAL = auto()  # No detected eye, retry
    REJECTED_NOT_COLLECTING = auto()  # No calibration in progress


@dataclass(frozen=True)
class CalibrationPoint:
    """Screen target the user fixated and the gaze observed at that instant."""

    screen: Point2D
    eye: Point2D


def target_screen_position(
    target: Tuple[float, float], viewport: Tuple[float, float]
) -> Point2D:
    """
    Scale a normalized target to viewport pixels.

    Args:
        target: (x, y) fractions of the viewport
        viewport: (width, height) in pixels

    Returns:
        Target position in screen coordinates
    """
    width, height = viewport
    return Point2D(target[0] * width, target[1] * height)


class CalibrationStore:
    """
    Calibration points, head center and the eye calibration procedure.

    Process:
    1. begin_eye_calibration() clears old points
    2. The user fixates each target in CALIBRATION_TARGETS order
    3. submit_calibration_point() records one point per target
    4. After the last target eye tracking is armed

    Head calibration is independent: capture_head_center() can be called
    whenever a face is visible.
    """

    def __init__(self, config: CalibrationConfig):
        self._config = config
        self._state_machine = StateMachine(initial_phase=CalibrationPhase.IDLE)

        self._points: List[CalibrationPoint] = []
        self._step = 0
        self._eye_armed = False

        self._head_center: Optional[Point2D] = None

        logger.info(f"CalibrationStore initialized: {len(config.target_positions)} targets")

    def begin_eye_calibration(self):
        """Start a fresh eye calibration session."""
        self._points = []
        self._step = 0
        self._eye_armed = False
        self._state_machine.transition_to(CalibrationPhase.COLLECTING)
        logger.info("Eye calibration started")

    def submit_calibration_point(
        self,
        observation: GazeObservation,
        viewport: Tuple[float, float],
    ) -> SubmitResult:
        """
        Record the gaze for the current target.

        Args:
            observation: Current gaze observation (mirror-corrected)
            viewport: Current (width, height) of the consuming surface

        Returns:
            SubmitResult; rejected calls leave the session unchanged
        """
        if self._state_machine.current_phase != CalibrationPhase.COLLECTING:
            return SubmitResult.REJECTED_NOT_COLLECTING

        if not observation.has_signal:
            # Expected while the user settles; caller retries
            logger.debug("Poor eye detection quality, calibration step not advanced")
            return SubmitResult.REJECTED_POOR_SIGNAL

        target = self._config.target_positions[self._step]
        point = CalibrationPoint(
            screen=target_screen_position(target, viewport),
            eye=observation.point,
        )
        self._points.append(point)
        self._step += 1

        logger.info(
            f"Calibration point {self._step}: screen=({point.screen.x:.0f}, "
            f"{point.screen.y:.0f}) eye=({point.eye.x:.1f}, {point.eye.y:.1f})"
        )

        if self._step >= len(self._config.target_positions):
            self._state_machine.transition_to(CalibrationPhase.IDLE)
            self._eye_armed = True
            logger.info(f"Eye calibration completed with {len(self._points)} points")
            return SubmitResult.COMPLETED

        return SubmitResult.ACCEPTED

    def capture_head_center(self, face_center: Point2D):
        """
        Set the head reference position.

        Args:
            face_center: Mirror-corrected face centroid
        """
        self._head_center = face_center
        logger.info(f"Head calibrated at ({face_center.x:.1f}, {face_center.y:.1f})")

    def reset_eye_calibration(self):
        """Clear all calibration points and disarm eye tracking."""
        self._points = []
        self._step = 0
        self._eye_armed = False
        self._state_machine.reset()
        logger.info("Eye calibration reset")

    def restore(self, points: List[CalibrationPoint], head_center: Optional[Point2D] = None):
        """
        Replace the calibration with previously saved data.

        Eye tracking is armed when enough points are restored.
        """
        self._points = list(points)
        self._step = 0
        self._state_machine.reset()
        self._eye_armed = len(self._points) >= self._config.min_points

        if head_center is not None:
            self._head_center = head_center

        logger.info(
            f"Calibration restored: {len(self._points)} points, "
            f"head={'yes' if head_center is not None else 'no'}"
        )

    def current_target(self) -> Optional[Tuple[float, float]]:
        """Get the normalized target awaiting a sample."""
        if not self.is_collecting:
            return None
        return self._config.target_positions[self._step]

    @property
    def points(self) -> List[CalibrationPoint]:
        """Get a copy of the recorded points."""
        return list(self._points)

    @property
    def phase(self) -> CalibrationPhase:
        return self._state_machine.current_phase

    @property
    def is_collecting(self) -> bool:
        return self._state_machine.current_phase == CalibrationPhase.COLLECTING

    @property
    def step(self) -> int:
        return self._step

    @property
    def eye_tracking_armed(self) -> bool:
        return self._eye_armed and len(self._points) >= self._config.min_points

    @property
    def head_center(self) -> Optional[Point2D]:
        return self._head_center

    @property
    def head_calibrated(self) -> bool:
        return self._head_center is not None

    @property
    def progress(self) -> Tuple[int, int]:
        """Get progress (current_step, total_targets)."""
        return (self._step, len(self._config.target_positions))
