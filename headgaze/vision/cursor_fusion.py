"""
Head and eye fusion into a single cursor position.

Head displacement from the calibrated center gives coarse control, the
interpolated gaze point gives fine control. The blended position is
clamped to the viewport and its frame-to-frame delta is the velocity.
"""

import numpy as np
from typing import Optional, Sequence, Tuple
from dataclasses import dataclass

from headgaze.core.config import FusionConfig
from headgaze.vision.calibrator import CalibrationPoint
from headgaze.vision.frame import Point2D
from headgaze.vision.gaze_interpolator import GazeInterpolator
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CursorState:
    """Cursor position and raw velocity (pixels/frame)."""

    position: Point2D
    previous_position: Point2D
    velocity: Point2D

    @classmethod
    def at(cls, position: Point2D) -> "CursorState":
        """Create a resting cursor at a position."""
        return cls(
            position=position,
            previous_position=position,
            velocity=Point2D(0.0, 0.0),
        )

    @classmethod
    def centered(cls, viewport: Tuple[float, float]) -> "CursorState":
        width, height = viewport
        return cls.at(Point2D(width / 2, height / 2))

    def update(self, position: Point2D):
        """Move to a new position; velocity is this update's delta."""
        self.previous_position = self.position
        self.position = position
        self.velocity = Point2D(
            position.x - self.previous_position.x,
            position.y - self.previous_position.y,
        )


def clamp_to_viewport(point: Point2D, viewport: Tuple[float, float]) -> Point2D:
    """Clamp a point componentwise to [0, W] x [0, H]."""
    width, height = viewport
    return Point2D(
        float(np.clip(point.x, 0, width)),
        float(np.clip(point.y, 0, height)),
    )


class CursorFusion:
    """
    Blend head and eye estimates into a screen position.

    Both signals are offsets from the viewport center. With an eye
    estimate available the head contributes `head_weight` of the result
    and the eye the rest; without one the head alone decides.
    """

    def __init__(self, config: FusionConfig, interpolator: Optional[GazeInterpolator] = None):
        """
        Initialize fusion.

        Args:
            config: Fusion configuration (sensitivities and blend)
            interpolator: Gaze interpolator (default: 3-point minimum)
        """
        self._config = config
        self._interpolator = interpolator or GazeInterpolator()

        logger.info(
            f"CursorFusion initialized: head_sensitivity={config.head_sensitivity:.1f}, "
            f"eye_sensitivity={config.eye_sensitivity:.1f}, "
            f"head_weight={config.head_weight:.2f}"
        )

    def fuse(
        self,
        face_center: Point2D,
        head_center: Point2D,
        viewport: Tuple[float, float],
        gaze: Optional[Point2D] = None,
        calibration_points: Sequence[CalibrationPoint] = (),
        eye_armed: bool = False,
    ) -> Point2D:
        """
        Compute the clamped screen position for one frame.

        Args:
            face_center: Mirror-corrected face centroid
            head_center: Mirror-corrected calibrated head center
            viewport: (width, height) of the consuming surface
            gaze: Mirror-corrected gaze point, if any eye was detected
            calibration_points: Points for gaze interpolation
            eye_armed: Eye calibration completed

        Returns:
            Screen position inside [0, W] x [0, H]
        """
        width, height = viewport
        center_x = width / 2
        center_y = height / 2

        # Both coordinates are mirror-corrected, so face - head points the
        # way the user moved
        head_sensitivity = self._config.head_sensitivity
        head_delta_x = (face_center.x - head_center.x) * head_sensitivity
        head_delta_y = (face_center.y - head_center.y) * head_sensitivity

        screen_x = center_x + head_delta_x
        screen_y = center_y + head_delta_y

        eye_screen = self._eye_estimate(gaze, calibration_points, eye_armed)
        if eye_screen is not None:
            eye_scale = self._config.eye_sensitivity / self._config.eye_sensitivity_divisor
            eye_delta_x = (eye_screen.x - center_x) * eye_scale
            eye_delta_y = (eye_screen.y - center_y) * eye_scale

            head_weight = self._config.head_weight
            eye_weight = 1.0 - head_weight
            screen_x = screen_x * head_weight + (center_x + eye_delta_x) * eye_weight
            screen_y = screen_y * head_weight + (center_y + eye_delta_y) * eye_weight

        return clamp_to_viewport(Point2D(screen_x, screen_y), viewport)

    def update(
        self,
        cursor: CursorState,
        face_center: Point2D,
        head_center: Point2D,
        viewport: Tuple[float, float],
        gaze: Optional[Point2D] = None,
        calibration_points: Sequence[CalibrationPoint] = (),
        eye_armed: bool = False,
    ) -> CursorState:
        """Fuse one frame and apply it to the cursor state."""
        position = self.fuse(
            face_center,
            head_center,
            viewport,
            gaze=gaze,
            calibration_points=calibration_points,
            eye_armed=eye_armed,
        )
        cursor.update(position)
        return cursor

    def update_config(self, config: FusionConfig):
        """
        Update fusion configuration.

        Args:
            config: New fusion configuration
        """
        self._config = config
        logger.debug(
            f"Fusion config updated: head={config.head_sensitivity:.1f}, "
            f"eye={config.eye_sensitivity:.1f}, eye_enabled={config.eye_tracking_enabled}"
        )

    def _eye_estimate(
        self,
        gaze: Optional[Point2D],
        calibration_points: Sequence[CalibrationPoint],
        eye_armed: bool,
    ) -> Optional[Point2D]:
        if not self._config.eye_tracking_enabled or not eye_armed or gaze is None:
            return None

        # Falls back to head-only when the interpolator has too few points
        return self._interpolator.interpolate(
            gaze, calibration_points, self._config.eye_sensitivity
        )
