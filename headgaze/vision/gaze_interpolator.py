"""
Gaze-to-screen mapping by inverse distance weighting.
"""

import numpy as np
from typing import Optional, Sequence
from scipy.spatial.distance import cdist

from headgaze.vision.calibrator import CalibrationPoint
from headgaze.vision.frame import Point2D
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)

MIN_CALIBRATION_POINTS = 3


class GazeInterpolator:
    """
    Map image-space gaze points to screen coordinates.

    Each calibration point contributes with weight s / (d + 1)^2, where d
    is the distance between the query gaze and the point's recorded gaze.
    The +1 keeps the weight finite at d = 0.
    """

    def __init__(self, min_points: int = MIN_CALIBRATION_POINTS):
        self._min_points = min_points

    def interpolate(
        self,
        gaze: Point2D,
        points: Sequence[CalibrationPoint],
        sensitivity: float,
    ) -> Optional[Point2D]:
        """
        Interpolate a screen position for a gaze point.

        Args:
            gaze: Mirror-corrected gaze point (image space)
            points: Calibration points
            sensitivity: Weight scale s

        Returns:
            Screen position, or None with insufficient calibration data or
            zero total weight
        """
        if len(points) < self._min_points:
            return None

        eyes = np.array([[p.eye.x, p.eye.y] for p in points], dtype=np.float64)
        screens = np.array([[p.screen.x, p.screen.y] for p in points], dtype=np.float64)

        distances = cdist(gaze.to_array()[np.newaxis, :], eyes)[0]
        weights = sensitivity / (distances + 1.0) ** 2

        total_weight = float(weights.sum())
        if total_weight == 0.0:
            logger.debug("Interpolation weights sum to zero")
            return None

        screen_x, screen_y = (weights[:, np.newaxis] * screens).sum(axis=0) / total_weight
        return Point2D(float(screen_x), float(screen_y))
