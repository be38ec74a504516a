"""
Pupil localisation by darkest-sample search.

Inside a roughly located eye socket the pupil/iris is the darkest
feature, so the darkest sampled pixel serves as its proxy.
"""

import numpy as np
from dataclasses import dataclass

from headgaze.core.config import DetectionConfig
from headgaze.vision.frame import PixelFrame
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EyeRegion:
    """Candidate eye search area in image coordinates."""

    center_x: float
    center_y: float
    width: float
    height: float


@dataclass(frozen=True)
class EyeObservation:
    """
    One eye candidate.

    When detected is False, (x, y) is not meaningful and must not
    influence any average.
    """

    x: float
    y: float
    detected: bool

    @classmethod
    def missing(cls) -> "EyeObservation":
        return cls(x=0.0, y=0.0, detected=False)


class EyeLocator:
    """
    Find the darkest point of an eye region on a strided grid.

    Sampling every `eye_stride` pixels on both axes keeps the cost low
    while staying adequate at the scale of a face sub-region.
    """

    def __init__(self, config: DetectionConfig):
        self._config = config

    def locate(self, frame: PixelFrame, region: EyeRegion) -> EyeObservation:
        """
        Locate the darkest sample inside a region.

        Args:
            frame: Current camera frame
            region: Eye search area (clipped to the frame)

        Returns:
            EyeObservation with the darkest sample's coordinates. The
            coordinates are returned even when detected is False; the
            region centre is returned when no sample is darker than white.
        """
        stride = self._config.eye_stride

        start_x = max(0.0, region.center_x - region.width / 2)
        end_x = min(float(frame.width), region.center_x + region.width / 2)
        start_y = max(0.0, region.center_y - region.height / 2)
        end_y = min(float(frame.height), region.center_y + region.height / 2)

        xs = np.arange(start_x, end_x, stride, dtype=np.float64)
        ys = np.arange(start_y, end_y, stride, dtype=np.float64)

        darkest_x = region.center_x
        darkest_y = region.center_y
        min_brightness = 255.0

        if xs.size and ys.size:
            cols = np.floor(xs).astype(np.intp)
            rows = np.floor(ys).astype(np.intp)

            samples = frame.pixels[np.ix_(rows, cols)][..., :3].astype(np.float64)
            brightness = samples.sum(axis=2) / 3.0

            # argmin returns the first minimum in row-major scan order
            flat_index = int(np.argmin(brightness))
            row, col = np.unravel_index(flat_index, brightness.shape)
            if brightness[row, col] < min_brightness:
                min_brightness = float(brightness[row, col])
                darkest_x = float(xs[col])
                darkest_y = float(ys[row])

        return EyeObservation(
            x=darkest_x,
            y=darkest_y,
            detected=min_brightness < self._config.eye_max_brightness,
        )
