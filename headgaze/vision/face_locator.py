"""
Face localisation by skin-tone grid scanning.

No trained model: the frame is split into square cells and every cell
where skin-coloured pixels dominate is treated as part of the face.
The result is a coarse centroid and box, enough to seed the eye search.

Privacy: No facial recognition, no biometric templates stored.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass

from headgaze.core.config import DetectionConfig
from headgaze.vision.frame import PixelFrame, Point2D
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FaceBounds:
    """Approximate face box in image coordinates."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class FaceRegion:
    """Face detection result."""

    center: Point2D  # Skin-count weighted centroid (image space)
    bounds: FaceBounds
    cell_count: int  # Number of qualifying cells


def skin_mask(pixels: np.ndarray, config: DetectionConfig) -> np.ndarray:
    """
    Evaluate the skin-tone predicate for every pixel.

    Args:
        pixels: uint8 array of shape (H, W, 4) or (H, W, 3)
        config: Detection thresholds

    Returns:
        Boolean array of shape (H, W)
    """
    rgb = pixels[..., :3].astype(np.int16)
    r = rgb[..., 0]
    g = rgb[..., 1]
    b = rgb[..., 2]

    spread = rgb.max(axis=2) - rgb.min(axis=2)

    return (
        (r > config.skin_min_red)
        & (g > config.skin_min_green)
        & (b > config.skin_min_blue)
        & (spread > config.skin_min_spread)
        & (np.abs(r - g) > config.skin_min_red_green_gap)
        & (r > g)
        & (r > b)
    )


class FaceLocator:
    """
    Locate the face as the set of skin-dominated grid cells.

    Cells on the right and bottom edges may be partial; their skin
    fraction is computed over the in-frame pixels only.
    """

    def __init__(self, config: DetectionConfig):
        self._config = config
        logger.info(
            f"FaceLocator initialized: grid={config.grid_size}px, "
            f"min_skin_fraction={config.min_skin_fraction:.2f}"
        )

    def locate(self, frame: PixelFrame) -> Optional[FaceRegion]:
        """
        Find the skin-tone region of a frame.

        Args:
            frame: Current camera frame

        Returns:
            FaceRegion, or None if no cell qualifies
        """
        grid = self._config.grid_size
        height, width = frame.height, frame.width

        rows = -(-height // grid)
        cols = -(-width // grid)

        # Pad to whole cells; padding is neither skin nor counted
        mask = np.zeros((rows * grid, cols * grid), dtype=bool)
        mask[:height, :width] = skin_mask(frame.pixels, self._config)
        valid = np.zeros_like(mask)
        valid[:height, :width] = True

        skin_counts = mask.reshape(rows, grid, cols, grid).sum(axis=(1, 3))
        totals = valid.reshape(rows, grid, cols, grid).sum(axis=(1, 3))

        qualifying = skin_counts / totals > self._config.min_skin_fraction
        if not qualifying.any():
            return None

        cell_rows, cell_cols = np.nonzero(qualifying)
        weights = skin_counts[cell_rows, cell_cols].astype(np.float64)
        centers_x = cell_cols * grid + grid / 2.0
        centers_y = cell_rows * grid + grid / 2.0

        total_weight = weights.sum()
        face_x = float((centers_x * weights).sum() / total_weight)
        face_y = float((centers_y * weights).sum() / total_weight)

        bounds = FaceBounds(
            min_x=float(centers_x.min() - grid),
            max_x=float(centers_x.max() + grid),
            min_y=float(centers_y.min() - grid),
            max_y=float(centers_y.max() + grid),
        )

        return FaceRegion(
            center=Point2D(face_x, face_y),
            bounds=bounds,
            cell_count=int(len(weights)),
        )
