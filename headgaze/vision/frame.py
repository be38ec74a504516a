"""
Pixel frame and coordinate primitives.

Privacy: Frames are consumed in-memory for a single analysis pass and
never retained or written to disk.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Point2D:
    """Screen or image-space coordinate."""

    x: float
    y: float

    def to_array(self) -> np.ndarray:
        """Convert to numpy array."""
        return np.array([self.x, self.y], dtype=np.float64)


def flip_x(x: float, width: float) -> float:
    """
    Mirror a horizontal image coordinate.

    Compensates for the left/right inversion of a front-facing camera.
    Applying it twice returns the original coordinate.

    Args:
        x: Image-space x coordinate
        width: Frame width in pixels

    Returns:
        Mirrored x coordinate
    """
    return width - x


@dataclass
class PixelFrame:
    """
    One camera frame as an RGBA pixel grid.

    Attributes:
        pixels: uint8 array of shape (H, W, 4)
    """

    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(
                f"PixelFrame expects an (H, W, 4) RGBA array, got {self.pixels.shape}"
            )

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_rgb(cls, image: np.ndarray) -> "PixelFrame":
        """
        Build a frame from an (H, W, 3) RGB image.

        Alpha is set to fully opaque.
        """
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"Expected an (H, W, 3) RGB array, got {image.shape}")

        height, width = image.shape[:2]
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[..., :3] = image
        pixels[..., 3] = 255
        return cls(pixels=pixels)

    @classmethod
    def blank(cls, width: int, height: int, rgb=(0, 0, 0)) -> "PixelFrame":
        """Create a frame filled with a single colour."""
        pixels = np.zeros((height, width, 4), dtype=np.uint8)
        pixels[..., 0] = rgb[0]
        pixels[..., 1] = rgb[1]
        pixels[..., 2] = rgb[2]
        pixels[..., 3] = 255
        return cls(pixels=pixels)
