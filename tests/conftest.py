"""
Shared fixtures: synthetic camera frames.
"""

import pytest

from headgaze.core.config import DetectionConfig
from headgaze.vision.frame import PixelFrame

SKIN = (200, 120, 90)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

# Skin block aligned to the 15px grid, centered at (225, 165)
FACE_BOX = (150, 90, 300, 240)


def _paint(frame, x0, y0, x1, y1, rgb):
    frame.pixels[y0:y1, x0:x1, 0] = rgb[0]
    frame.pixels[y0:y1, x0:x1, 1] = rgb[1]
    frame.pixels[y0:y1, x0:x1, 2] = rgb[2]
    return frame


@pytest.fixture
def detection_config():
    return DetectionConfig()


@pytest.fixture
def blank_frame():
    """Factory for a single-colour frame."""

    def make(width=640, height=480, rgb=WHITE):
        return PixelFrame.blank(width, height, rgb)

    return make


@pytest.fixture
def paint():
    """Paint a rectangle [x0, x1) x [y0, y1) on a frame."""
    return _paint


@pytest.fixture
def face_frame():
    """
    Factory for a white 640x480 frame with one skin block.

    Args:
        dx, dy: Shift of the block from FACE_BOX
        left_eye, right_eye: Paint dark 4x4 squares where the eye
            search lands for the unshifted block
    """

    def make(dx=0, dy=0, left_eye=False, right_eye=False):
        frame = PixelFrame.blank(640, 480, WHITE)
        x0, y0, x1, y1 = FACE_BOX
        _paint(frame, x0 + dx, y0 + dy, x1 + dx, y1 + dy, SKIN)

        if left_eye:
            _paint(frame, 190 + dx, 130 + dy, 194 + dx, 134 + dy, BLACK)
        if right_eye:
            _paint(frame, 256 + dx, 130 + dy, 260 + dx, 134 + dy, BLACK)

        return frame

    return make
