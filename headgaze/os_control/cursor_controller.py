"""
OS pointer sink for fused cursor positions.

Uses pynput to move the system pointer to the position computed by the
tracking core. Positions are mapped from the viewport they were fused in
to the physical screen.
"""

import time
from typing import Tuple
from pynput.mouse import Controller as MouseController

from headgaze.vision.frame import Point2D
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


class CursorController:
    """
    Pointer control with rate limiting and bounds checking.

    Safety features:
    - Screen bounds checking
    - Rate limiting to prevent excessive updates
    - Emergency stop (disable)
    """

    def __init__(
        self,
        screen_width: int,
        screen_height: int,
        min_update_interval: float = 0.01,  # 100 Hz max
    ):
        """
        Initialize cursor controller.

        Args:
            screen_width: Screen width in pixels
            screen_height: Screen height in pixels
            min_update_interval: Minimum time between pointer updates (seconds)
        """
        self._screen_width = screen_width
        self._screen_height = screen_height
        self._min_update_interval = min_update_interval

        self._mouse = MouseController()
        self._last_update_time = 0.0
        self._enabled = True

        self._total_moves = 0
        self._skipped_moves = 0

        logger.info(
            f"CursorController initialized: {screen_width}x{screen_height}, "
            f"min_interval={min_update_interval*1000:.1f}ms"
        )

    def move_to(self, position: Point2D, viewport: Tuple[float, float]) -> bool:
        """
        Move the pointer to a fused cursor position.

        Args:
            position: Cursor position in viewport coordinates
            viewport: (width, height) the position was computed for

        Returns:
            True if the pointer moved, False if skipped (rate limited or disabled)
        """
        if not self._enabled:
            return False

        current_time = time.perf_counter()
        if current_time - self._last_update_time < self._min_update_interval:
            self._skipped_moves += 1
            return False

        view_width, view_height = viewport
        x = int(position.x * self._screen_width / view_width)
        y = int(position.y * self._screen_height / view_height)

        x = max(0, min(x, self._screen_width - 1))
        y = max(0, min(y, self._screen_height - 1))

        try:
            self._mouse.position = (x, y)
        except (OSError, RuntimeError, ValueError) as e:
            # Backend failures (display gone, permission revoked) skip this move
            logger.error(f"Failed to move cursor: {e}")
            self._skipped_moves += 1
            return False

        self._last_update_time = current_time
        self._total_moves += 1
        return True

    def enable(self):
        """Enable pointer control."""
        self._enabled = True
        logger.info("Cursor control enabled")

    def disable(self):
        """Disable pointer control (emergency stop)."""
        self._enabled = False
        logger.info("Cursor control disabled")

    @property
    def statistics(self) -> dict:
        """Get pointer control statistics."""
        attempts = self._total_moves + self._skipped_moves
        return {
            "total_moves": self._total_moves,
            "skipped_moves": self._skipped_moves,
            "effective_rate": self._total_moves / attempts if attempts > 0 else 0.0,
        }
