"""
Standalone consumer loop around a Controller.

The command-line entry point has no game or UI to report back to the
controller, so the session plays that role: it captures the head center
on the first detected face, forwards cursor positions to a pointer sink,
and lands a jump once vertical motion settles.
"""

from typing import Optional, Tuple

from headgaze.core.controller import Controller, TickResult
from headgaze.control.control_mapper import ControlEvent
from headgaze.vision.frame import PixelFrame
from headgaze.utils.timing import FrameRateLimiter
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)

# Speed adjustments fire every tick and are only logged at DEBUG
SPEED_EVENTS = (ControlEvent.SPEED_UP, ControlEvent.SLOW_DOWN)


class TrackingSession:
    """Drives a Controller from a frame source on behalf of a consumer."""

    def __init__(
        self,
        controller: Controller,
        viewport: Tuple[float, float],
        pointer=None,
    ):
        """
        Initialize session.

        Args:
            controller: Controller to drive
            viewport: (width, height) cursor positions are fused in
            pointer: Sink with move_to(position, viewport) (optional)
        """
        self._controller = controller
        self._viewport = viewport
        self._pointer = pointer
        self._stable_velocity = controller.context.config.control.stable_velocity

        self.ticks = 0
        self.transitions = []

    def step(self, frame: Optional[PixelFrame]) -> TickResult:
        """
        Process one frame and react to the result as the consumer.

        Returns:
            TickResult of the controller
        """
        controller = self._controller
        was_jumping = controller.context.is_jumping

        result = controller.process_frame(frame, self._viewport)
        self.ticks += 1

        if result.face_detected and not controller.calibration.head_calibrated:
            controller.capture_head_center()
            controller.recenter(self._viewport)

        if result.cursor_moved and self._pointer is not None:
            self._pointer.move_to(result.cursor_position, self._viewport)

        # The jump tick itself never lands
        if was_jumping and result.cursor_moved:
            if abs(result.cursor_velocity.y) < self._stable_velocity:
                controller.land()
                logger.info("Landed")

        for event in result.events:
            if event in SPEED_EVENTS:
                logger.debug(f"Control event: {event.value}, speed={result.speed:.1f}")
            else:
                self.transitions.append(event)
                logger.info(f"Control event: {event.value}")

        return result

    def run(
        self,
        camera,
        limiter: Optional[FrameRateLimiter] = None,
        max_frames: Optional[int] = None,
    ):
        """
        Read frames from a camera until interrupted or max_frames is reached.

        Args:
            camera: Source with read_frame() -> Optional[PixelFrame]
            limiter: Paces the loop (optional)
            max_frames: Stop after this many frames (default: run forever)
        """
        while max_frames is None or self.ticks < max_frames:
            self.step(camera.read_frame())

            if limiter is not None:
                limiter.wait()
