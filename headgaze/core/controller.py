"""
Central controller orchestrating the head/gaze tracking pipeline.

All per-tick state lives in one TrackingContext owned by the caller and
passed into on_frame(). Calibration commands mutate the same context
between ticks, so no synchronisation is needed.
"""

from typing import List, Optional, Tuple
from dataclasses import dataclass, field
import time

from headgaze.core.config import AppConfig
from headgaze.vision.frame import PixelFrame, Point2D
from headgaze.vision.frame_analyzer import FrameAnalyzer, FrameAnalysis, GazeObservation
from headgaze.vision.calibrator import CalibrationStore, SubmitResult
from headgaze.vision.gaze_interpolator import GazeInterpolator
from headgaze.vision.cursor_fusion import CursorFusion, CursorState
from headgaze.control.control_mapper import (
    ControlEvent,
    ControlMapper,
    EVENT_STATES,
    MotionState,
)
from headgaze.storage.calibration_repository import (
    CalibrationRepository,
    CalibrationRepositoryError,
)
from headgaze.storage.schema import CalibrationData
from headgaze.utils.timing import FPSCounter, Timer
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)

Viewport = Tuple[float, float]

STATUS_LOG_INTERVAL = 1.0  # seconds


@dataclass
class TickResult:
    """Result of processing a single frame."""

    face_detected: bool
    face_lost: bool = False  # True only on the first tick without a face
    analysis: Optional[FrameAnalysis] = None
    cursor_position: Optional[Point2D] = None
    cursor_velocity: Optional[Point2D] = None
    events: List[ControlEvent] = field(default_factory=list)
    speed: float = 0.0
    fps: float = 0.0

    @property
    def cursor_moved(self) -> bool:
        return self.cursor_position is not None


@dataclass
class TrackingContext:
    """Everything one tick reads or writes."""

    config: AppConfig
    analyzer: FrameAnalyzer
    calibration: CalibrationStore
    fusion: CursorFusion
    control_mapper: ControlMapper

    cursor: Optional[CursorState] = None

    tracking_enabled: bool = True
    control_active: bool = False  # Consumer wants control events
    motion_state: MotionState = MotionState.RUNNING
    is_jumping: bool = False
    speed: float = 0.0

    face_detected: bool = False
    last_analysis: Optional[FrameAnalysis] = None

    frame_count: int = 0
    fps_counter: FPSCounter = field(default_factory=FPSCounter)
    last_status_time: float = 0.0

    @classmethod
    def create(cls, config: AppConfig) -> "TrackingContext":
        """Build a context with all pipeline components from configuration."""
        return cls(
            config=config,
            analyzer=FrameAnalyzer(config.detection, mirror=config.camera.mirror),
            calibration=CalibrationStore(config.calibration),
            fusion=CursorFusion(
                config.fusion,
                GazeInterpolator(min_points=config.calibration.min_points),
            ),
            control_mapper=ControlMapper(config.control),
            speed=config.control.initial_speed,
        )


def on_frame(
    context: TrackingContext,
    frame: Optional[PixelFrame],
    viewport: Viewport,
) -> TickResult:
    """
    Process one frame of the pipeline.

    frame -> face/eye analysis -> (head calibrated, not collecting)
    cursor fusion -> (control active) control events

    Args:
        context: Tracking state, mutated in place
        frame: Current camera frame, or None if no frame is ready
        viewport: Current (width, height) of the consuming surface

    Returns:
        TickResult; a missing frame or disabled tracking yields an inert
        result and leaves the cursor untouched
    """
    context.frame_count += 1
    fps = context.fps_counter.tick()
    _log_status(context)

    if not context.tracking_enabled or frame is None:
        return TickResult(face_detected=context.face_detected, speed=context.speed, fps=fps)

    with Timer("analyze") as timer:
        analysis = context.analyzer.analyze(frame)

    if analysis is None:
        face_lost = context.face_detected
        if face_lost:
            logger.info("Face lost")
        context.face_detected = False
        context.last_analysis = None
        return TickResult(
            face_detected=False,
            face_lost=face_lost,
            speed=context.speed,
            fps=fps,
        )

    if not context.face_detected:
        logger.info("Face detected")
    context.face_detected = True
    context.last_analysis = analysis
    logger.debug(f"Frame {context.frame_count} analyzed in {timer}")

    result = TickResult(face_detected=True, analysis=analysis, speed=context.speed, fps=fps)

    calibration = context.calibration
    if not calibration.head_calibrated or calibration.is_collecting:
        return result

    if context.cursor is None:
        context.cursor = CursorState.centered(viewport)

    context.fusion.update(
        context.cursor,
        analysis.face_center,
        calibration.head_center,
        viewport,
        gaze=analysis.gaze.point,
        calibration_points=calibration.points,
        eye_armed=calibration.eye_tracking_armed,
    )
    result.cursor_position = context.cursor.position
    result.cursor_velocity = context.cursor.velocity

    if context.control_active:
        result.events = _apply_controls(context)
        result.speed = context.speed

    return result


def _apply_controls(context: TrackingContext) -> List[ControlEvent]:
    velocity = context.cursor.velocity
    decision = context.control_mapper.evaluate(
        velocity,
        context.motion_state,
        context.is_jumping,
        context.speed,
    )

    if decision.transition is not None:
        context.motion_state = EVENT_STATES[decision.transition]
        if decision.transition == ControlEvent.JUMP:
            context.is_jumping = True
        logger.debug(
            f"{decision.transition.name} triggered, velocity=({velocity.x:.1f}, {velocity.y:.1f})"
        )

    context.speed = decision.speed
    return decision.events


def _log_status(context: TrackingContext):
    now = time.monotonic()
    if now - context.last_status_time < STATUS_LOG_INTERVAL:
        return

    context.last_status_time = now
    logger.debug(
        f"Frame {context.frame_count}: tracking={context.tracking_enabled}, "
        f"head_calibrated={context.calibration.head_calibrated}, "
        f"eye_armed={context.calibration.eye_tracking_armed}, "
        f"fps={context.fps_counter.fps:.1f}"
    )


class Controller:
    """
    Command facade over a TrackingContext.

    Exposes the calibration commands and tracking switches a consumer
    needs, and bridges the calibration store to disk persistence.
    """

    def __init__(
        self,
        config: AppConfig,
        repository: Optional[CalibrationRepository] = None,
    ):
        """
        Initialize controller.

        Args:
            config: Application configuration
            repository: Calibration persistence (optional)
        """
        self._config = config
        self._context = TrackingContext.create(config)
        self._repository = repository

        logger.info("Controller initialized")

    def process_frame(self, frame: Optional[PixelFrame], viewport: Viewport) -> TickResult:
        """Run one tick; see on_frame()."""
        return on_frame(self._context, frame, viewport)

    # Calibration commands

    def begin_eye_calibration(self):
        """Start eye calibration from the first target."""
        self._context.calibration.begin_eye_calibration()

    def submit_calibration_point(
        self,
        viewport: Viewport,
        observation: Optional[GazeObservation] = None,
    ) -> SubmitResult:
        """
        Record the current gaze for the current calibration target.

        Args:
            viewport: Current (width, height) of the consuming surface
            observation: Gaze to record (default: from the last analysed frame)

        Returns:
            SubmitResult of the calibration store
        """
        if observation is None:
            analysis = self._context.last_analysis
            if analysis is None:
                logger.debug("No face detected, calibration step not advanced")
                return SubmitResult.REJECTED_POOR_SIGNAL
            observation = analysis.gaze

        return self._context.calibration.submit_calibration_point(observation, viewport)

    def capture_head_center(self, face_center: Optional[Point2D] = None) -> bool:
        """
        Calibrate the head reference position.

        Args:
            face_center: Mirror-corrected face centroid (default: last frame)

        Returns:
            True if captured, False if no face is available
        """
        if face_center is None:
            analysis = self._context.last_analysis
            if analysis is None:
                logger.info("No face detected for head calibration")
                return False
            face_center = analysis.face_center

        self._context.calibration.capture_head_center(face_center)
        return True

    def reset_eye_calibration(self):
        """Clear eye calibration; head calibration is kept."""
        self._context.calibration.reset_eye_calibration()

    def recenter(self, viewport: Viewport):
        """Move the cursor to the viewport center with zero velocity."""
        self._context.cursor = CursorState.centered(viewport)
        logger.debug("Cursor recentered")

    # Control mode

    def start_controls(self):
        """Start emitting control events, from a running state at initial speed."""
        context = self._context
        context.control_active = True
        context.motion_state = MotionState.RUNNING
        context.is_jumping = False
        context.speed = self._config.control.initial_speed
        logger.info("Control events enabled")

    def stop_controls(self):
        """Stop emitting control events."""
        self._context.control_active = False
        logger.info("Control events disabled")

    def land(self):
        """Report that the consumer finished a jump."""
        self._context.is_jumping = False
        self._context.motion_state = MotionState.RUNNING

    # Tracking switches

    def enable_tracking(self):
        """Enable frame processing."""
        self._context.tracking_enabled = True
        logger.info("Tracking enabled")

    def disable_tracking(self):
        """Disable frame processing; the cursor keeps its last position."""
        self._context.tracking_enabled = False
        self._context.face_detected = False
        self._context.last_analysis = None
        logger.info("Tracking disabled")

    def toggle_tracking(self) -> bool:
        """
        Toggle tracking enabled state.

        Returns:
            New tracking state (True = enabled)
        """
        if self._context.tracking_enabled:
            self.disable_tracking()
        else:
            self.enable_tracking()
        return self._context.tracking_enabled

    def update_sensitivity(
        self,
        head_sensitivity: Optional[float] = None,
        eye_sensitivity: Optional[float] = None,
    ):
        """
        Update fusion sensitivities.

        Raises:
            ValueError: If a value is outside [1, 10]
        """
        # Validate both before applying either
        if head_sensitivity is not None and not 1.0 <= head_sensitivity <= 10.0:
            raise ValueError("head_sensitivity must be between 1.0 and 10.0")

        if eye_sensitivity is not None and not 1.0 <= eye_sensitivity <= 10.0:
            raise ValueError("eye_sensitivity must be between 1.0 and 10.0")

        fusion = self._config.fusion
        if head_sensitivity is not None:
            fusion.head_sensitivity = head_sensitivity
        if eye_sensitivity is not None:
            fusion.eye_sensitivity = eye_sensitivity

        self._context.fusion.update_config(fusion)

    def set_eye_tracking_enabled(self, enabled: bool):
        """Force head-only fusion when disabled."""
        self._config.fusion.eye_tracking_enabled = enabled
        self._context.fusion.update_config(self._config.fusion)
        logger.info(f"Eye tracking {'enabled' if enabled else 'disabled'}")

    # Persistence

    def save_calibration(self, viewport: Viewport) -> bool:
        """
        Save eye calibration and head center.

        Returns:
            True if saved, False without repository, data or on storage errors
        """
        if self._repository is None:
            return False

        calibration = self._context.calibration
        width, height = viewport
        data = CalibrationData.from_calibration(
            calibration.points,
            calibration.head_center,
            int(width),
            int(height),
        )

        try:
            return self._repository.save(data)
        except CalibrationRepositoryError as e:
            logger.error(f"Failed to save calibration: {e}")
            return False

    def load_calibration(self, viewport: Viewport) -> bool:
        """
        Restore saved calibration if it matches the viewport.

        Returns:
            True if calibration was restored
        """
        if self._repository is None:
            return False

        try:
            data = self._repository.load()
        except CalibrationRepositoryError as e:
            logger.error(f"Failed to load calibration: {e}")
            return False

        if data is None:
            logger.info("No saved calibration found")
            return False

        width, height = viewport
        if not data.is_compatible_with_screen(int(width), int(height)):
            logger.warning(
                f"Calibration viewport mismatch: "
                f"calibrated for {data.screen_width}x{data.screen_height}, "
                f"current {int(width)}x{int(height)}"
            )
            return False

        self._context.calibration.restore(data.to_points(), data.head_center)
        return True

    def delete_calibration(self) -> bool:
        """Delete saved calibration data and reset eye calibration."""
        self.reset_eye_calibration()
        if self._repository is None:
            return False

        try:
            return self._repository.delete()
        except CalibrationRepositoryError as e:
            logger.error(f"Failed to delete calibration: {e}")
            return False

    # Properties

    @property
    def context(self) -> TrackingContext:
        return self._context

    @property
    def calibration(self) -> CalibrationStore:
        """Get calibration store (for UI to show targets and progress)."""
        return self._context.calibration

    @property
    def cursor(self) -> Optional[CursorState]:
        return self._context.cursor

    @property
    def motion_state(self) -> MotionState:
        return self._context.motion_state

    @property
    def speed(self) -> float:
        return self._context.speed

    @property
    def is_tracking_enabled(self) -> bool:
        return self._context.tracking_enabled

    @property
    def fps(self) -> float:
        """Get current processing FPS."""
        return self._context.fps_counter.fps
