"""
Per-frame face and gaze analysis.

Runs face localisation, derives two eye search regions from the face box,
locates each eye and combines them into a single gaze point.

Mirror correction happens here and only here: the returned face center
and gaze point are already horizontally flipped, so every downstream
consumer works in "motion direction" space.
"""

from typing import Optional
from dataclasses import dataclass

from headgaze.core.config import DetectionConfig
from headgaze.vision.frame import PixelFrame, Point2D, flip_x
from headgaze.vision.face_locator import FaceLocator, FaceRegion
from headgaze.vision.eye_locator import EyeLocator, EyeObservation, EyeRegion
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GazeObservation:
    """
    Gaze derived from one or two eye detections.

    Eye observations are in raw image space. `point` is mirror-corrected
    and is None exactly when neither eye was detected.
    """

    left: EyeObservation
    right: EyeObservation
    point: Optional[Point2D]

    @property
    def has_signal(self) -> bool:
        """True if at least one eye was detected."""
        return self.point is not None and (self.left.detected or self.right.detected)

    @classmethod
    def absent(cls) -> "GazeObservation":
        return cls(
            left=EyeObservation.missing(),
            right=EyeObservation.missing(),
            point=None,
        )


@dataclass(frozen=True)
class FrameAnalysis:
    """Result of analysing one frame."""

    face: FaceRegion  # Raw image space
    face_center: Point2D  # Mirror-corrected
    gaze: GazeObservation
    frame_width: int
    frame_height: int


def combine_eyes(left: EyeObservation, right: EyeObservation) -> Optional[Point2D]:
    """
    Combine eye observations into one image-space gaze point.

    Args:
        left: Left eye candidate
        right: Right eye candidate

    Returns:
        Midpoint of both detected eyes, the single detected eye, or None
    """
    if left.detected and right.detected:
        return Point2D((left.x + right.x) / 2, (left.y + right.y) / 2)
    if left.detected:
        return Point2D(left.x, left.y)
    if right.detected:
        return Point2D(right.x, right.y)
    return None


class FrameAnalyzer:
    """Orchestrates face and eye localisation once per frame."""

    def __init__(self, config: DetectionConfig, mirror: bool = True):
        """
        Initialize analyzer.

        Args:
            config: Detection thresholds
            mirror: Flip x coordinates to compensate for a front-facing camera
        """
        self._config = config
        self._mirror = mirror
        self._face_locator = FaceLocator(config)
        self._eye_locator = EyeLocator(config)

    def eye_regions(self, face: FaceRegion) -> tuple[EyeRegion, EyeRegion]:
        """
        Derive left and right eye search regions from a face box.

        Returns:
            (left_region, right_region) in image coordinates
        """
        bounds = face.bounds
        face_width = bounds.width
        face_height = bounds.height

        center_y = bounds.min_y + face_height * self._config.eye_region_y
        region_height = face_height * self._config.eye_region_height
        region_width = face_width * self._config.eye_region_width
        offset = face_width * self._config.eye_offset_x

        left = EyeRegion(face.center.x - offset, center_y, region_width, region_height)
        right = EyeRegion(face.center.x + offset, center_y, region_width, region_height)
        return left, right

    def analyze(self, frame: PixelFrame) -> Optional[FrameAnalysis]:
        """
        Analyse one frame.

        Args:
            frame: Current camera frame

        Returns:
            FrameAnalysis, or None if no face was found
        """
        face = self._face_locator.locate(frame)
        if face is None:
            return None

        left_region, right_region = self.eye_regions(face)
        left = self._eye_locator.locate(frame, left_region)
        right = self._eye_locator.locate(frame, right_region)

        gaze_point = combine_eyes(left, right)
        if gaze_point is not None:
            gaze_point = self._to_motion_space(gaze_point, frame.width)

        analysis = FrameAnalysis(
            face=face,
            face_center=self._to_motion_space(face.center, frame.width),
            gaze=GazeObservation(left=left, right=right, point=gaze_point),
            frame_width=frame.width,
            frame_height=frame.height,
        )

        logger.debug(
            f"Face at ({face.center.x:.1f}, {face.center.y:.1f}), "
            f"eyes detected: left={left.detected} right={right.detected}"
        )
        return analysis

    def _to_motion_space(self, point: Point2D, width: int) -> Point2D:
        if not self._mirror:
            return point
        return Point2D(flip_x(point.x, width), point.y)
