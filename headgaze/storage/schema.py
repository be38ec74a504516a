"""
Calibration data schema and validation.

Privacy: Only stores numeric calibration parameters,
no biometric data, no images, no personal information.
"""

import math
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime

from headgaze.vision.calibrator import CalibrationPoint
from headgaze.vision.frame import Point2D
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CalibrationRecord:
    """
    Serialized calibration point.

    Privacy: Contains only:
    - Screen coordinates (pixels)
    - Gaze position in the camera image (pixels)
    NO biometric templates, NO facial data.
    """

    # Target position on screen (pixels)
    screen_x: float
    screen_y: float

    # Corresponding mirror-corrected gaze point (image pixels)
    eye_x: float
    eye_y: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalibrationRecord":
        """Create from dictionary."""
        return cls(**data)

    @classmethod
    def from_point(cls, point: CalibrationPoint) -> "CalibrationRecord":
        return cls(
            screen_x=point.screen.x,
            screen_y=point.screen.y,
            eye_x=point.eye.x,
            eye_y=point.eye.y,
        )

    def to_point(self) -> CalibrationPoint:
        return CalibrationPoint(
            screen=Point2D(self.screen_x, self.screen_y),
            eye=Point2D(self.eye_x, self.eye_y),
        )

    def validate(self) -> bool:
        """
        Validate calibration record.

        Returns:
            True if valid, raises ValueError if invalid
        """
        values = (self.screen_x, self.screen_y, self.eye_x, self.eye_y)
        if not all(math.isfinite(v) for v in values):
            raise ValueError("Coordinates must be finite")

        # Screen coordinates should be positive
        if self.screen_x < 0 or self.screen_y < 0:
            raise ValueError("Screen coordinates must be non-negative")

        return True


@dataclass
class CalibrationData:
    """
    Complete calibration dataset.

    Privacy: Contains only numeric mapping parameters.
    """

    # Schema version for future compatibility
    version: str = "1.0"

    # Timestamp of calibration
    timestamp: str = ""

    # Viewport size at time of calibration
    screen_width: int = 0
    screen_height: int = 0

    # Mirror-corrected head reference (image pixels), if captured
    head_x: Optional[float] = None
    head_y: Optional[float] = None

    # Calibration points (typically 5)
    points: List[CalibrationRecord] = None

    def __post_init__(self):
        """Initialize default values."""
        if self.points is None:
            self.points = []

        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "screen_width": self.screen_width,
            "screen_height": self.screen_height,
            "head_x": self.head_x,
            "head_y": self.head_y,
            "points": [point.to_dict() for point in self.points],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalibrationData":
        """Create from dictionary."""
        points = [CalibrationRecord.from_dict(p) for p in data.get("points", [])]

        return cls(
            version=data.get("version", "1.0"),
            timestamp=data.get("timestamp", ""),
            screen_width=data.get("screen_width", 0),
            screen_height=data.get("screen_height", 0),
            head_x=data.get("head_x"),
            head_y=data.get("head_y"),
            points=points,
        )

    @classmethod
    def from_calibration(
        cls,
        points: List[CalibrationPoint],
        head_center: Optional[Point2D],
        screen_width: int,
        screen_height: int,
    ) -> "CalibrationData":
        """Build a dataset from live calibration state."""
        return cls(
            screen_width=screen_width,
            screen_height=screen_height,
            head_x=head_center.x if head_center is not None else None,
            head_y=head_center.y if head_center is not None else None,
            points=[CalibrationRecord.from_point(p) for p in points],
        )

    def validate(self) -> bool:
        """
        Validate calibration data.

        Returns:
            True if valid, raises ValueError if invalid
        """
        # Check version
        if not self.version:
            raise ValueError("Missing version")

        # Check screen dimensions
        if self.screen_width <= 0 or self.screen_height <= 0:
            raise ValueError("Invalid screen dimensions")

        # Check points
        if not self.points or len(self.points) < 3:
            raise ValueError("Need at least 3 calibration points")

        # Validate each point
        for i, point in enumerate(self.points):
            try:
                point.validate()
            except ValueError as e:
                raise ValueError(f"Invalid calibration point {i}: {e}")

        # Head center is all or nothing
        if (self.head_x is None) != (self.head_y is None):
            raise ValueError("Incomplete head center")

        # Check timestamp format
        try:
            datetime.fromisoformat(self.timestamp)
        except ValueError:
            raise ValueError("Invalid timestamp format")

        logger.debug(f"Calibration data validated: {len(self.points)} points")
        return True

    def is_compatible_with_screen(self, width: int, height: int) -> bool:
        """
        Check if calibration is compatible with current viewport.

        Args:
            width: Current viewport width
            height: Current viewport height

        Returns:
            True if compatible (same size)
        """
        return self.screen_width == width and self.screen_height == height

    @property
    def head_center(self) -> Optional[Point2D]:
        if self.head_x is None or self.head_y is None:
            return None
        return Point2D(self.head_x, self.head_y)

    def to_points(self) -> List[CalibrationPoint]:
        """Convert records back to calibration points."""
        return [record.to_point() for record in self.points]
