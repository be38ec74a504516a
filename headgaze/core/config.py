"""
Configuration management for HeadGaze.

All tunable thresholds of the tracking pipeline with sensible defaults.
Uses dataclasses for type safety and validation.
"""

from dataclasses import dataclass, field
from typing import Tuple
import os
from pathlib import Path


@dataclass
class CameraConfig:
    """Camera capture configuration."""

    camera_index: int = 0  # Default camera
    frame_width: int = 640  # Reference analysis resolution
    frame_height: int = 480
    target_fps: int = 30
    warmup_frames: int = 10  # Frames to skip after camera init

    # Front-facing cameras deliver an un-mirrored image
    mirror: bool = True


@dataclass
class DetectionConfig:
    """Face and eye detection thresholds."""

    # Side of the square cells scanned for skin tone (pixels)
    grid_size: int = 15

    # Fraction of skin pixels needed for a cell to count as face region
    min_skin_fraction: float = 0.4

    # Skin-tone predicate channel thresholds
    skin_min_red: int = 95
    skin_min_green: int = 40
    skin_min_blue: int = 20
    skin_min_spread: int = 15  # max(r,g,b) - min(r,g,b)
    skin_min_red_green_gap: int = 15  # |r - g|

    # Eye search regions, as fractions of the face box
    eye_offset_x: float = 0.2  # Eye centre distance from face centre (of width)
    eye_region_y: float = 0.3  # Eye band centre below top of face (of height)
    eye_region_height: float = 0.4
    eye_region_width: float = 0.15

    # Sampling stride inside an eye region (pixels, both axes)
    eye_stride: int = 2

    # Darkest sample must be below this mean brightness to count as an eye
    eye_max_brightness: float = 80.0


@dataclass
class CalibrationConfig:
    """Calibration procedure configuration."""

    # Target positions (normalized 0-1 viewport coordinates)
    # Order: top-left, top-right, center, bottom-left, bottom-right
    target_positions: Tuple[Tuple[float, float], ...] = (
        (0.2, 0.2),
        (0.8, 0.2),
        (0.5, 0.5),
        (0.2, 0.8),
        (0.8, 0.8),
    )

    # Interpolation needs at least this many points
    min_points: int = 3


@dataclass
class FusionConfig:
    """Head/eye fusion configuration."""

    # Scales head displacement (image pixels -> screen pixels)
    head_sensitivity: float = 3.0  # Range: 1-10

    # Scales eye delta and IDW weight
    eye_sensitivity: float = 5.0  # Range: 1-10

    # Force head-only fusion even when calibrated
    eye_tracking_enabled: bool = True

    # Share of the head estimate when both signals are available
    head_weight: float = 0.4

    # Eye sensitivity is divided by this before scaling the eye delta
    eye_sensitivity_divisor: float = 5.0


@dataclass
class ControlConfig:
    """Velocity thresholds for discrete control events."""

    jump_velocity: float = -15.0  # Upward motion is negative y
    crouch_velocity: float = 10.0
    stable_velocity: float = 5.0
    slow_velocity: float = -10.0  # Leftward motion is negative x

    initial_speed: float = 5.0
    min_speed: float = 2.0
    max_speed: float = 8.0
    slow_step: float = 0.5
    speed_up_step: float = 0.1


@dataclass
class StorageConfig:
    """Data storage configuration."""

    # User data directory (where calibration data is stored)
    data_dir: Path = field(default_factory=lambda: Path.home() / ".headgaze")

    # Calibration data filename
    calibration_filename: str = "calibration_data.json"

    # Log filename (optional, off by default)
    log_filename: str = "headgaze.log"

    # Enable file logging (OFF by default for privacy)
    enable_file_logging: bool = False

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    @property
    def calibration_path(self) -> Path:
        """Get full path to calibration data file."""
        return self.data_dir / self.calibration_filename

    @property
    def log_path(self) -> Path:
        """Get full path to log file."""
        return self.data_dir / self.log_filename


@dataclass
class AppConfig:
    """Main application configuration."""

    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    fusion: FusionConfig = field(default_factory=FusionConfig)
    control: ControlConfig = field(default_factory=ControlConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # Application version
    version: str = "0.1.0"

    # Log level from environment or default to WARNING
    log_level: str = field(
        default_factory=lambda: os.getenv("HEADGAZE_LOG_LEVEL", "WARNING")
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """Validate configuration parameters."""
        # Fusion config validation
        if not 1.0 <= self.fusion.head_sensitivity <= 10.0:
            raise ValueError("head_sensitivity must be between 1.0 and 10.0")

        if not 1.0 <= self.fusion.eye_sensitivity <= 10.0:
            raise ValueError("eye_sensitivity must be between 1.0 and 10.0")

        if not 0.0 <= self.fusion.head_weight <= 1.0:
            raise ValueError("head_weight must be between 0.0 and 1.0")

        if self.fusion.eye_sensitivity_divisor <= 0:
            raise ValueError("eye_sensitivity_divisor must be positive")

        # Detection config validation
        if self.detection.grid_size < 1:
            raise ValueError("grid_size must be at least 1")

        if not 0.0 <= self.detection.min_skin_fraction < 1.0:
            raise ValueError("min_skin_fraction must be between 0.0 and 1.0")

        if self.detection.eye_stride < 1:
            raise ValueError("eye_stride must be at least 1")

        # Calibration config validation
        if len(self.calibration.target_positions) < self.calibration.min_points:
            raise ValueError("Need at least as many targets as min_points")

        for norm_x, norm_y in self.calibration.target_positions:
            if not (0.0 <= norm_x <= 1.0 and 0.0 <= norm_y <= 1.0):
                raise ValueError("Calibration targets must be normalized to 0-1")

        # Control config validation
        if not self.control.min_speed <= self.control.initial_speed <= self.control.max_speed:
            raise ValueError("initial_speed must lie between min_speed and max_speed")

        # Camera config validation
        if self.camera.target_fps < 1 or self.camera.target_fps > 60:
            raise ValueError("target_fps must be between 1 and 60")


def get_default_config() -> AppConfig:
    """
    Get default application configuration.

    Returns:
        AppConfig instance with default values
    """
    return AppConfig()
