"""
Camera frame source.

Wraps an OpenCV capture device and hands out PixelFrames, or None when
no frame is ready. The tracking core never touches the device itself.

Privacy: All frames processed in-memory only, never saved to disk.
"""

import cv2
from typing import Optional

from headgaze.core.config import CameraConfig
from headgaze.vision.frame import PixelFrame
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


class CameraError(Exception):
    """Camera-related errors."""

    pass


class Camera:
    """
    Camera capture producing RGBA PixelFrames.

    Frames are resized to the configured analysis resolution so the
    detection thresholds keep their meaning across devices.
    """

    def __init__(self, config: CameraConfig):
        """
        Initialize camera.

        Args:
            config: Camera configuration
        """
        self._config = config
        self._capture: Optional[cv2.VideoCapture] = None
        self._is_open = False
        self._frame_count = 0

        logger.info(f"Initializing camera {config.camera_index}")

    def open(self) -> bool:
        """
        Open camera and configure capture settings.

        Returns:
            True if successful

        Raises:
            CameraError: If camera cannot be opened
        """
        if self._is_open:
            logger.warning("Camera already open")
            return True

        self._capture = cv2.VideoCapture(self._config.camera_index)

        if not self._capture.isOpened():
            self._capture.release()
            self._capture = None
            error_msg = (
                f"Failed to open camera {self._config.camera_index}. "
                "Check if camera is connected and not used by another application."
            )
            logger.error(error_msg)
            raise CameraError(error_msg)

        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, self._config.frame_width)
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self._config.frame_height)
        self._capture.set(cv2.CAP_PROP_FPS, self._config.target_fps)

        # Skip first frames which may be black or corrupted
        for _ in range(self._config.warmup_frames):
            self._capture.read()

        self._is_open = True
        self._frame_count = 0

        actual_width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Camera opened: {actual_width}x{actual_height}")

        return True

    def read_frame(self) -> Optional[PixelFrame]:
        """
        Read the next frame.

        Returns:
            PixelFrame at the configured resolution, or None if no frame
            is ready (a stalled camera is not an error)
        """
        if not self._is_open or self._capture is None:
            logger.warning("Attempted to read from closed camera")
            return None

        ok, frame = self._capture.read()
        if not ok or frame is None:
            logger.debug("No frame ready")
            return None

        size = (self._config.frame_width, self._config.frame_height)
        if (frame.shape[1], frame.shape[0]) != size:
            frame = cv2.resize(frame, size, interpolation=cv2.INTER_AREA)

        # OpenCV delivers BGR
        rgba = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)

        self._frame_count += 1
        return PixelFrame(pixels=rgba)

    def close(self):
        """
        Release camera resources.

        Safe to call multiple times.
        """
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("Camera closed")

        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
