"""
HeadGaze - head and gaze controlled pointer

Main entry point: camera -> tracking core -> system pointer.

The head center is captured from the first frame with a detected face.
A previously saved eye calibration for the same screen size is reloaded;
without one the pointer follows the head alone.

Usage:
    python -m headgaze.main [--width 1920 --height 1080] [--controls]
"""

import argparse
import sys

from headgaze.core.config import get_default_config
from headgaze.core.controller import Controller
from headgaze.core.session import TrackingSession
from headgaze.storage.calibration_repository import (
    CalibrationRepository,
    CalibrationRepositoryError,
)
from headgaze.vision.camera import Camera, CameraError
from headgaze.os_control.cursor_controller import CursorController
from headgaze.utils.timing import FrameRateLimiter
from headgaze.utils.logger import setup_logger, get_logger


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Head and gaze controlled pointer")
    parser.add_argument("--width", type=int, default=1920, help="Screen width in pixels")
    parser.add_argument("--height", type=int, default=1080, help="Screen height in pixels")
    parser.add_argument("--camera", type=int, default=None, help="Camera index")
    parser.add_argument(
        "--controls",
        action="store_true",
        help="Log jump/crouch/speed control events",
    )
    parser.add_argument(
        "--head-only",
        action="store_true",
        help="Ignore eye calibration and follow the head only",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    config = get_default_config()

    if args.camera is not None:
        config.camera.camera_index = args.camera
    if args.head_only:
        config.fusion.eye_tracking_enabled = False

    setup_logger(config)

    logger = get_logger(__name__)
    logger.info("=" * 60)
    logger.info("HeadGaze Starting")
    logger.info(f"Version: {config.version}")
    logger.info("=" * 60)

    viewport = (args.width, args.height)

    try:
        repository = CalibrationRepository(config.storage)
    except CalibrationRepositoryError as e:
        logger.warning(f"Calibration storage unavailable: {e}")
        repository = None

    controller = Controller(config, repository=repository)
    controller.load_calibration(viewport)
    if args.controls:
        controller.start_controls()

    pointer = CursorController(args.width, args.height)
    limiter = FrameRateLimiter(config.camera.target_fps)
    session = TrackingSession(controller, viewport, pointer)

    try:
        with Camera(config.camera) as camera:
            session.run(camera, limiter)

    except CameraError as e:
        logger.error(f"Camera unavailable: {e}")
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted")

    finally:
        pointer.disable()

    stats = pointer.statistics
    logger.info(
        f"Pointer moves: {stats['total_moves']} applied, {stats['skipped_moves']} rate-limited, "
        f"{len(session.transitions)} control transitions"
    )
    logger.info("Application exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
