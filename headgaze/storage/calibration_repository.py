"""
Calibration data persistence with security controls.

Privacy & Security:
- Local-only storage (no network)
- Path traversal protection
- Schema validation
- Safe JSON serialization
"""

import json
from pathlib import Path
from typing import Optional

from headgaze.core.config import StorageConfig
from headgaze.storage.schema import CalibrationData
from headgaze.utils.logger import get_logger

logger = get_logger(__name__)


class CalibrationRepositoryError(Exception):
    """Calibration storage errors."""

    pass


class CalibrationRepository:
    """
    JSON file storage for calibration data.

    Privacy: Stores only numeric calibration parameters locally.
    No biometric data, no network access.
    """

    def __init__(self, config: StorageConfig):
        """
        Initialize repository.

        Args:
            config: Storage configuration

        Raises:
            CalibrationRepositoryError: If storage path is invalid
        """
        self._config = config

        # Validate and resolve storage path (prevent traversal attacks)
        try:
            self._data_dir = config.data_dir.resolve(strict=False)
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except (RuntimeError, OSError) as e:
            raise CalibrationRepositoryError(f"Invalid storage path: {e}")

        self._calibration_path = self._data_dir / config.calibration_filename

        if not self._is_safe_path(self._calibration_path):
            raise CalibrationRepositoryError("Path traversal detected")

        logger.info(f"CalibrationRepository initialized: {self._calibration_path}")

    def save(self, calibration: CalibrationData) -> bool:
        """
        Save calibration data to disk.

        Args:
            calibration: Calibration data to save

        Returns:
            True if successful

        Raises:
            CalibrationRepositoryError: If validation or writing fails
        """
        try:
            calibration.validate()

            data_dict = calibration.to_dict()

            # Write to temporary file first (atomic write)
            temp_path = self._calibration_path.with_suffix(".tmp")

            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data_dict, f, indent=2, ensure_ascii=False)

            temp_path.replace(self._calibration_path)

            logger.info(f"Calibration saved: {len(calibration.points)} points")
            return True

        except (OSError, ValueError) as e:
            error_msg = f"Failed to save calibration: {e}"
            logger.error(error_msg)
            raise CalibrationRepositoryError(error_msg) from e

    def load(self) -> Optional[CalibrationData]:
        """
        Load calibration data from disk.

        Returns:
            CalibrationData if found and valid, None if no file exists

        Raises:
            CalibrationRepositoryError: If the file is corrupted or invalid
        """
        if not self._calibration_path.exists():
            logger.info("No calibration data found")
            return None

        try:
            with open(self._calibration_path, "r", encoding="utf-8") as f:
                data_dict = json.load(f)

            calibration = CalibrationData.from_dict(data_dict)
            calibration.validate()

            logger.info(f"Calibration loaded: {len(calibration.points)} points")
            return calibration

        except json.JSONDecodeError as e:
            error_msg = f"Corrupted calibration file: {e}"
            logger.error(error_msg)
            raise CalibrationRepositoryError(error_msg) from e

        except (TypeError, ValueError) as e:
            error_msg = f"Invalid calibration data: {e}"
            logger.error(error_msg)
            raise CalibrationRepositoryError(error_msg) from e

        except OSError as e:
            error_msg = f"Failed to load calibration: {e}"
            logger.error(error_msg)
            raise CalibrationRepositoryError(error_msg) from e

    def delete(self) -> bool:
        """
        Delete calibration data.

        Returns:
            True if deleted, False if file didn't exist
        """
        try:
            if self._calibration_path.exists():
                self._calibration_path.unlink()
                logger.info("Calibration data deleted")
                return True

            logger.info("No calibration data to delete")
            return False

        except OSError as e:
            logger.error(f"Failed to delete calibration: {e}")
            raise CalibrationRepositoryError(f"Failed to delete calibration: {e}")

    def exists(self) -> bool:
        """Check if calibration data exists."""
        return self._calibration_path.exists()

    @property
    def path(self) -> Path:
        return self._calibration_path

    def _is_safe_path(self, path: Path) -> bool:
        """
        Check if path is safe (within data directory).

        Args:
            path: Path to check

        Returns:
            True if safe, False if potential traversal attack
        """
        try:
            resolved = path.resolve(strict=False)
            return resolved.parent == self._data_dir
        except (RuntimeError, OSError):
            return False
