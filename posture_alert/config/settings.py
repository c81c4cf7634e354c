"""
Configuration management for posture alert system.
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from ..utils.constants import (
    DEFAULT_CLASSIFIER_CONFIG,
    DEFAULT_DEBOUNCER_CONFIG,
    DEFAULT_MODEL_PATH,
)

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class Settings:
    """
    Centralized configuration management.
    All settings can be overridden via environment variables.
    """

    def __init__(self):
        # Camera settings
        self.CAMERA_ID: int = int(os.getenv("CAMERA_ID", "0"))
        self.CAMERA_RESOLUTION: tuple[int, int] = self._parse_resolution(
            os.getenv("CAMERA_RESOLUTION", "640x480")
        )
        self.CAPTURE_FPS: int = int(os.getenv("CAPTURE_FPS", "30"))

        # Pose landmark settings
        self.MIN_VISIBILITY: float = float(os.getenv("MIN_VISIBILITY", "0.5"))

        # Posture classification thresholds (degrees / ratio)
        self.SIT_ANGLE_MIN: float = self._get_float(
            "SIT_ANGLE_MIN", DEFAULT_CLASSIFIER_CONFIG["sit_angle_min"]
        )
        self.SIT_ANGLE_MAX: float = self._get_float(
            "SIT_ANGLE_MAX", DEFAULT_CLASSIFIER_CONFIG["sit_angle_max"]
        )
        self.STAND_ANGLE_MIN: float = self._get_float(
            "STAND_ANGLE_MIN", DEFAULT_CLASSIFIER_CONFIG["stand_angle_min"]
        )
        self.FALL_WIDTH_RATIO: float = self._get_float(
            "FALL_WIDTH_RATIO", DEFAULT_CLASSIFIER_CONFIG["fall_width_ratio"]
        )

        # Event debouncing (seconds)
        self.SIT_CONFIRM_SECONDS: float = self._get_float(
            "SIT_CONFIRM_SECONDS", DEFAULT_DEBOUNCER_CONFIG["sit_confirm_seconds"]
        )
        self.FALL_WINDOW_SECONDS: float = self._get_float(
            "FALL_WINDOW_SECONDS", DEFAULT_DEBOUNCER_CONFIG["fall_window_seconds"]
        )

        # API settings
        self.ALERT_ENDPOINT: str = os.getenv("ALERT_ENDPOINT", "")
        self.API_KEY: str = os.getenv("API_KEY", "")
        self.API_TIMEOUT: int = int(os.getenv("API_TIMEOUT", "30"))  # seconds
        self.API_RETRY_ATTEMPTS: int = int(os.getenv("API_RETRY_ATTEMPTS", "3"))
        self.API_RETRY_DELAYS: tuple[int, ...] = (1, 2, 4)  # exponential backoff
        self.DEVICE_ID: str = os.getenv("DEVICE_ID", "posture-cam-0")

        # Event management
        self.COOLDOWN_PERIOD: int = int(os.getenv("COOLDOWN_PERIOD", "15"))  # seconds

        # Display settings
        self.HEADLESS_MODE: bool = os.getenv("HEADLESS_MODE", "true").lower() == "true"
        self.PRIVACY_MODE: bool = os.getenv("PRIVACY_MODE", "false").lower() == "true"

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Paths
        self.LOG_DIR: Path = Path(os.getenv("LOG_DIR", "./logs"))
        self.MODEL_PATH: Path = Path(os.getenv("MODEL_PATH", DEFAULT_MODEL_PATH))

        # Validate critical settings
        self._validate()

    def _parse_resolution(self, resolution_str: str) -> tuple[int, int]:
        """
        Parse resolution string like '640x480' into tuple (640, 480).

        Args:
            resolution_str: Resolution in format 'WIDTHxHEIGHT'

        Returns:
            Tuple of (width, height)
        """
        try:
            width, height = resolution_str.lower().split("x")
            return (int(width), int(height))
        except ValueError:
            logger.warning(
                f"Invalid resolution format: {resolution_str}, using default 640x480"
            )
            return (640, 480)

    def _get_float(self, name: str, default: float) -> float:
        """Read a float environment variable, falling back to default."""
        raw = os.getenv(name)
        if raw is None or raw == "":
            return float(default)
        try:
            return float(raw)
        except ValueError:
            logger.warning(f"Invalid {name}: {raw}, using {default}")
            return float(default)

    def _validate(self):
        """Validate critical configuration settings."""
        # Check API endpoint
        if not self.ALERT_ENDPOINT:
            logger.warning("ALERT_ENDPOINT not set - alerts will only be logged")

        # Check model path
        if not self.MODEL_PATH.exists():
            raise FileNotFoundError(
                f"MediaPipe model not found at {self.MODEL_PATH}. "
                "Please ensure pose_landmarker_lite.task is in the correct location."
            )

        # Create directories if they don't exist
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)

        # Validate numeric ranges
        if not 0 <= self.MIN_VISIBILITY <= 1:
            logger.warning(f"Invalid MIN_VISIBILITY: {self.MIN_VISIBILITY}, using 0.5")
            self.MIN_VISIBILITY = 0.5

        if self.SIT_ANGLE_MIN >= self.SIT_ANGLE_MAX:
            logger.warning(
                f"SIT_ANGLE_MIN ({self.SIT_ANGLE_MIN}) >= SIT_ANGLE_MAX "
                f"({self.SIT_ANGLE_MAX}), using defaults"
            )
            self.SIT_ANGLE_MIN = DEFAULT_CLASSIFIER_CONFIG["sit_angle_min"]
            self.SIT_ANGLE_MAX = DEFAULT_CLASSIFIER_CONFIG["sit_angle_max"]

        if self.FALL_WIDTH_RATIO <= 0:
            logger.warning(f"Invalid FALL_WIDTH_RATIO: {self.FALL_WIDTH_RATIO}, using 0.8")
            self.FALL_WIDTH_RATIO = DEFAULT_CLASSIFIER_CONFIG["fall_width_ratio"]

        if self.SIT_CONFIRM_SECONDS < 0:
            logger.warning(
                f"Invalid SIT_CONFIRM_SECONDS: {self.SIT_CONFIRM_SECONDS}, using 5"
            )
            self.SIT_CONFIRM_SECONDS = DEFAULT_DEBOUNCER_CONFIG["sit_confirm_seconds"]

        if self.FALL_WINDOW_SECONDS <= 0:
            logger.warning(
                f"Invalid FALL_WINDOW_SECONDS: {self.FALL_WINDOW_SECONDS}, using 3"
            )
            self.FALL_WINDOW_SECONDS = DEFAULT_DEBOUNCER_CONFIG["fall_window_seconds"]

        logger.info("Configuration validated successfully")

    def get_classifier_config(self) -> dict:
        """Keyword arguments for PostureClassifier."""
        return {
            "sit_angle_min": self.SIT_ANGLE_MIN,
            "sit_angle_max": self.SIT_ANGLE_MAX,
            "stand_angle_min": self.STAND_ANGLE_MIN,
            "fall_width_ratio": self.FALL_WIDTH_RATIO,
        }

    def get_debouncer_config(self) -> dict:
        """Keyword arguments for EventDebouncer."""
        return {
            "sit_confirm_seconds": self.SIT_CONFIRM_SECONDS,
            "fall_window_seconds": self.FALL_WINDOW_SECONDS,
        }

    def log_config(self):
        """Log current configuration (for debugging)."""
        logger.info("=" * 60)
        logger.info("Posture Alert System Configuration")
        logger.info("=" * 60)
        logger.info(f"Camera ID: {self.CAMERA_ID}")
        logger.info(
            f"Camera Resolution: {self.CAMERA_RESOLUTION[0]}x{self.CAMERA_RESOLUTION[1]}"
        )
        logger.info(f"Capture FPS: {self.CAPTURE_FPS}")
        logger.info(f"Min Visibility: {self.MIN_VISIBILITY}")
        logger.info(f"Sitting Knee Angle: {self.SIT_ANGLE_MIN}° - {self.SIT_ANGLE_MAX}°")
        logger.info(f"Standing Knee Angle: > {self.STAND_ANGLE_MIN}°")
        logger.info(f"Fall Width Ratio: {self.FALL_WIDTH_RATIO}")
        logger.info(f"Sit Confirmation: {self.SIT_CONFIRM_SECONDS}s")
        logger.info(f"Fall Window: {self.FALL_WINDOW_SECONDS}s")
        logger.info(f"Cooldown Period: {self.COOLDOWN_PERIOD}s")
        logger.info(f"Headless Mode: {self.HEADLESS_MODE}")
        logger.info(f"Privacy Mode: {self.PRIVACY_MODE}")
        logger.info(f"Alert Endpoint: {self.ALERT_ENDPOINT or 'NOT SET'}")
        logger.info(f"Device ID: {self.DEVICE_ID}")
        logger.info(f"Model Path: {self.MODEL_PATH}")
        logger.info("=" * 60)


# Singleton instance
_settings_instance = None


def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Returns:
        Settings instance with current configuration
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
