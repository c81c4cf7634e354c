"""
Shared pytest fixtures for posture alert tests.
"""
from unittest.mock import MagicMock

import pytest

from posture_alert.detectors.landmarks import Landmark
from posture_alert.utils.constants import LandmarkNames as N


def make_landmarks(**points):
    """Build a landmark set from name=(x, y) keyword arguments."""
    return {name: Landmark(x=float(x), y=float(y)) for name, (x, y) in points.items()}


@pytest.fixture
def standing_landmarks():
    """Upright person: straight leg (180°), narrow shoulders over the hip."""
    return make_landmarks(
        **{
            N.LEFT_SHOULDER: (120, 50),
            N.RIGHT_SHOULDER: (80, 50),
            N.LEFT_HIP: (100, 200),
            N.LEFT_KNEE: (100, 300),
            N.LEFT_ANKLE: (100, 400),
        }
    )


@pytest.fixture
def sitting_landmarks():
    """Seated person: 90° knee, narrow shoulders over the hip."""
    return make_landmarks(
        **{
            N.LEFT_SHOULDER: (120, 50),
            N.RIGHT_SHOULDER: (80, 50),
            N.LEFT_HIP: (100, 200),
            N.LEFT_KNEE: (100, 300),
            N.LEFT_ANKLE: (200, 300),
        }
    )


@pytest.fixture
def fallen_landmarks():
    """Person lying down: shoulder span far wider than shoulder-to-hip height."""
    return make_landmarks(
        **{
            N.LEFT_SHOULDER: (100, 200),
            N.RIGHT_SHOULDER: (200, 210),
            N.LEFT_HIP: (100, 230),
            N.LEFT_KNEE: (200, 235),
            N.LEFT_ANKLE: (300, 240),
        }
    )


@pytest.fixture
def mock_settings(tmp_path):
    """Settings stand-in for components that only read a few attributes."""
    settings = MagicMock()
    settings.COOLDOWN_PERIOD = 15
    settings.DEVICE_ID = "posture-cam-test"
    settings.SIT_CONFIRM_SECONDS = 5.0
    settings.FALL_WINDOW_SECONDS = 3.0
    settings.MIN_VISIBILITY = 0.5
    settings.LOG_DIR = tmp_path / "logs"
    return settings
