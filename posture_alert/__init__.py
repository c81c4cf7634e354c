"""
Posture Alert System using Rule-Based Methods and MediaPipe.

This package provides a modular posture monitoring system with the following components:
- Rule-based posture classifier (sitting, standing, arm raised, fallen)
- Event debouncer (5-second sit confirmation, fall detection)
- Per-frame monitor with drop-frame guard
- Live camera integration and alert delivery
"""

from .detectors.landmarks import Landmark
from .detectors.posture_classifier import PostureClassifier, calculate_angle, classify
from .events.debouncer import DebounceResult, DebounceState, EventDebouncer
from .monitor import FrameResult, PostureMonitor
from .utils.constants import (
    DEFAULT_CLASSIFIER_CONFIG,
    DEFAULT_DEBOUNCER_CONFIG,
    LandmarkNames,
    PoseLabels,
)

__version__ = "1.0.0"

__all__ = [
    "Landmark",
    "PostureClassifier",
    "calculate_angle",
    "classify",
    "DebounceState",
    "DebounceResult",
    "EventDebouncer",
    "FrameResult",
    "PostureMonitor",
    "DEFAULT_CLASSIFIER_CONFIG",
    "DEFAULT_DEBOUNCER_CONFIG",
    "LandmarkNames",
    "PoseLabels",
]
