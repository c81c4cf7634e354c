"""
Utility modules for posture alert system.

Drawing helpers live in .visualization and need OpenCV (camera extra).
"""

from .constants import (
    DEFAULT_CLASSIFIER_CONFIG,
    DEFAULT_DEBOUNCER_CONFIG,
    DEFAULT_MODEL_PATH,
    DEFAULT_POSE_LANDMARKER_CONFIG,
    MEDIAPIPE_LANDMARK_NAMES,
    SKELETON_CONNECTIONS,
    AlertTypes,
    Colors,
    LandmarkNames,
    PoseLabels,
    SittingPhases,
)

__all__ = [
    "LandmarkNames",
    "MEDIAPIPE_LANDMARK_NAMES",
    "SKELETON_CONNECTIONS",
    "PoseLabels",
    "SittingPhases",
    "AlertTypes",
    "DEFAULT_CLASSIFIER_CONFIG",
    "DEFAULT_DEBOUNCER_CONFIG",
    "DEFAULT_POSE_LANDMARKER_CONFIG",
    "DEFAULT_MODEL_PATH",
    "Colors",
]
