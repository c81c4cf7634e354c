"""Posture classification from pose landmarks."""

from .landmarks import Landmark, landmarks_from_mediapipe, persons_from_result
from .posture_classifier import PostureClassifier, calculate_angle, classify

__all__ = [
    "Landmark",
    "landmarks_from_mediapipe",
    "persons_from_result",
    "PostureClassifier",
    "calculate_angle",
    "classify",
]
