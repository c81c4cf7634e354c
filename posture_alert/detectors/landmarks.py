"""
Landmark value type and conversion from MediaPipe pose results.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ..utils.constants import MEDIAPIPE_LANDMARK_NAMES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Landmark:
    """
    A single named body keypoint in image pixel space.

    The y axis grows downward, as in the camera image.
    """

    x: float
    y: float
    confidence: float | None = None


# One detected person: landmark name -> Landmark, missing landmarks absent
LandmarkSet = Mapping[str, Landmark]


def landmarks_from_mediapipe(
    pose_landmarks: Sequence,
    width: int,
    height: int,
    min_visibility: float = 0.5,
) -> dict[str, Landmark]:
    """
    Convert one person's MediaPipe landmarks into a pixel-space landmark set.

    Args:
        pose_landmarks: Sequence of 33 normalized landmarks with x, y, visibility
        width: Image width in pixels
        height: Image height in pixels
        min_visibility: Landmarks below this visibility are left out

    Returns:
        Dictionary of landmark name to Landmark
    """
    landmarks = {}

    for name, lm in zip(MEDIAPIPE_LANDMARK_NAMES, pose_landmarks):
        visibility = getattr(lm, "visibility", None)
        if visibility is not None and visibility < min_visibility:
            continue

        landmarks[name] = Landmark(
            x=float(lm.x) * width,
            y=float(lm.y) * height,
            confidence=None if visibility is None else float(visibility),
        )

    return landmarks


def persons_from_result(
    result, width: int, height: int, min_visibility: float = 0.5
) -> list[dict[str, Landmark]]:
    """
    Convert a PoseLandmarker result into the list of detected persons.

    Only the first pose is kept, the classifier handles one subject.

    Args:
        result: PoseLandmarker detection result (anything with pose_landmarks)
        width: Image width in pixels
        height: Image height in pixels
        min_visibility: Minimum visibility for a landmark to be kept

    Returns:
        Empty list when no pose was detected, otherwise one landmark set
    """
    pose_landmarks = getattr(result, "pose_landmarks", None)
    if not pose_landmarks:
        return []

    if len(pose_landmarks) > 1:
        logger.debug(f"{len(pose_landmarks)} poses detected, using the first one")

    return [
        landmarks_from_mediapipe(
            pose_landmarks[0], width, height, min_visibility=min_visibility
        )
    ]
