import logging
import math

import numpy as np

from ..utils.constants import (
    ANGLE_EPSILON,
    DEFAULT_CLASSIFIER_CONFIG,
    LandmarkNames,
    PoseLabels,
)
from .landmarks import Landmark, LandmarkSet

logger = logging.getLogger(__name__)


def calculate_angle(a: Landmark, b: Landmark, c: Landmark) -> float:
    """
    Calculate the angle at vertex b formed by the rays b->a and b->c.

    Args:
        a: First neighbor landmark
        b: Vertex landmark
        c: Second neighbor landmark

    Returns:
        Angle in degrees within [0, 180], or NaN for undefined coordinates
    """
    ba = np.array([a.x - b.x, a.y - b.y], dtype=float)
    bc = np.array([c.x - b.x, c.y - b.y], dtype=float)

    cos_angle = np.dot(ba, bc) / (
        np.linalg.norm(ba) * np.linalg.norm(bc) + ANGLE_EPSILON
    )
    cos_angle = np.clip(cos_angle, -1.0, 1.0)
    angle = np.arccos(cos_angle)

    return float(np.degrees(angle))


class PostureClassifier:
    """
    Rule-based posture classification from named 2D body landmarks.

    Rules are evaluated in priority order, first match wins:
    1. Missing left hip, knee or ankle: unknown
    2. Shoulder span wider than fall_width_ratio * shoulder-to-hip height: fallen
    3. Knee angle inside (sit_angle_min, sit_angle_max): sitting
       Knee angle above stand_angle_min: standing
    4. Left wrist above left shoulder: arm_raised
    5. Otherwise: unknown

    Landmarks used:
    - left_hip, left_knee, left_ankle (required)
    - left_shoulder, right_shoulder (fall check)
    - left_wrist, left_shoulder (arm raise check)
    """

    REQUIRED_LANDMARKS = (
        LandmarkNames.LEFT_HIP,
        LandmarkNames.LEFT_KNEE,
        LandmarkNames.LEFT_ANKLE,
    )

    def __init__(
        self,
        sit_angle_min: float = 70.0,
        sit_angle_max: float = 110.0,
        stand_angle_min: float = 160.0,
        fall_width_ratio: float = 0.8,
    ):
        """
        Initialize posture classifier with rule thresholds.

        Args:
            sit_angle_min: Knee angle (degrees) above which a pose can be sitting
            sit_angle_max: Knee angle (degrees) below which a pose can be sitting
            stand_angle_min: Knee angle (degrees) above which a pose is standing
            fall_width_ratio: Shoulder width / torso height ratio marking a fall
        """
        if sit_angle_min >= sit_angle_max:
            raise ValueError(
                f"Invalid sitting range: {sit_angle_min}° - {sit_angle_max}°"
            )
        if fall_width_ratio <= 0:
            raise ValueError(f"Invalid fall width ratio: {fall_width_ratio}")

        self.sit_angle_min = sit_angle_min
        self.sit_angle_max = sit_angle_max
        self.stand_angle_min = stand_angle_min
        self.fall_width_ratio = fall_width_ratio

        logger.info("PostureClassifier initialized")
        logger.info(f"  Sitting knee angle: {sit_angle_min}° - {sit_angle_max}°")
        logger.info(f"  Standing knee angle: > {stand_angle_min}°")
        logger.info(f"  Fall width ratio: {fall_width_ratio}")

    def _is_fallen(
        self, landmarks: LandmarkSet, left_hip: Landmark
    ) -> tuple[bool, dict]:
        left_shoulder = landmarks.get(LandmarkNames.LEFT_SHOULDER)
        right_shoulder = landmarks.get(LandmarkNames.RIGHT_SHOULDER)

        if left_shoulder is None or right_shoulder is None:
            return False, {"body_width": None, "body_height": None}

        width = abs(left_shoulder.x - right_shoulder.x)
        height = abs(left_shoulder.y - left_hip.y)

        # NaN comparisons are False, so undefined geometry never marks a fall
        is_fallen = bool(width > self.fall_width_ratio * height)

        return is_fallen, {"body_width": width, "body_height": height}

    def _is_arm_raised(self, landmarks: LandmarkSet) -> bool:
        left_wrist = landmarks.get(LandmarkNames.LEFT_WRIST)
        left_shoulder = landmarks.get(LandmarkNames.LEFT_SHOULDER)

        if left_wrist is None or left_shoulder is None:
            return False

        # Image y grows downward
        return bool(left_wrist.y < left_shoulder.y)

    def classify_with_info(self, landmarks: LandmarkSet) -> tuple[str, dict]:
        """
        Classify one person's posture and report how the label was reached.

        Args:
            landmarks: Mapping of landmark name to Landmark for one person

        Returns:
            Tuple of (label, info_dict)
        """
        missing = [name for name in self.REQUIRED_LANDMARKS if name not in landmarks]
        if missing:
            return PoseLabels.UNKNOWN, {
                "rule": "missing_landmarks",
                "missing": missing,
                "knee_angle": None,
            }

        left_hip = landmarks[LandmarkNames.LEFT_HIP]
        left_knee = landmarks[LandmarkNames.LEFT_KNEE]
        left_ankle = landmarks[LandmarkNames.LEFT_ANKLE]

        is_fallen, fall_info = self._is_fallen(landmarks, left_hip)
        if is_fallen:
            return PoseLabels.FALLEN, {"rule": "fall_width", **fall_info}

        knee_angle = calculate_angle(left_hip, left_knee, left_ankle)
        info = {"knee_angle": knee_angle, **fall_info}

        if not math.isnan(knee_angle):
            if self.sit_angle_min < knee_angle < self.sit_angle_max:
                return PoseLabels.SITTING, {"rule": "knee_angle", **info}
            if knee_angle > self.stand_angle_min:
                return PoseLabels.STANDING, {"rule": "knee_angle", **info}

        if self._is_arm_raised(landmarks):
            return PoseLabels.ARM_RAISED, {"rule": "wrist_above_shoulder", **info}

        return PoseLabels.UNKNOWN, {"rule": "no_match", **info}

    def classify(self, landmarks: LandmarkSet) -> str:
        """
        Classify one person's posture.

        Args:
            landmarks: Mapping of landmark name to Landmark for one person

        Returns:
            One of the PoseLabels values (never NO_PERSON)
        """
        label, _ = self.classify_with_info(landmarks)
        return label

    def __repr__(self) -> str:
        return (
            f"PostureClassifier("
            f"sit={self.sit_angle_min}-{self.sit_angle_max}, "
            f"stand>{self.stand_angle_min}, "
            f"fall_ratio={self.fall_width_ratio})"
        )


_default_classifier: PostureClassifier | None = None


def classify(landmarks: LandmarkSet) -> str:
    """Classify a landmark set with the default thresholds."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = PostureClassifier(**DEFAULT_CLASSIFIER_CONFIG)
    return _default_classifier.classify(landmarks)
