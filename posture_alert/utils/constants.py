"""
Constants and configurations for posture alert system.
"""


# Landmark names used as keys of a frame's landmark set
class LandmarkNames:
    """Names of the body landmarks a frame's landmark set is keyed by."""

    NOSE = "nose"
    LEFT_EYE_INNER = "left_eye_inner"
    LEFT_EYE = "left_eye"
    LEFT_EYE_OUTER = "left_eye_outer"
    RIGHT_EYE_INNER = "right_eye_inner"
    RIGHT_EYE = "right_eye"
    RIGHT_EYE_OUTER = "right_eye_outer"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    MOUTH_LEFT = "mouth_left"
    MOUTH_RIGHT = "mouth_right"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_PINKY = "left_pinky"
    RIGHT_PINKY = "right_pinky"
    LEFT_INDEX = "left_index"
    RIGHT_INDEX = "right_index"
    LEFT_THUMB = "left_thumb"
    RIGHT_THUMB = "right_thumb"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"
    LEFT_HEEL = "left_heel"
    RIGHT_HEEL = "right_heel"
    LEFT_FOOT_INDEX = "left_foot_index"
    RIGHT_FOOT_INDEX = "right_foot_index"


# Landmark name for every MediaPipe index, in index order
MEDIAPIPE_LANDMARK_NAMES = [
    LandmarkNames.NOSE,
    LandmarkNames.LEFT_EYE_INNER,
    LandmarkNames.LEFT_EYE,
    LandmarkNames.LEFT_EYE_OUTER,
    LandmarkNames.RIGHT_EYE_INNER,
    LandmarkNames.RIGHT_EYE,
    LandmarkNames.RIGHT_EYE_OUTER,
    LandmarkNames.LEFT_EAR,
    LandmarkNames.RIGHT_EAR,
    LandmarkNames.MOUTH_LEFT,
    LandmarkNames.MOUTH_RIGHT,
    LandmarkNames.LEFT_SHOULDER,
    LandmarkNames.RIGHT_SHOULDER,
    LandmarkNames.LEFT_ELBOW,
    LandmarkNames.RIGHT_ELBOW,
    LandmarkNames.LEFT_WRIST,
    LandmarkNames.RIGHT_WRIST,
    LandmarkNames.LEFT_PINKY,
    LandmarkNames.RIGHT_PINKY,
    LandmarkNames.LEFT_INDEX,
    LandmarkNames.RIGHT_INDEX,
    LandmarkNames.LEFT_THUMB,
    LandmarkNames.RIGHT_THUMB,
    LandmarkNames.LEFT_HIP,
    LandmarkNames.RIGHT_HIP,
    LandmarkNames.LEFT_KNEE,
    LandmarkNames.RIGHT_KNEE,
    LandmarkNames.LEFT_ANKLE,
    LandmarkNames.RIGHT_ANKLE,
    LandmarkNames.LEFT_HEEL,
    LandmarkNames.RIGHT_HEEL,
    LandmarkNames.LEFT_FOOT_INDEX,
    LandmarkNames.RIGHT_FOOT_INDEX,
]


# Skeleton Connections for Visualization
SKELETON_CONNECTIONS = [
    # Arms
    (LandmarkNames.LEFT_SHOULDER, LandmarkNames.RIGHT_SHOULDER),
    (LandmarkNames.LEFT_SHOULDER, LandmarkNames.LEFT_ELBOW),
    (LandmarkNames.LEFT_ELBOW, LandmarkNames.LEFT_WRIST),
    (LandmarkNames.RIGHT_SHOULDER, LandmarkNames.RIGHT_ELBOW),
    (LandmarkNames.RIGHT_ELBOW, LandmarkNames.RIGHT_WRIST),
    # Torso
    (LandmarkNames.LEFT_SHOULDER, LandmarkNames.LEFT_HIP),
    (LandmarkNames.RIGHT_SHOULDER, LandmarkNames.RIGHT_HIP),
    (LandmarkNames.LEFT_HIP, LandmarkNames.RIGHT_HIP),
    # Legs
    (LandmarkNames.LEFT_HIP, LandmarkNames.LEFT_KNEE),
    (LandmarkNames.LEFT_KNEE, LandmarkNames.LEFT_ANKLE),
    (LandmarkNames.RIGHT_HIP, LandmarkNames.RIGHT_KNEE),
    (LandmarkNames.RIGHT_KNEE, LandmarkNames.RIGHT_ANKLE),
]


# Posture labels
class PoseLabels:
    """Posture classification outcomes for one frame."""

    SITTING = "sitting"
    STANDING = "standing"
    ARM_RAISED = "arm_raised"
    FALLEN = "fallen"
    UNKNOWN = "unknown"
    NO_PERSON = "no_person"

    ALL = (SITTING, STANDING, ARM_RAISED, FALLEN, UNKNOWN, NO_PERSON)


# Sitting confirmation phases
class SittingPhases:
    """Phases of the sit-confirmation state machine."""

    NOT_SITTING = "not_sitting"
    SITTING_PENDING = "sitting_pending"
    SITTING_CONFIRMED = "sitting_confirmed"


# Alert types delivered by the event manager
class AlertTypes:
    """Alert types raised on a rising edge of an event flag."""

    SIT_CONFIRMED = "sit_confirmed"
    FALL_DETECTED = "fall_detected"


# Guard against division by zero when two landmarks coincide
ANGLE_EPSILON = 1e-6


# Default Configuration for Posture Classification
DEFAULT_CLASSIFIER_CONFIG = {
    "sit_angle_min": 70.0,  # degrees, exclusive
    "sit_angle_max": 110.0,  # degrees, exclusive
    "stand_angle_min": 160.0,  # degrees, exclusive
    "fall_width_ratio": 0.8,  # shoulder width / shoulder-hip height
}


# Default Configuration for Event Debouncing
DEFAULT_DEBOUNCER_CONFIG = {
    "sit_confirm_seconds": 5.0,
    "fall_window_seconds": 3.0,
}


# Default Configuration for MediaPipe Pose Landmarker
DEFAULT_POSE_LANDMARKER_CONFIG = {
    "num_poses": 1,
    "min_pose_detection_confidence": 0.5,
    "min_pose_presence_confidence": 0.5,
    "min_tracking_confidence": 0.5,
}


# Visualization Colors (BGR format for OpenCV)
class Colors:
    """Color constants for visualization (BGR format)."""

    # Status colors
    FALL_TEXT = (255, 255, 255)
    FALL_BG = (0, 0, 200)  # Red
    SIT_TEXT = (255, 255, 255)
    SIT_BG = (0, 160, 0)  # Green
    LABEL_TEXT = (255, 255, 255)
    LABEL_BG = (0, 0, 0)

    # Landmark colors
    LANDMARK = (0, 0, 255)  # Red
    CONNECTION = (0, 255, 0)  # Green

    # UI colors
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)
    PRIVACY_BG = (240, 240, 240)


# Overlay text
LABEL_DISPLAY_TEXT = {
    PoseLabels.SITTING: "Sitting",
    PoseLabels.STANDING: "Standing",
    PoseLabels.ARM_RAISED: "Arm raised",
    PoseLabels.FALLEN: "Fallen",
    PoseLabels.UNKNOWN: "Unknown pose",
    PoseLabels.NO_PERSON: "No person detected",
}
SIT_CONFIRMED_TEXT = "Sat for {seconds:g} seconds"
FALL_DETECTED_TEXT = "FALL DETECTED!"


# Model Paths
DEFAULT_MODEL_PATH = "./models/pose_landmarker_lite.task"
