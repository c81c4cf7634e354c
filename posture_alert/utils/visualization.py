from collections.abc import Mapping

import cv2
import numpy as np

from .constants import (
    FALL_DETECTED_TEXT,
    LABEL_DISPLAY_TEXT,
    SIT_CONFIRMED_TEXT,
    SKELETON_CONNECTIONS,
    Colors,
)


def _point(landmark) -> tuple[int, int]:
    return (int(landmark.x), int(landmark.y))


def draw_skeleton_connections(
    frame: np.ndarray,
    landmarks: Mapping | None,
    line_color: tuple[int, int, int] = Colors.CONNECTION,
    line_thickness: int = 2,
) -> np.ndarray:
    """
    Draw skeleton connections on frame.

    Args:
        frame: BGR image frame
        landmarks: Landmark name -> Landmark in pixel coordinates
        line_color: BGR color for connection lines
        line_thickness: Thickness of connection lines

    Returns:
        Frame with skeleton connections drawn
    """
    if not landmarks:
        return frame

    for start_name, end_name in SKELETON_CONNECTIONS:
        start = landmarks.get(start_name)
        end = landmarks.get(end_name)
        if start is not None and end is not None:
            cv2.line(frame, _point(start), _point(end), line_color, line_thickness)

    return frame


def draw_landmarks(
    frame: np.ndarray,
    landmarks: Mapping | None,
    landmark_color: tuple[int, int, int] = Colors.LANDMARK,
    landmark_radius: int = 4,
) -> np.ndarray:
    """
    Draw pose landmarks on frame.

    Args:
        frame: BGR image frame
        landmarks: Landmark name -> Landmark in pixel coordinates
        landmark_color: BGR color for landmark points
        landmark_radius: Radius of landmark circles

    Returns:
        Frame with landmarks drawn
    """
    if not landmarks:
        return frame

    for landmark in landmarks.values():
        cv2.circle(frame, _point(landmark), landmark_radius, landmark_color, -1)

    return frame


def draw_pose_skeleton(frame: np.ndarray, landmarks: Mapping | None) -> np.ndarray:
    """
    Draw complete pose skeleton (connections + landmarks) on frame.
    """
    frame = draw_skeleton_connections(frame, landmarks)
    frame = draw_landmarks(frame, landmarks)
    return frame


def draw_privacy_skeleton(frame: np.ndarray, landmarks: Mapping | None) -> np.ndarray:
    """
    Draw stick figure skeleton on light background for privacy mode.
    Only shows pose landmarks without any background image.

    Args:
        frame: BGR image frame (used only for dimensions)
        landmarks: Landmark name -> Landmark in pixel coordinates

    Returns:
        Light frame with stick figure skeleton drawn
    """
    height, width = frame.shape[:2]
    privacy_frame = np.full((height, width, 3), Colors.PRIVACY_BG, dtype=np.uint8)

    return draw_pose_skeleton(privacy_frame, landmarks)


def _draw_info_box(
    frame: np.ndarray,
    text: str,
    top: int,
    text_color: tuple[int, int, int],
    bg_color: tuple[int, int, int],
    left: int = 20,
    font_scale: float = 0.8,
    bg_alpha: float = 0.85,
) -> np.ndarray:
    (text_width, text_height), baseline = cv2.getTextSize(
        text, cv2.FONT_HERSHEY_SIMPLEX, font_scale, 2
    )
    padding = 12

    # Semi-transparent background
    overlay = frame.copy()
    cv2.rectangle(
        overlay,
        (left, top),
        (left + text_width + 2 * padding, top + text_height + baseline + 2 * padding),
        bg_color,
        -1,
    )
    frame = cv2.addWeighted(overlay, bg_alpha, frame, 1 - bg_alpha, 0)

    cv2.putText(
        frame,
        text,
        (left + padding, top + padding + text_height),
        cv2.FONT_HERSHEY_SIMPLEX,
        font_scale,
        text_color,
        2,
        cv2.LINE_AA,
    )
    return frame


def draw_status_overlay(
    frame: np.ndarray, result, sit_confirm_seconds: float = 5.0
) -> np.ndarray:
    """
    Draw the current posture label and active alerts on frame.

    Args:
        frame: BGR image frame
        result: FrameResult from the posture monitor (None before first frame)
        sit_confirm_seconds: Sit confirmation delay shown in the sit box

    Returns:
        Frame with status overlay drawn
    """
    if result is None:
        return frame

    label_text = LABEL_DISPLAY_TEXT.get(result.label, result.label)
    frame = _draw_info_box(
        frame, f"Pose: {label_text}", 20, Colors.LABEL_TEXT, Colors.LABEL_BG
    )

    if result.sit_confirmed:
        frame = _draw_info_box(
            frame,
            SIT_CONFIRMED_TEXT.format(seconds=sit_confirm_seconds),
            70,
            Colors.SIT_TEXT,
            Colors.SIT_BG,
        )

    if result.fall_detected:
        frame = _draw_info_box(
            frame, FALL_DETECTED_TEXT, 120, Colors.FALL_TEXT, Colors.FALL_BG
        )

    return frame
