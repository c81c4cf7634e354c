import logging
import time

import cv2
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from ..detectors.landmarks import Landmark, persons_from_result
from ..monitor import FrameResult, PostureMonitor
from ..utils.constants import DEFAULT_POSE_LANDMARKER_CONFIG
from ..utils.visualization import (
    draw_pose_skeleton,
    draw_privacy_skeleton,
    draw_status_overlay,
)

logger = logging.getLogger(__name__)


class LiveCameraPostureDetector:
    """
    Real-time posture monitoring using live camera feed.

    Combines MediaPipe pose detection with the rule-based posture monitor.
    A frame is handed to MediaPipe only when the previous one has been
    fully processed; frames captured in the meantime are dropped.

    Optimized for edge devices with:
    - Headless mode (no GUI)
    - Event manager integration
    """

    def __init__(
        self,
        monitor: PostureMonitor,
        model_path: str = "./models/pose_landmarker_lite.task",
        camera_id: int = 0,
        event_manager=None,
        settings=None,
        headless: bool = True,
        privacy_mode: bool = False,
    ):
        """
        Initialize live camera posture detector.

        Args:
            monitor: PostureMonitor receiving the detected persons
            model_path: Path to MediaPipe pose model (.task file)
            camera_id: Camera device ID (0 for default webcam)
            event_manager: AlertEventManager instance (optional)
            settings: Settings instance with configuration (optional)
            headless: Run without GUI display (True for edge devices)
            privacy_mode: Display only stick figure without background (False by default)
        """
        self.monitor = monitor
        self.model_path = model_path
        self.camera_id = camera_id
        self.headless = headless
        self.privacy_mode = privacy_mode
        self.event_manager = event_manager
        self.settings = settings

        # Results reach the event manager from inside the monitor guard
        if event_manager is not None:
            monitor.on_result = self._handle_result

        self.min_visibility = settings.MIN_VISIBILITY if settings else 0.5
        self.sit_confirm_seconds = (
            settings.SIT_CONFIRM_SECONDS
            if settings
            else monitor.debouncer.sit_confirm_seconds
        )

        # Initialize MediaPipe Pose Landmarker for LIVE_STREAM mode
        base_options = python.BaseOptions(model_asset_path=model_path)
        options = vision.PoseLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.LIVE_STREAM,
            result_callback=self._pose_detection_callback,
            **DEFAULT_POSE_LANDMARKER_CONFIG,
        )
        self.landmarker = vision.PoseLandmarker.create_from_options(options)

        # State tracking
        self.latest_landmarks: dict[str, Landmark] | None = None
        self.frame_size: tuple[int, int] = (0, 0)
        self.frame_count = 0
        self._stream_start = time.monotonic()

        logger.info("LiveCameraPostureDetector initialized")
        logger.info(f"  Model: {model_path}")
        logger.info(f"  Camera ID: {camera_id}")
        logger.info(f"  Headless mode: {headless}")
        logger.info(f"  Privacy mode: {privacy_mode}")
        logger.info(f"  Event manager: {'enabled' if event_manager else 'disabled'}")

    def _pose_detection_callback(
        self, result, output_image: mp.Image, timestamp_ms: int
    ):
        """
        Callback function for MediaPipe pose detection results.

        Runs on MediaPipe's thread. Finishes the in-flight frame of the
        monitor; a failure here aborts the frame instead of crashing the stream.

        Args:
            result: PoseLandmarker detection result
            output_image: Processed image
            timestamp_ms: Timestamp in milliseconds
        """
        try:
            width, height = self.frame_size
            persons = persons_from_result(
                result, width, height, min_visibility=self.min_visibility
            )
        except Exception as e:
            logger.error(f"Failed to convert pose result: {e}", exc_info=True)
            self.monitor.abort_frame()
            return

        self.latest_landmarks = persons[0] if persons else None
        self.monitor.finish_frame(persons, timestamp_ms / 1000.0)

    def _handle_result(self, frame_result: FrameResult):
        """Forward a frame result to the event manager (monitor listener)."""
        queued = self.event_manager.observe(frame_result)
        if queued:
            logger.info(f"Queued alerts at {frame_result.timestamp:.2f}s: {queued}")

    def _submit_frame(self, frame, timestamp_ms: int):
        """Hand a frame to MediaPipe unless the previous one is still in flight."""
        if not self.monitor.try_begin_frame():
            return

        try:
            frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
            self.landmarker.detect_async(mp_image, timestamp_ms)
        except Exception as e:
            logger.error(f"Pose detection failed: {e}")
            self.monitor.abort_frame()

    def _render(self, frame):
        """Build the display frame with skeleton and status overlay."""
        if self.privacy_mode:
            display_frame = draw_privacy_skeleton(frame, self.latest_landmarks)
        else:
            display_frame = draw_pose_skeleton(frame, self.latest_landmarks)

        return draw_status_overlay(
            display_frame, self.monitor.latest, self.sit_confirm_seconds
        )

    def run(self, window_name: str = "Posture Alert - Live Camera"):
        """
        Run live camera posture monitoring.

        In headless mode (edge devices): runs without GUI display
        In normal mode: shows visualization window

        Args:
            window_name: Name of the display window (ignored in headless mode)

        Controls (non-headless only):
            - 'q': Quit
        """
        cap = cv2.VideoCapture(self.camera_id)

        if not cap.isOpened():
            logger.error(f"Failed to open camera {self.camera_id}")
            return

        # Set camera resolution if settings available
        if self.settings:
            width, height = self.settings.CAMERA_RESOLUTION
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
            cap.set(cv2.CAP_PROP_FPS, self.settings.CAPTURE_FPS)

        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.frame_size = (width, height)

        logger.info(f"Camera opened: {width}x{height}")
        if not self.headless:
            logger.info("Press 'q' to quit")
        else:
            logger.info("Running in headless mode (Ctrl+C to quit)")

        self.monitor.reset()
        self._stream_start = time.monotonic()
        last_timestamp_ms = -1

        try:
            while True:
                ret, frame = cap.read()
                if not ret:
                    logger.error("Failed to read frame from camera")
                    break

                # MediaPipe requires strictly increasing timestamps
                timestamp_ms = int((time.monotonic() - self._stream_start) * 1000)
                if timestamp_ms <= last_timestamp_ms:
                    timestamp_ms = last_timestamp_ms + 1
                last_timestamp_ms = timestamp_ms

                self._submit_frame(frame, timestamp_ms)

                # Fire a due sit confirmation between processed frames
                self.monitor.refresh(timestamp_ms / 1000.0)

                self.frame_count += 1

                # Log stats periodically
                if self.frame_count % 300 == 0:  # Every ~10 seconds @ 30fps
                    stats = self.monitor.get_statistics()
                    logger.info(
                        f"Captured {self.frame_count} frames "
                        f"(processed: {stats['frames_processed']}, "
                        f"dropped: {stats['frames_dropped']}, "
                        f"pose: {stats['latest_label']})"
                    )

                if not self.headless:
                    cv2.imshow(window_name, self._render(frame))

                    key = cv2.waitKey(1) & 0xFF
                    if key == ord("q"):
                        logger.info("Quit requested by user")
                        break
                else:
                    # Small delay to prevent CPU spinning
                    cv2.waitKey(1)

        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            cap.release()
            if not self.headless:
                cv2.destroyAllWindows()
            self.landmarker.close()
            logger.info("Camera released and cleaned up")
