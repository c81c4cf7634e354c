"""
Per-frame posture monitoring pipeline.

Classifies the detected person of each frame and feeds the label to the
event debouncer. Frames arriving while the previous frame is still being
processed are dropped, never queued.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .detectors.landmarks import LandmarkSet
from .detectors.posture_classifier import PostureClassifier
from .events.debouncer import DebounceState, EventDebouncer
from .utils.constants import PoseLabels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    """Outcome of one processed frame, handed to the presentation layer."""

    label: str
    sit_confirmed: bool
    fall_detected: bool
    timestamp: float
    info: dict = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "sit_confirmed": self.sit_confirmed,
            "fall_detected": self.fall_detected,
            "timestamp": self.timestamp,
        }


class PostureMonitor:
    """
    Classifier + debouncer for a single subject with a drop-frame guard.

    The guard is a non-blocking lock held from the moment a frame is
    accepted until its result is applied. It may be released from another
    thread (e.g. the pose detector's result callback), and it is also the
    one mutual-exclusion region protecting the debounce state.

    Usage (synchronous):
        result = monitor.process_frame(persons, timestamp)

    Usage (async detector with callback):
        if monitor.try_begin_frame():
            detector.detect_async(image, ts)   # callback -> finish_frame()

    on_result, if set, receives every new FrameResult while the guard is
    still held, so listeners see results in the order the state produced them.
    """

    def __init__(
        self,
        classifier: PostureClassifier | None = None,
        debouncer: EventDebouncer | None = None,
        on_result: Callable[[FrameResult], None] | None = None,
    ):
        """
        Initialize posture monitor.

        Args:
            classifier: PostureClassifier instance (default thresholds if None)
            debouncer: EventDebouncer instance (default timings if None)
            on_result: Optional listener called with each new FrameResult
        """
        self.classifier = classifier or PostureClassifier()
        self.debouncer = debouncer or EventDebouncer()
        self.on_result = on_result
        self.state = DebounceState()

        self._guard = threading.Lock()
        self.latest: FrameResult | None = None

        # Statistics
        self.frames_processed = 0
        self.frames_dropped = 0
        self.frames_failed = 0
        self.label_counts: dict[str, int] = {label: 0 for label in PoseLabels.ALL}

        logger.info(f"PostureMonitor initialized: {self.classifier}, {self.debouncer}")

    @property
    def is_processing(self) -> bool:
        """True while a frame is in flight."""
        return self._guard.locked()

    def try_begin_frame(self) -> bool:
        """
        Accept a new frame unless one is still being processed.

        Returns:
            True if the frame was accepted, False if it was dropped
        """
        if not self._guard.acquire(blocking=False):
            self.frames_dropped += 1
            logger.debug("Previous frame still processing, dropping frame")
            return False
        return True

    def finish_frame(
        self, persons: Sequence[LandmarkSet], timestamp: float
    ) -> FrameResult:
        """
        Classify the accepted frame and update the debounce state.

        Must follow a successful try_begin_frame(); always releases the guard.

        Args:
            persons: Detected persons, each a landmark set (zero or one used)
            timestamp: Frame timestamp in seconds

        Returns:
            FrameResult for the frame
        """
        try:
            if not persons:
                label, info = PoseLabels.NO_PERSON, {}
            else:
                label, info = self.classifier.classify_with_info(persons[0])

            flags = self.debouncer.update(self.state, label, timestamp)

            result = FrameResult(
                label=label,
                sit_confirmed=flags.sit_confirmed,
                fall_detected=flags.fall_detected,
                timestamp=timestamp,
                info=info,
            )

            self.latest = result
            self.frames_processed += 1
            self.label_counts[label] += 1

            self._notify(result)
            return result

        finally:
            self._guard.release()

    def abort_frame(self):
        """Release the guard for a frame whose detection failed."""
        self.frames_failed += 1
        self._guard.release()

    def process_frame(
        self, persons: Sequence[LandmarkSet], timestamp: float
    ) -> FrameResult | None:
        """
        Process one frame synchronously.

        Args:
            persons: Detected persons, each a landmark set
            timestamp: Frame timestamp in seconds

        Returns:
            FrameResult, or None if the frame was dropped
        """
        if not self.try_begin_frame():
            return None
        return self.finish_frame(persons, timestamp)

    def refresh(self, now: float) -> FrameResult | None:
        """
        Fire a due sit confirmation between frames.

        Args:
            now: Current timestamp in seconds

        Returns:
            Updated latest result if the confirmation fired, otherwise None
            (nothing due, no frame processed yet, or a frame in flight)
        """
        if self.latest is None or not self._guard.acquire(blocking=False):
            return None

        try:
            flags = self.debouncer.refresh(self.state, now)
            if flags.sit_confirmed == self.latest.sit_confirmed:
                return None

            self.latest = FrameResult(
                label=self.latest.label,
                sit_confirmed=flags.sit_confirmed,
                fall_detected=flags.fall_detected,
                timestamp=now,
                info=self.latest.info,
            )
            self._notify(self.latest)
            return self.latest
        finally:
            self._guard.release()

    def _notify(self, result: FrameResult):
        """Hand a result to the listener; called with the guard held."""
        if self.on_result is None:
            return

        try:
            self.on_result(result)
        except Exception as e:
            logger.error(f"Result listener failed: {e}", exc_info=True)

    def reset(self):
        """Reset debounce state (e.g. at stream start)."""
        with self._guard:
            self.state.reset()
            self.latest = None
        logger.info("PostureMonitor state reset")

    def get_statistics(self) -> dict:
        """
        Get frame processing statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "frames_processed": self.frames_processed,
            "frames_dropped": self.frames_dropped,
            "frames_failed": self.frames_failed,
            "label_counts": dict(self.label_counts),
            "sitting_phase": self.state.sitting_phase,
            "latest_label": self.latest.label if self.latest else None,
        }

    def __repr__(self) -> str:
        return (
            f"PostureMonitor("
            f"processed={self.frames_processed}, "
            f"dropped={self.frames_dropped}, "
            f"phase={self.state.sitting_phase})"
        )
