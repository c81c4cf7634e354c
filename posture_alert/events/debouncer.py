"""
Event debouncing for per-frame posture labels.

Turns a noisy stream of labels into two time-qualified event flags:
- sit_confirmed: "sitting" held continuously for sit_confirm_seconds
- fall_detected: "fallen" observed within fall_window_seconds of the last
  "standing" frame

The per-subject state lives in an explicit DebounceState that the caller
passes to every update, so the logic can be driven with synthetic
timestamps instead of real timers.
"""

import logging
from dataclasses import asdict, dataclass

from ..utils.constants import PoseLabels, SittingPhases

logger = logging.getLogger(__name__)


@dataclass
class DebounceState:
    """Mutable debounce state for one tracked subject."""

    is_sitting: bool = False
    sit_started_at: float | None = None
    sit_deadline: float | None = None  # pending confirmation, at most one
    sit_confirmed: bool = False
    was_standing: bool = False
    last_standing_at: float | None = None
    fall_detected: bool = False

    @property
    def sitting_phase(self) -> str:
        """Current phase of the sit-confirmation state machine."""
        if not self.is_sitting:
            return SittingPhases.NOT_SITTING
        if self.sit_confirmed:
            return SittingPhases.SITTING_CONFIRMED
        return SittingPhases.SITTING_PENDING

    def clear_sitting(self):
        """Leave the sitting streak and cancel any pending confirmation."""
        self.is_sitting = False
        self.sit_started_at = None
        self.sit_deadline = None
        self.sit_confirmed = False

    def reset(self):
        """Return every field to its initial value."""
        self.clear_sitting()
        self.was_standing = False
        self.last_standing_at = None
        self.fall_detected = False

    def to_dict(self) -> dict:
        return {**asdict(self), "sitting_phase": self.sitting_phase}


@dataclass(frozen=True)
class DebounceResult:
    """Event flags after one update."""

    sit_confirmed: bool = False
    fall_detected: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class EventDebouncer:
    """
    Stateless debounce rules applied to an explicit DebounceState.

    Sitting (not_sitting -> sitting_pending -> sitting_confirmed):
    - First "sitting" frame records the start and a single pending deadline
    - A "sitting" frame at or after the deadline confirms the sit
    - Any other label drops back to not_sitting and clears the confirmation

    Fall:
    - "standing" primes the fall window and clears a previous fall
    - "fallen" inside the window fires the one-shot fall flag
    - Other labels leave the fall window untouched

    "no_person" resets the whole state.
    """

    def __init__(
        self,
        sit_confirm_seconds: float = 5.0,
        fall_window_seconds: float = 3.0,
    ):
        """
        Initialize event debouncer.

        Args:
            sit_confirm_seconds: Continuous sitting time before sit is confirmed
            fall_window_seconds: Max time between last standing frame and a fall
        """
        if sit_confirm_seconds < 0:
            raise ValueError(f"Invalid sit confirmation delay: {sit_confirm_seconds}")
        if fall_window_seconds <= 0:
            raise ValueError(f"Invalid fall window: {fall_window_seconds}")

        self.sit_confirm_seconds = sit_confirm_seconds
        self.fall_window_seconds = fall_window_seconds

        logger.info("EventDebouncer initialized")
        logger.info(f"  Sit confirmation: {sit_confirm_seconds}s")
        logger.info(f"  Fall window: {fall_window_seconds}s")

    def _confirm_if_due(self, state: DebounceState, now: float):
        if (
            state.is_sitting
            and not state.sit_confirmed
            and state.sit_deadline is not None
            and now >= state.sit_deadline
        ):
            state.sit_confirmed = True
            state.sit_deadline = None
            logger.info(
                f"Sitting confirmed after {now - state.sit_started_at:.1f}s"
            )

    def _update_sitting(self, state: DebounceState, label: str, now: float):
        if label == PoseLabels.SITTING:
            if not state.is_sitting:
                state.is_sitting = True
                state.sit_started_at = now
                state.sit_deadline = now + self.sit_confirm_seconds
                logger.debug(f"Sitting started, confirmation due at {state.sit_deadline}")
            self._confirm_if_due(state, now)
        elif state.is_sitting:
            if state.sit_confirmed:
                logger.info(f"Sitting ended ({label})")
            else:
                logger.debug(f"Sitting streak interrupted by {label}")
            state.clear_sitting()

    def _update_fall(self, state: DebounceState, label: str, now: float):
        if label == PoseLabels.STANDING:
            state.was_standing = True
            state.last_standing_at = now
            state.fall_detected = False

        elif label == PoseLabels.FALLEN and state.was_standing:
            elapsed = now - state.last_standing_at
            if elapsed < self.fall_window_seconds:
                state.fall_detected = True
                state.was_standing = False
                logger.warning(f"Fall detected {elapsed:.1f}s after last standing")
            else:
                logger.debug(
                    f"Fallen {elapsed:.1f}s after last standing, outside "
                    f"{self.fall_window_seconds}s window"
                )

    def update(self, state: DebounceState, label: str, now: float) -> DebounceResult:
        """
        Apply one frame's label to the state.

        Args:
            state: Debounce state of the subject, mutated in place
            label: Posture label of the frame (PoseLabels value)
            now: Frame timestamp in seconds

        Returns:
            DebounceResult with the current event flags
        """
        if label == PoseLabels.NO_PERSON:
            if state.is_sitting or state.was_standing or state.fall_detected:
                logger.info("No person detected, debounce state reset")
            state.reset()
            return DebounceResult()

        self._update_sitting(state, label, now)
        self._update_fall(state, label, now)

        return DebounceResult(
            sit_confirmed=state.sit_confirmed, fall_detected=state.fall_detected
        )

    def refresh(self, state: DebounceState, now: float) -> DebounceResult:
        """
        Fire a pending sit confirmation whose deadline has passed.

        Equivalent of the deferred confirmation callback, usable between
        frames without feeding a new label.

        Args:
            state: Debounce state of the subject, mutated in place
            now: Current timestamp in seconds

        Returns:
            DebounceResult with the current event flags
        """
        self._confirm_if_due(state, now)
        return DebounceResult(
            sit_confirmed=state.sit_confirmed, fall_detected=state.fall_detected
        )

    def __repr__(self) -> str:
        return (
            f"EventDebouncer("
            f"sit_confirm={self.sit_confirm_seconds}s, "
            f"fall_window={self.fall_window_seconds}s)"
        )
