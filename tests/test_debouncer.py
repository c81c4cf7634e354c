"""
Unit tests for posture_alert.events.debouncer
"""
import random

import pytest

from posture_alert.events.debouncer import DebounceResult, DebounceState, EventDebouncer
from posture_alert.utils.constants import PoseLabels, SittingPhases

SITTING = PoseLabels.SITTING
STANDING = PoseLabels.STANDING
FALLEN = PoseLabels.FALLEN
UNKNOWN = PoseLabels.UNKNOWN
NO_PERSON = PoseLabels.NO_PERSON


def feed(debouncer, state, frames):
    """Apply (timestamp, label) frames in order, return the last result."""
    result = None
    for now, label in frames:
        result = debouncer.update(state, label, now)
    return result


@pytest.fixture
def debouncer():
    return EventDebouncer(sit_confirm_seconds=5.0, fall_window_seconds=3.0)


@pytest.fixture
def state():
    return DebounceState()


class TestSitConfirmation:
    """Tests for the sitting state machine"""

    def test_initial_state(self, state):
        assert state.sitting_phase == SittingPhases.NOT_SITTING
        assert not state.sit_confirmed
        assert state.sit_deadline is None

    def test_first_sitting_frame_starts_pending(self, debouncer, state):
        result = debouncer.update(state, SITTING, 10.0)
        assert result == DebounceResult(sit_confirmed=False, fall_detected=False)
        assert state.sitting_phase == SittingPhases.SITTING_PENDING
        assert state.sit_started_at == 10.0
        assert state.sit_deadline == 15.0

    def test_continuous_sitting_confirms_at_threshold(self, debouncer, state):
        frames = [(t / 10, SITTING) for t in range(0, 50)]  # 0.0 .. 4.9
        result = feed(debouncer, state, frames)
        assert not result.sit_confirmed

        result = debouncer.update(state, SITTING, 5.0)
        assert result.sit_confirmed
        assert state.sitting_phase == SittingPhases.SITTING_CONFIRMED

    def test_confirmation_stays_while_sitting(self, debouncer, state):
        feed(debouncer, state, [(0.0, SITTING), (5.0, SITTING)])
        result = debouncer.update(state, SITTING, 30.0)
        assert result.sit_confirmed
        assert state.sit_started_at == 0.0

    def test_repeated_sitting_does_not_move_deadline(self, debouncer, state):
        feed(debouncer, state, [(0.0, SITTING), (1.0, SITTING), (2.0, SITTING)])
        assert state.sit_deadline == 5.0

    def test_interruption_resets_streak(self, debouncer, state):
        frames = [(0.0, SITTING), (1.0, SITTING), (3.0, SITTING), (3.5, STANDING)]
        frames += [(4.0, SITTING), (5.0, SITTING), (8.9, SITTING)]
        result = feed(debouncer, state, frames)
        assert not result.sit_confirmed
        assert state.sit_started_at == 4.0

        result = debouncer.update(state, SITTING, 9.0)
        assert result.sit_confirmed

    @pytest.mark.parametrize("label", [STANDING, FALLEN, UNKNOWN, PoseLabels.ARM_RAISED])
    def test_any_other_label_interrupts(self, debouncer, state, label):
        feed(debouncer, state, [(0.0, SITTING), (2.0, label), (5.0, SITTING)])
        assert not state.sit_confirmed
        assert state.sitting_phase == SittingPhases.SITTING_PENDING

    def test_confirmed_sit_cleared_immediately(self, debouncer, state):
        feed(debouncer, state, [(0.0, SITTING), (6.0, SITTING)])
        assert state.sit_confirmed

        result = debouncer.update(state, UNKNOWN, 6.1)
        assert not result.sit_confirmed
        assert not state.is_sitting
        assert state.sit_deadline is None
        assert state.sitting_phase == SittingPhases.NOT_SITTING

    def test_zero_delay_confirms_on_first_frame(self, state):
        debouncer = EventDebouncer(sit_confirm_seconds=0.0)
        assert debouncer.update(state, SITTING, 1.0).sit_confirmed


class TestRefresh:
    """Tests for EventDebouncer.refresh (deadline check between frames)"""

    def test_refresh_before_deadline(self, debouncer, state):
        debouncer.update(state, SITTING, 0.0)
        assert not debouncer.refresh(state, 4.99).sit_confirmed

    def test_refresh_fires_at_deadline(self, debouncer, state):
        debouncer.update(state, SITTING, 0.0)
        result = debouncer.refresh(state, 5.0)
        assert result.sit_confirmed
        assert state.sit_deadline is None

    def test_refresh_without_pending_sit(self, debouncer, state):
        debouncer.update(state, STANDING, 0.0)
        assert debouncer.refresh(state, 100.0) == DebounceResult()

    def test_refresh_after_interruption_does_not_fire(self, debouncer, state):
        feed(debouncer, state, [(0.0, SITTING), (1.0, STANDING)])
        assert not debouncer.refresh(state, 10.0).sit_confirmed


class TestFallDetection:
    """Tests for the standing -> fallen window"""

    def test_fall_within_window(self, debouncer, state):
        result = feed(debouncer, state, [(0.0, STANDING), (2.0, FALLEN)])
        assert result.fall_detected
        assert not state.was_standing

    def test_fall_outside_window(self, debouncer, state):
        result = feed(debouncer, state, [(0.0, STANDING), (4.0, FALLEN)])
        assert not result.fall_detected

    def test_window_is_exclusive(self, debouncer, state):
        result = feed(debouncer, state, [(0.0, STANDING), (3.0, FALLEN)])
        assert not result.fall_detected

    def test_window_measured_from_last_standing(self, debouncer, state):
        frames = [(0.0, STANDING), (2.0, STANDING), (4.5, FALLEN)]
        assert feed(debouncer, state, frames).fall_detected

    def test_fallen_without_standing(self, debouncer, state):
        result = feed(debouncer, state, [(0.0, FALLEN), (0.5, FALLEN)])
        assert not result.fall_detected

    def test_fall_is_one_shot(self, debouncer, state):
        feed(debouncer, state, [(0.0, STANDING), (1.0, FALLEN)])
        assert state.fall_detected

        # Flag persists but cannot re-arm without standing
        result = debouncer.update(state, FALLEN, 1.5)
        assert result.fall_detected
        assert not state.was_standing

    def test_standing_clears_fall_and_rearms(self, debouncer, state):
        feed(debouncer, state, [(0.0, STANDING), (1.0, FALLEN)])
        result = debouncer.update(state, STANDING, 10.0)
        assert not result.fall_detected
        assert state.was_standing
        assert state.last_standing_at == 10.0

        assert debouncer.update(state, FALLEN, 11.0).fall_detected

    def test_stale_fall_keeps_window_unchanged(self, debouncer, state):
        feed(debouncer, state, [(0.0, STANDING), (5.0, FALLEN)])
        assert state.was_standing
        assert state.last_standing_at == 0.0

    def test_intervening_labels_keep_fall_window(self, debouncer, state):
        frames = [(0.0, STANDING), (0.5, SITTING), (1.0, UNKNOWN), (2.0, FALLEN)]
        assert feed(debouncer, state, frames).fall_detected

    def test_fall_flag_survives_non_standing_labels(self, debouncer, state):
        frames = [(0.0, STANDING), (1.0, FALLEN), (2.0, SITTING), (3.0, UNKNOWN)]
        assert feed(debouncer, state, frames).fall_detected

    def test_sitting_and_fall_are_independent(self, debouncer, state):
        frames = [(0.0, STANDING), (1.0, FALLEN)]
        frames += [(2.0, SITTING), (7.0, SITTING)]
        result = feed(debouncer, state, frames)
        assert result.sit_confirmed
        assert result.fall_detected


class TestNoPersonReset:
    """Tests for the no_person reset policy"""

    def test_no_person_clears_everything(self, debouncer, state):
        feed(debouncer, state, [(0.0, STANDING), (1.0, FALLEN), (2.0, SITTING)])
        feed(debouncer, state, [(2.5, STANDING), (3.0, SITTING), (8.0, SITTING)])
        assert state.sit_confirmed
        assert state.was_standing

        result = debouncer.update(state, NO_PERSON, 9.0)
        assert result == DebounceResult(sit_confirmed=False, fall_detected=False)
        assert state == DebounceState()

    def test_no_person_clears_detected_fall(self, debouncer, state):
        feed(debouncer, state, [(0.0, STANDING), (1.0, FALLEN)])
        debouncer.update(state, NO_PERSON, 1.5)
        assert not state.fall_detected
        assert not state.was_standing
        assert state.last_standing_at is None

    def test_no_person_disarms_fall_window(self, debouncer, state):
        frames = [(0.0, STANDING), (0.5, NO_PERSON), (1.0, FALLEN)]
        assert not feed(debouncer, state, frames).fall_detected

    def test_no_person_cancels_pending_sit(self, debouncer, state):
        frames = [(0.0, SITTING), (2.0, NO_PERSON), (5.0, SITTING)]
        assert not feed(debouncer, state, frames).sit_confirmed
        assert debouncer.refresh(state, 6.0).sit_confirmed is False


class TestInvariants:
    """Invariants over arbitrary label streams"""

    def test_sit_confirmed_implies_sitting(self, debouncer, state):
        rng = random.Random(1234)
        labels = list(PoseLabels.ALL) + [SITTING] * 6
        now = 0.0
        for _ in range(2000):
            now += rng.uniform(0.05, 1.5)
            label = rng.choice(labels)
            result = debouncer.update(state, label, now)

            if result.sit_confirmed:
                assert state.is_sitting
                assert label == SITTING
            if label == NO_PERSON:
                assert state == DebounceState()
            assert state.sit_deadline is None or state.is_sitting


class TestDebouncerConfig:
    """Tests for EventDebouncer validation"""

    def test_negative_sit_delay_raises(self):
        with pytest.raises(ValueError):
            EventDebouncer(sit_confirm_seconds=-1)

    def test_non_positive_fall_window_raises(self):
        with pytest.raises(ValueError):
            EventDebouncer(fall_window_seconds=0)

    def test_custom_timings(self, state):
        debouncer = EventDebouncer(sit_confirm_seconds=2.0, fall_window_seconds=1.0)
        assert feed(debouncer, state, [(0.0, SITTING), (2.0, SITTING)]).sit_confirmed
        assert not feed(debouncer, state, [(3.0, STANDING), (4.5, FALLEN)]).fall_detected

    def test_state_to_dict(self, debouncer, state):
        debouncer.update(state, SITTING, 1.0)
        data = state.to_dict()
        assert data["is_sitting"] is True
        assert data["sit_deadline"] == 6.0
        assert data["sitting_phase"] == SittingPhases.SITTING_PENDING
