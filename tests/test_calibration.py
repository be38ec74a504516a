"""
Tests for the calibration store and its state machine.
"""

import pytest

from headgaze.core.config import CalibrationConfig
from headgaze.core.state import (
    CalibrationPhase,
    StateMachine,
    is_valid_transition,
)
from headgaze.vision.calibrator import (
    CALIBRATION_TARGETS,
    CalibrationPoint,
    CalibrationStore,
    SubmitResult,
    target_screen_position,
)
from headgaze.vision.eye_locator import EyeObservation
from headgaze.vision.frame import Point2D
from headgaze.vision.frame_analyzer import GazeObservation

VIEWPORT = (1000, 800)


def gaze_at(x, y):
    """Observation with one detected eye at the given gaze point."""
    return GazeObservation(
        left=EyeObservation(x, y, True),
        right=EyeObservation.missing(),
        point=Point2D(x, y),
    )


@pytest.fixture
def store():
    return CalibrationStore(CalibrationConfig())


class TestStateMachine:
    """Tests for calibration phase transitions."""

    def test_valid_transitions(self):
        assert is_valid_transition(CalibrationPhase.IDLE, CalibrationPhase.COLLECTING)
        assert is_valid_transition(CalibrationPhase.COLLECTING, CalibrationPhase.IDLE)
        assert is_valid_transition(CalibrationPhase.COLLECTING, CalibrationPhase.COLLECTING)

    def test_transition_and_reset(self):
        machine = StateMachine()
        assert machine.transition_to(CalibrationPhase.COLLECTING) is True
        assert machine.current_phase == CalibrationPhase.COLLECTING

        machine.reset()

        assert machine.current_phase == CalibrationPhase.IDLE

    def test_phases(self):
        assert set(CalibrationPhase) == {CalibrationPhase.IDLE, CalibrationPhase.COLLECTING}


class TestTargets:
    """Tests for calibration target geometry."""

    def test_target_order(self):
        assert CALIBRATION_TARGETS == (
            (0.2, 0.2),
            (0.8, 0.2),
            (0.5, 0.5),
            (0.2, 0.8),
            (0.8, 0.8),
        )

    def test_target_scaled_to_viewport(self):
        target = target_screen_position((0.2, 0.2), VIEWPORT)

        assert target.x == pytest.approx(200)
        assert target.y == pytest.approx(160)


class TestCalibrationStore:
    """Tests for the eye calibration procedure."""

    def test_initial_state(self, store):
        assert store.phase == CalibrationPhase.IDLE
        assert store.points == []
        assert not store.eye_tracking_armed
        assert not store.head_calibrated

    def test_five_submits_complete_calibration(self, store):
        store.begin_eye_calibration()
        expected_screens = [
            Point2D(200, 160),
            Point2D(800, 160),
            Point2D(500, 400),
            Point2D(200, 640),
            Point2D(800, 640),
        ]

        for step in range(5):
            assert store.step == step
            assert store.is_collecting
            result = store.submit_calibration_point(gaze_at(300 + step, 200 + step), VIEWPORT)
            assert len(store.points) == step + 1
            assert store.points[-1].screen.x == pytest.approx(expected_screens[step].x)
            assert store.points[-1].screen.y == pytest.approx(expected_screens[step].y)
            assert store.points[-1].eye == Point2D(300 + step, 200 + step)

            if step < 4:
                assert result == SubmitResult.ACCEPTED
            else:
                assert result == SubmitResult.COMPLETED

        assert store.phase == CalibrationPhase.IDLE
        assert store.eye_tracking_armed
        assert store.step == 5

    def test_poor_signal_does_not_advance(self, store):
        store.begin_eye_calibration()

        result = store.submit_calibration_point(GazeObservation.absent(), VIEWPORT)

        assert result == SubmitResult.REJECTED_POOR_SIGNAL
        assert store.step == 0
        assert store.points == []
        assert store.is_collecting

    def test_submit_outside_session_rejected(self, store):
        result = store.submit_calibration_point(gaze_at(300, 200), VIEWPORT)

        assert result == SubmitResult.REJECTED_NOT_COLLECTING
        assert store.points == []

    def test_gaze_at_origin_is_accepted(self, store):
        store.begin_eye_calibration()

        result = store.submit_calibration_point(gaze_at(0, 0), VIEWPORT)

        assert result == SubmitResult.ACCEPTED
        assert store.points[0].eye == Point2D(0, 0)

    def test_begin_clears_previous_points(self, store):
        store.begin_eye_calibration()
        for _ in range(5):
            store.submit_calibration_point(gaze_at(300, 200), VIEWPORT)

        store.begin_eye_calibration()

        assert store.points == []
        assert store.step == 0
        assert not store.eye_tracking_armed

    def test_not_armed_while_collecting(self, store):
        store.begin_eye_calibration()
        for _ in range(3):
            store.submit_calibration_point(gaze_at(300, 200), VIEWPORT)

        assert len(store.points) == 3
        assert not store.eye_tracking_armed

    def test_reset_keeps_head_calibration(self, store):
        store.capture_head_center(Point2D(320, 240))
        store.begin_eye_calibration()
        for _ in range(5):
            store.submit_calibration_point(gaze_at(300, 200), VIEWPORT)

        store.reset_eye_calibration()

        assert store.points == []
        assert not store.eye_tracking_armed
        assert store.phase == CalibrationPhase.IDLE
        assert store.head_calibrated
        assert store.head_center == Point2D(320, 240)

    def test_head_capture_independent_of_session(self, store):
        store.begin_eye_calibration()
        store.capture_head_center(Point2D(100, 120))

        assert store.head_center == Point2D(100, 120)
        assert store.is_collecting

    def test_current_target(self, store):
        assert store.current_target() is None

        store.begin_eye_calibration()
        store.submit_calibration_point(gaze_at(300, 200), VIEWPORT)

        assert store.current_target() == (0.8, 0.2)
        assert store.progress == (1, 5)

    def test_restore_arms_with_enough_points(self, store):
        points = [
            CalibrationPoint(Point2D(200, 160), Point2D(300, 200)),
            CalibrationPoint(Point2D(800, 160), Point2D(340, 200)),
            CalibrationPoint(Point2D(500, 400), Point2D(320, 220)),
        ]

        store.restore(points, head_center=Point2D(320, 240))

        assert store.eye_tracking_armed
        assert store.head_center == Point2D(320, 240)
        assert store.points == points

    def test_restore_with_too_few_points_is_not_armed(self, store):
        store.restore([CalibrationPoint(Point2D(200, 160), Point2D(300, 200))])

        assert not store.eye_tracking_armed
        assert not store.head_calibrated
