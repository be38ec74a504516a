"""
Tests for gaze-to-screen interpolation and head/eye fusion mathematics.
"""

import math

import numpy as np
import pytest

from headgaze.core.config import FusionConfig
from headgaze.vision.calibrator import CalibrationPoint
from headgaze.vision.cursor_fusion import CursorFusion, CursorState, clamp_to_viewport
from headgaze.vision.frame import Point2D
from headgaze.vision.gaze_interpolator import GazeInterpolator

VIEWPORT = (1000, 800)


@pytest.fixture
def five_points():
    """Five-point calibration in a 1000x800 viewport."""
    return [
        CalibrationPoint(Point2D(200, 160), Point2D(300, 200)),
        CalibrationPoint(Point2D(800, 160), Point2D(340, 200)),
        CalibrationPoint(Point2D(500, 400), Point2D(320, 220)),
        CalibrationPoint(Point2D(200, 640), Point2D(300, 240)),
        CalibrationPoint(Point2D(800, 640), Point2D(340, 240)),
    ]


class TestGazeInterpolator:
    """Tests for inverse distance weighting."""

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_insufficient_points(self, five_points, count):
        interpolator = GazeInterpolator()

        assert interpolator.interpolate(Point2D(320, 220), five_points[:count], 5.0) is None

    def test_three_points_give_finite_result(self, five_points):
        interpolator = GazeInterpolator()

        for gaze in (Point2D(0, 0), Point2D(320, 220), Point2D(1e4, -1e4)):
            result = interpolator.interpolate(gaze, five_points[:3], 5.0)
            assert result is not None
            assert math.isfinite(result.x) and math.isfinite(result.y)

    def test_zero_distance_dominates_far_points(self):
        points = [
            CalibrationPoint(Point2D(123, 456), Point2D(10, 10)),
            CalibrationPoint(Point2D(900, 700), Point2D(1e6, 1e6)),
            CalibrationPoint(Point2D(50, 700), Point2D(-1e6, 1e6)),
        ]

        result = GazeInterpolator().interpolate(Point2D(10, 10), points, 5.0)

        assert result.x == pytest.approx(123, abs=1e-6)
        assert result.y == pytest.approx(456, abs=1e-6)

    def test_weights(self):
        # Distances 0, 1 and 3 -> weights s/1, s/4, s/16
        points = [
            CalibrationPoint(Point2D(0, 0), Point2D(0, 0)),
            CalibrationPoint(Point2D(100, 0), Point2D(1, 0)),
            CalibrationPoint(Point2D(0, 100), Point2D(0, 3)),
        ]

        result = GazeInterpolator().interpolate(Point2D(0, 0), points, 2.0)

        total = 1 + 1 / 4 + 1 / 16
        assert result.x == pytest.approx(100 * (1 / 4) / total)
        assert result.y == pytest.approx(100 * (1 / 16) / total)

    def test_equidistant_gaze_averages_screens(self, five_points):
        result = GazeInterpolator().interpolate(Point2D(320, 220), five_points, 5.0)

        assert result.x == pytest.approx(500)
        assert result.y == pytest.approx(400)

    def test_zero_sensitivity_returns_none(self, five_points):
        assert GazeInterpolator().interpolate(Point2D(320, 220), five_points, 0.0) is None

    def test_sensitivity_scales_all_weights_equally(self, five_points):
        interpolator = GazeInterpolator()
        gaze = Point2D(305, 210)

        low = interpolator.interpolate(gaze, five_points, 1.0)
        high = interpolator.interpolate(gaze, five_points, 10.0)

        assert low.x == pytest.approx(high.x)
        assert low.y == pytest.approx(high.y)

    def test_horizontal_monotonicity(self, five_points):
        interpolator = GazeInterpolator()
        screen_x_values = [
            interpolator.interpolate(Point2D(gaze_x, 220), five_points, 5.0).x
            for gaze_x in (300, 310, 320, 330, 340)
        ]

        for i in range(1, len(screen_x_values)):
            assert screen_x_values[i] >= screen_x_values[i - 1], \
                f"Horizontal mapping not monotonic: {screen_x_values}"


class TestCursorState:
    """Tests for cursor position/velocity bookkeeping."""

    def test_centered(self):
        cursor = CursorState.centered(VIEWPORT)

        assert cursor.position == Point2D(500, 400)
        assert cursor.velocity == Point2D(0, 0)

    def test_velocity_is_latest_delta(self):
        cursor = CursorState.at(Point2D(100, 100))
        cursor.update(Point2D(110, 80))
        cursor.update(Point2D(115, 95))

        assert cursor.previous_position == Point2D(110, 80)
        assert cursor.position == Point2D(115, 95)
        assert cursor.velocity == Point2D(5, 15)


class TestCursorFusion:
    """Tests for head/eye fusion."""

    @pytest.fixture
    def same_screen_points(self):
        # Every point maps to (700, 400), so interpolation is exact
        return [
            CalibrationPoint(Point2D(700, 400), Point2D(300, 200)),
            CalibrationPoint(Point2D(700, 400), Point2D(340, 200)),
            CalibrationPoint(Point2D(700, 400), Point2D(320, 240)),
        ]

    def test_head_only(self):
        fusion = CursorFusion(FusionConfig(head_sensitivity=3.0))

        screen = fusion.fuse(Point2D(110, 95), Point2D(100, 100), VIEWPORT)

        assert screen == Point2D(530, 385)

    def test_head_at_center_maps_to_viewport_center(self):
        fusion = CursorFusion(FusionConfig())

        screen = fusion.fuse(Point2D(320, 240), Point2D(320, 240), VIEWPORT)

        assert screen == Point2D(500, 400)

    def test_head_and_eye_blend(self, same_screen_points):
        fusion = CursorFusion(FusionConfig(head_sensitivity=3.0, eye_sensitivity=5.0))

        screen = fusion.fuse(
            Point2D(110, 95),
            Point2D(100, 100),
            VIEWPORT,
            gaze=Point2D(320, 220),
            calibration_points=same_screen_points,
            eye_armed=True,
        )

        assert screen.x == pytest.approx(530 * 0.4 + 700 * 0.6)
        assert screen.y == pytest.approx(385 * 0.4 + 400 * 0.6)

    def test_eye_sensitivity_scales_eye_delta(self, same_screen_points):
        fusion = CursorFusion(FusionConfig(eye_sensitivity=10.0))

        screen = fusion.fuse(
            Point2D(100, 100),
            Point2D(100, 100),
            VIEWPORT,
            gaze=Point2D(320, 220),
            calibration_points=same_screen_points,
            eye_armed=True,
        )

        # Eye delta (200, 0) doubled
        assert screen.x == pytest.approx(500 * 0.4 + 900 * 0.6)
        assert screen.y == pytest.approx(400)

    @pytest.mark.parametrize(
        "config,gaze,eye_armed",
        [
            (FusionConfig(eye_tracking_enabled=False), Point2D(320, 220), True),
            (FusionConfig(), Point2D(320, 220), False),
            (FusionConfig(), None, True),
        ],
    )
    def test_falls_back_to_head_only(self, same_screen_points, config, gaze, eye_armed):
        fusion = CursorFusion(config)

        screen = fusion.fuse(
            Point2D(100, 100),
            Point2D(100, 100),
            VIEWPORT,
            gaze=gaze,
            calibration_points=same_screen_points,
            eye_armed=eye_armed,
        )

        assert screen == Point2D(500, 400)

    def test_too_few_points_falls_back_to_head_only(self, same_screen_points):
        fusion = CursorFusion(FusionConfig())

        screen = fusion.fuse(
            Point2D(100, 100),
            Point2D(100, 100),
            VIEWPORT,
            gaze=Point2D(320, 220),
            calibration_points=same_screen_points[:2],
            eye_armed=True,
        )

        assert screen == Point2D(500, 400)

    def test_configurable_blend_weight(self, same_screen_points):
        fusion = CursorFusion(FusionConfig(head_weight=1.0))

        screen = fusion.fuse(
            Point2D(100, 100),
            Point2D(100, 100),
            VIEWPORT,
            gaze=Point2D(320, 220),
            calibration_points=same_screen_points,
            eye_armed=True,
        )

        assert screen == Point2D(500, 400)

    def test_clamping_randomized(self, same_screen_points):
        rng = np.random.default_rng(1234)

        for _ in range(200):
            config = FusionConfig(
                head_sensitivity=float(rng.uniform(1, 10)),
                eye_sensitivity=float(rng.uniform(1, 10)),
            )
            fusion = CursorFusion(config)
            width, height = rng.uniform(100, 3000, size=2)
            face = Point2D(*rng.uniform(-2000, 2000, size=2))
            head = Point2D(*rng.uniform(-2000, 2000, size=2))
            points = [
                CalibrationPoint(Point2D(*rng.uniform(-5000, 5000, size=2)), p.eye)
                for p in same_screen_points
            ]

            screen = fusion.fuse(
                face,
                head,
                (width, height),
                gaze=Point2D(*rng.uniform(0, 640, size=2)),
                calibration_points=points,
                eye_armed=bool(rng.integers(0, 2)),
            )

            assert 0 <= screen.x <= width
            assert 0 <= screen.y <= height

    def test_clamp_to_viewport(self):
        assert clamp_to_viewport(Point2D(-5, 900), VIEWPORT) == Point2D(0, 800)

    def test_update_sets_velocity(self):
        fusion = CursorFusion(FusionConfig(head_sensitivity=2.0))
        cursor = CursorState.centered(VIEWPORT)

        fusion.update(cursor, Point2D(105, 90), Point2D(100, 100), VIEWPORT)

        assert cursor.position == Point2D(510, 380)
        assert cursor.velocity == Point2D(10, -20)
