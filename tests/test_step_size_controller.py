"""Tests for adaptive step-size control."""

import math

import pytest

from astroprop.integrators import (
    TOLERANCE_REFERENCE_RADIUS,
    StepSizeController,
    scaled_tolerance,
)


class TestScaledTolerance:
    def test_scales_with_radius(self):
        assert scaled_tolerance(7000.0, 1e-10, 1e-12) == pytest.approx(7e-7 + 1e-12)

    def test_floor_radius(self):
        tol = scaled_tolerance(10.0, 1e-10, 0.0)
        assert tol == pytest.approx(1e-10 * TOLERANCE_REFERENCE_RADIUS)

    def test_absolute_only(self):
        assert scaled_tolerance(7000.0, 0.0, 1e-9) == 1e-9


class TestStepSizeController:
    def test_defaults(self):
        ctrl = StepSizeController()
        assert ctrl.safety_factor == 0.9
        assert ctrl.min_scale_factor == 0.1
        assert ctrl.max_scale_factor == 5.0

    def test_optimal_prediction(self):
        ctrl = StepSizeController()
        h = ctrl.compute_new_step_size(60.0, 2e-9, 1e-9, 4, 1.0, 600.0)
        assert h == pytest.approx(60.0 * 0.9 * 0.5 ** 0.2)

    def test_growth_capped(self):
        ctrl = StepSizeController()
        h = ctrl.compute_new_step_size(60.0, 1e-15, 1e-6, 4, 1.0, 600.0)
        assert h == pytest.approx(300.0)

    def test_shrink_capped(self):
        ctrl = StepSizeController()
        h = ctrl.compute_new_step_size(60.0, 1.0, 1e-12, 4, 1.0, 600.0)
        assert h == pytest.approx(6.0)

    def test_negligible_error_grows_by_max_factor(self):
        ctrl = StepSizeController()
        assert ctrl.compute_new_step_size(60.0, 0.0, 1e-9, 4, 1.0, 600.0) == pytest.approx(300.0)

    def test_clamped_to_bounds(self):
        ctrl = StepSizeController()
        assert ctrl.compute_new_step_size(200.0, 0.0, 1e-9, 4, 1.0, 600.0) == 600.0
        assert ctrl.compute_new_step_size(2.0, 1.0, 1e-12, 4, 1.0, 600.0) == 1.0

    def test_sign_preserved_backward(self):
        ctrl = StepSizeController()
        h = ctrl.compute_new_step_size(-60.0, 2e-9, 1e-9, 4, 1.0, 600.0)
        assert h < 0.0
        assert abs(h) == pytest.approx(60.0 * 0.9 * 0.5 ** 0.2)

    def test_result_finite(self):
        ctrl = StepSizeController()
        assert math.isfinite(ctrl.compute_new_step_size(60.0, 1e300, 1e-300, 4, 1.0, 600.0))

    @pytest.mark.parametrize(
        "error, tol, expected",
        [(2.0, 1.0, True), (1.0, 1.0, False), (0.5, 1.0, False)],
    )
    def test_should_reject(self, error, tol, expected):
        assert StepSizeController.should_reject_step(error, tol) is expected

    def test_custom_factors(self):
        ctrl = StepSizeController(safety_factor=0.8, max_scale_factor=2.0)
        assert ctrl.compute_new_step_size(60.0, 0.0, 1e-9, 4, 1.0, 600.0) == pytest.approx(120.0)
