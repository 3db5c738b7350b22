"""Adaptive step-size control for embedded Runge-Kutta methods.

The controller follows the standard embedded Runge-Kutta approach:

1. Compare the raw error estimate of a step attempt with a tolerance.
2. Reject the attempt if the error exceeds the tolerance.
3. Predict the next step size from the error ratio and the method order.

The propagation engine drives the controller from its host-side loop, so
it works on Python floats rather than JAX arrays.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Lower bound on the radius used to scale the relative tolerance [km]
TOLERANCE_REFERENCE_RADIUS = 1000.0


def scaled_tolerance(
    radius: float,
    relative_tolerance: float,
    absolute_tolerance: float,
) -> float:
    """Absolute tolerance for the raw DP54 error estimate.

    The error estimate mixes position (km) and velocity (km/s) components,
    so the relative tolerance is scaled by the orbit radius, floored at
    :data:`TOLERANCE_REFERENCE_RADIUS`:

    .. math::

        \\text{tol} = \\text{rel} \\cdot \\max(|r|, 1000\\,\\text{km}) + \\text{abs}

    Args:
        radius: Distance from the central body [km].
        relative_tolerance: Relative tolerance.
        absolute_tolerance: Absolute tolerance.

    Returns:
        float: Tolerance in the units of the error estimate.
    """
    return relative_tolerance * max(abs(radius), TOLERANCE_REFERENCE_RADIUS) + absolute_tolerance


@dataclass(frozen=True)
class StepSizeController:
    """Step-size controller for adaptive integrators.

    Attributes:
        safety_factor: Multiplicative safety factor applied to the optimal
            step-size prediction.
        min_scale_factor: Minimum allowed ratio ``|h_next| / |h|``.
        max_scale_factor: Maximum allowed ratio ``|h_next| / |h|``.
        negligible_error: Errors below this grow the step by
            *max_scale_factor* directly instead of dividing by a
            near-zero error.

    Examples:
        ```python
        from astroprop.integrators import StepSizeController
        ctrl = StepSizeController()
        ctrl.compute_new_step_size(60.0, 2e-9, 1e-9, 4, 1.0, 600.0)  # ~47.0
        ```
    """

    safety_factor: float = 0.9
    min_scale_factor: float = 0.1
    max_scale_factor: float = 5.0
    negligible_error: float = 1e-20

    def compute_new_step_size(
        self,
        current: float,
        error: float,
        tolerance: float,
        order: int,
        min_step: float,
        max_step: float,
    ) -> float:
        """Next step size from the error of the last attempt.

        .. math::

            h_{\\text{next}} = h \\cdot \\text{clip}\\left(
                S \\left(\\frac{\\text{tol}}{\\text{err}}\\right)^{1/(p+1)},
                s_{\\min}, s_{\\max}\\right)

        The magnitude is clamped to ``[min_step, max_step]`` and the sign
        of *current* is preserved for backward integration.

        Args:
            current: Current step size [s].  May be negative.
            error: Raw error estimate of the attempt.
            tolerance: Tolerance from :func:`scaled_tolerance`.
            order: Order of the error estimator.
            min_step: Minimum step magnitude [s].
            max_step: Maximum step magnitude [s].

        Returns:
            float: Next step size with the sign of *current*.
        """
        if error < self.negligible_error:
            scale = self.max_scale_factor
        else:
            scale = self.safety_factor * math.pow(tolerance / error, 1.0 / (order + 1))
            scale = max(self.min_scale_factor, min(self.max_scale_factor, scale))

        magnitude = min(max(abs(current) * scale, min_step), max_step)
        return math.copysign(magnitude, current)

    @staticmethod
    def should_reject_step(error: float, tolerance: float) -> bool:
        """Whether a step attempt with *error* must be retried."""
        return error > tolerance
