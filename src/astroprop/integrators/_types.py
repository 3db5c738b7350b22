"""Type definitions for numerical integrators.

- :class:`IntegratorType`: integrator selection accepted by
  :class:`~astroprop.propagation.PropagationConfiguration`.
- :class:`StepResult`: output of every step function.
- :class:`Integrator`: a resolved integrator, i.e. the step function plus
  the properties the propagation engine needs to drive it.

``StepResult`` and ``Integrator`` are :class:`~typing.NamedTuple`
instances, which JAX treats as pytrees automatically.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import NamedTuple

from jax import Array


class IntegratorType(Enum):
    """Numerical integration method."""

    RK4 = "rk4"
    RK45 = "rk45"
    RK78 = "rk78"
    ADAMS_BASHFORTH = "adams_bashforth"
    GAUSS_JACKSON = "gauss_jackson"


class StepResult(NamedTuple):
    """Result of a single integrator step attempt.

    Attributes:
        state: State vector at time ``t + dt_used``.
        dt_used: Timestep taken.  Always equals the requested ``dt``; the
            step functions make a single attempt and leave rejection to
            the caller.
        error_estimate: Maximum absolute componentwise difference between
            the embedded solutions, in the state's own units.  Always 0.0
            for RK4.
    """

    state: Array
    dt_used: Array
    error_estimate: Array


StepFunction = Callable[..., StepResult]


class Integrator(NamedTuple):
    """A resolved integrator.

    Attributes:
        type: Method actually used.
        order: Order of the error estimator, used for step-size control.
        adaptive: Whether steps are accepted or rejected from the error
            estimate.
        step: Step function ``step(dynamics, t, x, dt) -> StepResult``.
        requested: Method originally requested; differs from *type* when a
            fallback was applied.
    """

    type: IntegratorType
    order: int
    adaptive: bool
    step: StepFunction
    requested: IntegratorType
