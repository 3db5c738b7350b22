"""Numerical ODE integrators for orbit propagation.

Provides a fixed-step and an adaptive Runge-Kutta integrator, implemented
in JAX for compatibility with ``jax.jit`` and ``jax.vmap``.

Available integrators:

- :func:`rk4_step` -- Classic 4th-order Runge-Kutta (fixed step)
- :func:`dp54_step` -- Dormand-Prince 5(4) (embedded error estimate)

All step functions share a common interface::

    result = step_fn(dynamics, t, state, dt)

where ``dynamics(t, x) -> dx`` defines the ODE right-hand side, and the
result is a :class:`StepResult` named tuple.

:func:`get_integrator` maps an :class:`IntegratorType` to a step function.
``RK78``, ``ADAMS_BASHFORTH`` and ``GAUSS_JACKSON`` are accepted but run
as Dormand-Prince 5(4); see :data:`INTEGRATOR_FALLBACKS`.
"""

from __future__ import annotations

from astroprop.integrators._adaptive import (
    TOLERANCE_REFERENCE_RADIUS,
    StepSizeController,
    scaled_tolerance,
)
from astroprop.integrators._types import (
    Integrator,
    IntegratorType,
    StepFunction,
    StepResult,
)
from astroprop.integrators.dp54 import dp54_step
from astroprop.integrators.rk4 import rk4_step

INTEGRATOR_FALLBACKS: dict[IntegratorType, IntegratorType] = {
    IntegratorType.RK78: IntegratorType.RK45,
    IntegratorType.ADAMS_BASHFORTH: IntegratorType.RK45,
    IntegratorType.GAUSS_JACKSON: IntegratorType.RK45,
}
"""Requested integrator -> integrator actually used."""

_IMPLEMENTED = {
    IntegratorType.RK4: (4, False, rk4_step),
    IntegratorType.RK45: (4, True, dp54_step),
}


def resolve_integrator(
    integrator_type: IntegratorType,
) -> tuple[IntegratorType, str | None]:
    """Apply :data:`INTEGRATOR_FALLBACKS` to a requested integrator.

    Returns:
        tuple: ``(effective_type, note)`` where *note* is ``None`` when no
        substitution took place.
    """
    integrator_type = IntegratorType(integrator_type)
    effective = INTEGRATOR_FALLBACKS.get(integrator_type)
    if effective is None:
        return integrator_type, None
    return effective, (
        f"integrator {integrator_type.value} is not implemented; "
        f"evaluated as {effective.value} (Dormand-Prince 5(4))"
    )


def get_integrator(integrator_type: IntegratorType) -> Integrator:
    """Resolve an integrator selection to a step function.

    Args:
        integrator_type: Requested method.

    Returns:
        Integrator: Step function with its order and adaptivity.

    Examples:
        ```python
        from astroprop.integrators import IntegratorType, get_integrator
        integ = get_integrator(IntegratorType.GAUSS_JACKSON)
        integ.type  # IntegratorType.RK45
        ```
    """
    effective, _ = resolve_integrator(integrator_type)
    order, adaptive, step = _IMPLEMENTED[effective]
    return Integrator(
        type=effective,
        order=order,
        adaptive=adaptive,
        step=step,
        requested=IntegratorType(integrator_type),
    )


__all__ = [
    "IntegratorType",
    "Integrator",
    "StepFunction",
    "StepResult",
    "StepSizeController",
    "TOLERANCE_REFERENCE_RADIUS",
    "scaled_tolerance",
    "rk4_step",
    "dp54_step",
    "INTEGRATOR_FALLBACKS",
    "resolve_integrator",
    "get_integrator",
]
