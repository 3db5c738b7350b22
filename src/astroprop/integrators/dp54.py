"""Dormand-Prince 5(4) embedded integrator (DP54).

Implements the Dormand-Prince embedded Runge-Kutta method with a 5th-order
solution for propagation and a 4th-order solution for error estimation,
using 7 stages per step.

:func:`dp54_step` makes a single attempt with the requested step size and
reports the raw error estimate.  Accepting or rejecting the step, and
choosing the next step size, is done by the caller with
:class:`~astroprop.integrators._adaptive.StepSizeController`.

The Butcher tableau coefficients are the standard Dormand-Prince values:

- Nodes (c): [0, 1/5, 3/10, 4/5, 8/9, 1, 1]
- 5th-order weights (b_high): [35/384, 0, 500/1113, 125/192, -2187/6784, 11/84, 0]
- 4th-order weights (b_low): [5179/57600, 0, 7571/16695, 393/640, -92097/339200,
  187/2100, 1/40]
"""

from __future__ import annotations

from collections.abc import Callable

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.integrators._types import StepResult

# Nodes
_C = (0.0, 1.0 / 5.0, 3.0 / 10.0, 4.0 / 5.0, 8.0 / 9.0, 1.0, 1.0)

# Coupling coefficients (lower-triangular rows)
_A = (
    (),
    (1.0 / 5.0,),
    (3.0 / 40.0, 9.0 / 40.0),
    (44.0 / 45.0, -56.0 / 15.0, 32.0 / 9.0),
    (19372.0 / 6561.0, -25360.0 / 2187.0, 64448.0 / 6561.0, -212.0 / 729.0),
    (9017.0 / 3168.0, -355.0 / 33.0, 46732.0 / 5247.0, 49.0 / 176.0, -5103.0 / 18656.0),
    (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0),
)

# 5th-order weights (propagated solution)
_B_HIGH = (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0, 0.0)

# 4th-order weights (error estimation)
_B_LOW = (
    5179.0 / 57600.0,
    0.0,
    7571.0 / 16695.0,
    393.0 / 640.0,
    -92097.0 / 339200.0,
    187.0 / 2100.0,
    1.0 / 40.0,
)


def _combine(weights, k):
    acc = None
    for w, ki in zip(weights, k):
        if w == 0.0:
            continue
        acc = w * ki if acc is None else acc + w * ki
    return acc


def dp54_step(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    t: ArrayLike,
    state: ArrayLike,
    dt: ArrayLike,
) -> StepResult:
    """Perform a single DP54 step attempt.

    Compatible with ``jax.jit``, ``jax.vmap`` and ``jax.grad``.

    Args:
        dynamics: ODE right-hand side function ``f(t, x) -> dx/dt``.
        t: Current time.
        state: Current state vector.
        dt: Timestep.  May be negative for backward integration.

    Returns:
        StepResult: 5th-order ``state`` at ``t + dt``, ``dt_used == dt``
        and ``error_estimate``, the largest absolute difference between the
        5th- and 4th-order solutions over all components.

    Examples:
        ```python
        import jax.numpy as jnp
        from astroprop.integrators import dp54_step
        def harmonic(t, x):
            return jnp.array([x[1], -x[0]])
        result = dp54_step(harmonic, 0.0, jnp.array([1.0, 0.0]), 0.1)
        result.state  # ~[cos(0.1), -sin(0.1)]
        ```
    """
    dtype = get_dtype()
    t = jnp.asarray(t, dtype=dtype)
    state = jnp.asarray(state, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)

    k = [dynamics(t, state)]
    for i in range(1, 7):
        x_i = state + dt * _combine(_A[i], k)
        k.append(dynamics(t + _C[i] * dt, x_i))

    state_high = state + dt * _combine(_B_HIGH, k)
    state_low = state + dt * _combine(_B_LOW, k)

    return StepResult(
        state=state_high,
        dt_used=dt,
        error_estimate=jnp.max(jnp.abs(state_high - state_low)),
    )
