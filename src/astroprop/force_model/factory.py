"""Configurable orbit dynamics factory.

Composes the force model building blocks into a single
``dynamics(t, state) -> derivative`` closure compatible with every
astroprop integrator.

The factory captures static configuration at Python trace time: boolean
toggles become Python ``if`` branches that are resolved during
``jax.jit`` tracing, producing a computation graph with no runtime
branching.  No state is shared between closures, so runs with different
configurations may execute concurrently.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.force_model._types import AtmosphericConditions, EphemerisTable
from astroprop.force_model.config import ForceModelConfiguration, SpacecraftProperties
from astroprop.force_model.evaluation import (
    ThirdBodySource,
    acceleration_terms,
    log_model_substitutions,
)

DynamicsFunction = Callable[[ArrayLike, ArrayLike], Array]


def create_orbit_dynamics(
    epoch_0: datetime,
    config: ForceModelConfiguration | None = None,
    spacecraft: SpacecraftProperties | None = None,
    third_bodies: ThirdBodySource | None = None,
    atmosphere: AtmosphericConditions | None = None,
) -> DynamicsFunction:
    """Create a configurable orbit dynamics function.

    Returns a closure ``dynamics(t, state) -> derivative`` that computes
    the time-derivative of a 6-element inertial state vector, composing
    the force terms selected by *config*.

    Args:
        epoch_0: Reference epoch.  The integrator time *t* is interpreted
            as seconds since this epoch.
        config: Force model configuration.  Defaults to point-mass
            two-body gravity (``ForceModelConfiguration.two_body()``).
        spacecraft: Physical spacecraft properties.  Defaults to
            ``SpacecraftProperties()``.
        third_bodies: Third-body positions, either a fixed snapshot or an
            :class:`~astroprop.force_model._types.EphemerisTable`.  A table
            whose reference epoch differs from *epoch_0* is shifted
            accordingly.
        atmosphere: Space-weather snapshot.  Not used by the exponential
            density model.

    Returns:
        A callable ``dynamics(t, state) -> derivative`` where:

        - *t*: seconds since *epoch_0* (scalar).
        - *state*: ``[x, y, z, vx, vy, vz]`` [km, km/s].
        - *derivative*: ``[vx, vy, vz, ax, ay, az]`` [km/s, km/s^2].

    Examples:
        ```python
        import jax.numpy as jnp
        from datetime import datetime, timezone
        from astroprop.force_model import ForceModelConfiguration, create_orbit_dynamics
        from astroprop.integrators import rk4_step
        epoch_0 = datetime(2024, 6, 15, 12, tzinfo=timezone.utc)
        dynamics = create_orbit_dynamics(epoch_0, ForceModelConfiguration.low_fidelity())
        x0 = jnp.array([6878.0, 0.0, 0.0, 0.0, 7.612, 0.0])
        result = rk4_step(dynamics, 0.0, x0, 60.0)
        ```
    """
    if config is None:
        config = ForceModelConfiguration.two_body()
    if spacecraft is None:
        spacecraft = SpacecraftProperties()
    if atmosphere is None:
        atmosphere = AtmosphericConditions()

    log_model_substitutions(config, third_bodies)

    _config = config
    _spacecraft = spacecraft
    _third_bodies = third_bodies
    _offset = 0.0
    if isinstance(third_bodies, EphemerisTable):
        _offset = (epoch_0 - third_bodies.epoch_0).total_seconds()

    def dynamics(t: ArrayLike, state: ArrayLike) -> Array:
        """Orbit dynamics: state derivative in the inertial frame.

        Args:
            t: Seconds since epoch_0 (scalar).
            state: ``[x, y, z, vx, vy, vz]`` [km, km/s].

        Returns:
            jax.Array: ``[vx, vy, vz, ax, ay, az]`` [km/s, km/s^2].
        """
        positions = None
        if _third_bodies is not None:
            positions = _third_bodies.at(t + _offset)

        terms = acceleration_terms(state, _config, _spacecraft, positions)
        a = terms.gravity + terms.drag + terms.srp + terms.third_body
        return jnp.concatenate([jnp.asarray(state)[3:6], a])

    return dynamics
