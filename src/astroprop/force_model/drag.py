"""Atmospheric drag acceleration model.

Computes the non-conservative acceleration due to atmospheric drag on a
spacecraft, using the velocity relative to an atmosphere that co-rotates
with the Earth about the inertial z-axis.

State in km and km/s; density in kg/m^3; areas in m^2; output in km/s^2.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.constants import OMEGA_EARTH
from astroprop.force_model.config import SpacecraftProperties


def relative_velocity(x: ArrayLike) -> Array:
    """Velocity relative to the co-rotating atmosphere.

    Computes ``v - omega x r`` with ``omega = [0, 0, OMEGA_EARTH]``.

    Args:
        x: 6-element inertial state ``[r, v]`` [km; km/s].

    Returns:
        Relative velocity [km/s], shape ``(3,)``.
    """
    _float = get_dtype()
    x = jnp.asarray(x, dtype=_float)
    omega = jnp.array([_float(0.0), _float(0.0), _float(OMEGA_EARTH)])
    return x[3:6] - jnp.cross(omega, x[:3])


def accel_drag(
    x: ArrayLike,
    density: ArrayLike,
    spacecraft: SpacecraftProperties,
) -> Array:
    """Acceleration due to atmospheric drag.

    ``a = -1/2 * rho * Cd * A/m * |v_rel| * v_rel``.

    Args:
        x: 6-element inertial state ``[r, v]`` [km; km/s].
        density: Atmospheric density [kg/m^3].
        spacecraft: Mass, drag area and drag coefficient.

    Returns:
        Drag acceleration [km/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from astroprop.force_model import SpacecraftProperties, accel_drag
        x = jnp.array([6778.0, 0.0, 0.0, 0.0, 7.67, 0.0])
        a = accel_drag(x, 3.7e-12, SpacecraftProperties())
        ```
    """
    _float = get_dtype()
    v_rel = relative_velocity(x)
    v_abs = jnp.linalg.norm(v_rel)

    # rho*A/m is per metre; |v_rel| v_rel in (km/s)^2 -> factor 1e3 for km/s^2
    k = (
        _float(-0.5)
        * _float(spacecraft.drag_coefficient)
        * _float(spacecraft.drag_area / spacecraft.mass)
        * jnp.asarray(density, dtype=_float)
        * _float(1.0e3)
    )
    return k * v_abs * v_rel
