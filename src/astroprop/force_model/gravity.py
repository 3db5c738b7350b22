"""Central-body gravity models: point-mass and low-order zonal harmonics.

Provides the point-mass acceleration and the closed-form J2 and J3 zonal
corrections for an oblate Earth.  The zonal terms are expressed directly in
the inertial frame, which assumes the body's rotation axis coincides with
the frame's z-axis (precession and nutation are neglected).

All inputs and outputs use kilometres and km/s^2.

References:
    1. D. Vallado, *Fundamentals of Astrodynamics and Applications
       (4th Ed.)*, 2013, p. 594.
    2. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 56-68.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.constants import GM_EARTH, J2_EARTH, J3_EARTH, R_EARTH
from astroprop.force_model.config import GravityModelType, resolve_model


def accel_point_mass(r_object: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Acceleration due to a point mass at the origin.

    Computes ``-gm * r / |r|^3``.

    Args:
        r_object: Position of the object [km].  Shape ``(3,)`` or ``(6,)``
            (only first 3 elements used).
        gm: Gravitational parameter of the attracting body [km^3/s^2].

    Returns:
        Acceleration vector [km/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from astroprop.force_model import accel_point_mass
        a = accel_point_mass(jnp.array([7000.0, 0.0, 0.0]))
        ```
    """
    _float = get_dtype()
    r = jnp.asarray(r_object, dtype=_float)[:3]
    r_norm = jnp.linalg.norm(r)
    return -_float(gm) * r / r_norm**3


def accel_j2(
    r_object: ArrayLike,
    gm: float = GM_EARTH,
    radius: float = R_EARTH,
    j2: float = J2_EARTH,
) -> Array:
    """Perturbing acceleration of the J2 zonal harmonic.

    Only the correction is returned; add :func:`accel_point_mass` for the
    full field.

    Args:
        r_object: Position of the object [km].  Shape ``(3,)`` or ``(6,)``.
        gm: Gravitational parameter [km^3/s^2].
        radius: Reference (equatorial) radius [km].
        j2: Unnormalised J2 coefficient.

    Returns:
        Acceleration vector [km/s^2], shape ``(3,)``.
    """
    _float = get_dtype()
    r = jnp.asarray(r_object, dtype=_float)[:3]
    x, y, z = r[0], r[1], r[2]

    r2 = jnp.dot(r, r)
    r5 = r2 * r2 * jnp.sqrt(r2)
    k = _float(1.5) * _float(j2) * _float(gm) * _float(radius) ** 2 / r5
    zz = _float(5.0) * z * z / r2

    return k * jnp.array([
        x * (zz - _float(1.0)),
        y * (zz - _float(1.0)),
        z * (zz - _float(3.0)),
    ])


def accel_j3(
    r_object: ArrayLike,
    gm: float = GM_EARTH,
    radius: float = R_EARTH,
    j3: float = J3_EARTH,
) -> Array:
    """Perturbing acceleration of the J3 zonal harmonic.

    J3 is odd in latitude and produces the north/south asymmetry of the
    field ("pear shape").

    Args:
        r_object: Position of the object [km].  Shape ``(3,)`` or ``(6,)``.
        gm: Gravitational parameter [km^3/s^2].
        radius: Reference (equatorial) radius [km].
        j3: Unnormalised J3 coefficient.

    Returns:
        Acceleration vector [km/s^2], shape ``(3,)``.
    """
    _float = get_dtype()
    r = jnp.asarray(r_object, dtype=_float)[:3]
    x, y, z = r[0], r[1], r[2]

    r2 = jnp.dot(r, r)
    r7 = r2 * r2 * r2 * jnp.sqrt(r2)
    k = _float(2.5) * _float(j3) * _float(gm) * _float(radius) ** 3 / r7
    z2 = z * z
    zz = _float(7.0) * z2 / r2

    return k * jnp.array([
        x * z * (zz - _float(3.0)),
        y * z * (zz - _float(3.0)),
        z2 * (zz - _float(6.0)) + _float(0.6) * r2,
    ])


def accel_gravity(
    r_object: ArrayLike,
    model: GravityModelType = GravityModelType.POINT_MASS,
) -> Array:
    """Acceleration due to Earth's gravity for the selected model.

    ``SPHERICAL_HARMONICS`` is evaluated as ``J2J3``; see
    :data:`~astroprop.force_model.config.MODEL_FALLBACKS`.

    Args:
        r_object: Position of the object in the inertial frame [km].
            Shape ``(3,)`` or ``(6,)``.
        model: Gravity model.  Resolved at trace time.

    Returns:
        Acceleration vector [km/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from astroprop.force_model import GravityModelType, accel_gravity
        r = jnp.array([7000.0, 0.0, 1000.0])
        a = accel_gravity(r, GravityModelType.J2)
        ```
    """
    model = resolve_model(GravityModelType(model))[0]
    a = accel_point_mass(r_object)
    if model in (GravityModelType.J2, GravityModelType.J2J3):
        a = a + accel_j2(r_object)
    if model is GravityModelType.J2J3:
        a = a + accel_j3(r_object)
    return a
