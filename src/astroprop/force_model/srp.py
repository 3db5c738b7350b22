"""Solar radiation pressure and eclipse shadow models.

Provides the cannonball SRP acceleration and two shadow models, conical
and cylindrical, for the fraction of the solar disk visible from the
spacecraft.

Positions in km; spacecraft areas in m^2; output in km/s^2.

Penumbra law: the conical model returns the geometric fraction of the
solar disk not covered by the Earth's disk, both treated as flat circles
of their apparent angular radii.  The fraction is continuous at the
umbra/penumbra and penumbra/sunlight boundaries, so it does not cause
step-size chatter when a trajectory crosses the shadow edge.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 80-83.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.constants import AU, P_SUN, R_EARTH, R_SUN
from astroprop.force_model._types import EclipseState
from astroprop.force_model.config import SpacecraftProperties


def solar_pressure(distance: ArrayLike) -> Array:
    """Solar radiation pressure at *distance* km from the Sun [N/m^2]."""
    _float = get_dtype()
    d = jnp.asarray(distance, dtype=_float)
    return _float(P_SUN) * (_float(AU) / d) ** 2


def accel_srp(
    r_object: ArrayLike,
    r_sun: ArrayLike,
    spacecraft: SpacecraftProperties,
) -> Array:
    """Acceleration due to solar radiation pressure (cannonball model).

    Magnitude ``P(d) * Cr * A/m`` directed from the Sun towards the
    spacecraft, with ``P(d) = P_SUN * (AU/d)^2``.  No shadowing is applied.

    Args:
        r_object: Position of the object [km].  Shape ``(3,)`` or ``(6,)``
            (only first 3 elements used).
        r_sun: Position of the Sun [km].  Shape ``(3,)``.
        spacecraft: Mass, SRP area and reflectivity coefficient.

    Returns:
        SRP acceleration [km/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from astroprop.constants import AU
        from astroprop.force_model import SpacecraftProperties, accel_srp
        a = accel_srp(jnp.array([7000.0, 0.0, 0.0]), jnp.array([AU, 0.0, 0.0]),
                      SpacecraftProperties())
        ```
    """
    _float = get_dtype()
    r = jnp.asarray(r_object, dtype=_float)[:3]
    r_s = jnp.asarray(r_sun, dtype=_float)

    d = r - r_s
    d_norm = jnp.linalg.norm(d)

    # N/m^2 * m^2/kg = m/s^2 -> km/s^2
    magnitude = (
        solar_pressure(d_norm)
        * _float(spacecraft.reflectivity_coefficient)
        * _float(spacecraft.srp_area_to_mass)
        * _float(1.0e-3)
    )
    return magnitude * d / d_norm


def eclipse_conical(r_object: ArrayLike, r_sun: ArrayLike) -> Array:
    """Illumination fraction using the conical shadow model.

    Compares the apparent angular radius of the Sun (*a*), of the Earth
    (*b*) and their angular separation (*c*) as seen from the spacecraft:

    - ``c >= a + b``: full sunlight, 1.
    - ``b >= a`` and ``c <= b - a``: umbra, 0.
    - ``a > b`` and ``c <= a - b``: annular, ``1 - b^2/a^2``.
    - otherwise penumbra: one minus the overlap area of the two disks
      over the solar disk area.

    Args:
        r_object: Position of the object [km].  Shape ``(3,)`` or ``(6,)``.
        r_sun: Position of the Sun [km].  Shape ``(3,)``.

    Returns:
        Illumination fraction (scalar) in ``[0, 1]``.
            0.0 = full shadow, 1.0 = full illumination.

    Examples:
        ```python
        import jax.numpy as jnp
        from astroprop.constants import AU
        from astroprop.force_model import eclipse_conical
        nu = eclipse_conical(jnp.array([-7000.0, 0.0, 0.0]),
                             jnp.array([AU, 0.0, 0.0]))  # 0.0
        ```
    """
    _float = get_dtype()
    one = _float(1.0)
    r = jnp.asarray(r_object, dtype=_float)[:3]
    r_s = jnp.asarray(r_sun, dtype=_float)

    r_norm = jnp.linalg.norm(r)
    d = r_s - r
    d_norm = jnp.linalg.norm(d)

    # Apparent angular radii
    a = jnp.arcsin(jnp.minimum(_float(R_SUN) / d_norm, one))  # Sun
    b = jnp.arcsin(jnp.minimum(_float(R_EARTH) / r_norm, one))  # Earth

    # Angular separation between Sun and Earth centre
    c = jnp.arccos(jnp.clip(-jnp.dot(r, d) / (r_norm * d_norm), -one, one))

    # Partial overlap of two disks (guard c == 0 outside the penumbra branch)
    c_safe = jnp.maximum(c, _float(1e-12))
    x = (c_safe**2 + a**2 - b**2) / (_float(2.0) * c_safe)
    y = jnp.sqrt(jnp.maximum(a**2 - x**2, _float(0.0)))
    area_overlap = (
        a**2 * jnp.arccos(jnp.clip(x / a, -one, one))
        + b**2 * jnp.arccos(jnp.clip((c_safe - x) / b, -one, one))
        - c_safe * y
    )
    nu_partial = jnp.clip(one - area_overlap / (jnp.pi * a**2), _float(0.0), one)

    is_full_illumination = c >= a + b
    is_umbra = (b >= a) & (c <= b - a)
    is_annular = (a > b) & (c <= a - b)

    return jnp.where(
        is_full_illumination,
        one,
        jnp.where(
            is_umbra,
            _float(0.0),
            jnp.where(is_annular, one - b**2 / a**2, nu_partial),
        ),
    )


def eclipse_cylindrical(r_object: ArrayLike, r_sun: ArrayLike) -> Array:
    """Illumination fraction using the cylindrical shadow model.

    Treats Earth's shadow as a cylinder of radius ``R_EARTH`` aligned with
    the Sun direction.  Returns 0.0 (shadow) or 1.0 (illuminated) with no
    penumbra.

    Args:
        r_object: Position of the object [km].  Shape ``(3,)`` or ``(6,)``.
        r_sun: Position of the Sun [km].  Shape ``(3,)``.

    Returns:
        Illumination fraction (scalar), 0.0 or 1.0.
    """
    _float = get_dtype()
    r = jnp.asarray(r_object, dtype=_float)[:3]
    r_s = jnp.asarray(r_sun, dtype=_float)

    e_sun = r_s / jnp.linalg.norm(r_s)
    r_proj = jnp.dot(r, e_sun)
    r_perp = jnp.linalg.norm(r - r_proj * e_sun)

    is_illuminated = (r_proj >= _float(0.0)) | (r_perp > _float(R_EARTH))
    return jnp.where(is_illuminated, _float(1.0), _float(0.0))


def eclipse_state(shadow_factor: float) -> EclipseState:
    """Classify an illumination fraction.

    1 maps to ``NONE``, 0 to ``UMBRA`` and anything in between to
    ``PENUMBRA``.
    """
    nu = float(shadow_factor)
    if nu >= 1.0:
        return EclipseState.NONE
    if nu <= 0.0:
        return EclipseState.UMBRA
    return EclipseState.PENUMBRA
