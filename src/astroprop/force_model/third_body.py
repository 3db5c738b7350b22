"""Third-body gravitational perturbations.

Uses the indirect formulation, which accounts for the acceleration of the
central body towards the perturbing body as well as that of the
spacecraft.  Only the difference matters in a central-body-centred frame.

All inputs and outputs use kilometres and km/s^2.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 69.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.constants import GM_MOON, GM_PLANETS, GM_SUN
from astroprop.force_model._types import ThirdBodyPositions


def accel_third_body(r_object: ArrayLike, r_body: ArrayLike, gm: float) -> Array:
    """Perturbing acceleration due to a third body.

    Computes ``gm * ((s - r)/|s - r|^3 - s/|s|^3)``.

    Args:
        r_object: Position of the object relative to the central body [km].
            Shape ``(3,)`` or ``(6,)`` (only first 3 elements used).
        r_body: Position of the perturbing body relative to the central
            body [km].  Shape ``(3,)``.
        gm: Gravitational parameter of the perturbing body [km^3/s^2].

    Returns:
        Acceleration vector [km/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from astroprop.constants import GM_MOON
        from astroprop.force_model import accel_third_body
        r = jnp.array([7000.0, 0.0, 0.0])
        s = jnp.array([384400.0, 0.0, 0.0])
        a = accel_third_body(r, s, GM_MOON)
        ```
    """
    _float = get_dtype()
    r = jnp.asarray(r_object, dtype=_float)[:3]
    s = jnp.asarray(r_body, dtype=_float)

    d = s - r
    return _float(gm) * (d / jnp.linalg.norm(d) ** 3 - s / jnp.linalg.norm(s) ** 3)


def accel_third_bodies(
    r_object: ArrayLike,
    positions: ThirdBodyPositions,
    sun: bool = True,
    moon: bool = True,
    planets: bool = False,
) -> Array:
    """Summed third-body perturbation for the selected bodies.

    Planets without an entry in *positions* are skipped.  Names must be
    keys of :data:`~astroprop.constants.GM_PLANETS`.

    Args:
        r_object: Position of the object [km].
        positions: Third-body positions at the evaluation time.
        sun: Include the Sun.
        moon: Include the Moon.
        planets: Include every planet in ``positions.planets``.

    Returns:
        Acceleration vector [km/s^2], shape ``(3,)``.

    Raises:
        KeyError: If a planet name has no gravitational parameter.
    """
    a = jnp.zeros(3, dtype=get_dtype())
    if sun:
        a = a + accel_third_body(r_object, positions.sun, GM_SUN)
    if moon:
        a = a + accel_third_body(r_object, positions.moon, GM_MOON)
    if planets:
        for name, r_planet in positions.planets.items():
            a = a + accel_third_body(r_object, r_planet, GM_PLANETS[name])
    return a
