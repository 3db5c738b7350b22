"""Two-body orbit diagnostics for Earth-centric states.

Quantities used to check and summarise propagated trajectories: orbital
period, specific energy, angular momentum, osculating Keplerian elements
and the secular J2 drift of the ascending node.

All functions use JAX operations and are compatible with ``jax.jit`` and
``jax.vmap``.  Distances are in km, velocities in km/s.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.constants import GM_EARTH, J2_EARTH, R_EARTH


def circular_velocity(r: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Speed of a circular orbit of radius *r* [km/s]."""
    r = jnp.asarray(r, dtype=get_dtype())
    return jnp.sqrt(gm / r)


def orbital_period(a: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Compute the orbital period of an object around Earth.

    Args:
        a: Semi-major axis. Units: *km*
        gm: Gravitational parameter. Units: *km^3/s^2*

    Returns:
        Orbital period. Units: *s*

    Examples:
        ```python
        from astroprop.orbits import orbital_period
        T = orbital_period(7000.0)  # ~5828.5 s
        ```
    """
    a = jnp.asarray(a, dtype=get_dtype())
    return 2.0 * jnp.pi * jnp.sqrt(a**3 / gm)


def semimajor_axis_from_state(x: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Semi-major axis from the vis-viva equation. Units: *km*"""
    x = jnp.asarray(x, dtype=get_dtype())
    r = jnp.linalg.norm(x[:3])
    v_sq = jnp.sum(x[3:6] ** 2)
    return 1.0 / (2.0 / r - v_sq / gm)


def orbital_period_from_state(x: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Orbital period of the osculating orbit of state *x*. Units: *s*"""
    return orbital_period(semimajor_axis_from_state(x, gm), gm)


def specific_energy(x: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Specific orbital energy ``v^2/2 - gm/r``. Units: *km^2/s^2*"""
    x = jnp.asarray(x, dtype=get_dtype())
    return 0.5 * jnp.sum(x[3:6] ** 2) - gm / jnp.linalg.norm(x[:3])


def angular_momentum(x: ArrayLike) -> Array:
    """Specific angular momentum vector ``r x v``. Units: *km^2/s*"""
    x = jnp.asarray(x, dtype=get_dtype())
    return jnp.cross(x[:3], x[3:6])


def state_to_elements(x: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Osculating Keplerian elements of a Cartesian state.

    Derives the elements from position and velocity using angular
    momentum, vis-viva and the eccentric anomaly (Montenbruck & Gill
    Eq. 2.56-2.68).  Valid for elliptical orbits.

    Args:
        x: State ``[x, y, z, vx, vy, vz]`` in *km* and *km/s*.
        gm: Gravitational parameter. Units: *km^3/s^2*

    Returns:
        Orbital elements ``[a, e, i, RAAN, omega, M]``.
            Semi-major axis in *km*, angles in *rad* within ``[0, 2pi)``.

    References:
        O. Montenbruck and E. Gill, *Satellite Orbits*, 2012, Eq. 2.56-2.68.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    r = x[:3]
    v = x[3:6]
    r_mag = jnp.linalg.norm(r)

    # Angular momentum
    h = jnp.cross(r, v)
    h_mag = jnp.linalg.norm(h)
    W = h / h_mag

    i = jnp.arctan2(jnp.sqrt(W[0] * W[0] + W[1] * W[1]), W[2])
    raan = jnp.arctan2(W[0], -W[1])

    p = h_mag * h_mag / gm
    a = semimajor_axis_from_state(x, gm)
    n = jnp.sqrt(gm / jnp.abs(a) ** 3)

    # Clamp (1 - p/a) to prevent NaN for circular orbits
    ecc = jnp.sqrt(jnp.maximum(1.0 - p / a, 0.0))

    # Eccentric and mean anomaly
    E = jnp.arctan2(jnp.dot(r, v) / (n * a * a), 1.0 - r_mag / a)
    M = E - ecc * jnp.sin(E)

    # Argument of latitude and true anomaly
    u = jnp.arctan2(r[2], -r[0] * W[1] + r[1] * W[0])
    nu = jnp.arctan2(jnp.sqrt(1.0 - ecc * ecc) * jnp.sin(E), jnp.cos(E) - ecc)
    omega = u - nu

    two_pi = 2.0 * jnp.pi
    return jnp.array([
        a,
        ecc,
        i,
        jnp.mod(raan, two_pi),
        jnp.mod(omega, two_pi),
        jnp.mod(M, two_pi),
    ])


def raan_drift_rate(
    a: ArrayLike,
    e: ArrayLike,
    i: ArrayLike,
    gm: float = GM_EARTH,
    radius: float = R_EARTH,
    j2: float = J2_EARTH,
) -> Array:
    """Secular rate of change of the RAAN due to J2.

    .. math::

        \\dot\\Omega = -\\frac{3}{2} n J_2 \\left(\\frac{R}{p}\\right)^2 \\cos i

    Args:
        a: Semi-major axis. Units: *km*
        e: Eccentricity.
        i: Inclination. Units: *rad*

    Returns:
        RAAN drift rate. Units: *rad/s*
    """
    _float = get_dtype()
    a = jnp.asarray(a, dtype=_float)
    e = jnp.asarray(e, dtype=_float)
    i = jnp.asarray(i, dtype=_float)
    n = jnp.sqrt(gm / a**3)
    p = a * (1.0 - e**2)
    return -1.5 * n * j2 * (radius / p) ** 2 * jnp.cos(i)
