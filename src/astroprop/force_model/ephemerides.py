"""Third-body ephemeris providers.

Defines the :class:`ThirdBodyEphemeris` provider protocol, a
low-precision analytical Sun/Moon provider (:class:`AnalyticEphemeris`)
based on the models of Montenbruck & Gill, and :func:`sample_ephemeris`,
which resolves a provider into an immutable :class:`EphemerisTable` before
a propagation starts.

Positions are in the EME2000 (ECI) frame, in kilometres.

.. note::

    Time system: UTC is assumed to approximate TT for computing Julian
    centuries from J2000.  The error (~69 s as of 2024) introduces a
    negligible position offset for low-precision ephemeris work.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 70-73.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Protocol

import jax.numpy as jnp
from jax import Array

from astroprop.config import get_dtype
from astroprop.constants import AS2RAD, DAYS_PER_JULIAN_CENTURY, DEG2RAD, SECONDS_PER_DAY
from astroprop.force_model._types import EphemerisTable, ThirdBodyPositions

# Julian Date of J2000.0 and of the Unix epoch
_JD_J2000 = 2451545.0
_JD_UNIX = 2440587.5

# Obliquity of the J2000 ecliptic [rad]
_EPSILON = 23.43929111 * DEG2RAD


class ThirdBodyEphemeris(Protocol):
    """Provider of third-body positions."""

    def positions(self, epoch: datetime) -> ThirdBodyPositions:
        """Sun, Moon and planet positions relative to the central body."""
        ...


def julian_centuries(epoch: datetime) -> float:
    """Julian centuries elapsed from J2000.0 to *epoch*.

    Naive datetimes are interpreted as UTC.
    """
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)
    jd = epoch.timestamp() / SECONDS_PER_DAY + _JD_UNIX
    return (jd - _JD_J2000) / DAYS_PER_JULIAN_CENTURY


def _frac(x):
    """Fractional part of x: ``x - floor(x)``."""
    return x - jnp.floor(x)


def _ecliptic_to_equatorial(r_ecliptic: Array) -> Array:
    c = math.cos(_EPSILON)
    s = math.sin(_EPSILON)
    return jnp.array([
        r_ecliptic[0],
        c * r_ecliptic[1] - s * r_ecliptic[2],
        s * r_ecliptic[1] + c * r_ecliptic[2],
    ])


def sun_position(epoch: datetime) -> Array:
    """Position of the Sun in the ECI (EME2000) frame.

    Args:
        epoch: Epoch at which to compute the Sun's position.

    Returns:
        3-element Sun position vector in km.

    Examples:
        ```python
        from datetime import datetime, timezone
        from astroprop.force_model import sun_position
        r_sun = sun_position(datetime(2024, 2, 25, tzinfo=timezone.utc))
        float(jnp.linalg.norm(r_sun))  # ~1 AU
        ```
    """
    _float = get_dtype()
    pi2 = _float(2.0) * jnp.pi
    T = _float(julian_centuries(epoch))

    # Mean anomaly [rad]
    M = pi2 * _frac(_float(0.9931267) + _float(99.9973583) * T)

    # Ecliptic longitude [rad]
    L = pi2 * _frac(
        _float(0.7859444)
        + M / pi2
        + (_float(6892.0) * jnp.sin(M) + _float(72.0) * jnp.sin(_float(2.0) * M))
        / _float(1296.0e3)
    )

    # Distance [km]
    r = (
        _float(149.619e6)
        - _float(2.499e6) * jnp.cos(M)
        - _float(0.021e6) * jnp.cos(_float(2.0) * M)
    )

    return _ecliptic_to_equatorial(
        jnp.array([r * jnp.cos(L), r * jnp.sin(L), _float(0.0)])
    )


def moon_position(epoch: datetime) -> Array:
    """Position of the Moon in the ECI (EME2000) frame.

    Args:
        epoch: Epoch at which to compute the Moon's position.

    Returns:
        3-element Moon position vector in km.
    """
    _float = get_dtype()
    pi2 = _float(2.0) * jnp.pi
    T = _float(julian_centuries(epoch))

    # Mean elements of the lunar orbit
    L_0 = _frac(_float(0.606433) + _float(1336.851344) * T)        # Mean longitude [rev]
    l_m = pi2 * _frac(_float(0.374897) + _float(1325.552410) * T)  # Moon mean anomaly
    lp = pi2 * _frac(_float(0.993133) + _float(99.997361) * T)     # Sun mean anomaly
    D = pi2 * _frac(_float(0.827361) + _float(1236.853086) * T)    # Moon-Sun elongation
    F = pi2 * _frac(_float(0.259086) + _float(1342.227825) * T)    # Argument of latitude

    # Ecliptic longitude perturbation [arcsec]
    dL = (
        22640.0 * jnp.sin(l_m)
        - 4586.0 * jnp.sin(l_m - 2.0 * D)
        + 2370.0 * jnp.sin(2.0 * D)
        + 769.0 * jnp.sin(2.0 * l_m)
        - 668.0 * jnp.sin(lp)
        - 412.0 * jnp.sin(2.0 * F)
        - 212.0 * jnp.sin(2.0 * l_m - 2.0 * D)
        - 206.0 * jnp.sin(l_m + lp - 2.0 * D)
        + 192.0 * jnp.sin(l_m + 2.0 * D)
        - 165.0 * jnp.sin(lp - 2.0 * D)
        - 125.0 * jnp.sin(D)
        - 110.0 * jnp.sin(l_m + lp)
        + 148.0 * jnp.sin(l_m - lp)
        - 55.0 * jnp.sin(2.0 * F - 2.0 * D)
    )

    # Ecliptic longitude [rad]
    L = pi2 * _frac(L_0 + dL / _float(1296.0e3))

    # Ecliptic latitude [rad]
    S = F + (dL + 412.0 * jnp.sin(2.0 * F) + 541.0 * jnp.sin(lp)) * AS2RAD
    h = F - 2.0 * D
    N = (
        -526.0 * jnp.sin(h)
        + 44.0 * jnp.sin(l_m + h)
        - 31.0 * jnp.sin(-l_m + h)
        - 23.0 * jnp.sin(lp + h)
        + 11.0 * jnp.sin(-lp + h)
        - 25.0 * jnp.sin(-2.0 * l_m + F)
        + 21.0 * jnp.sin(-l_m + F)
    )
    B = (18520.0 * jnp.sin(S) + N) * AS2RAD

    # Distance [km]
    r = (
        385000.0
        - 20905.0 * jnp.cos(l_m)
        - 3699.0 * jnp.cos(2.0 * D - l_m)
        - 2956.0 * jnp.cos(2.0 * D)
        - 570.0 * jnp.cos(2.0 * l_m)
        + 246.0 * jnp.cos(2.0 * l_m - 2.0 * D)
        - 205.0 * jnp.cos(lp - 2.0 * D)
        - 171.0 * jnp.cos(l_m + 2.0 * D)
        - 152.0 * jnp.cos(l_m + lp - 2.0 * D)
    )

    return _ecliptic_to_equatorial(jnp.array([
        r * jnp.cos(L) * jnp.cos(B),
        r * jnp.sin(L) * jnp.cos(B),
        r * jnp.sin(B),
    ]))


class AnalyticEphemeris:
    """Sun and Moon positions from the analytical models of this module.

    Planet positions are not provided.

    Examples:
        ```python
        from datetime import datetime, timezone
        from astroprop.force_model import AnalyticEphemeris
        pos = AnalyticEphemeris().positions(datetime(2024, 6, 1, tzinfo=timezone.utc))
        ```
    """

    def positions(self, epoch: datetime) -> ThirdBodyPositions:
        return ThirdBodyPositions(sun=sun_position(epoch), moon=moon_position(epoch))

    def __repr__(self) -> str:
        return "AnalyticEphemeris()"


def sample_ephemeris(
    provider: ThirdBodyEphemeris,
    epoch_0: datetime,
    duration_s: float,
    spacing_s: float = 3600.0,
) -> EphemerisTable:
    """Sample a provider over ``[epoch_0, epoch_0 + duration_s]``.

    The grid always includes both interval ends, so a backward interval
    (negative *duration_s*) is sampled from its earlier end.  All provider
    calls happen here; the returned table performs no I/O.

    Args:
        provider: Any object with ``positions(epoch)``.
        epoch_0: Reference epoch; table time 0.
        duration_s: Length of the interval [s].  May be negative.
        spacing_s: Sample spacing [s].  Must be positive.

    Returns:
        EphemerisTable: Positions on the sample grid.

    Raises:
        ValueError: If *spacing_s* is not positive.
    """
    if not spacing_s > 0.0:
        raise ValueError(f"spacing_s must be positive, got {spacing_s}")

    lo, hi = sorted((0.0, float(duration_s)))
    n = max(int(math.ceil((hi - lo) / spacing_s)), 1)
    times = [lo + i * (hi - lo) / n for i in range(n + 1)]
    if hi == lo:
        times = [lo, lo + spacing_s]

    snapshots = [provider.positions(epoch_0 + timedelta(seconds=t)) for t in times]

    _float = get_dtype()
    names = sorted(snapshots[0].planets)
    return EphemerisTable(
        epoch_0=epoch_0,
        times=jnp.asarray(times, dtype=_float),
        sun=jnp.stack([s.sun for s in snapshots]),
        moon=jnp.stack([s.moon for s in snapshots]),
        planets={
            name: jnp.stack([s.planets[name] for s in snapshots]) for name in names
        },
    )
