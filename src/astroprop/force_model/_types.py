"""Environment snapshots and result types for the force model.

- :class:`ThirdBodyPositions`: Sun/Moon/planet positions at one instant.
- :class:`EphemerisTable`: third-body positions sampled over an interval
  and linearly interpolated, traceable under ``jax.jit``.
- :class:`AtmosphericConditions`: space-weather indices.
- :class:`EclipseState` and :class:`AccelerationBreakdown`: outputs of
  :func:`~astroprop.force_model.evaluation.evaluate`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype


class EclipseState(Enum):
    """Illumination state of the spacecraft."""

    NONE = "none"
    PENUMBRA = "penumbra"
    UMBRA = "umbra"


@dataclass(frozen=True, eq=False)
class ThirdBodyPositions:
    """Positions of perturbing bodies relative to the central body.

    Expressed in the same inertial frame as the spacecraft state.

    Args:
        sun: Sun position [km], shape ``(3,)``.
        moon: Moon position [km], shape ``(3,)``.
        planets: Planet positions [km] keyed by lowercase name (see
            :data:`~astroprop.constants.GM_PLANETS`).
    """

    sun: Array
    moon: Array
    planets: dict[str, Array] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _float = get_dtype()
        object.__setattr__(self, "sun", jnp.asarray(self.sun, dtype=_float))
        object.__setattr__(self, "moon", jnp.asarray(self.moon, dtype=_float))
        object.__setattr__(
            self,
            "planets",
            {k: jnp.asarray(v, dtype=_float) for k, v in self.planets.items()},
        )

    def at(self, t: ArrayLike) -> ThirdBodyPositions:
        """Positions at *t* seconds from the reference epoch.

        A snapshot is time-independent and returns itself.
        """
        return self


@dataclass(frozen=True, eq=False)
class EphemerisTable:
    """Third-body positions sampled on a time grid.

    Build with :func:`~astroprop.force_model.ephemerides.sample_ephemeris`.
    Positions between samples are linearly interpolated; outside the grid
    the end samples are held.

    Args:
        epoch_0: Epoch corresponding to ``times[0] == 0``.
        times: Sample offsets from *epoch_0* [s], shape ``(N,)``, strictly
            increasing.
        sun: Sun positions [km], shape ``(N, 3)``.
        moon: Moon positions [km], shape ``(N, 3)``.
        planets: Planet positions [km], each of shape ``(N, 3)``.
    """

    epoch_0: datetime
    times: Array
    sun: Array
    moon: Array
    planets: dict[str, Array] = field(default_factory=dict)

    def at(self, t: ArrayLike) -> ThirdBodyPositions:
        """Interpolated positions at *t* seconds from :attr:`epoch_0`."""
        return ThirdBodyPositions(
            sun=_interp_rows(t, self.times, self.sun),
            moon=_interp_rows(t, self.times, self.moon),
            planets={
                name: _interp_rows(t, self.times, pos)
                for name, pos in self.planets.items()
            },
        )


def _interp_rows(t: ArrayLike, times: Array, values: Array) -> Array:
    t = jnp.asarray(t, dtype=times.dtype)
    return jnp.array([jnp.interp(t, times, values[:, i]) for i in range(3)])


@dataclass(frozen=True)
class AtmosphericConditions:
    """Space-weather snapshot for density models.

    Args:
        f107: 10.7 cm solar radio flux [sfu].
        ap: Geomagnetic planetary index.
    """

    f107: float = 150.0
    ap: float = 15.0


@dataclass(frozen=True, eq=False)
class AccelerationBreakdown:
    """Total acceleration and its per-term contributions.

    Every vector has shape ``(3,)`` and units km/s^2.  Disabled terms are
    exactly zero.

    Attributes:
        total: Sum of all terms.
        gravity: Central-body gravity.
        drag: Atmospheric drag.
        srp: Solar radiation pressure, already scaled by *shadow_factor*.
        third_body: Sum of third-body perturbations.
        eclipse: Illumination state.
        shadow_factor: Visible fraction of the solar disk in ``[0, 1]``.
    """

    total: Array
    gravity: Array
    drag: Array
    srp: Array
    third_body: Array
    eclipse: EclipseState = EclipseState.NONE
    shadow_factor: float = 1.0

    @property
    def in_eclipse(self) -> bool:
        """Whether any part of the solar disk is hidden."""
        return self.eclipse is not EclipseState.NONE

    @property
    def total_magnitude(self) -> float:
        return float(jnp.linalg.norm(self.total))

    @property
    def gravity_magnitude(self) -> float:
        return float(jnp.linalg.norm(self.gravity))

    @property
    def drag_magnitude(self) -> float:
        return float(jnp.linalg.norm(self.drag))

    @property
    def srp_magnitude(self) -> float:
        return float(jnp.linalg.norm(self.srp))

    @property
    def third_body_magnitude(self) -> float:
        return float(jnp.linalg.norm(self.third_body))
