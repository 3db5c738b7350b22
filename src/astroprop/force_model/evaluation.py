"""Composition of the individual force terms.

:func:`acceleration_terms` is the traceable core shared by the dynamics
closure of :mod:`astroprop.force_model.factory` and by :func:`evaluate`,
which adds input validation and returns a per-term
:class:`~astroprop.force_model._types.AccelerationBreakdown`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import NamedTuple, Union

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.constants import DRAG_CUTOFF_ALTITUDE, R_EARTH
from astroprop.errors import ForceModelError
from astroprop.force_model._types import (
    AccelerationBreakdown,
    AtmosphericConditions,
    EphemerisTable,
    ThirdBodyPositions,
)
from astroprop.force_model.config import (
    ForceModelConfiguration,
    ShadowModel,
    SpacecraftProperties,
)
from astroprop.force_model.density import density_exponential
from astroprop.force_model.drag import accel_drag
from astroprop.force_model.gravity import accel_gravity
from astroprop.force_model.srp import (
    accel_srp,
    eclipse_conical,
    eclipse_cylindrical,
    eclipse_state,
)
from astroprop.force_model.third_body import accel_third_bodies
from astroprop.state import PhysicalState

logger = logging.getLogger(__name__)

ThirdBodySource = Union[ThirdBodyPositions, EphemerisTable]


class AccelerationTerms(NamedTuple):
    """Per-term accelerations [km/s^2] and the illumination fraction."""

    gravity: Array
    drag: Array
    srp: Array
    third_body: Array
    shadow_factor: Array


def log_model_substitutions(
    config: ForceModelConfiguration,
    third_bodies: ThirdBodySource | None = None,
) -> tuple[str, ...]:
    """Warn about every fallback applied to *config* and return the notes.

    Also warns when terms that need third-body positions are enabled but
    none were supplied.
    """
    notes = config.fidelity_notes()
    for note in notes:
        logger.warning("Force model fallback: %s", note)
    if third_bodies is None and config.needs_third_bodies:
        logger.warning(
            "No third-body positions supplied; SRP and third-body "
            "accelerations are zero"
        )
    return notes


def acceleration_terms(
    x: ArrayLike,
    config: ForceModelConfiguration,
    spacecraft: SpacecraftProperties,
    positions: ThirdBodyPositions | None = None,
) -> AccelerationTerms:
    """Evaluate every force term for a 6-element state.

    Toggles in *config* are Python branches resolved at trace time; a
    disabled term is the exact zero vector.

    Args:
        x: ``[x, y, z, vx, vy, vz]`` [km, km/s].
        config: Force model configuration.
        spacecraft: Physical spacecraft properties.
        positions: Third-body positions at the evaluation time.  When
            ``None``, SRP and third-body terms are zero.

    Returns:
        AccelerationTerms: Per-term accelerations.
    """
    _float = get_dtype()
    x = jnp.asarray(x, dtype=_float)
    r = x[:3]
    zero = jnp.zeros(3, dtype=_float)

    # --- Gravity ---
    if config.enable_central_body_gravity:
        a_grav = accel_gravity(r, config.effective_gravity_model())
    else:
        a_grav = zero

    # --- Atmospheric drag ---
    if config.drag_active:
        altitude = jnp.linalg.norm(r) - _float(R_EARTH)
        a_drag = jnp.where(
            altitude > _float(DRAG_CUTOFF_ALTITUDE),
            zero,
            accel_drag(x, density_exponential(altitude), spacecraft),
        )
    else:
        a_drag = zero

    # --- Solar radiation pressure ---
    nu = _float(1.0)
    if config.enable_eclipsing and positions is not None:
        if config.shadow_model is ShadowModel.CONICAL:
            nu = eclipse_conical(r, positions.sun)
        else:
            nu = eclipse_cylindrical(r, positions.sun)
    if config.srp_active and positions is not None:
        a_srp = nu * accel_srp(r, positions.sun, spacecraft)
    else:
        a_srp = zero

    # --- Third-body perturbations ---
    if positions is not None and (
        config.enable_third_body_sun
        or config.enable_third_body_moon
        or config.enable_third_body_planets
    ):
        a_third = accel_third_bodies(
            r,
            positions,
            sun=config.enable_third_body_sun,
            moon=config.enable_third_body_moon,
            planets=config.enable_third_body_planets,
        )
    else:
        a_third = zero

    return AccelerationTerms(a_grav, a_drag, a_srp, a_third, jnp.asarray(nu, dtype=_float))


def positions_at(
    third_bodies: ThirdBodySource | None, epoch: datetime
) -> ThirdBodyPositions | None:
    """Resolve a snapshot or table to positions at *epoch*."""
    if third_bodies is None:
        return None
    if isinstance(third_bodies, EphemerisTable):
        return third_bodies.at((epoch - third_bodies.epoch_0).total_seconds())
    return third_bodies


def _enabled_bodies(
    config: ForceModelConfiguration, positions: ThirdBodyPositions
) -> list[tuple[str, Array]]:
    bodies = []
    if config.enable_third_body_sun:
        bodies.append(("the Sun", positions.sun))
    if config.enable_third_body_moon:
        bodies.append(("the Moon", positions.moon))
    if config.enable_third_body_planets:
        bodies.extend(positions.planets.items())
    return bodies


def evaluate(
    state: PhysicalState,
    spacecraft: SpacecraftProperties,
    epoch: datetime | None = None,
    config: ForceModelConfiguration | None = None,
    third_bodies: ThirdBodySource | None = None,
    atmosphere: AtmosphericConditions | None = None,
) -> AccelerationBreakdown:
    """Total acceleration on a spacecraft with its per-term breakdown.

    Args:
        state: Spacecraft state.
        spacecraft: Physical spacecraft properties.
        epoch: Evaluation epoch.  Defaults to ``state.epoch``; used to
            look up positions in an :class:`EphemerisTable`.
        config: Force model configuration.  Defaults to
            ``ForceModelConfiguration.two_body()``.
        third_bodies: Third-body snapshot or table.
        atmosphere: Space-weather snapshot.  Not used by the exponential
            density model.

    Returns:
        AccelerationBreakdown: Total and per-term accelerations, eclipse
        state and shadow factor.

    Raises:
        ForceModelError: If the state is not finite, the spacecraft is at
            the centre of the central body, or a direction vector to an
            active Sun, Moon or planet has zero length.

    Examples:
        ```python
        from datetime import datetime, timezone
        from astroprop.force_model import SpacecraftProperties, evaluate
        from astroprop.state import PhysicalState
        s = PhysicalState(datetime(2024, 1, 1, tzinfo=timezone.utc),
                          [7000.0, 0.0, 0.0], [0.0, 7.546, 0.0])
        b = evaluate(s, SpacecraftProperties())
        b.gravity_magnitude  # ~8.13e-3 km/s^2
        ```
    """
    if config is None:
        config = ForceModelConfiguration.two_body()
    if epoch is None:
        epoch = state.epoch
    if atmosphere is None:
        atmosphere = AtmosphericConditions()

    x = state.to_array()
    if not bool(jnp.all(jnp.isfinite(x))):
        raise ForceModelError(f"State is not finite: {state!r}")
    if float(state.radius) == 0.0:
        raise ForceModelError("Spacecraft position is at the centre of the central body")

    log_model_substitutions(config, third_bodies)
    positions = positions_at(third_bodies, epoch)

    if positions is not None:
        if not bool(jnp.all(jnp.isfinite(positions.sun))):
            raise ForceModelError("Sun position is not finite")
        if config.srp_active and float(jnp.linalg.norm(positions.sun - state.position)) == 0.0:
            raise ForceModelError("Spacecraft coincides with the Sun; SRP direction undefined")
        for name, s in _enabled_bodies(config, positions):
            if float(jnp.linalg.norm(s)) == 0.0:
                raise ForceModelError(f"Position of {name} is at the centre of the central body")
            if float(jnp.linalg.norm(s - state.position)) == 0.0:
                raise ForceModelError(
                    f"Spacecraft coincides with {name}; third-body direction undefined"
                )

    terms = acceleration_terms(x, config, spacecraft, positions)
    total = terms.gravity + terms.drag + terms.srp + terms.third_body
    nu = float(terms.shadow_factor)
    return AccelerationBreakdown(
        total=total,
        gravity=terms.gravity,
        drag=terms.drag,
        srp=terms.srp,
        third_body=terms.third_body,
        eclipse=eclipse_state(nu),
        shadow_factor=nu,
    )
