"""Configuration dataclasses for composable force models.

Provides :class:`SpacecraftProperties` for physical spacecraft properties
and :class:`ForceModelConfiguration` for selecting which acceleration terms
contribute to the dynamics.  Configuration is static: boolean toggles are
resolved when the dynamics closure is built (and therefore at JAX trace
time), producing a single computation graph with no runtime branching.

Some model selections are accepted for compatibility but implemented by a
simpler model.  The substitutions are listed in :data:`MODEL_FALLBACKS`
and reported by :meth:`ForceModelConfiguration.fidelity_notes`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from astroprop.errors import ConfigurationError


class GravityModelType(Enum):
    """Central-body gravity model."""

    POINT_MASS = "point_mass"
    J2 = "j2"
    J2J3 = "j2j3"
    SPHERICAL_HARMONICS = "spherical_harmonics"


class AtmosphereModelType(Enum):
    """Atmospheric density model used by the drag term."""

    NONE = "none"
    EXPONENTIAL = "exponential"
    HARRIS_PRIESTER = "harris_priester"
    NRLMSISE00 = "nrlmsise00"
    JACCHIA_ROBERTS = "jacchia_roberts"


class SrpModelType(Enum):
    """Solar radiation pressure spacecraft model."""

    NONE = "none"
    CANNONBALL = "cannonball"
    BOX_WING = "box_wing"


class ShadowModel(Enum):
    """Shadow geometry used for eclipse detection."""

    CONICAL = "conical"
    CYLINDRICAL = "cylindrical"


MODEL_FALLBACKS: dict[Enum, Enum] = {
    GravityModelType.SPHERICAL_HARMONICS: GravityModelType.J2J3,
    AtmosphereModelType.HARRIS_PRIESTER: AtmosphereModelType.EXPONENTIAL,
    AtmosphereModelType.NRLMSISE00: AtmosphereModelType.EXPONENTIAL,
    AtmosphereModelType.JACCHIA_ROBERTS: AtmosphereModelType.EXPONENTIAL,
    SrpModelType.BOX_WING: SrpModelType.CANNONBALL,
}
"""Requested model -> model actually evaluated."""


def resolve_model(model: Enum) -> tuple[Enum, str | None]:
    """Apply :data:`MODEL_FALLBACKS` to a requested model.

    Args:
        model: A member of one of the model enums.

    Returns:
        tuple: ``(effective_model, note)`` where *note* is ``None`` when no
        substitution took place, otherwise a human-readable explanation.

    Examples:
        ```python
        from astroprop.force_model.config import GravityModelType, resolve_model
        resolve_model(GravityModelType.SPHERICAL_HARMONICS)
        # (GravityModelType.J2J3, 'gravity model spherical_harmonics ...')
        ```
    """
    effective = MODEL_FALLBACKS.get(model)
    if effective is None:
        return model, None
    kind = {
        GravityModelType: "gravity model",
        AtmosphereModelType: "atmosphere model",
        SrpModelType: "SRP model",
    }[type(model)]
    return effective, (
        f"{kind} {model.value} is not implemented; evaluated as {effective.value}"
    )


def _coerce_enum(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        raise ConfigurationError(
            f"{name} must be one of {allowed}, got {value!r}"
        ) from None


@dataclass(frozen=True)
class SpacecraftProperties:
    """Physical properties of the spacecraft.

    Immutable for the duration of a propagation; fuel bookkeeping is the
    caller's concern.

    Args:
        mass: Spacecraft mass [kg].
        drag_coefficient: Coefficient of drag [dimensionless].
        drag_area: Wind-facing cross-sectional area [m^2].
        srp_area: Sun-facing cross-sectional area [m^2].
        reflectivity_coefficient: Coefficient of reflectivity
            [dimensionless], nominally between 0 and 2.

    Raises:
        ConfigurationError: If the mass is not positive, or any other
            value is negative or not finite.
    """

    mass: float = 1000.0
    drag_coefficient: float = 2.2
    drag_area: float = 10.0
    srp_area: float = 10.0
    reflectivity_coefficient: float = 1.3

    def __post_init__(self) -> None:
        for name in (
            "mass",
            "drag_coefficient",
            "drag_area",
            "srp_area",
            "reflectivity_coefficient",
        ):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}")
            if value < 0.0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        if self.mass == 0.0:
            raise ConfigurationError("mass must be positive, got 0.0")

    @property
    def ballistic_coefficient(self) -> float:
        """Ballistic coefficient ``m / (Cd * A)`` [kg/m^2]."""
        return self.mass / (self.drag_coefficient * self.drag_area)

    @property
    def srp_area_to_mass(self) -> float:
        """Sun-facing area-to-mass ratio [m^2/kg]."""
        return self.srp_area / self.mass


@dataclass(frozen=True)
class ForceModelConfiguration:
    """Configuration for composable orbit dynamics.

    Selects which acceleration terms contribute to the dynamics returned by
    :func:`~astroprop.force_model.factory.create_orbit_dynamics` and to the
    breakdown returned by :func:`~astroprop.force_model.evaluation.evaluate`.
    A disabled term contributes exactly the zero vector.

    Enum fields also accept their string values, e.g.
    ``gravity_model="j2j3"``.

    Args:
        enable_central_body_gravity: Include central-body gravity.
        gravity_model: Central-body gravity model.
        gravity_degree: Requested harmonic degree.  Informational: the
            zonal models fix the degree.
        gravity_order: Requested harmonic order.  Informational.
        enable_atmospheric_drag: Include atmospheric drag.
        atmosphere_model: Density model for the drag term.
        enable_srp: Include solar radiation pressure.
        srp_model: Spacecraft model for SRP.
        enable_eclipsing: Scale SRP by the illuminated fraction of the Sun.
        shadow_model: Shadow geometry used when *enable_eclipsing* is set.
        enable_third_body_sun: Include the Sun's third-body perturbation.
        enable_third_body_moon: Include the Moon's third-body perturbation.
        enable_third_body_planets: Include planetary third-body
            perturbations for planets present in the supplied positions.

    Examples:
        ```python
        from astroprop.force_model.config import ForceModelConfiguration
        cfg = ForceModelConfiguration.medium_fidelity()
        cfg.enable_atmospheric_drag  # True
        ```
    """

    # Gravity
    enable_central_body_gravity: bool = True
    gravity_model: GravityModelType = GravityModelType.POINT_MASS
    gravity_degree: int = 0
    gravity_order: int = 0

    # Atmosphere
    enable_atmospheric_drag: bool = False
    atmosphere_model: AtmosphereModelType = AtmosphereModelType.EXPONENTIAL

    # Solar radiation pressure
    enable_srp: bool = False
    srp_model: SrpModelType = SrpModelType.CANNONBALL
    enable_eclipsing: bool = True
    shadow_model: ShadowModel = ShadowModel.CONICAL

    # Third bodies
    enable_third_body_sun: bool = False
    enable_third_body_moon: bool = False
    enable_third_body_planets: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "gravity_model",
            _coerce_enum(GravityModelType, self.gravity_model, "gravity_model"),
        )
        object.__setattr__(
            self,
            "atmosphere_model",
            _coerce_enum(AtmosphereModelType, self.atmosphere_model, "atmosphere_model"),
        )
        object.__setattr__(
            self, "srp_model", _coerce_enum(SrpModelType, self.srp_model, "srp_model")
        )
        object.__setattr__(
            self,
            "shadow_model",
            _coerce_enum(ShadowModel, self.shadow_model, "shadow_model"),
        )
        if self.gravity_degree < 0 or self.gravity_order < 0:
            raise ConfigurationError("gravity_degree and gravity_order must be >= 0")
        if self.gravity_order > self.gravity_degree:
            raise ConfigurationError(
                f"gravity_order ({self.gravity_order}) cannot exceed "
                f"gravity_degree ({self.gravity_degree})"
            )

    # ------------------------------------------------------------------
    # Effective models
    # ------------------------------------------------------------------

    @property
    def drag_active(self) -> bool:
        """Whether the drag term is evaluated."""
        return (
            self.enable_atmospheric_drag
            and self.atmosphere_model is not AtmosphereModelType.NONE
        )

    @property
    def srp_active(self) -> bool:
        """Whether the SRP term is evaluated."""
        return self.enable_srp and self.srp_model is not SrpModelType.NONE

    @property
    def needs_third_bodies(self) -> bool:
        """Whether any enabled term needs third-body positions."""
        return (
            self.srp_active
            or self.enable_third_body_sun
            or self.enable_third_body_moon
            or self.enable_third_body_planets
        )

    def effective_gravity_model(self) -> GravityModelType:
        """Gravity model actually evaluated after fallbacks."""
        return resolve_model(self.gravity_model)[0]

    def fidelity_notes(self) -> tuple[str, ...]:
        """Describe every model substitution applied to the enabled terms.

        Returns:
            tuple[str, ...]: One note per substituted model, empty when the
            configuration is evaluated as requested.
        """
        requested = []
        if self.enable_central_body_gravity:
            requested.append(self.gravity_model)
        if self.drag_active:
            requested.append(self.atmosphere_model)
        if self.srp_active:
            requested.append(self.srp_model)
        notes = (resolve_model(model)[1] for model in requested)
        return tuple(note for note in notes if note is not None)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @staticmethod
    def two_body() -> ForceModelConfiguration:
        """Preset: point-mass gravity only (Keplerian two-body)."""
        return ForceModelConfiguration()

    @staticmethod
    def disabled() -> ForceModelConfiguration:
        """Preset: every term disabled.  The acceleration is always zero."""
        return ForceModelConfiguration(enable_central_body_gravity=False)

    @staticmethod
    def low_fidelity() -> ForceModelConfiguration:
        """Preset: two-body gravity with J2."""
        return ForceModelConfiguration(
            gravity_model=GravityModelType.J2,
            gravity_degree=2,
            gravity_order=0,
            atmosphere_model=AtmosphereModelType.NONE,
            srp_model=SrpModelType.NONE,
            enable_eclipsing=False,
        )

    @staticmethod
    def medium_fidelity() -> ForceModelConfiguration:
        """Preset: typical LEO model.

        J2/J3 gravity, exponential-atmosphere drag, cannonball SRP with
        eclipsing, and Sun/Moon third-body perturbations.
        """
        return ForceModelConfiguration(
            gravity_model=GravityModelType.J2J3,
            gravity_degree=4,
            gravity_order=4,
            enable_atmospheric_drag=True,
            atmosphere_model=AtmosphereModelType.EXPONENTIAL,
            enable_srp=True,
            srp_model=SrpModelType.CANNONBALL,
            enable_eclipsing=True,
            enable_third_body_sun=True,
            enable_third_body_moon=True,
        )

    @staticmethod
    def high_fidelity() -> ForceModelConfiguration:
        """Preset: every supported term enabled.

        Requests spherical harmonics, NRLMSISE-00 and box-wing SRP, which
        are evaluated through :data:`MODEL_FALLBACKS`.
        """
        return ForceModelConfiguration(
            gravity_model=GravityModelType.SPHERICAL_HARMONICS,
            gravity_degree=70,
            gravity_order=70,
            enable_atmospheric_drag=True,
            atmosphere_model=AtmosphereModelType.NRLMSISE00,
            enable_srp=True,
            srp_model=SrpModelType.BOX_WING,
            enable_eclipsing=True,
            enable_third_body_sun=True,
            enable_third_body_moon=True,
            enable_third_body_planets=True,
        )
