"""Force models for orbit propagation.

Provides the acceleration terms and their composition:

- **Gravity**: Point-mass, J2 and J3 zonal harmonics
- **Density**: Layered exponential atmosphere
- **Drag**: Atmospheric drag with a co-rotating atmosphere
- **SRP**: Cannonball solar radiation pressure with conical and
  cylindrical shadow models
- **Third body**: Indirect third-body perturbations
- **Ephemerides**: Low-precision Sun and Moon positions (Montenbruck & Gill)
- **Evaluation**: Per-term acceleration breakdown
- **Factory**: ``dynamics(t, x)`` closures for the integrators
"""

from ._types import (
    AccelerationBreakdown,
    AtmosphericConditions,
    EclipseState,
    EphemerisTable,
    ThirdBodyPositions,
)
from .config import (
    MODEL_FALLBACKS,
    AtmosphereModelType,
    ForceModelConfiguration,
    GravityModelType,
    ShadowModel,
    SpacecraftProperties,
    SrpModelType,
    resolve_model,
)
from .density import density_exponential
from .drag import accel_drag, relative_velocity
from .ephemerides import (
    AnalyticEphemeris,
    ThirdBodyEphemeris,
    moon_position,
    sample_ephemeris,
    sun_position,
)
from .evaluation import evaluate
from .factory import create_orbit_dynamics
from .gravity import accel_gravity, accel_j2, accel_j3, accel_point_mass
from .srp import (
    accel_srp,
    eclipse_conical,
    eclipse_cylindrical,
    eclipse_state,
    solar_pressure,
)
from .third_body import accel_third_bodies, accel_third_body

__all__ = [
    # Configuration
    "ForceModelConfiguration",
    "SpacecraftProperties",
    "GravityModelType",
    "AtmosphereModelType",
    "SrpModelType",
    "ShadowModel",
    "MODEL_FALLBACKS",
    "resolve_model",
    # Environment
    "ThirdBodyPositions",
    "EphemerisTable",
    "AtmosphericConditions",
    "ThirdBodyEphemeris",
    "AnalyticEphemeris",
    "sample_ephemeris",
    "sun_position",
    "moon_position",
    # Gravity
    "accel_point_mass",
    "accel_j2",
    "accel_j3",
    "accel_gravity",
    # Density and drag
    "density_exponential",
    "relative_velocity",
    "accel_drag",
    # SRP
    "solar_pressure",
    "accel_srp",
    "eclipse_conical",
    "eclipse_cylindrical",
    "eclipse_state",
    "EclipseState",
    # Third body
    "accel_third_body",
    "accel_third_bodies",
    # Composition
    "AccelerationBreakdown",
    "evaluate",
    "create_orbit_dynamics",
]
