"""
astroprop is a numerical orbit propagation library implemented in JAX.
"""

from .config import set_dtype, get_dtype

from .constants import (
    DEG2RAD,
    RAD2DEG,
    AS2RAD,
    C_LIGHT,
    AU,
    R_EARTH,
    GM_EARTH,
    J2_EARTH,
    J3_EARTH,
    OMEGA_EARTH,
    GM_SUN,
    R_SUN,
    P_SUN,
    GM_MOON,
)

from .errors import (
    AstropropError,
    ConfigurationError,
    ForceModelError,
    IntegrationError,
)

from .state import PhysicalState, StateDerivative

from .force_model import (
    AccelerationBreakdown,
    AtmosphereModelType,
    AtmosphericConditions,
    EclipseState,
    ForceModelConfiguration,
    GravityModelType,
    ShadowModel,
    SpacecraftProperties,
    SrpModelType,
    ThirdBodyPositions,
    AnalyticEphemeris,
    sample_ephemeris,
    create_orbit_dynamics,
    evaluate,
)

from .integrators import (
    IntegratorType,
    StepResult,
    StepSizeController,
    get_integrator,
    rk4_step,
    dp54_step,
)

from .propagation import (
    OutputMode,
    PropagationConfiguration,
    PropagationEngine,
    PropagationResult,
    PropagationStatus,
    TerminationReason,
    propagate,
)

from .orbits import (
    orbital_period,
    orbital_period_from_state,
    specific_energy,
    angular_momentum,
    state_to_elements,
    raan_drift_rate,
)
