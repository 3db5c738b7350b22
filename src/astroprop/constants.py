"""
The `constants` module defines the physical constants used by the force
models and the propagation engine.

Distances are in kilometres, velocities in km/s and gravitational
parameters in km^3/s^2, matching the units of the propagated state.
Spacecraft areas stay in m^2, masses in kg and densities in kg/m^3; the
force models convert at the boundary.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Constant to convert arcseconds to radians. Units: *rad/as*
"""
AS2RAD = 2.0 * PI / 360.0 / 3600.0

# Time Constants
"""
Seconds in one day. Units: *s*
"""
SECONDS_PER_DAY = 86400.0

"""
Days in one Julian century. Units: *days*
"""
DAYS_PER_JULIAN_CENTURY = 36525.0

# Physical Constants
"""
Speed of light in vacuum. Units: *m/s*

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, 2010
"""
C_LIGHT = 299792458.0

"""
Astronomical Unit. Units: *km*

References:

1. IAU 2012 Resolution B2
"""
AU = 1.495978707e8

# Earth Constants
"""
Earth's equatorial radius (WGS-84). Units: *km*
"""
R_EARTH = 6378.137

"""
Earth's gravitational parameter (EGM2008). Units: *km^3/s^2*
"""
GM_EARTH = 398600.4418

"""
Earth's second zonal harmonic (EGM2008). [dimensionless]
"""
J2_EARTH = 1.08262668e-3

"""
Earth's third zonal harmonic (EGM2008). [dimensionless]
"""
J3_EARTH = -2.53265649e-6

"""
Earth axial rotation rate. Units: *rad/s*

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, p. 222, 2010
"""
OMEGA_EARTH = 7.292115146706979e-5

# Sun Constants
"""
Gravitational parameter of the Sun. Units: *km^3/s^2*
"""
GM_SUN = 1.32712440041279419e11

"""
Nominal solar photospheric radius. Units: *km*
"""
R_SUN = 6.96e5

"""
Total solar irradiance at 1 AU. Units: *W/m^2*
"""
SOLAR_FLUX = 1367.0

"""
Solar radiation pressure at 1 AU. Units: *N/m^2*
"""
P_SUN = SOLAR_FLUX / C_LIGHT

# Moon Constants
"""
Gravitational parameter of the Moon. Units: *km^3/s^2*
"""
GM_MOON = 4.9028000661e3

"""
Mean radius of the Moon. Units: *km*
"""
R_MOON = 1737.4

# Planetary gravitational parameters (JPL DE440) [km^3/s^2]
"""
Gravitational parameters of the planets, keyed by lowercase name, used
for third-body perturbations when planet positions are supplied.
"""
GM_PLANETS = {
    "mercury": 2.2031868551e4,
    "venus": 3.24858592e5,
    "mars": 4.282837362e4,
    "jupiter": 1.26712764e8,
    "saturn": 3.7940584841800e7,
    "uranus": 5.794556400e6,
    "neptune": 6.836527100580e6,
}

# Atmosphere Constants
"""
Altitude above which atmospheric drag is ignored. Units: *km*
"""
DRAG_CUTOFF_ALTITUDE = 1000.0
