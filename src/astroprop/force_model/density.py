"""Layered exponential atmospheric density model.

Density is ``rho_0 * exp(-(h - h_0) / H)`` where ``h_0``, ``rho_0`` and the
scale height ``H`` are taken from the altitude band containing ``h``.  The
band table covers 0-1000 km (Vallado, Table 8-4).  Below 0 km the sea-level
density is returned; above the last band the top band's fall-off is
continued.

Space-weather indices do not enter the model; they are accepted through
:class:`~astroprop.force_model._types.AtmosphericConditions` so that a
higher-fidelity model can be substituted without changing callers.

References:
    1. D. Vallado, *Fundamentals of Astrodynamics and Applications
       (4th Ed.)*, 2013, p. 567.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype

# Band base altitude [km]
_EXP_H0 = jnp.array([
    0.0, 25.0, 30.0, 40.0, 50.0, 60.0, 70.0, 80.0, 90.0, 100.0,
    110.0, 120.0, 130.0, 140.0, 150.0, 180.0, 200.0, 250.0, 300.0, 350.0,
    400.0, 450.0, 500.0, 600.0, 700.0, 800.0, 900.0, 1000.0,
])

# Band base density [kg/m^3]
_EXP_RHO0 = jnp.array([
    1.225, 3.899e-2, 1.774e-2, 3.972e-3, 1.057e-3, 3.206e-4,
    8.770e-5, 1.905e-5, 3.396e-6, 5.297e-7, 9.661e-8, 2.438e-8,
    8.484e-9, 3.845e-9, 2.070e-9, 5.464e-10, 2.789e-10, 7.248e-11,
    2.418e-11, 9.518e-12, 3.725e-12, 1.585e-12, 6.967e-13, 1.454e-13,
    3.614e-14, 1.170e-14, 5.245e-15, 3.019e-15,
])

# Band scale height [km]
_EXP_SCALE = jnp.array([
    7.249, 6.349, 6.682, 7.554, 8.382, 7.714, 6.549, 5.799, 5.382, 5.877,
    7.263, 9.473, 12.636, 16.149, 22.523, 29.740, 37.105, 45.546, 53.628,
    53.298, 58.515, 60.828, 63.822, 71.835, 88.667, 124.640, 181.050,
    268.000,
])

# Sea-level density [kg/m^3]
_RHO_SEA_LEVEL = 1.225


def density_exponential(altitude: ArrayLike) -> Array:
    """Atmospheric density from the layered exponential model.

    Args:
        altitude: Height above the reference ellipsoid radius [km].

    Returns:
        Atmospheric density [kg/m^3] (scalar).

    Examples:
        ```python
        from astroprop.force_model import density_exponential
        rho = density_exponential(400.0)  # ~3.7e-12 kg/m^3
        ```
    """
    _float = get_dtype()
    h = jnp.asarray(altitude, dtype=_float)
    h0 = _EXP_H0.astype(_float)

    # Band lookup using searchsorted (JIT-compatible)
    ih = jnp.searchsorted(h0, h, side="right") - 1
    ih = jnp.clip(ih, 0, h0.shape[0] - 1)

    rho = _EXP_RHO0.astype(_float)[ih] * jnp.exp(
        -(h - h0[ih]) / _EXP_SCALE.astype(_float)[ih]
    )
    return jnp.where(h < _float(0.0), _float(_RHO_SEA_LEVEL), rho)
