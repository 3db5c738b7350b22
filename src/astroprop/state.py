"""Spacecraft state value types.

Provides the two immutable value types passed across the public API:

- :class:`PhysicalState`: epoch, position and velocity of a spacecraft.
- :class:`StateDerivative`: time-derivative of a physical state, i.e.
  velocity and acceleration.

Both support componentwise ``+`` and scalar ``*`` so they can be combined
linearly.  The integrators themselves work on flat 6-element arrays
``[x, y, z, vx, vy, vz]``; ``to_array`` / ``from_array`` convert at the
boundary.

Units: km, km/s, km/s^2.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroprop.config import get_dtype
from astroprop.constants import R_EARTH


def _vector3(value: ArrayLike, name: str) -> Array:
    vec = jnp.asarray(value, dtype=get_dtype())
    if vec.shape != (3,):
        raise ValueError(f"{name} must have 3 elements, got shape {vec.shape}")
    return vec


def _vector6(value: ArrayLike, name: str) -> Array:
    vec = jnp.asarray(value, dtype=get_dtype())
    if vec.shape != (6,):
        raise ValueError(f"{name} must have 6 elements, got shape {vec.shape}")
    return vec


@dataclass(frozen=True, eq=False)
class PhysicalState:
    """Position and velocity of a spacecraft at an epoch.

    Args:
        epoch: Instant the state refers to.
        position: Position ``[x, y, z]`` relative to the central body [km].
        velocity: Velocity ``[vx, vy, vz]`` [km/s].

    Examples:
        ```python
        from datetime import datetime, timezone
        from astroprop.state import PhysicalState
        s = PhysicalState(datetime(2024, 1, 1, tzinfo=timezone.utc),
                          [7000.0, 0.0, 0.0], [0.0, 7.546, 0.0])
        float(s.altitude)  # 621.863
        ```
    """

    epoch: datetime
    position: Array
    velocity: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _vector3(self.position, "position"))
        object.__setattr__(self, "velocity", _vector3(self.velocity, "velocity"))

    @classmethod
    def from_array(cls, epoch: datetime, x: ArrayLike) -> PhysicalState:
        """Build a state from a 6-element ``[x, y, z, vx, vy, vz]`` array.

        Raises:
            ValueError: If *x* does not have exactly 6 elements.
        """
        x = _vector6(x, "state")
        return cls(epoch, x[:3], x[3:])

    def to_array(self) -> Array:
        """Return the state as a 6-element ``[x, y, z, vx, vy, vz]`` array."""
        return jnp.concatenate([self.position, self.velocity])

    @property
    def radius(self) -> Array:
        """Distance from the centre of the central body [km]."""
        return jnp.linalg.norm(self.position)

    @property
    def speed(self) -> Array:
        """Magnitude of the velocity [km/s]."""
        return jnp.linalg.norm(self.velocity)

    @property
    def altitude(self) -> Array:
        """Height above Earth's equatorial radius [km]."""
        return self.radius - R_EARTH

    def __add__(self, other: PhysicalState) -> PhysicalState:
        if not isinstance(other, PhysicalState):
            return NotImplemented
        return PhysicalState(
            self.epoch, self.position + other.position, self.velocity + other.velocity
        )

    def __mul__(self, factor: float) -> PhysicalState:
        if isinstance(factor, PhysicalState):
            return NotImplemented
        return PhysicalState(self.epoch, self.position * factor, self.velocity * factor)

    __rmul__ = __mul__

    def __repr__(self) -> str:
        return (
            f"PhysicalState(epoch={self.epoch.isoformat()}, "
            f"position={self.position.tolist()}, velocity={self.velocity.tolist()})"
        )


@dataclass(frozen=True, eq=False)
class StateDerivative:
    """Time-derivative of a :class:`PhysicalState`.

    Args:
        velocity: Rate of change of position [km/s].
        acceleration: Rate of change of velocity [km/s^2].
    """

    velocity: Array
    acceleration: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "velocity", _vector3(self.velocity, "velocity"))
        object.__setattr__(
            self, "acceleration", _vector3(self.acceleration, "acceleration")
        )

    @classmethod
    def zero(cls) -> StateDerivative:
        """Derivative with zero velocity and zero acceleration."""
        dtype = get_dtype()
        return cls(jnp.zeros(3, dtype=dtype), jnp.zeros(3, dtype=dtype))

    @classmethod
    def from_array(cls, dx: ArrayLike) -> StateDerivative:
        """Build a derivative from a 6-element ``[vx, vy, vz, ax, ay, az]`` array.

        Raises:
            ValueError: If *dx* does not have exactly 6 elements.
        """
        dx = _vector6(dx, "derivative")
        return cls(dx[:3], dx[3:])

    def to_array(self) -> Array:
        """Return the derivative as a 6-element array."""
        return jnp.concatenate([self.velocity, self.acceleration])

    def __add__(self, other: StateDerivative) -> StateDerivative:
        if not isinstance(other, StateDerivative):
            return NotImplemented
        return StateDerivative(
            self.velocity + other.velocity, self.acceleration + other.acceleration
        )

    def __mul__(self, factor: float) -> StateDerivative:
        if isinstance(factor, StateDerivative):
            return NotImplemented
        return StateDerivative(self.velocity * factor, self.acceleration * factor)

    __rmul__ = __mul__
