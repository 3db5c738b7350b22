"""Propagation run configuration.

:class:`PropagationConfiguration` describes the integrator, its step-size
and tolerance settings, the output cadence and the optional stopping
conditions of one run.  It is immutable, so a run always sees the values it
was started with.  The ``fast``, ``precise`` and ``long_term`` presets are
ordinary instances; the engine accepts any valid configuration.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from astroprop.errors import ConfigurationError
from astroprop.force_model.config import ForceModelConfiguration
from astroprop.integrators import IntegratorType, resolve_integrator


class OutputMode(Enum):
    """Which states are recorded in the result."""

    FIXED_STEP = "fixed_step"
    INTEGRATION_STEP = "integration_step"
    START_AND_END = "start_and_end"
    CUSTOM = "custom"


def _check_positive(name: str, value) -> None:
    if value is None:
        return
    if not (math.isfinite(value) and value > 0):
        raise ConfigurationError(f"{name} must be positive and finite, got {value}")


@dataclass(frozen=True)
class PropagationConfiguration:
    """Settings for a single propagation run.

    Args:
        integrator: Integration method.  ``RK78``, ``ADAMS_BASHFORTH`` and
            ``GAUSS_JACKSON`` run as Dormand-Prince 5(4).
        initial_step_size: First step size attempted [s].
        min_step_size: Lower bound on adaptive step sizes [s].
        max_step_size: Upper bound on adaptive step sizes [s].
        relative_tolerance: Relative error tolerance (adaptive only).
        absolute_tolerance: Absolute error tolerance (adaptive only).
        output_mode: Which states are recorded.
        output_step_size: Sampling interval for ``FIXED_STEP`` output [s].
        max_duration: Stop after this much simulated time [s].
        max_step_count: Stop after this many accepted steps.
        min_altitude_m: Stop when the altitude drops below this [m].
        force_model: Force model used by
            :func:`~astroprop.propagation.engine.propagate`.
        max_step_rejections: Consecutive rejected attempts tolerated before
            the run fails.
        name: Human-readable name.
        description: Free-form description.

    Raises:
        ConfigurationError: If any value is out of range.

    Examples:
        ```python
        from astroprop.propagation import PropagationConfiguration, OutputMode
        cfg = PropagationConfiguration.precise()
        cfg.output_mode is OutputMode.FIXED_STEP  # True
        ```
    """

    # Integrator settings
    integrator: IntegratorType = IntegratorType.RK45
    initial_step_size: float = 60.0
    min_step_size: float = 1.0
    max_step_size: float = 3600.0
    relative_tolerance: float = 1e-10
    absolute_tolerance: float = 1e-10

    # Output settings
    output_mode: OutputMode = OutputMode.FIXED_STEP
    output_step_size: float = 60.0

    # Stopping conditions
    max_duration: float | None = None
    max_step_count: int | None = None
    min_altitude_m: float | None = None

    force_model: ForceModelConfiguration | None = None
    max_step_rejections: int = 50

    name: str = ""
    description: str | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "integrator", IntegratorType(self.integrator))
            object.__setattr__(self, "output_mode", OutputMode(self.output_mode))
        except ValueError as e:
            raise ConfigurationError(str(e)) from None

        for name in (
            "initial_step_size",
            "min_step_size",
            "max_step_size",
            "output_step_size",
            "max_duration",
            "max_step_count",
            "min_altitude_m",
        ):
            _check_positive(name, getattr(self, name))

        if self.min_step_size > self.max_step_size:
            raise ConfigurationError(
                f"min_step_size ({self.min_step_size}) exceeds "
                f"max_step_size ({self.max_step_size})"
            )
        if not self.min_step_size <= self.initial_step_size <= self.max_step_size:
            raise ConfigurationError(
                f"initial_step_size ({self.initial_step_size}) must lie in "
                f"[{self.min_step_size}, {self.max_step_size}]"
            )

        for name in ("relative_tolerance", "absolute_tolerance"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value >= 0.0):
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        if self.is_adaptive and self.relative_tolerance == 0.0 and self.absolute_tolerance == 0.0:
            raise ConfigurationError(
                "adaptive integrators need a positive relative or absolute tolerance"
            )

        if self.max_step_count is not None and int(self.max_step_count) != self.max_step_count:
            raise ConfigurationError(
                f"max_step_count must be an integer, got {self.max_step_count}"
            )
        if self.max_step_rejections < 1:
            raise ConfigurationError(
                f"max_step_rejections must be at least 1, got {self.max_step_rejections}"
            )

    @property
    def effective_integrator(self) -> IntegratorType:
        """Integrator actually used after fallbacks."""
        return resolve_integrator(self.integrator)[0]

    @property
    def is_adaptive(self) -> bool:
        """Whether the effective integrator adapts its step size."""
        return self.effective_integrator is not IntegratorType.RK4

    def fidelity_notes(self) -> tuple[str, ...]:
        """Every integrator and force-model substitution for this run."""
        notes = []
        _, note = resolve_integrator(self.integrator)
        if note is not None:
            notes.append(note)
        if self.force_model is not None:
            notes.extend(self.force_model.fidelity_notes())
        return tuple(notes)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @staticmethod
    def fast() -> PropagationConfiguration:
        """Preset: RK4 with a fixed 60 s step and 60 s output."""
        return PropagationConfiguration(
            integrator=IntegratorType.RK4,
            initial_step_size=60.0,
            min_step_size=1.0,
            max_step_size=120.0,
            relative_tolerance=1e-8,
            absolute_tolerance=1e-8,
            output_mode=OutputMode.FIXED_STEP,
            output_step_size=60.0,
            name="Fast Propagation",
            description="Quick propagation with RK4",
        )

    @staticmethod
    def precise() -> PropagationConfiguration:
        """Preset: Dormand-Prince 5(4) at 1e-12 tolerance, 60 s output."""
        return PropagationConfiguration(
            integrator=IntegratorType.RK45,
            initial_step_size=60.0,
            min_step_size=0.1,
            max_step_size=600.0,
            relative_tolerance=1e-12,
            absolute_tolerance=1e-12,
            output_mode=OutputMode.FIXED_STEP,
            output_step_size=60.0,
            name="Precise Propagation",
            description="High accuracy with adaptive step size",
        )

    @staticmethod
    def long_term() -> PropagationConfiguration:
        """Preset: wide adaptive step bounds and 600 s output.

        Requests RK78, which runs as Dormand-Prince 5(4).
        """
        return PropagationConfiguration(
            integrator=IntegratorType.RK78,
            initial_step_size=300.0,
            min_step_size=1.0,
            max_step_size=3600.0,
            relative_tolerance=1e-10,
            absolute_tolerance=1e-10,
            output_mode=OutputMode.FIXED_STEP,
            output_step_size=600.0,
            name="Long Term Propagation",
            description="Optimized for long duration propagations",
        )
