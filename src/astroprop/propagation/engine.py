"""Orbit propagation engine.

:class:`PropagationEngine` drives an integrator step function from an
initial state to an end epoch.  It applies adaptive step-size control,
records states according to the configured
:class:`~astroprop.propagation.config.OutputMode`, evaluates stopping
conditions and assembles a
:class:`~astroprop.propagation._types.PropagationResult`.

The loop runs on the host; each step attempt is a (by default
``jax.jit``-compiled) call into the step function.  Integration time *t*
is measured in seconds from the initial epoch and is negative for backward
propagation.

Stopping conditions are checked after every accepted step, in this order:
maximum step count, maximum duration, minimum altitude, end epoch.  The
first one that holds ends the run.

Numerical failures never escape :meth:`PropagationEngine.run`: they are
returned as a failed result holding the states recorded so far.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Protocol

import jax
import jax.numpy as jnp
from jax import Array

from astroprop.constants import R_EARTH
from astroprop.errors import ConfigurationError, IntegrationError
from astroprop.force_model import (
    AtmosphericConditions,
    EphemerisTable,
    ForceModelConfiguration,
    SpacecraftProperties,
    ThirdBodyEphemeris,
    ThirdBodyPositions,
    create_orbit_dynamics,
    sample_ephemeris,
)
from astroprop.force_model.evaluation import ThirdBodySource
from astroprop.force_model.factory import DynamicsFunction
from astroprop.integrators import (
    Integrator,
    StepSizeController,
    get_integrator,
    scaled_tolerance,
)
from astroprop.propagation._types import (
    PropagationResult,
    PropagationStatus,
    TerminationReason,
)
from astroprop.propagation.config import OutputMode, PropagationConfiguration
from astroprop.state import PhysicalState

logger = logging.getLogger(__name__)

# Radius below which a trajectory is treated as passing through the centre [km]
_MIN_RADIUS = 1.0

# Offsets closer than this are the same instant [s]
_TIME_EPS = 1e-9


class CancellationToken(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool: ...


class _Recorder:
    """Collects output states for one run."""

    def __init__(
        self,
        mode: OutputMode,
        epoch_0: datetime,
        direction: float,
        total: float,
        output_step: float,
        output_offsets: list[float],
        resample: Callable[[float, Array, float], Array],
    ):
        self.mode = mode
        self.epoch_0 = epoch_0
        self.direction = direction
        self.total = total
        self.output_step = output_step
        self.resample = resample
        self.states: list[PhysicalState] = []
        self._last_t: float | None = None

        # Pending sample offsets for FIXED_STEP and CUSTOM output, in
        # propagation order
        self._pending = output_offsets
        self._next_index = 1

    def _emit(self, t: float, x: Array) -> None:
        if self._last_t is not None and abs(t - self._last_t) <= _TIME_EPS:
            return
        self.states.append(
            PhysicalState.from_array(self.epoch_0 + timedelta(seconds=t), x)
        )
        self._last_t = t

    def _next_boundary(self) -> float | None:
        if self.mode is OutputMode.FIXED_STEP:
            b = self.direction * self._next_index * self.output_step
            return b if abs(b) <= abs(self.total) + _TIME_EPS else None
        if self.mode is OutputMode.CUSTOM:
            return self._pending[0] if self._pending else None
        return None

    def _advance_boundary(self) -> None:
        if self.mode is OutputMode.FIXED_STEP:
            self._next_index += 1
        else:
            self._pending.pop(0)

    def start(self, x0: Array) -> None:
        self._emit(0.0, x0)
        # Custom offsets at the initial epoch are already recorded
        while self.mode is OutputMode.CUSTOM and self._pending and abs(self._pending[0]) <= _TIME_EPS:
            self._pending.pop(0)

    def accepted(self, t_prev: float, x_prev: Array, t: float, x: Array) -> None:
        if self.mode is OutputMode.INTEGRATION_STEP:
            self._emit(t, x)
            return
        if self.mode is OutputMode.START_AND_END:
            return

        while True:
            b = self._next_boundary()
            if b is None or self.direction * (b - t) > _TIME_EPS:
                break
            if abs(b - t) <= _TIME_EPS:
                self._emit(t, x)
            else:
                self._emit(b, self.resample(t_prev, x_prev, b - t_prev))
            self._advance_boundary()

    def finish(self, t: float, x: Array, completed: bool) -> None:
        if self.mode in (OutputMode.FIXED_STEP, OutputMode.START_AND_END):
            if self.mode is OutputMode.START_AND_END and completed and self._last_t == t:
                # Zero-length run: start and end are both recorded
                self.states.append(self.states[-1])
                return
            self._emit(t, x)


class PropagationEngine:
    """Numerical orbit propagator.

    The engine holds no per-run state, so a single instance may serve
    concurrent runs from different threads.

    Args:
        controller: Step-size controller for adaptive integrators.

    Examples:
        ```python
        from datetime import datetime, timedelta, timezone
        import math
        from astroprop.constants import GM_EARTH
        from astroprop.force_model import ForceModelConfiguration, create_orbit_dynamics
        from astroprop.propagation import PropagationConfiguration, PropagationEngine
        from astroprop.state import PhysicalState
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        s0 = PhysicalState(t0, [7000.0, 0.0, 0.0], [0.0, math.sqrt(GM_EARTH / 7000.0), 0.0])
        dyn = create_orbit_dynamics(t0, ForceModelConfiguration.two_body())
        result = PropagationEngine().run(
            s0, t0 + timedelta(hours=1), dyn, PropagationConfiguration.fast()
        )
        result.termination_reason  # TerminationReason.REACHED_END_EPOCH
        ```
    """

    def __init__(self, controller: StepSizeController | None = None):
        self.controller = controller if controller is not None else StepSizeController()

    def run(
        self,
        initial_state: PhysicalState,
        end_epoch: datetime,
        dynamics: DynamicsFunction,
        config: PropagationConfiguration,
        cancel: CancellationToken | None = None,
        output_epochs: Iterable[datetime] | None = None,
        jit: bool = True,
    ) -> PropagationResult:
        """Propagate *initial_state* to *end_epoch*.

        Args:
            initial_state: State at the start of the run.
            end_epoch: Target epoch.  Earlier than the initial epoch for
                backward propagation.
            dynamics: ``dynamics(t, x) -> dx`` with *t* in seconds since the
                initial epoch, e.g. from
                :func:`~astroprop.force_model.create_orbit_dynamics`.
            config: Run configuration.
            cancel: Cooperative cancellation signal, checked before every
                step attempt.
            output_epochs: Epochs to record in ``CUSTOM`` output mode.
                Epochs outside the run interval are ignored.
            jit: Compile the step function with ``jax.jit``.

        Returns:
            PropagationResult: Always returned, also for failed and
            cancelled runs.

        Raises:
            ConfigurationError: If ``CUSTOM`` output is requested without
                *output_epochs*.
        """
        if not isinstance(config, PropagationConfiguration):
            raise ConfigurationError(
                f"config must be a PropagationConfiguration, got {type(config).__name__}"
            )
        if config.output_mode is OutputMode.CUSTOM and output_epochs is None:
            raise ConfigurationError("output_epochs are required for CUSTOM output mode")

        integrator = get_integrator(config.integrator)
        notes = config.fidelity_notes()
        for note in notes:
            logger.warning("Propagation fallback: %s", note)

        epoch_0 = initial_state.epoch
        total = (end_epoch - epoch_0).total_seconds()
        direction = -1.0 if total < 0.0 else 1.0

        step_fn = _make_step_function(integrator, dynamics, jit)

        def resample(t_prev: float, x_prev: Array, dt: float) -> Array:
            return step_fn(t_prev, x_prev, dt).state

        offsets = []
        if config.output_mode is OutputMode.CUSTOM:
            offsets = sorted(
                (
                    (e - epoch_0).total_seconds()
                    for e in output_epochs
                ),
                key=lambda o: direction * o,
            )
            offsets = [
                o for o in offsets
                if -_TIME_EPS <= direction * o <= abs(total) + _TIME_EPS
            ]

        recorder = _Recorder(
            config.output_mode,
            epoch_0,
            direction,
            total,
            config.output_step_size,
            offsets,
            resample,
        )

        status = PropagationStatus.NOT_STARTED
        logger.info(
            "Propagating %r from %s to %s (%s, %s output)",
            config.name or "unnamed",
            epoch_0.isoformat(),
            end_epoch.isoformat(),
            integrator.type.value,
            config.output_mode.value,
        )

        t = 0.0
        x = initial_state.to_array()
        h = direction * config.initial_step_size
        step_count = 0
        rejected_count = 0
        consecutive_rejections = 0
        reason: TerminationReason | None = None
        error_message: str | None = None

        recorder.start(x)
        status = PropagationStatus.STEPPING
        start_time = time.perf_counter()

        try:
            while reason is None:
                remaining = total - t
                if direction * remaining <= _TIME_EPS:
                    reason = TerminationReason.REACHED_END_EPOCH
                    break
                if cancel is not None and cancel.is_set():
                    reason = TerminationReason.USER_CANCELLED
                    break

                # Clamp the attempt to the end epoch and the duration limit
                h_try = h
                if abs(h_try) >= abs(remaining):
                    h_try = remaining
                if config.max_duration is not None:
                    left = config.max_duration - abs(t)
                    if abs(h_try) > left:
                        h_try = direction * left

                result = step_fn(t, x, h_try)
                x_new = result.state
                error = float(result.error_estimate)
                if not math.isfinite(error) or not bool(jnp.all(jnp.isfinite(x_new))):
                    raise IntegrationError(
                        f"Non-finite state or error estimate at t = {t + h_try:.3f} s"
                    )

                tolerance = 0.0
                if integrator.adaptive:
                    tolerance = scaled_tolerance(
                        float(jnp.linalg.norm(x[:3])),
                        config.relative_tolerance,
                        config.absolute_tolerance,
                    )
                    if self.controller.should_reject_step(error, tolerance):
                        rejected_count += 1
                        consecutive_rejections += 1
                        if consecutive_rejections > config.max_step_rejections:
                            raise IntegrationError(
                                f"Step rejected {consecutive_rejections} times in a row "
                                f"at t = {t:.3f} s (error {error:.3e} > tolerance "
                                f"{tolerance:.3e})"
                            )
                        h = self.controller.compute_new_step_size(
                            h_try,
                            error,
                            tolerance,
                            integrator.order,
                            config.min_step_size,
                            config.max_step_size,
                        )
                        logger.debug(
                            "Rejected step of %.6g s at t = %.3f s (error %.3e > %.3e); "
                            "retrying with %.6g s",
                            h_try, t, error, tolerance, h,
                        )
                        continue

                radius = float(jnp.linalg.norm(x_new[:3]))
                if radius < _MIN_RADIUS:
                    raise IntegrationError(
                        f"Trajectory passed through the centre of the central body "
                        f"at t = {t + h_try:.3f} s (radius {radius:.3e} km)"
                    )

                # Accept
                t_prev, x_prev = t, x
                t = total if h_try == remaining else t + h_try
                x = x_new
                step_count += 1
                consecutive_rejections = 0

                if integrator.adaptive:
                    h = self.controller.compute_new_step_size(
                        h_try,
                        error,
                        tolerance,
                        integrator.order,
                        config.min_step_size,
                        config.max_step_size,
                    )
                    if not math.isfinite(h) or h == 0.0:
                        raise IntegrationError(f"Non-finite step size at t = {t:.3f} s")

                recorder.accepted(t_prev, x_prev, t, x)

                if config.max_step_count is not None and step_count >= config.max_step_count:
                    reason = TerminationReason.REACHED_MAX_STEPS
                elif (
                    config.max_duration is not None
                    and abs(t) >= config.max_duration - _TIME_EPS
                ):
                    reason = TerminationReason.REACHED_MAX_DURATION
                elif (
                    config.min_altitude_m is not None
                    and (radius - R_EARTH) * 1.0e3 < config.min_altitude_m
                ):
                    reason = TerminationReason.BELOW_MIN_ALTITUDE
                elif direction * (total - t) <= _TIME_EPS:
                    reason = TerminationReason.REACHED_END_EPOCH

        except IntegrationError as e:
            reason = TerminationReason.INTEGRATION_ERROR
            error_message = str(e)

        elapsed_ms = (time.perf_counter() - start_time) * 1.0e3

        if reason is TerminationReason.INTEGRATION_ERROR:
            status = PropagationStatus.FAILED
            logger.warning(
                "Propagation failed after %d steps: %s", step_count, error_message
            )
        elif reason is TerminationReason.USER_CANCELLED:
            status = PropagationStatus.CANCELLED
            logger.info("Propagation cancelled after %d steps", step_count)
        else:
            status = PropagationStatus.COMPLETED

        recorder.finish(t, x, status is PropagationStatus.COMPLETED)
        final_state = PhysicalState.from_array(epoch_0 + timedelta(seconds=t), x)

        logger.info(
            "Propagation %s (%s): %d steps, %d rejected, %d states, %.1f ms",
            status.value,
            reason.value,
            step_count,
            rejected_count,
            len(recorder.states),
            elapsed_ms,
        )

        return PropagationResult(
            states=tuple(recorder.states),
            step_count=step_count,
            rejected_step_count=rejected_count,
            computation_time_ms=elapsed_ms,
            success=status is not PropagationStatus.FAILED,
            status=status,
            termination_reason=reason,
            error_message=error_message,
            start_epoch=epoch_0,
            end_epoch=final_state.epoch,
            final_state=final_state,
            fidelity_notes=notes,
        )


def _make_step_function(
    integrator: Integrator, dynamics: DynamicsFunction, jit: bool
) -> Callable[[float, Array, float], object]:
    def step(t, x, dt):
        return integrator.step(dynamics, t, x, dt)

    return jax.jit(step) if jit else step


def propagate(
    initial_state: PhysicalState,
    end_epoch: datetime,
    config: PropagationConfiguration,
    spacecraft: SpacecraftProperties | None = None,
    third_bodies: ThirdBodySource | ThirdBodyEphemeris | None = None,
    atmosphere: AtmosphericConditions | None = None,
    cancel: CancellationToken | None = None,
    output_epochs: Iterable[datetime] | None = None,
) -> PropagationResult:
    """Propagate with dynamics built from ``config.force_model``.

    Args:
        initial_state: State at the start of the run.
        end_epoch: Target epoch.
        config: Run configuration.  A missing ``force_model`` means
            two-body gravity.
        spacecraft: Physical spacecraft properties.
        third_bodies: A :class:`~astroprop.force_model.ThirdBodyPositions`
            snapshot, an :class:`~astroprop.force_model.EphemerisTable`, or
            a provider with ``positions(epoch)``, which is sampled over the
            run interval before the loop starts.
        atmosphere: Space-weather snapshot.
        cancel: Cooperative cancellation signal.
        output_epochs: Epochs to record in ``CUSTOM`` output mode.

    Returns:
        PropagationResult: Outcome of the run.

    Examples:
        ```python
        from astroprop.propagation import PropagationConfiguration, propagate
        result = propagate(s0, s0.epoch + timedelta(days=1),
                           PropagationConfiguration.long_term())
        ```
    """
    force_model = config.force_model
    if force_model is None:
        force_model = ForceModelConfiguration.two_body()

    if third_bodies is not None and not isinstance(
        third_bodies, (ThirdBodyPositions, EphemerisTable)
    ):
        duration = (end_epoch - initial_state.epoch).total_seconds()
        third_bodies = sample_ephemeris(third_bodies, initial_state.epoch, duration)

    dynamics = create_orbit_dynamics(
        initial_state.epoch,
        force_model,
        spacecraft,
        third_bodies,
        atmosphere,
    )
    return PropagationEngine().run(
        initial_state,
        end_epoch,
        dynamics,
        config,
        cancel=cancel,
        output_epochs=output_epochs,
    )
