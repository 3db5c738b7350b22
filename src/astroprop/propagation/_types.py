"""Result types of a propagation run."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import jax.numpy as jnp
from jax import Array

from astroprop.state import PhysicalState


class PropagationStatus(Enum):
    """Lifecycle state of a propagation run."""

    NOT_STARTED = "not_started"
    STEPPING = "stepping"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TerminationReason(Enum):
    """Why a propagation run stopped."""

    REACHED_END_EPOCH = "reached_end_epoch"
    REACHED_MAX_STEPS = "reached_max_steps"
    REACHED_MAX_DURATION = "reached_max_duration"
    BELOW_MIN_ALTITUDE = "below_min_altitude"
    INTEGRATION_ERROR = "integration_error"
    USER_CANCELLED = "user_cancelled"


@dataclass(frozen=True, eq=False)
class PropagationResult:
    """Outcome of a propagation run.

    Attributes:
        states: Recorded states, ordered in the direction of propagation.
            Never empty: the initial state is always recorded.
        step_count: Accepted integrator steps.
        rejected_step_count: Rejected adaptive step attempts.
        computation_time_ms: Wall-clock time spent in the integration loop.
        success: ``False`` only for failed runs.  Runs stopped by a
            stopping condition or by cancellation are successful.
        status: Final lifecycle state.
        termination_reason: Why the run stopped.
        error_message: Human-readable failure description, or ``None``.
        start_epoch: Epoch of the initial state.
        end_epoch: Epoch of the last accepted state.
        final_state: Last accepted state, whether recorded or not.
        fidelity_notes: Model and integrator substitutions in effect.
    """

    states: tuple[PhysicalState, ...]
    step_count: int
    rejected_step_count: int
    computation_time_ms: float
    success: bool
    status: PropagationStatus
    termination_reason: TerminationReason
    error_message: str | None
    start_epoch: datetime
    end_epoch: datetime
    final_state: PhysicalState
    fidelity_notes: tuple[str, ...] = ()

    @property
    def epochs(self) -> tuple[datetime, ...]:
        """Epochs of the recorded states."""
        return tuple(s.epoch for s in self.states)

    def as_array(self) -> Array:
        """Recorded states as an ``(N, 6)`` array."""
        return jnp.stack([s.to_array() for s in self.states])

    def __len__(self) -> int:
        return len(self.states)

    def __repr__(self) -> str:
        return (
            f"PropagationResult(status={self.status.value}, "
            f"reason={self.termination_reason.value}, states={len(self.states)}, "
            f"steps={self.step_count}, rejected={self.rejected_step_count}, "
            f"time_ms={self.computation_time_ms:.1f})"
        )
