"""Numerical orbit propagation.

- :class:`PropagationEngine` -- adaptive integration loop with output
  sampling, stopping conditions and cooperative cancellation
- :func:`propagate` -- convenience wrapper building the dynamics from
  ``config.force_model``
- :class:`PropagationConfiguration` -- run settings with ``fast``,
  ``precise`` and ``long_term`` presets
- :class:`PropagationResult` -- recorded states and run metadata
"""

from astroprop.propagation._types import (
    PropagationResult,
    PropagationStatus,
    TerminationReason,
)
from astroprop.propagation.config import OutputMode, PropagationConfiguration
from astroprop.propagation.engine import (
    CancellationToken,
    PropagationEngine,
    propagate,
)

__all__ = [
    "OutputMode",
    "PropagationConfiguration",
    "PropagationResult",
    "PropagationStatus",
    "TerminationReason",
    "CancellationToken",
    "PropagationEngine",
    "propagate",
]
