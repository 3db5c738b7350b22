"""Exception types raised by astroprop.

Invalid inputs raise subclasses of :class:`ValueError` so callers that
only catch ``ValueError`` keep working.  :class:`IntegrationError` never
escapes :meth:`~astroprop.propagation.PropagationEngine.run`; the engine
turns it into a failed :class:`~astroprop.propagation.PropagationResult`.
"""

from __future__ import annotations


class AstropropError(Exception):
    """Base class for all astroprop errors."""


class ConfigurationError(AstropropError, ValueError):
    """A configuration or spacecraft description is invalid.

    Raised on construction, before any propagation starts.
    """


class ForceModelError(AstropropError, ValueError):
    """Inputs to a force model evaluation are malformed.

    Examples are a non-finite state, a spacecraft at the centre of the
    central body, or a Sun position coincident with the spacecraft.
    """


class IntegrationError(AstropropError, RuntimeError):
    """The numerical integration cannot continue.

    Raised for non-finite states, error estimates or step sizes, for a
    trajectory passing through the centre of the central body, and when an
    adaptive step keeps being rejected.
    """
