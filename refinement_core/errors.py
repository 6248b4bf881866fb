"""Exception types raised by the refinement core."""

from __future__ import annotations


class RefinementError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(RefinementError, ValueError):
    """Raised when caller-supplied weights, game states or counts are malformed."""


class InvariantViolation(RefinementError, AssertionError):
    """Raised when the solver is asked about a state it never built.

    This always indicates a defect in the builder or the transition model and
    must never be caught and ignored.
    """


class InvalidChoice(InvariantViolation):
    """Raised when an attempt is requested on a track with no remaining capacity."""


class WorkerUnavailable(RefinementError, RuntimeError):
    """Raised when sending to a recompute worker that has stopped or crashed."""
