"""
Exception hierarchy for accelspec.

Validation problems are raised as ``InvalidInputError``, which is also a
``ValueError`` so callers that already guard numeric routines with
``except ValueError`` keep working.
"""


class AccelSpecError(Exception):
    """Base class for every error raised by accelspec."""


class InvalidInputError(AccelSpecError, ValueError):
    """Bad samples, sampling rate, unit or period/damping configuration.

    Raised before any computation starts and never retried.
    """


class ComputationFailureError(AccelSpecError, RuntimeError):
    """The response spectrum could not be computed, offloaded or in-process."""


class ComputationCancelledError(AccelSpecError):
    """The job was cancelled before delivering a result."""
