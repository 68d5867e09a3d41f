"""Exception types raised by the bounds pipeline.

Every error aborts the whole computation; there is no partial-result
mode because bounds are only meaningful when a single reference arm
and a single trimming plan are applied to all arms.
"""
from __future__ import annotations


class LeeBoundsError(ValueError):
    """Base class for all errors raised by :mod:`lee_bounds`."""


class InvalidInputError(LeeBoundsError):
    """The input data cannot be used (empty arm, bad codes, no outcomes)."""


class RegressionFailureError(LeeBoundsError):
    """The trimmed regression could not be estimated reliably."""


class ReproducibilityViolation(LeeBoundsError):
    """No usable random seed was supplied for the tie-break draw."""


__all__ = [
    "LeeBoundsError",
    "InvalidInputError",
    "RegressionFailureError",
    "ReproducibilityViolation",
]
