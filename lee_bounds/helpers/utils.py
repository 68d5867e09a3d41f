"""General utilities for the bounds toolkit.

This module provides helper functions that do not naturally belong to
any single pipeline stage: the rounding rule used for trim counts,
seed validation and generator construction, naming of the arm dummy
regressors and de-duplication of covariate lists.
"""

from __future__ import annotations

import math
import numbers
from fractions import Fraction
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ReproducibilityViolation


def round_half_away(x: float) -> int:
    """Round to the nearest integer, sending exact halves away from zero.

    Python's built-in :func:`round` and :func:`numpy.round` use
    round-half-to-even, so ``round(2.5) == 2``.  Trim counts are instead
    rounded the way most statistics packages round scalars:
    ``round_half_away(2.5) == 3`` and ``round_half_away(-2.5) == -3``.

    Parameters
    ----------
    x : float or numbers.Rational
        Value to round.  Must be finite.  Integers and
        :class:`fractions.Fraction` values are rounded exactly.

    Returns
    -------
    int
    """
    if isinstance(x, numbers.Rational):
        x = Fraction(x)
        whole = math.floor(abs(x) + Fraction(1, 2))
        return -whole if x < 0 else whole
    x = float(x)
    if not math.isfinite(x):
        raise ValueError(f"Cannot round non-finite value {x!r}.")
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def require_seed(seed: Optional[int]) -> int:
    """Return ``seed`` as an ``int`` or raise :class:`ReproducibilityViolation`.

    The tie-break draw must be reproducible from the caller's inputs
    alone, so a missing seed is never replaced by a default or by
    ambient state.
    """
    if seed is None:
        raise ReproducibilityViolation(
            "A random seed is required: pass seed=<int> so that the "
            "tie-break order, and hence the trimmed samples, are reproducible."
        )
    if isinstance(seed, bool) or not isinstance(seed, numbers.Integral):
        raise ReproducibilityViolation(
            f"Seed must be an integer, got {type(seed).__name__}."
        )
    if int(seed) < 0:
        raise ReproducibilityViolation(f"Seed must be non-negative, got {seed}.")
    return int(seed)


def make_rng(seed: Optional[int]) -> np.random.Generator:
    """Build a fresh, explicitly seeded generator for the tie-break draw."""
    return np.random.default_rng(require_seed(seed))


def arm_column(arm: int) -> str:
    """Name of the dummy regressor for treatment arm ``arm``."""
    return f"arm_{int(arm)}"


def arm_pairs(max_treat: int) -> List[Tuple[int, int]]:
    """All ordered pairs ``(i, k)`` with ``1 <= i < k <= max_treat``."""
    return [
        (i, k)
        for i in range(1, int(max_treat) + 1)
        for k in range(i + 1, int(max_treat) + 1)
    ]


def resolve_covariates(covariates: Optional[Sequence[str]]) -> List[str]:
    """Return a de-duplicated list of covariate names, preserving order."""
    if covariates is None:
        return []
    if isinstance(covariates, str):
        covariates = [covariates]

    resolved: List[str] = []
    for name in covariates:
        if name is None:
            continue
        raw = str(name).strip()
        if raw and raw not in resolved:
            resolved.append(raw)
    return resolved


__all__ = [
    "round_half_away",
    "require_seed",
    "make_rng",
    "arm_column",
    "arm_pairs",
    "resolve_covariates",
]
