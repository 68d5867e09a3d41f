# lee_bounds/estimators/bounds.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple, TypeVar, Union

from .regression import ArmEstimate, ArmRegression, ContrastEstimate
from ..helpers.utils import arm_pairs

E = TypeVar("E", ArmEstimate, ContrastEstimate)


@dataclass(frozen=True)
class Bound:
    arm: int
    lower: ArmEstimate
    upper: ArmEstimate

    @property
    def width(self) -> float:
        return self.upper.estimate - self.lower.estimate


@dataclass(frozen=True)
class ComparisonBound:
    pair: Tuple[int, int]
    lower: ContrastEstimate
    upper: ContrastEstimate

    @property
    def width(self) -> float:
        return self.upper.estimate - self.lower.estimate


def order_pair(a: E, b: E) -> Tuple[E, E]:
    """Return ``(lower, upper)`` by point estimate.

    Which trimming direction gives the smaller coefficient depends on the
    sign of the effect and on whether the control arm was trimmed, so the
    two results are simply sorted.  Equal estimates keep argument order.
    """
    lo, hi = sorted((a, b), key=lambda e: e.estimate)
    return lo, hi


def estimate_bounds(
    top_fit: ArmRegression,
    bottom_fit: ArmRegression,
    arms: Optional[Iterable[int]] = None,
) -> Dict[int, Bound]:
    """Per treated arm, sort the two trimmed estimates into a :class:`Bound`."""
    if arms is None:
        arms = range(1, top_fit.max_treat + 1)
    out: Dict[int, Bound] = {}
    for a in arms:
        lo, hi = order_pair(top_fit.estimate(a), bottom_fit.estimate(a))
        out[int(a)] = Bound(arm=int(a), lower=lo, upper=hi)
    return out


def compare_pair(top_fit: ArmRegression, bottom_fit: ArmRegression, i: int, k: int) -> ComparisonBound:
    lo, hi = order_pair(top_fit.contrast(i, k), bottom_fit.contrast(i, k))
    return ComparisonBound(pair=(int(i), int(k)), lower=lo, upper=hi)


def compare_arms(
    top_fit: ArmRegression,
    bottom_fit: ArmRegression,
    pairs: Optional[Sequence[Tuple[int, int]]] = None,
) -> Dict[Tuple[int, int], ComparisonBound]:
    """Bounds on ``coef(i) - coef(k)`` for every pair of treated arms, ``i < k``."""
    if pairs is None:
        pairs = arm_pairs(top_fit.max_treat)
    return {(int(i), int(k)): compare_pair(top_fit, bottom_fit, i, k) for i, k in pairs}


AnyBound = Union[Bound, ComparisonBound]

__all__ = [
    "Bound",
    "ComparisonBound",
    "AnyBound",
    "order_pair",
    "estimate_bounds",
    "compare_pair",
    "compare_arms",
]
