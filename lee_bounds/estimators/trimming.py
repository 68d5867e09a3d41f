# lee_bounds/estimators/trimming.py
from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict

import numpy as np
import pandas as pd

from .attrition import AttritionProfile
from ..errors import InvalidInputError, ReproducibilityViolation
from ..helpers.utils import round_half_away


# ======================================================================
# Trim plan
# ======================================================================

@dataclass(frozen=True)
class ArmTrim:
    arm: int
    response_rate: float
    trim_fraction: float
    trim_count: int
    n_observed: int


@dataclass(frozen=True)
class TrimPlan:
    reference_arm: int
    reference_rate: float
    arms: Dict[int, ArmTrim]

    @property
    def trim_counts(self) -> Dict[int, int]:
        return {a: t.trim_count for a, t in self.arms.items()}

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "arm": t.arm,
                    "response_rate": t.response_rate,
                    "trim_fraction": t.trim_fraction,
                    "trim_count": t.trim_count,
                    "n_observed": t.n_observed,
                }
                for t in self.arms.values()
            ]
        ).sort_values("arm").reset_index(drop=True)


def plan_trims(profile: AttritionProfile, *, verbose: bool = False) -> TrimPlan:
    """Per-arm share and number of observed outcomes to trim.

    Each arm is trimmed so that its effective response rate matches the
    reference arm's:

        trim_fraction = |reference_rate - response_rate| / response_rate
        trim_count    = round_half_away(n_observed * trim_fraction)

    The count is evaluated on the integer arm counts, where
    ``n_observed * trim_fraction == |n_observed - n * reference_rate|``,
    so exact halves round away from zero instead of falling on either
    side of ``.5`` through float error.  The reference arm always gets
    a zero trim.
    """
    ref = profile.reference_arm
    ref_rate = profile.reference_rate
    ref_p = profile.arms[ref]
    exact_ref_rate = Fraction(ref_p.n_observed, ref_p.n)
    arms: Dict[int, ArmTrim] = {}
    for a, p in sorted(profile.arms.items()):
        if p.response_rate <= 0:
            raise InvalidInputError(f"Arm {a} has a zero response rate; nothing to trim.")
        if a == ref:
            frac, count = 0.0, 0
        else:
            frac = abs(ref_rate - p.response_rate) / p.response_rate
            count = round_half_away(abs(p.n_observed - p.n * exact_ref_rate))
            count = min(max(count, 0), p.n_observed)
        arms[a] = ArmTrim(
            arm=a,
            response_rate=p.response_rate,
            trim_fraction=frac,
            trim_count=count,
            n_observed=p.n_observed,
        )
        if verbose and a != ref:
            print(f"[TRIM] arm {a}: trim {count} of {p.n_observed} observed (fraction={frac:.4f})")
    return TrimPlan(reference_arm=ref, reference_rate=ref_rate, arms=arms)


# ======================================================================
# Trimmed outcomes
# ======================================================================

@dataclass(frozen=True)
class TrimmedOutcomeSet:
    original: pd.Series
    top_trimmed: pd.Series       # highest-ranked outcomes set to NaN
    bottom_trimmed: pd.Series    # lowest-ranked outcomes set to NaN
    tie_break: np.ndarray        # one uniform key per input row


def draw_tie_break(n: int, rng: np.random.Generator) -> np.ndarray:
    """One uniform key per row, drawn from the caller's generator."""
    if not isinstance(rng, np.random.Generator):
        raise ReproducibilityViolation(
            "Trimming needs an explicitly seeded numpy.random.Generator, "
            f"got {type(rng).__name__}."
        )
    return rng.random(int(n))


def rank_within_arm(outcome: np.ndarray, tie_break: np.ndarray, rows: np.ndarray) -> np.ndarray:
    """Return ``rows`` ordered by (outcome, tie-break key), ascending."""
    # lexsort sorts by the last key first
    order = np.lexsort((tie_break[rows], outcome[rows]))
    return rows[order]


def trim_outcomes(
    data: pd.DataFrame,
    plan: TrimPlan,
    rng: np.random.Generator,
    treatment_col: str,
    outcome_col: str,
) -> TrimmedOutcomeSet:
    """Build the two trimmed copies of the outcome.

    Within every non-reference arm, observed outcomes are ranked by
    ``(outcome, key)`` where ``key`` is drawn once per row from ``rng``.
    ``bottom_trimmed`` drops the ``trim_count`` lowest-ranked outcomes,
    ``top_trimmed`` the ``trim_count`` highest.  The reference arm and
    missing outcomes pass through unchanged; ``data`` is not modified.
    """
    y = data[outcome_col].to_numpy(dtype=float)
    treat = data[treatment_col].to_numpy()
    keys = draw_tie_break(len(y), rng)

    top = y.copy()
    bottom = y.copy()
    observed = ~np.isnan(y)
    for a, t in sorted(plan.arms.items()):
        if a == plan.reference_arm or t.trim_count == 0:
            continue
        rows = np.flatnonzero((treat == a) & observed)
        if t.trim_count > len(rows):
            raise InvalidInputError(
                f"Arm {a}: cannot trim {t.trim_count} of {len(rows)} observed outcomes."
            )
        ranked = rank_within_arm(y, keys, rows)
        bottom[ranked[: t.trim_count]] = np.nan
        top[ranked[len(ranked) - t.trim_count:]] = np.nan

    index = data.index
    return TrimmedOutcomeSet(
        original=pd.Series(y, index=index, name=outcome_col),
        top_trimmed=pd.Series(top, index=index, name=f"{outcome_col}_top_trimmed"),
        bottom_trimmed=pd.Series(bottom, index=index, name=f"{outcome_col}_bottom_trimmed"),
        tie_break=keys,
    )


__all__ = [
    "ArmTrim",
    "TrimPlan",
    "plan_trims",
    "TrimmedOutcomeSet",
    "draw_tie_break",
    "rank_within_arm",
    "trim_outcomes",
]
