# lee_bounds/estimators/attrition.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from ..errors import InvalidInputError
from ..helpers.utils import arm_column


@dataclass(frozen=True)
class ArmProfile:
    arm: int
    n: int                # all units assigned to the arm
    n_observed: int       # units with a non-missing outcome
    response_rate: float  # n_observed / n


@dataclass(frozen=True)
class AttritionProfile:
    arms: Dict[int, ArmProfile]
    reference_arm: int
    reference_rate: float

    @property
    def response_rates(self) -> Dict[int, float]:
        return {a: p.response_rate for a, p in self.arms.items()}

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "arm": p.arm,
                "n": p.n,
                "n_observed": p.n_observed,
                "response_rate": p.response_rate,
                "reference": p.arm == self.reference_arm,
            }
            for p in self.arms.values()
        ]
        return pd.DataFrame(rows).sort_values("arm").reset_index(drop=True)


def find_reference_arm(response_rates: Dict[int, float]) -> int:
    """Arm with the lowest response rate.

    Arms are scanned in ascending id order and a later arm only replaces
    the current minimum when its rate is strictly lower, so ties go to
    the smallest id.
    """
    if not response_rates:
        raise InvalidInputError("No arms to choose a reference arm from.")
    ref: Optional[int] = None
    for arm in sorted(response_rates):
        if ref is None or response_rates[arm] < response_rates[ref]:
            ref = arm
    return int(ref)


def profile_attrition(
    data: pd.DataFrame,
    treatment_col: str,
    outcome_col: str,
    max_treat: Optional[int] = None,
    *,
    verbose: bool = False,
) -> AttritionProfile:
    """Compute per-arm response rates and pick the reference arm.

    Parameters
    ----------
    data : pandas.DataFrame
        Unit-level data; a missing outcome marks an attrited unit.
    treatment_col, outcome_col : str
        Column names.  Treatment codes must be integers.
    max_treat : int or None
        Highest arm id.  Defaults to the maximum observed code; every arm
        in ``0..max_treat`` must have at least one unit.
    verbose : bool
        Print the response-rate table.

    Returns
    -------
    AttritionProfile
    """
    treat = data[treatment_col].to_numpy()
    observed = data[outcome_col].notna().to_numpy()
    if max_treat is None:
        max_treat = int(np.max(treat)) if len(treat) else -1
    if max_treat < 0:
        raise InvalidInputError("No observations to profile.")

    arms: Dict[int, ArmProfile] = {}
    for a in range(int(max_treat) + 1):
        in_arm = treat == a
        n = int(in_arm.sum())
        if n == 0:
            raise InvalidInputError(f"Arm {a} has no observations; response rate is undefined.")
        n_obs = int((in_arm & observed).sum())
        if n_obs == 0:
            raise InvalidInputError(f"Outcome is missing for every observation in arm {a}.")
        arms[a] = ArmProfile(arm=a, n=n, n_observed=n_obs, response_rate=n_obs / n)

    ref = find_reference_arm({a: p.response_rate for a, p in arms.items()})
    profile = AttritionProfile(arms=arms, reference_arm=ref, reference_rate=arms[ref].response_rate)

    if verbose:
        for p in arms.values():
            tag = "  <- reference" if p.arm == ref else ""
            print(f"[ATTRITION] arm {p.arm}: {p.n_observed}/{p.n} observed (rate={p.response_rate:.4f}){tag}")
    return profile


def differential_attrition_test(
    data: pd.DataFrame,
    treatment_col: str,
    outcome_col: str,
    cluster_col: str,
    max_treat: Optional[int] = None,
) -> Dict[str, Any]:
    """Joint Wald test that response rates are equal across all arms.

    Regresses the response indicator on arm dummies (control as base)
    with cluster-robust covariance and F-tests all arm coefficients
    equal to zero.  Diagnostic only: it does not feed into the bounds.

    Returns
    -------
    dict
        ``stat`` (F statistic), ``df`` (numerator degrees of freedom),
        ``p_value`` and ``tested`` (dummy names).  Statistic and p-value
        are NaN when the test cannot be computed (e.g. no variation in
        response, fewer than two clusters).
    """
    if max_treat is None:
        max_treat = int(data[treatment_col].max())
    names: List[str] = [arm_column(a) for a in range(1, int(max_treat) + 1)]

    work = pd.DataFrame({"responded": data[outcome_col].notna().astype(float).to_numpy()})
    treat = data[treatment_col].to_numpy()
    for a in range(1, int(max_treat) + 1):
        work[arm_column(a)] = (treat == a).astype(float)
    groups = pd.factorize(data[cluster_col])[0]

    nan_result = {"stat": np.nan, "df": len(names), "p_value": np.nan, "tested": names}
    if len(np.unique(groups)) < 2 or work["responded"].var() == 0:
        return nan_result

    formula = "responded ~ " + " + ".join(names)
    try:
        m = smf.ols(formula, data=work).fit(cov_type="cluster", cov_kwds={"groups": groups})
        H = " = 0, ".join(names) + " = 0"
        ft = m.f_test(H)
        return {
            "stat": float(np.squeeze(ft.fvalue)),
            "df": len(names),
            "p_value": float(np.squeeze(ft.pvalue)),
            "tested": names,
        }
    except (ValueError, np.linalg.LinAlgError) as e:
        print(f"[ATTRITION] differential attrition test failed: {e}")
        return nan_result


__all__ = [
    "ArmProfile",
    "AttritionProfile",
    "find_reference_arm",
    "profile_attrition",
    "differential_attrition_test",
]
