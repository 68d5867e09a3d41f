# lee_bounds/estimators/regression.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import re
import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from ..errors import RegressionFailureError
from ..helpers.utils import arm_column


@dataclass(frozen=True)
class ArmEstimate:
    arm: int
    estimate: float
    se: float


@dataclass(frozen=True)
class ContrastEstimate:
    pair: Tuple[int, int]
    estimate: float
    se: float


def _sanitize_name(label: str) -> str:
    """Convert arbitrary column names into safe formula terms."""
    safe = re.sub(r"[^0-9A-Za-z]+", "_", str(label)).strip("_")
    return f"x_{safe or 'cov'}"


@dataclass
class ArmRegression:
    """Cluster-robust OLS of one outcome on arm dummies (+ covariates)."""

    label: str
    max_treat: int
    model: Any
    formula: str
    n_obs: int
    n_clusters: int
    covariate_terms: Dict[str, str] = field(default_factory=dict)

    @property
    def params(self) -> pd.Series:
        return self.model.params

    @property
    def vcov(self) -> pd.DataFrame:
        return self.model.cov_params()

    def _check_arm(self, arm: int) -> str:
        if not 1 <= int(arm) <= self.max_treat:
            raise KeyError(f"Arm {arm} is not a treated arm (1..{self.max_treat}).")
        return arm_column(arm)

    def estimate(self, arm: int) -> ArmEstimate:
        name = self._check_arm(arm)
        return ArmEstimate(
            arm=int(arm),
            estimate=float(self.model.params[name]),
            se=float(self.model.bse[name]),
        )

    def contrast(self, i: int, k: int) -> ContrastEstimate:
        """``coef(i) - coef(k)`` with SE from ``Var_ii + Var_kk - 2 Cov_ik``."""
        if int(i) == int(k):
            raise ValueError("A contrast needs two distinct arms.")
        names = [self._check_arm(i), self._check_arm(k)]
        b = self.model.params.loc[names].to_numpy(float)
        V = self.vcov.loc[names, names].to_numpy(float)
        V = 0.5 * (V + V.T)
        L = np.array([1.0, -1.0])
        var = float(L @ V @ L)
        return ContrastEstimate(
            pair=(int(i), int(k)),
            estimate=float(L @ b),
            se=float(np.sqrt(max(var, 0.0))),
        )


def fit_arm_regression(
    outcome: pd.Series | np.ndarray,
    treatment: pd.Series | np.ndarray,
    clusters: pd.Series | np.ndarray,
    max_treat: int,
    covariates: Optional[pd.DataFrame] = None,
    *,
    label: str = "",
    verbose: bool = False,
) -> ArmRegression:
    """Regress ``outcome`` on arm dummies with cluster-robust errors.

    Control (arm 0) is the omitted base level.  Rows with a missing
    outcome or covariate are dropped listwise.  The design must have full
    column rank and every arm coefficient a finite, positive standard
    error; otherwise :class:`RegressionFailureError` is raised.
    """
    y = np.asarray(outcome, dtype=float)
    treat = np.asarray(treatment)
    work = pd.DataFrame({"y": y})
    arm_terms: List[str] = []
    for a in range(1, int(max_treat) + 1):
        col = arm_column(a)
        work[col] = (treat == a).astype(float)
        arm_terms.append(col)

    cov_terms: Dict[str, str] = {}
    if covariates is not None:
        for c in covariates.columns:
            term = _sanitize_name(c)
            while term in cov_terms.values() or term in work.columns:
                term += "_"
            cov_terms[c] = term
            work[term] = covariates[c].to_numpy(dtype=float)
    work["_cluster"] = pd.factorize(np.asarray(clusters))[0]
    work["_arm"] = treat.astype(np.int64)

    used = work.dropna()
    n_clusters = int(used["_cluster"].nunique())
    if used.empty or n_clusters < 2:
        raise RegressionFailureError(
            f"[{label}] need at least two clusters with usable rows, got {n_clusters}."
        )
    for a, col in enumerate(arm_terms, start=1):
        if used[col].sum() == 0:
            raise RegressionFailureError(
                f"[{label}] arm {a} has no usable observations after trimming."
            )

    rhs = arm_terms + list(cov_terms.values())
    formula = "y ~ " + " + ".join(rhs)
    if verbose:
        print(f"[BOUNDS] {label} formula: {formula} (n={len(used)}, clusters={n_clusters})")

    model = smf.ols(formula, data=used)
    exog = model.exog
    rank = int(np.linalg.matrix_rank(exog))
    if rank < exog.shape[1]:
        raise RegressionFailureError(
            f"[{label}] design matrix is rank deficient (rank {rank} < {exog.shape[1]} columns); "
            "check for collinear covariates."
        )
    if exog.shape[0] <= exog.shape[1]:
        raise RegressionFailureError(
            f"[{label}] not enough observations ({exog.shape[0]}) for {exog.shape[1]} parameters."
        )

    try:
        m = model.fit(cov_type="cluster", cov_kwds={"groups": used["_cluster"].to_numpy()})
    except (ValueError, np.linalg.LinAlgError) as e:
        raise RegressionFailureError(f"[{label}] regression failed: {e}") from e

    # zero residual variance within any arm makes the cluster-robust
    # covariance degenerate
    resid = np.asarray(m.resid, dtype=float)
    arm_ids = used["_arm"].to_numpy()
    tol = 1e-10 * max(1.0, float(np.max(np.abs(used["y"].to_numpy()))))
    for a in range(int(max_treat) + 1):
        r = resid[arm_ids == a]
        if r.size and float(np.max(np.abs(r))) <= tol:
            raise RegressionFailureError(
                f"[{label}] arm {a} has zero residual variance."
            )

    for a, col in enumerate(arm_terms, start=1):
        se = float(m.bse[col])
        if not np.isfinite(se) or se <= 0:
            raise RegressionFailureError(
                f"[{label}] arm {a} has a degenerate standard error ({se}); "
                "the covariance matrix is singular or the residual variance is zero."
            )

    return ArmRegression(
        label=label,
        max_treat=int(max_treat),
        model=m,
        formula=formula,
        n_obs=int(len(used)),
        n_clusters=n_clusters,
        covariate_terms=cov_terms,
    )


__all__ = [
    "ArmEstimate",
    "ContrastEstimate",
    "ArmRegression",
    "fit_arm_regression",
]
