"""
Confidence intervals for partially identified effects.

Given the lower and upper bound estimates and their standard errors,
two intervals are reported:

* the naive interval ``[lower - z*se_l, upper + z*se_u]`` with the
  two-sided normal critical value, which covers the whole identified
  set with probability at least ``1 - alpha``;
* the Imbens and Manski (2004) interval, which uses a smaller critical
  value ``c`` (between the one- and two-sided normal values) and
  covers the true parameter with probability ``1 - alpha``.

``c`` solves ``Phi(c + width / max(se_l, se_u)) - Phi(-c) = 1 - alpha``.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

import numpy as np
import pandas as pd
from scipy.optimize import brentq
from scipy.stats import norm

from ..estimators.bounds import AnyBound, ComparisonBound


def imbens_manski_critical_value(width: float, se_lower: float, se_upper: float, alpha: float = 0.05) -> float:
    """Critical value ``c`` of the Imbens-Manski interval.

    Parameters
    ----------
    width : float
        ``upper - lower`` (non-negative).
    se_lower, se_upper : float
        Standard errors of the two bound estimates.
    alpha : float, default 0.05
        One minus the coverage level.

    Returns
    -------
    float
        ``c`` in ``[z_{1-alpha}, z_{1-alpha/2}]``.  Equals the two-sided
        value when the width is zero.
    """
    if not 0 < alpha < 1:
        raise ValueError("alpha must lie strictly between 0 and 1.")
    z_one = float(norm.ppf(1 - alpha))
    z_two = float(norm.ppf(1 - alpha / 2))
    sigma = max(float(se_lower), float(se_upper))
    width = max(float(width), 0.0)
    if width == 0.0:
        return z_two
    if sigma <= 0 or not np.isfinite(sigma):
        return z_one

    d = width / sigma

    def f(c: float) -> float:
        return float(norm.cdf(c + d) - norm.cdf(-c) - (1 - alpha))

    lo, hi = f(z_one), f(z_two)
    if lo >= 0:
        return z_one
    if hi <= 0:
        return z_two
    return float(brentq(f, z_one, z_two, xtol=1e-12))


def bound_intervals(bound: AnyBound, alpha: float = 0.05) -> Dict[str, float]:
    """Naive and Imbens-Manski intervals for one arm or pairwise bound."""
    lo, hi = bound.lower, bound.upper
    z = float(norm.ppf(1 - alpha / 2))
    c = imbens_manski_critical_value(hi.estimate - lo.estimate, lo.se, hi.se, alpha)
    return {
        "lower": lo.estimate,
        "lower_se": lo.se,
        "upper": hi.estimate,
        "upper_se": hi.se,
        "ci_low": lo.estimate - z * lo.se,
        "ci_high": hi.estimate + z * hi.se,
        "im_crit": c,
        "im_low": lo.estimate - c * lo.se,
        "im_high": hi.estimate + c * hi.se,
    }


def interval_table(bounds: Iterable[AnyBound], alpha: float = 0.05) -> pd.DataFrame:
    """One row per bound with a leading ``arm`` or ``pair`` column."""
    rows: List[Dict[str, object]] = []
    for b in bounds:
        key = {"pair": b.pair} if isinstance(b, ComparisonBound) else {"arm": b.arm}
        rows.append({**key, **bound_intervals(b, alpha)})
    return pd.DataFrame(rows)
