# summary.py
from __future__ import annotations

from typing import Any, Dict, Optional, TYPE_CHECKING

import numpy as np
import pandas as pd

from .plotting import plot_arm_bounds, plot_response_rates

if TYPE_CHECKING:  # pragma: no cover
    from ..study import LeeBoundsResult

# ================================
# Formatting helpers
# ================================

def _fmt_p(p: Optional[float]) -> str:
    if p is None or (isinstance(p, float) and (np.isnan(p) or np.isinf(p))):
        return "NA"
    return f"{p:.3f}" if p >= 0.001 else "<0.001"

def _ci_str(lo: float, hi: float) -> str:
    return f"[{lo:.3f}, {hi:.3f}]"

def _percent(x: float, digits: int = 1) -> str:
    return f"{100.0 * x:.{digits}f}%"

def _rule(title: str | None = None) -> None:
    line = "=" * 78
    if title:
        print(f"\n{line}\n{title}\n{line}")
    else:
        print(f"\n{line}")


# ================================
# Tables
# ================================

def bounds_to_frame(result: "LeeBoundsResult") -> pd.DataFrame:
    """One row per treated arm: lower/upper estimate and SE."""
    rows = []
    for arm in sorted(result.bounds):
        b = result.bounds[arm]
        rows.append(
            {
                "arm": arm,
                "lower": b.lower.estimate,
                "lower_se": b.lower.se,
                "upper": b.upper.estimate,
                "upper_se": b.upper.se,
                "trim_fraction": result.plan.arms[arm].trim_fraction,
                "trim_count": result.plan.arms[arm].trim_count,
            }
        )
    return pd.DataFrame(rows)


def comparisons_to_frame(result: "LeeBoundsResult") -> pd.DataFrame:
    """One row per pair ``(i, k)``: bounds on ``coef(i) - coef(k)``."""
    rows = []
    for (i, k) in sorted(result.comparisons):
        c = result.comparisons[(i, k)]
        rows.append(
            {
                "arm_i": i,
                "arm_k": k,
                "lower": c.lower.estimate,
                "lower_se": c.lower.se,
                "upper": c.upper.estimate,
                "upper_se": c.upper.se,
            }
        )
    return pd.DataFrame(rows, columns=["arm_i", "arm_k", "lower", "lower_se", "upper", "upper_se"])


# ================================
# Print blocks
# ================================

def print_attrition_block(result: "LeeBoundsResult") -> None:
    _rule("ATTRITION")
    info: Dict[str, Any] = result.data.info
    print(f"Units: {info.get('n_obs')} | Clusters: {info.get('n_clusters')} | Arms: 0..{result.max_treat}")
    for arm, t in sorted(result.plan.arms.items()):
        p = result.profile.arms[arm]
        tag = " (reference)" if arm == result.reference_arm else ""
        print(
            f"  - arm {arm}{tag}: observed {p.n_observed}/{p.n} ({_percent(p.response_rate)}), "
            f"trim {t.trim_count} ({_percent(t.trim_fraction, 2)})"
        )
    test = result.attrition_test
    if test is not None:
        print(f"Equal response rates: F = {test['stat']:.3f}, df = {test['df']}, p = {_fmt_p(test['p_value'])}")


def print_bounds_block(result: "LeeBoundsResult") -> None:
    _rule("LEE BOUNDS (effect relative to control)")
    alpha = float(result.config.alpha)
    level = _percent(1 - alpha, 0)
    iv = result.intervals.set_index("arm") if not result.intervals.empty else None
    for arm in sorted(result.bounds):
        b = result.bounds[arm]
        print(
            f"arm {arm}: lower = {b.lower.estimate:.3f} (SE {b.lower.se:.3f}) | "
            f"upper = {b.upper.estimate:.3f} (SE {b.upper.se:.3f})"
        )
        if iv is not None and arm in iv.index:
            r = iv.loc[arm]
            print(f"        {level} CI {_ci_str(r['ci_low'], r['ci_high'])} | Imbens-Manski {_ci_str(r['im_low'], r['im_high'])}")


def print_comparisons_block(result: "LeeBoundsResult") -> None:
    if not result.comparisons:
        return
    _rule("PAIRWISE COMPARISONS (coef i - coef k)")
    for (i, k) in sorted(result.comparisons):
        c = result.comparisons[(i, k)]
        print(
            f"{i} vs {k}: lower = {c.lower.estimate:.3f} (SE {c.lower.se:.3f}) | "
            f"upper = {c.upper.estimate:.3f} (SE {c.upper.se:.3f})"
        )


def print_bounds_summary(result: "LeeBoundsResult", *, plot: bool = False) -> None:
    """Print the attrition, bounds and comparison blocks; optionally plot."""
    print_attrition_block(result)
    print_bounds_block(result)
    print_comparisons_block(result)
    _rule()
    if plot:
        plot_response_rates(result.profile.to_frame())
        if not result.intervals.empty:
            plot_arm_bounds(result.intervals)


__all__ = [
    "bounds_to_frame",
    "comparisons_to_frame",
    "print_attrition_block",
    "print_bounds_block",
    "print_comparisons_block",
    "print_bounds_summary",
]
