from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd

from lee_bounds.helpers.config import BoundsConfig
from lee_bounds.helpers.preparation import BoundsData
from lee_bounds.estimators.base import BaseEstimator
from lee_bounds.estimators.attrition import (
    AttritionProfile,
    differential_attrition_test,
    profile_attrition,
)
from lee_bounds.estimators.trimming import TrimPlan, TrimmedOutcomeSet, plan_trims, trim_outcomes
from lee_bounds.estimators.regression import ArmRegression, fit_arm_regression
from lee_bounds.estimators.bounds import Bound, ComparisonBound, compare_arms, estimate_bounds


class LeeBoundsEstimator(BaseEstimator):
    """
    Thin façade over the pipeline stage functions.

    Each method takes the validated :class:`BoundsData` plus the output
    of the previous stage, so the study orchestrator only wires results
    together and the stages stay individually testable.
    """

    def __init__(self, config: BoundsConfig) -> None:
        super().__init__(config)

    # ---------------------------------------------------------
    # Attrition
    # ---------------------------------------------------------
    def profile(self, data: BoundsData) -> AttritionProfile:
        return profile_attrition(
            data.data,
            data.treatment_name,
            data.outcome_name,
            data.max_treat,
            verbose=self.config.verbose,
        )

    def attrition_test(self, data: BoundsData) -> Dict[str, Any]:
        res = differential_attrition_test(
            data.data,
            data.treatment_name,
            data.outcome_name,
            data.cluster_name,
            data.max_treat,
        )
        self._log(f"Differential attrition F={res['stat']:.3f}, p={res['p_value']:.3f}")
        return res

    # ---------------------------------------------------------
    # Trimming
    # ---------------------------------------------------------
    def plan(self, profile: AttritionProfile) -> TrimPlan:
        return plan_trims(profile, verbose=self.config.verbose)

    def trim(self, data: BoundsData, plan: TrimPlan, rng: np.random.Generator) -> TrimmedOutcomeSet:
        return trim_outcomes(data.data, plan, rng, data.treatment_name, data.outcome_name)

    # ---------------------------------------------------------
    # Regressions
    # ---------------------------------------------------------
    def fit(self, data: BoundsData, outcome: pd.Series, label: str) -> ArmRegression:
        df = data.data
        covs = df[data.covariates] if data.covariates else None
        fit = fit_arm_regression(
            outcome,
            df[data.treatment_name],
            df[data.cluster_name],
            data.max_treat,
            covs,
            label=label,
        )
        self._log_formula(fit.formula, f"{label}: n={fit.n_obs}, clusters={fit.n_clusters}")
        return fit

    def fit_trimmed(
        self, data: BoundsData, trimmed: TrimmedOutcomeSet
    ) -> Tuple[ArmRegression, ArmRegression]:
        """Return ``(top_fit, bottom_fit)``."""
        top = self.fit(data, trimmed.top_trimmed, "top-trimmed")
        bottom = self.fit(data, trimmed.bottom_trimmed, "bottom-trimmed")
        return top, bottom

    # ---------------------------------------------------------
    # Bounds
    # ---------------------------------------------------------
    def bounds(self, top: ArmRegression, bottom: ArmRegression) -> Dict[int, Bound]:
        return estimate_bounds(top, bottom)

    def comparisons(
        self, top: ArmRegression, bottom: ArmRegression
    ) -> Dict[Tuple[int, int], ComparisonBound]:
        return compare_arms(top, bottom)


__all__ = ["LeeBoundsEstimator"]
