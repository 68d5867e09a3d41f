# lee_bounds/study.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .helpers.config import BoundsConfig
from .helpers.preparation import BoundsData
from .helpers.utils import make_rng, require_seed
from .estimator import LeeBoundsEstimator
from .estimators.attrition import AttritionProfile
from .estimators.trimming import TrimPlan, TrimmedOutcomeSet
from .estimators.regression import ArmEstimate, ArmRegression
from .estimators.bounds import Bound, ComparisonBound
from .inference.intervals import interval_table


@dataclass
class LeeBoundsResult:
    """Container for all outputs of a LeeBoundsStudy run."""
    config: BoundsConfig
    data: BoundsData

    # Core outputs
    reference_arm: int
    bounds: Dict[int, Bound]
    comparisons: Dict[Tuple[int, int], ComparisonBound]

    # Intermediate stages
    profile: AttritionProfile
    plan: TrimPlan
    trimmed: TrimmedOutcomeSet
    top_fit: ArmRegression
    bottom_fit: ArmRegression

    # Diagnostics
    attrition_test: Optional[Dict[str, Any]] = None
    intervals: pd.DataFrame = field(default_factory=pd.DataFrame)
    comparison_intervals: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def upper_bounds(self) -> List[ArmEstimate]:
        """``(arm, estimate, se)`` of the upper bound for arms 1..max, in order."""
        return [self.bounds[a].upper for a in sorted(self.bounds)]

    @property
    def lower_bounds(self) -> List[ArmEstimate]:
        return [self.bounds[a].lower for a in sorted(self.bounds)]

    @property
    def max_treat(self) -> int:
        return self.data.max_treat


class LeeBoundsStudy:
    """Orchestrates the full bounds pipeline.

    profile attrition -> plan trims -> trim outcomes (seeded) ->
    two cluster-robust regressions -> per-arm and pairwise bounds.
    """

    def __init__(self, config: BoundsConfig) -> None:
        self.config = config
        self._estimator: Optional[LeeBoundsEstimator] = None
        self._data: Optional[BoundsData] = None

    @property
    def estimator(self) -> LeeBoundsEstimator:
        if self._estimator is None:
            raise RuntimeError("Estimator not initialised yet. Call .run().")
        return self._estimator

    def run(self) -> LeeBoundsResult:
        """
        Run the full pipeline.

        Returns
        -------
        LeeBoundsResult
            Reference arm, per-arm bounds, pairwise comparison bounds and
            the intermediate stages that produced them.

        Raises
        ------
        ReproducibilityViolation
            If ``config.seed`` is missing or not an integer.
        InvalidInputError
            If the data fail validation (see :class:`BoundsData`).
        RegressionFailureError
            If either trimmed regression cannot be estimated.
        """
        # 0) Seed first: nothing is computed without it
        seed = require_seed(self.config.seed)

        # 1) Validate input
        data = BoundsData(self.config)
        self._data = data
        self._estimator = LeeBoundsEstimator(self.config)
        est = self.estimator
        est._log(
            f"{data.info['n_obs']} units, {data.info['n_clusters']} clusters, "
            f"arms 0..{data.max_treat}"
        )

        # 2) Attrition profile + trim plan
        profile = est.profile(data)
        plan = est.plan(profile)
        est._log(f"Reference arm: {profile.reference_arm} (response rate {profile.reference_rate:.4f})")

        attrition_test = est.attrition_test(data) if self.config.test_attrition else None

        # 3) Trimmed outcomes from an explicitly seeded generator
        trimmed = est.trim(data, plan, make_rng(seed))

        # 4) Two regressions
        top_fit, bottom_fit = est.fit_trimmed(data, trimmed)

        # 5) Bounds
        bounds = est.bounds(top_fit, bottom_fit)
        comparisons = est.comparisons(top_fit, bottom_fit)

        # 6) Assemble
        alpha = float(self.config.alpha)
        return LeeBoundsResult(
            config=self.config,
            data=data,
            reference_arm=profile.reference_arm,
            bounds=bounds,
            comparisons=comparisons,
            profile=profile,
            plan=plan,
            trimmed=trimmed,
            top_fit=top_fit,
            bottom_fit=bottom_fit,
            attrition_test=attrition_test,
            intervals=interval_table([bounds[a] for a in sorted(bounds)], alpha),
            comparison_intervals=interval_table([comparisons[p] for p in sorted(comparisons)], alpha),
        )


def lee_bounds(
    df: pd.DataFrame,
    outcome: str,
    treatment: str,
    cluster: str,
    covariates: Optional[Sequence[str]] = None,
    *,
    seed: Optional[int] = None,
    alpha: float = 0.05,
    verbose: bool = False,
) -> LeeBoundsResult:
    """Functional shortcut for ``LeeBoundsStudy(BoundsConfig(...)).run()``."""
    cfg = BoundsConfig(
        df=df,
        outcome_col=outcome,
        treatment_col=treatment,
        cluster_col=cluster,
        covariates=list(covariates) if covariates is not None else None,
        seed=seed,
        alpha=alpha,
        verbose=verbose,
    )
    return LeeBoundsStudy(cfg).run()


__all__ = ["LeeBoundsResult", "LeeBoundsStudy", "lee_bounds"]
