# config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import pandas as pd

@dataclass
class BoundsConfig:
    # =========================
    # Core data
    # =========================
    df: pd.DataFrame

    # =========================
    # Schema
    # =========================
    outcome_col: str = "outcome"
    # Integer arm codes, dense over 0..max; 0 is control.
    treatment_col: str = "treatment"
    cluster_col: str = "cluster_id"

    # =========================
    # Covariates
    # =========================
    # Linear controls added to both trimmed regressions.
    covariates: Optional[List[str]] = None

    # =========================
    # Reproducibility
    # =========================
    # Seeds the tie-break draw used to rank equal outcomes.  There is no
    # default: a missing seed raises ReproducibilityViolation at run time.
    seed: Optional[int] = None

    # =========================
    # Inference / diagnostics
    # =========================
    alpha: float = 0.05
    test_attrition: bool = True

    # =========================
    # Output
    # =========================
    verbose: bool = True

    def copy(self) -> "BoundsConfig":
        # Shallow copy (df is shared); lists are copied
        return BoundsConfig(
            df=self.df,
            outcome_col=self.outcome_col,
            treatment_col=self.treatment_col,
            cluster_col=self.cluster_col,
            covariates=list(self.covariates) if self.covariates is not None else None,
            seed=self.seed,
            alpha=self.alpha,
            test_attrition=self.test_attrition,
            verbose=self.verbose,
        )
