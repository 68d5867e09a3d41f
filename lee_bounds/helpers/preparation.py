# lee_bounds/helpers/preparation.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .config import BoundsConfig
from .utils import resolve_covariates
from ..errors import InvalidInputError


# ----------------------------
# Basic helpers
# ----------------------------
def _require_columns(df: pd.DataFrame, cols: List[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise InvalidInputError(f"Columns not found in data: {missing}")


def _as_numeric(series: pd.Series, name: str) -> pd.Series:
    """Coerce a column to float, rejecting anything that is not numeric."""
    if pd.api.types.is_bool_dtype(series):
        return series.astype(float)
    try:
        return pd.to_numeric(series, errors="raise").astype(float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Column {name!r} must be numeric.") from exc


def validate_treatment(treatment: pd.Series, name: str = "treatment") -> pd.Series:
    """Return the treatment column as ``int64`` after checking its codes.

    Codes must be non-missing, integral, non-negative and dense over
    ``0..max``, with at least one treated arm besides control.
    """
    values = _as_numeric(treatment, name)
    if values.isna().any():
        raise InvalidInputError(
            f"Treatment column {name!r} has {int(values.isna().sum())} missing values."
        )
    arr = values.to_numpy(dtype=float)
    if not np.all(np.isfinite(arr)) or not np.all(arr == np.floor(arr)):
        raise InvalidInputError(f"Treatment column {name!r} must hold integer codes.")
    if (arr < 0).any():
        raise InvalidInputError(f"Treatment column {name!r} has negative codes.")

    codes = values.astype(np.int64)
    present = set(int(c) for c in codes.unique())
    max_treat = max(present)
    absent = sorted(set(range(max_treat + 1)) - present)
    if absent:
        raise InvalidInputError(
            f"Treatment codes must be dense over 0..{max_treat}; "
            f"no observations for arm(s) {absent}."
        )
    if max_treat < 1:
        raise InvalidInputError("At least one treatment arm besides control (0) is required.")
    return codes


# ----------------------------
# Input builder
# ----------------------------
class BoundsData:
    """
    Validated, read-only view of the unit-level input:
      - outcome coerced to float (NaN = attrited),
      - treatment coerced to int and checked for dense codes 0..max,
      - cluster ids required on every row,
      - covariates coerced to float (missing values are left in place
        and dropped listwise by the regressions only).

    The caller's frame is never modified; ``self.data`` is a new frame
    holding just the columns the pipeline reads, in the input row order.
    """

    def __init__(self, config: BoundsConfig) -> None:
        self.config = config.copy()
        self.data: Optional[pd.DataFrame] = None
        self.info: Dict[str, Any] = {}
        self.outcome_name: str = self.config.outcome_col
        self.treatment_name: str = self.config.treatment_col
        self.cluster_name: str = self.config.cluster_col
        self.covariates: List[str] = resolve_covariates(self.config.covariates)
        self.max_treat: int = 0
        self._prepare()

    def _prepare(self) -> None:
        cfg = self.config
        df = cfg.df
        if not isinstance(df, pd.DataFrame):
            raise InvalidInputError("Input data must be a pandas DataFrame.")
        if df.empty:
            raise InvalidInputError("Input data is empty.")

        overlap = {self.outcome_name, self.treatment_name, self.cluster_name} & set(self.covariates)
        if overlap:
            raise InvalidInputError(f"Columns used both as covariates and roles: {sorted(overlap)}")
        _require_columns(df, [self.outcome_name, self.treatment_name, self.cluster_name] + self.covariates)

        out = pd.DataFrame(index=df.index)
        out[self.outcome_name] = _as_numeric(df[self.outcome_name], self.outcome_name)
        out[self.treatment_name] = validate_treatment(df[self.treatment_name], self.treatment_name)

        clusters = df[self.cluster_name]
        if clusters.isna().any():
            raise InvalidInputError(
                f"Cluster column {self.cluster_name!r} has {int(clusters.isna().sum())} missing values."
            )
        out[self.cluster_name] = clusters.to_numpy()

        for c in self.covariates:
            out[c] = _as_numeric(df[c], c)

        # inf outcomes cannot be ranked meaningfully
        if np.isinf(out[self.outcome_name].to_numpy()).any():
            raise InvalidInputError(f"Outcome column {self.outcome_name!r} has infinite values.")

        self.data = out
        self.max_treat = int(out[self.treatment_name].max())
        self.info = {
            "n_obs": int(len(out)),
            "n_clusters": int(out[self.cluster_name].nunique()),
            "max_treat": self.max_treat,
            "covariates_used": list(self.covariates),
        }

    @property
    def arms(self) -> List[int]:
        """All arm ids, control included, in ascending order."""
        return list(range(self.max_treat + 1))

    @property
    def treated_arms(self) -> List[int]:
        return list(range(1, self.max_treat + 1))


__all__ = ["BoundsData", "validate_treatment"]
