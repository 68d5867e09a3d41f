from __future__ import annotations

from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


def build_experiment(
    response: Sequence[float] = (0.9, 0.8, 0.85),
    n_per_arm: int = 100,
    effect: float = 2.0,
    n_clusters: int = 50,
    seed: int = 0,
    covariate: bool = False,
) -> pd.DataFrame:
    """Unit-level experiment with an exact number of missing outcomes per arm.

    Outcome ~ N(effect * arm, 1); arm ``a`` has
    ``round(n_per_arm * (1 - response[a]))`` missing outcomes.
    """
    rng = np.random.default_rng(seed)
    frames = []
    for arm, rate in enumerate(response):
        x = rng.normal(size=n_per_arm)
        y = effect * arm + (0.5 * x if covariate else 0.0) + rng.normal(size=n_per_arm)
        n_missing = int(round(n_per_arm * (1 - rate)))
        drop = rng.choice(n_per_arm, size=n_missing, replace=False)
        y[drop] = np.nan
        frames.append(pd.DataFrame({"outcome": y, "treatment": arm, "x": x}))
    df = pd.concat(frames, ignore_index=True)
    df["cluster_id"] = [f"c{i % n_clusters:03d}" for i in range(len(df))]
    return df


@pytest.fixture
def experiment() -> pd.DataFrame:
    """Three arms, response rates 0.9 / 0.8 / 0.85 (arm 1 is the reference)."""
    return build_experiment()


@pytest.fixture
def make_experiment():
    return build_experiment
