import numpy as np
import pytest
from scipy.stats import norm

from lee_bounds.estimators.bounds import Bound, ComparisonBound
from lee_bounds.estimators.regression import ArmEstimate, ContrastEstimate
from lee_bounds.inference.intervals import (
    bound_intervals,
    imbens_manski_critical_value,
    interval_table,
)


def test_point_identified_uses_two_sided_value():
    assert imbens_manski_critical_value(0.0, 0.1, 0.1) == pytest.approx(norm.ppf(0.975))


def test_wide_set_approaches_one_sided_value():
    assert imbens_manski_critical_value(100.0, 0.1, 0.1) == pytest.approx(norm.ppf(0.95), abs=1e-6)


def test_critical_value_solves_coverage_equation():
    width, se_l, se_u, alpha = 0.2, 0.1, 0.15, 0.1
    c = imbens_manski_critical_value(width, se_l, se_u, alpha)
    assert norm.ppf(1 - alpha) < c < norm.ppf(1 - alpha / 2)
    d = width / max(se_l, se_u)
    assert norm.cdf(c + d) - norm.cdf(-c) == pytest.approx(1 - alpha, abs=1e-9)


def test_critical_value_rejects_bad_alpha():
    with pytest.raises(ValueError):
        imbens_manski_critical_value(0.1, 0.1, 0.1, alpha=1.5)


def test_bound_intervals_nest():
    b = Bound(arm=1, lower=ArmEstimate(1, 0.5, 0.1), upper=ArmEstimate(1, 0.9, 0.2))
    iv = bound_intervals(b)
    assert iv["ci_low"] <= iv["im_low"] <= iv["lower"] <= iv["upper"] <= iv["im_high"] <= iv["ci_high"]
    assert iv["ci_low"] == pytest.approx(0.5 - norm.ppf(0.975) * 0.1)


def test_interval_table_keys():
    b = Bound(arm=2, lower=ArmEstimate(2, 0.1, 0.1), upper=ArmEstimate(2, 0.2, 0.1))
    c = ComparisonBound(pair=(1, 2), lower=ContrastEstimate((1, 2), -0.3, 0.1), upper=ContrastEstimate((1, 2), 0.1, 0.1))
    arms = interval_table([b])
    pairs = interval_table([c])
    assert arms["arm"].tolist() == [2]
    assert pairs["pair"].tolist() == [(1, 2)]
    assert np.all(pairs["im_low"] <= pairs["lower"])
