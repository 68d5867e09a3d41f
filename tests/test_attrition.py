import numpy as np
import pandas as pd
import pytest

from lee_bounds import InvalidInputError
from lee_bounds.estimators.attrition import (
    differential_attrition_test,
    find_reference_arm,
    profile_attrition,
)


def test_response_rates_and_reference(experiment):
    profile = profile_attrition(experiment, "treatment", "outcome")
    assert profile.response_rates == pytest.approx({0: 0.9, 1: 0.8, 2: 0.85})
    assert profile.reference_arm == 1
    assert profile.reference_rate == pytest.approx(0.8)
    assert profile.arms[0].n == 100
    assert profile.arms[0].n_observed == 90


def test_control_can_be_reference(make_experiment):
    df = make_experiment(response=(0.7, 0.9, 0.8))
    assert profile_attrition(df, "treatment", "outcome").reference_arm == 0


def test_tie_goes_to_lowest_arm(make_experiment):
    df = make_experiment(response=(0.9, 0.8, 0.8))
    assert profile_attrition(df, "treatment", "outcome").reference_arm == 1
    df = make_experiment(response=(0.8, 0.9, 0.8))
    assert profile_attrition(df, "treatment", "outcome").reference_arm == 0


def test_find_reference_arm_scans_in_id_order():
    assert find_reference_arm({2: 0.5, 0: 0.9, 1: 0.5}) == 1
    assert find_reference_arm({0: 0.5}) == 0
    with pytest.raises(InvalidInputError):
        find_reference_arm({})


def test_empty_arm_raises(experiment):
    with pytest.raises(InvalidInputError, match="Arm 3"):
        profile_attrition(experiment, "treatment", "outcome", max_treat=3)


def test_all_missing_arm_raises(experiment):
    df = experiment.copy()
    df.loc[df["treatment"] == 2, "outcome"] = np.nan
    with pytest.raises(InvalidInputError, match="arm 2"):
        profile_attrition(df, "treatment", "outcome")


def test_profile_frame(experiment):
    frame = profile_attrition(experiment, "treatment", "outcome").to_frame()
    assert list(frame["arm"]) == [0, 1, 2]
    assert frame.loc[frame["reference"], "arm"].tolist() == [1]


def test_differential_attrition_detects_gap(make_experiment):
    df = make_experiment(response=(0.95, 0.5, 0.9), n_per_arm=200)
    res = differential_attrition_test(df, "treatment", "outcome", "cluster_id")
    assert res["df"] == 2
    assert res["tested"] == ["arm_1", "arm_2"]
    assert 0.0 <= res["p_value"] < 0.01


def test_differential_attrition_without_missingness_is_nan(make_experiment):
    df = make_experiment(response=(1.0, 1.0, 1.0))
    res = differential_attrition_test(df, "treatment", "outcome", "cluster_id")
    assert np.isnan(res["stat"])
    assert np.isnan(res["p_value"])
