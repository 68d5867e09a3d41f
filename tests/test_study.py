import numpy as np
import pandas as pd
import pytest

from lee_bounds import (
    BoundsConfig,
    InvalidInputError,
    LeeBoundsStudy,
    ReproducibilityViolation,
    lee_bounds,
)


def _run(df, seed=2024, **kw):
    kw.setdefault("verbose", False)
    return LeeBoundsStudy(BoundsConfig(df=df, seed=seed, **kw)).run()


def test_three_arm_example(experiment):
    res = _run(experiment)
    assert res.reference_arm == 1
    assert res.plan.trim_counts == {0: 10, 1: 0, 2: 5}
    assert res.plan.arms[0].trim_count == round(90 * (0.1 / 0.9))
    assert [e.arm for e in res.lower_bounds] == [1, 2]
    assert [e.arm for e in res.upper_bounds] == [1, 2]
    assert res.lower_bounds[0].estimate <= res.upper_bounds[0].estimate
    # true effects are 2 and 4 with unit noise
    assert 1.0 < res.lower_bounds[0].estimate < 3.0
    assert 3.0 < res.upper_bounds[1].estimate < 5.0
    assert list(res.comparisons) == [(1, 2)]


def test_reference_arm_is_never_trimmed(experiment):
    res = _run(experiment)
    ref = experiment["treatment"] == res.reference_arm
    pd.testing.assert_series_equal(res.trimmed.top_trimmed[ref], res.trimmed.original[ref], check_names=False)
    pd.testing.assert_series_equal(res.trimmed.bottom_trimmed[ref], res.trimmed.original[ref], check_names=False)


def test_no_attrition_collapses_bounds(make_experiment):
    df = make_experiment(response=(0.85, 0.85, 0.85))
    res = _run(df)
    assert all(t.trim_count == 0 for t in res.plan.arms.values())
    for arm, b in res.bounds.items():
        assert b.lower.estimate == b.upper.estimate
        assert b.lower.se == b.upper.se
    c = res.comparisons[(1, 2)]
    assert c.lower.estimate == c.upper.estimate


def test_same_seed_same_bounds(experiment):
    first, second = _run(experiment, seed=99), _run(experiment, seed=99)
    pd.testing.assert_series_equal(first.trimmed.top_trimmed, second.trimmed.top_trimmed)
    pd.testing.assert_series_equal(first.trimmed.bottom_trimmed, second.trimmed.bottom_trimmed)
    for arm in first.bounds:
        assert first.bounds[arm] == second.bounds[arm]
    assert first.comparisons == second.comparisons


def test_seed_matters_only_through_ties(make_experiment):
    df = make_experiment()
    df["outcome"] = df["outcome"].round(0)  # many ties
    a, b = _run(df, seed=1), _run(df, seed=2)
    assert not np.array_equal(a.trimmed.tie_break, b.trimmed.tie_break)
    assert a.trimmed.top_trimmed.isna().sum() == b.trimmed.top_trimmed.isna().sum()


def test_missing_seed_is_rejected(experiment):
    with pytest.raises(ReproducibilityViolation):
        _run(experiment, seed=None)


def test_bounds_ordered_across_designs(make_experiment):
    designs = [
        (0.9, 0.8, 0.85),
        (0.7, 0.9, 0.8),
        (0.95, 0.9, 0.6, 0.85),
    ]
    for i, response in enumerate(designs):
        df = make_experiment(response=response, effect=-1.5, seed=i)
        res = _run(df, seed=i)
        assert res.reference_arm == int(np.argmin(response))
        for b in res.bounds.values():
            assert b.lower.estimate <= b.upper.estimate
        for c in res.comparisons.values():
            assert c.lower.estimate <= c.upper.estimate


def test_four_arms_give_all_pairs(make_experiment):
    df = make_experiment(response=(0.9, 0.8, 0.85, 0.95))
    res = _run(df)
    assert sorted(res.comparisons) == [(1, 2), (1, 3), (2, 3)]
    assert res.comparison_intervals["pair"].tolist() == [(1, 2), (1, 3), (2, 3)]


def test_pairwise_contrasts_antisymmetric(make_experiment):
    res = _run(make_experiment(response=(0.9, 0.8, 0.85, 0.95)))
    for fit in (res.top_fit, res.bottom_fit):
        for (i, k) in res.comparisons:
            assert fit.contrast(k, i).estimate == pytest.approx(-fit.contrast(i, k).estimate)


def test_covariates_and_diagnostics(make_experiment):
    df = make_experiment(covariate=True)
    res = _run(df, covariates=["x"])
    assert "x_x" in res.top_fit.params.index
    assert res.attrition_test is not None
    assert 0.0 <= res.attrition_test["p_value"] <= 1.0
    assert list(res.intervals["arm"]) == [1, 2]
    assert (res.intervals["ci_low"] <= res.intervals["lower"]).all()
    assert (res.intervals["im_high"] <= res.intervals["ci_high"]).all()


def test_attrition_test_can_be_skipped(experiment):
    assert _run(experiment, test_attrition=False).attrition_test is None


def test_input_frame_untouched(experiment):
    before = experiment.copy()
    _run(experiment)
    pd.testing.assert_frame_equal(experiment, before)


def test_functional_shortcut(experiment):
    res = lee_bounds(experiment, "outcome", "treatment", "cluster_id", seed=2024)
    ref = _run(experiment, seed=2024)
    assert res.bounds == ref.bounds


def test_invalid_codes_abort_run(experiment):
    df = experiment.assign(treatment=experiment["treatment"].replace({1: 3}))
    with pytest.raises(InvalidInputError):
        _run(df)


def test_estimator_requires_run(experiment):
    study = LeeBoundsStudy(BoundsConfig(df=experiment, seed=1))
    with pytest.raises(RuntimeError):
        study.estimator


def test_verbose_logging(experiment, capsys):
    _run(experiment, verbose=True)
    out = capsys.readouterr().out
    assert "[ATTRITION]" in out
    assert "[TRIM]" in out
    assert "[ESTIMATOR] Reference arm: 1" in out
