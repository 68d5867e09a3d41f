from fractions import Fraction

import numpy as np
import pytest

from lee_bounds.errors import ReproducibilityViolation
from lee_bounds.helpers.utils import (
    arm_column,
    arm_pairs,
    make_rng,
    require_seed,
    resolve_covariates,
    round_half_away,
)


@pytest.mark.parametrize(
    "x, expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (3.5, 4), (2.4999, 2), (2.5001, 3), (-2.5, -3), (0.0, 0), (7.0, 7)],
)
def test_round_half_away(x, expected):
    assert round_half_away(x) == expected


def test_round_half_away_differs_from_bankers_rounding():
    assert round(2.5) == 2
    assert round_half_away(2.5) == 3


def test_round_half_away_is_exact_for_fractions():
    assert round_half_away(Fraction(1, 2)) == 1
    assert round_half_away(Fraction(-5, 2)) == -3
    assert round_half_away(Fraction(2, 3) * 3 - Fraction(3, 2)) == 1
    assert round_half_away(Fraction(49, 100)) == 0


def test_round_half_away_rejects_nan():
    with pytest.raises(ValueError):
        round_half_away(float("nan"))


def test_require_seed_missing():
    with pytest.raises(ReproducibilityViolation):
        require_seed(None)


@pytest.mark.parametrize("bad", [1.5, "42", True, -1])
def test_require_seed_rejects_non_integers(bad):
    with pytest.raises(ReproducibilityViolation):
        require_seed(bad)


def test_require_seed_accepts_numpy_int():
    assert require_seed(np.int64(7)) == 7


def test_make_rng_is_reproducible():
    a = make_rng(123).random(5)
    b = make_rng(123).random(5)
    c = make_rng(124).random(5)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_arm_pairs_and_names():
    assert arm_pairs(1) == []
    assert arm_pairs(3) == [(1, 2), (1, 3), (2, 3)]
    assert arm_column(2) == "arm_2"


def test_resolve_covariates():
    assert resolve_covariates(None) == []
    assert resolve_covariates("age") == ["age"]
    assert resolve_covariates(["age", " age ", "", None, "income"]) == ["age", "income"]
