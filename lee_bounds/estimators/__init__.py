"""Public API for the estimators subpackage.

This module reexports the pipeline stages and result containers for
convenience.  Users may import these names directly from
:mod:`lee_bounds.estimators`.
"""
from .attrition import (
    ArmProfile,
    AttritionProfile,
    differential_attrition_test,
    find_reference_arm,
    profile_attrition,
)
from .bounds import Bound, ComparisonBound, compare_arms, estimate_bounds, order_pair
from .regression import ArmEstimate, ArmRegression, ContrastEstimate, fit_arm_regression
from .trimming import ArmTrim, TrimPlan, TrimmedOutcomeSet, plan_trims, trim_outcomes

__all__ = [
    "ArmProfile",
    "AttritionProfile",
    "differential_attrition_test",
    "find_reference_arm",
    "profile_attrition",
    "ArmTrim",
    "TrimPlan",
    "TrimmedOutcomeSet",
    "plan_trims",
    "trim_outcomes",
    "ArmEstimate",
    "ContrastEstimate",
    "ArmRegression",
    "fit_arm_regression",
    "Bound",
    "ComparisonBound",
    "order_pair",
    "estimate_bounds",
    "compare_arms",
]
