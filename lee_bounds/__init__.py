"""
The :mod:`lee_bounds` package estimates Lee (2009) bounds on treatment
effects when outcome attrition differs across two or more treatment
arms.  Arm ``0`` is the control group.  The arm with the lowest share of
observed outcomes is the *reference arm*; every other arm is trimmed so
that its effective response rate matches the reference arm's, once from
the top and once from the bottom of its observed outcome distribution.
Two cluster-robust regressions on the trimmed outcomes give, for every
arm, a lower and an upper bound on its effect relative to control, and
for every pair of treated arms bounds on the difference of their effects.

The package exposes three core classes:

``BoundsData``
    Validates the unit-level input (dense integer arm codes, cluster ids,
    numeric outcome and covariates) without modifying the caller's frame.
    See :class:`lee_bounds.helpers.preparation.BoundsData`.

``LeeBoundsEstimator``
    Thin façade over the pipeline stages: attrition profile, trim plan,
    seeded trimming, the two regressions and the bound ordering.
    See :class:`lee_bounds.estimator.LeeBoundsEstimator`.

``LeeBoundsStudy``
    Orchestrator.  Instantiate with a :class:`BoundsConfig` and call
    :meth:`LeeBoundsStudy.run` to obtain a :class:`LeeBoundsResult`.

Reproducibility
---------------
Observations with equal outcomes are ranked with a random tie-break key
drawn from ``numpy.random.default_rng(seed)``.  The seed is required:
running without one raises :class:`ReproducibilityViolation`.  The same
seed and data always give identical trimmed samples and bounds.

Standard errors are those of the trimmed regressions and do not account
for estimation of the trimming share.

References
----------
* Lee, D. S. (2009). Training, wages, and sample selection: Estimating
  sharp bounds on treatment effects.  Review of Economic Studies 76(3).
* Imbens, G. W. and Manski, C. F. (2004). Confidence intervals for
  partially identified parameters.  Econometrica 72(6).
"""
from .errors import (
    InvalidInputError,
    LeeBoundsError,
    RegressionFailureError,
    ReproducibilityViolation,
)
from .helpers.config import BoundsConfig
from .helpers.preparation import BoundsData
from .estimator import LeeBoundsEstimator
from .study import LeeBoundsResult, LeeBoundsStudy, lee_bounds

__version__ = "0.1.0"

__all__ = [
    "BoundsConfig",
    "BoundsData",
    "LeeBoundsEstimator",
    "LeeBoundsResult",
    "LeeBoundsStudy",
    "lee_bounds",
    "LeeBoundsError",
    "InvalidInputError",
    "RegressionFailureError",
    "ReproducibilityViolation",
]
