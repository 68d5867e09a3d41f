"""
Inference helpers for Lee bounds.

* :mod:`lee_bounds.inference.intervals` - naive and Imbens-Manski
  confidence intervals built from the lower/upper bound estimates and
  their standard errors.

The standard errors are taken from the trimmed regressions as they are
and ignore the sampling error in the estimated trimming share, so the
intervals should be read as suggestive.
"""

from .intervals import bound_intervals, imbens_manski_critical_value, interval_table

__all__ = ["bound_intervals", "imbens_manski_critical_value", "interval_table"]
