"""Reporting utilities for the ``lee_bounds`` package.

This subpackage collects functions for summarising and plotting the
results of a bounds run.  The :mod:`lee_bounds.reporting.summary`
module prints ruled text blocks and converts results to data frames;
:mod:`lee_bounds.reporting.plotting` produces matplotlib figures of
response rates and of the per-arm bounds.

Users may import these functions directly from this subpackage.  For
example::

    from lee_bounds.reporting import print_bounds_summary, plot_arm_bounds

"""
from .plotting import FIG, FigFinalizer, PlotTheme, plot_arm_bounds, plot_response_rates
from .summary import bounds_to_frame, comparisons_to_frame, print_bounds_summary

__all__ = [
    "FIG",
    "FigFinalizer",
    "PlotTheme",
    "plot_arm_bounds",
    "plot_response_rates",
    "bounds_to_frame",
    "comparisons_to_frame",
    "print_bounds_summary",
]
