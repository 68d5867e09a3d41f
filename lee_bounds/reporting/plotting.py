from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple, Union

import os
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


# ================================
# Theme + Figure Finalizer
# ================================

@dataclass
class PlotTheme:
    """Global plotting theme used by FigFinalizer.
    Keep all aesthetic knobs here so individual plotting functions
    deal ONLY with the data drawing (artists) and not with styling.
    """
    figsize: Tuple[float, float] = (10.0, 6.0)
    dpi: int = 120

    # Fonts / sizing
    title_size: int = 18
    label_size: int = 14
    tick_size: int = 12
    legend_size: int = 11

    # Lines / grid
    grid: bool = True
    grid_style: str = "--"
    grid_alpha: float = 0.3

    # Reference lines
    zero_line: bool = True           # add y=0 horizontal

    # Layout
    tight_layout: bool = True

    # Colors
    palette: Sequence[str] = field(default_factory=lambda: [
        "#2563eb",  # blue
        "#10b981",  # emerald
        "#f59e0b",  # amber
        "#ef4444",  # red
        "#8b5cf6",  # violet
    ])


class FigFinalizer:
    """A decorator-like wrapper that centralizes figure creation and styling.

    Usage:
        FIG = FigFinalizer()

        @FIG(title="Default title")
        def plot_something(data, ax, palette):
            ax.plot(data["x"], data["y"])
            return {}

        fig, ax, out = plot_something(df, title="Override", show=False)
    """
    def __init__(self, theme: Optional[PlotTheme] = None, default_save_dir: Optional[str] = None, show_default: bool = True):
        self.theme = theme or PlotTheme()
        self.default_save_dir = default_save_dir
        self.show_default = show_default

    def new_figure(
        self,
        nrows: int = 1,
        ncols: int = 1,
        figsize: Optional[Tuple[float, float]] = None,
        sharey: bool = False,
    ) -> Tuple[plt.Figure, Union[plt.Axes, np.ndarray]]:
        fig = plt.figure(figsize=figsize or self.theme.figsize, dpi=self.theme.dpi)
        axes = fig.subplots(nrows=nrows, ncols=ncols, sharey=sharey)
        return fig, axes

    def _apply_axes_style(self, ax: plt.Axes, *, title: Optional[str], xlabel: Optional[str], ylabel: Optional[str], legend: bool, zero_line: Optional[bool] = None):
        if title is not None:
            ax.set_title(title, fontsize=self.theme.title_size)
        if xlabel is not None:
            ax.set_xlabel(xlabel, fontsize=self.theme.label_size)
        if ylabel is not None:
            ax.set_ylabel(ylabel, fontsize=self.theme.label_size)

        if self.theme.grid:
            ax.grid(True, linestyle=self.theme.grid_style, alpha=self.theme.grid_alpha)

        if self.theme.zero_line if zero_line is None else zero_line:
            ax.axhline(0.0, color="0.25", linewidth=1, linestyle="--", alpha=0.6, zorder=0)

        for tick in ax.get_xticklabels() + ax.get_yticklabels():
            tick.set_fontsize(self.theme.tick_size)

        if legend:
            handles, labels = ax.get_legend_handles_labels()
            if labels:
                ax.legend(handles, labels, loc="best", fontsize=self.theme.legend_size, frameon=False)

    def finalize(
        self,
        fig: plt.Figure,
        axes: Union[plt.Axes, Iterable[plt.Axes]],
        *,
        save: Optional[str] = None,
        show: Optional[bool] = None,
    ) -> plt.Figure:
        if self.theme.tight_layout:
            fig.tight_layout()

        if save:
            path = save
            if self.default_save_dir and not os.path.isabs(save):
                os.makedirs(self.default_save_dir, exist_ok=True)
                path = os.path.join(self.default_save_dir, save)
            fig.savefig(path, dpi=self.theme.dpi, bbox_inches="tight")

        if show if show is not None else self.show_default:
            plt.show()

        return fig

    def __call__(self, **preset_style):
        """Return a decorator that wraps a plotting function.

        The wrapped function should accept an `ax` kwarg and draw artists.
        It should NOT set titles/labels/legend - those are handled here.
        """
        def decorator(plot_func: Callable[..., Dict[str, Any]]):
            def wrapper(
                *args,
                title: Optional[str] = None,
                xlabel: Optional[str] = None,
                ylabel: Optional[str] = None,
                legend: bool = True,
                save: Optional[str] = None,
                show: Optional[bool] = None,
                ax: Optional[plt.Axes] = None,
                figsize: Optional[Tuple[float, float]] = None,
                palette: Optional[Sequence[str]] = None,
                **kwargs,
            ) -> Tuple[plt.Figure, plt.Axes, Dict[str, Any]]:
                created = False
                if ax is None:
                    fig, ax = self.new_figure(figsize=figsize)
                    created = True
                else:
                    fig = ax.get_figure()

                style = dict(preset_style)
                overrides = dict(title=title, xlabel=xlabel, ylabel=ylabel)
                style.update({k: v for k, v in overrides.items() if v is not None})
                style["legend"] = legend

                out = plot_func(*args, ax=ax, palette=(palette or self.theme.palette), **kwargs) or {}

                self._apply_axes_style(ax, **style)

                if created:
                    self.finalize(fig, ax, save=save, show=show)

                return fig, ax, out
            wrapper.__name__ = getattr(plot_func, "__name__", "plot")
            wrapper.__doc__ = plot_func.__doc__
            return wrapper
        return decorator


# Global instance used by plotting helpers below
FIG = FigFinalizer()


# ================================
# Data drawing functions
# ================================

@FIG(title="Lee bounds by arm", xlabel="Treatment arm", ylabel="Effect relative to control")
def plot_arm_bounds(
    intervals: pd.DataFrame,
    ax: plt.Axes,
    palette: Sequence[str],
    label_col: str = "arm",
) -> Dict[str, Any]:
    """Identified set (thick bar) and Imbens-Manski interval (whiskers) per row.

    ``intervals`` is the table produced by
    :func:`lee_bounds.inference.interval_table`.
    """
    d = intervals.reset_index(drop=True)
    x = np.arange(len(d))
    labels = [str(v) for v in d[label_col]]
    for i, row in d.iterrows():
        lo, hi = float(row["lower"]), float(row["upper"])
        ax.plot([x[i], x[i]], [row["im_low"], row["im_high"]], color="0.3", linewidth=1.2,
                label="Imbens-Manski CI" if i == 0 else None, zorder=1)
        ax.plot([x[i], x[i]], [lo, hi], color=palette[i % len(palette)], linewidth=8,
                solid_capstyle="butt", label="Bounds" if i == 0 else None, zorder=2)
        ax.scatter([x[i], x[i]], [lo, hi], color="black", s=12, zorder=3)
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_xlim(-0.5, len(x) - 0.5)
    return {"n": len(d)}


@FIG(title="Response rate by arm", xlabel="Treatment arm", ylabel="Share with observed outcome", zero_line=False)
def plot_response_rates(
    profile_frame: pd.DataFrame,
    ax: plt.Axes,
    palette: Sequence[str],
) -> Dict[str, Any]:
    """Bar chart of response rates with the reference arm highlighted."""
    d = profile_frame.sort_values("arm")
    highlight = palette[3 % len(palette)]
    colors = [highlight if ref else palette[0] for ref in d["reference"]]
    ax.bar(d["arm"].astype(str), d["response_rate"].astype(float), color=colors, alpha=0.85)
    ref_rate = float(d.loc[d["reference"], "response_rate"].iloc[0])
    ax.axhline(ref_rate, color=highlight, linestyle="--", linewidth=1.2, label="Reference rate")
    ax.set_ylim(0, 1.05)
    return {"reference_rate": ref_rate}


__all__ = ["PlotTheme", "FigFinalizer", "FIG", "plot_arm_bounds", "plot_response_rates"]
