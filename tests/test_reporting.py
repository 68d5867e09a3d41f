import matplotlib.pyplot as plt
import pytest

from lee_bounds import BoundsConfig, LeeBoundsStudy
from lee_bounds.reporting import (
    bounds_to_frame,
    comparisons_to_frame,
    plot_arm_bounds,
    plot_response_rates,
    print_bounds_summary,
)


@pytest.fixture
def result(make_experiment):
    df = make_experiment(response=(0.9, 0.8, 0.85, 0.95))
    return LeeBoundsStudy(BoundsConfig(df=df, seed=3, verbose=False)).run()


def test_frames(result):
    arms = bounds_to_frame(result)
    assert arms["arm"].tolist() == [1, 2, 3]
    assert (arms["lower"] <= arms["upper"]).all()
    assert arms.loc[arms["arm"] == 1, "trim_count"].item() == 0
    pairs = comparisons_to_frame(result)
    assert list(zip(pairs["arm_i"], pairs["arm_k"])) == [(1, 2), (1, 3), (2, 3)]


def test_print_summary(result, capsys):
    print_bounds_summary(result)
    out = capsys.readouterr().out
    assert "ATTRITION" in out
    assert "arm 1 (reference)" in out
    assert "LEE BOUNDS" in out
    assert "Imbens-Manski" in out
    assert "2 vs 3" in out
    assert "Equal response rates: F = " in out
    assert ", p = " in out


def test_plots(result):
    fig, ax, out = plot_arm_bounds(result.intervals, show=False)
    assert out["n"] == 3
    assert ax.get_title() == "Lee bounds by arm"
    plt.close(fig)

    fig, ax, out = plot_response_rates(result.profile.to_frame(), show=False, title="Custom")
    assert out["reference_rate"] == pytest.approx(0.8)
    assert ax.get_title() == "Custom"
    plt.close(fig)


def test_response_rates_with_short_palette(result):
    fig, ax, out = plot_response_rates(result.profile.to_frame(), show=False, palette=["#111111", "#222222"])
    assert out["reference_rate"] == pytest.approx(0.8)
    plt.close(fig)
