"""
Smoke tests for the plotting functions (Agg backend, see conftest).
"""
import matplotlib.pyplot as plt
import pytest

from car_stats import (
    build_null_distribution,
    create_hypothesis,
    create_null_distribution,
    create_statistic,
    fit_ols,
    observed_statistic,
)
from car_stats.plotting import (
    create_eda_summary_figure,
    plot_category_counts,
    plot_coefficients,
    plot_continuous_relationship,
    plot_density_by_group,
    plot_distribution,
    plot_group_comparison,
    plot_null_distribution,
    plot_ols_diagnostics,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_eda_plots_return_figures(listings, listings_ds, tmp_path):
    figures = [
        plot_distribution(listings, "price", log_scale=True),
        plot_density_by_group(listings, x="price", group="transmission"),
        plot_continuous_relationship(listings, x="age", hue="transmission", log_y=True),
        plot_continuous_relationship(listings, x="kilometer"),
        plot_group_comparison(listings, x="fuel_type", order=["Petrol", "Diesel"]),
        plot_category_counts(listings, "fuel_type", hue="transmission"),
        create_eda_summary_figure(listings_ds, save_path=str(tmp_path / "overview.png")),
    ]
    assert all(isinstance(f, plt.Figure) for f in figures)
    assert (tmp_path / "overview.png").exists()


def test_missing_column_raises(listings):
    with pytest.raises(ValueError, match="Missing columns"):
        plot_group_comparison(listings, x="body_type")


def test_model_plots(listings_ds):
    result = fit_ols(listings_ds, predictors=["age", "kilometer"], transform="log", name="M2")
    assert isinstance(plot_ols_diagnostics(result), plt.Figure)
    assert isinstance(plot_coefficients(result["coefficients"]), plt.Figure)


@pytest.mark.parametrize("direction", ["right", "left", "two-sided", None])
def test_null_distribution_plot(listings, direction):
    hyp = create_hypothesis("price", "point", value=1_500_000)
    stat = create_statistic("mean", "price")
    dist = build_null_distribution(listings, hyp, stat, reps=50, seed=1)
    fig = plot_null_distribution(dist, observed_statistic(listings, hyp, stat), direction=direction, p_value=0.04)
    assert isinstance(fig, plt.Figure)


def test_null_distribution_plot_rejects_empty():
    dist = create_null_distribution([], create_statistic("mean", "price"))
    with pytest.raises(ValueError):
        plot_null_distribution(dist, 1.0)
