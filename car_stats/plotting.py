"""
Visualization Module
====================

High-level plotting functions for the listings report:

- plot_distribution: histogram (+ density) of one numeric column
- plot_density_by_group: overlaid densities per category
- plot_continuous_relationship: scatter with regression line(s)
- plot_group_comparison: box/strip plot of a numeric column by category
- plot_category_counts: bar chart of category frequencies
- plot_ols_diagnostics: QQ plot + residuals vs fitted
- plot_null_distribution: simulated null with observed statistic and shaded p-value
- create_eda_summary_figure: four-panel overview of the cleaned data

Architecture Note:
    Functions accept plain DataFrames or the dict results produced by the
    other car_stats modules and always return the matplotlib Figure.

Example:
    >>> from car_stats import prepare_listings
    >>> from car_stats.plotting import plot_group_comparison
    >>> ds = prepare_listings("data/car_details.csv")
    >>> plot_group_comparison(ds["data"], x="transmission", y="price", log_scale=True)
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Tuple
import warnings

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from scipy import stats
from statsmodels.nonparametric.smoothers_lowess import lowess

if TYPE_CHECKING:
    from .null_dist import NullDistribution
    from .ols import OLSResult
    from .prepare import AnalysisDataset


# =============================================================================
# Style Configuration
# =============================================================================

# Color palette for Automatic vs Manual (or any two-group comparison)
GROUP_COLORS = {
    "Automatic": "#E64B35",  # Coral red
    "Manual": "#4DBBD5",  # Teal blue
    0: "#E64B35",
    1: "#4DBBD5",
}

NULL_COLOR = "#8491B4"
SHADE_COLOR = "#F39B7F"

DEFAULT_STYLE = {
    "figure.figsize": (10, 6),
    "axes.spines.top": False,
    "axes.spines.right": False,
    "font.size": 11,
    "axes.labelsize": 12,
    "axes.titlesize": 14,
}


def _apply_style() -> None:
    """Apply consistent plotting style."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        plt.rcParams.update(DEFAULT_STYLE)
        sns.set_palette("colorblind")


def _palette(values) -> dict:
    return {g: GROUP_COLORS.get(g, f"C{i}") for i, g in enumerate(values)}


def _save(fig: plt.Figure, save_path: Optional[str]) -> None:
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")


def _require_columns(df: pd.DataFrame, *columns: Optional[str]) -> None:
    missing = [c for c in columns if c is not None and c not in df.columns]
    if missing:
        raise ValueError(f"Missing columns: {missing}")


def _format_label(column: str) -> str:
    """
    Format a column name for display.

    Converts: "fuel_tank_capacity" -> "Fuel Tank Capacity", "price" -> "Price (INR)"
    """
    units = {"price": "Price (INR)", "kilometer": "Kilometers Driven", "engine": "Engine (cc)",
             "fuel_tank_capacity": "Fuel Tank Capacity (L)", "age": "Age (years)"}
    if column in units:
        return units[column]
    return column.replace("_", " ").title()


# =============================================================================
# Exploratory Plots
# =============================================================================

def plot_distribution(
    df: pd.DataFrame,
    column: str = "price",
    bins: int = 40,
    kde: bool = True,
    log_scale: bool = False,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Histogram of a numeric column with optional density overlay.

    :param df: DataFrame with the column
    :param column: Numeric column to plot
    :param bins: Number of histogram bins
    :param kde: Overlay a kernel density estimate
    :param log_scale: Use a log10 x-axis (useful for price)
    :param title: Plot title (auto-generated if None)
    :param figsize: Figure size tuple
    :param save_path: Path to save figure (None = display only)
    :returns: matplotlib Figure object
    """
    _apply_style()
    _require_columns(df, column)

    fig, ax = plt.subplots(figsize=figsize)
    sns.histplot(
        data=df,
        x=column,
        bins=bins,
        kde=kde,
        log_scale=log_scale,
        color="#4DBBD5",
        alpha=0.6,
        ax=ax,
    )

    median = df[column].median()
    ax.axvline(median, color="black", linestyle="--", linewidth=1, label=f"Median = {median:,.0f}")
    ax.legend(loc="best")

    ax.set_xlabel(_format_label(column) + (" (log scale)" if log_scale else ""))
    ax.set_ylabel("Listings")
    ax.set_title(title or f"Distribution of {_format_label(column)}")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_density_by_group(
    df: pd.DataFrame,
    x: str = "price",
    group: str = "transmission",
    log_scale: bool = True,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Overlaid kernel densities of ``x`` for each level of ``group``."""
    _apply_style()
    _require_columns(df, x, group)

    fig, ax = plt.subplots(figsize=figsize)
    groups = df[group].dropna().unique()
    sns.kdeplot(
        data=df,
        x=x,
        hue=group,
        palette=_palette(groups),
        common_norm=False,
        fill=True,
        alpha=0.3,
        log_scale=log_scale,
        ax=ax,
    )

    ax.set_xlabel(_format_label(x) + (" (log scale)" if log_scale else ""))
    ax.set_ylabel("Density")
    ax.set_title(title or f"{_format_label(x)} by {_format_label(group)}")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_continuous_relationship(
    df: pd.DataFrame,
    x: str,
    y: str = "price",
    hue: Optional[str] = None,
    title: Optional[str] = None,
    xlabel: Optional[str] = None,
    ylabel: Optional[str] = None,
    add_regression: bool = True,
    log_y: bool = False,
    figsize: Tuple[int, int] = (8, 6),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Plot relationship between a continuous predictor and price.

    Shows scatter points and optional regression lines (overall or per group).
    """
    _apply_style()
    _require_columns(df, x, y)

    plot_df = df.copy()
    y_col = y
    if log_y:
        y_col = f"log_{y}"
        plot_df[y_col] = np.log(plot_df[y].where(plot_df[y] > 0))

    fig, ax = plt.subplots(figsize=figsize)

    if hue and hue in plot_df.columns:
        groups = plot_df[hue].dropna().unique()
        palette = _palette(groups)
        sns.scatterplot(data=plot_df, x=x, y=y_col, hue=hue, palette=palette, alpha=0.5, s=30, ax=ax)
        if add_regression:
            for grp in groups:
                grp_df = plot_df[plot_df[hue] == grp]
                if len(grp_df) > 2:
                    sns.regplot(data=grp_df, x=x, y=y_col, scatter=False,
                                color=palette.get(grp, "black"), ax=ax)
        ax.legend(title=hue, loc="best")
    else:
        sns.scatterplot(data=plot_df, x=x, y=y_col, alpha=0.5, s=30, ax=ax)
        if add_regression:
            sns.regplot(data=plot_df, x=x, y=y_col, scatter=False, color="black", ax=ax)

    ax.set_xlabel(xlabel or _format_label(x))
    ax.set_ylabel(ylabel or (f"log {_format_label(y)}" if log_y else _format_label(y)))
    ax.set_title(title or f"{_format_label(y)} vs {_format_label(x)}")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_group_comparison(
    df: pd.DataFrame,
    x: str = "transmission",
    y: str = "price",
    show_raw: bool = True,
    log_scale: bool = False,
    order: Optional[list] = None,
    figsize: Tuple[int, int] = (8, 6),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Box plot of a numeric column per category, with raw points and group means.

    :param df: DataFrame with both columns
    :param x: Categorical grouping column
    :param y: Numeric column
    :param show_raw: Overlay jittered raw points
    :param log_scale: Log-scale the y-axis
    :param order: Category order on the x-axis
    :returns: matplotlib Figure object
    """
    _apply_style()
    _require_columns(df, x, y)

    fig, ax = plt.subplots(figsize=figsize)
    levels = sorted(df[x].dropna().unique())
    groups = order or levels
    palette = _palette(levels)

    sns.boxplot(
        data=df, x=x, y=y, hue=x, order=groups, palette=palette,
        showfliers=not show_raw, legend=False, ax=ax,
        boxprops={"alpha": 0.4},
    )
    if show_raw:
        sns.stripplot(
            data=df, x=x, y=y, hue=x, order=groups, palette=palette,
            alpha=0.3, size=3, jitter=True, legend=False, ax=ax,
        )

    means = df.groupby(x)[y].mean()
    for i, grp in enumerate(groups):
        if grp in means.index:
            ax.scatter([i], [means[grp]], s=120, c="white", marker="D",
                       edgecolor="black", linewidth=1.5, zorder=10)

    if log_scale:
        ax.set_yscale("log")

    ax.set_xlabel(_format_label(x))
    ax.set_ylabel(_format_label(y))
    ax.set_title(f"{_format_label(y)} by {_format_label(x)} (◆ = mean)")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_category_counts(
    df: pd.DataFrame,
    column: str,
    hue: Optional[str] = None,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Bar chart of listing counts per level (optionally split by ``hue``)."""
    _apply_style()
    _require_columns(df, column, hue)

    fig, ax = plt.subplots(figsize=figsize)
    order = df[column].value_counts().index.tolist()
    if hue:
        sns.countplot(data=df, x=column, hue=hue, order=order,
                      palette=_palette(df[hue].dropna().unique()), ax=ax)
        ax.legend(title=_format_label(hue), loc="best")
    else:
        sns.countplot(data=df, x=column, order=order, color="#4DBBD5", ax=ax)

    for container in ax.containers:
        ax.bar_label(container, fontsize=9)

    ax.set_xlabel(_format_label(column))
    ax.set_ylabel("Listings")
    ax.set_title(title or f"Listings by {_format_label(column)}")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def create_eda_summary_figure(
    ds: "AnalysisDataset",
    group: str = "transmission",
    figsize: Tuple[int, int] = (14, 10),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Create a 4-panel overview of the cleaned listings.

    Panels:
    1. Top-left: price histogram (log scale)
    2. Top-right: price vs age scatter by group
    3. Bottom-left: price box plot by group
    4. Bottom-right: fuel type counts

    :param ds: AnalysisDataset dictionary
    :param group: Grouping column for colors
    :returns: matplotlib Figure object
    """
    _apply_style()

    df = ds["data"]
    response = ds["response"]
    _require_columns(df, response, group, "age", "fuel_type")
    groups = sorted(df[group].dropna().unique())
    palette = _palette(groups)

    fig = plt.figure(figsize=figsize)

    ax1 = fig.add_subplot(2, 2, 1)
    sns.histplot(data=df, x=response, bins=40, log_scale=True, color="#4DBBD5", ax=ax1)
    ax1.set_title("Price Distribution (log scale)")
    ax1.set_xlabel(_format_label(response))

    ax2 = fig.add_subplot(2, 2, 2)
    sns.scatterplot(data=df, x="age", y=response, hue=group, palette=palette,
                    alpha=0.4, s=20, ax=ax2)
    ax2.set_yscale("log")
    ax2.set_title("Price vs Age")
    ax2.set_xlabel(_format_label("age"))
    ax2.set_ylabel(_format_label(response))

    ax3 = fig.add_subplot(2, 2, 3)
    sns.boxplot(data=df, x=group, y=response, hue=group, order=groups,
                palette=palette, legend=False, ax=ax3)
    ax3.set_yscale("log")
    ax3.set_title(f"Price by {_format_label(group)}")
    ax3.set_xlabel(_format_label(group))
    ax3.set_ylabel(_format_label(response))

    ax4 = fig.add_subplot(2, 2, 4)
    sns.countplot(data=df, x="fuel_type", order=df["fuel_type"].value_counts().index,
                  color="#E64B35", ax=ax4)
    ax4.set_title("Listings by Fuel Type")
    ax4.set_xlabel(_format_label("fuel_type"))
    ax4.set_ylabel("Listings")

    fig.suptitle(f"Listings Overview (n={len(df):,})", fontsize=16, fontweight="bold", y=1.02)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# =============================================================================
# Model Diagnostics
# =============================================================================

def plot_ols_diagnostics(
    result: "OLSResult",
    title_prefix: Optional[str] = None,
    figsize: Tuple[int, int] = (12, 5),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Generate diagnostic plots for OLS residuals.

    Creates a two-panel figure:
    1. QQ plot for residual normality
    2. Residuals vs fitted for homoscedasticity (with LOWESS trend)

    :param result: OLSResult from fit_ols()
    :param title_prefix: Prefix for panel titles (default: model name)
    :returns: matplotlib Figure object
    """
    _apply_style()

    model = result.get("model")
    if model is None:
        raise ValueError("OLSResult has no fitted model")

    residuals = np.asarray(model.resid)
    fitted = np.asarray(model.fittedvalues)
    prefix = title_prefix or result.get("name") or "OLS"

    fig, axes = plt.subplots(1, 2, figsize=figsize)

    ax1 = axes[0]
    stats.probplot(residuals, dist="norm", plot=ax1)
    ax1.set_title(f"{prefix}: Q-Q Plot")
    ax1.get_lines()[0].set_markerfacecolor("#4DBBD5")
    ax1.get_lines()[0].set_alpha(0.6)

    ax2 = axes[1]
    ax2.scatter(fitted, residuals, alpha=0.5, s=20, c="#E64B35")
    ax2.axhline(0, color="black", linestyle="--", linewidth=1)
    smoothed = lowess(residuals, fitted, frac=0.3)
    ax2.plot(smoothed[:, 0], smoothed[:, 1], color="blue", linewidth=2, label="LOWESS")
    ax2.legend(loc="best")

    ax2.set_xlabel("Fitted Values")
    ax2.set_ylabel("Residuals")
    ax2.set_title(f"{prefix}: Residuals vs Fitted")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_coefficients(
    coefficients: pd.DataFrame,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (8, 6),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Forest plot of estimates with confidence intervals (intercept omitted)."""
    _apply_style()

    coef = coefficients[coefficients["term"] != "Intercept"].iloc[::-1]
    fig, ax = plt.subplots(figsize=figsize)
    y_pos = np.arange(len(coef))
    ax.errorbar(
        coef["estimate"], y_pos,
        xerr=[coef["estimate"] - coef["ci_lower"], coef["ci_upper"] - coef["estimate"]],
        fmt="o", color="#E64B35", ecolor="black", capsize=3,
    )
    ax.axvline(0, color="black", linestyle="--", linewidth=1)
    ax.set_yticks(y_pos)
    ax.set_yticklabels(coef["term"])
    ax.set_xlabel("Estimate (95% CI)")
    ax.set_title(title or "Coefficient Estimates")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# =============================================================================
# Resampling Plots
# =============================================================================

def plot_null_distribution(
    dist: "NullDistribution",
    observed: float,
    direction: Optional[str] = None,
    p_value: Optional[float] = None,
    bins: int = 30,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Histogram of a simulated null distribution with the observed statistic.

    For a point null the observed statistic is drawn at the
    distribution's own center shifted by (observed - hypothesized), which is
    how the decision engine compares them.

    :param dist: NullDistribution from build_null_distribution()
    :param observed: Observed statistic
    :param direction: "right", "left" or "two-sided" to shade the p-value region
    :param p_value: P-value to annotate
    :returns: matplotlib Figure object
    """
    from .null_dist import normalize_direction

    _apply_style()

    values = np.asarray(dist["values"], dtype=float)
    if values.size == 0:
        raise ValueError("Null distribution is empty")

    center = values.mean()
    marker = observed
    if dist.get("recentre"):
        marker = center + (observed - dist["hypothesis"]["value"])

    fig, ax = plt.subplots(figsize=figsize)
    counts, edges, patches = ax.hist(values, bins=bins, color=NULL_COLOR, alpha=0.7, edgecolor="white")

    if direction is not None:
        direction = normalize_direction(direction)
        if direction == "two-sided":
            if dist.get("recentre"):
                reach = abs(marker - center)
                low, high = center - reach, center + reach
            else:
                reflected = 2 * center - marker
                low, high = min(marker, reflected), max(marker, reflected)
        for patch, left_edge, right_edge in zip(patches, edges[:-1], edges[1:]):
            if direction == "right":
                shaded = right_edge > marker
            elif direction == "left":
                shaded = left_edge < marker
            else:
                shaded = left_edge < low or right_edge > high
            if shaded:
                patch.set_facecolor(SHADE_COLOR)

    ax.axvline(marker, color="#E64B35", linewidth=2.5, label=f"Observed = {observed:,.4g}")
    ax.legend(loc="best")

    if p_value is not None:
        ax.annotate(
            f"p = {p_value:.4f}",
            xy=(0.02, 0.98),
            xycoords="axes fraction",
            fontsize=10,
            verticalalignment="top",
            bbox=dict(boxstyle="round", facecolor="wheat", alpha=0.5),
        )

    kind = dist["statistic"]["kind"]
    ax.set_xlabel(f"{kind} statistic")
    ax.set_ylabel("Replicates")
    ax.set_title(title or f"Simulated Null Distribution ({dist['mode']}, {dist['reps']} reps)")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# =============================================================================
# Module exports
# =============================================================================

__all__ = [
    "plot_distribution",
    "plot_density_by_group",
    "plot_continuous_relationship",
    "plot_group_comparison",
    "plot_category_counts",
    "create_eda_summary_figure",
    "plot_ols_diagnostics",
    "plot_coefficients",
    "plot_null_distribution",
    "GROUP_COLORS",
]
