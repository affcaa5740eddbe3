#!/usr/bin/env python3
"""
Generate key plots for the listings report.

Outputs figures into the specified folder (default: plots/):
- eda/: distribution, overview and relationship charts
- models/: residual diagnostics and coefficient plots for M1-M5
- hypotheses/: simulated null distributions for H1-H4
"""
from __future__ import annotations

import argparse
import os
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from car_stats import AnalysisDataset, prepare_listings
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
from hypotheses.config import COLLAPSE_THRESHOLDS, MODELS
from hypotheses.models import run_model_sequence
from hypotheses.runner import run_all


def generate_eda_plots(ds: AnalysisDataset, out_dir: str) -> List[str]:
    """Write exploratory figures and return their paths."""
    os.makedirs(out_dir, exist_ok=True)
    df = ds["data"]
    written = []

    def path(name: str) -> str:
        p = os.path.join(out_dir, name)
        written.append(p)
        return p

    create_eda_summary_figure(ds, group="transmission", save_path=path("overview.png"))
    plot_distribution(df, "price", log_scale=True, save_path=path("price_distribution.png"))
    plot_density_by_group(df, x="price", group="transmission", save_path=path("price_by_transmission_density.png"))
    plot_group_comparison(df, x="transmission", y="price", log_scale=True, save_path=path("price_by_transmission.png"))
    plot_group_comparison(df, x="fuel_type", y="price", log_scale=True, save_path=path("price_by_fuel_type.png"))
    plot_category_counts(df, "fuel_type", hue="transmission", save_path=path("fuel_type_counts.png"))
    for x in ("age", "kilometer", "engine"):
        plot_continuous_relationship(df, x=x, y="price", hue="transmission", log_y=True,
                                     save_path=path(f"price_vs_{x}.png"))
    plt.close("all")
    return written


def generate_model_plots(ds: AnalysisDataset, out_dir: str) -> List[str]:
    """Fit M1-M5 and write diagnostic and coefficient figures."""
    os.makedirs(out_dir, exist_ok=True)
    sequence = run_model_sequence(ds, verbose=False)
    written = []

    for model_id, result in sequence["results"].items():
        if not result["converged"]:
            print(f"[{model_id}] No model available for plotting")
            continue
        diag_path = os.path.join(out_dir, f"{model_id}_diagnostics.png")
        plot_ols_diagnostics(result, title_prefix=f"{model_id} ({MODELS[model_id]['name']})", save_path=diag_path)
        written.append(diag_path)

        coef = sequence["robust"].get(model_id, result["coefficients"])
        coef_path = os.path.join(out_dir, f"{model_id}_coefficients.png")
        plot_coefficients(coef, title=f"{model_id}: {result['formula']}", save_path=coef_path)
        written.append(coef_path)
        plt.close("all")

    return written


def generate_hypothesis_plots(
    ds: AnalysisDataset,
    out_dir: str,
    reps: Optional[int] = None,
    seed: int = 42,
    n_jobs: int = 1,
) -> List[str]:
    """Run H1-H4 and plot each null distribution against the observed statistic."""
    os.makedirs(out_dir, exist_ok=True)
    results = run_all(ds, verbose=False, seed=seed, reps=reps, n_jobs=n_jobs)
    written = []

    for h_id, result in results.items():
        if result["skipped"]:
            print(f"[{h_id}] Skipped plot generation: {result['skip_reason']}")
            continue
        p = os.path.join(out_dir, f"{h_id}_null_distribution.png")
        plot_null_distribution(
            result["null_distribution"],
            result["observed"],
            direction=result["direction"],
            p_value=result["p_value"],
            title=f"{h_id}: {result['config']['name']}",
            save_path=p,
        )
        written.append(p)
        plt.close("all")

    return written


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate listings report plots")
    parser.add_argument(
        "--data-path",
        default=os.getenv("CARS_DATA_PATH", "data/car_details.csv"),
        help="Path to the listings CSV",
    )
    parser.add_argument(
        "--out-dir",
        default="plots",
        help="Output directory for plots",
    )
    parser.add_argument("--reps", type=int, default=None, help="Override replicate count")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--n-jobs", type=int, default=1, help="Parallel workers for resampling")
    args = parser.parse_args(argv)

    out_dir = os.path.abspath(args.out_dir)
    ds = prepare_listings(args.data_path, collapse=COLLAPSE_THRESHOLDS)

    written = generate_eda_plots(ds, os.path.join(out_dir, "eda"))
    written += generate_model_plots(ds, os.path.join(out_dir, "models"))
    written += generate_hypothesis_plots(
        ds, os.path.join(out_dir, "hypotheses"), reps=args.reps, seed=args.seed, n_jobs=args.n_jobs
    )

    print(f"{len(written)} plots saved to: {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
