"""
Listings Report Entry Point
===========================

This script is the **main, step-by-step entry point** for the full listings
analysis. It is intentionally verbose so you can follow every step of the
workflow and inspect intermediate tables.

Pipeline overview:
1) Load and clean the listings CSV
2) Dataset utilities + QA checks
3) Descriptive statistics
4) Resampling toolkit walkthrough (H1 by hand)
5) Hypothesis tests H1-H4 + theory-based counterparts
6) Multiplicity correction (Holm)
7) Regression model sequence M1-M5
8) Bootstrap confidence interval for the mean price

Run from the project root:
    python run_report.py [path/to/car_details.csv]
"""
import os
import sys
import warnings

from car_stats import (
    build_bootstrap_distribution,
    build_null_distribution,
    category_counts,
    create_hypothesis,
    create_statistic,
    describe_dataset,
    get_confidence_interval,
    get_n_listings,
    get_p_value,
    group_summary,
    load_listings,
    missingness_report,
    observed_statistic,
    prepare_listings,
    standardize_columns,
    summarize_null_distribution,
    summarize_numeric,
    theoretical_test,
    validate_dataset,
)
from hypotheses import (
    apply_multiplicity_correction,
    format_hypothesis_result,
    run_all,
    run_model_sequence,
    summarize_results,
)
from hypotheses.config import COLLAPSE_THRESHOLDS

# statsmodels emits RuntimeWarnings for near-singular designs
warnings.filterwarnings("ignore", category=RuntimeWarning)


def print_section(title: str) -> None:
    """Utility to print a consistent section header."""
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def main(data_path: str) -> None:
    """Run the full listings pipeline end-to-end."""
    # ---------------------------------------------------------------------
    # STEP 1: Load + clean
    # ---------------------------------------------------------------------
    print_section("[1] LOADING LISTINGS")
    print(f"Using data path: {data_path}")

    raw = load_listings(data_path)
    print(f"Raw shape: {raw.shape}")

    print("\n--- missingness_report(raw) ---")
    miss, pct = missingness_report(standardize_columns(raw))
    print(miss[miss["n_missing"] > 0].to_string(index=False))
    print(f"Total missing: {pct:.1f}% of cells")

    ds = prepare_listings(raw, collapse=COLLAPSE_THRESHOLDS)
    ds["source"] = data_path

    # ---------------------------------------------------------------------
    # STEP 2: Dataset utilities + QA checks
    # ---------------------------------------------------------------------
    print_section("[2] DATASET UTILITIES + QA CHECKS")

    print(describe_dataset(ds))
    try:
        validate_dataset(ds)
        print("  Valid: True")
    except ValueError as e:
        print(f"  Valid: False -> {e}")
    print(f"  Listings kept: {get_n_listings(ds)} of {len(raw)}")

    ages = ds["data"]["age"]
    print(f"  Age range: {ages.min():.0f} - {ages.max():.0f} years")

    # ---------------------------------------------------------------------
    # STEP 3: Descriptive statistics
    # ---------------------------------------------------------------------
    print_section("[3] DESCRIPTIVE STATISTICS")

    print("\n--- summarize_numeric(ds) ---")
    print(summarize_numeric(ds).to_string(index=False))

    for column in ds["categorical_vars"]:
        print(f"\n--- category_counts(ds, '{column}') ---")
        print(category_counts(ds, column).to_string(index=False))

    print("\n--- group_summary(ds, 'transmission') ---")
    print(group_summary(ds, "transmission").to_string(index=False))

    # ---------------------------------------------------------------------
    # STEP 4: Resampling walkthrough (H1 done by hand)
    # ---------------------------------------------------------------------
    print_section("[4] RESAMPLING WALKTHROUGH")

    df = ds["data"]
    hyp = create_hypothesis("price", "point", value=1_500_000)
    stat = create_statistic("mean", "price")
    obs = observed_statistic(df, hyp, stat)
    print(f"  Observed mean price: {obs:,.0f}")

    null = build_null_distribution(df, hyp, stat, reps=1000, seed=42)
    print(summarize_null_distribution(null))

    for direction in ("right", "left", "two-sided"):
        p = get_p_value(null, obs, direction)
        print(f"  p ({direction}): {p['p_value']:.4f}")

    theory = theoretical_test(df, hyp, stat, "two-sided")
    print(f"  {theory['method']}: t={theory['statistic']:.3f}, p={theory['p_value']:.4g}")

    # ---------------------------------------------------------------------
    # STEP 5: Hypothesis tests
    # ---------------------------------------------------------------------
    print_section("[5] HYPOTHESIS TESTS H1-H4")

    results = run_all(ds, verbose=True, seed=42)
    for result in results.values():
        print(f"  {format_hypothesis_result(result)}")

    print("\n--- summarize_results(results) ---")
    print(summarize_results(results).to_string(index=False))

    # ---------------------------------------------------------------------
    # STEP 6: Multiplicity correction
    # ---------------------------------------------------------------------
    print_section("[6] MULTIPLICITY CORRECTION")
    apply_multiplicity_correction(results, method="holm", verbose=True)

    # ---------------------------------------------------------------------
    # STEP 7: Regression models
    # ---------------------------------------------------------------------
    print_section("[7] REGRESSION MODEL SEQUENCE")

    sequence = run_model_sequence(ds, verbose=True)
    best = sequence["results"].get("M5")
    if best is not None and best["converged"]:
        print("\n--- M5 coefficients (log price) ---")
        coef = sequence["robust"].get("M5", best["coefficients"])
        print(coef.to_string(index=False))

    # ---------------------------------------------------------------------
    # STEP 8: Bootstrap confidence interval
    # ---------------------------------------------------------------------
    print_section("[8] BOOTSTRAP CONFIDENCE INTERVAL")

    boot = build_bootstrap_distribution(df, stat, reps=1000, seed=42)
    for method in ("percentile", "se"):
        ci = get_confidence_interval(boot, level=0.95, method=method, point_estimate=obs)
        print(f"  95% CI ({method}): {ci['lower']:,.0f} - {ci['upper']:,.0f}")

    print_section("COMPLETE")


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else os.getenv("CARS_DATA_PATH", "data/car_details.csv")
    main(path)
