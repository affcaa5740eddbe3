#!/usr/bin/env python3
"""
Run Hypothesis Tests
====================

Simple entry point for running the listings hypothesis tests (H1-H4).

Usage:
    python run_hypotheses.py                    # Run all
    python run_hypotheses.py H1 H3             # Run specific hypotheses
    python run_hypotheses.py --describe H1     # Print hypothesis description

Environment:
    CARS_DATA_PATH: Path to the listings CSV (optional)
"""
import os
import sys
import argparse
import importlib

from car_stats import describe_dataset, prepare_listings
from hypotheses import (
    run_all,
    summarize_results,
    apply_multiplicity_correction,
    HYPOTHESES,
)
from hypotheses.config import COLLAPSE_THRESHOLDS


HYPOTHESIS_MODULES = {
    "H1": "hypotheses.h1_mean_price",
    "H2": "hypotheses.h2_manual_share",
    "H3": "hypotheses.h3_price_transmission",
    "H4": "hypotheses.h4_fuel_transmission",
}


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Run listings hypothesis tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run_hypotheses.py                  # Run all hypotheses
    python run_hypotheses.py H1 H3            # Run selected hypotheses
    python run_hypotheses.py --reps 5000      # More replicates
    python run_hypotheses.py --describe H2    # Show a description
        """,
    )
    parser.add_argument(
        "hypotheses",
        nargs="*",
        choices=list(HYPOTHESES.keys()),
        help="Specific hypotheses to run (default: all)",
    )
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Print hypothesis descriptions instead of running",
    )
    parser.add_argument(
        "--data-path",
        default=os.getenv("CARS_DATA_PATH", "data/car_details.csv"),
        help="Path to the listings CSV",
    )
    parser.add_argument("--reps", type=int, default=None, help="Override replicate count")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--n-jobs", type=int, default=1, help="Parallel workers for resampling")
    parser.add_argument(
        "--no-correction",
        action="store_true",
        help="Skip multiplicity correction",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Minimal output",
    )

    args = parser.parse_args(argv)
    hypotheses_to_run = args.hypotheses or list(HYPOTHESES.keys())

    # Describe mode
    if args.describe:
        for h_id in hypotheses_to_run:
            module = importlib.import_module(HYPOTHESIS_MODULES[h_id])
            print("=" * 70)
            print(f"{h_id}: {HYPOTHESES[h_id]['name']}")
            print("=" * 70)
            print(module.describe())
            print()
        return 0

    print("=" * 70)
    print("LISTINGS HYPOTHESIS TESTING")
    print("=" * 70)
    print(f"Data path: {args.data_path}")

    try:
        ds = prepare_listings(args.data_path, collapse=COLLAPSE_THRESHOLDS)
    except (FileNotFoundError, ValueError) as e:
        print(f"Could not load listings: {e}", file=sys.stderr)
        return 1
    print(describe_dataset(ds))

    results = run_all(
        ds,
        hypotheses=hypotheses_to_run,
        verbose=not args.quiet,
        seed=args.seed,
        reps=args.reps,
        n_jobs=args.n_jobs,
    )

    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)
    summary = summarize_results(results)
    print(summary.to_string(index=False))

    if not args.no_correction:
        apply_multiplicity_correction(results, verbose=True)

    print("\n" + "=" * 70)
    print("COMPLETE")
    print("=" * 70)

    return 0


if __name__ == "__main__":
    sys.exit(main())
