"""
Hypothesis Runner
=================

Generic execution engine for the resampling hypothesis tests.

This module handles the common workflow:
1. Build hypothesis + statistic specs from the config
2. Compute the observed statistic on the cleaned listings
3. Simulate the null distribution
4. Compare observed vs null for the configured direction
5. Return a structured result (with the theory-based p-value alongside)
"""

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from statsmodels.stats.multitest import multipletests

from .config import HYPOTHESES, HypothesisConfig, get_hypothesis

from car_stats import (
    HypothesisSpec,
    InvalidInput,
    StatisticSpec,
    build_null_distribution,
    create_hypothesis,
    create_statistic,
    describe_statistic,
    get_p_value,
    observed_statistic,
    theoretical_test,
)


DEFAULT_SEED = 42
ALPHA = 0.05


# -----------------------------------------------------------------------------
# HypothesisResult (dictionary-based, no classes)
# -----------------------------------------------------------------------------

HypothesisResult = Dict[str, Any]


def create_hypothesis_result(
    hypothesis_id: str,
    config: HypothesisConfig,
    p_value: float,
    observed: float = np.nan,
    direction: str = "",
    null_distribution: Optional[Dict[str, Any]] = None,
    theoretical: Optional[Dict[str, Any]] = None,
    note: str = "",
    skipped: bool = False,
    skip_reason: str = "",
) -> HypothesisResult:
    """Create a HypothesisResult dictionary."""
    return {
        "hypothesis_id": hypothesis_id,
        "config": config,
        "p_value": p_value,
        "observed": observed,
        "direction": direction,
        "null_distribution": null_distribution,
        "theoretical": theoretical,
        "note": note,
        "skipped": skipped,
        "skip_reason": skip_reason,
    }


def hypothesis_result_to_dict(result: HypothesisResult) -> Dict[str, Any]:
    """Flatten a HypothesisResult for multiplicity correction."""
    return {
        "p_value": result["p_value"],
        "note": result["config"]["name"],
        "skipped": result.get("skipped", False),
    }


def format_hypothesis_result(result: HypothesisResult) -> str:
    """Format HypothesisResult for display."""
    h_id = result["hypothesis_id"]
    if result.get("skipped", False):
        return f"HypothesisResult({h_id}: SKIPPED - {result.get('skip_reason', '')})"
    p_val = result["p_value"]
    if np.isnan(p_val):
        return f"HypothesisResult({h_id}: p=NaN)"
    status = "✓" if p_val < ALPHA else "✗"
    return f"HypothesisResult({h_id}: p={p_val:.4f} {status})"


# -----------------------------------------------------------------------------
# Spec construction
# -----------------------------------------------------------------------------

def build_specs(config: HypothesisConfig) -> Tuple[HypothesisSpec, StatisticSpec]:
    """
    Translate a hypothesis config into validated specs.

    Raises:
        InvalidInput: If the config is inconsistent
    """
    hypothesis = create_hypothesis(
        response=config["response"],
        null=config["null"],
        explanatory=config.get("explanatory") if config["null"] == "independence" else None,
        value=config.get("value"),
    )
    statistic = create_statistic(
        kind=config["statistic"],
        response=config["response"],
        explanatory=config.get("explanatory") if config["statistic"] in ("diff-in-means", "chi-square") else None,
        success=config.get("success"),
        order=config.get("order"),
    )
    return hypothesis, statistic


def _as_frame(data: Any) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data
    return data["data"]


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def run_hypothesis(
    hypothesis_id: str,
    data: Any,
    verbose: bool = True,
    seed: Optional[int] = DEFAULT_SEED,
    reps: Optional[int] = None,
    n_jobs: int = 1,
) -> HypothesisResult:
    """
    Run a single hypothesis test.

    Args:
        hypothesis_id: One of "H1", ..., "H4"
        data: AnalysisDataset or cleaned listings DataFrame
        verbose: Print progress messages
        seed: Seed for the replicate generators
        reps: Override the configured replicate count
        n_jobs: joblib workers for the replicate loop

    Returns:
        HypothesisResult dict with observed statistic, p-value and null distribution
    """
    config = dict(get_hypothesis(hypothesis_id))  # Copy to allow modification
    config["_id"] = hypothesis_id
    if reps is not None:
        config["reps"] = reps

    df = _as_frame(data)

    if verbose:
        print(f"\n[{hypothesis_id}] {config['name']}")

    try:
        hypothesis, statistic = build_specs(config)
        observed = observed_statistic(df, hypothesis, statistic)
        null = build_null_distribution(
            df,
            hypothesis,
            statistic,
            reps=config.get("reps", 1000),
            mode=config.get("mode"),
            seed=seed,
            n_jobs=n_jobs,
        )
        p_result = get_p_value(null, observed, config.get("direction", "two-sided"))
        theoretical = theoretical_test(df, hypothesis, statistic, p_result["direction"])
    except InvalidInput as e:
        if verbose:
            print(f"  SKIPPED: {e}")
        return create_hypothesis_result(
            hypothesis_id=hypothesis_id,
            config=config,
            p_value=np.nan,
            skipped=True,
            skip_reason=str(e),
        )

    note = f"{theoretical['method']}: p={theoretical['p_value']:.4f}"
    result = create_hypothesis_result(
        hypothesis_id=hypothesis_id,
        config=config,
        p_value=p_result["p_value"],
        observed=observed,
        direction=p_result["direction"],
        null_distribution=null,
        theoretical=theoretical,
        note=note,
    )

    if verbose:
        p_val = result["p_value"]
        sig = "✓ SIGNIFICANT" if p_val < ALPHA else "✗ Not significant"
        print(f"  Statistic: {describe_statistic(statistic)} = {observed:,.4f}")
        print(f"  Null: {null['mode']} x {null['reps']} ({p_result['direction']})")
        print(f"  p = {p_val:.4f} ({sig})")
        print(f"  {note}")

    return result


def run_all(
    data: Any,
    hypotheses: Optional[List[str]] = None,
    verbose: bool = True,
    seed: Optional[int] = DEFAULT_SEED,
    reps: Optional[int] = None,
    n_jobs: int = 1,
) -> Dict[str, HypothesisResult]:
    """
    Run all (or selected) hypothesis tests.

    Args:
        data: AnalysisDataset or cleaned listings DataFrame
        hypotheses: List of hypothesis IDs to run (default: all)
        verbose: Print progress messages
        seed: Seed for the replicate generators (shared by all tests)
        reps: Override every configured replicate count
        n_jobs: joblib workers for the replicate loops

    Returns:
        Dictionary mapping hypothesis ID to HypothesisResult dict
    """
    hypotheses = hypotheses or list(HYPOTHESES.keys())

    if verbose:
        print("=" * 70)
        print(f"HYPOTHESIS TESTING ({', '.join(hypotheses)})")
        print("=" * 70)

    results = {}
    for h_id in hypotheses:
        results[h_id] = run_hypothesis(h_id, data, verbose=verbose, seed=seed, reps=reps, n_jobs=n_jobs)

    return results


def apply_multiplicity_correction(
    results: Dict[str, HypothesisResult],
    method: str = "holm",
    verbose: bool = True,
) -> pd.DataFrame:
    """
    Apply multiplicity correction across CONFIRMATORY hypotheses only.

    Exploratory hypotheses (exploratory=True in config) are excluded from
    the correction but reported separately.

    Args:
        results: Dictionary of HypothesisResult dicts
        method: statsmodels multipletests method ("holm", "fdr_bh", "bonferroni")
        verbose: Print results

    Returns:
        DataFrame with raw and corrected p-values
    """
    confirmatory = {}
    exploratory = {}

    for h_id, result in results.items():
        if result.get("skipped", False):
            continue
        if result["config"].get("exploratory", False):
            exploratory[h_id] = hypothesis_result_to_dict(result)
        else:
            confirmatory[h_id] = hypothesis_result_to_dict(result)

    if verbose and exploratory:
        print("\n" + "=" * 70)
        print("EXPLORATORY HYPOTHESES (no multiplicity correction)")
        print("=" * 70)
        for h_id, data in exploratory.items():
            p = data["p_value"]
            sig = "*" if not np.isnan(p) and p < ALPHA else ""
            print(f"  {h_id}: p = {p:.4f} {sig}")

    if not confirmatory:
        if verbose:
            print("No valid hypotheses to correct")
        return pd.DataFrame()

    ids = list(confirmatory.keys())
    raw = np.array([confirmatory[h]["p_value"] for h in ids], dtype=float)
    reject, adjusted, _, _ = multipletests(raw, alpha=ALPHA, method=method)

    corrected = pd.DataFrame({
        "hypothesis": ids,
        "name": [confirmatory[h]["note"] for h in ids],
        "p_raw": raw,
        "p_adjusted": adjusted,
        "reject": reject,
        "method": method,
    })

    if verbose:
        print("\n" + "=" * 70)
        print(f"MULTIPLICITY CORRECTION ({method.upper()})")
        print("=" * 70)
        print(corrected.to_string(index=False))

    return corrected


def summarize_results(
    results: Dict[str, HypothesisResult],
) -> pd.DataFrame:
    """
    Create a summary table of all hypothesis results.

    Returns:
        DataFrame with hypothesis summaries
    """
    rows = []
    for h_id, result in results.items():
        config = result["config"]
        skipped = result.get("skipped", False)
        p_value = result["p_value"]
        theoretical = result.get("theoretical") or {}

        rows.append({
            "Hypothesis": h_id,
            "Name": config["name"],
            "Statistic": config["statistic"],
            "Null": config["null"],
            "Direction": result.get("direction") or config.get("direction", ""),
            "Observed": result.get("observed", np.nan),
            "p-value": p_value if not skipped else None,
            "Theory p-value": theoretical.get("p_value"),
            "Significant": p_value < ALPHA if not np.isnan(p_value) else None,
            "Status": "Skipped" if skipped else "Done",
            "Note": result.get("skip_reason", "") if skipped else result.get("note", ""),
        })

    return pd.DataFrame(rows)
