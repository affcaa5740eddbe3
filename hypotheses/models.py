"""
Model Sequence Runner
=====================

Fits the regression sequence M1-M5 defined in config.MODELS and collects
everything the report needs about it:

1. Fit statistics side by side (R^2, AIC, BIC)
2. Nested F-tests over NESTED_SEQUENCE (same outcome, same rows)
3. Residual diagnostics per model
4. HC3 robust coefficient tables for models that fail homoscedasticity
"""

from typing import Any, Dict, List, Optional
import warnings

import pandas as pd

from .config import MODELS, NESTED_SEQUENCE

from car_stats import (
    AnalysisDataset,
    anova_comparison,
    compare_models,
    fit_model_sequence,
    residual_diagnostics,
    robust_coefficients,
    summarize_diagnostics,
    summarize_ols_result,
)


ROBUST_COV_TYPE = "HC3"


def run_model_sequence(
    ds: AnalysisDataset,
    models: Optional[List[str]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Fit the configured models and run comparisons and diagnostics.

    Args:
        ds: AnalysisDataset with cleaned listings
        models: Model IDs to fit (default: all of MODELS)
        verbose: Print progress messages

    Returns:
        Dict with keys results, comparison, anova, diagnostics, robust
    """
    model_ids = models or list(MODELS.keys())
    specs = {m: MODELS[m] for m in model_ids}

    if verbose:
        print("=" * 70)
        print(f"REGRESSION MODELS ({', '.join(model_ids)})")
        print("=" * 70)

    results = fit_model_sequence(ds, specs)
    fitted = [results[m] for m in model_ids if results[m]["converged"]]

    if verbose:
        for m in model_ids:
            print(f"\n[{m}] {specs[m]['name']}")
            print(summarize_ols_result(results[m]))
            for w in results[m]["warnings"]:
                print(f"  ⚠ {w}")

    comparison = compare_models(fitted) if fitted else pd.DataFrame()

    nested = [results[m] for m in NESTED_SEQUENCE if m in results and results[m]["converged"]]
    anova = pd.DataFrame()
    if len(nested) >= 2:
        try:
            anova = anova_comparison(nested)
        except ValueError as e:
            warnings.warn(f"ANOVA comparison skipped: {e}")

    diagnostics = {}
    robust = {}
    for result in fitted:
        diag = residual_diagnostics(result)
        diagnostics[result["name"]] = diag
        if not diag["homoscedasticity"]["is_ok"]:
            robust[result["name"]] = robust_coefficients(result, ROBUST_COV_TYPE)

    if verbose:
        if not comparison.empty:
            print("\nModel comparison:")
            print(comparison.drop(columns=["formula"]).to_string(index=False))
        if not anova.empty:
            print("\nNested F-tests:")
            print(anova.to_string(index=False))
        for name, diag in diagnostics.items():
            print()
            print(summarize_diagnostics(diag))
        if robust:
            print(f"\nRobust ({ROBUST_COV_TYPE}) standard errors computed for: {', '.join(robust)}")

    return {
        "results": results,
        "comparison": comparison,
        "anova": anova,
        "diagnostics": diagnostics,
        "robust": robust,
    }
