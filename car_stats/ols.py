"""
Linear Regression Module
========================

Fits ordinary least squares models of listing price using statsmodels
formulas. Designed for a sequence of increasingly complex specifications
on the same cleaned dataset.

Architecture Note:
    This module uses dictionaries instead of classes for data structures
    to stay consistent with the rest of car_stats.

Key features:
- OLSResult dict for structured model output
- Optional outcome transforms (log price)
- Heteroskedasticity-robust coefficient tables (HC0-HC3)
- Model comparison (AIC, BIC, adjusted R^2) and nested ANOVA F-tests
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional
import warnings

import numpy as np
import pandas as pd
from statsmodels.formula.api import ols
from statsmodels.regression.linear_model import RegressionResultsWrapper
from statsmodels.stats.anova import anova_lm

from .prepare import AnalysisDataset


TRANSFORMS = ("none", "log", "log1p", "sqrt")
ROBUST_COV_TYPES = ("HC0", "HC1", "HC2", "HC3")


# =============================================================================
# OLSResult (dict)
# =============================================================================

OLSResult = Dict[str, Any]


def create_ols_result(
    outcome: str,
    model: Optional[RegressionResultsWrapper] = None,
    formula: str = "",
    name: str = "",
    coefficients: Optional[pd.DataFrame] = None,
    fit_stats: Optional[Dict[str, float]] = None,
    n_obs: int = 0,
    converged: bool = False,
    transform_applied: Optional[str] = None,
    cov_type: str = "nonrobust",
    model_warnings: Optional[List[str]] = None,
) -> OLSResult:
    """
    Create an OLSResult dictionary with all model output.

    :param outcome: Name of the (untransformed) outcome variable
    :param model: Fitted statsmodels results object
    :param formula: Model formula used
    :param name: Short model label (e.g. "M3")
    :param coefficients: DataFrame with estimates, SEs, CIs, p-values
    :param fit_stats: Dict with R^2, AIC, BIC, log-likelihood, etc.
    :param n_obs: Number of observations used
    :param converged: Whether the fit produced a model
    :param transform_applied: Transform applied to outcome (if any)
    :param cov_type: Covariance estimator of the coefficient table
    :param model_warnings: List of warnings generated during fitting
    :returns: OLSResult dictionary
    """
    return {
        "outcome": outcome,
        "model": model,
        "formula": formula,
        "name": name,
        "coefficients": coefficients if coefficients is not None else pd.DataFrame(),
        "fit_stats": fit_stats if fit_stats is not None else {},
        "n_obs": n_obs,
        "converged": converged,
        "transform_applied": transform_applied,
        "cov_type": cov_type,
        "warnings": model_warnings if model_warnings is not None else [],
    }


def summarize_ols_result(result: OLSResult) -> str:
    """
    Generate a summary string for an OLS result.

    :param result: OLSResult dictionary
    :returns: Human-readable summary string
    """
    fit = result["fit_stats"]
    lines = [
        f"OLS Result: {result['name'] or result['outcome']}",
        f"  Formula: {result['formula']}",
        f"  N observations: {result['n_obs']}",
        f"  R^2: {fit.get('r2', np.nan):.3f} (adj. {fit.get('adj_r2', np.nan):.3f})",
        f"  AIC: {fit.get('aic', np.nan):.2f}",
        f"  BIC: {fit.get('bic', np.nan):.2f}",
        f"  Covariance: {result['cov_type']}",
    ]
    transform = result.get("transform_applied")
    if transform and transform != "none":
        lines.append(f"  Transform: {transform}")
    if result["warnings"]:
        lines.append(f"  Warnings: {len(result['warnings'])}")
    return "\n".join(lines)


# =============================================================================
# Transforms
# =============================================================================

def apply_transform(values: pd.Series, transform: Optional[str]) -> pd.Series:
    """
    Apply a variance-stabilizing transform to outcome values.

    :param values: Series of outcome values
    :param transform: "none", "log", "log1p" or "sqrt"
    :returns: Transformed values
    """
    if transform in (None, "none"):
        return values

    if transform == "log":
        if (values <= 0).any():
            warnings.warn("LOG transform requires positive values; using LOG1P instead")
            return np.log1p(values.clip(lower=0))
        return np.log(values)

    if transform == "log1p":
        if (values < 0).any():
            warnings.warn("LOG1P transform requires non-negative values; clipping to 0")
            values = values.clip(lower=0)
        return np.log1p(values)

    if transform == "sqrt":
        if (values < 0).any():
            warnings.warn("SQRT transform requires non-negative values; clipping to 0")
            values = values.clip(lower=0)
        return np.sqrt(values)

    raise ValueError(f"Unknown transform: {transform!r}. Available: {list(TRANSFORMS)}")


# =============================================================================
# Model Fitting
# =============================================================================

def _predictor_columns(predictors: List[str]) -> List[str]:
    """Raw column names behind formula terms (strip C() wrappers)."""
    cols = []
    for term in predictors:
        if term.startswith("C(") and term.endswith(")"):
            term = term[2:-1].split(",")[0].strip()
        cols.append(term)
    return cols


def build_formula(outcome_col: str, predictors: List[str]) -> str:
    """Build a patsy formula, e.g. "price ~ age + C(fuel_type)"."""
    if not predictors:
        return f"{outcome_col} ~ 1"
    return f"{outcome_col} ~ {' + '.join(predictors)}"


def fit_ols(
    ds: AnalysisDataset,
    outcome: Optional[str] = None,
    predictors: Optional[List[str]] = None,
    transform: Optional[str] = None,
    cov_type: str = "nonrobust",
    formula: Optional[str] = None,
    name: str = "",
) -> OLSResult:
    """
    Fit an OLS model for a continuous outcome.

    :param ds: AnalysisDataset dictionary
    :param outcome: Outcome column (default: ds["response"])
    :param predictors: Formula terms, e.g. ["age", "C(fuel_type)"]
    :param transform: Outcome transform ("log", "log1p", "sqrt")
    :param cov_type: "nonrobust" or a heteroskedasticity-robust type (HC0-HC3)
    :param formula: Override formula (statsmodels formula syntax)
    :param name: Short label stored on the result
    :returns: OLSResult dictionary with model output

    Example:
        >>> result = fit_ols(ds, predictors=["age", "kilometer"], transform="log")
        >>> print(result["coefficients"])
    """
    outcome = outcome or ds["response"]
    predictors = list(predictors or [])
    model_warnings: List[str] = []

    if outcome not in ds["data"].columns:
        raise ValueError(f"Outcome '{outcome}' not found in dataset")
    if cov_type != "nonrobust" and cov_type not in ROBUST_COV_TYPES:
        raise ValueError(f"Unknown cov_type: {cov_type!r}")

    df = ds["data"].copy()

    outcome_col = outcome
    if transform not in (None, "none"):
        outcome_col = f"{outcome}_{transform}"
        df[outcome_col] = apply_transform(df[outcome], transform)

    predictor_cols = [c for c in _predictor_columns(predictors) if c in df.columns]
    df = df.dropna(subset=[outcome_col] + predictor_cols)
    n_obs = len(df)

    model_formula = formula if formula is not None else build_formula(outcome_col, predictors)

    if n_obs <= len(predictors) + 1:
        return create_ols_result(
            outcome=outcome,
            formula=model_formula,
            name=name,
            n_obs=n_obs,
            transform_applied=transform,
            cov_type=cov_type,
            model_warnings=["Insufficient observations for model fitting"],
        )

    try:
        model = ols(model_formula, data=df).fit(cov_type=cov_type)
    except Exception as e:
        model_warnings.append(f"Model fitting failed: {str(e)}")
        return create_ols_result(
            outcome=outcome,
            formula=model_formula,
            name=name,
            n_obs=n_obs,
            transform_applied=transform,
            cov_type=cov_type,
            model_warnings=model_warnings,
        )

    if np.isfinite(model.condition_number) and model.condition_number > 1e10:
        model_warnings.append(
            f"Large condition number ({model.condition_number:.2e}); possible multicollinearity"
        )

    fit_stats = {
        "r2": model.rsquared,
        "adj_r2": model.rsquared_adj,
        "aic": model.aic,
        "bic": model.bic,
        "llf": model.llf,
        "f_pvalue": model.f_pvalue,
        "df_model": model.df_model,
        "df_resid": model.df_resid,
    }

    return create_ols_result(
        outcome=outcome,
        model=model,
        formula=model_formula,
        name=name,
        coefficients=_extract_coefficients(model),
        fit_stats=fit_stats,
        n_obs=int(model.nobs),
        converged=True,
        transform_applied=transform,
        cov_type=cov_type,
        model_warnings=model_warnings,
    )


def _extract_coefficients(model: RegressionResultsWrapper) -> pd.DataFrame:
    """Extract coefficient table from a fitted model."""
    summary_df = pd.DataFrame({
        "estimate": model.params,
        "std_error": model.bse,
        "t_value": model.tvalues,
        "p_value": model.pvalues,
    })

    conf_int = model.conf_int()
    summary_df["ci_lower"] = conf_int.iloc[:, 0]
    summary_df["ci_upper"] = conf_int.iloc[:, 1]

    summary_df = summary_df.reset_index()
    return summary_df.rename(columns={"index": "term"})


def robust_coefficients(result: OLSResult, cov_type: str = "HC3") -> pd.DataFrame:
    """
    Coefficient table with heteroskedasticity-robust standard errors.

    The point estimates are unchanged; only SEs, test statistics, p-values
    and confidence intervals use the sandwich covariance.

    :param result: OLSResult from fit_ols()
    :param cov_type: One of ROBUST_COV_TYPES
    :returns: Coefficient DataFrame with "classic_std_error" for comparison
    """
    if result["model"] is None:
        raise ValueError("OLSResult has no fitted model")
    if cov_type not in ROBUST_COV_TYPES:
        raise ValueError(f"Unknown robust cov_type: {cov_type!r}. Available: {list(ROBUST_COV_TYPES)}")

    robust = result["model"].model.fit(cov_type=cov_type)
    table = _extract_coefficients(robust)
    classic = result["model"].model.fit().bse
    table["classic_std_error"] = table["term"].map(classic)
    table["cov_type"] = cov_type
    return table


# =============================================================================
# Batch Fitting
# =============================================================================

def fit_model_sequence(
    ds: AnalysisDataset,
    specs: Dict[str, Dict[str, Any]],
    cov_type: str = "nonrobust",
) -> Dict[str, OLSResult]:
    """
    Fit a series of model specifications on the same dataset.

    :param ds: AnalysisDataset dictionary
    :param specs: Mapping model id -> {"predictors": [...], "transform": ...}
    :param cov_type: Covariance estimator for every model
    :returns: Dictionary mapping model id to OLSResult
    """
    results = {}
    for model_id, spec in specs.items():
        try:
            results[model_id] = fit_ols(
                ds,
                outcome=spec.get("outcome"),
                predictors=spec.get("predictors", []),
                transform=spec.get("transform"),
                cov_type=cov_type,
                name=model_id,
            )
        except ValueError as e:
            warnings.warn(f"Failed to fit model {model_id}: {str(e)}")
            results[model_id] = create_ols_result(
                outcome=spec.get("outcome") or ds["response"],
                name=model_id,
                model_warnings=[f"Exception: {str(e)}"],
            )
    return results


# =============================================================================
# Model Comparison
# =============================================================================

def compare_models(results: List[OLSResult]) -> pd.DataFrame:
    """
    Compare OLS results by fit statistics.

    AIC/BIC deltas are only meaningful between models of the same
    (transformed) outcome; they are computed within outcome/transform groups.

    :param results: List of OLSResult dictionaries
    :returns: DataFrame comparing R^2, AIC, BIC, log-likelihood
    """
    rows = []
    for r in results:
        rows.append({
            "model": r["name"],
            "formula": r["formula"],
            "transform": r.get("transform_applied") or "none",
            "n_obs": r["n_obs"],
            "n_params": len(r["coefficients"]),
            "r2": r["fit_stats"].get("r2", np.nan),
            "adj_r2": r["fit_stats"].get("adj_r2", np.nan),
            "aic": r["fit_stats"].get("aic", np.nan),
            "bic": r["fit_stats"].get("bic", np.nan),
            "llf": r["fit_stats"].get("llf", np.nan),
        })

    df = pd.DataFrame(rows)
    if len(df) > 1 and not df["aic"].isna().all():
        grouped = df.groupby("transform")
        df["delta_aic"] = df["aic"] - grouped["aic"].transform("min")
        df["delta_bic"] = df["bic"] - grouped["bic"].transform("min")

    return df


def anova_comparison(results: List[OLSResult]) -> pd.DataFrame:
    """
    Nested-model F-tests between consecutive models (statsmodels anova_lm).

    Models must be fitted on the same rows with the same outcome and listed
    from smallest to largest.

    :param results: Ordered list of OLSResult dictionaries
    :returns: ANOVA table with one row per model
    """
    fitted = [r for r in results if r["model"] is not None]
    if len(fitted) < 2:
        raise ValueError("ANOVA comparison needs at least two fitted models")

    outcomes = {(r["outcome"], r.get("transform_applied") or "none") for r in fitted}
    if len(outcomes) > 1:
        raise ValueError(f"ANOVA comparison requires a common outcome, got {sorted(outcomes)}")

    n_obs = {int(r["model"].nobs) for r in fitted}
    if len(n_obs) > 1:
        raise ValueError(f"ANOVA comparison requires equal sample sizes, got {sorted(n_obs)}")

    # Nested F-tests use the classical covariance regardless of how models were fitted
    models = [r["model"].model.fit() for r in fitted]
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        table = anova_lm(*models)
    table.insert(0, "model", [r["name"] for r in fitted])
    return table.reset_index(drop=True)
