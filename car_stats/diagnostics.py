"""
Regression Diagnostics
======================

Assumption checks for fitted OLS models:
- Homoscedasticity: Breusch-Pagan test on the model's regressors
- Residual normality: Shapiro-Wilk (n <= 5000) or Jarque-Bera
- Multicollinearity: variance inflation factors per regressor

Diagnostics are returned as nested dicts so callers can branch on
``diag["homoscedasticity"]["is_ok"]`` and ``diag["residuals_normality"]["is_normal"]``.
"""
from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.outliers_influence import variance_inflation_factor
from statsmodels.stats.stattools import jarque_bera

from .ols import OLSResult


SHAPIRO_MAX_N = 5000
VIF_THRESHOLD = 10.0


def breusch_pagan(result: OLSResult) -> Dict[str, Any]:
    """Breusch-Pagan LM test of constant error variance."""
    model = result["model"]
    lm_stat, lm_pvalue, f_stat, f_pvalue = het_breuschpagan(model.resid, model.model.exog)
    return {
        "test": "breusch_pagan",
        "statistic": float(lm_stat),
        "p_value": float(lm_pvalue),
        "f_statistic": float(f_stat),
        "f_p_value": float(f_pvalue),
    }


def residual_normality(result: OLSResult) -> Dict[str, Any]:
    """Normality test of residuals (Shapiro-Wilk for small n, else Jarque-Bera)."""
    resid = np.asarray(result["model"].resid)
    if len(resid) <= SHAPIRO_MAX_N:
        stat, p = stats.shapiro(resid)
        test = "shapiro_wilk"
    else:
        stat, p, _, _ = jarque_bera(resid)
        test = "jarque_bera"
    return {
        "test": test,
        "statistic": float(stat),
        "p_value": float(p),
        "skewness": float(stats.skew(resid)),
        "excess_kurtosis": float(stats.kurtosis(resid)),
    }


def variance_inflation(result: OLSResult) -> pd.DataFrame:
    """
    Variance inflation factor of every non-intercept regressor.

    :returns: DataFrame with term and vif, sorted descending
    """
    model = result["model"]
    exog = np.asarray(model.model.exog)
    names = list(model.model.exog_names)

    rows = []
    for i, name in enumerate(names):
        if name == "Intercept":
            continue
        with np.errstate(divide="ignore"):
            vif = variance_inflation_factor(exog, i)
        rows.append({"term": name, "vif": float(vif)})

    return pd.DataFrame(rows, columns=["term", "vif"]).sort_values("vif", ascending=False).reset_index(drop=True)


def residual_diagnostics(result: OLSResult, alpha: float = 0.05) -> Dict[str, Any]:
    """
    Run all assumption checks for one model.

    :param result: OLSResult from fit_ols()
    :param alpha: Significance level for the pass/fail flags
    :returns: Dict with homoscedasticity, residuals_normality, multicollinearity
    :raises ValueError: If the result holds no fitted model
    """
    if result.get("model") is None:
        raise ValueError("OLSResult has no fitted model")

    homo = breusch_pagan(result)
    homo["is_ok"] = homo["p_value"] >= alpha

    normality = residual_normality(result)
    normality["is_normal"] = normality["p_value"] >= alpha

    diagnostics: Dict[str, Any] = {
        "model": result.get("name", ""),
        "n_obs": result["n_obs"],
        "homoscedasticity": homo,
        "residuals_normality": normality,
    }

    if len(result["model"].model.exog_names) > 2:
        vif = variance_inflation(result)
        diagnostics["multicollinearity"] = {
            "vif": vif,
            "max_vif": float(vif["vif"].max()) if not vif.empty else np.nan,
            "is_ok": bool((vif["vif"] < VIF_THRESHOLD).all()),
        }

    return diagnostics


def summarize_diagnostics(diagnostics: Dict[str, Any]) -> str:
    """Human-readable summary of residual_diagnostics() output."""
    homo = diagnostics["homoscedasticity"]
    norm = diagnostics["residuals_normality"]
    lines = [
        f"Diagnostics: {diagnostics.get('model') or 'model'} (n={diagnostics['n_obs']})",
        f"  {'✓' if homo['is_ok'] else '✗'} Homoscedasticity (Breusch-Pagan): "
        f"LM={homo['statistic']:.2f}, p={homo['p_value']:.4f}",
        f"  {'✓' if norm['is_normal'] else '✗'} Residual normality ({norm['test']}): "
        f"stat={norm['statistic']:.3f}, p={norm['p_value']:.4f}, skew={norm['skewness']:.2f}",
    ]
    multi = diagnostics.get("multicollinearity")
    if multi is not None:
        lines.append(
            f"  {'✓' if multi['is_ok'] else '✗'} Multicollinearity: max VIF={multi['max_vif']:.2f}"
        )
    if not homo["is_ok"]:
        lines.append("  -> Heteroskedasticity detected (use robust standard errors)")
    return "\n".join(lines)
