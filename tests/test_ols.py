"""
Tests for OLS fitting, robust SEs and model comparison.
"""
import numpy as np
import pandas as pd
import pytest

from car_stats import (
    anova_comparison,
    apply_transform,
    build_formula,
    compare_models,
    fit_model_sequence,
    fit_ols,
    robust_coefficients,
    summarize_ols_result,
)
from hypotheses.config import MODELS, NESTED_SEQUENCE


def test_build_formula():
    assert build_formula("price", ["age", "C(fuel_type)"]) == "price ~ age + C(fuel_type)"
    assert build_formula("price", []) == "price ~ 1"


def test_apply_transform():
    values = pd.Series([1.0, np.e, np.e ** 2])
    np.testing.assert_allclose(apply_transform(values, "log"), [0.0, 1.0, 2.0])
    assert apply_transform(values, None) is values
    with pytest.raises(ValueError):
        apply_transform(values, "boxcox")


def test_log_transform_falls_back_for_non_positive():
    with pytest.warns(UserWarning):
        out = apply_transform(pd.Series([0.0, 1.0]), "log")
    assert out.iloc[0] == 0.0


def test_fit_ols_recovers_direction(listings_ds):
    result = fit_ols(listings_ds, predictors=["age", "kilometer"], transform="log", name="M2")

    assert result["converged"]
    assert result["formula"] == "price_log ~ age + kilometer"
    assert result["n_obs"] == 300
    coef = result["coefficients"].set_index("term")
    assert list(coef.columns) == ["estimate", "std_error", "t_value", "p_value", "ci_lower", "ci_upper"]
    assert coef.loc["age", "estimate"] < 0
    assert 0 < result["fit_stats"]["r2"] <= 1
    assert "M2" in summarize_ols_result(result)


def test_fit_ols_unknown_outcome(listings_ds):
    with pytest.raises(ValueError):
        fit_ols(listings_ds, outcome="mileage", predictors=["age"])


def test_fit_ols_too_few_rows(listings):
    from car_stats import create_analysis_dataset

    ds = create_analysis_dataset(listings.head(2))
    result = fit_ols(ds, predictors=["age", "kilometer"])
    assert not result["converged"]
    assert result["model"] is None
    assert result["warnings"]


def test_robust_coefficients_keep_estimates(listings_ds):
    result = fit_ols(listings_ds, predictors=["age", "engine"])
    robust = robust_coefficients(result, "HC3")

    np.testing.assert_allclose(
        robust["estimate"].to_numpy(), result["coefficients"]["estimate"].to_numpy()
    )
    np.testing.assert_allclose(
        robust["classic_std_error"].to_numpy(), result["coefficients"]["std_error"].to_numpy()
    )
    assert (robust["cov_type"] == "HC3").all()
    assert not np.allclose(robust["std_error"], robust["classic_std_error"])

    with pytest.raises(ValueError):
        robust_coefficients(result, "HC9")


def test_model_sequence_comparison_and_anova(listings_ds):
    results = fit_model_sequence(listings_ds, MODELS)
    assert set(results) == set(MODELS)
    assert all(r["converged"] for r in results.values())

    comparison = compare_models(list(results.values()))
    assert list(comparison["model"]) == list(MODELS)
    # deltas are computed within each outcome scale
    assert comparison.groupby("transform")["delta_aic"].min().eq(0).all()

    anova = anova_comparison([results[m] for m in NESTED_SEQUENCE])
    assert list(anova["model"]) == NESTED_SEQUENCE
    assert "Pr(>F)" in anova.columns
    assert np.isnan(anova["Pr(>F)"].iloc[0])


def test_anova_rejects_mixed_outcomes(listings_ds):
    results = fit_model_sequence(listings_ds, {m: MODELS[m] for m in ("M4", "M5")})
    with pytest.raises(ValueError, match="common outcome"):
        anova_comparison([results["M4"], results["M5"]])
