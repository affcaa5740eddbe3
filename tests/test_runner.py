"""
Tests for the hypothesis runner and model sequence runner.
"""
import numpy as np
import pytest

from hypotheses import (
    HYPOTHESES,
    apply_multiplicity_correction,
    format_hypothesis_result,
    run_all,
    run_hypothesis,
    run_model_sequence,
    summarize_results,
)
from hypotheses import h1_mean_price, h4_fuel_transmission
from hypotheses.config import get_hypothesis, get_model_spec, list_hypotheses


def test_config_accessors():
    assert list_hypotheses() == ["H1", "H2", "H3", "H4"]
    assert get_hypothesis("H3")["order"] == ("Automatic", "Manual")
    assert get_model_spec("M5")["transform"] == "log"
    with pytest.raises(ValueError):
        get_hypothesis("H9")
    with pytest.raises(ValueError):
        get_model_spec("M9")


def test_run_hypothesis_result_fields(listings_ds):
    result = run_hypothesis("H3", listings_ds, verbose=False, reps=200)

    assert not result["skipped"]
    assert result["direction"] == "right"
    assert result["observed"] > 0
    assert 0 <= result["p_value"] <= 1
    assert result["null_distribution"]["reps"] == 200
    assert result["null_distribution"]["mode"] == "permute"
    assert result["theoretical"]["method"] == "Welch two-sample t-test"
    assert "✓" in format_hypothesis_result(result) or "✗" in format_hypothesis_result(result)


def test_run_hypothesis_is_reproducible(listings):
    first = run_hypothesis("H1", listings, verbose=False, reps=100, seed=3)
    second = run_hypothesis("H1", listings, verbose=False, reps=100, seed=3)
    assert first["p_value"] == second["p_value"]


def test_proportion_hypothesis_uses_draw(listings_ds):
    result = run_hypothesis("H2", listings_ds, verbose=False, reps=200)
    values = result["null_distribution"]["values"]
    assert result["null_distribution"]["mode"] == "draw"
    assert abs(values.mean() - 0.5) < 0.02


def test_invalid_data_is_skipped(listings):
    data = listings.drop(columns=["fuel_type"])
    result = run_hypothesis("H4", data, verbose=False, reps=10)
    assert result["skipped"]
    assert "fuel_type" in result["skip_reason"]
    assert np.isnan(result["p_value"])
    assert "SKIPPED" in format_hypothesis_result(result)


def test_run_all_summary_and_correction(listings_ds):
    results = run_all(listings_ds, verbose=False, reps=100)
    assert list(results) == list(HYPOTHESES)

    summary = summarize_results(results)
    assert list(summary["Hypothesis"]) == list(HYPOTHESES)
    assert (summary["Status"] == "Done").all()

    corrected = apply_multiplicity_correction(results, verbose=False)
    # H4 is exploratory and excluded from the correction
    assert list(corrected["hypothesis"]) == ["H1", "H2", "H3"]
    assert (corrected["p_adjusted"] >= corrected["p_raw"]).all()


def test_correction_with_only_skipped(listings):
    results = run_all(listings.drop(columns=["price", "transmission"]), hypotheses=["H1", "H3"],
                      verbose=False, reps=10)
    assert apply_multiplicity_correction(results, verbose=False).empty


def test_hypothesis_modules(listings_ds):
    assert h1_mean_price.CONFIG["statistic"] == "mean"
    assert "Exploratory" in h4_fuel_transmission.describe()
    result = h1_mean_price.run(listings_ds, verbose=False, reps=50)
    assert result["hypothesis_id"] == "H1"


def test_run_model_sequence(listings_ds):
    out = run_model_sequence(listings_ds, verbose=False)
    assert set(out["results"]) == {"M1", "M2", "M3", "M4", "M5"}
    assert len(out["anova"]) == 4
    assert set(out["diagnostics"]) == {"M1", "M2", "M3", "M4", "M5"}
    for name, table in out["robust"].items():
        assert not out["diagnostics"][name]["homoscedasticity"]["is_ok"]
        assert (table["cov_type"] == "HC3").all()
