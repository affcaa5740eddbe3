"""
Tests for the closed-form counterparts of the resampling tests.
"""
import pytest
from scipy import stats

from car_stats import create_hypothesis, create_statistic, theoretical_test


def test_one_sample_t(listings):
    hyp = create_hypothesis("price", "point", value=1_500_000)
    res = theoretical_test(listings, hyp, create_statistic("mean", "price"))
    expected = stats.ttest_1samp(listings["price"], 1_500_000)
    assert res["method"] == "one-sample t-test"
    assert res["p_value"] == pytest.approx(expected.pvalue)


def test_binomial(listings):
    hyp = create_hypothesis("transmission", "point", value=0.5)
    stat = create_statistic("proportion", "transmission", success="Manual")
    res = theoretical_test(listings, hyp, stat, direction="greater")
    assert res["direction"] == "right"
    assert res["statistic"] == pytest.approx((listings["transmission"] == "Manual").mean())
    assert 0 <= res["p_value"] <= 1


def test_welch_right_tail(listings):
    hyp = create_hypothesis("price", "independence", explanatory="transmission")
    stat = create_statistic("diff-in-means", "price", "transmission", order=("Automatic", "Manual"))
    res = theoretical_test(listings, hyp, stat, direction="right")
    # synthetic automatics are priced higher
    assert res["statistic"] > 0
    assert res["p_value"] < 0.05


def test_chi_square_is_always_right_tailed(listings):
    hyp = create_hypothesis("fuel_type", "independence", explanatory="transmission")
    stat = create_statistic("chi-square", "fuel_type", "transmission")
    res = theoretical_test(listings, hyp, stat, direction="two-sided")
    assert res["direction"] == "right"
    assert res["statistic"] >= 0
