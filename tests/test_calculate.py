"""
Tests for the statistic calculators.
"""
import numpy as np
import pandas as pd
import pytest

from car_stats import (
    InvalidInput,
    calculate_statistic,
    chi_square_from_table,
    contingency_table,
    create_hypothesis,
    create_statistic,
    observed_statistic,
)


@pytest.fixture
def two_groups():
    return pd.DataFrame({
        "price": [2000.0, 2200.0, 1000.0, 1100.0],
        "transmission": ["Automatic", "Automatic", "Manual", "Manual"],
    })


def test_diff_in_means_exact(two_groups):
    hyp = create_hypothesis("price", "independence", explanatory="transmission")
    stat = create_statistic("diff-in-means", "price", "transmission", order=("Automatic", "Manual"))
    assert observed_statistic(two_groups, hyp, stat) == 1050.0


def test_diff_in_means_respects_order(two_groups):
    stat = create_statistic("diff-in-means", "price", "transmission", order=("Manual", "Automatic"))
    assert calculate_statistic(two_groups, stat) == -1050.0


def test_diff_in_means_empty_group(two_groups):
    stat = create_statistic("diff-in-means", "price", "transmission", order=("Automatic", "Manual"))
    only_manual = two_groups[two_groups["transmission"] == "Manual"]
    with pytest.raises(InvalidInput, match="empty"):
        calculate_statistic(only_manual, stat)


def test_chi_square_matches_closed_form():
    # (O - E)^2 / E with E = 7.5 in every cell: 4 * 2.5^2 / 7.5
    assert chi_square_from_table(np.array([[10, 5], [5, 10]])) == pytest.approx(10 / 3)


def test_chi_square_from_frame():
    df = pd.DataFrame({
        "fuel_type": ["Petrol"] * 15 + ["Diesel"] * 15,
        "transmission": ["Manual"] * 10 + ["Automatic"] * 5 + ["Manual"] * 5 + ["Automatic"] * 10,
    })
    table = contingency_table(df, "fuel_type", "transmission")
    assert table.shape == (2, 2)
    stat = create_statistic("chi-square", "fuel_type", "transmission")
    assert calculate_statistic(df, stat) == pytest.approx(10 / 3)


def test_chi_square_requires_two_categories():
    with pytest.raises(InvalidInput):
        chi_square_from_table(np.array([[3, 4]]))


def test_chi_square_rejects_empty_margin():
    with pytest.raises(InvalidInput):
        chi_square_from_table(np.array([[3, 0], [4, 0]]))


def test_mean_and_proportion(listings):
    assert calculate_statistic(listings, create_statistic("mean", "price")) == pytest.approx(
        listings["price"].mean()
    )
    share = calculate_statistic(listings, create_statistic("proportion", "transmission", success="Manual"))
    assert share == pytest.approx((listings["transmission"] == "Manual").mean())


def test_proportion_absent_success_is_zero():
    df = pd.DataFrame({"transmission": ["Automatic", "Automatic"]})
    stat = create_statistic("proportion", "transmission", success="Manual")
    assert calculate_statistic(df, stat) == 0.0


def test_empty_dataset_rejected():
    stat = create_statistic("mean", "price")
    with pytest.raises(InvalidInput):
        calculate_statistic(pd.DataFrame({"price": pd.Series([], dtype=float)}), stat)


def test_observed_statistic_is_deterministic(listings):
    hyp = create_hypothesis("fuel_type", "independence", explanatory="transmission")
    stat = create_statistic("chi-square", "fuel_type", "transmission")
    assert observed_statistic(listings, hyp, stat) == observed_statistic(listings, hyp, stat)
