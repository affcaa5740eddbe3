"""
Tests for hypothesis/statistic specifications and their validation.
"""
import pandas as pd
import pytest

from car_stats import (
    InvalidInput,
    create_hypothesis,
    create_statistic,
    describe_statistic,
    validate_against_data,
)


def test_point_hypothesis():
    hyp = create_hypothesis("price", "point", value=1_500_000)
    assert hyp == {"response": "price", "explanatory": None, "null": "point", "value": 1_500_000.0}


@pytest.mark.parametrize("kwargs", [
    {"null": "point"},
    {"null": "point", "value": 1, "explanatory": "transmission"},
    {"null": "point", "value": "high"},
    {"null": "independence"},
    {"null": "independence", "explanatory": "price"},
    {"null": "independence", "explanatory": "transmission", "value": 1},
    {"null": "bayesian", "value": 1},
])
def test_invalid_hypotheses(kwargs):
    with pytest.raises(InvalidInput):
        create_hypothesis("price", **kwargs)


def test_invalid_input_is_value_error():
    assert issubclass(InvalidInput, ValueError)


def test_statistic_carries_only_its_fields():
    stat = create_statistic("diff-in-means", "price", "transmission", order=["Automatic", "Manual"])
    assert stat == {
        "kind": "diff-in-means",
        "response": "price",
        "explanatory": "transmission",
        "order": ("Automatic", "Manual"),
    }
    assert create_statistic("mean", "price") == {"kind": "mean", "response": "price"}
    assert "success" in create_statistic("proportion", "transmission", success="Manual")


@pytest.mark.parametrize("kwargs", [
    {"kind": "median", "response": "price"},
    {"kind": "mean", "response": "price", "explanatory": "transmission"},
    {"kind": "proportion", "response": "transmission"},
    {"kind": "diff-in-means", "response": "price", "explanatory": "transmission"},
    {"kind": "diff-in-means", "response": "price", "explanatory": "transmission", "order": ("Manual", "Manual")},
    {"kind": "diff-in-means", "response": "price", "explanatory": "transmission", "order": ("A", "B", "C")},
    {"kind": "chi-square", "response": "fuel_type"},
    {"kind": "chi-square", "response": "fuel_type", "explanatory": "transmission", "success": "Petrol"},
])
def test_invalid_statistics(kwargs):
    with pytest.raises(InvalidInput):
        create_statistic(**kwargs)


def test_describe_statistic():
    stat = create_statistic("diff-in-means", "price", "transmission", order=("Automatic", "Manual"))
    assert describe_statistic(stat) == "diff-in-means(price ~ transmission: Automatic - Manual)"


def test_validate_accepts_matching_pair(listings):
    hyp = create_hypothesis("price", "independence", explanatory="transmission")
    stat = create_statistic("diff-in-means", "price", "transmission", order=("Automatic", "Manual"))
    validate_against_data(listings, hyp, stat)


def test_validate_rejects_empty_data(listings):
    stat = create_statistic("mean", "price")
    with pytest.raises(InvalidInput, match="empty"):
        validate_against_data(listings.iloc[0:0], None, stat)


def test_validate_rejects_missing_column(listings):
    stat = create_statistic("mean", "mileage")
    with pytest.raises(InvalidInput, match="not found"):
        validate_against_data(listings, None, stat)


def test_validate_rejects_wrong_types(listings):
    with pytest.raises(InvalidInput, match="numeric"):
        validate_against_data(listings, None, create_statistic("mean", "transmission"))
    with pytest.raises(InvalidInput, match="categorical"):
        validate_against_data(
            listings, None, create_statistic("chi-square", "price", "transmission")
        )


def test_validate_rejects_mismatched_null(listings):
    hyp = create_hypothesis("price", "independence", explanatory="transmission")
    with pytest.raises(InvalidInput):
        validate_against_data(listings, hyp, create_statistic("mean", "price"))


def test_validate_rejects_mismatched_response(listings):
    hyp = create_hypothesis("kilometer", "point", value=10)
    with pytest.raises(InvalidInput, match="does not match"):
        validate_against_data(listings, hyp, create_statistic("mean", "price"))


def test_validate_rejects_absent_success(listings):
    hyp = create_hypothesis("transmission", "point", value=0.5)
    stat = create_statistic("proportion", "transmission", success="CVT")
    with pytest.raises(InvalidInput, match="never occurs"):
        validate_against_data(listings, hyp, stat)


def test_validate_rejects_proportion_outside_unit_interval(listings):
    hyp = create_hypothesis("transmission", "point", value=1.5)
    stat = create_statistic("proportion", "transmission", success="Manual")
    with pytest.raises(InvalidInput):
        validate_against_data(listings, hyp, stat)


def test_validate_rejects_absent_group():
    df = pd.DataFrame({"price": [1.0, 2.0], "transmission": ["Manual", "Manual"]})
    hyp = create_hypothesis("price", "independence", explanatory="transmission")
    stat = create_statistic("diff-in-means", "price", "transmission", order=("Automatic", "Manual"))
    with pytest.raises(InvalidInput, match="not found"):
        validate_against_data(df, hyp, stat)
