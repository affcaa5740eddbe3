"""
Tests for listings loading and cleaning.
"""
import numpy as np
import pandas as pd
import pytest

from car_stats import (
    ANALYSIS_COLUMNS,
    add_age,
    cast_categorical,
    category_counts,
    clean_listings,
    collapse_rare_categories,
    create_analysis_dataset,
    drop_incomplete,
    group_summary,
    load_listings,
    missingness_report,
    parse_engine,
    prepare_listings,
    standardize_columns,
    subset_dataset,
    summarize_numeric,
)


def test_standardize_columns_snake_cases_and_renames():
    df = pd.DataFrame(columns=["Fuel Type", "Seating Capacity", "Fuel Tank Capacity", "Price"])
    out = standardize_columns(df)
    assert list(out.columns) == ["fuel_type", "sitting_capacity", "fuel_tank_capacity", "price"]


def test_parse_engine_extracts_displacement():
    df = pd.DataFrame({"engine": ["1198 cc", "2179", None, "n/a"]})
    with pytest.warns(UserWarning):
        out = parse_engine(df)
    assert out["engine"].iloc[0] == 1198.0
    assert out["engine"].iloc[1] == 2179.0
    assert out["engine"].iloc[2:].isna().all()
    # input untouched
    assert df["engine"].iloc[0] == "1198 cc"


def test_add_age_uses_reference_year():
    out = add_age(pd.DataFrame({"year": [2020, 2013]}), reference_year=2023)
    assert out["age"].tolist() == [3, 10]


def test_add_age_requires_year_column():
    with pytest.raises(ValueError):
        add_age(pd.DataFrame({"price": [1]}))


def test_cast_categorical_formats_numeric_codes():
    out = cast_categorical(pd.DataFrame({"sitting_capacity": [5.0, 7.0, np.nan]}), ["sitting_capacity"])
    assert out["sitting_capacity"].iloc[0] == "5"
    assert out["sitting_capacity"].iloc[1] == "7"
    assert pd.isna(out["sitting_capacity"].iloc[2])


def test_collapse_rare_categories():
    df = pd.DataFrame({"fuel_type": ["Petrol"] * 12 + ["Diesel"] * 10 + ["LPG", "Electric"]})
    with pytest.warns(UserWarning):
        out = collapse_rare_categories(df, "fuel_type", min_count=10)
    assert set(out["fuel_type"]) == {"Petrol", "Diesel", "Other"}
    assert (out["fuel_type"] == "Other").sum() == 2


def test_drop_incomplete_warns_with_count():
    df = pd.DataFrame({"price": [1.0, np.nan, 3.0], "year": [2010, 2011, None]})
    with pytest.warns(UserWarning, match="Dropped 2 rows"):
        out = drop_incomplete(df, ["price", "year"])
    assert len(out) == 1


def test_clean_listings_from_raw_csv(raw_csv):
    raw = load_listings(raw_csv)
    with pytest.warns(UserWarning):
        out = clean_listings(raw)

    assert list(out.columns) == ANALYSIS_COLUMNS
    assert len(out) == 5
    assert out["engine"].iloc[0] == 1198.0
    assert out["age"].iloc[0] == 2023 - 2017
    assert set(out["sitting_capacity"]) == {"5", "7"}
    assert not out.isna().any().any()


def test_clean_listings_missing_column():
    with pytest.raises(ValueError, match="Required columns missing"):
        clean_listings(pd.DataFrame({"Price": [1], "Year": [2020]}))


def test_load_listings_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_listings(tmp_path / "nope.csv")


def test_prepare_listings_returns_dataset(raw_csv):
    with pytest.warns(UserWarning):
        ds = prepare_listings(raw_csv)
    assert ds["response"] == "price"
    assert ds["source"] == str(raw_csv)
    assert "transmission" in ds["categorical_vars"]
    assert len(ds["data"]) == 5


def test_create_dataset_requires_response(listings):
    with pytest.raises(ValueError):
        create_analysis_dataset(listings.drop(columns=["price"]))


def test_subset_dataset(listings_ds):
    sub = subset_dataset(listings_ds, {"transmission": ["Manual"]})
    assert set(sub["data"]["transmission"]) == {"Manual"}
    assert len(sub["data"]) < len(listings_ds["data"])


def test_descriptive_summaries(listings_ds):
    summary = summarize_numeric(listings_ds)
    assert list(summary["variable"]) == listings_ds["numeric_vars"]
    assert (summary["n"] == 300).all()

    counts = category_counts(listings_ds, "transmission")
    assert counts["count"].sum() == 300
    assert counts["share"].sum() == pytest.approx(1.0)

    groups = group_summary(listings_ds, "transmission")
    assert set(groups["transmission"]) == {"Automatic", "Manual"}


def test_missingness_report():
    df = pd.DataFrame({"a": [1, None, 3, None], "b": [1, 2, 3, 4]})
    per_column, pct = missingness_report(df)
    assert per_column.set_index("column").loc["a", "n_missing"] == 2
    assert pct == pytest.approx(25.0)
