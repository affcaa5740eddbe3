"""
Data Preparation Module
=======================

Turns the raw vehicle-listings CSV into an analysis-ready dataset:
- Header harmonization ("Fuel Type" -> fuel_type)
- Engine displacement parsing ("1198 cc" -> 1198.0)
- Vehicle age from model year
- Rare-category collapsing for sparse categorical columns
- Missing-value exclusion on the analysis columns

Architecture Note:
    Every cleaning step is a pure function that takes a DataFrame and returns
    a new one; nothing mutates a shared "current" table. The final result is
    wrapped in an AnalysisDataset dictionary:
    - data: cleaned pandas DataFrame
    - response: modelled outcome column ("price")
    - numeric_vars / categorical_vars: typed column lists
    - source: where the data came from
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, TypedDict, Union
import warnings

import numpy as np
import pandas as pd


# =============================================================================
# Column Definitions
# =============================================================================

# Listings in the source file were scraped in 2023
REFERENCE_YEAR = 2023

NUMERIC_VARS = ["price", "age", "kilometer", "engine", "fuel_tank_capacity"]
CATEGORICAL_VARS = ["fuel_type", "transmission", "drivetrain", "sitting_capacity"]
ANALYSIS_COLUMNS = ["price", "year", "age", "kilometer", "fuel_type", "transmission",
                    "engine", "drivetrain", "sitting_capacity", "fuel_tank_capacity"]

# Applied after snake_casing the raw headers
COLUMN_RENAMES = {
    "seating_capacity": "sitting_capacity",
    "kilometers": "kilometer",
    "km_driven": "kilometer",
}


# =============================================================================
# Analysis Dataset TypedDict
# =============================================================================

class AnalysisDataset(TypedDict):
    """
    Container for analysis-ready listings with metadata.

    Keys:
        data: Cleaned DataFrame, one row per listing
        response: Outcome column for modelling (default: "price")
        numeric_vars: Numeric analysis columns present in data
        categorical_vars: Categorical analysis columns present in data
        source: File path or "dataframe"
    """
    data: pd.DataFrame
    response: str
    numeric_vars: List[str]
    categorical_vars: List[str]
    source: str


def create_analysis_dataset(
    data: pd.DataFrame,
    response: str = "price",
    numeric_vars: Optional[List[str]] = None,
    categorical_vars: Optional[List[str]] = None,
    source: str = "dataframe",
) -> AnalysisDataset:
    """
    Create an AnalysisDataset dictionary with validation.

    :param data: Cleaned DataFrame
    :param response: Outcome column name
    :param numeric_vars: Numeric columns (default: NUMERIC_VARS)
    :param categorical_vars: Categorical columns (default: CATEGORICAL_VARS)
    :param source: Description of the data origin
    :returns: Validated AnalysisDataset dictionary
    """
    ds: AnalysisDataset = {
        "data": data,
        "response": response,
        "numeric_vars": list(numeric_vars if numeric_vars is not None else NUMERIC_VARS),
        "categorical_vars": list(categorical_vars if categorical_vars is not None else CATEGORICAL_VARS),
        "source": source,
    }
    return validate_dataset(ds)


def validate_dataset(ds: AnalysisDataset) -> AnalysisDataset:
    """
    Validate the dataset structure.

    :param ds: AnalysisDataset dictionary
    :returns: Validated AnalysisDataset (variable lists filtered to present columns)
    :raises ValueError: If the response column is missing
    """
    data = ds["data"]
    if ds["response"] not in data.columns:
        raise ValueError(f"Response '{ds['response']}' not found in data")

    for key in ("numeric_vars", "categorical_vars"):
        missing = [v for v in ds[key] if v not in data.columns]
        if missing:
            warnings.warn(f"{key} not found in data: {missing}")
            ds[key] = [v for v in ds[key] if v in data.columns]

    return ds


def get_n_listings(ds: AnalysisDataset) -> int:
    """Number of listings (rows) in the dataset."""
    return len(ds["data"])


def describe_dataset(ds: AnalysisDataset) -> str:
    """
    Return a summary description of the dataset.

    :param ds: AnalysisDataset dictionary
    :returns: Human-readable summary string
    """
    df = ds["data"]
    lines = [
        f"AnalysisDataset: {ds['source']}",
        f"  Listings: {get_n_listings(ds)}",
        f"  Response: {ds['response']}",
        f"  Numeric: {ds['numeric_vars']}",
        f"  Categorical: {ds['categorical_vars']}",
    ]
    if ds["response"] in df.columns and len(df):
        lines.append(
            f"  {ds['response']} range: {df[ds['response']].min():,.0f} to {df[ds['response']].max():,.0f}"
        )
    return "\n".join(lines)


def subset_dataset(
    ds: AnalysisDataset,
    query: Optional[Dict[str, List[str]]] = None,
) -> AnalysisDataset:
    """
    Create a subset of the dataset by categorical level.

    :param ds: AnalysisDataset dictionary
    :param query: Mapping column -> allowed levels, e.g. {"fuel_type": ["Petrol"]}
    :returns: New AnalysisDataset with filtered data
    """
    df = ds["data"].copy()
    for column, levels in (query or {}).items():
        if column not in df.columns:
            raise ValueError(f"Column '{column}' not found in data")
        df = df[df[column].isin(levels)]

    return create_analysis_dataset(
        data=df.reset_index(drop=True),
        response=ds["response"],
        numeric_vars=ds["numeric_vars"],
        categorical_vars=ds["categorical_vars"],
        source=ds["source"],
    )


# =============================================================================
# Loading
# =============================================================================

def load_listings(path: Union[str, Path], sep: str = ",") -> pd.DataFrame:
    """
    Read the raw listings file.

    :param path: Path to the delimited file
    :param sep: Field delimiter
    :returns: Raw DataFrame (headers untouched)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Listings file not found: {path}")
    return pd.read_csv(path, sep=sep)


# =============================================================================
# Cleaning Steps (each returns a new DataFrame)
# =============================================================================

def _to_snake_case(name: str) -> str:
    name = re.sub(r"[^0-9a-zA-Z]+", "_", str(name).strip())
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.strip("_").lower()


def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Snake-case all headers and apply COLUMN_RENAMES."""
    renamed = {col: _to_snake_case(col) for col in df.columns}
    out = df.rename(columns=renamed)
    return out.rename(columns={k: v for k, v in COLUMN_RENAMES.items() if k in out.columns})


def _parse_leading_number(value) -> float:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return np.nan
    if isinstance(value, (int, float, np.number)):
        return float(value)
    match = re.search(r"\d+(?:\.\d+)?", str(value).replace(",", ""))
    return float(match.group()) if match else np.nan


def parse_engine(df: pd.DataFrame, column: str = "engine") -> pd.DataFrame:
    """
    Parse engine displacement strings to numeric cc.

    Examples: "1198 cc" -> 1198.0, "2179" -> 2179.0, "n/a" -> NaN
    """
    if column not in df.columns:
        return df
    out = df.copy()
    parsed = out[column].apply(_parse_leading_number)
    n_failed = int(parsed.isna().sum() - out[column].isna().sum())
    if n_failed > 0:
        warnings.warn(f"Could not parse {n_failed} '{column}' values; set to NaN")
    out[column] = parsed
    return out


def coerce_numeric(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """Convert columns to numeric, turning malformed strings into NaN."""
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            continue
        if pd.api.types.is_numeric_dtype(out[col]):
            continue
        cleaned = out[col].astype(str).str.replace(r"[^0-9.\-]", "", regex=True)
        coerced = pd.to_numeric(cleaned.replace("", np.nan), errors="coerce")
        n_failed = int(coerced.isna().sum() - out[col].isna().sum())
        if n_failed > 0:
            warnings.warn(f"Could not parse {n_failed} '{col}' values; set to NaN")
        out[col] = coerced
    return out


def add_age(
    df: pd.DataFrame,
    reference_year: int = REFERENCE_YEAR,
    year_col: str = "year",
) -> pd.DataFrame:
    """Add ``age = reference_year - year`` (years since model year)."""
    if year_col not in df.columns:
        raise ValueError(f"Year column '{year_col}' not found in data")
    out = df.copy()
    out["age"] = reference_year - pd.to_numeric(out[year_col], errors="coerce")
    if (out["age"] < 0).any():
        warnings.warn(f"Some listings are newer than reference year {reference_year}")
    return out


def cast_categorical(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """
    Cast categorical columns to plain strings, keeping NaN.

    Numeric-looking codes (sitting capacity 5.0) become "5".
    """
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            continue
        values = out[col]
        if pd.api.types.is_numeric_dtype(values):
            values = values.map(lambda v: np.nan if pd.isna(v) else f"{v:g}")
        else:
            values = values.map(lambda v: np.nan if pd.isna(v) else str(v).strip())
        out[col] = values.astype(object)
    return out


def collapse_rare_categories(
    df: pd.DataFrame,
    column: str,
    min_count: int = 10,
    other: str = "Other",
) -> pd.DataFrame:
    """
    Merge levels with fewer than ``min_count`` listings into ``other``.

    Keeps chi-square expected counts away from zero for sparse fuel types.
    """
    if column not in df.columns:
        return df
    out = df.copy()
    counts = out[column].value_counts()
    rare = counts[counts < min_count].index.tolist()
    if rare:
        warnings.warn(f"Collapsing rare '{column}' levels into '{other}': {rare}")
        out[column] = out[column].where(~out[column].isin(rare), other)
    return out


def drop_incomplete(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """Drop rows with missing values in any of ``columns``."""
    present = [c for c in columns if c in df.columns]
    n_before = len(df)
    out = df.dropna(subset=present).reset_index(drop=True)
    if len(out) < n_before:
        warnings.warn(f"Dropped {n_before - len(out)} rows with missing values in {present}")
    return out


def clean_listings(
    df: pd.DataFrame,
    reference_year: int = REFERENCE_YEAR,
    collapse: Optional[Dict[str, int]] = None,
) -> pd.DataFrame:
    """
    Apply the full cleaning chain to a raw listings frame.

    Steps: standardize_columns -> parse_engine -> coerce_numeric -> add_age
    -> cast_categorical -> collapse_rare_categories -> drop_incomplete.

    :param df: Raw listings DataFrame
    :param reference_year: Year used to compute vehicle age
    :param collapse: Mapping column -> min_count for rare-level collapsing
    :returns: Cleaned DataFrame restricted to ANALYSIS_COLUMNS
    :raises ValueError: If a required column is missing after harmonization
    """
    out = standardize_columns(df)

    missing = [c for c in ANALYSIS_COLUMNS if c not in out.columns and c != "age"]
    if missing:
        raise ValueError(f"Required columns missing: {missing}. Available: {list(out.columns)}")

    out = parse_engine(out)
    out = coerce_numeric(out, ["price", "year", "kilometer", "fuel_tank_capacity"])
    out = add_age(out, reference_year=reference_year)
    out = cast_categorical(out, CATEGORICAL_VARS)

    for column, min_count in (collapse or {}).items():
        out = collapse_rare_categories(out, column, min_count=min_count)

    out = drop_incomplete(out, ANALYSIS_COLUMNS)
    return out[ANALYSIS_COLUMNS].copy()


def prepare_listings(
    source: Union[str, Path, pd.DataFrame],
    reference_year: int = REFERENCE_YEAR,
    collapse: Optional[Dict[str, int]] = None,
) -> AnalysisDataset:
    """
    Load (if needed) and clean listings into an AnalysisDataset.

    :param source: CSV path or an already-loaded raw DataFrame
    :param reference_year: Year used to compute vehicle age
    :param collapse: Rare-level collapsing thresholds, e.g. {"fuel_type": 10}
    :returns: AnalysisDataset ready for car_stats functions

    Example:
        >>> ds = prepare_listings("data/car_details.csv", collapse={"fuel_type": 10})
        >>> print(describe_dataset(ds))
    """
    if isinstance(source, pd.DataFrame):
        raw, origin = source, "dataframe"
    else:
        raw, origin = load_listings(source), str(source)

    data = clean_listings(raw, reference_year=reference_year, collapse=collapse)
    return create_analysis_dataset(data=data, source=origin)


# =============================================================================
# Descriptive Summaries
# =============================================================================

def summarize_numeric(ds: AnalysisDataset) -> pd.DataFrame:
    """
    Summary statistics for numeric columns.

    :returns: DataFrame with variable, n, mean, sd, min, median, max, skew
    """
    rows = []
    for var in ds["numeric_vars"]:
        values = ds["data"][var].dropna()
        rows.append({
            "variable": var,
            "n": len(values),
            "mean": values.mean(),
            "sd": values.std(),
            "min": values.min(),
            "median": values.median(),
            "max": values.max(),
            "skew": values.skew(),
        })
    return pd.DataFrame(rows)


def category_counts(ds: AnalysisDataset, column: str) -> pd.DataFrame:
    """Counts and shares of each level of a categorical column."""
    if column not in ds["data"].columns:
        raise ValueError(f"Column '{column}' not found in data")
    counts = ds["data"][column].value_counts()
    return pd.DataFrame({
        column: counts.index,
        "count": counts.values,
        "share": counts.values / counts.sum(),
    })


def group_summary(ds: AnalysisDataset, group: str, value: Optional[str] = None) -> pd.DataFrame:
    """Per-level n, mean, median and sd of ``value`` (default: response)."""
    value = value or ds["response"]
    return (
        ds["data"]
        .groupby(group)[value]
        .agg(["count", "mean", "median", "std"])
        .reset_index()
    )


def missingness_report(df: pd.DataFrame) -> Tuple[pd.DataFrame, float]:
    """
    Missing-value counts per column of a (raw or cleaned) frame.

    :returns: (per-column DataFrame, overall percentage missing)
    """
    missing = df.isna().sum()
    per_column = pd.DataFrame({
        "column": missing.index,
        "n_missing": missing.values,
        "pct_missing": 100 * missing.values / max(len(df), 1),
    })
    total_pct = 100 * missing.sum() / max(df.size, 1)
    return per_column, float(total_pct)
