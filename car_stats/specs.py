"""
Test Specification Module
=========================

Declares *what* a resampling test is about before any data is touched:

- HypothesisSpec: response/explanatory columns and the null (point or independence)
- StatisticSpec: a tagged variant, one shape per statistic kind
- validate_against_data: column/type checks against a concrete listings frame

Architecture Note:
    Following the rest of car_stats, specifications are plain dictionaries
    built by ``create_*`` functions. Every factory validates its arguments
    so a malformed test fails here, not halfway through a replicate loop.
"""
from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Sequence, Tuple, TypedDict

import pandas as pd


# =============================================================================
# Errors
# =============================================================================

class InvalidInput(ValueError):
    """Raised for malformed specifications or data unusable by a statistic."""


# =============================================================================
# Constants
# =============================================================================

NullType = Literal["point", "independence"]

MEAN = "mean"
PROPORTION = "proportion"
DIFF_IN_MEANS = "diff-in-means"
CHI_SQUARE = "chi-square"

STATISTIC_KINDS = (MEAN, PROPORTION, DIFF_IN_MEANS, CHI_SQUARE)

# Fields each statistic kind carries besides "kind" and "response"
_KIND_FIELDS: Dict[str, Tuple[str, ...]] = {
    MEAN: (),
    PROPORTION: ("success",),
    DIFF_IN_MEANS: ("explanatory", "order"),
    CHI_SQUARE: ("explanatory",),
}

# Null type each statistic kind is tested under
_KIND_NULL: Dict[str, str] = {
    MEAN: "point",
    PROPORTION: "point",
    DIFF_IN_MEANS: "independence",
    CHI_SQUARE: "independence",
}


# =============================================================================
# HypothesisSpec
# =============================================================================

class HypothesisSpec(TypedDict):
    """
    Null hypothesis under test.

    Keys:
        response: Response column
        explanatory: Explanatory column (independence nulls only)
        null: "point" or "independence"
        value: Hypothesized parameter (point nulls only)
    """
    response: str
    explanatory: Optional[str]
    null: str
    value: Optional[float]


def create_hypothesis(
    response: str,
    null: str,
    explanatory: Optional[str] = None,
    value: Optional[float] = None,
) -> HypothesisSpec:
    """
    Create a validated HypothesisSpec.

    :param response: Response column name
    :param null: "point" or "independence"
    :param explanatory: Explanatory column (required for independence)
    :param value: Hypothesized parameter value (required for point)
    :returns: HypothesisSpec dictionary
    :raises InvalidInput: If the combination of arguments is inconsistent
    """
    if not response:
        raise InvalidInput("Hypothesis requires a response column")

    if null == "point":
        if value is None:
            raise InvalidInput("Point null requires a hypothesized value")
        if explanatory is not None:
            raise InvalidInput("Point null does not take an explanatory column")
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidInput(f"Hypothesized value must be numeric, got {value!r}")
    elif null == "independence":
        if not explanatory:
            raise InvalidInput("Independence null requires an explanatory column")
        if explanatory == response:
            raise InvalidInput("Response and explanatory columns must differ")
        if value is not None:
            raise InvalidInput("Independence null does not take a hypothesized value")
    else:
        raise InvalidInput(f"Unknown null type: {null!r}. Use 'point' or 'independence'")

    return {
        "response": response,
        "explanatory": explanatory,
        "null": null,
        "value": value,
    }


# =============================================================================
# StatisticSpec (tagged variant)
# =============================================================================

StatisticSpec = Dict[str, Any]


def create_statistic(
    kind: str,
    response: str,
    explanatory: Optional[str] = None,
    success: Optional[Any] = None,
    order: Optional[Sequence[Any]] = None,
) -> StatisticSpec:
    """
    Create a validated StatisticSpec carrying exactly the fields its kind needs.

    - mean:          response
    - proportion:    response, success
    - diff-in-means: response, explanatory, order (two distinct groups)
    - chi-square:    response, explanatory

    :param kind: One of STATISTIC_KINDS
    :param response: Response column name
    :param explanatory: Explanatory/grouping column
    :param success: Success category for proportions
    :param order: (first, second) group order for diff-in-means
    :returns: StatisticSpec dictionary
    :raises InvalidInput: On unknown kind, missing or superfluous fields
    """
    if kind not in _KIND_FIELDS:
        raise InvalidInput(f"Unknown statistic kind: {kind!r}. Available: {list(STATISTIC_KINDS)}")
    if not response:
        raise InvalidInput("Statistic requires a response column")

    provided = {
        "explanatory": explanatory,
        "success": success,
        "order": order,
    }
    required = _KIND_FIELDS[kind]

    missing = [name for name in required if provided[name] is None]
    if missing:
        raise InvalidInput(f"Statistic '{kind}' requires: {missing}")

    extra = [name for name, v in provided.items() if v is not None and name not in required]
    if extra:
        raise InvalidInput(f"Statistic '{kind}' does not take: {extra}")

    spec: StatisticSpec = {"kind": kind, "response": response}

    if "explanatory" in required:
        if explanatory == response:
            raise InvalidInput("Response and explanatory columns must differ")
        spec["explanatory"] = explanatory

    if "success" in required:
        spec["success"] = success

    if "order" in required:
        order = tuple(order)
        if len(order) != 2 or order[0] == order[1]:
            raise InvalidInput(f"diff-in-means order must name two distinct groups, got {order!r}")
        spec["order"] = order

    return spec


def describe_statistic(statistic: StatisticSpec) -> str:
    """Short label, e.g. 'diff-in-means(price ~ transmission: Automatic - Manual)'."""
    kind = statistic["kind"]
    response = statistic["response"]
    if kind == MEAN:
        return f"mean({response})"
    if kind == PROPORTION:
        return f"proportion({response} == {statistic['success']})"
    if kind == DIFF_IN_MEANS:
        first, second = statistic["order"]
        return f"diff-in-means({response} ~ {statistic['explanatory']}: {first} - {second})"
    return f"chi-square({response} x {statistic['explanatory']})"


# =============================================================================
# Validation against data
# =============================================================================

def _require_column(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        raise InvalidInput(f"Column '{column}' not found. Available: {list(df.columns)}")
    return df[column]


def _require_numeric(df: pd.DataFrame, column: str) -> None:
    series = _require_column(df, column)
    if not pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series):
        raise InvalidInput(f"Column '{column}' must be numeric (dtype={series.dtype})")


def _require_categorical(df: pd.DataFrame, column: str) -> None:
    series = _require_column(df, column)
    if pd.api.types.is_float_dtype(series):
        raise InvalidInput(f"Column '{column}' must be categorical (dtype={series.dtype})")


def validate_against_data(
    df: pd.DataFrame,
    hypothesis: Optional[HypothesisSpec],
    statistic: StatisticSpec,
) -> None:
    """
    Check that a hypothesis/statistic pair can be evaluated on ``df``.

    :param df: Cleaned listings DataFrame
    :param hypothesis: HypothesisSpec (None for plain bootstrap distributions)
    :param statistic: StatisticSpec
    :raises InvalidInput: On empty data, missing/mistyped columns,
        absent success category, or hypothesis/statistic mismatch
    """
    if df is None or len(df) == 0:
        raise InvalidInput("Dataset is empty")

    kind = statistic["kind"]
    response = statistic["response"]

    if hypothesis is not None:
        if hypothesis["response"] != response:
            raise InvalidInput(
                f"Hypothesis response '{hypothesis['response']}' does not match "
                f"statistic response '{response}'"
            )
        expected_null = _KIND_NULL[kind]
        if hypothesis["null"] != expected_null:
            raise InvalidInput(
                f"Statistic '{kind}' is tested under a '{expected_null}' null, "
                f"not '{hypothesis['null']}'"
            )
        if expected_null == "independence" and hypothesis["explanatory"] != statistic["explanatory"]:
            raise InvalidInput("Hypothesis and statistic name different explanatory columns")
        if kind == PROPORTION and not 0 <= hypothesis["value"] <= 1:
            raise InvalidInput(f"Hypothesized proportion must be in [0, 1], got {hypothesis['value']}")

    if kind in (MEAN, DIFF_IN_MEANS):
        _require_numeric(df, response)
    else:
        _require_categorical(df, response)

    if kind == PROPORTION:
        if not (df[response] == statistic["success"]).any():
            raise InvalidInput(
                f"Success category {statistic['success']!r} never occurs in '{response}'"
            )

    if kind in (DIFF_IN_MEANS, CHI_SQUARE):
        _require_categorical(df, statistic["explanatory"])

    if kind == DIFF_IN_MEANS:
        levels = set(df[statistic["explanatory"]].dropna().unique())
        absent = [g for g in statistic["order"] if g not in levels]
        if absent:
            raise InvalidInput(f"Groups {absent} not found in '{statistic['explanatory']}'")
