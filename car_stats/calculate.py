"""
Statistic Calculators
=====================

Pure functions turning a listings frame into one scalar summary:

- mean: arithmetic mean of a numeric response
- proportion: share of rows equal to a success category
- diff-in-means: mean(first group) - mean(second group)
- chi-square: Pearson statistic of a response x explanatory crosstab

The same calculator is used for the observed statistic and for every
simulated replicate, so both live on the same scale.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np
import pandas as pd
from scipy import stats

from .specs import (
    CHI_SQUARE,
    DIFF_IN_MEANS,
    MEAN,
    PROPORTION,
    HypothesisSpec,
    InvalidInput,
    StatisticSpec,
    validate_against_data,
)


# =============================================================================
# Calculators
# =============================================================================

def _mean(df: pd.DataFrame, statistic: StatisticSpec) -> float:
    values = df[statistic["response"]]
    if not pd.api.types.is_numeric_dtype(values):
        raise InvalidInput(f"Column '{statistic['response']}' is not numeric")
    if len(values) == 0:
        raise InvalidInput("Cannot compute a mean of an empty dataset")
    return float(values.mean())


def _proportion(df: pd.DataFrame, statistic: StatisticSpec) -> float:
    values = df[statistic["response"]]
    if len(values) == 0:
        raise InvalidInput("Cannot compute a proportion of an empty dataset")
    # A resample can miss the success category entirely; that is a proportion of 0
    return float((values == statistic["success"]).mean())


def _diff_in_means(df: pd.DataFrame, statistic: StatisticSpec) -> float:
    response = df[statistic["response"]]
    groups = df[statistic["explanatory"]]
    first, second = statistic["order"]

    first_values = response[groups == first]
    second_values = response[groups == second]
    if first_values.empty:
        raise InvalidInput(f"Group {first!r} is empty")
    if second_values.empty:
        raise InvalidInput(f"Group {second!r} is empty")

    return float(first_values.mean() - second_values.mean())


def contingency_table(df: pd.DataFrame, response: str, explanatory: str) -> pd.DataFrame:
    """Cross-tabulate two categorical columns (rows = response levels)."""
    return pd.crosstab(df[response], df[explanatory])


def _chi_square(df: pd.DataFrame, statistic: StatisticSpec) -> float:
    table = contingency_table(df, statistic["response"], statistic["explanatory"])
    return chi_square_from_table(table.to_numpy())


def chi_square_from_table(observed: np.ndarray) -> float:
    """
    Pearson chi-square statistic of a contingency table.

    No continuity correction is applied, also for 2x2 tables.

    :param observed: 2-D array of cell counts
    :returns: Chi-square statistic
    :raises InvalidInput: Fewer than 2 categories on either axis, or an
        empty row/column margin (expected count of zero)
    """
    observed = np.asarray(observed, dtype=float)
    if observed.ndim != 2 or observed.shape[0] < 2 or observed.shape[1] < 2:
        raise InvalidInput(
            f"Chi-square needs at least 2 categories per column, got table shape {observed.shape}"
        )

    row_sums = observed.sum(axis=1)
    col_sums = observed.sum(axis=0)
    if (row_sums == 0).any() or (col_sums == 0).any():
        raise InvalidInput("Chi-square table has an empty row or column margin")

    statistic, _, _, _ = stats.chi2_contingency(observed, correction=False)
    return float(statistic)


_CALCULATORS: Dict[str, Callable[[pd.DataFrame, StatisticSpec], float]] = {
    MEAN: _mean,
    PROPORTION: _proportion,
    DIFF_IN_MEANS: _diff_in_means,
    CHI_SQUARE: _chi_square,
}


# =============================================================================
# Public API
# =============================================================================

def calculate_statistic(df: pd.DataFrame, statistic: StatisticSpec) -> float:
    """
    Compute the statistic described by ``statistic`` on ``df``.

    :param df: Listings DataFrame (observed or simulated)
    :param statistic: StatisticSpec from create_statistic()
    :returns: Finite scalar statistic
    :raises InvalidInput: On unusable data for this statistic kind
    """
    try:
        calculator = _CALCULATORS[statistic["kind"]]
    except KeyError:
        raise InvalidInput(f"Unsupported statistic kind: {statistic.get('kind')!r}")

    if len(df) == 0:
        raise InvalidInput("Dataset is empty")

    value = calculator(df, statistic)
    if not np.isfinite(value):
        raise InvalidInput(f"Statistic {statistic['kind']} is not finite ({value})")
    return value


def observed_statistic(
    df: pd.DataFrame,
    hypothesis: Optional[HypothesisSpec],
    statistic: StatisticSpec,
) -> float:
    """
    Validate the test against the real data, then compute its statistic once.

    Example:
        >>> hyp = create_hypothesis("price", "independence", explanatory="transmission")
        >>> stat = create_statistic("diff-in-means", "price", "transmission",
        ...                         order=("Automatic", "Manual"))
        >>> observed_statistic(df, hyp, stat)
    """
    validate_against_data(df, hypothesis, statistic)
    return calculate_statistic(df, statistic)
