"""
Theory-based counterparts of the resampling tests.

Reported next to the simulation p-value as a sanity check:
one-sample t (mean), exact binomial (proportion), Welch t (diff-in-means),
Pearson chi-square without continuity correction (chi-square).
"""
from __future__ import annotations

from typing import Any, Dict

import pandas as pd
from scipy import stats

from .calculate import contingency_table
from .null_dist import normalize_direction
from .specs import CHI_SQUARE, DIFF_IN_MEANS, MEAN, PROPORTION, HypothesisSpec, StatisticSpec, validate_against_data


_ALTERNATIVES = {"right": "greater", "left": "less", "two-sided": "two-sided"}


def theoretical_test(
    df: pd.DataFrame,
    hypothesis: HypothesisSpec,
    statistic: StatisticSpec,
    direction: str = "two-sided",
) -> Dict[str, Any]:
    """
    Run the closed-form test matching a resampling test.

    :returns: Dict with method, statistic, p_value, direction
    """
    validate_against_data(df, hypothesis, statistic)
    direction = normalize_direction(direction)
    alternative = _ALTERNATIVES[direction]
    kind = statistic["kind"]
    response = df[statistic["response"]]

    if kind == MEAN:
        res = stats.ttest_1samp(response, popmean=hypothesis["value"], alternative=alternative)
        method, stat, p = "one-sample t-test", res.statistic, res.pvalue

    elif kind == PROPORTION:
        k = int((response == statistic["success"]).sum())
        res = stats.binomtest(k, n=len(response), p=hypothesis["value"], alternative=alternative)
        method, stat, p = "exact binomial test", k / len(response), res.pvalue

    elif kind == DIFF_IN_MEANS:
        first, second = statistic["order"]
        groups = df[statistic["explanatory"]]
        res = stats.ttest_ind(
            response[groups == first],
            response[groups == second],
            equal_var=False,
            alternative=alternative,
        )
        method, stat, p = "Welch two-sample t-test", res.statistic, res.pvalue

    elif kind == CHI_SQUARE:
        table = contingency_table(df, statistic["response"], statistic["explanatory"])
        chi2, p, _, _ = stats.chi2_contingency(table.to_numpy(), correction=False)
        # Chi-square evidence only accumulates in the right tail
        method, stat, direction = "Pearson chi-square test", chi2, "right"

    return {
        "method": method,
        "statistic": float(stat),
        "p_value": float(p),
        "direction": direction,
    }
