"""
Null-Data Generators
====================

Produce one simulated listings frame consistent with a null hypothesis.

Modes:
- "bootstrap": rows drawn with replacement (point null on a mean). The data
  is NOT shifted to the hypothesized value; the decision engine handles
  location (see null_dist.get_p_value).
- "permute": one column shuffled across rows (independence null).
- "draw": response redrawn as success/other with probability p (point null
  on a proportion).

All generators take an explicit ``numpy.random.Generator`` and never touch
global random state.
"""
from __future__ import annotations

from typing import Any, List, Optional

import numpy as np
import pandas as pd

from .specs import PROPORTION, HypothesisSpec, InvalidInput, StatisticSpec


GENERATION_MODES = ("bootstrap", "permute", "draw")

# Label given to non-success rows by the draw generator
DRAW_OTHER_LABEL = "__other__"


# =============================================================================
# Randomness
# =============================================================================

def replicate_generators(seed: Optional[int], reps: int) -> List[np.random.Generator]:
    """
    One independent Generator per replicate, derived from a single seed.

    Replicate i always receives the same stream for the same seed, whatever
    order (or process) the replicates run in.
    """
    children = np.random.SeedSequence(seed).spawn(reps)
    return [np.random.default_rng(child) for child in children]


# =============================================================================
# Generators
# =============================================================================

def generate_bootstrap(df: pd.DataFrame, rng: np.random.Generator) -> pd.DataFrame:
    """
    Resample rows with replacement to the original row count.

    :param df: Source listings frame (not modified)
    :param rng: Random generator
    :returns: New frame with len(df) rows, index reset
    """
    n = len(df)
    if n == 0:
        raise InvalidInput("Cannot bootstrap an empty dataset")
    idx = rng.integers(0, n, size=n)
    return df.iloc[idx].reset_index(drop=True)


def generate_permutation(
    df: pd.DataFrame,
    column: str,
    rng: np.random.Generator,
) -> pd.DataFrame:
    """
    Shuffle the values of ``column`` across rows, holding every other column fixed.

    The shuffled column keeps its exact multiset of values.
    """
    if column not in df.columns:
        raise InvalidInput(f"Column '{column}' not found for permutation")
    permuted = df.copy()
    permuted[column] = rng.permutation(df[column].to_numpy())
    return permuted


def generate_draw(
    df: pd.DataFrame,
    response: str,
    success: Any,
    p: float,
    rng: np.random.Generator,
) -> pd.DataFrame:
    """
    Redraw ``response`` so each row equals ``success`` with probability ``p``.

    Non-success rows receive DRAW_OTHER_LABEL.
    """
    if not 0 <= p <= 1:
        raise InvalidInput(f"Draw probability must be in [0, 1], got {p}")
    drawn = df.copy()
    hits = rng.random(len(df)) < p
    # object array so an int or bool success category is stored unchanged
    labels = np.full(len(df), DRAW_OTHER_LABEL, dtype=object)
    labels[hits] = success
    drawn[response] = labels
    return drawn


# =============================================================================
# Dispatch
# =============================================================================

def default_mode(hypothesis: HypothesisSpec, statistic: StatisticSpec) -> str:
    """Generation mode matching a hypothesis/statistic pair."""
    if hypothesis["null"] == "independence":
        return "permute"
    if statistic["kind"] == PROPORTION:
        return "draw"
    return "bootstrap"


def generate_null_data(
    df: pd.DataFrame,
    hypothesis: HypothesisSpec,
    mode: str,
    rng: np.random.Generator,
    success: Optional[Any] = None,
) -> pd.DataFrame:
    """
    Generate one simulated dataset under ``hypothesis``.

    :param df: Source listings frame (read-only)
    :param hypothesis: HypothesisSpec
    :param mode: "bootstrap", "permute" or "draw"
    :param rng: Random generator for this replicate
    :param success: Success category (draw mode only)
    :returns: Simulated frame with the same row count as ``df``
    :raises InvalidInput: If the mode does not fit the hypothesis
    """
    if mode == "bootstrap":
        return generate_bootstrap(df, rng)

    if mode == "permute":
        if hypothesis["null"] != "independence":
            raise InvalidInput("Permutation requires an independence null")
        return generate_permutation(df, hypothesis["explanatory"], rng)

    if mode == "draw":
        if hypothesis["null"] != "point":
            raise InvalidInput("Draw requires a point null")
        if success is None:
            raise InvalidInput("Draw requires a success category")
        return generate_draw(df, hypothesis["response"], success, hypothesis["value"], rng)

    raise InvalidInput(f"Unknown generation mode: {mode!r}. Available: {list(GENERATION_MODES)}")
