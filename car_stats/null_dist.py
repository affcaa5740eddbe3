"""
Null Distributions and P-values
===============================

Builds empirical sampling distributions by simulation and compares an
observed statistic against them.

Workflow:
    hypothesis = create_hypothesis("price", "independence", explanatory="transmission")
    statistic = create_statistic("diff-in-means", "price", "transmission",
                                 order=("Automatic", "Manual"))
    observed = observed_statistic(df, hypothesis, statistic)
    null = build_null_distribution(df, hypothesis, statistic, reps=1000, seed=42)
    get_p_value(null, observed, "right")

Architecture Note:
    A NullDistribution is a dict whose "values" array is flagged read-only.
    Replicates share only the source frame, which is never mutated, so the
    replicate loop may run on a joblib worker pool. Every replicate owns a
    generator spawned from the seed, so results do not depend on n_jobs.
"""
from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Sequence, TypedDict

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy import stats

from .calculate import calculate_statistic
from .generate import default_mode, generate_bootstrap, generate_null_data, replicate_generators
from .specs import HypothesisSpec, InvalidInput, StatisticSpec, validate_against_data


DEFAULT_REPS = 1000

# Replicates handed to the worker pool between cancellation checks
PARALLEL_BATCH_SIZE = 250

DIRECTIONS = {
    "right": "right",
    "greater": "right",
    "left": "left",
    "less": "left",
    "two-sided": "two-sided",
    "two_sided": "two-sided",
    "both": "two-sided",
}


class ResamplingCancelled(RuntimeError):
    """Raised when a replicate loop is stopped through its cancel event."""


# =============================================================================
# NullDistribution
# =============================================================================

class NullDistribution(TypedDict):
    """
    Simulated statistics under a null hypothesis.

    Keys:
        values: Read-only array of ``reps`` replicate statistics
        statistic: StatisticSpec used for every replicate
        hypothesis: HypothesisSpec (None for a plain bootstrap distribution)
        mode: Generation mode ("bootstrap", "permute", "draw")
        reps: Number of replicates
        seed: Seed the replicate generators were spawned from
        recentre: True for a point null; the observed statistic is compared
            via distances from the distribution's own center
    """
    values: np.ndarray
    statistic: StatisticSpec
    hypothesis: Optional[HypothesisSpec]
    mode: str
    reps: int
    seed: Optional[int]
    recentre: bool


def create_null_distribution(
    values: Sequence[float],
    statistic: StatisticSpec,
    hypothesis: Optional[HypothesisSpec] = None,
    mode: str = "bootstrap",
    seed: Optional[int] = None,
    recentre: bool = False,
) -> NullDistribution:
    """Wrap replicate statistics in an immutable NullDistribution dict."""
    arr = np.array(values, dtype=float)
    arr.flags.writeable = False
    return {
        "values": arr,
        "statistic": statistic,
        "hypothesis": hypothesis,
        "mode": mode,
        "reps": len(arr),
        "seed": seed,
        "recentre": recentre,
    }


def summarize_null_distribution(dist: NullDistribution) -> str:
    """Human-readable one-block summary."""
    values = dist["values"]
    lines = [
        f"NullDistribution: {dist['statistic']['kind']} ({dist['mode']})",
        f"  Replicates: {dist['reps']}",
        f"  Mean: {values.mean():.4f}" if len(values) else "  Mean: NA",
        f"  SD: {values.std(ddof=1):.4f}" if len(values) > 1 else "  SD: NA",
    ]
    if dist["hypothesis"] is not None and dist["hypothesis"]["null"] == "point":
        lines.append(f"  Hypothesized value: {dist['hypothesis']['value']}")
    return "\n".join(lines)


# =============================================================================
# Replicate loop
# =============================================================================

def _null_replicate(
    df: pd.DataFrame,
    hypothesis: HypothesisSpec,
    statistic: StatisticSpec,
    mode: str,
    rng: np.random.Generator,
) -> float:
    simulated = generate_null_data(df, hypothesis, mode, rng, success=statistic.get("success"))
    return calculate_statistic(simulated, statistic)


def _bootstrap_replicate(
    df: pd.DataFrame,
    statistic: StatisticSpec,
    rng: np.random.Generator,
) -> float:
    return calculate_statistic(generate_bootstrap(df, rng), statistic)


def _run_replicates(
    replicate_fn,
    args: tuple,
    generators: List[np.random.Generator],
    n_jobs: int,
    cancel_event: Optional[threading.Event],
) -> List[float]:
    """Run ``replicate_fn(*args, rng)`` for every generator, in order."""
    values: List[float] = []

    if n_jobs == 1:
        for rng in generators:
            if cancel_event is not None and cancel_event.is_set():
                raise ResamplingCancelled(f"Cancelled after {len(values)} replicates")
            values.append(replicate_fn(*args, rng))
        return values

    with Parallel(n_jobs=n_jobs) as parallel:
        for start in range(0, len(generators), PARALLEL_BATCH_SIZE):
            if cancel_event is not None and cancel_event.is_set():
                raise ResamplingCancelled(f"Cancelled after {len(values)} replicates")
            batch = generators[start:start + PARALLEL_BATCH_SIZE]
            values.extend(parallel(delayed(replicate_fn)(*args, rng) for rng in batch))
    return values


def _check_n_jobs(n_jobs: int) -> int:
    # joblib: 1 is sequential, -1 all cores, -2 all but one, ...
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, (int, np.integer)):
        raise InvalidInput(f"n_jobs must be an integer, got {n_jobs!r}")
    if n_jobs == 0:
        raise InvalidInput("n_jobs must be non-zero (1 = sequential, -1 = all cores)")
    return int(n_jobs)


def _check_reps(reps: int) -> int:
    try:
        reps = int(reps)
    except (TypeError, ValueError):
        raise InvalidInput(f"Replicate count must be an integer, got {reps!r}")
    if reps < 1:
        raise InvalidInput(f"Replicate count must be >= 1, got {reps}")
    return reps


def build_null_distribution(
    df: pd.DataFrame,
    hypothesis: HypothesisSpec,
    statistic: StatisticSpec,
    reps: int = DEFAULT_REPS,
    mode: Optional[str] = None,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    cancel_event: Optional[threading.Event] = None,
) -> NullDistribution:
    """
    Simulate the sampling distribution of ``statistic`` under ``hypothesis``.

    For i in 1..reps: generate one null dataset, compute its statistic.

    :param df: Cleaned listings frame (read-only)
    :param hypothesis: HypothesisSpec
    :param statistic: StatisticSpec
    :param reps: Number of replicates (>= 1)
    :param mode: Generation mode (None = default_mode for the pair)
    :param seed: Seed for reproducible replicates
    :param n_jobs: joblib workers (1 = sequential, -1 = all cores)
    :param cancel_event: Set it to stop the loop with ResamplingCancelled
    :returns: NullDistribution with exactly ``reps`` values
    :raises InvalidInput: On invalid reps or n_jobs, or a test that does not fit ``df``
    """
    reps = _check_reps(reps)
    n_jobs = _check_n_jobs(n_jobs)
    validate_against_data(df, hypothesis, statistic)

    mode = mode or default_mode(hypothesis, statistic)
    generators = replicate_generators(seed, reps)

    values = _run_replicates(
        _null_replicate,
        (df, hypothesis, statistic, mode),
        generators,
        n_jobs,
        cancel_event,
    )

    recentre = hypothesis["null"] == "point"
    return create_null_distribution(
        values,
        statistic=statistic,
        hypothesis=hypothesis,
        mode=mode,
        seed=seed,
        recentre=recentre,
    )


def build_bootstrap_distribution(
    df: pd.DataFrame,
    statistic: StatisticSpec,
    reps: int = DEFAULT_REPS,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    cancel_event: Optional[threading.Event] = None,
) -> NullDistribution:
    """
    Bootstrap distribution of ``statistic`` with no null imposed.

    Used for confidence intervals around the observed statistic.
    """
    reps = _check_reps(reps)
    n_jobs = _check_n_jobs(n_jobs)
    validate_against_data(df, None, statistic)

    values = _run_replicates(
        _bootstrap_replicate,
        (df, statistic),
        replicate_generators(seed, reps),
        n_jobs,
        cancel_event,
    )
    return create_null_distribution(values, statistic=statistic, mode="bootstrap", seed=seed)


# =============================================================================
# P-value / Decision Engine
# =============================================================================

PValueResult = Dict[str, Any]


def normalize_direction(direction: str) -> str:
    """Map direction aliases ("greater", "less", "both", ...) to right/left/two-sided."""
    try:
        return DIRECTIONS[direction]
    except KeyError:
        raise InvalidInput(f"Unknown direction: {direction!r}. Available: {sorted(DIRECTIONS)}")


def get_p_value(
    dist: NullDistribution,
    observed: float,
    direction: str,
) -> PValueResult:
    """
    P-value of ``observed`` against a null distribution.

    - right: share of null values >= observed
    - left: share of null values <= observed
    - two-sided: twice the smaller tail, capped at 1

    A point null (``dist["recentre"]``, or a point hypothesis attached) is
    judged by distance instead. Deviations of the replicates from their own
    mean are compared with the observed deviation from the hypothesized
    value; two-sided counts replicates at least that far away on either
    side. A bootstrap sits at the sample mean and a draw sits near p, so
    this holds for both generators.

    :param dist: NullDistribution
    :param observed: Observed statistic
    :param direction: "right", "left" or "two-sided" (aliases accepted)
    :returns: {"p_value": float in [0, 1], "direction": normalized direction}
    :raises InvalidInput: Empty distribution or unknown direction
    """
    direction = normalize_direction(direction)
    values = np.asarray(dist["values"], dtype=float)
    if values.size == 0:
        raise InvalidInput("Null distribution is empty")

    hypothesis = dist.get("hypothesis")
    if dist.get("recentre") or (hypothesis is not None and hypothesis["null"] == "point"):
        deviation = observed - hypothesis["value"]
        spread = values - values.mean()
        if direction == "right":
            p_value = np.mean(spread >= deviation)
        elif direction == "left":
            p_value = np.mean(spread <= deviation)
        else:
            p_value = np.mean(np.abs(spread) >= abs(deviation))
    else:
        right = np.mean(values >= observed)
        left = np.mean(values <= observed)
        if direction == "right":
            p_value = right
        elif direction == "left":
            p_value = left
        else:
            p_value = min(1.0, 2 * min(left, right))

    return {
        "p_value": float(min(max(p_value, 0.0), 1.0)),
        "direction": direction,
    }


def get_confidence_interval(
    dist: NullDistribution,
    level: float = 0.95,
    method: str = "percentile",
    point_estimate: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Confidence interval from a bootstrap distribution.

    :param dist: Distribution from build_bootstrap_distribution()
    :param level: Confidence level in (0, 1)
    :param method: "percentile" or "se" (normal, point_estimate +/- z * SD)
    :param point_estimate: Required for method="se"
    :returns: Dict with lower, upper, level, method
    """
    if not 0 < level < 1:
        raise InvalidInput(f"Confidence level must be in (0, 1), got {level}")
    values = np.asarray(dist["values"], dtype=float)
    if values.size == 0:
        raise InvalidInput("Bootstrap distribution is empty")

    alpha = 1 - level
    if method == "percentile":
        lower, upper = np.quantile(values, [alpha / 2, 1 - alpha / 2])
    elif method == "se":
        if point_estimate is None:
            raise InvalidInput("method='se' requires a point_estimate")
        if values.size < 2:
            raise InvalidInput("method='se' requires at least 2 replicates")
        z = stats.norm.ppf(1 - alpha / 2)
        half_width = z * values.std(ddof=1)
        lower, upper = point_estimate - half_width, point_estimate + half_width
    else:
        raise InvalidInput(f"Unknown interval method: {method!r}. Use 'percentile' or 'se'")

    return {
        "lower": float(lower),
        "upper": float(upper),
        "level": level,
        "method": method,
    }
