"""
H1: Mean Listing Price vs 15 Lakh
=================================

Research Question
-----------------
Is the average asking price of a used car on the platform different from
INR 1,500,000 (15 lakh)?

Background
----------
Listing prices are strongly right-skewed: a long tail of luxury models
pulls the mean well above the median. The mean is still the quantity a
dealer's inventory valuation depends on, so it is tested directly.

Hypothesis
----------
H0: mu(price) = 1,500,000
H1: mu(price) != 1,500,000 (two-sided)

Simulation
----------
Statistic: mean(price)

Null distribution: bootstrap resamples of the listings (rows drawn with
replacement). The bootstrap means are NOT shifted onto 15 lakh; instead the
observed deviation (x_bar - 1,500,000) is compared against the deviations
of the bootstrap means from their own center.

Interpretation
--------------
- p < 0.05: The mean price is credibly different from 15 lakh
- The one-sample t-test is reported alongside; with thousands of listings
  both should agree despite the skew.

Usage
-----
    from hypotheses import h1_mean_price
    from car_stats import prepare_listings

    ds = prepare_listings("data/car_details.csv")
    result = h1_mean_price.run(ds)
    print(f"p-value: {result['p_value']:.4f}")
"""

from typing import Any
from .runner import run_hypothesis as _run
from .config import get_hypothesis

# Export hypothesis configuration
CONFIG = get_hypothesis("H1")


def run(data: Any, verbose: bool = True, **kwargs) -> Any:
    """
    Run H1 hypothesis test.

    Args:
        data: AnalysisDataset or cleaned listings DataFrame
        verbose: Print detailed output
        **kwargs: seed, reps, n_jobs (see runner.run_hypothesis)

    Returns:
        HypothesisResult dict
    """
    return _run("H1", data, verbose=verbose, **kwargs)


def describe() -> str:
    """Return the full hypothesis description."""
    return __doc__
