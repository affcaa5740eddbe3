"""
H3: Automatic vs Manual Listing Price
=====================================

Research Question
-----------------
Do cars with automatic transmission list at higher prices than manual cars?

Background
----------
Automatic gearboxes are more common in newer and premium models, so a
price gap is expected. The test does not separate transmission from those
confounders; the M4/M5 regressions do.

Hypothesis
----------
H0: price is independent of transmission
H1: mean(price | Automatic) > mean(price | Manual) (right-tailed)

Simulation
----------
Statistic: mean(price | Automatic) - mean(price | Manual)

Null distribution: permutations of the transmission column. Each shuffle
keeps the group sizes and the price values, breaking only their pairing.

Interpretation
--------------
- p < 0.05: Automatic cars are listed higher on average
- Welch's t-test (unequal variances) is reported alongside.
"""

from typing import Any
from .runner import run_hypothesis as _run
from .config import get_hypothesis

CONFIG = get_hypothesis("H3")


def run(data: Any, verbose: bool = True, **kwargs) -> Any:
    """Run H3 hypothesis test."""
    return _run("H3", data, verbose=verbose, **kwargs)


def describe() -> str:
    """Return the full hypothesis description."""
    return __doc__
