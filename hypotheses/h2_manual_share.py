"""
H2: Share of Manual Transmissions
=================================

Research Question
-----------------
Are half of the listed cars manual?

Hypothesis
----------
H0: p(transmission == "Manual") = 0.5
H1: p != 0.5 (two-sided)

Simulation
----------
Statistic: proportion of listings with transmission "Manual"

Null distribution: each replicate redraws every listing's transmission as
Manual with probability 0.5 (anything else otherwise) and recomputes the
proportion. Bootstrapping the observed labels would center the replicates
on the observed share, not on 0.5.

Interpretation
--------------
- p < 0.05: The manual share differs from one half
- The exact binomial test is reported alongside.

Usage
-----
    from hypotheses import h2_manual_share
    result = h2_manual_share.run(ds)
"""

from typing import Any
from .runner import run_hypothesis as _run
from .config import get_hypothesis

CONFIG = get_hypothesis("H2")


def run(data: Any, verbose: bool = True, **kwargs) -> Any:
    """Run H2 hypothesis test."""
    return _run("H2", data, verbose=verbose, **kwargs)


def describe() -> str:
    """Return the full hypothesis description."""
    return __doc__
