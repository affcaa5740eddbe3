"""
H4: Fuel Type x Transmission (Exploratory)
==========================================

Research Question
-----------------
Is the fuel type of a listed car associated with its transmission?

Hypothesis
----------
H0: fuel_type is independent of transmission
H1: some association exists (chi-square, right tail)

Simulation
----------
Statistic: Pearson chi-square of the fuel_type x transmission contingency
table (no continuity correction).

Null distribution: permutations of the transmission column, recomputing
the chi-square of every shuffled table.

Rare fuel types are pooled as "Other" during preparation so that the
table has no near-empty rows.

Note
----
Exploratory: excluded from the Holm correction applied to H1-H3 and
reported separately. The asymptotic chi-square test is shown alongside.
"""

from typing import Any
from .runner import run_hypothesis as _run
from .config import get_hypothesis

CONFIG = get_hypothesis("H4")


def run(data: Any, verbose: bool = True, **kwargs) -> Any:
    """Run H4 hypothesis test."""
    return _run("H4", data, verbose=verbose, **kwargs)


def describe() -> str:
    """Return the full hypothesis description."""
    return __doc__
