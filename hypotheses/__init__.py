"""
Listings Hypothesis Testing Module
==================================

Structured hypothesis testing for the used-car listings report.

Each hypothesis (H1-H4) has its own documented module with:
- Research question
- Statistic, null hypothesis and simulation method
- Interpretation notes

Usage:
    from hypotheses import run_all, run_hypothesis, HYPOTHESES

    # Run all hypotheses
    results = run_all(ds)

    # Run single hypothesis
    h1_result = run_hypothesis("H1", ds)

    # Regression sequence
    models = run_model_sequence(ds)
"""

from .config import HYPOTHESES, MODELS, NESTED_SEQUENCE, HypothesisConfig
from .runner import (
    run_hypothesis,
    run_all,
    summarize_results,
    apply_multiplicity_correction,
    format_hypothesis_result,
)
from .models import run_model_sequence

__all__ = [
    "HYPOTHESES",
    "MODELS",
    "NESTED_SEQUENCE",
    "HypothesisConfig",
    "run_hypothesis",
    "run_all",
    "summarize_results",
    "apply_multiplicity_correction",
    "format_hypothesis_result",
    "run_model_sequence",
]
