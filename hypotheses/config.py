"""
Hypothesis Configuration
========================

Declarative definitions for the listings report: resampling hypothesis
tests (H1-H4) and the regression model sequence (M1-M5).

This module centralizes specifications to:
1. Keep the statistical design in one place
2. Enable batch processing via the runners
3. Keep hypothesis modules free of repeated setup code

Each hypothesis is a HypothesisConfig dict with:
- name: Short descriptive name
- description: Research question and test design
- statistic: "mean", "proportion", "diff-in-means" or "chi-square"
- response / explanatory: Columns under test
- success: Success category (proportion only)
- order: (first, second) groups (diff-in-means only)
- null: "point" or "independence"
- value: Hypothesized parameter (point nulls)
- direction: "right", "left" or "two-sided"
- mode: Optional generation mode override
- reps: Number of simulated replicates
- exploratory: Excluded from multiplicity correction when True
"""

from typing import Any, Dict, List


HypothesisConfig = Dict[str, Any]
ModelConfig = Dict[str, Any]


HYPOTHESES: Dict[str, HypothesisConfig] = {
    # =========================================================================
    # H1: Mean listing price
    # =========================================================================
    "H1": {
        "name": "Mean price vs 15 lakh",
        "description": """
        Is the mean listing price different from INR 1,500,000 (15 lakh)?

        Null: mu = 1,500,000
        Statistic: mean(price)
        Null distribution: bootstrap resamples of the listings (not shifted);
        the observed deviation from 15 lakh is compared against the spread
        of the bootstrap means around their own center.
        """,
        "statistic": "mean",
        "response": "price",
        "null": "point",
        "value": 1_500_000,
        "direction": "two-sided",
        "reps": 1000,
        "exploratory": False,
    },

    # =========================================================================
    # H2: Share of manual transmissions
    # =========================================================================
    "H2": {
        "name": "Manual share vs 50%",
        "description": """
        Are half of the listed cars manual?

        Null: p(transmission == Manual) = 0.5
        Statistic: proportion of Manual listings
        Null distribution: draws of Manual/other with probability 0.5.
        """,
        "statistic": "proportion",
        "response": "transmission",
        "success": "Manual",
        "null": "point",
        "value": 0.5,
        "direction": "two-sided",
        "reps": 1000,
        "exploratory": False,
    },

    # =========================================================================
    # H3: Price difference Automatic - Manual
    # =========================================================================
    "H3": {
        "name": "Automatic vs Manual price",
        "description": """
        Do automatic cars list at higher prices than manual cars?

        Null: price is independent of transmission
        Statistic: mean(price | Automatic) - mean(price | Manual)
        Null distribution: permutations of the transmission labels.
        Alternative: right-tailed (automatic more expensive).
        """,
        "statistic": "diff-in-means",
        "response": "price",
        "explanatory": "transmission",
        "order": ("Automatic", "Manual"),
        "null": "independence",
        "direction": "right",
        "reps": 1000,
        "exploratory": False,
    },

    # =========================================================================
    # H4: Fuel type x transmission association
    # =========================================================================
    "H4": {
        "name": "Fuel type x transmission",
        "description": """
        Is fuel type associated with transmission type?

        Null: fuel_type is independent of transmission
        Statistic: Pearson chi-square of the fuel_type x transmission table
        Null distribution: permutations of the transmission labels.
        Rare fuel types (CNG, LPG, Electric, ...) are pooled as "Other"
        during cleaning so no expected count is close to zero.
        """,
        "statistic": "chi-square",
        "response": "fuel_type",
        "explanatory": "transmission",
        "null": "independence",
        "direction": "right",
        "reps": 1000,
        "exploratory": True,
    },
}


MODELS: Dict[str, ModelConfig] = {
    "M1": {
        "name": "Age only",
        "predictors": ["age"],
    },
    "M2": {
        "name": "Age + usage",
        "predictors": ["age", "kilometer"],
    },
    "M3": {
        "name": "Age + usage + size",
        "predictors": ["age", "kilometer", "engine", "fuel_tank_capacity"],
    },
    "M4": {
        "name": "Full (with categoricals)",
        "predictors": [
            "age", "kilometer", "engine", "fuel_tank_capacity",
            "C(fuel_type)", "C(transmission)", "C(drivetrain)", "C(sitting_capacity)",
        ],
    },
    "M5": {
        "name": "Full, log price",
        "predictors": [
            "age", "kilometer", "engine", "fuel_tank_capacity",
            "C(fuel_type)", "C(transmission)", "C(drivetrain)", "C(sitting_capacity)",
        ],
        "transform": "log",
    },
}

# Nested price-scale models compared with ANOVA F-tests
NESTED_SEQUENCE = ["M1", "M2", "M3", "M4"]

# Rare-level pooling applied when preparing data for the report
COLLAPSE_THRESHOLDS = {"fuel_type": 10, "sitting_capacity": 10}


def get_hypothesis(hypothesis_id: str) -> HypothesisConfig:
    """Get configuration for a specific hypothesis."""
    if hypothesis_id not in HYPOTHESES:
        raise ValueError(f"Unknown hypothesis: {hypothesis_id}. Available: {list(HYPOTHESES.keys())}")
    return HYPOTHESES[hypothesis_id]


def list_hypotheses() -> List[str]:
    """List all available hypothesis IDs."""
    return list(HYPOTHESES.keys())


def get_model_spec(model_id: str) -> ModelConfig:
    """Get configuration for a specific regression model."""
    if model_id not in MODELS:
        raise ValueError(f"Unknown model: {model_id}. Available: {list(MODELS.keys())}")
    return MODELS[model_id]
