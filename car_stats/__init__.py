"""
car_stats
=========

Statistics toolkit for the vehicle-listings report.

Modules:
- prepare: CSV loading, cleaning, AnalysisDataset
- specs / calculate / generate / null_dist: resampling-based hypothesis tests
- theory: closed-form counterparts of the resampling tests
- ols / diagnostics: regression model sequence and assumption checks
- plotting: EDA, diagnostic and null-distribution figures (import separately)

Usage:
    from car_stats import prepare_listings, create_hypothesis, create_statistic
    from car_stats import observed_statistic, build_null_distribution, get_p_value

    ds = prepare_listings("data/car_details.csv")
    hyp = create_hypothesis("price", "point", value=1_500_000)
    stat = create_statistic("mean", "price")
    obs = observed_statistic(ds["data"], hyp, stat)
    null = build_null_distribution(ds["data"], hyp, stat, reps=1000, seed=42)
    get_p_value(null, obs, "two-sided")
"""

from .prepare import (
    REFERENCE_YEAR,
    NUMERIC_VARS,
    CATEGORICAL_VARS,
    ANALYSIS_COLUMNS,
    AnalysisDataset,
    create_analysis_dataset,
    validate_dataset,
    get_n_listings,
    describe_dataset,
    subset_dataset,
    load_listings,
    standardize_columns,
    parse_engine,
    coerce_numeric,
    add_age,
    cast_categorical,
    collapse_rare_categories,
    drop_incomplete,
    clean_listings,
    prepare_listings,
    summarize_numeric,
    category_counts,
    group_summary,
    missingness_report,
)
from .specs import (
    InvalidInput,
    MEAN,
    PROPORTION,
    DIFF_IN_MEANS,
    CHI_SQUARE,
    STATISTIC_KINDS,
    HypothesisSpec,
    StatisticSpec,
    create_hypothesis,
    create_statistic,
    describe_statistic,
    validate_against_data,
)
from .calculate import (
    calculate_statistic,
    observed_statistic,
    contingency_table,
    chi_square_from_table,
)
from .generate import (
    GENERATION_MODES,
    replicate_generators,
    generate_bootstrap,
    generate_permutation,
    generate_draw,
    generate_null_data,
    default_mode,
)
from .null_dist import (
    DEFAULT_REPS,
    NullDistribution,
    ResamplingCancelled,
    create_null_distribution,
    summarize_null_distribution,
    build_null_distribution,
    build_bootstrap_distribution,
    normalize_direction,
    get_p_value,
    get_confidence_interval,
)
from .theory import theoretical_test
from .ols import (
    OLSResult,
    create_ols_result,
    summarize_ols_result,
    apply_transform,
    build_formula,
    fit_ols,
    robust_coefficients,
    fit_model_sequence,
    compare_models,
    anova_comparison,
)
from .diagnostics import (
    breusch_pagan,
    residual_normality,
    variance_inflation,
    residual_diagnostics,
    summarize_diagnostics,
)

__all__ = [
    # prepare
    "REFERENCE_YEAR",
    "NUMERIC_VARS",
    "CATEGORICAL_VARS",
    "ANALYSIS_COLUMNS",
    "AnalysisDataset",
    "create_analysis_dataset",
    "validate_dataset",
    "get_n_listings",
    "describe_dataset",
    "subset_dataset",
    "load_listings",
    "standardize_columns",
    "parse_engine",
    "coerce_numeric",
    "add_age",
    "cast_categorical",
    "collapse_rare_categories",
    "drop_incomplete",
    "clean_listings",
    "prepare_listings",
    "summarize_numeric",
    "category_counts",
    "group_summary",
    "missingness_report",
    # specs
    "InvalidInput",
    "MEAN",
    "PROPORTION",
    "DIFF_IN_MEANS",
    "CHI_SQUARE",
    "STATISTIC_KINDS",
    "HypothesisSpec",
    "StatisticSpec",
    "create_hypothesis",
    "create_statistic",
    "describe_statistic",
    "validate_against_data",
    # calculate
    "calculate_statistic",
    "observed_statistic",
    "contingency_table",
    "chi_square_from_table",
    # generate
    "GENERATION_MODES",
    "replicate_generators",
    "generate_bootstrap",
    "generate_permutation",
    "generate_draw",
    "generate_null_data",
    "default_mode",
    # null_dist
    "DEFAULT_REPS",
    "NullDistribution",
    "ResamplingCancelled",
    "create_null_distribution",
    "summarize_null_distribution",
    "build_null_distribution",
    "build_bootstrap_distribution",
    "normalize_direction",
    "get_p_value",
    "get_confidence_interval",
    # theory
    "theoretical_test",
    # ols
    "OLSResult",
    "create_ols_result",
    "summarize_ols_result",
    "apply_transform",
    "build_formula",
    "fit_ols",
    "robust_coefficients",
    "fit_model_sequence",
    "compare_models",
    "anova_comparison",
    # diagnostics
    "breusch_pagan",
    "residual_normality",
    "variance_inflation",
    "residual_diagnostics",
    "summarize_diagnostics",
]
