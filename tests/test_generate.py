"""
Tests for the null-data generators.
"""
import numpy as np
import pandas as pd
import pytest

from car_stats import (
    InvalidInput,
    build_null_distribution,
    create_hypothesis,
    create_statistic,
    default_mode,
    generate_bootstrap,
    generate_draw,
    generate_null_data,
    generate_permutation,
    replicate_generators,
)


def test_permutation_preserves_multiset_and_other_columns(listings):
    rng = np.random.default_rng(1)
    permuted = generate_permutation(listings, "transmission", rng)

    assert sorted(permuted["transmission"]) == sorted(listings["transmission"])
    for col in listings.columns.drop("transmission"):
        pd.testing.assert_series_equal(permuted[col], listings[col])
    # pairing changed
    assert listings["transmission"].tolist() != permuted["transmission"].tolist()


def test_bootstrap_keeps_row_count_and_source_values(listings):
    rng = np.random.default_rng(2)
    boot = generate_bootstrap(listings, rng)

    assert len(boot) == len(listings)
    assert set(boot["price"]).issubset(set(listings["price"]))
    assert set(boot["fuel_type"]).issubset(set(listings["fuel_type"]))


def test_bootstrap_rejects_empty():
    with pytest.raises(InvalidInput):
        generate_bootstrap(pd.DataFrame({"price": []}), np.random.default_rng(0))


def test_draw_uses_success_probability(listings):
    drawn = generate_draw(listings, "transmission", "Manual", 1.0, np.random.default_rng(3))
    assert (drawn["transmission"] == "Manual").all()
    drawn = generate_draw(listings, "transmission", "Manual", 0.0, np.random.default_rng(3))
    assert not (drawn["transmission"] == "Manual").any()


def test_replicate_generators_are_reproducible():
    first = [g.integers(0, 100, size=5).tolist() for g in replicate_generators(11, 3)]
    second = [g.integers(0, 100, size=5).tolist() for g in replicate_generators(11, 3)]
    assert first == second
    assert first[0] != first[1]


def test_default_modes():
    point = create_hypothesis("price", "point", value=1)
    share = create_hypothesis("transmission", "point", value=0.5)
    indep = create_hypothesis("price", "independence", explanatory="transmission")

    assert default_mode(point, create_statistic("mean", "price")) == "bootstrap"
    assert default_mode(share, create_statistic("proportion", "transmission", success="Manual")) == "draw"
    assert default_mode(
        indep, create_statistic("diff-in-means", "price", "transmission", order=("Automatic", "Manual"))
    ) == "permute"


def test_generate_null_data_rejects_mismatched_mode(listings):
    point = create_hypothesis("price", "point", value=1)
    with pytest.raises(InvalidInput):
        generate_null_data(listings, point, "permute", np.random.default_rng(0))
    with pytest.raises(InvalidInput):
        generate_null_data(listings, point, "jackknife", np.random.default_rng(0))


def test_draw_keeps_integer_success_category():
    seats = pd.DataFrame({"seats": [5] * 60 + [7] * 40})
    drawn = generate_draw(seats, "seats", 5, 1.0, np.random.default_rng(4))
    assert (drawn["seats"] == 5).all()
    drawn = generate_draw(seats, "seats", 5, 0.0, np.random.default_rng(4))
    assert not (drawn["seats"] == 5).any()


def test_draw_null_on_integer_column():
    seats = pd.DataFrame({"seats": [5] * 60 + [7] * 40})
    hyp = create_hypothesis("seats", "point", value=0.6)
    stat = create_statistic("proportion", "seats", success=5)

    dist = build_null_distribution(seats, hyp, stat, reps=200, seed=1)

    assert dist["mode"] == "draw"
    assert 0.5 < dist["values"].mean() < 0.7
