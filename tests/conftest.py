"""
Shared fixtures: a synthetic cleaned listings frame and a raw CSV on disk.
"""
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from car_stats import create_analysis_dataset


@pytest.fixture
def listings():
    """300 cleaned listings with a price that depends on age, usage and transmission."""
    rng = np.random.default_rng(7)
    n = 300
    age = rng.integers(1, 15, size=n).astype(float)
    kilometer = age * 12_000 + rng.normal(0, 8_000, size=n).clip(-50_000, 50_000) + 60_000
    engine = rng.choice([998.0, 1197.0, 1498.0, 1995.0, 2494.0], size=n)
    fuel_tank = 30 + engine / 50 + rng.normal(0, 3, size=n)
    transmission = rng.choice(["Automatic", "Manual"], size=n, p=[0.4, 0.6])
    fuel_type = rng.choice(["Petrol", "Diesel", "CNG"], size=n, p=[0.5, 0.4, 0.1])
    drivetrain = rng.choice(["FWD", "RWD", "AWD"], size=n, p=[0.7, 0.2, 0.1])
    seats = rng.choice(["5", "7"], size=n, p=[0.8, 0.2])

    log_price = (
        13.5
        - 0.08 * age
        - 0.000002 * kilometer
        + 0.0004 * engine
        + 0.25 * (transmission == "Automatic")
        + rng.normal(0, 0.25, size=n)
    )
    return pd.DataFrame({
        "price": np.round(np.exp(log_price), -3),
        "year": 2023 - age,
        "age": age,
        "kilometer": kilometer,
        "fuel_type": fuel_type,
        "transmission": transmission,
        "engine": engine,
        "drivetrain": drivetrain,
        "sitting_capacity": seats,
        "fuel_tank_capacity": fuel_tank,
    })


@pytest.fixture
def listings_ds(listings):
    return create_analysis_dataset(listings, source="synthetic")


@pytest.fixture
def raw_csv(tmp_path):
    """Raw export with original headers, unit strings and one incomplete row."""
    frame = pd.DataFrame({
        "Make": ["Honda", "Maruti Suzuki", "Hyundai", "Toyota", "Tata", "Mahindra"],
        "Price": [505000, 450000, 220000, 799000, 1950000, 675000],
        "Year": [2017, 2014, 2011, 2019, 2018, 2016],
        "Kilometer": [87150, 75000, 67000, 37500, 69000, 73315],
        "Fuel Type": ["Petrol", "Diesel", "Petrol", "Petrol", "Diesel", "Diesel"],
        "Transmission": ["Manual", "Manual", "Manual", "Automatic", "Automatic", "Manual"],
        "Engine": ["1198 cc", "1248 cc", "1197 cc", "1197 cc", "2393 cc", None],
        "Drivetrain": ["FWD", "FWD", "FWD", "FWD", "RWD", "RWD"],
        "Seating Capacity": [5.0, 5.0, 5.0, 5.0, 7.0, 7.0],
        "Fuel Tank Capacity": [35.0, 42.0, 35.0, 37.0, 55.0, 60.0],
    })
    path = tmp_path / "car_details.csv"
    frame.to_csv(path, index=False)
    return path
