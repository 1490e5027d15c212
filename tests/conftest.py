"""Shared fixtures: synthetic records shaped like the Pima diabetes table."""

import numpy as np
import pandas as pd
import pytest


def make_records(n=400, seed=0, zero_rows=0):
    """Generate Pima-like records with a known logistic outcome."""
    rng = np.random.default_rng(seed)

    glucose = np.clip(rng.normal(120, 30, n), 50, 200).round()
    bmi = np.clip(rng.normal(32, 7, n), 18, 60).round(1)
    pedigree = rng.gamma(2.0, 0.25, n).round(3)
    pressure = np.clip(rng.normal(72, 12, n), 40, 120).round()
    skin = np.clip(0.9 * bmi + rng.normal(0, 2, n), 7, 60).round()
    insulin = np.clip(1.2 * glucose + rng.normal(0, 15, n), 15, 400).round()

    logit = -8.0 + 0.04 * glucose + 0.08 * bmi + 0.8 * pedigree - 0.005 * pressure
    outcome = rng.binomial(1, 1 / (1 + np.exp(-logit)))

    df = pd.DataFrame(
        {
            "Pregnancies": rng.poisson(3, n),
            "Glucose": glucose,
            "BloodPressure": pressure,
            "SkinThickness": skin,
            "Insulin": insulin,
            "BMI": bmi,
            "DiabetesPedigreeFunction": pedigree,
            "Age": 21 + rng.poisson(12, n),
            "Outcome": outcome,
        }
    )

    if zero_rows:
        columns = ["Glucose", "BloodPressure", "SkinThickness", "Insulin", "BMI"]
        rows = rng.choice(n, size=zero_rows, replace=False)
        for i, row in enumerate(rows):
            df.loc[row, columns[i % len(columns)]] = 0

    return df


@pytest.fixture(scope="session")
def base_records():
    """Clean synthetic records shared across the session; copy before mutating."""
    return make_records()


@pytest.fixture
def records(base_records):
    """Clean synthetic records."""
    return base_records.copy()


@pytest.fixture
def raw_records():
    """Synthetic records with zero sentinels scattered across measurement columns."""
    return make_records(zero_rows=40)


@pytest.fixture(scope="session")
def scenario_records():
    """Larger clean synthetic table for end-to-end agreement checks."""
    return make_records(n=2000, seed=7)
