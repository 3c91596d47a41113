"""
Pytest fixtures and synthetic data for testing.
"""

import pytest
import numpy as np
import pandas as pd

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from model_diagnostics.data.schema import FeatureTable


@pytest.fixture
def fold_values():
    """Accuracy over four folds."""
    return [0.8, 0.9, 0.85, 0.82]


@pytest.fixture
def fold_metrics():
    """Per-fold metrics as a cross-validation run reports them."""
    return [
        {'MicroAccuracy': 0.80, 'MacroAccuracy': 0.78, 'LogLoss': 0.45, 'LogLossReduction': 0.30},
        {'MicroAccuracy': 0.90, 'MacroAccuracy': 0.88, 'LogLoss': 0.35, 'LogLossReduction': 0.42},
        {'MicroAccuracy': 0.85, 'MacroAccuracy': 0.83, 'LogLoss': 0.40, 'LogLossReduction': 0.36},
        {'MicroAccuracy': 0.82, 'MacroAccuracy': 0.80, 'LogLoss': 0.43, 'LogLossReduction': 0.33},
    ]


@pytest.fixture
def raw_importance():
    """Raw PFI results with one-hot encoded sub-features."""
    return {
        'Pclass.1': (-0.02, 0.004),
        'Pclass.2': (-0.03, 0.006),
        'Sex.male': (-0.15, 0.010),
        'Sex.female': (-0.05, 0.008),
        'Age': (-0.04, 0.005),
        'Fare': (0.002, 0.003),
        'Parch': (-0.005, 0.002),
    }


@pytest.fixture
def titanic_frame():
    """Small Titanic-like data set."""
    np.random.seed(42)
    n = 60
    pclass = np.random.choice([1, 2, 3], size=n).astype(float)
    fare = 100.0 / pclass + np.random.randn(n) * 2
    age = np.random.uniform(1, 70, size=n)
    age[[3, 17]] = np.nan
    return pd.DataFrame({
        'Survived': np.random.choice([True, False], size=n),
        'Pclass': pclass,
        'Sex': np.random.choice(['male', 'female'], size=n),
        'Age': age,
        'SibSp': np.random.randint(0, 4, size=n).astype(float),
        'Parch': np.random.randint(0, 3, size=n).astype(float),
        'Fare': fare,
    })


@pytest.fixture
def correlated_table():
    """Three columns: y = 2x, z unrelated."""
    return FeatureTable(
        header=('x', 'y', 'z'),
        columns=(
            [1.0, 2.0, 3.0, 4.0],
            [2.0, 4.0, 6.0, 8.0],
            [1.0, -1.0, -1.0, 1.0],
        )
    )


@pytest.fixture
def random_table():
    """Random feature table for property checks."""
    np.random.seed(42)
    values = np.random.randn(100, 5)
    values[:, 1] = values[:, 0] * 0.9 + np.random.randn(100) * 0.1
    values[:, 3] = -values[:, 2] + np.random.randn(100) * 0.5
    return FeatureTable(
        header=('a', 'b', 'c', 'd', 'e'),
        columns=tuple(values[:, i] for i in range(5))
    )
