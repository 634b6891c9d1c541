"""Test configuration for the record statistics toolbox."""

from pathlib import Path
import sys

import matplotlib
import pytest


matplotlib.use("Agg")

# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def sales_records() -> list[dict]:
    """Small sales table with a missing amount and an unparseable one."""
    return [
        {"region": "north", "month": "Jan", "amount": 120.0, "units": 3},
        {"region": "south", "month": "Jan", "amount": 80.0, "units": 2},
        {"region": "north", "month": "Feb", "amount": 150.0, "units": 4},
        {"region": "east", "month": "Mar", "amount": "n/a", "units": 1},
        {"region": "south", "month": "Mar", "units": 5},
        {"region": "north", "month": "Mar", "amount": 30.0, "units": 1},
    ]


@pytest.fixture
def sales(sales_records):
    """Sales records wrapped in a RecordSet."""
    from recstats import RecordSet

    return RecordSet(sales_records)


@pytest.fixture
def weather_records() -> list[dict]:
    """Categorical training data for the Naive Bayes classifier."""
    return [
        {"outlook": "sunny", "temp": "hot", "play": "no"},
        {"outlook": "sunny", "temp": "mild", "play": "no"},
        {"outlook": "rainy", "temp": "mild", "play": "yes"},
        {"outlook": "overcast", "temp": "hot", "play": "yes"},
        {"outlook": "overcast", "temp": "mild", "play": "yes"},
    ]


@pytest.fixture(autouse=True)
def _close_figures():
    """Release matplotlib figures created by a test."""
    yield
    import matplotlib.pyplot as plt

    plt.close("all")
