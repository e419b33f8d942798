import sys
from pathlib import Path

import pandas as pd
import pytest

# Ensure the repository root (which contains the `densitygrid` package) is importable in tests.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from densitygrid.common.geo import GeoBounds  # noqa: E402


@pytest.fixture
def square_bounds():
    return GeoBounds(south=0.0, north=10.0, west=0.0, east=10.0)


@pytest.fixture
def sample_frame():
    return pd.DataFrame(
        [
            {
                "cadastral_ref_building": "4127601TG3442H",
                "latitude": 37.39,
                "longitude": -5.98,
                "total_apartments": 12,
                "current_use": "Residential",
                "beginning_year": 1975,
                "municipality": "Sevilla",
            },
            {
                "cadastral_ref_building": "4127602TG3442H",
                "latitude": 37.391,
                "longitude": -5.981,
                "total_apartments": None,
                "current_use": "commercial",
                "beginning_year": 1750,
                "municipality": "Sevilla",
            },
            {
                "cadastral_ref_building": "1111111VK4711A",
                "latitude": 40.42,
                "longitude": -3.70,
                "total_apartments": 30,
                "current_use": "residential",
                "beginning_year": 2001,
                "municipality": "Madrid",
            },
            {
                "cadastral_ref_building": "9999999XX0000Z",
                "latitude": None,
                "longitude": -5.99,
                "total_apartments": 4,
                "current_use": "residential",
                "beginning_year": 1990,
                "municipality": "Sevilla",
            },
        ]
    )
