"""
Shared test fixtures for pricelib tests.
"""

import os
import sys

import pytest
import pathlib

# Add src to path for imports
sys.path.insert(0, os.path.join(pathlib.Path(__file__).parent, '..', 'src'))

from pricelib import FlatForward, index_manager, saved_settings  # noqa: E402
from pricelib.enums import DayCountConvention  # noqa: E402
from opendate import Date  # noqa: E402


@pytest.fixture(autouse=True)
def restore_settings():
    """Give every test its own evaluation date and empty fixing histories."""
    with saved_settings() as s:
        yield s
    index_manager.clear_histories()


@pytest.fixture
def cms_ref_date():
    """Evaluation date of the CMS spread tests (a Friday)."""
    return Date(2018, 2, 23)


@pytest.fixture
def flat_curve_2pct(cms_ref_date):
    """2% continuously compounded ACT/365F curve."""
    return FlatForward(cms_ref_date, 0.02, DayCountConvention.ACT_365F)


@pytest.fixture
def hw_names():
    """Names of the ten-name Hull-White basket."""
    return [f'Name{i}' for i in range(10)]


@pytest.fixture
def hw_spreads():
    """
    Nth-to-default spreads (bp) for 10 names, hazard 1%, recovery 40%,
    5Y, for pairwise correlations 0, 0.3 and 0.6.
    """
    return {
        1: (603, 440, 293),
        2: (98, 139, 137),
        3: (12, 53, 79),
        4: (1, 21, 49),
        5: (0, 8, 31),
        6: (0, 3, 19),
        7: (0, 1, 12),
        8: (0, 0, 7),
        9: (0, 0, 3),
        10: (0, 0, 1),
    }
