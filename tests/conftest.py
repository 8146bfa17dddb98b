import os
import sys
from datetime import date

import pytest

# Ensure project root is on sys.path before imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from cao_model.wage_scales.models import WageRate, WageScaleDefinition  # noqa: E402
from cao_model.wage_scales.table import WageScaleTable  # noqa: E402

# Fixed evaluation date for timeline and projection tests
NOW = date(2024, 10, 1)

PM_CATEGORY = "Pedagogisch medewerker"
LEAD_CATEGORY = "Leidinggevende"


# Define pytest markers for test categories
def pytest_configure(config):
    """
    Register custom markers to avoid pytest warnings.
    """
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "config: mark a test as a config test")
    config.addinivalue_line("markers", "resolution: mark a test as a wage resolution test")
    config.addinivalue_line("markers", "timeline: mark a test as a timeline test")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def scale6():
    return WageScaleDefinition(
        scale_number=6,
        scale_name="Schaal 6",
        scale_category=PM_CATEGORY,
        min_step=10,
        max_step=23,
    )


@pytest.fixture
def scale7():
    return WageScaleDefinition(
        scale_number=7,
        scale_name="Schaal 7",
        scale_category=LEAD_CATEGORY,
        min_step=1,
        max_step=5,
    )


@pytest.fixture
def scenario_table(scale6):
    """Scale 6 steps 10 and 11, one rate each on 2024-01-01."""
    rates = [
        WageRate(6, 10, date(2024, 1, 1), monthly_wage=2400.0),
        WageRate(6, 11, date(2024, 1, 1), monthly_wage=2500.0),
    ]
    return WageScaleTable({6: scale6}, rates, version="scenario")


@pytest.fixture
def history_table(scale6, scale7):
    """Two scales; scale 6 has a mid-year raise and a raise dated 2025-01-01."""
    rates = [
        WageRate(6, 10, date(2024, 1, 1), monthly_wage=2400.0, hourly_wage=15.38),
        WageRate(6, 10, date(2024, 7, 1), monthly_wage=2448.0),
        WageRate(6, 10, date(2025, 1, 1), monthly_wage=2497.0),
        WageRate(6, 11, date(2024, 1, 1), monthly_wage=2500.0, hourly_wage=16.03),
        WageRate(6, 11, date(2024, 7, 1), monthly_wage=2550.0),
        WageRate(6, 11, date(2025, 1, 1), monthly_wage=2601.0),
        WageRate(7, 1, date(2024, 1, 1), monthly_wage=2520.0),
        WageRate(7, 2, date(2024, 1, 1), monthly_wage=2650.0),
    ]
    return WageScaleTable({6: scale6, 7: scale7}, rates, version="history")


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch):
    monkeypatch.delenv("CAO_MODEL_SETTINGS", raising=False)
    monkeypatch.delenv("CAO_MODEL_WAGE_TABLE", raising=False)
