import os
import sys
import pytest

# Ensure project root is on sys.path before imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from headcount_model.config.loaders import get_default_settings
from headcount_model.config.models import KernelProfile, ScenarioParameters


# Define pytest markers for test categories
def pytest_configure(config):
    """
    Register custom markers to avoid pytest warnings.
    """
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "quick: mark a test as a quick test for CI")
    config.addinivalue_line("markers", "slow: mark a test as a slow test")
    config.addinivalue_line("markers", "config: mark a test as a config test")
    config.addinivalue_line("markers", "engines: mark a test as an engines test")
    config.addinivalue_line("markers", "dynamics: mark a test as a dynamics test")
    config.addinivalue_line("markers", "reporting: mark a test as a reporting test")


@pytest.fixture
def quiet_profile():
    """Kernel profile with no noise and every multiplier fixed at 1."""
    return KernelProfile(
        q1_attrition_factor=(1.0, 1.0),
        autumn_attrition_factor=(1.0, 1.0),
        aggressive_hiring_factor=(1.0, 1.0),
        month_noise=0.0,
    )


@pytest.fixture
def base_scenario():
    return ScenarioParameters(
        scenario_id="base",
        name="Base Plan",
        growth_rate=10,
        attrition_rate=12,
        budget_constraint=5,
        time_horizon=12,
    )


@pytest.fixture
def open_budget_scenario():
    """Budget never caps hiring, so trial paths vary with the seed."""
    return ScenarioParameters(
        scenario_id="open-budget",
        name="Open Budget",
        growth_rate=20,
        attrition_rate=15,
        budget_constraint=60,
        time_horizon=12,
    )


@pytest.fixture
def small_settings():
    """Packaged defaults with trial counts cut down so the suite stays fast."""
    settings = get_default_settings()
    return settings.model_copy(
        update={
            "reduced_sample_count": 40,
            "monte_carlo": settings.monte_carlo.model_copy(update={"sample_count": 120}),
            "sensitivity": settings.sensitivity.model_copy(update={"curve_steps": 3}),
            "execution": settings.execution.model_copy(update={"batch_size": 16}),
        }
    )
