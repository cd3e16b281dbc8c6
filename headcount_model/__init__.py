# headcount_model/__init__.py
"""
Stochastic workforce headcount projection.

Public entry points for Monte Carlo, sensitivity and stress analyses plus the
deterministic projection. Results are plain frozen dataclasses; see
``headcount_model.reporting.tables`` for DataFrame summaries.
"""

from .errors import (
    ConfigLoadError,
    EmptyInputError,
    HeadcountModelError,
    InvalidScenarioError,
    SimulationCancelledError,
    SimulationTimeoutError,
    UnknownStressConditionError,
)
from .config import (
    EngineSettings,
    ScenarioParameters,
    StressCondition,
    build_preset_scenarios,
    get_default_settings,
    load_engine_settings,
    load_scenarios,
)
from .dynamics import project_scenario, project_scenarios
from .engines import (
    CancellationToken,
    aggregate,
    analyze,
    run_monte_carlo,
    run_sensitivity,
    stress_test,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigLoadError",
    "EmptyInputError",
    "HeadcountModelError",
    "InvalidScenarioError",
    "SimulationCancelledError",
    "SimulationTimeoutError",
    "UnknownStressConditionError",
    "EngineSettings",
    "ScenarioParameters",
    "StressCondition",
    "build_preset_scenarios",
    "get_default_settings",
    "load_engine_settings",
    "load_scenarios",
    "project_scenario",
    "project_scenarios",
    "CancellationToken",
    "aggregate",
    "analyze",
    "run_monte_carlo",
    "run_sensitivity",
    "stress_test",
]
