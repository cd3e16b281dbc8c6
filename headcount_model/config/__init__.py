from .models import (
    EngineSettings,
    JitterSettings,
    KernelProfile,
    ParameterBound,
    ScenarioParameters,
    StressCondition,
    validate_headcount,
    validate_scenario,
)
from .loaders import (
    build_preset_scenarios,
    get_default_settings,
    load_engine_settings,
    load_scenarios,
)

__all__ = [
    "EngineSettings",
    "JitterSettings",
    "KernelProfile",
    "ParameterBound",
    "ScenarioParameters",
    "StressCondition",
    "validate_headcount",
    "validate_scenario",
    "build_preset_scenarios",
    "get_default_settings",
    "load_engine_settings",
    "load_scenarios",
]
