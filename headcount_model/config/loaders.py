# headcount_model/config/loaders.py
"""
Loading of engine settings and scenario definitions from YAML.

Files may declare ``extends: <other.yaml>`` (resolved relative to the file) and
are deep-merged over their parent. Structure is checked with cerberus before
the data is handed to the pydantic models.
"""

import logging
import re
from copy import deepcopy
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from cerberus import Validator
from pydantic import ValidationError

from headcount_model.config.models import (
    EngineSettings,
    ScenarioParameters,
    validate_scenario,
)
from headcount_model.errors import ConfigLoadError, EmptyInputError

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")

_RANGE = {"type": "list", "minlength": 2, "maxlength": 2, "schema": {"type": "number"}}
_PROFILE = {
    "type": "dict",
    "schema": {
        "q1_attrition_factor": _RANGE,
        "autumn_attrition_factor": _RANGE,
        "aggressive_hiring_factor": _RANGE,
        "month_noise": {"type": "number", "min": 0},
    },
}

SCENARIO_SCHEMA = {
    "scenario_id": {"type": "string"},
    "name": {"type": "string"},
    "description": {"type": "string", "nullable": True},
    "growth_rate": {"type": "number"},
    "attrition_rate": {"type": "number"},
    "budget_constraint": {"type": "number"},
    "time_horizon": {"type": "integer"},
    "seasonal_adjustment": {"type": "boolean"},
    "aggressive_hiring": {"type": "boolean"},
    "start_month": {"type": "integer"},
}

SETTINGS_SCHEMA = {
    "percentile_method": {"type": "string", "allowed": ["nearest_rank", "linear"]},
    "budget_variance_ratio": {"type": "number", "min": 0},
    "reduced_sample_count": {"type": "integer", "min": 1},
    "monte_carlo": {"type": "dict"},
    "kernel_profiles": {
        "type": "dict",
        "schema": {"deterministic": _PROFILE, "monte_carlo": _PROFILE, "stress": _PROFILE},
    },
    "execution": {"type": "dict"},
    "sensitivity": {
        "type": "dict",
        "schema": {
            "parameter_variance": {"type": "number", "min": 0},
            "curve_steps": {"type": "integer", "min": 2},
            "high_impact_percent": {"type": "number"},
            "medium_impact_percent": {"type": "number"},
            "parameters": {"type": "list", "schema": {"type": "dict"}},
        },
    },
    "stress": {
        "type": "dict",
        "schema": {
            "parameter_variance": {"type": "number", "min": 0},
            "conditions": {"type": "list", "schema": {"type": "dict"}},
        },
    },
    "default_scenario": {"type": "dict", "schema": SCENARIO_SCHEMA},
    "presets": {"type": "list", "schema": {"type": "dict"}},
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge override into a copy of base and return the result.
    """
    merged = deepcopy(base)
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = deep_merge(merged[key], val)
        else:
            merged[key] = deepcopy(val)
    return merged


def load_yaml_config(config_path: Union[str, Path]) -> Any:
    """
    Loads configuration data from a YAML file.

    Raises:
        ConfigLoadError: If the file cannot be found or parsed.
    """
    config_path = Path(config_path)
    logger.debug(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e


def _load_with_extends(config_path: Path, seen: Optional[set] = None) -> Dict[str, Any]:
    """Load a YAML mapping, resolving its ``extends`` chain."""
    seen = set() if seen is None else seen
    resolved = config_path.resolve()
    if resolved in seen:
        raise ConfigLoadError(f"Circular extends detected in '{config_path}'")
    seen.add(resolved)

    data = load_yaml_config(config_path) or {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )
    parent = data.pop("extends", None)
    if not parent:
        return data
    parent_path = config_path.parent / parent
    if not parent_path.exists():
        raise ConfigLoadError(f"Parent config '{parent}' not found for {config_path}")
    return deep_merge(_load_with_extends(parent_path, seen), data)


def _check_schema(data: Dict[str, Any], schema: Dict[str, Any], source: str) -> None:
    v = Validator(schema)
    if not v.validate(data):
        raise ConfigLoadError(f"Config validation failed for {source}: {v.errors}")


def load_engine_settings(config_path: Union[str, Path, None] = None) -> EngineSettings:
    """
    Build EngineSettings from the packaged defaults, optionally overridden by a
    user YAML file.
    """
    data = _load_with_extends(DEFAULTS_PATH)
    source = str(DEFAULTS_PATH)
    if config_path is not None:
        data = deep_merge(data, _load_with_extends(Path(config_path)))
        source = str(config_path)

    _check_schema(data, SETTINGS_SCHEMA, source)
    try:
        settings = EngineSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid engine settings in {source}: {e}") from e

    logger.info(
        f"Loaded engine settings from {source}: "
        f"{len(settings.stress.conditions)} stress conditions, "
        f"{len(settings.sensitivity.parameters)} sensitivity parameters"
    )
    return settings


@lru_cache(maxsize=1)
def get_default_settings() -> EngineSettings:
    return load_engine_settings()


def _slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def _build_scenario(raw: Dict[str, Any], base: ScenarioParameters, index: int) -> ScenarioParameters:
    fields = deep_merge(base.model_dump(), raw)
    if "scenario_id" not in raw:
        fields["scenario_id"] = _slugify(raw.get("name", "")) or f"scenario-{index + 1}"
    if fields.get("description") is None:
        fields["description"] = ""
    try:
        scenario = ScenarioParameters.model_validate(fields)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid scenario #{index + 1}: {e}") from e
    return validate_scenario(scenario)


def load_scenarios(
    scenarios_path: Union[str, Path], settings: Optional[EngineSettings] = None
) -> List[ScenarioParameters]:
    """
    Load scenario definitions from YAML.

    The file holds either a list of scenario mappings or a mapping with a
    ``scenarios`` list. Each entry is merged over the default scenario.

    Raises:
        ConfigLoadError: on unreadable or malformed files.
        EmptyInputError: when the file defines no scenarios.
        InvalidScenarioError: when a scenario cannot be simulated.
    """
    settings = settings or get_default_settings()
    path = Path(scenarios_path)
    data = load_yaml_config(path)
    if isinstance(data, dict):
        data.pop("extends", None)
        data = data.get("scenarios")
    if data is None:
        raise EmptyInputError(f"No scenarios defined in {path}")
    if not isinstance(data, list):
        raise ConfigLoadError(f"Expected a list of scenarios in {path}")

    scenarios = []
    for i, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise ConfigLoadError(f"Scenario #{i + 1} in {path} is not a mapping")
        _check_schema(raw, SCENARIO_SCHEMA, f"{path} scenario #{i + 1}")
        scenarios.append(_build_scenario(raw, settings.default_scenario, i))

    if not scenarios:
        raise EmptyInputError(f"No scenarios defined in {path}")
    logger.info(f"Loaded {len(scenarios)} scenarios from {path}")
    return scenarios


def build_preset_scenarios(settings: Optional[EngineSettings] = None) -> List[ScenarioParameters]:
    """Materialise the configured presets on top of the default scenario."""
    settings = settings or get_default_settings()
    base = settings.default_scenario
    return [
        validate_scenario(
            base.with_overrides(
                scenario_id=_slugify(preset.name),
                name=preset.name,
                **preset.overrides(),
            )
        )
        for preset in settings.presets
    ]


__all__ = [
    "DEFAULTS_PATH",
    "deep_merge",
    "load_yaml_config",
    "load_engine_settings",
    "get_default_settings",
    "load_scenarios",
    "build_preset_scenarios",
]
