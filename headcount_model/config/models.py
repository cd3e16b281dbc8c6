# headcount_model/config/models.py
"""
Pydantic models for scenario definitions and engine tunables.

Scenario parameters are immutable inputs created by the caller. Engine settings
are normally loaded from ``defaults.yaml`` (see ``loaders.py``); the stress
catalog and parameter bounds live there as data, not code.
"""

import logging
import math
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from headcount_model.errors import InvalidScenarioError, UnknownStressConditionError

logger = logging.getLogger(__name__)

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

TunableParameter = Literal["growth_rate", "attrition_rate", "budget_constraint", "time_horizon"]
Severity = Literal["moderate", "severe", "extreme"]


# --- Scenario Models ---


class ScenarioParameters(BaseModel):
    """One planner-defined growth/attrition scenario. Never mutated by the engine."""

    model_config = ConfigDict(frozen=True)

    scenario_id: str = Field("scenario", description="Stable identifier used in results")
    name: str = Field("", description="Display name")
    description: str = ""
    growth_rate: float = Field(10.0, description="Annual growth target in percent (signed)")
    attrition_rate: float = Field(12.0, description="Expected annual attrition in percent")
    budget_constraint: float = Field(5.0, description="Max new hires allowed per quarter")
    time_horizon: int = Field(12, description="Months to simulate")
    seasonal_adjustment: bool = True
    aggressive_hiring: bool = False
    start_month: int = Field(
        0, description="Calendar month (0 = January) of the first simulated month"
    )

    @property
    def label(self) -> str:
        return self.name or self.scenario_id

    def with_overrides(self, **overrides) -> "ScenarioParameters":
        """Return a copy with some fields replaced; the original stays untouched."""
        return self.model_copy(update=overrides)


def validate_scenario(scenario: ScenarioParameters) -> ScenarioParameters:
    """
    Check that a scenario can be simulated.

    Raises:
        InvalidScenarioError: on a horizon below one month, a negative budget,
            a negative attrition rate, a non-finite rate or an invalid start month.
    """
    sid = scenario.scenario_id
    for field_name in ("growth_rate", "attrition_rate", "budget_constraint"):
        value = getattr(scenario, field_name)
        if not math.isfinite(value):
            raise InvalidScenarioError(f"{field_name} must be finite, got {value}", sid)
    if scenario.time_horizon < 1:
        raise InvalidScenarioError(
            f"time_horizon must be >= 1 month, got {scenario.time_horizon}", sid
        )
    if scenario.budget_constraint < 0:
        raise InvalidScenarioError(
            f"budget_constraint must be >= 0, got {scenario.budget_constraint}", sid
        )
    if scenario.attrition_rate < 0:
        raise InvalidScenarioError(
            f"attrition_rate must be >= 0, got {scenario.attrition_rate}", sid
        )
    if not 0 <= scenario.start_month <= 11:
        raise InvalidScenarioError(
            f"start_month must be within 0-11, got {scenario.start_month}", sid
        )
    return scenario


def validate_headcount(current_headcount: int) -> int:
    """Check the starting headcount is a non-negative whole number."""
    if (
        current_headcount is None
        or not math.isfinite(current_headcount)
        or current_headcount < 0
    ):
        raise InvalidScenarioError(f"current_headcount must be >= 0, got {current_headcount}")
    if current_headcount != int(current_headcount):
        raise InvalidScenarioError(
            f"current_headcount must be a whole number, got {current_headcount}"
        )
    return int(current_headcount)


class ScenarioPreset(BaseModel):
    """Named set of overrides applied on top of the default scenario."""

    name: str
    growth_rate: Optional[float] = None
    attrition_rate: Optional[float] = None
    budget_constraint: Optional[float] = None
    time_horizon: Optional[int] = None
    seasonal_adjustment: Optional[bool] = None
    aggressive_hiring: Optional[bool] = None

    def overrides(self) -> Dict[str, object]:
        return {
            k: v
            for k, v in self.model_dump(exclude={"name"}).items()
            if v is not None
        }


# --- Kernel / Jitter Models ---


class KernelProfile(BaseModel):
    """
    Multipliers used by the projection kernel.

    Each factor is a [low, high] range; the kernel draws uniformly from it on
    every use. A degenerate range (low == high) is a fixed multiplier.
    """

    q1_attrition_factor: Tuple[float, float] = (1.2, 1.4)
    autumn_attrition_factor: Tuple[float, float] = (1.1, 1.3)
    aggressive_hiring_factor: Tuple[float, float] = (1.2, 1.4)
    month_noise: float = Field(
        0.05, ge=0.0, description="Half-width of the per-month noise band (0.05 = +/-5%)"
    )

    @model_validator(mode='after')
    def check_ranges(self) -> 'KernelProfile':
        for name in ("q1_attrition_factor", "autumn_attrition_factor", "aggressive_hiring_factor"):
            low, high = getattr(self, name)
            if low < 0 or high < 0:
                raise ValueError(f"{name} values cannot be negative")
            if low > high:
                raise ValueError(f"{name} min cannot be greater than max")
        return self


class KernelProfiles(BaseModel):
    deterministic: KernelProfile = KernelProfile(
        q1_attrition_factor=(1.3, 1.3),
        autumn_attrition_factor=(1.2, 1.2),
        aggressive_hiring_factor=(1.3, 1.3),
        month_noise=0.0,
    )
    monte_carlo: KernelProfile = KernelProfile()
    stress: KernelProfile = KernelProfile(
        q1_attrition_factor=(1.25, 1.25),
        autumn_attrition_factor=(1.15, 1.15),
        aggressive_hiring_factor=(1.25, 1.25),
    )


class JitterSettings(BaseModel):
    """Per-trial parameter jitter, expressed as fractional half-widths."""

    model_config = ConfigDict(frozen=True)

    growth_spread: float = Field(0.0, ge=0.0)
    attrition_spread: float = Field(0.0, ge=0.0)
    budget_spread: float = Field(0.0, ge=0.0)

    @classmethod
    def from_variance(cls, parameter_variance: float, budget_variance_ratio: float = 0.5) -> 'JitterSettings':
        return cls(
            growth_spread=parameter_variance,
            attrition_spread=parameter_variance,
            budget_spread=parameter_variance * budget_variance_ratio,
        )

    @classmethod
    def none(cls) -> 'JitterSettings':
        return cls()


# --- Analysis Settings ---


class MonteCarloSettings(BaseModel):
    sample_count: int = Field(1000, ge=1)
    parameter_variance: float = Field(0.20, ge=0.0)
    histogram_buckets: int = Field(10, ge=1)
    target_headcount_ratio: float = Field(
        1.15, gt=0.0, description="Default target = round(current_headcount * ratio)"
    )


class ParameterBound(BaseModel):
    """Sweep bounds for one tunable scenario parameter."""

    key: TunableParameter
    label: str
    unit: str = ""
    min: float
    max: float
    sweep_fraction: float = Field(
        0.3, ge=0.0, description="Fraction of (max - min) swept either side of the base value"
    )

    @model_validator(mode='after')
    def check_bounds(self) -> 'ParameterBound':
        if self.min > self.max:
            raise ValueError(f"Bound for {self.key}: min cannot be greater than max")
        return self

    @property
    def span(self) -> float:
        return self.max - self.min


class SensitivitySettings(BaseModel):
    parameter_variance: float = Field(0.15, ge=0.0)
    curve_steps: int = Field(7, ge=2)
    high_impact_percent: float = 15.0
    medium_impact_percent: float = 8.0
    parameters: List[ParameterBound] = Field(default_factory=list)


class StressCondition(BaseModel):
    """A named bundle of multiplicative shocks. Immutable catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    growth_rate_multiplier: float = Field(1.0, ge=0.0)
    attrition_rate_multiplier: float = Field(1.0, ge=0.0)
    budget_multiplier: float = Field(1.0, ge=0.0)
    hiring_efficiency_multiplier: float = Field(
        1.0, ge=0.0, description="Fraction of intended hires that actually land"
    )
    severity: Severity = "moderate"

    @classmethod
    def identity(cls) -> 'StressCondition':
        return cls(id="baseline", name="Baseline")


class StressSettings(BaseModel):
    parameter_variance: float = Field(0.075, ge=0.0)
    conditions: List[StressCondition] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_unique_ids(self) -> 'StressSettings':
        ids = [c.id for c in self.conditions]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate stress condition ids in catalog: {ids}")
        return self

    def get_condition(self, condition_id: str) -> StressCondition:
        for condition in self.conditions:
            if condition.id == condition_id:
                return condition
        raise UnknownStressConditionError(
            f"Stress condition '{condition_id}' not found. "
            f"Available: {[c.id for c in self.conditions]}"
        )


class ExecutionSettings(BaseModel):
    """Worker-pool configuration for trial execution."""

    max_workers: Optional[int] = Field(None, ge=1)
    batch_size: int = Field(50, ge=1, description="Trials per worker task")
    timeout_seconds: Optional[float] = Field(None, gt=0.0)


# --- Top-Level Configuration Model ---


class EngineSettings(BaseModel):
    percentile_method: Literal["nearest_rank", "linear"] = "nearest_rank"
    budget_variance_ratio: float = Field(
        0.5, ge=0.0, description="Budget jitter relative to the rate jitter"
    )
    reduced_sample_count: int = Field(
        200, ge=1, description="Trials per aggregation in sensitivity and stress analyses"
    )
    monte_carlo: MonteCarloSettings = Field(default_factory=MonteCarloSettings)
    sensitivity: SensitivitySettings = Field(default_factory=SensitivitySettings)
    stress: StressSettings = Field(default_factory=StressSettings)
    kernel_profiles: KernelProfiles = Field(default_factory=KernelProfiles)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    default_scenario: ScenarioParameters = Field(default_factory=ScenarioParameters)
    presets: List[ScenarioPreset] = Field(default_factory=list)

    def jitter_for(self, parameter_variance: float) -> JitterSettings:
        return JitterSettings.from_variance(parameter_variance, self.budget_variance_ratio)
