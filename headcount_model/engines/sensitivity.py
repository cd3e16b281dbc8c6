# headcount_model/engines/sensitivity.py
"""
Parameter sensitivity (tornado) analysis.

For each tunable parameter the scenario is re-simulated with only that
parameter moved to a low and a high test value, plus a sweep of evenly spaced
points between them. Parameters are ranked by the spread of mean outcomes
between low and high.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from headcount_model.config.loaders import get_default_settings
from headcount_model.config.models import (
    EngineSettings,
    ParameterBound,
    ScenarioParameters,
    validate_headcount,
    validate_scenario,
)
from headcount_model.dynamics.kernel import round_half_up
from headcount_model.engines.monte_carlo import OutcomeSummary, aggregate_outcome
from headcount_model.engines.runner import (
    CancellationToken,
    SeedLike,
    TrialRunner,
    as_seed_sequence,
)
from headcount_model.errors import EmptyInputError

logger = logging.getLogger(__name__)

IMPACT_HIGH = "high"
IMPACT_MEDIUM = "medium"
IMPACT_LOW = "low"


@dataclass(frozen=True)
class CurvePoint:
    value: float
    outcome: int
    std_dev: float


@dataclass(frozen=True)
class ParameterSensitivity:
    parameter: str
    label: str
    unit: str
    base_value: float
    low_value: float
    high_value: float
    low_outcome: float
    high_outcome: float
    base_outcome: float
    impact: float
    impact_percent: float
    impact_level: str
    sensitivity_curve: Tuple[CurvePoint, ...]


@dataclass(frozen=True)
class SensitivityResult:
    scenario_id: str
    scenario_name: str
    parameters: Tuple[ParameterSensitivity, ...]
    most_sensitive: str
    least_sensitive: str


def sweep_bounds(base_value: float, bound: ParameterBound) -> Tuple[float, float]:
    """Low/high test values: base -/+ sweep_fraction of the bound span, clamped."""
    delta = bound.span * bound.sweep_fraction
    return max(bound.min, base_value - delta), min(bound.max, base_value + delta)


def curve_values(low: float, high: float, steps: int) -> List[float]:
    step_size = (high - low) / (steps - 1)
    return [low + i * step_size for i in range(steps)]


def override_parameter(scenario: ScenarioParameters, key: str, value: float) -> ScenarioParameters:
    """Copy of the scenario with one parameter moved to a test value."""
    if key == "time_horizon":
        # a fractional horizon still simulates its partial month
        return scenario.with_overrides(time_horizon=max(1, int(math.ceil(value))))
    return scenario.with_overrides(**{key: float(value)})


def classify_impact(impact_percent: float, settings: EngineSettings) -> str:
    if impact_percent >= settings.sensitivity.high_impact_percent:
        return IMPACT_HIGH
    if impact_percent >= settings.sensitivity.medium_impact_percent:
        return IMPACT_MEDIUM
    return IMPACT_LOW


def _evaluate_parameter(
    scenario: ScenarioParameters,
    current_headcount: int,
    bound: ParameterBound,
    settings: EngineSettings,
    runner: TrialRunner,
    seed,
) -> ParameterSensitivity:
    steps = settings.sensitivity.curve_steps
    base_value = float(getattr(scenario, bound.key))
    low_value, high_value = sweep_bounds(base_value, bound)
    base_seed, low_seed, high_seed, *curve_seeds = as_seed_sequence(seed).spawn(steps + 3)

    def evaluate(candidate: ScenarioParameters, point_seed) -> OutcomeSummary:
        return aggregate_outcome(
            candidate,
            current_headcount,
            settings.reduced_sample_count,
            settings.sensitivity.parameter_variance,
            settings,
            settings.kernel_profiles.monte_carlo,
            seed=point_seed,
            runner=runner,
        )

    base = evaluate(scenario, base_seed)
    low = evaluate(override_parameter(scenario, bound.key, low_value), low_seed)
    high = evaluate(override_parameter(scenario, bound.key, high_value), high_seed)

    curve = []
    for value, point_seed in zip(curve_values(low_value, high_value, steps), curve_seeds):
        outcome = evaluate(override_parameter(scenario, bound.key, value), point_seed)
        curve.append(
            CurvePoint(
                value=round(value, 1),
                outcome=round_half_up(outcome.mean),
                std_dev=round(outcome.std_dev, 1),
            )
        )

    impact = abs(high.mean - low.mean)
    impact_percent = impact / base.mean * 100 if base.mean != 0 else 0.0
    logger.debug(
        f"[SENS] {scenario.scenario_id}.{bound.key}: base={base_value} low={low_value:.2f} "
        f"high={high_value:.2f} impact={impact:.2f} ({impact_percent:.1f}%)"
    )
    return ParameterSensitivity(
        parameter=bound.key,
        label=bound.label,
        unit=bound.unit,
        base_value=base_value,
        low_value=low_value,
        high_value=high_value,
        low_outcome=low.mean,
        high_outcome=high.mean,
        base_outcome=base.mean,
        impact=impact,
        impact_percent=impact_percent,
        impact_level=classify_impact(impact_percent, settings),
        sensitivity_curve=tuple(curve),
    )


def analyze(
    scenario: ScenarioParameters,
    current_headcount: int,
    settings: Optional[EngineSettings] = None,
    seed: SeedLike = None,
    runner: Optional[TrialRunner] = None,
) -> SensitivityResult:
    """
    Sensitivity of mean final headcount to each configured parameter.

    Costs ``steps + 3`` aggregations of ``reduced_sample_count`` trials per
    parameter. The returned parameters are sorted by descending impact.
    """
    settings = settings or get_default_settings()
    validate_scenario(scenario)
    current_headcount = validate_headcount(current_headcount)
    runner = runner or TrialRunner(settings.execution)
    bounds = settings.sensitivity.parameters
    parameter_seeds = as_seed_sequence(seed).spawn(len(bounds))

    evaluated = [
        _evaluate_parameter(scenario, current_headcount, bound, settings, runner, param_seed)
        for bound, param_seed in zip(bounds, parameter_seeds)
    ]
    ranked = tuple(sorted(evaluated, key=lambda p: p.impact, reverse=True))

    result = SensitivityResult(
        scenario_id=scenario.scenario_id,
        scenario_name=scenario.label,
        parameters=ranked,
        most_sensitive=ranked[0].label if ranked else "",
        least_sensitive=ranked[-1].label if ranked else "",
    )
    logger.info(
        f"[SENS] {scenario.scenario_id}: most sensitive={result.most_sensitive}, "
        f"least sensitive={result.least_sensitive}"
    )
    return result


def run_sensitivity(
    scenarios: Sequence[ScenarioParameters],
    current_headcount: int,
    settings: Optional[EngineSettings] = None,
    seed: SeedLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[SensitivityResult]:
    if not scenarios:
        raise EmptyInputError("At least one scenario is required for sensitivity analysis")
    settings = settings or get_default_settings()
    for scenario in scenarios:
        validate_scenario(scenario)
    current_headcount = validate_headcount(current_headcount)

    runner = TrialRunner(settings.execution, cancel_token)
    scenario_seeds = as_seed_sequence(seed).spawn(len(scenarios))
    logger.info(
        f"[SENS] Analyzing {len(scenarios)} scenarios over "
        f"{len(settings.sensitivity.parameters)} parameters "
        f"({settings.reduced_sample_count} trials per point, {settings.sensitivity.curve_steps} curve steps)"
    )
    return [
        analyze(scenario, current_headcount, settings, scenario_seed, runner)
        for scenario, scenario_seed in zip(scenarios, scenario_seeds)
    ]
