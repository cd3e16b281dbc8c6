# headcount_model/engines/stress.py
"""
Stress testing against the named shock catalog.

Each scenario is aggregated once unmodified (the baseline) and once per
selected stress condition. A condition's multipliers scale the scenario's own
growth rate, attrition rate and budget before jitter, and its hiring
efficiency scales realized hires inside the kernel.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from headcount_model.config.loaders import get_default_settings
from headcount_model.config.models import (
    EngineSettings,
    ScenarioParameters,
    StressCondition,
    validate_headcount,
    validate_scenario,
)
from headcount_model.engines.monte_carlo import aggregate_outcome
from headcount_model.engines.runner import (
    CancellationToken,
    SeedLike,
    TrialRunner,
    as_seed_sequence,
)
from headcount_model.errors import EmptyInputError

logger = logging.getLogger(__name__)

ConditionRef = Union[str, StressCondition]


@dataclass(frozen=True)
class StressConditionResult:
    condition_id: str
    condition_name: str
    severity: str
    outcome: float
    change: float
    change_percent: float
    survival_rate: float


@dataclass(frozen=True)
class StressTestResult:
    scenario_id: str
    scenario_name: str
    baseline_outcome: float
    stress_results: Tuple[StressConditionResult, ...]
    resilience_score: float
    worst_case: str
    best_case: str


def survival_rate(outcome: float, baseline: float) -> float:
    """Stressed outcome as a percentage of baseline, clamped to [0, 100]."""
    if baseline <= 0:
        # nothing to lose from an empty baseline
        return 100.0
    return max(0.0, min(100.0, outcome / baseline * 100))


def resilience_score(results: Sequence[StressConditionResult]) -> float:
    """Unweighted mean survival rate over the selected conditions."""
    if not results:
        return 0.0
    return sum(r.survival_rate for r in results) / len(results)


def resolve_conditions(
    selected: Optional[Sequence[ConditionRef]], settings: EngineSettings
) -> List[StressCondition]:
    """
    Map condition ids to catalog entries. ``None`` selects the full catalog;
    StressCondition instances are used as given.

    Raises:
        EmptyInputError: if the selection is empty.
        UnknownStressConditionError: if an id is not in the catalog.
    """
    if selected is None:
        selected = settings.stress.conditions
    if not selected:
        raise EmptyInputError("At least one stress condition must be selected")
    return [
        ref if isinstance(ref, StressCondition) else settings.stress.get_condition(ref)
        for ref in selected
    ]


def _stress_scenario(
    scenario: ScenarioParameters,
    current_headcount: int,
    conditions: List[StressCondition],
    settings: EngineSettings,
    runner: TrialRunner,
    seed,
) -> StressTestResult:
    baseline_seed, *condition_seeds = as_seed_sequence(seed).spawn(len(conditions) + 1)

    def evaluate(condition: StressCondition, point_seed) -> float:
        return aggregate_outcome(
            scenario,
            current_headcount,
            settings.reduced_sample_count,
            settings.stress.parameter_variance,
            settings,
            settings.kernel_profiles.stress,
            condition=condition,
            seed=point_seed,
            runner=runner,
        ).mean

    baseline = evaluate(StressCondition.identity(), baseline_seed)

    results = []
    for condition, condition_seed in zip(conditions, condition_seeds):
        outcome = evaluate(condition, condition_seed)
        change = outcome - baseline
        results.append(
            StressConditionResult(
                condition_id=condition.id,
                condition_name=condition.name,
                severity=condition.severity,
                outcome=outcome,
                change=change,
                change_percent=change / baseline * 100 if baseline != 0 else 0.0,
                survival_rate=survival_rate(outcome, baseline),
            )
        )
        logger.debug(
            f"[STRESS] {scenario.scenario_id}/{condition.id}: outcome={outcome:.1f} "
            f"baseline={baseline:.1f} survival={results[-1].survival_rate:.1f}%"
        )

    worst = min(results, key=lambda r: r.outcome)
    # ties resolve to the last-selected condition
    best = max(reversed(results), key=lambda r: r.outcome)
    score = resilience_score(results)
    logger.info(
        f"[STRESS] {scenario.scenario_id}: baseline={baseline:.1f} resilience={score:.1f} "
        f"worst={worst.condition_name} best={best.condition_name}"
    )
    return StressTestResult(
        scenario_id=scenario.scenario_id,
        scenario_name=scenario.label,
        baseline_outcome=baseline,
        stress_results=tuple(results),
        resilience_score=score,
        worst_case=worst.condition_name,
        best_case=best.condition_name,
    )


def stress_test(
    scenarios: Sequence[ScenarioParameters],
    current_headcount: int,
    selected_conditions: Optional[Sequence[ConditionRef]] = None,
    settings: Optional[EngineSettings] = None,
    seed: SeedLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[StressTestResult]:
    """
    Stress every scenario under the selected conditions.

    Resilience is relative to the chosen set: selecting fewer conditions
    changes the score.
    """
    if not scenarios:
        raise EmptyInputError("At least one scenario is required for stress testing")
    settings = settings or get_default_settings()
    for scenario in scenarios:
        validate_scenario(scenario)
    current_headcount = validate_headcount(current_headcount)
    conditions = resolve_conditions(selected_conditions, settings)

    runner = TrialRunner(settings.execution, cancel_token)
    scenario_seeds = as_seed_sequence(seed).spawn(len(scenarios))
    logger.info(
        f"[STRESS] Testing {len(scenarios)} scenarios against "
        f"{[c.id for c in conditions]} ({settings.reduced_sample_count} trials each)"
    )
    return [
        _stress_scenario(scenario, current_headcount, conditions, settings, runner, scenario_seed)
        for scenario, scenario_seed in zip(scenarios, scenario_seeds)
    ]
