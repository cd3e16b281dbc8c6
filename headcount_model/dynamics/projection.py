# headcount_model/dynamics/projection.py
"""
Deterministic scenario projection: one noise-free path per scenario with
monthly hires/attrition, totals, budget utilization and a feasibility rating.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from headcount_model.config.loaders import get_default_settings
from headcount_model.config.models import (
    MONTH_NAMES,
    EngineSettings,
    KernelProfile,
    ScenarioParameters,
    validate_headcount,
    validate_scenario,
)
from headcount_model.dynamics.kernel import TrialParameters, calendar_month, run_path
from headcount_model.errors import EmptyInputError

logger = logging.getLogger(__name__)

FEASIBILITY_HIGH = "high"
FEASIBILITY_MEDIUM = "medium"
FEASIBILITY_LOW = "low"


@dataclass(frozen=True)
class MonthlyProjection:
    month_offset: int
    calendar_month: int
    label: str
    headcount: int
    hires: int
    attrition: int
    net_change: int


@dataclass(frozen=True)
class ProjectionResult:
    scenario_id: str
    scenario_name: str
    current_headcount: int
    projections: Tuple[MonthlyProjection, ...]
    total_hires: int
    total_attrition: int
    final_headcount: int
    budget_utilization: float
    achieved_growth: float
    feasibility: str


def rate_feasibility(budget_utilization: float, achieved_growth: float, growth_rate: float) -> str:
    """Grade a plan by how hard it leans on the budget and how much growth it delivers."""
    if budget_utilization > 100 or achieved_growth < growth_rate * 0.5:
        return FEASIBILITY_LOW
    if budget_utilization > 80 or achieved_growth < growth_rate * 0.8:
        return FEASIBILITY_MEDIUM
    return FEASIBILITY_HIGH


def _month_label(month: int, month_offset: int) -> str:
    return MONTH_NAMES[month] + ("+" if month_offset >= 12 else "")


def project_scenario(
    scenario: ScenarioParameters,
    current_headcount: int,
    profile: Optional[KernelProfile] = None,
) -> ProjectionResult:
    validate_scenario(scenario)
    current_headcount = validate_headcount(current_headcount)
    profile = profile or get_default_settings().kernel_profiles.deterministic

    steps = run_path(current_headcount, scenario, TrialParameters.from_scenario(scenario), profile)

    projections = []
    for offset, result in enumerate(steps):
        month = calendar_month(scenario.start_month, offset)
        projections.append(
            MonthlyProjection(
                month_offset=offset,
                calendar_month=month,
                label=_month_label(month, offset),
                headcount=result.headcount,
                hires=result.hires,
                attrition=result.attrition,
                net_change=result.net_change,
            )
        )

    total_hires = sum(p.hires for p in projections)
    total_attrition = sum(p.attrition for p in projections)
    final_headcount = projections[-1].headcount

    hiring_capacity = scenario.budget_constraint * (scenario.time_horizon / 3)
    raw_utilization = total_hires / hiring_capacity * 100 if hiring_capacity > 0 else 0.0
    achieved_growth = (
        (final_headcount - current_headcount) / current_headcount * 100 if current_headcount > 0 else 0.0
    )
    # overspend is graded on the raw figure but reported capped at 100%
    feasibility = rate_feasibility(raw_utilization, achieved_growth, scenario.growth_rate)
    budget_utilization = min(raw_utilization, 100.0)

    logger.debug(
        f"[PROJECTION] {scenario.scenario_id}: {current_headcount} -> {final_headcount} "
        f"(hires={total_hires}, attrition={total_attrition}, utilization={budget_utilization:.1f}%, "
        f"feasibility={feasibility})"
    )
    return ProjectionResult(
        scenario_id=scenario.scenario_id,
        scenario_name=scenario.label,
        current_headcount=current_headcount,
        projections=tuple(projections),
        total_hires=total_hires,
        total_attrition=total_attrition,
        final_headcount=final_headcount,
        budget_utilization=budget_utilization,
        achieved_growth=achieved_growth,
        feasibility=feasibility,
    )


def project_scenarios(
    scenarios: Sequence[ScenarioParameters],
    current_headcount: int,
    settings: Optional[EngineSettings] = None,
) -> List[ProjectionResult]:
    if not scenarios:
        raise EmptyInputError("At least one scenario is required for a projection")
    settings = settings or get_default_settings()
    for scenario in scenarios:
        validate_scenario(scenario)
    profile = settings.kernel_profiles.deterministic
    logger.info(f"[PROJECTION] Projecting {len(scenarios)} scenarios from headcount {current_headcount}")
    return [project_scenario(s, current_headcount, profile) for s in scenarios]
