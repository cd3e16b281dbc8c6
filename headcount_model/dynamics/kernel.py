# headcount_model/dynamics/kernel.py
"""
Month-by-month headcount recurrence shared by every analysis.

One call to :func:`step` advances a single aggregate headcount by one month:
attrition is taken out, hires are computed to replace it and meet the growth
target, and the result is capped by the quarterly hiring budget. All
randomness comes from the ``rng`` passed in; with a zero-noise profile and
degenerate multiplier ranges no draws are made and ``rng`` may be None.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from headcount_model.config.models import (
    JitterSettings,
    KernelProfile,
    ScenarioParameters,
    StressCondition,
)

logger = logging.getLogger(__name__)

Q1_MONTHS = (0, 1, 2)
AUTUMN_MONTHS = (8, 9)


@dataclass(frozen=True)
class TrialParameters:
    """Scenario rates after stress multipliers and per-trial jitter."""

    growth_rate: float
    attrition_rate: float
    budget_constraint: float
    hiring_efficiency: float = 1.0

    @property
    def max_hires_per_month(self) -> int:
        # quarterly budget spread evenly over its three months
        return math.ceil(self.budget_constraint / 3)

    @classmethod
    def from_scenario(cls, scenario: ScenarioParameters) -> 'TrialParameters':
        """Unjittered rates; the budget is kept as given, fractional or not."""
        return cls(
            growth_rate=scenario.growth_rate,
            attrition_rate=scenario.attrition_rate,
            budget_constraint=max(0.0, scenario.budget_constraint),
        )


@dataclass(frozen=True)
class StepResult:
    headcount: int
    hires: int
    attrition: int

    @property
    def net_change(self) -> int:
        return self.hires - self.attrition


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf."""
    return int(math.floor(value + 0.5))


def calendar_month(start_month: int, month_offset: int) -> int:
    """Calendar month index (0 = January) of a simulated month."""
    return (start_month + month_offset) % 12


def _require_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    if rng is None:
        raise ValueError("A random generator is required for a non-degenerate noise profile")
    return rng


def draw_factor(factor_range: Tuple[float, float], rng: Optional[np.random.Generator]) -> float:
    low, high = factor_range
    if low == high:
        return low
    return low + _require_rng(rng).random() * (high - low)


def _jitter(spread: float, rng: Optional[np.random.Generator]) -> float:
    if spread == 0:
        return 1.0
    return 1.0 + (_require_rng(rng).random() - 0.5) * 2.0 * spread


def draw_trial_parameters(
    scenario: ScenarioParameters,
    jitter: JitterSettings,
    rng: Optional[np.random.Generator],
    condition: Optional[StressCondition] = None,
) -> TrialParameters:
    """
    Draw the rates used for one whole trial.

    Stress multipliers are applied to the scenario values first, then a single
    uniform jitter per parameter. Jitter is drawn once per trial, never per month.
    """
    condition = condition or StressCondition.identity()
    growth_rate = scenario.growth_rate * condition.growth_rate_multiplier * _jitter(jitter.growth_spread, rng)
    attrition_rate = (
        scenario.attrition_rate * condition.attrition_rate_multiplier * _jitter(jitter.attrition_spread, rng)
    )
    budget = scenario.budget_constraint * condition.budget_multiplier * _jitter(jitter.budget_spread, rng)
    return TrialParameters(
        growth_rate=growth_rate,
        attrition_rate=attrition_rate,
        budget_constraint=max(0, round_half_up(budget)),
        hiring_efficiency=condition.hiring_efficiency_multiplier,
    )


def step(
    headcount: int,
    scenario: ScenarioParameters,
    month_offset: int,
    trial: TrialParameters,
    profile: KernelProfile,
    rng: Optional[np.random.Generator] = None,
) -> StepResult:
    """
    Advance headcount by one simulated month.

    Args:
        headcount: Headcount at the start of the month (>= 0).
        scenario: Supplies the seasonal/aggressive flags and the start month.
        month_offset: Zero-based month index within the horizon.
        trial: Rates for this trial (see draw_trial_parameters).
        profile: Seasonal/aggressive multipliers and per-month noise width.
        rng: Random source for the per-month noise and multiplier draws.

    Returns:
        StepResult with the new headcount, realized hires and attrition.
    """
    noise = _jitter(profile.month_noise, rng)

    attrition = round_half_up(headcount * trial.attrition_rate / 100 / 12 * noise)

    if scenario.seasonal_adjustment:
        month = calendar_month(scenario.start_month, month_offset)
        if month in Q1_MONTHS:
            attrition = round_half_up(attrition * draw_factor(profile.q1_attrition_factor, rng))
        elif month in AUTUMN_MONTHS:
            attrition = round_half_up(attrition * draw_factor(profile.autumn_attrition_factor, rng))

    # hiring must at least replace attrition to hold the growth target
    target_hires = round_half_up(headcount * trial.growth_rate / 100 / 12 * noise) + attrition

    if scenario.aggressive_hiring:
        target_hires = round_half_up(target_hires * draw_factor(profile.aggressive_hiring_factor, rng))

    if trial.hiring_efficiency != 1.0:
        target_hires = round_half_up(target_hires * trial.hiring_efficiency)

    hires = min(target_hires, trial.max_hires_per_month)
    new_headcount = max(0, headcount - attrition + hires)
    return StepResult(headcount=new_headcount, hires=hires, attrition=attrition)


def run_path(
    current_headcount: int,
    scenario: ScenarioParameters,
    trial: TrialParameters,
    profile: KernelProfile,
    rng: Optional[np.random.Generator] = None,
) -> List[StepResult]:
    """Apply :func:`step` for every month of the scenario's horizon."""
    results: List[StepResult] = []
    headcount = current_headcount
    for month_offset in range(scenario.time_horizon):
        result = step(headcount, scenario, month_offset, trial, profile, rng)
        results.append(result)
        headcount = result.headcount
    return results
