# headcount_model/engines/monte_carlo.py
"""
Monte Carlo aggregation of headcount trials.

Each trial draws one jittered growth rate, attrition rate and budget, then
walks the projection kernel month by month with a small independent noise
factor. Final headcounts feed percentiles, moments, risk metrics and a
histogram; per-month samples feed the monthly confidence bands.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from headcount_model.config.loaders import get_default_settings
from headcount_model.config.models import (
    MONTH_NAMES,
    EngineSettings,
    KernelProfile,
    ScenarioParameters,
    StressCondition,
    validate_headcount,
    validate_scenario,
)
from headcount_model.dynamics.kernel import calendar_month, round_half_up
from headcount_model.engines.runner import (
    CancellationToken,
    SeedLike,
    TrialRunner,
    TrialSamples,
    as_seed_sequence,
)
from headcount_model.errors import EmptyInputError
from headcount_model.reporting.stats import (
    HistogramBucket,
    PercentileSummary,
    histogram,
    moments,
    percentile,
    summarize_percentiles,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskMetrics:
    downside_risk: float  # % of trials ending below current headcount
    upside_opportunity: float  # % of trials ending above target
    volatility: float  # coefficient of variation, %
    value_at_risk: float  # current headcount minus p5


@dataclass(frozen=True)
class MonthlyConfidenceInterval:
    month_offset: int
    month: str
    p10: float
    p50: float
    p90: float
    mean: float


@dataclass(frozen=True)
class MonteCarloResult:
    scenario_id: str
    scenario_name: str
    current_headcount: int
    target_headcount: int
    sample_count: int
    runs: Tuple[int, ...]
    percentiles: PercentileSummary
    mean: float
    std_dev: float
    min: int
    max: int
    probability_of_target: float
    risk_metrics: RiskMetrics
    distribution: Tuple[HistogramBucket, ...]
    confidence_intervals: Tuple[MonthlyConfidenceInterval, ...]


@dataclass(frozen=True)
class OutcomeSummary:
    """Mean and spread of final headcount; all sensitivity and stress runs need."""

    mean: float
    std_dev: float
    sample_count: int


def default_target(current_headcount: int, settings: Optional[EngineSettings] = None) -> int:
    settings = settings or get_default_settings()
    return round_half_up(current_headcount * settings.monte_carlo.target_headcount_ratio)


def _confidence_intervals(
    samples: TrialSamples, start_month: int, method: str
) -> Tuple[MonthlyConfidenceInterval, ...]:
    intervals = []
    for offset in range(samples.monthly.shape[1]):
        column = np.sort(samples.monthly[:, offset])
        intervals.append(
            MonthlyConfidenceInterval(
                month_offset=offset,
                month=MONTH_NAMES[calendar_month(start_month, offset)],
                p10=percentile(column, 0.10, method),
                p50=percentile(column, 0.50, method),
                p90=percentile(column, 0.90, method),
                mean=float(column.mean()),
            )
        )
    return tuple(intervals)


def summarize_samples(
    samples: TrialSamples,
    scenario: ScenarioParameters,
    current_headcount: int,
    target_headcount: int,
    percentile_method: str = "nearest_rank",
    histogram_buckets: int = 10,
) -> MonteCarloResult:
    """Reduce raw trial samples to a MonteCarloResult. No trial is discarded."""
    finals = samples.finals
    sorted_runs = np.sort(finals)
    n = sorted_runs.size
    stats = moments(sorted_runs)

    downside = np.count_nonzero(finals < current_headcount) / n * 100
    upside = np.count_nonzero(finals > target_headcount) / n * 100
    probability_of_target = np.count_nonzero(finals >= target_headcount) / n * 100
    volatility = stats.std_dev / stats.mean * 100 if stats.mean != 0 else 0.0

    return MonteCarloResult(
        scenario_id=scenario.scenario_id,
        scenario_name=scenario.label,
        current_headcount=current_headcount,
        target_headcount=target_headcount,
        sample_count=n,
        runs=tuple(int(v) for v in sorted_runs),
        percentiles=summarize_percentiles(sorted_runs, percentile_method),
        mean=stats.mean,
        std_dev=stats.std_dev,
        min=int(sorted_runs[0]),
        max=int(sorted_runs[-1]),
        probability_of_target=float(probability_of_target),
        risk_metrics=RiskMetrics(
            downside_risk=float(downside),
            upside_opportunity=float(upside),
            volatility=volatility,
            value_at_risk=current_headcount - percentile(sorted_runs, 0.05, percentile_method),
        ),
        distribution=tuple(histogram(sorted_runs, histogram_buckets)),
        confidence_intervals=_confidence_intervals(samples, scenario.start_month, percentile_method),
    )


def aggregate(
    scenario: ScenarioParameters,
    current_headcount: int,
    sample_count: Optional[int] = None,
    parameter_variance: Optional[float] = None,
    target_headcount: Optional[int] = None,
    settings: Optional[EngineSettings] = None,
    profile: Optional[KernelProfile] = None,
    condition: Optional[StressCondition] = None,
    seed: SeedLike = None,
    runner: Optional[TrialRunner] = None,
) -> MonteCarloResult:
    """
    Run the full Monte Carlo aggregation for one scenario.

    Args:
        scenario: Scenario to simulate.
        current_headcount: Starting headcount.
        sample_count: Number of trials; defaults to ``monte_carlo.sample_count``.
        parameter_variance: Per-trial jitter half-width as a fraction;
            defaults to ``monte_carlo.parameter_variance``.
        target_headcount: Target for probability-of-target and upside metrics;
            defaults to ``round(current_headcount * target_headcount_ratio)``.
        settings: Engine settings; packaged defaults when omitted.
        profile: Kernel profile; the ``monte_carlo`` profile when omitted.
        condition: Optional stress multipliers applied before jitter.
        seed: Seed or SeedSequence for reproducible sampling.
        runner: Trial runner to reuse (shares cancellation and deadline).

    Raises:
        InvalidScenarioError: before any sampling if the inputs are invalid.
    """
    settings = settings or get_default_settings()
    validate_scenario(scenario)
    current_headcount = validate_headcount(current_headcount)
    if sample_count is None:
        sample_count = settings.monte_carlo.sample_count
    if parameter_variance is None:
        parameter_variance = settings.monte_carlo.parameter_variance
    if target_headcount is None:
        target_headcount = default_target(current_headcount, settings)
    runner = runner or TrialRunner(settings.execution)

    samples = runner.run(
        scenario,
        current_headcount,
        sample_count,
        settings.jitter_for(parameter_variance),
        profile or settings.kernel_profiles.monte_carlo,
        condition=condition,
        seed=seed,
    )
    result = summarize_samples(
        samples,
        scenario,
        current_headcount,
        target_headcount,
        settings.percentile_method,
        settings.monte_carlo.histogram_buckets,
    )
    logger.info(
        f"[MC] {scenario.scenario_id}: n={result.sample_count} mean={result.mean:.1f} "
        f"p10={result.percentiles.p10:.0f} p50={result.percentiles.p50:.0f} "
        f"p90={result.percentiles.p90:.0f} P(target>={target_headcount})={result.probability_of_target:.1f}%"
    )
    return result


def aggregate_outcome(
    scenario: ScenarioParameters,
    current_headcount: int,
    sample_count: int,
    parameter_variance: float,
    settings: EngineSettings,
    profile: KernelProfile,
    condition: Optional[StressCondition] = None,
    seed: SeedLike = None,
    runner: Optional[TrialRunner] = None,
) -> OutcomeSummary:
    """Aggregate final headcount to mean and population stddev only."""
    runner = runner or TrialRunner(settings.execution)
    samples = runner.run(
        scenario,
        current_headcount,
        sample_count,
        settings.jitter_for(parameter_variance),
        profile,
        condition=condition,
        seed=seed,
    )
    stats = moments(samples.finals)
    return OutcomeSummary(mean=stats.mean, std_dev=stats.std_dev, sample_count=samples.sample_count)


def run_monte_carlo(
    scenarios: Sequence[ScenarioParameters],
    current_headcount: int,
    target_headcount: Optional[int] = None,
    settings: Optional[EngineSettings] = None,
    seed: SeedLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[MonteCarloResult]:
    """
    Monte Carlo analysis for every scenario.

    All inputs are validated up front; the call either returns one result per
    scenario or raises before any sampling begins.
    """
    if not scenarios:
        raise EmptyInputError("At least one scenario is required for Monte Carlo simulation")
    settings = settings or get_default_settings()
    for scenario in scenarios:
        validate_scenario(scenario)
    current_headcount = validate_headcount(current_headcount)
    if target_headcount is None:
        target_headcount = default_target(current_headcount, settings)

    runner = TrialRunner(settings.execution, cancel_token)
    scenario_seeds = as_seed_sequence(seed).spawn(len(scenarios))
    logger.info(
        f"[MC] Running {settings.monte_carlo.sample_count} trials for {len(scenarios)} scenarios "
        f"(variance=+/-{settings.monte_carlo.parameter_variance:.0%}, target={target_headcount})"
    )
    return [
        aggregate(
            scenario,
            current_headcount,
            target_headcount=target_headcount,
            settings=settings,
            seed=scenario_seed,
            runner=runner,
        )
        for scenario, scenario_seed in zip(scenarios, scenario_seeds)
    ]
