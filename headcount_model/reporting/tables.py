# headcount_model/reporting/tables.py
"""
Tabular summaries of analysis results.

Each helper turns a list of result objects into a pandas DataFrame with the
canonical column names below, ready for display by the calling layer.
"""

import logging
from dataclasses import asdict
from typing import List, Sequence

import pandas as pd

from headcount_model.dynamics.projection import ProjectionResult
from headcount_model.engines.monte_carlo import MonteCarloResult
from headcount_model.engines.sensitivity import SensitivityResult
from headcount_model.engines.stress import StressTestResult

logger = logging.getLogger(__name__)

# Canonical column names
SCENARIO_ID = "scenario_id"
SCENARIO_NAME = "scenario_name"
MONTH_OFFSET = "month_offset"
MONTH = "month"
MEAN = "mean"
STD_DEV = "std_dev"
P10, P25, P50, P75, P90 = "p10", "p25", "p50", "p75", "p90"
PARAMETER = "parameter"
IMPACT = "impact"
IMPACT_PERCENT = "impact_percent"
CONDITION_ID = "condition_id"
SURVIVAL_RATE = "survival_rate"

MONTE_CARLO_COLUMNS = [
    SCENARIO_ID, SCENARIO_NAME, P10, P25, P50, P75, P90, MEAN, STD_DEV, "min", "max",
    "probability_of_target", "downside_risk", "upside_opportunity", "volatility", "value_at_risk",
]


def monte_carlo_summary_frame(results: Sequence[MonteCarloResult]) -> pd.DataFrame:
    """One row per scenario with percentiles, moments and risk metrics."""
    rows = []
    for r in results:
        rows.append({
            SCENARIO_ID: r.scenario_id,
            SCENARIO_NAME: r.scenario_name,
            P10: r.percentiles.p10,
            P25: r.percentiles.p25,
            P50: r.percentiles.p50,
            P75: r.percentiles.p75,
            P90: r.percentiles.p90,
            MEAN: r.mean,
            STD_DEV: r.std_dev,
            "min": r.min,
            "max": r.max,
            "probability_of_target": r.probability_of_target,
            "downside_risk": r.risk_metrics.downside_risk,
            "upside_opportunity": r.risk_metrics.upside_opportunity,
            "volatility": r.risk_metrics.volatility,
            "value_at_risk": r.risk_metrics.value_at_risk,
        })
    return pd.DataFrame(rows, columns=MONTE_CARLO_COLUMNS)


def confidence_band_frame(results: Sequence[MonteCarloResult]) -> pd.DataFrame:
    rows = [
        {
            SCENARIO_ID: r.scenario_id,
            MONTH_OFFSET: ci.month_offset,
            MONTH: ci.month,
            P10: ci.p10,
            P50: ci.p50,
            P90: ci.p90,
            MEAN: ci.mean,
        }
        for r in results
        for ci in r.confidence_intervals
    ]
    return pd.DataFrame(rows, columns=[SCENARIO_ID, MONTH_OFFSET, MONTH, P10, P50, P90, MEAN])


def histogram_frame(results: Sequence[MonteCarloResult]) -> pd.DataFrame:
    rows = [
        {
            SCENARIO_ID: r.scenario_id,
            "range": bucket.label,
            "low": bucket.low,
            "high": bucket.high,
            "count": bucket.count,
            "percentage": bucket.percentage,
        }
        for r in results
        for bucket in r.distribution
    ]
    return pd.DataFrame(rows, columns=[SCENARIO_ID, "range", "low", "high", "count", "percentage"])


def sensitivity_frame(results: Sequence[SensitivityResult]) -> pd.DataFrame:
    """
    Tornado rows: outcome deltas of the low and high test values relative to
    the base outcome, in impact order.
    """
    rows = []
    for r in results:
        for rank, p in enumerate(r.parameters, start=1):
            rows.append({
                SCENARIO_ID: r.scenario_id,
                "rank": rank,
                PARAMETER: p.parameter,
                "label": p.label,
                "base_value": p.base_value,
                "low_value": p.low_value,
                "high_value": p.high_value,
                "low_delta": p.low_outcome - p.base_outcome,
                "high_delta": p.high_outcome - p.base_outcome,
                IMPACT: p.impact,
                IMPACT_PERCENT: p.impact_percent,
                "impact_level": p.impact_level,
            })
    return pd.DataFrame(rows)


def stress_frame(results: Sequence[StressTestResult]) -> pd.DataFrame:
    rows = []
    for r in results:
        for s in r.stress_results:
            rows.append({
                SCENARIO_ID: r.scenario_id,
                CONDITION_ID: s.condition_id,
                "condition_name": s.condition_name,
                "severity": s.severity,
                "baseline_outcome": r.baseline_outcome,
                "outcome": s.outcome,
                "change": s.change,
                "change_percent": s.change_percent,
                SURVIVAL_RATE: s.survival_rate,
                "resilience_score": r.resilience_score,
            })
    return pd.DataFrame(rows)


def projection_frame(results: List[ProjectionResult]) -> pd.DataFrame:
    frames = []
    for r in results:
        df = pd.DataFrame([asdict(p) for p in r.projections])
        df.insert(0, SCENARIO_ID, r.scenario_id)
        frames.append(df)
    if not frames:
        logger.warning("No projection results to tabulate. Returning empty frame.")
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)
