# headcount_model/reporting/stats.py
"""
Sample statistics for Monte Carlo outcomes: percentiles, population moments
and fixed-width histograms. Degenerate samples never raise; an empty sample
yields zeros and a single-element sample yields that value everywhere.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

NEAREST_RANK = "nearest_rank"
LINEAR = "linear"


@dataclass(frozen=True)
class PercentileSummary:
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float

    def as_tuple(self):
        return (self.p10, self.p25, self.p50, self.p75, self.p90)


@dataclass(frozen=True)
class Moments:
    mean: float
    variance: float
    std_dev: float


@dataclass(frozen=True)
class HistogramBucket:
    low: int
    high: int
    count: int
    percentage: float

    @property
    def label(self) -> str:
        return f"{self.low}-{self.high}"


def percentile(sorted_values: Sequence[float], p: float, method: str = NEAREST_RANK) -> float:
    """
    Percentile of an ascending-sorted sample.

    ``nearest_rank`` takes the value at index ``floor(n * p)`` with no
    interpolation; ``linear`` interpolates between ranks.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    if n == 1:
        return float(sorted_values[0])
    if method == NEAREST_RANK:
        index = min(int(math.floor(n * p)), n - 1)
        return float(sorted_values[index])
    if method == LINEAR:
        return float(np.percentile(np.asarray(sorted_values, dtype=float), p * 100, method="linear"))
    raise ValueError(f"Unknown percentile method: {method}")


def summarize_percentiles(sorted_values: Sequence[float], method: str = NEAREST_RANK) -> PercentileSummary:
    return PercentileSummary(
        p10=percentile(sorted_values, 0.10, method),
        p25=percentile(sorted_values, 0.25, method),
        p50=percentile(sorted_values, 0.50, method),
        p75=percentile(sorted_values, 0.75, method),
        p90=percentile(sorted_values, 0.90, method),
    )


def moments(values: Sequence[float]) -> Moments:
    """Population mean, variance and standard deviation."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return Moments(0.0, 0.0, 0.0)
    mean = float(arr.mean())
    variance = float(np.mean((arr - mean) ** 2))
    return Moments(mean=mean, variance=variance, std_dev=math.sqrt(variance))


def histogram(values: Sequence[int], buckets: int = 10) -> List[HistogramBucket]:
    """
    Equal-width histogram spanning [min, max] of the sample.

    Bucket width is ``ceil((max - min) / buckets)`` with a floor of 1. A value
    lands in the first bucket whose ``[low, low + width)`` contains it; values at
    the very top of the range are kept in the last bucket so the counts always
    sum to the sample size.
    """
    arr = np.asarray(values, dtype=np.int64)
    if arr.size == 0:
        return []
    low = int(arr.min())
    width = max(1, math.ceil((int(arr.max()) - low) / buckets))
    indices = np.minimum((arr - low) // width, buckets - 1)
    counts = np.bincount(indices, minlength=buckets)
    total = arr.size
    return [
        HistogramBucket(
            low=low + i * width,
            high=low + (i + 1) * width,
            count=int(counts[i]),
            percentage=float(counts[i]) / total * 100,
        )
        for i in range(buckets)
    ]
