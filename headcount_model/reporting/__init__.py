# Summary frames live in headcount_model.reporting.tables; they import the
# engines, so they are not re-exported here.
from .stats import (
    HistogramBucket,
    Moments,
    PercentileSummary,
    histogram,
    moments,
    percentile,
    summarize_percentiles,
)

__all__ = [
    "HistogramBucket",
    "Moments",
    "PercentileSummary",
    "histogram",
    "moments",
    "percentile",
    "summarize_percentiles",
]
