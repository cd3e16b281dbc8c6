from .runner import CancellationToken, TrialRunner, TrialSamples
from .monte_carlo import MonteCarloResult, aggregate, run_monte_carlo
from .sensitivity import SensitivityResult, analyze, run_sensitivity
from .stress import StressTestResult, stress_test

__all__ = [
    "CancellationToken",
    "TrialRunner",
    "TrialSamples",
    "MonteCarloResult",
    "aggregate",
    "run_monte_carlo",
    "SensitivityResult",
    "analyze",
    "run_sensitivity",
    "StressTestResult",
    "stress_test",
]
