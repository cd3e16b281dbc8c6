from .kernel import (
    StepResult,
    TrialParameters,
    calendar_month,
    draw_trial_parameters,
    round_half_up,
    run_path,
    step,
)
from .projection import ProjectionResult, project_scenario, project_scenarios

__all__ = [
    "StepResult",
    "TrialParameters",
    "calendar_month",
    "draw_trial_parameters",
    "round_half_up",
    "run_path",
    "step",
    "ProjectionResult",
    "project_scenario",
    "project_scenarios",
]
