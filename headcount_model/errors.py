# headcount_model/errors.py
"""
Exception hierarchy for the headcount projection engine.

All engine failures derive from HeadcountModelError so callers can catch one
type at the presentation boundary. Validation errors also subclass ValueError
(or KeyError) so generic handlers keep working.
"""


class HeadcountModelError(Exception):
    """Base class for all headcount_model errors."""

    pass


class InvalidScenarioError(HeadcountModelError, ValueError):
    """Raised when scenario parameters cannot be simulated."""

    def __init__(self, message: str, scenario_id: str = None):
        self.scenario_id = scenario_id
        if scenario_id:
            message = f"Scenario '{scenario_id}': {message}"
        super().__init__(message)


class EmptyInputError(HeadcountModelError, ValueError):
    """Raised when an analysis is started without scenarios or conditions."""

    pass


class UnknownStressConditionError(HeadcountModelError, KeyError):
    """Raised when a selected stress condition id is not in the catalog."""

    pass


class ConfigLoadError(HeadcountModelError):
    """Custom exception for errors during config loading."""

    pass


class SimulationCancelledError(HeadcountModelError):
    """Raised when the caller cancels a running analysis between trials."""

    pass


class SimulationTimeoutError(HeadcountModelError):
    """Raised when an analysis exceeds its configured deadline."""

    pass
