import pytest

from headcount_model.config.models import ParameterBound
from headcount_model.engines.sensitivity import (
    IMPACT_HIGH,
    IMPACT_LOW,
    IMPACT_MEDIUM,
    analyze,
    classify_impact,
    curve_values,
    override_parameter,
    run_sensitivity,
    sweep_bounds,
)
from headcount_model.errors import EmptyInputError, InvalidScenarioError

pytestmark = pytest.mark.engines


@pytest.mark.parametrize("key, base, lo, hi, expected", [
    ("growth_rate", 10, 0, 50, (0, 25)),
    ("attrition_rate", 12, 0, 30, (3, 21)),
    ("budget_constraint", 5, 1, 20, (1, 10.7)),
    ("time_horizon", 12, 6, 24, (6.6, 17.4)),
])
def test_sweep_bounds_clamped(key, base, lo, hi, expected):
    bound = ParameterBound(key=key, label=key, min=lo, max=hi)
    low, high = sweep_bounds(base, bound)
    assert low == pytest.approx(expected[0])
    assert high == pytest.approx(expected[1])


def test_curve_values_evenly_spaced():
    assert curve_values(0, 25, 6) == pytest.approx([0, 5, 10, 15, 20, 25])
    assert curve_values(3, 3, 2) == [3, 3]


def test_override_parameter_leaves_original(base_scenario):
    moved = override_parameter(base_scenario, "growth_rate", 25)
    assert moved.growth_rate == 25.0
    assert base_scenario.growth_rate == 10
    assert override_parameter(base_scenario, "time_horizon", 6.6).time_horizon == 7


def test_classify_impact(small_settings):
    assert classify_impact(20, small_settings) == IMPACT_HIGH
    assert classify_impact(15, small_settings) == IMPACT_HIGH
    assert classify_impact(8, small_settings) == IMPACT_MEDIUM
    assert classify_impact(7.9, small_settings) == IMPACT_LOW


def test_parameters_ranked_by_impact(base_scenario, small_settings):
    result = analyze(base_scenario, 100, small_settings, seed=17)

    assert len(result.parameters) == 4
    impacts = [p.impact for p in result.parameters]
    assert impacts == sorted(impacts, reverse=True)
    assert result.most_sensitive == result.parameters[0].label
    assert result.least_sensitive == result.parameters[-1].label

    for p in result.parameters:
        assert p.impact == pytest.approx(abs(p.high_outcome - p.low_outcome))
        assert p.impact_percent == pytest.approx(p.impact / p.base_outcome * 100)
        assert p.impact_level == classify_impact(p.impact_percent, small_settings)
        assert len(p.sensitivity_curve) == small_settings.sensitivity.curve_steps
        assert p.sensitivity_curve[0].value == pytest.approx(round(p.low_value, 1))
        assert p.sensitivity_curve[-1].value == pytest.approx(round(p.high_value, 1))
        assert all(isinstance(point.outcome, int) for point in p.sensitivity_curve)


def test_horizon_moves_outcome_in_growing_plan(base_scenario, small_settings):
    # a longer horizon compounds growth, so the high end must end larger
    result = analyze(base_scenario, 100, small_settings, seed=4)
    horizon = next(p for p in result.parameters if p.parameter == "time_horizon")
    assert horizon.high_outcome > horizon.low_outcome


def test_seeded_analysis_is_reproducible(open_budget_scenario, small_settings):
    first = run_sensitivity([open_budget_scenario], 100, small_settings, seed=3)
    second = run_sensitivity([open_budget_scenario], 100, small_settings, seed=3)
    assert first == second
    assert any(point.std_dev > 0 for p in first[0].parameters for point in p.sensitivity_curve)
    other = run_sensitivity([open_budget_scenario], 100, small_settings, seed=4)
    assert [p.base_outcome for p in other[0].parameters] != [p.base_outcome for p in first[0].parameters]


def test_requires_scenarios(small_settings):
    with pytest.raises(EmptyInputError):
        run_sensitivity([], 100, small_settings)


def test_rejects_invalid_scenario(base_scenario, small_settings):
    with pytest.raises(InvalidScenarioError):
        run_sensitivity([base_scenario.with_overrides(time_horizon=0)], 100, small_settings)
