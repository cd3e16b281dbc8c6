import pytest

from headcount_model.config.models import ScenarioParameters
from headcount_model.dynamics.projection import (
    FEASIBILITY_HIGH,
    FEASIBILITY_LOW,
    FEASIBILITY_MEDIUM,
    project_scenario,
    project_scenarios,
    rate_feasibility,
)
from headcount_model.errors import EmptyInputError, InvalidScenarioError

pytestmark = pytest.mark.dynamics


def test_default_plan_projection(base_scenario):
    result = project_scenario(base_scenario, 100)

    # one net hire a month: two hires against one leaver
    assert [p.headcount for p in result.projections] == list(range(101, 113))
    assert result.total_hires == 24
    assert result.total_attrition == 12
    assert result.final_headcount == 112
    # 24 hires against 20 of capacity: graded low, reported capped
    assert result.budget_utilization == pytest.approx(100.0)
    assert result.achieved_growth == pytest.approx(12.0)
    assert result.feasibility == FEASIBILITY_LOW


def test_projection_is_deterministic(base_scenario):
    assert project_scenario(base_scenario, 250) == project_scenario(base_scenario, 250)


def test_totals_match_monthly_rows():
    scenario = ScenarioParameters(growth_rate=25, attrition_rate=18, budget_constraint=12, time_horizon=18)
    result = project_scenario(scenario, 400)
    assert result.total_hires == sum(p.hires for p in result.projections)
    assert result.total_attrition == sum(p.attrition for p in result.projections)
    assert all(p.net_change == p.hires - p.attrition for p in result.projections)
    assert all(p.hires <= 4 for p in result.projections)


def test_month_labels_wrap_past_one_year():
    scenario = ScenarioParameters(time_horizon=14, start_month=10)
    labels = [p.label for p in project_scenario(scenario, 100).projections]
    assert labels[0] == "Nov"
    assert labels[2] == "Jan"
    assert labels[11] == "Oct"
    assert labels[12] == "Nov+"


def test_zero_budget_has_zero_utilization():
    scenario = ScenarioParameters(growth_rate=0, attrition_rate=10, budget_constraint=0)
    result = project_scenario(scenario, 100)
    assert result.total_hires == 0
    assert result.budget_utilization == 0.0
    assert result.final_headcount < 100


def test_zero_headcount_reports_no_growth(base_scenario):
    result = project_scenario(base_scenario, 0)
    assert result.final_headcount == 0
    assert result.achieved_growth == 0.0


@pytest.mark.parametrize("utilization, achieved, growth, expected", [
    (50, 10, 10, FEASIBILITY_HIGH),
    (85, 10, 10, FEASIBILITY_MEDIUM),
    (50, 7, 10, FEASIBILITY_MEDIUM),
    (101, 10, 10, FEASIBILITY_LOW),
    (50, 4, 10, FEASIBILITY_LOW),
])
def test_rate_feasibility(utilization, achieved, growth, expected):
    assert rate_feasibility(utilization, achieved, growth) == expected


def test_project_scenarios_requires_input():
    with pytest.raises(EmptyInputError):
        project_scenarios([], 100)


def test_project_scenarios_rejects_invalid_horizon(base_scenario):
    bad = base_scenario.with_overrides(scenario_id="bad", time_horizon=0)
    with pytest.raises(InvalidScenarioError, match="bad"):
        project_scenarios([base_scenario, bad], 100)


def test_project_scenarios_keeps_order(base_scenario):
    other = base_scenario.with_overrides(scenario_id="other", growth_rate=0)
    results = project_scenarios([base_scenario, other], 100)
    assert [r.scenario_id for r in results] == ["base", "other"]


def test_fractional_budget_is_not_rounded_before_capping():
    # ceil(3.4 / 3) allows two hires a month; rounding to 3 first would allow one
    scenario = ScenarioParameters(
        growth_rate=50, attrition_rate=0, budget_constraint=3.4, time_horizon=3, seasonal_adjustment=False
    )
    result = project_scenario(scenario, 100)
    assert [p.hires for p in result.projections] == [2, 2, 2]
    assert result.final_headcount == 106


def test_utilization_never_reported_above_full():
    scenario = ScenarioParameters(growth_rate=30, attrition_rate=20, budget_constraint=2, time_horizon=12)
    result = project_scenario(scenario, 200)
    assert result.total_hires > scenario.budget_constraint * 4
    assert result.budget_utilization == 100.0
    assert result.feasibility == FEASIBILITY_LOW
