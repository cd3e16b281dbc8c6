import pytest

from headcount_model.config.models import StressCondition
from headcount_model.engines.stress import (
    StressConditionResult,
    resilience_score,
    resolve_conditions,
    stress_test,
    survival_rate,
)
from headcount_model.errors import EmptyInputError, UnknownStressConditionError

pytestmark = pytest.mark.engines


@pytest.mark.parametrize("outcome, baseline, expected", [
    (50, 100, 50.0),
    (150, 100, 100.0),
    (0, 100, 0.0),
    (10, 0, 100.0),
])
def test_survival_rate(outcome, baseline, expected):
    assert survival_rate(outcome, baseline) == expected


def _condition_result(rate):
    return StressConditionResult("c", "C", "moderate", 0.0, 0.0, 0.0, rate)


def test_resilience_is_plain_mean():
    results = [_condition_result(r) for r in (100.0, 50.0, 90.0)]
    assert resilience_score(results) == pytest.approx(80.0)
    assert resilience_score([]) == 0.0


def test_full_catalog_by_default(small_settings):
    conditions = resolve_conditions(None, small_settings)
    assert [c.id for c in conditions] == [
        "recession", "rapid-growth", "high-turnover", "budget-crisis", "talent-war", "market-freeze",
    ]


def test_resolve_accepts_custom_conditions(small_settings):
    custom = StressCondition(id="custom", name="Custom", budget_multiplier=0.5)
    assert resolve_conditions(["recession", custom], small_settings)[1] is custom


def test_unknown_condition(small_settings):
    with pytest.raises(UnknownStressConditionError, match="not-a-shock"):
        resolve_conditions(["not-a-shock"], small_settings)


def test_empty_selection(base_scenario, small_settings):
    with pytest.raises(EmptyInputError):
        stress_test([base_scenario], 100, [], small_settings)


def test_full_stress_test(base_scenario, small_settings):
    [result] = stress_test([base_scenario], 100, settings=small_settings, seed=21)

    assert len(result.stress_results) == 6
    rates = [s.survival_rate for s in result.stress_results]
    assert all(0 <= r <= 100 for r in rates)
    assert 0 <= result.resilience_score <= 100
    assert result.resilience_score == pytest.approx(sum(rates) / len(rates))

    worst = min(result.stress_results, key=lambda s: s.outcome)
    assert result.worst_case == worst.condition_name
    for s in result.stress_results:
        assert s.change == pytest.approx(s.outcome - result.baseline_outcome)
        assert s.change_percent == pytest.approx(s.change / result.baseline_outcome * 100)


def test_market_freeze_never_beats_baseline(base_scenario, small_settings):
    [result] = stress_test([base_scenario], 100, ["market-freeze"], small_settings, seed=6)
    freeze = result.stress_results[0]
    assert freeze.outcome < 100
    assert freeze.outcome <= result.baseline_outcome
    assert result.worst_case == result.best_case == "Market Freeze"


def test_neutral_condition_matches_baseline(base_scenario, small_settings):
    neutral = StressCondition(id="neutral", name="Neutral")
    [result] = stress_test([base_scenario], 100, [neutral], small_settings, seed=13)
    assert abs(result.stress_results[0].change_percent) < 5
    assert result.stress_results[0].survival_rate > 95


def test_resilience_depends_on_selection(base_scenario, small_settings):
    mild = stress_test([base_scenario], 100, ["rapid-growth"], small_settings, seed=1)[0]
    harsh = stress_test([base_scenario], 100, ["market-freeze"], small_settings, seed=1)[0]
    assert mild.resilience_score > harsh.resilience_score


def test_seeded_stress_is_reproducible(open_budget_scenario, small_settings):
    first = stress_test([open_budget_scenario], 100, ["recession", "talent-war"], small_settings, seed=77)
    second = stress_test([open_budget_scenario], 100, ["recession", "talent-war"], small_settings, seed=77)
    assert first == second
    other = stress_test([open_budget_scenario], 100, ["recession", "talent-war"], small_settings, seed=78)
    assert other[0].baseline_outcome != first[0].baseline_outcome
