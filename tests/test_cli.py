import logging

import pytest
import yaml

from headcount_model.cli import main, parse_arguments
from logging_config import reset_logging

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()
    logging.getLogger().setLevel(logging.WARNING)


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / "scenarios.yaml"
    path.write_text(yaml.safe_dump({
        "scenarios": [
            {"scenario_id": "steady", "name": "Steady", "growth_rate": 8},
            {"scenario_id": "push", "name": "Push", "growth_rate": 25, "budget_constraint": 12},
        ],
    }))
    return path


@pytest.fixture
def fast_config(tmp_path):
    path = tmp_path / "fast.yaml"
    path.write_text(yaml.safe_dump({
        "reduced_sample_count": 20,
        "monte_carlo": {"sample_count": 50},
        "sensitivity": {"curve_steps": 2},
    }))
    return path


def _args(command, scenario_file, tmp_path, *extra):
    return [
        command,
        "--scenarios", str(scenario_file),
        "--current-headcount", "100",
        "--log-dir", str(tmp_path / "logs"),
        "--seed", "1",
        *extra,
    ]


def test_parse_arguments_defaults(scenario_file):
    args = parse_arguments(["stress", "--scenarios", str(scenario_file), "--current-headcount", "80"])
    assert args.command == "stress"
    assert args.current_headcount == 80
    assert args.conditions is None
    assert args.target_headcount is None
    assert args.debug is False


def test_project_command(scenario_file, tmp_path, capsys):
    assert main(_args("project", scenario_file, tmp_path)) == 0
    out = capsys.readouterr().out
    assert "steady" in out and "push" in out
    assert (tmp_path / "logs" / "simulation_events.log").exists()


@pytest.mark.parametrize("command", ["montecarlo", "sensitivity", "stress"])
def test_stochastic_commands(command, scenario_file, fast_config, tmp_path, capsys):
    assert main(_args(command, scenario_file, tmp_path, "--config", str(fast_config))) == 0
    assert "push" in capsys.readouterr().out


def test_stress_with_selected_conditions(scenario_file, fast_config, tmp_path, capsys):
    code = main(_args(
        "stress", scenario_file, tmp_path, "--config", str(fast_config), "--conditions", "recession", "talent-war",
    ))
    assert code == 0
    out = capsys.readouterr().out
    assert "recession" in out and "talent-war" in out
    assert "market-freeze" not in out


def test_unknown_condition_fails_cleanly(scenario_file, fast_config, tmp_path, capsys):
    code = main(_args("stress", scenario_file, tmp_path, "--config", str(fast_config), "--conditions", "meteor"))
    assert code == 1
    assert "meteor" in capsys.readouterr().err


def test_missing_scenario_file(tmp_path, capsys):
    assert main(_args("project", tmp_path / "missing.yaml", tmp_path)) == 1
    assert "not found" in capsys.readouterr().err
