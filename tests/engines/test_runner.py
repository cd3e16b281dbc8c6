import time

import numpy as np
import pytest

from headcount_model.config.models import ExecutionSettings, JitterSettings, KernelProfile
from headcount_model.engines.runner import CancellationToken, TrialRunner, as_seed_sequence
from headcount_model.errors import SimulationCancelledError, SimulationTimeoutError

pytestmark = pytest.mark.engines


def _run(scenario, execution, seed=2024, token=None, samples=100):
    runner = TrialRunner(execution, token)
    return runner.run(
        scenario,
        100,
        samples,
        JitterSettings.from_variance(0.2),
        KernelProfile(),
        seed=seed,
    )


def test_samples_shape(open_budget_scenario):
    samples = _run(open_budget_scenario, ExecutionSettings(max_workers=1))
    assert samples.monthly.shape == (100, 12)
    assert samples.sample_count == 100
    assert np.array_equal(samples.finals, samples.monthly[:, -1])
    assert (samples.monthly >= 0).all()
    # trials must actually differ for the seeding checks below to mean anything
    assert samples.finals.std() > 0


def test_results_independent_of_worker_count(open_budget_scenario):
    serial = _run(open_budget_scenario, ExecutionSettings(max_workers=1, batch_size=100))
    pooled = _run(open_budget_scenario, ExecutionSettings(max_workers=4, batch_size=7))
    assert serial.finals.std() > 0
    assert np.array_equal(serial.monthly, pooled.monthly)


def test_different_seeds_differ(open_budget_scenario):
    first = _run(open_budget_scenario, ExecutionSettings(), seed=1)
    second = _run(open_budget_scenario, ExecutionSettings(), seed=2)
    assert not np.array_equal(first.monthly, second.monthly)


def test_reused_seed_sequence_repeats(open_budget_scenario):
    seq = np.random.SeedSequence(42)
    first = _run(open_budget_scenario, ExecutionSettings(), seed=seq)
    second = _run(open_budget_scenario, ExecutionSettings(), seed=seq)
    assert first.finals.std() > 0
    assert np.array_equal(first.monthly, second.monthly)
    assert np.array_equal(first.monthly, _run(open_budget_scenario, ExecutionSettings(), seed=42).monthly)


def test_seed_sequence_normalization():
    seq = np.random.SeedSequence(99)
    seq.spawn(3)
    fresh = as_seed_sequence(seq)
    assert fresh is not seq
    assert fresh.entropy == seq.entropy
    assert fresh.n_children_spawned == 0
    assert as_seed_sequence(99).entropy == 99


def test_cancelled_token_stops_run(base_scenario):
    token = CancellationToken()
    token.cancel()
    assert token.cancelled
    with pytest.raises(SimulationCancelledError):
        _run(base_scenario, ExecutionSettings(batch_size=10), token=token)


def test_deadline_stops_run(base_scenario):
    runner = TrialRunner(ExecutionSettings(timeout_seconds=0.001))
    time.sleep(0.01)
    with pytest.raises(SimulationTimeoutError):
        runner.run(base_scenario, 100, 50, JitterSettings.none(), KernelProfile(), seed=1)


def test_sample_count_must_be_positive(base_scenario):
    with pytest.raises(ValueError):
        _run(base_scenario, ExecutionSettings(), samples=0)
