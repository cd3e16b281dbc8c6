# headcount_model/engines/runner.py
"""
Trial execution for Monte Carlo aggregations.

Every trial gets its own generator spawned from one SeedSequence, so results
depend only on the seed and never on worker count or scheduling. Trials are
grouped into fixed-size batches and dispatched to a thread pool; the collected
batches are reassembled in order before any reduction happens.

Cancellation and the optional deadline are checked between trials. A trial
that has started always completes.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from headcount_model.config.models import (
    ExecutionSettings,
    JitterSettings,
    KernelProfile,
    ScenarioParameters,
    StressCondition,
)
from headcount_model.dynamics.kernel import draw_trial_parameters, run_path
from headcount_model.errors import SimulationCancelledError, SimulationTimeoutError

logger = logging.getLogger(__name__)
perf_logger = logging.getLogger("headcount_model.performance")

SeedLike = Union[None, int, Sequence[int], np.random.SeedSequence]


class CancellationToken:
    """Thread-safe flag a caller sets to stop an analysis between trials."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class TrialSamples:
    """Raw samples from one aggregation: one row per trial, one column per month."""

    monthly: np.ndarray

    @property
    def finals(self) -> np.ndarray:
        return self.monthly[:, -1]

    @property
    def sample_count(self) -> int:
        return self.monthly.shape[0]


def as_seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    """
    Normalize a seed to a SeedSequence whose spawn counter starts at zero.

    ``spawn()`` advances a SeedSequence in place, so a caller's sequence is
    rebuilt from its entropy and spawn key; reusing it gives the same children.
    """
    if isinstance(seed, np.random.SeedSequence):
        return np.random.SeedSequence(seed.entropy, spawn_key=seed.spawn_key, pool_size=seed.pool_size)
    return np.random.SeedSequence(seed)


def _chunk(items: List, size: int) -> List[List]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class TrialRunner:
    """
    Runs batches of independent trials on a worker pool.

    One runner is created per analysis call; its deadline (if a timeout is
    configured) covers every aggregation performed through it.
    """

    def __init__(
        self,
        execution: Optional[ExecutionSettings] = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.execution = execution or ExecutionSettings()
        self.cancel_token = cancel_token
        timeout = self.execution.timeout_seconds
        self._deadline = time.monotonic() + timeout if timeout else None

    def check(self) -> None:
        """Raise if the caller cancelled or the deadline has passed."""
        if self.cancel_token is not None and self.cancel_token.cancelled:
            raise SimulationCancelledError("Analysis cancelled by caller")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise SimulationTimeoutError(
                f"Analysis exceeded its {self.execution.timeout_seconds}s timeout"
            )

    def _run_batch(
        self,
        scenario: ScenarioParameters,
        current_headcount: int,
        jitter: JitterSettings,
        profile: KernelProfile,
        condition: Optional[StressCondition],
        seed_batch: List[np.random.SeedSequence],
    ) -> np.ndarray:
        rows = np.empty((len(seed_batch), scenario.time_horizon), dtype=np.int64)
        for i, seq in enumerate(seed_batch):
            self.check()
            rng = np.random.default_rng(seq)
            trial = draw_trial_parameters(scenario, jitter, rng, condition)
            path = run_path(current_headcount, scenario, trial, profile, rng)
            rows[i] = [r.headcount for r in path]
        return rows

    def run(
        self,
        scenario: ScenarioParameters,
        current_headcount: int,
        sample_count: int,
        jitter: JitterSettings,
        profile: KernelProfile,
        condition: Optional[StressCondition] = None,
        seed: SeedLike = None,
    ) -> TrialSamples:
        """
        Simulate ``sample_count`` trials of one scenario.

        Raises:
            SimulationCancelledError: if the cancel token fires between trials.
            SimulationTimeoutError: if the deadline passes between trials.
        """
        if sample_count < 1:
            raise ValueError(f"sample_count must be >= 1, got {sample_count}")
        self.check()

        started = time.perf_counter()
        child_sequences = as_seed_sequence(seed).spawn(sample_count)
        batches = _chunk(child_sequences, self.execution.batch_size)
        args = (scenario, current_headcount, jitter, profile, condition)

        if len(batches) == 1 or self.execution.max_workers == 1:
            blocks = [self._run_batch(*args, batch) for batch in batches]
        else:
            with ThreadPoolExecutor(max_workers=self.execution.max_workers) as pool:
                futures = [pool.submit(self._run_batch, *args, batch) for batch in batches]
                try:
                    blocks = [f.result() for f in futures]
                except BaseException:
                    for f in futures:
                        f.cancel()
                    raise

        samples = TrialSamples(monthly=np.vstack(blocks))
        perf_logger.info(
            f"[RUNNER] {scenario.scenario_id}: {sample_count} trials x {scenario.time_horizon} months "
            f"in {len(batches)} batches took {time.perf_counter() - started:.3f}s"
        )
        return samples
