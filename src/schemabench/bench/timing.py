"""Timing capture for benchmark trials.

A trial calls one function over and over. The inner loop count is first
calibrated so that a single sample lasts at least ``min_time`` seconds,
which keeps timer resolution out of the measurement. Samples are then
collected until at least ``min_samples`` have been taken *and*
``max_time`` seconds have been spent sampling.

An exception raised by the benchmarked function ends the trial and is
captured into the outcome instead of being propagated.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from schemabench.bench.results import ErrorInfo, TrialOutcome
from schemabench.bench.stats import describe_sample

log = logging.getLogger("schemabench")

# Upper bound on the calibrated inner loop count.
_MAX_COUNT = 1 << 30


# ---------------------------------------------------------------------------
# TrialOptions
# ---------------------------------------------------------------------------


@dataclass
class TrialOptions:
    """Sampling parameters for a trial."""

    min_samples: int = 100
    min_time: float = 0.05  # minimum duration of one sample, seconds
    max_time: float = 5.0  # minimum total sampling time, seconds


# ---------------------------------------------------------------------------
# Core timing implementation
# ---------------------------------------------------------------------------


def _time_loop(fn: Callable[[], Any], count: int, timer: Callable[[], float]) -> float:
    """Call *fn* *count* times and return the elapsed time in seconds."""
    start = timer()
    for _ in range(count):
        fn()
    return timer() - start


def calibrate(
    fn: Callable[[], Any],
    min_time: float,
    *,
    timer: Callable[[], float] = time.perf_counter,
) -> int:
    """Find an inner loop count for which one sample lasts >= *min_time*.

    Also serves as the warm-up phase: none of these calls are measured.
    """
    count = 1
    while count < _MAX_COUNT:
        elapsed = _time_loop(fn, count, timer)
        if elapsed >= min_time:
            return count
        if elapsed <= 0:
            count *= 2
        else:
            # Aim slightly past min_time, but at least double each round.
            count = max(count * 2, int(count * min_time * 1.2 / elapsed))
    return _MAX_COUNT


def run_trial(
    name: str,
    fn: Callable[[], Any],
    options: TrialOptions | None = None,
    *,
    timer: Callable[[], float] = time.perf_counter,
) -> TrialOutcome:
    """Time *fn* and return its outcome.

    Args:
        name: The trial name carried into the outcome.
        fn: Zero-argument callable to benchmark.
        options: Sampling parameters (defaults to :class:`TrialOptions`).
        timer: Clock returning seconds. Injectable for tests.

    Returns:
        TrialOutcome with either sample statistics or the captured error.
    """
    opts = options or TrialOptions()
    log.debug("Starting trial %r", name)

    try:
        count = calibrate(fn, opts.min_time, timer=timer)
        periods: list[float] = []
        total = 0.0
        while len(periods) < opts.min_samples or total < opts.max_time:
            elapsed = _time_loop(fn, count, timer)
            total += elapsed
            periods.append(elapsed / count)
    except Exception as exc:  # noqa: BLE001
        log.error("Trial %r raised %s: %s", name, type(exc).__name__, exc)
        return TrialOutcome(name=name, error=ErrorInfo.from_exception(exc))

    stats = describe_sample(periods)
    log.info(
        "%s x %s ops/sec ±%.2f%% (%d runs sampled)",
        name,
        f"{stats.hz:,.0f}",
        stats.rme,
        stats.size,
    )
    log.debug("Trial %r stats: %s", name, stats.to_dict())
    return TrialOutcome(name=name, stats=stats)
