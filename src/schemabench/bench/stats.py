"""Sample statistics for benchmark trials.

A trial produces a list of *periods*: the mean time in seconds taken by
one call of the benchmarked function, one value per sample. This module
turns those periods into a throughput estimate (operations per second)
and a relative margin of error at 95% confidence.

The margin of error uses the two-tailed Student's t critical value for
``n - 1`` degrees of freedom; above 30 degrees of freedom the normal
approximation (1.96) is used.
"""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass
from typing import Sequence


# ---------------------------------------------------------------------------
# Student's t critical values (two-tailed, 95% confidence)
# ---------------------------------------------------------------------------

_T_TABLE: dict[int, float] = {
    1: 12.706,
    2: 4.303,
    3: 3.182,
    4: 2.776,
    5: 2.571,
    6: 2.447,
    7: 2.365,
    8: 2.306,
    9: 2.262,
    10: 2.228,
    11: 2.201,
    12: 2.179,
    13: 2.16,
    14: 2.145,
    15: 2.131,
    16: 2.12,
    17: 2.11,
    18: 2.101,
    19: 2.093,
    20: 2.086,
    21: 2.08,
    22: 2.074,
    23: 2.069,
    24: 2.064,
    25: 2.06,
    26: 2.056,
    27: 2.052,
    28: 2.048,
    29: 2.045,
    30: 2.042,
}
_T_INFINITY = 1.96


def critical_value(df: int) -> float:
    """Return the 95% two-tailed t critical value for *df* degrees of freedom.

    ``df`` below 1 is treated as 1.
    """
    return _T_TABLE.get(max(df, 1), _T_INFINITY)


# ---------------------------------------------------------------------------
# SampleStats
# ---------------------------------------------------------------------------


@dataclass
class SampleStats:
    """Summary of the periods collected by one trial."""

    size: int
    mean: float  # seconds per call
    deviation: float
    variance: float
    sem: float  # standard error of the mean
    moe: float  # margin of error (seconds)
    rme: float  # relative margin of error (percent)

    @property
    def hz(self) -> float:
        """Operations per second."""
        if self.mean <= 0:
            return 0.0
        return 1.0 / self.mean

    def to_dict(self) -> dict[str, float | int]:
        """Serialize to a dict."""
        return {
            "size": self.size,
            "mean": self.mean,
            "deviation": self.deviation,
            "variance": self.variance,
            "sem": self.sem,
            "moe": self.moe,
            "rme": self.rme,
            "hz": self.hz,
        }


def describe_sample(periods: Sequence[float]) -> SampleStats:
    """Compute sample statistics from per-call periods.

    Args:
        periods: Seconds per call, one value per sample.

    Returns:
        SampleStats. With fewer than 2 periods the variance and the
        margins of error are 0.0. An empty sample gives NaN for the mean.
    """
    size = len(periods)
    if size == 0:
        return SampleStats(
            size=0,
            mean=float("nan"),
            deviation=float("nan"),
            variance=float("nan"),
            sem=float("nan"),
            moe=float("nan"),
            rme=float("nan"),
        )

    mean = statistics.fmean(periods)
    variance = statistics.variance(periods) if size >= 2 else 0.0
    deviation = math.sqrt(variance)
    sem = deviation / math.sqrt(size)
    moe = sem * critical_value(size - 1)
    rme = (moe / mean) * 100 if mean > 0 else 0.0

    return SampleStats(
        size=size,
        mean=mean,
        deviation=deviation,
        variance=variance,
        sem=sem,
        moe=moe,
        rme=rme,
    )
