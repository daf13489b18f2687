"""Benchmark comparison against a previous report.

Each entry of the current report is matched by exact name against the
previous report. Matched rows get the previous measurements and the
percentage change in throughput; a change whose magnitude is strictly
greater than the threshold is flagged as significant. Positive changes
mean the current run is faster.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from schemabench.bench.config import DEFAULT_THRESHOLD
from schemabench.bench.results import TrialResult

log = logging.getLogger("schemabench")


# ---------------------------------------------------------------------------
# Per-trial comparison result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonRow:
    """A current report entry with its previous-run counterpart, if any."""

    result: TrialResult
    previous: TrialResult | None = None
    percent_diff: float | None = None  # None: unmatched, NaN: previous hz was 0
    significant: bool = False

    @property
    def name(self) -> str:
        return self.result.name

    @property
    def matched(self) -> bool:
        """True if the previous report has an entry with the same name."""
        return self.previous is not None

    @property
    def available(self) -> bool:
        """True if a percentage difference could be computed."""
        return self.percent_diff is not None and not math.isnan(self.percent_diff)

    @property
    def previous_hz(self) -> float | None:
        return self.previous.hz if self.previous else None

    @property
    def previous_rme(self) -> float | None:
        return self.previous.rme if self.previous else None

    @property
    def previous_size(self) -> int | None:
        return self.previous.size if self.previous else None

    @property
    def improved(self) -> bool:
        """Significantly faster than the previous run."""
        return self.significant and self.percent_diff is not None and self.percent_diff > 0

    @property
    def regressed(self) -> bool:
        """Significantly slower than the previous run."""
        return self.significant and self.percent_diff is not None and self.percent_diff < 0


# ---------------------------------------------------------------------------
# Comparison logic
# ---------------------------------------------------------------------------


def percent_difference(current_hz: float, previous_hz: float) -> float:
    """Percentage change from *previous_hz* to *current_hz*.

    Returns NaN when *previous_hz* is zero.
    """
    if previous_hz == 0:
        return float("nan")
    return 100 * (current_hz - previous_hz) / previous_hz


def compare_reports(
    current: list[TrialResult],
    previous: list[TrialResult],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[ComparisonRow]:
    """Compare a report against a previous one.

    Args:
        current: The report of this run.
        previous: A report from an earlier run.
        threshold: Percent change above which a difference is significant.

    Returns:
        One ComparisonRow per entry of *current*, in the same order.
    """
    lookup: dict[str, TrialResult] = {}
    for entry in previous:
        # First entry wins for duplicated names.
        lookup.setdefault(entry.name, entry)

    rows: list[ComparisonRow] = []
    for entry in current:
        prev = lookup.get(entry.name)
        if prev is None:
            rows.append(ComparisonRow(result=entry))
            continue

        pct = percent_difference(entry.hz, prev.hz)
        if math.isnan(pct):
            log.debug("No previous throughput for %r; difference unavailable", entry.name)
        rows.append(
            ComparisonRow(
                result=entry,
                previous=prev,
                percent_diff=pct,
                significant=abs(pct) > threshold,
            )
        )
    return rows


def rows_without_comparison(report: list[TrialResult]) -> list[ComparisonRow]:
    """Wrap a report in rows that carry no comparison."""
    return [ComparisonRow(result=entry) for entry in report]


# ---------------------------------------------------------------------------
# Aggregate comparison
# ---------------------------------------------------------------------------


@dataclass
class ComparisonSummary:
    """Counts over a list of comparison rows."""

    threshold: float
    rows: list[ComparisonRow] = field(default_factory=list)
    matched: int = 0
    unmatched: int = 0
    unavailable: int = 0  # matched, but the previous throughput was 0
    improved: int = 0
    regressed: int = 0
    unchanged: int = 0  # matched, available and not significant

    @property
    def regressions(self) -> list[ComparisonRow]:
        """Significantly slower rows, in report order."""
        return [row for row in self.rows if row.regressed]

    @property
    def improvements(self) -> list[ComparisonRow]:
        """Significantly faster rows, in report order."""
        return [row for row in self.rows if row.improved]


def summarize_comparison(
    rows: list[ComparisonRow],
    threshold: float = DEFAULT_THRESHOLD,
) -> ComparisonSummary:
    """Count matched, significant and unavailable rows."""
    summary = ComparisonSummary(threshold=threshold, rows=list(rows))
    for row in rows:
        if not row.matched:
            summary.unmatched += 1
            continue
        summary.matched += 1
        if not row.available:
            summary.unavailable += 1
        elif row.improved:
            summary.improved += 1
        elif row.regressed:
            summary.regressed += 1
        else:
            summary.unchanged += 1
    return summary
