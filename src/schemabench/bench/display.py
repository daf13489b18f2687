"""Terminal display formatting for benchmark reports.

Renders the results table (with the comparison columns when a previous
report was given), the error summary and the comparison summary. Colors
are applied with :func:`click.style`; ``click.echo`` strips them when the
output is not a terminal.
"""

from __future__ import annotations

import math
from typing import Any

import click

from schemabench.bench.compare import ComparisonRow, ComparisonSummary
from schemabench.bench.results import TrialResult
from schemabench.formatting import format_section_header, format_table, truncate

_BASE_HEADERS = ["Name", "Ops/sec", "MoE", "Sample size"]
_COMPARE_HEADERS = ["Previous ops/sec", "Previous MoE", "Previous sample size", "% difference"]
_SUMMARY_NAME_WIDTH = 40


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------


def _format_hz(hz: float) -> str:
    """Format operations per second with thousands separators."""
    if math.isnan(hz):
        return "N/A"
    return f"{hz:,.0f}"


def _format_rme(rme: float) -> str:
    """Format a relative margin of error."""
    if math.isnan(rme):
        return "N/A"
    return f"± {rme:.2f} %"


def _format_size(size: int) -> str:
    return f"{size:,}"


def _format_diff(pct: float | None) -> str:
    """Format a percentage difference with sign."""
    if pct is None or math.isnan(pct):
        return "N/A"
    sign = "+" if pct > 0 else ""
    return f"{sign}{pct:.2f} %"


# ---------------------------------------------------------------------------
# Results table
# ---------------------------------------------------------------------------


def format_report_table(
    rows: list[ComparisonRow],
    *,
    compare: bool = False,
    color: bool = True,
) -> str:
    """Format report rows as a table.

    Args:
        rows: Rows in report order.
        compare: Add the previous-run columns. Rows without a previous
            entry leave them empty.
        color: Highlight failed trials and significant differences.

    Returns:
        Formatted table for terminal output.
    """
    headers = list(_BASE_HEADERS)
    alignments = ["l", "r", "r", "r"]
    if compare:
        headers += _COMPARE_HEADERS
        alignments += ["r", "r", "r", "r"]

    styles: dict[tuple[int, int], dict[str, Any]] = {}
    if color:
        styles[(-1, 0)] = {"fg": "blue"}
        for ci in range(1, len(_BASE_HEADERS)):
            styles[(-1, ci)] = {"fg": "yellow"}
        if compare:
            for ci in range(len(_BASE_HEADERS), len(headers) - 1):
                styles[(-1, ci)] = {"fg": "cyan"}
            styles[(-1, len(headers) - 1)] = {"fg": "bright_white"}

    cells: list[list[str]] = []
    for ri, row in enumerate(rows):
        r = row.result
        line = [r.name, _format_hz(r.hz), _format_rme(r.rme), _format_size(r.size)]
        if color and r.failed:
            styles[(ri, 0)] = {"fg": "bright_red"}

        if compare and row.previous is not None:
            prev = row.previous
            line += [
                _format_hz(prev.hz),
                _format_rme(prev.rme),
                _format_size(prev.size),
                _format_diff(row.percent_diff),
            ]
            if color and row.significant:
                styles[(ri, len(line) - 1)] = {"fg": "green" if row.improved else "red"}
        cells.append(line)

    return format_table(headers, cells, alignments=alignments, styles=styles, indent=0)


# ---------------------------------------------------------------------------
# Error summary
# ---------------------------------------------------------------------------


def format_errors(report: list[TrialResult], *, color: bool = True) -> str:
    """List every failed trial with its stack trace.

    Returns an empty string when no trial failed.
    """
    failed = [entry for entry in report if entry.error is not None]
    if not failed:
        return ""

    heading = "Errors:"
    if color:
        heading = click.style(heading, fg="bright_red", bold=True, underline=True)

    lines = [heading]
    for entry in failed:
        name = entry.name
        if color:
            name = click.style(name, italic=True)
        lines.append(f"> {name}")
        lines.append(entry.error.stack if entry.error else "")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Comparison summary
# ---------------------------------------------------------------------------


def format_comparison_summary(summary: ComparisonSummary) -> str:
    """Format comparison counts and the trials that moved past the threshold."""
    lines = [format_section_header(f"Comparison (threshold {summary.threshold:g}%)")]
    lines.append(f"  Compared:     {summary.matched}")
    if summary.unmatched:
        lines.append(f"  New trials:   {summary.unmatched}")
    lines.append(f"  Faster:       {summary.improved}")
    lines.append(f"  Slower:       {summary.regressed}")
    lines.append(f"  Unchanged:    {summary.unchanged}")
    if summary.unavailable:
        lines.append(f"  Unavailable:  {summary.unavailable}")

    _append_moved(lines, "Regressions", summary.regressions)
    _append_moved(lines, "Improvements", summary.improvements)
    return "\n".join(lines)


def _append_moved(lines: list[str], title: str, rows: list[ComparisonRow]) -> None:
    if not rows:
        return
    lines.append("")
    lines.append(f"  {title}:")
    for row in rows:
        name = truncate(row.name, _SUMMARY_NAME_WIDTH)
        lines.append(f"    {name:<{_SUMMARY_NAME_WIDTH}} {_format_diff(row.percent_diff):>10s}")
