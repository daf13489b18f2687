"""Export benchmark reports to CSV and Markdown formats.

CSV format: one row per trial, with the previous-run columns filled in
when the trial was matched against a previous report.

Markdown format: a results table and a comparison summary suitable for
pull request comments and release notes.
"""

from __future__ import annotations

import csv
import io
import math

from schemabench.bench.compare import ComparisonRow, summarize_comparison
from schemabench.bench.config import DEFAULT_THRESHOLD


def _num(value: float | int | None, fmt: str) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return format(value, fmt)


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


def export_csv(rows: list[ComparisonRow]) -> str:
    """Export rows as CSV.

    Columns:
        name, hz, rme, size, error, previous_hz, previous_rme,
        previous_size, percent_diff, significant
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(
        [
            "name",
            "hz",
            "rme",
            "size",
            "error",
            "previous_hz",
            "previous_rme",
            "previous_size",
            "percent_diff",
            "significant",
        ]
    )

    for row in rows:
        r = row.result
        writer.writerow(
            [
                r.name,
                f"{r.hz:.6f}",
                f"{r.rme:.4f}",
                r.size,
                r.error.message if r.error else "",
                _num(row.previous_hz, ".6f"),
                _num(row.previous_rme, ".4f"),
                _num(row.previous_size, "d"),
                _num(row.percent_diff, ".4f"),
                row.significant if row.matched else "",
            ]
        )

    return output.getvalue()


# ---------------------------------------------------------------------------
# Markdown export
# ---------------------------------------------------------------------------


def export_markdown(
    rows: list[ComparisonRow],
    *,
    threshold: float = DEFAULT_THRESHOLD,
    title: str = "Benchmark results",
) -> str:
    """Export rows as a Markdown report."""
    compare = any(row.matched for row in rows)
    lines: list[str] = [f"# {title}", ""]

    if compare:
        lines.append("| Name | Ops/sec | MoE | Samples | Previous ops/sec | % difference |")
        lines.append("|---|---:|---:|---:|---:|---:|")
    else:
        lines.append("| Name | Ops/sec | MoE | Samples |")
        lines.append("|---|---:|---:|---:|")

    for row in rows:
        r = row.result
        name = f"{r.name} (error)" if r.failed else r.name
        cells = [name, f"{r.hz:,.0f}", f"±{r.rme:.2f}%", f"{r.size:,}"]
        if compare:
            if row.previous is None:
                cells += ["", ""]
            else:
                if row.available:
                    diff = f"{row.percent_diff:+.2f}%"
                    if row.significant:
                        diff = f"**{diff}**"
                else:
                    diff = "N/A"
                cells += [f"{row.previous.hz:,.0f}", diff]
        lines.append("| " + " | ".join(cells) + " |")

    if compare:
        summary = summarize_comparison(rows, threshold)
        lines.append("")
        lines.append("## Summary")
        lines.append("")
        lines.append(f"- Threshold: {threshold:g}%")
        lines.append(f"- Compared: {summary.matched}")
        lines.append(f"- Faster: {summary.improved}")
        lines.append(f"- Slower: {summary.regressed}")
        lines.append(f"- Unchanged: {summary.unchanged}")

    failed = [row.result for row in rows if row.result.failed]
    if failed:
        lines.append("")
        lines.append("## Errors")
        lines.append("")
        for r in failed:
            message = r.error.message if r.error else ""
            lines.append(f"- **{r.name}**: {message}")

    return "\n".join(lines) + "\n"
