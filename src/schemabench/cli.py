"""Command-line interface for schemabench.

Subcommands:
    schemabench run      Benchmark a library build against a test suite
    schemabench show     Display a saved report, optionally compared
    schemabench export   Export a saved report to CSV or Markdown
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click

from schemabench import __version__
from schemabench.bench.errors import BenchError, ReportFormatError
from schemabench.logging import setup_logging

if TYPE_CHECKING:
    from schemabench.bench.compare import ComparisonRow


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """schemabench — Benchmark schema validation libraries and catch regressions."""


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "-j",
    "--joi",
    "--library",
    "library",
    type=str,
    default=None,
    help="Library build to benchmark: module name, package directory or .py file.",
)
@click.option(
    "--suite",
    type=str,
    default=None,
    help="Test suite: module name or .py file (default: suite.py).",
)
@click.option(
    "-c",
    "--compare",
    "compare_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Previous report to compare against.",
)
@click.option(
    "-s",
    "--save",
    "save_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Where to save the new report.",
)
@click.option(
    "-t",
    "--threshold",
    type=float,
    default=None,
    help="Significant difference, in percent (default: 10).",
)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML profile with default settings.",
)
@click.option("--min-samples", type=int, default=None, help="Samples per trial (default: 100).")
@click.option(
    "--min-time",
    type=float,
    default=None,
    help="Minimum duration of one sample in seconds (default: 0.05).",
)
@click.option(
    "--max-time",
    type=float,
    default=None,
    help="Keep sampling a trial for at least this many seconds (default: 5).",
)
@click.option(
    "--fail-on-regression",
    is_flag=True,
    default=False,
    help="Exit with status 1 if any trial is significantly slower.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def run(  # noqa: PLR0913
    library: str | None,
    suite: str | None,
    compare_path: Path | None,
    save_path: Path | None,
    threshold: float | None,
    profile_path: Path | None,
    min_samples: int | None,
    min_time: float | None,
    max_time: float | None,
    fail_on_regression: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Benchmark a library build and print the results table.

    \b
    Examples:
        # Benchmark the package in the current directory
        schemabench run --suite benchmarks/suite.py

        # Save a baseline, then compare a new build against it
        schemabench run -j ./build/v1 -s baseline.json
        schemabench run -j ./build/v2 -c baseline.json -t 5
    """
    from schemabench.bench.config import config_from_profile, load_profile
    from schemabench.bench.display import (
        format_comparison_summary,
        format_errors,
        format_report_table,
    )
    from schemabench.bench.runner import BenchRunner

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    cli_overrides: dict[str, object] = {
        "library": library,
        "suite": suite,
        "compare_path": compare_path,
        "save_path": save_path,
        "threshold": threshold,
        "min_samples": min_samples,
        "min_time": min_time,
        "max_time": max_time,
        "fail_on_regression": fail_on_regression,
    }
    try:
        profile_data = load_profile(profile_path) if profile_path else {}
        config = config_from_profile(profile_data, cli_overrides=cli_overrides)
    except (OSError, ValueError) as exc:
        _fail(str(exc))

    try:
        result = BenchRunner(config).run()
    except (BenchError, OSError) as exc:
        _fail(str(exc))
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    click.echo(format_report_table(result.rows, compare=result.compared))

    errors = format_errors(result.failed)
    if errors:
        click.echo()
        click.echo(errors)

    if result.summary is not None:
        click.echo()
        click.echo(format_comparison_summary(result.summary))
        if config.fail_on_regression and result.summary.regressed:
            raise SystemExit(1)


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


def _load_rows(
    report_path: Path,
    compare_path: Path | None,
    threshold: float,
) -> tuple[list[ComparisonRow], bool]:
    """Load a saved report and compare it when a previous one is usable."""
    from schemabench.bench.compare import compare_reports, rows_without_comparison
    from schemabench.bench.results import load_previous_report, load_report

    try:
        report = load_report(report_path)
    except (OSError, ReportFormatError) as exc:
        _fail(f"Cannot read report {report_path}: {exc}")

    previous = load_previous_report(compare_path) if compare_path else None
    if previous is None:
        return rows_without_comparison(report), False
    return compare_reports(report, previous, threshold), True


@main.command("show")
@click.argument("report_path", type=click.Path(path_type=Path))
@click.option(
    "-c",
    "--compare",
    "compare_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Previous report to compare against.",
)
@click.option("-t", "--threshold", type=float, default=10.0, show_default=True)
def show(report_path: Path, compare_path: Path | None, threshold: float) -> None:
    """Display a saved report.

    REPORT_PATH is a JSON report written by ``schemabench run --save``.
    """
    from schemabench.bench.compare import summarize_comparison
    from schemabench.bench.display import (
        format_comparison_summary,
        format_errors,
        format_report_table,
    )

    setup_logging()
    rows, compared = _load_rows(report_path, compare_path, threshold)

    click.echo(format_report_table(rows, compare=compared))
    errors = format_errors([row.result for row in rows])
    if errors:
        click.echo()
        click.echo(errors)
    if compared:
        click.echo()
        click.echo(format_comparison_summary(summarize_comparison(rows, threshold)))


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


@main.command("export")
@click.argument("report_path", type=click.Path(path_type=Path))
@click.option(
    "-c",
    "--compare",
    "compare_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Previous report to compare against.",
)
@click.option("-t", "--threshold", type=float, default=10.0, show_default=True)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "markdown"]),
    default="csv",
    help="Export format.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file (default: stdout).",
)
def export(
    report_path: Path,
    compare_path: Path | None,
    threshold: float,
    fmt: str,
    output: Path | None,
) -> None:
    """Export a saved report to CSV or Markdown.

    \b
    Examples:
        schemabench export latest.json --format csv > latest.csv
        schemabench export latest.json -c baseline.json --format markdown -o report.md
    """
    from schemabench.bench.export import export_csv, export_markdown

    setup_logging()
    rows, _ = _load_rows(report_path, compare_path, threshold)

    if fmt == "csv":
        text = export_csv(rows)
    else:
        text = export_markdown(rows, threshold=threshold)

    if output:
        output.write_text(text, encoding="utf-8")
        click.echo(f"Exported to {output}")
    else:
        click.echo(text, nl=False)
