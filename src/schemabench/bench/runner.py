"""Benchmark execution engine.

Orchestrates:
1. Configuration validation
2. Loading the previous report (when comparing)
3. Loading the library under test and the test suite
4. Validating and timing every trial (see :mod:`schemabench.bench.suite`)
5. Saving the new report
6. Comparing against the previous report

Files are only read before timing starts and only written after it ends.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from schemabench.bench.compare import (
    ComparisonRow,
    ComparisonSummary,
    compare_reports,
    rows_without_comparison,
    summarize_comparison,
)
from schemabench.bench.config import BenchConfig, validate_config
from schemabench.bench.errors import ConfigurationError
from schemabench.bench.loader import load_library, load_suite
from schemabench.bench.results import TrialResult, load_previous_report, save_report
from schemabench.bench.suite import SuiteDriver

log = logging.getLogger("schemabench")


@dataclass
class RunResult:
    """Everything a completed run produced."""

    library_version: str
    report: list[TrialResult]
    rows: list[ComparisonRow]
    previous: list[TrialResult] | None = None
    summary: ComparisonSummary | None = None

    @property
    def compared(self) -> bool:
        """True if a previous report was loaded and compared against."""
        return self.previous is not None

    @property
    def failed(self) -> list[TrialResult]:
        """Trials that raised while being timed."""
        return [entry for entry in self.report if entry.failed]


class BenchRunner:
    """Executes a benchmark run according to a BenchConfig.

    Usage::

        config = BenchConfig(library="./build", suite="benchmarks/suite.py")
        result = BenchRunner(config).run()
    """

    def __init__(
        self,
        config: BenchConfig,
        *,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.config = config
        self.timer = timer

    def run(self) -> RunResult:
        """Execute the full benchmark.

        Raises:
            ConfigurationError: If the configuration, library or suite
                cannot be used.
            ValidationGuardError: If a fixture does not validate as declared.
            OSError: If the report cannot be saved.
        """
        # Phase 1: Validate configuration.
        errors = validate_config(self.config)
        fatal = [e for e in errors if e.severity == "error"]
        for w in (e for e in errors if e.severity == "warning"):
            log.warning("Config warning: %s: %s", w.field, w.message)
        if fatal:
            messages = [f"  {e.field}: {e.message}" for e in fatal]
            raise ConfigurationError("Invalid benchmark configuration:\n" + "\n".join(messages))

        # Phase 2: Previous report.
        previous = None
        if self.config.compare_path is not None:
            previous = load_previous_report(self.config.compare_path)

        # Phase 3: Library and suite.
        library, version = load_library(self.config.library)
        cases = load_suite(self.config.suite, library)

        # Phase 4: Validate and time.
        driver = SuiteDriver(version, self.config.trial_options, timer=self.timer)
        for case in cases:
            driver.register(case)
        report = driver.run()

        # Phase 5: Persist.
        if self.config.save_path is not None:
            save_report(self.config.save_path, report)

        # Phase 6: Compare.
        if previous is None:
            return RunResult(
                library_version=version,
                report=report,
                rows=rows_without_comparison(report),
            )

        rows = compare_reports(report, previous, self.config.threshold)
        summary = summarize_comparison(rows, self.config.threshold)
        if summary.regressed:
            log.warning(
                "%d trials are more than %g%% slower than before",
                summary.regressed,
                self.config.threshold,
            )
        return RunResult(
            library_version=version,
            report=report,
            rows=rows,
            previous=previous,
            summary=summary,
        )
