"""Suite driver: validates test cases and times them in order.

A run has two phases:

1. Planning.  Every registered case is resolved for the library version,
   its fixtures are produced, and the validation guard checks that the
   valid fixture passes and the invalid fixture fails.  Any problem here
   aborts the run before a single trial is timed.
2. Timing.  The planned trials run one after another in registration
   order.  A trial whose benchmarked call raises is recorded as failed and
   the remaining trials still run.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from schemabench.bench.dispatch import Versioned, pick_version
from schemabench.bench.errors import ConfigurationError, ValidationGuardError
from schemabench.bench.results import TrialResult, build_report
from schemabench.bench.timing import TrialOptions, run_trial

log = logging.getLogger("schemabench")


class _Missing:
    """Marker for a fixture that a test case does not provide."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


# ---------------------------------------------------------------------------
# Test case definition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TestCase:
    """A named schema with optional valid and invalid fixtures.

    ``init()`` returns ``(schema, valid, invalid)``. Trailing entries may
    be left out; use :data:`MISSING` for a valid fixture that is absent
    while an invalid one is given. ``None`` is an ordinary fixture value.
    ``run(schema, value)`` validates *value* and returns a result whose
    ``error`` (key or attribute) is truthy when validation failed.
    Both may be given per library version, see :mod:`schemabench.bench.dispatch`.
    """

    __test__ = False  # not a pytest test class

    name: str
    init: Versioned
    run: Versioned

    @classmethod
    def from_definition(cls, definition: Any) -> TestCase:
        """Build a TestCase from a TestCase or a ``(name, init, run)`` tuple."""
        if isinstance(definition, TestCase):
            return definition
        if isinstance(definition, (tuple, list)) and len(definition) == 3:
            name, init, run = definition
            if isinstance(name, str):
                return cls(name=name, init=init, run=run)
        raise ConfigurationError(
            f"Test case must be a TestCase or a (name, init, run) tuple, got {definition!r}"
        )


@dataclass(frozen=True)
class PlannedTrial:
    """A validated trial waiting to be timed."""

    name: str
    fn: Callable[[], Any]


def extract_error(result: Any) -> Any:
    """Return the error carried by a validation result, if any."""
    if isinstance(result, Mapping):
        return result.get("error")
    return getattr(result, "error", None)


def _unpack_fixtures(case_name: str, produced: Any) -> tuple[Any, Any, Any]:
    if not isinstance(produced, (tuple, list)) or not 1 <= len(produced) <= 3:
        raise ConfigurationError(
            f"init() of {case_name!r} must return (schema, valid, invalid), got {produced!r}"
        )
    schema, valid, invalid = (list(produced) + [MISSING, MISSING])[:3]
    return schema, valid, invalid


# ---------------------------------------------------------------------------
# SuiteDriver
# ---------------------------------------------------------------------------


class SuiteDriver:
    """Runs registered test cases against one library version.

    Usage::

        driver = SuiteDriver(version, options)
        for case in cases:
            driver.register(case)
        report = driver.run()
    """

    def __init__(
        self,
        version: str,
        options: TrialOptions | None = None,
        *,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.version = version
        self.options = options or TrialOptions()
        self.timer = timer
        self._cases: list[TestCase] = []

    @property
    def cases(self) -> list[TestCase]:
        """Registered test cases in registration order."""
        return list(self._cases)

    def register(self, case: TestCase) -> None:
        """Add a test case to the end of the suite."""
        self._cases.append(case)

    def plan(self) -> list[PlannedTrial]:
        """Resolve, validate and expand every registered case.

        Raises:
            ConfigurationError: If a case has no fixture or a callable
                has no variant for the library version.
            ValidationGuardError: If a fixture does not validate as declared.
        """
        planned: list[PlannedTrial] = []
        for case in self._cases:
            planned.extend(self._plan_case(case))
        return planned

    def _plan_case(self, case: TestCase) -> list[PlannedTrial]:
        init = pick_version(case.init, self.version)
        runner = pick_version(case.run, self.version)

        try:
            produced = init()
        except Exception as exc:  # noqa: BLE001
            raise ValidationGuardError(f"init() failed for: {case.name}: {exc}") from exc
        schema, valid, invalid = _unpack_fixtures(case.name, produced)

        if valid is MISSING and invalid is MISSING:
            raise ConfigurationError(
                f"Test case {case.name!r} has neither a valid nor an invalid fixture"
            )

        if valid is not MISSING and self._validate(case.name, runner, schema, valid):
            raise ValidationGuardError(f"validation must not fail for: {case.name}")
        if invalid is not MISSING and not self._validate(case.name, runner, schema, invalid):
            raise ValidationGuardError(f"validation must fail for: {case.name}")

        trials: list[PlannedTrial] = []
        if valid is not MISSING:
            valid_name = case.name if invalid is MISSING else f"{case.name} (valid)"
            trials.append(PlannedTrial(valid_name, functools.partial(runner, schema, valid)))
        if invalid is not MISSING:
            trials.append(
                PlannedTrial(f"{case.name} (invalid)", functools.partial(runner, schema, invalid))
            )
        return trials

    @staticmethod
    def _validate(name: str, runner: Callable[..., Any], schema: Any, value: Any) -> Any:
        try:
            return extract_error(runner(schema, value))
        except Exception as exc:  # noqa: BLE001
            raise ValidationGuardError(f"validation raised for: {name}: {exc}") from exc

    def run(self) -> list[TrialResult]:
        """Validate every case, then time every trial in order.

        Returns:
            The report: one TrialResult per trial, in registration order.
        """
        planned = self.plan()
        log.info("Running %d trials for %d test cases", len(planned), len(self._cases))

        outcomes = []
        for index, trial in enumerate(planned, start=1):
            log.debug("[%d/%d] %s", index, len(planned), trial.name)
            outcomes.append(run_trial(trial.name, trial.fn, self.options, timer=self.timer))

        failed = sum(1 for outcome in outcomes if outcome.failed)
        if failed:
            log.warning("%d of %d trials failed", failed, len(outcomes))
        return build_report(outcomes)
