"""Tests for schemabench.bench.suite — validation guard and trial planning."""

from __future__ import annotations

import unittest
from types import SimpleNamespace
from typing import Any

from bench_test_helpers import FakeClock, make_case, type_runner

from schemabench.bench.errors import ConfigurationError, ValidationGuardError
from schemabench.bench.suite import MISSING, SuiteDriver, TestCase, extract_error
from schemabench.bench.timing import TrialOptions

_FAST = TrialOptions(min_samples=3, min_time=0.1, max_time=0.0)


def _driver(*cases: TestCase, version: str = "2.3.0") -> tuple[SuiteDriver, FakeClock]:
    clock = FakeClock(step=0.5)
    driver = SuiteDriver(version, _FAST, timer=clock)
    for case in cases:
        driver.register(case)
    return driver, clock


class TestExtractError(unittest.TestCase):
    """Tests for reading the error out of a validation result."""

    def test_mapping(self) -> None:
        self.assertEqual(extract_error({"error": "bad"}), "bad")
        self.assertIsNone(extract_error({"value": 1}))

    def test_attribute(self) -> None:
        self.assertEqual(extract_error(SimpleNamespace(error="bad")), "bad")
        self.assertIsNone(extract_error(SimpleNamespace(value=1)))

    def test_plain_value(self) -> None:
        self.assertIsNone(extract_error(None))


class TestTrialNaming(unittest.TestCase):
    """Tests for how fixtures expand into named trials."""

    def test_both_fixtures(self) -> None:
        driver, _ = _driver(make_case("number", 1, "x"))
        report = driver.run()
        self.assertEqual([e.name for e in report], ["number (valid)", "number (invalid)"])

    def test_valid_only(self) -> None:
        driver, _ = _driver(make_case("number", 1))
        report = driver.run()
        self.assertEqual([e.name for e in report], ["number"])

    def test_invalid_only(self) -> None:
        driver, _ = _driver(make_case("number", MISSING, "x"))
        report = driver.run()
        self.assertEqual([e.name for e in report], ["number (invalid)"])

    def test_none_is_a_fixture(self) -> None:
        driver, _ = _driver(make_case("int", 1, None))
        self.assertEqual([t.name for t in driver.plan()], ["int (valid)", "int (invalid)"])

    def test_none_only_fixture(self) -> None:
        case = TestCase(name="nullable", init=lambda: (type(None), None), run=type_runner)
        driver, _ = _driver(case)
        self.assertEqual([t.name for t in driver.plan()], ["nullable"])

    def test_neither_fixture_is_fatal(self) -> None:
        driver, clock = _driver(make_case("empty"))
        with self.assertRaises(ConfigurationError):
            driver.run()
        self.assertEqual(clock.calls, 0)

    def test_short_init_tuple(self) -> None:
        """init() may return (schema, valid) only."""
        case = TestCase(name="short", init=lambda: (int, 5), run=type_runner)
        driver, _ = _driver(case)
        self.assertEqual([t.name for t in driver.plan()], ["short"])

    def test_init_must_return_tuple(self) -> None:
        case = TestCase(name="bad", init=lambda: int, run=type_runner)
        driver, _ = _driver(case)
        with self.assertRaises(ConfigurationError):
            driver.plan()

    def test_registration_order(self) -> None:
        driver, _ = _driver(
            make_case("b", 1, "x"),
            make_case("a", 2),
            make_case("c", "s", 3, schema=str),
        )
        report = driver.run()
        self.assertEqual(
            [e.name for e in report],
            ["b (valid)", "b (invalid)", "a", "c (valid)", "c (invalid)"],
        )


class TestValidationGuard(unittest.TestCase):
    """Tests for the fixture validation guard."""

    def test_valid_fixture_failing_aborts(self) -> None:
        driver, clock = _driver(make_case("ok", 1, "x"), make_case("broken", "x"))
        with self.assertRaises(ValidationGuardError) as ctx:
            driver.run()
        self.assertIn("validation must not fail for: broken", str(ctx.exception))
        # No trial was timed, not even the healthy one.
        self.assertEqual(clock.calls, 0)

    def test_invalid_fixture_passing_aborts(self) -> None:
        driver, clock = _driver(make_case("lenient", 1, 2))
        with self.assertRaises(ValidationGuardError) as ctx:
            driver.run()
        self.assertIn("validation must fail for: lenient", str(ctx.exception))
        self.assertEqual(clock.calls, 0)

    def test_none_valid_fixture_is_checked(self) -> None:
        driver, clock = _driver(make_case("int", None, "x"))
        with self.assertRaises(ValidationGuardError) as ctx:
            driver.run()
        self.assertIn("validation must not fail for: int", str(ctx.exception))
        self.assertEqual(clock.calls, 0)

    def test_runner_raising_during_guard_aborts(self) -> None:
        def raising(schema: Any, value: Any) -> Any:
            raise TypeError("unsupported")

        driver, clock = _driver(make_case("raises", 1, run=raising))
        with self.assertRaises(ValidationGuardError):
            driver.run()
        self.assertEqual(clock.calls, 0)

    def test_init_raising_aborts(self) -> None:
        def init() -> Any:
            raise RuntimeError("cannot build schema")

        driver, _ = _driver(TestCase(name="x", init=init, run=type_runner))
        with self.assertRaises(ValidationGuardError):
            driver.run()

    def test_attribute_style_results(self) -> None:
        def runner(schema: Any, value: Any) -> SimpleNamespace:
            return SimpleNamespace(error=None if isinstance(value, schema) else ValueError())

        driver, _ = _driver(make_case("attr", 1, "x", run=runner))
        self.assertEqual(len(driver.run()), 2)


class TestVersionDispatch(unittest.TestCase):
    """Tests for per-version init and run callables."""

    def test_versioned_init(self) -> None:
        case = TestCase(
            name="versioned",
            init={"1": lambda: (str, "a"), "2": lambda: (int, 1, "x")},
            run=type_runner,
        )
        driver, _ = _driver(case, version="2.3.0")
        self.assertEqual(
            [t.name for t in driver.plan()],
            ["versioned (valid)", "versioned (invalid)"],
        )

    def test_versioned_run(self) -> None:
        seen: list[str] = []

        def run_v1(schema: Any, value: Any) -> Any:
            seen.append("v1")
            return type_runner(schema, value)

        def run_v2(schema: Any, value: Any) -> Any:
            seen.append("v2")
            return type_runner(schema, value)

        case = TestCase(name="r", init=lambda: (int, 1), run={"1.": run_v1, "2.": run_v2})
        driver, _ = _driver(case, version="1.9.0")
        driver.run()
        self.assertIn("v1", seen)
        self.assertNotIn("v2", seen)

    def test_unsupported_version_is_fatal(self) -> None:
        case = TestCase(name="old", init={"1": lambda: (int, 1)}, run=type_runner)
        driver, clock = _driver(case, version="3.0.0")
        with self.assertRaises(ConfigurationError):
            driver.run()
        self.assertEqual(clock.calls, 0)


class TestSuiteRun(unittest.TestCase):
    """Tests for timing and error capture."""

    def test_measurements(self) -> None:
        driver, _ = _driver(make_case("n", 1))
        [entry] = driver.run()
        self.assertEqual(entry.hz, 2.0)
        self.assertEqual(entry.size, 3)
        self.assertEqual(entry.rme, 0.0)

    def test_trial_error_does_not_abort_suite(self) -> None:
        calls = {"n": 0}

        def flaky(schema: Any, value: Any) -> Any:
            calls["n"] += 1
            if calls["n"] > 1:  # the guard call succeeds, timing fails
                raise RuntimeError("exploded")
            return type_runner(schema, value)

        driver, _ = _driver(make_case("flaky", 1, run=flaky), make_case("fine", 2))
        with self.assertLogs("schemabench", level="WARNING") as logs:
            report = driver.run()
        self.assertIn("1 of 2 trials failed", "\n".join(logs.output))
        self.assertEqual([e.name for e in report], ["flaky", "fine"])
        self.assertTrue(report[0].failed)
        assert report[0].error is not None
        self.assertEqual(report[0].error.message, "exploded")
        self.assertEqual(report[0].hz, 0.0)
        self.assertFalse(report[1].failed)

    def test_run_twice_is_independent(self) -> None:
        driver, _ = _driver(make_case("n", 1, "x"))
        first = driver.run()
        second = driver.run()
        self.assertEqual(len(first), 2)
        self.assertEqual(len(second), 2)
        self.assertIsNot(first, second)

    def test_from_definition_tuple(self) -> None:
        case = TestCase.from_definition(("t", lambda: (int, 1), type_runner))
        self.assertEqual(case.name, "t")

    def test_from_definition_rejects_garbage(self) -> None:
        with self.assertRaises(ConfigurationError):
            TestCase.from_definition(("only a name",))
        with self.assertRaises(ConfigurationError):
            TestCase.from_definition((1, 2, 3))

    def test_cases_property_is_a_copy(self) -> None:
        driver, _ = _driver(make_case("n", 1))
        driver.cases.clear()
        self.assertEqual(len(driver.cases), 1)
