"""Tests for schemabench.bench.dispatch — version-conditional callables."""

from __future__ import annotations

import unittest

from schemabench.bench.dispatch import pick_version
from schemabench.bench.errors import ConfigurationError


def fn_a() -> str:
    return "a"


def fn_b() -> str:
    return "b"


class TestPickVersion(unittest.TestCase):
    """Tests for pick_version."""

    def test_callable_returned_as_is(self) -> None:
        self.assertIs(pick_version(fn_a, "1.0.0"), fn_a)

    def test_prefix_match(self) -> None:
        self.assertIs(pick_version({"1": fn_a, "2": fn_b}, "2.3.0"), fn_b)

    def test_no_match_raises(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            pick_version({"1": fn_a, "2": fn_b}, "3.0.0")
        self.assertIn("Unsupported version 3.0.0", str(ctx.exception))

    def test_first_matching_key_wins(self) -> None:
        """Keys are tried in definition order, not by longest prefix."""
        self.assertIs(pick_version({"1": fn_a, "1.2": fn_b}, "1.2.5"), fn_a)
        self.assertIs(pick_version({"1.2": fn_b, "1": fn_a}, "1.2.5"), fn_b)

    def test_empty_prefix_matches_everything(self) -> None:
        self.assertIs(pick_version({"17.": fn_a, "": fn_b}, "16.0.0"), fn_b)

    def test_configuration_error_is_value_error(self) -> None:
        with self.assertRaises(ValueError):
            pick_version({}, "1.0.0")

    def test_invalid_target(self) -> None:
        with self.assertRaises(ConfigurationError):
            pick_version(42, "1.0.0")  # type: ignore[arg-type]
