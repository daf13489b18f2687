"""Tests for schemabench.bench.compare — regression comparison."""

from __future__ import annotations

import math
import unittest

from bench_test_helpers import make_error, make_result

from schemabench.bench.compare import (
    ComparisonRow,
    compare_reports,
    percent_difference,
    rows_without_comparison,
    summarize_comparison,
)


class TestPercentDifference(unittest.TestCase):
    """Tests for percent_difference."""

    def test_faster_is_positive(self) -> None:
        self.assertEqual(percent_difference(150.0, 100.0), 50.0)

    def test_slower_is_negative(self) -> None:
        self.assertEqual(percent_difference(75.0, 100.0), -25.0)

    def test_zero_previous_is_nan(self) -> None:
        self.assertTrue(math.isnan(percent_difference(10.0, 0.0)))


class TestCompareReports(unittest.TestCase):
    """Tests for compare_reports."""

    def test_report_against_itself(self) -> None:
        report = [make_result("a", 1234.5), make_result("b", 0.25), make_result("c", 9e6)]
        for threshold in (0.0, 10.0, 50.0):
            rows = compare_reports(report, report, threshold)
            for row in rows:
                self.assertTrue(row.matched)
                self.assertEqual(row.percent_diff, 0.0)
                self.assertFalse(row.significant)

    def test_threshold_is_strict(self) -> None:
        [row] = compare_reports([make_result("a", 110.0)], [make_result("a", 100.0)], 10)
        self.assertEqual(row.percent_diff, 10.0)
        self.assertFalse(row.significant)

    def test_above_threshold_is_significant(self) -> None:
        [row] = compare_reports([make_result("a", 111.0)], [make_result("a", 100.0)], 10)
        self.assertTrue(row.significant)
        self.assertTrue(row.improved)
        self.assertFalse(row.regressed)

    def test_regression(self) -> None:
        [row] = compare_reports([make_result("a", 50.0)], [make_result("a", 100.0)])
        self.assertEqual(row.percent_diff, -50.0)
        self.assertTrue(row.significant)
        self.assertTrue(row.regressed)

    def test_default_threshold_is_ten_percent(self) -> None:
        [small] = compare_reports([make_result("a", 109.0)], [make_result("a", 100.0)])
        [large] = compare_reports([make_result("a", 89.0)], [make_result("a", 100.0)])
        self.assertFalse(small.significant)
        self.assertTrue(large.significant)

    def test_zero_previous_hz(self) -> None:
        rows = compare_reports([make_result("a", 100.0)], [make_result("a", 0.0)], 10)
        [row] = rows
        self.assertTrue(row.matched)
        self.assertFalse(row.available)
        self.assertFalse(row.significant)
        self.assertTrue(math.isnan(row.percent_diff))

    def test_unmatched_rows_kept(self) -> None:
        rows = compare_reports(
            [make_result("new"), make_result("old")],
            [make_result("old")],
        )
        self.assertEqual([r.name for r in rows], ["new", "old"])
        self.assertFalse(rows[0].matched)
        self.assertIsNone(rows[0].percent_diff)
        self.assertIsNone(rows[0].previous_hz)
        self.assertTrue(rows[1].matched)

    def test_order_follows_current_report(self) -> None:
        current = [make_result(n, 100.0) for n in ("x", "y", "z")]
        previous = [make_result(n, 90.0) for n in ("z", "x", "y")]
        rows = compare_reports(current, previous)
        self.assertEqual([r.name for r in rows], ["x", "y", "z"])

    def test_exact_name_match_only(self) -> None:
        previous = [make_result("a"), make_result("A (valid)")]
        rows = compare_reports([make_result("a (valid)")], previous)
        self.assertFalse(rows[0].matched)

    def test_first_duplicate_wins(self) -> None:
        previous = [make_result("a", 100.0), make_result("a", 200.0)]
        [row] = compare_reports([make_result("a", 100.0)], previous)
        self.assertEqual(row.previous_hz, 100.0)

    def test_previous_fields(self) -> None:
        [row] = compare_reports(
            [make_result("a", 100.0)],
            [make_result("a", 80.0, rme=2.5, size=42)],
        )
        self.assertEqual(row.previous_hz, 80.0)
        self.assertEqual(row.previous_rme, 2.5)
        self.assertEqual(row.previous_size, 42)
        self.assertEqual(row.percent_diff, 25.0)

    def test_failed_current_trial(self) -> None:
        current = [make_result("a", 0.0, size=0, error=make_error())]
        [row] = compare_reports(current, [make_result("a", 100.0)])
        self.assertEqual(row.percent_diff, -100.0)
        self.assertTrue(row.regressed)

    def test_empty_previous(self) -> None:
        rows = compare_reports([make_result("a"), make_result("b")], [])
        self.assertTrue(all(not r.matched for r in rows))


class TestSummarizeComparison(unittest.TestCase):
    """Tests for summarize_comparison."""

    def test_counts(self) -> None:
        current = [
            make_result("faster", 200.0),
            make_result("slower", 50.0),
            make_result("same", 101.0),
            make_result("zero", 10.0),
            make_result("new", 10.0),
        ]
        previous = [
            make_result("faster", 100.0),
            make_result("slower", 100.0),
            make_result("same", 100.0),
            make_result("zero", 0.0),
        ]
        summary = summarize_comparison(compare_reports(current, previous), 10.0)
        self.assertEqual(summary.matched, 4)
        self.assertEqual(summary.unmatched, 1)
        self.assertEqual(summary.improved, 1)
        self.assertEqual(summary.regressed, 1)
        self.assertEqual(summary.unchanged, 1)
        self.assertEqual(summary.unavailable, 1)
        self.assertEqual([r.name for r in summary.regressions], ["slower"])
        self.assertEqual([r.name for r in summary.improvements], ["faster"])

    def test_rows_without_comparison(self) -> None:
        rows = rows_without_comparison([make_result("a")])
        self.assertEqual(len(rows), 1)
        self.assertIsInstance(rows[0], ComparisonRow)
        summary = summarize_comparison(rows)
        self.assertEqual(summary.matched, 0)
        self.assertEqual(summary.unmatched, 1)
