"""Benchmark result data structures and serialization.

Hierarchy::

    TrialOutcome (raw, one per timed trial)
      → stats: SampleStats   (the trial completed)
      → error: ErrorInfo     (the benchmarked call raised)

    TrialResult (serializable, one per report entry)
      → name, hz, rme, size, error

A report is a plain ``list[TrialResult]`` in registration order.

File format: a UTF-8 JSON array of TrialResult objects, indented by two
spaces, with the keys of each entry in the order ``name, hz, rme, size,
error``. ``error`` is omitted for trials that completed. Reports written
this way are read back unchanged and can be passed to ``--compare`` on a
later run.
"""

from __future__ import annotations

import json
import logging
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from schemabench.bench.errors import ReportFormatError
from schemabench.bench.stats import SampleStats

log = logging.getLogger("schemabench")


# ---------------------------------------------------------------------------
# Captured errors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ErrorInfo:
    """An exception captured while a trial was being timed."""

    type: str
    message: str
    stack: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        """Capture the type, message and formatted traceback of *exc*."""
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(type=type(exc).__name__, message=str(exc), stack=stack.rstrip("\n"))

    def to_dict(self) -> dict[str, str]:
        """Serialize to a JSON-compatible dict."""
        return {"type": self.type, "message": self.message, "stack": self.stack}

    @classmethod
    def from_dict(cls, data: Any) -> ErrorInfo:
        """Deserialize from a dict.

        Reports written by older tools may hold an empty object or a bare
        string for an error. Both still produce an ErrorInfo so the entry
        stays marked as failed.
        """
        if isinstance(data, str):
            return cls(type="Error", message=data, stack=data)
        if not isinstance(data, dict):
            return cls(type="Error", message=str(data), stack=str(data))
        message = str(data.get("message", ""))
        return cls(
            type=str(data.get("type") or data.get("name") or "Error"),
            message=message,
            stack=str(data.get("stack") or message),
        )


# ---------------------------------------------------------------------------
# Raw trial outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrialOutcome:
    """What the trial runner produced for one named trial.

    Exactly one of ``stats`` and ``error`` is set.
    """

    name: str
    stats: SampleStats | None = None
    error: ErrorInfo | None = None

    @property
    def failed(self) -> bool:
        """True if the benchmarked call raised."""
        return self.error is not None


# ---------------------------------------------------------------------------
# Report entry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrialResult:
    """One report entry: throughput, relative margin of error, sample count."""

    name: str
    hz: float
    rme: float
    size: int
    error: ErrorInfo | None = None

    @property
    def failed(self) -> bool:
        """True if an error was captured during timing."""
        return self.error is not None

    @classmethod
    def from_outcome(cls, outcome: TrialOutcome) -> TrialResult:
        """Shape a raw outcome into a report entry.

        A failed trial reports zero throughput and an empty sample.
        """
        if outcome.error is not None or outcome.stats is None:
            return cls(name=outcome.name, hz=0.0, rme=0.0, size=0, error=outcome.error)
        stats = outcome.stats
        return cls(name=outcome.name, hz=stats.hz, rme=stats.rme, size=stats.size)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with a fixed key order."""
        d: dict[str, Any] = {
            "name": self.name,
            "hz": self.hz,
            "rme": self.rme,
            "size": self.size,
        }
        if self.error is not None:
            d["error"] = self.error.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Any) -> TrialResult:
        """Deserialize from a dict.

        Raises:
            ReportFormatError: If required fields are missing or mistyped.
        """
        if not isinstance(data, dict):
            raise ReportFormatError(f"Report entry must be an object, got {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str):
            raise ReportFormatError(f"Report entry has no valid 'name': {data!r}")
        try:
            hz = float(data["hz"])
            rme = float(data.get("rme", 0.0))
            size = int(data.get("size", 0))
        except (KeyError, TypeError, ValueError) as exc:
            raise ReportFormatError(f"Report entry '{name}' is malformed: {exc}") from exc
        error = data.get("error")
        return cls(
            name=name,
            hz=hz,
            rme=rme,
            size=size,
            error=ErrorInfo.from_dict(error) if error is not None else None,
        )


# ---------------------------------------------------------------------------
# Report building and serialization
# ---------------------------------------------------------------------------


def build_report(outcomes: Iterable[TrialOutcome]) -> list[TrialResult]:
    """Map raw trial outcomes to report entries, preserving order."""
    return [TrialResult.from_outcome(outcome) for outcome in outcomes]


def serialize_report(report: list[TrialResult]) -> str:
    """Serialize a report to indented JSON text.

    The output depends only on *report*, so identical reports produce
    byte-identical text.
    """
    return json.dumps([entry.to_dict() for entry in report], indent=2, ensure_ascii=False)


def parse_report(text: str) -> list[TrialResult]:
    """Parse text produced by :func:`serialize_report`.

    Raises:
        ReportFormatError: If the text is not a JSON array of entries.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ReportFormatError(f"Report is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ReportFormatError(f"Report must be a JSON array, got {type(data).__name__}")
    return [TrialResult.from_dict(entry) for entry in data]


# ---------------------------------------------------------------------------
# I/O functions
# ---------------------------------------------------------------------------


def save_report(path: Path, report: list[TrialResult]) -> None:
    """Write a report to *path* as UTF-8 JSON."""
    if path.parent != Path(""):
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_report(report) + "\n", encoding="utf-8")
    log.info("Wrote %d results to %s", len(report), path)


def load_report(path: Path) -> list[TrialResult]:
    """Read a report from *path*.

    Raises:
        OSError: If the file cannot be read.
        ReportFormatError: If the content is malformed or not UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ReportFormatError(f"Report is not UTF-8 text: {exc}") from exc
    return parse_report(text)


def load_previous_report(path: Path) -> list[TrialResult] | None:
    """Read the report to compare against, or None if it cannot be used.

    A missing, unreadable or malformed file only disables the comparison;
    the problem is logged as a warning.
    """
    try:
        report = load_report(path)
    except OSError as exc:
        log.warning("Cannot read previous report %s (%s); skipping comparison", path, exc)
        return None
    except ReportFormatError as exc:
        log.warning("Ignoring malformed previous report %s: %s", path, exc)
        return None
    log.debug("Loaded %d previous results from %s", len(report), path)
    return report
