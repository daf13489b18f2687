"""Exception types raised by the benchmark subsystem.

Anything raised outside a timed trial is fatal: the CLI prints the
message and exits with a non-zero status. Exceptions raised *inside* a
timed trial are never propagated; they are captured into the trial's
result instead.
"""

from __future__ import annotations


class BenchError(Exception):
    """Base class for schemabench errors."""


class ConfigurationError(BenchError, ValueError):
    """The suite, library or benchmark settings cannot be used as given."""


class ValidationGuardError(BenchError):
    """A fixture did not validate the way its test case declares.

    Raised before any timing starts so that a broken schema is never
    benchmarked.
    """


class ReportFormatError(BenchError, ValueError):
    """A persisted report could not be parsed."""
