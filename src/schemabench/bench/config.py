"""Benchmark configuration and profile loading.

Handles:
- Loading benchmark profiles from YAML files.
- Merging CLI options with profile defaults.
- Validating the final configuration before execution.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from schemabench.bench.timing import TrialOptions

log = logging.getLogger("schemabench")

DEFAULT_THRESHOLD = 10.0


# ---------------------------------------------------------------------------
# BenchConfig
# ---------------------------------------------------------------------------


@dataclass
class BenchConfig:
    """Resolved configuration for a benchmark run."""

    # What to benchmark
    library: str = "."  # module name, package directory or .py file
    suite: str = "suite.py"  # module name or .py file

    # Comparison and persistence
    compare_path: Path | None = None
    save_path: Path | None = None
    threshold: float = DEFAULT_THRESHOLD  # percent
    fail_on_regression: bool = False

    # Sampling
    min_samples: int = 100
    min_time: float = 0.05
    max_time: float = 5.0

    @property
    def trial_options(self) -> TrialOptions:
        """Sampling parameters for the trial runner."""
        return TrialOptions(
            min_samples=self.min_samples,
            min_time=self.min_time,
            max_time=self.max_time,
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: BenchConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if config.threshold < 0:
        errors.append(
            ValidationError(
                field="threshold",
                message=f"Threshold cannot be negative (got {config.threshold}).",
            )
        )

    if config.min_samples < 1:
        errors.append(
            ValidationError(
                field="min_samples",
                message=f"Need at least 1 sample per trial (got {config.min_samples}).",
            )
        )
    elif config.min_samples < 5:
        errors.append(
            ValidationError(
                field="min_samples",
                message=(
                    f"Only {config.min_samples} samples per trial; "
                    f"the margin of error will be large."
                ),
                severity="warning",
            )
        )

    if config.min_time <= 0:
        errors.append(
            ValidationError(
                field="min_time",
                message=f"Minimum sample time must be positive (got {config.min_time}).",
            )
        )

    if config.max_time < 0:
        errors.append(
            ValidationError(
                field="max_time",
                message=f"Maximum sampling time cannot be negative (got {config.max_time}).",
            )
        )

    if not config.library:
        errors.append(ValidationError(field="library", message="No library to benchmark."))

    if not config.suite:
        errors.append(ValidationError(field="suite", message="No test suite given."))

    if config.fail_on_regression and config.compare_path is None:
        errors.append(
            ValidationError(
                field="fail_on_regression",
                message="--fail-on-regression has no effect without --compare.",
                severity="warning",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        library: ./build/schemalib
        suite: benchmarks/suite.py
        threshold: 5
        min_samples: 50
        min_time: 0.02
        max_time: 2
        save: reports/latest.json
        compare: reports/baseline.json

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text(encoding="utf-8"))
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> BenchConfig:
    """Build a BenchConfig from a parsed profile.

    CLI overrides take precedence over profile values.  A CLI value of
    None means "not given".

    Args:
        profile_data: Parsed YAML profile dict (may be empty).
        cli_overrides: Dict of CLI option values. Keys match BenchConfig
            field names.

    Returns:
        BenchConfig with settings populated.
    """
    cli = cli_overrides or {}

    def pick(key: str, profile_key: str | None = None) -> Any:
        if cli.get(key) is not None:
            return cli[key]
        return profile_data.get(profile_key or key)

    config = BenchConfig()

    library = pick("library")
    if library:
        config.library = str(library)
    suite = pick("suite")
    if suite:
        config.suite = str(suite)

    compare_path = pick("compare_path", "compare")
    if compare_path:
        config.compare_path = Path(compare_path)
    save_path = pick("save_path", "save")
    if save_path:
        config.save_path = Path(save_path)

    threshold = pick("threshold")
    if threshold is not None:
        config.threshold = float(threshold)
    min_samples = pick("min_samples")
    if min_samples is not None:
        config.min_samples = int(min_samples)
    min_time = pick("min_time")
    if min_time is not None:
        config.min_time = float(min_time)
    max_time = pick("max_time")
    if max_time is not None:
        config.max_time = float(max_time)

    if cli.get("fail_on_regression") or profile_data.get("fail_on_regression"):
        config.fail_on_regression = True

    return config
