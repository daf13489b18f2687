"""Version-conditional dispatch for test case callables.

A test case may need a different schema factory or runner depending on
the version of the library being benchmarked. Such a callable is written
as a mapping from version prefix to callable::

    {
        "17.": lambda: (schema_v17, valid, invalid),
        "16.": lambda: (schema_v16, valid, invalid),
    }

Keys are tried in definition order and the first one that is a prefix of
the loaded library's version wins.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Union

from schemabench.bench.errors import ConfigurationError

Versioned = Union[Callable[..., Any], Mapping[str, Callable[..., Any]]]


def pick_version(target: Versioned, version: str) -> Callable[..., Any]:
    """Resolve *target* for the library *version*.

    Args:
        target: A callable, or a mapping of version prefix to callable.
        version: The version string reported by the loaded library.

    Returns:
        The callable to use.

    Raises:
        ConfigurationError: If no prefix matches *version*, or *target*
            is neither a callable nor a mapping.
    """
    if callable(target):
        return target

    if not isinstance(target, Mapping):
        raise ConfigurationError(
            f"Expected a callable or a mapping of version prefixes, got {type(target).__name__}"
        )

    for prefix, fn in target.items():
        if version.startswith(prefix):
            return fn

    raise ConfigurationError(f"Unsupported version {version}")
