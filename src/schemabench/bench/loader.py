"""Loading of the library under test and of the test suite.

Both are given as a *reference*: an importable module name
(``jsonschema``), a package directory (``.`` or ``../build/lib``) or a
Python file (``benchmarks/suite.py``).
"""

from __future__ import annotations

import importlib
import importlib.metadata
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from schemabench.bench.errors import ConfigurationError
from schemabench.bench.suite import TestCase

log = logging.getLogger("schemabench")


# ---------------------------------------------------------------------------
# Module import
# ---------------------------------------------------------------------------


def import_ref(ref: str) -> ModuleType:
    """Import a module from a name, a package directory or a ``.py`` file.

    Raises:
        ConfigurationError: If the reference cannot be imported.
    """
    path = Path(ref)
    try:
        if path.is_dir():
            return _import_package_dir(path)
        if path.suffix == ".py":
            if not path.is_file():
                raise ConfigurationError(f"Module file not found: {ref}")
            return _import_file(path.stem, path)
        return importlib.import_module(ref)
    except ConfigurationError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise ConfigurationError(f"Cannot import {ref!r}: {exc}") from exc


def _import_package_dir(path: Path) -> ModuleType:
    init = path / "__init__.py"
    if not init.is_file():
        raise ConfigurationError(f"Not a Python package (no __init__.py): {path}")
    name = path.resolve().name
    return _import_file(name, init, search_locations=[str(path.resolve())])


def _import_file(
    name: str,
    location: Path,
    *,
    search_locations: list[str] | None = None,
) -> ModuleType:
    spec = importlib.util.spec_from_file_location(
        name,
        location,
        submodule_search_locations=search_locations,
    )
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot import {location}")
    module = importlib.util.module_from_spec(spec)
    # Registered before execution so the package can import its own submodules.
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    log.debug("Imported %s from %s", name, location)
    return module


# ---------------------------------------------------------------------------
# Library under test
# ---------------------------------------------------------------------------


def library_version(library: Any) -> str:
    """Return the version string of a loaded library.

    Looks at ``__version__``, then ``version``, then the installed
    distribution metadata of the top-level package.

    Raises:
        ConfigurationError: If no version can be determined.
    """
    for attr in ("__version__", "version"):
        value = getattr(library, attr, None)
        if isinstance(value, str) and value:
            return value

    name = getattr(library, "__name__", "")
    top_level = name.split(".")[0]
    if top_level:
        try:
            return importlib.metadata.version(top_level)
        except importlib.metadata.PackageNotFoundError:
            pass

    raise ConfigurationError(f"Cannot determine the version of library {name or library!r}")


def load_library(ref: str) -> tuple[ModuleType, str]:
    """Import the library under test and determine its version."""
    library = import_ref(ref)
    version = library_version(library)
    log.info("Loaded %s %s", library.__name__, version)
    return library, version


# ---------------------------------------------------------------------------
# Test suite
# ---------------------------------------------------------------------------


def load_suite(ref: str, library: Any) -> list[TestCase]:
    """Load test case definitions from a suite module.

    The module provides either a ``suite(library)`` function returning
    the definitions, or a ``SUITE`` sequence. Each definition is a
    :class:`TestCase` or a ``(name, init, run)`` tuple.

    Raises:
        ConfigurationError: If the module defines neither, or a
            definition is malformed.
    """
    module = import_ref(ref)

    factory = getattr(module, "suite", None)
    if callable(factory):
        definitions = factory(library)
    elif hasattr(module, "SUITE"):
        definitions = module.SUITE
    else:
        raise ConfigurationError(
            f"Suite module {ref!r} must define a suite(library) function or a SUITE sequence"
        )

    cases = [TestCase.from_definition(d) for d in definitions]
    log.debug("Loaded %d test cases from %s", len(cases), ref)
    return cases
