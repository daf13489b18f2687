"""schemabench — benchmark runner for schema validation libraries."""

__version__ = "0.1.0"
