"""Benchmarking subsystem for schemabench.

Provides the trial runner, suite driver, report serialization and
regression comparison used by the ``schemabench`` commands.
"""
