"""Shared text formatting helpers for schemabench.

Provides aligned text tables, section headers and name truncation used
by the console display and the CLI commands.
"""

from __future__ import annotations

from typing import Any

import click


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    styles: dict[tuple[int, int], dict[str, Any]] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Auto-calculates column widths from content. Right-aligns columns
    marked ``'r'`` in *alignments*.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'`` or ``'r'``.
        styles: ``(row, column)`` to :func:`click.style` keyword arguments.
            Row ``-1`` is the header. Styles are applied after padding so
            ANSI codes do not disturb the alignment.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    if alignments is None:
        alignments = ["l"] * ncols
    alignments = list(alignments) + ["l"] * (ncols - len(alignments))

    cell_styles = styles or {}

    proc_headers = list(headers)
    proc_rows: list[list[str]] = []
    for row in rows:
        padded = list(row) + [""] * (ncols - len(row))
        proc_rows.append(padded[:ncols])

    widths = [len(h) for h in proc_headers]
    for row in proc_rows:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], len(cell))

    prefix = " " * indent

    def _format_cell(text: str, ri: int, ci: int) -> str:
        width = widths[ci]
        align = alignments[ci]
        if align == "r":
            cell = text.rjust(width)
        else:
            cell = text.ljust(width)
        style = cell_styles.get((ri, ci))
        if style:
            cell = click.style(cell, **style)
        return cell

    lines: list[str] = []
    header_line = "  ".join(_format_cell(proc_headers[i], -1, i) for i in range(ncols))
    lines.append((prefix + header_line).rstrip())

    for ri, row in enumerate(proc_rows):
        row_line = "  ".join(_format_cell(row[i], ri, i) for i in range(ncols))
        lines.append((prefix + row_line).rstrip())

    return "\n".join(lines)


def format_section_header(title: str, width: int = 80) -> str:
    """Format a section header: ``'─── Title ──...'``."""
    prefix = "─── "
    suffix_len = width - len(prefix) - len(title) - 1
    suffix = " " + "─" * max(0, suffix_len)
    return prefix + title + suffix


def truncate(text: str, max_len: int, suffix: str = "...") -> str:
    """Truncate text to *max_len*, adding *suffix* if truncated."""
    if len(text) <= max_len:
        return text
    if max_len <= len(suffix):
        return suffix[:max_len]
    return text[: max_len - len(suffix)] + suffix
