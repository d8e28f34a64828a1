"""
Pipe-delimited table extraction.
"""

import re
from typing import List, Optional, Sequence

ALIGNMENT_ROW = re.compile(r"^[\s\-:|]+$")


def _strip_outer_pipes(trimmed: str) -> str:
    if trimmed.startswith("|"):
        trimmed = trimmed[1:]
    if trimmed.endswith("|"):
        trimmed = trimmed[:-1]
    return trimmed


def is_table_line(line: str) -> bool:
    """True for '| a | b |' style lines (a leading pipe plus at least one more)."""
    trimmed = line.strip()
    if not trimmed.startswith("|"):
        return False
    return (len(trimmed) > 1 and trimmed.endswith("|")) or "|" in trimmed[1:]


def is_alignment_row(line: str) -> bool:
    """True for separator rows such as '|---|:--:|'."""
    return bool(ALIGNMENT_ROW.match(_strip_outer_pipes(line.strip())))


def split_cells(line: str) -> List[str]:
    return [cell.strip() for cell in _strip_outer_pipes(line.strip()).split("|")]


def extract_table(lines: Sequence[str]) -> Optional[List[List[str]]]:
    """Turn a run of table lines into a grid of trimmed cell strings.

    Alignment rows are dropped wherever they appear. Rows keep their own
    cell count, a ragged run is not padded here.

    Returns:
        The grid, or None when no data row is left.
    """
    rows = [split_cells(line) for line in lines if not is_alignment_row(line)]
    return rows or None
