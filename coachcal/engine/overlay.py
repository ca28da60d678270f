"""Replacement overlay.

A program day replaced by a coached lesson must not also appear as a program
item. Replacements and cells share identity only through
``(assignment_id, date)``; duplicate replacement records are harmless.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from coachcal.engine.program_days import DayCell
from coachcal.schemas.records import ReplacementRecord


def replaced_keys(replacements: Iterable[ReplacementRecord]) -> frozenset[tuple[str, date]]:
    return frozenset((r.assignment_id, r.replaced_date) for r in replacements)


def filter_replaced(
    cells: Iterable[DayCell],
    replacements: Iterable[ReplacementRecord],
) -> list[DayCell]:
    """Drop cells that a replacement record covers.

    Args:
        cells: Resolved program cells
        replacements: Replacement records, in any order, duplicates allowed

    Returns:
        The remaining cells in their original order
    """
    keys = replaced_keys(replacements)
    return [cell for cell in cells if cell.key not in keys]
