"""Selector resolution: column/row selectors to backend-neutral addresses."""

from __future__ import annotations

import re
from typing import NamedTuple, Optional, Union

from tablebook.contracts.book import ALL, SELF, DataSelector, RangeSelector
from tablebook.contracts.common import ObjectPath, Result, processing_issue
from tablebook.contracts.sheets import Address, SheetPartialPosition, SheetPosition
from tablebook.engine.columns import ColumnMap, ResolvedColumn

UNIT_PATTERN = re.compile(r"^([$+\-])(\d+)$")

# Tie-break for equal magnitudes so that swapped endpoints normalise alike.
_PREFIX_ORDER = {"$": 0, "-": 1, "+": 2}


class Scope(NamedTuple):
    """Evaluation context: the column map and the column being compiled."""

    columns: ColumnMap
    page: str
    group: str
    column: str

    @property
    def current(self) -> Optional[ResolvedColumn]:
        return self.columns.get((self.page, self.group, self.column))


def parse_unit(unit: str) -> Optional[tuple[str, int]]:
    """``'$3'`` -> ``('$', 3)``; None when malformed."""
    match = UNIT_PATTERN.match(unit)
    if match is None:
        return None
    return match.group(1), int(match.group(2))


def _unit_key(unit: str) -> tuple[int, int]:
    prefix, value = parse_unit(unit)
    return value, _PREFIX_ORDER[prefix]


def normalize_range(first: str, second: str) -> tuple[str, str]:
    """Order two unit selectors by magnitude, independent of prefix."""
    if _unit_key(second) < _unit_key(first):
        return second, first
    return first, second


def offset_unit(unit: str, offset: int) -> str:
    """Shift absolute units past the header rows; relative units are untouched."""
    prefix, value = parse_unit(unit)
    if prefix == "$":
        return f"${value + offset}"
    return unit


def resolve_selector(
    selector: Union[str, DataSelector],
    scope: Scope,
    path: ObjectPath,
) -> Result[Address]:
    if selector == SELF:
        column, rows = SELF, SELF
    else:
        column, rows = selector.column, selector.rows

    if column == SELF:
        key = (scope.page, scope.group, scope.column)
    else:
        key = (
            scope.page if column.page is None else column.page,
            scope.group if column.group is None else column.group,
            column.name,
        )

    target = scope.columns.get(key)
    if target is None:
        return Result.failure([processing_issue("Invalid column", path, ".".join(key))])

    col = f"${target.index}"
    end: Optional[str] = None
    open_end = False

    if rows == SELF:
        start = "+0"
    elif rows == ALL:
        start, open_end = "$0", True
    elif isinstance(rows, RangeSelector):
        for unit in (rows.from_, rows.to):
            if parse_unit(unit) is None:
                return Result.failure([processing_issue("Invalid row selector", path, unit)])
        start, end = normalize_range(rows.from_, rows.to)
    else:
        if parse_unit(rows) is None:
            return Result.failure([processing_issue("Invalid row selector", path, rows)])
        start = rows

    offset = target.offset
    to = None
    if open_end:
        to = SheetPartialPosition(col=col)
    elif end is not None:
        to = SheetPartialPosition(col=col, row=offset_unit(end, offset))

    return Result.success(Address(
        page=target.page if target.page != scope.page else None,
        from_=SheetPosition(col=col, row=offset_unit(start, offset)),
        to=to,
    ))
