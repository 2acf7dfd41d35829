"""Expression compiler: expression trees to A1 formula text."""

from __future__ import annotations

import re
from typing import NamedTuple

from openpyxl.utils import get_column_letter

from tablebook.contracts.book import (
    CompoundExpression,
    FunctionExpression,
    LiteralExpression,
    NegatedExpression,
    RawExpression,
    SelectorExpression,
)
from tablebook.contracts.common import Issue, ObjectPath, Result
from tablebook.contracts.sheets import Address
from tablebook.engine.selector import Scope, parse_unit, resolve_selector

UNRESOLVED = "#REF!"

_SPECIALS = {"\t": "CHAR(9)", "\n": "CHAR(10)", "\r\n": "CHAR(10)", '"': "CHAR(34)"}
_SPECIAL_SPLIT = re.compile(r'(\t|\r?\n|")')


class CellPosition(NamedTuple):
    """0-based column and row the formula is evaluated at."""

    col: int
    row: int


class AddressError(ValueError):
    """A relative unit shifted before the first row or column."""


def first_cell(scope: Scope) -> CellPosition:
    """First data cell of the scope's column; formulas are filled down from there."""
    current = scope.current
    if current is None:
        raise KeyError(f"Column not in map: {scope.page}.{scope.group}.{scope.column}")
    return CellPosition(current.index, current.offset)


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


def column_letter(index: int) -> str:
    """0-based index to spreadsheet letters: 0 -> A, 25 -> Z, 26 -> AA."""
    return get_column_letter(index + 1)


def encode_unit(unit: str, current: int, letter: bool) -> str:
    parsed = parse_unit(unit)
    if parsed is None:
        raise AddressError(f"Invalid unit selector: {unit}")
    prefix, value = parsed

    if prefix == "$":
        marker = "$"
    else:
        marker = ""
        value = current - value if prefix == "-" else current + value

    if value < 0:
        raise AddressError("Offset from current position resulted in a negative index")

    return marker + (column_letter(value) if letter else str(value + 1))


def to_address(address: Address, position: CellPosition) -> str:
    text = ""
    if address.page is not None:
        text += "'" + address.page.replace("'", "''") + "'!"

    text += encode_unit(address.from_.col, position.col, True)
    text += encode_unit(address.from_.row, position.row, False)

    if address.to is not None:
        end = ""
        if address.to.col is not None:
            end += encode_unit(address.to.col, position.col, True)
        if address.to.row is not None:
            end += encode_unit(address.to.row, position.row, False)
        if end:
            text += ":" + end

    return text


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


def quote_string(value: str) -> str:
    """Quoted runs joined with ``&``; tabs, newlines and quotes become ``CHAR(n)``."""
    parts = [part for part in _SPECIAL_SPLIT.split(value) if part]
    if not parts:
        return '""'
    return " & ".join(_SPECIALS.get(part, f'"{part}"') for part in parts)


def literal_token(value: object) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    return quote_string(value)


def _selector(selector, scope: Scope, position: CellPosition, path: ObjectPath, issues: list[Issue]) -> str:
    resolved = resolve_selector(selector, scope, path)
    if not resolved.ok:
        issues.extend(resolved.issues)
        return UNRESOLVED
    return to_address(resolved.value, position)


def to_formula(expression, scope: Scope, position: CellPosition, path: ObjectPath, issues: list[Issue]) -> str:
    """Render an expression; unresolved selectors are reported and rendered as ``#REF!``.

    Raises AddressError when a relative reference leaves the sheet.
    """
    if isinstance(expression, LiteralExpression):
        return literal_token(expression.of)

    if isinstance(expression, CompoundExpression):
        rendered = []
        for i, item in enumerate(expression.items):
            text = to_formula(item, scope, position, [*path, "items", i], issues)
            rendered.append(f"({text})" if isinstance(item, CompoundExpression) else text)
        return expression.with_.join(rendered)

    if isinstance(expression, NegatedExpression):
        return f"-({to_formula(expression.on, scope, position, [*path, 'on'], issues)})"

    if isinstance(expression, FunctionExpression):
        args = ",".join(
            to_formula(arg, scope, position, [*path, "args", i], issues)
            for i, arg in enumerate(expression.args)
        )
        return f"{expression.name}({args})"

    if isinstance(expression, SelectorExpression):
        return _selector(expression.from_, scope, position, [*path, "from"], issues)

    if isinstance(expression, RawExpression):
        text = expression.text
        for tag, selector in expression.tags.items():
            rendered = _selector(selector, scope, position, [*path, "tags", tag], issues)
            text = text.replace("{" + tag + "}", rendered)
        return text

    raise TypeError(f"Unknown expression: {type(expression).__name__}")


def compile_formula(expression, scope: Scope, position: CellPosition, path: ObjectPath) -> Result[str]:
    """``=``-prefixed formula text, or an addressing issue for this formula alone."""
    issues: list[Issue] = []
    try:
        text = to_formula(expression, scope, position, path, issues)
    except AddressError as e:
        return Result.failure([Issue(
            type="processing",
            message=f"Addressing: {e}",
            path=list(path),
            data={"col": position.col, "row": position.row},
        )])
    return Result("=" + text, issues)
