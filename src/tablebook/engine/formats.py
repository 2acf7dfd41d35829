"""Number and date format patterns (spreadsheet format-code syntax)."""

from __future__ import annotations

from typing import Union

from tablebook.contracts.book import (
    CurrencyFormat,
    DigitPlaceholder,
    PercentFormat,
    TemporalUnit,
)

TEMPORAL_TOKENS: dict[tuple[str, str], str] = {
    ("year", "long"): "yyyy",
    ("year", "short"): "yy",
    ("month", "long"): "mm",
    ("month", "short"): "m",
    ("monthname", "long"): "mmmm",
    ("monthname", "short"): "mmm",
    ("weekday", "long"): "dddd",
    ("weekday", "short"): "ddd",
    ("day", "long"): "dd",
    ("day", "short"): "d",
    ("hour", "long"): "hh",
    ("hour", "short"): "h",
    ("minute", "long"): "mm",
    ("minute", "short"): "m",
    ("second", "long"): "ss",
    ("second", "short"): "s",
    ("meridiem", "long"): "AM/PM",
    ("meridiem", "short"): "a/p",
}


def digit_placeholders(digits: Union[int, DigitPlaceholder, None], decimal: bool = False) -> str:
    """Integer parts read flex-fixed-align; decimal parts mirror that."""
    if not digits:
        return ""
    if isinstance(digits, int):
        return "0" * digits

    flex = "#" * (digits.flex or 0)
    fixed = "0" * (digits.fixed or 0)
    align = "?" * (digits.align or 0)
    return align + fixed + flex if decimal else flex + fixed + align


def numeric_pattern(fmt) -> str:
    pattern = digit_placeholders(fmt.integer) or "#"

    if fmt.commas:
        pattern = pattern.rjust(2, "#")
        pattern = pattern[:-1] + "," + pattern[-1]

    decimal = digit_placeholders(fmt.decimal, decimal=True)
    if decimal:
        pattern += "." + decimal

    if isinstance(fmt, PercentFormat):
        pattern += "%"
    elif isinstance(fmt, CurrencyFormat):
        symbol = fmt.symbol if len(fmt.symbol) <= 1 and fmt.symbol != '"' else quote_literal(fmt.symbol)
        pattern = pattern + symbol if fmt.position == "suffix" else symbol + pattern

    return pattern


def quote_literal(text: str) -> str:
    """Quoted literal run; embedded quotes are emitted escaped outside the quotes."""
    runs = text.split('"')
    return '\\"'.join(f'"{run}"' if run else "" for run in runs)


def temporal_pattern(fmt: list[Union[TemporalUnit, str]]) -> str:
    parts = []
    for item in fmt:
        if isinstance(item, str):
            parts.append(quote_literal(item))
        else:
            parts.append(TEMPORAL_TOKENS[(item.type, item.length)])
    return "".join(parts)


def to_pattern(fmt) -> str:
    """Pattern for either a numeric format model or a temporal unit list."""
    if isinstance(fmt, list):
        return temporal_pattern(fmt)
    return numeric_pattern(fmt)
