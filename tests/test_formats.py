"""Tests for number and date format patterns."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter

from tablebook.contracts.book import NumericFormat, TemporalFormat
from tablebook.engine.formats import (
    TEMPORAL_TOKENS,
    numeric_pattern,
    quote_literal,
    temporal_pattern,
    to_pattern,
)

NUMERIC = TypeAdapter(NumericFormat)
TEMPORAL = TypeAdapter(TemporalFormat)


@pytest.mark.parametrize("data,pattern", [
    ({"type": "number"}, "#"),
    ({"type": "number", "decimal": 2}, "#.00"),
    ({"type": "number", "integer": 1, "decimal": 2, "commas": True}, "#,0.00"),
    ({"type": "number", "commas": True}, "#,#"),
    ({"type": "number", "integer": 3, "commas": True}, "00,0"),
    ({"type": "number", "integer": {"flex": 2, "fixed": 1, "align": 1}}, "##0?"),
    ({"type": "number", "integer": 1, "decimal": {"fixed": 1, "flex": 2, "align": 1}}, "0.?0##"),
    ({"type": "percent", "integer": 1, "decimal": 1}, "0.0%"),
    ({"type": "currency", "integer": 1, "decimal": 2}, "$0.00"),
    ({"type": "currency", "integer": 1, "symbol": "€", "position": "suffix"}, "0€"),
    ({"type": "currency", "integer": 1, "symbol": "USD "}, '"USD "0'),
    ({"type": "currency", "integer": 1, "symbol": "\"", "position": "suffix"}, '0\\"'),
])
def test_numeric_pattern(data: dict, pattern: str):
    assert numeric_pattern(NUMERIC.validate_python(data)) == pattern


def test_temporal_pattern():
    fmt = TEMPORAL.validate_python([
        {"type": "year", "length": "long"},
        "-",
        {"type": "month", "length": "long"},
        "-",
        {"type": "day", "length": "long"},
        " ",
        {"type": "hour", "length": "short"},
        ":",
        {"type": "minute", "length": "long"},
        " ",
        {"type": "meridiem", "length": "long"},
    ])
    assert temporal_pattern(fmt) == 'yyyy"-"mm"-"dd" "h":"mm" "AM/PM'


def test_temporal_table_is_complete():
    units = ["year", "month", "monthname", "weekday", "day", "hour", "meridiem", "minute", "second"]
    assert set(TEMPORAL_TOKENS) == {(unit, length) for unit in units for length in ("short", "long")}


def test_to_pattern_dispatch():
    assert to_pattern(NUMERIC.validate_python({"type": "percent"})) == "#%"
    assert to_pattern(TEMPORAL.validate_python([{"type": "weekday", "length": "short"}])) == "ddd"


@pytest.mark.parametrize("text,quoted", [
    ("at ", '"at "'),
    ('at "noon"', '"at "\\""noon"\\"'),
    ('"', '\\"'),
    ('a""b', '"a"\\"\\""b"'),
])
def test_quote_literal(text: str, quoted: str):
    assert quote_literal(text) == quoted


def test_temporal_literal_with_quotes():
    fmt = TEMPORAL.validate_python([{"type": "hour", "length": "short"}, ' o"clock'])
    assert temporal_pattern(fmt) == 'h" o"\\""clock"'
