"""Tests for column behavior resolution per data type."""

from __future__ import annotations

from datetime import datetime

from pydantic import TypeAdapter

from helpers import scope_for
from tablebook.contracts.book import ColumnType, DataSelector, Definitions
from tablebook.contracts.sheets import (
    SheetComparisonRule,
    SheetEnumRule,
    SheetFormulaRule,
    SheetLookupRule,
    SheetMatchRule,
    SheetRangeRule,
    SheetStyle,
)
from tablebook.engine.behavior import resolve_behavior
from tablebook.engine.formula import to_address, CellPosition
from tablebook.engine.registry import DefinitionsRegistry
from tablebook.engine.selector import resolve_selector

COLUMN_TYPE = TypeAdapter(ColumnType)


def _type(data):
    return COLUMN_TYPE.validate_python(data)


def _resolve(data, book, column="Y", group="G2", definitions=None):
    scope = scope_for(book, "Items", group, column)
    return resolve_behavior(_type(data), scope, definitions or DefinitionsRegistry.new(), ["type"])


def test_text_match_rule(sample_book):
    result = _resolve({"kind": "text", "rule": {"type": "contains", "value": "x"}}, sample_book)
    assert result.ok
    assert result.value.kind == "text"
    assert result.value.validation == SheetMatchRule(type="contains", value="x")


def test_text_custom_rule(sample_book):
    data = {
        "kind": "text",
        "rule": {"type": "custom", "expression": {
            "type": "function", "name": "LEN", "args": [{"type": "selector", "from": "self"}],
        }},
    }
    result = _resolve(data, sample_book, column="X", group="G1")
    assert result.value.validation == SheetFormulaRule(formula="=LEN($A3)")


def test_text_conditional_styles(sample_book):
    definitions = DefinitionsRegistry.new(Definitions(styles={"hot": {"back": "#FF0000"}}))
    data = {
        "kind": "text",
        "styles": [
            {"rule": {"type": "is", "value": "urgent"}, "apply": "@hot"},
            {"rule": {"type": "begins", "value": "x"}, "apply": {"bold": True}},
        ],
    }
    formats = _resolve(data, sample_book, definitions=definitions).value.conditional_formats
    assert [f.style for f in formats] == [SheetStyle(back="#FF0000"), SheetStyle(bold=True)]
    assert formats[0].rule == SheetMatchRule(type="is", value="urgent")


def test_conditional_style_with_missing_reference_is_dropped(sample_book):
    data = {
        "kind": "text",
        "styles": [
            {"rule": {"type": "is", "value": "a"}, "apply": "@missing"},
            {"rule": {"type": "is", "value": "b"}, "apply": {"italic": True}},
        ],
    }
    result = _resolve(data, sample_book)
    assert not result.ok
    assert result.issues[0].path == ["type", "styles", 0, "apply"]
    assert len(result.value.conditional_formats) == 1


def test_enum(sample_book):
    definitions = DefinitionsRegistry.new(Definitions(colors={"ok": "#00AA00"}))
    data = {
        "kind": "enum",
        "items": [
            "Open",
            {"name": "Done", "color": "@ok", "style": {"fore": "#111111", "bold": True}},
            {"name": "Late", "style": {"back": "#FFEEEE"}},
        ],
    }
    behavior = _resolve(data, sample_book, definitions=definitions).value
    assert behavior.kind == "text"
    assert behavior.validation == SheetEnumRule(values=["Open", "Done", "Late"])
    assert [f.rule for f in behavior.conditional_formats] == [
        SheetMatchRule(type="is", value="Done"),
        SheetMatchRule(type="is", value="Late"),
    ]
    assert behavior.conditional_formats[0].style == SheetStyle(fore="#00AA00", bold=True)


def test_lookup_matches_manual_all_selector(sample_book):
    scope = scope_for(sample_book, "Items", "G2", "Y")
    behavior = resolve_behavior(
        _type({"kind": "lookup", "column": {"group": "G1", "name": "X"}}),
        scope,
        DefinitionsRegistry.new(),
        ["type"],
    ).value

    manual = resolve_selector(
        DataSelector.model_validate({"column": {"group": "G1", "name": "X"}, "rows": "all"}), scope, []
    ).value

    assert isinstance(behavior.validation, SheetLookupRule)
    assert behavior.validation.range == manual
    assert behavior.validation.reference == to_address(manual, CellPosition(0, 0)) == "$A$3:$A"


def test_lookup_missing_column(sample_book):
    result = _resolve({"kind": "lookup", "column": {"name": "Ghost"}}, sample_book)
    assert not result.ok
    assert result.value.validation is None
    assert result.issues[0].path == ["type", "column"]


def test_numeric_comparison_and_format(sample_book):
    definitions = DefinitionsRegistry.new(Definitions(numerics={"pct": {"type": "percent", "decimal": 1}}))
    data = {"kind": "numeric", "rule": {"type": ">=", "value": 0}, "format": "@pct"}
    behavior = _resolve(data, sample_book, definitions=definitions).value
    assert behavior.kind == "number"
    assert behavior.format == "#.0%"
    assert behavior.validation == SheetComparisonRule(type=">=", target="number", value=0)


def test_numeric_range_is_ordered(sample_book):
    behavior = _resolve({"kind": "numeric", "rule": {"type": "between", "low": 10, "high": 1}}, sample_book).value
    assert behavior.validation == SheetRangeRule(type="between", target="number", low=1, high=10)


def test_numeric_missing_format_reference(sample_book):
    result = _resolve({"kind": "numeric", "format": "@nope"}, sample_book)
    assert not result.ok
    assert result.value.format is None
    assert result.issues[0].path == ["type", "format"]


def test_temporal_rules(sample_book):
    data = {
        "kind": "temporal",
        "rule": {"type": "outside", "low": "2024-12-31", "high": "2024-01-01"},
        "styles": [{"rule": {"type": "<", "value": "2024-06-01"}, "apply": {"fore": "#999999"}}],
        "format": [{"type": "day", "length": "long"}, "/", {"type": "month", "length": "long"}],
    }
    behavior = _resolve(data, sample_book).value
    assert behavior.kind == "temporal"
    assert behavior.format == 'dd"/"mm'
    assert behavior.validation == SheetRangeRule(
        type="outside", target="temporal", low=datetime(2024, 1, 1), high=datetime(2024, 12, 31)
    )
    assert behavior.conditional_formats[0].rule.value == datetime(2024, 6, 1)


def test_temporal_invalid_date(sample_book):
    result = _resolve({"kind": "temporal", "rule": {"type": "=", "value": "2024-13-45"}}, sample_book)
    assert not result.ok
    assert result.issues[0].message == "Invalid temporal value"
    assert result.issues[0].path == ["type", "rule", "value"]


def test_type_reference(sample_book):
    definitions = DefinitionsRegistry.new(Definitions(types={"flag": {"kind": "enum", "items": ["Y", "N"]}, "alias": "@flag"}))
    scope = scope_for(sample_book, "Items", "G1", "X")
    result = resolve_behavior("@alias", scope, definitions, ["type"])
    assert result.ok
    assert result.value.validation == SheetEnumRule(values=["Y", "N"])


def test_missing_type_reference(sample_book):
    scope = scope_for(sample_book, "Items", "G1", "X")
    result = resolve_behavior("@nope", scope, DefinitionsRegistry.new(), ["type"])
    assert not result.ok
    assert result.value is None
