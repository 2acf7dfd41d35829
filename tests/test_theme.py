"""Tests for style resolution and the theme cascade."""

from __future__ import annotations

import pytest

from tablebook.contracts.book import Definitions, Theme
from tablebook.contracts.sheets import SheetHeaderStyle, SheetStyle, SheetTheme
from tablebook.engine.palettes import STANDARD_PALETTES, standard_palette_resolver
from tablebook.engine.registry import DefinitionsRegistry
from tablebook.engine.theme import ParentTheme, merge_themes, resolve_color, resolve_style, resolve_theme


def _theme(data: dict) -> Theme:
    return Theme.model_validate(data)


def test_merge_precedence():
    parent = SheetTheme(data=SheetStyle(fore="#111111"))
    child = SheetTheme(data=SheetStyle(back="#222222"))
    merged = merge_themes(parent, child)
    assert merged.data == SheetStyle(fore="#111111", back="#222222")


def test_merge_override_wins_and_none_never_erases():
    base = SheetTheme(tab="#000000", header=SheetHeaderStyle(bold=True, fore="#AAAAAA"))
    override = SheetTheme(header=SheetHeaderStyle(fore="#BBBBBB", bold=False))
    merged = merge_themes(base, override)
    assert merged.tab == "#000000"
    assert merged.header.fore == "#BBBBBB"
    assert merged.header.bold is False


def test_parent_then_child_fields(registry):
    parent = _theme({"data": {"fore": "#111111"}})
    child = _theme({"data": {"back": "#222222"}})
    result = resolve_theme(child, [(parent, ["theme"])], registry, (), ["pages", 0, "theme"])
    assert result.ok
    assert result.value.data == SheetStyle(fore="#111111", back="#222222")


def test_inherits_fold_in_order_before_own_fields():
    definitions = DefinitionsRegistry.new(Definitions(themes={
        "first": {"tab": "#000001", "data": {"bold": True}},
        "second": {"tab": "#000002"},
    }))
    theme = _theme({"inherits": ["@first", "@second"], "data": {"italic": True}})
    result = resolve_theme(theme, [], definitions)
    assert result.value.tab == "#000002"
    assert result.value.data == SheetStyle(bold=True, italic=True)


def test_own_fields_override_inherits():
    definitions = DefinitionsRegistry.new(Definitions(themes={"base": {"tab": "#000001"}}))
    theme = _theme({"inherits": ["@base"], "tab": "#0000FF"})
    assert resolve_theme(theme, [], definitions).value.tab == "#0000FF"


def test_nested_inline_inherits(registry):
    theme = _theme({"inherits": [{"inherits": [{"tab": "#010101"}], "header": {"bold": True}}]})
    result = resolve_theme(theme, [], registry)
    assert result.value.tab == "#010101"
    assert result.value.header.bold is True


@pytest.mark.parametrize("length", [1, 2, 3, 4, 5])
def test_circular_inherits_detected(length: int):
    names = [f"t{i}" for i in range(length)]
    themes = {name: {"inherits": [f"@{names[(i + 1) % length]}"]} for i, name in enumerate(names)}
    definitions = DefinitionsRegistry.new(Definitions(themes=themes))

    result = resolve_theme("@t0", [], definitions, (), ["theme"])

    assert not result.ok
    assert any(issue.message == "Circular theme reference" for issue in result.issues)


def test_shared_ancestor_is_not_a_cycle():
    definitions = DefinitionsRegistry.new(Definitions(themes={
        "root": {"tab": "#0A0A0A"},
        "left": {"inherits": ["@root"]},
        "right": {"inherits": ["@root"]},
    }))
    theme = _theme({"inherits": ["@left", "@right"]})
    result = resolve_theme(theme, [], definitions)
    assert result.ok
    assert result.value.tab == "#0A0A0A"


def test_missing_theme_reference(registry):
    result = resolve_theme("@nothing", [], registry, (), ["pages", 0, "theme"])
    assert not result.ok
    assert result.issues[0].message == "Missing reference"
    assert result.value == SheetTheme()


def test_palette_theme_reference():
    definitions = DefinitionsRegistry.new(None, [standard_palette_resolver()])
    result = resolve_theme("@teal", [], definitions)
    palette = STANDARD_PALETTES["teal"]
    assert result.ok
    assert result.value.tab == palette.base
    assert result.value.group.back == palette.darkest
    assert result.value.header.back == palette.dark
    assert result.value.data.back == palette.lightest


def test_theme_colors_resolve_through_definitions():
    definitions = DefinitionsRegistry.new(Definitions(colors={"brand": "#123456"}))
    theme = _theme({"tab": "@brand", "header": {"fore": "@brand", "beneath": {"type": "thin", "color": "@brand"}}})
    result = resolve_theme(theme, [], definitions)
    assert result.ok
    assert result.value.tab == "#123456"
    assert result.value.header.beneath.color == "#123456"


def test_unresolved_color_reports_and_continues(registry):
    theme = _theme({"tab": "@nope", "data": {"back": "#EEEEEE"}})
    result = resolve_theme(theme, [], registry, (), ["theme"])
    assert not result.ok
    assert result.issues[0].path == ["theme", "tab"]
    assert result.value.tab is None
    assert result.value.data.back == "#EEEEEE"


def test_resolve_style_reference():
    definitions = DefinitionsRegistry.new(Definitions(styles={"warn": {"fore": "#FF0000", "bold": True}}))
    result = resolve_style("@warn", definitions, [])
    assert result.value == SheetHeaderStyle(fore="#FF0000", bold=True)


def test_resolve_color_passthrough(registry):
    assert resolve_color("#ABCDEF", registry, []).value == "#ABCDEF"
    assert resolve_color(None, registry, []).value is None


def test_parent_resolves_against_declaring_definitions():
    outer = DefinitionsRegistry.new(Definitions(colors={"ink": "#101010"}))
    inner = outer.overlay(Definitions(colors={"ink": "#FF0000"}))
    parent = _theme({"data": {"fore": "@ink"}})
    child = _theme({"header": {"fore": "@ink"}})

    result = resolve_theme(child, [ParentTheme(parent, ["theme"], outer)], inner, (), ["pages", 0, "theme"])
    assert result.ok
    assert result.value.data.fore == "#101010"
    assert result.value.header.fore == "#FF0000"

    # Without its own definitions a parent falls back to the caller's.
    shadowed = resolve_theme(child, [ParentTheme(parent, ["theme"])], inner, (), ["pages", 0, "theme"])
    assert shadowed.value.data.fore == "#FF0000"
