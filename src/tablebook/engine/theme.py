"""Theme cascade: colors, styles and themes resolved and folded into a SheetTheme."""

from __future__ import annotations

from typing import Any, NamedTuple, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel

from tablebook.contracts.book import Border, HeaderStyle, Style, Theme, is_reference
from tablebook.contracts.common import ObjectPath, Result, processing_issue
from tablebook.contracts.sheets import SheetBorder, SheetHeaderStyle, SheetStyle, SheetTheme
from tablebook.engine.registry import DefinitionsRegistry

M = TypeVar("M", bound=BaseModel)


class ParentTheme(NamedTuple):
    """An ancestor theme with the path and definitions of the level that declared it."""

    theme: Union[Theme, str]
    path: ObjectPath
    definitions: Optional[DefinitionsRegistry] = None


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def merge_styles(base: M, override: M) -> M:
    """Field-wise merge; an unset field in ``override`` keeps ``base``."""
    values = {
        name: getattr(base, name) if getattr(override, name) is None else getattr(override, name)
        for name in type(base).model_fields
    }
    return type(base)(**values)


def merge_themes(base: SheetTheme, override: SheetTheme) -> SheetTheme:
    return SheetTheme(
        tab=base.tab if override.tab is None else override.tab,
        group=merge_styles(base.group, override.group),
        header=merge_styles(base.header, override.header),
        data=merge_styles(base.data, override.data),
    )


def as_data_style(style: SheetHeaderStyle) -> SheetStyle:
    return SheetStyle(fore=style.fore, back=style.back, bold=style.bold, italic=style.italic)


# ---------------------------------------------------------------------------
# Colors and styles
# ---------------------------------------------------------------------------


def resolve_color(color: Optional[str], definitions: DefinitionsRegistry, path: ObjectPath) -> Result[str]:
    if color is None or not is_reference(color):
        return Result.success(color)
    return definitions.colors.resolve(color, path)


def resolve_border(border: Optional[Border], definitions: DefinitionsRegistry, path: ObjectPath) -> Result[SheetBorder]:
    if border is None:
        return Result.success(None)
    color = resolve_color(border.color, definitions, [*path, "color"])
    return Result(SheetBorder(type=border.type, color=color.value), color.issues)


def resolve_style(
    style: Union[Style, str, None],
    definitions: DefinitionsRegistry,
    path: ObjectPath,
) -> Result[SheetHeaderStyle]:
    """Resolve a style or ``@style`` reference; borders are kept when present."""
    if style is None:
        return Result.success(SheetHeaderStyle())

    if is_reference(style):
        found = definitions.styles.resolve(style, path)
        if not found.ok:
            return Result.failure(found.issues, SheetHeaderStyle())
        style = found.value

    issues = []
    resolved = SheetHeaderStyle(
        fore=resolve_color(style.fore, definitions, [*path, "fore"]).unwrap(issues),
        back=resolve_color(style.back, definitions, [*path, "back"]).unwrap(issues),
        bold=style.bold,
        italic=style.italic,
        beneath=resolve_border(getattr(style, "beneath", None), definitions, [*path, "beneath"]).unwrap(issues),
        between=resolve_border(getattr(style, "between", None), definitions, [*path, "between"]).unwrap(issues),
    )
    return Result(resolved, issues)


# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------


def resolve_theme(
    theme: Union[Theme, str, None],
    parents: Sequence[ParentTheme],
    definitions: DefinitionsRegistry,
    chain: Sequence[Theme] = (),
    path: ObjectPath = (),
) -> Result[SheetTheme]:
    """Resolve a theme on top of its ancestors.

    Order of precedence, lowest first: ``parents`` (each resolved on its own,
    against its own definitions when it carries them),
    the theme's ``inherits`` in order, then the theme's own fields.
    """
    path = list(path)
    issues = []
    result = SheetTheme()

    for entry in parents:
        parent = ParentTheme(*entry)
        scope = definitions if parent.definitions is None else parent.definitions
        resolved = resolve_theme(parent.theme, (), scope, (), parent.path)
        result = merge_themes(result, resolved.unwrap(issues))

    if theme is None:
        return Result(result, issues)

    label: Any = None
    if is_reference(theme):
        label = theme
        found = definitions.themes.resolve(theme, path)
        if not found.ok:
            return Result.failure([*issues, *found.issues], result)
        theme = found.value

    if any(link is theme for link in chain):
        issues.append(processing_issue("Circular theme reference", path, label))
        return Result.failure(issues, result)

    branch = (*chain, theme)
    for i, inherited in enumerate(theme.inherits):
        resolved = resolve_theme(inherited, (), definitions, branch, [*path, "inherits", i])
        result = merge_themes(result, resolved.unwrap(issues))

    own = SheetTheme(
        tab=resolve_color(theme.tab, definitions, [*path, "tab"]).unwrap(issues),
        group=_bucket(theme.group, definitions, [*path, "group"], issues),
        header=_bucket(theme.header, definitions, [*path, "header"], issues),
        data=as_data_style(_bucket(theme.data, definitions, [*path, "data"], issues)),
    )
    return Result(merge_themes(result, own), issues)


def _bucket(
    style: Union[HeaderStyle, Style, str, None],
    definitions: DefinitionsRegistry,
    path: ObjectPath,
    issues: list,
) -> SheetHeaderStyle:
    return resolve_style(style, definitions, path).unwrap(issues)
