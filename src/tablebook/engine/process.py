"""Compilation driver: a validated Book to a resolved SheetBook."""

from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from pydantic import BaseModel

from tablebook.contracts.book import Book, Column
from tablebook.contracts.common import Issue, Result
from tablebook.contracts.sheets import SheetBook, SheetColumn, SheetGroup, SheetPage
from tablebook.engine.behavior import resolve_behavior
from tablebook.engine.columns import resolve_columns
from tablebook.engine.formula import compile_formula, first_cell
from tablebook.engine.palettes import standard_palette_resolver
from tablebook.engine.registry import DefinitionResolver, DefinitionsRegistry
from tablebook.engine.selector import Scope
from tablebook.engine.theme import ParentTheme, resolve_theme
from tablebook.observe.events import EventEmitter

M = TypeVar("M", bound=BaseModel)


def _collect(issues: list[Issue], found: list[Issue]) -> None:
    # Ancestor themes are resolved again under every descendant; report each problem once.
    for issue in found:
        if issue not in issues:
            issues.append(issue)


def _style_or_none(style: M) -> Optional[M]:
    return style if style.model_dump(exclude_none=True) else None


def process_book(
    book: Book,
    resolvers: Optional[Sequence[DefinitionResolver]] = None,
    emitter: Optional[EventEmitter] = None,
) -> Result[SheetBook]:
    """Resolve every theme, selector, type and expression of ``book``.

    ``resolvers`` are fallback lookups for names missing from the book's
    definitions (default: the standard palettes). The returned result always
    carries the best-effort SheetBook and is a success only if no issue was
    found.
    """
    if resolvers is None:
        resolvers = [standard_palette_resolver()]
    emitter = emitter or EventEmitter()

    issues: list[Issue] = []
    emitter.emit("book", {"name": book.name, "pages": len(book.pages)})

    found = resolve_columns(book)
    columns = found.value
    _collect(issues, found.issues)

    definitions = DefinitionsRegistry.new(book.definitions, resolvers)
    book_parents: list[ParentTheme] = [ParentTheme(book.theme, ["theme"], definitions)] if book.theme is not None else []

    pages = []
    for p, page in enumerate(book.pages):
        page_path = ["pages", p]
        emitter.emit("page", {"name": page.name, "path": page_path})

        page_definitions = definitions.overlay(page.definitions)
        page_theme = resolve_theme(page.theme, book_parents, page_definitions, (), [*page_path, "theme"])
        _collect(issues, page_theme.issues)

        page_parents = list(book_parents)
        if page.theme is not None:
            page_parents.append(ParentTheme(page.theme, [*page_path, "theme"], page_definitions))

        groups = []
        for g, group in enumerate(page.groups):
            group_path = [*page_path, "groups", g]
            emitter.emit("group", {"name": group.name, "path": group_path})

            group_definitions = page_definitions.overlay(group.definitions)
            group_theme = resolve_theme(group.theme, page_parents, group_definitions, (), [*group_path, "theme"])
            _collect(issues, group_theme.issues)

            group_parents = list(page_parents)
            if group.theme is not None:
                group_parents.append(ParentTheme(group.theme, [*group_path, "theme"], group_definitions))

            sheet_columns = []
            for c, column in enumerate(group.columns):
                column_path = [*group_path, "columns", c]
                emitter.emit("column", {"name": column.name, "path": column_path})
                sheet_columns.append(_process_column(
                    column,
                    Scope(columns, page.name, group.name, column.name),
                    group_definitions.overlay(column.definitions),
                    group_parents,
                    column_path,
                    issues,
                ))

            groups.append(SheetGroup(
                title=group.name,
                title_style=_style_or_none(group_theme.value.group),
                columns=sheet_columns,
            ))

        pages.append(SheetPage(
            title=page.name,
            tab_color=page_theme.value.tab,
            rows=page.rows,
            groups=groups,
        ))

    emitter.emit("done", {"issues": len(issues)})
    return Result(SheetBook(title=book.name, pages=pages), issues)


def _process_column(
    column: Column,
    scope: Scope,
    definitions: DefinitionsRegistry,
    parents: list[ParentTheme],
    path: list,
    issues: list[Issue],
) -> SheetColumn:
    theme = resolve_theme(column.theme, parents, definitions, (), [*path, "theme"])
    _collect(issues, theme.issues)

    behavior = resolve_behavior(column.type, scope, definitions, [*path, "type"])
    _collect(issues, behavior.issues)

    value_expression = None
    if column.expression is not None:
        formula = compile_formula(column.expression, scope, first_cell(scope), [*path, "expression"])
        _collect(issues, formula.issues)
        value_expression = formula.value

    return SheetColumn(
        title=column.name,
        title_style=_style_or_none(theme.value.header),
        data_style=_style_or_none(theme.value.data),
        behavior=behavior.value,
        value_expression=value_expression,
    )
