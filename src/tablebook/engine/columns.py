"""Column map: (page, group, column) names to spreadsheet positions."""

from __future__ import annotations

from typing import NamedTuple

from tablebook.contracts.book import Book
from tablebook.contracts.common import Result, processing_issue

ColumnKey = tuple[str, str, str]


class ResolvedColumn(NamedTuple):
    page: str
    grouped: bool
    index: int

    @property
    def offset(self) -> int:
        """Header rows above the first data row (group header row when grouped)."""
        return 2 if self.grouped else 1


ColumnMap = dict[ColumnKey, ResolvedColumn]


def resolve_columns(book: Book) -> Result[ColumnMap]:
    """Single pass over the book.

    Indices are 0-based per page and run across groups in declaration order.
    A duplicated name is reported and the later entry wins the map slot.
    """
    columns: ColumnMap = {}
    issues = []
    pages: set[str] = set()

    for p, page in enumerate(book.pages):
        if page.name in pages:
            issues.append(processing_issue("Duplicate page name", ["pages", p, "name"], page.name))
        pages.add(page.name)

        grouped = len(page.groups) > 1
        index = 0
        groups: set[str] = set()

        for g, group in enumerate(page.groups):
            group_path = ["pages", p, "groups", g]
            if group.name in groups:
                issues.append(processing_issue("Duplicate group name", [*group_path, "name"], group.name))
            groups.add(group.name)

            names: set[str] = set()
            for c, column in enumerate(group.columns):
                if column.name in names:
                    issues.append(processing_issue(
                        "Duplicate column name", [*group_path, "columns", c, "name"], column.name
                    ))
                names.add(column.name)

                columns[(page.name, group.name, column.name)] = ResolvedColumn(page.name, grouped, index)
                index += 1

    return Result(columns, issues)
