"""Schema validation of parsed trees, and hygiene warnings for valid books."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from tablebook.contracts.book import Book
from tablebook.contracts.common import Issue, Result, WarningDetail


def _issue(error: dict[str, Any]) -> Issue:
    return Issue(
        type="validating",
        message=error["msg"],
        path=list(error["loc"]),
        data=error.get("input"),
    )


def validate(tree: Any) -> Result[Book]:
    """Validate a parsed tree into an immutable Book."""
    try:
        return Result.success(Book.model_validate(tree))
    except ValidationError as e:
        return Result.failure([_issue(error) for error in e.errors(include_url=False)])


def check_book(book: Book) -> list[WarningDetail]:
    """Hygiene checks that do not stop compilation."""
    warnings: list[WarningDetail] = []

    if not book.pages:
        warnings.append(WarningDetail(code="WARN_EMPTY_BOOK", message="Book has no pages."))

    for p, page in enumerate(book.pages):
        if page.rows == 0:
            warnings.append(WarningDetail(
                code="WARN_NO_ROWS",
                message=f"Page '{page.name}' has no data rows.",
                path=f"pages.{p}.rows",
            ))
        if len(page.groups) == 1 and page.groups[0].theme is not None:
            warnings.append(WarningDetail(
                code="WARN_UNUSED_GROUP_THEME",
                message=f"Page '{page.name}' has a single group, so no group header row is rendered.",
                path=f"pages.{p}.groups.0.theme",
            ))

    return warnings
