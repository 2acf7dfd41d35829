"""Pydantic models for the input book, the output book, issues and envelopes."""

from tablebook.contracts.book import (
    Book,
    Column,
    Definitions,
    Group,
    Page,
    Theme,
)
from tablebook.contracts.common import (
    ErrorDetail,
    Issue,
    Metrics,
    ResponseEnvelope,
    Result,
    Target,
    TextLocation,
    WarningDetail,
)
from tablebook.contracts.sheets import (
    Address,
    SheetBehavior,
    SheetBook,
    SheetColumn,
    SheetGroup,
    SheetPage,
    SheetTheme,
)

__all__ = [
    "Address",
    "Book",
    "Column",
    "Definitions",
    "ErrorDetail",
    "Group",
    "Issue",
    "Metrics",
    "Page",
    "ResponseEnvelope",
    "Result",
    "SheetBehavior",
    "SheetBook",
    "SheetColumn",
    "SheetGroup",
    "SheetPage",
    "SheetTheme",
    "Target",
    "TextLocation",
    "Theme",
    "WarningDetail",
]
