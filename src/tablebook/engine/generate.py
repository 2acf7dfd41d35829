"""Renderer seam: hand a resolved SheetBook to a backend."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import orjson

from tablebook.contracts.common import Issue, Result
from tablebook.contracts.sheets import SheetBook
from tablebook.io.fileops import OutputLock, atomic_write


class SheetGenerator(Protocol):
    def generate(self, book: SheetBook) -> Result[None]: ...


class JsonFileGenerator:
    """Writes the resolved book as camelCase JSON, atomically and under a sidecar lock."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def generate(self, book: SheetBook) -> Result[None]:
        data = orjson.dumps(book.to_json_dict(), option=orjson.OPT_INDENT_2)
        with OutputLock(self.path):
            atomic_write(self.path, data)
        return Result.success(None)


def generate(book: SheetBook, generator: SheetGenerator) -> Result[None]:
    """Run ``generator``; an exception it raises becomes a generating issue."""
    try:
        return generator.generate(book)
    except Exception as e:
        return Result.failure([Issue(
            type="generating",
            message=str(e) or type(e).__name__,
            data={"generator": type(generator).__name__, "error": type(e).__name__},
        )])
