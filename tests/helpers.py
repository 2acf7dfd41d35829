"""Builders for table book trees used across the test modules."""

from __future__ import annotations

from tablebook.contracts.book import Book
from tablebook.engine.columns import resolve_columns
from tablebook.engine.selector import Scope


def text_column(name: str, **extra) -> dict:
    return {"name": name, "type": {"kind": "text"}, **extra}


def numeric_column(name: str, **extra) -> dict:
    return {"name": name, "type": {"kind": "numeric"}, **extra}


def make_book(data: dict) -> Book:
    return Book.model_validate(data)


def scope_for(book: Book, page: str, group: str, column: str) -> Scope:
    return Scope(resolve_columns(book).value, page, group, column)
