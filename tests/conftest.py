"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from helpers import make_book, numeric_column, text_column
from tablebook.contracts.book import Book
from tablebook.engine.registry import DefinitionsRegistry


@pytest.fixture()
def sample_data() -> dict:
    """One page, two groups (so grouped), a book-level theme and definitions."""
    return {
        "name": "Budget",
        "theme": {"data": {"back": "#FFFFFF"}},
        "definitions": {
            "colors": {"ink": "#101010", "accent": "@ink"},
            "numerics": {"money": {"type": "currency", "integer": 1, "decimal": 2, "commas": True}},
        },
        "pages": [
            {
                "name": "Items",
                "rows": 10,
                "groups": [
                    {"name": "G1", "columns": [text_column("X")]},
                    {
                        "name": "G2",
                        "columns": [
                            {
                                "name": "Y",
                                "type": {"kind": "numeric", "format": {"type": "number", "decimal": 2}},
                            },
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture()
def sample_book(sample_data: dict) -> Book:
    return make_book(sample_data)


@pytest.fixture()
def flat_book() -> Book:
    """One page with a single group (ungrouped) of three columns."""
    return make_book({
        "name": "Flat",
        "pages": [
            {
                "name": "Sheet",
                "rows": 5,
                "groups": [
                    {"name": "Main", "columns": [text_column("A"), numeric_column("B"), numeric_column("C")]},
                ],
            },
        ],
    })


@pytest.fixture()
def registry() -> DefinitionsRegistry:
    return DefinitionsRegistry.new()


@pytest.fixture()
def book_yaml(tmp_path: Path, sample_data: dict) -> Path:
    path = tmp_path / "budget.yaml"
    path.write_text(yaml.safe_dump(sample_data, sort_keys=False))
    return path


@pytest.fixture()
def book_json(tmp_path: Path, sample_data: dict) -> Path:
    path = tmp_path / "budget.json"
    path.write_text(json.dumps(sample_data, indent=2))
    return path
