"""Source text to a plain tree: JSON via orjson (JSONC via json5), YAML via PyYAML."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

import json5
import orjson
import yaml

from tablebook.contracts.common import Issue, Result, TextLocation

SourceFormat = Literal["json", "yaml"]

# json5 reports "<string>:LINE Unexpected X at column COL"
JSON5_ERROR = re.compile(r"^.*?:(?P<line>\d+) (?P<message>.+) at column (?P<column>\d+)$")


class BookLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as strings (``2024-01-31`` stays text)."""


BookLoader.add_constructor(
    "tag:yaml.org,2002:timestamp",
    lambda loader, node: loader.construct_scalar(node),
)


def infer_format(path: str | Path | None, default: SourceFormat = "yaml") -> SourceFormat:
    if path is None:
        return default
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return default


def _offset(text: str, line: int, column: int) -> int:
    lines = text.splitlines(keepends=True)
    return sum(len(chunk) for chunk in lines[:line - 1]) + column - 1


def parse_json(text: str) -> Result[Any]:
    """Strict JSON through orjson; books with comments or trailing commas go through json5."""
    try:
        return Result.success(orjson.loads(text))
    except orjson.JSONDecodeError as e:
        strict = e

    try:
        return Result.success(json5.loads(text))
    except ValueError as e:
        match = JSON5_ERROR.match(str(e))
        if match is None:
            message = strict.msg
            location = TextLocation(index=strict.pos, line=strict.lineno, column=strict.colno)
        else:
            line, column = int(match["line"]), int(match["column"])
            message = match["message"]
            location = TextLocation(index=_offset(text, line, column), line=line, column=column)
        return Result.failure([Issue(type="parsing", message=message, location=location, length=1)])


def parse_yaml(text: str) -> Result[Any]:
    try:
        return Result.success(yaml.load(text, Loader=BookLoader))
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        location = None
        if mark is not None:
            location = TextLocation(index=mark.index, line=mark.line + 1, column=mark.column + 1)
        return Result.failure([Issue(
            type="parsing",
            message=e.problem or e.context or str(e),
            location=location,
            length=1,
        )])
    except yaml.YAMLError as e:
        return Result.failure([Issue(type="parsing", message=str(e))])


def parse(text: str, fmt: SourceFormat = "yaml") -> Result[Any]:
    if fmt == "json":
        return parse_json(text)
    if fmt == "yaml":
        return parse_yaml(text)
    raise ValueError(f"Unknown source format: {fmt}")
