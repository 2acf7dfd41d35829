"""Common Pydantic models: issues, results, response envelope, metrics."""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

IssueType = Literal["parsing", "validating", "processing", "generating"]

ObjectPath = list[str | int]


class TextLocation(BaseModel):
    """Position of a parse issue inside the source text."""

    index: int
    line: int
    column: int


class Issue(BaseModel):
    """Structured issue shared by every phase.

    Parsing issues carry a ``location``; every other phase carries a ``path``
    into the book tree.
    """

    type: IssueType
    message: str
    path: ObjectPath | None = None
    location: TextLocation | None = None
    length: int | None = None
    data: Any | None = None


def processing_issue(message: str, path: ObjectPath, data: Any = None) -> Issue:
    return Issue(type="processing", message=message, path=list(path), data=data)


class Result(Generic[T]):
    """Success-or-failure value threaded through every phase.

    A failed result may still carry a best-effort ``value``.
    """

    __slots__ = ("value", "issues")

    def __init__(self, value: T | None = None, issues: list[Issue] | None = None) -> None:
        self.value = value
        self.issues: list[Issue] = issues or []

    @property
    def ok(self) -> bool:
        return not self.issues

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value)

    @classmethod
    def failure(cls, issues: list[Issue], value: T | None = None) -> "Result[T]":
        return cls(value, list(issues))

    def unwrap(self, issues: list[Issue]) -> T | None:
        """Move this result's issues into ``issues`` and return the value."""
        issues.extend(self.issues)
        return self.value

    def __repr__(self) -> str:
        return f"Result(ok={self.ok}, value={self.value!r}, issues={len(self.issues)})"


class Target(BaseModel):
    """Identifies the source document for a command."""

    file: str | None = None
    format: str | None = None


class WarningDetail(BaseModel):
    """Structured warning."""

    code: str
    message: str
    path: str | None = None


class ErrorDetail(BaseModel):
    """Structured error."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class Metrics(BaseModel):
    """Execution metrics."""

    duration_ms: int = 0


class ResponseEnvelope(BaseModel):
    """Standard response envelope returned by every command."""

    ok: bool = True
    command: str = ""
    target: Target = Field(default_factory=Target)
    result: Any = None
    issues: list[Issue] = Field(default_factory=list)
    warnings: list[WarningDetail] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)
