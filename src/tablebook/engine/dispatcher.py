"""Response envelope helpers and exit codes."""

from __future__ import annotations

import sys
from typing import Any

import orjson

from tablebook.contracts.common import (
    ErrorDetail,
    Issue,
    Metrics,
    ResponseEnvelope,
    Target,
    WarningDetail,
)

EXIT_CODES = {
    "success": 0,
    "parsing": 10,
    "validating": 20,
    "processing": 30,
    "generating": 40,
    "io": 50,
    "internal": 90,
}


def success_envelope(
    command: str,
    result: Any,
    *,
    target: Target | None = None,
    warnings: list[WarningDetail] | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=True,
        command=command,
        target=target or Target(),
        result=result,
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def issues_envelope(
    command: str,
    issues: list[Issue],
    *,
    target: Target | None = None,
    result: Any = None,
    warnings: list[WarningDetail] | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    """Failed envelope for a phase that reported issues; ``result`` may hold a partial value."""
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        result=result,
        issues=issues,
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    target: Target | None = None,
    details: dict | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
        metrics=Metrics(duration_ms=duration_ms),
    )


def output_json(envelope: ResponseEnvelope) -> str:
    data = envelope.model_dump(mode="json")
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def print_response(envelope: ResponseEnvelope) -> None:
    sys.stdout.write(output_json(envelope) + "\n")


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Errors decide first (by code), then the earliest issue phase."""
    if envelope.ok:
        return EXIT_CODES["success"]
    if envelope.errors:
        code = envelope.errors[0].code.upper()
        if code.startswith("ERR_IO") or "LOCK" in code or code.endswith("NOT_FOUND"):
            return EXIT_CODES["io"]
        if code.startswith("ERR_USAGE"):
            return EXIT_CODES["validating"]
        return EXIT_CODES["internal"]
    if envelope.issues:
        return min(EXIT_CODES[issue.type] for issue in envelope.issues)
    return EXIT_CODES["internal"]
