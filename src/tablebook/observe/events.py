"""Compile progress: NDJSON events for the book walk and per-phase traces."""

from __future__ import annotations

import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, TextIO, TypeVar

from tablebook.contracts.common import Result

T = TypeVar("T")


class Timer:
    """Context manager; ``elapsed_ms`` is set on exit."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)


class EventEmitter:
    """One JSON line per node the compiler visits (book, page, group, column, done).

    Paths are written dotted (``pages.0.groups.1``) so the stream stays
    greppable. Disabled emitters are no-ops, which is what
    ``process_book`` uses when no emitter is passed.
    """

    def __init__(self, enabled: bool = False, stream: TextIO | None = None) -> None:
        self.enabled = enabled
        self.stream = stream

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        payload: dict[str, Any] = {"event": event, "at": datetime.now(timezone.utc).isoformat()}
        for key, value in (data or {}).items():
            if key == "path" and isinstance(value, list):
                value = ".".join(str(part) for part in value)
            payload[key] = value
        stream = self.stream or sys.stderr
        stream.write(json.dumps(payload, default=str) + "\n")
        stream.flush()


class PhaseTrace:
    """Timing and issue count for one phase: parsing, validating, processing or generating."""

    def __init__(self, phase: str, started_ms: int) -> None:
        self.phase = phase
        self.started_ms = started_ms
        self.duration_ms = 0
        self.issues = 0

    def count(self, result: Result[T]) -> Result[T]:
        self.issues = len(result.issues)
        return result

    def as_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "started_ms": self.started_ms,
            "duration_ms": self.duration_ms,
            "issues": self.issues,
        }


class TraceRecorder:
    """Collects a ``PhaseTrace`` per compile phase; ``save`` writes them as one JSON file."""

    def __init__(self, source: str | None = None) -> None:
        self.source = source
        self.phases: list[PhaseTrace] = []
        self._start = time.perf_counter()

    def _elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._start) * 1000)

    @contextmanager
    def phase(self, name: str) -> Iterator[PhaseTrace]:
        entry = PhaseTrace(name, self._elapsed_ms())
        with Timer() as timer:
            yield entry
        entry.duration_ms = timer.elapsed_ms
        self.phases.append(entry)

    def save(self, path: str | Path) -> str:
        trace_path = Path(path)
        trace_data = {
            "source": self.source,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "total_duration_ms": self._elapsed_ms(),
            "issues": sum(entry.issues for entry in self.phases),
            "phases": [entry.as_dict() for entry in self.phases],
        }
        trace_path.write_text(json.dumps(trace_data, indent=2))
        return str(trace_path)
