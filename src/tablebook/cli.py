"""Typer CLI application: validate and compile table books."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

import tablebook
from tablebook.contracts.book import Book
from tablebook.contracts.common import Target
from tablebook.engine.dispatcher import (
    error_envelope,
    exit_code_for,
    issues_envelope,
    print_response,
    success_envelope,
)
from tablebook.engine.palettes import STANDARD_PALETTES, standard_palette_resolver
from tablebook.io.fileops import fingerprint, read_text_safe
from tablebook.io.parser import infer_format, parse
from tablebook.observe.events import EventEmitter, Timer, TraceRecorder

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

_MAIN_HELP = """\
Compile declarative table books (YAML/JSON) into resolved, renderer-ready spreadsheet books.

**Pipeline:**  parse → validate → process → generate

1. `tablebook validate -f book.yaml`  — parse and schema-check a book
2. `tablebook compile -f book.yaml`  — resolve themes, selectors, types and formulas
3. `tablebook compile -f book.yaml -o book.json`  — also write the resolved book

**Every command** returns a JSON `ResponseEnvelope`:
`{"ok": bool, "command": "...", "result": ..., "issues": [...], "errors": [...], "warnings": [...], "metrics": {"duration_ms": N}}`

**References:** any `@name` resolves through the book's `definitions`, nearest scope first,
then the standard palettes (`@blue`, `@blue:darkest`). Run `tablebook palettes` to list them.

**Exit codes:** 0=success, 10=parsing, 20=validating, 30=processing, 40=generating, 50=io, 90=internal
"""

_COMPILE_EPILOG = """\
**Examples:**

`tablebook compile -f book.yaml`

`tablebook compile -f book.json -o resolved.json`  — atomic write under a `.lock` sidecar

`tablebook compile -f book.yaml --no-palettes --events`  — NDJSON progress on stderr

Failed compilations still return the best-effort book in `result` alongside `issues`.
"""


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(tablebook.__version__)
        raise typer.Exit()


app = typer.Typer(
    name="tablebook",
    help=_MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


@app.callback(invoke_without_command=True)
def _root(
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Print version and exit.", is_eager=True)
    ] = False,
) -> None:
    if version:
        _version_callback(True)


FilePath = Annotated[str, typer.Option("--file", "-f", help="Path to a .yaml/.yml/.json table book")]
FormatOpt = Annotated[
    Optional[str],
    typer.Option("--format", help="Source format: json or yaml (default: from the file suffix)"),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _emit(envelope, code=None):
    print_response(envelope)
    raise typer.Exit(code if code is not None else exit_code_for(envelope))


def _load_book(
    file: str,
    fmt: Optional[str],
    command: str,
    trace: Optional[TraceRecorder] = None,
) -> tuple[Book, Target]:
    """Read, parse and validate ``file``; emit a failure envelope and exit on any problem."""
    if fmt is not None and fmt not in ("json", "yaml"):
        _emit(error_envelope(command, "ERR_USAGE", f"Unknown format: {fmt}. Use json or yaml."))

    source_format = fmt or infer_format(file)
    target = Target(file=file, format=source_format)

    try:
        text = read_text_safe(file)
    except FileNotFoundError:
        _emit(error_envelope(command, "ERR_IO_NOT_FOUND", f"File not found: {file}", target=target))
    except (OSError, UnicodeDecodeError) as e:
        _emit(error_envelope(command, "ERR_IO_READ", str(e), target=target))

    trace = trace or TraceRecorder(file)
    with trace.phase("parsing") as phase:
        parsed = phase.count(parse(text, source_format))
    if not parsed.ok:
        _emit(issues_envelope(command, parsed.issues, target=target))

    with trace.phase("validating") as phase:
        validated = phase.count(tablebook.validate(parsed.value))
    if not validated.ok:
        _emit(issues_envelope(command, validated.issues, target=target))

    return validated.value, target


# ---------------------------------------------------------------------------
# tablebook version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the tablebook version.

    Example: `tablebook version`
    """
    _emit(success_envelope("version", {"version": tablebook.__version__}))


# ---------------------------------------------------------------------------
# tablebook validate
# ---------------------------------------------------------------------------
@app.command("validate")
def validate_cmd(
    file: FilePath,
    fmt: FormatOpt = None,
):
    """Parse and schema-check a table book without compiling it.

    Returns page and column counts, the source fingerprint and hygiene warnings.

    Example: `tablebook validate -f book.yaml`
    """
    from tablebook.validation.validators import check_book

    with Timer() as t:
        book, target = _load_book(file, fmt, "validate")
        warnings = check_book(book)

    result = {
        "valid": True,
        "name": book.name,
        "pages": len(book.pages),
        "columns": sum(len(group.columns) for page in book.pages for group in page.groups),
        "fingerprint": fingerprint(file),
    }
    _emit(success_envelope("validate", result, target=target, warnings=warnings, duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# tablebook compile
# ---------------------------------------------------------------------------
@app.command("compile", epilog=_COMPILE_EPILOG)
def compile_cmd(
    file: FilePath,
    fmt: FormatOpt = None,
    out: Annotated[Optional[str], typer.Option("--out", "-o", help="Write the resolved book as JSON to this path")] = None,
    no_palettes: Annotated[bool, typer.Option("--no-palettes", help="Do not resolve @palette colors and themes")] = False,
    events: Annotated[bool, typer.Option("--events", help="Emit NDJSON lifecycle events on stderr")] = False,
    trace_path: Annotated[Optional[str], typer.Option("--trace", help="Write a JSON phase trace to this path")] = None,
):
    """Compile a table book into a resolved SheetBook.

    Every `@reference`, theme cascade, selector, data type and expression is
    resolved. The result is the camelCase book a renderer consumes.

    Example: `tablebook compile -f book.yaml -o book.json`
    """
    from tablebook.engine.generate import JsonFileGenerator

    trace = TraceRecorder(file)
    emitter = EventEmitter(enabled=events)

    with Timer() as t:
        book, target = _load_book(file, fmt, "compile", trace)

        with trace.phase("processing") as phase:
            processed = phase.count(tablebook.process(
                book,
                resolvers=[] if no_palettes else [standard_palette_resolver()],
                emitter=emitter,
            ))

        generated = None
        if processed.ok and out:
            with trace.phase("generating") as phase:
                generated = phase.count(tablebook.generate(processed.value, JsonFileGenerator(out)))

    if trace_path:
        trace.save(trace_path)

    result = processed.value.to_json_dict()
    if not processed.ok:
        _emit(issues_envelope("compile", processed.issues, target=target, result=result, duration_ms=t.elapsed_ms))
    if generated is not None and not generated.ok:
        _emit(issues_envelope("compile", generated.issues, target=target, result=result, duration_ms=t.elapsed_ms))

    _emit(success_envelope("compile", result, target=target, duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# tablebook palettes
# ---------------------------------------------------------------------------
@app.command("palettes")
def palettes_cmd(
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Show a single palette")] = None,
):
    """List the standard palettes usable as `@palette` and `@palette:shade`.

    Example: `tablebook palettes --name blue`
    """
    if name is not None:
        if name not in STANDARD_PALETTES:
            _emit(error_envelope("palettes", "ERR_USAGE_UNKNOWN_PALETTE", f"Unknown palette: {name}"))
        selected = {name: STANDARD_PALETTES[name]}
    else:
        selected = STANDARD_PALETTES

    result = {palette: shades._asdict() for palette, shades in selected.items()}
    _emit(success_envelope("palettes", result))


# ---------------------------------------------------------------------------
# Entrypoint (for `python -m tablebook`)
# ---------------------------------------------------------------------------
def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Unhandled exceptions still produce a JSON envelope.
        print_response(error_envelope("unknown", "ERR_INTERNAL", str(exc)))
        raise SystemExit(90) from exc


if __name__ == "__main__":
    main()
