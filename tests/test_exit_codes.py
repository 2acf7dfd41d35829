"""Exit code mapping regression tests."""

from tablebook.contracts.common import Issue
from tablebook.engine.dispatcher import (
    error_envelope,
    exit_code_for,
    issues_envelope,
    output_json,
    success_envelope,
)


def _issues(*types):
    return [Issue(type=t, message=t) for t in types]


def test_exit_code_success():
    assert exit_code_for(success_envelope("x", {})) == 0


def test_exit_code_parsing():
    assert exit_code_for(issues_envelope("x", _issues("parsing"))) == 10


def test_exit_code_validating():
    assert exit_code_for(issues_envelope("x", _issues("validating"))) == 20


def test_exit_code_processing():
    assert exit_code_for(issues_envelope("x", _issues("processing"))) == 30


def test_exit_code_generating():
    assert exit_code_for(issues_envelope("x", _issues("generating"))) == 40


def test_exit_code_earliest_phase_wins():
    assert exit_code_for(issues_envelope("x", _issues("processing", "validating"))) == 20


def test_exit_code_io_class():
    assert exit_code_for(error_envelope("x", "ERR_IO_NOT_FOUND", "missing")) == 50
    assert exit_code_for(error_envelope("x", "ERR_IO_READ", "denied")) == 50


def test_exit_code_usage_class():
    assert exit_code_for(error_envelope("x", "ERR_USAGE", "bad flag")) == 20


def test_exit_code_internal_fallback():
    assert exit_code_for(error_envelope("x", "ERR_INTERNAL", "boom")) == 90


def test_output_json_shape():
    text = output_json(issues_envelope("compile", _issues("processing"), result={"title": "T"}))
    assert '"ok": false' in text
    assert '"command": "compile"' in text
    assert '"type": "processing"' in text
