"""Tests for k3sdock.provisioning.shell — local command operator."""

import subprocess

import pytest

from k3sdock.errors import ExecutionError, OperatorClosed
from k3sdock.provisioning.shell import LocalOperator


def test_execute_captures_both_streams():
    op = LocalOperator()

    res = op.execute("printf hello; printf oops >&2")

    assert res.stdout == b"hello"
    assert res.stderr == b"oops"
    assert res.exit_code == 0


def test_execute_runs_through_shell_pipeline():
    res = LocalOperator().execute("printf 'a\\nb\\nc\\n' | wc -l")
    assert res.stdout.strip() == b"3"


def test_execute_nonzero_exit_raises_with_stderr():
    op = LocalOperator()

    with pytest.raises(ExecutionError) as exc_info:
        op.execute("echo boom >&2; exit 3")

    assert exc_info.value.exit_code == 3
    assert exc_info.value.stderr == b"boom\n"
    assert "boom" in str(exc_info.value)


def test_execute_respects_cwd(tmp_path):
    (tmp_path / "marker.txt").write_text("here")
    res = LocalOperator(cwd=str(tmp_path)).execute("cat marker.txt")
    assert res.stdout == b"here"


def test_execute_after_close_fails_without_running(monkeypatch):
    op = LocalOperator()
    op.close()

    def _run(*args, **kwargs):
        raise AssertionError("no process may be started after close")

    monkeypatch.setattr(subprocess, "run", _run)

    with pytest.raises(OperatorClosed):
        op.execute("true")


def test_close_is_repeatable():
    op = LocalOperator()
    op.close()
    op.close()
