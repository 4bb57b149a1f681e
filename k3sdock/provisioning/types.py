"""Shared data types for command operators and SSH credentials."""

from dataclasses import dataclass, field
from typing import Callable, Protocol

import paramiko


@dataclass(frozen=True)
class ExecutionResult:
    """Captured output of one executed command."""

    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int = 0


def _noop_close():
    return None


@dataclass
class AuthHandle:
    """Resolved SSH credential plus the action that releases it.

    ``keys`` are offered in order during authentication. For agent-backed
    handles they are the agent's identities and ``close`` disconnects from
    the agent; for key files ``close`` is a no-op. ``close`` is safe to call
    more than once.
    """

    keys: list[paramiko.PKey] = field(default_factory=list)
    source: str = "key"  # "key" or "agent"
    close: Callable[[], None] = _noop_close


class CommandOperator(Protocol):
    """Executes command strings and captures their output, locally or over SSH."""

    def execute(self, command: str) -> ExecutionResult: ...

    def close(self) -> None: ...
