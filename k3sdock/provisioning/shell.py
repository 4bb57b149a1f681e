"""Local command operator: runs command strings through the local shell."""

import logging
import subprocess

from k3sdock.errors import ExecutionError, OperatorClosed
from k3sdock.provisioning.types import ExecutionResult

logger = logging.getLogger(__name__)


class LocalOperator:
    """Execute commands on this machine with ``sh -c``. No timeout is applied."""

    def __init__(self, cwd=None):
        self._cwd = cwd
        self._closed = False

    def __repr__(self):
        return "<LocalOperator>"

    def execute(self, command):
        if self._closed:
            raise OperatorClosed(self)

        logger.debug(f"Running locally: {command}")
        try:
            proc = subprocess.run(
                command,
                shell=True,
                cwd=self._cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ExecutionError(command, e) from e

        if proc.returncode != 0:
            raise ExecutionError(
                command,
                f"exit status {proc.returncode}",
                exit_code=proc.returncode,
                stderr=proc.stderr,
            )
        return ExecutionResult(stdout=proc.stdout, stderr=proc.stderr, exit_code=proc.returncode)

    def close(self):
        self._closed = True
