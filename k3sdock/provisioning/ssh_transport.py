"""SSH transport: run commands on a remote server over a single paramiko connection."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import paramiko
from paramiko.auth_strategy import AuthStrategy, InMemoryPrivateKey

from k3sdock.errors import ConnectError, ExecutionError, OperatorClosed
from k3sdock.provisioning.types import ExecutionResult

logger = logging.getLogger(__name__)


class _HandleAuthStrategy(AuthStrategy):
    """Offer each key of an AuthHandle in turn on one transport."""

    def __init__(self, username, keys):
        super().__init__(ssh_config=paramiko.SSHConfig())
        self._sources = [InMemoryPrivateKey(username, key) for key in keys]

    def get_sources(self):
        yield from self._sources


def split_address(address):
    """Split ``host:port`` (or ``[v6]:port``) into (host, port)."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid address '{address}', expected host:port")
    return host.strip("[]"), int(port)


class RemoteOperator:
    """Command operator bound to one SSH connection.

    Every execute() opens a fresh session channel, so a failed command never
    leaves state behind for the next one.
    """

    def __init__(self, address, client):
        self.address = address
        self._client = client
        self._closed = False

    def __repr__(self):
        return f"<RemoteOperator {self.address}>"

    @classmethod
    def open(cls, address, auth, username="root", verify_host_key=False, known_hosts=None, timeout=None):
        """Connect to *address* ("host:port") and authenticate with *auth*.

        Host identity is not verified unless *verify_host_key* is set, in
        which case the system known_hosts (plus *known_hosts*, if given)
        must already contain the server key.

        Raises:
            ConnectError: on DNS, TCP, handshake, host key or auth failure.
        """
        host, port = split_address(address)
        client = paramiko.SSHClient()
        if verify_host_key:
            client.load_system_host_keys()
            if known_hosts:
                client.load_host_keys(os.path.expanduser(known_hosts))
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
        else:
            logger.warning(f"SSH host key verification disabled for {address}")
            client.set_missing_host_key_policy(paramiko.MissingHostKeyPolicy())  # Accept any.

        try:
            client.connect(
                host,
                port=port,
                username=username,
                timeout=timeout,
                allow_agent=False,
                look_for_keys=False,
                auth_strategy=_HandleAuthStrategy(username, auth.keys),
            )
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise ConnectError(address, e) from e

        logger.debug(f"Connected to {username}@{address} ({auth.source} auth)")
        return cls(address, client)

    def execute(self, command):
        if self._closed:
            raise OperatorClosed(self)

        logger.debug(f"Running on {self.address}: {command}")
        try:
            stdin, stdout, stderr = self._client.exec_command(command)
            stdin.close()
            # Both streams share one channel window: stderr is read alongside stdout
            with ThreadPoolExecutor(max_workers=1) as stderr_reader:
                err_future = stderr_reader.submit(stderr.read)
                out = stdout.read()
                err = err_future.result()
            exit_code = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            raise ExecutionError(command, e) from e

        if exit_code != 0:
            raise ExecutionError(command, f"exit status {exit_code}", exit_code=exit_code, stderr=err)
        return ExecutionResult(stdout=out, stderr=err, exit_code=exit_code)

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._client.close()
