"""Command execution and SSH credentials: local/remote operators, auth resolution."""

from k3sdock.provisioning.credentials import dial_agent, parse_private_key, resolve_auth
from k3sdock.provisioning.shell import LocalOperator
from k3sdock.provisioning.ssh_transport import RemoteOperator, split_address
from k3sdock.provisioning.types import AuthHandle, CommandOperator, ExecutionResult

__all__ = [
    "AuthHandle",
    "CommandOperator",
    "ExecutionResult",
    "LocalOperator",
    "RemoteOperator",
    "dial_agent",
    "parse_private_key",
    "resolve_auth",
    "split_address",
]
