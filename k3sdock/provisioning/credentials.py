"""SSH credential resolution: agent, key file, agent match for encrypted keys, passphrase prompt.

Resolution is a short ordered chain. Each step returns an AuthHandle, returns
None to pass to the next step, or raises to stop resolution:

1. No key path: use every identity held by the SSH agent.
2. Key file that parses without a passphrase.
3. Encrypted key whose public half (``<key>.pub``) is loaded in the agent.
4. Encrypted key decrypted with a passphrase read from the terminal.
"""

import functools
import getpass
import io
import logging
import os
import socket

import paramiko
from paramiko.agent import AgentSSH

from k3sdock.errors import (
    AgentUnreachable,
    KeyParseError,
    KeyReadError,
    PassphraseParseError,
)
from k3sdock.provisioning.types import AuthHandle

logger = logging.getLogger(__name__)

AGENT_SOCKET_ENV = "SSH_AUTH_SOCK"
PASSPHRASE_ENV = "K3SDOCK_SSH_PASSPHRASE"

_KEY_CLASSES = (paramiko.RSAKey, paramiko.ECDSAKey, paramiko.Ed25519Key)


class _SocketAgent(AgentSSH):
    """Agent client bound to a socket that has already been dialed."""

    def __init__(self, conn):
        super().__init__()
        self._connect(conn)

    def close(self):
        self._close()


def dial_agent():
    """Connect to the agent named by $SSH_AUTH_SOCK and list its identities.

    Raises:
        AgentUnreachable: if the variable is unset or the socket cannot be dialed.
    """
    socket_path = os.environ.get(AGENT_SOCKET_ENV, "")
    if not socket_path:
        raise AgentUnreachable(socket_path, f"{AGENT_SOCKET_ENV} is not set")

    conn = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        conn.connect(socket_path)
        return _SocketAgent(conn)
    except (OSError, paramiko.SSHException) as e:
        conn.close()
        raise AgentUnreachable(socket_path, e) from e


def _prompt_passphrase(private_key_path):
    """Read a passphrase without echo. Unreadable input counts as empty."""
    from_env = os.environ.get(PASSPHRASE_ENV)
    if from_env is not None:
        return from_env
    try:
        return getpass.getpass(f"Enter passphrase for '{private_key_path}': ")
    except (EOFError, OSError) as e:
        logger.debug(f"Reading passphrase failed, using empty passphrase: {e}")
        return ""


def parse_private_key(text, passphrase=None):
    """Parse an RSA, ECDSA or Ed25519 private key from PEM/OpenSSH *text*.

    Raises:
        paramiko.PasswordRequiredException: if the key is encrypted and no
            passphrase was given.
        paramiko.SSHException: if no key type accepts the data.
    """
    needs_passphrase = None
    last_error = None
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(text), password=passphrase)
        except paramiko.PasswordRequiredException as e:
            needs_passphrase = e
        except (paramiko.SSHException, ValueError) as e:
            last_error = e
    if needs_passphrase is not None:
        raise needs_passphrase
    raise paramiko.SSHException(str(last_error))


def _read_key_file(private_key_path):
    try:
        with open(private_key_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise KeyReadError(private_key_path, e) from e
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise KeyParseError(private_key_path, e) from e


# ── Resolution steps ──────────────────────────────────────────────


def _from_agent():
    agent = dial_agent()
    keys = list(agent.get_keys())
    logger.debug(f"Using {len(keys)} identity(ies) from SSH agent")
    return AuthHandle(keys=keys, source="agent", close=agent.close)


def _from_unencrypted_key(private_key_path, key_text):
    try:
        key = parse_private_key(key_text)
    except paramiko.PasswordRequiredException:
        return None
    except paramiko.SSHException as e:
        raise KeyParseError(private_key_path, e) from e
    return AuthHandle(keys=[key], source="key")


def _from_agent_identity(public_key_path):
    """Use the agent identity matching *public_key_path*, or None on any failure."""
    try:
        agent = dial_agent()
    except AgentUnreachable as e:
        logger.debug(f"Agent fallback unavailable: {e}")
        return None

    try:
        blob = paramiko.PublicBlob.from_file(public_key_path)
    except (OSError, ValueError) as e:
        logger.debug(f"Agent fallback unavailable, cannot load {public_key_path}: {e}")
        agent.close()
        return None

    for key in agent.get_keys():
        if key.asbytes() == blob.key_blob:
            logger.debug(f"Using agent identity matching {public_key_path}")
            return AuthHandle(keys=[key], source="agent", close=agent.close)

    agent.close()
    return None


def _from_passphrase(private_key_path, key_text, prompt):
    passphrase = prompt(private_key_path)
    try:
        key = parse_private_key(key_text, passphrase=passphrase)
    except paramiko.SSHException as e:
        raise PassphraseParseError(private_key_path, e) from e
    return AuthHandle(keys=[key], source="key")


def resolve_auth(private_key_path="", prompt=_prompt_passphrase):
    """Resolve credentials for an SSH session.

    Args:
        private_key_path: path to a private key file, or "" to use the agent.
        prompt: callable(private_key_path) -> passphrase, called at most once.

    Returns:
        AuthHandle. The caller must call ``handle.close()`` when done.

    Raises:
        AgentUnreachable, KeyReadError, KeyParseError, PassphraseParseError
    """
    if not private_key_path:
        return _from_agent()

    key_text = _read_key_file(private_key_path)
    steps = (
        functools.partial(_from_unencrypted_key, private_key_path, key_text),
        functools.partial(_from_agent_identity, private_key_path + ".pub"),
        functools.partial(_from_passphrase, private_key_path, key_text, prompt),
    )
    for step in steps:
        handle = step()
        if handle is not None:
            return handle
