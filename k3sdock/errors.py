"""Error taxonomy for credential resolution, command execution and kubeconfig handling."""


class K3sdockError(Exception):
    """Base class for all provisioning errors surfaced to the CLI."""


class AgentUnreachable(K3sdockError):
    """The SSH agent socket is not configured or cannot be dialed."""

    def __init__(self, socket_path, reason):
        self.socket_path = socket_path
        super().__init__(f"unable to reach SSH Agent at '{socket_path or '$SSH_AUTH_SOCK'}': {reason}")


class KeyReadError(K3sdockError):
    """The private key file cannot be read."""

    def __init__(self, path, original_error):
        self.path = path
        self.original_error = original_error
        super().__init__(f"unable to read file: {path}, {original_error}")


class KeyParseError(K3sdockError):
    """The private key file is corrupt or of an unsupported type."""

    def __init__(self, path, original_error):
        self.path = path
        self.original_error = original_error
        super().__init__(f"unable to parse private key {path}: {original_error}")


class PassphraseParseError(K3sdockError):
    """The private key could not be decrypted with the supplied passphrase."""

    def __init__(self, path, original_error):
        self.path = path
        self.original_error = original_error
        super().__init__(f"parse private key {path} with passphrase failed: {original_error}")


class ConnectError(K3sdockError):
    """The SSH transport to the target could not be established."""

    def __init__(self, address, original_error):
        self.address = address
        self.original_error = original_error
        super().__init__(f"unable to connect to {address} over ssh: {original_error}")


class ExecutionError(K3sdockError):
    """A command could not be started or exited non-zero."""

    def __init__(self, command, reason, exit_code=None, stderr=b""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"error received processing command: {reason}"
        if stderr:
            message += f"\nstderr: {stderr.decode(errors='replace').strip()}"
        super().__init__(message)


class OperatorClosed(K3sdockError):
    """execute() was called on an operator that has already been closed."""

    def __init__(self, operator):
        super().__init__(f"{operator!r} is closed")


class MergeToolError(K3sdockError):
    """Merging the new kubeconfig with the existing one failed."""

    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Could not merge kubeconfigs with {path}: {reason}")


class TempCleanupError(K3sdockError):
    """The temporary kubeconfig used for merging could not be removed.

    The merge itself succeeded; its output is kept in ``document``.
    """

    def __init__(self, path, document, original_error):
        self.path = path
        self.document = document
        self.original_error = original_error
        super().__init__(f"Could not remove temporary kubeconfig file: {path}: {original_error}")


class PersistError(K3sdockError):
    """Writing the final kubeconfig file failed."""

    def __init__(self, path, original_error):
        self.path = path
        self.original_error = original_error
        super().__init__(f"Could not write kubeconfig to {path}: {original_error}")
