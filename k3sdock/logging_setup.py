"""CLI logging setup: simple %(message)s format for standalone commands."""

import logging
import sys

from k3sdock.redact import SecretRedactingFilter


def setup_cli_logging(verbose=False):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(). With *verbose*, paramiko's own
    transport logging is let through as well.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
    if not verbose:
        logging.getLogger("paramiko").setLevel(logging.WARNING)
