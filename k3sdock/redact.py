"""Keep credentials out of CLI output.

Secrets come from two places: the SSH key passphrase taken from the
environment, and values registered at runtime (the --datastore connection
string embeds a database password).
"""

import functools
import logging
import os
import re

from k3sdock.provisioning.credentials import PASSPHRASE_ENV

MASK = "***"
_MIN_SECRET_LENGTH = 8  # shorter values would mask ordinary words

_registered: set[str] = set()


def register_secret(value: str) -> None:
    """Mask *value* in all subsequent log output."""
    if len(value) >= _MIN_SECRET_LENGTH:
        _registered.add(value)


def _secret_values() -> frozenset[str]:
    values = set(_registered)
    passphrase = os.environ.get(PASSPHRASE_ENV, "")
    if len(passphrase) >= _MIN_SECRET_LENGTH:
        values.add(passphrase)
    return frozenset(values)


@functools.lru_cache(maxsize=8)
def _secret_pattern(values: frozenset[str]) -> re.Pattern | None:
    if not values:
        return None
    # Longest first, so a secret that contains another is masked whole
    alternatives = sorted(values, key=len, reverse=True)
    return re.compile("|".join(re.escape(v) for v in alternatives))


def redact_secrets(text: str) -> str:
    """Replace every known secret in *text* with '***'."""
    pattern = _secret_pattern(_secret_values())
    if pattern is None:
        return text
    return pattern.sub(MASK, text)


class SecretRedactingFilter(logging.Filter):
    """Masks secrets in the formatted message of each record.

    Installed on the CLI handler by setup_cli_logging.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True
