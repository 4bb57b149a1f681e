"""Write kubeconfig files with owner-only permissions."""

import logging
import os

from k3sdock.errors import PersistError

logger = logging.getLogger(__name__)


def write_config(path, data, suppress_message=False):
    """Write *data* (bytes) to *path* with mode 0600 and return the absolute path."""
    abs_path = os.path.abspath(path)
    if not suppress_message:
        logger.info(f"Saving file to: {abs_path}")
        logger.info(f"\n# Test your cluster with:\nexport KUBECONFIG={abs_path}\nkubectl get node -o wide")
    try:
        fd = os.open(abs_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            # The creation mode only applies to new files; tighten existing ones before writing
            os.fchmod(f.fileno(), 0o600)
            f.write(data)
    except OSError as e:
        raise PersistError(abs_path, e) from e
    return abs_path
