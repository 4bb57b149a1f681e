"""Merge a freshly retrieved kubeconfig into an existing one.

Two strategies:

- ``yaml`` (default): parse both documents and merge them in-process.
- ``kubectl``: write the new document to a temp file and let
  ``kubectl config view --merge --flatten`` combine it with the existing file.
"""

import logging
import os
import subprocess
import tempfile

import yaml

from k3sdock.errors import MergeToolError, TempCleanupError

logger = logging.getLogger(__name__)

MERGE_TOOLS = ("yaml", "kubectl")

# Kubeconfig sections whose entries are identified by their "name" field
NAMED_SECTIONS = ("clusters", "contexts", "users")


def _entry_name(item):
    return item.get("name") if isinstance(item, dict) else None


def _is_named_list(value):
    return isinstance(value, list) and all(_entry_name(item) is not None for item in value)


def _merges_by_name(key, current, value):
    if not (isinstance(current, list) and isinstance(value, list)):
        return False
    if key in NAMED_SECTIONS:
        return True
    return bool(current) and bool(value) and _is_named_list(current) and _is_named_list(value)


def merge_named_lists(base, override):
    """Concatenate two lists of named entries, deduplicated by name.

    An override entry replaces the base entry with the same name in place;
    new names are appended in order. Entries without a name are kept as is.
    """
    result = list(base)
    index = {_entry_name(item): i for i, item in enumerate(result) if _entry_name(item) is not None}
    for item in override:
        name = _entry_name(item)
        if name is not None and name in index:
            result[index[name]] = item
            continue
        if name is not None:
            index[name] = len(result)
        result.append(item)
    return result


def deep_merge(base, override):
    """Recursive dict merge. Override wins for scalars, named lists are unioned by name."""
    result = base.copy()
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        elif _merges_by_name(key, current, value):
            result[key] = merge_named_lists(current, value)
        else:
            result[key] = value
    return result


def _load_document(data, source):
    try:
        loaded = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise MergeToolError(source, f"invalid YAML: {e}") from e
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise MergeToolError(source, f"expected a mapping, got {type(loaded).__name__}")
    return loaded


def merge_kubeconfigs(existing_path, new_document):
    """Merge *new_document* (bytes) over the kubeconfig at *existing_path*.

    A missing existing file counts as empty.

    Raises:
        MergeToolError: if either document is not a YAML mapping.
    """
    try:
        with open(existing_path, "rb") as f:
            existing = _load_document(f.read(), existing_path)
    except FileNotFoundError:
        logger.info(f"No existing kubeconfig at {existing_path}, nothing to merge")
        existing = {}
    except OSError as e:
        raise MergeToolError(existing_path, e) from e

    new = _load_document(new_document, "<retrieved kubeconfig>")
    merged = deep_merge(existing, new)
    return yaml.safe_dump(merged, default_flow_style=False, sort_keys=False).encode()


def _remove_temp(path):
    try:
        os.remove(path)
    except OSError as e:
        logger.warning(f"Could not remove temporary kubeconfig file {path}: {e}")
        return e
    return None


def merge_with_kubectl(existing_path, new_document, kubectl="kubectl"):
    """Merge via ``kubectl config view --merge --flatten`` with KUBECONFIG=<existing>:<temp>.

    The temp file is removed before returning. If only the removal fails,
    TempCleanupError is raised with the merged document attached.

    Raises:
        MergeToolError: if kubectl is missing or exits non-zero.
        TempCleanupError: if the temp file could not be removed.
    """
    with tempfile.NamedTemporaryFile(mode="wb", prefix="k3s-temp-", delete=False) as f:
        f.write(new_document)
        tmp_path = f.name

    try:
        env = dict(os.environ)
        env["KUBECONFIG"] = os.pathsep.join([existing_path, tmp_path])
        try:
            proc = subprocess.run(
                [kubectl, "config", "view", "--merge", "--flatten"],
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise MergeToolError(existing_path, f"'{kubectl}' could not be run: {e}") from e
        if proc.returncode != 0:
            stderr = proc.stderr.decode(errors="replace").strip()
            raise MergeToolError(existing_path, f"{kubectl} exited with status {proc.returncode}: {stderr}")
        data = proc.stdout
    finally:
        cleanup_error = _remove_temp(tmp_path)

    if cleanup_error is not None:
        raise TempCleanupError(tmp_path, data, cleanup_error) from cleanup_error
    return data


def merge_configs(existing_path, new_document, tool="yaml"):
    """Merge with the chosen strategy ("yaml" or "kubectl")."""
    logger.info(f"Merging with existing kubeconfig at {existing_path}")
    if tool == "yaml":
        return merge_kubeconfigs(existing_path, new_document)
    if tool == "kubectl":
        return merge_with_kubectl(existing_path, new_document)
    raise ValueError(f"Unknown merge tool '{tool}'. Available: {', '.join(MERGE_TOOLS)}")
