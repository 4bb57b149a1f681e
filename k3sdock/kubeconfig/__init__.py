"""Kubeconfig post-processing: placeholder rewrite, merge, persist."""

from k3sdock.kubeconfig.merge import (
    MERGE_TOOLS,
    deep_merge,
    merge_configs,
    merge_kubeconfigs,
    merge_with_kubectl,
)
from k3sdock.kubeconfig.persist import write_config
from k3sdock.kubeconfig.rewrite import rewrite_kubeconfig

__all__ = [
    "MERGE_TOOLS",
    "deep_merge",
    "merge_configs",
    "merge_kubeconfigs",
    "merge_with_kubectl",
    "rewrite_kubeconfig",
    "write_config",
]
