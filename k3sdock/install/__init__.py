"""Install library: k3s command construction, parameters, orchestration."""

from k3sdock.install.command import (
    GET_SCRIPT,
    build_get_config_command,
    build_install_command,
    create_version_str,
    make_install_exec,
    validate_datastore,
)
from k3sdock.install.orchestrate import install, obtain_kubeconfig, run_install
from k3sdock.install.params import InstallOptions, ProvisionParams

__all__ = [
    "GET_SCRIPT",
    "InstallOptions",
    "ProvisionParams",
    "build_get_config_command",
    "build_install_command",
    "create_version_str",
    "install",
    "make_install_exec",
    "obtain_kubeconfig",
    "run_install",
    "validate_datastore",
]
