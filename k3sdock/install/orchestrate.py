"""Install orchestration: run the k3s installer, fetch and save the kubeconfig."""

import logging
import os

from k3sdock.errors import TempCleanupError
from k3sdock.install.command import build_get_config_command, build_install_command
from k3sdock.install.params import ProvisionParams
from k3sdock.kubeconfig import merge_configs, rewrite_kubeconfig, write_config
from k3sdock.provisioning.credentials import resolve_auth
from k3sdock.provisioning.shell import LocalOperator
from k3sdock.provisioning.ssh_transport import RemoteOperator

logger = logging.getLogger(__name__)


def _log_result(res):
    if res.stderr:
        logger.info(f"stderr: {res.stderr.decode(errors='replace')}")
    if res.stdout:
        logger.info(f"stdout: {res.stdout.decode(errors='replace')}")


def obtain_kubeconfig(operator, get_config_command, ip, context, local_path, merge=False, merge_tool="yaml"):
    """Fetch the kubeconfig through *operator*, point it at *ip* and save it.

    Args:
        operator: CommandOperator connected to the server
        get_config_command: command that prints the kubeconfig
        ip: address clients should use to reach the API server
        context: context/cluster/user name replacing "default"
        local_path: destination file, merged into when *merge* is set
        merge_tool: "yaml" (in-process) or "kubectl"

    Returns:
        Absolute path of the written kubeconfig.
    """
    res = operator.execute(get_config_command)
    logger.debug(f"Retrieved kubeconfig ({len(res.stdout)} bytes)")

    abs_path = os.path.abspath(os.path.expanduser(local_path))
    kubeconfig = rewrite_kubeconfig(res.stdout, ip, context)

    if merge:
        try:
            kubeconfig = merge_configs(abs_path, kubeconfig, tool=merge_tool)
        except TempCleanupError as e:
            logger.warning(f"WARNING: {e}")
            kubeconfig = e.document

    return write_config(abs_path, kubeconfig)


def run_install(operator, params: ProvisionParams):
    """Install k3s through an already open operator, then save its kubeconfig."""
    install_command = build_install_command(params)
    get_config_command = build_get_config_command(params.use_sudo)
    prefix = "local" if params.local else "ssh"

    if params.skip_install:
        logger.info("Skipping k3s installer")
    else:
        if params.print_command or params.local:
            logger.info(f"{prefix}: {install_command}")
        res = operator.execute(install_command)
        _log_result(res)

    if params.print_command:
        logger.info(f"{prefix}: {get_config_command}")

    return obtain_kubeconfig(
        operator,
        get_config_command,
        params.ip,
        params.context,
        params.local_path,
        merge=params.merge,
        merge_tool=params.merge_tool,
    )


def install(params: ProvisionParams, resolve=resolve_auth, connect=RemoteOperator.open):
    """Install k3s locally or over SSH. Single entry point.

    Args:
        params: ProvisionParams
        resolve: callable(ssh_key_path) -> AuthHandle
        connect: callable(address, auth, **kwargs) -> RemoteOperator

    Returns:
        Absolute path of the written kubeconfig.
    """
    # Fail on bad flags before touching the network
    build_install_command(params)

    if params.local:
        operator = LocalOperator()
        try:
            return run_install(operator, params)
        finally:
            operator.close()

    logger.info(f"Public IP: {params.ip}")
    ssh_key = os.path.expanduser(params.ssh_key) if params.ssh_key else ""
    auth = resolve(ssh_key)
    try:
        operator = connect(
            params.address,
            auth,
            username=params.user,
            verify_host_key=params.verify_host_key,
            known_hosts=params.known_hosts,
        )
        try:
            return run_install(operator, params)
        finally:
            operator.close()
    finally:
        auth.close()
