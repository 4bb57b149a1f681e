"""Install parameters dataclass."""

from dataclasses import dataclass, field


@dataclass
class InstallOptions:
    """Options that shape the k3s server command line."""

    datastore: str = ""
    extra_args: str = ""
    flannel_ipsec: bool = False
    no_extras: bool = False


@dataclass
class ProvisionParams:
    """All parameters needed for a single k3s install and kubeconfig retrieval."""

    ip: str = "127.0.0.1"
    user: str = "root"
    ssh_key: str = ""  # "" means use the SSH agent
    ssh_port: int = 22
    local: bool = False
    use_sudo: bool = True
    skip_install: bool = False
    cluster: bool = False
    tls_san: str = ""
    k3s_version: str = ""
    k3s_channel: str = "v1.18"
    options: InstallOptions = field(default_factory=InstallOptions)
    local_path: str = "kubeconfig"
    context: str = "default"
    merge: bool = False
    merge_tool: str = "yaml"
    print_command: bool = False
    verify_host_key: bool = False
    known_hosts: str | None = None

    @property
    def address(self) -> str:
        """SSH address string (ip:port); IPv6 addresses are bracketed."""
        host = f"[{self.ip}]" if ":" in self.ip else self.ip
        return f"{host}:{self.ssh_port}"
