"""Build the shell commands that install k3s and read back its kubeconfig."""

GET_SCRIPT = "curl -sfL https://get.k3s.io"
KUBECONFIG_PATH = "/etc/rancher/k3s/k3s.yaml"


def validate_datastore(datastore):
    """Reject datastore strings k3s cannot use."""
    if not datastore:
        return
    if "ssl-mode=REQUIRED" in datastore:
        raise ValueError("remove ssl-mode=REQUIRED from your datastore string, it is not supported by the k3s syntax")
    if "mysql" in datastore and "tcp" not in datastore:
        raise ValueError(
            "you must specify the mysql host as tcp(host:port) or tcp(ip:port), "
            "see the k3s docs for more: https://rancher.com/docs/k3s/latest/en/installation/ha"
        )


def make_install_exec(cluster, ip, tls_san, options):
    """Build the INSTALL_K3S_EXEC='server ...' assignment.

    Args:
        cluster: add --cluster-init to form an embedded datastore cluster
        ip: server IP, used as TLS SAN unless tls_san is set
        tls_san: optional TLS SAN override
        options: InstallOptions
    """
    extra_args = []
    if options.datastore:
        extra_args.append(f"--datastore-endpoint {options.datastore}")
    if options.flannel_ipsec:
        extra_args.append("--flannel-backend ipsec")
    if options.no_extras:
        extra_args.append("--no-deploy servicelb")
        extra_args.append("--no-deploy traefik")
    extra_args.append(options.extra_args)

    install_exec = "INSTALL_K3S_EXEC='server"
    if cluster:
        install_exec += " --cluster-init"
    san = tls_san or ip
    install_exec += f" --tls-san {san}"

    trimmed = " ".join(extra_args).strip()
    if trimmed:
        install_exec += f" {trimmed}"

    return install_exec + "'"


def create_version_str(k3s_version, k3s_channel):
    """Pin an exact version if given, otherwise follow a release channel."""
    if k3s_version:
        return f"INSTALL_K3S_VERSION='{k3s_version}'"
    return f"INSTALL_K3S_CHANNEL='{k3s_channel}'"


def build_install_command(params):
    """Full install pipeline for *params* (ProvisionParams)."""
    if not params.k3s_version and not params.k3s_channel:
        raise ValueError("give a value for --k3s-version or --k3s-channel")
    validate_datastore(params.options.datastore)

    install_exec = make_install_exec(params.cluster, params.ip, params.tls_san, params.options)
    version_str = create_version_str(params.k3s_version, params.k3s_channel)
    return f"{GET_SCRIPT} | {install_exec} {version_str} sh -\n"


def build_get_config_command(use_sudo=True):
    """Command that streams the server's kubeconfig to stdout."""
    sudo_prefix = "sudo " if use_sudo else ""
    return f"{sudo_prefix}cat {KUBECONFIG_PATH}\n"
