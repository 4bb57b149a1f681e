#!/usr/bin/env python3
"""k3s provisioning tools — CLI entrypoint."""

import argparse

from k3sdock.commands.install import register_install_command
from k3sdock.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Install k3s over SSH and fetch its kubeconfig")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_install_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
