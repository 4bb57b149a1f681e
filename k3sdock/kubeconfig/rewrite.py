"""Rewrite the placeholder server address and names in a retrieved kubeconfig."""

import re

LOOPBACK = b"127.0.0.1"
LOCALHOST = b"localhost"
DEFAULT_CONTEXT = "default"

_PLACEHOLDERS = re.compile(rb"127\.0\.0\.1|localhost|default")


def rewrite_kubeconfig(document, ip, context=""):
    """Replace loopback/localhost with *ip* and "default" with *context*.

    A single left-to-right pass, so replacement text is never rewritten again
    (e.g. a context named "localhost-prod" stays intact). Everything else is
    kept byte for byte.
    """
    if isinstance(document, str):
        document = document.encode()
    context = context or DEFAULT_CONTEXT
    replacements = {
        LOOPBACK: ip.encode(),
        LOCALHOST: ip.encode(),
        DEFAULT_CONTEXT.encode(): context.encode(),
    }
    return _PLACEHOLDERS.sub(lambda m: replacements[m.group(0)], document)
