# sanitize.py
from __future__ import annotations

import re

# Kubernetes DNS-1123 label
MAX_NAME_LENGTH = 63
FALLBACK_NAME = "unnamed"

_NON_DNS_SAFE = re.compile(r"[^a-z0-9-]+")
_EDGE_DASHES = re.compile(r"^-+|-+$")


def sanitize_name(text: str | None) -> str:
    """
    Turn arbitrary text (job ids, step names, workflow names) into a name
    Argo / Kubernetes accepts.

    Text that leaves nothing behind (empty, or only unsafe characters) maps
    to "unnamed", so sanitize_name(sanitize_name(x)) == sanitize_name(x).
    """
    if not text:
        return FALLBACK_NAME
    name = text.lower()
    name = _NON_DNS_SAFE.sub("-", name)
    name = _EDGE_DASHES.sub("", name)
    if len(name) > MAX_NAME_LENGTH:
        # cutting can expose a dash at the end again
        name = name[:MAX_NAME_LENGTH].rstrip("-")
    return name or FALLBACK_NAME
