from __future__ import annotations

from . import __version__

VERSION_HEADER = "version"


def major_minor(version: str) -> str:
    """Return ``"<major>.<minor>"`` for a dotted version, ignoring qualifiers like ``-SNAPSHOT``."""
    core = version.strip().split("-", 1)[0]
    parts = core.split(".")
    return ".".join(parts[:2])


def matches_major_minor(server_version: str | None, client_version: str = __version__) -> bool:
    if server_version is None or not server_version.strip():
        return True
    if not client_version or not client_version.strip():
        return True
    return major_minor(server_version) == major_minor(client_version)
