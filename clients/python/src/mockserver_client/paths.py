from __future__ import annotations

CONTROL_PLANE_ROOT = "/mockserver/"


def control_plane_path(operation: str, context_path: str | None = None) -> str:
    """Build ``/<context_path>/mockserver/<operation>`` with exactly one slash between segments."""
    path = CONTROL_PLANE_ROOT + operation.lstrip("/")
    if context_path and context_path.strip():
        prefix = context_path if context_path.startswith("/") else "/" + context_path
        if not prefix.endswith("/"):
            prefix += "/"
        path = prefix + path.lstrip("/")
    return path if path.startswith("/") else "/" + path
