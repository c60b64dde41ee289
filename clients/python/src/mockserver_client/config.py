from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .errors import InvalidArgumentError

_ENV_PREFIX = "MOCKSERVER_"

DEFAULT_MAX_SOCKET_TIMEOUT = 20.0
DEFAULT_MAX_FUTURE_TIMEOUT = 90.0


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean, got: {raw!r}")


def _parse_seconds(name: str, raw: str | None, default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got: {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got: {raw!r}")
    return value


def _optional(raw: str | None) -> str | None:
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass(frozen=True, slots=True)
class ClientSettings:
    max_socket_timeout: float = DEFAULT_MAX_SOCKET_TIMEOUT
    max_future_timeout: float = DEFAULT_MAX_FUTURE_TIMEOUT
    control_plane_tls_mutual_authentication_required: bool = False
    control_plane_private_key_path: str | None = None
    control_plane_x509_certificate_path: str | None = None
    control_plane_tls_mutual_authentication_ca_chain: str | None = None
    control_plane_jwt: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ClientSettings":
        env = os.environ if env is None else env

        def get(name: str) -> str | None:
            return env.get(_ENV_PREFIX + name)

        return cls(
            max_socket_timeout=_parse_seconds(
                "MOCKSERVER_MAX_SOCKET_TIMEOUT", get("MAX_SOCKET_TIMEOUT"), DEFAULT_MAX_SOCKET_TIMEOUT
            ),
            max_future_timeout=_parse_seconds(
                "MOCKSERVER_MAX_FUTURE_TIMEOUT", get("MAX_FUTURE_TIMEOUT"), DEFAULT_MAX_FUTURE_TIMEOUT
            ),
            control_plane_tls_mutual_authentication_required=_parse_bool(
                "MOCKSERVER_CONTROL_PLANE_TLS_MUTUAL_AUTHENTICATION_REQUIRED",
                get("CONTROL_PLANE_TLS_MUTUAL_AUTHENTICATION_REQUIRED"),
                False,
            ),
            control_plane_private_key_path=_optional(get("CONTROL_PLANE_PRIVATE_KEY_PATH")),
            control_plane_x509_certificate_path=_optional(get("CONTROL_PLANE_X509_CERTIFICATE_PATH")),
            control_plane_tls_mutual_authentication_ca_chain=_optional(
                get("CONTROL_PLANE_TLS_MUTUAL_AUTHENTICATION_CA_CHAIN")
            ),
            control_plane_jwt=_optional(get("CONTROL_PLANE_JWT")),
        )

    def require_mutual_tls_material(self) -> None:
        if not self.control_plane_tls_mutual_authentication_required:
            return
        if not (
            self.control_plane_private_key_path
            and self.control_plane_x509_certificate_path
            and self.control_plane_tls_mutual_authentication_ca_chain
        ):
            raise InvalidArgumentError(
                "when 'control_plane_tls_mutual_authentication_required' is enabled "
                "'control_plane_private_key_path', 'control_plane_x509_certificate_path' and "
                "'control_plane_tls_mutual_authentication_ca_chain' must all be specified, "
                f"found control_plane_private_key_path: {self.control_plane_private_key_path!r}, "
                f"control_plane_x509_certificate_path: {self.control_plane_x509_certificate_path!r}, "
                "control_plane_tls_mutual_authentication_ca_chain: "
                f"{self.control_plane_tls_mutual_authentication_ca_chain!r}"
            )
