from __future__ import annotations

import logging
import ssl
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping
from urllib.parse import quote

import httpx

from .config import ClientSettings
from .errors import SocketCommunicationError, SocketConnectionError

logger = logging.getLogger(__name__)

APPLICATION_JSON_UTF_8 = "application/json; charset=utf-8"
TRANSPORT_CLOSED_MESSAGE = "Cannot send a request, as the transport has been shut down."


@dataclass(slots=True)
class RequestBody:
    content: str
    content_type: str | None = None


@dataclass(slots=True)
class OutboundRequest:
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    body: RequestBody | None = None
    secure: bool | None = None

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    def with_header(self, name: str, value: str) -> "OutboundRequest":
        lowered = name.lower()
        for key in [key for key in self.headers if key.lower() == lowered]:
            del self.headers[key]
        self.headers[name] = value
        return self


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status_code: int
    headers: Mapping[str, str]
    body: str = ""

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class ProxyType(str, Enum):
    HTTP = "http"
    HTTPS = "https"
    SOCKS5 = "socks5"


@dataclass(frozen=True, slots=True)
class ProxyConfiguration:
    type: ProxyType
    address: str
    username: str | None = None
    password: str | None = None

    def url(self) -> str:
        credentials = ""
        if self.username:
            credentials = quote(self.username, safe="")
            if self.password:
                credentials += ":" + quote(self.password, safe="")
            credentials += "@"
        return f"{self.type.value}://{credentials}{self.address}"


def _ssl_context(settings: ClientSettings) -> ssl.SSLContext | bool:
    settings.require_mutual_tls_material()
    if not settings.control_plane_tls_mutual_authentication_required:
        # MockServer serves a dynamically generated certificate by default.
        return False
    context = ssl.create_default_context(cafile=settings.control_plane_tls_mutual_authentication_ca_chain)
    context.load_cert_chain(
        certfile=str(settings.control_plane_x509_certificate_path),
        keyfile=str(settings.control_plane_private_key_path),
    )
    return context


class HttpTransport:
    """Blocking request/response adapter around a lazily created ``httpx.Client``."""

    def __init__(
        self,
        *,
        settings: ClientSettings | None = None,
        proxy: ProxyConfiguration | None = None,
        client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._proxy = proxy
        self._client = client
        self._transport = transport
        self._lock = threading.Lock()
        self._closed = False

    @property
    def proxy(self) -> ProxyConfiguration | None:
        return self._proxy

    def with_proxy(self, proxy: ProxyConfiguration | None) -> None:
        with self._lock:
            if self._client is not None:
                raise RuntimeError("proxy configuration must be set before the first request")
            self._proxy = proxy

    def _http_client(self) -> httpx.Client:
        with self._lock:
            if self._closed:
                raise RuntimeError(TRANSPORT_CLOSED_MESSAGE)
            if self._client is None:
                kwargs: dict[str, object] = {
                    "verify": _ssl_context(self._settings),
                    "follow_redirects": False,
                }
                if self._proxy is not None:
                    kwargs["proxy"] = self._proxy.url()
                if self._transport is not None:
                    kwargs["transport"] = self._transport
                self._client = httpx.Client(**kwargs)  # type: ignore[arg-type]
            return self._client

    def send(
        self,
        request: OutboundRequest,
        *,
        host: str,
        port: int,
        timeout: float,
    ) -> TransportResponse:
        scheme = "https" if request.secure else "http"
        url = f"{scheme}://{host}:{port}{request.path}"
        content = None
        if request.body is not None:
            content = request.body.content.encode("utf-8")
        client = self._http_client()
        try:
            response = client.request(
                request.method,
                url,
                params=request.query or None,
                headers=request.headers,
                content=content,
                timeout=timeout,
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
            raise SocketConnectionError(f"Unable to connect to socket {host}:{port}: {exc}") from exc
        except httpx.TransportError as exc:
            raise SocketCommunicationError(
                f"Failed communicating with {host}:{port}: {exc.__class__.__name__}: {exc}"
            ) from exc
        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers.items()),
            body=response.text,
        )

    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            client = self._client
        if client is not None:
            logger.debug("Closing MockServer control-plane connection pool")
            client.close()
