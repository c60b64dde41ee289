from __future__ import annotations

import json
import logging
from collections.abc import Callable

from . import __version__
from .config import ClientSettings
from .errors import (
    AuthenticationFailure,
    ClientClosedError,
    InvalidCredentialError,
    SocketConnectionError,
    ValidationFailure,
    VersionMismatchError,
)
from .models import HttpRequest
from .session import Endpoint, SessionState
from .transport import HttpTransport, OutboundRequest, RequestBody, TransportResponse
from .version import VERSION_HEADER, matches_major_minor

logger = logging.getLogger(__name__)

TokenSupplier = Callable[[], str]

_SHUTDOWN_MARKERS = (
    "has been closed",
    "has been shut down",
    "loop shut down",
    "executor not accepting a task",
    "after shutdown",
)


def _is_shutdown_error(exc: BaseException) -> bool:
    message = str(exc)
    return bool(message) and any(marker in message for marker in _SHUTDOWN_MARKERS)


def _merge_override(request: OutboundRequest, override: HttpRequest) -> None:
    if override.method and not request.method:
        request.method = override.method
    if override.path and not request.path:
        request.path = override.path
    for name, values in (override.headers or {}).items():
        if not request.has_header(name):
            request.headers[name] = ", ".join(values)
    for name, values in (override.query_string_parameters or {}).items():
        if name not in request.query and values:
            request.query[name] = values[0]
    if override.cookies and not request.has_header("Cookie"):
        request.headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in override.cookies.items())
    if request.secure is None and override.secure is not None:
        request.secure = override.secure
    if request.body is None and override.body is not None:
        body = override.body
        content = body if isinstance(body, str) else json.dumps(body)
        request.body = RequestBody(content=content)


class RequestDispatcher:
    """Sends control-plane requests and turns the response contract into typed errors."""

    def __init__(
        self,
        *,
        endpoint: Endpoint,
        session: SessionState,
        transport: HttpTransport,
        settings: ClientSettings,
        client_name: str = "MockServerClient",
        client_version: str = __version__,
    ) -> None:
        self.endpoint = endpoint
        self.session = session
        self.transport = transport
        self.settings = settings
        self.client_name = client_name
        self.client_version = client_version
        self.secure: bool | None = None
        self.request_override: HttpRequest | None = None
        self.token_supplier: TokenSupplier | None = None

    def _closed_error(self, verb: str) -> ClientClosedError:
        return ClientClosedError(
            f"{self.client_name} has already been {verb}, please create new {self.client_name} instance"
        )

    def ensure_open(self, *, during_shutdown: bool = False) -> None:
        if self.session.stopped or (self.session.stopping and not during_shutdown):
            raise self._closed_error("stopped")

    def prepare(self, request: OutboundRequest) -> OutboundRequest:
        if (
            not request.has_header("Content-Type")
            and request.body is not None
            and request.body.content_type
            and request.body.content_type.strip()
        ):
            request.with_header("Content-Type", request.body.content_type)
        if self.secure is not None:
            request.secure = self.secure
        if self.request_override is not None:
            _merge_override(request, self.request_override)
        if self.token_supplier is not None:
            token = self.token_supplier()
            if token is None or not str(token).strip():
                raise InvalidCredentialError(f'Control plane jwt supplier returned invalid JWT "{token}"')
            request.with_header("Authorization", f"Bearer {token}")
        return request.with_header("Host", self.endpoint.host_header())

    def dispatch(
        self,
        request: OutboundRequest,
        ignore_transport_errors: bool = False,
        *,
        during_shutdown: bool = False,
    ) -> TransportResponse | None:
        self.ensure_open(during_shutdown=during_shutdown)
        try:
            self.prepare(request)
            try:
                response = self.transport.send(
                    request,
                    host=self.endpoint.host,
                    port=self.endpoint.port,
                    timeout=self.settings.max_socket_timeout,
                )
            except SocketConnectionError as exc:
                if ignore_transport_errors:
                    logger.debug("Ignoring connection failure for %s %s: %s", request.method, request.path, exc)
                    return None
                raise
            self.enforce_contract(response)
            return response
        except RuntimeError as exc:
            if _is_shutdown_error(exc):
                raise self._closed_error("closed") from exc
            raise

    def enforce_contract(self, response: TransportResponse) -> None:
        if response.status_code == 400:
            raise ValidationFailure(response.body, status_code=400, response_body=response.body)
        if response.status_code == 401:
            raise AuthenticationFailure(response.body, status_code=401, response_body=response.body)
        server_version = response.header(VERSION_HEADER)
        if not matches_major_minor(server_version, self.client_version):
            raise VersionMismatchError(self.client_version, str(server_version))
