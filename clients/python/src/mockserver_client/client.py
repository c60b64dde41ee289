from __future__ import annotations

import logging
import time
import webbrowser
from collections.abc import Callable
from concurrent.futures import Future
import httpx

from . import __version__
from .auth import static_token
from .config import ClientSettings
from .dispatcher import RequestDispatcher
from .errors import ClientException, InvalidArgumentError
from .events import DEFAULT_REGISTRY, EventBus, EventBusRegistry, EventType
from .expectations import ExpectationRegistrar, ForwardChainExpectation
from .models import (
    ClearType,
    Expectation,
    ExpectationId,
    Format,
    HttpRequest,
    LogEventRequestAndResponse,
    OpenAPIExpectation,
    PortBinding,
    RequestDefinition,
    RetrieveType,
    TimeToLive,
    Times,
    VerificationTimes,
)
from .polling import DEFAULT_ATTEMPTS, DEFAULT_INTERVAL, LifecyclePoller, Sleep
from .serialization import (
    deserialize_expectations,
    deserialize_port_binding,
    deserialize_request_definitions,
    deserialize_requests_and_responses,
    serialize,
)
from .session import Endpoint, SessionState
from .stop import STOP_WAIT_TIMEOUT, StopOrchestrator
from .transport import (
    APPLICATION_JSON_UTF_8,
    HttpTransport,
    OutboundRequest,
    ProxyConfiguration,
    RequestBody,
    TransportResponse,
)
from .verification import VerificationEngine

logger = logging.getLogger(__name__)

LOG_SEPARATOR = "\n------------------------------------\n"

_AT_LEAST_ONCE = VerificationTimes.at_least_times(1)


def _is_blank_array(text: str | None) -> bool:
    return text is None or not text.strip() or text.strip() == "[]"


class MockServerClient:
    """Control-plane client for a running MockServer.

    ``port`` may be an ``int`` or a ``concurrent.futures.Future`` that yields the
    port once the server is bound; it is resolved on first use.

    Every method blocks until MockServer answers, except ``stop_async`` which
    returns a future resolved once the client has been torn down.
    """

    def __init__(
        self,
        host: str,
        port: "int | Future[int]",
        context_path: str | None = "",
        *,
        settings: ClientSettings | None = None,
        transport: HttpTransport | None = None,
        http_client: httpx.Client | None = None,
        event_buses: EventBusRegistry | None = None,
        client_version: str = __version__,
        sleep: Sleep = time.sleep,
    ) -> None:
        if host is None or not host.strip():
            raise InvalidArgumentError("Host can not be null or empty")
        if context_path is None:
            raise InvalidArgumentError("ContextPath can not be null")
        if port is None:
            raise InvalidArgumentError("Port can not be null")

        self._settings = settings or ClientSettings()
        self._endpoint = Endpoint(
            host,
            port,
            context_path,
            future_timeout=self._settings.max_future_timeout,
        )
        self._session = SessionState()
        self._transport = transport or HttpTransport(settings=self._settings, client=http_client)
        self._event_buses = DEFAULT_REGISTRY if event_buses is None else event_buses
        self._sleep = sleep
        self._dispatcher = RequestDispatcher(
            endpoint=self._endpoint,
            session=self._session,
            transport=self._transport,
            settings=self._settings,
            client_name=type(self).__name__,
            client_version=client_version,
        )
        if self._settings.control_plane_jwt:
            self.with_control_plane_jwt(self._settings.control_plane_jwt)
        self._poller = LifecyclePoller(self._dispatcher, sleep=sleep)
        self._verifier = VerificationEngine(self._dispatcher)
        self._registrar = ExpectationRegistrar(self._dispatcher)
        self._stopper = StopOrchestrator(
            owner=self,
            session=self._session,
            dispatcher=self._dispatcher,
            poller=self._poller,
            event_buses=self._event_buses,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(host={self._endpoint.host!r}, context_path={self._endpoint.context_path!r})"

    def __enter__(self) -> "MockServerClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # configuration

    def with_secure(self, secure: bool) -> "MockServerClient":
        self._dispatcher.secure = secure
        return self

    def with_request_override(self, request_override: HttpRequest | None) -> "MockServerClient":
        if request_override is None:
            raise InvalidArgumentError("Request with default properties can not be null")
        self._dispatcher.request_override = request_override
        return self

    def with_control_plane_jwt(self, jwt: "str | Callable[[], str]") -> "MockServerClient":
        self._dispatcher.token_supplier = jwt if callable(jwt) else static_token(jwt)
        return self

    def with_proxy_configuration(self, proxy: ProxyConfiguration | None) -> "MockServerClient":
        self._transport.with_proxy(proxy)
        return self

    # endpoint

    @property
    def port(self) -> int:
        return self._endpoint.port

    @property
    def host(self) -> str:
        return self._endpoint.host

    @property
    def context_path(self) -> str:
        return self._endpoint.context_path

    @property
    def remote_address(self) -> tuple[str, int]:
        return (self._endpoint.host, self._endpoint.port)

    @property
    def is_secure(self) -> bool:
        return bool(self._dispatcher.secure)

    @property
    def event_bus(self) -> EventBus:
        return self._event_buses.get(self._endpoint.port)

    def _send(self, request: OutboundRequest, ignore_transport_errors: bool = False) -> TransportResponse | None:
        return self._dispatcher.dispatch(request, ignore_transport_errors)

    def _put(
        self,
        operation: str,
        body: str | None = None,
        **query: str,
    ) -> TransportResponse | None:
        request = OutboundRequest(method="PUT", path=self._endpoint.path(operation), query=dict(query))
        if body is not None:
            request.body = RequestBody(body, APPLICATION_JSON_UTF_8)
        return self._send(request)

    def open_ui(self, pause: float = 1.0) -> "MockServerClient":
        scheme = "https" if self.is_secure else "http"
        url = f"{scheme}://{self._endpoint.host}:{self._endpoint.port}/mockserver/dashboard"
        try:
            opened = webbrowser.open(url)
        except webbrowser.Error as exc:
            logger.error("exception while attempting to launch UI %s", exc)
            raise ClientException(f"exception while attempting to launch UI {exc}") from exc
        if not opened:
            logger.warning("browse to URL not supported by the current environment: %s", url)
            return self
        self._sleep(pause)
        return self

    # lifecycle

    def is_running(self, attempts: int = DEFAULT_ATTEMPTS, interval: float = DEFAULT_INTERVAL) -> bool:
        return self._poller.is_running(attempts, interval)

    def has_started(self, attempts: int = DEFAULT_ATTEMPTS, interval: float = DEFAULT_INTERVAL) -> bool:
        return self._poller.has_started(attempts, interval)

    def has_stopped(self, attempts: int = DEFAULT_ATTEMPTS, interval: float = DEFAULT_INTERVAL) -> bool:
        return self._poller.has_stopped(attempts, interval)

    def bind(self, *ports: int) -> list[int]:
        response = self._put("bind", serialize(PortBinding(ports=list(ports))))
        if response is None or not response.body.strip():
            return []
        return deserialize_port_binding(response.body).ports

    def stop_async(self, ignore_failure: bool = False) -> "Future[MockServerClient]":
        return self._stopper.stop_async(ignore_failure)

    def stop(self, timeout: float = STOP_WAIT_TIMEOUT) -> None:
        self._stopper.stop(timeout)

    def close(self) -> None:
        self.stop()

    def disconnect(self) -> None:
        """Release the connection pool without asking MockServer to stop."""
        if not self._transport.is_closed():
            self._transport.close()

    def reset(self) -> "MockServerClient":
        self._dispatcher.ensure_open()
        self.event_bus.publish(EventType.RESET)
        self._put("reset")
        return self

    def clear(
        self,
        target: RequestDefinition | ExpectationId | str | None = None,
        clear_type: ClearType | None = None,
    ) -> "MockServerClient":
        if isinstance(target, str):
            target = ExpectationId(id=target)
        query: dict[str, str] = {}
        if clear_type is not None:
            query["type"] = clear_type.value.lower()
        self._put("clear", serialize(target), **query)
        return self

    # verification

    def verify(
        self,
        matcher: RequestDefinition | ExpectationId | str | None,
        times: VerificationTimes | None = _AT_LEAST_ONCE,
        max_reported_failures: int | None = None,
    ) -> "MockServerClient":
        self._verifier.verify(matcher, times, max_reported_failures)
        return self

    def verify_sequence(
        self,
        *matchers: RequestDefinition,
        max_reported_failures: int | None = None,
    ) -> "MockServerClient":
        self._verifier.verify_sequence(matchers, max_reported_failures)
        return self

    def verify_expectation_ids(
        self,
        *expectation_ids: ExpectationId | str,
        max_reported_failures: int | None = None,
    ) -> "MockServerClient":
        self._verifier.verify_expectation_ids(expectation_ids, max_reported_failures)
        return self

    def verify_zero_interactions(self) -> "MockServerClient":
        self._verifier.verify_zero_interactions()
        return self

    # retrieval

    def _retrieve(
        self,
        retrieve_type: RetrieveType,
        matcher: RequestDefinition | None,
        fmt: Format | None = None,
    ) -> str:
        query = {"type": retrieve_type.value}
        if fmt is not None:
            query["format"] = fmt.value
        response = self._put("retrieve", serialize(matcher), **query)
        return response.body if response is not None else ""

    def retrieve_recorded_requests_raw(self, matcher: RequestDefinition | None = None, fmt: Format = Format.JSON) -> str:
        return self._retrieve(RetrieveType.REQUESTS, matcher, fmt)

    def retrieve_recorded_requests(self, matcher: RequestDefinition | None = None) -> list[HttpRequest]:
        text = self.retrieve_recorded_requests_raw(matcher, Format.JSON)
        if _is_blank_array(text):
            return []
        return [item for item in deserialize_request_definitions(text) if isinstance(item, HttpRequest)]

    def retrieve_recorded_requests_and_responses_raw(
        self, matcher: RequestDefinition | None = None, fmt: Format = Format.JSON
    ) -> str:
        return self._retrieve(RetrieveType.REQUEST_RESPONSES, matcher, fmt)

    def retrieve_recorded_requests_and_responses(
        self, matcher: RequestDefinition | None = None
    ) -> list[LogEventRequestAndResponse]:
        text = self.retrieve_recorded_requests_and_responses_raw(matcher, Format.JSON)
        if _is_blank_array(text):
            return []
        return deserialize_requests_and_responses(text)

    def retrieve_recorded_expectations_raw(
        self, matcher: RequestDefinition | None = None, fmt: Format = Format.JSON
    ) -> str:
        return self._retrieve(RetrieveType.RECORDED_EXPECTATIONS, matcher, fmt)

    def retrieve_recorded_expectations(self, matcher: RequestDefinition | None = None) -> list[Expectation]:
        text = self.retrieve_recorded_expectations_raw(matcher, Format.JSON)
        if _is_blank_array(text):
            return []
        return deserialize_expectations(text)

    def retrieve_active_expectations_raw(
        self, matcher: RequestDefinition | None = None, fmt: Format = Format.JSON
    ) -> str:
        return self._retrieve(RetrieveType.ACTIVE_EXPECTATIONS, matcher, fmt)

    def retrieve_active_expectations(self, matcher: RequestDefinition | None = None) -> list[Expectation]:
        text = self.retrieve_active_expectations_raw(matcher, Format.JSON)
        if _is_blank_array(text):
            return []
        return deserialize_expectations(text)

    def retrieve_log_messages(self, matcher: RequestDefinition | None = None) -> str:
        return self._retrieve(RetrieveType.LOGS, matcher)

    def retrieve_log_messages_array(self, matcher: RequestDefinition | None = None) -> list[str]:
        return self.retrieve_log_messages(matcher).split(LOG_SEPARATOR)

    # expectations

    def when(
        self,
        matcher: RequestDefinition,
        times: Times | None = None,
        time_to_live: TimeToLive | None = None,
        priority: int = 0,
    ) -> ForwardChainExpectation:
        expectation = Expectation(
            http_request=matcher,
            times=times or Times.unlimited_times(),
            time_to_live=time_to_live or TimeToLive.unlimited_ttl(),
            priority=priority,
        )
        return ForwardChainExpectation(self._registrar, expectation)

    def upsert(self, *expectations: Expectation) -> list[Expectation]:
        return self._registrar.upsert(expectations)

    def upsert_openapi(self, *expectations: OpenAPIExpectation) -> list[Expectation]:
        return self._registrar.upsert_openapi(expectations)

