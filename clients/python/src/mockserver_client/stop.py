from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any

from .dispatcher import RequestDispatcher
from .errors import ClientClosedError, MockServerClientError
from .events import EventBusRegistry, EventType
from .polling import LifecyclePoller
from .session import SessionState
from .transport import OutboundRequest

logger = logging.getLogger(__name__)

STOP_CONFIRM_ATTEMPTS = 50
STOP_CONFIRM_INTERVAL = 0.005
STOP_WAIT_TIMEOUT = 10.0


class StopOrchestrator:
    """Runs the shutdown sequence once and resolves the session's stop handle with ``owner``."""

    def __init__(
        self,
        *,
        owner: Any,
        session: SessionState,
        dispatcher: RequestDispatcher,
        poller: LifecyclePoller,
        event_buses: EventBusRegistry,
        confirm_attempts: int = STOP_CONFIRM_ATTEMPTS,
        confirm_interval: float = STOP_CONFIRM_INTERVAL,
    ) -> None:
        self._owner = owner
        self._session = session
        self._dispatcher = dispatcher
        self._poller = poller
        self._event_buses = event_buses
        self._confirm_attempts = confirm_attempts
        self._confirm_interval = confirm_interval

    def stop_async(self, ignore_failure: bool = False) -> Future[Any]:
        handle = self._session.stop_handle
        if not self._session.begin_stop():
            return handle

        self._notify_local_listeners()
        worker = threading.Thread(
            target=self._teardown,
            args=(ignore_failure,),
            name="MockServerClient-stop",
            daemon=True,
        )
        worker.start()
        return handle

    def stop(self, timeout: float = STOP_WAIT_TIMEOUT) -> None:
        try:
            self.stop_async().result(timeout=timeout)
        except Exception as exc:
            logger.debug("exception while stopping - %s", exc, exc_info=True)

    def _notify_local_listeners(self) -> None:
        try:
            port = self._dispatcher.endpoint.port
        except MockServerClientError as exc:
            logger.warning("Unable to notify local listeners of STOP: %s", exc)
            return
        self._event_buses.get(port).publish(EventType.STOP)
        self._event_buses.remove(port)

    def _send_stop(self, ignore_failure: bool) -> None:
        endpoint = self._dispatcher.endpoint
        try:
            self._dispatcher.dispatch(
                OutboundRequest(method="PUT", path=endpoint.path("stop")),
                during_shutdown=True,
            )
            if not self._poller.has_stopped(
                self._confirm_attempts,
                self._confirm_interval,
                during_shutdown=True,
            ):
                logger.debug("MockServer still answering status after stop request")
        except ClientClosedError as exc:
            if not ignore_failure:
                logger.debug("request rejected while closing down, logging in case due other error %s", exc)
        except Exception as exc:
            if not ignore_failure:
                logger.warning("failed to send stop request to MockServer %s", exc)

    def _teardown(self, ignore_failure: bool) -> None:
        handle = self._session.stop_handle
        try:
            self._send_stop(ignore_failure)
            transport = self._dispatcher.transport
            if not transport.is_closed():
                transport.close()
        finally:
            if not handle.done():
                handle.set_result(self._owner)
