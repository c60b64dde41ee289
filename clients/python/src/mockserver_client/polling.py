from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

from .dispatcher import RequestDispatcher
from .errors import ClientClosedError, SocketCommunicationError, SocketConnectionError
from .transport import OutboundRequest, TransportResponse

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 10
DEFAULT_INTERVAL = 0.5

Sleep = Callable[[float], None]


class ProbeOutcome(str, Enum):
    OK = "ok"
    NOT_OK = "not_ok"
    UNREACHABLE = "unreachable"


Predicate = Callable[[ProbeOutcome], bool]


def poll(
    probe: Callable[[], ProbeOutcome],
    satisfied: Predicate,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    sleep: Sleep = time.sleep,
) -> bool:
    """Probe until ``satisfied`` holds; ``attempts`` retries after the first probe, ``interval`` apart.

    Returns False when the retries run out.
    """
    remaining = attempts
    while True:
        outcome = probe()
        if satisfied(outcome):
            return True
        if remaining <= 0:
            return False
        remaining -= 1
        sleep(interval)


class LifecyclePoller:
    def __init__(self, dispatcher: RequestDispatcher, *, sleep: Sleep = time.sleep) -> None:
        self._dispatcher = dispatcher
        self._sleep = sleep

    def _status_request(self) -> OutboundRequest:
        return OutboundRequest(method="PUT", path=self._dispatcher.endpoint.path("status"))

    def probe(self, *, ignore_transport_errors: bool = True, during_shutdown: bool = False) -> ProbeOutcome:
        try:
            response: TransportResponse | None = self._dispatcher.dispatch(
                self._status_request(),
                ignore_transport_errors,
                during_shutdown=during_shutdown,
            )
        except (SocketConnectionError, SocketCommunicationError, ClientClosedError) as exc:
            logger.debug("MockServer status probe failed, expected if MockServer is stopped: %s", exc)
            return ProbeOutcome.UNREACHABLE
        if response is None:
            return ProbeOutcome.UNREACHABLE
        if response.status_code == 200:
            return ProbeOutcome.OK
        return ProbeOutcome.NOT_OK

    def is_running(self, attempts: int = DEFAULT_ATTEMPTS, interval: float = DEFAULT_INTERVAL) -> bool:
        return poll(
            self.probe,
            lambda outcome: outcome is ProbeOutcome.OK,
            attempts=attempts,
            interval=interval,
            sleep=self._sleep,
        )

    def has_started(self, attempts: int = DEFAULT_ATTEMPTS, interval: float = DEFAULT_INTERVAL) -> bool:
        started = poll(
            lambda: self.probe(ignore_transport_errors=False),
            lambda outcome: outcome is ProbeOutcome.OK,
            attempts=attempts,
            interval=interval,
            sleep=self._sleep,
        )
        if not started:
            logger.debug("MockServer did not report started after %d retries", attempts)
        return started

    def has_stopped(
        self,
        attempts: int = DEFAULT_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
        *,
        during_shutdown: bool = False,
    ) -> bool:
        return poll(
            lambda: self.probe(during_shutdown=during_shutdown),
            lambda outcome: outcome is not ProbeOutcome.OK,
            attempts=attempts,
            interval=interval,
            sleep=self._sleep,
        )
