from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any

from .errors import ClientException
from .paths import control_plane_path


class Endpoint:
    """Where MockServer lives; the port may still be pending when the client is built."""

    def __init__(
        self,
        host: str,
        port: "int | Future[int]",
        context_path: str = "",
        *,
        future_timeout: float = 90.0,
    ) -> None:
        self.host = host
        self.context_path = context_path
        self._future_timeout = future_timeout
        self._lock = threading.Lock()
        self._port: int | None = None
        self._port_future: Future[int] | None = None
        if isinstance(port, Future):
            self._port_future = port
        else:
            self._port = int(port)

    @property
    def port(self) -> int:
        if self._port is not None:
            return self._port
        with self._lock:
            if self._port is None:
                if self._port_future is None:
                    raise ClientException("MockServer port was never provided")
                try:
                    self._port = int(self._port_future.result(timeout=self._future_timeout))
                except Exception as exc:
                    raise ClientException(f"Unable to resolve MockServer port: {exc}") from exc
            return self._port

    def path(self, operation: str) -> str:
        return control_plane_path(operation, self.context_path)

    def host_header(self) -> str:
        return f"{self.host}:{self.port}"


class SessionState:
    """Stop bookkeeping for one client: a stopping flag and a set-once stop handle."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stopping = False
        self.stop_handle: Future[Any] = Future()

    @property
    def stopping(self) -> bool:
        return self._stopping

    @property
    def stopped(self) -> bool:
        return self.stop_handle.done()

    def begin_stop(self) -> bool:
        """Return True for exactly one caller: the one that must run the teardown."""
        with self._lock:
            if self._stopping:
                return False
            self._stopping = True
            return True
