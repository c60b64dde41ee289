from __future__ import annotations

from typing import Any


class MockServerClientError(Exception):
    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        response_body: Any | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code is not None and self.message:
            return f"[{self.status_code}] {self.message}"
        if self.message:
            return self.message
        if self.status_code is not None:
            return f"[{self.status_code}]"
        return self.__class__.__name__


class ClientClosedError(MockServerClientError):
    """The client was stopped or its transport torn down; build a new client."""


class _ResponseBodyError(MockServerClientError):
    """Renders as the response body alone; the status code stays on ``status_code``."""

    def __str__(self) -> str:
        if self.message:
            return self.message
        return super().__str__()


class ValidationFailure(_ResponseBodyError, ValueError):
    """MockServer rejected the request payload (HTTP 400)."""


class AuthenticationFailure(_ResponseBodyError):
    """MockServer rejected the control-plane credentials (HTTP 401)."""


class ClientException(MockServerClientError):
    """MockServer answered in a way the client cannot accept."""


class VersionMismatchError(ClientException):
    def __init__(self, client_version: str, server_version: str) -> None:
        self.client_version = client_version
        self.server_version = server_version
        super().__init__(
            f'Client version "{client_version}" major and minor versions do not match '
            f'server version "{server_version}"'
        )


class InvalidArgumentError(MockServerClientError, ValueError):
    pass


class InvalidCredentialError(InvalidArgumentError):
    pass


class SocketConnectionError(MockServerClientError):
    """The transport could not connect to MockServer."""


class VerificationFailure(AssertionError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class SocketCommunicationError(MockServerClientError):
    """The connection to MockServer failed after it was established (timeout, reset, protocol error)."""
