"""Control-plane credential helpers.

MockServer can require a JWT on every control-plane request. ``MockServerClient``
accepts either a fixed token or a zero-argument callable that returns one; the
callable is invoked before each request so short-lived tokens can be refreshed.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import jwt

TokenSupplier = Callable[[], str]


def static_token(token: str) -> TokenSupplier:
    def _supply() -> str:
        return token

    return _supply


@dataclass(slots=True)
class JwtSupplier:
    """Mints a fresh signed JWT per call, re-using it until it is close to expiry."""

    key: Any
    algorithm: str = "RS256"
    issuer: str | None = None
    audience: str | None = None
    subject: str | None = None
    ttl_seconds: int = 300
    refresh_margin_seconds: int = 30
    claims: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, Any] | None = None
    clock: Callable[[], float] = time.time
    _token: str | None = field(default=None, init=False, repr=False)
    _expires_at: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if self.refresh_margin_seconds < 0 or self.refresh_margin_seconds >= self.ttl_seconds:
            raise ValueError("refresh_margin_seconds must be between 0 and ttl_seconds")

    def _mint(self, now: float) -> str:
        payload: dict[str, Any] = dict(self.claims)
        payload["iat"] = int(now)
        payload["nbf"] = int(now)
        payload["exp"] = int(now) + self.ttl_seconds
        payload["jti"] = uuid.uuid4().hex
        if self.issuer:
            payload["iss"] = self.issuer
        if self.audience:
            payload["aud"] = self.audience
        if self.subject:
            payload["sub"] = self.subject
        return jwt.encode(payload, self.key, algorithm=self.algorithm, headers=dict(self.headers or {}) or None)

    def __call__(self) -> str:
        now = self.clock()
        if self._token is None or now >= self._expires_at - self.refresh_margin_seconds:
            self._token = self._mint(now)
            self._expires_at = now + self.ttl_seconds
        return self._token
