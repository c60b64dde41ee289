from __future__ import annotations

from typing import Any

from .common import Delay, KeysToMultiValues, WireModel


class HttpResponse(WireModel):
    status_code: int | None = None
    reason_phrase: str | None = None
    headers: KeysToMultiValues | None = None
    cookies: dict[str, str] | None = None
    body: Any | None = None
    delay: Delay | None = None


class HttpForward(WireModel):
    host: str
    port: int = 80
    scheme: str = "HTTP"
    delay: Delay | None = None


class HttpError(WireModel):
    drop_connection: bool | None = None
    response_bytes: str | None = None
    delay: Delay | None = None
