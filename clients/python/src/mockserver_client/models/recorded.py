from __future__ import annotations

from .action import HttpResponse
from .common import WireModel
from .request import HttpRequest


class LogEventRequestAndResponse(WireModel):
    timestamp: str | None = None
    http_request: HttpRequest | None = None
    http_response: HttpResponse | None = None
