from __future__ import annotations

from .action import HttpError, HttpForward, HttpResponse
from .common import TimeUnit, WireModel
from .request import RequestDefinition


class Times(WireModel):
    remaining_times: int | None = None
    unlimited: bool = True

    @staticmethod
    def unlimited_times() -> "Times":
        return Times(unlimited=True)

    @staticmethod
    def once() -> "Times":
        return Times.exactly(1)

    @staticmethod
    def exactly(count: int) -> "Times":
        return Times(remaining_times=count, unlimited=False)


class TimeToLive(WireModel):
    time_unit: TimeUnit | None = None
    time_to_live: int | None = None
    unlimited: bool = True

    @staticmethod
    def unlimited_ttl() -> "TimeToLive":
        return TimeToLive(unlimited=True)

    @staticmethod
    def exactly(time_unit: TimeUnit, time_to_live: int) -> "TimeToLive":
        return TimeToLive(time_unit=time_unit, time_to_live=time_to_live, unlimited=False)


class Expectation(WireModel):
    id: str | None = None
    priority: int | None = None
    http_request: RequestDefinition | None = None
    http_response: HttpResponse | None = None
    http_forward: HttpForward | None = None
    http_error: HttpError | None = None
    times: Times | None = None
    time_to_live: TimeToLive | None = None


class OpenAPIExpectation(WireModel):
    spec_url_or_payload: str
    operations_and_responses: dict[str, str] | None = None
