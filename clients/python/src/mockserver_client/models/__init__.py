from .action import HttpError, HttpForward, HttpResponse
from .common import (
    ClearType,
    Delay,
    ExpectationId,
    Format,
    KeysToMultiValues,
    PortBinding,
    RetrieveType,
    SocketAddress,
    TimeUnit,
    WireModel,
)
from .expectation import Expectation, OpenAPIExpectation, TimeToLive, Times
from .recorded import LogEventRequestAndResponse
from .request import HttpRequest, OpenAPIDefinition, RequestDefinition
from .verification import Verification, VerificationSequence, VerificationTimes

__all__ = [
    "ClearType",
    "Delay",
    "Expectation",
    "ExpectationId",
    "Format",
    "HttpError",
    "HttpForward",
    "HttpRequest",
    "HttpResponse",
    "KeysToMultiValues",
    "LogEventRequestAndResponse",
    "OpenAPIDefinition",
    "OpenAPIExpectation",
    "PortBinding",
    "RequestDefinition",
    "RetrieveType",
    "SocketAddress",
    "TimeToLive",
    "TimeUnit",
    "Times",
    "Verification",
    "VerificationSequence",
    "VerificationTimes",
    "WireModel",
]
