from __future__ import annotations

from .common import ExpectationId, WireModel
from .request import RequestDefinition


class VerificationTimes(WireModel):
    at_least: int | None = None
    at_most: int | None = None

    @staticmethod
    def never() -> "VerificationTimes":
        return VerificationTimes.exactly(0)

    @staticmethod
    def once() -> "VerificationTimes":
        return VerificationTimes.exactly(1)

    @staticmethod
    def exactly(count: int) -> "VerificationTimes":
        return VerificationTimes(at_least=count, at_most=count)

    @staticmethod
    def at_least_times(count: int) -> "VerificationTimes":
        return VerificationTimes(at_least=count, at_most=-1)

    @staticmethod
    def at_most_times(count: int) -> "VerificationTimes":
        return VerificationTimes(at_least=-1, at_most=count)

    @staticmethod
    def between(at_least: int, at_most: int) -> "VerificationTimes":
        return VerificationTimes(at_least=at_least, at_most=at_most)


class Verification(WireModel):
    http_request: RequestDefinition | None = None
    expectation_id: ExpectationId | None = None
    times: VerificationTimes | None = None
    maximum_number_of_request_to_return_in_verification_failure: int | None = None


class VerificationSequence(WireModel):
    http_requests: list[RequestDefinition] | None = None
    expectation_ids: list[ExpectationId] | None = None
    maximum_number_of_request_to_return_in_verification_failure: int | None = None
