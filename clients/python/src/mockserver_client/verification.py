from __future__ import annotations

from collections.abc import Sequence

from .dispatcher import RequestDispatcher
from .errors import AuthenticationFailure, InvalidArgumentError, MockServerClientError, VerificationFailure
from .models import (
    ExpectationId,
    HttpRequest,
    RequestDefinition,
    Verification,
    VerificationSequence,
    VerificationTimes,
    WireModel,
)
from .serialization import serialize
from .transport import APPLICATION_JSON_UTF_8, OutboundRequest, RequestBody


def _failure_message(exc: BaseException) -> str:
    if isinstance(exc, MockServerClientError) and exc.message is not None:
        return exc.message
    return str(exc)


class VerificationEngine:
    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    def _send(self, operation: str, payload: WireModel) -> None:
        try:
            response = self._dispatcher.dispatch(
                OutboundRequest(
                    method="PUT",
                    path=self._dispatcher.endpoint.path(operation),
                    body=RequestBody(serialize(payload), APPLICATION_JSON_UTF_8),
                )
            )
            result = response.body if response is not None else ""
        except AuthenticationFailure:
            raise
        except Exception as exc:
            raise VerificationFailure(_failure_message(exc)) from exc
        if result:
            raise VerificationFailure(result)

    def verify(
        self,
        matcher: RequestDefinition | ExpectationId | str | None,
        times: VerificationTimes | None,
        max_reported_failures: int | None = None,
    ) -> None:
        if matcher is None:
            raise InvalidArgumentError(
                "verify(RequestDefinition, VerificationTimes) requires a non null RequestDefinition object"
            )
        if times is None:
            raise InvalidArgumentError(
                "verify(RequestDefinition, VerificationTimes) requires a non null VerificationTimes object"
            )
        if isinstance(matcher, (str, ExpectationId)):
            verification = Verification(
                expectation_id=ExpectationId.of(matcher),
                times=times,
                maximum_number_of_request_to_return_in_verification_failure=max_reported_failures,
            )
        else:
            verification = Verification(
                http_request=matcher,
                times=times,
                maximum_number_of_request_to_return_in_verification_failure=max_reported_failures,
            )
        self._send("verify", verification)

    def verify_sequence(
        self,
        matchers: Sequence[RequestDefinition | None] | None,
        max_reported_failures: int | None = None,
    ) -> None:
        if not matchers or matchers[0] is None:
            raise InvalidArgumentError(
                "verify(RequestDefinition...) requires a non-null non-empty array of RequestDefinition objects"
            )
        sequence = VerificationSequence(
            http_requests=[matcher for matcher in matchers if matcher is not None],
            maximum_number_of_request_to_return_in_verification_failure=max_reported_failures,
        )
        self._send("verifySequence", sequence)

    def verify_expectation_ids(
        self,
        expectation_ids: Sequence[ExpectationId | str | None] | None,
        max_reported_failures: int | None = None,
    ) -> None:
        if not expectation_ids or expectation_ids[0] is None:
            raise InvalidArgumentError(
                "verify(ExpectationId...) requires a non-null non-empty array of ExpectationId objects"
            )
        sequence = VerificationSequence(
            expectation_ids=[ExpectationId.of(value) for value in expectation_ids if value is not None],
            maximum_number_of_request_to_return_in_verification_failure=max_reported_failures,
        )
        self._send("verifySequence", sequence)

    def verify_zero_interactions(self) -> None:
        self._send("verify", Verification(http_request=HttpRequest(), times=VerificationTimes.exactly(0)))
