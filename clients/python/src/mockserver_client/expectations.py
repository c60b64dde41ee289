from __future__ import annotations

from collections.abc import Sequence

from .dispatcher import RequestDispatcher
from .errors import ClientException
from .models import (
    Expectation,
    HttpError,
    HttpForward,
    HttpResponse,
    OpenAPIExpectation,
    WireModel,
)
from .serialization import deserialize_expectations, serialize, serialize_array
from .transport import APPLICATION_JSON_UTF_8, OutboundRequest, RequestBody

CREATED = 201


class ExpectationRegistrar:
    """Submits expectation definitions; one definition goes as an object, several as an array."""

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    def upsert(self, expectations: Sequence[Expectation | None] | None) -> list[Expectation]:
        return self._submit("expectation", "expectation", expectations)

    def upsert_openapi(self, expectations: Sequence[OpenAPIExpectation | None] | None) -> list[Expectation]:
        return self._submit("openapi", "OpenAPI expectation", expectations)

    def _submit(
        self,
        operation: str,
        label: str,
        definitions: Sequence[WireModel | None] | None,
    ) -> list[Expectation]:
        submitted = [definition for definition in definitions or () if definition is not None]
        if not submitted:
            return []

        if len(submitted) == 1:
            payload = serialize(submitted[0])
        else:
            payload = serialize_array(submitted)
            label += "s"

        response = self._dispatcher.dispatch(
            OutboundRequest(
                method="PUT",
                path=self._dispatcher.endpoint.path(operation),
                body=RequestBody(payload, APPLICATION_JSON_UTF_8),
            )
        )
        if response is None:
            return []
        if response.status_code != CREATED:
            raise ClientException(
                f"error:\n\n  {response.body}\n\nwhile submitted {label}:\n\n  {payload}\n",
                status_code=response.status_code,
                response_body=response.body,
            )
        if response.body.strip():
            return deserialize_expectations(response.body)
        return []


class ForwardChainExpectation:
    """Returned by ``MockServerClient.when``; pick the action to register the expectation."""

    def __init__(self, registrar: ExpectationRegistrar, expectation: Expectation) -> None:
        self._registrar = registrar
        self._expectation = expectation

    @property
    def expectation(self) -> Expectation:
        return self._expectation

    def with_id(self, expectation_id: str) -> "ForwardChainExpectation":
        self._expectation = self._expectation.model_copy(update={"id": expectation_id})
        return self

    def with_priority(self, priority: int) -> "ForwardChainExpectation":
        self._expectation = self._expectation.model_copy(update={"priority": priority})
        return self

    def _upsert(self, **action: object) -> list[Expectation]:
        self._expectation = self._expectation.model_copy(update=action)
        return self._registrar.upsert([self._expectation])

    def respond(self, response: HttpResponse) -> list[Expectation]:
        return self._upsert(http_response=response)

    def forward(self, forward: HttpForward) -> list[Expectation]:
        return self._upsert(http_forward=forward)

    def error(self, error: HttpError) -> list[Expectation]:
        return self._upsert(http_error=error)
