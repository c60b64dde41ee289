from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import TypeAdapter

from .models import (
    Expectation,
    LogEventRequestAndResponse,
    PortBinding,
    RequestDefinition,
    WireModel,
)

T = TypeVar("T")

_EXPECTATIONS = TypeAdapter(list[Expectation])
_REQUEST_DEFINITIONS = TypeAdapter(list[RequestDefinition])
_REQUESTS_AND_RESPONSES = TypeAdapter(list[LogEventRequestAndResponse])


def serialize(value: WireModel | None) -> str:
    if value is None:
        return ""
    return value.to_json()


def serialize_array(values: Sequence[WireModel]) -> str:
    return json.dumps([value.to_dict() for value in values])


def _deserialize_array(adapter: TypeAdapter[list[T]], text: str | None) -> list[T]:
    if text is None or not text.strip():
        return []
    payload: Any = json.loads(text)
    if isinstance(payload, dict):
        payload = [payload]
    return adapter.validate_python(payload)


def deserialize_expectations(text: str | None) -> list[Expectation]:
    return _deserialize_array(_EXPECTATIONS, text)


def deserialize_request_definitions(text: str | None) -> list[Any]:
    return _deserialize_array(_REQUEST_DEFINITIONS, text)


def deserialize_requests_and_responses(text: str | None) -> list[LogEventRequestAndResponse]:
    return _deserialize_array(_REQUESTS_AND_RESPONSES, text)


def deserialize_port_binding(text: str) -> PortBinding:
    return PortBinding.model_validate_json(text)
