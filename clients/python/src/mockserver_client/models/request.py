from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from .common import KeysToMultiValues, SocketAddress, WireModel


class HttpRequest(WireModel):
    """Request matcher; also used as the shape of recorded requests."""

    method: str | None = None
    path: str | None = None
    path_parameters: KeysToMultiValues | None = None
    query_string_parameters: KeysToMultiValues | None = None
    headers: KeysToMultiValues | None = None
    cookies: dict[str, str] | None = None
    body: Any | None = None
    secure: bool | None = None
    keep_alive: bool | None = None
    socket_address: SocketAddress | None = None

    def with_header(self, name: str, *values: str) -> "HttpRequest":
        headers = dict(self.headers or {})
        headers[name] = list(values)
        return self.model_copy(update={"headers": headers})

    def with_query_string_parameter(self, name: str, *values: str) -> "HttpRequest":
        params = dict(self.query_string_parameters or {})
        params[name] = list(values)
        return self.model_copy(update={"query_string_parameters": params})


class OpenAPIDefinition(WireModel):
    """Matcher described by an OpenAPI spec (URL, classpath or inline payload) and operation."""

    spec_url_or_payload: str
    operation_id: str | None = None


# OpenAPIDefinition is tried first: every HttpRequest field is optional.
RequestDefinition = Annotated[
    OpenAPIDefinition | HttpRequest,
    Field(union_mode="left_to_right"),
]
