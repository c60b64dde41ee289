from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

KeysToMultiValues = dict[str, list[str]]


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]):  # type: ignore[no-untyped-def]
        return cls.model_validate(data)


class TimeUnit(str, Enum):
    NANOSECONDS = "NANOSECONDS"
    MICROSECONDS = "MICROSECONDS"
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"


class ClearType(str, Enum):
    LOG = "LOG"
    EXPECTATIONS = "EXPECTATIONS"
    ALL = "ALL"


class RetrieveType(str, Enum):
    LOGS = "LOGS"
    REQUESTS = "REQUESTS"
    REQUEST_RESPONSES = "REQUEST_RESPONSES"
    RECORDED_EXPECTATIONS = "RECORDED_EXPECTATIONS"
    ACTIVE_EXPECTATIONS = "ACTIVE_EXPECTATIONS"


class Format(str, Enum):
    JAVA = "JAVA"
    JSON = "JSON"
    LOG_ENTRIES = "LOG_ENTRIES"


class Delay(WireModel):
    time_unit: TimeUnit = TimeUnit.MILLISECONDS
    value: int = 0

    @staticmethod
    def milliseconds(value: int) -> "Delay":
        return Delay(time_unit=TimeUnit.MILLISECONDS, value=value)

    @staticmethod
    def seconds(value: int) -> "Delay":
        return Delay(time_unit=TimeUnit.SECONDS, value=value)


class SocketAddress(WireModel):
    host: str | None = None
    port: int | None = None
    scheme: str | None = None


class ExpectationId(WireModel):
    id: str

    @staticmethod
    def of(value: "str | ExpectationId") -> "ExpectationId":
        if isinstance(value, ExpectationId):
            return value
        return ExpectationId(id=value)


class PortBinding(WireModel):
    ports: list[int] = []
