"""Pydantic v2 models and decision types for data boundaries."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from dedupguard.exceptions import ClaimBackendError, GuardConfigurationError

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API clients."""

    ERROR_DUPLICATE = "CF_275"
    ERROR_NOT_FOUND = "CF_404"
    ERROR_INVALID_INPUT = "CF_400"
    ERROR_SERVER = "CF_500"

    @property
    def code(self) -> str:
        return self.value

    @property
    def message(self) -> str:
        return _ERROR_MESSAGES[self]

    @classmethod
    def message_for(cls, code: str) -> str:
        """Look up the human-readable message for a raw code."""
        for error_code in cls:
            if error_code.value == code:
                return error_code.message
        return "Unknown error code"


_ERROR_MESSAGES = {
    ErrorCode.ERROR_DUPLICATE: "Duplicated data, please try again later",
    ErrorCode.ERROR_NOT_FOUND: "Requested resource not found",
    ErrorCode.ERROR_INVALID_INPUT: "Invalid input provided",
    ErrorCode.ERROR_SERVER: "Internal server error, please try again later",
}


class GuardSpec(BaseModel):
    """Per-call-site guard configuration.

    Fields and tags keep their declared order; it defines fingerprint order.
    An empty ``fields`` tuple leaves the guard inert. ``ttl_ms=None`` defers
    to ``Settings.default_ttl_ms``.
    """

    model_config = ConfigDict(frozen=True)

    fields: tuple[str, ...] = Field(default=(), description="Payload fields feeding the fingerprint")
    tags: tuple[str, ...] = Field(default=(), description="Constant strings appended to the fingerprint")
    ttl_ms: int | None = Field(default=None, description="Claim TTL in milliseconds")

    @field_validator("fields", "tags")
    @classmethod
    def validate_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject blank entries."""
        for item in v:
            if not item.strip():
                raise ValueError("entries must be non-blank strings")
        return v

    @field_validator("ttl_ms")
    @classmethod
    def validate_ttl(cls, v: int | None) -> int | None:
        """TTL must be positive when given."""
        if v is not None and v <= 0:
            raise ValueError(f"ttl_ms must be > 0, got {v}")
        return v

    @property
    def is_active(self) -> bool:
        return bool(self.fields)

    @classmethod
    def of(
        cls,
        fields: tuple[str, ...] | list[str] = (),
        tags: tuple[str, ...] | list[str] = (),
        ttl_ms: int | None = None,
    ) -> "GuardSpec":
        """Build a spec, raising GuardConfigurationError on invalid input."""
        for name, value in (("fields", fields), ("tags", tags)):
            if isinstance(value, str):
                raise GuardConfigurationError(f"{name} must be a sequence of strings, got bare string {value!r}")
        try:
            return cls(fields=tuple(fields), tags=tuple(tags), ttl_ms=ttl_ms)
        except ValidationError as e:
            raise GuardConfigurationError(f"Invalid guard configuration: {e}") from e


@dataclass(frozen=True)
class Allow:
    """Request may proceed."""

    reason: Literal["claimed", "no_fields", "no_payload"] = "claimed"

    @property
    def bypassed(self) -> bool:
        return self.reason != "claimed"


@dataclass(frozen=True)
class Duplicate:
    """A live claim already exists for the request's token."""

    code: str
    message: str
    token: str


@dataclass(frozen=True)
class BackendError:
    """Claim store failed; the guard could not form an opinion."""

    cause: ClaimBackendError


Decision = Allow | Duplicate | BackendError


class ProductRequest(BaseModel):
    """Product creation payload. Serialized with camelCase names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: str | None = None
    product_name: str | None = None
    product_description: str | None = None
    transaction_id: str | None = None
    request_time: datetime | None = None
    request_id: str | None = None


class BaseResponse(BaseModel, Generic[T]):
    """Success envelope for API responses."""

    code: str = Field(default="200")
    message: str = Field(default="Successfully")
    data: T | None = None

    @classmethod
    def of_succeeded(cls, data: Any) -> "BaseResponse":
        return cls(data=data)


class ErrorResponse(BaseModel):
    """Error body returned by exception handlers."""

    code: str
    message: str
