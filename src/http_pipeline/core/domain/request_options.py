from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import ConfigDict, Field, field_validator

from http_pipeline.core.common.exceptions import ValidationError
from http_pipeline.core.domain.content_kind import ContentKind
from http_pipeline.core.interfaces.model_bases import DomainModel, InternalDTO


class HttpMethod(str, Enum):
    """Methods the pipeline will put on the wire."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def resolve(cls, value: Any) -> HttpMethod:
        """Resolve a caller-supplied method; absent or unknown methods are POST."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.POST
        name = str(value).strip().upper()
        try:
            return cls(name)
        except ValueError:
            return cls.POST


@dataclass(frozen=True)
class AbsentBody(InternalDTO):
    """No request payload."""


@dataclass(frozen=True)
class RawBody(InternalDTO):
    """Raw bytes (Blob) or a raw string (Text/Html)."""

    content: bytes | str

    def __post_init__(self) -> None:
        content = self.content
        if isinstance(content, bytearray | memoryview):
            object.__setattr__(self, "content", bytes(content))
        elif not isinstance(content, bytes | str):
            raise ValidationError(
                f"raw body must be bytes or str, got {type(content).__name__}"
            )


@dataclass(frozen=True)
class JsonBody(InternalDTO):
    """A structured value serialized as JSON."""

    value: Any

    def __post_init__(self) -> None:
        try:
            json.dumps(self.value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                f"JSON body is not serializable: {exc}",
                details={"value_type": type(self.value).__name__},
            ) from exc


@dataclass(frozen=True)
class FormPairs(InternalDTO):
    """Ordered key/value pairs for a URL-encoded form."""

    pairs: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        source: Iterable[Any] = (
            self.pairs.items() if isinstance(self.pairs, Mapping) else self.pairs
        )
        normalized: list[tuple[str, str]] = []
        for item in source:
            try:
                key, value = item
            except (TypeError, ValueError) as exc:
                raise ValidationError(
                    f"form entry must be a (key, value) pair, got {item!r}"
                ) from exc
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValidationError(
                    "form keys and values must be strings",
                    details={"key": repr(key)},
                )
            normalized.append((key, value))
        object.__setattr__(self, "pairs", tuple(normalized))


@dataclass(frozen=True)
class MultipartPart(InternalDTO):
    """One field of a multipart/form-data body."""

    name: str
    value: str | bytes
    filename: str | None = None
    content_type: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError("multipart part name must be a non-empty string")
        if not isinstance(self.value, str | bytes):
            raise ValidationError(
                f"multipart part '{self.name}' must be str or bytes",
                details={"value_type": type(self.value).__name__},
            )


@dataclass(frozen=True)
class MultipartBody(InternalDTO):
    """A multipart/form-data construct handed to the transport unchanged."""

    parts: tuple[MultipartPart, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        parts = tuple(self.parts)
        for part in parts:
            if not isinstance(part, MultipartPart):
                raise ValidationError(
                    f"multipart parts must be MultipartPart, got {type(part).__name__}"
                )
        object.__setattr__(self, "parts", parts)


RequestBody = Union[AbsentBody, RawBody, JsonBody, FormPairs, MultipartBody]

_BODY_TYPES = (AbsentBody, RawBody, JsonBody, FormPairs, MultipartBody)


class RequestOptions(DomainModel):
    """Immutable description of a single HTTP call."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: HttpMethod = HttpMethod.POST
    headers: dict[str, Any] | None = None
    # One of the RequestBody variants; checked by _check_body
    body: Any = Field(default_factory=AbsentBody)
    request_kind: ContentKind | None = None
    response_kind: ContentKind | None = None
    timeout_seconds: int | None = None

    @field_validator("url", mode="before")
    @classmethod
    def _check_url(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("`url` is empty !")
        return value.strip()

    @field_validator("method", mode="before")
    @classmethod
    def _resolve_method(cls, value: Any) -> HttpMethod:
        return HttpMethod.resolve(value)

    @field_validator("headers", mode="before")
    @classmethod
    def _check_headers(cls, value: Any) -> dict[str, Any] | None:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise ValidationError("`headers` is not a object !")
        return dict(value)

    @field_validator("body", mode="before")
    @classmethod
    def _check_body(cls, value: Any) -> RequestBody:
        if value is None:
            return AbsentBody()
        if not isinstance(value, _BODY_TYPES):
            raise ValidationError(
                f"unsupported request body type {type(value).__name__}"
            )
        return value

    @field_validator("request_kind", "response_kind", mode="before")
    @classmethod
    def _resolve_kind(cls, value: Any) -> ContentKind | None:
        if value is None:
            return None
        return ContentKind.from_token(value)

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def _check_timeout(cls, value: Any) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValidationError(
                f"`timeout` must be a number, got {type(value).__name__}"
            )
        return int(value)

    @property
    def is_get(self) -> bool:
        return self.method is HttpMethod.GET
