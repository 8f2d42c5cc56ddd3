"""Fetch-style request profile forwarded untouched to the transport.

The enums mirror the fetch ``Request`` attributes. Each parser trims and
lower-cases its input and falls back to the fetch default on blank or
unknown values.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import ConfigDict, field_validator

from http_pipeline.core.interfaces.model_bases import DomainModel


class _LenientEnum(str, Enum):
    @classmethod
    def default(cls) -> _LenientEnum:
        raise NotImplementedError

    @classmethod
    def parse(cls, value: Any) -> _LenientEnum:
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.default()
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.default()


class CacheMode(_LenientEnum):
    """How the request interacts with an HTTP cache."""

    DEFAULT = "default"
    NO_STORE = "no-store"
    RELOAD = "reload"
    NO_CACHE = "no-cache"
    FORCE_CACHE = "force-cache"
    ONLY_IF_CACHED = "only-if-cached"

    @classmethod
    def default(cls) -> CacheMode:
        return cls.DEFAULT


class CredentialsMode(_LenientEnum):
    """Whether cookies and authorization travel with the request."""

    OMIT = "omit"
    SAME_ORIGIN = "same-origin"
    INCLUDE = "include"

    @classmethod
    def default(cls) -> CredentialsMode:
        return cls.SAME_ORIGIN


class RequestMode(_LenientEnum):
    """Cross-origin mode of the request."""

    SAME_ORIGIN = "same-origin"
    CORS = "cors"
    NO_CORS = "no-cors"
    NAVIGATE = "navigate"

    @classmethod
    def default(cls) -> RequestMode:
        return cls.NO_CORS


class RedirectMode(_LenientEnum):
    """How redirects are handled."""

    FOLLOW = "follow"
    ERROR = "error"
    MANUAL = "manual"

    @classmethod
    def default(cls) -> RedirectMode:
        return cls.FOLLOW


class ReferrerPolicy(_LenientEnum):
    """Which referrer information accompanies the request."""

    NONE = ""
    NO_REFERRER = "no-referrer"
    NO_REFERRER_WHEN_DOWNGRADE = "no-referrer-when-downgrade"
    ORIGIN = "origin"
    ORIGIN_WHEN_CROSS_ORIGIN = "origin-when-cross-origin"
    UNSAFE_URL = "unsafe-url"
    SAME_ORIGIN = "same-origin"
    STRICT_ORIGIN = "strict-origin"
    STRICT_ORIGIN_WHEN_CROSS_ORIGIN = "strict-origin-when-cross-origin"

    @classmethod
    def default(cls) -> ReferrerPolicy:
        return cls.STRICT_ORIGIN_WHEN_CROSS_ORIGIN

    @classmethod
    def parse(cls, value: Any) -> ReferrerPolicy:
        # Blank means "not set"; NONE is only reachable as an enum value
        if isinstance(value, str) and not value.strip():
            return cls.default()
        return super().parse(value)  # type: ignore[return-value]


class TransportProfile(DomainModel):
    """Transport-level knobs the decoding logic never looks at."""

    model_config = ConfigDict(frozen=True)

    cache: CacheMode = CacheMode.DEFAULT
    credentials: CredentialsMode = CredentialsMode.SAME_ORIGIN
    mode: RequestMode = RequestMode.NO_CORS
    redirect: RedirectMode = RedirectMode.FOLLOW
    referrer: str | None = None
    referrer_policy: ReferrerPolicy = ReferrerPolicy.STRICT_ORIGIN_WHEN_CROSS_ORIGIN
    integrity: str | None = None

    @field_validator("cache", mode="before")
    @classmethod
    def _parse_cache(cls, value: Any) -> CacheMode:
        return CacheMode.parse(value)  # type: ignore[return-value]

    @field_validator("credentials", mode="before")
    @classmethod
    def _parse_credentials(cls, value: Any) -> CredentialsMode:
        return CredentialsMode.parse(value)  # type: ignore[return-value]

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> RequestMode:
        return RequestMode.parse(value)  # type: ignore[return-value]

    @field_validator("redirect", mode="before")
    @classmethod
    def _parse_redirect(cls, value: Any) -> RedirectMode:
        return RedirectMode.parse(value)  # type: ignore[return-value]

    @field_validator("referrer_policy", mode="before")
    @classmethod
    def _parse_referrer_policy(cls, value: Any) -> ReferrerPolicy:
        return ReferrerPolicy.parse(value)

    @field_validator("referrer", "integrity", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None
