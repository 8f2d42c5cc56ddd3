from __future__ import annotations

from enum import Enum
from typing import Any


class ContentKind(str, Enum):
    """Payload encodings understood by the request and response stages."""

    JSON = "json"
    FORM_URLENCODED = "form_urlencoded"
    FORM_DATA = "form_data"
    BLOB = "blob"
    TEXT = "text"
    HTML = "html"

    @property
    def mime_type(self) -> str:
        """Canonical content-type string for this kind."""
        return _MIME_TYPES[self]

    @property
    def token(self) -> int:
        """Integer token used by loosely-typed callers."""
        return _TOKENS.index(self)

    @classmethod
    def from_token(cls, value: Any) -> ContentKind:
        """Resolve an integer or string token; anything unrecognized is JSON."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.JSON
        if isinstance(value, int | float):
            index = int(value)
            if 0 <= index < len(_TOKENS):
                return _TOKENS[index]
            return cls.JSON
        if isinstance(value, str):
            text = value.strip().lower()
            if text.lstrip("-").isdigit():
                return cls.from_token(int(text))
            return _ALIASES.get(text.replace("-", "_"), cls.JSON)
        return cls.JSON


_MIME_TYPES: dict[ContentKind, str] = {
    ContentKind.JSON: "application/json;charset=UTF-8",
    ContentKind.FORM_URLENCODED: "application/x-www-form-urlencoded",
    ContentKind.FORM_DATA: "multipart/form-data",
    ContentKind.BLOB: "application/octet-stream",
    ContentKind.TEXT: "text/plain;charset=UTF-8",
    ContentKind.HTML: "text/html;charset=UTF-8",
}

# Order defines the integer tokens 0..5
_TOKENS: tuple[ContentKind, ...] = (
    ContentKind.JSON,
    ContentKind.FORM_URLENCODED,
    ContentKind.FORM_DATA,
    ContentKind.BLOB,
    ContentKind.TEXT,
    ContentKind.HTML,
)

_ALIASES: dict[str, ContentKind] = {
    **{kind.value: kind for kind in ContentKind},
    "formurlencoded": ContentKind.FORM_URLENCODED,
    "form_submit": ContentKind.FORM_URLENCODED,
    "formsubmit": ContentKind.FORM_URLENCODED,
    "formdata": ContentKind.FORM_DATA,
    "multipart": ContentKind.FORM_DATA,
}
