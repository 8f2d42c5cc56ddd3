from __future__ import annotations

from dataclasses import dataclass, field
from email.message import Message

import httpx

from http_pipeline.core.domain.request_options import HttpMethod, MultipartPart
from http_pipeline.core.interfaces.model_bases import InternalDTO

SAME_ORIGIN_CREDENTIALS = "same-origin"


@dataclass(frozen=True)
class TransportRequest(InternalDTO):
    """Transport-native request produced by the assembler.

    Exactly one of ``content`` and ``multipart`` is set for requests that
    carry a body; both are None for GET and for body-less requests.
    """

    method: HttpMethod
    url: str
    headers: httpx.Headers
    content: bytes | None = None
    multipart: tuple[MultipartPart, ...] | None = None
    credentials: str = SAME_ORIGIN_CREDENTIALS

    @property
    def has_body(self) -> bool:
        return self.content is not None or self.multipart is not None


@dataclass(frozen=True)
class TransportResponse(InternalDTO):
    """Fully-read response handed back by a transport."""

    status_code: int
    header_items: list[tuple[str, str]] = field(default_factory=list)
    content: bytes = b""
    url: str = ""

    @property
    def content_type(self) -> str:
        """Value of the last Content-Type header, or an empty string."""
        value = ""
        for name, header_value in self.header_items:
            if name.lower() == "content-type":
                value = header_value
        return value

    @property
    def charset(self) -> str | None:
        if not self.content_type:
            return None
        message = Message()
        message["content-type"] = self.content_type
        return message.get_content_charset()

    def text(self) -> str:
        """Decode the body with the declared charset, falling back to UTF-8."""
        encoding = self.charset or "utf-8"
        try:
            return self.content.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            return self.content.decode("utf-8", errors="replace")
