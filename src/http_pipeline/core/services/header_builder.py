from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import httpx

from http_pipeline.core.common.exceptions import InvalidHeaderValueError
from http_pipeline.core.common.logging_utils import redact_headers
from http_pipeline.core.domain.content_kind import ContentKind

logger = logging.getLogger(__name__)

CONTENT_TYPE = "Content-Type"

# RFC 7230 token characters
_HEADER_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_FORBIDDEN_VALUE_CHARS = ("\r", "\n", "\x00")


class HeaderBuilder:
    """Builds the outbound header set for a call.

    The declared request kind seeds ``Content-Type``; caller headers are
    applied afterwards and replace any seeded value case-insensitively.
    """

    def build(
        self,
        request_kind: ContentKind | None,
        caller_headers: Mapping[str, Any] | None,
    ) -> httpx.Headers:
        headers = httpx.Headers()

        if request_kind is not None:
            headers[CONTENT_TYPE] = request_kind.mime_type

        if caller_headers:
            for name, value in caller_headers.items():
                checked_name = self._check_name(name)
                headers[checked_name] = self._check_value(checked_name, value)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Outbound headers: %s", redact_headers(headers.multi_items()))
        return headers

    @staticmethod
    def _check_name(name: Any) -> str:
        if not isinstance(name, str) or not _HEADER_NAME_RE.match(name):
            raise InvalidHeaderValueError(
                f"invalid header name {name!r}",
                header_name=name if isinstance(name, str) else None,
            )
        return name

    @staticmethod
    def _check_value(name: str, value: Any) -> str:
        if isinstance(value, bytes):
            try:
                value = value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidHeaderValueError(
                    f"header '{name}' is not valid UTF-8", header_name=name
                ) from exc
        elif isinstance(value, int | float) and not isinstance(value, bool):
            value = str(value)
        elif not isinstance(value, str):
            raise InvalidHeaderValueError(
                f"header '{name}' must be a string, got {type(value).__name__}",
                header_name=name,
            )

        if any(char in value for char in _FORBIDDEN_VALUE_CHARS):
            raise InvalidHeaderValueError(
                f"header '{name}' contains a forbidden character", header_name=name
            )
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidHeaderValueError(
                f"header '{name}' is not representable as UTF-8", header_name=name
            ) from exc
        return value
