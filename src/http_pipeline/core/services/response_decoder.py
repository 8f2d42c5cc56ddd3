"""Response body decoding.

Bodies are decoded according to the declared response kind:

* ``BLOB`` - raw bytes wrapped as ``{"binary": [byte, ...]}``
* ``FORM_DATA`` - form fields collected into ``{name: value}``; file fields
  are dropped because only string values are kept
* everything else - text parsed as JSON for the configured JSON methods
  (GET and POST by default); other methods yield ``None``

After JSON parsing every number is passed through :func:`make_numbers_safe`
so that values a double cannot hold exactly survive as decimal strings.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable
from email.message import Message
from email.parser import BytesParser
from email.policy import HTTP
from typing import Any
from urllib.parse import parse_qsl

from http_pipeline.core.common.exceptions import MissingResponseBodyError
from http_pipeline.core.config.app_config import MAX_SAFE_INTEGER
from http_pipeline.core.domain.content_kind import ContentKind
from http_pipeline.core.domain.request_options import HttpMethod
from http_pipeline.core.domain.transport import TransportResponse

logger = logging.getLogger(__name__)

BINARY_KEY = "binary"

_DEFAULT_JSON_METHODS = frozenset({HttpMethod.GET, HttpMethod.POST})


def _number_to_string(value: float | int) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    return str(value)


def _is_unsafe(value: float | int, max_safe_integer: int) -> bool:
    if isinstance(value, float):
        return math.isnan(value) or math.isinf(value) or abs(value) > max_safe_integer
    return abs(value) > max_safe_integer


def make_numbers_safe(value: Any, max_safe_integer: int = MAX_SAFE_INTEGER) -> Any:
    """Replace numbers that would lose precision with their decimal string.

    Lists and dicts are rewritten in place and returned; other values are
    returned unchanged unless they are unsafe numbers. Running the pass
    twice gives the same result as running it once.
    """
    if isinstance(value, list):
        for index, item in enumerate(value):
            value[index] = make_numbers_safe(item, max_safe_integer)
        return value
    if isinstance(value, dict):
        for key, item in value.items():
            value[key] = make_numbers_safe(item, max_safe_integer)
        return value
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float) and _is_unsafe(value, max_safe_integer):
        return _number_to_string(value)
    return value


def parse_json(text: str, max_safe_integer: int = MAX_SAFE_INTEGER) -> Any:
    """Parse JSON text, keeping the source text of out-of-range numbers.

    Floats that overflow, or whose magnitude passes ``max_safe_integer``,
    come back as the exact decimal text from the document instead of a
    rounded float. ``NaN`` and ``Infinity`` literals come back as strings.
    """

    def _parse_float(token: str) -> float | str:
        number = float(token)
        if _is_unsafe(number, max_safe_integer):
            return token
        return number

    def _parse_constant(token: str) -> str:
        return token

    parsed = json.loads(
        text, parse_float=_parse_float, parse_constant=_parse_constant
    )
    return make_numbers_safe(parsed, max_safe_integer)


class ResponseDecoder:
    """Decodes a TransportResponse body into a JSON-like value."""

    def __init__(
        self,
        max_safe_integer: int = MAX_SAFE_INTEGER,
        json_methods: Iterable[HttpMethod] = _DEFAULT_JSON_METHODS,
    ) -> None:
        self.max_safe_integer = max_safe_integer
        self.json_methods = frozenset(json_methods)

    def decode(
        self,
        response_kind: ContentKind | None,
        body: TransportResponse,
        method: HttpMethod,
    ) -> Any:
        kind = response_kind or ContentKind.TEXT

        if kind is ContentKind.BLOB:
            return {BINARY_KEY: list(body.content)}

        if kind is ContentKind.FORM_DATA:
            return self._decode_form(body)

        # JSON, TEXT, HTML
        text = body.text()
        if method not in self.json_methods:
            return None
        try:
            return parse_json(text, self.max_safe_integer)
        except ValueError as exc:
            raise MissingResponseBodyError(
                details={"reason": str(exc), "status_code": body.status_code}
            ) from exc

    def _decode_form(self, body: TransportResponse) -> dict[str, str]:
        result: dict[str, str] = {}
        for name, value in iter_form_entries(body):
            if isinstance(value, str):
                result[name] = value
            elif logger.isEnabledFor(logging.DEBUG):
                logger.debug("Dropping non-text form field %r", name)
        return result


def iter_form_entries(body: TransportResponse) -> list[tuple[str, str | bytes]]:
    """Return the (name, value) entries of a form-encoded response body.

    URL-encoded bodies yield string values. Multipart bodies yield strings
    for plain fields and bytes for file fields.
    """
    content_type = body.content_type.strip().lower()

    if content_type.startswith("application/x-www-form-urlencoded"):
        try:
            return list(
                parse_qsl(
                    body.text(),
                    keep_blank_values=True,
                    strict_parsing=bool(body.content),
                )
            )
        except ValueError as exc:
            raise MissingResponseBodyError(
                "response body is not valid form data",
                details={"reason": str(exc)},
            ) from exc

    if content_type.startswith("multipart/form-data"):
        return _parse_multipart(body)

    raise MissingResponseBodyError(
        "response body is not form data",
        details={"content_type": body.content_type},
    )


def _parse_multipart(body: TransportResponse) -> list[tuple[str, str | bytes]]:
    head = f"Content-Type: {body.content_type}\r\n\r\n".encode("latin-1")
    message = BytesParser(policy=HTTP).parsebytes(head + body.content)
    if not message.is_multipart() or message.get_boundary() is None:
        raise MissingResponseBodyError(
            "multipart response has no readable parts",
            details={"content_type": body.content_type},
        )

    entries: list[tuple[str, str | bytes]] = []
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name:
            continue
        payload = part.get_payload(decode=True) or b""
        if part.get_filename() is not None:
            entries.append((str(name), payload))
        else:
            entries.append((str(name), _decode_part_text(part, payload)))
    return entries


def _decode_part_text(part: Message, payload: bytes) -> str:
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset)
    except (LookupError, UnicodeDecodeError):
        return payload.decode("utf-8", errors="replace")
