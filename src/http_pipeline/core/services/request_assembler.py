from __future__ import annotations

import json
import logging
import secrets
from urllib.parse import urlencode

import httpx

from http_pipeline.core.common.exceptions import BodyEncodingError
from http_pipeline.core.domain.content_kind import ContentKind
from http_pipeline.core.domain.request_options import (
    AbsentBody,
    FormPairs,
    JsonBody,
    MultipartBody,
    RawBody,
    RequestOptions,
)
from http_pipeline.core.domain.transport import TransportRequest
from http_pipeline.core.services.header_builder import CONTENT_TYPE

logger = logging.getLogger(__name__)


class RequestAssembler:
    """Turns RequestOptions plus a header set into a TransportRequest."""

    def assemble(
        self, options: RequestOptions, headers: httpx.Headers
    ) -> TransportRequest:
        if options.is_get:
            if not isinstance(options.body, AbsentBody):
                logger.debug("Dropping request body for GET %s", options.url)
            return TransportRequest(
                method=options.method, url=options.url, headers=headers
            )

        kind = options.request_kind or ContentKind.JSON
        body = options.body

        if kind is ContentKind.FORM_DATA:
            if not isinstance(body, MultipartBody):
                raise self._shape_error(kind, "MultipartBody", body)
            return TransportRequest(
                method=options.method,
                url=options.url,
                headers=self._with_boundary(headers),
                multipart=body.parts,
            )

        content = self._encode(kind, body)
        return TransportRequest(
            method=options.method, url=options.url, headers=headers, content=content
        )

    def _encode(self, kind: ContentKind, body: object) -> bytes | None:
        if kind is ContentKind.JSON:
            if isinstance(body, AbsentBody):
                return None
            if isinstance(body, RawBody):
                # Already-serialized JSON goes out unchanged
                return (
                    body.content
                    if isinstance(body.content, bytes)
                    else body.content.encode("utf-8")
                )
            if not isinstance(body, JsonBody):
                raise self._shape_error(kind, "JsonBody", body)
            return json.dumps(
                body.value, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")

        if kind is ContentKind.FORM_URLENCODED:
            if not isinstance(body, FormPairs):
                raise self._shape_error(kind, "FormPairs", body)
            return urlencode(body.pairs).encode("ascii")

        if kind is ContentKind.BLOB:
            if not isinstance(body, RawBody) or not isinstance(body.content, bytes):
                raise self._shape_error(kind, "RawBody(bytes)", body)
            return body.content

        # TEXT and HTML
        if not isinstance(body, RawBody):
            raise self._shape_error(kind, "RawBody", body)
        if isinstance(body.content, bytes):
            return body.content
        return body.content.encode("utf-8")

    @staticmethod
    def _with_boundary(headers: httpx.Headers) -> httpx.Headers:
        """Return a copy of ``headers`` whose multipart Content-Type has a boundary."""
        content_type = headers.get(CONTENT_TYPE)
        if content_type is None:
            return headers
        if content_type.strip().lower() != ContentKind.FORM_DATA.mime_type:
            return headers
        # A multipart body is unreadable without its boundary parameter
        outbound = httpx.Headers(headers)
        outbound[CONTENT_TYPE] = (
            f"{ContentKind.FORM_DATA.mime_type}; boundary={secrets.token_hex(16)}"
        )
        return outbound

    @staticmethod
    def _shape_error(
        kind: ContentKind, expected: str, body: object
    ) -> BodyEncodingError:
        return BodyEncodingError(
            f"{kind.value} request requires a {expected} body, got {type(body).__name__}",
            details={"request_kind": kind.value, "body_type": type(body).__name__},
        )
