from __future__ import annotations

from typing import Any

from http_pipeline.core.domain.responses import ResponseEnvelope
from http_pipeline.core.domain.transport import TransportResponse


class ResponseAssembler:
    """Copies status and headers from a transport response into an envelope."""

    def assemble(
        self, response: TransportResponse, body: Any = None, error: str = ""
    ) -> ResponseEnvelope:
        headers: dict[str, str] = {}
        for name, value in response.header_items:
            # Last write wins on repeated names
            headers[name.lower()] = value
        return ResponseEnvelope(
            status_code=response.status_code,
            headers=headers,
            body=body,
            error=error,
        )
