from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from http_pipeline.connectors.base import Transport
from http_pipeline.core.domain.transport import TransportRequest, TransportResponse
from http_pipeline.core.domain.transport_profile import TransportProfile
from http_pipeline.core.services.timeout_controller import CancellationToken


class RecordingTransport(Transport):
    """Test double returning canned responses and recording what it was sent."""

    transport_type = "recording"

    def __init__(
        self,
        response: TransportResponse | None = None,
        handler: Callable[[TransportRequest, CancellationToken], Awaitable[Any]]
        | None = None,
    ) -> None:
        self.response = response or TransportResponse(status_code=200)
        self.handler = handler
        self.requests: list[TransportRequest] = []
        self.profiles: list[TransportProfile] = []
        self.closed = False

    async def send(
        self,
        request: TransportRequest,
        profile: TransportProfile,
        token: CancellationToken,
    ) -> TransportResponse:
        self.requests.append(request)
        self.profiles.append(profile)
        if self.handler is not None:
            return await self.handler(request, token)
        return self.response

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def make_response() -> Callable[..., TransportResponse]:
    def _make(
        content: bytes = b"",
        status_code: int = 200,
        content_type: str | None = "application/json",
        headers: list[tuple[str, str]] | None = None,
    ) -> TransportResponse:
        items = list(headers or [])
        if content_type is not None:
            items.insert(0, ("Content-Type", content_type))
        return TransportResponse(
            status_code=status_code, header_items=items, content=content
        )

    return _make


@pytest.fixture
def recording_transport_factory() -> Callable[..., RecordingTransport]:
    return RecordingTransport
