"""The request/response pipeline.

One call walks the states
``BUILDING -> HEADERS_READY -> ASSEMBLED -> IN_FLIGHT`` and ends in exactly
one of ``COMPLETED``, ``TIMED_OUT``, ``TRANSPORT_FAILED`` or
``DECODE_FAILED``. Completed and decode-failed calls return a
:class:`ResponseEnvelope` (the latter with ``error`` set); the other
terminal states raise.
"""

from __future__ import annotations

from typing import Any

from http_pipeline.connectors.base import Transport
from http_pipeline.connectors.httpx_transport import HttpxTransport
from http_pipeline.core.common.exceptions import (
    HttpPipelineError,
    MissingResponseBodyError,
    RequestTimeoutError,
    TransportError,
)
from http_pipeline.core.common.logging_utils import LogContext, get_logger
from http_pipeline.core.config.app_config import PipelineConfig
from http_pipeline.core.domain.request_options import RequestOptions
from http_pipeline.core.domain.responses import CallState, ResponseEnvelope
from http_pipeline.core.domain.transport import TransportRequest, TransportResponse
from http_pipeline.core.domain.transport_profile import TransportProfile
from http_pipeline.core.services.header_builder import HeaderBuilder
from http_pipeline.core.services.options_parser import (
    parse_request_options,
    parse_transport_profile,
)
from http_pipeline.core.services.request_assembler import RequestAssembler
from http_pipeline.core.services.response_assembler import ResponseAssembler
from http_pipeline.core.services.response_decoder import ResponseDecoder
from http_pipeline.core.services.timeout_controller import (
    CancellationToken,
    TimeoutController,
)

logger = get_logger(__name__)


class CallTracker:
    """Records the state of one call; the first terminal state sticks."""

    def __init__(self) -> None:
        self.state = CallState.BUILDING
        self.history: list[CallState] = [CallState.BUILDING]

    def advance(self, state: CallState) -> bool:
        if self.state.is_terminal:
            return False
        self.state = state
        self.history.append(state)
        return True


class HttpPipeline:
    """Executes declarative HTTP calls and returns uniform envelopes."""

    def __init__(
        self,
        config: PipelineConfig | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self._owns_transport = transport is None
        if transport is None:
            transport = HttpxTransport(follow_redirects=self.config.follow_redirects)
        self.transport = transport
        self.header_builder = HeaderBuilder()
        self.request_assembler = RequestAssembler()
        self.response_decoder = ResponseDecoder(
            max_safe_integer=self.config.max_safe_integer,
            json_methods=self.config.json_methods,
        )
        self.response_assembler = ResponseAssembler()

    async def __aenter__(self) -> HttpPipeline:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    async def send_mapping(
        self, opts: Any, profile: Any = None
    ) -> ResponseEnvelope:
        """Parse loosely-typed options and profile, then :meth:`send`."""
        return await self.send(
            parse_request_options(opts), parse_transport_profile(profile)
        )

    async def send(
        self,
        options: RequestOptions,
        profile: TransportProfile | None = None,
        *,
        tracker: CallTracker | None = None,
    ) -> ResponseEnvelope:
        tracker = tracker or CallTracker()
        profile = profile or TransportProfile()

        with LogContext(
            logger, method=options.method.value, url=options.url
        ) as call_logger:
            headers = self.header_builder.build(options.request_kind, options.headers)
            tracker.advance(CallState.HEADERS_READY)

            transport_request = self.request_assembler.assemble(options, headers)
            tracker.advance(CallState.ASSEMBLED)

            controller = TimeoutController(self.config.default_timeout_seconds)
            tracker.advance(CallState.IN_FLIGHT)
            try:
                response = await controller.wrap(
                    options.timeout_seconds,
                    lambda token: self._invoke(transport_request, profile, token),
                )
            except RequestTimeoutError:
                tracker.advance(CallState.TIMED_OUT)
                call_logger.warning(
                    "HTTP call timed out", timeout_seconds=options.timeout_seconds
                )
                raise
            except TransportError as exc:
                tracker.advance(CallState.TRANSPORT_FAILED)
                call_logger.warning("HTTP transport failed", error=exc.message)
                raise

            try:
                body = self.response_decoder.decode(
                    options.response_kind, response, options.method
                )
            except MissingResponseBodyError as exc:
                tracker.advance(CallState.DECODE_FAILED)
                call_logger.warning(
                    "HTTP response body could not be decoded",
                    status_code=response.status_code,
                    error=exc.message,
                )
                return self.response_assembler.assemble(response, error=exc.message)

            tracker.advance(CallState.COMPLETED)
            call_logger.debug("HTTP call completed", status_code=response.status_code)
            return self.response_assembler.assemble(response, body)

    async def _invoke(
        self,
        request: TransportRequest,
        profile: TransportProfile,
        token: CancellationToken,
    ) -> TransportResponse:
        try:
            return await self.transport.send(request, profile, token)
        except HttpPipelineError:
            raise
        except OSError as exc:
            raise TransportError(
                str(exc) or type(exc).__name__,
                details={"url": request.url, "error_type": type(exc).__name__},
            ) from exc
