"""Declarative HTTP request/response pipeline with uniform response envelopes."""

from http_pipeline.api import configure, send, send_sync
from http_pipeline.connectors.base import Transport
from http_pipeline.connectors.httpx_transport import HttpxTransport
from http_pipeline.core.common.exceptions import (
    BodyEncodingError,
    HttpPipelineError,
    InvalidHeaderValueError,
    MissingResponseBodyError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
)
from http_pipeline.core.config.app_config import PipelineConfig, load_config
from http_pipeline.core.domain.content_kind import ContentKind
from http_pipeline.core.domain.request_options import (
    AbsentBody,
    FormPairs,
    HttpMethod,
    JsonBody,
    MultipartBody,
    MultipartPart,
    RawBody,
    RequestOptions,
)
from http_pipeline.core.domain.responses import CallState, ResponseEnvelope
from http_pipeline.core.domain.transport_profile import TransportProfile
from http_pipeline.core.services.pipeline import HttpPipeline

__all__ = [
    "AbsentBody",
    "BodyEncodingError",
    "CallState",
    "ContentKind",
    "FormPairs",
    "HttpMethod",
    "HttpPipeline",
    "HttpPipelineError",
    "HttpxTransport",
    "InvalidHeaderValueError",
    "JsonBody",
    "MissingResponseBodyError",
    "MultipartBody",
    "MultipartPart",
    "PipelineConfig",
    "RawBody",
    "RequestOptions",
    "RequestTimeoutError",
    "ResponseEnvelope",
    "Transport",
    "TransportError",
    "TransportProfile",
    "ValidationError",
    "configure",
    "load_config",
    "send",
    "send_sync",
]
