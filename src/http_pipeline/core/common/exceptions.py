"""
Common exception classes for the HTTP pipeline.

This module defines the typed errors a call can terminate with. Every error
carries a human-readable message, an optional details mapping and an HTTP
status code hint for callers that translate failures into responses.
"""

from __future__ import annotations


class HttpPipelineError(Exception):
    """Base exception class for all HTTP pipeline errors."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        *,
        status_code: int | None = None,
        **kwargs,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
            status_code: Optional HTTP status code hint for callers
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code or 500
        for key, value in (kwargs or {}).items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        error_dict = {
            "message": self.message,
            "type": self.__class__.__name__,
            "details": self.details,
        }

        for attr_name in dir(self):
            if (
                not attr_name.startswith("_")
                and attr_name not in ["message", "details", "status_code", "args"]
                and not callable(getattr(self, attr_name))
            ):
                error_dict[attr_name] = getattr(self, attr_name)

        return {"error": error_dict}


class ValidationError(HttpPipelineError):
    """Raised when request input is malformed or missing."""

    def __init__(
        self, message: str = "Validation failed", details: dict | None = None, **kwargs
    ):
        super().__init__(message, details, status_code=400, **kwargs)


class InvalidHeaderValueError(ValidationError):
    """Raised when a header cannot be represented on the wire."""

    def __init__(
        self,
        message: str = "Invalid header value",
        header_name: str | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        det = details.copy() if details else {}
        if header_name:
            det.setdefault("header_name", header_name)
        super().__init__(message, det, **kwargs)
        self.header_name = header_name


class BodyEncodingError(HttpPipelineError):
    """Raised when a request body does not match its declared content kind."""

    def __init__(
        self,
        message: str = "Request body does not match declared content kind",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=400, **kwargs)


class TransportError(HttpPipelineError):
    """Raised when the underlying HTTP transport fails."""

    def __init__(
        self,
        message: str = "Transport failure",
        details: dict | None = None,
        **kwargs,
    ):
        status_code = kwargs.pop("status_code", 502)
        super().__init__(message, details, status_code=status_code, **kwargs)


class RequestTimeoutError(HttpPipelineError):
    """Raised when the call deadline elapses before the transport completes."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: float | None = None,
        details: dict | None = None,
        **kwargs,
    ):
        det = details.copy() if details else {}
        if timeout_seconds is not None:
            det.setdefault("timeout_seconds", timeout_seconds)
        super().__init__(message, det, status_code=504, **kwargs)
        self.timeout_seconds = timeout_seconds


class MissingResponseBodyError(HttpPipelineError):
    """Raised when a response body declared parseable cannot be decoded."""

    def __init__(
        self,
        message: str = "missing response body in HTTP call",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=422, **kwargs)
