"""Adapters from loosely-typed option mappings to validated models.

Bindings that receive untyped values (JSON payloads, dynamic-language
objects) use these helpers. Keys follow the fetch-wrapper convention:
``url``, ``method``, ``data``, ``headers``, ``timeout``, ``type`` and
``responseType`` for the call; ``cache``, ``credentials``, ``integrity``,
``mode``, ``redirect``, ``referrer`` and ``referrerPolicy`` for the profile.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from http_pipeline.core.common.exceptions import ValidationError
from http_pipeline.core.domain.content_kind import ContentKind
from http_pipeline.core.domain.request_options import (
    AbsentBody,
    FormPairs,
    JsonBody,
    MultipartBody,
    MultipartPart,
    RawBody,
    RequestBody,
    RequestOptions,
)
from http_pipeline.core.domain.transport_profile import TransportProfile

logger = logging.getLogger(__name__)

_PROFILE_KEYS = {
    "cache": "cache",
    "credentials": "credentials",
    "integrity": "integrity",
    "mode": "mode",
    "redirect": "redirect",
    "referrer": "referrer",
    "referrerPolicy": "referrer_policy",
    "referrer_policy": "referrer_policy",
}


def parse_timeout(value: Any) -> int | None:
    """Parse a timeout given as a number or numeric string.

    Unparsable strings become 0, which later resolves to the default.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError("`timeout` must be a number")
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    raise ValidationError(f"`timeout` must be a number, got {type(value).__name__}")


def parse_body(data: Any, request_kind: ContentKind | None) -> RequestBody:
    """Map a loosely-typed payload onto the body variant its kind expects."""
    if data is None:
        return AbsentBody()
    if isinstance(data, AbsentBody | RawBody | JsonBody | FormPairs | MultipartBody):
        return data
    if isinstance(data, bytes | bytearray | memoryview | str):
        return RawBody(data)

    if request_kind is ContentKind.FORM_URLENCODED and isinstance(
        data, Mapping | list | tuple
    ):
        return FormPairs(data)  # type: ignore[arg-type]

    if request_kind is ContentKind.FORM_DATA:
        return _parse_multipart(data)

    return JsonBody(data)


def _parse_multipart(data: Any) -> MultipartBody:
    parts: list[MultipartPart] = []
    if isinstance(data, Mapping):
        for name, value in data.items():
            parts.append(MultipartPart(name=name, value=value))
        return MultipartBody(tuple(parts))

    if isinstance(data, list | tuple):
        for item in data:
            if isinstance(item, MultipartPart):
                parts.append(item)
            elif isinstance(item, Mapping):
                parts.append(
                    MultipartPart(
                        name=item.get("name"),  # type: ignore[arg-type]
                        value=item.get("value"),  # type: ignore[arg-type]
                        filename=item.get("filename"),
                        content_type=item.get("content_type") or item.get("contentType"),
                    )
                )
            elif isinstance(item, list | tuple) and len(item) == 2:
                parts.append(MultipartPart(name=item[0], value=item[1]))
            else:
                raise ValidationError(f"unsupported multipart entry {item!r}")
        return MultipartBody(tuple(parts))

    raise ValidationError(
        f"form-data body must be a mapping or a list of parts, got {type(data).__name__}"
    )


def parse_request_options(opts: Any) -> RequestOptions:
    """Build RequestOptions from a loosely-typed mapping.

    Raises:
        ValidationError: When ``opts`` is not a mapping, ``url`` is empty or
            ``headers`` is not a mapping.
    """
    if opts is None:
        raise ValidationError("`opts` is null !")
    if isinstance(opts, RequestOptions):
        return opts
    if not isinstance(opts, Mapping):
        raise ValidationError("`opts` is not a object !")

    url = opts.get("url")
    if url is None or not str(url).strip():
        raise ValidationError("`url` is empty !")

    headers = opts.get("headers")
    if headers is not None and not isinstance(headers, Mapping):
        raise ValidationError("`headers` is not a object !")

    request_kind = (
        ContentKind.from_token(opts["type"]) if opts.get("type") is not None else None
    )
    response_kind_token = opts.get("responseType", opts.get("response_type"))
    response_kind = (
        ContentKind.from_token(response_kind_token)
        if response_kind_token is not None
        else None
    )

    return RequestOptions(
        url=str(url),
        method=opts.get("method"),
        headers=headers,
        body=parse_body(opts.get("data"), request_kind),
        request_kind=request_kind,
        response_kind=response_kind,
        timeout_seconds=parse_timeout(opts.get("timeout")),
    )


def parse_transport_profile(profile: Any) -> TransportProfile:
    """Build a TransportProfile from a mapping; None yields the defaults."""
    if profile is None:
        return TransportProfile()
    if isinstance(profile, TransportProfile):
        return profile
    if not isinstance(profile, Mapping):
        raise ValidationError("`request` is not a object !")

    values: dict[str, Any] = {}
    for key, field_name in _PROFILE_KEYS.items():
        if key in profile and profile[key] is not None:
            values[field_name] = profile[key]
    unknown = set(profile) - set(_PROFILE_KEYS)
    if unknown and logger.isEnabledFor(logging.DEBUG):
        logger.debug("Ignoring unknown transport profile keys: %s", sorted(unknown))
    return TransportProfile(**values)
