from __future__ import annotations

import asyncio
import base64
import contextlib
import hashlib
import logging

import httpx

from http_pipeline.connectors.base import Transport
from http_pipeline.core.common.exceptions import TransportError
from http_pipeline.core.common.logging_utils import redact_headers
from http_pipeline.core.domain.transport import TransportRequest, TransportResponse
from http_pipeline.core.domain.transport_profile import (
    CacheMode,
    CredentialsMode,
    RedirectMode,
    ReferrerPolicy,
    TransportProfile,
)
from http_pipeline.core.services.timeout_controller import CancellationToken

logger = logging.getLogger(__name__)

# Strongest first, as subresource integrity picks the strongest listed digest
_INTEGRITY_ALGORITHMS = ("sha512", "sha384", "sha256")
_NO_CACHE_MODES = {CacheMode.NO_STORE, CacheMode.NO_CACHE, CacheMode.RELOAD}


class HttpxTransport(Transport):
    """Transport over ``httpx.AsyncClient``.

    The client may be injected (and is then left open by :meth:`aclose`) or
    created on demand. Deadlines belong to the pipeline's timeout controller,
    so an owned client has no timeout of its own.
    """

    transport_type: str = "httpx"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        follow_redirects: bool = True,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(None))
        self.follow_redirects = follow_redirects

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def send(
        self,
        request: TransportRequest,
        profile: TransportProfile,
        token: CancellationToken,
    ) -> TransportResponse:
        if profile.cache is CacheMode.ONLY_IF_CACHED:
            raise TransportError(
                "cache mode 'only-if-cached' cannot be satisfied without an HTTP cache"
            )

        try:
            http_request = self._build_request(request, profile)
        except httpx.InvalidURL as exc:
            raise TransportError(
                f"invalid url {request.url!r}: {exc}", details={"url": request.url}
            ) from exc
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Sending %s %s headers=%s",
                http_request.method,
                http_request.url,
                redact_headers(http_request.headers.multi_items()),
            )

        follow = self.follow_redirects and profile.redirect is RedirectMode.FOLLOW
        response = await self._send_cancellable(http_request, follow, token)

        if profile.redirect is RedirectMode.ERROR and response.is_redirect:
            raise TransportError(
                f"redirect to {response.headers.get('location', '')!s} refused by redirect mode 'error'",
                details={"status_code": response.status_code},
            )

        content = response.content
        if profile.integrity:
            self._verify_integrity(profile.integrity, content)

        return TransportResponse(
            status_code=response.status_code,
            header_items=list(response.headers.multi_items()),
            content=content,
            url=str(response.url),
        )

    async def _send_cancellable(
        self,
        http_request: httpx.Request,
        follow_redirects: bool,
        token: CancellationToken,
    ) -> httpx.Response:
        send_task = asyncio.ensure_future(
            self.client.send(http_request, follow_redirects=follow_redirects)
        )
        cancel_task = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            send_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if send_task not in done:
            send_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, httpx.HTTPError):
                await send_task
            raise TransportError(
                f"request aborted: {token.reason or 'cancelled'}",
                details={"url": str(http_request.url)},
            )

        try:
            return send_task.result()
        except httpx.HTTPError as exc:
            raise TransportError(
                str(exc) or type(exc).__name__,
                details={"url": str(http_request.url), "error_type": type(exc).__name__},
            ) from exc

    def _build_request(
        self, request: TransportRequest, profile: TransportProfile
    ) -> httpx.Request:
        headers = httpx.Headers(request.headers)

        if profile.cache in _NO_CACHE_MODES:
            headers.setdefault("Cache-Control", "no-cache")
            headers.setdefault("Pragma", "no-cache")

        if profile.referrer and "referer" not in headers:
            referrer = _referrer_value(
                profile.referrer, profile.referrer_policy, request.url
            )
            if referrer:
                headers["Referer"] = referrer

        if request.multipart is not None:
            files = [
                (
                    part.name,
                    (
                        part.filename,
                        part.value.encode("utf-8")
                        if isinstance(part.value, str)
                        else part.value,
                        part.content_type,
                    ),
                )
                for part in request.multipart
            ]
            http_request = self.client.build_request(
                request.method.value, request.url, headers=headers, files=files
            )
        else:
            http_request = self.client.build_request(
                request.method.value,
                request.url,
                headers=headers,
                content=request.content,
            )

        if profile.credentials is CredentialsMode.OMIT:
            for name in ("cookie", "authorization"):
                if name in http_request.headers:
                    del http_request.headers[name]

        if logger.isEnabledFor(logging.DEBUG) and profile.mode.value != "no-cors":
            logger.debug("Request mode %s has no effect outside a browser", profile.mode.value)
        return http_request

    @staticmethod
    def _verify_integrity(integrity: str, content: bytes) -> None:
        expected: dict[str, set[str]] = {}
        for token in integrity.split():
            algorithm, _, digest = token.partition("-")
            algorithm = algorithm.lower()
            if algorithm in _INTEGRITY_ALGORITHMS and digest:
                # Options after '?' are reserved and ignored
                expected.setdefault(algorithm, set()).add(digest.split("?", 1)[0])

        for algorithm in _INTEGRITY_ALGORITHMS:
            if algorithm in expected:
                actual = base64.b64encode(hashlib.new(algorithm, content).digest())
                if actual.decode("ascii") in expected[algorithm]:
                    return
                raise TransportError(
                    f"integrity check failed for {algorithm}",
                    details={"algorithm": algorithm},
                )
        # No supported digests listed; nothing to verify


def _referrer_value(
    referrer: str, policy: ReferrerPolicy, target_url: str
) -> str | None:
    try:
        source = httpx.URL(referrer)
        target = httpx.URL(target_url)
    except httpx.InvalidURL:
        logger.warning("Ignoring unparsable referrer %r", referrer)
        return None
    if not source.scheme or not source.host:
        return None

    netloc = source.netloc.decode("ascii")
    origin = f"{source.scheme}://{netloc}/"
    full = f"{source.scheme}://{netloc}{source.raw_path.decode('ascii')}"
    same_origin = (source.scheme, source.host, source.port) == (
        target.scheme,
        target.host,
        target.port,
    )
    downgrade = source.scheme == "https" and target.scheme != "https"

    if policy is ReferrerPolicy.NO_REFERRER:
        return None
    if policy is ReferrerPolicy.NO_REFERRER_WHEN_DOWNGRADE:
        return None if downgrade else full
    if policy is ReferrerPolicy.ORIGIN:
        return origin
    if policy is ReferrerPolicy.ORIGIN_WHEN_CROSS_ORIGIN:
        return full if same_origin else origin
    if policy is ReferrerPolicy.UNSAFE_URL:
        return full
    if policy is ReferrerPolicy.SAME_ORIGIN:
        return full if same_origin else None
    if policy is ReferrerPolicy.STRICT_ORIGIN:
        return None if downgrade else origin
    # STRICT_ORIGIN_WHEN_CROSS_ORIGIN and NONE
    if same_origin:
        return full
    return None if downgrade else origin
