"""Rate-limited, retrying HTTP access shared by the remote service adapters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import RetryTransport

from unionwatch.domain.errors import UpstreamError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from unionwatch.config.http_resilience import ResilienceConfig

log = logging.getLogger(__name__)

_ERROR_BODY_LENGTH = 300

type ErrorDescriber = Callable[[httpx.Response], str]


class ResilientClient:
    """``httpx.AsyncClient`` behind a retry transport and an optional rate limiter.

    ``transport`` replaces the retrying transport, mostly for tests.
    The limiter is held for the whole request, retries included, so a burst of
    retried calls still counts against the service quota.
    """

    def __init__(
        self, config: ResilienceConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        if transport is None:
            transport = RetryTransport(retry=config.retry.build())
        if config.base_url is None:
            self._client = httpx.AsyncClient(
                timeout=config.timeout_seconds, transport=transport
            )
        else:
            self._client = httpx.AsyncClient(
                base_url=config.base_url, timeout=config.timeout_seconds, transport=transport
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: object = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(
                method, url, json=json, params=params, headers=headers
            )
        async with self._limiter:
            return await self._client.request(
                method, url, json=json, params=params, headers=headers
            )


async def send_checked(
    client: ResilientClient,
    method: str,
    url: str,
    *,
    service: str,
    describe_error: ErrorDescriber | None = None,
    json: object = None,
    params: Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Send a request, turning transport failures and non-2xx answers into ``UpstreamError``.

    ``describe_error`` pulls a readable message out of a service-specific error body.
    """

    try:
        response = await client.request(method, url, json=json, params=params, headers=headers)
    except httpx.HTTPError as exc:
        raise UpstreamError(f"{service} request failed: {exc}", service=service) from exc

    if response.is_success:
        return response

    described = describe_error(response) if describe_error else response.text
    body = described[:_ERROR_BODY_LENGTH]
    log.warning("%s answered %s: %s", service, response.status_code, body)
    raise UpstreamError(
        f"{service} answered HTTP {response.status_code}: {body}",
        service=service,
        status_code=response.status_code,
    )
