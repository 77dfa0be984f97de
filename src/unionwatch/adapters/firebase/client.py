"""HTTP client for the Firebase Realtime Database REST API."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

from unionwatch.adapters.http_resilience import ResilientClient, send_checked
from unionwatch.config.firebase import FirebaseConfig, get_firebase_config
from unionwatch.domain.errors import UpstreamError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    import httpx

    from unionwatch.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

SERVICE_NAME = "firebase"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _describe_error(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except json.JSONDecodeError:
        return response.text
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return response.text


def node_path(*segments: str) -> str:
    """Build ``a/b/c.json`` from path segments, escaping each one."""

    return "/".join(quote(segment, safe="") for segment in segments) + ".json"


@dataclass(slots=True)
class FirebaseClient:
    """Reads and writes JSON nodes, authenticating with the database secret."""

    config: FirebaseConfig = field(default_factory=get_firebase_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> FirebaseClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_json(self, path: str) -> object:
        response = await self._send("GET", path)
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise UpstreamError(
                f"Firebase returned invalid JSON for {path}", service=SERVICE_NAME
            ) from exc

    async def put_json(self, path: str, payload: object) -> None:
        await self._send("PUT", path, payload=payload)

    async def delete(self, path: str) -> None:
        await self._send("DELETE", path)

    async def _send(self, method: str, path: str, *, payload: object = None) -> httpx.Response:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        log.debug("%s %s", method, path)
        return await send_checked(
            self._client,
            method,
            path,
            service=SERVICE_NAME,
            describe_error=_describe_error,
            json=payload,
            params={"auth": self.config.secret},
        )
