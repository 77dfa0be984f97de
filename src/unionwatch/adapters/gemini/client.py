"""HTTP client for the Gemini generateContent endpoint."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from unionwatch.adapters.http_resilience import ResilientClient, send_checked
from unionwatch.config.gemini import GeminiConfig, get_gemini_config
from unionwatch.domain.errors import UpstreamError
from unionwatch.domain.ports import GenerationOptions, TextGenerator

from .schema import ErrorResponse, GenerateContentResponse

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    import httpx

    from unionwatch.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

SERVICE_NAME = "gemini"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _describe_error(response: httpx.Response) -> str:
    try:
        return ErrorResponse.model_validate_json(response.content).error.message
    except ValidationError:
        return response.text


@dataclass(slots=True)
class GeminiClient:
    """``TextGenerator`` backed by Gemini, optionally grounded with Google Search.

    One HTTP client is kept open for the lifetime of the generator so the rate
    limiter spans every call.
    """

    config: GeminiConfig = field(default_factory=get_gemini_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> GeminiClient:
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

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        options: GenerationOptions | None = None,
    ) -> str:
        options = options or GenerationOptions()
        body = self._build_request(prompt, system_instruction=system_instruction, options=options)

        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        response = await send_checked(
            self._client,
            "POST",
            f"models/{self.config.model}:generateContent",
            service=SERVICE_NAME,
            describe_error=_describe_error,
            json=body,
            headers={"x-goog-api-key": self.config.api_key},
        )

        try:
            payload = GenerateContentResponse.model_validate(response.json())
        except (ValidationError, json.JSONDecodeError) as exc:
            raise UpstreamError(
                "Gemini returned an unreadable response", service=SERVICE_NAME
            ) from exc

        feedback = payload.prompt_feedback
        if feedback is not None and feedback.block_reason:
            log.warning("Gemini blocked the prompt: %s", feedback.block_reason)
            raise UpstreamError(
                f"Gemini blocked the prompt ({feedback.block_reason})", service=SERVICE_NAME
            )

        text = payload.text
        if not text:
            finish = payload.candidates[0].finish_reason if payload.candidates else None
            log.warning("Gemini returned no text (finish reason: %s)", finish)
        return text

    @staticmethod
    def _build_request(
        prompt: str,
        *,
        system_instruction: str | None,
        options: GenerationOptions,
    ) -> dict[str, object]:
        body: dict[str, object] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if options.use_search:
            body["tools"] = [{"google_search": {}}]
        if options.temperature is not None:
            body["generationConfig"] = {"temperature": options.temperature}
        return body


if TYPE_CHECKING:
    _generator_check: TextGenerator = GeminiClient()
