from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

from unionwatch.adapters.gemini import GeminiClient
from unionwatch.adapters.http_resilience import ResilientClient
from unionwatch.config import GeminiConfig, ResilienceConfig
from unionwatch.config.gemini import default_gemini_resilience
from unionwatch.domain.errors import UpstreamError
from unionwatch.domain.ports import GenerationOptions

from tests.helpers.http import make_client_factory


def _generator(handler: Callable[[httpx.Request], httpx.Response]) -> GeminiClient:
    config = GeminiConfig(
        api_key="test-key", model="gemini-test", resilience=default_gemini_resilience()
    )
    return GeminiClient(config=config, client_factory=make_client_factory(handler))


def _answer(*parts: dict[str, object]) -> dict[str, object]:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": list(parts)}, "finishReason": "STOP"}
        ]
    }


def test_generate_posts_prompt_with_search_tool() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_answer({"text": '{"a": '}, {"text": "1}"}))

    generator = _generator(handler)

    text = asyncio.run(
        generator.generate(
            "Investigá Sindicato X",
            system_instruction="Sos un analista",
            options=GenerationOptions(temperature=0.1),
        )
    )

    assert text == '{"a": 1}'
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path.endswith("/models/gemini-test:generateContent")
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["contents"] == [{"role": "user", "parts": [{"text": "Investigá Sindicato X"}]}]
    assert body["systemInstruction"] == {"parts": [{"text": "Sos un analista"}]}
    assert body["tools"] == [{"google_search": {}}]
    assert body["generationConfig"] == {"temperature": 0.1}


def test_generate_without_search_or_temperature() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=_answer({"text": "hola"}))

    text = asyncio.run(
        _generator(handler).generate("hola", options=GenerationOptions(use_search=False))
    )

    assert text == "hola"
    assert "tools" not in seen[0]
    assert "generationConfig" not in seen[0]
    assert "systemInstruction" not in seen[0]


def test_generate_skips_thought_parts() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json=_answer({"text": "pensando...", "thought": True}, {"text": "respuesta"})
        )

    assert asyncio.run(_generator(handler).generate("hola")) == "respuesta"


def test_generate_returns_empty_text_when_no_candidates() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    assert asyncio.run(_generator(handler).generate("hola")) == ""


def test_generate_raises_on_blocked_prompt() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

    with pytest.raises(UpstreamError, match="SAFETY"):
        asyncio.run(_generator(handler).generate("hola"))


def test_generate_reports_api_error_message() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={"error": {"code": 429, "message": "Quota exceeded", "status": "EXHAUSTED"}},
        )

    with pytest.raises(UpstreamError, match="Quota exceeded") as exc:
        asyncio.run(_generator(handler).generate("hola"))

    assert exc.value.status_code == 429
    assert exc.value.service == "gemini"


def test_generate_rejects_unreadable_body() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(UpstreamError, match="unreadable"):
        asyncio.run(_generator(handler).generate("hola"))


def test_client_is_reused_until_closed() -> None:
    built: list[ResilientClient] = []
    factory = make_client_factory(lambda _request: httpx.Response(200, json=_answer()))

    def counting_factory(config: ResilienceConfig) -> ResilientClient:
        client = factory(config)
        built.append(client)
        return client

    generator = GeminiClient(
        config=GeminiConfig(
            api_key="test-key", model="gemini-test", resilience=default_gemini_resilience()
        ),
        client_factory=counting_factory,
    )

    async def scenario() -> None:
        async with generator:
            await generator.generate("uno")
            await generator.generate("dos")
        await generator.generate("tres")
        await generator.aclose()

    asyncio.run(scenario())

    assert len(built) == 2
