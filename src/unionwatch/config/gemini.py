"""Gemini (generative text service) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
GEMINI_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True, slots=True)
class GeminiConfig:
    """Holds Gemini API configuration values."""

    api_key: str
    model: str
    resilience: ResilienceConfig


def default_gemini_resilience() -> ResilienceConfig:
    # generateContent is a POST; only transport-level failures are retried.
    return ResilienceConfig(
        name="gemini",
        base_url=GEMINI_BASE_URL,
        timeout_seconds=GEMINI_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=60.0),
        retry=RetryPolicy(
            total=2,
            allowed_methods=frozenset({"POST"}),
            status_forcelist=frozenset({429, 503}),
        ),
    )


def get_gemini_config(
    *,
    api_key: str | None = None,
    resilience: ResilienceConfig | None = None,
) -> GeminiConfig:
    """Build the Gemini configuration.

    An explicitly supplied ``api_key`` (for example one stored in the remote app
    settings) takes priority over ``GEMINI_API_KEY``.
    """

    key = api_key.strip() if api_key and api_key.strip() else None
    if key is None:
        key = require_env_var("GEMINI_API_KEY")
    return GeminiConfig(
        api_key=key,
        model=optional_env_var("GEMINI_MODEL", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL,
        resilience=resilience or default_gemini_resilience(),
    )
