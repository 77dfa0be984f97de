"""Public interface for the Gemini adapter."""

from __future__ import annotations

from .client import GeminiClient
from .intelligence import GeminiIntelligence
from .prompts import PromptSet
from .schema import GenerateContentResponse

__all__ = [
    "GeminiClient",
    "GeminiIntelligence",
    "GenerateContentResponse",
    "PromptSet",
]
