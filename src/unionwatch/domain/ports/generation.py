"""Port for the generative text service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    temperature: float | None = None
    use_search: bool = True


@runtime_checkable
class TextGenerator(Protocol):
    """Prompt in, free text out. May return prose, fenced blocks or raw JSON."""

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        options: GenerationOptions | None = None,
    ) -> str: ...
