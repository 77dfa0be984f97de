"""Pydantic models describing the Gemini generateContent payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GeminiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Part(GeminiBaseModel):
    text: str | None = None
    thought: bool = False


class Content(GeminiBaseModel):
    role: str | None = None
    parts: list[Part] = Field(default_factory=list[Part])


class Candidate(GeminiBaseModel):
    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class PromptFeedback(GeminiBaseModel):
    block_reason: str | None = Field(default=None, alias="blockReason")


class GenerateContentResponse(GeminiBaseModel):
    candidates: list[Candidate] = Field(default_factory=list[Candidate])
    prompt_feedback: PromptFeedback | None = Field(default=None, alias="promptFeedback")

    @property
    def text(self) -> str:
        """Concatenated text of the first candidate, skipping thought parts."""

        if not self.candidates or self.candidates[0].content is None:
            return ""
        parts = self.candidates[0].content.parts
        return "".join(part.text for part in parts if part.text and not part.thought)


class ErrorDetail(GeminiBaseModel):
    code: int | None = None
    message: str = ""
    status: str | None = None


class ErrorResponse(GeminiBaseModel):
    error: ErrorDetail
