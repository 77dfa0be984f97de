"""Pydantic models for the remote application settings node."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from unionwatch.domain.model import FieldSection, FieldType


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SettingsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CustomFieldPayload(SettingsBaseModel):
    id: str | None = None
    key: str
    label: str = ""
    section: FieldSection
    type: FieldType = FieldType.TEXT


class NewsSourcePayload(SettingsBaseModel):
    name: str
    url: str


class PromptOverrides(SettingsBaseModel):
    investigation: str | None = None
    link_analysis: str | None = Field(default=None, alias="linkAnalysis")
    news_analysis: str | None = Field(default=None, alias="newsAnalysis")
    chat_agent: str | None = Field(default=None, alias="chatAgent")
    comision: str | None = None
    paritarias: str | None = None
    acciones: str | None = None

    _normalize_prompts = field_validator(
        "investigation",
        "link_analysis",
        "news_analysis",
        "chat_agent",
        "comision",
        "paritarias",
        "acciones",
        mode="before",
    )(_blank_to_none)


class AppSettingsDocument(SettingsBaseModel):
    gemini_api_key: str | None = Field(default=None, alias="geminiApiKey")
    prompts: PromptOverrides = Field(default_factory=PromptOverrides)
    news_sources: list[NewsSourcePayload] = Field(
        default_factory=list[NewsSourcePayload], alias="newsSources"
    )
    custom_fields: list[CustomFieldPayload] = Field(
        default_factory=list[CustomFieldPayload], alias="customFields"
    )

    _normalize_key = field_validator("gemini_api_key", mode="before")(_blank_to_none)

    @field_validator("prompts", mode="before")
    @classmethod
    def _default_prompts(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("news_sources", "custom_fields", mode="before")
    @classmethod
    def _default_lists(cls, value: object) -> object:
        return [] if value is None else value
