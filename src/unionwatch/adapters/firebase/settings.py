"""Application settings shared through the remote database.

The settings node holds an optional Gemini API key, prompt overrides, the news
sources to poll and the declared extension fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from unionwatch.domain.errors import UpstreamError
from unionwatch.domain.model import CustomField, FieldRegistry

from .client import SERVICE_NAME, node_path
from .schema import AppSettingsDocument, CustomFieldPayload, NewsSourcePayload, PromptOverrides

if TYPE_CHECKING:
    from .client import FirebaseClient

log = getLogger(__name__)

SETTINGS_NODE = "config"

# remote prompt keys -> PromptSet field names
_PROMPT_NAMES = {
    "investigation": "investigation",
    "link_analysis": "link_analysis",
    "news_analysis": "news_analysis",
    "chat_agent": "chat_agent",
    "comision": "leadership",
    "paritarias": "agreements",
    "acciones": "events",
}


@dataclass(frozen=True, slots=True)
class NewsSource:
    name: str
    url: str


@dataclass(frozen=True, slots=True)
class AppSettings:
    api_key: str | None = None
    prompts: dict[str, str] = field(default_factory=dict[str, str])
    news_sources: tuple[NewsSource, ...] = ()
    registry: FieldRegistry = field(default_factory=FieldRegistry)


def settings_from_document(document: AppSettingsDocument) -> AppSettings:
    overrides = document.prompts.model_dump()
    return AppSettings(
        api_key=document.gemini_api_key,
        prompts={
            _PROMPT_NAMES[name]: text for name, text in overrides.items() if text is not None
        },
        news_sources=tuple(
            NewsSource(name=source.name, url=source.url) for source in document.news_sources
        ),
        registry=FieldRegistry(
            fields=tuple(
                CustomField(
                    key=custom.key,
                    label=custom.label or custom.key,
                    section=custom.section,
                    type=custom.type,
                )
                for custom in document.custom_fields
            )
        ),
    )


def document_from_settings(settings: AppSettings) -> dict[str, object]:
    remote_names = {domain: remote for remote, domain in _PROMPT_NAMES.items()}
    document = AppSettingsDocument(
        gemini_api_key=settings.api_key,
        prompts=PromptOverrides.model_validate(
            {
                remote_names[name]: text
                for name, text in settings.prompts.items()
                if name in remote_names
            }
        ),
        news_sources=[
            NewsSourcePayload(name=source.name, url=source.url)
            for source in settings.news_sources
        ],
        custom_fields=[
            CustomFieldPayload(
                id=custom.key,
                key=custom.key,
                label=custom.label,
                section=custom.section,
                type=custom.type,
            )
            for custom in settings.registry.fields
        ],
    )
    return document.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(slots=True)
class FirebaseSettingsStore:
    client: FirebaseClient

    async def fetch(self) -> AppSettings | None:
        """Return the stored settings, or ``None`` when none were saved yet."""

        payload = await self.client.get_json(node_path(SETTINGS_NODE))
        if payload is None:
            return None
        try:
            document = AppSettingsDocument.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamError(
                f"Stored application settings are invalid: {exc.error_count()} error(s)",
                service=SERVICE_NAME,
            ) from exc
        return settings_from_document(document)

    async def save(self, settings: AppSettings) -> None:
        await self.client.put_json(node_path(SETTINGS_NODE), document_from_settings(settings))
        log.info("Saved application settings")
