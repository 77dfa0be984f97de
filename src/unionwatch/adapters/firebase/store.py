"""Union collection stored as one JSON node per slug."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

from unionwatch.adapters.union_document import document_from_union, load_union_document
from unionwatch.domain.errors import MalformedOutputError, UpstreamError
from unionwatch.domain.model import EventCategories, FieldRegistry
from unionwatch.domain.ports import UnionStore

from .client import SERVICE_NAME, FirebaseClient, node_path

if TYPE_CHECKING:
    from unionwatch.domain.model import Union

log = getLogger(__name__)


@dataclass(slots=True)
class FirebaseUnionStore:
    client: FirebaseClient
    registry: FieldRegistry = field(default_factory=FieldRegistry)
    categories: EventCategories = field(default_factory=EventCategories)

    @property
    def collection(self) -> str:
        return self.client.config.collection

    async def get_all_unions(self) -> list[Union]:
        payload = await self.client.get_json(node_path(self.collection))
        if payload is None:
            return []
        if isinstance(payload, list):
            # integer-like keys come back as an array with holes
            documents = [item for item in cast(list[object], payload) if item is not None]
        elif isinstance(payload, Mapping):
            documents = list(cast(Mapping[str, object], payload).values())
        else:
            raise UpstreamError(
                f"Unexpected {self.collection} payload of type {type(payload).__name__}",
                service=SERVICE_NAME,
            )

        unions: list[Union] = []
        for document in documents:
            if not isinstance(document, Mapping):
                log.warning("Skipping stored union that is not an object: %r", document)
                continue
            try:
                unions.append(
                    load_union_document(
                        cast(Mapping[str, object], document),
                        registry=self.registry,
                        categories=self.categories,
                    )
                )
            except MalformedOutputError as exc:
                log.warning("Skipping unreadable stored union: %s", exc)
        return unions

    async def put_union(self, union: Union) -> None:
        document = document_from_union(union)
        await self.client.put_json(node_path(self.collection, union.slug), document)
        log.info("Saved %s", union.slug)

    async def delete_union(self, slug: str) -> None:
        await self.client.delete(node_path(self.collection, slug))
        log.info("Deleted %s", slug)


if TYPE_CHECKING:
    _store_check: UnionStore = FirebaseUnionStore(client=FirebaseClient())
