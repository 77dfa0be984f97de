"""Local union store backed by SQLAlchemy.

Session work is synchronous and runs in a worker thread so the store can
serve the async ``UnionStore`` port.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from unionwatch.adapters.union_document import document_from_union, load_union_document
from unionwatch.domain.errors import MalformedOutputError
from unionwatch.domain.model import EventCategories, FieldRegistry
from unionwatch.domain.ports import UnionStore

from .mappings import UnionDocumentRow, create_all_tables, start_mappers, union_document_table

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine

    from unionwatch.domain.model import Union

log = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def create_store_engine(database_uri: str) -> Engine:
    """Create an engine usable from worker threads.

    In-memory SQLite needs a single shared connection, otherwise every thread
    would see its own empty database.
    """

    url = make_url(database_uri)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_engine(
            url,
            future=True,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_engine(url, future=True)


@dataclass(slots=True)
class SqlAlchemyUnionStore:
    session_factory: sessionmaker[Session]
    registry: FieldRegistry = field(default_factory=FieldRegistry)
    categories: EventCategories = field(default_factory=EventCategories)
    clock: Callable[[], datetime] = _utc_now

    @classmethod
    def from_engine(
        cls,
        engine: Engine,
        *,
        registry: FieldRegistry | None = None,
        categories: EventCategories | None = None,
    ) -> SqlAlchemyUnionStore:
        start_mappers()
        create_all_tables(engine)
        return cls(
            session_factory=sessionmaker(bind=engine, expire_on_commit=False),
            registry=registry or FieldRegistry(),
            categories=categories or EventCategories(),
        )

    async def get_all_unions(self) -> list[Union]:
        return await asyncio.to_thread(self._get_all_unions)

    async def put_union(self, union: Union) -> None:
        await asyncio.to_thread(self._put_union, union)

    async def delete_union(self, slug: str) -> None:
        await asyncio.to_thread(self._delete_union, slug)

    def _get_all_unions(self) -> list[Union]:
        with self.session_factory() as session:
            rows = session.scalars(
                select(UnionDocumentRow).order_by(union_document_table.c.slug)
            ).all()
            documents = [row.document for row in rows]

        unions: list[Union] = []
        for document in documents:
            try:
                unions.append(
                    load_union_document(
                        document, registry=self.registry, categories=self.categories
                    )
                )
            except MalformedOutputError as exc:
                log.warning("Skipping unreadable stored union: %s", exc)
        return unions

    def _put_union(self, union: Union) -> None:
        row = UnionDocumentRow(
            slug=union.slug,
            name=union.name,
            document=document_from_union(union),
            updated_at=self.clock(),
        )
        with self.session_factory() as session, session.begin():
            session.merge(row)
        log.info("Saved %s", union.slug)

    def _delete_union(self, slug: str) -> None:
        with self.session_factory() as session, session.begin():
            row = session.get(UnionDocumentRow, slug)
            if row is None:
                log.debug("Nothing stored for %s", slug)
                return
            session.delete(row)
        log.info("Deleted %s", slug)


if TYPE_CHECKING:
    _store_check: UnionStore = SqlAlchemyUnionStore.from_engine(create_store_engine("sqlite://"))
