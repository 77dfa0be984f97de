"""SQLAlchemy mapping metadata for the local union document store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, DateTime, Dialect, String, Table, TypeDecorator, orm

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class AwareDateTime(TypeDecorator[datetime]):
    """Timestamps go in and come out as UTC; SQLite drops the offset on the way in."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        return None if value is None else _as_utc(value).astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        return None if value is None else _as_utc(value)


def _as_utc(value: datetime) -> datetime:
    # naive values are taken to be UTC already
    return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()

union_document_table = Table(
    "union_document",
    mapper_registry.metadata,
    Column("slug", String(200), primary_key=True),
    Column("name", String(500), nullable=False),
    Column("document", JSON, nullable=False),
    Column("updated_at", AwareDateTime(), nullable=False),
)


@dataclass(eq=False)
class UnionDocumentRow:
    """One stored union, kept in the same document form the remote store uses."""

    slug: str
    name: str
    document: dict[str, object]
    updated_at: datetime


@cache
def start_mappers() -> None:
    mapper_registry.map_imperatively(UnionDocumentRow, union_document_table)
    log.debug("Mapped %s", union_document_table.name)


def create_all_tables(engine: Engine) -> None:
    mapper_registry.metadata.create_all(engine)
