"""SQLAlchemy adapter package for unionwatch."""

from __future__ import annotations

from .mappings import (
    UnionDocumentRow,
    create_all_tables,
    mapper_registry,
    start_mappers,
    union_document_table,
)
from .store import SqlAlchemyUnionStore, create_store_engine

__all__ = [
    "SqlAlchemyUnionStore",
    "UnionDocumentRow",
    "create_all_tables",
    "create_store_engine",
    "mapper_registry",
    "start_mappers",
    "union_document_table",
]
