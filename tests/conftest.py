from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from unionwatch.adapters.sqlalchemy import SqlAlchemyUnionStore, create_store_engine
from unionwatch.domain.model import CustomField, FieldRegistry, FieldSection, FieldType

from tests.helpers.unions import FakeUnionStore, make_union

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def _isolated_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    for name in (
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "FIREBASE_DB_URL",
        "FIREBASE_SECRET",
        "FIREBASE_COLLECTION",
        "UNIONWATCH_STORE",
        "UNIONWATCH_BATCH_COOLDOWN_SECONDS",
        "UNIONWATCH_EVENT_CATEGORIES",
        "UNIONWATCH_CUSTOM_FIELDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("UNIONWATCH_DATA_DIR", str(tmp_path_factory.mktemp("data")))


@pytest.fixture
def registry() -> FieldRegistry:
    return FieldRegistry(
        fields=(
            CustomField(
                key="afiliados",
                label="Afiliados",
                section=FieldSection.PROFILE,
                type=FieldType.NUMBER,
            ),
            CustomField(
                key="fundacion",
                label="Fundación",
                section=FieldSection.ROOT,
                type=FieldType.DATE,
            ),
            CustomField(key="convocante", label="Convocante", section=FieldSection.EVENTS),
        )
    )


@pytest.fixture
def fake_store() -> FakeUnionStore:
    return FakeUnionStore.with_unions(
        make_union("sx", "Sindicato X"),
        make_union("uom", "Unión Obrera Metalúrgica"),
    )


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_store_engine("sqlite+pysqlite:///:memory:")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine: Engine, registry: FieldRegistry) -> SqlAlchemyUnionStore:
    return SqlAlchemyUnionStore.from_engine(sqlite_engine, registry=registry)
