from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session

from unionwatch.adapters.sqlalchemy import (
    SqlAlchemyUnionStore,
    UnionDocumentRow,
    union_document_table,
)
from unionwatch.domain.ingestion import refresh_all
from unionwatch.domain.model import LeadershipMember
from unionwatch.domain.reconciliation import OptimisticUnionView

from tests.helpers.unions import (
    FakeIntelligence,
    assert_leftovers_kept,
    document_with_leftovers,
    make_agreement,
    make_event,
    make_union,
)


def test_put_and_read_back(sqlite_store: SqlAlchemyUnionStore) -> None:
    union = make_union(
        leadership=[LeadershipMember(name="Ana", role="Secretaria General")],
        events={"e1": make_event()},
        agreements={"a1": make_agreement("12%")},
    )
    union.extra["fundacion"] = "1943-06-04"

    asyncio.run(sqlite_store.put_union(union))
    (loaded,) = asyncio.run(sqlite_store.get_all_unions())

    assert loaded == union


def test_put_overwrites_and_reads_in_slug_order(sqlite_store: SqlAlchemyUnionStore) -> None:
    asyncio.run(sqlite_store.put_union(make_union("uom", "UOM")))
    asyncio.run(sqlite_store.put_union(make_union("ate", "ATE")))
    asyncio.run(sqlite_store.put_union(make_union("uom", "Unión Obrera Metalúrgica")))

    unions = asyncio.run(sqlite_store.get_all_unions())

    assert [(union.slug, union.name) for union in unions] == [
        ("ate", "ATE"),
        ("uom", "Unión Obrera Metalúrgica"),
    ]


def test_delete_is_idempotent(sqlite_store: SqlAlchemyUnionStore) -> None:
    asyncio.run(sqlite_store.put_union(make_union()))

    asyncio.run(sqlite_store.delete_union("sx"))
    asyncio.run(sqlite_store.delete_union("sx"))

    assert asyncio.run(sqlite_store.get_all_unions()) == []


def test_rows_record_update_time_in_utc(sqlite_engine: Engine) -> None:
    local = timezone(timedelta(hours=-3))
    store = SqlAlchemyUnionStore.from_engine(sqlite_engine)
    store.clock = lambda: datetime(2025, 5, 20, 9, 0, tzinfo=local)

    asyncio.run(store.put_union(make_union()))

    with Session(sqlite_engine) as session:
        row = session.scalars(select(UnionDocumentRow)).one()
        assert row.updated_at == datetime(2025, 5, 20, 12, 0, tzinfo=UTC)
        assert row.updated_at.tzinfo is not None
        assert row.document["slug"] == "sx"


def test_unreadable_rows_are_skipped(sqlite_engine: Engine) -> None:
    store = SqlAlchemyUnionStore.from_engine(sqlite_engine)
    asyncio.run(store.put_union(make_union()))
    with sqlite_engine.begin() as connection:
        connection.execute(
            union_document_table.insert().values(
                slug="roto",
                name="Roto",
                document={"nombre": "Roto", "slug": "roto", "datosBasicos": "no es objeto"},
                updated_at=datetime(2025, 1, 1, tzinfo=UTC),
            )
        )

    assert [union.slug for union in asyncio.run(store.get_all_unions())] == ["sx"]


def test_refresh_all_keeps_stored_leftovers(sqlite_engine: Engine) -> None:
    store = SqlAlchemyUnionStore.from_engine(sqlite_engine)
    with sqlite_engine.begin() as connection:
        connection.execute(
            union_document_table.insert().values(
                slug="sx",
                name="Sindicato X",
                document=document_with_leftovers(),
                updated_at=datetime(2025, 1, 1, tzinfo=UTC),
            )
        )
    view = OptimisticUnionView(store)
    asyncio.run(view.load())
    intelligence = FakeIntelligence(profiles={"Sindicato X": make_union(headquarters="Sede nueva")})

    report = asyncio.run(refresh_all(view, intelligence, cooldown_seconds=0))

    assert report.succeeded == ["sx"]
    with Session(sqlite_engine) as session:
        written = session.scalars(select(UnionDocumentRow)).one().document
    assert written["datosBasicos"]["sedePrincipal"] == "Sede nueva"
    assert_leftovers_kept(written)
    (reloaded,) = asyncio.run(store.get_all_unions())
    assert list(reloaded.unreadable_events) == ["e-month"]
    assert reloaded.events["e-cat"].unmapped == {"tipo": "toma"}
