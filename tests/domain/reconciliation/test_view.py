from __future__ import annotations

import asyncio

import pytest

from unionwatch.domain.errors import UpstreamError
from unionwatch.domain.reconciliation import OptimisticUnionView

from tests.helpers.unions import FakeUnionStore, make_union


def _loaded_view(store: FakeUnionStore) -> OptimisticUnionView:
    view = OptimisticUnionView(store)
    asyncio.run(view.load())
    return view


def test_load_replaces_local_state(fake_store: FakeUnionStore) -> None:
    view = _loaded_view(fake_store)

    assert [ref.slug for ref in view.directory()] == ["sx", "uom"]
    assert set(view.by_slug()) == {"sx", "uom"}
    assert view.get("sx") is not None
    assert view.get("ate") is None


def test_save_inserts_new_unions_first(fake_store: FakeUnionStore) -> None:
    view = _loaded_view(fake_store)

    asyncio.run(view.save(make_union("ate", "ATE")))

    assert [union.slug for union in view.unions] == ["ate", "sx", "uom"]
    assert "ate" in fake_store.unions


def test_save_replaces_existing_union(fake_store: FakeUnionStore) -> None:
    view = _loaded_view(fake_store)

    asyncio.run(view.save(make_union("sx", "Sindicato X Renombrado")))

    assert [union.slug for union in view.unions] == ["sx", "uom"]
    sx = view.get("sx")
    assert sx is not None
    assert sx.name == "Sindicato X Renombrado"


def test_failed_save_rolls_back_and_reloads(fake_store: FakeUnionStore) -> None:
    view = _loaded_view(fake_store)
    fake_store.fail_puts.add("ate")
    # remote changed behind our back; the reload must pick it up
    fake_store.unions["cgt"] = make_union("cgt", "CGT")

    with pytest.raises(UpstreamError):
        asyncio.run(view.save(make_union("ate", "ATE")))

    assert view.get("ate") is None
    assert view.get("cgt") is not None


def test_failed_delete_restores_union(fake_store: FakeUnionStore) -> None:
    view = _loaded_view(fake_store)
    fake_store.fail_deletes = True

    with pytest.raises(UpstreamError):
        asyncio.run(view.delete("sx"))

    assert view.get("sx") is not None


def test_failed_reload_keeps_rolled_back_state(fake_store: FakeUnionStore) -> None:
    view = _loaded_view(fake_store)
    fake_store.fail_puts.add("ate")
    fake_store.fail_loads = True

    with pytest.raises(UpstreamError, match="cannot save ate"):
        asyncio.run(view.save(make_union("ate", "ATE")))

    assert [union.slug for union in view.unions] == ["sx", "uom"]


def test_delete_removes_union(fake_store: FakeUnionStore) -> None:
    view = _loaded_view(fake_store)

    asyncio.run(view.delete("uom"))

    assert [union.slug for union in view.unions] == ["sx"]
    assert "uom" not in fake_store.unions
