"""Ports for persisting union records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from unionwatch.domain.model import Union


@runtime_checkable
class UnionStore(Protocol):
    """Remote key-value store keyed by union slug.

    Writes are last-write-wins; there are no transactions and no server-side
    validation.
    """

    async def put_union(self, union: Union) -> None: ...

    async def get_all_unions(self) -> list[Union]: ...

    async def delete_union(self, slug: str) -> None: ...
