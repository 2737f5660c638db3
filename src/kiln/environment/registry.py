"""Filter registry for Kiln environment.

Provides a dict-like view over an Environment's filter table.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, MutableMapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kiln.environment.core import Environment


class FilterRegistry(MutableMapping[str, Callable]):
    """Mutable mapping view of ``env._filters``.

    Supports:
        - env.filters['name'] = func
        - env.filters.update({'name': func})
        - del env.filters['name']
        - 'name' in env.filters

    Every mutation builds a new dict and swaps it in, so renders that
    already fetched the table never see it change underneath them.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str = "_filters"):
        self._env = env
        self._attr = attr

    def _table(self) -> dict[str, Callable]:
        return getattr(self._env, self._attr)

    def _swap(self, table: dict[str, Callable]) -> None:
        setattr(self._env, self._attr, table)

    def __getitem__(self, name: str) -> Callable:
        return self._table()[name]

    def __setitem__(self, name: str, func: Callable) -> None:
        table = self._table().copy()
        table[name] = func
        self._swap(table)

    def __delitem__(self, name: str) -> None:
        table = self._table().copy()
        del table[name]
        self._swap(table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table())

    def __len__(self) -> int:
        return len(self._table())

    def update(self, *args, **kwargs) -> None:  # type: ignore[override]
        """Batch update with a single swap."""
        table = self._table().copy()
        table.update(*args, **kwargs)
        self._swap(table)

    def copy(self) -> dict[str, Callable]:
        return self._table().copy()

    def __repr__(self) -> str:
        return f"<FilterRegistry {sorted(self._table())}>"
