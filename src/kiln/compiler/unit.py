"""Compiled unit: the executable artifact of one compile call.

A compiled unit maps entry-point names to callables of the shape
``(env, context, frame, runtime) -> str``:

- ``root``: renders the template (or, for a child template, delegates to
  the resolved parent's ``root``)
- ``block_<name>``: one per ``{% block %}`` found anywhere in the tree

Units are immutable after construction and safe to render concurrently.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

EntryPoint = Callable[..., str]

BLOCK_PREFIX = "block_"


class CompiledUnit(Mapping[str, EntryPoint]):
    """Read-only mapping of entry-point name → render function."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, EntryPoint]):
        if "root" not in entries:
            raise ValueError("compiled unit requires a 'root' entry point")
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_namespace(
        cls, namespace: Mapping[str, Any], block_names: list[str]
    ) -> CompiledUnit:
        """Collect ``root`` and ``b_<name>`` functions from an exec'd module."""
        entries: dict[str, EntryPoint] = {"root": namespace["root"]}
        for name in block_names:
            entries[f"{BLOCK_PREFIX}{name}"] = namespace[f"b_{name}"]
        return cls(entries)

    def __getitem__(self, key: str) -> EntryPoint:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def root(self) -> EntryPoint:
        return self._entries["root"]

    @property
    def blocks(self) -> dict[str, EntryPoint]:
        """Block entry points keyed by bare block name."""
        return {
            key[len(BLOCK_PREFIX) :]: func
            for key, func in self._entries.items()
            if key.startswith(BLOCK_PREFIX)
        }

    def __repr__(self) -> str:
        return f"<CompiledUnit {sorted(self._entries)}>"
