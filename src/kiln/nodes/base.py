"""Base node class for Kiln AST."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from typing import TypeVar

N = TypeVar("N", bound="Node")

# Position fields are metadata, not children
_POSITION_FIELDS = frozenset({"lineno", "col_offset"})


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes.

    All nodes track their source location for error reporting. Positions
    are keyword-only and default to 0 for synthesized nodes.
    Nodes are immutable; the compiler only reads them.

    """

    lineno: int = field(default=0, kw_only=True)
    col_offset: int = field(default=0, kw_only=True)

    @property
    def typename(self) -> str:
        """Node kind, used in diagnostics and compiler dispatch."""
        return type(self).__name__

    def iter_child_nodes(self) -> Iterator[Node]:
        """Yield direct child nodes in field order.

        Sequence fields are flattened; tuples inside sequences (such as
        ``FromImport.names``) carry no nodes and are skipped.
        """
        for f in fields(self):
            if f.name in _POSITION_FIELDS:
                continue
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, (list, tuple)):
                for item in value:
                    if isinstance(item, Node):
                        yield item

    def find_all(self, node_type: type[N]) -> list[N]:
        """Return every descendant of ``node_type`` in pre-order.

        Searches the whole tree, so blocks nested in conditionals, loops
        or other blocks are all found.
        """
        found: list[N] = []
        for child in self.iter_child_nodes():
            if isinstance(child, node_type):
                found.append(child)
            found.extend(child.find_all(node_type))
        return found
