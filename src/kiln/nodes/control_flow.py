"""Control flow nodes for Kiln AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kiln.nodes.base import Node
from kiln.nodes.expressions import Array, Symbol


@dataclass(frozen=True, slots=True)
class NodeList(Node):
    """Statement sequence (bodies of if/for/macro/block)."""

    children: Sequence[Node]


@dataclass(frozen=True, slots=True)
class If(Node):
    """Conditional: {% if cond %}...{% else %}...{% endif %}"""

    cond: Node
    body: NodeList
    else_: NodeList | None = None


@dataclass(frozen=True, slots=True)
class For(Node):
    """For loop: {% for x in items %} or {% for k, v in mapping %}

    A two-element ``Array`` target selects key/value iteration.
    """

    name: Symbol | Array
    arr: Node
    body: NodeList
