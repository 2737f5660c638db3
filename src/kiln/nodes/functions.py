"""Macro definition nodes for Kiln AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kiln.nodes.base import Node
from kiln.nodes.control_flow import NodeList
from kiln.nodes.expressions import Symbol


@dataclass(frozen=True, slots=True)
class MacroParam(Node):
    """A single macro parameter with optional default: name=default"""

    name: Symbol
    default: Node | None = None


@dataclass(frozen=True, slots=True)
class Macro(Node):
    """Macro definition: {% macro name(params) %}...{% endmacro %}"""

    name: Symbol
    params: Sequence[MacroParam]
    body: NodeList

    @property
    def args(self) -> tuple[str, ...]:
        """Parameter names in declaration order."""
        return tuple(p.name.value for p in self.params)
