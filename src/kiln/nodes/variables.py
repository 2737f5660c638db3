"""Variable assignment nodes for Kiln AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kiln.nodes.base import Node
from kiln.nodes.expressions import Symbol


@dataclass(frozen=True, slots=True)
class Set(Node):
    """Context assignment: {% set x, y = expr %}"""

    targets: Sequence[Symbol]
    value: Node
