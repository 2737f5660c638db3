"""Template structure nodes for Kiln AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kiln.nodes.base import Node
from kiln.nodes.control_flow import NodeList
from kiln.nodes.expressions import Symbol


@dataclass(frozen=True, slots=True)
class Extends(Node):
    """Template inheritance: {% extends "base.html" %}"""

    template: Node


@dataclass(frozen=True, slots=True)
class Block(Node):
    """Named block for inheritance: {% block name %}...{% endblock %}"""

    name: Symbol
    body: NodeList


@dataclass(frozen=True, slots=True)
class Include(Node):
    """Include another template: {% include "partial.html" %}"""

    template: Node


@dataclass(frozen=True, slots=True)
class Import(Node):
    """Import a template's exports: {% import "forms.html" as forms %}"""

    template: Node
    target: str


@dataclass(frozen=True, slots=True)
class FromImport(Node):
    """Import specific names: {% from "forms.html" import field, label as lbl %}"""

    template: Node
    names: Sequence[tuple[str, str | None]]


@dataclass(frozen=True, slots=True)
class Root(Node):
    """Root node representing a complete template."""

    children: Sequence[Node]
