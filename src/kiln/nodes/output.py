"""Output nodes for Kiln AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kiln.nodes.base import Node


@dataclass(frozen=True, slots=True)
class TemplateData(Node):
    """Raw text data between template constructs."""

    value: str


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Output expressions: {{ expr }}

    Children are expressions or TemplateData, appended in order.
    """

    children: Sequence[Node]
