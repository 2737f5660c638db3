"""Basic statement compilation for Kiln compiler.

Provides mixin for compiling basic output statements (template data, output).

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from kiln.compiler.utils import const

if TYPE_CHECKING:
    from kiln.compiler.frame import Frame
    from kiln.nodes import Node


class BasicStatementMixin:
    """Mixin for compiling basic output statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_expr(self, node: Node, frame: Frame) -> ast.expr: ...

        # From Compiler core
        def _emit_output(self, buf: str, value_expr: ast.expr) -> ast.stmt: ...

        def _runtime_call(self, helper: str, args: list[ast.expr]) -> ast.Call: ...

    def _compile_template_data(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile raw text: ``buf.append("literal text")``."""
        if not node.value:
            return []
        return [self._emit_output(buf, const(node.value))]

    def _compile_output(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile ``{{ expression }}``.

        Each child appends in order. Raw text children append as-is,
        everything else through ``runtime.to_str``.
        """
        stmts: list[ast.stmt] = []
        for child in node.children:
            if child.typename == "TemplateData":
                stmts.extend(self._compile_template_data(child, frame, buf))
                continue
            value = self._runtime_call("to_str", [self._compile_expr(child, frame)])
            stmts.append(self._emit_output(buf, value))
        return stmts
