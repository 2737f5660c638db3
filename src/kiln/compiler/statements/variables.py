"""Variable assignment compilation for Kiln compiler.

Provides mixin for compiling {% set %} statements.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from kiln.compiler.utils import assign, const, expr_stmt, load, method_call

if TYPE_CHECKING:
    from kiln.compiler.frame import Frame
    from kiln.nodes import Node


class VariableAssignmentMixin:
    """Mixin for compiling variable assignment statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_checked_expr(self, node: Node, frame: Frame) -> ast.expr: ...

        # From Compiler core
        def _tmpid(self) -> str: ...

    def _compile_set(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% set a, b = value %}.

        The value is evaluated once into a temporary and stored in the render
        context under every target. Names without a leading underscore are
        also exported, so ``{% from %}`` imports of this template see them.

        Generated:
            t_1 = <value>
            context.set_variable("a", t_1)
            context.add_export("a")
        """
        value = self._tmpid()
        stmts: list[ast.stmt] = [assign(value, self._compile_checked_expr(node.value, frame))]

        for target in node.targets:
            name = target.value
            stmts.append(
                expr_stmt(method_call("context", "set_variable", [const(name), load(value)]))
            )
            if not name.startswith("_"):
                stmts.append(expr_stmt(method_call("context", "add_export", [const(name)])))
        return stmts
