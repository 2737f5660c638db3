"""Macro compilation for Kiln compiler.

Provides mixin for compiling {% macro %} definitions.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from kiln.compiler.utils import (
    assign,
    const,
    expr_stmt,
    function_def,
    join_buffer,
    load,
    method_call,
)

if TYPE_CHECKING:
    from kiln.compiler.frame import Frame
    from kiln.nodes import Node

MACRO_BUFFER = "macro_output"


class FunctionCompilationMixin:
    """Mixin for compiling macros.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _is_child: bool

        # From ExpressionCompilationMixin
        def _compile_expr(self, node: Node, frame: Frame) -> ast.expr: ...

        # From Compiler core
        def _compile_node(self, node: Node, frame: Frame, buf: str) -> list[ast.stmt]: ...

        def _runtime_call(self, helper: str, args: list[ast.expr]) -> ast.Call: ...

    def _compile_macro(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% macro name(a, b=1) %}...{% endmacro %}.

        The body becomes a nested function with its own output buffer.
        Parameters are bound to ``l_<param>`` locals; the runtime frame in
        effect at definition time is captured as a keyword-only default so
        the body can push and pop it freely.

        Generates:
            frame = frame.push()
            def m_name(l_a, l_b, *, frame=frame):
                macro_output = []
                ... body ...
                return "".join(macro_output)
            frame = frame.pop()
            l_name = runtime.wrap_macro(m_name, "name", [("a", None), ("b", 1)],
                                        False, False, False)
            context.add_export("name")
            context.set_variable("name", l_name)
        """
        name = node.name.value
        func_name = f"m_{name}"
        binding = f"l_{name}"

        body_frame = frame.push()
        params: list[str] = []
        for param in node.params:
            param_name = param.name.value
            params.append(f"l_{param_name}")
            body_frame.set(param_name, f"l_{param_name}")

        func_body: list[ast.stmt] = [assign(MACRO_BUFFER, ast.List(elts=[], ctx=ast.Load()))]
        func_body.extend(self._compile_node(node.body, body_frame, MACRO_BUFFER))
        func_body.append(ast.Return(value=join_buffer(MACRO_BUFFER)))

        # Defaults are evaluated at definition time, in the enclosing scope
        signature = ast.List(
            elts=[
                ast.Tuple(
                    elts=[
                        const(param.name.value),
                        self._compile_expr(param.default, frame)
                        if param.default is not None
                        else const(None),
                    ],
                    ctx=ast.Load(),
                )
                for param in node.params
            ],
            ctx=ast.Load(),
        )

        stmts: list[ast.stmt] = [
            assign("frame", method_call("frame", "push")),
            function_def(func_name, params, func_body, kwonly=[("frame", load("frame"))]),
            assign("frame", method_call("frame", "pop")),
            assign(
                binding,
                self._runtime_call(
                    "wrap_macro",
                    [
                        load(func_name),
                        const(name),
                        signature,
                        const(False),
                        const(False),
                        const(False),
                    ],
                ),
            ),
        ]
        frame.set(name, binding)

        if not self._is_child:
            if not name.startswith("_"):
                stmts.append(expr_stmt(method_call("context", "add_export", [const(name)])))
            stmts.append(
                expr_stmt(method_call("context", "set_variable", [const(name), load(binding)]))
            )
        return stmts
