"""Template structure compilation for Kiln compiler.

Provides mixin for compiling block references, extends, include, import
and from-import statements.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from kiln.compiler.utils import (
    assign,
    call,
    const,
    entry_args,
    expr_stmt,
    load,
    method_call,
    store,
)
from kiln.environment.exceptions import ErrorCode

if TYPE_CHECKING:
    from kiln.compiler.frame import Frame
    from kiln.environment.exceptions import TemplateCompileError
    from kiln.nodes import Node


class TemplateStructureMixin:
    """Mixin for compiling template structure statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _is_child: bool
        _in_root: bool

        # From ExpressionCompilationMixin
        def _compile_expr(self, node: Node, frame: Frame) -> ast.expr: ...

        def _compile_checked_expr(self, node: Node, frame: Frame) -> ast.expr: ...

        # From Compiler core
        def _tmpid(self) -> str: ...

        def _emit_output(self, buf: str, value_expr: ast.expr) -> ast.stmt: ...

        def _runtime_call(self, helper: str, args: list[ast.expr]) -> ast.Call: ...

        def _error(
            self, message: str, node: Node | None, *, code: ErrorCode = ...
        ) -> TemplateCompileError: ...

    def _compile_block(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile a {% block %} reference at its position in the tree.

        The body itself is compiled separately into ``b_<name>``; here the
        winning override is looked up and rendered with the current frame.

        In ``root`` the reference is skipped once a parent template has been
        resolved: a child's own output is discarded, and rendering it early
        would run overrides before the whole block chain is registered.
        """
        block = method_call("context", "get_block", [const(node.name.value)])
        emit = self._emit_output(buf, call(block, entry_args()))
        if not self._in_root:
            return [emit]
        return [
            ast.If(
                test=ast.Compare(
                    left=load("parent_template"), ops=[ast.Is()], comparators=[const(None)]
                ),
                body=[emit],
                orelse=[],
            )
        ]

    def _compile_extends(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% extends "base.html" %}.

        Loads the parent eagerly and appends its blocks behind this
        template's own, so overrides keep precedence. The root function
        delegates to the parent once all top-level statements have run.
        """
        if self._is_child:
            raise self._error(
                "cannot extend multiple times", node, code=ErrorCode.MULTIPLE_EXTENDS
            )

        parent = method_call(
            "env",
            "get_template",
            [self._compile_checked_expr(node.template, frame), const(True)],
        )
        key = self._tmpid()
        parent_blocks = ast.Attribute(
            value=load("parent_template"), attr="blocks", ctx=ast.Load()
        )

        self._is_child = True
        return [
            assign("parent_template", parent),
            ast.For(
                target=store(key),
                iter=parent_blocks,
                body=[
                    expr_stmt(
                        method_call(
                            "context",
                            "add_block",
                            [
                                load(key),
                                ast.Subscript(
                                    value=ast.Attribute(
                                        value=load("parent_template"),
                                        attr="blocks",
                                        ctx=ast.Load(),
                                    ),
                                    slice=load(key),
                                    ctx=ast.Load(),
                                ),
                            ],
                        )
                    )
                ],
                orelse=[],
            ),
        ]

    def _compile_include(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% include "partial.html" %}.

        The included template renders against the live context variables
        and the current runtime frame, so it sees loop variables in scope
        at the include site.
        """
        template = self._tmpid()
        rendered = method_call(
            load(template),
            "render",
            [method_call("context", "get_variables"), load("frame")],
        )
        return [
            assign(
                template,
                method_call(
                    "env",
                    "get_template",
                    [self._compile_checked_expr(node.template, frame)],
                ),
            ),
            self._emit_output(buf, rendered),
        ]

    def _compile_import(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% import "forms.html" as forms %}."""
        binding = f"l_{node.target}"
        module = method_call(
            method_call("env", "get_template", [self._compile_expr(node.template, frame)]),
            "get_module",
        )
        stmts: list[ast.stmt] = [assign(binding, module)]
        frame.set(node.target, binding)

        if not self._is_child:
            stmts.append(
                expr_stmt(
                    method_call(
                        "context", "set_variable", [const(node.target), load(binding)]
                    )
                )
            )
        return stmts

    def _compile_from_import(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% from "forms.html" import field, button as btn %}.

        The module is fetched once. A requested name the module does not
        export fails the render through ``runtime.missing_export``.

        Generates (per name):
            if "field" in t_2:
                l_field = t_2["field"]
            else:
                runtime.missing_export(t_1, "field")
            context.set_variable("field", l_field)
        """
        template_name = self._tmpid()
        module = self._tmpid()
        stmts: list[ast.stmt] = [
            assign(template_name, self._compile_expr(node.template, frame)),
            assign(
                module,
                method_call(
                    method_call("env", "get_template", [load(template_name)]),
                    "get_module",
                ),
            ),
        ]

        for name, alias in node.names:
            alias = alias or name
            binding = f"l_{alias}"
            stmts.append(
                ast.If(
                    test=ast.Compare(
                        left=const(name), ops=[ast.In()], comparators=[load(module)]
                    ),
                    body=[
                        assign(
                            binding,
                            ast.Subscript(
                                value=load(module), slice=const(name), ctx=ast.Load()
                            ),
                        )
                    ],
                    orelse=[
                        expr_stmt(
                            self._runtime_call(
                                "missing_export", [load(template_name), const(name)]
                            )
                        )
                    ],
                )
            )
            frame.set(alias, binding)

            if not self._is_child:
                stmts.append(
                    expr_stmt(
                        method_call("context", "set_variable", [const(alias), load(binding)])
                    )
                )
        return stmts
