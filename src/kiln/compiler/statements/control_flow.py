"""Control flow statement compilation for Kiln compiler.

Provides mixin for compiling node lists, if and for statements.

For-loops are the only construct that opens both a compile-time scope and
a runtime scope. The generated loop pushes a runtime frame, binds the loop
variables and ``loop.*`` metadata into it on every iteration, and pops it
after the loop:

    ```python
    frame = frame.push()
    t_2 = _list(items or ())
    t_3 = _len(t_2)
    for t_1 in _range(t_3):
        t_4 = t_2[t_1]
        frame.set("item", t_4)
        frame.set("loop.index", t_1 + 1)
        ...
    frame = frame.pop()
    ```

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from kiln.compiler.utils import assign, const, expr_stmt, load, method_call, store
from kiln.environment.exceptions import ErrorCode

if TYPE_CHECKING:
    from kiln.compiler.frame import Frame
    from kiln.environment.exceptions import TemplateCompileError
    from kiln.nodes import Node


class ControlFlowMixin:
    """Mixin for compiling control flow statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_checked_expr(self, node: Node, frame: Frame) -> ast.expr: ...

        def _assert_type(self, node: Node, allowed: Any) -> None: ...

        def _runtime_call(self, helper: str, args: list[ast.expr]) -> ast.Call: ...

        # From Compiler core
        def _compile_node(self, node: Node, frame: Frame, buf: str) -> list[ast.stmt]: ...

        def _tmpid(self) -> str: ...

        def _builtin_call(self, name: str, args: list[ast.expr]) -> ast.Call: ...

        def _error(
            self, message: str, node: Node | None, *, code: ErrorCode = ...
        ) -> TemplateCompileError: ...

    def _compile_node_list(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        stmts: list[ast.stmt] = []
        for child in node.children:
            stmts.extend(self._compile_node(child, frame, buf))
        return stmts

    def _compile_if(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% if %} conditional.

        Branches share the enclosing scope; only loops and macros push one.
        """
        test = self._compile_checked_expr(node.cond, frame)
        body = self._compile_node(node.body, frame, buf) or [ast.Pass()]
        orelse: list[ast.stmt] = []
        if node.else_ is not None:
            orelse = self._compile_node(node.else_, frame, buf)
        return [ast.If(test=test, body=body, orelse=orelse)]

    def _compile_for(self, node: Any, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile {% for %} loop.

        A single target iterates a sequence and records the full ``loop``
        record (index, index0, revindex, revindex0, first, last, length).
        A two-name target iterates key/value pairs (mapping items, or index
        and element of a sequence) and records index, index0 and first only.
        """
        index = self._tmpid()
        arr = self._tmpid()
        frame = frame.push()

        stmts: list[ast.stmt] = [assign("frame", method_call("frame", "push"))]
        iterable = self._compile_checked_expr(node.arr, frame)

        if node.name.typename == "Array":
            stmts.extend(self._compile_for_items(node, frame, buf, index, arr, iterable))
        else:
            stmts.extend(self._compile_for_sequence(node, frame, buf, index, arr, iterable))

        frame = frame.pop()
        stmts.append(assign("frame", method_call("frame", "pop")))
        return stmts

    def _compile_for_sequence(
        self,
        node: Any,
        frame: Frame,
        buf: str,
        index: str,
        arr: str,
        iterable: ast.expr,
    ) -> list[ast.stmt]:
        self._assert_type(node.name, ("Symbol",))
        name = node.name.value
        length = self._tmpid()
        value = self._tmpid()
        frame.set(name, value)

        # t_arr = _list(<iterable> or ())
        materialized = self._builtin_call(
            "_list",
            [ast.BoolOp(op=ast.Or(), values=[iterable, ast.Tuple(elts=[], ctx=ast.Load())])],
        )
        stmts: list[ast.stmt] = [
            assign(arr, materialized),
            assign(length, self._builtin_call("_len", [load(arr)])),
        ]

        def minus(left: ast.expr, right: ast.expr) -> ast.expr:
            return ast.BinOp(left=left, op=ast.Sub(), right=right)

        def equals(left: ast.expr, right: ast.expr) -> ast.expr:
            return ast.Compare(left=left, ops=[ast.Eq()], comparators=[right])

        loop_body: list[ast.stmt] = [
            assign(
                value,
                ast.Subscript(value=load(arr), slice=load(index), ctx=ast.Load()),
            ),
            self._frame_set(name, load(value)),
            self._frame_set(
                "loop.index", ast.BinOp(left=load(index), op=ast.Add(), right=const(1))
            ),
            self._frame_set("loop.index0", load(index)),
            self._frame_set("loop.revindex", minus(load(length), load(index))),
            self._frame_set(
                "loop.revindex0", minus(minus(load(length), load(index)), const(1))
            ),
            self._frame_set("loop.first", equals(load(index), const(0))),
            self._frame_set("loop.last", equals(load(index), minus(load(length), const(1)))),
            self._frame_set("loop.length", load(length)),
        ]
        loop_body.extend(self._compile_node(node.body, frame, buf))

        stmts.append(
            ast.For(
                target=store(index),
                iter=self._builtin_call("_range", [load(length)]),
                body=loop_body,
                orelse=[],
            )
        )
        return stmts

    def _compile_for_items(
        self,
        node: Any,
        frame: Frame,
        buf: str,
        index: str,
        arr: str,
        iterable: ast.expr,
    ) -> list[ast.stmt]:
        targets = node.name.children
        if len(targets) != 2:
            raise self._error(
                f"for loop target must name 1 or 2 variables, got {len(targets)}",
                node.name,
                code=ErrorCode.INVALID_TYPE,
            )
        key_node, value_node = targets
        self._assert_type(key_node, ("Symbol",))
        self._assert_type(value_node, ("Symbol",))
        key = self._tmpid()
        value = self._tmpid()
        frame.set(key_node.value, key)
        frame.set(value_node.value, value)

        loop_body: list[ast.stmt] = [
            ast.AugAssign(target=store(index), op=ast.Add(), value=const(1)),
            self._frame_set(key_node.value, load(key)),
            self._frame_set(value_node.value, load(value)),
            self._frame_set(
                "loop.index", ast.BinOp(left=load(index), op=ast.Add(), right=const(1))
            ),
            self._frame_set("loop.index0", load(index)),
            self._frame_set(
                "loop.first",
                ast.Compare(left=load(index), ops=[ast.Eq()], comparators=[const(0)]),
            ),
        ]
        loop_body.extend(self._compile_node(node.body, frame, buf))

        return [
            # t_arr = <iterable> or {}
            assign(arr, ast.BoolOp(op=ast.Or(), values=[iterable, ast.Dict(keys=[], values=[])])),
            assign(index, const(-1)),
            # for t_key, t_value in runtime.iter_items(t_arr)
            ast.For(
                target=ast.Tuple(elts=[store(key), store(value)], ctx=ast.Store()),
                iter=self._runtime_call("iter_items", [load(arr)]),
                body=loop_body,
                orelse=[],
            ),
        ]

    def _frame_set(self, name: str, value: ast.expr) -> ast.stmt:
        """``frame.set("name", value)``"""
        return expr_stmt(method_call("frame", "set", [const(name), value]))
