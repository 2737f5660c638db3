"""Expression compilation for Kiln compiler.

Provides mixin for compiling Kiln expression AST nodes to Python AST
expressions.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
import copy
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from kiln.compiler.utils import call, const, load, method_call, store
from kiln.environment.exceptions import ErrorCode

if TYPE_CHECKING:
    from kiln.compiler.frame import Frame
    from kiln.environment.exceptions import TemplateCompileError
    from kiln.nodes import Node

# Node kinds accepted where a template expression is required
EXPRESSION_TYPES = frozenset(
    {
        "Literal",
        "Symbol",
        "Group",
        "Array",
        "Dict",
        "FunCall",
        "Filter",
        "LookupVal",
        "Compare",
        "And",
        "Or",
        "Not",
    }
)

_BINARY_OPS: dict[str, type[ast.operator]] = {
    "Add": ast.Add,
    "Sub": ast.Sub,
    "Mul": ast.Mult,
    "Div": ast.Div,
    "Mod": ast.Mod,
}

_UNARY_OPS: dict[str, type[ast.unaryop]] = {
    "Not": ast.Not,
    "Neg": ast.USub,
    "Pos": ast.UAdd,
}

_COMPARE_OPS: dict[str, type[ast.cmpop]] = {
    "==": ast.Eq,
    "!=": ast.NotEq,
    "<": ast.Lt,
    ">": ast.Gt,
    "<=": ast.LtE,
    ">=": ast.GtE,
}


class ExpressionCompilationMixin:
    """Mixin for compiling expressions.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _expr_dispatch: dict[str, Callable[..., ast.expr]]

        # From Compiler core
        def _tmpid(self) -> str: ...

        def _runtime_call(self, helper: str, args: list[ast.expr]) -> ast.Call: ...

        def _error(
            self, message: str, node: Node | None, *, code: ErrorCode = ...
        ) -> TemplateCompileError: ...

    def _assert_type(self, node: Node, allowed: Sequence[str] | frozenset[str]) -> None:
        """Raise "invalid type: <kind>" unless ``node`` is one of ``allowed``."""
        if node.typename not in allowed:
            raise self._error(
                f"invalid type: {node.typename}", node, code=ErrorCode.INVALID_TYPE
            )

    def _compile_checked_expr(self, node: Node, frame: Frame) -> ast.expr:
        """Compile a node that must be a template expression.

        Used where the template grammar requires a value: set/if/for
        operands, dict values, lookup targets, call targets, extends/include
        names.
        """
        self._assert_type(node, EXPRESSION_TYPES)
        return self._compile_expr(node, frame)

    def _compile_expr(self, node: Node, frame: Frame) -> ast.expr:
        """Compile any expression node to a Python expression."""
        handler = self._get_expr_dispatch().get(node.typename)
        if handler is None:
            raise self._error(f"cannot compile node: {node.typename}", node)
        return handler(node, frame)

    def _get_expr_dispatch(self) -> dict[str, Callable[..., ast.expr]]:
        """Get expression dispatch table (cached on first call)."""
        try:
            return self._expr_dispatch
        except AttributeError:
            pass
        dispatch: dict[str, Callable[..., ast.expr]] = {
            "Literal": self._compile_literal,
            "TemplateData": self._compile_literal,
            "Symbol": self._compile_symbol,
            "Group": self._compile_group,
            "Array": self._compile_array,
            "Dict": self._compile_dict,
            "Or": self._compile_boolop,
            "And": self._compile_boolop,
            "FloorDiv": self._compile_floordiv,
            "Pow": self._compile_pow,
            "Compare": self._compile_compare,
            "LookupVal": self._compile_lookup_val,
            "FunCall": self._compile_funcall,
            "Filter": self._compile_filter,
        }
        for name in _BINARY_OPS:
            dispatch[name] = self._compile_binop
        for name in _UNARY_OPS:
            dispatch[name] = self._compile_unaryop
        self._expr_dispatch = dispatch
        return dispatch

    # ─────────────────────────────────────────────────────────────────────────
    # Leaves and aggregates
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_literal(self, node: Any, frame: Frame) -> ast.expr:
        return const(node.value)

    def _compile_symbol(self, node: Any, frame: Frame) -> ast.expr:
        """Compile a variable reference.

        Bound in the compile-time scope: the generated local, directly.
        Otherwise: ``runtime.resolve(context, frame, "name")``.
        """
        binding = frame.lookup(node.value)
        if binding is not None:
            return load(binding)
        return self._runtime_call(
            "resolve", [load("context"), load("frame"), const(node.value)]
        )

    def _compile_group(self, node: Any, frame: Frame) -> ast.expr:
        """``(x)`` is ``x``; ``(x, y)`` is a tuple."""
        if len(node.children) == 1:
            return self._compile_expr(node.children[0], frame)
        return ast.Tuple(
            elts=[self._compile_expr(child, frame) for child in node.children],
            ctx=ast.Load(),
        )

    def _compile_array(self, node: Any, frame: Frame) -> ast.expr:
        return ast.List(
            elts=[self._compile_expr(child, frame) for child in node.children],
            ctx=ast.Load(),
        )

    def _compile_dict(self, node: Any, frame: Frame) -> ast.expr:
        keys: list[ast.expr | None] = []
        values: list[ast.expr] = []
        for pair in node.children:
            self._assert_type(pair, ("Pair",))
            key, value = self._compile_pair(pair, frame)
            keys.append(key)
            values.append(value)
        return ast.Dict(keys=keys, values=values)

    def _compile_pair(self, node: Any, frame: Frame) -> tuple[ast.expr, ast.expr]:
        """Compile one ``key: value`` entry; bare names are string keys."""
        key = node.key
        if key.typename == "Symbol":
            key_expr = const(key.value)
        elif key.typename == "Literal" and isinstance(key.value, str):
            key_expr = const(key.value)
        else:
            raise self._error(
                "dict keys must be strings or names",
                key,
                code=ErrorCode.INVALID_DICT_KEY,
            )
        return key_expr, self._compile_checked_expr(node.value, frame)

    # ─────────────────────────────────────────────────────────────────────────
    # Operators
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_boolop(self, node: Any, frame: Frame) -> ast.expr:
        op = ast.Or() if node.typename == "Or" else ast.And()
        return ast.BoolOp(
            op=op,
            values=[
                self._compile_expr(node.left, frame),
                self._compile_expr(node.right, frame),
            ],
        )

    def _compile_binop(self, node: Any, frame: Frame) -> ast.expr:
        return ast.BinOp(
            left=self._compile_expr(node.left, frame),
            op=_BINARY_OPS[node.typename](),
            right=self._compile_expr(node.right, frame),
        )

    def _compile_floordiv(self, node: Any, frame: Frame) -> ast.expr:
        """``a // b`` is ``runtime.floor(a / b)``."""
        quotient = ast.BinOp(
            left=self._compile_expr(node.left, frame),
            op=ast.Div(),
            right=self._compile_expr(node.right, frame),
        )
        return self._runtime_call("floor", [quotient])

    def _compile_pow(self, node: Any, frame: Frame) -> ast.expr:
        return self._runtime_call(
            "power",
            [self._compile_expr(node.left, frame), self._compile_expr(node.right, frame)],
        )

    def _compile_unaryop(self, node: Any, frame: Frame) -> ast.expr:
        return ast.UnaryOp(
            op=_UNARY_OPS[node.typename](),
            operand=self._compile_expr(node.target, frame),
        )

    def _compile_compare(self, node: Any, frame: Frame) -> ast.expr:
        left = self._compile_expr(node.expr, frame)
        ops: list[ast.cmpop] = []
        comparators: list[ast.expr] = []
        for operand in node.ops:
            op_class = _COMPARE_OPS.get(operand.type)
            if op_class is None:
                raise self._error(
                    f"invalid comparison operator: {operand.type}",
                    operand,
                    code=ErrorCode.INVALID_OPERATOR,
                )
            ops.append(op_class())
            comparators.append(self._compile_expr(operand.expr, frame))
        return ast.Compare(
            left=left,
            ops=ops,
            comparators=comparators,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Access and calls
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_lookup_val(self, node: Any, frame: Frame) -> ast.expr:
        """``a.b`` / ``a["b"]`` is ``runtime.member(a, "b")``."""
        return self._runtime_call(
            "member",
            [
                self._compile_checked_expr(node.target, frame),
                self._compile_checked_expr(node.val, frame),
            ],
        )

    def _collect_args(
        self, args: Sequence[Any], frame: Frame
    ) -> tuple[list[ast.expr], list[tuple[str, ast.expr]]]:
        """Split call arguments into positional and keyword parts."""
        positional: list[ast.expr] = []
        keywords: list[tuple[str, ast.expr]] = []
        for arg in args:
            if arg.typename == "KeywordArg":
                keywords.append((arg.key.value, self._compile_expr(arg.value, frame)))
            else:
                positional.append(self._compile_expr(arg, frame))
        return positional, keywords

    def _compile_funcall(self, node: Any, frame: Frame) -> ast.expr:
        """Compile a call with the dual macro/plain calling convention.

        The callee is evaluated once into a temporary. Macros receive the
        positional list and the keyword dict as two arguments; any other
        callable receives the positional arguments directly:

            t_1(args, kwargs) if runtime.is_macro(t_1 := callee) else t_1(*args)
        """
        callee = self._tmpid()
        positional, keywords = self._collect_args(node.args, frame)

        macro_call = call(
            load(callee),
            [
                ast.List(elts=positional, ctx=ast.Load()),
                ast.Dict(
                    keys=[const(key) for key, _ in keywords],
                    values=[value for _, value in keywords],
                ),
            ],
        )
        plain_call = ast.Call(
            func=load(callee),
            args=[copy.deepcopy(arg) for arg in positional],
            keywords=[],
        )
        return ast.IfExp(
            test=self._runtime_call(
                "is_macro",
                [
                    ast.NamedExpr(
                        target=store(callee),
                        value=self._compile_checked_expr(node.name, frame),
                    )
                ],
            ),
            body=macro_call,
            orelse=plain_call,
        )

    def _compile_filter(self, node: Any, frame: Frame) -> ast.expr:
        """``x | name(a)`` is ``env.get_filter("name")(x, a)``."""
        self._assert_type(node.name, ("Symbol",))
        positional, _ = self._collect_args(node.args, frame)
        return ast.Call(
            func=method_call("env", "get_filter", [const(node.name.value)]),
            args=positional,
            keywords=[],
        )
