"""Python AST construction shorthands for the Kiln compiler.

The compiler builds ``ast`` nodes directly instead of source strings.
These helpers keep the common shapes (names, attribute calls, appends)
readable at the call sites.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence

# Parameters of every compiled entry point, in order
ENTRY_ARGS = ("env", "context", "frame", "runtime")


def load(name: str) -> ast.Name:
    """``name`` in load context."""
    return ast.Name(id=name, ctx=ast.Load())


def store(name: str) -> ast.Name:
    """``name`` in store context."""
    return ast.Name(id=name, ctx=ast.Store())


def const(value: object) -> ast.Constant:
    return ast.Constant(value=value)


def call(func: ast.expr, args: Sequence[ast.expr] = ()) -> ast.Call:
    """``func(*args)``"""
    return ast.Call(func=func, args=list(args), keywords=[])


def method_call(obj: str | ast.expr, attr: str, args: Sequence[ast.expr] = ()) -> ast.Call:
    """``obj.attr(*args)``; ``obj`` may be a bare name."""
    value = load(obj) if isinstance(obj, str) else obj
    return call(ast.Attribute(value=value, attr=attr, ctx=ast.Load()), args)


def assign(target: str, value: ast.expr) -> ast.Assign:
    """``target = value``"""
    return ast.Assign(targets=[store(target)], value=value)


def expr_stmt(value: ast.expr) -> ast.Expr:
    return ast.Expr(value=value)


def entry_args() -> list[ast.expr]:
    """``env, context, frame, runtime`` as call arguments."""
    return [load(name) for name in ENTRY_ARGS]


def join_buffer(buf: str) -> ast.Call:
    """``''.join(buf)``"""
    return method_call(const(""), "join", [load(buf)])


def function_def(
    name: str,
    params: Sequence[str],
    body: list[ast.stmt],
    *,
    kwonly: Sequence[tuple[str, ast.expr]] = (),
) -> ast.FunctionDef:
    """``def name(*params, *, kw=default...): body``"""
    return ast.FunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg=p) for p in params],
            vararg=None,
            kwonlyargs=[ast.arg(arg=k) for k, _ in kwonly],
            kw_defaults=[d for _, d in kwonly],
            kwarg=None,
            defaults=[],
        ),
        body=body or [ast.Pass()],
        decorator_list=[],
        returns=None,
        type_params=[],
    )
