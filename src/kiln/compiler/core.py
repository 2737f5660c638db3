"""Kiln Compiler Core: main Compiler class.

The Compiler transforms a Kiln AST into a Python ``ast.Module``, compiles
it, and executes it into a fresh namespace to produce a CompiledUnit.
Uses a mixin-based design for maintainability.

Design Principles:
1. **AST-to-AST**: Generate ``ast.Module``, not source strings
2. **Explicit accumulator**: Every output statement appends to a named
   buffer (``output`` in entry points, ``macro_output`` in macros), joined
   once at return
3. **Fast locals**: Names the compile-time Frame knows about compile to a
   direct ``LOAD_FAST``; everything else goes through ``runtime.resolve``
4. **O(1) dispatch**: Dict-based node type → handler lookup

Generated Module:
Every template produces a ``root`` function and one ``b_<name>`` function
per block found anywhere in the tree:

    ```python
    def root(env, context, frame, runtime):
        output = []
        parent_template = None
        parent_template = env.get_template("base.html", True)
        for t_1 in parent_template.blocks:
            context.add_block(t_1, parent_template.blocks[t_1])
        if parent_template is not None:
            return parent_template.root_render_func(env, context, frame, runtime)
        return "".join(output)

    def b_content(env, context, frame, runtime):
        output = []
        l_super = context.get_super(env, "content", b_content, runtime)
        output.append(runtime.to_str(l_super()))
        return "".join(output)
    ```

A Compiler instance is single-use: its temporary counter, child flag and
block list belong to one compile call.

"""

from __future__ import annotations

import ast
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from kiln.compiler.expressions import ExpressionCompilationMixin
from kiln.compiler.frame import Frame
from kiln.compiler.statements import StatementCompilationMixin
from kiln.compiler.unit import CompiledUnit
from kiln.compiler.utils import (
    ENTRY_ARGS,
    assign,
    call,
    const,
    entry_args,
    expr_stmt,
    function_def,
    join_buffer,
    load,
    method_call,
)
from kiln.environment.exceptions import ErrorCode, TemplateCompileError
from kiln.nodes import Block, Node, Root

if TYPE_CHECKING:
    from kiln.environment import Environment

logger = logging.getLogger(__name__)

# Globals visible to every compiled module
STATIC_NAMESPACE: dict[str, Any] = {
    "__builtins__": {"__import__": __import__},
    "_len": len,
    "_list": list,
    "_range": range,
}


class Compiler(
    ExpressionCompilationMixin,
    StatementCompilationMixin,
):
    """Compile a Kiln AST to a CompiledUnit.

    Attributes:
        _env: Environment the compiled unit is meant for (may be None)
        _name: Template name for error messages
        _filename: Source filename passed to ``compile()``
        _counter: Temporary-identifier counter (``t_1``, ``t_2``, ...)
        _is_child: Set once ``{% extends %}`` has been compiled
        _in_root: True while compiling the body of ``root``
        _block_names: Names of the ``b_<name>`` functions emitted
        _used: Set by the first compile call

    Node Dispatch:
        Statement nodes and expression nodes have separate tables keyed by
        node class name. A name in neither table is a compile error:
            ```python
            handler = self._get_node_dispatch().get(node.typename)
            ```

    Example:
            >>> from kiln.compiler import Compiler
            >>> from kiln.nodes import Output, Root, Symbol, TemplateData
            >>> root = Root([TemplateData("Hello, "), Output([Symbol("name")])])
            >>> unit = Compiler(None).compile(root, name="greeting.html")
            >>> sorted(unit)
            ['root']

    """

    __slots__ = (
        "_block_names",
        "_counter",
        "_env",
        "_expr_dispatch",
        "_filename",
        "_in_root",
        "_is_child",
        "_name",
        "_node_dispatch",
        "_used",
    )

    def __init__(self, env: Environment | None = None):
        self._env = env
        self._name: str | None = None
        self._filename: str | None = None
        self._counter = 0
        self._is_child = False
        self._in_root = False
        self._block_names: list[str] = []
        self._used = False

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    def compile(
        self,
        node: Root,
        name: str | None = None,
        filename: str | None = None,
        frame: Frame | None = None,
    ) -> CompiledUnit:
        """Compile a template AST into a CompiledUnit.

        Args:
            node: Root node of the template
            name: Template name for error messages
            filename: Source filename for tracebacks
            frame: Must be None; a root is always compiled in a fresh scope

        Raises:
            TemplateCompileError: On any unsupported or malformed node
        """
        self._filename = filename
        module = self.compile_module(node, name=name, frame=frame)

        code = compile(module, filename or name or "<template>", "exec")
        namespace = dict(STATIC_NAMESPACE)
        exec(code, namespace)

        unit = CompiledUnit.from_namespace(namespace, self._block_names)
        logger.debug(
            "Compiled %s: %d temporaries, blocks=%s, child=%s",
            name or "<template>",
            self._counter,
            self._block_names,
            self._is_child,
        )
        return unit

    def compile_module(
        self,
        node: Root,
        name: str | None = None,
        frame: Frame | None = None,
    ) -> ast.Module:
        """Generate the Python module for a template without executing it."""
        if self._used:
            raise TemplateCompileError(
                "compiler instance already used",
                code=ErrorCode.COMPILER_REUSED,
                template_name=name,
            )
        self._used = True
        self._name = name

        if node.typename != "Root":
            raise self._error(f"cannot compile node: {node.typename}", node)
        if frame is not None:
            raise self._error(
                "root node can't have frame", node, code=ErrorCode.ROOT_WITH_FRAME
            )

        module_body: list[ast.stmt] = [self._make_root_function(node)]

        blocks: dict[str, Block] = {}
        for block in node.find_all(Block):
            blocks[block.name.value] = block
        for block_name, block in blocks.items():
            module_body.append(self._make_block_function(block_name, block))
        self._block_names = list(blocks)

        module = ast.Module(body=module_body, type_ignores=[])
        ast.fix_missing_locations(module)
        return module

    # ─────────────────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────────────────

    def _make_root_function(self, node: Root) -> ast.FunctionDef:
        """Generate ``root(env, context, frame, runtime)``.

        A child template delegates to the parent's root once its own
        top-level statements have run.
        """
        frame = Frame()
        body: list[ast.stmt] = [
            assign("output", ast.List(elts=[], ctx=ast.Load())),
            assign("parent_template", const(None)),
        ]
        self._in_root = True
        for child in node.children:
            body.extend(self._compile_node(child, frame, "output"))
        self._in_root = False

        if self._is_child:
            body.append(
                ast.If(
                    test=ast.Compare(
                        left=load("parent_template"),
                        ops=[ast.IsNot()],
                        comparators=[const(None)],
                    ),
                    body=[
                        ast.Return(
                            value=method_call(
                                "parent_template", "root_render_func", entry_args()
                            )
                        )
                    ],
                    orelse=[],
                )
            )
        body.append(ast.Return(value=join_buffer("output")))
        return function_def("root", ENTRY_ARGS, body)

    def _make_block_function(self, name: str, block: Block) -> ast.FunctionDef:
        """Generate ``b_<name>(env, context, frame, runtime)``.

        Block bodies run in their own function, so they start from a fresh
        compile-time scope where only ``super`` is bound.
        """
        frame = Frame()
        frame.set("super", "l_super")
        body: list[ast.stmt] = [
            assign("output", ast.List(elts=[], ctx=ast.Load())),
            assign(
                "l_super",
                method_call(
                    "context",
                    "get_super",
                    [load("env"), const(name), load(f"b_{name}"), load("runtime")],
                ),
            ),
        ]
        body.extend(self._compile_node(block.body, frame, "output"))
        body.append(ast.Return(value=join_buffer("output")))
        return function_def(f"b_{name}", ENTRY_ARGS, body)

    # ─────────────────────────────────────────────────────────────────────────
    # Shared helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _tmpid(self) -> str:
        """Allocate a fresh temporary identifier, unique per compile call."""
        self._counter += 1
        return f"t_{self._counter}"

    def _emit_output(self, buf: str, value_expr: ast.expr) -> ast.stmt:
        """``buf.append(value)``"""
        return expr_stmt(method_call(buf, "append", [value_expr]))

    def _runtime_call(self, helper: str, args: list[ast.expr]) -> ast.Call:
        """``runtime.helper(*args)``"""
        return method_call("runtime", helper, args)

    def _builtin_call(self, name: str, args: list[ast.expr]) -> ast.Call:
        """Call one of the ``_len``/``_list``/``_range`` module globals."""
        return call(load(name), args)

    def _error(
        self,
        message: str,
        node: Node | None,
        *,
        code: ErrorCode = ErrorCode.UNKNOWN_NODE,
    ) -> TemplateCompileError:
        return TemplateCompileError(
            message,
            code=code,
            lineno=node.lineno if node is not None else None,
            col_offset=node.col_offset if node is not None else None,
            template_name=self._name,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_node(self, node: Node, frame: Frame, buf: str) -> list[ast.stmt]:
        """Compile a statement-position node into Python statements."""
        handler = self._get_node_dispatch().get(node.typename)
        if handler is None:
            raise self._error(f"cannot compile node: {node.typename}", node)
        return handler(node, frame, buf)

    def _get_node_dispatch(self) -> dict[str, Callable[..., list[ast.stmt]]]:
        """Get statement dispatch table (cached on first call)."""
        try:
            return self._node_dispatch
        except AttributeError:
            pass
        self._node_dispatch = {
            "Output": self._compile_output,
            "TemplateData": self._compile_template_data,
            "NodeList": self._compile_node_list,
            "If": self._compile_if,
            "For": self._compile_for,
            "Set": self._compile_set,
            "Macro": self._compile_macro,
            "Block": self._compile_block,
            "Extends": self._compile_extends,
            "Include": self._compile_include,
            "Import": self._compile_import,
            "FromImport": self._compile_from_import,
            "Root": self._compile_nested_root,
        }
        return self._node_dispatch

    def _compile_nested_root(self, node: Root, frame: Frame, buf: str) -> list[ast.stmt]:
        # Any root reached through dispatch already has an enclosing frame
        raise self._error(
            "root node can't have frame", node, code=ErrorCode.ROOT_WITH_FRAME
        )
