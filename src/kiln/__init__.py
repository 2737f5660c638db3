"""Kiln: AST-native compiler for Jinja-style templates.

Kiln takes a parsed template tree (nodes from ``kiln.nodes``) and compiles
it straight to a Python ``ast.Module``, which is compiled and executed into
a set of render functions.

Quickstart:
    >>> from kiln import DictLoader, Environment
    >>> from kiln.nodes import Output, Root, Symbol, TemplateData
    >>> env = Environment(loader=DictLoader({
    ...     "hello.html": Root([TemplateData("Hello, "), Output([Symbol("name")])]),
    ... }))
    >>> env.get_template("hello.html").render(name="World")
    'Hello, World'

Architecture:
Template AST → Compiler → Python AST → compile()/exec() → CompiledUnit

Pipeline stages:
1. **Compiler**: Transforms the Kiln AST into a Python module defining
   ``root`` and one ``b_<name>`` function per block
2. **CompiledUnit**: Read-only mapping of the executed entry points
3. **Template**: Wraps a unit with ``render()``, ``get_module()`` and
   block access for inheritance
4. **Environment**: Resolves names through loaders and supplies filters

Entry-point contract:
Every compiled function takes ``(env, context, frame, runtime)`` and
returns the rendered text. ``runtime`` is the ``kiln.runtime`` module.

Thread-Safety:
- Compilation uses a fresh, single-use Compiler per template
- Rendering uses only per-call state (Context, Frame, output list)
- Filter registration is copy-on-write

Free-Threading (PEP 703):
Declares GIL-independence via ``_Py_mod_gil = 0`` attribute.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kiln.environment import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    FunctionLoader,
    PrefixLoader,
    TemplateCompileError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
)
from kiln.render_context import RenderState, get_render_state, render_state
from kiln.template import CompiledUnit, Template

if TYPE_CHECKING:
    from kiln.nodes import Root

__version__ = "0.1.0"

__all__ = [
    "ChoiceLoader",
    "CompiledUnit",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FunctionLoader",
    "PrefixLoader",
    "RenderState",
    "Template",
    "TemplateCompileError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "__version__",
    "compile",
    "get_render_state",
    "render_state",
]


def compile(root: Root, env: Environment | None = None, name: str | None = None) -> CompiledUnit:
    """Compile a template AST with a fresh Compiler.

    Example:
        >>> import kiln
        >>> from kiln.nodes import Block, NodeList, Root, Symbol, TemplateData
        >>> unit = kiln.compile(Root([Block(Symbol("body"), NodeList([TemplateData("hi")]))]))
        >>> sorted(unit)
        ['block_body', 'root']
    """
    from kiln.compiler import Compiler

    return Compiler(env).compile(root, name=name)


# Free-threading declaration (PEP 703)
def __getattr__(name: str) -> object:
    """Module-level getattr for free-threading declaration."""
    if name == "_Py_mod_gil":
        # 0 = Py_MOD_GIL_NOT_USED
        return 0
    raise AttributeError(f"module 'kiln' has no attribute {name!r}")
