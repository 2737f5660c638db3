"""Kiln Template: compiled template object ready for rendering.

The Template class wraps a CompiledUnit and provides the ``render()`` API.
Templates are immutable and thread-safe for concurrent rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _unit: CompiledUnit             # root + block_<name> entry points
    ├── _blocks: name → block function
    └── _name, _filename                # For error messages
    ```

Render Flow:
``render()`` builds a fresh runtime Context (globals, then caller
variables) seeded with this template's own blocks, and a fresh runtime
Frame (or a child of the caller's frame for includes), then calls the
``root`` entry point with ``(env, context, frame, runtime)``.

Memory Safety:
Uses ``weakref.ref(env)`` so templates never keep their environment alive.

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state (Context, Frame, output list)
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import weakref
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from kiln import runtime
from kiln.environment.exceptions import ErrorCode, TemplateError, TemplateRuntimeError
from kiln.render_context import (
    get_render_state,
    render_state,
    reset_render_state,
    set_render_state,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from kiln.compiler.unit import CompiledUnit
    from kiln.environment import Environment
    from kiln.render_context import RenderState


class Template:
    """Compiled template ready for rendering.

    Attributes:
        name: Template identifier (for error messages)
        filename: Source identifier reported by the loader
        unit: The CompiledUnit behind this template
        blocks: Read-only mapping of block name → block entry point
        root_render_func: The ``root`` entry point

    Error Enhancement:
        Exceptions that are not already template errors are wrapped:
            ```
            Runtime Error: unsupported operand type(s) for +: 'int' and 'str'
              Location: page.html
              Template stack:
                • layout.html (depth 0)
            ```

    Example:
            >>> from kiln import DictLoader, Environment
            >>> from kiln.nodes import Output, Root, Symbol, TemplateData
            >>> env = Environment(loader=DictLoader({
            ...     "hello.html": Root([TemplateData("Hello, "), Output([Symbol("name")])]),
            ... }))
            >>> env.get_template("hello.html").render(name="World")
            'Hello, World'

    """

    __slots__ = (
        "_blocks",
        "_env_ref",
        "_filename",
        "_name",
        "_unit",
    )

    def __init__(
        self,
        env: Environment,
        unit: CompiledUnit,
        name: str | None,
        filename: str | None = None,
    ):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._unit = unit
        self._name = name
        self._filename = filename
        self._blocks: Mapping[str, Callable[..., str]] = MappingProxyType(unit.blocks)

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def filename(self) -> str | None:
        return self._filename

    @property
    def unit(self) -> CompiledUnit:
        return self._unit

    @property
    def blocks(self) -> Mapping[str, Callable[..., str]]:
        return self._blocks

    @property
    def root_render_func(self) -> Callable[..., str]:
        return self._unit.root

    @property
    def _env(self) -> Environment:
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected while rendering '{self._name}'"
            )
        return env

    def list_blocks(self) -> list[str]:
        """Names of the blocks defined in this template."""
        return list(self._blocks)

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def render(
        self,
        ctx: Mapping[str, Any] | None = None,
        frame: runtime.Frame | None = None,
        **kwargs: Any,
    ) -> str:
        """Render the template.

        Args:
            ctx: Variables for the render context
            frame: Runtime frame of an including template; the render gets
                a child of it, so loop variables at the include site resolve
            **kwargs: More variables, applied over ``ctx``

        Raises:
            TemplateRuntimeError: On any failure during rendering
        """
        env = self._env
        context = self._new_context(ctx, kwargs)
        render_frame = frame.push() if frame is not None else runtime.Frame()
        with self._render_scope():
            return self._call(self.root_render_func, env, context, render_frame)

    def render_block(
        self, block_name: str, ctx: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> str:
        """Render a single block of this template in isolation."""
        block = self._blocks.get(block_name)
        if block is None:
            raise TemplateRuntimeError(
                f'unknown block "{block_name}"',
                code=ErrorCode.UNKNOWN_BLOCK,
                template_name=self._name,
                suggestion=f"Available blocks: {', '.join(self._blocks) or '(none)'}",
            )
        env = self._env
        context = self._new_context(ctx, kwargs)
        with self._render_scope():
            return self._call(block, env, context, runtime.Frame())

    def get_module(self) -> dict[str, Any]:
        """Render for side effects and return the exported names.

        Exports are top-level ``set`` targets and macros whose names do not
        start with an underscore.
        """
        env = self._env
        context = runtime.Context(env.globals, self._blocks)
        with self._render_scope():
            self._call(self.root_render_func, env, context, runtime.Frame())
        return context.get_exported()

    def _new_context(
        self, ctx: Mapping[str, Any] | None, kwargs: Mapping[str, Any]
    ) -> runtime.Context:
        variables = dict(self._env.globals)
        if ctx:
            variables.update(ctx)
        variables.update(kwargs)
        return runtime.Context(variables, self._blocks)

    @contextmanager
    def _render_scope(self) -> Iterator[RenderState]:
        """Top-level render state, or a deeper child state when nested."""
        parent = get_render_state()
        if parent is None:
            with render_state(self._name, self._env.max_include_depth) as state:
                yield state
            return

        parent.check_include_depth(self._name)
        state = parent.child_state(self._name)
        token = set_render_state(state)
        try:
            yield state
        finally:
            reset_render_state(token)

    def _call(
        self,
        entry: Callable[..., str],
        env: Environment,
        context: runtime.Context,
        frame: runtime.Frame,
    ) -> str:
        try:
            return entry(env, context, frame, runtime)
        except TemplateError:
            raise
        except Exception as e:
            state = get_render_state()
            raise TemplateRuntimeError(
                str(e) or type(e).__name__,
                template_name=self._name,
                template_stack=state.template_stack if state is not None else None,
            ) from e

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
