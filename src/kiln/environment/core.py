"""Kiln Environment: central configuration and template management.

The Environment resolves template names through its loader, compiles the
returned ASTs into Templates, and owns the filter table and the globals
every render starts from. Compiled templates receive it as the ``env``
argument of their entry points and call back into ``get_template`` and
``get_filter``.

Compilation is not cached: every ``get_template`` call compiles the
loader's AST afresh.

Thread-Safety:
- Filters use copy-on-write (FilterRegistry)
- ``get_template`` builds a new Compiler per call and shares no state

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from kiln.environment.exceptions import (
    ErrorCode,
    TemplateNotFoundError,
    TemplateRuntimeError,
)
from kiln.environment.filters import DEFAULT_FILTERS
from kiln.environment.loaders import Loader
from kiln.environment.registry import FilterRegistry
from kiln.nodes import Root
from kiln.render_context import DEFAULT_MAX_INCLUDE_DEPTH
from kiln.template import Template

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration for template resolution and rendering.

    Attributes:
        loader: Where ``get_template`` finds template ASTs (may be None)
        globals: Variables merged into every render context
        max_include_depth: Nesting limit for include and import renders

    Example:
            >>> from kiln import DictLoader, Environment
            >>> from kiln.nodes import Filter, Output, Root, Symbol
            >>> env = Environment(loader=DictLoader({
            ...     "shout.html": Root([Output([Filter(Symbol("upper"), [Symbol("word")])])]),
            ... }))
            >>> env.get_template("shout.html").render(word="hey")
            'HEY'

    """

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        globals: Mapping[str, Any] | None = None,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    ):
        self.loader = loader
        self._filters: dict[str, Callable[..., Any]] = {**DEFAULT_FILTERS, **(filters or {})}
        self.globals: dict[str, Any] = dict(globals or {})
        self.max_include_depth = max_include_depth

    @property
    def filters(self) -> FilterRegistry:
        """Dict-like view of the filter table; mutations are copy-on-write."""
        return FilterRegistry(self, "_filters")

    def add_filter(self, name: str, func: Callable[..., Any]) -> None:
        self.filters[name] = func

    def get_filter(self, name: str) -> Callable[..., Any]:
        """Return filter ``name``, failing the render if it is not registered."""
        func = self._filters.get(name)
        if func is None:
            raise TemplateRuntimeError(
                f"unknown filter '{name}'",
                code=ErrorCode.UNKNOWN_FILTER,
                suggestion=f"Register it with env.filters[{name!r}] = func",
            )
        return func

    def get_template(self, name: str, eager_compile: bool = False) -> Template:
        """Load and compile template ``name``.

        ``eager_compile`` is accepted for callers (extends) that need the
        template compiled before use; compilation always happens here, so
        both values behave the same.

        Raises:
            TemplateNotFoundError: If no loader is configured or it misses
            TemplateCompileError: If the template AST cannot be compiled
        """
        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured"
            )
        root, filename = self.loader.get_source(name)
        logger.debug("Resolved template %r (filename=%r, eager=%s)", name, filename, eager_compile)
        return self._from_root(root, name, filename)

    def from_ast(self, root: Root, name: str | None = None) -> Template:
        """Compile a template AST that did not come from the loader."""
        return self._from_root(root, name, None)

    def list_templates(self) -> list[str]:
        if self.loader is None:
            return []
        return self.loader.list_templates()

    def _from_root(self, root: Root, name: str | None, filename: str | None) -> Template:
        from kiln.compiler import Compiler

        unit = Compiler(self).compile(root, name=name, filename=filename)
        return Template(self, unit, name, filename)

    def __repr__(self) -> str:
        return f"<Environment loader={type(self.loader).__name__ if self.loader else None}>"
