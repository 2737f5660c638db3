"""Kiln RenderState: per-render bookkeeping kept out of the user context.

Compiled templates only see ``(env, context, frame, runtime)``. Everything
the engine itself needs while rendering (which template is running, how
deeply includes and module imports are nested, the chain that led here)
lives in a ContextVar instead, so it never collides with template
variables and stays isolated per thread and per async task.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from kiln.environment.exceptions import ErrorCode, TemplateRuntimeError

# Deep enough for any real hierarchy; catches circular includes early
DEFAULT_MAX_INCLUDE_DEPTH = 50


@dataclass
class RenderState:
    """Per-render state isolated from user context.

    Attributes:
        template_name: Template currently rendering
        include_depth: Nesting level of include/import renders
        max_include_depth: Depth at which nested renders are refused
        template_stack: (template_name, depth) pairs for error traces
    """

    template_name: str | None = None
    include_depth: int = 0
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    template_stack: list[tuple[str, int]] = field(default_factory=list)

    def check_include_depth(self, template_name: str | None) -> None:
        """Raise when one more nested render would exceed the limit."""
        if self.include_depth >= self.max_include_depth:
            raise TemplateRuntimeError(
                f"Maximum include depth exceeded ({self.max_include_depth}) "
                f"when rendering '{template_name}'",
                code=ErrorCode.INCLUDE_DEPTH,
                template_name=self.template_name,
                template_stack=self.template_stack,
                suggestion="Check for circular includes or imports: A → B → A",
            )

    def child_state(self, template_name: str | None = None) -> RenderState:
        """State for a nested render, one level deeper."""
        stack = self.template_stack.copy()
        if self.template_name:
            stack.append((self.template_name, self.include_depth))
        return RenderState(
            template_name=template_name or self.template_name,
            include_depth=self.include_depth + 1,
            max_include_depth=self.max_include_depth,
            template_stack=stack,
        )


_render_state: ContextVar[RenderState | None] = ContextVar(
    "render_state",
    default=None,
)


def get_render_state() -> RenderState | None:
    """Current render state, or None outside a render."""
    return _render_state.get()


@contextmanager
def render_state(
    template_name: str | None = None,
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
) -> Iterator[RenderState]:
    """Open a top-level render state for the duration of the block."""
    state = RenderState(template_name=template_name, max_include_depth=max_include_depth)
    token = _render_state.set(state)
    try:
        yield state
    finally:
        _render_state.reset(token)


def set_render_state(state: RenderState) -> Token[RenderState | None]:
    """Set a RenderState and return the reset token."""
    return _render_state.set(state)


def reset_render_state(token: Token[RenderState | None]) -> None:
    _render_state.reset(token)
