"""Compile-time scope tracking for the Kiln compiler.

A Frame maps template variable names to the Python identifiers the
generated code binds them to. It never holds values: a name found here
only means "the generated code has a local for it", so the expression
compiler can emit a direct ``LOAD_FAST`` instead of a dynamic lookup.

Frames form a parent-pointer chain. ``push()`` opens a child scope for a
for-body, macro body or block body; ``pop()`` discards it and hands back
the parent.
"""

from __future__ import annotations


class Frame:
    """One lexical scope in the compile-time scope chain.

    Example:
        >>> root = Frame()
        >>> root.set("user", "l_user")
        >>> inner = root.push()
        >>> inner.set("item", "t_3")
        >>> inner.lookup("user"), inner.lookup("item")
        ('l_user', 't_3')
        >>> inner.pop() is root
        True

    """

    __slots__ = ("parent", "variables")

    def __init__(self, parent: Frame | None = None):
        self.parent = parent
        self.variables: dict[str, str] = {}

    def set(self, name: str, binding: str) -> None:
        """Bind ``name`` to a generated identifier in this scope."""
        self.variables[name] = binding

    def lookup(self, name: str) -> str | None:
        """Return the innermost binding for ``name``, or None."""
        frame: Frame | None = self
        while frame is not None:
            binding = frame.variables.get(name)
            if binding is not None:
                return binding
            frame = frame.parent
        return None

    def push(self) -> Frame:
        """Open a child scope."""
        return Frame(self)

    def pop(self) -> Frame | None:
        """Close this scope and return its parent."""
        return self.parent

    def __repr__(self) -> str:
        depth = 0
        frame = self.parent
        while frame is not None:
            depth += 1
            frame = frame.parent
        return f"<Frame depth={depth} {sorted(self.variables)}>"
