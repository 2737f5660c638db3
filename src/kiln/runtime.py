"""Runtime objects and helpers used by compiled Kiln templates.

Every compiled entry point has the signature
``(env, context, frame, runtime) -> str``. This module *is* the
``runtime`` argument: generated code reaches its helpers as attributes
(``runtime.resolve``, ``runtime.wrap_macro``, ...), so a compiled unit
never closes over state shared between renders.

- ``Context``: render variables, exports and block chains
- ``Frame``: runtime scopes holding loop variables and metadata
- ``MacroWrapper``: callable produced for ``{% macro %}`` definitions

Thread-Safety:
Helpers are pure functions. ``Context`` and ``Frame`` instances are created
per render call and never shared between concurrent renders.

"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from math import floor
from typing import TYPE_CHECKING, Any

from kiln.environment.exceptions import ErrorCode, TemplateRuntimeError

if TYPE_CHECKING:
    from kiln.environment import Environment

BlockFunc = Callable[..., str]

__all__ = [
    "Context",
    "Frame",
    "MacroWrapper",
    "floor",
    "is_macro",
    "iter_items",
    "member",
    "missing_export",
    "power",
    "resolve",
    "to_str",
    "wrap_macro",
]

# Exponentiation is emitted as an explicit call
power = pow


class Frame:
    """Runtime variable scope for loop bindings.

    Compiled for-loops push a frame per loop and store the loop variables
    plus ``loop.*`` metadata in it. Dotted names are stored as nested
    mappings, so ``frame.set("loop.index", 1)`` makes ``frame.lookup("loop")``
    return ``{"index": 1}``.

    Included templates receive the includer's frame, which lets them see
    the loop variables active at the include site.
    """

    __slots__ = ("parent", "variables")

    def __init__(self, parent: Frame | None = None):
        self.parent = parent
        self.variables: dict[str, Any] = {}

    def set(self, name: str, value: Any) -> None:
        """Set a variable in this scope; dotted names create nested mappings."""
        parts = name.split(".")
        scope = self.variables
        for part in parts[:-1]:
            nested = scope.get(part)
            if not isinstance(nested, dict):
                nested = scope[part] = {}
            scope = nested
        scope[parts[-1]] = value

    def lookup(self, name: str) -> Any:
        """Return the innermost value for ``name``, or None when unbound."""
        frame: Frame | None = self
        while frame is not None:
            if name in frame.variables:
                return frame.variables[name]
            frame = frame.parent
        return None

    def push(self) -> Frame:
        return Frame(self)

    def pop(self) -> Frame | None:
        return self.parent


class Context:
    """Render context: variables, exports and block override chains.

    Each block name maps to a list of block functions ordered from the
    most-derived template to the base. The template being rendered
    registers its own blocks first; every ``{% extends %}`` appends the
    parent's blocks after them, so ``get_block`` returns the winning
    override and ``get_super`` walks one step toward the base.
    """

    __slots__ = ("blocks", "ctx", "exported")

    def __init__(
        self,
        ctx: Mapping[str, Any] | None = None,
        blocks: Mapping[str, BlockFunc] | None = None,
    ):
        self.ctx: dict[str, Any] = dict(ctx) if ctx else {}
        self.blocks: dict[str, list[BlockFunc]] = {}
        self.exported: list[str] = []
        if blocks:
            for name, block in blocks.items():
                self.add_block(name, block)

    def lookup(self, name: str) -> Any:
        return self.ctx.get(name)

    def set_variable(self, name: str, value: Any) -> None:
        self.ctx[name] = value

    def get_variables(self) -> dict[str, Any]:
        return self.ctx

    def add_export(self, name: str) -> None:
        if name not in self.exported:
            self.exported.append(name)

    def get_exported(self) -> dict[str, Any]:
        """Return the exported names and their current values."""
        return {name: self.ctx.get(name) for name in self.exported}

    def add_block(self, name: str, block: BlockFunc) -> None:
        self.blocks.setdefault(name, []).append(block)

    def get_block(self, name: str) -> BlockFunc:
        """Return the most-derived override of block ``name``."""
        chain = self.blocks.get(name)
        if not chain:
            raise TemplateRuntimeError(
                f'unknown block "{name}"',
                code=ErrorCode.UNKNOWN_BLOCK,
                suggestion="Check the block name against the templates in the extends chain",
            )
        return chain[0]

    def get_super(
        self, env: Environment, name: str, block: BlockFunc, runtime: Any
    ) -> Callable[[], str]:
        """Return a callable rendering the next-outer override of ``name``.

        Resolution happens when the block starts rendering; the error for a
        block with no parent version is deferred until ``super()`` is
        actually called, so base-template blocks still render.
        """
        chain = self.blocks.get(name, [])
        try:
            idx = chain.index(block)
        except ValueError:
            idx = -1

        if idx == -1 or idx + 1 >= len(chain):

            def no_super() -> str:
                raise TemplateRuntimeError(
                    f'no super block available for "{name}"',
                    code=ErrorCode.NO_SUPER,
                    suggestion="Only call super() from a block that overrides a parent block",
                )

            return no_super

        parent_block = chain[idx + 1]

        def call_super() -> str:
            return parent_block(env, self, runtime.Frame(), runtime)

        return call_super

    def __repr__(self) -> str:
        return f"<Context vars={sorted(self.ctx)} blocks={sorted(self.blocks)}>"


class MacroWrapper:
    """Callable wrapper around a compiled macro body.

    Call sites compiled from ``{{ f(1, x=2) }}`` check ``is_macro`` and,
    for wrappers, pass two aggregates: the positional argument list and the
    keyword mapping. Each declared parameter takes its positional value,
    else its keyword value, else its default.

    The ``catch_kwargs``, ``catch_varargs`` and ``caller`` flags are carried
    for calling-convention metadata but have no behavior yet.
    """

    is_macro = True

    __slots__ = ("caller", "catch_kwargs", "catch_varargs", "func", "name", "params")

    def __init__(
        self,
        func: Callable[..., str],
        name: str,
        params: Sequence[tuple[str, Any]],
        catch_kwargs: bool = False,
        catch_varargs: bool = False,
        caller: bool = False,
    ):
        self.func = func
        self.name = name
        self.params = tuple(params)
        self.catch_kwargs = catch_kwargs
        self.catch_varargs = catch_varargs
        self.caller = caller

    def __call__(
        self, args: Sequence[Any] = (), kwargs: Mapping[str, Any] | None = None
    ) -> str:
        kwargs = kwargs or {}
        values = []
        for i, (param, default) in enumerate(self.params):
            if i < len(args):
                values.append(args[i])
            elif param in kwargs:
                values.append(kwargs[param])
            else:
                values.append(default)
        return self.func(*values)

    def __repr__(self) -> str:
        return f"<MacroWrapper {self.name}({', '.join(p for p, _ in self.params)})>"


def wrap_macro(
    func: Callable[..., str],
    name: str,
    params: Sequence[tuple[str, Any]],
    catch_kwargs: bool = False,
    catch_varargs: bool = False,
    caller: bool = False,
) -> MacroWrapper:
    """Wrap a compiled macro body with its calling-convention metadata."""
    return MacroWrapper(func, name, params, catch_kwargs, catch_varargs, caller)


def is_macro(value: Any) -> bool:
    """True for values carrying the macro marker."""
    return getattr(value, "is_macro", False) is True


def iter_items(value: Any) -> Iterable[tuple[Any, Any]]:
    """Key/value pairs for two-target loops.

    Mappings yield their items; any other iterable yields ``(index, element)``.
    """
    if isinstance(value, Mapping):
        return value.items()
    return enumerate(value)


def resolve(context: Context, frame: Frame, name: str) -> Any:
    """Dynamic variable lookup: render context, then runtime frame, then ``""``.

    A None result counts as missing at each level. Never raises.
    """
    value = context.lookup(name)
    if value is None:
        value = frame.lookup(name)
    if value is None:
        return ""
    return value


def member(obj: Any, key: Any) -> Any:
    """Member access for ``obj[key]`` / ``obj.key``.

    Subscript first, attribute fallback for string keys. Missing members
    yield None, and so does any member of a missing value (None or the
    ``""`` that ``resolve`` returns for unbound names).
    """
    if obj is None or (isinstance(obj, str) and not obj):
        return None
    try:
        return obj[key]
    except (KeyError, IndexError, TypeError):
        if isinstance(key, str):
            return getattr(obj, key, None)
        return None


def missing_export(template_name: Any, name: str) -> None:
    """Fail a ``{% from %}`` import whose name the module does not export."""
    raise TemplateRuntimeError(
        f'cannot import "{name}"',
        code=ErrorCode.IMPORT_NAME,
        values={"template": template_name},
        suggestion=f"Define and export '{name}' in {template_name!r} (underscore names are private)",
    )


def to_str(value: Any) -> str:
    """Convert an output value to text, treating None as empty."""
    if value is None:
        return ""
    return str(value)
