"""Template loaders for Kiln environment.

Loaders provide template ASTs to the Environment. They implement
``get_source(name)`` returning ``(root, filename)`` where ``root`` is the
template's ``Root`` node and ``filename`` an optional source identifier
for error messages.

Built-in Loaders:
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)
- `FunctionLoader`: Wrap a callable as a loader (quick one-offs)
- `ChoiceLoader`: Try multiple loaders in order (theme fallback)
- `PrefixLoader`: Namespace templates by prefix (plugin architectures)

Custom Loaders:
Implement the Loader protocol:
    ```python
    class ParsedCacheLoader:
        def get_source(self, name: str) -> tuple[Root, str | None]:
            root = cache.get(name)
            if root is None:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return root, f"cache://{name}"

        def list_templates(self) -> list[str]:
            return sorted(cache.keys())
    ```

Thread-Safety:
Loaders should be thread-safe for concurrent ``get_source()`` calls.
All built-in loaders are safe as long as the mappings and callables they
wrap are.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from difflib import get_close_matches
from typing import Protocol, runtime_checkable

from kiln.environment.exceptions import TemplateNotFoundError
from kiln.nodes import Root

logger = logging.getLogger(__name__)


@runtime_checkable
class Loader(Protocol):
    """Anything that can hand the Environment a template AST by name."""

    def get_source(self, name: str) -> tuple[Root, str | None]: ...

    def list_templates(self) -> list[str]: ...


class DictLoader:
    """Load templates from an in-memory dictionary.

    Maps template names to ``Root`` nodes. Useful for testing, embedded
    templates, or trees produced by an external parser.

    Note:
        Returns ``None`` as filename since templates are not file-backed.

    Example:
            >>> from kiln.nodes import Root, TemplateData
            >>> loader = DictLoader({"hello.html": Root([TemplateData("Hello")])})
            >>> loader.list_templates()
            ['hello.html']

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, Root]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[Root, None]:
        if name not in self._mapping:
            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(str(name), available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            logger.debug("DictLoader miss: %r", name)
            raise TemplateNotFoundError(msg)
        return self._mapping[name], None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class FunctionLoader:
    """Wrap a callable as a template loader.

    The function takes a template name and returns either:
        - ``Root``: the template (filename will be ``"<function>"``)
        - ``tuple[Root, str | None]``: ``(root, filename)``
        - ``None``: template not found

    Example:
            >>> from kiln.nodes import Root, TemplateData
            >>> def load(name):
            ...     if name == "greeting.html":
            ...         return Root([TemplateData("Hi")])
            ...     return None
            >>> FunctionLoader(load).get_source("greeting.html")[1]
            '<function>'

    Raises:
        TemplateNotFoundError: If ``load_func`` returns ``None``

    """

    __slots__ = ("_load_func",)

    def __init__(
        self,
        load_func: Callable[[str], Root | tuple[Root, str | None] | None],
    ):
        self._load_func = load_func

    def get_source(self, name: str) -> tuple[Root, str | None]:
        """Call the load function and normalize the result."""
        result = self._load_func(name)

        if result is None:
            logger.debug("FunctionLoader miss: %r", name)
            raise TemplateNotFoundError(f"Template '{name}' not found")

        if isinstance(result, Root):
            return result, "<function>"

        return result

    def list_templates(self) -> list[str]:
        """FunctionLoader cannot enumerate templates."""
        return []


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> from kiln.nodes import Root, TemplateData
            >>> custom = DictLoader({"nav.html": Root([TemplateData("custom")])})
            >>> default = DictLoader({
            ...     "nav.html": Root([TemplateData("default")]),
            ...     "footer.html": Root([TemplateData("footer")]),
            ... })
            >>> ChoiceLoader([custom, default]).list_templates()
            ['footer.html', 'nav.html']

    Raises:
        TemplateNotFoundError: If no loader can find the template

    Thread-Safety:
        Safe if all child loaders are thread-safe.
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: list[Loader]):
        self._loaders = loaders

    def get_source(self, name: str) -> tuple[Root, str | None]:
        """Try each loader in order, return first match."""
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        """Merge template lists from all loaders (deduplicated, sorted)."""
        templates: set[str] = set()
        for loader in self._loaders:
            templates.update(loader.list_templates())
        return sorted(templates)


class PrefixLoader:
    """Namespace templates by prefix, delegating to per-prefix loaders.

    Template names are split on a delimiter (default ``/``) and the first
    segment selects the loader; the rest of the name is passed on.

    Example:
            >>> from kiln.nodes import Root, TemplateData
            >>> loader = PrefixLoader({
            ...     "shared": DictLoader({"header.html": Root([TemplateData("<header>")])}),
            ... })
            >>> loader.list_templates()
            ['shared/header.html']

    Raises:
        TemplateNotFoundError: If prefix not found or template not in loader

    Thread-Safety:
        Safe if all child loaders are thread-safe.
    """

    __slots__ = ("_delimiter", "_mapping")

    def __init__(self, mapping: Mapping[str, Loader], delimiter: str = "/"):
        self._mapping = mapping
        self._delimiter = delimiter

    def get_source(self, name: str) -> tuple[Root, str | None]:
        """Split name on delimiter, look up prefix, delegate to loader."""
        if self._delimiter in name:
            prefix, rest = name.split(self._delimiter, 1)
        else:
            prefix = name
            rest = ""

        loader = self._mapping.get(prefix)
        if loader is None:
            available_prefixes = sorted(self._mapping.keys())
            raise TemplateNotFoundError(
                f"Template '{name}': no loader for prefix '{prefix}'. "
                f"Available prefixes: {', '.join(available_prefixes)}"
            )
        return loader.get_source(rest)

    def list_templates(self) -> list[str]:
        """List all templates across all prefixes, with prefix prepended."""
        templates: list[str] = []
        for prefix, loader in sorted(self._mapping.items()):
            templates.extend(
                f"{prefix}{self._delimiter}{name}" for name in loader.list_templates()
            )
        return sorted(templates)
