"""Built-in filters for Kiln templates.

Filters transform a value with the pipe syntax: ``{{ value | filter }}``
or ``{{ value | filter(arg) }}``. The filtered value is always the first
positional argument.

Categories:
**String Filters**:
    - `upper`, `lower`, `title`, `capitalize`: Case conversion
    - `trim`: Strip surrounding whitespace
    - `replace(old, new, count=None)`: Substring replacement
    - `string`: Convert to text (None becomes "")

**Sequence Filters**:
    - `length`: Number of items (0 for None)
    - `join(sep="")`: Concatenate items as text
    - `first`, `last`: Edge items (None when empty)
    - `reverse`: Reversed string or list

**Value Filters**:
    - `default(fallback="", boolean=False)`: Fallback for missing values
    - `int(default=0)`: Integer conversion with fallback

Missing Values:
Unresolved template variables render as ``""``, so filters treat both
None and the empty string as "missing" where that matters (``default``).

Custom Filters:
    >>> env.filters["shout"] = lambda s: str(s).upper() + "!"
    >>> # {{ name | shout }}

"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from kiln.runtime import to_str


def _filter_upper(value: Any) -> str:
    return to_str(value).upper()


def _filter_lower(value: Any) -> str:
    return to_str(value).lower()


def _filter_title(value: Any) -> str:
    return to_str(value).title()


def _filter_capitalize(value: Any) -> str:
    return to_str(value).capitalize()


def _filter_trim(value: Any) -> str:
    return to_str(value).strip()


def _filter_string(value: Any) -> str:
    return to_str(value)


def _filter_replace(value: Any, old: str, new: str, count: int | None = None) -> str:
    """Replace ``old`` with ``new``; all occurrences unless ``count`` is given."""
    text = to_str(value)
    if count is None:
        return text.replace(old, new)
    return text.replace(old, new, count)


def _filter_length(value: Any) -> int:
    if value is None:
        return 0
    try:
        return len(value)
    except TypeError:
        return len(list(value))


def _filter_join(value: Iterable[Any] | None, separator: str = "") -> str:
    if value is None:
        return ""
    return separator.join(to_str(item) for item in value)


def _filter_first(value: Any) -> Any:
    """First item, or None for an empty or missing sequence."""
    if not value:
        return None
    return next(iter(value))


def _filter_last(value: Any) -> Any:
    """Last item, or None for an empty or missing sequence."""
    if not value:
        return None
    try:
        return value[-1]
    except (TypeError, KeyError):
        return list(value)[-1]


def _filter_reverse(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return value[::-1]
    return list(reversed(list(value)))


def _filter_default(value: Any, default_value: Any = "", boolean: bool = False) -> Any:
    """Return ``default_value`` when ``value`` is missing (or falsy, with ``boolean``)."""
    if value is None or value == "":
        return default_value
    if boolean and not value:
        return default_value
    return value


def _filter_int(value: Any, default: int = 0) -> int:
    """Convert to int; numeric strings like ``"3.7"`` truncate, junk gives ``default``."""
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


DEFAULT_FILTERS: dict[str, Callable[..., Any]] = {
    "capitalize": _filter_capitalize,
    "default": _filter_default,
    "first": _filter_first,
    "int": _filter_int,
    "join": _filter_join,
    "last": _filter_last,
    "length": _filter_length,
    "lower": _filter_lower,
    "replace": _filter_replace,
    "reverse": _filter_reverse,
    "string": _filter_string,
    "title": _filter_title,
    "trim": _filter_trim,
    "upper": _filter_upper,
}
