"""Kiln Environment: template resolution, filters, loaders and errors.

The Environment is the ``env`` argument every compiled entry point
receives: compiled code resolves extends/include/import targets through
``env.get_template`` and filters through ``env.get_filter``.

"""

from __future__ import annotations

from kiln.environment.core import Environment
from kiln.environment.exceptions import (
    ErrorCode,
    TemplateCompileError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
)
from kiln.environment.filters import DEFAULT_FILTERS
from kiln.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FunctionLoader,
    Loader,
    PrefixLoader,
)
from kiln.environment.registry import FilterRegistry

__all__ = [
    "DEFAULT_FILTERS",
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FilterRegistry",
    "FunctionLoader",
    "Loader",
    "PrefixLoader",
    "TemplateCompileError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
]
