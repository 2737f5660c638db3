"""Exceptions for Kiln template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Template not found by loader
├── TemplateCompileError      # Compile-time error (fatal to the compile call)
└── TemplateRuntimeError      # Render-time error with context

Every compile error is synchronous and fatal: no partial compiled unit is
produced. Runtime errors carry the template name and the include/extends
stack active when they were raised.

Example:
    ```
    K-CMP-004: cannot extend multiple times
      --> child.html:3:0
    ```

"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for Kiln template errors.

    Format: K-{CATEGORY}-{NUMBER}
    Categories: CMP (compiler), RUN (runtime), TPL (template loading)
    """

    # Compiler errors (K-CMP-xxx)
    UNKNOWN_NODE = "K-CMP-001"
    INVALID_TYPE = "K-CMP-002"
    INVALID_DICT_KEY = "K-CMP-003"
    MULTIPLE_EXTENDS = "K-CMP-004"
    ROOT_WITH_FRAME = "K-CMP-005"
    INVALID_OPERATOR = "K-CMP-006"
    COMPILER_REUSED = "K-CMP-007"

    # Runtime errors (K-RUN-xxx)
    UNKNOWN_BLOCK = "K-RUN-001"
    NO_SUPER = "K-RUN-002"
    IMPORT_NAME = "K-RUN-003"
    UNKNOWN_FILTER = "K-RUN-004"
    INCLUDE_DEPTH = "K-RUN-005"
    RUNTIME_ERROR = "K-RUN-006"

    # Template loading errors (K-TPL-xxx)
    TEMPLATE_NOT_FOUND = "K-TPL-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'compiler', 'runtime', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "CMP": "compiler",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the include/extends chain for error messages.

    Example:
        >>> print(format_template_stack([("base.html", 1), ("nav.html", 2)]))
        Template stack:
          • base.html (depth 1)
          • nav.html (depth 2)
    """
    if not stack:
        return ""

    lines = ["Template stack:"]
    for template_name, depth in stack:
        lines.append(f"  • {template_name} (depth {depth})")
    return "\n".join(lines)


class TemplateError(Exception):
    """Base exception for all Kiln template errors.

    All template-related exceptions inherit from this class, enabling
    broad exception handling:

        >>> try:
        ...     template.render()
        ... except TemplateError as e:
        ...     log.error(f"Template error: {e}")

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as ``<code>: <message>``."""
        header = str(self)
        if self.code:
            code_str = self.code.value
            if code_str not in header:
                header = f"{code_str}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by any configured loader.

    Example:
            >>> env.get_template("nonexistent.html")
        TemplateNotFoundError: Template 'nonexistent.html' not found

    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateCompileError(TemplateError):
    """Compile-time error raised while turning a Kiln AST into code.

    Carries the offending node's position when one is known. The message
    is kept verbatim in ``message`` so callers can match on it.
    """

    code: ErrorCode | None = ErrorCode.UNKNOWN_NODE

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        lineno: int | None = None,
        col_offset: int | None = None,
        template_name: str | None = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        self.lineno = lineno
        self.col_offset = col_offset
        self.template_name = template_name
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.lineno is None and self.template_name is None:
            return self.message

        location = self.template_name or "<template>"
        if self.lineno is not None:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return f"{self.message}\n  --> {location}"


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Output Format:
            ```
            Runtime Error: no super block available for "body"
              Location: child.html
              Template stack:
                • page.html (depth 1)
              Suggestion: Only call super() from a block that overrides a parent block
            ```

    Attributes:
        message: Error description
        template_name: Name of the template
        suggestion: Actionable fix suggestion
        template_stack: (template_name, depth) pairs of the include chain

    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        suggestion: str | None = None,
        template_stack: list[tuple[str, int]] | None = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        self.values = values or {}
        self.template_name = template_name
        self.suggestion = suggestion
        self.template_stack = template_stack or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name:
            parts.append(f"  Location: {self.template_name}")

        if self.template_stack:
            parts.append(format_template_stack(self.template_stack))

        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                type_name = type(value).__name__
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type_name})")

        if self.suggestion:
            parts.append(f"\n  Suggestion: {self.suggestion}")

        return "\n".join(parts)
