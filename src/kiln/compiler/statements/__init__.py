"""Statement compilation for Kiln compiler.

Provides mixins for compiling Kiln statement AST nodes to Python AST statements.

The statements package is organized into logical modules:
- basic: Basic output (template data, output)
- control_flow: Control flow (node lists, if, for)
- variables: Variable assignments (set)
- functions: Macros
- template_structure: Template structure (block, extends, include, import, from-import)

Every handler has the signature ``(node, frame, buf) -> list[ast.stmt]``:
``frame`` is the compile-time scope and ``buf`` the name of the output
accumulator the generated statements append to.

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

from kiln.compiler.statements.basic import BasicStatementMixin
from kiln.compiler.statements.control_flow import ControlFlowMixin
from kiln.compiler.statements.functions import FunctionCompilationMixin
from kiln.compiler.statements.template_structure import TemplateStructureMixin
from kiln.compiler.statements.variables import VariableAssignmentMixin


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    VariableAssignmentMixin,
    TemplateStructureMixin,
    FunctionCompilationMixin,
):
    """Combined mixin for compiling all statement types.

    This class combines all statement compilation mixins into a single
    interface that can be inherited by the Compiler class.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks in each individual mixin.

    """
