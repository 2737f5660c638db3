"""Kiln Compiler: transforms a Kiln AST into executable Python code.

Design:
Generates a Python ``ast.Module`` directly (no source strings), compiles
it, and collects the resulting entry points into a CompiledUnit:

- ``root``: renders the template
- ``block_<name>``: one per block, for inheritance lookups

Mixins split the work by node family:
- ExpressionCompilationMixin: literals, names, operators, calls, filters
- StatementCompilationMixin: output, control flow, set, macros, structure

"""

from __future__ import annotations

from kiln.compiler.core import Compiler
from kiln.compiler.frame import Frame
from kiln.compiler.unit import CompiledUnit

__all__ = ["CompiledUnit", "Compiler", "Frame"]
