"""Kiln Template: compiled templates and their executable units."""

from __future__ import annotations

from kiln.compiler.unit import CompiledUnit
from kiln.template.core import Template

__all__ = ["CompiledUnit", "Template"]
