"""Tests for {% macro %} definitions and calls."""

from __future__ import annotations

import ast

import pytest

from kiln import TemplateRuntimeError
from kiln.compiler import Compiler

from .builders import (
    call,
    extends,
    filt,
    for_,
    lit,
    loop,
    macro,
    out,
    set_,
    sym,
    text,
    tpl,
)


def source_of(root) -> str:
    return ast.unparse(Compiler().compile_module(root))


GREET = macro("greet", ["name"], text("Hello "), out(sym("name")))


class TestMacroCalls:
    """Calling macros with positional, keyword and default arguments."""

    def test_positional_argument(self, render):
        assert render(tpl(GREET, out(call("greet", lit("Bob"))))) == "Hello Bob"

    def test_keyword_argument(self, render):
        assert render(tpl(GREET, out(call("greet", name=lit("Ann"))))) == "Hello Ann"

    def test_missing_argument_is_empty(self, render):
        assert render(tpl(GREET, out(call("greet")))) == "Hello "

    def test_default_value(self, env_with_loader):
        assert env_with_loader.get_template("uses_macros.html").render() == "hey!"

    def test_keyword_overrides_default(self, render):
        root = tpl(
            macro("shout", [("word", lit("hey"))], out(sym("word")), text("!")),
            out(call("shout", word=lit("yo"))),
        )
        assert render(root) == "yo!"

    def test_several_parameters(self, render):
        root = tpl(
            macro(
                "pair",
                ["a", ("b", lit("B")), ("c", lit("C"))],
                out(sym("a")),
                out(sym("b")),
                out(sym("c")),
            ),
            out(call("pair", lit(1), c=lit(3))),
        )
        assert render(root) == "1B3"

    def test_default_evaluated_in_enclosing_scope(self, render):
        root = tpl(
            macro("show", [("value", sym("fallback"))], out(sym("value"))),
            out(call("show")),
        )
        assert render(root, fallback="from context") == "from context"

    def test_parameter_shadows_context(self, render):
        assert render(tpl(GREET, out(call("greet", lit("arg")))), name="ctx") == "Hello arg"

    def test_result_is_a_value(self, render):
        root = tpl(GREET, out(filt("upper", call("greet", lit("x")))))
        assert render(root) == "HELLO X"

    def test_body_output_stays_in_macro(self, render):
        root = tpl(text("["), GREET, text("]"))
        assert render(root) == "[]"

    def test_macro_through_context_variable(self, render):
        root = tpl(GREET, set_("alias", sym("greet")), out(call("alias", lit("Z"))))
        assert render(root) == "Hello Z"

    def test_macro_called_before_definition_fails(self, render):
        with pytest.raises(TemplateRuntimeError):
            render(tpl(out(call("greet", lit("x"))), GREET))


class TestMacroScope:
    """What a macro body can see."""

    def test_sees_context_variables(self, render):
        root = tpl(
            macro("sign", [], out(sym("author"))),
            out(call("sign")),
        )
        assert render(root, author="Kim") == "Kim"

    def test_captures_runtime_frame_at_definition(self, render):
        root = tpl(
            for_(
                "item",
                sym("items"),
                macro("pos", [], out(loop("index"))),
                out(call("pos")),
            )
        )
        assert render(root, items=["a", "b", "c"]) == "123"

    def test_loop_inside_macro(self, render):
        root = tpl(
            macro("listing", ["xs"], for_("x", sym("xs"), out(sym("x")), text(","))),
            out(call("listing", sym("items"))),
        )
        assert render(root, items=[1, 2]) == "1,2,"

    def test_macro_calls_other_macro(self, render):
        root = tpl(
            GREET,
            macro(
                "twice",
                ["who"],
                out(call("greet", sym("who"))),
                text("/"),
                out(call("greet", sym("who"))),
            ),
            out(call("twice", lit("Al"))),
        )
        assert render(root) == "Hello Al/Hello Al"

    def test_nested_macro_definition(self, render):
        root = tpl(
            macro(
                "outer",
                ["x"],
                macro("inner", ["y"], out(sym("x")), out(sym("y"))),
                out(call("inner", lit("!"))),
            ),
            out(call("outer", lit("o"))),
        )
        assert render(root) == "o!"


class TestMacroPublication:
    """Macros become context variables and exports."""

    def test_module_exports_public_macros(self, env_with_loader):
        module = env_with_loader.get_template("macros.html").get_module()
        assert set(module) == {"greet", "version"}
        assert module["greet"](["Eve"], {}) == "Hello Eve"
        assert module["version"] == "1.0"

    def test_generated_shape(self):
        code = source_of(tpl(GREET))
        assert "def m_greet(l_name, *, frame=frame):" in code
        assert "macro_output = []" in code
        assert "return ''.join(macro_output)" in code
        assert (
            "l_greet = runtime.wrap_macro(m_greet, 'greet', [('name', None)], False, False, False)"
            in code
        )
        assert "context.add_export('greet')" in code
        assert "context.set_variable('greet', l_greet)" in code

    def test_underscore_macro_not_exported(self):
        code = source_of(tpl(macro("_helper", [])))
        assert "context.add_export('_helper')" not in code
        assert "context.set_variable('_helper', l__helper)" in code

    def test_child_template_does_not_publish(self):
        code = source_of(tpl(extends("base.html"), GREET))
        assert "l_greet = runtime.wrap_macro(" in code
        assert "context.add_export('greet')" not in code
        assert "context.set_variable('greet'" not in code
