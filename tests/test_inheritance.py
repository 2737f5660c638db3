"""Tests for template inheritance: extends, block and super()."""

from __future__ import annotations

import ast

import pytest

import kiln
from kiln import ErrorCode, TemplateNotFoundError, TemplateRuntimeError
from kiln.compiler import Compiler
from kiln.nodes import Extends

from .builders import (
    block,
    call,
    extends,
    for_,
    if_,
    lit,
    out,
    set_,
    sym,
    text,
    tpl,
)


class TestExtends:
    """Basic extends/block behavior."""

    def test_child_overrides_block(self, env_with_loader):
        html = env_with_loader.get_template("child.html").render()
        assert html == "<html><head>Base Head</head><body>Hello World</body></html>"

    def test_base_renders_own_blocks(self, env_with_loader):
        html = env_with_loader.get_template("base.html").render()
        assert html == "<html><head>Base Head</head><body></body></html>"

    def test_child_content_outside_blocks_is_discarded(self, make_env):
        env = make_env(
            {
                "base.html": tpl(text("["), block("body", text("base")), text("]")),
                "child.html": tpl(extends("base.html"), text("ignored"), out(lit("also"))),
            }
        )
        assert env.get_template("child.html").render() == "[base]"

    def test_child_set_is_visible_to_parent(self, make_env):
        env = make_env(
            {
                "base.html": tpl(out(sym("title")), text("|"), block("body")),
                "child.html": tpl(
                    extends("base.html"),
                    set_("title", lit("Child Title")),
                    block("body", text("content")),
                ),
            }
        )
        assert env.get_template("child.html").render() == "Child Title|content"

    def test_block_sees_render_variables(self, make_env):
        env = make_env(
            {
                "base.html": tpl(block("body")),
                "child.html": tpl(extends("base.html"), block("body", out(sym("user")))),
            }
        )
        assert env.get_template("child.html").render(user="Ann") == "Ann"

    def test_dynamic_parent_name(self, make_env):
        env = make_env(
            {
                "base.html": tpl(text("<"), block("body"), text(">")),
                "child.html": tpl(Extends(sym("layout")), block("body", text("x"))),
            }
        )
        assert env.get_template("child.html").render(layout="base.html") == "<x>"

    def test_conditional_extends_not_taken(self, make_env):
        env = make_env(
            {
                "base.html": tpl(text("<"), block("body"), text(">")),
                "page.html": tpl(
                    if_(sym("framed"), [extends("base.html")]),
                    block("body", text("x")),
                ),
            }
        )
        assert env.get_template("page.html").render(framed=True) == "<x>"
        assert env.get_template("page.html").render(framed=False) == "x"

    def test_missing_parent(self, make_env):
        env = make_env({"child.html": tpl(extends("nope.html"))})
        with pytest.raises(TemplateNotFoundError):
            env.get_template("child.html").render()

    def test_nested_blocks(self, make_env):
        env = make_env(
            {
                "base.html": tpl(
                    block("outer", text("<"), block("inner", text("i")), text(">")),
                ),
                "child.html": tpl(extends("base.html"), block("inner", text("I"))),
            }
        )
        assert env.get_template("child.html").render() == "<I>"

    def test_block_inside_loop_sees_loop_variable(self, make_env):
        env = make_env(
            {
                "list.html": tpl(
                    for_("item", sym("items"), block("row", out(sym("item")), text(";"))),
                ),
            }
        )
        assert env.get_template("list.html").render(items=[1, 2]) == "1;2;"


class TestSuper:
    """super() inside block overrides."""

    def test_super_renders_parent_block(self, make_env):
        env = make_env(
            {
                "base.html": tpl(block("head", text("Base Head"))),
                "child.html": tpl(
                    extends("base.html"),
                    block("head", text("<child+"), out(call("super")), text(">")),
                ),
            }
        )
        assert env.get_template("child.html").render() == "<child+Base Head>"

    def test_three_level_chain(self, make_env):
        env = make_env(
            {
                "base.html": tpl(text("["), block("body", text("base")), text("]")),
                "middle.html": tpl(
                    extends("base.html"),
                    block("body", text("mid("), out(call("super")), text(")")),
                ),
                "leaf.html": tpl(
                    extends("middle.html"),
                    block("body", text("leaf("), out(call("super")), text(")")),
                ),
            }
        )
        assert env.get_template("leaf.html").render() == "[leaf(mid(base))]"
        assert env.get_template("middle.html").render() == "[mid(base)]"

    def test_middle_template_inherits_untouched_blocks(self, make_env):
        env = make_env(
            {
                "base.html": tpl(block("a", text("A")), block("b", text("B"))),
                "middle.html": tpl(extends("base.html"), block("a", text("a"))),
                "leaf.html": tpl(extends("middle.html"), block("b", text("b"))),
            }
        )
        assert env.get_template("leaf.html").render() == "ab"

    def test_super_without_parent_fails(self, make_env):
        env = make_env({"base.html": tpl(block("body", out(call("super"))))})
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.get_template("base.html").render()
        assert exc_info.value.code == ErrorCode.NO_SUPER

    def test_super_unused_in_base_is_fine(self, env_with_loader):
        assert env_with_loader.get_template("base.html").render().startswith("<html>")


class TestBlockAccess:
    """Template block introspection and direct rendering."""

    def test_list_blocks(self, env_with_loader):
        assert env_with_loader.get_template("base.html").list_blocks() == ["head", "body"]

    def test_render_block(self, env_with_loader):
        assert env_with_loader.get_template("base.html").render_block("head") == "Base Head"

    def test_render_block_with_variables(self, make_env):
        env = make_env({"page.html": tpl(block("greeting", text("Hi "), out(sym("name"))))})
        assert env.get_template("page.html").render_block("greeting", name="Bo") == "Hi Bo"

    def test_render_unknown_block(self, env_with_loader):
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env_with_loader.get_template("base.html").render_block("nope")
        assert exc_info.value.code == ErrorCode.UNKNOWN_BLOCK

    def test_last_block_definition_wins(self):
        unit = kiln.compile(tpl(block("x", text("one")), block("x", text("two"))))
        assert sorted(unit) == ["block_x", "root"]


class TestInheritanceCodegen:
    """Shape of the generated inheritance code."""

    def test_child_root_delegates_to_parent(self):
        code = ast.unparse(
            Compiler().compile_module(tpl(extends("base.html"), block("body", text("x"))))
        )
        assert "parent_template = env.get_template('base.html', True)" in code
        assert "context.add_block(t_1, parent_template.blocks[t_1])" in code
        assert "if parent_template is not None:" in code
        assert "return parent_template.root_render_func(env, context, frame, runtime)" in code

    def test_block_function_binds_super(self):
        code = ast.unparse(Compiler().compile_module(tpl(block("body", text("x")))))
        assert "def b_body(env, context, frame, runtime):" in code
        assert "l_super = context.get_super(env, 'body', b_body, runtime)" in code
        assert "output.append(context.get_block('body')(env, context, frame, runtime))" in code

    def test_unit_entry_points(self, env_with_loader):
        template = env_with_loader.get_template("child.html")
        assert sorted(template.unit) == ["block_body", "root"]
        assert template.unit.root is template.root_render_func
