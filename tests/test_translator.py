"""Tests for call-shape classification in the tag translator."""

import ast
import textwrap

import pytest

from tagcraft.compiler.names import BUFFER_PARAM
from tagcraft.compiler.translator import TagTranslator, with_block_param, with_buffer_param
from tagcraft.environment.exceptions import ErrorCode, TemplateCompileError
from tagcraft.nodes import (
    BlockInvocationNode,
    BuiltinNode,
    ConstTagNode,
    DeferNode,
    ExtensionTagNode,
    RawNode,
    RenderChildrenNode,
    RenderNode,
    RenderYieldNode,
    TagNode,
    TextNode,
)
from tagcraft.utils.constants import HTML, JSON, XML


def parse(source: str) -> list[ast.stmt]:
    return ast.parse(textwrap.dedent(source)).body


def translate(source: str, mode: str = HTML, extensions=()) -> list:
    return TagTranslator(mode, extensions).translate(parse(source))


def translate_one(source: str, mode: str = HTML, extensions=()):
    (node,) = translate(source, mode, extensions)
    return node


def param_names(arguments: ast.arguments) -> list[str]:
    return [a.arg for a in (*arguments.posonlyargs, *arguments.args, *arguments.kwonlyargs)]


class TestClassification:
    """Match rules, first match wins."""

    @pytest.mark.parametrize(
        ("source", "node_type"),
        [
            ("h1('x')", TagNode),
            ("render_yield()", RenderYieldNode),
            ("render_children()", RenderChildrenNode),
            ("render(widget)", RenderNode),
            ("raw('<b>')", RawNode),
            ("text('x')", TextNode),
            ("markdown('# x')", BuiltinNode),
            ("tag(kind)", BuiltinNode),
            ("Card()", ConstTagNode),
            ("ui.components.Card()", ConstTagNode),
            ("block(1)", BlockInvocationNode),
        ],
    )
    def test_expression_statements(self, source, node_type):
        assert type(translate_one(source)) is node_type

    @pytest.mark.parametrize(
        "source",
        [
            "print('x')",
            "breakpoint()",
            "items.append(1)",
            "get_card()()",
            "factory().Card()",
            "x = h1('not a statement call')",
            "42",
        ],
    )
    def test_untouched(self, source):
        body = parse(source)
        (translated,) = TagTranslator(HTML).translate(body)
        assert translated is body[0]

    def test_tag_fields(self):
        node = translate_one("p(name, class_='x', _for=items)")
        assert node.tag == "p"
        assert isinstance(node.inner_text, ast.Name)
        assert [k.arg for k in node.attributes] == ["class_"]
        assert isinstance(node.loop, ast.Name)
        assert node.block is None

    def test_tag_name_conversion(self):
        assert translate_one("data_table()").tag == "data-table"
        assert translate_one("title_()").tag == "title"
        assert translate_one("soap__Body()", XML).tag == "soap:Body"

    def test_json_keys_are_verbatim(self):
        node = translate_one("first_name('Ada')", JSON)
        assert node.tag == "first_name"

    def test_with_block(self):
        node = translate_one(
            """
            with div():
                h1('x')
            """
        )
        assert isinstance(node, TagNode)
        assert param_names(node.block.params) == [BUFFER_PARAM]
        (child,) = node.block.body
        assert isinstance(child, TagNode)
        assert child.tag == "h1"

    def test_const_tag_block_parameters(self):
        node = translate_one(
            """
            with Each(items) as (index, item):
                li(item)
            """
        )
        assert isinstance(node, ConstTagNode)
        assert node.name == "Each"
        assert param_names(node.block.params) == [BUFFER_PARAM, "index", "item"]

    def test_dotted_const_tag_name(self):
        node = translate_one("ui.Card(title='x')")
        assert node.name == "ui.Card"
        assert isinstance(node.ref, ast.Attribute)

    def test_extension(self):
        node = translate_one("card('x')", extensions={"card"})
        assert isinstance(node, ExtensionTagNode)
        assert node.key == "card"

    def test_builtin_beats_extension(self):
        node = translate_one("text('x')", extensions={"text"})
        assert isinstance(node, TextNode)

    def test_mode_specific_builtins(self):
        assert isinstance(translate_one("html()", HTML), BuiltinNode)
        assert isinstance(translate_one("html()", XML), TagNode)
        assert isinstance(translate_one("text('x')", JSON), TagNode)
        assert isinstance(translate_one("render_yield()", JSON), RenderYieldNode)

    def test_static_dict_splat_is_expanded(self):
        node = translate_one("div(**{'data-id': 1}, **extra)")
        assert [k.arg for k in node.attributes] == ["data-id", None]

    def test_render_inline_lambda(self):
        node = translate_one("render(lambda item: li(item), value)")
        assert node.target is None
        assert param_names(node.inline.params) == [BUFFER_PARAM, "item"]
        assert isinstance(node.inline.body[0], TagNode)
        assert len(node.args) == 1

    def test_defer(self):
        node = translate_one(
            """
            with defer():
                title_('x')
            """
        )
        assert isinstance(node, DeferNode)
        assert isinstance(node.block.body[0], TagNode)

    def test_nested_statements_are_translated(self):
        node = translate_one(
            """
            for item in items:
                if item:
                    li(item)
                else:
                    Card(item)
            """
        )
        assert isinstance(node, ast.For)
        (branch,) = node.body
        assert isinstance(branch.body[0], TagNode)
        assert isinstance(branch.orelse[0], ConstTagNode)

    def test_dynamic_tag(self):
        node = translate_one("tag(kind, 'x', id='a')")
        assert isinstance(node, BuiltinNode)
        assert node.element.tag is None
        assert isinstance(node.element.tag_expr, ast.Name)
        assert isinstance(node.element.inner_text, ast.Constant)

    def test_static_tag_builtin(self):
        node = translate_one("tag('my_el')")
        assert isinstance(node, TagNode)
        assert node.tag == "my-el"


class TestTranslationErrors:
    """Recognized shapes used incorrectly."""

    def test_block_invocation_with_block(self):
        with pytest.raises(TemplateCompileError) as exc_info:
            translate(
                """
                with block():
                    p('x')
                """
            )
        assert exc_info.value.code is ErrorCode.BLOCK_INVOCATION_WITH_BLOCK

    def test_void_with_inner_text(self):
        with pytest.raises(TemplateCompileError) as exc_info:
            translate("img('x')")
        assert exc_info.value.code is ErrorCode.VOID_ELEMENT_CONTENT
        assert exc_info.value.lineno == 1

    def test_void_in_xml_is_fine(self):
        assert translate_one("img('x')", XML).tag == "img"

    def test_two_positional_arguments(self):
        with pytest.raises(TemplateCompileError, match="at most one positional argument"):
            translate("p('a', 'b')")

    def test_yield_with_block(self):
        with pytest.raises(TemplateCompileError, match="does not take a block"):
            translate(
                """
                with render_yield():
                    p('x')
                """
            )


class TestPureRebuilds:
    """Parameter lists and parsed nodes are never mutated."""

    def test_with_buffer_param(self):
        (func,) = parse("def f(a, b=1, *args, c, **kw): pass")
        rebuilt = with_buffer_param(func.args)
        assert param_names(rebuilt) == [BUFFER_PARAM, "a", "b", "c"]
        assert param_names(func.args) == ["a", "b", "c"]
        assert ast.unparse(rebuilt) == "__buffer__, a, b=1, *args, c, **kw"

    def test_with_buffer_param_positional_only(self):
        (func,) = parse("def f(a, /, b): pass")
        assert ast.unparse(with_buffer_param(func.args)) == "__buffer__, a, /, b"

    def test_with_block_param(self):
        (func,) = parse("def f(a): pass")
        assert ast.unparse(with_block_param(func.args)) == "a, *, block=None"
        assert ast.unparse(func.args) == "a"

    def test_declared_block_is_kept(self):
        (func,) = parse("def f(a, block=None): pass")
        assert with_block_param(func.args) is func.args

    def test_lambda_arguments_are_not_mutated(self):
        (stmt,) = parse("render(lambda item: li(item))")
        lambda_node = stmt.value.args[0]
        TagTranslator(HTML).translate([stmt])
        assert param_names(lambda_node.args) == ["item"]
