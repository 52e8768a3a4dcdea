"""Element compilation for the tagcraft compiler.

HTML/XML elements become markup fragments:

    input(value="foo")          <input value="foo">
    p(name, class_="x")         <p class="x">{__escape__(name)}</p>
    with div(**attrs):          <div{__attrs__({**attrs})}> ... </div>
    tag(kind, "x")              <{__tag_1__}>x{__close_tag__(__tag_1__)}

Statically known attributes are serialized at compile time with the same
function the runtime uses for dynamic ones.

In JSON mode elements become calls on the JsonBuffer instead:

    name("x")                   __buffer__.kv('name', 'x')
    with items():               __buffer__.enter() ... __buffer__.leave_key('items')
    item(1)                     __buffer__.item(1)
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from tagcraft.compiler.names import ATTRS, BUFFER_PARAM, CLOSE_TAG, TAG_NAME
from tagcraft.compiler.utils import DYNAMIC, call, literal_value, load
from tagcraft.utils.constants import HTML, JSON, RAW_TEXT_ELEMENTS, XML
from tagcraft.utils.markup import format_attrs

if TYPE_CHECKING:
    from tagcraft.compiler.code_builder import CodeBuilder
    from tagcraft.environment.exceptions import ErrorCode, TemplateCompileError
    from tagcraft.nodes import Block, Statement, TagNode

JSON_ITEM = "item"


class TagCompilationMixin:
    """Mixin for compiling TagNode."""

    if TYPE_CHECKING:
        _code: CodeBuilder
        _mode: str

        def _flush(self) -> None: ...
        def _emit_markup(self, text: str, lineno: int) -> None: ...
        def _emit_value(self, expr: ast.expr, lineno: int) -> None: ...
        def _emit_text(self, expr: ast.expr, lineno: int, *, escape: bool) -> None: ...
        def _compile_body(self, body: Sequence[Statement]) -> None: ...
        def _unique_name(self, prefix: str) -> str: ...
        def _error(self, message: str, node: Any, code: ErrorCode = ...) -> TemplateCompileError: ...

    def _compile_tag(self, node: TagNode) -> None:
        emit = self._compile_json_tag if self._mode == JSON else self._compile_element
        if node.loop is None:
            emit(node)
            return

        self._flush()
        target = ast.unparse(node.loop_target) if node.loop_target is not None else "_"
        self._code.add_line(f"for {target} in {ast.unparse(node.loop)}:", node.lineno)
        self._code.indent()
        emit(node)
        self._flush()
        self._code.dedent()

    def _compile_element(self, node: TagNode) -> None:
        lineno = node.lineno

        closing: str | ast.expr
        if node.tag_expr is not None:
            self._flush()
            var = self._unique_name("tag")
            args = [node.tag_expr]
            if node.inner_text is not None or not _is_empty(node.block):
                args.append(ast.Constant(value=True))
            self._code.add_line(f"{var} = {ast.unparse(call(TAG_NAME, args))}", lineno)
            self._emit_markup("<", lineno)
            self._emit_value(load(var), lineno)
            closing = call(CLOSE_TAG, [load(var)])
        else:
            self._emit_markup(f"<{node.tag}", lineno)
            closing = f"</{node.tag}>"

        self._emit_attributes(node.attributes, lineno)

        if node.is_void:
            self._emit_markup(">", lineno)
            return
        if self._mode == XML and node.inner_text is None and _is_empty(node.block):
            self._emit_markup("/>", lineno)
            return

        self._emit_markup(">", lineno)
        if node.inner_text is not None:
            raw = self._mode == HTML and node.tag in RAW_TEXT_ELEMENTS
            self._emit_text(node.inner_text, lineno, escape=not raw)
        if node.block is not None:
            self._compile_body(node.block.body)

        if isinstance(closing, str):
            self._emit_markup(closing, lineno)
        else:
            self._emit_value(closing, lineno)

    def _emit_attributes(self, attributes: Sequence[ast.keyword], lineno: int) -> None:
        if not attributes:
            return
        values = [literal_value(keyword.value) for keyword in attributes]
        if all(k.arg is not None for k in attributes) and DYNAMIC not in values:
            pairs = [(k.arg, value) for k, value in zip(attributes, values, strict=True)]
            self._emit_markup(format_attrs(pairs, self._mode), lineno)
            return

        mapping = ast.Dict(
            keys=[None if k.arg is None else ast.Constant(value=k.arg) for k in attributes],
            values=[k.value for k in attributes],
        )
        self._emit_value(call(ATTRS, [mapping]), lineno)

    def _compile_json_tag(self, node: TagNode) -> None:
        lineno = node.lineno
        is_item = node.tag == JSON_ITEM
        key = node.tag_expr if node.tag_expr is not None else ast.Constant(value=node.tag)

        if node.block is not None:
            if node.inner_text is not None or node.attributes:
                raise self._error("A JSON key takes either a value or a block", node)
            self._code.add_line(f"{BUFFER_PARAM}.enter()", lineno)
            self._compile_body(node.block.body)
            if is_item:
                self._code.add_line(f"{BUFFER_PARAM}.leave_item()", lineno)
            else:
                self._code.add_line(f"{BUFFER_PARAM}.leave_key({ast.unparse(key)})", lineno)
            return

        if node.inner_text is not None and node.attributes:
            raise self._error("A JSON key takes either a value or keywords", node)
        value: ast.expr
        if node.inner_text is not None:
            value = node.inner_text
        elif node.attributes:
            value = ast.Dict(
                keys=[None if k.arg is None else ast.Constant(value=k.arg) for k in node.attributes],
                values=[k.value for k in node.attributes],
            )
        else:
            value = ast.Constant(value=None)

        if is_item:
            self._code.add_line(f"{BUFFER_PARAM}.item({ast.unparse(value)})", lineno)
        else:
            self._code.add_line(
                f"{BUFFER_PARAM}.kv({ast.unparse(key)}, {ast.unparse(value)})", lineno
            )


def _is_empty(block: Block | None) -> bool:
    """No block, or one holding nothing but ``pass``."""
    return block is None or all(isinstance(stmt, ast.Pass) for stmt in block.body)
