"""Special block compilation for the tagcraft compiler.

Provides the mixin for ``defer()`` and the builtin markup helpers
(``html``, ``html5``, ``markdown``, dynamic ``tag``).

Defer mode: the first ``defer()`` executed in a function swaps the buffer
for a list of parts, so later markup is queued as strings and each deferred
block as a function. The postlude written by the compiler restores the
buffer and runs the parts in order, which lets a block deferred in
``<head>`` see state assigned further down in ``<body>``:

    if __parts__ is None:
        __orig_buffer__ = __buffer__
        __parts__ = __buffer__ = []
    def __defer_1__(__buffer__):
        ...
        return __buffer__
    __buffer__.append(__defer_1__)
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from tagcraft.compiler.names import BUFFER_PARAM, MARKDOWN, ORIG_BUFFER, PARTS
from tagcraft.compiler.utils import DYNAMIC, call, literal_value
from tagcraft.utils.constants import HTML5_DOCTYPE

if TYPE_CHECKING:
    from tagcraft.compiler.code_builder import CodeBuilder
    from tagcraft.environment.core import Environment
    from tagcraft.environment.exceptions import ErrorCode, TemplateCompileError
    from tagcraft.nodes import Block, BuiltinNode, DeferNode, Statement, TagNode


class SpecialBlockMixin:
    """Mixin for compiling defer() and builtin helpers."""

    if TYPE_CHECKING:
        _code: CodeBuilder
        _env: Environment
        _mode: str
        _scope: Any

        def _flush(self) -> None: ...
        def _emit_markup(self, text: str, lineno: int) -> None: ...
        def _emit_value(self, expr: ast.expr, lineno: int) -> None: ...
        def _emit_attributes(self, attributes: Sequence[ast.keyword], lineno: int) -> None: ...
        def _compile_body(self, body: Sequence[Statement]) -> None: ...
        def _compile_tag(self, node: TagNode) -> None: ...
        def _compile_block_function(self, block: Block, prefix: str) -> str: ...
        def _error(self, message: str, node: Any, code: ErrorCode = ...) -> TemplateCompileError: ...

    def _compile_defer(self, node: DeferNode) -> None:
        assert node.block is not None
        self._flush()
        self._scope.uses_defer = True
        self._code.add_line(f"if {PARTS} is None:", node.lineno)
        self._code.indent()
        self._code.add_line(f"{ORIG_BUFFER} = {BUFFER_PARAM}")
        self._code.add_line(f"{PARTS} = {BUFFER_PARAM} = []")
        self._code.dedent()
        name = self._compile_block_function(node.block, "defer")
        self._code.add_line(f"{BUFFER_PARAM}.append({name})", node.lineno)

    def _compile_builtin(self, node: BuiltinNode) -> None:
        match node.tag:
            case "html" | "html5":
                self._compile_document(node)
            case "markdown":
                self._compile_markdown(node)
            case _:
                assert node.element is not None
                self._compile_tag(node.element)

    def _compile_document(self, node: BuiltinNode) -> None:
        """``<!DOCTYPE html><html ...>`` + block + ``</html>``"""
        self._emit_markup(f"{HTML5_DOCTYPE}<html", node.lineno)
        self._emit_attributes(node.keywords, node.lineno)
        self._emit_markup(">", node.lineno)
        if node.block is not None:
            self._compile_body(node.block.body)
        self._emit_markup("</html>", node.lineno)

    def _compile_markdown(self, node: BuiltinNode) -> None:
        """Markdown text; literal text with literal options is converted now."""
        text = literal_value(node.args[0])
        options = {k.arg: literal_value(k.value) for k in node.keywords if k.arg is not None}
        static = (
            isinstance(text, str)
            and len(options) == len(node.keywords)
            and DYNAMIC not in options.values()
        )
        if static:
            self._emit_markup(str(self._env.markdown(text, **options)), node.lineno)
        else:
            self._emit_value(call(MARKDOWN, node.args, node.keywords), node.lineno)
