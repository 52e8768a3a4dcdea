"""Basic statement compilation for the tagcraft compiler.

Provides the mixin for plain Python statements and text output.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from tagcraft.compiler.names import BUFFER_PARAM, ESCAPE, TO_TEXT
from tagcraft.compiler.utils import DYNAMIC, call, literal_value
from tagcraft.environment.exceptions import ErrorCode
from tagcraft.utils.html import to_text
from tagcraft.utils.markup import escaper_for

if TYPE_CHECKING:
    from tagcraft.compiler.code_builder import CodeBuilder
    from tagcraft.environment.exceptions import TemplateCompileError
    from tagcraft.nodes import RawNode, TextNode


class BasicStatementMixin:
    """Mixin for compiling plain statements, ``text()`` and ``raw()``."""

    if TYPE_CHECKING:
        _code: CodeBuilder
        _mode: str
        _scope: Any

        def _flush(self) -> None: ...
        def _emit_markup(self, text: str, lineno: int) -> None: ...
        def _emit_value(self, expr: ast.expr, lineno: int) -> None: ...
        def _error(self, message: str, node: Any, code: ErrorCode = ...) -> TemplateCompileError: ...

    def _compile_statement(self, node: ast.stmt) -> None:
        """Emit an untranslated statement as is."""
        self._flush()
        self._code.add_lines(ast.unparse(node), node.lineno)

    def _compile_return(self, node: ast.Return) -> None:
        """``return`` ends the unit early; the buffer is the only return value."""
        if node.value is not None:
            raise self._error(
                "Templates cannot return a value", node, ErrorCode.UNSUPPORTED_STATEMENT
            )
        self._flush()
        self._scope.returns.append(node.lineno)
        self._code.add_line(f"return {BUFFER_PARAM}", node.lineno)

    def _compile_text(self, node: TextNode) -> None:
        if node.value is not None:
            self._emit_text(node.value, node.lineno, escape=True)

    def _compile_raw(self, node: RawNode) -> None:
        if node.value is not None:
            self._emit_text(node.value, node.lineno, escape=False)

    def _emit_text(self, expr: ast.expr, lineno: int, *, escape: bool) -> None:
        """Queue text, escaped or not; literals are converted right away."""
        value = literal_value(expr)
        if value is not DYNAMIC:
            text = escaper_for(self._mode)(value) if escape else to_text(value)
            self._emit_markup(text, lineno)
        else:
            self._emit_value(call(ESCAPE if escape else TO_TEXT, [expr]), lineno)
