"""Fragment coalescing for the tagcraft compiler.

Markup is not appended piece by piece. Literal markup and interpolated
values are collected in a pending list and written as one
``__buffer__.append(f'...')`` per maximal run, so

    with div():
        h1("Hi")
        p(name)

compiles to a single statement:

    __buffer__.append(f'<div><h1>Hi</h1><p>{__escape__(name)}</p></div>')

Anything that is not markup (a loop header, a call into another unit, user
code) flushes the pending fragments first so output order always follows
source order.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, TypeAlias

from tagcraft.compiler.names import BUFFER_PARAM

if TYPE_CHECKING:
    from tagcraft.compiler.code_builder import CodeBuilder

Fragment: TypeAlias = str | ast.expr


class FragmentCoalescingMixin:
    """Mixin collecting markup fragments and flushing them as one append.

    Host attributes are declared in the TYPE_CHECKING block.
    """

    if TYPE_CHECKING:
        _code: CodeBuilder
        _pending: list[Fragment]
        _pending_lineno: int | None

    def _emit_markup(self, text: str, lineno: int) -> None:
        """Queue literal markup."""
        if not text:
            return
        if not self._pending:
            self._pending_lineno = lineno
        if self._pending and isinstance(self._pending[-1], str):
            self._pending[-1] += text
        else:
            self._pending.append(text)

    def _emit_value(self, expr: ast.expr, lineno: int) -> None:
        """Queue an expression evaluating to markup text."""
        if not self._pending:
            self._pending_lineno = lineno
        self._pending.append(expr)

    def _flush(self) -> None:
        """Write pending fragments as one append statement."""
        if not self._pending:
            return
        statement = ast.Expr(
            value=ast.Call(
                func=ast.Attribute(
                    value=ast.Name(id=BUFFER_PARAM, ctx=ast.Load()),
                    attr="append",
                    ctx=ast.Load(),
                ),
                args=[_join_fragments(self._pending)],
                keywords=[],
            )
        )
        try:
            line = ast.unparse(statement)
        except ValueError:
            # f-string expression parts the unparser cannot quote
            statement.value.args = [_concat_fragments(self._pending)]
            line = ast.unparse(statement)
        self._code.add_line(line, self._pending_lineno)
        self._pending = []
        self._pending_lineno = None


def _join_fragments(fragments: list[Fragment]) -> ast.expr:
    if len(fragments) == 1 and isinstance(fragments[0], str):
        return ast.Constant(value=fragments[0])
    return ast.JoinedStr(
        values=[
            ast.Constant(value=part)
            if isinstance(part, str)
            else ast.FormattedValue(value=part, conversion=-1, format_spec=None)
            for part in fragments
        ]
    )


def _concat_fragments(fragments: list[Fragment]) -> ast.expr:
    result: ast.expr | None = None
    for part in fragments:
        node = ast.Constant(value=part) if isinstance(part, str) else part
        result = node if result is None else ast.BinOp(left=result, op=ast.Add(), right=node)
    assert result is not None
    return result
