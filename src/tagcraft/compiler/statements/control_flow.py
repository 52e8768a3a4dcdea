"""Control flow compilation for the tagcraft compiler.

Python compound statements are kept as they are; only their bodies are
generated here, because the translator may have put specialized nodes in
them. Every header flushes pending markup first and every body flushes
before it ends, so markup never leaks across a branch.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tagcraft.compiler.code_builder import CodeBuilder
    from tagcraft.nodes import Statement


class ControlFlowMixin:
    """Mixin for if/for/while/with/try/match statements."""

    if TYPE_CHECKING:
        _code: CodeBuilder

        def _flush(self) -> None: ...
        def _compile_suite(self, body: Sequence[Statement]) -> None: ...

    def _compile_if(self, node: ast.If) -> None:
        self._flush()
        keyword = "if"
        while True:
            self._code.add_line(f"{keyword} {ast.unparse(node.test)}:", node.lineno)
            self._compile_suite(node.body)
            orelse = node.orelse
            if len(orelse) == 1 and isinstance(orelse[0], ast.If):
                node, keyword = orelse[0], "elif"
                continue
            self._compile_else(orelse)
            return

    def _compile_for(self, node: ast.For) -> None:
        self._flush()
        self._code.add_line(
            f"for {ast.unparse(node.target)} in {ast.unparse(node.iter)}:", node.lineno
        )
        self._compile_suite(node.body)
        self._compile_else(node.orelse)

    def _compile_while(self, node: ast.While) -> None:
        self._flush()
        self._code.add_line(f"while {ast.unparse(node.test)}:", node.lineno)
        self._compile_suite(node.body)
        self._compile_else(node.orelse)

    def _compile_with(self, node: ast.With) -> None:
        self._flush()
        items = ", ".join(ast.unparse(item) for item in node.items)
        self._code.add_line(f"with {items}:", node.lineno)
        self._compile_suite(node.body)

    def _compile_try(self, node: ast.Try | ast.TryStar) -> None:
        self._flush()
        self._code.add_line("try:", node.lineno)
        self._compile_suite(node.body)
        keyword = "except*" if isinstance(node, ast.TryStar) else "except"
        for handler in node.handlers:
            header = keyword
            if handler.type is not None:
                header += f" {ast.unparse(handler.type)}"
            if handler.name:
                header += f" as {handler.name}"
            self._code.add_line(f"{header}:", handler.lineno)
            self._compile_suite(handler.body)
        self._compile_else(node.orelse)
        if node.finalbody:
            self._code.add_line("finally:")
            self._compile_suite(node.finalbody)

    def _compile_match(self, node: ast.Match) -> None:
        self._flush()
        self._code.add_line(f"match {ast.unparse(node.subject)}:", node.lineno)
        self._code.indent()
        for case in node.cases:
            header = f"case {ast.unparse(case.pattern)}"
            if case.guard is not None:
                header += f" if {ast.unparse(case.guard)}"
            self._code.add_line(f"{header}:", case.pattern.lineno)
            self._compile_suite(case.body)
        self._code.dedent()

    def _compile_else(self, orelse: Sequence[Statement]) -> None:
        if orelse:
            self._code.add_line("else:")
            self._compile_suite(orelse)
