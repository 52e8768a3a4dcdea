"""Component call compilation for the tagcraft compiler.

Calls into other compiled units all use the same convention: the current
buffer first, then the call's own arguments, then ``block=`` when a child
block is attached. Pending markup is flushed before each call.

    Card(title=t)               __unit__(Card)(__buffer__, title=t)
    render(widget, 1)           __render__(widget)(__buffer__, 1)
    card(x)  (extension)        __extension__('card')(__buffer__, x)
    render_yield(n=2)           __require_block__(block, 'page')(__buffer__, n=2)
    render_children()           if block is not None: block(__buffer__)
    block(item)                 __require_block__(block, 'page')(__buffer__, item)

Attached blocks (``with Card() as x:``) and inline lambdas
(``render(lambda: ...)``) become nested functions defined right before the
call, taking the buffer as first parameter.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from tagcraft.compiler.names import (
    BLOCK_PARAM,
    BUFFER_PARAM,
    EXTENSION,
    RENDER,
    REQUIRE_BLOCK,
    UNIT,
)
from tagcraft.compiler.utils import call, load

if TYPE_CHECKING:
    from tagcraft.compiler.code_builder import CodeBuilder
    from tagcraft.environment.exceptions import ErrorCode, TemplateCompileError
    from tagcraft.nodes import (
        Block,
        BlockInvocationNode,
        ConstTagNode,
        ExtensionTagNode,
        RenderChildrenNode,
        RenderNode,
        RenderYieldNode,
        Statement,
    )


class ComponentCompilationMixin:
    """Mixin for compiling calls into other compiled units."""

    if TYPE_CHECKING:
        _code: CodeBuilder
        _uses_block: bool
        _unit_name: str

        def _flush(self) -> None: ...
        def _unique_name(self, prefix: str) -> str: ...
        def _compile_function(
            self,
            name: str,
            params: ast.arguments,
            body: Sequence[Statement],
            lineno: int,
            *,
            is_unit: bool = False,
        ) -> None: ...
        def _error(self, message: str, node: Any, code: ErrorCode = ...) -> TemplateCompileError: ...

    def _compile_const_tag(self, node: ConstTagNode) -> None:
        assert node.ref is not None
        self._emit_unit_call(call(UNIT, [node.ref]), node.args, node.keywords, node.block, node.lineno)

    def _compile_extension_tag(self, node: ExtensionTagNode) -> None:
        target = call(EXTENSION, [ast.Constant(value=node.key)])
        self._emit_unit_call(target, node.args, node.keywords, node.block, node.lineno)

    def _compile_render(self, node: RenderNode) -> None:
        if node.inline is not None:
            if node.block is not None:
                raise self._error("An inline lambda passed to render() cannot take a block", node)
            self._flush()
            name = self._compile_block_function(node.inline, "render")
            self._emit_unit_call(load(name), node.args, node.keywords, None, node.lineno)
            return
        assert node.target is not None
        target = call(RENDER, [node.target])
        self._emit_unit_call(target, node.args, node.keywords, node.block, node.lineno)

    def _compile_block_invocation(self, node: BlockInvocationNode) -> None:
        self._uses_block = True
        target = call(REQUIRE_BLOCK, [load(node.name), ast.Constant(value=self._unit_name)])
        self._emit_unit_call(target, node.args, node.keywords, None, node.lineno)

    def _compile_render_yield(self, node: RenderYieldNode) -> None:
        self._uses_block = True
        target = call(REQUIRE_BLOCK, [load(BLOCK_PARAM), ast.Constant(value=self._unit_name)])
        self._emit_unit_call(target, node.args, node.keywords, None, node.lineno)

    def _compile_render_children(self, node: RenderChildrenNode) -> None:
        self._uses_block = True
        self._flush()
        self._code.add_line(f"if {BLOCK_PARAM} is not None:", node.lineno)
        self._code.indent()
        self._emit_unit_call(load(BLOCK_PARAM), node.args, node.keywords, None, node.lineno)
        self._code.dedent()

    def _emit_unit_call(
        self,
        target: ast.expr,
        args: Sequence[ast.expr],
        keywords: Sequence[ast.keyword],
        block: Block | None,
        lineno: int,
    ) -> None:
        """Emit ``target(__buffer__, *args, **keywords[, block=...])``."""
        self._flush()
        keywords = list(keywords)
        if block is not None:
            name = self._compile_block_function(block, "block")
            keywords.append(ast.keyword(arg=BLOCK_PARAM, value=load(name)))
        statement = ast.Expr(value=call(target, [load(BUFFER_PARAM), *args], keywords))
        self._code.add_line(ast.unparse(statement), lineno)

    def _compile_block_function(self, block: Block, prefix: str) -> str:
        """Define a child block as a nested function and return its name."""
        name = self._unique_name(prefix)
        self._compile_function(name, block.params, block.body, block.lineno)
        return name
