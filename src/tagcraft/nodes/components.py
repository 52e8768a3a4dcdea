"""Nodes that call into other compiled units or change emission order."""

from __future__ import annotations

import ast
from collections.abc import Sequence
from dataclasses import dataclass

from tagcraft.nodes.base import Block, CallNode


@dataclass(frozen=True, slots=True)
class ConstTagNode(CallNode):
    """Call of another template unit by name: ``Card(title="x")``, ``ui.Card()``"""

    name: str = ""
    ref: ast.expr | None = None
    args: Sequence[ast.expr] = ()
    keywords: Sequence[ast.keyword] = ()
    block: Block | None = None


@dataclass(frozen=True, slots=True)
class RenderNode(CallNode):
    """Call of a computed unit: ``render(target, *args, **kwargs)``

    When the target is a lambda literal it is compiled inline as ``inline``
    and ``target`` is None.
    """

    target: ast.expr | None = None
    inline: Block | None = None
    args: Sequence[ast.expr] = ()
    keywords: Sequence[ast.keyword] = ()
    block: Block | None = None


@dataclass(frozen=True, slots=True)
class ExtensionTagNode(CallNode):
    """Call of a registered extension: ``card(...)`` after ``extension(card=...)``"""

    key: str = ""
    args: Sequence[ast.expr] = ()
    keywords: Sequence[ast.keyword] = ()
    block: Block | None = None


@dataclass(frozen=True, slots=True)
class RenderYieldNode(CallNode):
    """Invoke the caller-supplied child block, which is required."""

    args: Sequence[ast.expr] = ()
    keywords: Sequence[ast.keyword] = ()


@dataclass(frozen=True, slots=True)
class RenderChildrenNode(CallNode):
    """Invoke the caller-supplied child block if there is one."""

    args: Sequence[ast.expr] = ()
    keywords: Sequence[ast.keyword] = ()


@dataclass(frozen=True, slots=True)
class BlockInvocationNode(CallNode):
    """Direct call of the child block parameter: ``block(item)``"""

    name: str = "block"
    args: Sequence[ast.expr] = ()
    keywords: Sequence[ast.keyword] = ()


@dataclass(frozen=True, slots=True)
class DeferNode(CallNode):
    """Block evaluated after the rest of the unit: ``with defer():``"""

    block: Block | None = None
