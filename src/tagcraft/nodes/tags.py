"""Markup-emitting nodes: elements, text and builtin wrappers."""

from __future__ import annotations

import ast
from collections.abc import Sequence
from dataclasses import dataclass

from tagcraft.nodes.base import Block, CallNode


@dataclass(frozen=True, slots=True)
class TagNode(CallNode):
    """Markup element: ``h1("Hi")``, ``with div(class_="x"):``

    Exactly one of ``tag`` (static, already converted) and ``tag_expr``
    (evaluated and converted at render time) is set. ``loop`` holds the
    ``_for=`` iterable, ``loop_target`` the ``as`` target bound per item.
    """

    tag: str | None = None
    tag_expr: ast.expr | None = None
    attributes: Sequence[ast.keyword] = ()
    inner_text: ast.expr | None = None
    block: Block | None = None
    loop: ast.expr | None = None
    loop_target: ast.expr | None = None
    is_void: bool = False


@dataclass(frozen=True, slots=True)
class TextNode(CallNode):
    """Escaped text without a wrapping element: ``text(value)``"""

    value: ast.expr | None = None


@dataclass(frozen=True, slots=True)
class RawNode(CallNode):
    """Unescaped text: ``raw(value)``"""

    value: ast.expr | None = None


@dataclass(frozen=True, slots=True)
class BuiltinNode(CallNode):
    """Builtin markup helper.

    - ``html`` / ``html5``: doctype plus ``<html>`` root around the block
    - ``markdown``: converted markdown text
    - ``tag``: element with a dynamic name, compiled through ``element``
    """

    tag: str = ""
    args: Sequence[ast.expr] = ()
    keywords: Sequence[ast.keyword] = ()
    block: Block | None = None
    element: TagNode | None = None
