"""Base node classes for the specialized template tree."""

from __future__ import annotations

import ast
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all specialized nodes.

    All nodes track their source location for error reporting and the
    source map. Nodes are immutable; the Python AST nodes they reference
    are shared with the parsed module and never modified.

    """

    lineno: int
    col_offset: int


@dataclass(frozen=True, slots=True)
class Block(Node):
    """A child block attached to a call.

    Comes from a ``with call(...) [as target]:`` body or from a lambda
    literal. ``params`` is the block's full parameter list, synthetic
    buffer parameter first.
    """

    params: ast.arguments
    body: Sequence[Statement]


@dataclass(frozen=True, slots=True)
class CallNode(Node):
    """A recognized call shape, wrapping the originating ``ast.Call``."""

    call: ast.Call


# A statement in a translated body: a specialized node, or a Python statement
# (compound statements are rebuilt with translated bodies).
Statement: TypeAlias = Node | ast.stmt
