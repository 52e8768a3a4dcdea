"""Specialized node types produced by the tag translator.

The node set is closed: the code generator dispatches on the class name of
each node and on Python statement classes for everything else.
"""

from tagcraft.nodes.base import Block, CallNode, Node, Statement
from tagcraft.nodes.components import (
    BlockInvocationNode,
    ConstTagNode,
    DeferNode,
    ExtensionTagNode,
    RenderChildrenNode,
    RenderNode,
    RenderYieldNode,
)
from tagcraft.nodes.tags import BuiltinNode, RawNode, TagNode, TextNode

__all__ = [
    "Block",
    "BlockInvocationNode",
    "BuiltinNode",
    "CallNode",
    "ConstTagNode",
    "DeferNode",
    "ExtensionTagNode",
    "Node",
    "RawNode",
    "RenderChildrenNode",
    "RenderNode",
    "RenderYieldNode",
    "Statement",
    "TagNode",
    "TextNode",
]
