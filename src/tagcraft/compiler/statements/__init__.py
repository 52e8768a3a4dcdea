"""Statement compilation for the tagcraft compiler.

Provides mixins for turning specialized nodes and Python statements into
generated code.

The statements package is organized into logical modules:
- basic: Plain statements, return, text and raw output
- control_flow: if, for, while, with, try, match
- tags: Elements (HTML/XML markup, JSON keys)
- components: Calls into other compiled units and the child block
- special_blocks: defer and the builtin html/html5/markdown/tag helpers

"""

from __future__ import annotations

from tagcraft.compiler.statements.basic import BasicStatementMixin
from tagcraft.compiler.statements.components import ComponentCompilationMixin
from tagcraft.compiler.statements.control_flow import ControlFlowMixin
from tagcraft.compiler.statements.special_blocks import SpecialBlockMixin
from tagcraft.compiler.statements.tags import TagCompilationMixin


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    TagCompilationMixin,
    ComponentCompilationMixin,
    SpecialBlockMixin,
):
    """Combined mixin for compiling all statement types.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks in each individual mixin.

    """
