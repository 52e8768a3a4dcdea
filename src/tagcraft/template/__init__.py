"""Template units and their compiled form."""

from tagcraft.template.core import AppliedTemplate, CompiledUnit, Template
from tagcraft.template.json_buffer import JsonBuffer
from tagcraft.utils.html import Markup

__all__ = [
    "AppliedTemplate",
    "CompiledUnit",
    "JsonBuffer",
    "Markup",
    "Template",
]
