"""tagcraft compiler: template functions to buffer-appending Python code.

See ``tagcraft.compiler.core`` for the pipeline.
"""

from tagcraft.compiler.core import Compiler, GeneratedUnit
from tagcraft.compiler.source import TemplateSource, load_source
from tagcraft.compiler.source_map import SourceMap, translate_backtrace
from tagcraft.compiler.translator import TagTranslator

__all__ = [
    "Compiler",
    "GeneratedUnit",
    "SourceMap",
    "TagTranslator",
    "TemplateSource",
    "load_source",
    "translate_backtrace",
]
