"""Source maps and traceback rewriting for compiled units.

Generated code is compiled under a synthetic filename such as
``<tagcraft html page app/views.py:12>``. The SourceMap registered under that
filename maps generated line numbers back to lines of the file that defines
the template. When an error escapes a compiled unit, every traceback entry
that belongs to a compiled unit is replaced with an entry pointing at the
original file and line, the same way Jinja fakes template frames: a
``raise`` is compiled at the original line under the original filename and
its traceback entry spliced in.

The store is process-wide and append-only: compiled units live as long as
the process, and so do their source maps.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import TracebackType

from tagcraft.compiler.names import FACTORY_NAME


@dataclass(frozen=True, slots=True)
class SourceMap:
    """Generated-line → original-line mapping of one compiled unit.

    Attributes:
        filename: Synthetic filename the generated code was compiled under
        source_filename: File defining the template
        lines: Generated line number → original line number
    """

    filename: str
    source_filename: str
    lines: Mapping[int, int] = field(default_factory=dict)

    def lookup(self, generated_line: int) -> int | None:
        """Original line for a generated line, or None if unmapped."""
        return self.lines.get(generated_line)

    def location(self, generated_line: int) -> str:
        """``file:line`` of a generated line; unmapped lines render as ``?(n)``."""
        lineno = self.lookup(generated_line)
        if lineno is None:
            return f"{self.source_filename}:?({generated_line})"
        return f"{self.source_filename}:{lineno}"


SOURCE_MAPS: dict[str, SourceMap] = {}


def synthetic_filename(name: str, mode: str, source_filename: str, lineno: int) -> str:
    """Filename used when compiling the generated code of a template."""
    return f"<tagcraft {mode} {name} {source_filename}:{lineno}>"


def register_source_map(source_map: SourceMap) -> None:
    """Make a source map available to traceback rewriting."""
    SOURCE_MAPS[source_map.filename] = source_map


def get_source_map(filename: str) -> SourceMap | None:
    return SOURCE_MAPS.get(filename)


def translate_backtrace(error: BaseException) -> BaseException:
    """Rewrite the traceback of an error raised inside compiled units.

    Entries whose code was compiled under a registered synthetic filename
    are replaced with entries at the original file and line; all other
    entries are kept as they are. The error object itself is returned, with
    its traceback replaced, so callers can ``raise`` it again.
    """
    frames: list[TracebackType] = []
    changed = False
    tb = error.__traceback__
    while tb is not None:
        source_map = SOURCE_MAPS.get(tb.tb_frame.f_code.co_filename)
        if source_map is not None:
            lineno = source_map.lookup(tb.tb_lineno)
            if lineno is not None:
                frames.append(_fake_traceback(error, tb, source_map, lineno))
                changed = True
                tb = tb.tb_next
                continue
        frames.append(tb)
        tb = tb.tb_next

    _hide_buffer_param(error)

    if not changed:
        return error

    tb_next: TracebackType | None = None
    for tb in reversed(frames):
        tb.tb_next = tb_next
        tb_next = tb
    return error.with_traceback(tb_next)


def _fake_traceback(
    error: BaseException, tb: TracebackType, source_map: SourceMap, lineno: int
) -> TracebackType:
    """Produce a traceback entry that looks like it came from the template source."""
    code = compile(
        "\n" * (lineno - 1) + "raise __tagcraft_exception__",
        source_map.source_filename,
        "exec",
    )
    name = tb.tb_frame.f_code.co_name
    code = code.replace(co_name=name, co_qualname=name)
    globals_ = {
        "__name__": source_map.source_filename,
        "__file__": source_map.source_filename,
        "__tagcraft_exception__": error,
    }
    locals_ = {
        key: value
        for key, value in tb.tb_frame.f_locals.items()
        if not (key.startswith("__") and key.endswith("__"))
    }
    try:
        exec(code, globals_, locals_)
    except BaseException:
        return sys.exc_info()[2].tb_next  # type: ignore[union-attr, return-value]
    return tb


# "__tagcraft_factory__.<locals>.page() takes 2 positional arguments but 3 were given"
_ARITY_MESSAGE = re.compile(
    rf"^{FACTORY_NAME}\.<locals>\.(?P<name>[\w.<>]+)\(\) takes (?P<expected>\d+|from \d+ to \d+) "
    r"positional arguments? but (?P<given>\d+) (?:was|were) given$"
)
_UNIT_QUALNAME = re.compile(rf"{FACTORY_NAME}\.<locals>\.(?:[\w]+\.<locals>\.)*")


def _hide_buffer_param(error: BaseException) -> None:
    """Remove the synthetic buffer parameter from arity error messages."""
    if not isinstance(error, TypeError) or not error.args or not isinstance(error.args[0], str):
        return
    message = error.args[0]
    match = _ARITY_MESSAGE.match(message)
    if match is not None:
        name = match["name"].rsplit("<locals>.", 1)[-1]
        expected = re.sub(r"\d+", lambda m: str(int(m[0]) - 1), match["expected"])
        given = int(match["given"]) - 1
        plural = "" if expected == "1" else "s"
        verb = "was" if given == 1 else "were"
        message = f"{name}() takes {expected} positional argument{plural} but {given} {verb} given"
    else:
        message = _UNIT_QUALNAME.sub("", message)
    error.args = (message, *error.args[1:])
