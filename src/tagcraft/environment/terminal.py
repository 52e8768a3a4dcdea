"""ANSI styling for diagnostics.

Colors are used when stderr is a terminal, unless ``NO_COLOR`` is set;
``FORCE_COLOR`` turns them on regardless (https://no-color.org/). The
decision is taken on every call, so changing the environment at runtime
(as tests do) takes effect immediately.

Each diagnostic element has a role (``location``, ``hint``, ...) mapped to
a fixed style, so all error output is colored consistently.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

Style = Literal["bold", "dim", "red", "blue", "cyan", "yellow", "green"]

# SGR parameters, combined into one escape sequence per styled run
_SGR: dict[str, int] = {
    "bold": 1,
    "dim": 2,
    "red": 91,
    "blue": 94,
    "cyan": 36,
    "yellow": 33,
    "green": 32,
}
_RESET = "\033[0m"

_ESCAPE_SEQUENCE = re.compile(r"\x1b\[[0-9;]*m")


def supports_color() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stderr.isatty()


def colorize(text: str, *styles: Style) -> str:
    """Wrap text in one SGR sequence for ``styles``; plain text without color support.

    Example:
        >>> colorize("T-RUN-001", "red", "bold")  # with colors
        '\\x1b[91;1mT-RUN-001\\x1b[0m'
    """
    codes = [str(_SGR[style]) for style in styles if style in _SGR]
    if not codes or not supports_color():
        return text
    return f"\033[{';'.join(codes)}m{text}{_RESET}"


def strip_colors(text: str) -> str:
    return _ESCAPE_SEQUENCE.sub("", text)


# Diagnostic roles
_ROLES: dict[str, tuple[Style, ...]] = {
    "error_code": ("red", "bold"),
    "error_line": ("red",),
    "location": ("cyan",),
    "line_number": ("yellow",),
    "hint": ("green",),
    "dim": ("dim",),
    "docs_url": ("blue",),
}


def styled(role: str, text: str) -> str:
    """Style ``text`` for a diagnostic role."""
    return colorize(text, *_ROLES[role])


def error_code(text: str) -> str:
    return styled("error_code", text)


def error_line(text: str) -> str:
    return styled("error_line", text)


def location(text: str) -> str:
    return styled("location", text)


def line_number(text: str) -> str:
    return styled("line_number", text)


def hint(text: str) -> str:
    return styled("hint", text)


def dim_text(text: str) -> str:
    return styled("dim", text)


def docs_url(text: str) -> str:
    return styled("docs_url", text)


def format_error_header(code: str | None, message: str) -> str:
    """``T-CMP-001: message``, or just the message without a code."""
    return f"{error_code(code)}: {message}" if code else message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """One gutter line of a source snippet; the error line is marked with ``>``."""
    gutter = line_number(f"{'>' if is_error else ' '}{lineno:>3}")
    return f"{gutter} | {error_line(content) if is_error else dim_text(content)}"
