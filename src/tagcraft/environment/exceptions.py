"""Exceptions for the tagcraft template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateCompileError        # Translation error (void content, bad block use)
├── UncompilableTemplateError   # Template source cannot be located or parsed
├── TemplateArgumentError       # Pre-flight parameter verification failed
└── TemplateRuntimeError        # Render-time error raised by the runtime
    ├── MissingBlockError       # render_yield() without a child block
    └── JsonStructureError      # Mixed array items and object keys

Errors raised by user code inside a compiled unit are not wrapped: they keep
their type and identity and only have their traceback rewritten to point at
the template source (see ``tagcraft.compiler.source_map``).

Every TemplateError carries an ErrorCode and can render itself as a
terminal diagnostic with ``format_compact()``:

    ```
    T-CMP-001: Void element 'br' cannot have inner text or a block
      --> app/views.py:12
       |
      11 | def page():
    > 12 |     br("oops")
       |     ^
       |
      Docs: https://tagcraft.dev/docs/errors/#t-cmp-001
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tagcraft.environment import terminal

_DOCS_BASE = "https://tagcraft.dev/docs/errors"

_CATEGORIES = {"CMP": "compile", "SRC": "source", "RUN": "runtime"}


class ErrorCode(Enum):
    """Searchable error codes, ``T-{CATEGORY}-{NUMBER}``.

    CMP codes are raised while compiling, SRC codes when a template's source
    cannot be used, RUN codes while rendering.
    """

    VOID_ELEMENT_CONTENT = "T-CMP-001"
    BLOCK_INVOCATION_WITH_BLOCK = "T-CMP-002"
    INVALID_CALL = "T-CMP-003"
    UNSUPPORTED_STATEMENT = "T-CMP-004"

    SOURCE_NOT_FOUND = "T-SRC-001"
    AMBIGUOUS_SOURCE = "T-SRC-002"

    MISSING_BLOCK = "T-RUN-001"
    ARGUMENT_ERROR = "T-RUN-002"
    JSON_STRUCTURE = "T-RUN-003"
    RUNTIME_ERROR = "T-RUN-004"

    @property
    def docs_url(self) -> str:
        return f"{_DOCS_BASE}/#{self.value.lower()}"

    @property
    def category(self) -> str:
        """``compile``, ``source`` or ``runtime``."""
        _, prefix, _ = self.value.split("-")
        return _CATEGORIES.get(prefix, "unknown")


# ─────────────────────────────────────────────────────────────────────────────
# Source snippets
# ─────────────────────────────────────────────────────────────────────────────

_GUTTER = "   |"


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Numbered source lines around an error.

    Attributes:
        lines: ``(line_number, text)`` pairs, in order
        error_line: Line the error points at
        column: Column of the caret under the error line, if known
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        gutter = terminal.dim_text(_GUTTER)
        rendered = [gutter]
        for lineno, text in self.lines:
            rendered.append(
                terminal.format_source_line(lineno, text, is_error=lineno == self.error_line)
            )
            if lineno == self.error_line and self.column is not None:
                rendered.append(f"{gutter} {terminal.error_line(' ' * self.column + '^')}")
        rendered.append(gutter)
        return "\n".join(rendered)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 1,
    column: int | None = None,
) -> SourceSnippet:
    """Cut ``context_lines`` lines on each side of ``error_line`` out of ``source``."""
    first = max(1, error_line - context_lines)
    last = error_line + context_lines
    lines = tuple(
        (number, text)
        for number, text in enumerate(source.splitlines(), start=1)
        if first <= number <= last
    )
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


# ─────────────────────────────────────────────────────────────────────────────
# Exceptions
# ─────────────────────────────────────────────────────────────────────────────


class TemplateError(Exception):
    """Base exception for all tagcraft errors.

    Example:
        >>> try:
        ...     page.render()
        ... except TemplateError as e:
        ...     log.error(e.format_compact())

    Attributes:
        message: The bare error message
        code: ErrorCode identifying the error kind
    """

    code: ErrorCode | None = None

    def __init__(self, message: str, *, code: ErrorCode | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(self._describe())

    def _describe(self) -> str:
        """Text of ``str(error)``."""
        return self.message

    def _compact_lines(self) -> list[str]:
        """Lines of the diagnostic after the code, the first being the summary."""
        return self._describe().splitlines() or [""]

    def format_compact(self) -> str:
        """Multi-line diagnostic: code and message, details, docs link."""
        summary, *details = self._compact_lines()
        lines = [terminal.format_error_header(self.code.value if self.code else None, summary)]
        lines.extend(details)
        if self.code:
            lines.append(f"  Docs: {terminal.docs_url(self.code.docs_url)}")
        return "\n".join(lines)


class TemplateCompileError(TemplateError):
    """A recognized call shape is used incorrectly.

    For example a void element given inner text, or the child block invoked
    with a block of its own. Carries the location of the offending call.
    """

    code: ErrorCode | None = ErrorCode.INVALID_CALL

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        *,
        code: ErrorCode | None = None,
    ):
        self.lineno = lineno
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        super().__init__(message, code=code)

    @property
    def location(self) -> str:
        """``file:line`` of the error."""
        filename = self.filename or "<template>"
        return f"{filename}:{self.lineno}" if self.lineno else filename

    def _describe(self) -> str:
        return f"{self.message}\n  --> {self.location}"

    def _compact_lines(self) -> list[str]:
        lines = [self.message, f"  --> {terminal.location(self.location)}"]
        if self.source and self.lineno:
            snippet = build_source_snippet(self.source, self.lineno, column=self.col_offset)
            lines.append(snippet.format())
        return lines


class UncompilableTemplateError(TemplateError):
    """The template's source cannot be located or statically parsed.

    Raised instead of the parser's own exception types for functions built
    at runtime (``exec``/``eval``), defined in an interactive session, or
    whose source file changed since import.
    """

    code: ErrorCode | None = ErrorCode.SOURCE_NOT_FOUND


class TemplateArgumentError(TemplateError):
    """Arguments passed to render() do not match the template's parameters."""

    code: ErrorCode | None = ErrorCode.ARGUMENT_ERROR

    def __init__(self, message: str, *, template_name: str | None = None):
        self.template_name = template_name
        super().__init__(message)

    def _describe(self) -> str:
        if self.template_name:
            return f"{self.message} (template {self.template_name!r})"
        return self.message


class TemplateRuntimeError(TemplateError):
    """Render-time error raised by the tagcraft runtime.

    Attributes:
        template_name: Template being rendered, if known
        suggestion: How to fix it
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        suggestion: str | None = None,
    ):
        self.template_name = template_name
        self.suggestion = suggestion
        super().__init__(message)

    def _describe(self) -> str:
        lines = [self.message]
        if self.template_name:
            lines.append(f"  Template: {terminal.location(self.template_name)}")
        if self.suggestion:
            lines.append(f"  Suggestion: {terminal.hint(self.suggestion)}")
        return "\n".join(lines)


class MissingBlockError(TemplateRuntimeError):
    """render_yield() was reached but the caller supplied no child block."""

    code: ErrorCode | None = ErrorCode.MISSING_BLOCK

    def __init__(self, template_name: str | None = None):
        super().__init__(
            "No block given",
            template_name=template_name,
            suggestion="Pass a child block with block=..., or use render_children() "
            "to make the block optional",
        )


class JsonStructureError(TemplateRuntimeError):
    """Array items and object keys were mixed at the same JSON level."""

    code: ErrorCode | None = ErrorCode.JSON_STRUCTURE
