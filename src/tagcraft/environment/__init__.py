"""tagcraft environment: configuration, extension registry and errors."""

from tagcraft.environment.core import Environment, get_default_environment
from tagcraft.environment.exceptions import (
    ErrorCode,
    JsonStructureError,
    MissingBlockError,
    TemplateArgumentError,
    TemplateCompileError,
    TemplateError,
    TemplateRuntimeError,
    UncompilableTemplateError,
)
from tagcraft.environment.registry import ExtensionRegistry

__all__ = [
    "Environment",
    "ErrorCode",
    "ExtensionRegistry",
    "JsonStructureError",
    "MissingBlockError",
    "TemplateArgumentError",
    "TemplateCompileError",
    "TemplateError",
    "TemplateRuntimeError",
    "UncompilableTemplateError",
    "get_default_environment",
]
