"""Pytest configuration and fixtures for tagcraft tests."""

import pytest

from tagcraft import Environment


@pytest.fixture
def env():
    """Create a basic tagcraft Environment."""
    return Environment(debug=False)


@pytest.fixture
def debug_env():
    """Create an Environment that logs generated code."""
    return Environment(debug=True)


@pytest.fixture
def no_color(monkeypatch):
    """Disable terminal colors for deterministic diagnostics."""
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")


def template_line(template, offset: int) -> int:
    """Absolute line number of the line ``offset`` lines below a template's first line.

    The first line is the decorator line for decorated functions.
    """
    return template.func.__code__.co_firstlineno + offset


def assert_contains(result: str, *expected_parts: str) -> None:
    """Assert the rendered result contains all expected parts."""
    for part in expected_parts:
        assert part in result, (
            f"Rendered output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {result!r}"
        )
