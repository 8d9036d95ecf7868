"""Declarations usable inside a generator without a context argument.

Each function acts on the innermost module being generated, so a generator
can be written as a zero-argument function:

    from autogenerate.declare import capture, defines, extends, module_name, uses

    @MyLoader.requiring("My.*")
    def flipper():
        name = capture(1)

        extends(f"My.Base.{name}")
        uses("math", "sqrt")

        defines("$scalar", 14)
        defines("@array", [1, 2, 3])
        defines("%mapping", {"x": 1, "y": 2})

        defines("package_name", lambda: module_name())
        defines("short_name", lambda: name)

Calling any of these outside a generator raises NoActiveContextError.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from autogenerate.context import current_context


def module_name() -> str:
    """Name of the module being generated."""
    return current_context().module_name


def capture(index: int | str) -> str | None:
    """Capture ``index`` of the active rule match (1-based, or a group name)."""
    return current_context().captures[index]


def extends(*bases: Any) -> None:
    """Add supertypes to the module being generated."""
    current_context().declare_supertypes(*bases)


def uses(name: str, *names: str) -> Any:
    """Import ``name``, binding ``names`` from it (or the package itself)."""
    return current_context().declare_dependency(name, *names)


def requires(name: str) -> Any:
    """Import ``name`` and bind its top-level package."""
    return current_context().declare_dependency(name)


def defines(name: str, value: Any) -> None:
    """Bind a member; see GenerationContext.defines for the sigils."""
    current_context().defines(name, value)


def generate_from(source: str, filename: str | None = None) -> None:
    """Execute source text inside the module being generated."""
    current_context().inject_source(source, filename)


def source_code(text: str) -> str:
    """Return ``text`` unchanged; reads well next to generate_from()."""
    return text


def source_file(path: str | Path) -> str:
    """Read a source file for generate_from()."""
    return Path(path).read_text(encoding="utf-8")
