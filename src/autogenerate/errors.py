"""Exception hierarchy for autogenerate.

A rule that matches nothing is not an error: the dispatcher reports it as a
``NotFound`` outcome so the import system can consult the next finder.
"""

from __future__ import annotations


class AutoGenerateError(Exception):
    """Base class for all autogenerate errors."""


class PatternCompileError(AutoGenerateError, ValueError):
    """A regular expression supplied as a rule pattern is malformed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid pattern {source!r}: {reason}")


class GenerationError(AutoGenerateError, ImportError):
    """A declarative operation or injected source failed during generation.

    Subclasses ImportError so the import statement that triggered the
    generation reports it as a failed load of the target module.
    """

    def __init__(self, message: str, module_name: str | None = None):
        super().__init__(message, name=module_name)
        self.module_name = module_name


class DependencyResolutionError(GenerationError):
    """A module declared as a dependency could not be imported."""

    def __init__(self, dependency: str, module_name: str | None = None, reason: str = ""):
        self.dependency = dependency
        msg = f"Cannot resolve dependency {dependency!r}"
        if module_name:
            msg += f" of {module_name!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, module_name=module_name)


class NoActiveContextError(AutoGenerateError, RuntimeError):
    """A declaration was used outside of a running generator."""


class RegistryFrozenError(AutoGenerateError, RuntimeError):
    """A rule was registered after the registry served its first lookup."""


class ConfigError(AutoGenerateError, ValueError):
    """Configuration or rule file is invalid."""
