"""autogenerate: generate Python modules on import from pattern rules."""

from autogenerate.config import AutoGenConfig
from autogenerate.context import GenerationContext, activate, current_context
from autogenerate.dispatch import Dispatcher, Generated, NotFound, RuleMatch
from autogenerate.errors import (
    AutoGenerateError,
    ConfigError,
    DependencyResolutionError,
    GenerationError,
    NoActiveContextError,
    PatternCompileError,
    RegistryFrozenError,
)
from autogenerate.loader import AutoGenerator, canonical_name
from autogenerate.module import SynthesizedModule
from autogenerate.patterns import (
    Captures,
    ExactPattern,
    GlobPattern,
    Pattern,
    RegexPattern,
    compile_glob,
    compile_pattern,
    expand_pattern_spec,
    regex,
)
from autogenerate.rules import Rule, RuleRegistry

__version__ = "0.1.0"

__all__ = [
    "AutoGenConfig",
    "AutoGenerateError",
    "AutoGenerator",
    "Captures",
    "ConfigError",
    "DependencyResolutionError",
    "Dispatcher",
    "ExactPattern",
    "GenerationContext",
    "GenerationError",
    "Generated",
    "GlobPattern",
    "NoActiveContextError",
    "NotFound",
    "Pattern",
    "PatternCompileError",
    "RegexPattern",
    "RegistryFrozenError",
    "Rule",
    "RuleMatch",
    "RuleRegistry",
    "SynthesizedModule",
    "activate",
    "canonical_name",
    "compile_glob",
    "compile_pattern",
    "current_context",
    "expand_pattern_spec",
    "regex",
]
