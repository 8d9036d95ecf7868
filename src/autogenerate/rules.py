"""Rule registry: ordered (pattern, generator) pairs.

Rules are tried in registration order and the first match wins. A list
pattern registers one rule per entry, all sharing the same generator, at
the position the list was registered.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from autogenerate.errors import RegistryFrozenError
from autogenerate.logging import get_logger
from autogenerate.patterns import DEFAULT_SEPARATOR, Pattern, expand_pattern_spec

if TYPE_CHECKING:
    from autogenerate.context import GenerationContext

logger = get_logger("rules")

Generator = Callable[..., Any]


def accepts_context(generator: Generator) -> bool:
    """Check whether a generator expects the context as its first argument."""
    try:
        signature = inspect.signature(generator)
    except (TypeError, ValueError):
        return True
    for param in signature.parameters.values():
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            # A defaulted parameter is a bound value, not a slot for the context
            return param.default is param.empty
        if param.kind == param.VAR_POSITIONAL:
            return True
    return False


@dataclass(frozen=True)
class Rule:
    """A compiled pattern and the generator it triggers."""

    pattern: Pattern
    generator: Generator
    takes_context: bool = field(default=True, compare=False)

    @classmethod
    def create(cls, pattern: Pattern, generator: Generator) -> Rule:
        return cls(pattern, generator, accepts_context(generator))

    @property
    def name(self) -> str:
        """Human-readable rule label."""
        fn = getattr(self.generator, "__qualname__", None) or repr(self.generator)
        return f"{self.pattern.source} -> {fn}"

    def invoke(self, ctx: GenerationContext) -> None:
        """Run the generator, passing the context if it takes one."""
        if self.takes_context:
            self.generator(ctx)
        else:
            self.generator()


class RuleRegistry:
    """Ordered rules owned by one loader definition.

    The registry is mutable until it serves its first lookup; from then on
    it is a read-only snapshot.
    """

    def __init__(self, separator: str = DEFAULT_SEPARATOR) -> None:
        self.separator = separator
        self._rules: list[Rule] = []
        self._frozen = False

    def register(self, spec: Any, generator: Generator) -> list[Rule]:
        """Register a generator for a pattern or list of patterns.

        Args:
            spec: Glob, exact name, compiled regex, Pattern, or a list of them
            generator: Callable run when a rule matches

        Returns:
            The rules added, in order

        Raises:
            RegistryFrozenError: If the registry has already served lookups
            TypeError: If the generator is not callable
            PatternCompileError: If a regex pattern is malformed
        """
        if self._frozen:
            raise RegistryFrozenError("Rules cannot be added after the first lookup")
        if not callable(generator):
            raise TypeError(f"Generator must be callable, got {type(generator).__name__}")

        added = [Rule.create(p, generator) for p in expand_pattern_spec(spec, self.separator)]
        self._rules.extend(added)
        for rule in added:
            logger.debug("rule registered", rule=rule.name, position=len(self._rules))
        return added

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(tuple(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"RuleRegistry({len(self._rules)} rules, {state})"
