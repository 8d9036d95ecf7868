"""Dispatcher: first-match-wins rule evaluation and module generation."""

from __future__ import annotations

from dataclasses import dataclass

from autogenerate.context import GenerationContext, activate, active_context
from autogenerate.errors import DependencyResolutionError
from autogenerate.logging import get_logger
from autogenerate.module import SynthesizedModule
from autogenerate.patterns import Captures
from autogenerate.rules import Rule, RuleRegistry

logger = get_logger("dispatch")


@dataclass(frozen=True)
class RuleMatch:
    """A rule that matched a module name, with its captures."""

    rule: Rule
    captures: Captures
    position: int


@dataclass(frozen=True)
class Generated:
    """Outcome: a rule matched and the module was generated."""

    module_name: str
    module: SynthesizedModule
    rule: Rule

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    """Outcome: no rule matched; another finder may handle the name."""

    module_name: str

    def __bool__(self) -> bool:
        return False


Outcome = Generated | NotFound


class Dispatcher:
    """Walk a registry in order and run the generator of the first match.

    Nothing is cached: resolving the same name twice matches and generates
    twice. Skipping names that are already imported is left to the import
    system.
    """

    def __init__(self, registry: RuleRegistry, allow_source: bool = True) -> None:
        self.registry = registry
        self.allow_source = allow_source

    def match(self, module_name: str) -> RuleMatch | None:
        """Find the first rule matching ``module_name``."""
        self.registry.freeze()
        for position, rule in enumerate(self.registry):
            captures = rule.pattern.match(module_name)
            if captures is not None:
                logger.debug(
                    "rule matched",
                    module=module_name,
                    rule=rule.name,
                    position=position,
                )
                return RuleMatch(rule, captures, position)
        logger.debug("no rule matched", module=module_name)
        return None

    def generate(self, module_name: str, rule_match: RuleMatch) -> SynthesizedModule:
        """Run a matched rule's generator against a fresh, detached module.

        The module is not visible to other code until the caller publishes
        it, so a failing generator leaves nothing half-built behind.

        Raises:
            DependencyResolutionError: If ``module_name`` is already being
                generated further up the stack
        """
        parent = active_context()
        if parent is not None:
            in_flight = [ctx.module_name for ctx in parent.chain()]
            if module_name in in_flight:
                cycle = " -> ".join([*reversed(in_flight), module_name])
                raise DependencyResolutionError(
                    module_name, parent.module_name, f"circular generation: {cycle}"
                )

        module = SynthesizedModule(module_name)
        ctx = GenerationContext(
            module_name=module_name,
            captures=rule_match.captures,
            module=module,
            rule=rule_match.rule,
            parent=parent,
            allow_source=self.allow_source,
        )
        with logger.timed("generate", level="debug", module=module_name, depth=ctx.depth):
            with activate(ctx):
                rule_match.rule.invoke(ctx)
        return module

    def resolve(self, module_name: str) -> Outcome:
        """Match and, on success, generate ``module_name``."""
        rule_match = self.match(module_name)
        if rule_match is None:
            return NotFound(module_name)
        module = self.generate(module_name, rule_match)
        return Generated(module_name, module, rule_match.rule)
