"""Loader façade: plug the rule engine into Python's import system.

Define a loader by subclassing AutoGenerator; each subclass owns its own
ordered rule registry. Creating an instance with create() installs it on
sys.meta_path, after which importing a matching name generates the module.

Usage:
    class Shapes(AutoGenerator):
        pass

    @Shapes.requiring(["Shapes", "Shapes.**"])
    def shape(ctx):
        ctx.bind_value("label", ctx.short_name.lower())

    Shapes.create()

    import Shapes.Circle
    Shapes.Circle.label  # "circle"

Generation happens while the import system searches for the module. The
finished module is handed to the import system only once its generator has
returned, so a failed generation never leaves a partial module in
sys.modules.
"""

from __future__ import annotations

import logging
import re
import sys
from importlib.abc import Loader, MetaPathFinder
from importlib.machinery import ModuleSpec
from pathlib import Path
from types import ModuleType
from typing import Any, ClassVar

from autogenerate.config import AutoGenConfig
from autogenerate.dispatch import Dispatcher, Generated
from autogenerate.errors import ConfigError
from autogenerate.logging import get_logger, log_event
from autogenerate.module import SynthesizedModule
from autogenerate.rules import Generator, Rule, RuleRegistry

logger = get_logger("loader")

ORIGIN = "autogenerate"

_PATH_SEPARATORS = re.compile(r"[/\\]+|::")
_SOURCE_SUFFIXES = ("/__init__.py", "\\__init__.py", ".py", ".pyc")


def canonical_name(raw: str) -> str:
    """Turn a path-style or ``::``-style request into a dotted module name.

    ``Some/Mod.py``, ``Some\\Mod``, ``Some::Mod`` and
    ``Some/Mod/__init__.py`` all become ``Some.Mod``. Dotted names pass
    through unchanged, so a submodule called ``py`` is not mistaken for a
    file suffix.
    """
    name = raw.strip()
    if "/" in name or "\\" in name:
        for suffix in _SOURCE_SUFFIXES:
            if name.endswith(suffix):
                name = name[: -len(suffix)]
                break
    return _PATH_SEPARATORS.sub(".", name).strip(".")


class AutoGenerator(MetaPathFinder, Loader):
    """A meta path finder that generates modules from rules."""

    rules: ClassVar[RuleRegistry] = RuleRegistry()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.rules = RuleRegistry()

    # -------------------------------------------------------------------------
    # Declaration
    # -------------------------------------------------------------------------

    @classmethod
    def requiring(cls, spec: Any, generator: Generator | None = None) -> Any:
        """Register a rule on this loader definition.

        Called with a generator, registers it and returns the new rules.
        Called without one, returns a decorator that registers the decorated
        function and returns it unchanged.
        """
        if generator is not None:
            return cls.rules.register(spec, generator)

        def decorator(fn: Generator) -> Generator:
            cls.rules.register(spec, fn)
            return fn

        return decorator

    @classmethod
    def load_rules(cls, path: Path) -> list[Rule]:
        """Register the rules of a TOML rule file on this loader definition."""
        from autogenerate.toml_config import load_rules_from_toml

        return load_rules_from_toml(Path(path), cls.rules)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def __init__(self, config: AutoGenConfig | None = None) -> None:
        self.config = config or AutoGenConfig()
        errors = self.config.validate()
        if errors:
            raise ConfigError("; ".join(errors))
        self.dispatcher = Dispatcher(type(self).rules, allow_source=self.config.allow_source)

    @classmethod
    def create(cls, config: AutoGenConfig | None = None) -> AutoGenerator:
        """Create a loader and install it on sys.meta_path."""
        loader = cls(config)
        loader.config.apply_logging()
        loader.install()
        return loader

    def install(self) -> None:
        """Add this loader to sys.meta_path (once)."""
        if self.installed:
            return
        if self.config.position == "prepend":
            sys.meta_path.insert(0, self)
        else:
            sys.meta_path.append(self)
        logger.debug(
            "loader installed",
            loader=type(self).__qualname__,
            position=self.config.position,
            rules=len(self.rules),
        )

    def uninstall(self) -> None:
        """Remove this loader from sys.meta_path."""
        if not self.installed:
            return
        sys.meta_path[:] = [finder for finder in sys.meta_path if finder is not self]
        log_event(
            "loader", "loader uninstalled", level=logging.DEBUG, loader=type(self).__qualname__
        )

    @property
    def installed(self) -> bool:
        return any(finder is self for finder in sys.meta_path)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve_hook(self, raw: str) -> ModuleSpec | None:
        """Resolve a module request.

        Returns:
            A spec carrying the already generated module, or None to let the
            next finder try
        """
        name = canonical_name(raw)
        outcome = self.dispatcher.resolve(name)

        if isinstance(outcome, Generated):
            origin = f"{ORIGIN}:{outcome.rule.pattern.source}"
            return self._spec(name, outcome.module, origin)

        if self.config.in_namespace(name):
            logger.debug("namespace package created", module=name)
            return self._spec(name, SynthesizedModule(name), f"{ORIGIN}:namespace")

        return None

    def _spec(self, name: str, module: SynthesizedModule, origin: str) -> ModuleSpec:
        # Every generated module is a package so generated children can import
        return ModuleSpec(name, self, origin=origin, loader_state=module, is_package=True)

    def find_spec(
        self,
        fullname: str,
        path: Any = None,
        target: ModuleType | None = None,
    ) -> ModuleSpec | None:
        return self.resolve_hook(fullname)

    def create_module(self, spec: ModuleSpec) -> ModuleType | None:
        return spec.loader_state

    def exec_module(self, module: ModuleType) -> None:
        staged = module.__spec__.loader_state if module.__spec__ else None
        if isinstance(staged, SynthesizedModule) and staged is not module:
            # importlib.reload(): adopt the freshly generated contents
            if isinstance(module, SynthesizedModule):
                module.refresh_from(staged)
            else:
                module.__dict__.update(
                    {k: v for k, v in staged.__dict__.items() if not k.startswith("__")}
                )
        logger.debug("module loaded", module=module.__name__)

    def __repr__(self) -> str:
        state = "installed" if self.installed else "detached"
        return f"<{type(self).__qualname__} {state}, {len(self.rules)} rules>"

