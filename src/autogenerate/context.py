"""Generation context: the channel through which a generator shapes its module.

Each generator runs with exactly one active GenerationContext. Contexts form
a stack: when a generator imports a dependency that is itself generated, the
dependency's context is pushed on top and popped once that generation ends,
leaving the outer module's name and captures untouched.

Usage:
    @MyLoader.requiring("Shapes.*")
    def make_shape(ctx):
        ctx.declare_supertypes("Shapes.base")
        ctx.bind_value("kind", ctx.captures[1].lower())
        ctx.bind_callable("describe", lambda: f"a {ctx.captures[1]}")
"""

from __future__ import annotations

import importlib
import importlib.util
import keyword
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from autogenerate.errors import (
    DependencyResolutionError,
    GenerationError,
    NoActiveContextError,
)
from autogenerate.logging import get_logger
from autogenerate.module import SynthesizedModule
from autogenerate.patterns import Captures

if TYPE_CHECKING:
    from autogenerate.rules import Rule

logger = get_logger("context")

_active: ContextVar[GenerationContext | None] = ContextVar(
    "autogenerate_active_context", default=None
)


def _check_identifier(name: str, module_name: str) -> None:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise GenerationError(f"Invalid member name {name!r}", module_name)


def _check_module_name(name: str) -> bool:
    stripped = name.lstrip(".")
    if not stripped:
        return False
    return all(part.isidentifier() for part in stripped.split("."))


@dataclass
class GenerationContext:
    """Request-scoped state for one generator invocation."""

    module_name: str
    captures: Captures
    module: SynthesizedModule
    rule: Rule | None = None
    parent: GenerationContext | None = None
    allow_source: bool = True
    dependencies: list[str] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def short_name(self) -> str:
        """Last dotted segment of the module name."""
        return self.module_name.rpartition(".")[2]

    @property
    def package(self) -> str:
        """Package relative dependency names resolve against.

        The module being generated is not importable until it is published,
        so relative names resolve against its enclosing package.
        """
        return self.module_name.rpartition(".")[0]

    @property
    def depth(self) -> int:
        """Number of enclosing generations."""
        depth = 0
        ctx = self.parent
        while ctx is not None:
            depth += 1
            ctx = ctx.parent
        return depth

    def chain(self) -> Iterator[GenerationContext]:
        """Yield this context and its enclosing contexts, innermost first."""
        ctx: GenerationContext | None = self
        while ctx is not None:
            yield ctx
            ctx = ctx.parent

    # -------------------------------------------------------------------------
    # Declarative operations
    # -------------------------------------------------------------------------

    def declare_supertypes(self, *bases: Any) -> None:
        """Append supertypes; names are imported first."""
        for base in bases:
            if isinstance(base, str):
                base = self._import(base)
            self.module.__supertypes__.append(base)

    def declare_dependency(self, name: str, *names: str, alias: str | None = None) -> Any:
        """Import ``name`` and bind it (or some of its members) into the module.

        Without ``names`` this behaves like ``import name`` (or
        ``import name as alias``). With ``names`` it behaves like
        ``from name import ...``; ``"*"`` binds the public names.

        Returns:
            The imported module

        Raises:
            DependencyResolutionError: If the module or a member is missing
        """
        dependency = self._import(name)

        if not names:
            if alias is not None:
                _check_identifier(alias, self.module_name)
                self.module.__dict__[alias] = dependency
            elif not name.startswith("."):
                top = name.partition(".")[0]
                self.module.__dict__[top] = importlib.import_module(top)
            else:
                self.module.__dict__[name.rpartition(".")[2]] = dependency
            return dependency

        members: list[str] = []
        for member in names:
            if member == "*":
                public = getattr(dependency, "__all__", None)
                if public is None:
                    public = [n for n in vars(dependency) if not n.startswith("_")]
                members.extend(public)
            else:
                members.append(member)

        for member in members:
            try:
                self.module.__dict__[member] = getattr(dependency, member)
            except AttributeError:
                raise DependencyResolutionError(
                    f"{name}.{member}", self.module_name, f"{name!r} has no attribute {member!r}"
                ) from None
        return dependency

    def bind_value(self, name: str, value: Any) -> None:
        """Bind a scalar (any single object) as a module attribute."""
        _check_identifier(name, self.module_name)
        self.module.__dict__[name] = value

    def bind_collection(self, name: str, values: Iterable[Any] | Mapping[Any, Any]) -> None:
        """Bind a copy of an ordered collection (as a list) or mapping (as a dict)."""
        _check_identifier(name, self.module_name)
        if isinstance(values, Mapping):
            self.module.__dict__[name] = dict(values)
        elif isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            raise GenerationError(
                f"Collection {name!r} must be a mapping or an iterable, "
                f"got {type(values).__name__}",
                self.module_name,
            )
        else:
            self.module.__dict__[name] = list(values)

    def bind_callable(self, name: str, fn: Callable[..., Any]) -> None:
        """Bind a function as a module attribute."""
        _check_identifier(name, self.module_name)
        if not callable(fn):
            raise GenerationError(
                f"{name!r} must be callable, got {type(fn).__name__}", self.module_name
            )
        self.module.__dict__[name] = fn

    def defines(self, name: str, value: Any) -> None:
        """Bind a member, choosing its kind from a sigil prefix.

        ``$name`` binds a value, ``@name`` an ordered collection, ``%name`` a
        mapping; ``&name`` or a bare name binds a callable.
        """
        sigil, rest = name[:1], name[1:]
        if sigil == "$":
            self.bind_value(rest, value)
        elif sigil == "@":
            if isinstance(value, Mapping):
                raise GenerationError(f"{name!r} needs an ordered collection", self.module_name)
            self.bind_collection(rest, value)
        elif sigil == "%":
            if not isinstance(value, Mapping):
                raise GenerationError(f"{name!r} needs a mapping", self.module_name)
            self.bind_collection(rest, value)
        elif sigil == "&":
            self.bind_callable(rest, value)
        else:
            self.bind_callable(name, value)

    def inject_source(self, text: str, filename: str | None = None) -> None:
        """Execute source text in the module's namespace.

        The text runs with full interpreter privileges; never build it from
        untrusted input.

        Raises:
            GenerationError: If injection is disabled, or the text fails to
                compile or raises while running
        """
        if not self.allow_source:
            raise GenerationError(
                f"Source injection is disabled for this loader (module {self.module_name!r})",
                self.module_name,
            )
        filename = filename or f"<autogenerate:{self.module_name}>"
        try:
            code = compile(text, filename, "exec")
            exec(code, self.module.__dict__)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(
                f"Injected source failed for {self.module_name!r}: {e}", self.module_name
            ) from e

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _import(self, name: str) -> Any:
        if not isinstance(name, str) or not _check_module_name(name):
            raise DependencyResolutionError(str(name), self.module_name, "malformed module name")
        if name.startswith(".") and not self.package:
            raise DependencyResolutionError(
                name, self.module_name, "relative name in a top-level module"
            )
        try:
            module = importlib.import_module(name, package=self.package or None)
        except GenerationError:
            raise
        except (ImportError, ValueError) as e:
            raise DependencyResolutionError(name, self.module_name, str(e)) from e
        resolved = importlib.util.resolve_name(name, self.package) if name.startswith(".") else name
        self.dependencies.append(resolved)
        self.module.__dependencies__.append(resolved)
        logger.debug("dependency resolved", module=self.module_name, dependency=resolved)
        return module


def current_context() -> GenerationContext:
    """Return the innermost active generation context.

    Raises:
        NoActiveContextError: If no generator is running
    """
    ctx = _active.get()
    if ctx is None:
        raise NoActiveContextError("No module is being generated")
    return ctx


def active_context() -> GenerationContext | None:
    """Return the innermost active context, or None."""
    return _active.get()


@contextmanager
def activate(ctx: GenerationContext):
    """Make ``ctx`` the active context for the duration of the block."""
    token = _active.set(ctx)
    try:
        yield ctx
    finally:
        _active.reset(token)
