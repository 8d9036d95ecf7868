"""The module object a generator populates."""

from __future__ import annotations

import types
from typing import Any


class SynthesizedModule(types.ModuleType):
    """A module built by a generator rather than read from a file.

    Supertypes give generated modules a simple form of inheritance: an
    attribute missing from the module's own namespace is looked up on each
    supertype in order, depth first.
    """

    def __init__(self, name: str, doc: str | None = None) -> None:
        super().__init__(name, doc)
        self.__supertypes__: list[Any] = []
        self.__dependencies__: list[str] = []

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        for base in self.__dict__.get("__supertypes__", ()):
            try:
                return getattr(base, name)
            except AttributeError:
                continue
        raise AttributeError(f"module {self.__name__!r} has no attribute {name!r}")

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        for base in self.__dict__.get("__supertypes__", ()):
            names.update(dir(base))
        return sorted(names)

    def __repr__(self) -> str:
        return f"<generated module {self.__name__!r}>"

    def refresh_from(self, staged: SynthesizedModule) -> None:
        """Replace this module's generated contents with ``staged``'s.

        Import bookkeeping attributes (spec, loader, path) are kept.
        """
        keep = {"__name__", "__spec__", "__loader__", "__package__", "__path__", "__file__"}
        for key in [k for k in self.__dict__ if k not in keep]:
            del self.__dict__[key]
        for key, value in staged.__dict__.items():
            if key not in keep:
                self.__dict__[key] = value
