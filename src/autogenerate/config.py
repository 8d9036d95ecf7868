"""Configuration for autogenerate loaders."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from autogenerate.logging import LogFormat, configure_logging

POSITIONS = ("append", "prepend")


@dataclass
class AutoGenConfig:
    """Settings for an installed loader.

    Supports a fluent builder pattern:

        config = AutoGenConfig().with_namespaces("App").without_source()
    """

    # Where the loader goes on sys.meta_path: after the standard finders
    # ("append") so real modules win, or before them ("prepend")
    position: str = "append"

    # Names under these roots import as empty packages when no rule matches
    namespaces: list[str] = field(default_factory=list)

    # Allow generators to execute source text
    allow_source: bool = True

    # Logging (None leaves logging untouched)
    log_level: str | None = None
    log_format: str = "text"

    def with_position(self, position: str) -> AutoGenConfig:
        """Set the sys.meta_path position."""
        self.position = position
        return self

    def with_namespaces(self, *roots: str) -> AutoGenConfig:
        """Add namespace roots."""
        self.namespaces.extend(roots)
        return self

    def without_source(self) -> AutoGenConfig:
        """Disable source injection."""
        self.allow_source = False
        return self

    def with_logging(self, level: str, log_format: str = "text") -> AutoGenConfig:
        """Configure logging applied when the loader is created."""
        self.log_level = level
        self.log_format = log_format
        return self

    def in_namespace(self, module_name: str) -> bool:
        """Check whether a name equals or lies under a namespace root."""
        return any(
            module_name == root or module_name.startswith(root + ".") for root in self.namespaces
        )

    def validate(self) -> list[str]:
        """Validate the configuration.

        Returns a list of validation errors (empty if valid).
        """
        errors: list[str] = []

        if self.position not in POSITIONS:
            errors.append(f"position must be one of {', '.join(POSITIONS)}, got {self.position!r}")

        for root in self.namespaces:
            if not root or not all(part.isidentifier() for part in root.split(".")):
                errors.append(f"Invalid namespace root: {root!r}")

        if self.log_level is not None and not isinstance(
            logging.getLevelName(self.log_level.upper()), int
        ):
            errors.append(f"Unknown log level: {self.log_level}")

        if self.log_format not in {f.value for f in LogFormat}:
            errors.append(f"Unknown log format: {self.log_format}")

        return errors

    def apply_logging(self) -> None:
        """Apply the logging settings, if any."""
        if self.log_level is not None:
            configure_logging(self.log_level, self.log_format)
