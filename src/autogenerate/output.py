"""Terminal output for the CLI.

Messages carry a level (error, warning, success, info) and a minimum
verbosity. Results are either printed as aligned ``key: value`` blocks or,
with ``--json``, as a single JSON document on stdout.

Usage:
    from autogenerate.output import Verbosity, configure_output

    output = configure_output(Verbosity.VERBOSE)
    output.success("App.Foo: ['Foo']")
    output.data({"pattern": "App.*", "kind": "glob"})
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from enum import IntEnum
from typing import IO, Any


class Verbosity(IntEnum):
    """How much the CLI prints."""

    QUIET = 0  # Only errors
    NORMAL = 1
    VERBOSE = 2


_MARKERS = {"error": "X", "warning": "!", "success": "+", "info": "*"}

_COLORS = {"error": "\033[31m", "warning": "\033[33m", "success": "\033[32m", "info": ""}
_BOLD = "\033[1m"
_RESET = "\033[0m"


def _render_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (list, tuple)):
        return ", ".join(_render_value(v) for v in value) if value else "(none)"
    if isinstance(value, Mapping):
        return ", ".join(f"{k}={_render_value(v)}" for k, v in value.items())
    return str(value)


def _render(data: Any) -> str:
    """Render a result mapping, or a list of them, as aligned text."""
    if isinstance(data, Mapping):
        if not data:
            return ""
        width = max(len(str(key)) for key in data) + 1
        lines = [f"{f'{key}:':<{width}} {_render_value(value)}" for key, value in data.items()]
        return "\n".join(lines)
    if isinstance(data, list) and all(isinstance(item, Mapping) for item in data):
        return "\n\n".join(_render(item) for item in data)
    return _render_value(data)


class Output:
    """Leveled messages and result data for one CLI invocation."""

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.NORMAL,
        json_format: bool = False,
        use_colors: bool = True,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ) -> None:
        self.verbosity = verbosity
        self.json_format = json_format
        self.use_colors = use_colors and not json_format
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def _emit(self, level: str, message: str, min_verbosity: Verbosity) -> None:
        if self.verbosity < min_verbosity:
            return
        stream = self.stderr if level == "error" else self.stdout

        if self.json_format:
            line = json.dumps({"level": level, "message": message})
        else:
            line = f"[{_MARKERS[level]}] {message}"
            color = _COLORS[level]
            if color and self.use_colors and stream.isatty():
                line = f"{color}{line}{_RESET}"

        stream.write(line + "\n")
        stream.flush()

    def error(self, message: str) -> None:
        """Report an error (shown even in quiet mode)."""
        self._emit("error", message, Verbosity.QUIET)

    def warning(self, message: str) -> None:
        self._emit("warning", message, Verbosity.NORMAL)

    def success(self, message: str) -> None:
        self._emit("success", message, Verbosity.NORMAL)

    def info(self, message: str) -> None:
        self._emit("info", message, Verbosity.NORMAL)

    def verbose(self, message: str) -> None:
        """Output a message only in verbose mode."""
        self._emit("info", message, Verbosity.VERBOSE)

    def data(self, data: Any) -> None:
        """Print a command's result."""
        if self.verbosity < Verbosity.NORMAL:
            return
        if self.json_format:
            text = json.dumps(data, indent=2, default=str)
        else:
            text = _render(data)
        self.stdout.write(text + "\n")
        self.stdout.flush()

    def header(self, text: str) -> None:
        """Print a section title (text mode only)."""
        if self.verbosity < Verbosity.NORMAL or self.json_format:
            return
        title = f"{_BOLD}{text}{_RESET}" if self.use_colors and self.stdout.isatty() else text
        self.stdout.write(f"\n{title}\n{'-' * len(text)}\n")
        self.stdout.flush()


_output: Output | None = None


def get_output() -> Output:
    """Get the shared output instance."""
    global _output
    if _output is None:
        _output = Output()
    return _output


def reset_output() -> None:
    """Drop the shared output so the next get_output() binds fresh streams."""
    global _output
    _output = None


def configure_output(
    verbosity: Verbosity | None = None,
    json_format: bool = False,
    no_color: bool = False,
) -> Output:
    """Configure the shared output instance."""
    output = get_output()

    if verbosity is not None:
        output.verbosity = verbosity
    if json_format:
        output.json_format = True
        output.use_colors = False
    if no_color:
        output.use_colors = False

    return output
