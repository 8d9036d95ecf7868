"""Pattern compiler: turns rule patterns into capturing matchers.

A rule pattern can be written as:

- an exact name, e.g. ``"TestApp.Model.Flooble"``
- a glob, e.g. ``"*.Model.*Collection"`` or ``"TestApp??.**.*"``
- a compiled regular expression, e.g. ``re.compile(r"^(.*)\\.(\\w+)$")``
- a list of any of the above (expanded into one rule per entry)

Globs use three wildcards:

- ``**`` matches any run of word characters and separators, so it spans
  several name segments. Written between two separators (``App.**.X``) or at
  the start before one (``**.Model``) it also matches zero segments.
- ``*`` matches any run of word characters within one segment.
- ``?`` matches exactly one word character.

Every wildcard is captured, left to right. A glob without wildcards captures
the whole name as its only group. Regular expressions are used verbatim: the
caller owns anchoring and groups.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from autogenerate.errors import PatternCompileError

DEFAULT_SEPARATOR = "."

# Wildcard tokens, longest first so "**" is never read as two "*"
_WILDCARDS = ("**", "*", "?")


# =============================================================================
# Captures
# =============================================================================


class Captures:
    """Substrings captured by a successful pattern match.

    Indexing is 1-based like regex groups: ``captures[1]`` is the first
    wildcard or group, ``captures[0]`` the whole matched text. Named regex
    groups are available by name.
    """

    __slots__ = ("_groups", "_whole", "_named", "_separator")

    def __init__(
        self,
        groups: tuple[str | None, ...],
        whole: str,
        named: dict[str, str | None] | None = None,
        separator: str = DEFAULT_SEPARATOR,
    ) -> None:
        self._groups = tuple(groups)
        self._whole = whole
        self._named = dict(named or {})
        self._separator = separator

    @classmethod
    def from_match(cls, match: re.Match[str], separator: str, blank_unmatched: bool) -> Captures:
        groups = match.groups()
        if blank_unmatched:
            groups = tuple("" if g is None else g for g in groups)
        return cls(groups, match.group(0), match.groupdict(), separator)

    @property
    def groups(self) -> tuple[str | None, ...]:
        return self._groups

    @property
    def whole(self) -> str:
        return self._whole

    @property
    def named(self) -> dict[str, str | None]:
        return dict(self._named)

    def __getitem__(self, key: int | str) -> str | None:
        if isinstance(key, str):
            try:
                return self._named[key]
            except KeyError:
                raise KeyError(f"No capture group named {key!r}") from None
        if key == 0:
            return self._whole
        if 1 <= key <= len(self._groups):
            return self._groups[key - 1]
        raise IndexError(f"Capture {key} out of range (1..{len(self._groups)})")

    def get(self, key: int | str, default: Any = None) -> Any:
        try:
            return self[key]
        except (IndexError, KeyError):
            return default

    def segments(self, index: int) -> list[str]:
        """Split capture ``index`` on the separator.

        A ``**`` capture that matched zero segments yields an empty list.
        """
        value = self[index]
        if not value:
            return []
        return value.split(self._separator)

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[str | None]:
        return iter(self._groups)

    # Equality and hashing use the groups only, so a Captures equals (and
    # hashes like) the tuple of its groups
    def __eq__(self, other: object) -> bool:
        if isinstance(other, Captures):
            return self._groups == other._groups
        if isinstance(other, (list, tuple)):
            return list(self._groups) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._groups)

    def __repr__(self) -> str:
        return f"Captures({list(self._groups)!r})"


# =============================================================================
# Pattern variants
# =============================================================================


@runtime_checkable
class Pattern(Protocol):
    """A compiled matcher over module names."""

    @property
    def source(self) -> str:
        """The pattern as it was written."""
        ...

    @property
    def regex(self) -> re.Pattern[str]:
        """The regular expression the pattern compiles to."""
        ...

    def match(self, name: str) -> Captures | None:
        """Return the captures if ``name`` matches, else None."""
        ...


@dataclass(frozen=True)
class GlobPattern:
    """A wildcard pattern compiled to an anchored regular expression."""

    source: str
    regex: re.Pattern[str]
    separator: str = DEFAULT_SEPARATOR

    kind = "glob"

    def match(self, name: str) -> Captures | None:
        m = self.regex.match(name)
        if m is None:
            return None
        return Captures.from_match(m, self.separator, blank_unmatched=True)


@dataclass(frozen=True)
class ExactPattern(GlobPattern):
    """A literal name; matches only itself and captures the whole name."""

    kind = "exact"


@dataclass(frozen=True)
class RegexPattern:
    """A caller-supplied regular expression, searched as-is."""

    regex: re.Pattern[str]
    separator: str = DEFAULT_SEPARATOR
    source: str = field(default="", compare=False)

    kind = "regex"

    def __post_init__(self) -> None:
        if not self.source:
            object.__setattr__(self, "source", self.regex.pattern)

    def match(self, name: str) -> Captures | None:
        m = self.regex.search(name)
        if m is None:
            return None
        return Captures.from_match(m, self.separator, blank_unmatched=False)


# =============================================================================
# Compilation
# =============================================================================


def _tokenize(glob: str) -> list[str]:
    """Split a glob into wildcard tokens and single literal characters."""
    tokens: list[str] = []
    i = 0
    while i < len(glob):
        for wildcard in _WILDCARDS:
            if glob.startswith(wildcard, i):
                tokens.append(wildcard)
                i += len(wildcard)
                break
        else:
            tokens.append(glob[i])
            i += 1
    return tokens


def _group_literals(tokens: list[str], separator: str) -> list[str]:
    """Merge literal characters into runs, keeping separators as own tokens.

    The separator may be several characters long ("::"), so it is recognised
    on the joined literal text rather than per character.
    """
    merged: list[str] = []
    literal = ""

    def flush() -> None:
        nonlocal literal
        if not literal:
            return
        parts = literal.split(separator)
        for i, part in enumerate(parts):
            if i:
                merged.append(separator)
            if part:
                merged.append(part)
        literal = ""

    for token in tokens:
        if token in _WILDCARDS:
            flush()
            merged.append(token)
        else:
            literal += token
    flush()
    return merged


def compile_glob(glob: str, separator: str = DEFAULT_SEPARATOR) -> GlobPattern:
    """Compile a glob (or exact name) into an anchored, capturing pattern."""
    tokens = _group_literals(_tokenize(glob), separator)
    sep = re.escape(separator)
    # Whole separators only, so "::" never lets a lone ":" through
    word_or_sep = rf"(?:\w|{sep})*"

    if not any(t in _WILDCARDS for t in tokens):
        body = "(" + re.escape(glob) + ")"
        return ExactPattern(glob, re.compile(rf"\A{body}\Z"), separator)

    parts: list[str] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        prev_is_sep = i > 0 and tokens[i - 1] == separator
        next_is_sep = i + 1 < len(tokens) and tokens[i + 1] == separator

        if token == "**" and next_is_sep and (prev_is_sep or i == 0):
            # Zero or more whole segments, separator included
            parts.append(f"(?:({word_or_sep}){sep})?")
            i += 2
            continue
        if token == "**":
            parts.append(f"({word_or_sep})")
        elif token == "*":
            parts.append(r"(\w*)")
        elif token == "?":
            parts.append(r"(\w)")
        elif token == separator:
            parts.append(sep)
        else:
            parts.append(re.escape(token))
        i += 1

    return GlobPattern(glob, re.compile(r"\A" + "".join(parts) + r"\Z"), separator)


def regex(text: str, flags: int = 0, separator: str = DEFAULT_SEPARATOR) -> RegexPattern:
    """Compile a regular expression string into a pattern.

    Raises:
        PatternCompileError: If the regular expression is malformed
    """
    try:
        compiled = re.compile(text, flags)
    except re.error as e:
        raise PatternCompileError(text, str(e)) from e
    return RegexPattern(compiled, separator, text)


def compile_pattern(spec: Any, separator: str = DEFAULT_SEPARATOR) -> Pattern:
    """Compile a single pattern specification.

    Args:
        spec: Glob or exact name (str), compiled regex, or a Pattern
        separator: Namespace separator used by globs

    Returns:
        The compiled pattern

    Raises:
        TypeError: If ``spec`` is a list (use expand_pattern_spec) or of an
            unsupported type
    """
    if isinstance(spec, str):
        return compile_glob(spec, separator)
    if isinstance(spec, re.Pattern):
        return RegexPattern(spec, separator)
    if isinstance(spec, (list, tuple)):
        raise TypeError("List patterns expand to several rules; use expand_pattern_spec()")
    if isinstance(spec, Pattern):
        return spec
    raise TypeError(f"Unsupported pattern type: {type(spec).__name__}")


def expand_pattern_spec(spec: Any, separator: str = DEFAULT_SEPARATOR) -> list[Pattern]:
    """Compile a pattern specification, flattening lists in order."""
    if isinstance(spec, (list, tuple)):
        patterns: list[Pattern] = []
        for item in spec:
            patterns.extend(expand_pattern_spec(item, separator))
        return patterns
    return [compile_pattern(spec, separator)]
