"""TOML-based configuration and rule files.

Usage:
    from autogenerate.toml_config import find_config_file, load_toml_config

    config_path = find_config_file(Path.cwd())
    if config_path:
        config = load_toml_config(config_path)

Example autogenerate.toml:
    namespaces = ["App"]
    position = "append"
    allow_source = true

    [logging]
    level = "DEBUG"
    format = "json"

Rule files hold an ordered array of rules:

    [[rules]]
    pattern = "App.Model.*"
    extends = ["App.base"]
    values = { table = "models" }

    [[rules]]
    pattern = ["App", "App.**"]
    generator = "app.generators:make_module"

    [[rules]]
    regex = '^Legacy\\.(\\w+)$'
    source_file = "templates/legacy.py"
"""

from __future__ import annotations

import importlib
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from autogenerate.config import AutoGenConfig
from autogenerate.context import GenerationContext
from autogenerate.errors import ConfigError
from autogenerate.logging import get_logger
from autogenerate.patterns import Pattern, expand_pattern_spec, regex
from autogenerate.rules import Rule, RuleRegistry, accepts_context

logger = get_logger("config")

# Config file names to search for (in order of preference)
CONFIG_FILE_NAMES = ["autogenerate.toml", ".autogenerate.toml", "pyproject.toml"]


def find_config_file(
    start_dir: Path,
    config_names: list[str] | None = None,
) -> Path | None:
    """Find a config file by searching up the directory hierarchy.

    Args:
        start_dir: Directory to start searching from
        config_names: Config file names to look for (default: CONFIG_FILE_NAMES)

    Returns:
        Path to the config file, or None if not found
    """
    config_names = config_names or CONFIG_FILE_NAMES
    current = start_dir.resolve()

    while True:
        for name in config_names:
            config_path = current / name
            if config_path.exists():
                if name == "pyproject.toml":
                    if _has_tool_section(config_path):
                        return config_path
                else:
                    return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _has_tool_section(pyproject_path: Path) -> bool:
    """Check if pyproject.toml has a [tool.autogenerate] section."""
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return "autogenerate" in data.get("tool", {})


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    if path.name == "pyproject.toml":
        if "autogenerate" not in data.get("tool", {}):
            raise ConfigError(f"No [tool.autogenerate] section in {path}")
        data = data["tool"]["autogenerate"]
    return data


def load_toml_config(path: Path) -> AutoGenConfig:
    """Load an AutoGenConfig from a TOML file.

    Supports autogenerate.toml (whole file) and pyproject.toml (under
    [tool.autogenerate]).

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file is not valid TOML or fails validation
    """
    data = _read_toml(path)
    config = AutoGenConfig()

    if "position" in data:
        config.position = data["position"]
    if "namespaces" in data:
        config.namespaces = list(data["namespaces"])
    if "allow_source" in data:
        config.allow_source = bool(data["allow_source"])

    if "logging" in data:
        log = data["logging"]
        if "level" in log:
            config.log_level = log["level"]
        if "format" in log:
            config.log_format = log["format"]

    errors = config.validate()
    if errors:
        raise ConfigError(f"Invalid configuration in {path}: {'; '.join(errors)}")
    return config


# =============================================================================
# Rule files
# =============================================================================


def _resolve_reference(ref: str) -> Callable[..., Any]:
    """Resolve a "package.module:attribute" reference."""
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Generator reference must look like 'module:function', got {ref!r}")
    try:
        target: Any = importlib.import_module(module_name)
        for part in attr.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        raise ConfigError(f"Cannot resolve generator {ref!r}: {e}") from e
    if not callable(target):
        raise ConfigError(f"Generator {ref!r} is not callable")
    return target


def _rule_generator(data: dict[str, Any], base_dir: Path) -> Callable[[GenerationContext], None]:
    """Build a generator from the declarative fields of a rule table."""
    delegate = _resolve_reference(data["generator"]) if "generator" in data else None
    delegate_takes_context = delegate is not None and accepts_context(delegate)
    bases = list(data.get("extends", []))
    uses = list(data.get("uses", []))
    values = dict(data.get("values", {}))
    source = data.get("source")
    source_path = base_dir / data["source_file"] if "source_file" in data else None

    def generate(ctx: GenerationContext) -> None:
        if bases:
            ctx.declare_supertypes(*bases)
        for dependency in uses:
            ctx.declare_dependency(dependency)
        for name, value in values.items():
            if isinstance(value, (list, dict)):
                ctx.bind_collection(name, value)
            else:
                ctx.bind_value(name, value)
        if source is not None:
            ctx.inject_source(source)
        if source_path is not None:
            ctx.inject_source(source_path.read_text(encoding="utf-8"), str(source_path))
        if delegate_takes_context:
            delegate(ctx)
        elif delegate is not None:
            delegate()

    generate.__qualname__ = data.get("name", "toml_rule")
    return generate


def _rule_pattern(data: dict[str, Any], separator: str) -> Any | None:
    if "regex" in data:
        return regex(data["regex"], separator=separator)
    return data.get("pattern")


def load_rules_from_toml(path: Path, registry: RuleRegistry) -> list[Rule]:
    """Register the [[rules]] of a TOML file, in file order.

    Supported fields:
        pattern: Glob/exact name, or a list of them
        regex: Regular expression (instead of pattern)
        name: Label used in logs and listings
        extends: Supertype module names
        uses: Dependency module names
        values: Table of values (arrays and tables bind as collections)
        source: Source text to execute in the module
        source_file: File of source text, relative to the TOML file
        generator: "module:function" called after the fields above

    Returns:
        The rules added

    Raises:
        ConfigError: If a generator reference cannot be resolved
        PatternCompileError: If a regex is malformed
    """
    data = _read_toml(path)
    added: list[Rule] = []

    for index, rule_data in enumerate(data.get("rules", [])):
        pattern = _rule_pattern(rule_data, registry.separator)
        if pattern is None:
            logger.warning("rule without pattern skipped", file=str(path), index=index)
            continue
        generator = _rule_generator(rule_data, path.parent)
        added.extend(registry.register(pattern, generator))

    return added


def describe_rules(path: Path, separator: str = ".") -> list[tuple[Pattern, dict[str, Any]]]:
    """Compile the patterns of a rule file without resolving generators.

    Returns:
        (pattern, rule table) pairs in registration order, one per pattern
    """
    data = _read_toml(path)
    described = []
    for rule_data in data.get("rules", []):
        pattern = _rule_pattern(rule_data, separator)
        if pattern is None:
            continue
        for compiled in expand_pattern_spec(pattern, separator):
            described.append((compiled, rule_data))
    return described
