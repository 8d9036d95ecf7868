"""Command-line interface for inspecting patterns and rule files."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from autogenerate.output import Output, Verbosity, configure_output, reset_output

if TYPE_CHECKING:
    from argparse import Namespace


def get_version() -> str:
    """Get the autogenerate version."""
    from autogenerate import __version__

    return __version__


def setup_output(args: Namespace) -> Output:
    """Configure global output based on CLI args."""
    if getattr(args, "quiet", False):
        verbosity = Verbosity.QUIET
    elif getattr(args, "verbose", False):
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL

    return configure_output(
        verbosity=verbosity,
        json_format=getattr(args, "json", False),
        no_color=getattr(args, "no_color", False),
    )


def _pattern_info(pattern: Any) -> dict[str, Any]:
    return {
        "pattern": pattern.source,
        "kind": getattr(pattern, "kind", type(pattern).__name__),
        "regex": pattern.regex.pattern,
    }


def cmd_compile(args: Namespace) -> int:
    """Show what a pattern compiles to."""
    from autogenerate.errors import PatternCompileError
    from autogenerate.patterns import compile_pattern, regex

    output = setup_output(args)

    try:
        if args.regex:
            pattern = regex(args.pattern, separator=args.separator)
        else:
            pattern = compile_pattern(args.pattern, args.separator)
    except PatternCompileError as e:
        output.error(str(e))
        return 1

    info = _pattern_info(pattern)
    if args.json:
        output.data(info)
        return 0

    output.info(f"{info['pattern']} ({info['kind']})")
    output.info(f"  regex: {info['regex']}")
    return 0


def cmd_match(args: Namespace) -> int:
    """Match names against a pattern and show the captures."""
    from autogenerate.errors import PatternCompileError
    from autogenerate.patterns import compile_pattern, regex

    output = setup_output(args)

    try:
        if args.regex:
            pattern = regex(args.pattern, separator=args.separator)
        else:
            pattern = compile_pattern(args.pattern, args.separator)
    except PatternCompileError as e:
        output.error(str(e))
        return 1

    results = []
    for name in args.names:
        captures = pattern.match(name)
        results.append(
            {
                "name": name,
                "matched": captures is not None,
                "captures": list(captures) if captures is not None else [],
            }
        )

    if args.json:
        output.data(results)
    else:
        for result in results:
            if result["matched"]:
                output.success(f"{result['name']}: {result['captures']}")
            else:
                output.warning(f"{result['name']}: no match")

    return 0 if all(r["matched"] for r in results) else 1


def cmd_rules(args: Namespace) -> int:
    """List the rules of a TOML rule file and show which one wins per name."""
    from autogenerate.errors import AutoGenerateError
    from autogenerate.toml_config import describe_rules

    output = setup_output(args)

    try:
        described = describe_rules(Path(args.file), args.separator)
    except (FileNotFoundError, AutoGenerateError) as e:
        output.error(str(e))
        return 1

    rules = []
    for position, (pattern, data) in enumerate(described):
        info = _pattern_info(pattern)
        info["position"] = position
        info["name"] = data.get("name", "")
        rules.append(info)

    winners = []
    for name in args.name or []:
        winner = next(
            (i for i, (pattern, _) in enumerate(described) if pattern.match(name) is not None),
            None,
        )
        winners.append({"name": name, "rule": winner})

    if args.json:
        output.data({"rules": rules, "resolution": winners})
        return 0

    output.header(f"Rules in {args.file}")
    for rule in rules:
        label = f" [{rule['name']}]" if rule["name"] else ""
        output.info(f"{rule['position']}: {rule['pattern']} ({rule['kind']}){label}")
        output.verbose(f"     regex: {rule['regex']}")

    for winner in winners:
        if winner["rule"] is None:
            output.warning(f"{winner['name']}: not handled")
        else:
            output.success(f"{winner['name']}: rule {winner['rule']}")

    return 0


def cmd_config(args: Namespace) -> int:
    """Show the discovered configuration."""
    from dataclasses import asdict

    from autogenerate.config import AutoGenConfig
    from autogenerate.errors import ConfigError
    from autogenerate.toml_config import find_config_file, load_toml_config

    output = setup_output(args)
    directory = Path(args.directory)

    config_path = find_config_file(directory)
    if config_path is None:
        config = AutoGenConfig()
        output.verbose(f"No configuration found from {directory}, using defaults")
    else:
        try:
            config = load_toml_config(config_path)
        except ConfigError as e:
            output.error(str(e))
            return 1

    data = asdict(config)
    data["source"] = str(config_path) if config_path else None

    if args.json:
        output.data(data)
        return 0

    output.header("Configuration")
    output.data(data)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="autogenerate",
        description="Inspect module-generation patterns and rule files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")

    parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode (errors only)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # compile command
    compile_parser = subparsers.add_parser("compile", help="Show the regex a pattern compiles to")
    compile_parser.add_argument("pattern", help="Glob, exact name, or regex (with --regex)")
    compile_parser.add_argument("--regex", "-r", action="store_true", help="Treat as a regex")
    compile_parser.add_argument("--separator", "-s", default=".", help="Namespace separator")
    compile_parser.set_defaults(func=cmd_compile)

    # match command
    match_parser = subparsers.add_parser("match", help="Match names against a pattern")
    match_parser.add_argument("pattern", help="Glob, exact name, or regex (with --regex)")
    match_parser.add_argument("names", nargs="+", help="Module names to test")
    match_parser.add_argument("--regex", "-r", action="store_true", help="Treat as a regex")
    match_parser.add_argument("--separator", "-s", default=".", help="Namespace separator")
    match_parser.set_defaults(func=cmd_match)

    # rules command
    rules_parser = subparsers.add_parser("rules", help="List the rules of a TOML rule file")
    rules_parser.add_argument("file", help="Rule file")
    rules_parser.add_argument(
        "--name", "-n", action="append", help="Show which rule handles NAME (repeatable)"
    )
    rules_parser.add_argument("--separator", "-s", default=".", help="Namespace separator")
    rules_parser.set_defaults(func=cmd_rules)

    # config command
    config_parser = subparsers.add_parser("config", help="Show the discovered configuration")
    config_parser.add_argument("directory", nargs="?", default=".", help="Start directory")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    reset_output()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
