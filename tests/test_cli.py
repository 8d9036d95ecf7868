"""Tests for CLI interface."""

import json
import re
from pathlib import Path

import pytest

from autogenerate.cli import create_parser, main

RULES = """
[[rules]]
name = "models"
pattern = "App.Model.*"

[[rules]]
pattern = ["App", "App.**"]

[[rules]]
regex = '^Legacy\\.(\\w+)$'
"""


class TestCreateParser:
    """Tests for create_parser."""

    def test_creates_parser(self):
        parser = create_parser()
        assert parser.prog == "autogenerate"

    def test_has_version(self):
        parser = create_parser()
        assert any(action.option_strings == ["--version"] for action in parser._actions)

    def test_has_subcommands(self):
        parser = create_parser()
        subparsers_action = next((a for a in parser._actions if hasattr(a, "_parser_class")), None)
        assert subparsers_action is not None
        assert set(subparsers_action.choices) == {"compile", "match", "rules", "config"}


class TestMain:
    """Tests for main entry point."""

    def test_no_command_shows_help(self, capsys):
        result = main([])
        assert result == 0
        captured = capsys.readouterr()
        assert "usage:" in captured.out.lower()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "autogenerate" in capsys.readouterr().out


class TestCompileCommand:
    def test_glob(self, capsys):
        result = main(["compile", "App.*"])

        assert result == 0
        out = capsys.readouterr().out
        assert "App.* (glob)" in out
        assert "regex:" in out

    def test_json(self, capsys):
        result = main(["--json", "compile", "App::**::X", "--separator", "::"])

        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert data["pattern"] == "App::**::X"
        assert data["kind"] == "glob"
        assert data["regex"].startswith(r"\A")

    def test_exact(self, capsys):
        main(["--json", "compile", "App.Model"])

        assert json.loads(capsys.readouterr().out)["kind"] == "exact"

    def test_malformed_regex(self, capsys):
        result = main(["compile", "--regex", "(oops"])

        assert result == 1
        assert "Invalid pattern" in capsys.readouterr().err


class TestMatchCommand:
    def test_all_match(self, capsys):
        result = main(["match", "App??.**.*", "App38.A.Package.Name.Blah"])

        assert result == 0
        assert "['3', '8', 'A.Package.Name', 'Blah']" in capsys.readouterr().out

    def test_miss_returns_one(self, capsys):
        result = main(["match", "App.*", "App.Foo", "App.Foo.Bar"])

        assert result == 1
        assert "App.Foo.Bar: no match" in capsys.readouterr().out

    def test_json(self, capsys):
        main(["--json", "match", "--regex", r"^TestApp\.(\w+)$", "TestApp.Delta", "Snoopy.Delta"])

        data = json.loads(capsys.readouterr().out)
        assert data == [
            {"name": "TestApp.Delta", "matched": True, "captures": ["Delta"]},
            {"name": "Snoopy.Delta", "matched": False, "captures": []},
        ]

    def test_quiet_hides_results(self, capsys):
        main(["--quiet", "match", "App.*", "App.Foo"])

        assert capsys.readouterr().out == ""


class TestRulesCommand:
    @pytest.fixture
    def rules_file(self, tmp_path: Path) -> Path:
        path = tmp_path / "rules.toml"
        path.write_text(RULES)
        return path

    def test_lists_rules(self, rules_file: Path, capsys):
        result = main(["rules", str(rules_file)])

        assert result == 0
        out = capsys.readouterr().out
        assert "0: App.Model.* (glob) [models]" in out
        assert "2: App.** (glob)" in out
        assert "3: ^Legacy" in out

    def test_resolution(self, rules_file: Path, capsys):
        main(
            ["--json", "rules", str(rules_file), "-n", "App.Model.User", "-n", "App", "-n", "Nope"]
        )

        data = json.loads(capsys.readouterr().out)
        assert [r["pattern"] for r in data["rules"]] == [
            "App.Model.*",
            "App",
            "App.**",
            r"^Legacy\.(\w+)$",
        ]
        assert data["resolution"] == [
            {"name": "App.Model.User", "rule": 0},
            {"name": "App", "rule": 1},
            {"name": "Nope", "rule": None},
        ]

    def test_missing_file(self, tmp_path: Path, capsys):
        result = main(["rules", str(tmp_path / "missing.toml")])

        assert result == 1
        assert "not found" in capsys.readouterr().err


class TestConfigCommand:
    def test_defaults_without_file(self, tmp_path: Path, capsys):
        result = main(["--json", "config", str(tmp_path)])

        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert data["position"] == "append"
        assert data["source"] is None

    def test_shows_config(self, tmp_path: Path, capsys):
        config_file = tmp_path / "autogenerate.toml"
        config_file.write_text('namespaces = ["App"]\nposition = "prepend"\n')

        result = main(["config", str(tmp_path)])

        assert result == 0
        out = capsys.readouterr().out
        assert "Configuration" in out
        assert re.search(r"^position:\s+prepend$", out, re.MULTILINE)
        assert re.search(r"^namespaces:\s+App$", out, re.MULTILINE)

    def test_invalid_config(self, tmp_path: Path, capsys):
        (tmp_path / "autogenerate.toml").write_text('position = "middle"')

        result = main(["config", str(tmp_path)])

        assert result == 1
        assert "position" in capsys.readouterr().err
