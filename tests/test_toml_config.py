"""Tests for TOML configuration and rule files."""

from pathlib import Path

import pytest

from autogenerate.dispatch import Dispatcher
from autogenerate.errors import ConfigError, PatternCompileError
from autogenerate.patterns import RegexPattern
from autogenerate.rules import RuleRegistry
from autogenerate.toml_config import (
    describe_rules,
    find_config_file,
    load_rules_from_toml,
    load_toml_config,
)


class TestFindConfigFile:
    def test_finds_autogenerate_toml(self, tmp_path: Path):
        config_file = tmp_path / "autogenerate.toml"
        config_file.write_text('position = "append"')

        assert find_config_file(tmp_path) == config_file

    def test_finds_hidden_file(self, tmp_path: Path):
        config_file = tmp_path / ".autogenerate.toml"
        config_file.write_text('position = "append"')

        assert find_config_file(tmp_path) == config_file

    def test_prefers_autogenerate_toml(self, tmp_path: Path):
        visible = tmp_path / "autogenerate.toml"
        hidden = tmp_path / ".autogenerate.toml"
        visible.write_text('position = "append"')
        hidden.write_text('position = "prepend"')

        assert find_config_file(tmp_path) == visible

    def test_finds_pyproject_with_section(self, tmp_path: Path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.autogenerate]\nnamespaces = ["App"]')

        assert find_config_file(tmp_path) == pyproject

    def test_ignores_pyproject_without_section(self, tmp_path: Path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.ruff]\nline-length = 100")

        assert find_config_file(tmp_path) is None

    def test_searches_parent_directories(self, tmp_path: Path):
        config_file = tmp_path / "autogenerate.toml"
        config_file.write_text('position = "append"')
        subdir = tmp_path / "src" / "app"
        subdir.mkdir(parents=True)

        assert find_config_file(subdir) == config_file

    def test_custom_names(self, tmp_path: Path):
        config_file = tmp_path / "loader.toml"
        config_file.write_text('position = "append"')

        assert find_config_file(tmp_path, ["loader.toml"]) == config_file


class TestLoadTomlConfig:
    def test_loads_all_fields(self, tmp_path: Path):
        config_file = tmp_path / "autogenerate.toml"
        config_file.write_text(
            """
position = "prepend"
namespaces = ["App", "Other"]
allow_source = false

[logging]
level = "DEBUG"
format = "json"
"""
        )

        config = load_toml_config(config_file)

        assert config.position == "prepend"
        assert config.namespaces == ["App", "Other"]
        assert config.allow_source is False
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        config_file = tmp_path / "autogenerate.toml"
        config_file.write_text("")

        config = load_toml_config(config_file)

        assert config.position == "append"
        assert config.namespaces == []

    def test_pyproject_section(self, tmp_path: Path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[project]\nname = "x"\n\n[tool.autogenerate]\nnamespaces = ["App"]\n')

        config = load_toml_config(pyproject)

        assert config.namespaces == ["App"]

    def test_pyproject_without_section(self, tmp_path: Path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[project]\nname = "x"\n')

        with pytest.raises(ConfigError, match="tool.autogenerate"):
            load_toml_config(pyproject)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_toml_config(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path: Path):
        config_file = tmp_path / "autogenerate.toml"
        config_file.write_text("position = ")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_toml_config(config_file)

    def test_invalid_values(self, tmp_path: Path):
        config_file = tmp_path / "autogenerate.toml"
        config_file.write_text('position = "middle"')

        with pytest.raises(ConfigError, match="position"):
            load_toml_config(config_file)


class TestLoadRules:
    @pytest.fixture
    def registry(self):
        return RuleRegistry()

    def test_rules_in_file_order(self, tmp_path: Path, registry: RuleRegistry):
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text(
            """
[[rules]]
pattern = "App.Model.*"

[[rules]]
pattern = ["App", "App.**"]

[[rules]]
regex = '^Legacy\\.(\\w+)$'
"""
        )

        added = load_rules_from_toml(rules_file, registry)

        sources = [r.pattern.source for r in added]
        assert sources == ["App.Model.*", "App", "App.**", r"^Legacy\.(\w+)$"]
        assert isinstance(added[-1].pattern, RegexPattern)
        assert list(registry) == added

    def test_declarative_fields(self, tmp_path: Path, registry: RuleRegistry):
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text(
            """
[[rules]]
name = "models"
pattern = "App.Model.*"
extends = ["math"]
uses = ["os.path"]
values = { table = "models", columns = ["id", "name"], options = { strict = true } }
source = "def describe():\\n    return table + ':' + __name__\\n"
"""
        )
        load_rules_from_toml(rules_file, registry)

        module = Dispatcher(registry).resolve("App.Model.User").module

        import os

        assert module.table == "models"
        assert module.columns == ["id", "name"]
        assert module.options == {"strict": True}
        assert module.os is os
        assert module.floor(1.5) == 1
        assert module.describe() == "models:App.Model.User"
        assert registry.rules[0].name.endswith("-> models")

    def test_source_file_relative_to_rule_file(self, tmp_path: Path, registry: RuleRegistry):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "legacy.py").write_text("KIND = 'legacy'\n", encoding="utf-8")
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text(
            "[[rules]]\npattern = \"Legacy.*\"\nsource_file = \"templates/legacy.py\"\n"
        )
        load_rules_from_toml(rules_file, registry)

        module = Dispatcher(registry).resolve("Legacy.Thing").module

        assert module.KIND == "legacy"

    @pytest.mark.usefixtures("clean_imports")
    def test_generator_reference(self, tmp_path: Path, registry: RuleRegistry, monkeypatch):
        (tmp_path / "ag_toml_generators.py").write_text(
            "def make(ctx):\n"
            "    ctx.bind_value('made_for', ctx.captures[1])\n"
            "\n"
            "def plain():\n"
            "    from autogenerate.declare import defines\n"
            "    defines('$plain', True)\n",
            encoding="utf-8",
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text(
            """
[[rules]]
pattern = "App.*"
values = { base = 1 }
generator = "ag_toml_generators:make"

[[rules]]
pattern = "Plain.*"
generator = "ag_toml_generators:plain"
"""
        )
        load_rules_from_toml(rules_file, registry)
        dispatcher = Dispatcher(registry)

        app = dispatcher.resolve("App.Widget").module
        plain = dispatcher.resolve("Plain.Widget").module

        assert app.base == 1
        assert app.made_for == "Widget"
        assert plain.plain is True

    def test_bad_generator_reference(self, tmp_path: Path, registry: RuleRegistry):
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text('[[rules]]\npattern = "App.*"\ngenerator = "no_colon_here"\n')

        with pytest.raises(ConfigError, match="module:function"):
            load_rules_from_toml(rules_file, registry)

    def test_unresolvable_generator(self, tmp_path: Path, registry: RuleRegistry):
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text('[[rules]]\npattern = "App.*"\ngenerator = "math:no_such_thing"\n')

        with pytest.raises(ConfigError, match="Cannot resolve"):
            load_rules_from_toml(rules_file, registry)

    def test_malformed_regex(self, tmp_path: Path, registry: RuleRegistry):
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text("[[rules]]\nregex = '(oops'\n")

        with pytest.raises(PatternCompileError):
            load_rules_from_toml(rules_file, registry)

    def test_rule_without_pattern_skipped(self, tmp_path: Path, registry: RuleRegistry):
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text('[[rules]]\nname = "orphan"\n\n[[rules]]\npattern = "App"\n')

        added = load_rules_from_toml(rules_file, registry)

        assert [r.pattern.source for r in added] == ["App"]


class TestDescribeRules:
    def test_one_entry_per_pattern(self, tmp_path: Path):
        rules_file = tmp_path / "rules.toml"
        rules_file.write_text(
            """
[[rules]]
name = "app"
pattern = ["App", "App::**"]
generator = "not_imported:anything"
"""
        )

        described = describe_rules(rules_file, separator="::")

        assert [pattern.source for pattern, _ in described] == ["App", "App::**"]
        assert all(data["name"] == "app" for _, data in described)
        assert described[1][0].match("App::Foo::Bar") == ["Foo::Bar"]
