"""Tests for loader configuration."""

import logging

import pytest

from autogenerate.config import AutoGenConfig


@pytest.fixture
def restore_logging():
    root = logging.getLogger("autogenerate")
    level, handlers = root.level, list(root.handlers)
    yield root
    root.setLevel(level)
    root.handlers[:] = handlers


class TestAutoGenConfig:
    def test_defaults(self):
        config = AutoGenConfig()

        assert config.position == "append"
        assert config.namespaces == []
        assert config.allow_source is True
        assert config.log_level is None
        assert config.validate() == []

    def test_builder_chain(self):
        config = (
            AutoGenConfig()
            .with_position("prepend")
            .with_namespaces("App", "Other.Root")
            .without_source()
            .with_logging("debug", "json")
        )

        assert config.position == "prepend"
        assert config.namespaces == ["App", "Other.Root"]
        assert config.allow_source is False
        assert config.log_level == "debug"
        assert config.log_format == "json"

    def test_namespaces_not_shared(self):
        first = AutoGenConfig().with_namespaces("App")

        assert AutoGenConfig().namespaces == []
        assert first.namespaces == ["App"]


class TestInNamespace:
    def test_root_and_children(self):
        config = AutoGenConfig(namespaces=["App"])

        assert config.in_namespace("App")
        assert config.in_namespace("App.Model")
        assert config.in_namespace("App.Model.Deep")

    def test_prefix_is_not_enough(self):
        config = AutoGenConfig(namespaces=["App"])

        assert not config.in_namespace("Apple")
        assert not config.in_namespace("My.App")


class TestValidate:
    def test_bad_position(self):
        errors = AutoGenConfig(position="middle").validate()

        assert len(errors) == 1
        assert "position" in errors[0]

    def test_bad_namespace(self):
        errors = AutoGenConfig(namespaces=["App", "not valid", ""]).validate()

        assert errors == ["Invalid namespace root: 'not valid'", "Invalid namespace root: ''"]

    def test_bad_log_level(self):
        errors = AutoGenConfig(log_level="chatty").validate()

        assert errors == ["Unknown log level: chatty"]

    def test_bad_log_format(self):
        errors = AutoGenConfig(log_format="xml").validate()

        assert errors == ["Unknown log format: xml"]

    def test_collects_all_errors(self):
        config = AutoGenConfig(position="sideways", log_level="chatty", log_format="xml")

        assert len(config.validate()) == 3


class TestApplyLogging:
    def test_no_level_leaves_logging_alone(self, restore_logging):
        before = list(restore_logging.handlers)

        AutoGenConfig().apply_logging()

        assert restore_logging.handlers == before

    def test_level_configures_root(self, restore_logging):
        AutoGenConfig().with_logging("debug").apply_logging()

        assert restore_logging.level == logging.DEBUG
        assert len(restore_logging.handlers) == 1
