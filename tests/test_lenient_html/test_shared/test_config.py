"""Tests for the configuration system."""

import json

import pytest

from lenient_html.shared.config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)


class TestComponentConfigs:
    """Test suite for per-layer configuration classes."""

    def test_default_values(self):
        assert TokenizerConfig().recognize_bogus_comments is True
        tree = TreeConfig()
        assert tree.preserve_tag_case is False
        assert tree.drop_whitespace_text is False
        global_config = GlobalConfig()
        assert global_config.logging_level is None
        assert global_config.enable_diagnostics is True
        assert global_config.enable_correlation_tracking is True

    def test_validation_failures(self):
        with pytest.raises(ValueError, match="recognize_bogus_comments must be a bool"):
            TokenizerConfig(recognize_bogus_comments="yes")
        with pytest.raises(ValueError, match="preserve_tag_case must be a bool"):
            TreeConfig(preserve_tag_case=1)
        with pytest.raises(ValueError, match="drop_whitespace_text must be a bool"):
            TreeConfig(drop_whitespace_text=None)
        with pytest.raises(ValueError, match="logging_level must be one of"):
            GlobalConfig(logging_level="VERBOSE")

    def test_valid_logging_levels(self):
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            assert GlobalConfig(logging_level=level).logging_level == level


class TestParserConfig:
    """Test suite for the combined ParserConfig."""

    def test_is_frozen(self):
        config = ParserConfig()
        with pytest.raises(AttributeError):
            config.name = "changed"

    def test_invalid_component_type(self):
        with pytest.raises(ConfigValidationError, match="tree must be a TreeConfig") as exc:
            ParserConfig(tree=TokenizerConfig())
        assert exc.value.field_name == "tree"

    def test_validation_error_is_config_error(self):
        assert issubclass(ConfigValidationError, ConfigError)

    def test_override_component_fields(self):
        base = ParserConfig()
        config = base.override(
            tree__preserve_tag_case=True,
            global___enable_diagnostics=False,
            name="custom",
        )
        assert config.tree.preserve_tag_case is True
        assert config.tree.drop_whitespace_text is False
        assert config.global_.enable_diagnostics is False
        assert config.name == "custom"
        # Original untouched
        assert base.tree.preserve_tag_case is False
        assert base.global_.enable_diagnostics is True

    def test_override_with_component_dict(self):
        config = ParserConfig().override(tokenizer={"recognize_bogus_comments": False})
        assert config.tokenizer.recognize_bogus_comments is False

    def test_override_unknown_component(self):
        with pytest.raises(ConfigValidationError, match="Unknown configuration component") as exc:
            ParserConfig().override(layout__width=3)
        assert exc.value.suggestions == ["tokenizer", "tree", "global_"]

    def test_override_unknown_field(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(tree__max_depth=3)

    def test_override_invalid_value(self):
        with pytest.raises(ConfigValidationError, match="logging_level must be one of"):
            ParserConfig().override(global___logging_level="LOUD")

    def test_dict_round_trip(self):
        config = ParserConfig.source_faithful()
        data = config.to_dict()
        assert data["tree"] == {"preserve_tag_case": True, "drop_whitespace_text": False}
        assert data["name"] == "source_faithful"
        assert ParserConfig.from_dict(data) == config

    def test_from_json(self):
        config = ParserConfig.from_json(json.dumps({"tree": {"drop_whitespace_text": True}}))
        assert config.tree.drop_whitespace_text is True
        assert config.tokenizer == TokenizerConfig()
        assert ParserConfig.from_json(config.to_json()) == config

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigValidationError, match="Unknown configuration key: strict"):
            ParserConfig.from_dict({"strict": True})
        with pytest.raises(ConfigValidationError) as exc:
            ParserConfig.from_dict({"tree": {"unknown": 1}})
        assert exc.value.field_name == "tree"

    def test_from_json_rejects_invalid_documents(self):
        with pytest.raises(ConfigValidationError, match="Invalid configuration JSON"):
            ParserConfig.from_json("{not json")
        with pytest.raises(ConfigValidationError, match="must be an object"):
            ParserConfig.from_json("[1, 2]")


class TestPresets:
    """Test suite for configuration presets."""

    def test_default(self):
        config = ParserConfig.default()
        assert config.name == "default"
        assert config.tree == TreeConfig()

    def test_web_scraping(self):
        config = ParserConfig.web_scraping()
        assert config.tree.drop_whitespace_text is True
        assert config.tree.preserve_tag_case is False

    def test_source_faithful(self):
        config = ParserConfig.source_faithful()
        assert config.tree.preserve_tag_case is True
        assert config.description
