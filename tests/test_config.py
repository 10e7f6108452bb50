"""Test cases for settings."""

import json

from create_prompt.config import SelectionOptions, Settings, load_settings
from create_prompt.schemas import InclusionMode, OutputFormat


class TestSettings:
    """Test cases for Settings and load_settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.min_relevance == 0.3
        assert settings.essential_context == ["persona", "standards", "project"]
        assert settings.include_history == InclusionMode.AUTO
        assert settings.default_format == OutputFormat.MARKDOWN

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("CREATE_PROMPT_MIN_RELEVANCE", "0.6")
        assert Settings().min_relevance == 0.6

    def test_config_file(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({
            "min_relevance": 0.5,
            "include_history": "never",
            "defaults": {"target": "cursor", "format": "plain"},
            "unknown": 1,
        }))
        settings = load_settings(tmp_path)
        assert settings.min_relevance == 0.5
        assert settings.include_history == InclusionMode.NEVER
        assert settings.default_target == "cursor"
        assert settings.default_format == OutputFormat.PLAIN

    def test_no_config_file(self, tmp_path):
        assert load_settings(tmp_path).min_relevance == 0.3

    def test_malformed_config_falls_back(self, tmp_path):
        (tmp_path / "config.json").write_text("{oops")
        assert load_settings(tmp_path).min_relevance == 0.3

    def test_invalid_values_fall_back(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({"include_history": "sometimes"}))
        assert load_settings(tmp_path).include_history == InclusionMode.AUTO


class TestSelectionOptions:
    """Test cases for SelectionOptions."""

    def test_from_settings(self):
        options = SelectionOptions.from_settings(Settings(min_relevance=0.4), ["deploy"])
        assert options.min_relevance == 0.4
        assert options.force_include == ("deploy",)
        assert options.essential_context == ("persona", "standards", "project")
