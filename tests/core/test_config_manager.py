"""
Тесты загрузки конфигурации: значения по умолчанию, YAML, переменные окружения
"""
from pathlib import Path

import pytest

from livia.core.config_manager import ConfigManager, DEFAULT_CONFIG, merge_config


def write_config(tmp_path, text: str):
    (tmp_path / "livia.yaml").write_text(text)
    return ConfigManager(config_dir=str(tmp_path))


class TestMergeConfig:
    def test_nested_merge(self):
        base = {"chat": {"model": "a", "timeouts": {"read": 1.0, "connect": 2.0}}}
        merged = merge_config(base, {"chat": {"timeouts": {"read": 5.0}}})

        assert merged == {"chat": {"model": "a", "timeouts": {"read": 5.0, "connect": 2.0}}}
        assert base["chat"]["timeouts"]["read"] == 1.0

    def test_none_override(self):
        assert merge_config({"a": 1}, None) == {"a": 1}


class TestConfigManager:
    def test_defaults_when_file_missing(self, tmp_path):
        config = ConfigManager(config_dir=str(tmp_path))

        assert config.get_config() == DEFAULT_CONFIG
        assert config.chat["max_input_chars"] == 40000
        assert config.chat["history_budget_chars"] == 64000
        assert config.chat["temperature"] == 0.65
        assert config.credential["type"] == "graphql"

    def test_yaml_overrides_defaults(self, tmp_path):
        config = write_config(tmp_path, "chat:\n  model: gpt-4o-mini\n  timeouts:\n    read: 120\n")

        assert config.chat["model"] == "gpt-4o-mini"
        assert config.chat["timeouts"]["read"] == 120
        assert config.chat["timeouts"]["connect"] == 10.0
        assert config.graphql["endpoint"] == DEFAULT_CONFIG["graphql"]["endpoint"]

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        config = write_config(tmp_path, "chat: [unclosed\n")
        assert config.chat["model"] == "gpt-4o"

    def test_non_mapping_root_is_ignored(self, tmp_path):
        config = write_config(tmp_path, "- just\n- a list\n")
        assert config.get_config() == DEFAULT_CONFIG

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LIVIA_CHAT_ENDPOINT", "http://localhost:9999/v1/chat/completions")
        monkeypatch.setenv("LIVIA_CREDENTIAL_TYPE", "env")

        config = write_config(tmp_path, "chat:\n  endpoint: http://from-yaml\n")

        assert config.chat["endpoint"] == "http://localhost:9999/v1/chat/completions"
        assert config.credential["type"] == "env"

    def test_constructor_overrides(self, tmp_path):
        config = ConfigManager(config_dir=str(tmp_path), overrides={"graphql": {"timeout": 5}})
        assert config.graphql["timeout"] == 5

    def test_defaults_are_not_shared(self, tmp_path):
        config = ConfigManager(config_dir=str(tmp_path))
        config.chat["model"] = "changed"
        assert DEFAULT_CONFIG["chat"]["model"] == "gpt-4o"

    def test_reload_config(self, tmp_path):
        config = write_config(tmp_path, "chat:\n  model: first\n")
        (tmp_path / "livia.yaml").write_text("chat:\n  model: second\n")

        config.reload_config()
        assert config.chat["model"] == "second"

    @pytest.mark.parametrize("value, expected", [("true", True), ("TRUE", True), ("false", False)])
    def test_debug_flag(self, tmp_path, monkeypatch, value, expected):
        monkeypatch.setenv("DEBUG", value)
        assert ConfigManager(config_dir=str(tmp_path)).is_debug_enabled is expected

    def test_shipped_config_file_loads(self):
        config_dir = Path(__file__).resolve().parents[2] / "config"
        config = ConfigManager(config_dir=str(config_dir))
        assert config.chat["endpoint"].endswith("/v1/chat/completions")
        assert config.chat["history_budget_chars"] == 64000
