"""Tests for core/config.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from colloquy.core.config import (
    deep_merge,
    get_effective_config,
    load_agents,
    load_api_config,
    load_config_file,
    write_default_config,
)
from colloquy.models.agent import DEFAULT_AGENTS, PERSONAS


class TestDeepMerge:
    def test_nested_merge(self):
        base = {"api": {"model": "a", "timeout_seconds": 30}}
        result = deep_merge(base, {"api": {"model": "b"}})
        assert result["api"] == {"model": "b", "timeout_seconds": 30}

    def test_arrays_replaced(self):
        result = deep_merge({"agents": [{"name": "A"}]}, {"agents": [{"name": "B"}]})
        assert result["agents"] == [{"name": "B"}]

    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base["a"]["b"] == 1


class TestLoadConfigFile:
    def test_missing_returns_empty(self, tmp_path: Path):
        assert load_config_file(tmp_path / "nope.yaml") == {}

    def test_invalid_yaml_returns_empty(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("api: [unclosed", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_non_mapping_returns_empty(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert load_config_file(path) == {}


class TestEffectiveConfig:
    def test_defaults(self, tmp_path: Path):
        config = get_effective_config(tmp_path / "colloquy.yaml")
        assert config["api"]["base_url"] == "https://api.openai.com/v1"
        assert config["orchestration"]["reply_delay_seconds"] == 1.0

    def test_layers(self, tmp_path: Path):
        path = tmp_path / "colloquy.yaml"
        path.write_text("api:\n  model: file-model\n  base_url: https://file.test\n", encoding="utf-8")
        config = get_effective_config(path, cli_overrides={"api": {"model": "cli-model"}})
        assert config["api"]["model"] == "cli-model"
        assert config["api"]["base_url"] == "https://file.test"
        assert config["api"]["temperature"] == 0.7


class TestLoadApiConfig:
    def test_explicit_key(self, monkeypatch):
        monkeypatch.setenv("COLLOQUY_API_KEY", "from-env")
        api = load_api_config({"api": {"api_key": "explicit", "base_url": "u", "model": "m"}})
        assert api.api_key == "explicit"
        assert api.base_url == "u" and api.model == "m"

    def test_key_from_named_env(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "named")
        assert load_api_config({"api": {"api_key_env": "MY_KEY"}}).api_key == "named"

    def test_openai_env_fallback(self, monkeypatch):
        monkeypatch.delenv("COLLOQUY_API_KEY", raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "openai")
        assert load_api_config({"api": {}}).api_key == "openai"

    def test_no_key_is_empty(self, monkeypatch):
        monkeypatch.delenv("COLLOQUY_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert load_api_config({}).api_key == ""


class TestLoadAgents:
    def test_defaults_when_empty(self):
        agents = load_agents({"agents": []})
        assert [a.name for a in agents] == [a.name for a in DEFAULT_AGENTS]

    def test_configured_in_order(self):
        agents = load_agents({"agents": [
            {"name": "Zed", "persona": "Salty Agitator"},
            {"id": "custom", "name": "Amy", "persona": "Custom (Manual Prompt)", "system_prompt": "Hi"},
        ]})
        assert [a.name for a in agents] == ["Zed", "Amy"]
        assert agents[0].id == "agent_1"
        assert agents[0].role == PERSONAS["Salty Agitator"]["role"]
        assert agents[1].is_custom

    def test_invalid_agent_raises(self):
        with pytest.raises(ValueError):
            load_agents({"agents": [{"persona": "Technical Expert"}]})


class TestWriteDefaultConfig:
    def test_writes_once(self, tmp_path: Path):
        path = tmp_path / "colloquy.yaml"
        assert write_default_config(path) is True
        assert load_config_file(path)["api"]["model"] == "gpt-5.1-mini"
        assert write_default_config(path) is False
