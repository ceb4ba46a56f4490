"""3-layer configuration system for Colloquy.

Loads and merges configuration from:
1. Default settings (built-in)
2. Config file (colloquy.yaml)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..models.agent import DEFAULT_AGENTS, Agent
from ..models.config import APIConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "colloquy.yaml"

DEFAULT_CONFIG: dict = {
    "api": {
        "provider": "openai-compatible",
        "base_url": "https://api.openai.com/v1",
        "model": "gpt-5.1-mini",
        "api_key": "",
        "api_key_env": "COLLOQUY_API_KEY",
        "temperature": 0.7,
        "timeout_seconds": 120,
    },
    "lookup": {
        "base_url": "https://quicksearch-qkz6.onrender.com",
        "max_results": 10,
        "read_top_n": 3,
        "timeout_seconds": 60,
    },
    "orchestration": {
        "reply_delay_seconds": 1.0,
    },
    "agents": [],
}

STARTER_CONFIG = """\
# Colloquy configuration

api:
  base_url: "https://api.openai.com/v1"
  model: "gpt-5.1-mini"
  # Read from this environment variable when api_key is empty
  api_key_env: COLLOQUY_API_KEY

orchestration:
  reply_delay_seconds: 1.0

# Leave empty to use the built-in agents.
# persona: Technical Expert | Critical Thinker | Information Summarizer |
#          Salty Agitator | Custom (Manual Prompt)
agents: []
#  - id: agent_1
#    name: TechGuru
#    persona: Technical Expert
#    color: "#ff4500"
#  - id: agent_5
#    name: HistoryBuff
#    persona: Custom (Manual Prompt)
#    system_prompt: "You are a history enthusiast who relates everything to the past."
#    model: gpt-4o-mini
"""


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_config_file(config_path: Path) -> dict:
    """Load configuration from a YAML file; missing or unreadable files yield {}."""
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return {}
    return data if isinstance(data, dict) else {}


def get_effective_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    path = config_path or Path.cwd() / CONFIG_FILENAME
    file_config = load_config_file(path)
    if file_config:
        config = deep_merge(config, file_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return config


def load_api_config(config: dict) -> APIConfig:
    api = config.get("api") or {}
    api_key = api.get("api_key") or ""
    if not api_key:
        env_var = api.get("api_key_env") or "COLLOQUY_API_KEY"
        api_key = os.environ.get(env_var) or os.environ.get("OPENAI_API_KEY", "")
    return APIConfig(
        api_key=api_key,
        base_url=api.get("base_url") or "",
        model=api.get("model") or "",
    )


def load_agents(config: dict) -> list[Agent]:
    """Configured agents in configuration order, or the built-in set."""
    raw = config.get("agents") or []
    if not raw:
        return [agent.model_copy() for agent in DEFAULT_AGENTS]

    agents = []
    for index, item in enumerate(raw, start=1):
        data = dict(item)
        data.setdefault("id", f"agent_{index}")
        agents.append(Agent.model_validate(data))
    return agents


def write_default_config(path: Path) -> bool:
    """Write a starter config file. Returns False if one already exists."""
    if path.exists():
        return False
    path.write_text(STARTER_CONFIG, encoding="utf-8")
    return True
