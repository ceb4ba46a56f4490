"""Shared fixtures for Colloquy tests."""

from __future__ import annotations

from typing import Optional

import pytest

from colloquy.models.agent import Agent
from colloquy.models.config import APIConfig
from colloquy.models.message import Message, MessageStore


class ScriptedBackend:
    """Completion backend that replays canned answers and records every call."""

    def __init__(self, answers: list):
        self.answers = list(answers)
        self.calls: list[dict] = []

    async def complete(self, config, thread, system_prompt, model: Optional[str] = None) -> str:
        self.calls.append({
            "thread": list(thread),
            "system_prompt": system_prompt,
            "model": model,
        })
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def api_config() -> APIConfig:
    return APIConfig(api_key="sk-test-key-0123456789abcdef", base_url="https://llm.test/v1", model="gpt-test")


@pytest.fixture
def agents() -> list[Agent]:
    return [
        Agent(id="a", name="Alpha", persona="Technical Expert", color="#ff4500"),
        Agent(id="b", name="Beta", persona="Critical Thinker", color="#0079d3", model="beta-model"),
    ]


@pytest.fixture
def user_post() -> Message:
    return Message(id="m1", author="u/User", role="user", content="explain X")


@pytest.fixture
def store(user_post: Message) -> MessageStore:
    return MessageStore([user_post])


@pytest.fixture
def forest() -> list[Message]:
    """Two threads: m1 -> m2 -> m4, m1 -> m3, and an unrelated root r1 -> r2."""
    return [
        Message(id="m1", author="u/User", role="user", content="root"),
        Message(id="m2", author="u/Alpha", role="assistant", content="first", parent_id="m1"),
        Message(id="m3", author="u/Beta", role="assistant", content="sibling", parent_id="m1"),
        Message(id="r1", author="u/User", role="user", content="other root"),
        Message(id="m4", author="u/User", role="user", content="follow-up", parent_id="m2"),
        Message(id="r2", author="u/Alpha", role="assistant", content="other reply", parent_id="r1"),
    ]


@pytest.fixture
def scripted():
    """Factory for a ``ScriptedBackend`` replaying the given answers."""
    return ScriptedBackend
