"""Completion client abstraction with tool-call interception.

Subclasses implement a single request/response exchange in ``_send``; the base
class builds the request messages, resolves the model, and re-queries the model
once when its answer asks for a web search or page read.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from ..core.directives import build_tool_results_prompt, parse_directives, strip_directives
from ..core.errors import ConfigError
from ..models.config import APIConfig
from ..models.message import Message
from ..tools.invocation import invoke_tools
from ..tools.lookup import DEFAULT_LOOKUP_URL, LookupClient

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "gpt-3.5-turbo"
TOOL_RESULTS_AUTHOR = "tool-results"


@runtime_checkable
class CompletionBackend(Protocol):
    """Anything the orchestrator can ask for a reply."""

    async def complete(
        self,
        config: APIConfig,
        thread: list[Message],
        system_prompt: str,
        model: Optional[str] = None,
    ) -> str: ...


def format_message_content(message: Message) -> str:
    if message.attachment:
        return f"{message.content}\n\n[ATTACHMENT]:\n{message.attachment}"
    return message.content


def build_request_messages(system_prompt: str, thread: list[Message]) -> list[dict]:
    return [{"role": "system", "content": system_prompt}] + [
        {"role": m.role, "content": format_message_content(m)} for m in thread
    ]


def resolve_model(config: APIConfig, model: Optional[str] = None) -> str:
    """Per-call override (an agent's model), else the global default, else the fallback."""
    return model or config.model or FALLBACK_MODEL


class BaseCompletionClient:
    """Shared request assembly and tool-call handling."""

    name: str = "base"

    def __init__(
        self,
        lookup: Optional[LookupClient] = None,
        temperature: float = 0.7,
        read_top_n: int = 3,
    ):
        self.lookup = lookup if lookup is not None else LookupClient()
        self.temperature = temperature
        self.read_top_n = read_top_n

    async def _send(self, config: APIConfig, messages: list[dict], model: str) -> str:
        raise NotImplementedError

    async def complete(
        self,
        config: APIConfig,
        thread: list[Message],
        system_prompt: str,
        model: Optional[str] = None,
    ) -> str:
        """Get a reply for ``thread``, folding in any requested tool results."""
        if not config.api_key or not config.base_url:
            raise ConfigError("API Key and Base URL are required")

        effective_model = resolve_model(config, model)
        text = await self._send(config, build_request_messages(system_prompt, thread), effective_model)

        commands = parse_directives(text)
        if not commands:
            return text

        logger.info(
            "Model requested %d tool call(s): %s",
            len(commands),
            ", ".join(f"{c.kind.value}({c.query})" for c in commands),
        )
        cleaned = strip_directives(text)
        results_block = await invoke_tools(commands, self.lookup, self.read_top_n)

        tool_message = Message.create(
            author=TOOL_RESULTS_AUTHOR,
            role="user",
            content=build_tool_results_prompt(results_block),
        )
        augmented = build_request_messages(system_prompt, [*thread, tool_message])
        # The follow-up answer is returned as-is, even if it asks for more tools.
        second = await self._send(config, augmented, effective_model)
        return second or cleaned


def get_completion_client(config: dict) -> BaseCompletionClient:
    """Factory function to create the completion client from an effective config."""
    api_config = config.get("api", {})
    lookup_config = config.get("lookup", {})

    lookup = LookupClient(
        base_url=lookup_config.get("base_url") or DEFAULT_LOOKUP_URL,
        timeout=lookup_config.get("timeout_seconds", 60),
        max_results=lookup_config.get("max_results", 10),
    )

    provider_name = api_config.get("provider", "openai-compatible")
    if provider_name in ("openai", "openai-compatible"):
        from .openai_compatible import OpenAICompatibleClient
        return OpenAICompatibleClient(
            lookup=lookup,
            temperature=api_config.get("temperature", 0.7),
            read_top_n=lookup_config.get("read_top_n", 3),
            timeout=api_config.get("timeout_seconds", 120),
        )
    raise ValueError(f"Unknown completion provider: {provider_name}")
