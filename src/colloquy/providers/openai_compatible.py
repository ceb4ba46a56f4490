"""OpenAI-compatible chat-completions provider."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..core.errors import UpstreamError
from ..models.config import APIConfig
from ..tools.lookup import LookupClient
from ..utils.sanitize import sanitize_error
from .base import BaseCompletionClient

logger = logging.getLogger(__name__)


def extract_content(data: Any) -> str:
    """``choices[0].message.content``, or an empty string when absent."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


def extract_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"API error: {response.status_code}"


class OpenAICompatibleClient(BaseCompletionClient):
    name = "openai-compatible"

    def __init__(
        self,
        lookup: Optional[LookupClient] = None,
        temperature: float = 0.7,
        read_top_n: int = 3,
        timeout: float = 120,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(lookup=lookup, temperature=temperature, read_top_n=read_top_n)
        self.timeout = timeout
        self._transport = transport

    async def _send(self, config: APIConfig, messages: list[dict], model: str) -> str:
        url = f"{config.base_url.rstrip('/')}/chat/completions"
        body = {
            "model": model,
            "messages": messages,
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

        logger.debug("POST %s model=%s messages=%d", url, model, len(messages))
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise UpstreamError(sanitize_error(str(e) or type(e).__name__, [config.api_key])) from e

        if response.is_error:
            raise UpstreamError(
                sanitize_error(extract_error_message(response), [config.api_key]),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            return ""
        return extract_content(data)
