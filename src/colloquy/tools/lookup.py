"""Client for the web lookup backend (search and page read)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import ToolLookupError
from ..models.tool import SearchAndReadResult, SearchResult
from ..utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_URL = "https://quicksearch-qkz6.onrender.com"
NO_RESULTS_CONTENT = "No search results found."
SECTION_RULE = "=" * 80


class LookupClient:
    """Search the web and read pages through the lookup backend."""

    def __init__(
        self,
        base_url: str = DEFAULT_LOOKUP_URL,
        timeout: float = 60,
        max_results: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_results = max_results
        self._transport = transport

    async def _get(self, path: str, params: dict, label: str) -> dict[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ToolLookupError(f"{label} API error: {sanitize_error(str(e))}") from e

        if response.is_error:
            raise ToolLookupError(
                f"{label} API error: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ToolLookupError(f"{label} API returned invalid JSON") from e
        return data if isinstance(data, dict) else {}

    async def search(self, query: str) -> list[SearchResult]:
        """Return up to ``max_results`` results for ``query``."""
        logger.debug("Searching for %r", query)
        data = await self._get("search", {"q": query}, "Search")
        try:
            results = [
                SearchResult.model_validate(item)
                for item in data.get("results") or []
                if isinstance(item, dict)
            ]
        except (TypeError, ValidationError) as e:
            raise ToolLookupError("Search API returned malformed results") from e
        return results[: self.max_results]

    async def read(self, url: str) -> str:
        """Return the extracted text of the page at ``url``."""
        logger.debug("Reading %s", url)
        data = await self._get("read", {"url": url}, "Read")
        content = data.get("content") or data.get("text") or ""
        return content if isinstance(content, str) else str(content)

    async def _read_or_placeholder(self, url: str) -> str:
        try:
            return await self.read(url)
        except ToolLookupError as e:
            logger.warning("Failed to read %s: %s", url, e)
            return f"[Failed to read {url}]"

    async def search_and_read(self, query: str, max_urls_to_read: int = 3) -> SearchAndReadResult:
        """Search, then read the top results concurrently into one attributed block."""
        results = await self.search(query)
        if not results:
            return SearchAndReadResult(search_results=[], content=NO_RESULTS_CONTENT)

        contents = await asyncio.gather(
            *(self._read_or_placeholder(r.url) for r in results[:max_urls_to_read])
        )

        parts = [f'Search Results for "{query}":\n']
        for index, result in enumerate(results):
            parts.append(f"Source {index + 1}: {result.title}")
            parts.append(f"URL: {result.url}")
            parts.append(f"Snippet: {result.snippet}")
            if index < len(contents):
                parts.append(f"Content: {contents[index]}")
            parts.append(f"\n{SECTION_RULE}\n")

        return SearchAndReadResult(search_results=results, content="\n".join(parts))
