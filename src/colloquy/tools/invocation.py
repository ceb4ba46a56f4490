"""Execute parsed tool directives and format their results for the model."""

from __future__ import annotations

import logging

from ..core.errors import ToolLookupError
from ..models.tool import SearchResult, ToolCommand, ToolKind
from .lookup import LookupClient

logger = logging.getLogger(__name__)


def format_search_results(query: str, results: list[SearchResult]) -> str:
    if not results:
        return f'Search results for "{query}": none found.'
    lines = [f'Search results for "{query}":']
    for index, result in enumerate(results, start=1):
        lines.append(f"{index}. {result.title}")
        lines.append(f"   URL: {result.url}")
        if result.snippet:
            lines.append(f"   {result.snippet}")
    return "\n".join(lines)


def format_page(url: str, content: str) -> str:
    return f"Content of {url}:\n{content or '(empty page)'}"


async def invoke_tool(command: ToolCommand, lookup: LookupClient, read_top_n: int = 3) -> str:
    if command.kind is ToolKind.SEARCH:
        return format_search_results(command.query, await lookup.search(command.query))
    if command.kind is ToolKind.READ:
        return format_page(command.query, await lookup.read(command.query))
    result = await lookup.search_and_read(command.query, max_urls_to_read=read_top_n)
    return result.content


async def invoke_tools(
    commands: list[ToolCommand],
    lookup: LookupClient,
    read_top_n: int = 3,
) -> str:
    """Run ``commands`` in order and join their output into one text block.

    A failing command is reported inline and does not stop the others.
    """
    sections = []
    for command in commands:
        try:
            sections.append(await invoke_tool(command, lookup, read_top_n))
        except ToolLookupError as e:
            logger.warning("%s failed for %r: %s", command.kind.value, command.query, e)
            sections.append(f'[{command.kind.value} failed for "{command.query}": {e}]')
    return "\n\n".join(sections)
